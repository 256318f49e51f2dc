"""
Backend strategies the facade can talk to.

Each backend declares the capabilities it supports and reports every call as a
StoreResult. Backends only translate their own transport errors; deciding how
to degrade is left to the facade.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional, Protocol
from urllib.parse import quote

import requests
from dacite import DaciteError
from sqlalchemy.exc import ArgumentError, OperationalError, SQLAlchemyError

from blog_backend.db import SqlPostRepository
from blog_client.config import ClientConfig
from blog_client.results import StoreResult, StoreStatus
from blog_shared.api import Post, PostChanges, PostDraft, post_from_json

logger = logging.getLogger(__name__)

# Gateway errors mean the function host is up but the function is not.
_UNAVAILABLE_STATUS_CODES = {502, 503, 504}
_MALFORMED_PAYLOAD_ERRORS = (
    DaciteError,
    AttributeError,
    KeyError,
    TypeError,
    ValueError,
)


class Capability(Enum):
    LIST = "list"
    GET = "get"
    GET_BY_SLUG = "get_by_slug"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class PostBackend(Protocol):
    """Operations the facade needs from a persistence strategy."""

    name: str
    capabilities: frozenset[Capability]

    def ping(self) -> bool:
        ...

    def list_posts(self) -> StoreResult:
        ...

    def get_post(self, post_id: str) -> StoreResult:
        ...

    def get_post_by_slug(self, slug: str) -> StoreResult:
        ...

    def create_post(self, draft: PostDraft) -> StoreResult:
        ...

    def update_post(self, post_id: str, changes: PostChanges) -> StoreResult:
        ...

    def delete_post(self, post_id: str) -> StoreResult:
        ...


def _posts_from_json(payload: Any) -> list[Post]:
    if not isinstance(payload, list):
        raise ValueError("expected a JSON array of posts")
    return [post_from_json(item) for item in payload]


def _error_message(response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return default


class ServerlessBackend:
    """HTTP client for the posts function (GET/POST /posts, GET/DELETE /posts/{id})."""

    name = "serverless"
    capabilities = frozenset(
        {Capability.LIST, Capability.GET, Capability.CREATE, Capability.DELETE}
    )

    def __init__(
        self,
        base_url: str,
        *,
        request_timeout: float = 10.0,
        probe_timeout: float = 2.0,
        session=None,
    ):
        self.posts_url = f"{base_url.rstrip('/')}/posts"
        self.request_timeout = request_timeout
        self.probe_timeout = probe_timeout
        self._session = session or requests.Session()

    def ping(self) -> bool:
        try:
            response = self._session.request(
                "HEAD", self.posts_url, timeout=self.probe_timeout
            )
        except requests.RequestException as e:
            logger.info("Posts function probe failed: %s", e)
            return False
        return response.status_code < 400

    def _request(self, method: str, url: str, **kwargs) -> StoreResult:
        try:
            response = self._session.request(
                method, url, timeout=self.request_timeout, **kwargs
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            return StoreResult.unavailable(f"Posts function unreachable: {e}")
        except requests.RequestException as e:
            return StoreResult.internal_error(f"Posts function request failed: {e}")

        status = response.status_code
        if status == 404:
            return StoreResult.not_found(_error_message(response, "Post not found"))
        if status == 400:
            return StoreResult.invalid(_error_message(response, "Invalid post data"))
        if status in _UNAVAILABLE_STATUS_CODES:
            return StoreResult.unavailable(f"HTTP error! status: {status}")
        if status >= 400:
            return StoreResult.internal_error(
                f"HTTP error! status: {status}: {_error_message(response, '')}"
            )
        try:
            return StoreResult.ok(response.json())
        except ValueError as e:
            return StoreResult.internal_error(f"Response is not JSON: {e}")

    def _decode(self, result: StoreResult, convert: Callable[[Any], Any]) -> StoreResult:
        try:
            return result.map(convert)
        except _MALFORMED_PAYLOAD_ERRORS as e:
            return StoreResult.internal_error(f"Malformed posts payload: {e}")

    def _post_url(self, post_id: str) -> str:
        return f"{self.posts_url}/{quote(post_id, safe='')}"

    def list_posts(self) -> StoreResult:
        result = self._request("GET", self.posts_url)
        if result.status is StoreStatus.NOT_FOUND:
            # The collection itself is missing: the function is not deployed.
            return StoreResult.unavailable(f"{self.posts_url} not found")
        return self._decode(result, _posts_from_json)

    def get_post(self, post_id: str) -> StoreResult:
        result = self._request("GET", self._post_url(post_id))
        return self._decode(result, post_from_json)

    def get_post_by_slug(self, slug: str) -> StoreResult:
        return StoreResult.internal_error("The posts function has no slug index")

    def create_post(self, draft: PostDraft) -> StoreResult:
        body = {
            "title": draft.title,
            "content": draft.content,
            "author": draft.author,
            "tags": list(draft.tags),
        }
        result = self._request("POST", self.posts_url, json=body)
        return self._decode(result, post_from_json)

    def update_post(self, post_id: str, changes: PostChanges) -> StoreResult:
        return StoreResult.internal_error("The posts function does not support updates")

    def delete_post(self, post_id: str) -> StoreResult:
        return self._request("DELETE", self._post_url(post_id))


class RelationalBackend:
    """Direct database access through SqlPostRepository."""

    name = "relational"
    capabilities = frozenset(Capability)

    def __init__(
        self,
        database_url: str | None = None,
        *,
        connect_timeout: float | None = None,
        repository: SqlPostRepository | None = None,
    ):
        if repository is None and not database_url:
            raise ValueError("database_url or repository is required")
        self.database_url = database_url
        self.connect_timeout = connect_timeout
        self._repository = repository

    def _get_repository(self) -> SqlPostRepository:
        # Built lazily so an unreachable database surfaces as a result, not at startup.
        if self._repository is None:
            self._repository = SqlPostRepository(
                self.database_url, connect_timeout=self.connect_timeout
            )
        return self._repository

    def _run(self, operation: Callable[[SqlPostRepository], Any]) -> StoreResult:
        try:
            return StoreResult.ok(operation(self._get_repository()))
        except OperationalError as e:
            logger.warning("Database unavailable: %s", e)
            return StoreResult.unavailable("Database unavailable")
        except (ImportError, ArgumentError) as e:
            # Missing DB driver or malformed URL: no database to talk to.
            logger.warning("Database not usable: %s", e)
            return StoreResult.unavailable("Database unavailable")
        except SQLAlchemyError as e:
            return StoreResult.internal_error(f"Database error: {e}")

    @staticmethod
    def _found(result: StoreResult) -> StoreResult:
        if result.is_ok and result.value in (None, False):
            return StoreResult.not_found()
        return result

    def ping(self) -> bool:
        return self._run(lambda repo: repo.ping()).is_ok

    def list_posts(self) -> StoreResult:
        return self._run(lambda repo: repo.list_posts())

    def get_post(self, post_id: str) -> StoreResult:
        return self._found(self._run(lambda repo: repo.get_post(post_id)))

    def get_post_by_slug(self, slug: str) -> StoreResult:
        return self._found(self._run(lambda repo: repo.get_post_by_slug(slug)))

    def create_post(self, draft: PostDraft) -> StoreResult:
        return self._run(lambda repo: repo.create_post(draft))

    def update_post(self, post_id: str, changes: PostChanges) -> StoreResult:
        return self._found(self._run(lambda repo: repo.update_post(post_id, changes)))

    def delete_post(self, post_id: str) -> StoreResult:
        return self._found(self._run(lambda repo: repo.delete_post(post_id)))


def build_backend(config: ClientConfig, session=None) -> Optional[PostBackend]:
    """Selects the backend named by `config`; None when it is not configured."""
    if not config.is_configured():
        return None
    if config.backend == "serverless":
        return ServerlessBackend(
            config.functions_base_url,
            request_timeout=config.request_timeout_seconds,
            probe_timeout=config.probe_timeout_seconds,
            session=session,
        )
    if config.backend == "relational":
        return RelationalBackend(
            config.database_url, connect_timeout=config.probe_timeout_seconds
        )
    return None
