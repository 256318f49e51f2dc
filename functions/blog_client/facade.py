"""
Client access facade used by the presentation tier.

The facade is built once from a ClientConfig. Reads never raise: when the
backend is missing, unreachable or failing they return an empty list or None
and callers show sample content instead. Writes are refused with a
BlogApiError when no backend is available.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from blog_client.backends import Capability, PostBackend, build_backend
from blog_client.config import ClientConfig
from blog_client.results import BlogApiError, ErrorKind, StoreResult, StoreStatus
from blog_client.validation import validate_changes, validate_draft
from blog_shared.api import Post, PostChanges, PostDraft

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "Backend not configured. Set QUICKBLOG_BACKEND and its connection settings "
    "to enable saving posts."
)
UNAVAILABLE_MESSAGE = "The posts backend is currently unavailable. Please try again later."


class AvailabilityProbe:
    """Caches the result of a backend ping until it expires."""

    def __init__(
        self,
        ping: Callable[[], bool],
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ping = ping
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._available: Optional[bool] = None
        self._expires_at = 0.0

    def _remember(self, available: bool) -> bool:
        self._available = available
        self._expires_at = self._clock() + self._ttl_seconds
        return available

    def is_available(self) -> bool:
        if self._available is not None and self._clock() < self._expires_at:
            return self._available
        return self._remember(bool(self._ping()))

    def mark_unavailable(self) -> None:
        self._remember(False)

    def invalidate(self) -> None:
        self._available = None


class PostsFacade:
    def __init__(
        self,
        config: ClientConfig,
        backend: Optional[PostBackend] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.backend = backend
        self._probe = (
            AvailabilityProbe(backend.ping, config.probe_cache_seconds, clock)
            if backend is not None
            else None
        )

    @classmethod
    def from_config(cls, config: ClientConfig | None = None, session=None) -> "PostsFacade":
        config = config or ClientConfig()
        backend = build_backend(config, session=session)
        if backend is None:
            logger.info(
                "No %s backend configured; serving sample data only", config.backend
            )
        return cls(config, backend)

    def is_configured(self) -> bool:
        return self.backend is not None and self.config.is_configured()

    def is_available(self) -> bool:
        return self._probe is not None and self._probe.is_available()

    def supports(self, capability: Capability) -> bool:
        return self.backend is not None and capability in self.backend.capabilities

    def _execute(
        self, operation: str, call: Callable[[PostBackend], StoreResult]
    ) -> StoreResult:
        """Runs one backend call; the only place backend state is checked."""
        if self.backend is None:
            return StoreResult.unavailable(NOT_CONFIGURED_MESSAGE)
        if not self._probe.is_available():
            return StoreResult.unavailable(UNAVAILABLE_MESSAGE)

        result = call(self.backend)
        if result.status is StoreStatus.UNAVAILABLE:
            logger.warning(
                "%s on %s backend: %s", operation, self.backend.name, result.message
            )
            self._probe.mark_unavailable()
            return StoreResult.unavailable(UNAVAILABLE_MESSAGE)
        if result.status is StoreStatus.INTERNAL_ERROR:
            logger.error(
                "%s failed on %s backend: %s", operation, self.backend.name, result.message
            )
        return result

    def _raise_for(self, result: StoreResult, operation: str) -> None:
        if result.status is StoreStatus.UNAVAILABLE:
            raise BlogApiError(ErrorKind.BACKEND_UNAVAILABLE, result.message)
        if result.status is StoreStatus.INVALID:
            raise BlogApiError(ErrorKind.VALIDATION, result.message)
        if result.status is StoreStatus.NOT_FOUND:
            raise BlogApiError(ErrorKind.NOT_FOUND, "Post not found")
        if result.status is StoreStatus.INTERNAL_ERROR:
            raise BlogApiError(
                ErrorKind.INTERNAL, f"Failed to {operation} post. Please try again."
            )

    # Reads

    def get_all_posts(self) -> list[Post]:
        result = self._execute("list posts", lambda backend: backend.list_posts())
        return result.value if result.is_ok else []

    def get_post_by_id(self, post_id: str) -> Optional[Post]:
        if not post_id:
            return None
        result = self._execute("get post", lambda backend: backend.get_post(post_id))
        return result.value if result.is_ok else None

    def get_post_by_slug(self, slug: str) -> Optional[Post]:
        if not slug:
            return None
        if self.supports(Capability.GET_BY_SLUG):
            result = self._execute(
                "get post by slug", lambda backend: backend.get_post_by_slug(slug)
            )
            return result.value if result.is_ok else None
        # No slug index: derive slugs from the full listing.
        for post in self.get_all_posts():
            if post.matches_slug(slug):
                return post
        return None

    def get_post(self, id_or_slug: str) -> Optional[Post]:
        return self.get_post_by_id(id_or_slug) or self.get_post_by_slug(id_or_slug)

    # Writes

    def create_post(self, draft: PostDraft) -> Post:
        draft = validate_draft(draft, max_tags=self.config.max_tags)
        result = self._execute("create post", lambda backend: backend.create_post(draft))
        self._raise_for(result, "create")
        return result.value

    def update_post(self, post_id: str, changes: PostChanges) -> Post:
        changes = validate_changes(changes, max_tags=self.config.max_tags)
        if self.backend is not None and not self.supports(Capability.UPDATE):
            raise BlogApiError(
                ErrorKind.UNSUPPORTED,
                f"Editing posts is not supported by the {self.backend.name} backend.",
            )
        result = self._execute(
            "update post", lambda backend: backend.update_post(post_id, changes)
        )
        self._raise_for(result, "update")
        return result.value

    def delete_post(self, post_id: str) -> bool:
        """Returns True when the post was deleted and False when it does not exist."""
        if not post_id:
            return False
        result = self._execute("delete post", lambda backend: backend.delete_post(post_id))
        if result.status is StoreStatus.NOT_FOUND:
            return False
        self._raise_for(result, "delete")
        return True
