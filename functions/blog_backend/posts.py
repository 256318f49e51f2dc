"""
Post store service: list/get/create/delete posts over a key-value blob store.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from typing import Callable, Optional

from pydantic import ValidationError

from blog_backend.schemas import PostCreateRequest, PostResponse
from blog_backend.storage import BlobStore
from blog_shared.api import utc_now_iso

logger = logging.getLogger(__name__)

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
POST_ID_RANDOM_LENGTH = 11

REQUIRED_FIELDS_MESSAGE = "Title, content, and author are required"


class PostValidationError(ValueError):
    """Raised when a create request is missing required fields."""


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_post_id() -> str:
    """
    Returns a new post id: base-36 millisecond timestamp plus a random suffix.

    Ids are unlikely to collide without coordination, but uniqueness is not
    guaranteed.
    """
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(
        secrets.choice(_BASE36_ALPHABET) for _ in range(POST_ID_RANDOM_LENGTH)
    )
    return timestamp + suffix


class PostStore:
    """Stateless post operations; all state lives in the blob store."""

    def __init__(
        self,
        store: BlobStore,
        clock: Callable[[], str] = utc_now_iso,
        id_factory: Callable[[], str] = generate_post_id,
    ):
        self.store = store
        self._clock = clock
        self._id_factory = id_factory

    def _load(self, key: str) -> Optional[PostResponse]:
        raw = self.store.get(key)
        if raw is None:
            return None
        return PostResponse.model_validate(json.loads(raw))

    def list_posts(self) -> list[PostResponse]:
        """
        Returns every post, newest first.

        Records that cannot be parsed are logged and skipped. Keys deleted
        while the scan is running are skipped silently.
        """
        posts: list[PostResponse] = []
        for key in self.store.list_keys():
            try:
                post = self._load(key)
            except (ValueError, ValidationError) as e:
                logger.warning("Skipping unreadable post record %s: %s", key, e)
                continue
            if post is not None:
                posts.append(post)
        # sorted() is stable, so equal timestamps keep store order.
        return sorted(posts, key=lambda post: post.createdAt, reverse=True)

    def get_post(self, post_id: str) -> Optional[PostResponse]:
        return self._load(post_id)

    def create_post(self, payload: PostCreateRequest) -> PostResponse:
        title = (payload.title or "").strip()
        content = (payload.content or "").strip()
        author = (payload.author or "").strip()
        if not title or not content or not author:
            raise PostValidationError(REQUIRED_FIELDS_MESSAGE)

        now = self._clock()
        post = PostResponse(
            id=self._id_factory(),
            title=payload.title,
            content=payload.content,
            author=payload.author,
            tags=payload.tags or [],
            createdAt=now,
            updatedAt=now,
        )
        self.store.set(post.id, post.model_dump_json())
        logger.info("Created post %s by %s", post.id, post.author)
        return post

    def delete_post(self, post_id: str) -> bool:
        if self.store.get(post_id) is None:
            return False
        self.store.delete(post_id)
        logger.info("Deleted post %s", post_id)
        return True
