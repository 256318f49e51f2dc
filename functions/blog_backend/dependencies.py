"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from fastapi import Depends

from blog_backend.config import get_settings
from blog_backend.posts import PostStore
from blog_backend.storage import (
    BlobStore,
    InMemoryBlobStore,
    RedisBlobStore,
    S3BlobStore,
)

logger = logging.getLogger(__name__)

_blob_store: BlobStore | None = None


def get_blob_store() -> BlobStore:
    """
    Return a singleton blob store client so posts persist across requests.
    """
    global _blob_store
    if _blob_store is not None:
        return _blob_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _blob_store = InMemoryBlobStore()
    elif settings.redis_url:
        _blob_store = RedisBlobStore(
            url=settings.redis_url, store_name=settings.blob_store_name
        )
    elif settings.s3_bucket:
        _blob_store = S3BlobStore(
            bucket=settings.s3_bucket,
            store_name=settings.blob_store_name,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    else:
        # Nothing configured: keep posts in process memory.
        _blob_store = InMemoryBlobStore()
    logger.info("Using %s for posts", type(_blob_store).__name__)
    return _blob_store


def get_post_store(store: BlobStore = Depends(get_blob_store)) -> PostStore:
    return PostStore(store)
