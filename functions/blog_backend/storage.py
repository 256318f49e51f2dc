"""
Key-value blob store abstraction with in-memory, S3-compatible and Redis backends.

Values are JSON documents stored as text. Stores are atomic per key and offer
no cross-key transactions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

import boto3
import redis
from botocore.config import Config
from botocore.exceptions import ClientError

_MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


class BlobStore(Protocol):
    """Defines the operations the posts service needs from a blob store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def list_keys(self) -> list[str]:
        ...


@dataclass
class InMemoryBlobStore:
    """Test double and local development store."""

    blobs: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def set(self, key: str, value: str) -> None:
        self.blobs[key] = value

    def delete(self, key: str) -> None:
        self.blobs.pop(key, None)

    def list_keys(self) -> list[str]:
        return list(self.blobs)

    def reset(self) -> None:
        """Clear all stored blobs (useful in tests)."""
        self.blobs.clear()


@dataclass
class S3BlobStore:
    """
    Blob store on S3-compatible object storage.

    Every key is stored as an object under "<store_name>/".
    """

    bucket: str
    store_name: str
    region: str = ""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""

    def __post_init__(self):
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=Config(signature_version="s3v4"),
        )

    @property
    def _prefix(self) -> str:
        return f"{self.store_name}/"

    def get(self, key: str) -> Optional[str]:
        try:
            response = self._client.get_object(
                Bucket=self.bucket, Key=self._prefix + key
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_OBJECT_CODES:
                return None
            raise
        return response["Body"].read().decode("utf-8")

    def set(self, key: str, value: str) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=self._prefix + key,
            Body=value.encode("utf-8"),
            ContentType="application/json",
        )

    def delete(self, key: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=self._prefix + key)

    def list_keys(self) -> list[str]:
        paginator = self._client.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=self._prefix):
            for item in page.get("Contents", []):
                keys.append(item["Key"][len(self._prefix) :])
        return keys


@dataclass
class RedisBlobStore:
    """Blob store kept in a single Redis hash named after the store."""

    url: str
    store_name: str = "collaborative-posts"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        return self.client.hget(self.store_name, key)

    def set(self, key: str, value: str) -> None:
        self.client.hset(self.store_name, key, value)

    def delete(self, key: str) -> None:
        self.client.hdel(self.store_name, key)

    def list_keys(self) -> list[str]:
        return list(self.client.hkeys(self.store_name))
