"""
Configuration and settings for the posts backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Posts are served at {api_prefix}/posts.
    api_prefix: str = Field(default="")
    log_level: str = Field(default="INFO")

    # Blob store namespace (S3 key prefix / Redis hash name)
    blob_store_name: str = Field(default="collaborative-posts")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Redis-backed blob store
    redis_url: Optional[str] = Field(default=None)

    # S3-compatible blob store
    s3_endpoint: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
