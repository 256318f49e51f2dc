"""
Pydantic schemas for the posts API.

Field names follow the JSON wire format (camelCase) used by browser clients.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PostCreateRequest(BaseModel):
    # Required-field checks happen in PostStore so that a missing field is a
    # 400 with a readable message rather than a schema error.
    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v):
        return [] if v is None else v


class PostResponse(BaseModel):
    id: str
    title: str
    content: str
    author: str
    tags: list[str] = Field(default_factory=list)
    createdAt: str
    updatedAt: str


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
