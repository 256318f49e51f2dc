from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from dacite import Config, from_dict

from blog_shared.json_utils import convert_keys
from blog_shared.string_utils import (
    DEFAULT_EXCERPT_LENGTH,
    generate_excerpt,
    generate_slug,
)


def utc_now_iso() -> str:
    """
    Returns the current UTC time as ISO-8601 with millisecond precision.

    The format is fixed (e.g. "2024-05-01T12:00:00.000Z") so that comparing two
    timestamps as strings gives the same order as comparing them as times.
    """
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


@dataclass
class Post:
    """A blog post as seen by clients of the posts API."""

    id: str
    title: str
    content: str
    author: str
    tags: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    # Only the relational backend stores slugs.
    slug: Optional[str] = None

    def excerpt(self, length: int = DEFAULT_EXCERPT_LENGTH) -> str:
        return generate_excerpt(self.content, length)

    def matches_slug(self, slug: str) -> bool:
        return (self.slug or generate_slug(self.title)) == slug


@dataclass
class PostDraft:
    """Input for creating a post."""

    title: str
    content: str
    author: str
    tags: List[str] = field(default_factory=list)


@dataclass
class PostChanges:
    """Partial update for a post; fields left as None are kept."""

    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    tags: Optional[List[str]] = None

    def as_dict(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}


def post_from_json(data: dict) -> Post:
    """Builds a Post from its camelCase JSON representation."""
    return from_dict(
        data_class=Post,
        data=convert_keys(data, "camel_to_snake"),
        config=Config(check_types=False),
    )


def post_to_json(post: Post) -> dict:
    """Returns the camelCase JSON representation of a Post."""
    data = convert_keys(asdict(post), "snake_to_camel")
    if data.get("slug") is None:
        data.pop("slug", None)
    return data
