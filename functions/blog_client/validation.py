"""
Form rules for posts, enforced before anything is sent to a backend.
"""

from __future__ import annotations

from dataclasses import replace

from blog_client.results import BlogApiError, ErrorKind
from blog_shared.api import PostChanges, PostDraft
from blog_shared.string_utils import normalize_tags

TITLE_MIN_LENGTH = 3
CONTENT_MIN_LENGTH = 10
MAX_TAGS = 5


def _title_error(title: str) -> str | None:
    if len(title.strip()) < TITLE_MIN_LENGTH:
        return f"Title must be at least {TITLE_MIN_LENGTH} characters"
    return None


def _content_error(content: str) -> str | None:
    if len(content.strip()) < CONTENT_MIN_LENGTH:
        return f"Content must be at least {CONTENT_MIN_LENGTH} characters"
    return None


def _author_error(author: str) -> str | None:
    if not author.strip():
        return "Author is required"
    return None


def _tags_error(tags: list[str], max_tags: int) -> str | None:
    if len(tags) > max_tags:
        return f"You can add up to {max_tags} tags"
    return None


def _raise_if_any(errors: dict[str, str | None]) -> None:
    errors = {field: message for field, message in errors.items() if message}
    if errors:
        raise BlogApiError(ErrorKind.VALIDATION, next(iter(errors.values())), errors)


def validate_draft(draft: PostDraft, max_tags: int = MAX_TAGS) -> PostDraft:
    """
    Checks a new post against the form rules.

    Returns a copy with normalized tags. Raises BlogApiError(VALIDATION) whose
    `details` maps each failing field to its message.
    """
    tags = normalize_tags(draft.tags)
    _raise_if_any(
        {
            "title": _title_error(draft.title or ""),
            "content": _content_error(draft.content or ""),
            "author": _author_error(draft.author or ""),
            "tags": _tags_error(tags, max_tags),
        }
    )
    return replace(draft, tags=tags)


def validate_changes(changes: PostChanges, max_tags: int = MAX_TAGS) -> PostChanges:
    """Like validate_draft, but only for the fields being changed."""
    tags = normalize_tags(changes.tags) if changes.tags is not None else None
    _raise_if_any(
        {
            "title": _title_error(changes.title) if changes.title is not None else None,
            "content": (
                _content_error(changes.content) if changes.content is not None else None
            ),
            "author": _author_error(changes.author) if changes.author is not None else None,
            "tags": _tags_error(tags, max_tags) if tags is not None else None,
        }
    )
    return replace(changes, tags=tags)
