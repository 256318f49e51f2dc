import re
from typing import Iterable

from bs4 import BeautifulSoup

DEFAULT_EXCERPT_LENGTH = 150
EXCERPT_ELLIPSIS = "..."

_NON_ALPHANUMERIC_RUN = re.compile(r"[^a-z0-9]+")


def generate_slug(title: str) -> str:
    """
    Derives a URL-safe slug from a post title.

    Lowercases the title, collapses every run of characters outside [a-z0-9]
    into a single hyphen and strips hyphens from both ends.

    Example:
        >>> generate_slug("Hello, World! 2024")
        'hello-world-2024'
    """
    return _NON_ALPHANUMERIC_RUN.sub("-", (title or "").lower()).strip("-")


def strip_markup(content: str) -> str:
    """Returns the text of `content` with all markup removed."""
    if not content:
        return ""
    return BeautifulSoup(content, "html.parser").get_text()


def generate_excerpt(content: str, length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """
    Builds a plain-text excerpt of a post body.

    Markup is stripped first; if the remaining text is longer than `length`
    characters it is cut to `length` and an ellipsis is appended.

    Example:
        >>> generate_excerpt("<p>Hello <b>world</b></p>", 5)
        'Hello...'
    """
    plain_text = strip_markup(content).strip()
    if len(plain_text) <= length:
        return plain_text
    return plain_text[:length] + EXCERPT_ELLIPSIS


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Trims tags, drops empty ones and removes duplicates keeping first-seen order."""
    normalized: list[str] = []
    for tag in tags or []:
        cleaned = (tag or "").strip()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized
