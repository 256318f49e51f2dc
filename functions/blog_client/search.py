"""
In-memory search and tag filtering over a list of posts.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from blog_shared.api import Post

DEFAULT_TAG_LIMIT = 12


def _matches(post: Post, term: str) -> bool:
    return (
        term in post.title.lower()
        or term in post.content.lower()
        or term in post.author.lower()
        or any(term in tag.lower() for tag in post.tags)
    )


def filter_posts(
    posts: Iterable[Post],
    search_term: str = "",
    selected_tags: Sequence[str] = (),
) -> list[Post]:
    """
    Returns posts matching a free-text term and any of the selected tags, newest first.

    The term is matched case-insensitively against title, content, author and
    tags. A post passes the tag filter when it has at least one selected tag.
    """
    filtered = list(posts)
    term = search_term.strip().lower()
    if term:
        filtered = [post for post in filtered if _matches(post, term)]
    if selected_tags:
        wanted = set(selected_tags)
        filtered = [post for post in filtered if wanted.intersection(post.tags)]
    return sorted(filtered, key=lambda post: post.created_at, reverse=True)


def collect_tags(posts: Iterable[Post], limit: int = DEFAULT_TAG_LIMIT) -> list[str]:
    tags: list[str] = []
    for post in posts:
        for tag in post.tags:
            if tag not in tags:
                tags.append(tag)
                if len(tags) >= limit:
                    return tags
    return tags
