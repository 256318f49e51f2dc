"""
Demo posts shown when no backend is configured or reachable.
"""

from __future__ import annotations

import copy
from typing import Optional

from blog_shared.api import Post

SAMPLE_POSTS = (
    Post(
        id="sample-welcome",
        title="Welcome to QuickBlog",
        content=(
            "<p>QuickBlog is a collaborative space where anyone can share ideas. "
            "Write a post, tag it, and it shows up for everyone.</p>"
        ),
        author="QuickBlog Team",
        tags=["announcements", "community"],
        created_at="2024-03-01T09:00:00.000Z",
        updated_at="2024-03-01T09:00:00.000Z",
    ),
    Post(
        id="sample-writing-tips",
        title="Five Tips for Writing Posts People Finish",
        content=(
            "<p>Lead with the point, keep paragraphs short and use headings. "
            "Tags help readers find your post later.</p>"
        ),
        author="Ada Writer",
        tags=["writing", "tips"],
        created_at="2024-02-20T15:30:00.000Z",
        updated_at="2024-02-21T08:10:00.000Z",
    ),
    Post(
        id="sample-markdown",
        title="Formatting Your Content",
        content=(
            "<p>Posts can contain <b>markup</b> and line breaks.</p>\n"
            "<p>Excerpts on the front page show the plain text only.</p>"
        ),
        author="QuickBlog Team",
        tags=["guides"],
        created_at="2024-02-10T12:00:00.000Z",
        updated_at="2024-02-10T12:00:00.000Z",
    ),
)


def get_sample_posts() -> list[Post]:
    """Returns copies of the sample posts, newest first."""
    return sorted(
        (copy.deepcopy(post) for post in SAMPLE_POSTS),
        key=lambda post: post.created_at,
        reverse=True,
    )


def find_sample_post(id_or_slug: str) -> Optional[Post]:
    for post in SAMPLE_POSTS:
        if post.id == id_or_slug or post.matches_slug(id_or_slug):
            return copy.deepcopy(post)
    return None
