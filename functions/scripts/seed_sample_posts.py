"""
Seed the configured blob store with the demo posts.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from blog_backend.dependencies import get_blob_store
from blog_backend.posts import PostStore
from blog_backend.schemas import PostCreateRequest
from blog_client.sample_data import get_sample_posts

logger = logging.getLogger(__name__)


def seed(posts: PostStore, *, skip_existing: bool = True, dry_run: bool = False) -> int:
    """Creates each sample post (oldest first) and returns how many were written."""
    existing_titles = (
        {post.title for post in posts.list_posts()} if skip_existing else set()
    )
    created = 0
    for sample in reversed(get_sample_posts()):
        if sample.title in existing_titles:
            logger.info("Skipping existing post %r", sample.title)
            continue
        if dry_run:
            logger.info("Would create %r", sample.title)
            continue
        post = posts.create_post(
            PostCreateRequest(
                title=sample.title,
                content=sample.content,
                author=sample.author,
                tags=sample.tags,
            )
        )
        logger.info("Created %s (%r)", post.id, post.title)
        created += 1
    return created


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the posts store with demo posts")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log what would be created without writing",
    )
    parser.add_argument(
        "--allow-duplicates",
        action="store_true",
        help="Create samples even if a post with the same title exists",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    posts = PostStore(get_blob_store())
    created = seed(posts, skip_existing=not args.allow_duplicates, dry_run=args.dry_run)
    logger.info("Seeded %d posts", created)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
