"""
Relational post repository backed by SQLAlchemy.

Unlike the blob store, the relational variant supports in-place updates and
lookup by slug.
"""

from __future__ import annotations

import math
import uuid
from typing import Callable, Optional

from sqlalchemy import JSON, Column, String, Text, create_engine, select, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from blog_shared.api import Post, PostChanges, PostDraft, utc_now_iso
from blog_shared.string_utils import generate_slug

# The postgres extra installs psycopg2; bare Postgres URLs are pinned to it.
_POSTGRES_SCHEMES = ("postgresql://", "postgres://")


def normalize_database_url(database_url: str) -> str:
    for scheme in _POSTGRES_SCHEMES:
        if database_url.startswith(scheme):
            return "postgresql+psycopg2://" + database_url[len(scheme) :]
    return database_url


class SqlPostRepository:
    """
    SQLAlchemy-backed posts table. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(
        self,
        database_url: str,
        *,
        connect_timeout: float | None = None,
        clock: Callable[[], str] = utc_now_iso,
    ):
        if not database_url:
            raise ValueError("database_url is required for SqlPostRepository")
        database_url = normalize_database_url(database_url)
        connect_args = {}
        if connect_timeout and database_url.startswith("postgresql"):
            connect_args["connect_timeout"] = max(1, math.ceil(connect_timeout))
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
            connect_args=connect_args,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        self._clock = clock
        Base.metadata.create_all(self.engine)

    def _to_post(self, row: "PostRow") -> Post:
        return Post(
            id=row.id,
            title=row.title,
            content=row.content,
            author=row.author,
            tags=list(row.tags or []),
            created_at=row.created_at,
            updated_at=row.updated_at,
            slug=row.slug,
        )

    def _unique_slug(self, session: Session, title: str, post_id: str) -> str:
        slug = generate_slug(title) or post_id
        taken = session.execute(
            select(PostRow.id).where(PostRow.slug == slug, PostRow.id != post_id)
        ).first()
        if taken:
            slug = f"{slug}-{post_id[:8]}"
        return slug

    def ping(self) -> None:
        """Raises a SQLAlchemy error when the database cannot be reached."""
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def list_posts(self) -> list[Post]:
        with self.Session() as session:
            rows = session.execute(
                select(PostRow).order_by(PostRow.created_at.desc())
            ).scalars()
            return [self._to_post(row) for row in rows]

    def get_post(self, post_id: str) -> Optional[Post]:
        with self.Session() as session:
            row = session.get(PostRow, post_id)
            return self._to_post(row) if row else None

    def get_post_by_slug(self, slug: str) -> Optional[Post]:
        with self.Session() as session:
            row = session.execute(
                select(PostRow).where(PostRow.slug == slug).limit(1)
            ).scalar_one_or_none()
            return self._to_post(row) if row else None

    def create_post(self, draft: PostDraft) -> Post:
        now = self._clock()
        post_id = uuid.uuid4().hex
        with self.Session() as session:
            row = PostRow(
                id=post_id,
                slug=self._unique_slug(session, draft.title, post_id),
                title=draft.title,
                content=draft.content,
                author=draft.author,
                tags=list(draft.tags),
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            return self._to_post(row)

    def update_post(self, post_id: str, changes: PostChanges) -> Optional[Post]:
        with self.Session() as session:
            row = session.get(PostRow, post_id)
            if not row:
                return None
            if changes.title is not None and changes.title != row.title:
                row.title = changes.title
                row.slug = self._unique_slug(session, changes.title, post_id)
            if changes.content is not None:
                row.content = changes.content
            if changes.author is not None:
                row.author = changes.author
            if changes.tags is not None:
                row.tags = list(changes.tags)
            row.updated_at = max(self._clock(), row.created_at)
            session.commit()
            return self._to_post(row)

    def delete_post(self, post_id: str) -> bool:
        with self.Session() as session:
            row = session.get(PostRow, post_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True


Base = declarative_base()


class PostRow(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True)
    slug = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    author = Column(String, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(String, nullable=False, index=True)
    updated_at = Column(String, nullable=False)
