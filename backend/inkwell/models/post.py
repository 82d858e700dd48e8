"""
Inkwell Backend: Post SQLAlchemy Model
========================================

What:  ORM model representing the `posts` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by PostService for CRUD statements and by Alembic for schema management.

Table Design:
    - UUID primary key, assigned at insert, never updated
    - tags: PostgreSQL TEXT[] keeps insertion order and supports `@>` containment,
      so "posts tagged X" is a single indexed predicate
    - created_at / updated_at: UTC with timezone; updated_at is refreshed on
      every UPDATE issued through the ORM

Indexes:
    idx_posts_created_at  created_at DESC  (default listing order)
    idx_posts_author      author           (exact-match author filter)
    idx_posts_tags        GIN(tags)        (tag membership filter)
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import CheckConstraint, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import ARRAY, UUID, TIMESTAMP

from inkwell.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A single blog entry.

    Lifecycle:
        1. Created by PostService.create_post (id + both timestamps assigned)
        2. Updated by PostService.update_post (fields replaced, updated_at refreshed)
        3. Deleted by PostService.delete_post (hard delete, nothing depends on it)
    """

    __tablename__ = "posts"

    # ── Primary Key ───────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
        comment="Unique identifier, assigned at insert",
    )

    # ── Content ───────────────────────────────────────────────────────────
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Post title (required, non-empty)",
    )

    author: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Free-text author name; exact-match filter target",
    )

    contents: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Post body",
    )

    tags: Mapped[List[str]] = mapped_column(
        ARRAY(Text),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
        comment="Ordered list of tags",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this post was created (UTC); never changes",
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this post was last modified (UTC)",
    )

    # ── Indexes ───────────────────────────────────────────────────────────
    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
        Index("idx_posts_author", author),
        Index("idx_posts_tags", tags, postgresql_using="gin"),
        CheckConstraint("length(btrim(title)) > 0", name="ck_posts_title_not_blank"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title={self.title!r}, created_at='{self.created_at}')>"
