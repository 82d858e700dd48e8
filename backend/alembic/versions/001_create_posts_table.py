"""Create posts table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `posts` table with its listing, author and tag indexes.
How:   PostgreSQL UUID primary key, TEXT[] tags, TIMESTAMP WITH TIME ZONE.

Rollback: downgrade() drops the table (all posts are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the posts table and indexes. Mirrors inkwell/models/post.py."""
    op.create_table(
        "posts",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Unique identifier, assigned at insert",
        ),
        sa.Column(
            "title",
            sa.Text(),
            nullable=False,
            comment="Post title (required, non-empty)",
        ),
        sa.Column(
            "author",
            sa.String(255),
            nullable=True,
            comment="Free-text author name; exact-match filter target",
        ),
        sa.Column(
            "contents",
            sa.Text(),
            nullable=True,
            comment="Post body",
        ),
        sa.Column(
            "tags",
            postgresql.ARRAY(sa.Text()),
            server_default=sa.text("'{}'"),
            nullable=False,
            comment="Ordered list of tags",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this post was created (UTC); never changes",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this post was last modified (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        # Empty or whitespace-only titles never reach the table
        sa.CheckConstraint("length(btrim(title)) > 0", name="ck_posts_title_not_blank"),
    )

    op.create_index("idx_posts_created_at", "posts", [sa.text("created_at DESC")])
    op.create_index("idx_posts_author", "posts", ["author"])
    op.create_index("idx_posts_tags", "posts", ["tags"], postgresql_using="gin")


def downgrade() -> None:
    op.drop_index("idx_posts_tags", table_name="posts")
    op.drop_index("idx_posts_author", table_name="posts")
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_table("posts")
