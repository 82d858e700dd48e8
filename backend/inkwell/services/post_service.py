"""
Inkwell Backend: Post Service (Query Construction Layer)
==========================================================

What:  Intention-revealing operations over the `posts` table.
How:   Each method validates its input through the pydantic schemas, builds
       exactly one SQLAlchemy statement, awaits it, and returns response
       models. There is no client-side filtering, sorting, or paging.
Who:   Called by the route handlers in `inkwell.routes.posts`.

Operation Map:
    create_post            INSERT                        → PostResponse
    list_all_posts         SELECT ... ORDER BY           → List[PostResponse]
    list_posts_by_author   SELECT ... WHERE author = :a  → List[PostResponse]
    list_posts_by_tag      SELECT ... WHERE tags @> [:t] → List[PostResponse]
    get_post_by_id         SELECT ... WHERE id = :id     → PostResponse | None
    update_post            UPDATE ... RETURNING          → PostResponse | None
    delete_post            DELETE ... WHERE id = :id     → DeleteResponse

Absence vs failure:
    get_post_by_id and update_post return None when no post has the given id.
    A malformed id (not a UUID) is a ValidationError, never None.
    Database errors are not caught here; they propagate to the caller as-is.

The service is stateless: the AsyncSession is passed into every call.
"""

import logging
import uuid
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import asc, delete, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.exceptions import ValidationError
from inkwell.models.post import Post, utcnow
from inkwell.schemas.post import (
    DeleteResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
    SortOptions,
    validate_payload,
)

logger = logging.getLogger(__name__)

PostId = Union[uuid.UUID, str]
SortInput = Optional[Union[SortOptions, Mapping[str, Any]]]
FieldsInput = Union[Mapping[str, Any], PostCreate, PostUpdate, None]


def parse_post_id(post_id: PostId) -> uuid.UUID:
    """
    Coerce a post identifier to a UUID.

    Raises:
        ValidationError: the identifier is not a well-formed UUID
    """
    if isinstance(post_id, uuid.UUID):
        return post_id
    try:
        return uuid.UUID(str(post_id))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(
            message=f"'{post_id}' is not a valid post ID",
            field="id",
        ) from None


def _sort_options(options: SortInput) -> SortOptions:
    if options is None:
        return SortOptions()
    return validate_payload(SortOptions, options, label="Sort options")


class PostService:
    """
    Thin query translator for Post operations.

    Default policy: lists are ordered by created_at, newest first, unless
    SortOptions say otherwise.
    """

    async def create_post(self, db: AsyncSession, fields: FieldsInput) -> PostResponse:
        """
        Validate and persist a new post.

        Args:
            db: Async database session
            fields: title (required), author, contents, tags

        Returns:
            PostResponse including the assigned id and both timestamps

        Raises:
            ValidationError: title missing/empty or a field has the wrong type
        """
        data = validate_payload(PostCreate, fields)

        post = Post(
            title=data.title,
            author=data.author,
            contents=data.contents,
            tags=list(data.tags),
        )
        db.add(post)
        # flush emits the INSERT and applies the id/timestamp defaults
        await db.flush()
        logger.info("Post created: %s", post.id)

        return PostResponse.model_validate(post)

    async def _list_posts(
        self,
        db: AsyncSession,
        where: Optional[Any],
        options: SortInput,
    ) -> List[PostResponse]:
        sort = _sort_options(options)
        column = getattr(Post, sort.sort_by)
        direction = desc if sort.descending else asc

        query = select(Post)
        if where is not None:
            query = query.where(where)
        query = query.order_by(direction(column))

        result = await db.execute(query)
        posts = result.scalars().all()
        logger.debug(
            "Listed %d posts (sort=%s %s)", len(posts), sort.sort_by, sort.sort_order
        )
        return [PostResponse.model_validate(post) for post in posts]

    async def list_all_posts(
        self, db: AsyncSession, options: SortInput = None
    ) -> List[PostResponse]:
        """Every post, ordered per `options` (default: created_at descending)."""
        return await self._list_posts(db, None, options)

    async def list_posts_by_author(
        self, db: AsyncSession, author: str, options: SortInput = None
    ) -> List[PostResponse]:
        """Posts whose author equals `author` exactly (case-sensitive)."""
        return await self._list_posts(db, Post.author == author, options)

    async def list_posts_by_tag(
        self, db: AsyncSession, tag: str, options: SortInput = None
    ) -> List[PostResponse]:
        """Posts whose tag list contains `tag`."""
        return await self._list_posts(db, Post.tags.contains([tag]), options)

    async def get_post_by_id(
        self, db: AsyncSession, post_id: PostId
    ) -> Optional[PostResponse]:
        """
        Fetch one post.

        Returns:
            PostResponse, or None when no post has this id

        Raises:
            ValidationError: post_id is not a valid UUID
        """
        pid = parse_post_id(post_id)
        result = await db.execute(select(Post).where(Post.id == pid))
        post = result.scalar_one_or_none()
        if post is None:
            logger.debug("Post %s not found", pid)
            return None
        return PostResponse.model_validate(post)

    async def update_post(
        self, db: AsyncSession, post_id: PostId, fields: FieldsInput
    ) -> Optional[PostResponse]:
        """
        Apply the supplied fields to an existing post and refresh updated_at.

        Fields not present in `fields` are left untouched; id and created_at
        never change.

        Returns:
            The post as it is after the update, or None when no post has this
            id (nothing is created)

        Raises:
            ValidationError: malformed id, or an invalid field value
        """
        pid = parse_post_id(post_id)
        changes = validate_payload(PostUpdate, fields).changes()

        stmt = (
            update(Post)
            .where(Post.id == pid)
            .values(**changes, updated_at=utcnow())
            .returning(Post)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        post = result.scalar_one_or_none()
        if post is None:
            logger.debug("Update skipped, post %s not found", pid)
            return None

        logger.info("Post updated: %s (fields=%s)", pid, sorted(changes))
        return PostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, post_id: PostId) -> DeleteResponse:
        """
        Remove a post by id.

        Returns:
            DeleteResponse with deleted_count 1 if a post was removed, 0 otherwise
        """
        pid = parse_post_id(post_id)
        result = await db.execute(delete(Post).where(Post.id == pid))
        deleted = result.rowcount or 0
        logger.info("Delete post %s: %d removed", pid, deleted)
        return DeleteResponse(deleted_count=deleted)


# Stateless; one instance shared by all routes
post_service = PostService()
