"""
Inkwell Backend: Post Route Handlers
======================================

What:  CRUD endpoints for blog posts under /posts.
How:   Extracts body/path/query data, hands it with a per-request session to
       PostService, and serializes the result. Absence (None) from the service
       becomes a 404 here.

Endpoints:
    POST   /posts                  create a post              → 201
    GET    /posts                  list all posts             → 200
    GET    /posts/author/{author}  list posts by author       → 200
    GET    /posts/tag/{tag}        list posts with a tag      → 200
    GET    /posts/{post_id}        get one post               → 200 | 404
    PATCH  /posts/{post_id}        update fields of a post    → 200 | 404
    DELETE /posts/{post_id}        delete a post              → 200

List endpoints accept ?sortBy=<any post attribute, default createdAt> and
?sortOrder=<ascending|descending>.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.database import get_db_session
from inkwell.exceptions import NotFoundError
from inkwell.schemas.post import (
    DeleteResponse,
    ErrorResponse,
    PostResponse,
    SortOptions,
    sort_options_from_query,
)
from inkwell.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])

_LIST_RESPONSES = {
    200: {"description": "Posts in the requested order"},
    400: {"description": "Invalid sort options", "model": ErrorResponse},
}
_ITEM_RESPONSES = {
    400: {"description": "Malformed post ID or invalid body", "model": ErrorResponse},
    404: {"description": "Post not found", "model": ErrorResponse},
}


def sort_options(
    sort_by: Optional[str] = Query(
        default=None,
        alias="sortBy",
        description="Post attribute to sort by: createdAt (default), updatedAt, id, title, author, contents, tags",
    ),
    sort_order: Optional[str] = Query(
        default=None,
        alias="sortOrder",
        description="ascending or descending (default)",
    ),
) -> SortOptions:
    """Dependency turning the sort query parameters into SortOptions."""
    return sort_options_from_query({"sortBy": sort_by, "sortOrder": sort_order})


@router.post(
    "/posts",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Validation failed", "model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    payload: Dict[str, Any] = Body(
        default_factory=dict,
        examples=[{"title": "Hello", "author": "Ada", "contents": "...", "tags": ["intro"]}],
    ),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    """
    Create a post from a JSON body. Only `title` is required.

    The body is validated by PostService so that a missing title is reported
    as a 400 validation_error naming the field.
    """
    return await post_service.create_post(db, payload)


@router.get(
    "/posts",
    response_model=List[PostResponse],
    responses=_LIST_RESPONSES,
    summary="List all posts",
)
async def list_posts(
    response: Response,
    options: SortOptions = Depends(sort_options),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    posts = await post_service.list_all_posts(db, options)
    response.headers["X-Total-Count"] = str(len(posts))
    return posts


@router.get(
    "/posts/author/{author}",
    response_model=List[PostResponse],
    responses=_LIST_RESPONSES,
    summary="List posts by author",
)
async def list_posts_by_author(
    author: str,
    options: SortOptions = Depends(sort_options),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    return await post_service.list_posts_by_author(db, author, options)


@router.get(
    "/posts/tag/{tag}",
    response_model=List[PostResponse],
    responses=_LIST_RESPONSES,
    summary="List posts with a tag",
)
async def list_posts_by_tag(
    tag: str,
    options: SortOptions = Depends(sort_options),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    return await post_service.list_posts_by_tag(db, tag, options)


@router.get(
    "/posts/{post_id}",
    response_model=PostResponse,
    responses=_ITEM_RESPONSES,
    summary="Get a post by ID",
)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    """
    Args:
        post_id: Post UUID. Kept as a plain string so the service decides
                 how malformed IDs are reported (400, not FastAPI's 422).
    """
    post = await post_service.get_post_by_id(db, post_id)
    if post is None:
        raise NotFoundError(resource="post", resource_id=post_id)
    return post


@router.patch(
    "/posts/{post_id}",
    response_model=PostResponse,
    responses=_ITEM_RESPONSES,
    summary="Update a post",
)
async def update_post(
    post_id: str,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    """Apply any subset of {title, author, contents, tags}; other fields are kept."""
    post = await post_service.update_post(db, post_id, payload)
    if post is None:
        raise NotFoundError(resource="post", resource_id=post_id)
    return post


@router.delete(
    "/posts/{post_id}",
    response_model=DeleteResponse,
    responses={400: {"description": "Malformed post ID", "model": ErrorResponse}},
    summary="Delete a post",
)
async def delete_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    """Deleting an unknown ID is not an error; it reports deletedCount 0."""
    return await post_service.delete_post(db, post_id)
