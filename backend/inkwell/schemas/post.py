"""
Inkwell Backend: Pydantic Request/Response Schemas
====================================================

What:  Pydantic models defining the post API contract and its validation rules.
How:   PostService runs every incoming payload through these models before
       touching the database; routes use the response models for serialization
       and OpenAPI docs.

Validation lives here rather than in database constraints: a post is checked
(title present and non-empty, field types, sort options) before any statement
is built, and failures surface as `inkwell.exceptions.ValidationError`.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from inkwell.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Pydantic error types that all mean "a required value is missing"
_REQUIRED_ERROR_TYPES = {"missing", "string_too_short", "blank_string"}


def validate_payload(model: Type[ModelT], data: Any, label: str = "Post") -> ModelT:
    """
    Validate `data` against `model`, translating pydantic errors.

    Returns the model instance, or raises ValidationError whose message names
    the first offending field, e.g. "Post validation failed: `title` is required".
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data if data is not None else {})
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        problems = []
        for err in errors:
            field = ".".join(str(part) for part in err["loc"]) or "body"
            if err["type"] in _REQUIRED_ERROR_TYPES:
                problems.append(f"`{field}` is required")
            else:
                problems.append(f"`{field}`: {err['msg']}")
        first_field = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
        raise ValidationError(
            message=f"{label} validation failed: " + "; ".join(problems),
            field=first_field or None,
            context={"errors": [dict(err, loc=list(err["loc"])) for err in errors]},
        ) from exc


def _non_blank_title(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise PydanticCustomError("blank_string", "`title` is required")
    return value


def _coerce_tags(value: Any) -> Any:
    # null means "no tags"; a bare string is a single tag
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(BaseModel):
    """Body of POST /posts. Only `title` is required."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, description="Post title (required, non-empty)")
    author: Optional[str] = Field(default=None, max_length=255, description="Author name")
    contents: Optional[str] = Field(default=None, description="Post body")
    tags: List[str] = Field(default_factory=list, description="Ordered list of tags")

    @field_validator("title")
    @classmethod
    def check_title(cls, v: Optional[str]) -> str:
        return _non_blank_title(v)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v: Any) -> Any:
        return _coerce_tags(v)


class PostUpdate(BaseModel):
    """
    Body of PATCH /posts/{id}.

    Any subset of the post fields. Only keys present in the request are
    written; `changes()` returns exactly those.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, description="New title (non-empty if given)")
    author: Optional[str] = Field(default=None, max_length=255, description="New author")
    contents: Optional[str] = Field(default=None, description="New body")
    tags: Optional[List[str]] = Field(default=None, description="Replacement tag list")

    @field_validator("title")
    @classmethod
    def check_title(cls, v: Optional[str]) -> str:
        return _non_blank_title(v)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v: Any) -> Any:
        return _coerce_tags(v)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Sort Options
# ══════════════════════════════════════════════════════════════════════════

# Accepted spellings → Post attribute name; every column is sortable
SORT_FIELDS = {
    "id": "id",
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "title": "title",
    "author": "author",
    "contents": "contents",
    "tags": "tags",
}

_ASCENDING = {"ascending", "asc", "1"}
_DESCENDING = {"descending", "desc", "-1"}


class SortOptions(BaseModel):
    """
    Ordering applied to every list query.

    Defaults to newest first: sortBy=createdAt, sortOrder=descending.
    Accepts either the camelCase query names or the snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    sort_by: str = Field(default="created_at", alias="sortBy")
    sort_order: str = Field(default="descending", alias="sortOrder")

    @field_validator("sort_by", mode="before")
    @classmethod
    def normalize_sort_by(cls, v: Any) -> str:
        key = str(v).strip()
        if key not in SORT_FIELDS:
            raise PydanticCustomError(
                "invalid_sort_field",
                "unsupported sort field '{field}'; expected one of: {allowed}",
                {"field": key, "allowed": ", ".join(sorted(SORT_FIELDS))},
            )
        return SORT_FIELDS[key]

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v: Any) -> str:
        key = str(v).strip().lower()
        if key in _ASCENDING:
            return "ascending"
        if key in _DESCENDING:
            return "descending"
        raise PydanticCustomError(
            "invalid_sort_order",
            "unsupported sort order '{order}'; expected ascending or descending",
            {"order": key},
        )

    @property
    def descending(self) -> bool:
        return self.sort_order == "descending"


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PostResponse(BaseModel):
    """
    Full representation of a stored post.

    Serialized with the document field names clients expect
    (`createdAt`, `updatedAt`); built from ORM objects via from_attributes.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(description="Unique post identifier (UUID)")
    title: str = Field(description="Post title")
    author: Optional[str] = Field(default=None, description="Author name")
    contents: Optional[str] = Field(default=None, description="Post body")
    tags: List[str] = Field(default_factory=list, description="Ordered list of tags")
    created_at: datetime = Field(serialization_alias="createdAt", description="Creation time (UTC)")
    updated_at: datetime = Field(serialization_alias="updatedAt", description="Last modification time (UTC)")


class DeleteResponse(BaseModel):
    """Result of DELETE /posts/{id}. `deletedCount` is 0 or 1."""

    acknowledged: bool = Field(default=True)
    deleted_count: int = Field(serialization_alias="deletedCount", ge=0)


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "post with ID '...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


def sort_options_from_query(params: Mapping[str, Optional[str]]) -> SortOptions:
    """Builds SortOptions from raw query values, ignoring parameters that were not sent."""
    return validate_payload(
        SortOptions,
        {key: value for key, value in params.items() if value is not None},
        label="Sort options",
    )
