"""
Blog component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal
from uuid import UUID

from authordesk.domain.entities import BlogPost, BlogTag

PostStatusFilter = Literal["all", "published", "draft"]

# --- Validation Error ---


@dataclass(frozen=True)
class BlogValidationError:
    """Blog validation error."""

    code: str
    message: str
    field: str | None = None


# --- Configuration ---


@dataclass(frozen=True)
class BlogConfig:
    title_max_length: int = 200
    excerpt_max_length: int = 500
    seo_title_max_length: int = 70
    seo_description_max_length: int = 160
    min_publish_content_length: int = 10
    tag_name_max_length: int = 50
    media_bucket: str = "blog-media"


# --- Post Inputs ---


@dataclass(frozen=True)
class CreatePostInput:
    """Input for creating a post from the editor form."""

    title: str
    content: str = ""
    slug: str | None = None
    excerpt: str = ""
    featured_image: str | None = None
    featured_media_type: Literal["image", "video"] | None = None
    author_id: str | None = None
    is_published: bool = False
    published_at: Any = None
    reading_time: int | None = None
    tags: list[str] = field(default_factory=list)
    featured: bool = False
    seo_title: str | None = None
    seo_description: str | None = None


@dataclass(frozen=True)
class UpdatePostInput:
    """
    Input for a full editor-form submit against an existing post.

    `tags=None` leaves tag associations untouched; a list replaces them.
    """

    post_id: UUID
    title: str
    content: str = ""
    slug: str | None = None
    excerpt: str = ""
    featured_image: str | None = None
    featured_media_type: Literal["image", "video"] | None = None
    author_id: str | None = None
    is_published: bool = False
    published_at: Any = None
    reading_time: int | None = None
    tags: list[str] | None = None
    featured: bool = False
    seo_title: str | None = None
    seo_description: str | None = None


@dataclass(frozen=True)
class GetPostInput:
    post_id: UUID | None = None
    slug: str | None = None


@dataclass(frozen=True)
class ListPostsInput:
    search: str | None = None
    status: PostStatusFilter = "all"
    author_id: str | None = None
    tags: list[str] = field(default_factory=list)
    featured: bool | None = None
    date_from: Any = None
    date_to: Any = None
    sort_by: str = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = 1
    limit: int = 10


@dataclass(frozen=True)
class TogglePublishedInput:
    post_id: UUID


@dataclass(frozen=True)
class DeletePostInput:
    post_id: UUID


# --- Tag Inputs ---


@dataclass(frozen=True)
class CreateTagInput:
    name: str
    description: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class UpdateTagInput:
    tag_id: UUID
    updates: dict[str, Any]


@dataclass(frozen=True)
class DeleteTagInput:
    tag_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class PostOutput:
    post: BlogPost | None = None
    errors: list[BlogValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class PostListOutput:
    items: list[BlogPost]
    total: int
    page: int
    limit: int
    pages: int
    errors: list[BlogValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BlogStatsOutput:
    total: int = 0
    published: int = 0
    draft: int = 0
    tags: int = 0
    errors: list[BlogValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class TagOutput:
    tag: BlogTag | None = None
    errors: list[BlogValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class TagListOutput:
    tags: list[BlogTag] = field(default_factory=list)
    errors: list[BlogValidationError] = field(default_factory=list)
    success: bool = True
