"""
Engagements component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal
from uuid import UUID

from authordesk.domain.entities import Engagement, EngagementStatus, EngagementType
from authordesk.domain.uploads import FileUpload


@dataclass(frozen=True)
class EngagementValidationError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class EngagementsConfig:
    title_max_length: int = 200
    max_images: int = 10
    image_max_bytes: int = 10 * 1024 * 1024
    image_types: tuple[str, ...] = (
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
    )
    bucket: str = "engagement-media"


# --- Inputs ---


@dataclass(frozen=True)
class CreateEngagementInput:
    title: str
    description: str
    type: EngagementType = "workshop"
    slug: str | None = None
    content: str | None = None
    existing_images: list[str] = field(default_factory=list)
    new_files: list[FileUpload] = field(default_factory=list)
    date: Any = None
    duration: str | None = None
    price: Any = None
    max_attendees: Any = None
    location: str | None = None
    is_virtual: bool = False
    is_featured: bool = False
    booking_url: str | None = None
    status: EngagementStatus = "upcoming"
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class UpdateEngagementInput:
    """Partial update; only keys present in `updates` change."""

    engagement_id: UUID
    updates: dict[str, Any]
    new_files: list[FileUpload] = field(default_factory=list)


@dataclass(frozen=True)
class GetEngagementInput:
    engagement_id: UUID | None = None
    slug: str | None = None


@dataclass(frozen=True)
class DeleteEngagementInput:
    engagement_id: UUID


@dataclass(frozen=True)
class ListEngagementsInput:
    search: str | None = None
    type: str | None = None
    status: str | None = None
    featured: bool | None = None
    is_virtual: bool | None = None
    upcoming_only: bool = False
    date_from: Any = None
    date_to: Any = None
    sort_by: str = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = 1
    limit: int = 12


@dataclass(frozen=True)
class UploadImagesInput:
    files: list[FileUpload]


# --- Outputs ---


@dataclass(frozen=True)
class EngagementOutput:
    engagement: Engagement | None = None
    uploaded_count: int = 0
    errors: list[EngagementValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class EngagementListOutput:
    items: list[Engagement]
    total: int
    page: int
    limit: int
    total_pages: int
    errors: list[EngagementValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class EngagementStatsOutput:
    total: int = 0
    featured: int = 0
    upcoming: int = 0
    ongoing: int = 0
    completed: int = 0
    cancelled: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_status: dict[str, int] = field(default_factory=dict)
    errors: list[EngagementValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class UploadImagesOutput:
    urls: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    errors: list[EngagementValidationError] = field(default_factory=list)
    success: bool = True
