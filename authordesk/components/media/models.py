"""
Blog media component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from authordesk.domain.entities import BlogMedia
from authordesk.domain.uploads import FileUpload


@dataclass(frozen=True)
class MediaValidationError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class MediaConfig:
    bucket: str = "blog-media"
    image_max_bytes: int = 10 * 1024 * 1024
    video_max_bytes: int = 100 * 1024 * 1024
    image_types: tuple[str, ...] = (
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
    )
    video_types: tuple[str, ...] = ("video/mp4", "video/webm", "video/quicktime")


# --- Inputs ---


@dataclass(frozen=True)
class MediaFileInput:
    """One file in an upload batch, with optional descriptive metadata."""

    file: FileUpload
    alt_text: str | None = None
    caption: str | None = None
    width: int | None = None
    height: int | None = None
    duration: float | None = None


@dataclass(frozen=True)
class UploadMediaInput:
    post_id: str
    files: list[MediaFileInput]


@dataclass(frozen=True)
class UpdateMediaInput:
    media_id: UUID
    alt_text: str | None = None
    caption: str | None = None
    is_featured: bool | None = None
    sort_order: int | None = None


@dataclass(frozen=True)
class DeleteMediaInput:
    media_id: UUID


@dataclass(frozen=True)
class ReorderMediaInput:
    post_id: str
    media_ids: list[UUID]


@dataclass(frozen=True)
class ListMediaInput:
    post_id: str


@dataclass(frozen=True)
class ReassignMediaInput:
    from_post_id: str
    to_post_id: str


# --- Outputs ---


@dataclass(frozen=True)
class UploadMediaOutput:
    uploaded: list[BlogMedia] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    message: str = ""
    errors: list[MediaValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MediaOutput:
    media: BlogMedia | None = None
    errors: list[MediaValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MediaListOutput:
    items: list[BlogMedia] = field(default_factory=list)
    errors: list[MediaValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ReassignMediaOutput:
    moved: int = 0
    errors: list[MediaValidationError] = field(default_factory=list)
    success: bool = True
