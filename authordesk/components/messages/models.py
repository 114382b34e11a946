"""
Messages component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal
from uuid import UUID

from authordesk.domain.entities import ContactMessage
from authordesk.domain.uploads import FileUpload

CONTACT_PURPOSES: tuple[str, ...] = (
    "Book Inquiry",
    "Writing Services",
    "Collaboration",
    "Speaking Engagement",
    "Other",
)


@dataclass(frozen=True)
class MessageValidationError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class MessagesConfig:
    name_min_length: int = 2
    name_max_length: int = 100
    email_max_length: int = 254
    message_min_length: int = 10
    message_max_length: int = 2000
    max_files: int = 5
    max_file_bytes: int = 5 * 1024 * 1024
    max_total_bytes: int = 10 * 1024 * 1024
    attachment_types: tuple[str, ...] = (
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
        "text/csv",
    )
    purposes: tuple[str, ...] = CONTACT_PURPOSES
    bucket: str = "contact-attachments"


# --- Inputs ---


@dataclass(frozen=True)
class SubmitMessageInput:
    full_name: str
    email: str
    purpose: str
    message: str
    attachments: list[FileUpload] = field(default_factory=list)


@dataclass(frozen=True)
class ListMessagesInput:
    status: str | None = None
    purpose: str | None = None
    search: str | None = None
    date_from: Any = None
    date_to: Any = None
    page: int = 1
    limit: int = 50


@dataclass(frozen=True)
class SearchMessagesInput:
    query: str = ""
    status: str | None = None
    purpose: str | None = None
    date_from: Any = None
    date_to: Any = None
    has_attachments: bool | None = None
    sort_by: str = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = 1
    limit: int = 50


@dataclass(frozen=True)
class GetMessageInput:
    message_id: UUID


@dataclass(frozen=True)
class UpdateMessageInput:
    message_id: UUID
    updates: dict[str, Any]


@dataclass(frozen=True)
class BatchStatusInput:
    message_ids: list[UUID]
    status: str


@dataclass(frozen=True)
class BatchDeleteInput:
    message_ids: list[UUID]


@dataclass(frozen=True)
class ExportMessagesInput:
    """Export request. Explicit `message_ids` take precedence over filters."""

    format: Literal["csv", "json"] = "csv"
    status: str | None = None
    purpose: str | None = None
    search: str | None = None
    date_from: Any = None
    date_to: Any = None
    include_attachments: bool = False
    message_ids: list[UUID] | None = None


# --- Outputs ---


@dataclass(frozen=True)
class SubmitMessageOutput:
    message: ContactMessage | None = None
    attachment_failures: list[str] = field(default_factory=list)
    errors: list[MessageValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MessageOutput:
    message: ContactMessage | None = None
    errors: list[MessageValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MessageListOutput:
    items: list[ContactMessage]
    total: int
    page: int
    limit: int
    total_pages: int
    errors: list[MessageValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BatchOutput:
    affected: int = 0
    failures: list[str] = field(default_factory=list)
    errors: list[MessageValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ExportOutput:
    filename: str = ""
    content_type: str = ""
    content: str = ""
    count: int = 0
    errors: list[MessageValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MessageStatsOutput:
    total: int = 0
    unread: int = 0
    read: int = 0
    replied: int = 0
    errors: list[MessageValidationError] = field(default_factory=list)
    success: bool = True
