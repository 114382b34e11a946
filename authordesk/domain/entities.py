from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
AdminStatus = Literal["active", "disabled"]
MediaType = Literal["image", "video"]
EngagementType = Literal[
    "webinar",
    "workshop",
    "training",
    "coaching",
    "consulting",
    "speaking",
    "course",
    "event",
]
EngagementStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]
MessageStatus = Literal["unread", "read", "replied"]
LogType = Literal["user_action", "error", "success", "system"]

ENGAGEMENT_TYPES: tuple[str, ...] = (
    "webinar",
    "workshop",
    "training",
    "coaching",
    "consulting",
    "speaking",
    "course",
    "event",
)
ENGAGEMENT_STATUSES: tuple[str, ...] = ("upcoming", "ongoing", "completed", "cancelled")
MESSAGE_STATUSES: tuple[str, ...] = ("unread", "read", "replied")
LOG_TYPES: tuple[str, ...] = ("user_action", "error", "success", "system")


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Admin ---

class AdminUser(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    display_name: str
    password_hash: str
    status: AdminStatus = "active"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

# --- Books ---

class Book(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    author: str
    description: str = ""
    cover_image: str | None = None
    genre: str | None = None
    published_at: datetime | None = None
    isbn: str | None = None
    price: float | None = None
    purchase_url: str = ""
    tags: list[str] = Field(default_factory=list)
    featured: bool = False
    content: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

# --- Blog ---

class BlogTag(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    slug: str
    description: str | None = None
    color: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

class BlogPost(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str
    excerpt: str = ""
    content: str = ""
    featured_image: str | None = None
    featured_media_type: MediaType | None = None
    author_id: str | None = None
    is_published: bool = False
    published_at: datetime | None = None
    reading_time: int = 1
    featured: bool = False
    seo_title: str | None = None
    seo_description: str | None = None
    tags: list[BlogTag] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def status(self) -> Literal["published", "draft"]:
        return "published" if self.is_published else "draft"

class BlogMedia(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    post_id: str  # real post id or a temp-<millis>-<random> id
    file_name: str
    file_path: str
    file_url: str
    file_type: MediaType
    mime_type: str
    file_size: int
    width: int | None = None
    height: int | None = None
    duration: float | None = None
    alt_text: str | None = None
    caption: str | None = None
    is_featured: bool = False
    sort_order: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

# --- Engagements ---

class Engagement(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str
    type: EngagementType = "workshop"
    description: str
    content: str | None = None
    images: list[str] = Field(default_factory=list)
    date: datetime | None = None
    duration: str | None = None
    price: float | None = None
    max_attendees: int | None = None
    location: str | None = None
    is_virtual: bool = False
    is_featured: bool = False
    booking_url: str | None = None
    status: EngagementStatus = "upcoming"
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

# --- Contact Inbox ---

class ContactAttachment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    message_id: UUID
    file_name: str
    file_path: str
    file_size: int
    file_type: str
    created_at: datetime = Field(default_factory=utc_now)

class ContactMessage(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    full_name: str
    email: str
    purpose: str
    message: str
    status: MessageStatus = "unread"
    created_at: datetime = Field(default_factory=utc_now)
    attachments: list[ContactAttachment] = Field(default_factory=list)

# --- Activity Log ---

class LogEntry(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    type: LogType
    action: str
    details: dict[str, Any] = Field(default_factory=dict)
    user_id: str | None = None
    user_email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
