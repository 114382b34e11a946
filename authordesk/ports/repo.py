from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from authordesk.domain.entities import (
    AdminUser,
    BlogMedia,
    BlogPost,
    BlogTag,
    Book,
    ContactAttachment,
    ContactMessage,
    Engagement,
    LogEntry,
)

class AdminUserRepoPort(Protocol):
    def get_by_email(self, email: str) -> AdminUser | None:
        ...

    def get_by_id(self, user_id: UUID) -> AdminUser | None:
        ...

    def save(self, user: AdminUser) -> AdminUser:
        ...

class BookRepoPort(Protocol):
    def get_by_id(self, book_id: UUID) -> Book | None:
        ...

    def save(self, book: Book) -> Book:
        ...

    def delete(self, book_id: UUID) -> None:
        ...

    def list(
        self,
        *,
        search: str | None = None,
        genre: str | None = None,
        featured: bool | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Book], int]:
        ...

    def count(self, *, featured: bool | None = None) -> int:
        ...

    def distinct_genres(self) -> list[str]:
        ...

class BlogPostRepoPort(Protocol):
    def get_by_id(self, post_id: UUID) -> BlogPost | None:
        ...

    def get_by_slug(self, slug: str) -> BlogPost | None:
        ...

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        ...

    def save(self, post: BlogPost) -> BlogPost:
        ...

    def set_tags(self, post_id: UUID, tag_ids: list[UUID]) -> None:
        ...

    def delete(self, post_id: UUID) -> None:
        ...

    def list(
        self,
        *,
        search: str | None = None,
        status: str = "all",
        author_id: str | None = None,
        tag_slugs: list[str] | None = None,
        featured: bool | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[BlogPost], int]:
        ...

    def count(self, *, is_published: bool | None = None) -> int:
        ...

class BlogTagRepoPort(Protocol):
    def get_by_id(self, tag_id: UUID) -> BlogTag | None:
        ...

    def get_by_slug(self, slug: str) -> BlogTag | None:
        ...

    def save(self, tag: BlogTag) -> BlogTag:
        ...

    def delete(self, tag_id: UUID) -> None:
        ...

    def list_all(self) -> list[BlogTag]:
        ...

    def is_in_use(self, tag_id: UUID) -> bool:
        ...

class BlogMediaRepoPort(Protocol):
    def get_by_id(self, media_id: UUID) -> BlogMedia | None:
        ...

    def save(self, media: BlogMedia) -> BlogMedia:
        ...

    def delete(self, media_id: UUID) -> None:
        ...

    def list_for_post(self, post_id: str) -> list[BlogMedia]:
        ...

    def max_sort_order(self, post_id: str) -> int:
        """Highest sort_order for the post, or -1 when it has no media."""
        ...

    def clear_featured(self, post_id: str, except_id: UUID | None = None) -> None:
        ...

    def reassign_post(self, from_post_id: str, to_post_id: str) -> int:
        ...

class EngagementRepoPort(Protocol):
    def get_by_id(self, engagement_id: UUID) -> Engagement | None:
        ...

    def get_by_slug(self, slug: str) -> Engagement | None:
        ...

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        ...

    def save(self, engagement: Engagement) -> Engagement:
        ...

    def delete(self, engagement_id: UUID) -> None:
        ...

    def list(
        self,
        *,
        search: str | None = None,
        engagement_type: str | None = None,
        status: str | None = None,
        featured: bool | None = None,
        is_virtual: bool | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 12,
        offset: int = 0,
    ) -> tuple[list[Engagement], int]:
        ...

    def all_for_stats(self) -> list[Engagement]:
        ...

class MessageRepoPort(Protocol):
    def get_by_id(self, message_id: UUID) -> ContactMessage | None:
        ...

    def save(self, message: ContactMessage) -> ContactMessage:
        ...

    def delete(self, message_id: UUID) -> None:
        ...

    def save_attachment(self, attachment: ContactAttachment) -> ContactAttachment:
        ...

    def delete_attachments_for(self, message_id: UUID) -> list[ContactAttachment]:
        """Delete attachment rows and return what was removed."""
        ...

    def update_status_many(self, message_ids: list[UUID], status: str) -> int:
        ...

    def list(
        self,
        *,
        status: str | None = None,
        purpose: str | None = None,
        search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        has_attachments: bool | None = None,
        message_ids: list[UUID] | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = 50,
        offset: int = 0,
    ) -> tuple[list[ContactMessage], int]:
        ...

    def count(self, *, status: str | None = None) -> int:
        ...

class LogRepoPort(Protocol):
    def save(self, entry: LogEntry) -> LogEntry:
        ...

    def list(
        self,
        *,
        log_type: str | None = None,
        action: str | None = None,
        user_email: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[LogEntry], int]:
        ...

    def count_by_type(self) -> dict[str, int]:
        ...

    def delete_older_than(self, cutoff: datetime) -> int:
        ...
