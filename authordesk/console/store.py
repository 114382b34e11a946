"""
Shared admin store - state the console pages read and mutate.

The store only holds data. Page controllers decide when to talk to the
gateway and apply the results here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from authordesk.domain.entities import BlogPost, Book, ContactMessage

if TYPE_CHECKING:
    from authordesk.console.gateway import ConsoleGateway

FEATURED = "featured"
NOT_FEATURED = "not-featured"


@dataclass
class MessageFilters:
    status: str = "all"
    search: str = ""
    date_from: datetime | None = None
    date_to: datetime | None = None

    def matches(self, message: ContactMessage) -> bool:
        if self.status != "all" and message.status != self.status:
            return False
        if self.search:
            term = self.search.lower()
            haystack = (message.full_name, message.email, message.message, message.purpose)
            if not any(term in value.lower() for value in haystack):
                return False
        if self.date_from and message.created_at < self.date_from:
            return False
        if self.date_to and message.created_at > self.date_to:
            return False
        return True


@dataclass
class BookFilters:
    search: str = ""
    genres: set[str] = field(default_factory=set)
    featured: list[str] = field(default_factory=list)  # FEATURED / NOT_FEATURED


class AdminStore:
    def __init__(self, posts_page_size: int = 10) -> None:
        self.messages: list[ContactMessage] = []
        self.selected_message: ContactMessage | None = None
        self.books: list[Book] = []
        self.selected_book: Book | None = None
        self.blog_posts: list[BlogPost] = []
        self.loading = False
        self.error: str | None = None
        self.message_filters = MessageFilters()
        self.book_filters = BookFilters()
        self.posts_page_size = posts_page_size

    # --- Setters ---

    def set_loading(self, loading: bool) -> None:
        self.loading = loading

    def set_error(self, error: str | None) -> None:
        self.error = error

    def set_messages(self, messages: list[ContactMessage]) -> None:
        self.messages = list(messages)
        if self.selected_message is not None:
            self.selected_message = self.find_message(self.selected_message.id)

    def set_selected_message(self, message: ContactMessage | None) -> None:
        self.selected_message = message

    def set_books(self, books: list[Book]) -> None:
        self.books = list(books)

    def set_selected_book(self, book: Book | None) -> None:
        self.selected_book = book

    def set_blog_posts(self, posts: list[BlogPost]) -> None:
        self.blog_posts = list(posts)

    def set_message_filters(self, **changes: object) -> None:
        for key, value in changes.items():
            setattr(self.message_filters, key, value)

    def set_book_filters(self, **changes: object) -> None:
        for key, value in changes.items():
            setattr(self.book_filters, key, value)

    # --- Messages ---

    def find_message(self, message_id: UUID) -> ContactMessage | None:
        return next((m for m in self.messages if m.id == message_id), None)

    def update_message_status(self, message_id: UUID, status: str) -> None:
        self.messages = [
            m.model_copy(update={"status": status}) if m.id == message_id else m
            for m in self.messages
        ]
        if self.selected_message is not None and self.selected_message.id == message_id:
            self.selected_message = self.selected_message.model_copy(update={"status": status})

    def mark_all_as_read(self) -> None:
        self.messages = [
            m.model_copy(update={"status": "read"}) if m.status == "unread" else m
            for m in self.messages
        ]
        if self.selected_message is not None and self.selected_message.status == "unread":
            self.selected_message = self.selected_message.model_copy(update={"status": "read"})

    def remove_messages(self, message_ids: list[UUID]) -> None:
        ids = set(message_ids)
        self.messages = [m for m in self.messages if m.id not in ids]
        if self.selected_message is not None and self.selected_message.id in ids:
            self.selected_message = None

    def unread_count(self) -> int:
        """Unread messages among those matching the active filters."""
        return sum(
            1 for m in self.messages if m.status == "unread" and self.message_filters.matches(m)
        )

    # --- Books ---

    def find_book(self, book_id: UUID) -> Book | None:
        return next((b for b in self.books if b.id == book_id), None)

    def add_book(self, book: Book) -> None:
        self.books = [book, *self.books]

    def update_book(self, book: Book) -> None:
        self.books = [book if b.id == book.id else b for b in self.books]
        if self.selected_book is not None and self.selected_book.id == book.id:
            self.selected_book = book

    def remove_book(self, book_id: UUID) -> None:
        self.books = [b for b in self.books if b.id != book_id]
        if self.selected_book is not None and self.selected_book.id == book_id:
            self.selected_book = None

    def toggle_book_featured(self, book_id: UUID) -> None:
        self.books = [
            b.model_copy(update={"featured": not b.featured}) if b.id == book_id else b
            for b in self.books
        ]

    def filtered_books(self) -> list[Book]:
        filters = self.book_filters
        result = self.books
        if filters.search:
            term = filters.search.lower()
            result = [
                b
                for b in result
                if term in b.title.lower()
                or term in b.author.lower()
                or term in b.description.lower()
            ]
        if filters.genres:
            result = [b for b in result if b.genre in filters.genres]
        if filters.featured:
            result = [
                b
                for b in result
                if (FEATURED in filters.featured and b.featured)
                or (NOT_FEATURED in filters.featured and not b.featured)
            ]
        return result

    # --- Blog ---

    def refresh_blog_posts(self, gateway: ConsoleGateway) -> None:
        self.blog_posts = gateway.list_posts(limit=self.posts_page_size).items
