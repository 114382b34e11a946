"""
Books component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from authordesk.domain.entities import Book
from authordesk.domain.uploads import FileUpload

# --- Validation Error ---


@dataclass(frozen=True)
class BookValidationError:
    """Book validation error."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CreateBookInput:
    """Input for creating a book."""

    title: str
    author: str
    description: str = ""
    cover_image: str | None = None
    genre: str | None = None
    published_at: Any = None
    isbn: str | None = None
    price: Any = None
    purchase_url: str = ""
    tags: list[str] = field(default_factory=list)
    featured: bool = False
    content: str = ""


@dataclass(frozen=True)
class UpdateBookInput:
    """Input for updating a book (partial)."""

    book_id: UUID
    updates: dict[str, Any]


@dataclass(frozen=True)
class GetBookInput:
    book_id: UUID


@dataclass(frozen=True)
class DeleteBookInput:
    book_id: UUID


@dataclass(frozen=True)
class ListBooksInput:
    """Input for listing books with filters."""

    search: str | None = None
    genre: str | None = None
    featured: bool | None = None
    page: int = 1
    limit: int = 10


@dataclass(frozen=True)
class UploadCoverInput:
    file: FileUpload


# --- Output Models ---


@dataclass(frozen=True)
class BookOutput:
    book: Book | None = None
    errors: list[BookValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BookListOutput:
    items: list[Book]
    total: int
    page: int
    limit: int
    pages: int
    errors: list[BookValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BookStatsOutput:
    total_books: int = 0
    featured_books: int = 0
    errors: list[BookValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class GenresOutput:
    genres: list[str] = field(default_factory=list)
    errors: list[BookValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class CoverUploadOutput:
    path: str | None = None
    url: str | None = None
    errors: list[BookValidationError] = field(default_factory=list)
    success: bool = True


# --- Configuration ---


@dataclass(frozen=True)
class BooksConfig:
    """Limits for book fields and cover uploads."""

    title_max_length: int = 200
    max_tags: int = 10
    cover_max_bytes: int = 5 * 1024 * 1024
    cover_mime_types: tuple[str, ...] = (
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
    )
    covers_bucket: str = "public"
