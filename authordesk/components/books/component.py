"""
Books component - catalogue CRUD, stats and cover uploads.

Invariants:
- title 1-200 chars, author required
- price is positive when set; purchase_url is http(s) or empty
- at most 10 tags
- list ordered newest first; pages = ceil(total / limit)

Cover uploads accept images only (<= 5 MB by default) and are stored at
book-covers/<millis>-<filename> in the covers bucket.
"""

from __future__ import annotations

import logging
import math
from dataclasses import fields
from typing import Any
from uuid import uuid4

from authordesk.domain.entities import Book
from authordesk.domain.values import is_http_url, parse_datetime
from authordesk.ports.errors import BackendError, DuplicateRecordError

from .models import (
    BookListOutput,
    BookOutput,
    BooksConfig,
    BookStatsOutput,
    BookValidationError,
    CoverUploadOutput,
    CreateBookInput,
    DeleteBookInput,
    GenresOutput,
    GetBookInput,
    ListBooksInput,
    UpdateBookInput,
    UploadCoverInput,
)
from .ports import BookRepoPort, ObjectStorePort, TimePort

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = BooksConfig()

_IMMUTABLE_FIELDS = {"id", "created_at", "updated_at"}
_BOOK_FIELDS = {f for f in Book.model_fields} - _IMMUTABLE_FIELDS


# --- Normalisation / Validation ---


def _coerce_price(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _normalize_fields(values: dict[str, Any]) -> dict[str, Any]:
    """Coerce raw form values into entity-ready values."""
    out = dict(values)
    if "published_at" in out:
        out["published_at"] = parse_datetime(out["published_at"])
    if "price" in out:
        out["price"] = _coerce_price(out["price"])
    if "cover_image" in out and out["cover_image"] == "":
        out["cover_image"] = None
    if "genre" in out and out["genre"] == "":
        out["genre"] = None
    if "tags" in out and out["tags"] is not None:
        out["tags"] = [t.strip() for t in out["tags"] if t and t.strip()]
    if "purchase_url" in out and out["purchase_url"] is None:
        out["purchase_url"] = ""
    return out


def validate_book_fields(
    values: dict[str, Any],
    config: BooksConfig = DEFAULT_CONFIG,
) -> list[BookValidationError]:
    """Validate book field values (after normalisation)."""
    errors: list[BookValidationError] = []

    title = (values.get("title") or "").strip()
    if not title:
        errors.append(
            BookValidationError(code="title_required", message="Title is required", field="title")
        )
    elif len(title) > config.title_max_length:
        errors.append(
            BookValidationError(
                code="title_too_long",
                message=f"Title must be at most {config.title_max_length} characters",
                field="title",
            )
        )

    if not (values.get("author") or "").strip():
        errors.append(
            BookValidationError(
                code="author_required", message="Author is required", field="author"
            )
        )

    price = values.get("price")
    if price is not None:
        if not isinstance(price, (int, float)) or isinstance(price, bool):
            errors.append(
                BookValidationError(
                    code="price_invalid", message="Price must be a number", field="price"
                )
            )
        elif price <= 0:
            errors.append(
                BookValidationError(
                    code="price_invalid", message="Price must be positive", field="price"
                )
            )

    purchase_url = values.get("purchase_url") or ""
    if purchase_url and not is_http_url(purchase_url):
        errors.append(
            BookValidationError(
                code="purchase_url_invalid",
                message="Purchase URL must be a valid URL",
                field="purchase_url",
            )
        )

    tags = values.get("tags") or []
    if len(tags) > config.max_tags:
        errors.append(
            BookValidationError(
                code="too_many_tags",
                message=f"A book can have at most {config.max_tags} tags",
                field="tags",
            )
        )

    return errors


def resolve_cover_image(value: str | None, public_base: str) -> str | None:
    """
    Normalise a stored cover value into something the site can render.

    Legacy local paths and unknown values become None; bucket-relative
    storage paths are expanded against `public_base`.
    """
    if not value:
        return None
    if value.startswith(("http://", "https://")):
        return value
    if value.startswith(("/images/", "images/")):
        return None
    if value.startswith("book-covers/"):
        return f"{public_base.rstrip('/')}/{value}"
    return None


def _not_found(book_id: object) -> list[BookValidationError]:
    return [BookValidationError(code="not_found", message=f"Book {book_id} not found")]


def _backend_errors(e: BackendError) -> list[BookValidationError]:
    if isinstance(e, DuplicateRecordError):
        return [
            BookValidationError(
                code="duplicate",
                message="A book with this title already exists",
                field="title",
            )
        ]
    return [BookValidationError(code=e.code, message=e.message)]


# --- Component Entry Points ---


def run_get(inp: GetBookInput, *, repo: BookRepoPort) -> BookOutput:
    try:
        book = repo.get_by_id(inp.book_id)
    except BackendError as e:
        logger.error("Book lookup failed for %s: %s", inp.book_id, e.message)
        return BookOutput(book=None, errors=_backend_errors(e), success=False)
    if book is None:
        return BookOutput(book=None, errors=_not_found(inp.book_id), success=False)
    return BookOutput(book=book, errors=[], success=True)


def run_list(inp: ListBooksInput, *, repo: BookRepoPort) -> BookListOutput:
    """List books with search, genre and featured filters, newest first."""
    page = max(1, inp.page)
    limit = max(1, inp.limit)
    try:
        items, total = repo.list(
            search=inp.search,
            genre=inp.genre,
            featured=inp.featured,
            limit=limit,
            offset=(page - 1) * limit,
        )
    except BackendError as e:
        logger.error("Book list failed: %s", e.message)
        return BookListOutput(
            items=[],
            total=0,
            page=page,
            limit=limit,
            pages=0,
            errors=_backend_errors(e),
            success=False,
        )
    return BookListOutput(
        items=items,
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )


def run_create(
    inp: CreateBookInput,
    *,
    repo: BookRepoPort,
    time: TimePort,
    config: BooksConfig = DEFAULT_CONFIG,
) -> BookOutput:
    """
    Create a book.

    Returns:
        BookOutput with the created book, or validation errors.
    """
    try:
        values = _normalize_fields({f.name: getattr(inp, f.name) for f in fields(inp)})
    except ValueError as e:
        return BookOutput(
            errors=[BookValidationError(code="validation", message=str(e), field="published_at")],
            success=False,
        )

    errors = validate_book_fields(values, config)
    if errors:
        return BookOutput(book=None, errors=errors, success=False)

    now = time.now_utc()
    values["title"] = values["title"].strip()
    values["author"] = values["author"].strip()
    book = Book(id=uuid4(), created_at=now, updated_at=now, **values)

    try:
        saved = repo.save(book)
    except BackendError as e:
        logger.warning("Book create failed: %s", e.message)
        return BookOutput(book=None, errors=_backend_errors(e), success=False)
    return BookOutput(book=saved, errors=[], success=True)


def run_update(
    inp: UpdateBookInput,
    *,
    repo: BookRepoPort,
    time: TimePort,
    config: BooksConfig = DEFAULT_CONFIG,
) -> BookOutput:
    """Apply a partial update. Unknown keys and immutable fields are ignored."""
    try:
        book = repo.get_by_id(inp.book_id)
    except BackendError as e:
        logger.error("Book lookup failed for %s: %s", inp.book_id, e.message)
        return BookOutput(book=None, errors=_backend_errors(e), success=False)
    if book is None:
        return BookOutput(book=None, errors=_not_found(inp.book_id), success=False)

    updates = {k: v for k, v in inp.updates.items() if k in _BOOK_FIELDS}
    try:
        updates = _normalize_fields(updates)
    except ValueError as e:
        return BookOutput(
            book=book,
            errors=[BookValidationError(code="validation", message=str(e), field="published_at")],
            success=False,
        )

    merged = {**book.model_dump(), **updates}
    errors = validate_book_fields(merged, config)
    if errors:
        return BookOutput(book=book, errors=errors, success=False)

    updated = book.model_copy(update={**updates, "updated_at": time.now_utc()})
    try:
        saved = repo.save(updated)
    except BackendError as e:
        logger.warning("Book update failed for %s: %s", inp.book_id, e.message)
        return BookOutput(book=book, errors=_backend_errors(e), success=False)
    return BookOutput(book=saved, errors=[], success=True)


def run_delete(inp: DeleteBookInput, *, repo: BookRepoPort) -> BookOutput:
    try:
        book = repo.get_by_id(inp.book_id)
        if book is None:
            return BookOutput(book=None, errors=_not_found(inp.book_id), success=False)
        repo.delete(inp.book_id)
    except BackendError as e:
        logger.error("Book delete failed for %s: %s", inp.book_id, e.message)
        return BookOutput(book=None, errors=_backend_errors(e), success=False)
    return BookOutput(book=None, errors=[], success=True)


def run_stats(*, repo: BookRepoPort) -> BookStatsOutput:
    try:
        return BookStatsOutput(
            total_books=repo.count(),
            featured_books=repo.count(featured=True),
        )
    except BackendError as e:
        logger.error("Book stats failed: %s", e.message)
        return BookStatsOutput(errors=_backend_errors(e), success=False)


def run_genres(*, repo: BookRepoPort) -> GenresOutput:
    try:
        return GenresOutput(genres=sorted(repo.distinct_genres()))
    except BackendError as e:
        logger.error("Genre list failed: %s", e.message)
        return GenresOutput(errors=_backend_errors(e), success=False)


def run_upload_cover(
    inp: UploadCoverInput,
    *,
    storage: ObjectStorePort,
    time: TimePort,
    config: BooksConfig = DEFAULT_CONFIG,
) -> CoverUploadOutput:
    """Validate and store a cover image. Returns the storage path and public URL."""
    upload = inp.file
    if upload.content_type not in config.cover_mime_types:
        return CoverUploadOutput(
            errors=[
                BookValidationError(
                    code="file_type",
                    message="Invalid file type. Only images are allowed.",
                    field="cover_image",
                )
            ],
            success=False,
        )
    if upload.size > config.cover_max_bytes:
        limit_mb = config.cover_max_bytes // (1024 * 1024)
        return CoverUploadOutput(
            errors=[
                BookValidationError(
                    code="file_size",
                    message=f"File too large. Maximum size is {limit_mb}MB.",
                    field="cover_image",
                )
            ],
            success=False,
        )

    millis = int(time.now_utc().timestamp() * 1000)
    path = f"book-covers/{millis}-{upload.filename}"
    try:
        stored = storage.upload(config.covers_bucket, path, upload.data, upload.content_type)
    except BackendError as e:
        logger.error("Cover upload failed for %s: %s", upload.filename, e.message)
        return CoverUploadOutput(
            errors=[BookValidationError(code="upload_failed", message="Failed to upload file")],
            success=False,
        )

    return CoverUploadOutput(
        path=stored,
        url=storage.public_url(config.covers_bucket, stored),
    )


def run(
    inp: (
        GetBookInput
        | ListBooksInput
        | CreateBookInput
        | UpdateBookInput
        | DeleteBookInput
        | UploadCoverInput
    ),
    *,
    repo: BookRepoPort,
    time: TimePort | None = None,
    storage: ObjectStorePort | None = None,
    config: BooksConfig = DEFAULT_CONFIG,
) -> BookOutput | BookListOutput | CoverUploadOutput:
    """
    Main entry point for the books component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, GetBookInput):
        return run_get(inp, repo=repo)

    elif isinstance(inp, ListBooksInput):
        return run_list(inp, repo=repo)

    elif isinstance(inp, CreateBookInput):
        if time is None:
            raise ValueError("TimePort is required for create operations")
        return run_create(inp, repo=repo, time=time, config=config)

    elif isinstance(inp, UpdateBookInput):
        if time is None:
            raise ValueError("TimePort is required for update operations")
        return run_update(inp, repo=repo, time=time, config=config)

    elif isinstance(inp, DeleteBookInput):
        return run_delete(inp, repo=repo)

    elif isinstance(inp, UploadCoverInput):
        if time is None or storage is None:
            raise ValueError("TimePort and ObjectStorePort are required for cover uploads")
        return run_upload_cover(inp, storage=storage, time=time, config=config)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
