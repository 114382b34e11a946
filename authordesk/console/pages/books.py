from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from authordesk.components.books import BookStatsOutput
from authordesk.console.gateway import ConsoleGateway, GatewayError
from authordesk.console.optimistic import apply_optimistic
from authordesk.console.store import AdminStore
from authordesk.console.toasts import ToastCenter
from authordesk.domain.entities import Book
from authordesk.domain.uploads import FileUpload

logger = logging.getLogger(__name__)


class BooksPage:
    """
    Books dashboard: list, stats, create/edit, feature toggle, delete.

    Feature toggles are optimistic. Deletes wait for the backend before the
    card is removed.
    """

    def __init__(
        self,
        gateway: ConsoleGateway,
        store: AdminStore,
        toasts: ToastCenter,
        page_size: int = 10,
    ):
        self.gateway = gateway
        self.store = store
        self.toasts = toasts
        self.page_size = page_size
        self.page = 1
        self.total = 0
        self.total_pages = 0
        self.stats: BookStatsOutput | None = None
        self.genres: list[str] = []
        self.pending_delete: UUID | None = None

    def load(self, page: int = 1) -> None:
        self.store.set_loading(True)
        self.store.set_error(None)
        try:
            result = self.gateway.list_books(
                search=self.store.book_filters.search or None, page=page, limit=self.page_size
            )
            self.genres = self.gateway.book_genres()
        except GatewayError as e:
            self.store.set_error(e.message)
            self.toasts.error("Failed to load books")
            return
        finally:
            self.store.set_loading(False)

        self.store.set_books(result.items)
        self.page = result.page
        self.total = result.total
        self.total_pages = result.pages

    def load_stats(self) -> None:
        try:
            self.stats = self.gateway.book_stats()
        except GatewayError as e:
            logger.warning("Failed to load book stats: %s", e.message)
            self.toasts.error("Failed to load book statistics")

    def visible_books(self) -> list[Book]:
        return self.store.filtered_books()

    def cover_url(self, book: Book) -> str | None:
        return self.gateway.cover_url(book)

    # --- Filters ---

    def set_search(self, text: str) -> None:
        self.store.set_book_filters(search=text)
        self.load(page=1)

    def set_genres(self, genres: set[str]) -> None:
        self.store.set_book_filters(genres=set(genres))

    def set_featured_filter(self, values: list[str]) -> None:
        self.store.set_book_filters(featured=list(values))

    # --- Mutations ---

    def toggle_featured(self, book_id: UUID) -> bool:
        book = self.store.find_book(book_id)
        if book is None:
            return False
        featured = not book.featured
        ok = apply_optimistic(
            apply=lambda: self.store.toggle_book_featured(book_id),
            revert=lambda: self.store.toggle_book_featured(book_id),
            commit=lambda: self.gateway.update_book(book_id, {"featured": featured}),
            toasts=self.toasts,
            failure_message="Failed to update book",
            success_message="Book featured" if featured else "Book removed from featured",
        )
        if ok:
            self.load_stats()
        return ok

    def request_delete(self, book_id: UUID) -> None:
        self.pending_delete = book_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        book_id = self.pending_delete
        if book_id is None:
            return False
        toast_id = self.toasts.loading("Deleting book...")
        try:
            self.gateway.delete_book(book_id)
        except GatewayError as e:
            self.toasts.dismiss(toast_id)
            self.toasts.error(e.message or "Failed to delete book")
            return False
        finally:
            self.pending_delete = None

        self.store.remove_book(book_id)
        self.toasts.success("Book deleted successfully", toast_id)
        self.load_stats()
        return True

    def submit(self, data: dict[str, Any], editing_id: UUID | None = None) -> Book | None:
        action = "Updating" if editing_id else "Creating"
        toast_id = self.toasts.loading(f"{action} book...")
        try:
            if editing_id:
                book = self.gateway.update_book(editing_id, data)
            else:
                book = self.gateway.create_book(data)
        except GatewayError as e:
            self.toasts.dismiss(toast_id)
            self.toasts.error(e.message)
            return None

        if editing_id:
            self.store.update_book(book)
            self.toasts.success("Book updated successfully", toast_id)
        else:
            self.store.add_book(book)
            self.toasts.success("Book created successfully", toast_id)
        self.load_stats()
        return book

    def upload_cover(self, file: FileUpload) -> str | None:
        toast_id = self.toasts.loading("Uploading cover...")
        try:
            result = self.gateway.upload_cover(file)
        except GatewayError as e:
            self.toasts.dismiss(toast_id)
            self.toasts.error(e.message)
            return None
        self.toasts.success("Cover uploaded", toast_id)
        return result.path
