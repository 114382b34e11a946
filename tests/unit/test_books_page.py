import pytest

from authordesk.console.gateway import GatewayError
from authordesk.console.pages.books import BooksPage
from authordesk.domain.uploads import FileUpload


@pytest.fixture
def page(gateway, store, toasts):
    return BooksPage(gateway, store, toasts)


def _create(page, title, **extra):
    return page.submit({"title": title, "author": "Jane Doe", **extra})


def test_submit_creates_book_and_prepends(page, store, toasts):
    _create(page, "First")
    second = _create(page, "Second", genre="Fiction")

    assert [b.title for b in store.books] == ["Second", "First"]
    assert second.genre == "Fiction"
    assert toasts.messages("success")[-1] == "Book created successfully"
    assert page.stats.total_books == 2


def test_submit_edit_updates_in_place(page, store):
    book = _create(page, "Draft Title")
    page.submit({"title": "Final Title"}, editing_id=book.id)

    assert store.find_book(book.id).title == "Final Title"
    assert len(store.books) == 1


def test_submit_validation_error_shows_toast(page, store, toasts):
    assert page.submit({"title": "", "author": "Jane"}) is None
    assert store.books == []
    assert "Title is required" in toasts.messages("error")[-1]
    assert toasts.active()[-1].kind == "error"


def test_load_fetches_page_and_genres(page, store):
    _create(page, "A", genre="Poetry")
    _create(page, "B", genre="Fiction")
    store.set_books([])

    page.load()

    assert len(store.books) == 2
    assert page.total == 2
    assert page.genres == ["Fiction", "Poetry"]
    assert store.loading is False


def test_toggle_featured_persists(page, store, gateway):
    book = _create(page, "Featured Soon")
    assert page.toggle_featured(book.id)

    assert store.find_book(book.id).featured is True
    assert gateway.get_book(book.id).featured is True
    assert page.stats.featured_books == 1


def test_toggle_featured_rolls_back_on_failure(page, store, toasts, monkeypatch, gateway):
    book = _create(page, "Sticky")

    def failing_update(book_id, updates):
        raise GatewayError("Network error", status=500)

    monkeypatch.setattr(gateway, "update_book", failing_update)

    assert not page.toggle_featured(book.id)
    assert store.find_book(book.id).featured is False
    assert toasts.messages("error")[-1] == "Failed to update book"


def test_delete_requires_confirmation(page, store, gateway):
    book = _create(page, "To Delete")
    page.request_delete(book.id)
    page.cancel_delete()
    assert page.confirm_delete() is False
    assert store.find_book(book.id) is not None

    page.request_delete(book.id)
    assert page.confirm_delete() is True
    assert store.find_book(book.id) is None
    with pytest.raises(GatewayError) as exc:
        gateway.get_book(book.id)
    assert exc.value.status == 404


def test_failed_delete_keeps_book(page, store, toasts, monkeypatch, gateway):
    book = _create(page, "Survivor")

    def failing_delete(book_id):
        raise GatewayError("Network error", status=500)

    monkeypatch.setattr(gateway, "delete_book", failing_delete)
    page.request_delete(book.id)

    assert page.confirm_delete() is False
    assert store.find_book(book.id) is not None
    assert page.pending_delete is None
    assert toasts.messages("error")[-1] == "Network error"


def test_upload_cover_returns_storage_path(page, gateway, test_ctx):
    path = page.upload_cover(FileUpload("cover.png", "image/png", b"\x89PNG data"))

    assert path.startswith("book-covers/")
    assert test_ctx.storage.exists("public", path)

    book = _create(page, "Covered", cover_image=path)
    assert page.cover_url(book) == f"http://test/storage/public/{path}"


def test_upload_cover_rejects_wrong_type(page, toasts):
    assert page.upload_cover(FileUpload("notes.txt", "text/plain", b"hi")) is None
    assert toasts.active()[-1].kind == "error"


def test_client_side_filters(page, store):
    _create(page, "Alpha", genre="Fiction", featured=True)
    _create(page, "Beta", genre="Poetry")

    page.set_genres({"Poetry"})
    assert [b.title for b in page.visible_books()] == ["Beta"]

    page.set_genres(set())
    page.set_featured_filter(["featured"])
    assert [b.title for b in page.visible_books()] == ["Alpha"]
