from datetime import UTC, datetime, timedelta

from authordesk.console.store import FEATURED, NOT_FEATURED, AdminStore
from authordesk.domain.entities import Book, ContactMessage

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


def _message(name: str, status: str = "unread", days_ago: int = 0, text: str = "Hello there!"):
    return ContactMessage(
        full_name=name,
        email=f"{name.lower()}@example.com",
        purpose="Book Inquiry",
        message=text,
        status=status,
        created_at=NOW - timedelta(days=days_ago),
    )


def _book(title: str, author: str = "Jane Doe", genre: str | None = None, featured=False):
    return Book(title=title, author=author, genre=genre, featured=featured)


def test_unread_count_respects_filters():
    store = AdminStore()
    store.set_messages(
        [
            _message("Alice"),
            _message("Bob", text="About your novel"),
            _message("Carol", status="read"),
        ]
    )
    assert store.unread_count() == 2

    store.set_message_filters(search="novel")
    assert store.unread_count() == 1

    store.set_message_filters(search="", status="read")
    assert store.unread_count() == 0


def test_unread_count_respects_date_range():
    store = AdminStore()
    store.set_messages([_message("Alice", days_ago=10), _message("Bob")])
    store.set_message_filters(date_from=NOW - timedelta(days=1))
    assert store.unread_count() == 1


def test_update_status_also_updates_selected_message():
    store = AdminStore()
    message = _message("Alice")
    store.set_messages([message])
    store.set_selected_message(message)

    store.update_message_status(message.id, "replied")

    assert store.find_message(message.id).status == "replied"
    assert store.selected_message.status == "replied"


def test_mark_all_as_read_and_remove():
    store = AdminStore()
    a, b = _message("Alice"), _message("Bob")
    store.set_messages([a, b])
    store.set_selected_message(b)

    store.mark_all_as_read()
    assert all(m.status == "read" for m in store.messages)

    store.remove_messages([b.id])
    assert [m.id for m in store.messages] == [a.id]
    assert store.selected_message is None


def test_add_book_prepends_and_update_replaces():
    store = AdminStore()
    first, second = _book("First"), _book("Second")
    store.set_books([first])
    store.add_book(second)
    assert [b.title for b in store.books] == ["Second", "First"]

    store.update_book(first.model_copy(update={"title": "First (2nd ed.)"}))
    assert store.books[1].title == "First (2nd ed.)"

    store.remove_book(second.id)
    assert [b.id for b in store.books] == [first.id]


def test_filtered_books_combines_search_genre_and_featured():
    store = AdminStore()
    store.set_books(
        [
            _book("Night Garden", genre="Fiction", featured=True),
            _book("Day Garden", genre="Poetry"),
            _book("Ledger", author="Garden Smith", genre="Fiction"),
        ]
    )

    store.set_book_filters(search="garden")
    assert len(store.filtered_books()) == 3

    store.set_book_filters(genres={"Fiction"})
    assert {b.title for b in store.filtered_books()} == {"Night Garden", "Ledger"}

    store.set_book_filters(featured=[NOT_FEATURED])
    assert [b.title for b in store.filtered_books()] == ["Ledger"]

    store.set_book_filters(featured=[FEATURED, NOT_FEATURED])
    assert len(store.filtered_books()) == 2


def test_toggle_book_featured():
    store = AdminStore()
    book = _book("Toggle")
    store.set_books([book])
    store.toggle_book_featured(book.id)
    assert store.find_book(book.id).featured is True
    store.toggle_book_featured(book.id)
    assert store.find_book(book.id).featured is False
