from datetime import timedelta
from uuid import uuid4

import pytest

from authordesk.domain.entities import (
    BlogMedia,
    BlogPost,
    BlogTag,
    Book,
    ContactAttachment,
    ContactMessage,
    Engagement,
    LogEntry,
)
from authordesk.adapters.sqlite.repos import SQLiteBookRepo
from authordesk.ports.errors import BackendError, DuplicateRecordError


def test_book_roundtrip_and_filters(test_ctx, clock):
    repo = test_ctx.book_repo
    older = Book(
        title="Older",
        author="Ann",
        genre="Poetry",
        tags=["verse", "nature"],
        price=12.5,
        created_at=clock.now_utc() - timedelta(days=1),
    )
    newer = Book(title="Newer", author="Bo", genre="Fiction", featured=True)
    repo.save(older)
    repo.save(newer)

    loaded = repo.get_by_id(older.id)
    assert loaded.tags == ["verse", "nature"]
    assert loaded.price == 12.5
    assert loaded.created_at == older.created_at

    items, total = repo.list(limit=10)
    assert total == 2
    assert items[0].id == newer.id

    assert [b.id for b in repo.list(featured=True)[0]] == [newer.id]
    assert [b.id for b in repo.list(search="ann")[0]] == [older.id]
    assert repo.count(featured=True) == 1
    assert repo.distinct_genres() == ["Fiction", "Poetry"]


def test_book_duplicate_title_raises(test_ctx):
    test_ctx.book_repo.save(Book(title="Same", author="A"))
    with pytest.raises(DuplicateRecordError):
        test_ctx.book_repo.save(Book(title="Same", author="B"))


def test_book_save_updates_existing_row(test_ctx):
    book = test_ctx.book_repo.save(Book(title="Before", author="A"))
    test_ctx.book_repo.save(book.model_copy(update={"title": "After"}))

    assert test_ctx.book_repo.get_by_id(book.id).title == "After"
    assert test_ctx.book_repo.count() == 1


def test_post_tags_and_status_filter(test_ctx, clock):
    posts, tags = test_ctx.post_repo, test_ctx.tag_repo
    tag = tags.save(BlogTag(name="Craft", slug="craft"))
    published = posts.save(
        BlogPost(title="Live", slug="live", is_published=True, published_at=clock.now_utc())
    )
    draft = posts.save(BlogPost(title="Draft", slug="draft"))
    posts.set_tags(published.id, [tag.id, tag.id])

    assert [t.slug for t in posts.get_by_id(published.id).tags] == ["craft"]
    assert [p.id for p in posts.list(status="published")[0]] == [published.id]
    assert [p.id for p in posts.list(status="draft")[0]] == [draft.id]
    assert [p.id for p in posts.list(tag_slugs=["craft"])[0]] == [published.id]
    assert posts.slug_exists("live")
    assert not posts.slug_exists("live", exclude_id=published.id)
    assert tags.is_in_use(tag.id)

    posts.delete(published.id)
    assert not tags.is_in_use(tag.id)


def _media(post_id: str, order: int, featured: bool = False) -> BlogMedia:
    return BlogMedia(
        post_id=post_id,
        file_name=f"{order}.png",
        file_path=f"blog-media/images/{post_id}/{order}.png",
        file_url=f"http://test/{order}.png",
        file_type="image",
        mime_type="image/png",
        file_size=10,
        is_featured=featured,
        sort_order=order,
    )


def test_media_ordering_featured_and_reassign(test_ctx):
    repo = test_ctx.media_repo
    temp_id = "temp-1735732800000-abcd1234"
    assert repo.max_sort_order(temp_id) == -1

    second = repo.save(_media(temp_id, 1, featured=True))
    first = repo.save(_media(temp_id, 0, featured=True))
    assert [m.id for m in repo.list_for_post(temp_id)] == [first.id, second.id]
    assert repo.max_sort_order(temp_id) == 1

    repo.clear_featured(temp_id, except_id=first.id)
    assert repo.get_by_id(second.id).is_featured is False
    assert repo.get_by_id(first.id).is_featured is True

    real_id = str(uuid4())
    assert repo.reassign_post(temp_id, real_id) == 2
    assert repo.list_for_post(temp_id) == []
    assert len(repo.list_for_post(real_id)) == 2


def test_engagement_list_filters(test_ctx, clock):
    repo = test_ctx.engagement_repo
    soon = repo.save(
        Engagement(
            title="Soon",
            slug="soon",
            description="d",
            type="webinar",
            images=["https://a/1.jpg"],
            date=clock.now_utc() + timedelta(days=3),
            is_virtual=True,
        )
    )
    repo.save(
        Engagement(
            title="Past",
            slug="past",
            description="d",
            date=clock.now_utc() - timedelta(days=3),
            status="completed",
        )
    )

    assert repo.get_by_slug("soon").images == ["https://a/1.jpg"]
    upcoming, total = repo.list(date_from=clock.now_utc())
    assert total == 1
    assert upcoming[0].id == soon.id
    assert [e.slug for e in repo.list(engagement_type="webinar")[0]] == ["soon"]
    assert [e.slug for e in repo.list(status="completed")[0]] == ["past"]
    assert len(repo.all_for_stats()) == 2


def test_messages_attachments_and_batch_status(test_ctx, clock):
    repo = test_ctx.message_repo
    with_file = repo.save(
        ContactMessage(
            full_name="Ann", email="ann@example.com", purpose="Book Inquiry", message="Hello!"
        )
    )
    plain = repo.save(
        ContactMessage(
            full_name="Bo", email="bo@example.com", purpose="Collaboration", message="Hi!"
        )
    )
    repo.save_attachment(
        ContactAttachment(
            message_id=with_file.id,
            file_name="a.pdf",
            file_path=f"contact-attachments/{with_file.id}/a.pdf",
            file_size=3,
            file_type="application/pdf",
        )
    )

    assert len(repo.get_by_id(with_file.id).attachments) == 1
    assert [m.id for m in repo.list(has_attachments=True)[0]] == [with_file.id]
    assert [m.id for m in repo.list(has_attachments=False)[0]] == [plain.id]
    assert [m.id for m in repo.list(purpose="Collaboration")[0]] == [plain.id]
    assert repo.list(message_ids=[])[1] == 0

    assert repo.update_status_many([with_file.id, plain.id], "read") == 2
    assert repo.count(status="read") == 2

    removed = repo.delete_attachments_for(with_file.id)
    assert [a.file_name for a in removed] == ["a.pdf"]
    repo.delete(with_file.id)
    assert repo.get_by_id(with_file.id) is None


def test_log_repo_counts_and_purge(test_ctx, clock):
    repo = test_ctx.log_repo
    repo.save(
        LogEntry(
            type="system",
            action="old",
            details={"n": 1},
            created_at=clock.now_utc() - timedelta(days=40),
        )
    )
    repo.save(LogEntry(type="error", action="new", created_at=clock.now_utc()))

    assert repo.count_by_type() == {"system": 1, "error": 1}
    entries, total = repo.list(log_type="system")
    assert total == 1
    assert entries[0].details == {"n": 1}

    assert repo.delete_older_than(clock.now_utc() - timedelta(days=30)) == 1
    assert repo.list()[1] == 1


def test_missing_schema_raises_backend_error(tmp_path):
    repo = SQLiteBookRepo(str(tmp_path / "unmigrated.db"))

    with pytest.raises(BackendError) as exc:
        repo.get_by_id(uuid4())
    assert exc.value.code == "backend"
    assert "no such table" in exc.value.message

    with pytest.raises(BackendError):
        repo.save(Book(title="Nowhere", author="A"))


def test_constraint_violation_raises_backend_error(test_ctx):
    orphan = ContactAttachment(
        message_id=uuid4(),
        file_name="a.pdf",
        file_path="contact-attachments/x/a.pdf",
        file_size=1,
        file_type="application/pdf",
    )

    with pytest.raises(BackendError) as exc:
        test_ctx.message_repo.save_attachment(orphan)
    assert exc.value.code == "invalid"
    assert not isinstance(exc.value, DuplicateRecordError)
