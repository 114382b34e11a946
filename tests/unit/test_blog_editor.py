"""
Blog post editor: dirty tracking, debounced slugs, and the
upload / persist / reassign save sequence.
"""

from datetime import UTC, datetime

import pytest

from authordesk.console.pages.blog import DRAFT_PLACEHOLDER, BlogPostEditor
from authordesk.domain.uploads import FileUpload
from authordesk.ports.errors import BackendError

CONTENT = "Some thoughtful words about writing every single day."


@pytest.fixture
def editor(gateway, store, toasts, clock):
    return BlogPostEditor(gateway, store, toasts, clock, debounce_ms=300)


def _png(name: str = "hero.png") -> FileUpload:
    return FileUpload(name, "image/png", b"\x89PNG hero")


def _existing_post(gateway, **extra):
    return gateway.create_post(
        title="Existing Post", content=CONTENT, is_published=True, **extra
    )


# --- Opening and change tracking ---


def test_new_post_gets_temp_id(editor):
    editor.open()
    assert editor.is_open
    assert editor.is_new
    assert editor.current_post_id.startswith("temp-1735732800000-")


def test_new_post_has_changes_once_titled(editor):
    editor.open()
    assert not editor.has_changes()
    editor.on_title_change("Hello")
    assert editor.has_changes()


def test_new_post_pending_media_counts_as_change(editor):
    editor.open()
    assert editor.select_featured_media(_png())
    assert editor.has_changes()


def test_existing_post_tracks_dirty_fields(editor, gateway):
    post = _existing_post(gateway)
    assert editor.open(post.id)
    assert not editor.has_changes()

    editor.on_content_change(CONTENT + " More.")
    assert editor.has_changes()

    editor.on_content_change(CONTENT)
    assert not editor.has_changes()


def test_open_missing_post_shows_error(editor, toasts):
    from uuid import uuid4

    assert editor.open(uuid4()) is False
    assert not editor.is_open
    assert toasts.active()[-1].kind == "error"


def test_slug_applied_after_debounce(editor, clock):
    editor.open()
    editor.on_title_change("My First")
    clock.advance(milliseconds=100)
    editor.on_title_change("My First Post!")
    assert editor.tick() is None

    clock.advance(milliseconds=300)
    assert editor.tick() == "my-first-post"
    assert editor.form.get("slug") == "my-first-post"


def test_content_change_updates_reading_time(editor):
    editor.open()
    editor.on_content_change("word " * 401)
    assert editor.form.get("reading_time") == 3


def test_can_publish_requires_title_and_content(editor):
    editor.open()
    editor.on_title_change("Title")
    editor.on_content_change("too short")
    assert not editor.can_publish()
    editor.on_content_change("long enough now")
    assert editor.can_publish()


# --- Featured media selection ---


def test_select_featured_media_rejects_unsupported_type(editor, toasts):
    editor.open()
    assert not editor.select_featured_media(FileUpload("doc.pdf", "application/pdf", b"%PDF"))
    assert editor.pending_media is None
    assert "unsupported file type" in toasts.messages("error")[-1]


def test_select_featured_media_enforces_image_limit(editor, toasts):
    editor.open()
    big = FileUpload("big.png", "image/png", b"\0" * (10 * 1024 * 1024 + 1))
    assert not editor.select_featured_media(big)
    assert "10MB image limit" in toasts.messages("error")[-1]


# --- Saving ---


def test_publish_new_post_with_featured_media(editor, gateway, store, toasts, test_ctx):
    editor.open()
    temp_id = editor.current_post_id
    editor.on_title_change("Launch Day")
    editor.on_content_change(CONTENT)
    editor.select_featured_media(_png())

    post = editor.publish()

    assert post is not None
    assert post.is_published
    assert post.published_at == datetime(2025, 1, 1, tzinfo=UTC)
    assert post.featured_image.startswith("http://test/storage/blog-media/blog-media/images/")
    assert post.featured_media_type == "image"

    media = gateway.list_media(str(post.id))
    assert len(media) == 1
    assert media[0].is_featured
    assert gateway.list_media(temp_id) == []

    assert [p.id for p in store.blog_posts] == [post.id]
    assert not editor.is_open
    assert editor.form.values()["title"] == ""
    assert toasts.messages() == [
        "Uploading image/video...",
        "Creating blog post...",
        "Image uploaded successfully!",
        "Post published successfully!",
    ]


def test_publish_uses_form_date(editor):
    editor.open()
    editor.on_title_change("Backdated")
    editor.on_content_change(CONTENT)
    editor.form.set_value("published_at", "2024-06-01")

    post = editor.publish()
    assert post.published_at == datetime(2024, 6, 1, tzinfo=UTC)


def test_publish_blocked_without_content(editor, toasts, gateway):
    editor.open()
    editor.on_title_change("Empty")
    assert editor.publish() is None
    assert editor.is_open
    assert gateway.list_posts().total == 0
    assert toasts.messages("error")


def test_save_draft_defaults_content(editor):
    editor.open()
    editor.on_title_change("Rough Idea")

    post = editor.save_draft()

    assert post.is_published is False
    assert post.published_at is None
    assert post.content == DRAFT_PLACEHOLDER


def test_save_draft_of_published_post_clears_publish_date(editor, gateway, toasts):
    post = _existing_post(gateway)
    editor.open(post.id)

    saved = editor.save_draft()

    assert saved.is_published is False
    assert saved.published_at is None
    assert toasts.messages()[-2:] == ["Saving draft...", "Draft updated successfully!"]


def test_update_existing_post(editor, gateway, toasts):
    post = _existing_post(gateway, tags=["craft"])
    editor.open(post.id)
    editor.on_title_change("Existing Post, Revised")

    saved = editor.publish()

    assert saved.id == post.id
    assert saved.title == "Existing Post, Revised"
    assert [t.name for t in saved.tags] == ["craft"]
    assert saved.published_at == post.published_at
    assert toasts.messages()[-2:] == ["Updating blog post...", "Post updated successfully!"]


def test_failed_persist_removes_uploaded_media(editor, gateway, toasts, test_ctx):
    editor.open()
    temp_id = editor.current_post_id
    editor.on_title_change("x" * 250)
    editor.select_featured_media(_png())

    assert editor.save_draft() is None

    assert gateway.list_media(temp_id) == []
    assert list((test_ctx.storage.base_path / "blog-media").rglob("*.png")) == []
    assert editor.is_open
    assert editor.pending_media is not None
    active = toasts.active()
    assert len(active) == 1
    assert active[0].kind == "error"
    assert "Title must be at most" in active[0].message


# --- Gallery ---


def test_gallery_uploads_move_with_new_post(editor, gateway):
    editor.open()
    temp_id = editor.current_post_id
    uploaded = editor.upload_gallery([_png("a.png"), _png("b.png")])
    assert len(uploaded) == 2
    assert [m.sort_order for m in editor.gallery] == [0, 1]

    editor.on_title_change("With Gallery")
    editor.on_content_change(CONTENT)
    post = editor.publish()

    assert len(gateway.list_media(str(post.id))) == 2
    assert gateway.list_media(temp_id) == []


def test_reorder_gallery(editor, gateway):
    editor.open()
    first, second = editor.upload_gallery([_png("a.png"), _png("b.png")])

    assert editor.reorder_gallery([second.id, first.id])

    assert [m.id for m in editor.gallery] == [second.id, first.id]
    stored = gateway.list_media(editor.current_post_id)
    assert [m.id for m in stored] == [second.id, first.id]


def test_reorder_gallery_reverts_on_backend_failure(editor, toasts, test_ctx, monkeypatch):
    editor.open()
    first, second = editor.upload_gallery([_png("a.png"), _png("b.png")])

    def down(media):
        raise BackendError("db down")

    monkeypatch.setattr(test_ctx.media_repo, "save", down)

    assert editor.reorder_gallery([second.id, first.id]) is False
    assert [m.id for m in editor.gallery] == [first.id, second.id]
    assert toasts.messages("error")[-1] == "Failed to reorder media"


def test_retry_after_failed_media_move_updates_same_post(
    editor, gateway, toasts, test_ctx, monkeypatch
):
    editor.open()
    temp_id = editor.current_post_id
    editor.upload_gallery([_png("a.png")])
    editor.on_title_change("Second Try")
    editor.on_content_change(CONTENT)

    original = test_ctx.media_repo.reassign_post
    failures = []

    def flaky(from_post_id, to_post_id):
        if not failures:
            failures.append(from_post_id)
            raise BackendError("db down")
        return original(from_post_id, to_post_id)

    monkeypatch.setattr(test_ctx.media_repo, "reassign_post", flaky)

    assert editor.publish() is None
    assert editor.is_open
    assert toasts.active()[-1].kind == "error"
    saved_id = editor.post.id
    assert len(gateway.list_media(temp_id)) == 1

    post = editor.publish()

    assert post is not None
    assert post.id == saved_id
    assert gateway.list_posts().total == 1
    assert len(gateway.list_media(str(post.id))) == 1
    assert gateway.list_media(temp_id) == []
    assert toasts.messages()[-1] == "Post updated successfully!"
