"""
Blog media component unit tests.

Covers per-file validation, partial batch failures, storage cleanup on
insert failure, featured exclusivity, reorder and temp-id reassignment.
"""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from authordesk.adapters.clock import FrozenClock
from authordesk.adapters.fs.object_store import FileSystemObjectStore
from authordesk.components.media import (
    DeleteMediaInput,
    ListMediaInput,
    MediaConfig,
    MediaFileInput,
    ReassignMediaInput,
    ReorderMediaInput,
    UpdateMediaInput,
    UploadMediaInput,
    classify_media,
    run_delete,
    run_list,
    run_reassign,
    run_reorder,
    run_update_metadata,
    run_upload,
)
from authordesk.domain.entities import BlogMedia
from authordesk.domain.uploads import FileUpload
from authordesk.ports.errors import BackendError, StorageError

# --- Mocks ---


class MockMediaRepo:
    def __init__(self, fail_on: str | None = None) -> None:
        self.media: dict[UUID, BlogMedia] = {}
        self.fail_on = fail_on

    def get_by_id(self, media_id: UUID) -> BlogMedia | None:
        return self.media.get(media_id)

    def save(self, media: BlogMedia) -> BlogMedia:
        if self.fail_on and media.file_name == self.fail_on:
            raise BackendError("insert failed")
        self.media[media.id] = media
        return media

    def delete(self, media_id: UUID) -> None:
        self.media.pop(media_id, None)

    def list_for_post(self, post_id: str) -> list[BlogMedia]:
        items = [m for m in self.media.values() if m.post_id == post_id]
        return sorted(items, key=lambda m: m.sort_order)

    def max_sort_order(self, post_id: str) -> int:
        orders = [m.sort_order for m in self.media.values() if m.post_id == post_id]
        return max(orders) if orders else -1

    def clear_featured(self, post_id: str, except_id: UUID | None = None) -> None:
        for m in list(self.media.values()):
            if m.post_id == post_id and m.id != except_id:
                self.media[m.id] = m.model_copy(update={"is_featured": False})

    def reassign_post(self, from_post_id: str, to_post_id: str) -> int:
        moved = 0
        for m in list(self.media.values()):
            if m.post_id == from_post_id:
                self.media[m.id] = m.model_copy(update={"post_id": to_post_id})
                moved += 1
        return moved


class SequentialTokens:
    def __init__(self) -> None:
        self.n = 0

    def token(self) -> str:
        self.n += 1
        return f"tok{self.n}"


class BrokenStorage(FileSystemObjectStore):
    def upload(self, bucket, path, data, content_type, *, upsert=False):
        raise StorageError("storage offline")


@pytest.fixture
def repo() -> MockMediaRepo:
    return MockMediaRepo()


@pytest.fixture
def storage(tmp_path) -> FileSystemObjectStore:
    return FileSystemObjectStore(str(tmp_path), "http://cdn.test")


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


def _image(name: str = "photo.png", size: int = 10) -> MediaFileInput:
    return MediaFileInput(
        file=FileUpload(filename=name, content_type="image/png", data=b"x" * size)
    )


def _upload(repo, storage, clock, post_id="post-1", files=None):
    return run_upload(
        UploadMediaInput(post_id=post_id, files=files or [_image()]),
        repo=repo,
        storage=storage,
        time=clock,
        tokens=SequentialTokens(),
    )


class TestClassify:
    def test_kinds(self) -> None:
        assert classify_media("image/webp") == "image"
        assert classify_media("video/mp4") == "video"
        assert classify_media("application/pdf") is None


class TestUpload:
    def test_path_layout_and_sort_order(self, repo, storage, clock) -> None:
        result = _upload(repo, storage, clock, files=[_image("a.PNG"), _image("b.png")])

        assert result.success
        millis = int(clock.now_utc().timestamp() * 1000)
        paths = [m.file_path for m in result.uploaded]
        assert paths == [
            f"blog-media/images/post-1/{millis}-tok1.png",
            f"blog-media/images/post-1/{millis}-tok2.png",
        ]
        assert [m.sort_order for m in result.uploaded] == [0, 1]
        assert storage.exists("blog-media", paths[0])
        assert result.message == "Successfully uploaded 2 file(s) with 0 error(s)"

    def test_sort_order_continues_after_existing(self, repo, storage, clock) -> None:
        _upload(repo, storage, clock)
        clock.advance(seconds=1)
        result = _upload(repo, storage, clock)
        assert result.uploaded[0].sort_order == 1

    def test_partial_failure_reports_each_file(self, repo, storage, clock) -> None:
        bad_type = MediaFileInput(
            file=FileUpload(filename="doc.pdf", content_type="application/pdf", data=b"x")
        )
        config = MediaConfig(image_max_bytes=5)

        result = run_upload(
            UploadMediaInput(
                post_id="p", files=[_image("ok.png", 3), bad_type, _image("big.png", 6)]
            ),
            repo=repo,
            storage=storage,
            time=clock,
            config=config,
        )

        assert result.success
        assert len(result.uploaded) == 1
        assert len(result.failures) == 2
        assert result.message == "Successfully uploaded 1 file(s) with 2 error(s)"

    def test_all_failed_is_error(self, repo, tmp_path, clock) -> None:
        storage = BrokenStorage(str(tmp_path), "http://cdn.test")

        result = _upload(repo, storage, clock)

        assert not result.success
        assert result.errors[0].code == "upload_failed"
        assert result.failures == ["Failed to upload photo.png"]

    def test_insert_failure_removes_stored_object(self, storage, clock) -> None:
        repo = MockMediaRepo(fail_on="photo.png")

        result = _upload(repo, storage, clock)

        assert not result.success
        assert result.failures == ["Failed to save metadata for photo.png"]
        millis = int(clock.now_utc().timestamp() * 1000)
        assert not storage.exists("blog-media", f"blog-media/images/post-1/{millis}-tok1.png")

    def test_requires_files(self, repo, storage, clock) -> None:
        result = run_upload(
            UploadMediaInput(post_id="p", files=[]), repo=repo, storage=storage, time=clock
        )
        assert result.errors[0].code == "invalid_input"


class TestMetadata:
    def test_featuring_one_unfeatures_siblings(self, repo, storage, clock) -> None:
        files = [_image("a.png"), _image("b.png")]
        first, second = _upload(repo, storage, clock, files=files).uploaded

        run_update_metadata(
            UpdateMediaInput(media_id=first.id, is_featured=True), repo=repo, time=clock
        )
        run_update_metadata(
            UpdateMediaInput(media_id=second.id, is_featured=True), repo=repo, time=clock
        )

        assert repo.media[first.id].is_featured is False
        assert repo.media[second.id].is_featured is True

    def test_alt_text_and_caption(self, repo, storage, clock) -> None:
        media = _upload(repo, storage, clock).uploaded[0]
        result = run_update_metadata(
            UpdateMediaInput(media_id=media.id, alt_text="A desk", caption="Morning"),
            repo=repo,
            time=clock,
        )
        assert (result.media.alt_text, result.media.caption) == ("A desk", "Morning")

    def test_missing_media(self, repo, clock) -> None:
        result = run_update_metadata(UpdateMediaInput(media_id=uuid4()), repo=repo, time=clock)
        assert result.errors[0].code == "not_found"


class TestDeleteReorderReassign:
    def test_delete_removes_row_and_file(self, repo, storage, clock) -> None:
        media = _upload(repo, storage, clock).uploaded[0]

        result = run_delete(DeleteMediaInput(media.id), repo=repo, storage=storage)

        assert result.success
        assert media.id not in repo.media
        assert not storage.exists("blog-media", media.file_path)

    def test_delete_survives_storage_failure(self, repo, storage, clock) -> None:
        media = _upload(repo, storage, clock).uploaded[0]

        class FailingRemove:
            def remove(self, bucket, paths):
                raise StorageError("nope")

        result = run_delete(DeleteMediaInput(media.id), repo=repo, storage=FailingRemove())

        assert result.success
        assert media.id not in repo.media

    def test_reorder_ignores_foreign_ids(self, repo, storage, clock) -> None:
        a, b, c = _upload(
            repo, storage, clock, files=[_image("a.png"), _image("b.png"), _image("c.png")]
        ).uploaded
        foreign = _upload(repo, storage, clock, post_id="other").uploaded[0]

        result = run_reorder(
            ReorderMediaInput(post_id="post-1", media_ids=[c.id, foreign.id, a.id, b.id]),
            repo=repo,
            time=clock,
        )

        assert [m.file_name for m in result.items] == ["c.png", "a.png", "b.png"]
        assert repo.media[foreign.id].sort_order == 0

    def test_reassign_moves_temp_media(self, repo, storage, clock) -> None:
        files = [_image("a.png"), _image("b.png")]
        _upload(repo, storage, clock, post_id="temp-1-abc", files=files)
        real_id = str(uuid4())

        result = run_reassign(
            ReassignMediaInput(from_post_id="temp-1-abc", to_post_id=real_id), repo=repo
        )

        assert result.moved == 2
        assert len(repo.list_for_post(real_id)) == 2
        assert repo.list_for_post("temp-1-abc") == []

    def test_reassign_same_id_is_noop(self, repo) -> None:
        result = run_reassign(ReassignMediaInput(from_post_id="x", to_post_id="x"), repo=repo)
        assert result.success and result.moved == 0


class DownRepo(MockMediaRepo):
    def get_by_id(self, media_id):
        raise BackendError("database is locked")

    def list_for_post(self, post_id):
        raise BackendError("database is locked")

    def max_sort_order(self, post_id):
        raise BackendError("database is locked")

    def reassign_post(self, from_post_id, to_post_id):
        raise BackendError("database is locked")


class TestBackendFailures:
    def test_upload_reports_error_and_stores_nothing(self, storage, clock, tmp_path) -> None:
        result = _upload(DownRepo(), storage, clock)

        assert not result.success
        assert result.errors[0].code == "backend"
        assert [p for p in tmp_path.rglob("*") if p.is_file()] == []

    def test_every_entry_point_returns_an_error_output(self, clock) -> None:
        repo = DownRepo()
        outputs = [
            run_list(ListMediaInput(post_id="post-1"), repo=repo),
            run_update_metadata(
                UpdateMediaInput(media_id=uuid4(), alt_text="x"), repo=repo, time=clock
            ),
            run_reorder(
                ReorderMediaInput(post_id="post-1", media_ids=[uuid4()]), repo=repo, time=clock
            ),
            run_reassign(ReassignMediaInput(from_post_id="temp-1", to_post_id="p"), repo=repo),
        ]
        for output in outputs:
            assert not output.success
            assert output.errors[0].message == "database is locked"
