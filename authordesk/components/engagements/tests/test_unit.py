"""
Engagements component unit tests.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from authordesk.adapters.clock import FrozenClock
from authordesk.adapters.fs.object_store import FileSystemObjectStore
from authordesk.components.engagements import (
    CreateEngagementInput,
    DeleteEngagementInput,
    GetEngagementInput,
    ListEngagementsInput,
    UpdateEngagementInput,
    UploadImagesInput,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_stats,
    run_update,
    run_upload_images,
)
from authordesk.domain.entities import Engagement
from authordesk.domain.uploads import FileUpload
from authordesk.ports.errors import BackendError, StorageError


class MockEngagementRepo:
    def __init__(self) -> None:
        self.items: dict[UUID, Engagement] = {}

    def get_by_id(self, engagement_id: UUID) -> Engagement | None:
        return self.items.get(engagement_id)

    def get_by_slug(self, slug: str) -> Engagement | None:
        return next((e for e in self.items.values() if e.slug == slug), None)

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        return any(e.slug == slug and e.id != exclude_id for e in self.items.values())

    def save(self, engagement: Engagement) -> Engagement:
        self.items[engagement.id] = engagement
        return engagement

    def delete(self, engagement_id: UUID) -> None:
        self.items.pop(engagement_id, None)

    def list(
        self,
        *,
        search=None,
        engagement_type=None,
        status=None,
        featured=None,
        is_virtual=None,
        date_from=None,
        date_to=None,
        sort_by="created_at",
        sort_order="desc",
        limit=12,
        offset=0,
    ):
        items = list(self.items.values())
        if search:
            items = [e for e in items if search.lower() in e.title.lower()]
        if engagement_type:
            items = [e for e in items if e.type == engagement_type]
        if status:
            items = [e for e in items if e.status == status]
        if date_from:
            items = [e for e in items if e.date and e.date >= date_from]
        if date_to:
            items = [e for e in items if e.date and e.date <= date_to]
        return items[offset : offset + limit], len(items)

    def all_for_stats(self) -> list[Engagement]:
        return list(self.items.values())


class FailingStore(FileSystemObjectStore):
    def upload(self, bucket, path, data, content_type, *, upsert=False):
        if path.endswith("broken.png"):
            raise StorageError("disk full")
        return super().upload(bucket, path, data, content_type, upsert=upsert)


@pytest.fixture
def repo() -> MockEngagementRepo:
    return MockEngagementRepo()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def storage(tmp_path) -> FileSystemObjectStore:
    return FileSystemObjectStore(str(tmp_path), "http://cdn.test")


def _png(name: str = "photo.png") -> FileUpload:
    return FileUpload(filename=name, content_type="image/png", data=b"\x89PNG")


def _create(repo, clock, **kwargs) -> Engagement:
    defaults = {"title": "Writing Workshop", "description": "Two days of drafting"}
    defaults.update(kwargs)
    result = run_create(CreateEngagementInput(**defaults), repo=repo, time=clock)
    assert result.success, result.errors
    assert result.engagement is not None
    return result.engagement


class TestValidation:
    def test_required_fields(self, repo, clock) -> None:
        result = run_create(CreateEngagementInput(title="", description=" "), repo=repo, time=clock)
        assert {e.code for e in result.errors} == {"title_required", "description_required"}

    def test_invalid_type_and_status(self, repo, clock) -> None:
        result = run_create(
            CreateEngagementInput(title="T", description="D", type="party", status="maybe"),
            repo=repo,
            time=clock,
        )
        assert {e.field for e in result.errors} == {"type", "status"}

    def test_numeric_bounds(self, repo, clock) -> None:
        result = run_create(
            CreateEngagementInput(title="T", description="D", price=-1, max_attendees=0),
            repo=repo,
            time=clock,
        )
        assert {e.code for e in result.errors} == {"price_invalid", "max_attendees_invalid"}

    def test_form_strings_are_coerced(self, repo, clock) -> None:
        engagement = _create(repo, clock, price="49.5", max_attendees="20", booking_url="")
        assert engagement.price == 49.5
        assert engagement.max_attendees == 20
        assert engagement.booking_url is None

    def test_booking_url_must_be_http(self, repo, clock) -> None:
        result = run_create(
            CreateEngagementInput(title="T", description="D", booking_url="ftp://x"),
            repo=repo,
            time=clock,
        )
        assert result.errors[0].code == "booking_url_invalid"

    def test_too_many_images_rejected_before_upload(self, repo, clock, storage) -> None:
        result = run_create(
            CreateEngagementInput(
                title="T",
                description="D",
                existing_images=[f"http://x/{i}.png" for i in range(9)],
                new_files=[_png("a.png"), _png("b.png")],
            ),
            repo=repo,
            time=clock,
            storage=storage,
        )
        assert result.errors[0].code == "too_many_images"
        assert not storage.exists("engagement-media", "1735732800000-a.png")


class TestCreate:
    def test_slug_generated_and_unique(self, repo, clock) -> None:
        first = _create(repo, clock)
        second = _create(repo, clock)
        assert first.slug == "writing-workshop"
        assert second.slug == "writing-workshop-1"

    def test_uploads_new_files_after_existing(self, repo, clock, storage) -> None:
        result = run_create(
            CreateEngagementInput(
                title="T",
                description="D",
                existing_images=["http://cdn.test/old.png"],
                new_files=[_png("My Photo.png")],
            ),
            repo=repo,
            time=clock,
            storage=storage,
        )
        assert result.success
        assert result.uploaded_count == 1
        assert result.engagement.images == [
            "http://cdn.test/old.png",
            "http://cdn.test/engagement-media/1735732800000-MyPhoto.png",
        ]

    def test_failed_upload_is_skipped(self, repo, clock, tmp_path) -> None:
        storage = FailingStore(str(tmp_path), "http://cdn.test")
        result = run_create(
            CreateEngagementInput(
                title="T", description="D", new_files=[_png("broken.png"), _png("ok.png")]
            ),
            repo=repo,
            time=clock,
            storage=storage,
        )
        assert result.success
        assert result.uploaded_count == 1
        assert len(result.engagement.images) == 1


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, repo, clock) -> None:
        engagement = _create(repo, clock, location="Leeds")
        clock.advance(seconds=5)

        result = run_update(
            UpdateEngagementInput(engagement_id=engagement.id, updates={"status": "ongoing"}),
            repo=repo,
            time=clock,
        )
        assert result.engagement.status == "ongoing"
        assert result.engagement.location == "Leeds"
        assert result.engagement.updated_at > engagement.updated_at

    def test_new_files_are_appended(self, repo, clock, storage) -> None:
        engagement = _create(repo, clock, existing_images=["http://cdn.test/a.png"])
        result = run_update(
            UpdateEngagementInput(
                engagement_id=engagement.id, updates={}, new_files=[_png("b.png")]
            ),
            repo=repo,
            time=clock,
            storage=storage,
        )
        assert result.engagement.images[0] == "http://cdn.test/a.png"
        assert len(result.engagement.images) == 2

    def test_missing_engagement(self, repo, clock) -> None:
        result = run_update(
            UpdateEngagementInput(engagement_id=uuid4(), updates={"title": "X"}),
            repo=repo,
            time=clock,
        )
        assert result.errors[0].code == "not_found"


class TestQueries:
    def test_get_by_slug(self, repo, clock) -> None:
        engagement = _create(repo, clock)
        result = run_get(GetEngagementInput(slug=engagement.slug), repo=repo)
        assert result.engagement.id == engagement.id

    def test_get_requires_a_key(self, repo) -> None:
        result = run_get(GetEngagementInput(), repo=repo)
        assert result.errors[0].code == "invalid_input"

    def test_upcoming_only_filters_past_dates(self, repo, clock) -> None:
        _create(repo, clock, title="Past", date="2024-06-01")
        _create(repo, clock, title="Future", date="2025-06-01T10:00:00Z")

        result = run_list(ListEngagementsInput(upcoming_only=True), repo=repo, time=clock)

        assert [e.title for e in result.items] == ["Future"]
        assert result.items[0].date == datetime(2025, 6, 1, 10, tzinfo=UTC)

    def test_pagination(self, repo, clock) -> None:
        for i in range(5):
            _create(repo, clock, title=f"Session {i}")
        result = run_list(ListEngagementsInput(page=2, limit=2), repo=repo, time=clock)
        assert result.total == 5
        assert result.total_pages == 3
        assert len(result.items) == 2

    def test_stats_include_every_key(self, repo, clock) -> None:
        _create(repo, clock, type="webinar", is_featured=True)
        _create(repo, clock, status="completed")

        stats = run_stats(repo=repo)

        assert stats.total == 2
        assert stats.featured == 1
        assert stats.completed == 1
        assert stats.by_type["webinar"] == 1
        assert stats.by_type["speaking"] == 0
        assert set(stats.by_status) == {"upcoming", "ongoing", "completed", "cancelled"}

    def test_delete(self, repo, clock) -> None:
        engagement = _create(repo, clock)
        assert run_delete(DeleteEngagementInput(engagement_id=engagement.id), repo=repo).success
        assert repo.get_by_id(engagement.id) is None


class TestUploadImages:
    def test_rejects_non_images(self, clock, storage) -> None:
        result = run_upload_images(
            UploadImagesInput(
                files=[FileUpload(filename="a.pdf", content_type="application/pdf", data=b"x")]
            ),
            storage=storage,
            time=clock,
        )
        assert not result.success
        assert result.failures == ["a.pdf: unsupported file type"]


class DownRepo(MockEngagementRepo):
    def get_by_id(self, engagement_id):
        raise BackendError("database is locked")

    def slug_exists(self, slug, exclude_id=None):
        raise BackendError("database is locked")

    def list(self, **kwargs):
        raise BackendError("database is locked")

    def all_for_stats(self):
        raise BackendError("database is locked")


class TestBackendFailures:
    def test_create_reports_error_before_uploading(self, clock, storage, tmp_path) -> None:
        result = run_create(
            CreateEngagementInput(title="T", description="D", new_files=[_png()]),
            repo=DownRepo(),
            time=clock,
            storage=storage,
        )

        assert not result.success
        assert result.errors[0].code == "backend"
        assert [p for p in tmp_path.rglob("*") if p.is_file()] == []

    def test_reads_and_delete_return_error_outputs(self, clock) -> None:
        repo = DownRepo()
        outputs = [
            run_get(GetEngagementInput(engagement_id=uuid4()), repo=repo),
            run_list(ListEngagementsInput(), repo=repo, time=clock),
            run_delete(DeleteEngagementInput(engagement_id=uuid4()), repo=repo),
            run_stats(repo=repo),
        ]
        for output in outputs:
            assert not output.success
            assert output.errors[0].message == "database is locked"
