import pytest

from authordesk.adapters.fs.object_store import FileSystemObjectStore
from authordesk.ports.errors import BackendError, StorageError


@pytest.fixture
def store(tmp_path) -> FileSystemObjectStore:
    return FileSystemObjectStore(str(tmp_path / "objects"), "http://cdn.test/")


def test_upload_then_download(store):
    store.upload("public", "covers/a.png", b"png", "image/png")

    assert store.exists("public", "covers/a.png")
    assert store.download("public", "covers/a.png") == b"png"


def test_upload_conflict_without_upsert(store):
    store.upload("public", "a.txt", b"first", "text/plain")

    with pytest.raises(StorageError):
        store.upload("public", "a.txt", b"second", "text/plain")
    assert store.download("public", "a.txt") == b"first"


def test_upsert_overwrites(store):
    store.upload("public", "a.txt", b"first", "text/plain")
    store.upload("public", "a.txt", b"second", "text/plain", upsert=True)

    assert store.download("public", "a.txt") == b"second"


def test_download_missing_is_not_found(store):
    with pytest.raises(StorageError) as exc:
        store.download("public", "missing.txt")
    assert exc.value.code == "not_found"


@pytest.mark.parametrize("path", ["../escape.txt", "nested/../../escape.txt", "/etc/passwd"])
def test_path_cannot_leave_bucket(store, tmp_path, path):
    with pytest.raises(StorageError):
        store.upload("public", path, b"x", "text/plain")
    assert not (tmp_path / "objects" / "escape.txt").exists()
    assert not (tmp_path / "escape.txt").exists()


@pytest.mark.parametrize("bucket", ["..", "../outside", "public/../..", ".", ""])
def test_bucket_cannot_leave_base_path(store, tmp_path, bucket):
    with pytest.raises(StorageError):
        store.upload(bucket, "escape.txt", b"x", "text/plain")
    assert not (tmp_path / "escape.txt").exists()
    assert not (tmp_path / "outside").exists()


def test_storage_errors_are_backend_errors(store):
    with pytest.raises(BackendError):
        store.upload("..", "x.txt", b"x", "text/plain")


def test_remove_ignores_missing_paths(store):
    store.upload("public", "a.txt", b"x", "text/plain")

    store.remove("public", ["a.txt", "never-stored.txt"])

    assert not store.exists("public", "a.txt")


def test_public_url(store):
    assert store.public_url("public", "/covers/a.png") == "http://cdn.test/public/covers/a.png"
