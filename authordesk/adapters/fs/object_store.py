import logging
import os
from pathlib import Path

from authordesk.ports.errors import StorageError

logger = logging.getLogger(__name__)


class FileSystemObjectStore:
    """
    Bucketed object store on the local filesystem.

    Layout: <base_path>/<bucket>/<path>. Public URLs are
    <public_base_url>/<bucket>/<path>.
    """

    def __init__(self, base_path: str, public_base_url: str):
        self.base_path = Path(base_path).resolve()
        self.public_base_url = public_base_url.rstrip("/")
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, bucket: str, path: str) -> Path:
        root = (self.base_path / bucket).resolve()
        # A bucket is exactly one directory below base_path
        if root.parent != self.base_path:
            raise StorageError(f"Invalid bucket name: {bucket!r}")
        target = (root / path).resolve()
        if root != target and root not in target.parents:
            raise StorageError(f"Path traversal attempt detected: {bucket}/{path}")
        return target

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        *,
        upsert: bool = False,
    ) -> str:
        target = self._safe_path(bucket, path)
        if target.exists() and not upsert:
            raise StorageError(f"Object already exists: {bucket}/{path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Upload failed for {bucket}/{path}: {e}") from e
        logger.debug("Stored %s/%s (%s, %d bytes)", bucket, path, content_type, len(data))
        return path

    def download(self, bucket: str, path: str) -> bytes:
        target = self._safe_path(bucket, path)
        if not target.exists():
            raise StorageError(f"Object not found: {bucket}/{path}", code="not_found")
        with open(target, "rb") as f:
            return f.read()

    def remove(self, bucket: str, paths: list[str]) -> None:
        for path in paths:
            target = self._safe_path(bucket, path)
            if target.exists():
                try:
                    os.remove(target)
                except OSError as e:
                    raise StorageError(f"Remove failed for {bucket}/{path}: {e}") from e

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/{bucket}/{path.lstrip('/')}"

    def exists(self, bucket: str, path: str) -> bool:
        return self._safe_path(bucket, path).exists()
