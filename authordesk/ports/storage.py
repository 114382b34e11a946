from typing import Protocol


class ObjectStorePort(Protocol):
    """Bucketed object storage with public URLs."""

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        *,
        upsert: bool = False,
    ) -> str:
        """Store bytes and return the stored path. Raises StorageError."""
        ...

    def download(self, bucket: str, path: str) -> bytes:
        ...

    def remove(self, bucket: str, paths: list[str]) -> None:
        ...

    def public_url(self, bucket: str, path: str) -> str:
        ...
