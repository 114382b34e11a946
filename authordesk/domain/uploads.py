from dataclasses import dataclass


@dataclass(frozen=True)
class FileUpload:
    """An uploaded file held in memory before it is sent to object storage."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)
