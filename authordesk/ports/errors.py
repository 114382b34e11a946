"""
Errors raised by the hosted backend client (database + object storage).

Adapters raise these; components translate them into validation errors
with the same code so callers see one taxonomy.
"""


class BackendError(Exception):
    code = "backend"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class RecordNotFoundError(BackendError):
    code = "not_found"


class DuplicateRecordError(BackendError):
    code = "duplicate"


class StorageError(BackendError):
    code = "storage"
