"""
Books component - catalogue CRUD, stats and cover uploads.
"""

from .component import (
    resolve_cover_image,
    run,
    run_create,
    run_delete,
    run_genres,
    run_get,
    run_list,
    run_stats,
    run_update,
    run_upload_cover,
    validate_book_fields,
)
from .models import (
    BookListOutput,
    BookOutput,
    BooksConfig,
    BookStatsOutput,
    BookValidationError,
    CoverUploadOutput,
    CreateBookInput,
    DeleteBookInput,
    GenresOutput,
    GetBookInput,
    ListBooksInput,
    UpdateBookInput,
    UploadCoverInput,
)
from .ports import BookRepoPort, ObjectStorePort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_genres",
    "run_get",
    "run_list",
    "run_stats",
    "run_update",
    "run_upload_cover",
    # Helpers
    "resolve_cover_image",
    "validate_book_fields",
    # Input models
    "CreateBookInput",
    "DeleteBookInput",
    "GetBookInput",
    "ListBooksInput",
    "UpdateBookInput",
    "UploadCoverInput",
    # Output models
    "BookListOutput",
    "BookOutput",
    "BookStatsOutput",
    "BookValidationError",
    "CoverUploadOutput",
    "GenresOutput",
    # Config
    "BooksConfig",
    # Ports
    "BookRepoPort",
    "ObjectStorePort",
    "TimePort",
]
