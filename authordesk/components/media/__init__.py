"""
Blog media component - gallery uploads for posts.
"""

from .component import (
    classify_media,
    run_delete,
    run_list,
    run_reassign,
    run_reorder,
    run_update_metadata,
    run_upload,
    validate_media_file,
)
from .models import (
    DeleteMediaInput,
    ListMediaInput,
    MediaConfig,
    MediaFileInput,
    MediaListOutput,
    MediaOutput,
    MediaValidationError,
    ReassignMediaInput,
    ReassignMediaOutput,
    ReorderMediaInput,
    UpdateMediaInput,
    UploadMediaInput,
    UploadMediaOutput,
)
from .ports import BlogMediaRepoPort, ObjectStorePort, TimePort, TokenPort

__all__ = [
    "classify_media",
    "run_delete",
    "run_list",
    "run_reassign",
    "run_reorder",
    "run_update_metadata",
    "run_upload",
    "validate_media_file",
    "DeleteMediaInput",
    "ListMediaInput",
    "MediaConfig",
    "MediaFileInput",
    "MediaListOutput",
    "MediaOutput",
    "MediaValidationError",
    "ReassignMediaInput",
    "ReassignMediaOutput",
    "ReorderMediaInput",
    "UpdateMediaInput",
    "UploadMediaInput",
    "UploadMediaOutput",
    "BlogMediaRepoPort",
    "ObjectStorePort",
    "TimePort",
    "TokenPort",
]
