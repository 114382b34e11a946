"""
Engagements component - workshops, webinars and other bookable offerings.
"""

from .component import (
    run_create,
    run_delete,
    run_get,
    run_list,
    run_stats,
    run_update,
    run_upload_images,
    validate_engagement_fields,
)
from .models import (
    CreateEngagementInput,
    DeleteEngagementInput,
    EngagementListOutput,
    EngagementOutput,
    EngagementsConfig,
    EngagementStatsOutput,
    EngagementValidationError,
    GetEngagementInput,
    ListEngagementsInput,
    UpdateEngagementInput,
    UploadImagesInput,
    UploadImagesOutput,
)
from .ports import EngagementRepoPort, ObjectStorePort, TimePort

__all__ = [
    # Entry points
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_stats",
    "run_update",
    "run_upload_images",
    "validate_engagement_fields",
    # Input models
    "CreateEngagementInput",
    "DeleteEngagementInput",
    "GetEngagementInput",
    "ListEngagementsInput",
    "UpdateEngagementInput",
    "UploadImagesInput",
    # Output models
    "EngagementListOutput",
    "EngagementOutput",
    "EngagementStatsOutput",
    "EngagementValidationError",
    "UploadImagesOutput",
    # Config
    "EngagementsConfig",
    # Ports
    "EngagementRepoPort",
    "ObjectStorePort",
    "TimePort",
]
