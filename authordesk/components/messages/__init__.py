"""
Messages component - contact submissions and the admin inbox.
"""

from .component import (
    CSV_HEADERS,
    run_batch_delete,
    run_batch_update_status,
    run_export,
    run_get,
    run_list,
    run_search,
    run_stats,
    run_submit,
    run_update,
    validate_contact_submission,
)
from .models import (
    CONTACT_PURPOSES,
    BatchDeleteInput,
    BatchOutput,
    BatchStatusInput,
    ExportMessagesInput,
    ExportOutput,
    GetMessageInput,
    ListMessagesInput,
    MessageListOutput,
    MessageOutput,
    MessagesConfig,
    MessageStatsOutput,
    MessageValidationError,
    SearchMessagesInput,
    SubmitMessageInput,
    SubmitMessageOutput,
    UpdateMessageInput,
)
from .ports import MessageRepoPort, ObjectStorePort, TimePort

__all__ = [
    # Entry points
    "run_batch_delete",
    "run_batch_update_status",
    "run_export",
    "run_get",
    "run_list",
    "run_search",
    "run_stats",
    "run_submit",
    "run_update",
    "validate_contact_submission",
    # Constants
    "CONTACT_PURPOSES",
    "CSV_HEADERS",
    # Input models
    "BatchDeleteInput",
    "BatchStatusInput",
    "ExportMessagesInput",
    "GetMessageInput",
    "ListMessagesInput",
    "SearchMessagesInput",
    "SubmitMessageInput",
    "UpdateMessageInput",
    # Output models
    "BatchOutput",
    "ExportOutput",
    "MessageListOutput",
    "MessageOutput",
    "MessageStatsOutput",
    "MessageValidationError",
    "SubmitMessageOutput",
    # Config
    "MessagesConfig",
    # Ports
    "MessageRepoPort",
    "ObjectStorePort",
    "TimePort",
]
