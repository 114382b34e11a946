"""
Activity component - application logs.
"""

from .component import ActivityLogger, run_purge, run_query, run_stats
from .models import (
    ActivityConfig,
    ActivityValidationError,
    LogListOutput,
    LogStatsOutput,
    PurgeLogsInput,
    PurgeOutput,
    QueryLogsInput,
    UserContext,
)
from .ports import LogRepoPort, TimePort

__all__ = [
    "ActivityLogger",
    "run_purge",
    "run_query",
    "run_stats",
    "ActivityConfig",
    "ActivityValidationError",
    "LogListOutput",
    "LogStatsOutput",
    "PurgeLogsInput",
    "PurgeOutput",
    "QueryLogsInput",
    "UserContext",
    "LogRepoPort",
    "TimePort",
]
