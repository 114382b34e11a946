"""
Activity component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from authordesk.domain.entities import LogEntry


@dataclass(frozen=True)
class ActivityValidationError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ActivityConfig:
    """Application log configuration."""

    enabled: bool = True
    min_retention_days: int = 7
    default_retention_days: int = 30
    max_details_size: int = 10000  # serialised JSON bytes


@dataclass(frozen=True)
class UserContext:
    """Who triggered an event, as far as the caller knows."""

    user_id: str | None = None
    user_email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


# --- Inputs ---


@dataclass(frozen=True)
class QueryLogsInput:
    type: str | None = None
    action: str | None = None
    user_email: str | None = None
    date_from: Any = None
    date_to: Any = None
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True)
class PurgeLogsInput:
    older_than_days: int | None = None


# --- Outputs ---


@dataclass(frozen=True)
class LogListOutput:
    entries: list[LogEntry]
    total: int
    limit: int
    offset: int
    errors: list[ActivityValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class LogStatsOutput:
    total: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    errors: list[ActivityValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class PurgeOutput:
    deleted: int = 0
    cutoff: str | None = None
    errors: list[ActivityValidationError] = field(default_factory=list)
    success: bool = True
