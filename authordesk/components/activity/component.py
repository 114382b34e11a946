"""
Activity component - application log recording and querying.

Invariants:
- every entry is mirrored to the stdlib logger, persisted or not
- recording never raises; a storage failure is logged and yields None
- entries are append-only; only `run_purge` removes them, and never
  anything younger than the configured minimum retention
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any

from authordesk.domain.entities import LOG_TYPES, LogEntry
from authordesk.domain.values import parse_datetime
from authordesk.ports.errors import BackendError

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

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = ActivityConfig()

_LEVELS = {
    "error": logging.ERROR,
    "success": logging.INFO,
    "user_action": logging.INFO,
    "system": logging.INFO,
}


class ActivityLogger:
    """Records application log entries."""

    def __init__(
        self,
        repo: LogRepoPort,
        time: TimePort,
        config: ActivityConfig = DEFAULT_CONFIG,
    ) -> None:
        self.repo = repo
        self.time = time
        self.config = config

    def _trim_details(self, details: dict[str, Any]) -> dict[str, Any]:
        encoded = json.dumps(details, default=str)
        if len(encoded) <= self.config.max_details_size:
            return details
        return {"_truncated": True, "preview": encoded[: self.config.max_details_size]}

    def record(
        self,
        type: str,
        action: str,
        details: dict[str, Any] | None = None,
        context: UserContext | None = None,
    ) -> LogEntry | None:
        details = details or {}
        context = context or UserContext()
        logger.log(
            _LEVELS.get(type, logging.INFO),
            "[%s] %s %s",
            type,
            action,
            json.dumps(details, default=str),
        )
        if not self.config.enabled:
            return None
        if type not in LOG_TYPES:
            logger.warning("Unknown log type %r for action %s", type, action)
            return None

        entry = LogEntry(
            type=type,  # type: ignore[arg-type]
            action=action,
            details=self._trim_details(details),
            user_id=context.user_id,
            user_email=context.user_email,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            created_at=self.time.now_utc(),
        )
        try:
            return self.repo.save(entry)
        except BackendError as e:
            logger.error("Failed to persist log entry %s: %s", action, e.message)
            return None

    # --- Helpers ---

    def log_user_action(
        self, action: str, details: dict[str, Any] | None = None, context: UserContext | None = None
    ) -> LogEntry | None:
        return self.record("user_action", action, details, context)

    def log_success(
        self, action: str, details: dict[str, Any] | None = None, context: UserContext | None = None
    ) -> LogEntry | None:
        return self.record("success", action, details, context)

    def log_system(self, action: str, details: dict[str, Any] | None = None) -> LogEntry | None:
        return self.record("system", action, details)

    def log_error(
        self,
        action: str,
        error: BaseException | str,
        details: dict[str, Any] | None = None,
        context: UserContext | None = None,
    ) -> LogEntry | None:
        payload = dict(details or {})
        if isinstance(error, BaseException):
            payload["error"] = {"type": type(error).__name__, "message": str(error)}
        else:
            payload["error"] = {"message": error}
        return self.record("error", action, payload, context)

    def log_book_operation(
        self,
        operation: str,
        book_id: str | None,
        title: str | None = None,
        context: UserContext | None = None,
    ) -> LogEntry | None:
        return self.record(
            "user_action",
            f"book_{operation}",
            {"book_id": book_id, "title": title},
            context,
        )

    def log_contact_submission(
        self,
        message_id: str,
        email: str,
        purpose: str,
        attachment_count: int = 0,
        context: UserContext | None = None,
    ) -> LogEntry | None:
        return self.record(
            "success",
            "contact_submission",
            {
                "message_id": message_id,
                "email": email,
                "purpose": purpose,
                "attachment_count": attachment_count,
            },
            context,
        )

    def log_file_upload(
        self,
        file_name: str,
        file_size: int,
        bucket: str,
        success: bool = True,
        context: UserContext | None = None,
    ) -> LogEntry | None:
        return self.record(
            "success" if success else "error",
            "file_upload",
            {"file_name": file_name, "file_size": file_size, "bucket": bucket},
            context,
        )


def _backend_errors(e: BackendError) -> list[ActivityValidationError]:
    return [ActivityValidationError(code=e.code, message=e.message)]


# --- Entry Points ---


def run_query(inp: QueryLogsInput, *, repo: LogRepoPort) -> LogListOutput:
    """Newest first."""
    limit = max(1, inp.limit)
    offset = max(0, inp.offset)
    if inp.type and inp.type not in LOG_TYPES:
        return LogListOutput(
            entries=[],
            total=0,
            limit=limit,
            offset=offset,
            errors=[
                ActivityValidationError(
                    code="type_invalid",
                    message=f"Type must be one of: {', '.join(LOG_TYPES)}",
                    field="type",
                )
            ],
            success=False,
        )
    try:
        date_from = parse_datetime(inp.date_from)
        date_to = parse_datetime(inp.date_to)
    except ValueError as e:
        return LogListOutput(
            entries=[],
            total=0,
            limit=limit,
            offset=offset,
            errors=[ActivityValidationError(code="validation", message=str(e), field="date")],
            success=False,
        )

    try:
        entries, total = repo.list(
            log_type=inp.type or None,
            action=inp.action or None,
            user_email=inp.user_email or None,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )
    except BackendError as e:
        logger.error("Log query failed: %s", e.message)
        return LogListOutput(
            entries=[],
            total=0,
            limit=limit,
            offset=offset,
            errors=_backend_errors(e),
            success=False,
        )
    return LogListOutput(entries=entries, total=total, limit=limit, offset=offset)


def run_stats(*, repo: LogRepoPort) -> LogStatsOutput:
    try:
        counts = repo.count_by_type()
    except BackendError as e:
        logger.error("Log stats failed: %s", e.message)
        return LogStatsOutput(errors=_backend_errors(e), success=False)
    by_type = {t: counts.get(t, 0) for t in LOG_TYPES}
    return LogStatsOutput(total=sum(by_type.values()), by_type=by_type)


def run_purge(
    inp: PurgeLogsInput,
    *,
    repo: LogRepoPort,
    time: TimePort,
    config: ActivityConfig = DEFAULT_CONFIG,
) -> PurgeOutput:
    days = config.default_retention_days if inp.older_than_days is None else inp.older_than_days
    if days < config.min_retention_days:
        return PurgeOutput(
            errors=[
                ActivityValidationError(
                    code="retention_too_short",
                    message=f"Logs must be kept for at least {config.min_retention_days} days",
                    field="older_than_days",
                )
            ],
            success=False,
        )

    cutoff = time.now_utc() - timedelta(days=days)
    try:
        deleted = repo.delete_older_than(cutoff)
    except BackendError as e:
        logger.error("Log purge failed: %s", e.message)
        return PurgeOutput(errors=_backend_errors(e), success=False)
    logger.info("Purged %d log entries older than %s", deleted, cutoff.isoformat())
    return PurgeOutput(deleted=deleted, cutoff=cutoff.isoformat())
