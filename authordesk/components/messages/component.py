"""
Messages component - the contact inbox.

Invariants:
- new submissions are stored as `unread`
- status is one of MESSAGE_STATUSES
- the message row is written before any attachment; an attachment that
  fails to upload is reported but never rolls the message back
- batch delete removes attachments (rows, then objects) before messages
- export with explicit ids ignores every filter
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
from typing import Any
from uuid import uuid4

from authordesk.domain.entities import MESSAGE_STATUSES, ContactAttachment, ContactMessage
from authordesk.domain.values import is_valid_email, parse_datetime, sanitize_filename
from authordesk.ports.errors import BackendError

from .models import (
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

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = MessagesConfig()

_EDITABLE_FIELDS = {"full_name", "email", "purpose", "message", "status"}

CSV_HEADERS = [
    "ID",
    "Full Name",
    "Email",
    "Purpose",
    "Message",
    "Status",
    "Created At",
    "Attachment Count",
]


# --- Validation ---


def validate_contact_submission(
    inp: SubmitMessageInput,
    config: MessagesConfig = DEFAULT_CONFIG,
) -> list[MessageValidationError]:
    errors: list[MessageValidationError] = []

    name = inp.full_name.strip()
    if not (config.name_min_length <= len(name) <= config.name_max_length):
        errors.append(
            MessageValidationError(
                code="full_name_invalid",
                message=(
                    f"Full name must be between {config.name_min_length} and "
                    f"{config.name_max_length} characters"
                ),
                field="full_name",
            )
        )

    email = inp.email.strip()
    if not is_valid_email(email) or len(email) > config.email_max_length:
        errors.append(
            MessageValidationError(
                code="email_invalid",
                message="Please enter a valid email address",
                field="email",
            )
        )

    if inp.purpose not in config.purposes:
        errors.append(
            MessageValidationError(
                code="purpose_invalid",
                message="Please select a valid purpose",
                field="purpose",
            )
        )

    body = inp.message.strip()
    if not (config.message_min_length <= len(body) <= config.message_max_length):
        errors.append(
            MessageValidationError(
                code="message_invalid",
                message=(
                    f"Message must be between {config.message_min_length} and "
                    f"{config.message_max_length} characters"
                ),
                field="message",
            )
        )

    errors.extend(_validate_attachments(inp, config))
    return errors


def _validate_attachments(
    inp: SubmitMessageInput, config: MessagesConfig
) -> list[MessageValidationError]:
    errors: list[MessageValidationError] = []
    if len(inp.attachments) > config.max_files:
        errors.append(
            MessageValidationError(
                code="too_many_files",
                message=f"Maximum {config.max_files} files allowed",
                field="attachments",
            )
        )

    total = 0
    for upload in inp.attachments:
        total += upload.size
        if upload.content_type not in config.attachment_types:
            errors.append(
                MessageValidationError(
                    code="file_type",
                    message=f"{upload.filename}: file type not allowed",
                    field="attachments",
                )
            )
        if upload.size > config.max_file_bytes:
            errors.append(
                MessageValidationError(
                    code="file_size",
                    message=(
                        f"{upload.filename}: file exceeds "
                        f"{config.max_file_bytes // (1024 * 1024)}MB"
                    ),
                    field="attachments",
                )
            )

    if total > config.max_total_bytes:
        errors.append(
            MessageValidationError(
                code="total_size",
                message=(
                    f"Total attachment size exceeds "
                    f"{config.max_total_bytes // (1024 * 1024)}MB"
                ),
                field="attachments",
            )
        )
    return errors


def _not_found(message_id: object) -> list[MessageValidationError]:
    return [MessageValidationError(code="not_found", message=f"Message {message_id} not found")]


def _backend_errors(e: BackendError) -> list[MessageValidationError]:
    return [MessageValidationError(code=e.code, message=e.message)]


def _invalid_status(status: str) -> MessageValidationError:
    return MessageValidationError(
        code="status_invalid",
        message=f"Status must be one of: {', '.join(MESSAGE_STATUSES)}",
        field="status",
    )


def attachment_path(message_id: object, millis: int, index: int, filename: str) -> str:
    """Object path of the index-th attachment of a message."""
    return f"contact-attachments/{message_id}/{millis}-{index}-{sanitize_filename(filename)}"


# --- Submission ---


def run_submit(
    inp: SubmitMessageInput,
    *,
    repo: MessageRepoPort,
    storage: ObjectStorePort,
    time: TimePort,
    config: MessagesConfig = DEFAULT_CONFIG,
) -> SubmitMessageOutput:
    """
    Store a contact form submission and its attachments.

    Attachments are stored at
    contact-attachments/<message_id>/<millis>-<index>-<name>, so files with
    the same name in one submission never overwrite each other. When the
    attachment row cannot be written the uploaded object is removed again.
    """
    errors = validate_contact_submission(inp, config)
    if errors:
        return SubmitMessageOutput(errors=errors, success=False)

    message = ContactMessage(
        id=uuid4(),
        full_name=inp.full_name.strip(),
        email=inp.email.strip().lower(),
        purpose=inp.purpose,
        message=inp.message.strip(),
        status="unread",
        created_at=time.now_utc(),
    )
    try:
        repo.save(message)
    except BackendError as e:
        logger.error("Failed to store contact message: %s", e.message)
        return SubmitMessageOutput(
            errors=[
                MessageValidationError(code="save_failed", message="Failed to save message")
            ],
            success=False,
        )

    stored: list[ContactAttachment] = []
    failures: list[str] = []
    for index, upload in enumerate(inp.attachments):
        millis = int(time.now_utc().timestamp() * 1000)
        path = attachment_path(message.id, millis, index, upload.filename)
        try:
            storage.upload(config.bucket, path, upload.data, upload.content_type)
        except BackendError as e:
            logger.error("Attachment %s failed for message %s: %s", upload.filename, message.id, e)
            failures.append(upload.filename)
            continue

        try:
            attachment = repo.save_attachment(
                ContactAttachment(
                    message_id=message.id,
                    file_name=upload.filename,
                    file_path=path,
                    file_size=upload.size,
                    file_type=upload.content_type,
                    created_at=time.now_utc(),
                )
            )
        except BackendError as e:
            logger.error("Attachment row for %s failed: %s", upload.filename, e.message)
            try:
                storage.remove(config.bucket, [path])
            except BackendError as cleanup_error:
                logger.warning("Orphaned attachment object %s: %s", path, cleanup_error)
            failures.append(upload.filename)
            continue
        stored.append(attachment)

    logger.info(
        "Contact message %s stored with %d attachment(s), %d failed",
        message.id,
        len(stored),
        len(failures),
    )
    return SubmitMessageOutput(
        message=message.model_copy(update={"attachments": stored}),
        attachment_failures=failures,
    )


# --- Inbox ---


def _list_output(
    items: list[ContactMessage], total: int, page: int, limit: int
) -> MessageListOutput:
    return MessageListOutput(
        items=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0,
    )


def _failed_list(
    errors: list[MessageValidationError], page: int, limit: int
) -> MessageListOutput:
    return MessageListOutput(
        items=[],
        total=0,
        page=page,
        limit=limit,
        total_pages=0,
        errors=errors,
        success=False,
    )


def _date_errors(e: ValueError) -> list[MessageValidationError]:
    return [MessageValidationError(code="validation", message=str(e), field="date")]


def run_list(inp: ListMessagesInput, *, repo: MessageRepoPort) -> MessageListOutput:
    page = max(1, inp.page)
    limit = max(1, inp.limit)
    try:
        date_from = parse_datetime(inp.date_from)
        date_to = parse_datetime(inp.date_to)
    except ValueError as e:
        return _failed_list(_date_errors(e), page, limit)

    try:
        items, total = repo.list(
            status=None if inp.status in (None, "", "all") else inp.status,
            purpose=None if inp.purpose in (None, "", "all") else inp.purpose,
            search=inp.search,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=(page - 1) * limit,
        )
    except BackendError as e:
        logger.error("Message list failed: %s", e.message)
        return _failed_list(_backend_errors(e), page, limit)
    return _list_output(items, total, page, limit)


def run_search(inp: SearchMessagesInput, *, repo: MessageRepoPort) -> MessageListOutput:
    """Full-text search over name, email, message and purpose."""
    page = max(1, inp.page)
    limit = max(1, inp.limit)
    try:
        date_from = parse_datetime(inp.date_from)
        date_to = parse_datetime(inp.date_to)
    except ValueError as e:
        return _failed_list(_date_errors(e), page, limit)

    try:
        items, total = repo.list(
            status=None if inp.status in (None, "", "all") else inp.status,
            purpose=None if inp.purpose in (None, "", "all") else inp.purpose,
            search=inp.query.strip() or None,
            date_from=date_from,
            date_to=date_to,
            has_attachments=inp.has_attachments,
            sort_by=inp.sort_by,
            sort_order=inp.sort_order,
            limit=limit,
            offset=(page - 1) * limit,
        )
    except BackendError as e:
        logger.error("Message search failed: %s", e.message)
        return _failed_list(_backend_errors(e), page, limit)
    return _list_output(items, total, page, limit)


def run_get(inp: GetMessageInput, *, repo: MessageRepoPort) -> MessageOutput:
    try:
        message = repo.get_by_id(inp.message_id)
    except BackendError as e:
        logger.error("Message lookup failed for %s: %s", inp.message_id, e.message)
        return MessageOutput(errors=_backend_errors(e), success=False)
    if message is None:
        return MessageOutput(errors=_not_found(inp.message_id), success=False)
    return MessageOutput(message=message)


def run_update(inp: UpdateMessageInput, *, repo: MessageRepoPort) -> MessageOutput:
    try:
        message = repo.get_by_id(inp.message_id)
    except BackendError as e:
        logger.error("Message lookup failed for %s: %s", inp.message_id, e.message)
        return MessageOutput(errors=_backend_errors(e), success=False)
    if message is None:
        return MessageOutput(errors=_not_found(inp.message_id), success=False)

    updates = {k: v for k, v in inp.updates.items() if k in _EDITABLE_FIELDS}
    if "status" in updates and updates["status"] not in MESSAGE_STATUSES:
        return MessageOutput(
            message=message, errors=[_invalid_status(updates["status"])], success=False
        )

    updated = message.model_copy(update=updates)
    try:
        repo.save(updated)
    except BackendError as e:
        logger.error("Message update failed for %s: %s", inp.message_id, e.message)
        return MessageOutput(message=message, errors=_backend_errors(e), success=False)
    return MessageOutput(message=updated)


def run_batch_update_status(inp: BatchStatusInput, *, repo: MessageRepoPort) -> BatchOutput:
    if not inp.message_ids:
        return BatchOutput(
            errors=[
                MessageValidationError(code="invalid_input", message="No messages selected")
            ],
            success=False,
        )
    if inp.status not in MESSAGE_STATUSES:
        return BatchOutput(errors=[_invalid_status(inp.status)], success=False)

    try:
        affected = repo.update_status_many(list(inp.message_ids), inp.status)
    except BackendError as e:
        logger.error("Batch status update failed: %s", e.message)
        return BatchOutput(errors=_backend_errors(e), success=False)
    logger.info("Marked %d message(s) as %s", affected, inp.status)
    return BatchOutput(affected=affected)


def run_batch_delete(
    inp: BatchDeleteInput,
    *,
    repo: MessageRepoPort,
    storage: ObjectStorePort,
    config: MessagesConfig = DEFAULT_CONFIG,
) -> BatchOutput:
    """
    Delete messages with their attachments. Storage failures are only logged.

    A backend failure stops the batch; messages deleted before it stay
    deleted and are counted in `affected`.
    """
    if not inp.message_ids:
        return BatchOutput(
            errors=[
                MessageValidationError(code="invalid_input", message="No messages selected")
            ],
            success=False,
        )

    affected = 0
    failures: list[str] = []
    for message_id in inp.message_ids:
        try:
            if repo.get_by_id(message_id) is None:
                failures.append(str(message_id))
                continue
            attachments = repo.delete_attachments_for(message_id)
        except BackendError as e:
            logger.error("Batch delete failed at %s: %s", message_id, e.message)
            return BatchOutput(
                affected=affected,
                failures=failures + [str(message_id)],
                errors=_backend_errors(e),
                success=False,
            )
        if attachments:
            try:
                storage.remove(config.bucket, [a.file_path for a in attachments])
            except BackendError as e:
                logger.warning("Failed to remove attachments for %s: %s", message_id, e)
        try:
            repo.delete(message_id)
        except BackendError as e:
            logger.error("Batch delete failed at %s: %s", message_id, e.message)
            return BatchOutput(
                affected=affected,
                failures=failures + [str(message_id)],
                errors=_backend_errors(e),
                success=False,
            )
        affected += 1

    if affected == 0:
        return BatchOutput(failures=failures, errors=_not_found(failures[0]), success=False)
    return BatchOutput(affected=affected, failures=failures)


# --- Export ---


def _export_row(message: ContactMessage, include_attachments: bool) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": str(message.id),
        "full_name": message.full_name,
        "email": message.email,
        "purpose": message.purpose,
        "message": message.message,
        "status": message.status,
        "created_at": message.created_at.isoformat(),
        "attachment_count": len(message.attachments),
    }
    if include_attachments:
        row["attachments"] = [
            {
                "file_name": a.file_name,
                "file_size": a.file_size,
                "file_type": a.file_type,
                "created_at": a.created_at.isoformat(),
                "file_path": a.file_path,
            }
            for a in message.attachments
        ]
    return row


def _to_csv(rows: list[dict[str, Any]], include_attachments: bool) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    headers = CSV_HEADERS + (["Attachments"] if include_attachments else [])
    writer.writerow(headers)
    for row in rows:
        values = [
            row["id"],
            row["full_name"],
            row["email"],
            row["purpose"],
            row["message"],
            row["status"],
            row["created_at"],
            row["attachment_count"],
        ]
        if include_attachments:
            values.append("; ".join(a["file_name"] for a in row["attachments"]))
        writer.writerow(values)
    return buffer.getvalue()


def run_export(
    inp: ExportMessagesInput,
    *,
    repo: MessageRepoPort,
    time: TimePort,
) -> ExportOutput:
    """Render messages as a CSV or JSON document."""
    if inp.format not in ("csv", "json"):
        return ExportOutput(
            errors=[
                MessageValidationError(
                    code="invalid_format", message="Format must be csv or json", field="format"
                )
            ],
            success=False,
        )

    filters: dict[str, Any] = {}
    try:
        if inp.message_ids:
            items, _ = repo.list(message_ids=list(inp.message_ids), limit=None)
        else:
            try:
                date_from = parse_datetime(inp.date_from)
                date_to = parse_datetime(inp.date_to)
            except ValueError as e:
                return ExportOutput(errors=_date_errors(e), success=False)
            filters = {
                "status": None if inp.status in (None, "", "all") else inp.status,
                "purpose": None if inp.purpose in (None, "", "all") else inp.purpose,
                "search": inp.search or None,
                "date_from": date_from,
                "date_to": date_to,
            }
            items, _ = repo.list(**filters, limit=None)
    except BackendError as e:
        logger.error("Message export failed: %s", e.message)
        return ExportOutput(errors=_backend_errors(e), success=False)

    if not items:
        return ExportOutput(
            errors=[
                MessageValidationError(code="not_found", message="No messages found to export")
            ],
            success=False,
        )

    now = time.now_utc()
    rows = [_export_row(m, inp.include_attachments) for m in items]
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")

    if inp.format == "json":
        content = json.dumps(
            {
                "export_info": {
                    "exported_at": now.isoformat(),
                    "total_messages": len(rows),
                    "format": "json",
                    "filters_applied": sorted(k for k, v in filters.items() if v is not None),
                    "include_attachments": inp.include_attachments,
                },
                "messages": rows,
            },
            indent=2,
        )
        content_type = "application/json"
    else:
        content = _to_csv(rows, inp.include_attachments)
        content_type = "text/csv"

    logger.info("Exported %d message(s) as %s", len(rows), inp.format)
    return ExportOutput(
        filename=f"messages-export-{stamp}.{inp.format}",
        content_type=content_type,
        content=content,
        count=len(rows),
    )


def run_stats(*, repo: MessageRepoPort) -> MessageStatsOutput:
    try:
        return MessageStatsOutput(
            total=repo.count(),
            unread=repo.count(status="unread"),
            read=repo.count(status="read"),
            replied=repo.count(status="replied"),
        )
    except BackendError as e:
        logger.error("Message stats failed: %s", e.message)
        return MessageStatsOutput(errors=_backend_errors(e), success=False)
