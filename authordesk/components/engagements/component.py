"""
Engagements component - bookable offerings (workshops, webinars, coaching...).

Invariants:
- type is one of ENGAGEMENT_TYPES; status one of ENGAGEMENT_STATUSES
- price >= 0, max_attendees >= 1, booking_url is http(s)
- at most `max_images` images per engagement
- slugs are unique; generated from the title when not supplied

Image uploads go to the engagement media bucket as <millis>-<sanitised name>
(upsert). A file that fails to upload is skipped and logged; the
engagement is still saved with the images that did upload.
"""

from __future__ import annotations

import logging
import math
from typing import Any
from uuid import uuid4

from authordesk.domain.entities import (
    ENGAGEMENT_STATUSES,
    ENGAGEMENT_TYPES,
    Engagement,
)
from authordesk.domain.slugs import make_unique_slug, slugify
from authordesk.domain.uploads import FileUpload
from authordesk.domain.values import is_http_url, parse_datetime, sanitize_filename
from authordesk.ports.errors import BackendError

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

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = EngagementsConfig()

_IMMUTABLE_FIELDS = {"id", "created_at", "updated_at"}
_ENGAGEMENT_FIELDS = set(Engagement.model_fields) - _IMMUTABLE_FIELDS


# --- Normalisation / Validation ---


def _to_number(value: Any, kind: type) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            return kind(value)
        except ValueError:
            return value
    return value


def _normalize_fields(values: dict[str, Any]) -> dict[str, Any]:
    out = dict(values)
    if "date" in out:
        out["date"] = parse_datetime(out["date"])
    if "price" in out:
        out["price"] = _to_number(out["price"], float)
    if "max_attendees" in out:
        out["max_attendees"] = _to_number(out["max_attendees"], int)
    for key in ("booking_url", "content", "duration", "location"):
        if key in out and out[key] == "":
            out[key] = None
    if "tags" in out and out["tags"] is not None:
        out["tags"] = [t.strip() for t in out["tags"] if t and t.strip()]
    if "images" in out and out["images"] is not None:
        out["images"] = [i for i in out["images"] if i]
    return out


def validate_engagement_fields(
    values: dict[str, Any],
    config: EngagementsConfig = DEFAULT_CONFIG,
) -> list[EngagementValidationError]:
    errors: list[EngagementValidationError] = []

    title = (values.get("title") or "").strip()
    if not title:
        errors.append(
            EngagementValidationError(
                code="title_required", message="Title is required", field="title"
            )
        )
    elif len(title) > config.title_max_length:
        errors.append(
            EngagementValidationError(
                code="title_too_long",
                message=f"Title must be at most {config.title_max_length} characters",
                field="title",
            )
        )

    if not (values.get("description") or "").strip():
        errors.append(
            EngagementValidationError(
                code="description_required",
                message="Description is required",
                field="description",
            )
        )

    if values.get("type") not in ENGAGEMENT_TYPES:
        errors.append(
            EngagementValidationError(
                code="type_invalid",
                message=f"Type must be one of: {', '.join(ENGAGEMENT_TYPES)}",
                field="type",
            )
        )

    if values.get("status") not in ENGAGEMENT_STATUSES:
        errors.append(
            EngagementValidationError(
                code="status_invalid",
                message=f"Status must be one of: {', '.join(ENGAGEMENT_STATUSES)}",
                field="status",
            )
        )

    price = values.get("price")
    if price is not None and (not isinstance(price, (int, float)) or price < 0):
        errors.append(
            EngagementValidationError(
                code="price_invalid", message="Price must be zero or more", field="price"
            )
        )

    attendees = values.get("max_attendees")
    if attendees is not None and (not isinstance(attendees, int) or attendees < 1):
        errors.append(
            EngagementValidationError(
                code="max_attendees_invalid",
                message="Max attendees must be at least 1",
                field="max_attendees",
            )
        )

    booking_url = values.get("booking_url")
    if booking_url and not is_http_url(booking_url):
        errors.append(
            EngagementValidationError(
                code="booking_url_invalid",
                message="Booking URL must be a valid URL",
                field="booking_url",
            )
        )

    images = values.get("images") or []
    if len(images) > config.max_images:
        errors.append(
            EngagementValidationError(
                code="too_many_images",
                message=f"An engagement can have at most {config.max_images} images",
                field="images",
            )
        )

    return errors


def _not_found(engagement_id: object) -> list[EngagementValidationError]:
    return [
        EngagementValidationError(
            code="not_found", message=f"Engagement {engagement_id} not found"
        )
    ]


def _date_error(e: ValueError) -> list[EngagementValidationError]:
    return [EngagementValidationError(code="validation", message=str(e), field="date")]


def _backend_errors(e: BackendError) -> list[EngagementValidationError]:
    return [EngagementValidationError(code=e.code, message=e.message)]


# --- Entry Points ---


def run_upload_images(
    inp: UploadImagesInput,
    *,
    storage: ObjectStorePort,
    time: TimePort,
    config: EngagementsConfig = DEFAULT_CONFIG,
) -> UploadImagesOutput:
    """Upload images; failed files are skipped and reported in `failures`."""
    urls: list[str] = []
    failures: list[str] = []

    for upload in inp.files:
        if upload.content_type not in config.image_types:
            failures.append(f"{upload.filename}: unsupported file type")
            continue
        if upload.size > config.image_max_bytes:
            failures.append(f"{upload.filename}: file too large")
            continue

        millis = int(time.now_utc().timestamp() * 1000)
        path = f"{millis}-{sanitize_filename(upload.filename)}"
        try:
            storage.upload(config.bucket, path, upload.data, upload.content_type, upsert=True)
        except BackendError as e:
            logger.error("Engagement image upload failed for %s: %s", upload.filename, e.message)
            failures.append(f"Failed to upload {upload.filename}")
            continue
        urls.append(storage.public_url(config.bucket, path))

    if inp.files and not urls:
        return UploadImagesOutput(
            failures=failures,
            errors=[
                EngagementValidationError(
                    code="upload_failed", message="Failed to upload any images"
                )
            ],
            success=False,
        )
    return UploadImagesOutput(urls=urls, failures=failures)


def _upload_new(
    files: list[FileUpload],
    storage: ObjectStorePort | None,
    time: TimePort,
    config: EngagementsConfig,
) -> list[str]:
    if not files:
        return []
    if storage is None:
        raise ValueError("ObjectStorePort is required when uploading engagement images")
    result = run_upload_images(
        UploadImagesInput(files=files), storage=storage, time=time, config=config
    )
    for failure in result.failures:
        logger.warning("Skipped engagement image: %s", failure)
    return result.urls


def run_get(inp: GetEngagementInput, *, repo: EngagementRepoPort) -> EngagementOutput:
    if inp.engagement_id is None and not inp.slug:
        return EngagementOutput(
            errors=[
                EngagementValidationError(
                    code="invalid_input",
                    message="Either engagement_id or slug must be provided",
                )
            ],
            success=False,
        )

    try:
        if inp.engagement_id is not None:
            engagement = repo.get_by_id(inp.engagement_id)
        else:
            engagement = repo.get_by_slug(inp.slug or "")
    except BackendError as e:
        logger.error("Engagement lookup failed: %s", e.message)
        return EngagementOutput(errors=_backend_errors(e), success=False)

    if engagement is None:
        return EngagementOutput(
            errors=_not_found(inp.engagement_id or inp.slug), success=False
        )
    return EngagementOutput(engagement=engagement)


def run_list(
    inp: ListEngagementsInput,
    *,
    repo: EngagementRepoPort,
    time: TimePort,
) -> EngagementListOutput:
    page = max(1, inp.page)
    limit = max(1, inp.limit)

    def failed(errors: list[EngagementValidationError]) -> EngagementListOutput:
        return EngagementListOutput(
            items=[],
            total=0,
            page=page,
            limit=limit,
            total_pages=0,
            errors=errors,
            success=False,
        )

    try:
        date_from = parse_datetime(inp.date_from)
        date_to = parse_datetime(inp.date_to)
    except ValueError as e:
        return failed(_date_error(e))

    if inp.upcoming_only:
        now = time.now_utc()
        date_from = max(date_from, now) if date_from else now

    try:
        items, total = repo.list(
            search=inp.search,
            engagement_type=inp.type or None,
            status=inp.status or None,
            featured=inp.featured,
            is_virtual=inp.is_virtual,
            date_from=date_from,
            date_to=date_to,
            sort_by=inp.sort_by,
            sort_order=inp.sort_order,
            limit=limit,
            offset=(page - 1) * limit,
        )
    except BackendError as e:
        logger.error("Engagement list failed: %s", e.message)
        return failed(_backend_errors(e))

    return EngagementListOutput(
        items=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0,
    )


def run_create(
    inp: CreateEngagementInput,
    *,
    repo: EngagementRepoPort,
    time: TimePort,
    storage: ObjectStorePort | None = None,
    config: EngagementsConfig = DEFAULT_CONFIG,
) -> EngagementOutput:
    """
    Create an engagement, uploading any new image files first.

    Fields and slug are settled before anything is uploaded so a rejected
    form leaves no objects behind.
    """
    values: dict[str, Any] = {
        "title": inp.title,
        "description": inp.description,
        "type": inp.type,
        "content": inp.content,
        "images": list(inp.existing_images),
        "date": inp.date,
        "duration": inp.duration,
        "price": inp.price,
        "max_attendees": inp.max_attendees,
        "location": inp.location,
        "is_virtual": inp.is_virtual,
        "is_featured": inp.is_featured,
        "booking_url": inp.booking_url,
        "status": inp.status,
        "tags": list(inp.tags),
    }
    try:
        values = _normalize_fields(values)
    except ValueError as e:
        return EngagementOutput(errors=_date_error(e), success=False)

    projected = {**values, "images": values["images"] + [f.filename for f in inp.new_files]}
    errors = validate_engagement_fields(projected, config)
    if errors:
        return EngagementOutput(errors=errors, success=False)

    base = slugify(inp.slug or "") or slugify(inp.title)
    if not base:
        return EngagementOutput(
            errors=[
                EngagementValidationError(
                    code="slug_required",
                    message="Could not derive a slug from the title",
                    field="slug",
                )
            ],
            success=False,
        )

    try:
        slug = make_unique_slug(base, lambda s: repo.slug_exists(s))
        uploaded = _upload_new(inp.new_files, storage, time, config)
        values["images"] = values["images"] + uploaded

        now = time.now_utc()
        values["title"] = values["title"].strip()
        engagement = Engagement(id=uuid4(), slug=slug, created_at=now, updated_at=now, **values)
        saved = repo.save(engagement)
    except BackendError as e:
        logger.error("Engagement create failed: %s", e.message)
        return EngagementOutput(errors=_backend_errors(e), success=False)
    return EngagementOutput(engagement=saved, uploaded_count=len(uploaded))


def run_update(
    inp: UpdateEngagementInput,
    *,
    repo: EngagementRepoPort,
    time: TimePort,
    storage: ObjectStorePort | None = None,
    config: EngagementsConfig = DEFAULT_CONFIG,
) -> EngagementOutput:
    """Apply a partial update; new files are appended to the image list."""
    try:
        engagement = repo.get_by_id(inp.engagement_id)
    except BackendError as e:
        logger.error("Engagement lookup failed for %s: %s", inp.engagement_id, e.message)
        return EngagementOutput(errors=_backend_errors(e), success=False)
    if engagement is None:
        return EngagementOutput(errors=_not_found(inp.engagement_id), success=False)

    updates = {k: v for k, v in inp.updates.items() if k in _ENGAGEMENT_FIELDS}
    try:
        updates = _normalize_fields(updates)
    except ValueError as e:
        return EngagementOutput(engagement=engagement, errors=_date_error(e), success=False)

    merged = {**engagement.model_dump(), **updates}
    projected = {**merged, "images": merged["images"] + [f.filename for f in inp.new_files]}
    errors = validate_engagement_fields(projected, config)
    if errors:
        return EngagementOutput(engagement=engagement, errors=errors, success=False)

    try:
        if "slug" in updates:
            base = slugify(updates["slug"] or "") or slugify(merged["title"])
            updates["slug"] = make_unique_slug(
                base, lambda s: repo.slug_exists(s, exclude_id=engagement.id)
            )

        uploaded = _upload_new(inp.new_files, storage, time, config)
        if uploaded:
            updates["images"] = merged["images"] + uploaded

        updated = engagement.model_copy(update={**updates, "updated_at": time.now_utc()})
        saved = repo.save(updated)
    except BackendError as e:
        logger.error("Engagement update failed for %s: %s", inp.engagement_id, e.message)
        return EngagementOutput(
            engagement=engagement, errors=_backend_errors(e), success=False
        )
    return EngagementOutput(engagement=saved, uploaded_count=len(uploaded))


def run_delete(inp: DeleteEngagementInput, *, repo: EngagementRepoPort) -> EngagementOutput:
    try:
        engagement = repo.get_by_id(inp.engagement_id)
        if engagement is None:
            return EngagementOutput(errors=_not_found(inp.engagement_id), success=False)
        repo.delete(engagement.id)
    except BackendError as e:
        logger.error("Engagement delete failed for %s: %s", inp.engagement_id, e.message)
        return EngagementOutput(errors=_backend_errors(e), success=False)
    return EngagementOutput(engagement=None)


def run_stats(*, repo: EngagementRepoPort) -> EngagementStatsOutput:
    """Counts by status and type; every enum key is present."""
    try:
        engagements = repo.all_for_stats()
    except BackendError as e:
        logger.error("Engagement stats failed: %s", e.message)
        return EngagementStatsOutput(errors=_backend_errors(e), success=False)

    by_status = {s: 0 for s in ENGAGEMENT_STATUSES}
    by_type = {t: 0 for t in ENGAGEMENT_TYPES}
    for e in engagements:
        by_status[e.status] = by_status.get(e.status, 0) + 1
        by_type[e.type] = by_type.get(e.type, 0) + 1

    return EngagementStatsOutput(
        total=len(engagements),
        featured=sum(1 for e in engagements if e.is_featured),
        upcoming=by_status["upcoming"],
        ongoing=by_status["ongoing"],
        completed=by_status["completed"],
        cancelled=by_status["cancelled"],
        by_type=by_type,
        by_status=by_status,
    )
