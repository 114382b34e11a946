"""
Blog media component - gallery uploads for posts.

Uploads are processed file by file:
1. validate type and size (per kind: image or video)
2. store at blog-media/<kind>s/<post_id>/<millis>-<token>.<ext>
3. insert the row with sort_order = max + 1
4. if the insert fails, remove the stored object again

Failures are collected per file; the batch succeeds when at least one file
was stored. `post_id` may be a temporary id (temp-<millis>-<random>) for a
post that has not been saved yet; `run_reassign` moves those rows onto the
real post id once it exists.

At most one media row per post is featured.
"""

from __future__ import annotations

import logging
import secrets
from uuid import uuid4

from authordesk.domain.entities import BlogMedia, MediaType
from authordesk.domain.values import file_extension
from authordesk.ports.errors import BackendError

from .models import (
    DeleteMediaInput,
    ListMediaInput,
    MediaConfig,
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

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = MediaConfig()


class _RandomTokens:
    def token(self) -> str:
        return secrets.token_hex(4)


def classify_media(mime_type: str, config: MediaConfig = DEFAULT_CONFIG) -> MediaType | None:
    """Return 'image' or 'video' for an allowed MIME type, else None."""
    if mime_type in config.image_types:
        return "image"
    if mime_type in config.video_types:
        return "video"
    return None


def validate_media_file(
    filename: str,
    mime_type: str,
    size: int,
    config: MediaConfig = DEFAULT_CONFIG,
) -> MediaValidationError | None:
    kind = classify_media(mime_type, config)
    if kind is None:
        return MediaValidationError(
            code="file_type",
            message=f"{filename}: unsupported file type {mime_type}",
            field="file",
        )
    limit = config.image_max_bytes if kind == "image" else config.video_max_bytes
    if size > limit:
        return MediaValidationError(
            code="file_size",
            message=f"{filename}: file exceeds the {limit // (1024 * 1024)}MB {kind} limit",
            field="file",
        )
    return None


def _not_found(media_id: object) -> list[MediaValidationError]:
    return [MediaValidationError(code="not_found", message=f"Media {media_id} not found")]


def _backend_errors(e: BackendError) -> list[MediaValidationError]:
    return [MediaValidationError(code=e.code, message=e.message)]


def run_upload(
    inp: UploadMediaInput,
    *,
    repo: BlogMediaRepoPort,
    storage: ObjectStorePort,
    time: TimePort,
    tokens: TokenPort | None = None,
    config: MediaConfig = DEFAULT_CONFIG,
) -> UploadMediaOutput:
    """
    Upload a batch of media files for a post.

    Returns:
        UploadMediaOutput with the stored rows and one failure string per
        file that could not be stored.
    """
    if not inp.post_id:
        return UploadMediaOutput(
            errors=[MediaValidationError(code="invalid_input", message="Post ID is required")],
            success=False,
        )
    if not inp.files:
        return UploadMediaOutput(
            errors=[MediaValidationError(code="invalid_input", message="No files provided")],
            success=False,
        )

    tokens = tokens or _RandomTokens()
    uploaded: list[BlogMedia] = []
    failures: list[str] = []
    try:
        next_order = repo.max_sort_order(inp.post_id) + 1
    except BackendError as e:
        logger.error("Failed to read media order for %s: %s", inp.post_id, e.message)
        return UploadMediaOutput(errors=_backend_errors(e), success=False)

    for item in inp.files:
        upload = item.file
        invalid = validate_media_file(upload.filename, upload.content_type, upload.size, config)
        if invalid is not None:
            failures.append(invalid.message)
            continue

        kind = classify_media(upload.content_type, config)
        millis = int(time.now_utc().timestamp() * 1000)
        ext = file_extension(upload.filename)
        path = f"blog-media/{kind}s/{inp.post_id}/{millis}-{tokens.token()}.{ext}"

        try:
            storage.upload(config.bucket, path, upload.data, upload.content_type)
        except BackendError as e:
            logger.error("Storage upload failed for %s: %s", upload.filename, e.message)
            failures.append(f"Failed to upload {upload.filename}")
            continue

        now = time.now_utc()
        media = BlogMedia(
            id=uuid4(),
            post_id=inp.post_id,
            file_name=upload.filename,
            file_path=path,
            file_url=storage.public_url(config.bucket, path),
            file_type=kind or "image",
            mime_type=upload.content_type,
            file_size=upload.size,
            width=item.width,
            height=item.height,
            duration=item.duration,
            alt_text=item.alt_text,
            caption=item.caption,
            sort_order=next_order,
            created_at=now,
            updated_at=now,
        )
        try:
            repo.save(media)
        except BackendError as e:
            logger.error("Media row insert failed for %s: %s", upload.filename, e.message)
            try:
                storage.remove(config.bucket, [path])
            except BackendError as cleanup_error:
                logger.warning("Orphaned media object %s: %s", path, cleanup_error)
            failures.append(f"Failed to save metadata for {upload.filename}")
            continue

        uploaded.append(media)
        next_order += 1

    if not uploaded:
        return UploadMediaOutput(
            failures=failures,
            message="Failed to upload any files",
            errors=[
                MediaValidationError(
                    code="upload_failed",
                    message="Failed to upload any files: " + "; ".join(failures),
                )
            ],
            success=False,
        )

    return UploadMediaOutput(
        uploaded=uploaded,
        failures=failures,
        message=f"Successfully uploaded {len(uploaded)} file(s) with {len(failures)} error(s)",
    )


def run_list(inp: ListMediaInput, *, repo: BlogMediaRepoPort) -> MediaListOutput:
    try:
        return MediaListOutput(items=repo.list_for_post(inp.post_id))
    except BackendError as e:
        logger.error("Failed to list media for %s: %s", inp.post_id, e.message)
        return MediaListOutput(errors=_backend_errors(e), success=False)


def run_update_metadata(
    inp: UpdateMediaInput,
    *,
    repo: BlogMediaRepoPort,
    time: TimePort,
) -> MediaOutput:
    """Update descriptive fields. Featuring one item un-features its siblings."""
    try:
        media = repo.get_by_id(inp.media_id)
        if media is None:
            return MediaOutput(errors=_not_found(inp.media_id), success=False)

        changes: dict[str, object] = {"updated_at": time.now_utc()}
        if inp.alt_text is not None:
            changes["alt_text"] = inp.alt_text
        if inp.caption is not None:
            changes["caption"] = inp.caption
        if inp.sort_order is not None:
            changes["sort_order"] = inp.sort_order
        if inp.is_featured is not None:
            changes["is_featured"] = inp.is_featured
            if inp.is_featured:
                repo.clear_featured(media.post_id, except_id=media.id)

        return MediaOutput(media=repo.save(media.model_copy(update=changes)))
    except BackendError as e:
        logger.error("Failed to update media %s: %s", inp.media_id, e.message)
        return MediaOutput(errors=_backend_errors(e), success=False)


def run_delete(
    inp: DeleteMediaInput,
    *,
    repo: BlogMediaRepoPort,
    storage: ObjectStorePort,
    config: MediaConfig = DEFAULT_CONFIG,
) -> MediaOutput:
    """Delete the row, then the object. Storage failures are only logged."""
    try:
        media = repo.get_by_id(inp.media_id)
        if media is None:
            return MediaOutput(errors=_not_found(inp.media_id), success=False)
        repo.delete(media.id)
    except BackendError as e:
        logger.error("Failed to delete media %s: %s", inp.media_id, e.message)
        return MediaOutput(errors=_backend_errors(e), success=False)

    try:
        storage.remove(config.bucket, [media.file_path])
    except BackendError as e:
        logger.warning("Failed to delete media file %s from storage: %s", media.file_path, e)

    return MediaOutput(media=media)


def run_reorder(
    inp: ReorderMediaInput,
    *,
    repo: BlogMediaRepoPort,
    time: TimePort,
) -> MediaListOutput:
    """Set sort_order to each id's position; ids from other posts are ignored."""
    try:
        current = {m.id: m for m in repo.list_for_post(inp.post_id)}
        now = time.now_utc()
        for index, media_id in enumerate(inp.media_ids):
            media = current.get(media_id)
            if media is None:
                continue
            repo.save(media.model_copy(update={"sort_order": index, "updated_at": now}))
        return MediaListOutput(items=repo.list_for_post(inp.post_id))
    except BackendError as e:
        logger.error("Failed to reorder media for %s: %s", inp.post_id, e.message)
        return MediaListOutput(errors=_backend_errors(e), success=False)


def run_reassign(inp: ReassignMediaInput, *, repo: BlogMediaRepoPort) -> ReassignMediaOutput:
    """Move media uploaded under a temporary id onto the saved post id."""
    if not inp.from_post_id or not inp.to_post_id:
        return ReassignMediaOutput(
            errors=[
                MediaValidationError(
                    code="invalid_input", message="Both source and target post ids are required"
                )
            ],
            success=False,
        )
    if inp.from_post_id == inp.to_post_id:
        return ReassignMediaOutput(moved=0)

    try:
        moved = repo.reassign_post(inp.from_post_id, inp.to_post_id)
    except BackendError as e:
        logger.error("Failed to reassign media from %s: %s", inp.from_post_id, e.message)
        return ReassignMediaOutput(errors=_backend_errors(e), success=False)
    logger.info(
        "Reassigned %d media item(s) from %s to %s", moved, inp.from_post_id, inp.to_post_id
    )
    return ReassignMediaOutput(moved=moved)
