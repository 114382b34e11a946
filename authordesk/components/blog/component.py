"""
Blog component - posts, tags and the draft/published lifecycle.

Lifecycle:
- draft: is_published = False, published_at = None
- published: is_published = True, published_at set

published_at transitions on save:
- first publish -> the submitted date, or now when none was given
- unpublish -> None
- already published with a different submitted date -> that date

Slugs are unique across posts: `slug`, then `slug-1`, `slug-2`, ...
An empty slug is regenerated from the title; an unchanged slug is kept.

Reading time is max(1, ceil(words / 200)), recomputed when content changes
unless the form supplies one.

Tags are resolved by name: slugify(name) is looked up and created if missing.
A tag cannot be deleted while any post uses it.
"""

from __future__ import annotations

import logging
import math
from typing import Any
from uuid import UUID, uuid4

from authordesk.domain.entities import BlogPost, BlogTag
from authordesk.domain.slugs import calculate_reading_time, make_unique_slug, slugify
from authordesk.domain.values import parse_datetime
from authordesk.ports.errors import BackendError

from .models import (
    BlogConfig,
    BlogStatsOutput,
    BlogValidationError,
    CreatePostInput,
    CreateTagInput,
    DeletePostInput,
    DeleteTagInput,
    GetPostInput,
    ListPostsInput,
    PostListOutput,
    PostOutput,
    TagListOutput,
    TagOutput,
    TogglePublishedInput,
    UpdatePostInput,
    UpdateTagInput,
)
from .ports import (
    BlogMediaRepoPort,
    BlogPostRepoPort,
    BlogTagRepoPort,
    ObjectStorePort,
    TimePort,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = BlogConfig()
STATUS_FILTERS = ("all", "published", "draft")


# --- Helpers ---


def generate_unique_slug(
    text: str,
    repo: BlogPostRepoPort,
    exclude_id: UUID | None = None,
) -> str:
    """Slugify `text` and append -1, -2, ... until no other post uses it."""
    return make_unique_slug(slugify(text), lambda s: repo.slug_exists(s, exclude_id))


def _validate_post(
    title: str,
    content: str,
    excerpt: str,
    seo_title: str | None,
    seo_description: str | None,
    is_published: bool,
    config: BlogConfig,
) -> list[BlogValidationError]:
    errors: list[BlogValidationError] = []

    if not title.strip():
        errors.append(
            BlogValidationError(code="title_required", message="Title is required", field="title")
        )
    elif len(title) > config.title_max_length:
        errors.append(
            BlogValidationError(
                code="title_too_long",
                message=f"Title must be at most {config.title_max_length} characters",
                field="title",
            )
        )

    if is_published and len(content.strip()) < config.min_publish_content_length:
        errors.append(
            BlogValidationError(
                code="content_required",
                message=(
                    f"Content must be at least {config.min_publish_content_length} "
                    "characters to publish"
                ),
                field="content",
            )
        )

    if len(excerpt) > config.excerpt_max_length:
        errors.append(
            BlogValidationError(
                code="excerpt_too_long",
                message=f"Excerpt must be at most {config.excerpt_max_length} characters",
                field="excerpt",
            )
        )

    if seo_title and len(seo_title) > config.seo_title_max_length:
        errors.append(
            BlogValidationError(
                code="seo_title_too_long",
                message=f"SEO title must be at most {config.seo_title_max_length} characters",
                field="seo_title",
            )
        )

    if seo_description and len(seo_description) > config.seo_description_max_length:
        errors.append(
            BlogValidationError(
                code="seo_description_too_long",
                message=(
                    "SEO description must be at most "
                    f"{config.seo_description_max_length} characters"
                ),
                field="seo_description",
            )
        )

    return errors


def resolve_tags(
    names: list[str],
    *,
    tag_repo: BlogTagRepoPort,
    time: TimePort,
) -> list[BlogTag]:
    """Find each tag by slugified name, creating the missing ones."""
    tags: dict[str, BlogTag] = {}
    for raw in names:
        name = raw.strip()
        slug = slugify(name)
        if not slug or slug in tags:
            continue
        tag = tag_repo.get_by_slug(slug)
        if tag is None:
            tag = tag_repo.save(BlogTag(name=name, slug=slug, created_at=time.now_utc()))
            logger.info("Created blog tag %s", slug)
        tags[slug] = tag
    return list(tags.values())


def _not_found(post_id: object) -> list[BlogValidationError]:
    return [BlogValidationError(code="not_found", message=f"Post {post_id} not found")]


def _date_error(e: ValueError) -> list[BlogValidationError]:
    return [BlogValidationError(code="validation", message=str(e), field="published_at")]


def _backend_errors(e: BackendError) -> list[BlogValidationError]:
    return [BlogValidationError(code=e.code, message=e.message)]


def _slug_error() -> list[BlogValidationError]:
    return [
        BlogValidationError(
            code="slug_required",
            message="Could not derive a slug from the title",
            field="slug",
        )
    ]


# --- Post Entry Points ---


def run_get(inp: GetPostInput, *, repo: BlogPostRepoPort) -> PostOutput:
    if inp.post_id is None and not inp.slug:
        return PostOutput(
            errors=[
                BlogValidationError(
                    code="invalid_input", message="Either post_id or slug must be provided"
                )
            ],
            success=False,
        )

    try:
        if inp.post_id is not None:
            post = repo.get_by_id(inp.post_id)
        else:
            post = repo.get_by_slug(inp.slug or "")
    except BackendError as e:
        logger.error("Post lookup failed: %s", e.message)
        return PostOutput(errors=_backend_errors(e), success=False)

    if post is None:
        return PostOutput(errors=_not_found(inp.post_id or inp.slug), success=False)
    return PostOutput(post=post)


def run_list(inp: ListPostsInput, *, repo: BlogPostRepoPort) -> PostListOutput:
    """List posts with search, status, tag, author, featured and date filters."""
    page = max(1, inp.page)
    limit = max(1, inp.limit)

    def failed(errors: list[BlogValidationError]) -> PostListOutput:
        return PostListOutput(
            items=[], total=0, page=page, limit=limit, pages=0, errors=errors, success=False
        )

    if inp.status not in STATUS_FILTERS:
        return failed(
            [
                BlogValidationError(
                    code="invalid_input",
                    message=f"Unknown status filter '{inp.status}'",
                    field="status",
                )
            ]
        )

    try:
        date_from = parse_datetime(inp.date_from)
        date_to = parse_datetime(inp.date_to)
    except ValueError as e:
        return failed([BlogValidationError(code="validation", message=str(e))])

    try:
        items, total = repo.list(
            search=inp.search,
            status=inp.status,
            author_id=inp.author_id,
            tag_slugs=[slugify(t) for t in inp.tags if slugify(t)] or None,
            featured=inp.featured,
            date_from=date_from,
            date_to=date_to,
            sort_by=inp.sort_by,
            sort_order=inp.sort_order,
            limit=limit,
            offset=(page - 1) * limit,
        )
    except BackendError as e:
        logger.error("Post list failed: %s", e.message)
        return failed(_backend_errors(e))

    return PostListOutput(
        items=items,
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )


def run_create(
    inp: CreatePostInput,
    *,
    repo: BlogPostRepoPort,
    tag_repo: BlogTagRepoPort,
    time: TimePort,
    config: BlogConfig = DEFAULT_CONFIG,
) -> PostOutput:
    """
    Create a post (draft or published).

    The post row and its tag links are written separately; when the tags
    cannot be stored the new row is deleted again so a failed create leaves
    nothing behind.

    Args:
        inp: Editor form values.
        repo: Post repository port.
        tag_repo: Tag repository port (tags are created on demand).
        time: Time port for timestamps.

    Returns:
        PostOutput with the created post or validation errors.
    """
    errors = _validate_post(
        inp.title,
        inp.content,
        inp.excerpt,
        inp.seo_title,
        inp.seo_description,
        inp.is_published,
        config,
    )
    if errors:
        return PostOutput(errors=errors, success=False)

    try:
        requested_date = parse_datetime(inp.published_at)
    except ValueError as e:
        return PostOutput(errors=_date_error(e), success=False)

    now = time.now_utc()
    base = (inp.slug or "").strip() or inp.title
    if not slugify(base):
        base = inp.title

    try:
        slug = generate_unique_slug(base, repo)
        if not slug:
            return PostOutput(errors=_slug_error(), success=False)

        post = BlogPost(
            id=uuid4(),
            title=inp.title.strip(),
            slug=slug,
            excerpt=inp.excerpt,
            content=inp.content,
            featured_image=inp.featured_image or None,
            featured_media_type=inp.featured_media_type if inp.featured_image else None,
            author_id=inp.author_id,
            is_published=inp.is_published,
            published_at=(requested_date or now) if inp.is_published else None,
            reading_time=inp.reading_time or calculate_reading_time(inp.content),
            featured=inp.featured,
            seo_title=inp.seo_title or None,
            seo_description=inp.seo_description or None,
            created_at=now,
            updated_at=now,
        )
        repo.save(post)
    except BackendError as e:
        logger.error("Post create failed: %s", e.message)
        return PostOutput(errors=_backend_errors(e), success=False)

    try:
        tags = resolve_tags(inp.tags, tag_repo=tag_repo, time=time)
        repo.set_tags(post.id, [t.id for t in tags])
    except BackendError as e:
        logger.error("Tagging new post %s failed, removing it: %s", post.id, e.message)
        try:
            repo.delete(post.id)
        except BackendError as cleanup_error:
            logger.warning("Orphaned post %s: %s", post.id, cleanup_error.message)
        return PostOutput(errors=_backend_errors(e), success=False)

    try:
        stored = repo.get_by_id(post.id)
    except BackendError as e:
        logger.warning("Re-reading post %s failed: %s", post.id, e.message)
        stored = None
    return PostOutput(post=stored or post.model_copy(update={"tags": tags}))


def run_update(
    inp: UpdatePostInput,
    *,
    repo: BlogPostRepoPort,
    tag_repo: BlogTagRepoPort,
    time: TimePort,
    config: BlogConfig = DEFAULT_CONFIG,
) -> PostOutput:
    """Apply a full editor-form submit to an existing post."""
    try:
        post = repo.get_by_id(inp.post_id)
    except BackendError as e:
        logger.error("Post lookup failed for %s: %s", inp.post_id, e.message)
        return PostOutput(errors=_backend_errors(e), success=False)
    if post is None:
        return PostOutput(errors=_not_found(inp.post_id), success=False)

    errors = _validate_post(
        inp.title,
        inp.content,
        inp.excerpt,
        inp.seo_title,
        inp.seo_description,
        inp.is_published,
        config,
    )
    if errors:
        return PostOutput(post=post, errors=errors, success=False)

    try:
        requested_date = parse_datetime(inp.published_at)
    except ValueError as e:
        return PostOutput(post=post, errors=_date_error(e), success=False)

    now = time.now_utc()

    if inp.reading_time:
        reading_time = inp.reading_time
    elif inp.content != post.content:
        reading_time = calculate_reading_time(inp.content)
    else:
        reading_time = post.reading_time

    if inp.is_published and not post.is_published:
        published_at = requested_date or now
    elif not inp.is_published:
        published_at = None
    elif requested_date is not None and requested_date != post.published_at:
        published_at = requested_date
    else:
        published_at = post.published_at

    try:
        # Slug: keep unchanged, re-uniquify a changed one, regenerate an empty one
        requested_slug = (inp.slug or "").strip()
        if requested_slug == post.slug:
            slug = post.slug
        elif requested_slug and slugify(requested_slug):
            slug = generate_unique_slug(requested_slug, repo, exclude_id=post.id)
        else:
            slug = generate_unique_slug(inp.title, repo, exclude_id=post.id)
        if not slug:
            return PostOutput(post=post, errors=_slug_error(), success=False)

        updated = post.model_copy(
            update={
                "title": inp.title.strip(),
                "slug": slug,
                "excerpt": inp.excerpt,
                "content": inp.content,
                "featured_image": inp.featured_image or None,
                "featured_media_type": inp.featured_media_type if inp.featured_image else None,
                "author_id": inp.author_id or post.author_id,
                "is_published": inp.is_published,
                "published_at": published_at,
                "reading_time": reading_time,
                "featured": inp.featured,
                "seo_title": inp.seo_title or None,
                "seo_description": inp.seo_description or None,
                "updated_at": now,
            }
        )
        repo.save(updated)
        if inp.tags is not None:
            tags = resolve_tags(inp.tags, tag_repo=tag_repo, time=time)
            repo.set_tags(post.id, [t.id for t in tags])
        return PostOutput(post=repo.get_by_id(post.id) or updated)
    except BackendError as e:
        logger.error("Post update failed for %s: %s", inp.post_id, e.message)
        return PostOutput(post=post, errors=_backend_errors(e), success=False)


def run_toggle_published(
    inp: TogglePublishedInput,
    *,
    repo: BlogPostRepoPort,
    time: TimePort,
    config: BlogConfig = DEFAULT_CONFIG,
) -> PostOutput:
    """Flip is_published; published_at becomes now or None."""
    try:
        post = repo.get_by_id(inp.post_id)
        if post is None:
            return PostOutput(errors=_not_found(inp.post_id), success=False)

        publishing = not post.is_published
        if publishing and len(post.content.strip()) < config.min_publish_content_length:
            return PostOutput(
                post=post,
                errors=[
                    BlogValidationError(
                        code="content_required",
                        message="Add content before publishing this post",
                        field="content",
                    )
                ],
                success=False,
            )

        now = time.now_utc()
        updated = post.model_copy(
            update={
                "is_published": publishing,
                "published_at": now if publishing else None,
                "updated_at": now,
            }
        )
        return PostOutput(post=repo.save(updated))
    except BackendError as e:
        logger.error("Toggling publish state of %s failed: %s", inp.post_id, e.message)
        return PostOutput(errors=_backend_errors(e), success=False)


def run_delete(
    inp: DeletePostInput,
    *,
    repo: BlogPostRepoPort,
    media_repo: BlogMediaRepoPort | None = None,
    storage: ObjectStorePort | None = None,
    config: BlogConfig = DEFAULT_CONFIG,
) -> PostOutput:
    """
    Delete a post with its tag associations and media.

    Media files are removed from storage best-effort; a storage failure is
    logged and does not fail the delete.
    """
    try:
        post = repo.get_by_id(inp.post_id)
        if post is None:
            return PostOutput(errors=_not_found(inp.post_id), success=False)

        media = media_repo.list_for_post(str(post.id)) if media_repo is not None else []
        for item in media:
            media_repo.delete(item.id)  # type: ignore[union-attr]
        repo.delete(post.id)
    except BackendError as e:
        logger.error("Post delete failed for %s: %s", inp.post_id, e.message)
        return PostOutput(errors=_backend_errors(e), success=False)

    if storage is not None and media:
        try:
            storage.remove(config.media_bucket, [m.file_path for m in media])
        except BackendError as e:
            logger.warning("Could not remove media files for post %s: %s", post.id, e)

    return PostOutput(post=None)


def run_stats(*, repo: BlogPostRepoPort, tag_repo: BlogTagRepoPort) -> BlogStatsOutput:
    try:
        return BlogStatsOutput(
            total=repo.count(),
            published=repo.count(is_published=True),
            draft=repo.count(is_published=False),
            tags=len(tag_repo.list_all()),
        )
    except BackendError as e:
        logger.error("Blog stats failed: %s", e.message)
        return BlogStatsOutput(errors=_backend_errors(e), success=False)


# --- Tag Entry Points ---


def _validate_tag_name(name: str, config: BlogConfig) -> list[BlogValidationError]:
    if not name.strip() or not slugify(name):
        return [
            BlogValidationError(
                code="name_required", message="Tag name is required", field="name"
            )
        ]
    if len(name.strip()) > config.tag_name_max_length:
        return [
            BlogValidationError(
                code="name_too_long",
                message=f"Tag name must be at most {config.tag_name_max_length} characters",
                field="name",
            )
        ]
    return []


def _tag_not_found(tag_id: UUID) -> list[BlogValidationError]:
    return [BlogValidationError(code="not_found", message=f"Tag {tag_id} not found")]


def _slug_taken(slug: str) -> list[BlogValidationError]:
    return [
        BlogValidationError(
            code="slug_exists",
            message=f"A tag with slug '{slug}' already exists",
            field="name",
        )
    ]


def run_list_tags(*, tag_repo: BlogTagRepoPort) -> TagListOutput:
    try:
        return TagListOutput(tags=tag_repo.list_all())
    except BackendError as e:
        logger.error("Tag list failed: %s", e.message)
        return TagListOutput(errors=_backend_errors(e), success=False)


def run_create_tag(
    inp: CreateTagInput,
    *,
    tag_repo: BlogTagRepoPort,
    time: TimePort,
    config: BlogConfig = DEFAULT_CONFIG,
) -> TagOutput:
    errors = _validate_tag_name(inp.name, config)
    if errors:
        return TagOutput(errors=errors, success=False)

    slug = slugify(inp.name)
    tag = BlogTag(
        name=inp.name.strip(),
        slug=slug,
        description=inp.description or None,
        color=inp.color or None,
        created_at=time.now_utc(),
    )
    try:
        if tag_repo.get_by_slug(slug) is not None:
            return TagOutput(errors=_slug_taken(slug), success=False)
        return TagOutput(tag=tag_repo.save(tag))
    except BackendError as e:
        logger.error("Tag create failed for %s: %s", slug, e.message)
        return TagOutput(errors=_backend_errors(e), success=False)


def run_update_tag(
    inp: UpdateTagInput,
    *,
    tag_repo: BlogTagRepoPort,
    config: BlogConfig = DEFAULT_CONFIG,
) -> TagOutput:
    try:
        tag = tag_repo.get_by_id(inp.tag_id)
        if tag is None:
            return TagOutput(errors=_tag_not_found(inp.tag_id), success=False)

        changes: dict[str, Any] = {}
        if "name" in inp.updates:
            name = str(inp.updates["name"] or "")
            errors = _validate_tag_name(name, config)
            if errors:
                return TagOutput(tag=tag, errors=errors, success=False)
            slug = slugify(name)
            existing = tag_repo.get_by_slug(slug)
            if existing is not None and existing.id != tag.id:
                return TagOutput(tag=tag, errors=_slug_taken(slug), success=False)
            changes["name"] = name.strip()
            changes["slug"] = slug
        for key in ("description", "color"):
            if key in inp.updates:
                changes[key] = inp.updates[key] or None

        return TagOutput(tag=tag_repo.save(tag.model_copy(update=changes)))
    except BackendError as e:
        logger.error("Tag update failed for %s: %s", inp.tag_id, e.message)
        return TagOutput(errors=_backend_errors(e), success=False)


def run_delete_tag(inp: DeleteTagInput, *, tag_repo: BlogTagRepoPort) -> TagOutput:
    try:
        tag = tag_repo.get_by_id(inp.tag_id)
        if tag is None:
            return TagOutput(errors=_tag_not_found(inp.tag_id), success=False)
        if tag_repo.is_in_use(tag.id):
            return TagOutput(
                tag=tag,
                errors=[
                    BlogValidationError(
                        code="in_use",
                        message="Cannot delete a tag that is used by blog posts",
                    )
                ],
                success=False,
            )
        tag_repo.delete(tag.id)
    except BackendError as e:
        logger.error("Tag delete failed for %s: %s", inp.tag_id, e.message)
        return TagOutput(errors=_backend_errors(e), success=False)
    return TagOutput(tag=None)
