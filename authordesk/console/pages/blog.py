"""
Blog post editor.

Saving runs in three phases:
1. upload pending featured media under the post id (a temp id for new posts)
2. persist the post as draft or published
3. move media from the temp id to the real id, then feature the upload

If phase 2 fails the media uploaded in phase 1 is deleted again. If phase 3
fails the saved post is kept and the next save updates it and retries the
move. Any failure leaves the editor open with its form intact.
"""

from __future__ import annotations

import logging
import secrets
from typing import Any
from uuid import UUID

from authordesk.components.media import MediaConfig, MediaFileInput, validate_media_file
from authordesk.console.forms import FormState
from authordesk.console.gateway import ConsoleGateway, GatewayError
from authordesk.console.optimistic import apply_optimistic
from authordesk.console.slug import SlugDebouncer
from authordesk.console.store import AdminStore
from authordesk.console.toasts import ToastCenter
from authordesk.domain.entities import BlogMedia, BlogPost
from authordesk.domain.slugs import calculate_reading_time
from authordesk.domain.uploads import FileUpload
from authordesk.ports.clock import TimePort

logger = logging.getLogger(__name__)

TRACKED_FIELDS = ["title", "slug", "excerpt", "content", "is_published", "published_at", "tags"]

DRAFT_PLACEHOLDER = "Draft content"

EMPTY_POST: dict[str, Any] = {
    "title": "",
    "slug": "",
    "excerpt": "",
    "content": "",
    "is_published": False,
    "published_at": None,
    "tags": [],
    "reading_time": 1,
    "featured_image": None,
    "featured_media_type": None,
    "featured": False,
    "seo_title": None,
    "seo_description": None,
}


def post_form_values(post: BlogPost) -> dict[str, Any]:
    return {
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "content": post.content,
        "is_published": post.is_published,
        "published_at": post.published_at,
        "tags": [t.name for t in post.tags],
        "reading_time": post.reading_time,
        "featured_image": post.featured_image,
        "featured_media_type": post.featured_media_type,
        "featured": post.featured,
        "seo_title": post.seo_title,
        "seo_description": post.seo_description,
    }


class BlogPostEditor:
    def __init__(
        self,
        gateway: ConsoleGateway,
        store: AdminStore,
        toasts: ToastCenter,
        clock: TimePort,
        debounce_ms: int = 300,
        media_config: MediaConfig | None = None,
    ):
        self.gateway = gateway
        self.store = store
        self.toasts = toasts
        self.clock = clock
        self.media_config = media_config or MediaConfig()
        self.form = FormState(EMPTY_POST)
        self.slugger = SlugDebouncer(clock, debounce_ms)
        self.post: BlogPost | None = None
        self.temp_id: str | None = None
        self.pending_media: FileUpload | None = None
        self.pending_feature: UUID | None = None
        self.gallery: list[BlogMedia] = []
        self.is_open = False

    # --- Lifecycle ---

    def _new_temp_id(self) -> str:
        millis = int(self.clock.now_utc().timestamp() * 1000)
        return f"temp-{millis}-{secrets.token_hex(4)}"

    @property
    def is_new(self) -> bool:
        return self.post is None

    @property
    def current_post_id(self) -> str:
        """Id that media is stored under: the real post id or the temp id."""
        if self.post is not None:
            return str(self.post.id)
        assert self.temp_id is not None
        return self.temp_id

    def open(self, post_id: UUID | None = None) -> bool:
        self.pending_media = None
        self.pending_feature = None
        self.slugger.cancel()
        if post_id is None:
            self.post = None
            self.temp_id = self._new_temp_id()
            self.form.reset()
            self.gallery = []
            self.is_open = True
            return True

        try:
            post = self.gateway.get_post(post_id)
            gallery = self.gateway.list_media(str(post_id))
        except GatewayError as e:
            self.toasts.error(e.message)
            return False
        self.post = post
        self.temp_id = None
        self.form.reset(post_form_values(post))
        self.gallery = gallery
        self.is_open = True
        return True

    def close(self) -> None:
        self.slugger.cancel()
        self.pending_media = None
        self.is_open = False

    # --- Field changes ---

    def on_title_change(self, title: str) -> None:
        self.form.set_value("title", title)
        self.slugger.on_title_change(title)

    def tick(self) -> str | None:
        """Apply the debounced slug once it is due."""
        slug = self.slugger.poll()
        if slug is not None:
            self.form.set_value("slug", slug)
        return slug

    def on_content_change(self, content: str) -> None:
        self.form.set_value("content", content)
        self.form.set_value("reading_time", calculate_reading_time(content))

    def select_featured_media(self, file: FileUpload) -> bool:
        error = validate_media_file(file.filename, file.content_type, file.size, self.media_config)
        if error is not None:
            self.toasts.error(error.message)
            return False
        self.pending_media = file
        return True

    def clear_featured_media(self) -> None:
        self.pending_media = None
        self.form.update({"featured_image": None, "featured_media_type": None})

    def has_changes(self) -> bool:
        if self.pending_media is not None:
            return True
        if self.is_new:
            return bool(self.form.get("title", "").strip())
        return self.form.is_dirty(TRACKED_FIELDS)

    def can_publish(self) -> bool:
        title = (self.form.get("title") or "").strip()
        content = (self.form.get("content") or "").strip()
        return bool(title) and len(content) >= 10

    # --- Saving ---

    def save_draft(self) -> BlogPost | None:
        return self._save(publish=False)

    def publish(self) -> BlogPost | None:
        if not self.can_publish():
            self.toasts.error("A title and at least 10 characters of content are required")
            return None
        return self._save(publish=True)

    def _post_fields(self, publish: bool, featured_image: str | None, media_type: Any):
        values = self.form.values()
        content = values["content"] or ("" if publish else DRAFT_PLACEHOLDER)
        if publish:
            published_at = values["published_at"] or self.clock.now_utc().date().isoformat()
        else:
            published_at = None
        fields = {
            "title": values["title"],
            "slug": values["slug"] or None,
            "excerpt": values["excerpt"],
            "content": content,
            "featured_image": featured_image,
            "featured_media_type": media_type,
            "is_published": publish,
            "published_at": published_at,
            "reading_time": values["reading_time"],
            "tags": list(values["tags"]),
            "featured": values["featured"],
            "seo_title": values["seo_title"],
            "seo_description": values["seo_description"],
        }
        if self.is_new:
            fields["author_id"] = str(self.gateway.admin.id)
        return fields

    def _discard_uploads(self, uploaded: list[BlogMedia]) -> None:
        for item in uploaded:
            try:
                self.gateway.delete_media(item.id)
            except GatewayError as e:
                logger.warning("Could not clean up media %s: %s", item.id, e.message)

    def _save(self, publish: bool) -> BlogPost | None:
        creating = self.is_new
        upload_toast = None
        if self.pending_media is not None:
            upload_toast = self.toasts.loading("Uploading image/video...")
        if not publish:
            save_toast = self.toasts.loading("Saving draft...")
        elif creating:
            save_toast = self.toasts.loading("Creating blog post...")
        else:
            save_toast = self.toasts.loading("Updating blog post...")

        featured_image = self.form.get("featured_image")
        media_type = self.form.get("featured_media_type")
        uploaded: list[BlogMedia] = []
        try:
            if self.pending_media is not None:
                result = self.gateway.upload_media(
                    self.current_post_id, [MediaFileInput(file=self.pending_media)]
                )
                uploaded = result.uploaded
                featured_image = uploaded[0].file_url
                media_type = uploaded[0].file_type
                self.toasts.success("Image uploaded successfully!", upload_toast)

            fields = self._post_fields(publish, featured_image, media_type)
            try:
                if creating:
                    post = self.gateway.create_post(**fields)
                else:
                    assert self.post is not None
                    post = self.gateway.update_post(self.post.id, **fields)
            except GatewayError:
                self._discard_uploads(uploaded)
                raise

            # The post exists from here on; a retry after a later failure updates it
            self.post = post
            if uploaded:
                self.pending_media = None
                self.pending_feature = uploaded[0].id
                self.form.update(
                    {"featured_image": featured_image, "featured_media_type": media_type}
                )

            if self.temp_id is not None:
                self.gateway.reassign_media(self.temp_id, str(post.id))
                self.temp_id = None
            if self.pending_feature is not None:
                self.gateway.update_media(self.pending_feature, is_featured=True)
                self.pending_feature = None
        except GatewayError as e:
            logger.warning("Saving post failed: %s", e.message)
            self.toasts.dismiss(upload_toast)
            self.toasts.dismiss(save_toast)
            self.toasts.error(e.message)
            return None

        if publish:
            message = "Post published successfully!" if creating else "Post updated successfully!"
        else:
            message = "Draft saved successfully!" if creating else "Draft updated successfully!"
        self.toasts.success(message, save_toast)

        try:
            self.store.refresh_blog_posts(self.gateway)
        except GatewayError as e:
            logger.warning("Could not refresh posts: %s", e.message)

        if creating:
            self.form.reset()
        else:
            self.form.reset(post_form_values(post))
        self.close()
        return post

    # --- Gallery ---

    def load_gallery(self) -> None:
        try:
            self.gallery = self.gateway.list_media(self.current_post_id)
        except GatewayError as e:
            self.toasts.error(e.message)

    def upload_gallery(self, files: list[FileUpload]) -> list[BlogMedia]:
        if not files:
            return []
        toast_id = self.toasts.loading(f"Uploading {len(files)} file(s)...")
        try:
            result = self.gateway.upload_media(
                self.current_post_id, [MediaFileInput(file=f) for f in files]
            )
        except GatewayError as e:
            self.toasts.dismiss(toast_id)
            self.toasts.error(e.message)
            return []
        self.gallery = [*self.gallery, *result.uploaded]
        self.toasts.success(result.message, toast_id)
        for failure in result.failures:
            self.toasts.error(failure)
        return result.uploaded

    def reorder_gallery(self, media_ids: list[UUID]) -> bool:
        previous = list(self.gallery)
        by_id = {m.id: m for m in previous}

        def apply() -> None:
            ordered = [by_id[i] for i in media_ids if i in by_id]
            rest = [m for m in previous if m.id not in set(media_ids)]
            self.gallery = [
                m.model_copy(update={"sort_order": n}) for n, m in enumerate(ordered + rest)
            ]

        def revert() -> None:
            self.gallery = previous

        return apply_optimistic(
            apply=apply,
            revert=revert,
            commit=lambda: self.gateway.reorder_media(self.current_post_id, media_ids),
            toasts=self.toasts,
            failure_message="Failed to reorder media",
        )
