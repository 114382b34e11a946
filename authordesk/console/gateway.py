"""
Console gateway - the console's only route to the backend components.

Every method runs one component operation with the ports held by the
ServiceContext. A failed output raises GatewayError carrying an HTTP-like
status so page controllers can treat it as a non-ok response. Mutations
are recorded in the activity log under the signed-in admin.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar
from uuid import UUID

from authordesk.app_shell.context import ServiceContext
from authordesk.components import activity, blog, books, engagements, media, messages
from authordesk.components.activity import UserContext
from authordesk.components.auth import LoginInput, VerifyTokenInput, run_login, run_verify
from authordesk.domain.entities import AdminUser, BlogMedia, BlogPost, Book, Engagement
from authordesk.domain.uploads import FileUpload
from authordesk.ports.errors import BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STATUS_BY_CODE = {
    "not_found": 404,
    "slug_exists": 409,
    "duplicate": 409,
    "not_admin": 403,
    "inactive": 403,
    "invalid_credentials": 401,
    "invalid_token": 401,
    "expired": 401,
    "backend": 500,
    "storage": 500,
}


class GatewayError(Exception):
    """A backend call that did not succeed."""

    def __init__(
        self,
        message: str,
        *,
        status: int = 400,
        code: str | None = None,
        errors: list[Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.errors = errors or []


def _raise_for(output: Any) -> None:
    errors = list(getattr(output, "errors", []))
    code = errors[0].code if errors else None
    message = "; ".join(e.message for e in errors) or "Request failed"
    status = _STATUS_BY_CODE.get(code or "", 400)
    raise GatewayError(message, status=status, code=code, errors=errors)


def _check(output: T) -> T:
    if not getattr(output, "success", True):
        _raise_for(output)
    return output


def _from_backend(e: BackendError) -> GatewayError:
    return GatewayError(e.message, status=_STATUS_BY_CODE.get(e.code, 500), code=e.code)


def _guarded(method: Callable[..., T]) -> Callable[..., T]:
    """Only GatewayError leaves a gateway method."""

    @functools.wraps(method)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return method(*args, **kwargs)
        except BackendError as e:
            logger.error("%s failed: %s", method.__name__, e.message)
            raise _from_backend(e) from e

    return wrapper


class ConsoleGateway:
    def __init__(self, ctx: ServiceContext, admin: AdminUser):
        self.ctx = ctx
        self.admin = admin
        self.user_context = UserContext(user_id=str(admin.id), user_email=admin.email)

    # --- Sessions ---

    @classmethod
    @_guarded
    def sign_in(
        cls, ctx: ServiceContext, email: str, password: str
    ) -> tuple[ConsoleGateway, str]:
        """Log in and return a gateway bound to the admin plus the session token."""
        result = run_login(
            LoginInput(email=email, password=password),
            ctx.admin_repo,
            ctx.auth_adapter,
            ctx.clock,
            ctx.configs.auth,
        )
        if not result.success or result.user is None or result.token is None:
            ctx.activity.log_error(
                "admin_login", result.error or "login failed", {"email": email.strip().lower()}
            )
            raise GatewayError(
                result.error or "Login failed",
                status=_STATUS_BY_CODE.get(result.code or "", 400),
                code=result.code,
            )
        gateway = cls(ctx, result.user)
        ctx.activity.log_user_action("admin_login", {}, gateway.user_context)
        return gateway, result.token

    @classmethod
    @_guarded
    def from_token(cls, ctx: ServiceContext, token: str) -> ConsoleGateway:
        result = run_verify(
            VerifyTokenInput(token=token),
            ctx.admin_repo,
            ctx.auth_adapter,
            ctx.clock,
            ctx.configs.auth,
        )
        if not result.success or result.user is None:
            raise GatewayError(
                result.error or "Unauthorized",
                status=_STATUS_BY_CODE.get(result.code or "", 401),
                code=result.code,
            )
        return cls(ctx, result.user)

    def _mutate(self, action: str, details: dict[str, Any], call: Callable[[], T]) -> T:
        try:
            output = call()
        except BackendError as e:
            self.ctx.activity.log_error(action, e.message, details, self.user_context)
            raise _from_backend(e) from e
        if not getattr(output, "success", True):
            errors = getattr(output, "errors", [])
            message = "; ".join(e.message for e in errors) or "Request failed"
            self.ctx.activity.log_error(action, message, details, self.user_context)
            _raise_for(output)
        self.ctx.activity.log_user_action(action, details, self.user_context)
        return output

    # --- Books ---

    @_guarded
    def list_books(
        self,
        *,
        search: str | None = None,
        genre: str | None = None,
        featured: bool | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> books.BookListOutput:
        return _check(
            books.run_list(
                books.ListBooksInput(
                    search=search, genre=genre, featured=featured, page=page, limit=limit
                ),
                repo=self.ctx.book_repo,
            )
        )

    @_guarded
    def get_book(self, book_id: UUID) -> Book:
        out = _check(books.run_get(books.GetBookInput(book_id=book_id), repo=self.ctx.book_repo))
        assert out.book is not None
        return out.book

    @_guarded
    def create_book(self, data: dict[str, Any]) -> Book:
        out = self._mutate(
            "book_create",
            {"title": data.get("title")},
            lambda: books.run_create(
                books.CreateBookInput(**data),
                repo=self.ctx.book_repo,
                time=self.ctx.clock,
                config=self.ctx.configs.books,
            ),
        )
        assert out.book is not None
        return out.book

    @_guarded
    def update_book(self, book_id: UUID, updates: dict[str, Any]) -> Book:
        out = self._mutate(
            "book_update",
            {"book_id": str(book_id), "fields": sorted(updates)},
            lambda: books.run_update(
                books.UpdateBookInput(book_id=book_id, updates=updates),
                repo=self.ctx.book_repo,
                time=self.ctx.clock,
                config=self.ctx.configs.books,
            ),
        )
        assert out.book is not None
        return out.book

    @_guarded
    def delete_book(self, book_id: UUID) -> None:
        self._mutate(
            "book_delete",
            {"book_id": str(book_id)},
            lambda: books.run_delete(
                books.DeleteBookInput(book_id=book_id), repo=self.ctx.book_repo
            ),
        )

    @_guarded
    def book_stats(self) -> books.BookStatsOutput:
        return _check(books.run_stats(repo=self.ctx.book_repo))

    @_guarded
    def book_genres(self) -> list[str]:
        return _check(books.run_genres(repo=self.ctx.book_repo)).genres

    @_guarded
    def upload_cover(self, file: FileUpload) -> books.CoverUploadOutput:
        out = _check(
            books.run_upload_cover(
                books.UploadCoverInput(file=file),
                storage=self.ctx.storage,
                time=self.ctx.clock,
                config=self.ctx.configs.books,
            )
        )
        self.ctx.activity.log_file_upload(
            file.filename,
            file.size,
            self.ctx.configs.books.covers_bucket,
            context=self.user_context,
        )
        return out

    @_guarded
    def cover_url(self, book: Book) -> str | None:
        bucket_url = self.ctx.storage.public_url(self.ctx.configs.books.covers_bucket, "")
        return books.resolve_cover_image(book.cover_image, bucket_url)

    # --- Blog ---

    @_guarded
    def list_posts(self, **filters: Any) -> blog.PostListOutput:
        return _check(blog.run_list(blog.ListPostsInput(**filters), repo=self.ctx.post_repo))

    @_guarded
    def get_post(self, post_id: UUID) -> BlogPost:
        out = _check(blog.run_get(blog.GetPostInput(post_id=post_id), repo=self.ctx.post_repo))
        assert out.post is not None
        return out.post

    @_guarded
    def create_post(self, **fields: Any) -> BlogPost:
        out = self._mutate(
            "blog_post_create",
            {"title": fields.get("title"), "is_published": fields.get("is_published", False)},
            lambda: blog.run_create(
                blog.CreatePostInput(**fields),
                repo=self.ctx.post_repo,
                tag_repo=self.ctx.tag_repo,
                time=self.ctx.clock,
                config=self.ctx.configs.blog,
            ),
        )
        assert out.post is not None
        return out.post

    @_guarded
    def update_post(self, post_id: UUID, **fields: Any) -> BlogPost:
        out = self._mutate(
            "blog_post_update",
            {"post_id": str(post_id), "is_published": fields.get("is_published", False)},
            lambda: blog.run_update(
                blog.UpdatePostInput(post_id=post_id, **fields),
                repo=self.ctx.post_repo,
                tag_repo=self.ctx.tag_repo,
                time=self.ctx.clock,
                config=self.ctx.configs.blog,
            ),
        )
        assert out.post is not None
        return out.post

    @_guarded
    def toggle_post_published(self, post_id: UUID) -> BlogPost:
        out = self._mutate(
            "blog_post_toggle_published",
            {"post_id": str(post_id)},
            lambda: blog.run_toggle_published(
                blog.TogglePublishedInput(post_id=post_id),
                repo=self.ctx.post_repo,
                time=self.ctx.clock,
                config=self.ctx.configs.blog,
            ),
        )
        assert out.post is not None
        return out.post

    @_guarded
    def delete_post(self, post_id: UUID) -> None:
        self._mutate(
            "blog_post_delete",
            {"post_id": str(post_id)},
            lambda: blog.run_delete(
                blog.DeletePostInput(post_id=post_id),
                repo=self.ctx.post_repo,
                media_repo=self.ctx.media_repo,
                storage=self.ctx.storage,
                config=self.ctx.configs.blog,
            ),
        )

    @_guarded
    def blog_stats(self) -> blog.BlogStatsOutput:
        return _check(blog.run_stats(repo=self.ctx.post_repo, tag_repo=self.ctx.tag_repo))

    @_guarded
    def list_tags(self) -> list[Any]:
        return _check(blog.run_list_tags(tag_repo=self.ctx.tag_repo)).tags

    @_guarded
    def create_tag(self, name: str, description: str | None = None, color: str | None = None):
        out = self._mutate(
            "blog_tag_create",
            {"name": name},
            lambda: blog.run_create_tag(
                blog.CreateTagInput(name=name, description=description, color=color),
                tag_repo=self.ctx.tag_repo,
                time=self.ctx.clock,
                config=self.ctx.configs.blog,
            ),
        )
        return out.tag

    @_guarded
    def delete_tag(self, tag_id: UUID) -> None:
        self._mutate(
            "blog_tag_delete",
            {"tag_id": str(tag_id)},
            lambda: blog.run_delete_tag(
                blog.DeleteTagInput(tag_id=tag_id), tag_repo=self.ctx.tag_repo
            ),
        )

    # --- Blog media ---

    @_guarded
    def upload_media(
        self, post_id: str, files: list[media.MediaFileInput]
    ) -> media.UploadMediaOutput:
        out = self._mutate(
            "blog_media_upload",
            {"post_id": post_id, "files": [f.file.filename for f in files]},
            lambda: media.run_upload(
                media.UploadMediaInput(post_id=post_id, files=files),
                repo=self.ctx.media_repo,
                storage=self.ctx.storage,
                time=self.ctx.clock,
                config=self.ctx.configs.media,
            ),
        )
        for item in out.uploaded:
            self.ctx.activity.log_file_upload(
                item.file_name,
                item.file_size,
                self.ctx.configs.media.bucket,
                context=self.user_context,
            )
        return out

    @_guarded
    def list_media(self, post_id: str) -> list[BlogMedia]:
        out = media.run_list(media.ListMediaInput(post_id=post_id), repo=self.ctx.media_repo)
        return _check(out).items

    @_guarded
    def update_media(self, media_id: UUID, **fields: Any) -> BlogMedia:
        out = _check(
            media.run_update_metadata(
                media.UpdateMediaInput(media_id=media_id, **fields),
                repo=self.ctx.media_repo,
                time=self.ctx.clock,
            )
        )
        assert out.media is not None
        return out.media

    @_guarded
    def delete_media(self, media_id: UUID) -> None:
        self._mutate(
            "blog_media_delete",
            {"media_id": str(media_id)},
            lambda: media.run_delete(
                media.DeleteMediaInput(media_id=media_id),
                repo=self.ctx.media_repo,
                storage=self.ctx.storage,
                config=self.ctx.configs.media,
            ),
        )

    @_guarded
    def reorder_media(self, post_id: str, media_ids: list[UUID]) -> list[BlogMedia]:
        return _check(
            media.run_reorder(
                media.ReorderMediaInput(post_id=post_id, media_ids=media_ids),
                repo=self.ctx.media_repo,
                time=self.ctx.clock,
            )
        ).items

    @_guarded
    def reassign_media(self, from_post_id: str, to_post_id: str) -> int:
        return _check(
            media.run_reassign(
                media.ReassignMediaInput(from_post_id=from_post_id, to_post_id=to_post_id),
                repo=self.ctx.media_repo,
            )
        ).moved

    # --- Engagements ---

    @_guarded
    def list_engagements(self, **filters: Any) -> engagements.EngagementListOutput:
        return _check(
            engagements.run_list(
                engagements.ListEngagementsInput(**filters),
                repo=self.ctx.engagement_repo,
                time=self.ctx.clock,
            )
        )

    @_guarded
    def create_engagement(
        self,
        fields: dict[str, Any],
        existing_images: list[str],
        files: list[FileUpload],
    ) -> engagements.EngagementOutput:
        return self._mutate(
            "engagement_create",
            {"title": fields.get("title"), "new_files": len(files)},
            lambda: engagements.run_create(
                engagements.CreateEngagementInput(
                    **fields, existing_images=list(existing_images), new_files=list(files)
                ),
                repo=self.ctx.engagement_repo,
                time=self.ctx.clock,
                storage=self.ctx.storage,
                config=self.ctx.configs.engagements,
            ),
        )

    @_guarded
    def update_engagement(
        self,
        engagement_id: UUID,
        updates: dict[str, Any],
        files: list[FileUpload] | None = None,
    ) -> engagements.EngagementOutput:
        return self._mutate(
            "engagement_update",
            {"engagement_id": str(engagement_id), "fields": sorted(updates)},
            lambda: engagements.run_update(
                engagements.UpdateEngagementInput(
                    engagement_id=engagement_id, updates=updates, new_files=list(files or [])
                ),
                repo=self.ctx.engagement_repo,
                time=self.ctx.clock,
                storage=self.ctx.storage,
                config=self.ctx.configs.engagements,
            ),
        )

    @_guarded
    def delete_engagement(self, engagement_id: UUID) -> None:
        self._mutate(
            "engagement_delete",
            {"engagement_id": str(engagement_id)},
            lambda: engagements.run_delete(
                engagements.DeleteEngagementInput(engagement_id=engagement_id),
                repo=self.ctx.engagement_repo,
            ),
        )

    @_guarded
    def get_engagement(self, engagement_id: UUID) -> Engagement:
        out = _check(
            engagements.run_get(
                engagements.GetEngagementInput(engagement_id=engagement_id),
                repo=self.ctx.engagement_repo,
            )
        )
        assert out.engagement is not None
        return out.engagement

    @_guarded
    def engagement_stats(self) -> engagements.EngagementStatsOutput:
        return _check(engagements.run_stats(repo=self.ctx.engagement_repo))

    # --- Messages ---

    @_guarded
    def list_messages(self, **filters: Any) -> messages.MessageListOutput:
        return _check(
            messages.run_list(messages.ListMessagesInput(**filters), repo=self.ctx.message_repo)
        )

    @_guarded
    def search_messages(self, **filters: Any) -> messages.MessageListOutput:
        return _check(
            messages.run_search(messages.SearchMessagesInput(**filters), repo=self.ctx.message_repo)
        )

    @_guarded
    def update_message(self, message_id: UUID, updates: dict[str, Any]):
        out = self._mutate(
            "message_update",
            {"message_id": str(message_id), **updates},
            lambda: messages.run_update(
                messages.UpdateMessageInput(message_id=message_id, updates=updates),
                repo=self.ctx.message_repo,
            ),
        )
        return out.message

    @_guarded
    def batch_update_status(self, message_ids: list[UUID], status: str) -> int:
        out = self._mutate(
            "messages_batch_status",
            {"count": len(message_ids), "status": status},
            lambda: messages.run_batch_update_status(
                messages.BatchStatusInput(message_ids=list(message_ids), status=status),
                repo=self.ctx.message_repo,
            ),
        )
        return out.affected

    @_guarded
    def batch_delete_messages(self, message_ids: list[UUID]) -> int:
        out = self._mutate(
            "messages_batch_delete",
            {"count": len(message_ids)},
            lambda: messages.run_batch_delete(
                messages.BatchDeleteInput(message_ids=list(message_ids)),
                repo=self.ctx.message_repo,
                storage=self.ctx.storage,
                config=self.ctx.configs.messages,
            ),
        )
        return out.affected

    @_guarded
    def export_messages(self, **options: Any) -> messages.ExportOutput:
        return self._mutate(
            "messages_export",
            {"format": options.get("format", "csv")},
            lambda: messages.run_export(
                messages.ExportMessagesInput(**options),
                repo=self.ctx.message_repo,
                time=self.ctx.clock,
            ),
        )

    @_guarded
    def message_stats(self) -> messages.MessageStatsOutput:
        return _check(messages.run_stats(repo=self.ctx.message_repo))

    # --- Activity log ---

    @_guarded
    def query_logs(self, **filters: Any) -> activity.LogListOutput:
        return _check(
            activity.run_query(activity.QueryLogsInput(**filters), repo=self.ctx.log_repo)
        )

    @_guarded
    def log_stats(self) -> activity.LogStatsOutput:
        return _check(activity.run_stats(repo=self.ctx.log_repo))

    @_guarded
    def purge_logs(self, older_than_days: int | None = None) -> int:
        out = self._mutate(
            "logs_purge",
            {"older_than_days": older_than_days},
            lambda: activity.run_purge(
                activity.PurgeLogsInput(older_than_days=older_than_days),
                repo=self.ctx.log_repo,
                time=self.ctx.clock,
                config=self.ctx.configs.activity,
            ),
        )
        return out.deleted
