from __future__ import annotations

from dataclasses import dataclass

from authordesk.adapters.auth.crypto import JWTAuthAdapter
from authordesk.adapters.clock import SystemClock
from authordesk.adapters.fs.object_store import FileSystemObjectStore
from authordesk.adapters.sqlite.migrator import SQLiteMigrator
from authordesk.adapters.sqlite.repos import (
    SQLiteAdminUserRepo,
    SQLiteBlogMediaRepo,
    SQLiteBlogPostRepo,
    SQLiteBlogTagRepo,
    SQLiteBookRepo,
    SQLiteEngagementRepo,
    SQLiteLogRepo,
    SQLiteMessageRepo,
)
from authordesk.app_shell.rate_limit import RateLimiter
from authordesk.components.activity import ActivityConfig, ActivityLogger
from authordesk.components.auth import AuthConfig
from authordesk.components.blog import BlogConfig
from authordesk.components.books import BooksConfig
from authordesk.components.engagements import EngagementsConfig
from authordesk.components.media import MediaConfig
from authordesk.components.messages import MessagesConfig
from authordesk.ports.clock import TimePort
from authordesk.rules.models import Rules


@dataclass
class ComponentConfigs:
    books: BooksConfig
    blog: BlogConfig
    media: MediaConfig
    engagements: EngagementsConfig
    messages: MessagesConfig
    activity: ActivityConfig
    auth: AuthConfig

    @classmethod
    def from_rules(cls, rules: Rules) -> ComponentConfigs:
        buckets = rules.storage.buckets
        uploads = rules.uploads
        return cls(
            books=BooksConfig(
                cover_max_bytes=uploads.book_cover.max_bytes,
                cover_mime_types=tuple(uploads.book_cover.mime_types),
                covers_bucket=buckets.covers,
            ),
            blog=BlogConfig(media_bucket=buckets.blog_media),
            media=MediaConfig(
                bucket=buckets.blog_media,
                image_max_bytes=uploads.blog_media.image_max_bytes,
                video_max_bytes=uploads.blog_media.video_max_bytes,
                image_types=tuple(uploads.blog_media.image_types),
                video_types=tuple(uploads.blog_media.video_types),
            ),
            engagements=EngagementsConfig(
                max_images=uploads.engagement.max_images,
                image_max_bytes=uploads.engagement.max_bytes,
                image_types=tuple(uploads.engagement.mime_types),
                bucket=buckets.engagement_media,
            ),
            messages=MessagesConfig(
                max_files=uploads.contact.max_files,
                max_file_bytes=uploads.contact.max_file_bytes,
                max_total_bytes=uploads.contact.max_total_bytes,
                attachment_types=tuple(uploads.contact.mime_types),
                bucket=buckets.contact_attachments,
            ),
            activity=ActivityConfig(
                min_retention_days=rules.logs.min_retention_days,
                default_retention_days=rules.logs.default_retention_days,
            ),
            auth=AuthConfig(
                allowed_emails=tuple(rules.admin.allowed_emails),
                session_ttl_minutes=rules.admin.session_ttl_minutes,
                password_min_length=rules.admin.password_min_length,
            ),
        )


@dataclass
class ServiceContext:
    admin_repo: SQLiteAdminUserRepo
    book_repo: SQLiteBookRepo
    post_repo: SQLiteBlogPostRepo
    tag_repo: SQLiteBlogTagRepo
    media_repo: SQLiteBlogMediaRepo
    engagement_repo: SQLiteEngagementRepo
    message_repo: SQLiteMessageRepo
    log_repo: SQLiteLogRepo
    storage: FileSystemObjectStore
    auth_adapter: JWTAuthAdapter
    activity: ActivityLogger
    rate_limiter: RateLimiter
    configs: ComponentConfigs
    rules: Rules
    db_path: str
    clock: TimePort

    @classmethod
    def create(
        cls,
        db_path: str,
        fs_path: str,
        rules: Rules,
        *,
        secret_key: str,
        public_base_url: str | None = None,
        clock: TimePort | None = None,
    ) -> ServiceContext:
        clock = clock or SystemClock()
        log_repo = SQLiteLogRepo(db_path)
        configs = ComponentConfigs.from_rules(rules)

        return cls(
            admin_repo=SQLiteAdminUserRepo(db_path),
            book_repo=SQLiteBookRepo(db_path),
            post_repo=SQLiteBlogPostRepo(db_path),
            tag_repo=SQLiteBlogTagRepo(db_path),
            media_repo=SQLiteBlogMediaRepo(db_path),
            engagement_repo=SQLiteEngagementRepo(db_path),
            message_repo=SQLiteMessageRepo(db_path),
            log_repo=log_repo,
            storage=FileSystemObjectStore(
                fs_path, public_base_url or rules.storage.public_base_url
            ),
            auth_adapter=JWTAuthAdapter(secret_key),
            activity=ActivityLogger(log_repo, clock, configs.activity),
            rate_limiter=RateLimiter(rules.rate_limit, clock),
            configs=configs,
            rules=rules,
            db_path=db_path,
            clock=clock,
        )

    def migrate(self, migrations_dir: str) -> list[str]:
        return SQLiteMigrator(self.db_path, migrations_dir).run_migrations()
