from pydantic import BaseModel, Field


class AdminRules(BaseModel):
    allowed_emails: list[str]
    session_ttl_minutes: int = 1440
    password_min_length: int = 10

    def is_admin_email(self, email: str) -> bool:
        allowed = {e.strip().lower() for e in self.allowed_emails}
        return email.strip().lower() in allowed

class BucketRules(BaseModel):
    covers: str = "public"
    blog_media: str = "blog-media"
    engagement_media: str = "engagement-media"
    contact_attachments: str = "contact-attachments"

class StorageRules(BaseModel):
    public_base_url: str
    buckets: BucketRules = Field(default_factory=BucketRules)

class BookCoverUploadRules(BaseModel):
    max_bytes: int
    mime_types: list[str]

class BlogMediaUploadRules(BaseModel):
    image_max_bytes: int
    video_max_bytes: int
    image_types: list[str]
    video_types: list[str]

class EngagementUploadRules(BaseModel):
    max_bytes: int
    max_images: int = 10
    mime_types: list[str]

class ContactUploadRules(BaseModel):
    max_files: int
    max_file_bytes: int
    max_total_bytes: int
    mime_types: list[str]

class UploadRules(BaseModel):
    book_cover: BookCoverUploadRules
    blog_media: BlogMediaUploadRules
    engagement: EngagementUploadRules
    contact: ContactUploadRules

class PageSizeRules(BaseModel):
    books: int = 10
    posts: int = 10
    engagements: int = 12
    messages: int = 50
    logs: int = 50

class ConsoleRules(BaseModel):
    slug_debounce_ms: int = 300
    page_sizes: PageSizeRules = Field(default_factory=PageSizeRules)

class LogRules(BaseModel):
    min_retention_days: int = 7
    default_retention_days: int = 30

class LimitConfig(BaseModel):
    window_seconds: int
    max_requests: int

class RateLimitRules(BaseModel):
    contact: LimitConfig

class Rules(BaseModel):
    admin: AdminRules
    storage: StorageRules
    uploads: UploadRules
    console: ConsoleRules = Field(default_factory=ConsoleRules)
    logs: LogRules = Field(default_factory=LogRules)
    rate_limit: RateLimitRules
