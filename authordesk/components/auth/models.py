from dataclasses import dataclass
from datetime import datetime

from authordesk.domain.entities import AdminUser


@dataclass(frozen=True)
class AuthConfig:
    allowed_emails: tuple[str, ...] = ()
    session_ttl_minutes: int = 24 * 60
    password_min_length: int = 10

    def is_admin_email(self, email: str) -> bool:
        allowed = {e.strip().lower() for e in self.allowed_emails}
        return email.strip().lower() in allowed


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class VerifyTokenInput:
    token: str


@dataclass
class CreateAdminInput:
    email: str
    password: str
    display_name: str | None = None


@dataclass
class AuthOutput:
    user: AdminUser | None = None
    token: str | None = None
    expires_at: datetime | None = None
    success: bool = False
    code: str | None = None
    error: str | None = None
