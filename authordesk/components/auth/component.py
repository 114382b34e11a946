import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from authordesk.domain.entities import AdminUser
from authordesk.domain.values import is_valid_email
from authordesk.ports.errors import BackendError

from .models import AuthConfig, AuthOutput, CreateAdminInput, LoginInput, VerifyTokenInput
from .ports import AdminUserRepoPort, AuthAdapterPort, TimePort

logger = logging.getLogger(__name__)


def _fail(code: str, error: str) -> AuthOutput:
    return AuthOutput(success=False, code=code, error=error)


def _backend_fail(e: BackendError) -> AuthOutput:
    logger.error("Admin user lookup failed: %s", e.message)
    return _fail(e.code, e.message)


def run_login(
    inp: LoginInput,
    user_repo: AdminUserRepoPort,
    auth_adapter: AuthAdapterPort,
    time: TimePort,
    config: AuthConfig,
) -> AuthOutput:
    email = inp.email.strip().lower()
    try:
        user = user_repo.get_by_email(email)
    except BackendError as e:
        return _backend_fail(e)
    if not user:
        return _fail("invalid_credentials", "Invalid credentials")

    if not auth_adapter.verify_password(inp.password, user.password_hash):
        return _fail("invalid_credentials", "Invalid credentials")

    if user.status != "active":
        return _fail("inactive", "User account is disabled")

    if not config.is_admin_email(user.email):
        return _fail("not_admin", "Access denied. Admin privileges required.")

    now = time.now_utc()
    token = auth_adapter.create_token(
        {"sub": str(user.id), "email": user.email},
        config.session_ttl_minutes,
        now_utc=now,
    )
    return AuthOutput(
        user=user,
        token=token,
        expires_at=now + timedelta(minutes=config.session_ttl_minutes),
        success=True,
    )


def run_verify(
    inp: VerifyTokenInput,
    user_repo: AdminUserRepoPort,
    auth_adapter: AuthAdapterPort,
    time: TimePort,
    config: AuthConfig,
) -> AuthOutput:
    # Expiry is checked against the injected clock, not the wall clock.
    claims = auth_adapter.decode_token(inp.token, verify_exp=False)
    if not claims or "sub" not in claims:
        return _fail("invalid_token", "Invalid session token")

    expires_at = datetime.fromtimestamp(int(claims.get("exp", 0)), tz=UTC)
    if expires_at <= time.now_utc():
        return _fail("expired", "Session expired")

    try:
        user_id = UUID(str(claims["sub"]))
    except ValueError:
        return _fail("invalid_token", "Invalid session token")

    try:
        user = user_repo.get_by_id(user_id)
    except BackendError as e:
        return _backend_fail(e)
    if not user:
        return _fail("not_found", "User not found")
    if user.status != "active":
        return _fail("inactive", "User account is disabled")
    if not config.is_admin_email(user.email):
        return _fail("not_admin", "Access denied. Admin privileges required.")

    return AuthOutput(user=user, token=inp.token, expires_at=expires_at, success=True)


def run_create_admin(
    inp: CreateAdminInput,
    user_repo: AdminUserRepoPort,
    auth_adapter: AuthAdapterPort,
    time: TimePort,
    config: AuthConfig,
) -> AuthOutput:
    email = inp.email.strip().lower()
    if not is_valid_email(email):
        return _fail("validation", "Please enter a valid email address")

    if not config.is_admin_email(email):
        return _fail("not_admin", f"{email} is not in the admin allow-list")

    if len(inp.password) < config.password_min_length:
        return _fail(
            "validation",
            f"Password must be at least {config.password_min_length} characters",
        )

    try:
        exists = user_repo.get_by_email(email) is not None
    except BackendError as e:
        return _backend_fail(e)
    if exists:
        return _fail("duplicate", "Email already in use")

    now = time.now_utc()
    user = AdminUser(
        id=uuid4(),
        email=email,
        display_name=inp.display_name or email.split("@")[0],
        password_hash=auth_adapter.hash_password(inp.password),
        status="active",
        created_at=now,
        updated_at=now,
    )
    try:
        user_repo.save(user)
    except BackendError as e:
        logger.error("Admin user create failed for %s: %s", email, e.message)
        return _fail(e.code, e.message)
    return AuthOutput(user=user, success=True)
