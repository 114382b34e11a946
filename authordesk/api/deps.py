from functools import lru_cache

from fastapi import Depends, Request

from authordesk.app_shell.config import Settings, get_settings
from authordesk.app_shell.context import ServiceContext
from authordesk.rules.loader import load_rules


# --- Service context ---
@lru_cache
def _build_context(settings: Settings) -> ServiceContext:
    rules = load_rules(settings.rules_path)
    ctx = ServiceContext.create(
        settings.db_path,
        settings.storage_dir,
        rules,
        secret_key=settings.secret_key,
        public_base_url=settings.public_base_url,
    )
    ctx.migrate(str(settings.migrations_dir))
    return ctx


def get_context(settings: Settings = Depends(get_settings)) -> ServiceContext:
    return _build_context(settings)


def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    # Check X-Forwarded-For header (proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
