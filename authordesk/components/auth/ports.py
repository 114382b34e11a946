from typing import Any, Protocol

from authordesk.ports.clock import TimePort
from authordesk.ports.repo import AdminUserRepoPort


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, password: str) -> str: ...
    def create_token(
        self, claims: dict[str, Any], ttl_minutes: int, now_utc: Any = None
    ) -> str: ...
    def decode_token(self, token: str, *, verify_exp: bool = True) -> dict[str, Any] | None: ...


__all__ = ["AdminUserRepoPort", "AuthAdapterPort", "TimePort"]
