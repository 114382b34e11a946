from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import jwt
from passlib.context import CryptContext

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    result: bool = pwd_context.verify(plain_password, hashed_password)
    return result


def get_password_hash(password: str) -> str:
    result: str = pwd_context.hash(password)
    return result


class JWTAuthAdapter:
    """Auth adapter that signs JWT session tokens and hashes passwords with argon2."""

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def create_token(
        self,
        claims: dict[str, Any],
        ttl_minutes: int,
        now_utc: datetime | None = None,
    ) -> str:
        """
        Create a signed access token.

        Args:
            claims: Claims to encode in the token
            ttl_minutes: Lifetime of the token
            now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
        """
        to_encode = claims.copy()
        current_time = now_utc if now_utc is not None else datetime.now(UTC)
        to_encode.update({"exp": current_time + timedelta(minutes=ttl_minutes)})
        encoded: str = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        return encoded

    def decode_token(self, token: str, *, verify_exp: bool = True) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": verify_exp},
            )
            return cast(dict[str, Any], payload)
        except jwt.JWTError:
            return None
