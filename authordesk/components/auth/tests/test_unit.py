"""
Auth component unit tests.

Login, token verification against an injected clock, and admin creation.
"""

from __future__ import annotations

from uuid import UUID

import pytest

from authordesk.adapters.auth.crypto import JWTAuthAdapter
from authordesk.adapters.clock import FrozenClock
from authordesk.components.auth import (
    AuthConfig,
    CreateAdminInput,
    LoginInput,
    VerifyTokenInput,
    run_create_admin,
    run_login,
    run_verify,
)
from authordesk.domain.entities import AdminUser

# --- Mock Implementations ---


class MockAdminRepo:
    def __init__(self) -> None:
        self._users: dict[UUID, AdminUser] = {}

    def get_by_email(self, email: str) -> AdminUser | None:
        return next((u for u in self._users.values() if u.email == email), None)

    def get_by_id(self, user_id: UUID) -> AdminUser | None:
        return self._users.get(user_id)

    def save(self, user: AdminUser) -> AdminUser:
        self._users[user.id] = user
        return user


@pytest.fixture
def repo() -> MockAdminRepo:
    return MockAdminRepo()


@pytest.fixture
def adapter() -> JWTAuthAdapter:
    return JWTAuthAdapter("test-secret")


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def config() -> AuthConfig:
    return AuthConfig(allowed_emails=("admin@example.com",), session_ttl_minutes=60)


@pytest.fixture
def admin(repo, adapter, clock, config) -> AdminUser:
    result = run_create_admin(
        CreateAdminInput(email="Admin@Example.com", password="correct horse"),
        repo,
        adapter,
        clock,
        config,
    )
    assert result.success, result.error
    return result.user


class TestCreateAdmin:
    def test_normalises_email_and_hashes(self, admin) -> None:
        assert admin.email == "admin@example.com"
        assert admin.display_name == "admin"
        assert admin.password_hash != "correct horse"

    def test_short_password(self, repo, adapter, clock, config) -> None:
        result = run_create_admin(
            CreateAdminInput(email="admin@example.com", password="short"),
            repo,
            adapter,
            clock,
            config,
        )
        assert result.code == "validation"

    def test_email_must_be_allowed(self, repo, adapter, clock, config) -> None:
        result = run_create_admin(
            CreateAdminInput(email="other@example.com", password="long enough pw"),
            repo,
            adapter,
            clock,
            config,
        )
        assert result.code == "not_admin"

    def test_duplicate(self, admin, repo, adapter, clock, config) -> None:
        result = run_create_admin(
            CreateAdminInput(email="admin@example.com", password="another password"),
            repo,
            adapter,
            clock,
            config,
        )
        assert result.code == "duplicate"


class TestLogin:
    def test_success_issues_token(self, admin, repo, adapter, clock, config) -> None:
        result = run_login(
            LoginInput(email="admin@example.com", password="correct horse"),
            repo,
            adapter,
            clock,
            config,
        )
        assert result.success
        assert result.token
        assert adapter.decode_token(result.token, verify_exp=False)["email"] == admin.email

    def test_wrong_password(self, admin, repo, adapter, clock, config) -> None:
        result = run_login(
            LoginInput(email="admin@example.com", password="nope"), repo, adapter, clock, config
        )
        assert result.code == "invalid_credentials"

    def test_unknown_user(self, repo, adapter, clock, config) -> None:
        result = run_login(
            LoginInput(email="ghost@example.com", password="x"), repo, adapter, clock, config
        )
        assert result.code == "invalid_credentials"

    def test_disabled_user(self, admin, repo, adapter, clock, config) -> None:
        repo.save(admin.model_copy(update={"status": "disabled"}))
        result = run_login(
            LoginInput(email="admin@example.com", password="correct horse"),
            repo,
            adapter,
            clock,
            config,
        )
        assert result.code == "inactive"

    def test_removed_from_allow_list(self, admin, repo, adapter, clock) -> None:
        result = run_login(
            LoginInput(email="admin@example.com", password="correct horse"),
            repo,
            adapter,
            clock,
            AuthConfig(allowed_emails=()),
        )
        assert result.code == "not_admin"


class TestVerify:
    def _token(self, repo, adapter, clock, config) -> str:
        result = run_login(
            LoginInput(email="admin@example.com", password="correct horse"),
            repo,
            adapter,
            clock,
            config,
        )
        return result.token

    def test_valid_token(self, admin, repo, adapter, clock, config) -> None:
        token = self._token(repo, adapter, clock, config)
        result = run_verify(VerifyTokenInput(token=token), repo, adapter, clock, config)
        assert result.success
        assert result.user.id == admin.id

    def test_expired_by_injected_clock(self, admin, repo, adapter, clock, config) -> None:
        token = self._token(repo, adapter, clock, config)
        clock.advance(seconds=61 * 60)
        result = run_verify(VerifyTokenInput(token=token), repo, adapter, clock, config)
        assert result.code == "expired"

    def test_tampered_token(self, admin, repo, adapter, clock, config) -> None:
        token = self._token(repo, adapter, clock, config)
        other = JWTAuthAdapter("different-secret")
        result = run_verify(VerifyTokenInput(token=token), repo, other, clock, config)
        assert result.code == "invalid_token"
