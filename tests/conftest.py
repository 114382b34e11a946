import os
from pathlib import Path

import pytest

from authordesk.adapters.clock import FrozenClock
from authordesk.app_shell.context import ServiceContext
from authordesk.console.gateway import ConsoleGateway
from authordesk.console.store import AdminStore
from authordesk.console.toasts import ToastCenter
from authordesk.domain.entities import AdminUser
from authordesk.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
def rules():
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def test_ctx(tmp_path, rules, clock):
    """
    Creates a full ServiceContext backed by a temporary SQLite DB and object store.
    """
    db_path = os.path.join(tmp_path, "authordesk.db")
    ctx = ServiceContext.create(
        db_path,
        str(tmp_path / "storage"),
        rules,
        secret_key="test-secret",
        public_base_url="http://test/storage",
        clock=clock,
    )
    ctx.migrate(str(PROJECT_ROOT / "migrations"))
    return ctx


@pytest.fixture
def admin(test_ctx):
    return test_ctx.admin_repo.save(
        AdminUser(
            email=ADMIN_EMAIL,
            display_name="Admin",
            password_hash=test_ctx.auth_adapter.hash_password(ADMIN_PASSWORD),
        )
    )


@pytest.fixture
def gateway(test_ctx, admin):
    return ConsoleGateway(test_ctx, admin)


@pytest.fixture
def store():
    return AdminStore()


@pytest.fixture
def toasts():
    return ToastCenter()
