import json
from pathlib import Path

import pytest

from authordesk.adapters.clock import FrozenClock
from authordesk.app_shell import cli
from authordesk.app_shell.config import DEV_SECRET_KEY, Settings, get_settings, validate_settings
from authordesk.app_shell.rate_limit import RateLimiter
from authordesk.rules.models import LimitConfig, RateLimitRules

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTHORDESK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("AUTHORDESK_RULES_PATH", str(PROJECT_ROOT / "rules.yaml"))
    monkeypatch.setenv("AUTHORDESK_MIGRATIONS_DIR", str(PROJECT_ROOT / "migrations"))
    monkeypatch.delenv("AUTHORDESK_ENV", raising=False)
    monkeypatch.delenv("AUTHORDESK_SECRET_KEY", raising=False)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


# --- Settings ---


def test_settings_read_environment(env):
    settings = Settings()
    assert settings.db_path == str(env / "data" / "authordesk.db")
    assert settings.storage_dir == str(env / "data" / "storage")
    assert settings.secret_key == DEV_SECRET_KEY
    assert not settings.is_production


def test_validate_settings_rejects_dev_key_in_production(env, monkeypatch):
    monkeypatch.setenv("AUTHORDESK_ENV", "production")
    with pytest.raises(SystemExit):
        validate_settings(Settings())


def test_validate_settings_creates_data_dir(env):
    settings = Settings()
    validate_settings(settings)
    assert settings.data_dir.is_dir()


# --- Rate limiting ---


def test_rate_limiter_window():
    clock = FrozenClock()
    limiter = RateLimiter(
        RateLimitRules(contact=LimitConfig(window_seconds=60, max_requests=2)), clock
    )

    assert limiter.check_contact("1.2.3.4")
    assert limiter.check_contact("1.2.3.4")
    assert not limiter.check_contact("1.2.3.4")
    assert limiter.check_contact("5.6.7.8")
    assert limiter.retry_after("contact:1.2.3.4", 60) == 60

    clock.advance(seconds=61)
    assert limiter.check_contact("1.2.3.4")


# --- CLI ---


def test_cli_migrate_then_stats(env, capsys):
    cli.main(["migrate"])
    assert "Applied 001_initial.sql" in capsys.readouterr().out

    cli.main(["migrate"])
    assert "up to date" in capsys.readouterr().out

    cli.main(["stats"])
    out = capsys.readouterr().out
    assert "Books:       0" in out
    assert "Messages:    0" in out


def test_cli_create_admin(env, capsys):
    cli.main(["create-admin", "--email", "admin@example.com", "--password", "long-enough-pw"])
    assert "Admin admin@example.com created." in capsys.readouterr().out

    with pytest.raises(SystemExit):
        cli.main(["create-admin", "--email", "intruder@example.com", "--password", "x" * 12])


def test_cli_export_messages(env, capsys):
    from authordesk.components.messages import SubmitMessageInput, run_submit

    ctx = cli.get_context(get_settings())
    ctx.migrate(str(PROJECT_ROOT / "migrations"))
    run_submit(
        SubmitMessageInput(
            full_name="Reader One",
            email="reader@example.com",
            purpose="Book Inquiry",
            message="When is the sequel coming out?",
        ),
        repo=ctx.message_repo,
        storage=ctx.storage,
        time=ctx.clock,
        config=ctx.configs.messages,
    )

    target = env / "out.json"
    cli.main(["export-messages", "--format", "json", "--output", str(target)])

    payload = json.loads(target.read_text())
    assert payload["export_info"]["total_messages"] == 1
    assert payload["messages"][0]["full_name"] == "Reader One"


def test_cli_purge_logs_rejects_short_retention(env):
    with pytest.raises(SystemExit):
        cli.main(["purge-logs", "--older-than-days", "1"])
