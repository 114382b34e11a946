import logging
import os
import sys
from functools import lru_cache
from pathlib import Path

DEV_SECRET_KEY = "authordesk-dev-secret-change-me"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("AUTHORDESK_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "authordesk.db")
        self.storage_dir = str(self.data_dir / "storage")
        self.rules_path = Path(
            os.environ.get("AUTHORDESK_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.migrations_dir = Path(
            os.environ.get("AUTHORDESK_MIGRATIONS_DIR", str(self.base_dir / "migrations"))
        )
        self.secret_key = os.environ.get("AUTHORDESK_SECRET_KEY", DEV_SECRET_KEY)
        # Overrides storage.public_base_url from the rules file when set
        self.public_base_url = os.environ.get("AUTHORDESK_PUBLIC_BASE_URL") or None
        self.environment = os.environ.get("AUTHORDESK_ENV", "development")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def validate_settings(settings: Settings) -> None:
    """
    Validate operational requirements before startup.
    Exits the process when a requirement is not met.
    """
    problems: list[str] = []

    if settings.is_production and settings.secret_key == DEV_SECRET_KEY:
        problems.append("AUTHORDESK_SECRET_KEY must be set in production")

    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        problems.append(f"Data directory {settings.data_dir} is not usable: {e}")
    else:
        if not os.access(settings.data_dir, os.W_OK):
            problems.append(f"Data directory {settings.data_dir} is not writable")

    if problems:
        for problem in problems:
            logger.critical(problem)
        print(f"CRITICAL: {'; '.join(problems)}", file=sys.stderr)
        sys.exit(1)

    logger.info("Configuration validated (env=%s)", settings.environment)
