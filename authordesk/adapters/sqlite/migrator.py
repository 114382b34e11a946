import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


class SQLiteMigrator:
    """
    Applies numbered ``.sql`` files from a directory in filename order.

    Each file holds an Up section followed by an optional ``-- Down`` section;
    only the Up section is executed. Applied filenames are recorded in
    ``_migrations`` so reruns are no-ops.
    """

    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        return conn

    def applied_migrations(self) -> set[str]:
        conn = self._connect()
        try:
            return {row[0] for row in conn.execute("SELECT filename FROM _migrations")}
        finally:
            conn.close()

    def pending_migrations(self) -> list[Path]:
        applied = self.applied_migrations()
        return [p for p in sorted(self.migrations_dir.glob("*.sql")) if p.name not in applied]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        pending = self.pending_migrations()
        if not pending:
            logger.info("Schema is up to date.")
            return []

        conn = self._connect()
        try:
            for path in pending:
                logger.info("Applying migration: %s", path.name)
                self._apply(conn, path)
        finally:
            conn.close()

        logger.info("Applied %d migration(s).", len(pending))
        return [p.name for p in pending]

    def _apply(self, conn: sqlite3.Connection, path: Path) -> None:
        up_script = path.read_text().split(DOWN_MARKER, 1)[0]
        try:
            conn.executescript(up_script)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (path.name,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {path.name} failed: {e}") from e
