from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FrozenClock:
    """Manually advanced clock for deterministic tests and replays."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, *, seconds: float = 0, milliseconds: float = 0) -> datetime:
        self._now = self._now + timedelta(seconds=seconds, milliseconds=milliseconds)
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value
