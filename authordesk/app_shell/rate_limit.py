from datetime import datetime, timedelta
from threading import Lock

from authordesk.adapters.clock import SystemClock
from authordesk.ports.clock import TimePort
from authordesk.rules.models import RateLimitRules


class RateLimiter:
    """Sliding-window request limiter keyed by caller."""

    def __init__(
        self,
        rules: RateLimitRules,
        time_port: TimePort | None = None,
    ):
        self.rules = rules
        self._time = time_port if time_port is not None else SystemClock()
        self._history: dict[str, list[datetime]] = {}
        self._lock = Lock()

    def _cleanup(self, key: str, window: int) -> None:
        cutoff = self._time.now_utc() - timedelta(seconds=window)
        if key in self._history:
            self._history[key] = [t for t in self._history[key] if t > cutoff]
            if not self._history[key]:
                del self._history[key]

    def allow_request(self, key: str, window: int, limit: int) -> bool:
        """
        Check if request is allowed.
        If allowed, records the attempt and returns True.
        If denied, returns False.
        """
        if limit <= 0:
            return False

        with self._lock:
            self._cleanup(key, window)
            if len(self._history.get(key, [])) >= limit:
                return False
            self._history.setdefault(key, []).append(self._time.now_utc())
            return True

    def retry_after(self, key: str, window: int) -> int:
        """Seconds until the oldest recorded attempt leaves the window."""
        with self._lock:
            attempts = self._history.get(key)
            if not attempts:
                return 0
            expires = attempts[0] + timedelta(seconds=window)
            return max(0, int((expires - self._time.now_utc()).total_seconds()))

    def check_contact(self, ip: str) -> bool:
        cfg = self.rules.contact
        return self.allow_request(f"contact:{ip}", cfg.window_seconds, cfg.max_requests)
