from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from authordesk.domain.slugs import slugify
from authordesk.ports.clock import TimePort


class SlugDebouncer:
    """
    Derives a slug from the title once typing has paused.

    Each title change pushes the deadline out by `delay_ms`; `poll` hands
    the slug over once the deadline passes. The slug is a preview only:
    the backend makes it unique on save.
    """

    def __init__(
        self,
        clock: TimePort,
        delay_ms: int = 300,
        on_slug: Callable[[str], None] | None = None,
    ):
        self.clock = clock
        self.delay = timedelta(milliseconds=delay_ms)
        self.on_slug = on_slug
        self._pending: str | None = None
        self._deadline: datetime | None = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def on_title_change(self, title: str) -> None:
        self._pending = slugify(title)
        self._deadline = self.clock.now_utc() + self.delay

    def poll(self) -> str | None:
        if self._deadline is None or self.clock.now_utc() < self._deadline:
            return None
        slug = self._pending or ""
        self.cancel()
        if self.on_slug is not None:
            self.on_slug(slug)
        return slug

    def cancel(self) -> None:
        self._pending = None
        self._deadline = None
