from __future__ import annotations

from typing import Any


class FormState:
    """
    Form values with a baseline for dirty tracking.

    A field is dirty when its current value differs from the baseline, so
    typing a value and then restoring the original leaves it clean.
    """

    def __init__(self, defaults: dict[str, Any]):
        self._defaults = dict(defaults)
        self._baseline = dict(defaults)
        self._values = dict(defaults)

    def get(self, field: str, default: Any = None) -> Any:
        return self._values.get(field, default)

    def set_value(self, field: str, value: Any) -> None:
        self._values[field] = value

    def update(self, values: dict[str, Any]) -> None:
        self._values.update(values)

    @property
    def dirty_fields(self) -> set[str]:
        keys = set(self._values) | set(self._baseline)
        return {k for k in keys if self._values.get(k) != self._baseline.get(k)}

    def is_dirty(self, fields: list[str] | None = None) -> bool:
        dirty = self.dirty_fields
        if fields is None:
            return bool(dirty)
        return any(f in dirty for f in fields)

    def reset(self, values: dict[str, Any] | None = None) -> None:
        """Replace values and baseline; with no argument, back to the defaults."""
        self._baseline = {**self._defaults, **(values or {})}
        self._values = dict(self._baseline)

    def values(self) -> dict[str, Any]:
        return dict(self._values)
