from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Literal

ToastKind = Literal["loading", "success", "error"]


@dataclass(frozen=True)
class Toast:
    id: str
    kind: ToastKind
    message: str


class ToastCenter:
    """
    Transient notifications shown by the console.

    A loading toast can be upgraded in place by passing its id to
    `success` or `error`.
    """

    def __init__(self) -> None:
        self._active: dict[str, Toast] = {}
        self._ids = itertools.count(1)
        self.history: list[Toast] = []

    def _show(self, kind: ToastKind, message: str, toast_id: str | None) -> str:
        toast_id = toast_id or f"toast-{next(self._ids)}"
        toast = Toast(id=toast_id, kind=kind, message=message)
        self._active[toast_id] = toast
        self.history.append(toast)
        return toast_id

    def loading(self, message: str) -> str:
        return self._show("loading", message, None)

    def success(self, message: str, toast_id: str | None = None) -> str:
        return self._show("success", message, toast_id)

    def error(self, message: str, toast_id: str | None = None) -> str:
        return self._show("error", message, toast_id)

    def dismiss(self, toast_id: str | None) -> None:
        if toast_id is not None:
            self._active.pop(toast_id, None)

    def active(self) -> list[Toast]:
        return list(self._active.values())

    def messages(self, kind: ToastKind | None = None) -> list[str]:
        """Every message shown so far, optionally of one kind."""
        return [t.message for t in self.history if kind is None or t.kind == kind]
