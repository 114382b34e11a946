from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from authordesk.console.gateway import GatewayError
from authordesk.console.toasts import ToastCenter
from authordesk.ports.errors import BackendError

logger = logging.getLogger(__name__)


def apply_optimistic(
    apply: Callable[[], None],
    revert: Callable[[], None],
    commit: Callable[[], Any],
    toasts: ToastCenter,
    failure_message: str,
    success_message: str | None = None,
) -> bool:
    """
    Change local state first, then persist it.

    When the commit fails the local change is reverted and an error toast
    is shown. Returns True when the commit succeeded.
    """
    apply()
    try:
        commit()
    except (GatewayError, BackendError) as e:
        logger.warning("%s: %s", failure_message, e.message)
        revert()
        toasts.error(failure_message)
        return False
    if success_message:
        toasts.success(success_message)
    return True
