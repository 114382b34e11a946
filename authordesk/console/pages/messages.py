from __future__ import annotations

import logging
from typing import Literal
from uuid import UUID

from authordesk.components.messages import ExportOutput, MessageStatsOutput
from authordesk.console.gateway import ConsoleGateway, GatewayError
from authordesk.console.optimistic import apply_optimistic
from authordesk.console.store import AdminStore
from authordesk.console.toasts import ToastCenter

logger = logging.getLogger(__name__)


class MessagesPage:
    """Contact inbox. Status changes and deletes are optimistic."""

    def __init__(
        self,
        gateway: ConsoleGateway,
        store: AdminStore,
        toasts: ToastCenter,
        page_size: int = 50,
    ):
        self.gateway = gateway
        self.store = store
        self.toasts = toasts
        self.page_size = page_size
        self.total = 0
        self.stats: MessageStatsOutput | None = None

    def load(self) -> None:
        filters = self.store.message_filters
        self.store.set_loading(True)
        self.store.set_error(None)
        try:
            result = self.gateway.list_messages(
                status=filters.status,
                search=filters.search or None,
                date_from=filters.date_from,
                date_to=filters.date_to,
                limit=self.page_size,
            )
        except GatewayError as e:
            self.store.set_error(e.message)
            self.toasts.error("Failed to load messages")
            return
        finally:
            self.store.set_loading(False)
        self.store.set_messages(result.items)
        self.total = result.total

    def load_stats(self) -> None:
        try:
            self.stats = self.gateway.message_stats()
        except GatewayError as e:
            logger.warning("Failed to load message stats: %s", e.message)

    def select(self, message_id: UUID) -> None:
        message = self.store.find_message(message_id)
        self.store.set_selected_message(message)
        if message is not None and message.status == "unread":
            self.set_status(message_id, "read")

    def set_status(self, message_id: UUID, status: str) -> bool:
        message = self.store.find_message(message_id)
        if message is None:
            return False
        previous = message.status
        return apply_optimistic(
            apply=lambda: self.store.update_message_status(message_id, status),
            revert=lambda: self.store.update_message_status(message_id, previous),
            commit=lambda: self.gateway.update_message(message_id, {"status": status}),
            toasts=self.toasts,
            failure_message="Failed to update message status",
        )

    def _snapshot_statuses(self, ids: list[UUID]) -> dict[UUID, str]:
        wanted = set(ids)
        return {m.id: m.status for m in self.store.messages if m.id in wanted}

    def _restore_statuses(self, previous: dict[UUID, str]) -> None:
        for message_id, status in previous.items():
            self.store.update_message_status(message_id, status)

    def mark_all_as_read(self) -> bool:
        unread = [m.id for m in self.store.messages if m.status == "unread"]
        if not unread:
            return True
        previous = self._snapshot_statuses(unread)
        return apply_optimistic(
            apply=self.store.mark_all_as_read,
            revert=lambda: self._restore_statuses(previous),
            commit=lambda: self.gateway.batch_update_status(unread, "read"),
            toasts=self.toasts,
            failure_message="Failed to mark messages as read",
            success_message=f"Marked {len(unread)} message(s) as read",
        )

    def batch_update_status(self, message_ids: list[UUID], status: str) -> bool:
        if not message_ids:
            return False
        previous = self._snapshot_statuses(message_ids)

        def apply() -> None:
            for message_id in message_ids:
                self.store.update_message_status(message_id, status)

        return apply_optimistic(
            apply=apply,
            revert=lambda: self._restore_statuses(previous),
            commit=lambda: self.gateway.batch_update_status(message_ids, status),
            toasts=self.toasts,
            failure_message="Failed to update messages",
            success_message=f"Updated {len(message_ids)} message(s)",
        )

    def batch_delete(self, message_ids: list[UUID]) -> bool:
        if not message_ids:
            return False
        snapshot = list(self.store.messages)
        selected = self.store.selected_message

        def revert() -> None:
            self.store.set_messages(snapshot)
            self.store.set_selected_message(selected)

        ok = apply_optimistic(
            apply=lambda: self.store.remove_messages(message_ids),
            revert=revert,
            commit=lambda: self.gateway.batch_delete_messages(message_ids),
            toasts=self.toasts,
            failure_message="Failed to delete messages",
            success_message=f"Deleted {len(message_ids)} message(s)",
        )
        if ok:
            self.total = max(0, self.total - len(message_ids))
        return ok

    def export(
        self,
        format: Literal["csv", "json"] = "csv",
        include_attachments: bool = False,
        message_ids: list[UUID] | None = None,
    ) -> ExportOutput | None:
        filters = self.store.message_filters
        toast_id = self.toasts.loading("Exporting messages...")
        try:
            result = self.gateway.export_messages(
                format=format,
                include_attachments=include_attachments,
                message_ids=message_ids or None,
                status=filters.status,
                search=filters.search or None,
                date_from=filters.date_from,
                date_to=filters.date_to,
            )
        except GatewayError as e:
            self.toasts.dismiss(toast_id)
            self.toasts.error(e.message)
            return None
        self.toasts.success(f"Exported {result.count} message(s)", toast_id)
        return result
