from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any
from uuid import UUID

from authordesk.components.engagements import EngagementStatsOutput
from authordesk.console.gateway import ConsoleGateway, GatewayError
from authordesk.console.optimistic import apply_optimistic
from authordesk.console.toasts import ToastCenter
from authordesk.domain.entities import Engagement
from authordesk.domain.uploads import FileUpload

logger = logging.getLogger(__name__)


@dataclass
class EngagementFilters:
    search: str = ""
    type: str | None = None
    status: str | None = None
    featured: bool | None = None
    upcoming_only: bool = False

    def as_query(self) -> dict[str, Any]:
        return {
            "search": self.search or None,
            "type": self.type,
            "status": self.status,
            "featured": self.featured,
            "upcoming_only": self.upcoming_only,
        }


class EngagementsPage:
    def __init__(self, gateway: ConsoleGateway, toasts: ToastCenter, page_size: int = 12):
        self.gateway = gateway
        self.toasts = toasts
        self.page_size = page_size
        self.filters = EngagementFilters()
        self.items: list[Engagement] = []
        self.page = 1
        self.total = 0
        self.total_pages = 0
        self.loading = False
        self.error: str | None = None
        self.stats: EngagementStatsOutput | None = None

    def load(self, reset_page: bool = False) -> None:
        if reset_page:
            self.page = 1
        self.loading = True
        self.error = None
        try:
            result = self.gateway.list_engagements(
                **self.filters.as_query(), page=self.page, limit=self.page_size
            )
        except GatewayError as e:
            self.error = e.message
            self.toasts.error("Failed to load engagements")
            return
        finally:
            self.loading = False
        self.items = result.items
        self.total = result.total
        self.total_pages = result.total_pages

    def load_stats(self) -> None:
        try:
            self.stats = self.gateway.engagement_stats()
        except GatewayError as e:
            logger.warning("Failed to load engagement stats: %s", e.message)

    def set_filters(self, **changes: Any) -> None:
        known = {f.name for f in fields(EngagementFilters)}
        for key, value in changes.items():
            if key not in known:
                raise TypeError(f"unknown engagement filter: {key}")
            setattr(self.filters, key, value)
        self.load(reset_page=True)

    def set_page(self, page: int) -> None:
        self.page = max(1, page)
        self.load()

    def find(self, engagement_id: UUID) -> Engagement | None:
        return next((e for e in self.items if e.id == engagement_id), None)

    def save(
        self,
        values: dict[str, Any],
        existing_images: list[str],
        files: list[FileUpload],
        editing_id: UUID | None = None,
    ) -> Engagement | None:
        """
        Create or update an engagement. New files are uploaded by the backend
        before the row is written; the image list is the kept existing images
        followed by the new uploads.
        """
        toast_id = self.toasts.loading(
            "Updating engagement..." if editing_id else "Creating engagement..."
        )
        try:
            if editing_id:
                updates = {**values, "images": list(existing_images)}
                result = self.gateway.update_engagement(editing_id, updates, files)
            else:
                result = self.gateway.create_engagement(values, existing_images, files)
        except GatewayError as e:
            self.toasts.dismiss(toast_id)
            self.toasts.error(e.message)
            return None

        engagement = result.engagement
        verb = "updated" if editing_id else "created"
        message = f"Engagement {verb} successfully"
        if files and result.uploaded_count < len(files):
            message += f" ({result.uploaded_count} of {len(files)} images uploaded)"
        self.toasts.success(message, toast_id)
        self.load(reset_page=not editing_id)
        self.load_stats()
        return engagement

    def delete(self, engagement_id: UUID) -> bool:
        toast_id = self.toasts.loading("Deleting engagement...")
        try:
            self.gateway.delete_engagement(engagement_id)
        except GatewayError as e:
            self.toasts.dismiss(toast_id)
            self.toasts.error(e.message)
            return False
        self.items = [e for e in self.items if e.id != engagement_id]
        self.total = max(0, self.total - 1)
        self.toasts.success("Engagement deleted successfully", toast_id)
        self.load_stats()
        return True

    def _set_featured(self, engagement_id: UUID, featured: bool) -> None:
        self.items = [
            e.model_copy(update={"is_featured": featured}) if e.id == engagement_id else e
            for e in self.items
        ]

    def toggle_featured(self, engagement_id: UUID) -> bool:
        engagement = self.find(engagement_id)
        if engagement is None:
            return False
        featured = not engagement.is_featured
        ok = apply_optimistic(
            apply=lambda: self._set_featured(engagement_id, featured),
            revert=lambda: self._set_featured(engagement_id, not featured),
            commit=lambda: self.gateway.update_engagement(
                engagement_id, {"is_featured": featured}
            ),
            toasts=self.toasts,
            failure_message="Failed to update engagement",
        )
        if ok:
            self.load_stats()
        return ok
