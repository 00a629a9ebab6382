# eventhub/services/notifications/panel.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from eventhub.common.logging import get_logger
from eventhub.domain.entities.tag import TagNotification
from eventhub.domain.enums import TagStatus
from eventhub.domain.errors import EventHubError
from eventhub.services.notifications.feed import NotificationFeed
from eventhub.services.tagging.repository import TagRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str

    @property
    def type(self) -> str:
        return "success" if self.ok else "error"


class NotificationPanel:
    """
    What the badge, dropdown and full notifications page consume: the list, the
    counters, and accept/reject actions.

    accept/reject update the feed's list first and then call the store; if the
    store call fails the prior state is put back. Errors never escape.
    """

    def __init__(
        self,
        feed: NotificationFeed,
        repository: TagRepository,
        *,
        limit: Optional[int] = None,
        status: TagStatus = TagStatus.all,
    ) -> None:
        self.feed = feed
        self.repository = repository
        self.limit = limit
        self.status = TagStatus(status)

    @property
    def notifications(self) -> List[TagNotification]:
        return self.feed.notifications

    @property
    def loading(self) -> bool:
        return self.feed.loading

    @property
    def count(self) -> int:
        return len(self.feed.notifications)

    @property
    def unconfirmed_count(self) -> int:
        """Badge number."""
        return sum(1 for n in self.feed.notifications if not n.is_confirmed)

    @property
    def displayed(self) -> List[TagNotification]:
        items = [n for n in self.feed.notifications if self.status.matches(n.is_confirmed)]
        if self.limit:
            items = items[: self.limit]
        return items

    async def accept(self, tag_id: UUID) -> ActionResult:
        current = next((n for n in self.feed.notifications if n.id == tag_id), None)
        prior = self.feed.replace_local(current.with_confirmed(True)) if current else None
        try:
            await self.repository.confirm_tag(tag_id)
        except EventHubError:
            logger.exception("Error accepting tag %s", tag_id)
            if prior is not None:
                self.feed.replace_local(prior)
            return ActionResult(False, "Failed to accept tag. Please try again.")
        return ActionResult(True, "Tag accepted successfully!")

    async def reject(self, tag_id: UUID) -> ActionResult:
        index, removed = self.feed.remove_local(tag_id)
        try:
            await self.repository.untag_entity(tag_id)
        except EventHubError:
            logger.exception("Error rejecting tag %s", tag_id)
            if removed is not None:
                self.feed.restore_local(index, removed)
            return ActionResult(False, "Failed to reject tag. Please try again.")
        return ActionResult(True, "Tag rejected successfully!")
