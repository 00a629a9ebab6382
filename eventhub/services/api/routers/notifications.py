# eventhub/services/api/routers/notifications.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from eventhub.common.settings import get_settings
from eventhub.database.store import SqlAlchemyStore
from eventhub.domain.enums import TagStatus
from eventhub.services.api.deps import get_repository, get_store
from eventhub.services.notifications.feed import NotificationFeed
from eventhub.services.notifications.panel import NotificationPanel
from eventhub.services.schemas import NotificationList, NotificationRead
from eventhub.services.tagging.repository import TagRepository

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/notifications", tags=["notifications"])


@router.get("", response_model=NotificationList)
async def list_notifications(
    status: TagStatus = Query(TagStatus.all),
    limit: Optional[int] = Query(None, ge=1, le=500),
    store: SqlAlchemyStore = Depends(get_store),
    repo: TagRepository = Depends(get_repository),
) -> NotificationList:
    """
    One-shot resolution of the caller's feed (no subscription). Always 200:
    a caller with nothing to see gets an empty list.
    """
    feed = NotificationFeed(store)
    await feed.refresh()
    panel = NotificationPanel(feed, repo, limit=limit, status=status)
    return NotificationList(
        count=panel.count,
        unconfirmed_count=panel.unconfirmed_count,
        items=[NotificationRead.from_notification(n) for n in panel.displayed],
    )


@router.get("/recent", response_model=NotificationList)
async def recent_notifications(
    store: SqlAlchemyStore = Depends(get_store),
    repo: TagRepository = Depends(get_repository),
) -> NotificationList:
    """Badge dropdown: the newest few, plus the unconfirmed count for the badge."""
    feed = NotificationFeed(store)
    await feed.refresh()
    panel = NotificationPanel(feed, repo, limit=cfg.feed.dropdown_limit)
    return NotificationList(
        count=panel.count,
        unconfirmed_count=panel.unconfirmed_count,
        items=[NotificationRead.from_notification(n) for n in panel.displayed],
    )
