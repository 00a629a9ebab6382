from __future__ import annotations
import datetime as dt
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from eventhub.domain.entities.tag import TagNotification
from eventhub.domain.enums.entity_type import TaggedEntityType


class EventSummaryRead(BaseModel):
    name: str
    date: Optional[dt.date] = None

    model_config = ConfigDict(from_attributes=True)


class NotificationRead(BaseModel):
    id: UUID
    event_id: UUID
    tagged_entity_id: UUID
    tagged_entity_type: TaggedEntityType
    is_confirmed: bool
    created_at: Optional[datetime] = None
    event: Optional[EventSummaryRead] = None

    @classmethod
    def from_notification(cls, n: TagNotification) -> "NotificationRead":
        t = n.tag
        return cls(
            id=t.id,
            event_id=t.event_id,
            tagged_entity_id=t.tagged_entity_id,
            tagged_entity_type=t.tagged_entity_type,
            is_confirmed=t.is_confirmed,
            created_at=t.created_at,
            event=EventSummaryRead.model_validate(n.event) if n.event else None,
        )


class NotificationList(BaseModel):
    count: int
    unconfirmed_count: int
    items: List[NotificationRead]
