# eventhub/domain/entities/tag.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from eventhub.domain.entities.entity_ref import EntityRef, entity_ref_from_columns


@dataclass(frozen=True)
class Tag:
    """
    An event -> venue|supplier association.
    `is_confirmed` goes False -> True once; rejection deletes the row.
    """
    id: UUID
    event_id: UUID
    entity: EntityRef
    tagged_by: Optional[UUID]
    is_confirmed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Tag":
        return cls(
            id=row["id"],
            event_id=row["event_id"],
            entity=entity_ref_from_columns(dict(row)),
            tagged_by=row.get("tagged_by"),
            is_confirmed=bool(row.get("is_confirmed", False)),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @property
    def tagged_entity_id(self) -> UUID:
        return self.entity.id

    @property
    def tagged_entity_type(self) -> str:
        return self.entity.kind.value


@dataclass(frozen=True)
class EventSummary:
    name: str
    date: Optional[date] = None


@dataclass(frozen=True)
class TagNotification:
    """A tag as seen by the tagged party, with the event's display context."""
    tag: Tag
    event: Optional[EventSummary] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TagNotification":
        ev = row.get("event")
        summary = EventSummary(name=ev.get("name") or "", date=ev.get("date")) if ev else None
        return cls(tag=Tag.from_row(row), event=summary)

    @property
    def id(self) -> UUID:
        return self.tag.id

    @property
    def is_confirmed(self) -> bool:
        return self.tag.is_confirmed

    def with_confirmed(self, value: bool = True) -> "TagNotification":
        return replace(self, tag=replace(self.tag, is_confirmed=value))


@dataclass(frozen=True)
class TagWithName:
    tag: Tag
    entity_name: Optional[str] = None


@dataclass(frozen=True)
class EntitySummary:
    id: UUID
    name: str
