# eventhub/domain/entities/entity_ref.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union
from uuid import UUID

from eventhub.domain.enums.entity_type import TaggedEntityType


@dataclass(frozen=True)
class VenueRef:
    id: UUID

    kind = TaggedEntityType.venue

    def to_columns(self) -> dict[str, Any]:
        return {"tagged_entity_type": self.kind.value, "tagged_entity_id": self.id}


@dataclass(frozen=True)
class SupplierRef:
    id: UUID

    kind = TaggedEntityType.supplier

    def to_columns(self) -> dict[str, Any]:
        return {"tagged_entity_type": self.kind.value, "tagged_entity_id": self.id}


EntityRef = Union[VenueRef, SupplierRef]


def entity_ref(kind: TaggedEntityType | str, entity_id: UUID | str) -> EntityRef:
    """Build the variant for a (type, id) pair."""
    kind = TaggedEntityType(kind)
    eid = entity_id if isinstance(entity_id, UUID) else UUID(str(entity_id))
    if kind is TaggedEntityType.venue:
        return VenueRef(eid)
    return SupplierRef(eid)


def entity_ref_from_columns(row: dict[str, Any]) -> EntityRef:
    """Inverse of `to_columns`; only used at the store boundary."""
    return entity_ref(row["tagged_entity_type"], row["tagged_entity_id"])
