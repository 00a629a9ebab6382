from __future__ import annotations
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from eventhub.domain.enums.entity_type import TaggedEntityType


# Tag
class TagCreate(BaseModel):
    tagged_entity_id: UUID
    tagged_entity_type: TaggedEntityType
    # best-effort notice to the tagged party's contact address
    notify: bool = True


class TagBatchCreate(BaseModel):
    venues: list[UUID] = Field(default_factory=list)
    suppliers: list[UUID] = Field(default_factory=list)
    notify: bool = True


class TagRead(BaseModel):
    id: UUID
    event_id: UUID
    tagged_entity_id: UUID
    tagged_entity_type: TaggedEntityType
    tagged_by: Optional[UUID] = None
    is_confirmed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EventTagRead(TagRead):
    entity_name: Optional[str] = None
