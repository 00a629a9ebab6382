from __future__ import annotations
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class HashtagCreate(BaseModel):
    hashtag: str = Field(min_length=1, max_length=120)


class HashtagRead(BaseModel):
    id: UUID
    event_id: UUID
    hashtag: str
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EntityRead(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)
