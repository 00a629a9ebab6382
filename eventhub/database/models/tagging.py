# eventhub/database/models/tagging.py
from __future__ import annotations

from typing import Optional
from uuid import UUID as UUID_t

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column

from eventhub.database.core.main import Base
from eventhub.database.core.service_object import ServiceObject


class EventTag(ServiceObject, Base):
    """
    event -> venue|supplier. `tagged_entity_id` is polymorphic, so it carries no FK.
    No unique constraint on (event_id, tagged_entity_type, tagged_entity_id): duplicates are allowed.
    """
    __tablename__ = "event_tags"
    __table_args__ = (
        CheckConstraint("tagged_entity_type IN ('venue', 'supplier')", name="entity_type_known"),
        Index("ix_event_tags_event_id", "event_id"),
        Index("ix_event_tags_entity", "tagged_entity_type", "tagged_entity_id"),
    )

    event_id: Mapped[UUID_t] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    tagged_entity_id: Mapped[UUID_t] = mapped_column(Uuid(as_uuid=True), nullable=False)
    tagged_entity_type: Mapped[str] = mapped_column(String(16), nullable=False)
    tagged_by: Mapped[Optional[UUID_t]] = mapped_column(ForeignKey("profiles.id", ondelete="SET NULL"))
    is_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())


class EventHashtag(ServiceObject, Base):
    __tablename__ = "event_hashtags"
    __table_args__ = (Index("ix_event_hashtags_event_id", "event_id"),)

    event_id: Mapped[UUID_t] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    hashtag: Mapped[str] = mapped_column(String(120), nullable=False)
    created_by: Mapped[Optional[UUID_t]] = mapped_column(ForeignKey("profiles.id", ondelete="SET NULL"))
