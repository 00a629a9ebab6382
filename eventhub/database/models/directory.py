# eventhub/database/models/directory.py
from __future__ import annotations

import datetime as dt
from typing import Optional
from uuid import UUID as UUID_t

from sqlalchemy import Date, ForeignKey, Index, String, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eventhub.database.core.main import Base
from eventhub.database.core.service_object import ServiceObject
from eventhub.domain.enums import ProfileRole

_ROLES = ", ".join(f"'{r.value}'" for r in ProfileRole)


# =======================
# Profiles
# =======================
class Profile(ServiceObject, Base):
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(f"role IN ({_ROLES})", name="role_known"),
    )

    full_name: Mapped[Optional[str]] = mapped_column(String(160))
    email: Mapped[Optional[str]] = mapped_column(String(320))
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=ProfileRole.user.value)


# =======================
# Taggable entities (owned by a company profile)
# =======================
class Venue(ServiceObject, Base):
    __tablename__ = "venues"
    __table_args__ = (Index("ix_venues_company_id", "company_id"),)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(320))
    location: Mapped[Optional[str]] = mapped_column(Text)
    company_id: Mapped[Optional[UUID_t]] = mapped_column(ForeignKey("profiles.id", ondelete="SET NULL"))


class Supplier(ServiceObject, Base):
    __tablename__ = "suppliers"
    __table_args__ = (Index("ix_suppliers_company_id", "company_id"),)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(320))
    service_type: Mapped[Optional[str]] = mapped_column(String(120))
    company_id: Mapped[Optional[UUID_t]] = mapped_column(ForeignKey("profiles.id", ondelete="SET NULL"))


# =======================
# Events (display context only)
# =======================
class Event(ServiceObject, Base):
    __tablename__ = "events"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[Optional[dt.date]] = mapped_column(Date)
    location: Mapped[Optional[str]] = mapped_column(Text)
    organizer_id: Mapped[Optional[UUID_t]] = mapped_column(ForeignKey("profiles.id", ondelete="SET NULL"))
