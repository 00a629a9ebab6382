# tests/conftest.py
from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

import pytest

# Settings are cached on first import; point them at SQLite before anything loads them.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("NOTIFIER__BACKEND", "log")

from eventhub.database.change_feed import ChangeFeed  # noqa: E402
from eventhub.database.core.main import build_engine, create_schema  # noqa: E402
from eventhub.database.store import SqlAlchemyStore  # noqa: E402
from eventhub.domain.enums import ProfileRole  # noqa: E402


@pytest.fixture()
async def db_engine(tmp_path):
    """Fresh SQLite file per test; every session gets its own connection."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'eventhub.db'}")
    await create_schema(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
async def change_feed():
    feed = ChangeFeed("test")
    yield feed
    await feed.drain()
    feed.close()


@pytest.fixture()
def store(db_engine, change_feed) -> SqlAlchemyStore:
    """Anonymous store; bind a caller with .with_identity(...)."""
    return SqlAlchemyStore.from_engine(db_engine, change_feed=change_feed)


@pytest.fixture()
def service_store(store) -> SqlAlchemyStore:
    """Bypasses row policies; used to lay down fixtures."""
    return store.as_service()


# ----- fixture data ------------------------------------------------------------

async def make_profile(service_store, role: ProfileRole, name: str, email: Optional[str] = None) -> UUID:
    rows = await service_store.insert("profiles", [{"full_name": name, "role": role.value, "email": email}])
    return rows[0]["id"]


async def make_venue(service_store, company_id: Optional[UUID], name: str, email: Optional[str] = None) -> UUID:
    rows = await service_store.insert("venues", [{"name": name, "company_id": company_id, "email": email}])
    return rows[0]["id"]


async def make_supplier(service_store, company_id: Optional[UUID], name: str, email: Optional[str] = None) -> UUID:
    rows = await service_store.insert("suppliers", [{"name": name, "company_id": company_id, "email": email}])
    return rows[0]["id"]


async def make_event(service_store, organizer_id: UUID, name: str, date: dt.date) -> UUID:
    rows = await service_store.insert("events", [{"name": name, "date": date, "organizer_id": organizer_id}])
    return rows[0]["id"]


@dataclass
class World:
    organizer: UUID
    manager: UUID
    other_manager: UUID
    supplier_owner: UUID
    planner: UUID
    admin: UUID
    venue_a: UUID
    venue_b: UUID
    venue_c: UUID
    supplier: UUID
    other_supplier: UUID
    event: UUID
    other_event: UUID


@pytest.fixture()
async def world(service_store) -> World:
    """
    manager owns venues A and B; other_manager owns C.
    supplier_owner owns `supplier`; `other_supplier` has no owner.
    """
    organizer = await make_profile(service_store, ProfileRole.event_planner, "Olive Organizer")
    manager = await make_profile(service_store, ProfileRole.venue_manager, "Vic Manager")
    other_manager = await make_profile(service_store, ProfileRole.venue_manager, "Val Other")
    supplier_owner = await make_profile(service_store, ProfileRole.supplier, "Sam Supplier")
    planner = await make_profile(service_store, ProfileRole.user, "Una User")
    admin = await make_profile(service_store, ProfileRole.admin, "Ada Admin")

    venue_a = await make_venue(service_store, manager, "Harbor Hall", email="harbor@example.com")
    venue_b = await make_venue(service_store, manager, "Garden Loft")
    venue_c = await make_venue(service_store, other_manager, "City Arena")
    supplier = await make_supplier(service_store, supplier_owner, "Bright Lights AV", email="av@example.com")
    other_supplier = await make_supplier(service_store, None, "Crumbs Catering")

    event = await make_event(service_store, organizer, "Summer Gala", dt.date(2026, 7, 1))
    other_event = await make_event(service_store, organizer, "Winter Fair", dt.date(2026, 12, 5))
    return World(
        organizer=organizer,
        manager=manager,
        other_manager=other_manager,
        supplier_owner=supplier_owner,
        planner=planner,
        admin=admin,
        venue_a=venue_a,
        venue_b=venue_b,
        venue_c=venue_c,
        supplier=supplier,
        other_supplier=other_supplier,
        event=event,
        other_event=other_event,
    )
