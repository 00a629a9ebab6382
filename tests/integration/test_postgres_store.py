from __future__ import annotations

import os

import pytest

from eventhub.domain.entities.entity_ref import SupplierRef, VenueRef
from eventhub.domain.errors import StoreError
from eventhub.domain.ports.store import Filter
from eventhub.services.notifications.feed import NotificationFeed
from eventhub.services.tagging.repository import TagRepository

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(os.getenv("EVENTHUB_PG_TESTS") != "1", reason="set EVENTHUB_PG_TESTS=1 to run against Postgres"),
]


async def test_tag_confirm_and_feed_on_postgres(store, change_feed, world):
    organizer = TagRepository(store.with_identity(world.organizer))
    manager = TagRepository(store.with_identity(world.manager))

    async with NotificationFeed(store.with_identity(world.manager)) as feed:
        tag = await organizer.tag_entity(world.event, VenueRef(world.venue_a), world.organizer)
        await change_feed.drain()
        assert [n.id for n in feed.notifications] == [tag.id]

        await manager.confirm_tag(tag.id)
        await change_feed.drain()
        assert feed.notifications[0].is_confirmed is True


async def test_check_constraint_on_entity_type(service_store, world):
    with pytest.raises(StoreError) as exc:
        await service_store.insert(
            "event_tags",
            [{
                "event_id": world.event,
                "tagged_entity_id": world.venue_a,
                "tagged_entity_type": "caterer",
                "tagged_by": world.organizer,
            }],
        )
    assert exc.value.code == StoreError.CONSTRAINT


async def test_ilike_search_is_case_insensitive(store, world):
    repo = TagRepository(store)
    names = [e.name for e in await repo.search_entities("supplier", "LIGHTS")]
    assert names == ["Bright Lights AV"]


async def test_event_tags_cascade_with_event(service_store, world):
    repo = TagRepository(service_store)
    await repo.tag_entity(world.event, SupplierRef(world.supplier), world.organizer)
    await service_store.delete("events", [Filter.eq("id", world.event)])
    assert await repo.fetch_event_tags(world.event) == []


async def test_oversized_hashtag_is_invalid_not_unavailable(store, world):
    repo = TagRepository(store.with_identity(world.organizer))
    with pytest.raises(StoreError) as exc:
        await repo.add_hashtag(world.event, "x" * 200, world.organizer)
    assert exc.value.code == StoreError.INVALID
