from __future__ import annotations

from eventhub.database.change_feed import ChangeFeed
from eventhub.domain.enums import ChangeKind
from eventhub.domain.ports.store import ChangeEvent


def _ev(kind=ChangeKind.insert, relation="event_tags"):
    return ChangeEvent(relation=relation, kind=kind, new={"id": 1})


async def test_publish_reaches_matching_subscribers_only():
    feed = ChangeFeed("t")
    seen_all, seen_deletes, seen_other = [], [], []

    async def on_all(e):
        seen_all.append(e.kind)

    async def on_delete(e):
        seen_deletes.append(e.kind)

    async def on_other(e):
        seen_other.append(e.kind)

    feed.subscribe("event_tags", on_all)
    feed.subscribe("event_tags", on_delete, events=[ChangeKind.delete])
    feed.subscribe("venues", on_other)

    assert feed.publish(_ev(ChangeKind.insert)) == 1
    assert feed.publish(_ev(ChangeKind.delete)) == 2
    await feed.drain()

    assert seen_all == [ChangeKind.insert, ChangeKind.delete]
    assert seen_deletes == [ChangeKind.delete]
    assert seen_other == []
    assert feed.stats.delivered == 3
    assert feed.stats.in_flight == 0


async def test_failing_subscriber_does_not_affect_others():
    feed = ChangeFeed("t")
    got = []

    async def boom(e):
        raise RuntimeError("subscriber bug")

    async def ok(e):
        got.append(e)

    feed.subscribe("event_tags", boom)
    feed.subscribe("event_tags", ok)
    feed.publish(_ev())
    await feed.drain()

    assert len(got) == 1
    assert feed.stats.failed == 1


async def test_unsubscribe_releases_subscription():
    feed = ChangeFeed("t")
    got = []

    async def cb(e):
        got.append(e)

    sub = feed.subscribe("event_tags", cb)
    assert sub.active and feed.subscriber_count == 1
    sub.unsubscribe()
    sub.unsubscribe()  # second call is a no-op
    assert not sub.active and feed.subscriber_count == 0

    assert feed.publish(_ev()) == 0
    await feed.drain()
    assert got == []


async def test_unsubscribe_after_publish_skips_pending_delivery():
    feed = ChangeFeed("t")
    got = []

    async def cb(e):
        got.append(e)

    sub = feed.subscribe("event_tags", cb)
    feed.publish(_ev())
    sub.unsubscribe()
    await feed.drain()
    assert got == []
