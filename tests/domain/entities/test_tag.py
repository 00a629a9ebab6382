import datetime as dt
from uuid import uuid4

import pytest

from eventhub.domain.entities.entity_ref import VenueRef
from eventhub.domain.entities.tag import Tag, TagNotification
from eventhub.domain.enums import TagStatus


def _row(**over):
    row = {
        "id": uuid4(),
        "event_id": uuid4(),
        "tagged_entity_id": uuid4(),
        "tagged_entity_type": "venue",
        "tagged_by": uuid4(),
        "is_confirmed": False,
        "created_at": dt.datetime(2026, 5, 1, 12, 0),
        "updated_at": dt.datetime(2026, 5, 1, 12, 0),
    }
    row.update(over)
    return row


def test_tag_from_row_builds_entity_variant():
    row = _row()
    t = Tag.from_row(row)
    assert t.entity == VenueRef(row["tagged_entity_id"])
    assert t.tagged_entity_type == "venue"
    assert t.tagged_entity_id == row["tagged_entity_id"]
    assert t.is_confirmed is False


def test_notification_carries_event_context():
    n = TagNotification.from_row(_row(event={"name": "Summer Gala", "date": dt.date(2026, 7, 1)}))
    assert n.event.name == "Summer Gala"
    assert n.event.date == dt.date(2026, 7, 1)


def test_notification_without_event_row():
    n = TagNotification.from_row(_row(event=None))
    assert n.event is None


def test_with_confirmed_returns_a_new_value():
    n = TagNotification.from_row(_row())
    flipped = n.with_confirmed()
    assert flipped.is_confirmed is True
    assert n.is_confirmed is False
    assert flipped.id == n.id


@pytest.mark.parametrize(
    "status,confirmed,expected",
    [
        (TagStatus.all, True, True),
        (TagStatus.all, False, True),
        (TagStatus.pending, False, True),
        (TagStatus.pending, True, False),
        (TagStatus.accepted, True, True),
        (TagStatus.accepted, False, False),
    ],
)
def test_tag_status_filter(status, confirmed, expected):
    assert status.matches(confirmed) is expected
