import pytest
from uuid import uuid4

from eventhub.domain.entities.entity_ref import (
    SupplierRef,
    VenueRef,
    entity_ref,
    entity_ref_from_columns,
)
from eventhub.domain.enums import TaggedEntityType


def test_entity_ref_builds_the_right_variant():
    vid, sid = uuid4(), uuid4()
    assert entity_ref("venue", vid) == VenueRef(vid)
    assert entity_ref(TaggedEntityType.supplier, str(sid)) == SupplierRef(sid)


def test_variants_with_same_id_are_distinct():
    i = uuid4()
    assert VenueRef(i) != SupplierRef(i)
    assert VenueRef(i) in (VenueRef(i),)
    assert SupplierRef(i) not in (VenueRef(i),)


def test_flat_columns_round_trip_at_store_boundary():
    i = uuid4()
    cols = SupplierRef(i).to_columns()
    assert cols == {"tagged_entity_type": "supplier", "tagged_entity_id": i}
    assert entity_ref_from_columns(cols) == SupplierRef(i)


@pytest.mark.parametrize("kind", ["vendor", "", "VENUE"])
def test_unknown_entity_kind_rejected(kind):
    with pytest.raises(ValueError):
        entity_ref(kind, uuid4())


def test_kind_maps_to_relation():
    assert TaggedEntityType.venue.relation == "venues"
    assert TaggedEntityType.supplier.relation == "suppliers"
