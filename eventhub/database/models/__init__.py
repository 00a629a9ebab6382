# eventhub/database/models/__init__.py

from eventhub.database.core.main import Base
from eventhub.database.models.directory import (
    Profile,
    Venue,
    Supplier,
    Event,
)
from eventhub.database.models.tagging import (
    EventTag,
    EventHashtag,
)

# Relation name -> model, as addressed through the data-store port
RELATIONS = {
    "profiles": Profile,
    "venues": Venue,
    "suppliers": Supplier,
    "events": Event,
    "event_tags": EventTag,
    "event_hashtags": EventHashtag,
}

__all__ = [
    "Base",
    "Profile",
    "Venue",
    "Supplier",
    "Event",
    "EventTag",
    "EventHashtag",
    "RELATIONS",
]
