from eventhub.services.schemas.tags import (
    TagCreate,
    TagBatchCreate,
    TagRead,
    EventTagRead,
)
from eventhub.services.schemas.notifications import (
    EventSummaryRead,
    NotificationRead,
    NotificationList,
)
from eventhub.services.schemas.hashtags import (
    HashtagCreate,
    HashtagRead,
    EntityRead,
)

__all__ = [
    "TagCreate",
    "TagBatchCreate",
    "TagRead",
    "EventTagRead",
    "EventSummaryRead",
    "NotificationRead",
    "NotificationList",
    "HashtagCreate",
    "HashtagRead",
    "EntityRead",
]
