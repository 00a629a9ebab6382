from eventhub.domain.enums.change_kind import ChangeKind
from eventhub.domain.enums.entity_type import TaggedEntityType
from eventhub.domain.enums.profile_role import ProfileRole
from eventhub.domain.enums.refresh_policy import FeedRefreshPolicy
from eventhub.domain.enums.tag_status import TagStatus

__all__ = [
    "ChangeKind",
    "TaggedEntityType",
    "ProfileRole",
    "FeedRefreshPolicy",
    "TagStatus",
]
