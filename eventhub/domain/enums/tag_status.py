from __future__ import annotations
from enum import StrEnum


class TagStatus(StrEnum):
    """Display filter over notifications. Rejected tags are deleted, so there is no 'rejected'."""
    all = "all"
    pending = "pending"
    accepted = "accepted"

    def matches(self, is_confirmed: bool) -> bool:
        if self is TagStatus.pending:
            return not is_confirmed
        if self is TagStatus.accepted:
            return is_confirmed
        return True
