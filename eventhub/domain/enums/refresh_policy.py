from __future__ import annotations
from enum import StrEnum


class FeedRefreshPolicy(StrEnum):
    REQUERY = "requery"     # re-resolve everything on each change
    DELTA = "delta"         # apply the change payload keyed by tag id
    DEBOUNCE = "debounce"   # coalesce bursts into one re-resolve
