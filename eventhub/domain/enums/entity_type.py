from __future__ import annotations
from enum import StrEnum


class TaggedEntityType(StrEnum):
    venue = "venue"
    supplier = "supplier"

    @property
    def relation(self) -> str:
        """Store relation holding entities of this kind."""
        return "venues" if self is TaggedEntityType.venue else "suppliers"
