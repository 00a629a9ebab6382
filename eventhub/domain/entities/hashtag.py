from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional
from uuid import UUID


@dataclass(frozen=True)
class Hashtag:
    id: UUID
    event_id: UUID
    hashtag: str
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Hashtag":
        return cls(
            id=row["id"],
            event_id=row["event_id"],
            hashtag=row["hashtag"],
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
        )
