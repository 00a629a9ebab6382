from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional
from uuid import UUID

from eventhub.domain.enums.profile_role import ProfileRole


@dataclass(frozen=True)
class Profile:
    id: UUID
    role: ProfileRole
    full_name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Profile":
        return cls(
            id=row["id"],
            role=ProfileRole(row["role"]),
            full_name=row.get("full_name"),
            email=row.get("email"),
        )
