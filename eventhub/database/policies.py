# eventhub/database/policies.py
"""
Row-level access rules applied by SqlAlchemyStore to mutations.
Reads are unrestricted; relations without a policy accept any authenticated write.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.database.models import Profile, Supplier, Venue
from eventhub.domain.enums import ProfileRole, TaggedEntityType


@dataclass
class PolicyContext:
    session: AsyncSession
    identity: Optional[UUID]

    async def is_admin(self) -> bool:
        if self.identity is None:
            return False
        role = (await self.session.execute(
            select(Profile.role).where(Profile.id == self.identity)
        )).scalar_one_or_none()
        return role == ProfileRole.admin.value

    async def owns_entity(self, kind: str, entity_id: Any) -> bool:
        """True when the identity is the owning company of the venue/supplier."""
        if self.identity is None:
            return False
        model = Venue if TaggedEntityType(kind) is TaggedEntityType.venue else Supplier
        company_id = (await self.session.execute(
            select(model.company_id).where(model.id == entity_id)
        )).scalar_one_or_none()
        return company_id is not None and company_id == self.identity


class RowPolicy(Protocol):
    async def allow_insert(self, ctx: PolicyContext, values: Mapping[str, Any]) -> bool: ...

    async def allow_update(self, ctx: PolicyContext, row: Mapping[str, Any], values: Mapping[str, Any]) -> bool: ...

    async def allow_delete(self, ctx: PolicyContext, row: Mapping[str, Any]) -> bool: ...


class EventTagPolicy:
    """
    - insert: the organizer tags as themselves (tagged_by == identity)
    - update: only the tagged party (or an admin) confirms
    - delete: the tagged party rejects, the organizer untags, or an admin
    """

    async def allow_insert(self, ctx: PolicyContext, values: Mapping[str, Any]) -> bool:
        if ctx.identity is None:
            return False
        return values.get("tagged_by") == ctx.identity or await ctx.is_admin()

    async def allow_update(self, ctx: PolicyContext, row: Mapping[str, Any], values: Mapping[str, Any]) -> bool:
        if await ctx.owns_entity(row["tagged_entity_type"], row["tagged_entity_id"]):
            return True
        return await ctx.is_admin()

    async def allow_delete(self, ctx: PolicyContext, row: Mapping[str, Any]) -> bool:
        if ctx.identity is not None and row.get("tagged_by") == ctx.identity:
            return True
        if await ctx.owns_entity(row["tagged_entity_type"], row["tagged_entity_id"]):
            return True
        return await ctx.is_admin()


class CreatorPolicy:
    """Rows carry their author in `column`; only the author (or an admin) writes them."""

    def __init__(self, column: str) -> None:
        self.column = column

    async def _is_author(self, ctx: PolicyContext, row: Mapping[str, Any]) -> bool:
        if ctx.identity is not None and row.get(self.column) == ctx.identity:
            return True
        return await ctx.is_admin()

    async def allow_insert(self, ctx: PolicyContext, values: Mapping[str, Any]) -> bool:
        return await self._is_author(ctx, values)

    async def allow_update(self, ctx: PolicyContext, row: Mapping[str, Any], values: Mapping[str, Any]) -> bool:
        return await self._is_author(ctx, row)

    async def allow_delete(self, ctx: PolicyContext, row: Mapping[str, Any]) -> bool:
        return await self._is_author(ctx, row)


def default_policies() -> dict[str, RowPolicy]:
    return {
        "event_tags": EventTagPolicy(),
        "event_hashtags": CreatorPolicy("created_by"),
    }
