# eventhub/domain/ports/store.py
"""
Data-store port: the query/mutation/auth/change-feed surface the tagging
workflow consumes. Adapters live under eventhub.database.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Protocol, Sequence
from uuid import UUID

from eventhub.domain.enums.change_kind import ChangeKind

Row = dict[str, Any]


@dataclass(frozen=True)
class Filter:
    column: str
    op: str  # eq | in | ilike
    value: Any

    @classmethod
    def eq(cls, column: str, value: Any) -> "Filter":
        return cls(column, "eq", value)


@dataclass(frozen=True)
class Embed:
    """
    Foreign-key join: rows of `relation` whose `foreign_column` equals this row's
    `local_column`, returned as a nested mapping under `name` (or None).
    """
    name: str
    relation: str
    local_column: str
    columns: tuple[str, ...] = ("*",)
    foreign_column: str = "id"


@dataclass(frozen=True)
class Query:
    """Immutable builder: Query("event_tags").eq("event_id", eid).order("created_at", ascending=False)."""
    relation: str
    columns: tuple[str, ...] = ("*",)
    filters: tuple[Filter, ...] = ()
    order_by: Optional[str] = None
    ascending: bool = True
    max_rows: Optional[int] = None
    embeds: tuple[Embed, ...] = ()

    def select(self, *columns: str) -> "Query":
        return replace(self, columns=tuple(columns) or ("*",))

    def eq(self, column: str, value: Any) -> "Query":
        return replace(self, filters=self.filters + (Filter(column, "eq", value),))

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        return replace(self, filters=self.filters + (Filter(column, "in", tuple(values)),))

    def ilike(self, column: str, pattern: str) -> "Query":
        return replace(self, filters=self.filters + (Filter(column, "ilike", pattern),))

    def order(self, column: str, *, ascending: bool = True) -> "Query":
        return replace(self, order_by=column, ascending=ascending)

    def limit(self, n: int) -> "Query":
        return replace(self, max_rows=n)

    def embed(
        self,
        name: str,
        relation: str,
        local_column: str,
        columns: Sequence[str] = ("*",),
        foreign_column: str = "id",
    ) -> "Query":
        e = Embed(name, relation, local_column, tuple(columns), foreign_column)
        return replace(self, embeds=self.embeds + (e,))


@dataclass(frozen=True)
class ChangeEvent:
    relation: str
    kind: ChangeKind
    new: Optional[Row] = None
    old: Optional[Row] = None
    committed_at: Optional[datetime] = None

    @property
    def record(self) -> Optional[Row]:
        return self.new if self.new is not None else self.old


ChangeCallback = Callable[[ChangeEvent], Awaitable[None]]


class Subscription(Protocol):
    @property
    def active(self) -> bool: ...

    def unsubscribe(self) -> None: ...


class DataStorePort(Protocol):
    async def fetch(self, query: Query) -> list[Row]: ...

    async def fetch_one(self, query: Query) -> Row:
        """Exactly one row, otherwise StoreError."""
        ...

    async def insert(self, relation: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]: ...

    async def update(self, relation: str, values: Mapping[str, Any], filters: Sequence[Filter]) -> list[Row]: ...

    async def delete(self, relation: str, filters: Sequence[Filter]) -> list[Row]: ...

    async def current_identity(self) -> Optional[UUID]: ...

    def subscribe(
        self,
        relation: str,
        callback: ChangeCallback,
        *,
        events: Optional[Iterable[ChangeKind]] = None,
    ) -> Subscription: ...
