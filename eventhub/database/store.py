# eventhub/database/store.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, List, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import Column, Table, Uuid, delete, insert, select, update
from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from eventhub.common.logging import get_logger
from eventhub.database.change_feed import ChangeFeed, FeedSubscription
from eventhub.database.core.main import make_session_factory
from eventhub.database.core.service_object import utcnow
from eventhub.database.models import RELATIONS
from eventhub.database.policies import PolicyContext, RowPolicy, default_policies
from eventhub.domain.enums.change_kind import ChangeKind
from eventhub.domain.errors import StoreError
from eventhub.domain.ports.store import ChangeCallback, ChangeEvent, Embed, Filter, Query, Row

logger = get_logger(__name__)


class SqlAlchemyStore:
    """
    DataStorePort over SQLAlchemy's asyncio extension.

    One instance is bound to one caller identity (`with_identity`) and shares the
    session factory, change feed and policies with its siblings. A service store
    (`as_service`) skips row policies, like a BaaS service key.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        change_feed: Optional[ChangeFeed] = None,
        *,
        identity: Optional[UUID] = None,
        policies: Optional[Mapping[str, RowPolicy]] = None,
        enforce_policies: bool = True,
    ) -> None:
        self._factory = session_factory
        self._feed = change_feed or ChangeFeed()
        self._identity = identity
        self._policies: Mapping[str, RowPolicy] = default_policies() if policies is None else policies
        self._enforce = enforce_policies
        self._tables: Dict[str, Table] = {name: model.__table__ for name, model in RELATIONS.items()}

    @classmethod
    def from_engine(cls, engine: AsyncEngine, **kw: Any) -> "SqlAlchemyStore":
        return cls(make_session_factory(engine), **kw)

    def _clone(self, **overrides: Any) -> "SqlAlchemyStore":
        kw: Dict[str, Any] = dict(
            identity=self._identity,
            policies=self._policies,
            enforce_policies=self._enforce,
        )
        kw.update(overrides)
        return SqlAlchemyStore(self._factory, self._feed, **kw)

    def with_identity(self, identity: Optional[UUID]) -> "SqlAlchemyStore":
        return self._clone(identity=identity)

    def as_service(self) -> "SqlAlchemyStore":
        return self._clone(enforce_policies=False)

    @property
    def change_feed(self) -> ChangeFeed:
        return self._feed

    # ---------- schema helpers ----------

    def _table(self, relation: str) -> Table:
        try:
            return self._tables[relation]
        except KeyError:
            raise StoreError(f"unknown relation '{relation}'", StoreError.INVALID) from None

    @staticmethod
    def _col(table: Table, name: str) -> Column:
        col = table.c.get(name)
        if col is None:
            raise StoreError(f"unknown column '{table.name}.{name}'", StoreError.INVALID)
        return col

    def _columns(self, table: Table, names: Sequence[str]) -> List[Column]:
        if not names or "*" in names:
            return list(table.c)
        return [self._col(table, n) for n in names]

    @staticmethod
    def _coerce(col: Column, value: Any) -> Any:
        if value is None or not isinstance(col.type, Uuid) or isinstance(value, UUID):
            return value
        try:
            return UUID(str(value))
        except ValueError:
            raise StoreError(f"invalid uuid for '{col.name}': {value!r}", StoreError.INVALID) from None

    def _values(self, table: Table, values: Mapping[str, Any]) -> Dict[str, Any]:
        return {k: self._coerce(self._col(table, k), v) for k, v in values.items()}

    def _where(self, table: Table, filters: Iterable[Filter]) -> list:
        clauses = []
        for f in filters:
            col = self._col(table, f.column)
            if f.op == "eq":
                clauses.append(col.is_(None) if f.value is None else col == self._coerce(col, f.value))
            elif f.op == "in":
                clauses.append(col.in_([self._coerce(col, v) for v in f.value]))
            elif f.op == "ilike":
                clauses.append(col.ilike(f.value))
            else:
                raise StoreError(f"unsupported filter op '{f.op}'", StoreError.INVALID)
        return clauses

    # ---------- session / error boundary ----------

    @asynccontextmanager
    async def _session(self, op: str, relation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._factory() as session:
                yield session
        except StoreError:
            raise
        except IntegrityError as exc:
            logger.warning("%s on %s violated a constraint: %s", op, relation, exc.orig)
            raise StoreError(f"{op} on {relation} violates a constraint", StoreError.CONSTRAINT) from exc
        except (DataError, ProgrammingError) as exc:
            logger.warning("%s on %s rejected by the database: %s", op, relation, exc.orig)
            raise StoreError(f"{op} on {relation} has invalid data", StoreError.INVALID) from exc
        except (OperationalError, InterfaceError) as exc:
            logger.error("%s on %s: store unavailable: %s", op, relation, exc)
            raise StoreError(f"store unavailable during {op} on {relation}", StoreError.UNAVAILABLE) from exc
        except DBAPIError as exc:
            logger.error("%s on %s failed: %s", op, relation, exc)
            raise StoreError(f"{op} on {relation} failed", StoreError.UNAVAILABLE) from exc
        except SQLAlchemyError as exc:
            logger.error("%s on %s rejected: %s", op, relation, exc)
            raise StoreError(f"{op} on {relation} rejected", StoreError.INVALID) from exc

    async def _authorize(self, session: AsyncSession, relation: str, check: str, *args: Any) -> None:
        if not self._enforce:
            return
        if self._identity is None:
            raise StoreError.denied(f"{check} on {relation} requires an authenticated identity")
        policy = self._policies.get(relation)
        if policy is None:
            return
        ctx = PolicyContext(session=session, identity=self._identity)
        allowed = await getattr(policy, f"allow_{check}")(ctx, *args)
        if not allowed:
            raise StoreError.denied(f"{check} on {relation} denied by access policy")

    def _publish(self, relation: str, kind: ChangeKind, *, new: Optional[Row] = None, old: Optional[Row] = None) -> None:
        self._feed.publish(ChangeEvent(relation=relation, kind=kind, new=new, old=old, committed_at=utcnow()))

    # ---------- queries ----------

    async def fetch(self, query: Query) -> List[Row]:
        table = self._table(query.relation)
        cols = self._columns(table, query.columns)
        # embeds need their local key even if the caller did not select it
        for e in query.embeds:
            c = self._col(table, e.local_column)
            if c.name not in {x.name for x in cols}:
                cols.append(c)

        stmt = select(*cols).where(*self._where(table, query.filters))
        if query.order_by:
            oc = self._col(table, query.order_by)
            stmt = stmt.order_by(oc.asc() if query.ascending else oc.desc())
        if query.max_rows is not None:
            stmt = stmt.limit(query.max_rows)

        async with self._session("select", query.relation) as s:
            rows = [dict(r._mapping) for r in (await s.execute(stmt)).all()]
            for e in query.embeds:
                await self._embed(s, rows, e)
        return rows

    async def _embed(self, session: AsyncSession, rows: List[Row], e: Embed) -> None:
        table = self._table(e.relation)
        fcol = self._col(table, e.foreign_column)
        wanted = self._columns(table, e.columns)
        keys = {r[e.local_column] for r in rows if r.get(e.local_column) is not None}
        related: Dict[Any, Row] = {}
        if keys:
            cols = wanted if fcol.name in {c.name for c in wanted} else wanted + [fcol]
            stmt = select(*cols).where(fcol.in_([self._coerce(fcol, k) for k in keys]))
            for r in (await session.execute(stmt)).all():
                m = r._mapping
                related[m[fcol.name]] = {c.name: m[c.name] for c in wanted}
        for r in rows:
            r[e.name] = related.get(r.get(e.local_column))

    async def fetch_one(self, query: Query) -> Row:
        rows = await self.fetch(query.limit(2))
        if not rows:
            raise StoreError.not_found(f"no row in {query.relation} matches")
        if len(rows) > 1:
            raise StoreError(f"more than one row in {query.relation} matches", StoreError.INVALID)
        return rows[0]

    # ---------- mutations ----------

    async def insert(self, relation: str, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        table = self._table(relation)
        out: List[Row] = []
        async with self._session("insert", relation) as s:
            async with s.begin():
                for raw in rows:
                    values = self._values(table, raw)
                    await self._authorize(s, relation, "insert", values)
                    res = await s.execute(insert(table).values(**values).returning(*table.c))
                    out.append(dict(res.one()._mapping))
        for row in out:
            self._publish(relation, ChangeKind.insert, new=row)
        return out

    async def update(self, relation: str, values: Mapping[str, Any], filters: Sequence[Filter]) -> List[Row]:
        table = self._table(relation)
        vals = self._values(table, values)
        pk = self._col(table, "id")
        async with self._session("update", relation) as s:
            async with s.begin():
                before = [dict(r._mapping) for r in (await s.execute(
                    select(*table.c).where(*self._where(table, filters))
                )).all()]
                if not before:
                    return []
                for row in before:
                    await self._authorize(s, relation, "update", row, vals)
                res = await s.execute(
                    update(table).where(pk.in_([r["id"] for r in before])).values(**vals).returning(*table.c)
                )
                after = [dict(r._mapping) for r in res.all()]
        old_by_id = {r["id"]: r for r in before}
        for row in after:
            self._publish(relation, ChangeKind.update, new=row, old=old_by_id.get(row["id"]))
        return after

    async def delete(self, relation: str, filters: Sequence[Filter]) -> List[Row]:
        table = self._table(relation)
        pk = self._col(table, "id")
        async with self._session("delete", relation) as s:
            async with s.begin():
                before = [dict(r._mapping) for r in (await s.execute(
                    select(*table.c).where(*self._where(table, filters))
                )).all()]
                if not before:
                    return []
                for row in before:
                    await self._authorize(s, relation, "delete", row)
                await s.execute(delete(table).where(pk.in_([r["id"] for r in before])))
        for row in before:
            self._publish(relation, ChangeKind.delete, old=row)
        return before

    # ---------- auth / realtime ----------

    async def current_identity(self) -> Optional[UUID]:
        return self._identity

    def subscribe(
        self,
        relation: str,
        callback: ChangeCallback,
        *,
        events: Optional[Iterable[ChangeKind]] = None,
    ) -> FeedSubscription:
        self._table(relation)
        return self._feed.subscribe(relation, callback, events=events)
