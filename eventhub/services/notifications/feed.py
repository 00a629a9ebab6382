# eventhub/services/notifications/feed.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from eventhub.common.logging import get_logger
from eventhub.common.settings import get_settings
from eventhub.domain.entities.entity_ref import EntityRef, SupplierRef, VenueRef, entity_ref_from_columns
from eventhub.domain.entities.profile import Profile
from eventhub.domain.entities.tag import TagNotification
from eventhub.domain.enums import ChangeKind, FeedRefreshPolicy, ProfileRole, TaggedEntityType
from eventhub.domain.errors import ResolutionError, StoreError
from eventhub.domain.ports.store import ChangeEvent, DataStorePort, Query, Row, Subscription

logger = get_logger(__name__)

TAGS = "event_tags"


@dataclass(frozen=True)
class ViewerScope:
    """What a viewer may see: owned venues or one owned supplier, and whether confirmed tags count."""
    kind: TaggedEntityType
    entities: Tuple[EntityRef, ...]
    unconfirmed_only: bool

    @property
    def entity_ids(self) -> Tuple[UUID, ...]:
        return tuple(e.id for e in self.entities)

    def admits(self, row: Row) -> bool:
        try:
            ref = entity_ref_from_columns(row)
        except (KeyError, ValueError):
            return False
        if ref not in self.entities:
            return False
        return not (self.unconfirmed_only and row.get("is_confirmed"))


class NotificationFeed:
    """
    The tags relevant to the current viewer, kept live through one change-feed
    subscription on event_tags.

    Never raises to its caller: any failure (no identity, no profile, no owned
    entity, query error) is logged and leaves an empty list.
    """

    def __init__(
        self,
        store: DataStorePort,
        *,
        policy: Optional[FeedRefreshPolicy] = None,
        debounce_seconds: Optional[float] = None,
        on_change: Optional[Callable[[List[TagNotification]], None]] = None,
    ) -> None:
        cfg = get_settings().feed
        self.store = store
        self.policy = FeedRefreshPolicy(policy or cfg.refresh_policy)
        self.debounce_seconds = cfg.debounce_seconds if debounce_seconds is None else debounce_seconds
        self.on_change = on_change

        self.notifications: List[TagNotification] = []
        self.loading: bool = True
        self.scope: Optional[ViewerScope] = None

        self._subscription: Optional[Subscription] = None
        self._closed = False
        self._issued = 0      # resolutions started
        self._applied = 0     # newest resolution whose result is on screen
        self._debounce_task: Optional[asyncio.Task] = None
        self._delta_lock = asyncio.Lock()

    # ---------- resolution ----------

    async def resolve_scope(self) -> ViewerScope:
        identity = await self.store.current_identity()
        if identity is None:
            raise ResolutionError("no authenticated user")
        try:
            profile = Profile.from_row(
                await self.store.fetch_one(Query("profiles").select("id", "role").eq("id", identity))
            )
        except StoreError as exc:
            raise ResolutionError(f"no profile for {identity}") from exc

        if profile.role is ProfileRole.venue_manager:
            venues = await self.store.fetch(Query("venues").select("id").eq("company_id", profile.id))
            if not venues:
                raise ResolutionError(f"venue manager {profile.id} owns no venues")
            refs = tuple(VenueRef(v["id"]) for v in venues)
            return ViewerScope(TaggedEntityType.venue, refs, unconfirmed_only=False)

        if profile.role is ProfileRole.supplier:
            try:
                supplier = await self.store.fetch_one(Query("suppliers").select("id").eq("company_id", identity))
            except StoreError as exc:
                raise ResolutionError(f"no single supplier owned by {identity}") from exc
            # suppliers see pending tags only; venue managers see both
            return ViewerScope(TaggedEntityType.supplier, (SupplierRef(supplier["id"]),), unconfirmed_only=True)

        raise ResolutionError(f"role {profile.role} has no taggable entities")

    def _tags_query(self, scope: ViewerScope) -> Query:
        q = (
            Query(TAGS)
            .eq("tagged_entity_type", scope.kind.value)
            .in_("tagged_entity_id", scope.entity_ids)
        )
        if scope.unconfirmed_only:
            q = q.eq("is_confirmed", False)
        return q.embed("event", "events", "event_id", ("name", "date")).order("created_at", ascending=False)

    async def _resolve(self) -> Tuple[Optional[ViewerScope], List[TagNotification]]:
        try:
            scope = await self.resolve_scope()
        except ResolutionError as exc:
            logger.info("No notifications: %s", exc)
            return None, []
        except StoreError:
            logger.exception("Error resolving notification scope")
            return None, []
        try:
            rows = await self.store.fetch(self._tags_query(scope))
        except StoreError:
            logger.exception("Error fetching %s tags", scope.kind)
            return scope, []
        return scope, [TagNotification.from_row(r) for r in rows]

    async def refresh(self) -> List[TagNotification]:
        """Re-run the full resolution. Results landing after close() are discarded."""
        self._issued += 1
        seq = self._issued
        scope, items = await self._resolve()
        if self._closed:
            logger.debug("Feed closed; discarding late resolution #%d", seq)
            return self.notifications
        if seq < self._applied:
            logger.debug("Discarding stale resolution #%d (showing #%d)", seq, self._applied)
            return self.notifications
        self._applied = seq
        self.scope = scope
        self._set(items)
        self.loading = False
        return self.notifications

    def _set(self, items: List[TagNotification]) -> None:
        self.notifications = items
        if self.on_change is not None:
            self.on_change(list(items))

    # ---------- lifecycle ----------

    async def start(self) -> "NotificationFeed":
        await self.refresh()
        if not self._closed and self._subscription is None:
            self._subscription = self.store.subscribe(TAGS, self._on_event)
        return self

    async def close(self) -> None:
        self._closed = True
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None

    async def __aenter__(self) -> "NotificationFeed":
        return await self.start()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def settle(self) -> None:
        """Wait for a pending debounced refresh, if any."""
        task = self._debounce_task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    # ---------- change handling ----------

    async def _on_event(self, event: ChangeEvent) -> None:
        if self._closed:
            return
        if self.policy is FeedRefreshPolicy.DEBOUNCE:
            self._schedule_debounced()
        elif self.policy is FeedRefreshPolicy.DELTA and self.scope is not None:
            await self._apply_delta(event)
        else:
            await self.refresh()

    def _schedule_debounced(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            return
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounced_refresh())

    async def _debounced_refresh(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._debounce_task = None
        if not self._closed:
            await self.refresh()

    async def _apply_delta(self, event: ChangeEvent) -> None:
        # deliveries run as concurrent tasks; apply one change at a time
        async with self._delta_lock:
            await self._apply_delta_locked(event)

    async def _apply_delta_locked(self, event: ChangeEvent) -> None:
        scope = self.scope
        record = event.record or {}
        tag_id = record.get("id")
        items = [n for n in self.notifications if n.id != tag_id]

        if event.kind is ChangeKind.delete or not scope.admits(record):
            if len(items) != len(self.notifications):
                self._set(items)
            return

        existing = next((n for n in self.notifications if n.id == tag_id), None)
        if existing is not None and event.kind is ChangeKind.update:
            updated = TagNotification.from_row({**record, "event": _event_dict(existing)})
            self._set([updated if n.id == tag_id else n for n in self.notifications])
            return

        try:
            event_row = await self.store.fetch_one(
                Query("events").select("name", "date").eq("id", record["event_id"])
            )
        except StoreError:
            logger.warning("Event for tag %s not readable; falling back to full refresh", tag_id)
            await self.refresh()
            return
        if self._closed:
            return
        # re-read: local edits may have landed during the lookup
        items = [n for n in self.notifications if n.id != tag_id]
        items.append(TagNotification.from_row({**record, "event": event_row}))
        items.sort(key=lambda n: n.tag.created_at.timestamp() if n.tag.created_at else 0.0, reverse=True)
        self._set(items)

    # ---------- local (optimistic) edits used by the panel ----------

    def index_of(self, tag_id: UUID) -> int:
        for i, n in enumerate(self.notifications):
            if n.id == tag_id:
                return i
        return -1

    def replace_local(self, item: TagNotification) -> Optional[TagNotification]:
        """Swap in `item` by id; returns the previous value (None if absent)."""
        i = self.index_of(item.id)
        if i < 0:
            return None
        prior = self.notifications[i]
        items = list(self.notifications)
        items[i] = item
        self._set(items)
        return prior

    def remove_local(self, tag_id: UUID) -> Tuple[int, Optional[TagNotification]]:
        i = self.index_of(tag_id)
        if i < 0:
            return -1, None
        items = list(self.notifications)
        removed = items.pop(i)
        self._set(items)
        return i, removed

    def restore_local(self, index: int, item: TagNotification) -> None:
        if self.index_of(item.id) >= 0:
            return
        items = list(self.notifications)
        items.insert(min(max(index, 0), len(items)), item)
        self._set(items)


def _event_dict(n: TagNotification) -> Optional[dict]:
    if n.event is None:
        return None
    return {"name": n.event.name, "date": n.event.date}

