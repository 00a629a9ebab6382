# eventhub/database/change_feed.py
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from eventhub.common.logging import get_logger
from eventhub.domain.enums.change_kind import ChangeKind
from eventhub.domain.ports.store import ChangeCallback, ChangeEvent

logger = get_logger(__name__)


@dataclass
class FeedStats:
    start_ts: float
    published: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def in_flight(self) -> int:
        return max(0, self.published - (self.delivered + self.failed))


class FeedSubscription:
    def __init__(
        self,
        feed: "ChangeFeed",
        relation: str,
        callback: ChangeCallback,
        events: Optional[Iterable[ChangeKind]] = None,
    ) -> None:
        self._feed = feed
        self.relation = relation
        self.callback = callback
        self.events = frozenset(ChangeKind(e) for e in events) if events else None
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def matches(self, event: ChangeEvent) -> bool:
        if not self._active or event.relation != self.relation:
            return False
        return self.events is None or event.kind in self.events

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._feed._remove(self)


class ChangeFeed:
    """
    In-process realtime channel. The store publishes one ChangeEvent per affected
    row after its transaction commits; every matching subscription gets the event
    on its own task, so a slow or failing subscriber never blocks the writer.

    Notes
    -----
    - No ordering guarantee across deliveries; subscribers that re-query must
      tolerate out-of-order completion.
    - `drain()` waits for outstanding deliveries (tests, shutdown).
    """

    def __init__(self, name: str = "realtime") -> None:
        self._name = name
        self._subs: List[FeedSubscription] = []
        self._pending: Set[asyncio.Task] = set()
        self.stats = FeedStats(start_ts=time.time())

    def subscribe(
        self,
        relation: str,
        callback: ChangeCallback,
        *,
        events: Optional[Iterable[ChangeKind]] = None,
    ) -> FeedSubscription:
        sub = FeedSubscription(self, relation, callback, events)
        self._subs.append(sub)
        logger.debug("%s: subscribed to %s (%d active)", self._name, relation, len(self._subs))
        return sub

    def _remove(self, sub: FeedSubscription) -> None:
        try:
            self._subs.remove(sub)
        except ValueError:
            return
        logger.debug("%s: unsubscribed from %s (%d active)", self._name, sub.relation, len(self._subs))

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

    def publish(self, event: ChangeEvent) -> int:
        """Schedule delivery to every matching subscriber; returns how many were scheduled."""
        targets = [s for s in self._subs if s.matches(event)]
        for sub in targets:
            task = asyncio.get_running_loop().create_task(self._deliver(sub, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        self.stats.published += len(targets)
        return len(targets)

    async def _deliver(self, sub: FeedSubscription, event: ChangeEvent) -> None:
        if not sub.active:
            self.stats.delivered += 1
            return
        try:
            await sub.callback(event)
            self.stats.delivered += 1
        except Exception:
            self.stats.failed += 1
            logger.exception("%s: subscriber for %s failed on %s", self._name, sub.relation, event.kind)

    async def drain(self) -> None:
        """Wait until every scheduled delivery (including ones they trigger) has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        for sub in list(self._subs):
            sub.unsubscribe()
        for task in list(self._pending):
            task.cancel()
