# eventhub/services/tagging/repository.py
from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from eventhub.common.logging import get_logger
from eventhub.common.strings import normalize_hashtag
from eventhub.domain.entities.entity_ref import EntityRef, SupplierRef, VenueRef
from eventhub.domain.entities.hashtag import Hashtag
from eventhub.domain.entities.tag import EntitySummary, Tag, TagWithName
from eventhub.domain.enums import TaggedEntityType
from eventhub.domain.errors import StoreError
from eventhub.domain.ports.notifier import NotifierPort
from eventhub.domain.ports.store import DataStorePort, Filter, Query
from eventhub.services.tagging.notifier import LoggingNotifier

logger = get_logger(__name__)

TAGS = "event_tags"
HASHTAGS = "event_hashtags"

_TAG_COLUMNS = (
    "id",
    "event_id",
    "tagged_entity_id",
    "tagged_entity_type",
    "tagged_by",
    "is_confirmed",
    "created_at",
    "updated_at",
)


class TagRepository:
    """
    Create, confirm, delete and list event -> venue|supplier tags.
    Write paths log and re-raise StoreError; the caller owns user feedback.
    """

    def __init__(self, store: DataStorePort, notifier: Optional[NotifierPort] = None) -> None:
        self.store = store
        self.notifier = notifier or LoggingNotifier()

    # ---------- tags ----------

    async def tag_entity(self, event_id: UUID, entity: EntityRef, tagged_by: UUID) -> Tag:
        """
        Insert an unconfirmed tag. Not idempotent: the same arguments twice give two rows.
        """
        row = {"event_id": event_id, "tagged_by": tagged_by, "is_confirmed": False, **entity.to_columns()}
        try:
            created = await self.store.insert(TAGS, [row])
        except StoreError:
            logger.exception("Error tagging %s %s on event %s", entity.kind, entity.id, event_id)
            raise
        return Tag.from_row(created[0])

    async def tag_entities(
        self,
        event_id: UUID,
        *,
        venues: Iterable[UUID] = (),
        suppliers: Iterable[UUID] = (),
        tagged_by: UUID,
    ) -> List[Tag]:
        """Tag every selected venue, then every supplier, for a freshly created event."""
        refs: List[EntityRef] = [VenueRef(v) for v in venues] + [SupplierRef(s) for s in suppliers]
        return [await self.tag_entity(event_id, ref, tagged_by) for ref in refs]

    async def confirm_tag(self, tag_id: UUID) -> Tag:
        try:
            rows = await self.store.update(TAGS, {"is_confirmed": True}, [Filter.eq("id", tag_id)])
            if not rows:
                raise StoreError.not_found(f"tag {tag_id} not found")
        except StoreError:
            logger.exception("Error confirming tag %s", tag_id)
            raise
        return Tag.from_row(rows[0])

    async def untag_entity(self, tag_id: UUID) -> None:
        try:
            rows = await self.store.delete(TAGS, [Filter.eq("id", tag_id)])
            if not rows:
                raise StoreError.not_found(f"tag {tag_id} not found")
        except StoreError:
            logger.exception("Error untagging %s", tag_id)
            raise

    async def get_tag(self, tag_id: UUID) -> Tag:
        """StoreError(not_found) when the tag does not exist (or was rejected)."""
        row = await self.store.fetch_one(Query(TAGS).select(*_TAG_COLUMNS).eq("id", tag_id))
        return Tag.from_row(row)

    async def fetch_event_tags(self, event_id: UUID, *, confirmed_only: bool = False) -> List[TagWithName]:
        """
        Tags of one event with the tagged venue's or supplier's display name.
        `confirmed_only` gives the event's partners: tags the other side accepted.
        Order is whatever the store returns.
        """
        query = Query(TAGS).select(*_TAG_COLUMNS).eq("event_id", event_id)
        if confirmed_only:
            query = query.eq("is_confirmed", True)
        query = (
            query
            .embed("venue", TaggedEntityType.venue.relation, "tagged_entity_id", ("name",))
            .embed("supplier", TaggedEntityType.supplier.relation, "tagged_entity_id", ("name",))
        )
        try:
            rows = await self.store.fetch(query)
        except StoreError:
            logger.exception("Error fetching event tags for %s", event_id)
            raise
        out: List[TagWithName] = []
        for row in rows:
            tag = Tag.from_row(row)
            joined = row.get(tag.entity.kind.value)
            out.append(TagWithName(tag=tag, entity_name=joined["name"] if joined else None))
        return out

    # ---------- side channel ----------

    async def send_notification(self, entity: EntityRef) -> None:
        """
        Best effort: look up the entity's contact address and hand a notice to
        the notifier. At most once, never retried, never raises.
        """
        try:
            row = await self.store.fetch_one(
                Query(entity.kind.relation).select("email", "name").eq("id", entity.id)
            )
            address = row.get("email")
            if not address:
                logger.info("No contact address for %s %s; notification skipped", entity.kind, entity.id)
                return
            await self.notifier.deliver(
                address,
                "You have been tagged in an event",
                f"{row.get('name') or 'Your ' + entity.kind.value} was tagged in an event. "
                "Open your notifications to accept or reject the tag.",
            )
        except Exception:
            logger.exception("Notification to %s %s failed", entity.kind, entity.id)

    # ---------- tag picker ----------

    async def search_entities(self, kind: TaggedEntityType, query: str = "", *, limit: int = 25) -> List[EntitySummary]:
        q = Query(TaggedEntityType(kind).relation).select("id", "name").order("name").limit(limit)
        term = (query or "").strip()
        if term:
            q = q.ilike("name", f"%{term}%")
        rows = await self.store.fetch(q)
        return [EntitySummary(id=r["id"], name=r["name"]) for r in rows]

    # ---------- hashtags ----------

    async def add_hashtag(self, event_id: UUID, hashtag: str, created_by: UUID) -> Hashtag:
        value = normalize_hashtag(hashtag)
        try:
            rows = await self.store.insert(
                HASHTAGS, [{"event_id": event_id, "hashtag": value, "created_by": created_by}]
            )
        except StoreError:
            logger.exception("Error adding hashtag %s to event %s", value, event_id)
            raise
        return Hashtag.from_row(rows[0])

    async def fetch_event_hashtags(self, event_id: UUID) -> List[Hashtag]:
        rows = await self.store.fetch(Query(HASHTAGS).eq("event_id", event_id).order("created_at"))
        return [Hashtag.from_row(r) for r in rows]
