# eventhub/services/api/routers/tags.py
from __future__ import annotations

from http import HTTPStatus
from typing import List
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends

from eventhub.common.settings import get_settings
from eventhub.domain.entities.entity_ref import entity_ref
from eventhub.domain.entities.tag import Tag
from eventhub.services.api.deps import get_repository, require_identity
from eventhub.services.schemas import EventTagRead, TagBatchCreate, TagCreate, TagRead
from eventhub.services.tagging.repository import TagRepository

cfg = get_settings()
router = APIRouter(prefix=cfg.api.prefix, tags=["tags"])


def _to_out(t: Tag) -> TagRead:
    return TagRead.model_validate(t)


@router.post("/events/{event_id}/tags", response_model=TagRead, status_code=HTTPStatus.CREATED)
async def tag_entity(
    event_id: UUID,
    payload: TagCreate,
    background: BackgroundTasks,
    identity: UUID = Depends(require_identity),
    repo: TagRepository = Depends(get_repository),
) -> TagRead:
    ref = entity_ref(payload.tagged_entity_type, payload.tagged_entity_id)
    tag = await repo.tag_entity(event_id, ref, tagged_by=identity)
    if payload.notify:
        background.add_task(repo.send_notification, ref)
    return _to_out(tag)


@router.post("/events/{event_id}/tags/batch", response_model=List[TagRead], status_code=HTTPStatus.CREATED)
async def tag_entities(
    event_id: UUID,
    payload: TagBatchCreate,
    background: BackgroundTasks,
    identity: UUID = Depends(require_identity),
    repo: TagRepository = Depends(get_repository),
) -> List[TagRead]:
    tags = await repo.tag_entities(event_id, venues=payload.venues, suppliers=payload.suppliers, tagged_by=identity)
    if payload.notify:
        for t in tags:
            background.add_task(repo.send_notification, t.entity)
    return [_to_out(t) for t in tags]


@router.get("/events/{event_id}/tags", response_model=List[EventTagRead])
async def list_event_tags(event_id: UUID, repo: TagRepository = Depends(get_repository)) -> List[EventTagRead]:
    rows = await repo.fetch_event_tags(event_id)
    return [EventTagRead(**_to_out(r.tag).model_dump(), entity_name=r.entity_name) for r in rows]


@router.get("/events/{event_id}/partners", response_model=List[EventTagRead])
async def list_event_partners(event_id: UUID, repo: TagRepository = Depends(get_repository)) -> List[EventTagRead]:
    """Venues and suppliers that accepted their tag on this event."""
    rows = await repo.fetch_event_tags(event_id, confirmed_only=True)
    return [EventTagRead(**_to_out(r.tag).model_dump(), entity_name=r.entity_name) for r in rows]


@router.get("/tags/{tag_id}", response_model=TagRead)
async def get_tag(tag_id: UUID, repo: TagRepository = Depends(get_repository)) -> TagRead:
    return _to_out(await repo.get_tag(tag_id))


@router.post("/tags/{tag_id}/confirm", response_model=TagRead)
async def confirm_tag(
    tag_id: UUID,
    _: UUID = Depends(require_identity),
    repo: TagRepository = Depends(get_repository),
) -> TagRead:
    return _to_out(await repo.confirm_tag(tag_id))


@router.delete("/tags/{tag_id}", status_code=HTTPStatus.NO_CONTENT)
async def untag_entity(
    tag_id: UUID,
    _: UUID = Depends(require_identity),
    repo: TagRepository = Depends(get_repository),
) -> None:
    await repo.untag_entity(tag_id)
