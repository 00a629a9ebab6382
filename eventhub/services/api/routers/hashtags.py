# eventhub/services/api/routers/hashtags.py
from __future__ import annotations

from http import HTTPStatus
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from eventhub.common.settings import get_settings
from eventhub.domain.enums import TaggedEntityType
from eventhub.services.api.deps import get_repository, require_identity
from eventhub.services.schemas import EntityRead, HashtagCreate, HashtagRead
from eventhub.services.tagging.repository import TagRepository

cfg = get_settings()
router = APIRouter(prefix=cfg.api.prefix, tags=["hashtags"])


@router.post("/events/{event_id}/hashtags", response_model=HashtagRead, status_code=HTTPStatus.CREATED)
async def add_hashtag(
    event_id: UUID,
    payload: HashtagCreate,
    identity: UUID = Depends(require_identity),
    repo: TagRepository = Depends(get_repository),
) -> HashtagRead:
    return HashtagRead.model_validate(await repo.add_hashtag(event_id, payload.hashtag, identity))


@router.get("/events/{event_id}/hashtags", response_model=List[HashtagRead])
async def list_hashtags(event_id: UUID, repo: TagRepository = Depends(get_repository)) -> List[HashtagRead]:
    return [HashtagRead.model_validate(h) for h in await repo.fetch_event_hashtags(event_id)]


@router.get("/entities/{kind}", response_model=List[EntityRead])
async def search_entities(
    kind: TaggedEntityType,
    q: Optional[str] = Query(None),
    limit: int = Query(25, ge=1, le=200),
    repo: TagRepository = Depends(get_repository),
) -> List[EntityRead]:
    """Tag picker: venues or suppliers whose name contains `q`."""
    return [EntityRead.model_validate(e) for e in await repo.search_entities(kind, q or "", limit=limit)]
