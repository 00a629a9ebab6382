# eventhub/services/api/deps.py
from __future__ import annotations
from http import HTTPStatus
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request

from eventhub.common.settings import get_settings
from eventhub.database.store import SqlAlchemyStore
from eventhub.domain.ports.notifier import NotifierPort
from eventhub.services.tagging.repository import TagRepository

cfg = get_settings()


def get_identity(
    profile_id: Optional[UUID] = Header(default=None, alias=cfg.api.identity_header),
) -> Optional[UUID]:
    """
    Caller identity as forwarded by the auth layer in front of this service.
    Missing header -> anonymous (row policies will refuse writes).
    """
    return profile_id


def require_identity(identity: Optional[UUID] = Depends(get_identity)) -> UUID:
    if identity is None:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail=f"{cfg.api.identity_header} header required")
    return identity


def get_store(request: Request, identity: Optional[UUID] = Depends(get_identity)) -> SqlAlchemyStore:
    """Process-wide store from app.state, bound to this caller."""
    return request.app.state.store.with_identity(identity)


def get_notifier(request: Request) -> NotifierPort:
    return request.app.state.notifier


def get_repository(
    store: SqlAlchemyStore = Depends(get_store),
    notifier: NotifierPort = Depends(get_notifier),
) -> TagRepository:
    return TagRepository(store, notifier)
