# eventhub/services/api/routers/health.py
from __future__ import annotations
from fastapi import APIRouter, Request
from eventhub.common.settings import get_settings

cfg = get_settings()
router = APIRouter(prefix=cfg.api.prefix, tags=["health"])


@router.get("/health")
def health(request: Request):
    s = get_settings()
    feed = request.app.state.store.change_feed
    return {
        "ok": True,
        "app": s.app_name,
        "env": s.app_env,
        "subscribers": feed.subscriber_count,
    }
