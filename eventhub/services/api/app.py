from __future__ import annotations

from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventhub.common.logging import get_logger
from eventhub.common.settings import get_settings
from eventhub.database.core.main import create_schema, get_engine
from eventhub.database.store import SqlAlchemyStore
from eventhub.domain.errors import StoreError
from eventhub.domain.ports.notifier import NotifierPort
from eventhub.services.api.routers import hashtags, health, notifications, tags
from eventhub.services.tagging.notifier import build_notifier

cfg = get_settings()
dev = cfg.app_env.lower() == "development"
logger = get_logger(__name__)

_STORE_ERROR_STATUS = {
    StoreError.NOT_FOUND: HTTPStatus.NOT_FOUND,
    StoreError.PERMISSION_DENIED: HTTPStatus.FORBIDDEN,
    StoreError.CONSTRAINT: HTTPStatus.CONFLICT,
    StoreError.INVALID: HTTPStatus.UNPROCESSABLE_ENTITY,
    StoreError.UNAVAILABLE: HTTPStatus.SERVICE_UNAVAILABLE,
}


async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
    status = _STORE_ERROR_STATUS.get(exc.code, HTTPStatus.SERVICE_UNAVAILABLE)
    return JSONResponse(status_code=status, content={"detail": str(exc), "code": exc.code})


async def _value_error(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content={"detail": str(exc)})


def create_app(store: Optional[SqlAlchemyStore] = None, notifier: Optional[NotifierPort] = None) -> FastAPI:
    owns_engine = store is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_engine and cfg.create_schema_on_startup:
            await create_schema(get_engine())
        yield
        app.state.store.change_feed.close()
        if owns_engine:
            await get_engine().dispose()

    app = FastAPI(
        title="EventHub Tagging API",
        version="0.1.0",
        docs_url=f"{cfg.api.prefix}/docs",
        openapi_url=f"{cfg.api.prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.store = store or SqlAlchemyStore.from_engine(get_engine())
    app.state.notifier = notifier or build_notifier(cfg.notifier)

    allow_origins = ["*"] if dev else cfg.api.cors_allow_origins
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=cfg.api.cors_allow_methods,
        allow_headers=cfg.api.cors_allow_headers,
        allow_credentials=cfg.api.cors_allow_credentials,
    )

    app.add_exception_handler(StoreError, _store_error)
    app.add_exception_handler(ValueError, _value_error)

    # Routers
    app.include_router(health.router)
    app.include_router(tags.router)
    app.include_router(hashtags.router)
    app.include_router(notifications.router)
    return app


app = create_app()
