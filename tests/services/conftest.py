# tests/services/conftest.py
from __future__ import annotations

import httpx
import pytest

from eventhub.services.api.app import create_app
from eventhub.services.tagging.notifier import LoggingNotifier
from eventhub.services.tagging.repository import TagRepository


@pytest.fixture()
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture()
def manager_store(store, world):
    return store.with_identity(world.manager)


@pytest.fixture()
def supplier_store(store, world):
    return store.with_identity(world.supplier_owner)


@pytest.fixture()
def organizer_repo(store, world, notifier) -> TagRepository:
    return TagRepository(store.with_identity(world.organizer), notifier)


@pytest.fixture()
def manager_repo(manager_store, notifier) -> TagRepository:
    return TagRepository(manager_store, notifier)


@pytest.fixture()
async def api_client(store, notifier):
    """
    An httpx client wired straight into the ASGI app. The app shares the test
    store (and its change feed) so a POST is visible to the next GET.
    Callers pick an identity per request with the X-Profile-Id header.
    """
    app = create_app(store=store, notifier=notifier)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
