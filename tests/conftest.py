from datetime import date

import httpx
import pytest
from asgi_lifespan import LifespanManager
from fastapi import Depends

from app.main import app
from app.auth.deps import Caller, get_caller
from app.calendar.repository import InMemoryCalendarStore
from app.calendar.types import Outfit, OutfitItem
from app.services.calendar import CalendarService, get_calendar_service

TODAY = date(2024, 1, 8)
USER_ID = "test-user"


@pytest.fixture
def store() -> InMemoryCalendarStore:
    store = InMemoryCalendarStore()
    tee = OutfitItem(id="A", name="White Tee", category_name="Top")
    jeans = OutfitItem(id="B", name="Blue Jeans", category_name="Bottom")
    skirt = OutfitItem(id="C", name="Pleated Skirt", category_name="Bottom")
    store.add_outfit(Outfit(id="O", name="Casual", items=[tee, jeans]), USER_ID)
    store.add_outfit(Outfit(id="P", name="Smart", items=[tee, skirt]), USER_ID)
    store.add_outfit(Outfit(id="Q", name="Skirt only", items=[skirt]), USER_ID)
    return store


@pytest.fixture
def repo(store):
    return store.for_user(USER_ID)


@pytest.fixture
def service(repo) -> CalendarService:
    return CalendarService(repo, clock=lambda: TODAY)


@pytest.fixture
def engine(service):
    return service.engine


@pytest.fixture(autouse=True)
def override_deps(store):
    async def _service(caller: Caller = Depends(get_caller)):
        yield CalendarService(store.for_user(caller.user_id), clock=lambda: TODAY)

    app.dependency_overrides[get_caller] = lambda: Caller(user_id=USER_ID, token="test-token")
    app.dependency_overrides[get_calendar_service] = _service
    yield
    app.dependency_overrides.pop(get_caller, None)
    app.dependency_overrides.pop(get_calendar_service, None)


@pytest.fixture
async def client():
    async with LifespanManager(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
