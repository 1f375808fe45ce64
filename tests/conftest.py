"""
Pytest configuration and fixtures
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport

from main import app
from gridboard.database.config import get_db
from gridboard.middleware.rate_limiter import limiter
from gridboard.schemas.widget import WidgetTypeCreate, WidgetDefinitionCreate
from gridboard.services.catalog_service import WidgetCatalogService
from gridboard.services.dashboard_manager import DashboardManager
from gridboard.services.dashboard_service import DashboardService
from gridboard.services.layout_service import LayoutService
from gridboard.services.share_service import ShareService
from tests.fakes import FakeDatabase


@pytest.fixture
def fake_db():
    """Fresh in-memory database per test"""
    return FakeDatabase()


@pytest.fixture
def dashboard_service(fake_db):
    return DashboardService(fake_db)


@pytest.fixture
def layout_service(fake_db):
    return LayoutService(fake_db)


@pytest.fixture
def share_service(fake_db):
    return ShareService(fake_db)


@pytest.fixture
def catalog_service(fake_db):
    return WidgetCatalogService(fake_db)


@pytest.fixture
def manager(dashboard_service, layout_service, share_service, catalog_service):
    return DashboardManager(
        dashboards=dashboard_service,
        layouts=layout_service,
        shares=share_service,
        catalog=catalog_service,
    )


@pytest_asyncio.fixture
async def widget_type(catalog_service):
    """A registered widget type"""
    return await catalog_service.create_type(
        WidgetTypeCreate(name="counter", component_name="CounterWidget", default_config={"color": "blue"}),
        is_elevated=True,
    )


@pytest_asyncio.fixture
async def widget_definition(catalog_service, widget_type, mock_user_owner):
    """A widget definition of the registered type"""
    return await catalog_service.create_definition(
        WidgetDefinitionCreate(
            name="Open incidents",
            description="Incidents not yet resolved",
            widget_type_id=widget_type["id"],
            data_source_config={"endpoint": "/api/incidents/count"},
        ),
        created_by=mock_user_owner["userId"],
    )


@pytest_asyncio.fixture
async def client(fake_db) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app, with the fake database injected"""
    app.dependency_overrides[get_db] = lambda: fake_db
    limiter.enabled = False
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True


def gateway_headers(user: dict) -> dict:
    """Headers the API gateway forwards for an authenticated user"""
    return {
        "x-gateway-authenticated": "true",
        "x-user-id": user["userId"],
        "x-roles": ",".join(user.get("roles", [])),
        "x-username": user.get("username", ""),
    }


# ==================== Users ====================


@pytest.fixture
def mock_user_owner():
    """Owner of the dashboards created in tests"""
    return {"userId": "owner123", "username": "owner", "roles": ["user"]}


@pytest.fixture
def mock_user_other():
    """Regular user with no relation to the owner's dashboards"""
    return {"userId": "user456", "username": "someone", "roles": ["user"]}


@pytest.fixture
def mock_user_admin():
    """User holding an elevated role"""
    return {"userId": "admin789", "username": "adminuser", "roles": ["admin", "user"]}
