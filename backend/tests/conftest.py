"""Shared test configuration and fixtures.

Every test gets its own file-backed SQLite database under ``tmp_path``,
bootstrapped by the schema manager, so tests are fully isolated and exercise
the same schema code the service runs at startup.

Sessions hold SQLite's write lock from their first statement until commit.
Fixtures that write data therefore commit before a test drives the API.
"""

from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import create_admin_token
from app.config import Settings
from app.database import Database
from app.main import create_app
from app.models.admin import Admin
from app.schema import SchemaManager
from app.services import admin_service, booking_service

ADMIN_PASSWORD = "adminpass123"


# ---------------------------------------------------------------------------
# Settings and database
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        environment="test",
        jwt_secret_key="test-secret-key-for-the-suite",
        request_timeout_seconds=5.0,
        auto_migrate=False,
    )


@pytest_asyncio.fixture
async def database(test_settings: Settings) -> AsyncGenerator[Database, None]:
    """A bootstrapped database handle, disposed after the test."""
    db = Database(test_settings.async_database_url)
    await SchemaManager(db.engine, test_settings).ensure_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """A session that commits when the test finishes without error."""
    async with database.session() as session:
        yield session


# ---------------------------------------------------------------------------
# Application and HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def app(test_settings: Settings, database: Database) -> FastAPI:
    application = create_app(test_settings)
    application.state.database = database
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient bound to the app (the lifespan does not run)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Convenience fixtures: admin identities
# ---------------------------------------------------------------------------


async def _make_admin(database: Database, email: str, role: str) -> Admin:
    async with database.session() as session:
        return await admin_service.upsert_admin(session, email, ADMIN_PASSWORD, "Test Admin", role)


@pytest_asyncio.fixture
async def test_admin(database: Database) -> Admin:
    return await _make_admin(database, "admin@example.com", "admin")


@pytest_asyncio.fixture
async def auth_headers(test_admin: Admin, test_settings: Settings) -> dict[str, str]:
    """Return Authorization headers for the admin."""
    token = create_admin_token(test_admin.id, test_admin.role, settings=test_settings)
    return {"Authorization": f"Bearer {token['access_token']}"}


@pytest_asyncio.fixture
async def viewer_headers(database: Database, test_settings: Settings) -> dict[str, str]:
    """Headers for an active account whose role is not an admin role."""
    viewer = await _make_admin(database, "viewer@example.com", "viewer")
    token = create_admin_token(viewer.id, viewer.role, settings=test_settings)
    return {"Authorization": f"Bearer {token['access_token']}"}


# ---------------------------------------------------------------------------
# Convenience fixtures: rooms
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_room(database: Database):
    """A committed, available 'Standard' room at 100.00 per night, for 2 adults and 1 child."""
    async with database.session() as session:
        room_types = {rt.slug: rt for rt in await booking_service.list_room_types(session)}
        return await booking_service.create_room(
            session,
            {
                "name": "Room 101",
                "price_per_night": Decimal("100.00"),
                "room_type_id": room_types["standard"].id,
                "max_adults": 2,
                "max_children": 1,
            },
        )
