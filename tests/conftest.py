"""
Shared fixtures: an application bound to a fresh in-memory SQLite database per test.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from club_api.config import Settings
from club_api.main import create_app

TEST_MAX_FILE_SIZE = 1024


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        MAX_FILE_SIZE=TEST_MAX_FILE_SIZE,
    )


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    database = application.state.context.database
    await database.create_all()
    try:
        yield application
    finally:
        await database.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def session(app):
    """A session on the same database the app uses."""
    async with app.state.context.database.session_factory() as db_session:
        yield db_session
