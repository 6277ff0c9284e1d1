"""Pytest fixtures: a file-backed SQLite database, seeded users, and an API client."""

from __future__ import annotations

from uuid import uuid4

import httpx
import pytest_asyncio
from sqlalchemy import func, select

from lockbox.app import create_app
from lockbox.database import close_db, create_schema, get_session_factory, init_db
from lockbox.models import User
from lockbox.services.events import EventDispatcher
from lockbox.services.identity import AccessControl

ARMORED = (
    "-----BEGIN PGP MESSAGE-----\n"
    "\n"
    "hQEMA5lkj3v1cGBLAQf/dGVzdCBwYXlsb2Fk\n"
    "=Xj2k\n"
    "-----END PGP MESSAGE-----\n"
)


async def count_rows(session_factory, model) -> int:
    """Count committed rows of ``model`` using a fresh session."""
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = await init_db(f"sqlite+aiosqlite:///{tmp_path / 'lockbox.db'}")
    await create_schema(engine)
    yield engine
    await close_db(engine)


@pytest_asyncio.fixture
async def session_factory(engine):
    return get_session_factory(engine)


@pytest_asyncio.fixture
async def users(session_factory) -> dict[str, User]:
    """Seed an active creator, a second active user, and an inactive user."""
    ada = User(id=str(uuid4()), username="ada@lockbox.test", first_name="Ada", last_name="Lovelace")
    betty = User(id=str(uuid4()), username="betty@lockbox.test", first_name="Betty", last_name="Snyder")
    carl = User(id=str(uuid4()), username="carl@lockbox.test", active=False)
    async with session_factory() as session:
        session.add_all([ada, betty, carl])
        await session.commit()
    return {"ada": ada, "betty": betty, "carl": carl}


@pytest_asyncio.fixture
async def ada_access(users) -> AccessControl:
    ada = users["ada"]
    return AccessControl(user_id=ada.id, username=ada.username, role=ada.role)


@pytest_asyncio.fixture
async def dispatcher() -> EventDispatcher:
    return EventDispatcher()


@pytest_asyncio.fixture
async def app(session_factory, dispatcher):
    app = create_app()
    app.state.session_factory = session_factory
    app.state.event_dispatcher = dispatcher
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
