"""
Pytest fixtures for the test database, gateway and HTTP client.

Each test gets its own SQLite file under tmp_path so that independent
sessions (used by the concurrent seating tests) see the same data.
"""

import os

os.environ["REDIS_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from datetime import date, time
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.main import app
from app.db.base import Base
from app.db.gateway import StorageGateway
from app.db.session import build_engine, build_sessionmaker, get_db
from app.models.reservation import Reservation
from app.models.table import Table

# Far enough ahead to stay in the future; 2050-01-05 is a Wednesday
OPEN_DAY = "2050-01-05"
CLOSED_DAY = "2030-01-01"  # Tuesday


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables in a fresh database file, yield a session factory, then dispose."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'reservations.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield build_sessionmaker(engine)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def gateway(db_session: AsyncSession) -> StorageGateway:
    return StorageGateway(db_session)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get their own session on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def reservation_data() -> dict:
    """A payload that passes every admission rule."""
    return {
        "first_name": "first",
        "last_name": "last",
        "mobile_number": "800-555-1212",
        "reservation_date": OPEN_DAY,
        "reservation_time": "17:30",
        "people": 2,
    }


@pytest_asyncio.fixture
async def make_reservation(gateway: StorageGateway):
    """Insert a booked reservation directly, bypassing the admission rules."""

    async def _make(people: int = 2, first_name: str = "Ada", last_name: str = "Lovelace",
                    mobile_number: str = "800-555-1212") -> Reservation:
        return await gateway.run_atomic(
            lambda gw: gw.create_reservation(
                {
                    "first_name": first_name,
                    "last_name": last_name,
                    "mobile_number": mobile_number,
                    "reservation_date": date(2050, 1, 5),
                    "reservation_time": time(18, 0),
                    "people": people,
                }
            )
        )

    return _make


@pytest_asyncio.fixture
async def make_table(gateway: StorageGateway):
    async def _make(table_name: str = "Bar #1", capacity: int = 2) -> Table:
        return await gateway.run_atomic(
            lambda gw: gw.create_table({"table_name": table_name, "capacity": capacity})
        )

    return _make
