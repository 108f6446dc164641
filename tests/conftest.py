import os

# motelbot.config validates these at import time
os.environ.setdefault("BOT_TOKEN", "123456:TEST")
os.environ.setdefault("OWNER_IDS", "1")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from motelbot.database.core import Base
from motelbot.database.models import Room, Tenant, RoomStatus


@pytest_asyncio.fixture
async def async_session():
    # Use in-memory SQLite for tests
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def rooms(async_session):
    """Rooms 101..103, vacant, 5 people max"""
    created = [
        Room(number=number, name=f"Room {number}", floor=1, rate=3000000, max_occupants=5,
             status=RoomStatus.vacant.value)
        for number in (101, 102, 103)
    ]
    async_session.add_all(created)
    await async_session.commit()
    return created


@pytest_asyncio.fixture
async def tenants(async_session):
    created = [
        Tenant(first_name="Nguyen", last_name="An", phone="0901000001", id_number="ID-A"),
        Tenant(first_name="Tran", last_name="Binh", phone="0901000002", id_number="ID-B"),
        Tenant(first_name="Le", last_name="Chi", phone="0901000003", id_number=""),
    ]
    async_session.add_all(created)
    await async_session.commit()
    return created
