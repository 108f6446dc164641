import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from motelbot.database.core import Base
from motelbot.database.models import Setting
from motelbot.middlewares.db import DbSessionMiddleware


@pytest_asyncio.fixture
async def session_pool():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest.mark.asyncio
async def test_handler_changes_are_committed(session_pool):
    middleware = DbSessionMiddleware(session_pool)

    async def handler(event, data):
        data["session"].add(Setting(key="motel_name", value="Motel A"))
        return "done"

    assert await middleware(handler, object(), {}) == "done"

    async with session_pool() as session:
        assert (await session.get(Setting, "motel_name")).value == "Motel A"


@pytest.mark.asyncio
async def test_failed_handler_is_rolled_back(session_pool):
    middleware = DbSessionMiddleware(session_pool)

    async def handler(event, data):
        data["session"].add(Setting(key="motel_name", value="Motel A"))
        await data["session"].flush()
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await middleware(handler, object(), {})

    async with session_pool() as session:
        assert await session.get(Setting, "motel_name") is None
