import pytest

from motelbot.config import config
from motelbot.database.models import UserRole
from motelbot.services.user_service import create_admin, get_all_admins, get_user_by_tg_id, reload_admin_cache


@pytest.mark.asyncio
async def test_create_admin_reactivates_existing(async_session):
    user = await create_admin(async_session, 555, "Manager", role=UserRole.admin)
    user.is_active = False
    await async_session.commit()
    assert await get_user_by_tg_id(async_session, 555) is None

    again = await create_admin(async_session, 555, "", role=UserRole.owner)

    assert again.id == user.id
    assert again.is_active
    assert again.role == UserRole.owner.value
    assert again.full_name == "Manager"
    assert len(await get_all_admins(async_session)) == 1


@pytest.mark.asyncio
async def test_reload_admin_cache_keeps_env_ids(async_session):
    await create_admin(async_session, 777, "Owner Two", role=UserRole.owner)
    await create_admin(async_session, 888, "Helper")

    try:
        loaded = await reload_admin_cache(async_session)

        assert loaded == 2
        assert config.is_admin(888)
        assert 777 in config.OWNER_IDS
        # OWNER_IDS from the environment survive the reload
        assert set(config._env_owner_ids) <= set(config.OWNER_IDS)
        assert not config.is_admin(999)
    finally:
        config.ADMIN_IDS = list(config._env_admin_ids)
        config.OWNER_IDS = list(config._env_owner_ids)
