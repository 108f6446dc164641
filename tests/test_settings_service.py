import pytest
from sqlalchemy import select

from motelbot.database.models import Room
from motelbot.services.settings_service import (
    DEFAULT_SETTINGS, SettingsProvider, get_settings, get_setting,
    save_settings, save_motel_info, save_rates, ensure_default_settings
)


@pytest.mark.asyncio
async def test_ensure_default_settings_never_overwrites(async_session):
    await save_settings(async_session, {"motel_name": "Nhà trọ Hoa"})

    created = await ensure_default_settings(async_session)
    again = await ensure_default_settings(async_session)

    assert created == len(DEFAULT_SETTINGS) - 1
    assert again == 0
    assert await get_setting(async_session, "motel_name") == "Nhà trọ Hoa"
    assert await get_setting(async_session, "currency") == "VND"


@pytest.mark.asyncio
async def test_save_settings_stores_none_as_empty(async_session):
    stored = await save_settings(async_session, {"motel_phone": None})

    assert stored["motel_phone"] == ""
    assert await get_setting(async_session, "missing", "fallback") == "fallback"


@pytest.mark.asyncio
async def test_save_motel_info(async_session):
    stored = await save_motel_info(async_session, "Motel A", "12 Le Loi", "0283")

    assert stored["motel_name"] == "Motel A"
    assert stored["motel_address"] == "12 Le Loi"
    assert stored["motel_phone"] == "0283"


@pytest.mark.asyncio
async def test_save_rates_applies_room_rate_to_every_room(async_session, rooms):
    stored = await save_rates(async_session, default_room_rate="3500000", electric_rate="4000")

    assert stored["default_room_rate"] == "3500000"
    assert stored["electric_rate"] == "4000"
    rates = (await async_session.execute(select(Room.rate))).scalars().all()
    assert [float(r) for r in rates] == [3500000.0] * 3


@pytest.mark.asyncio
async def test_save_rates_leaves_omitted_keys_alone(async_session, rooms):
    await ensure_default_settings(async_session)

    stored = await save_rates(async_session, water_rate="25000")

    assert stored["water_rate"] == "25000"
    assert stored["electric_rate"] == DEFAULT_SETTINGS["electric_rate"]
    assert stored["default_room_rate"] == DEFAULT_SETTINGS["default_room_rate"]
    rates = (await async_session.execute(select(Room.rate))).scalars().all()
    assert [float(r) for r in rates] == [3000000.0] * 3


@pytest.mark.asyncio
async def test_settings_provider(async_session):
    await save_settings(async_session, {"electric_rate": "4200", "water_rate": "abc"})

    settings = await SettingsProvider.load(async_session)

    assert settings.utility_rates.electric_rate == 4200
    # Unparseable values fall back to the defaults
    assert settings.utility_rates.water_rate == float(DEFAULT_SETTINGS["water_rate"])
    assert settings.currency == "VND"
    assert settings.get("motel_name") == DEFAULT_SETTINGS["motel_name"]
    assert settings.get("unknown", "x") == "x"


@pytest.mark.asyncio
async def test_get_settings_empty(async_session):
    assert await get_settings(async_session) == {}
