import pytest

from motelbot.services.settings_service import UtilityRates
from motelbot.services.utility_service import (
    compute_usage_and_cost, compute_total, save_reading, get_utility,
    generate_all_for_month, get_month_utilities
)


RATES = UtilityRates(electric_rate=3500, water_rate=20000)


def test_usage_is_clamped_at_zero():
    assert compute_usage_and_cost(100, 150, 3500) == (50.0, 175000.0)
    assert compute_usage_and_cost(150, 100, 3500) == (0.0, 0.0)
    assert compute_usage_and_cost(0, 0, 3500) == (0.0, 0.0)


def test_total_ignores_rollback_on_one_meter():
    # electric rolled back, water used 3
    assert compute_total(500, 400, 3500, 10, 13, 20000) == 60000


@pytest.mark.asyncio
async def test_save_reading_stores_total(async_session, rooms):
    utility = await save_reading(
        async_session, rooms[0].id, "2026-03",
        electric_start=100, electric_end=150, electric_rate=3500,
        water_start=10, water_end=12, water_rate=20000
    )

    assert float(utility.total_amount) == 50 * 3500 + 2 * 20000


@pytest.mark.asyncio
async def test_save_reading_upserts(async_session, rooms):
    first = await save_reading(async_session, rooms[0].id, "2026-03", electric_end=10, electric_rate=1000)
    second = await save_reading(async_session, rooms[0].id, "2026-03", electric_end=20, electric_rate=1000)

    assert first.id == second.id
    stored = await get_utility(async_session, rooms[0].id, "2026-03")
    assert float(stored.electric_end) == 20
    assert float(stored.total_amount) == 20000


@pytest.mark.asyncio
async def test_generate_carries_previous_end_readings(async_session, rooms):
    await save_reading(
        async_session, rooms[0].id, "2026-02",
        electric_start=100, electric_end=180, electric_rate=3000,
        water_start=5, water_end=9, water_rate=15000
    )

    created = await generate_all_for_month(async_session, "2026-03", RATES)

    assert created == 3
    carried = await get_utility(async_session, rooms[0].id, "2026-03")
    assert float(carried.electric_start) == float(carried.electric_end) == 180
    assert float(carried.water_start) == float(carried.water_end) == 9
    # New rows take the current rates
    assert float(carried.electric_rate) == 3500
    assert float(carried.total_amount) == 0

    fresh = await get_utility(async_session, rooms[1].id, "2026-03")
    assert float(fresh.electric_start) == 0
    assert float(fresh.water_end) == 0


@pytest.mark.asyncio
async def test_generate_does_not_clobber_existing_rows(async_session, rooms):
    await save_reading(async_session, rooms[0].id, "2026-03", electric_start=1, electric_end=11, electric_rate=100)

    created = await generate_all_for_month(async_session, "2026-03", RATES)
    again = await generate_all_for_month(async_session, "2026-03", RATES)

    assert created == 2
    assert again == 0
    kept = await get_utility(async_session, rooms[0].id, "2026-03")
    assert float(kept.electric_end) == 11
    assert float(kept.total_amount) == 1000


@pytest.mark.asyncio
async def test_generate_across_year_boundary(async_session, rooms):
    await save_reading(async_session, rooms[0].id, "2025-12", electric_end=70)

    await generate_all_for_month(async_session, "2026-01", RATES)

    assert float((await get_utility(async_session, rooms[0].id, "2026-01")).electric_start) == 70


@pytest.mark.asyncio
async def test_month_utilities_default_rows(async_session, rooms):
    await save_reading(
        async_session, rooms[1].id, "2026-03",
        electric_start=0, electric_end=10, electric_rate=3500,
        water_start=0, water_end=1, water_rate=20000
    )

    overview = await get_month_utilities(async_session, "2026-03", RATES)

    assert [r.room_number for r in overview.rows] == [101, 102, 103]
    empty = overview.rows[0]
    assert empty.utility_id is None
    assert empty.electric_rate == 3500 and empty.water_rate == 20000
    assert empty.total_amount == 0
    assert overview.total_electric == 35000
    assert overview.total_water == 20000
    assert overview.total_all == 55000
