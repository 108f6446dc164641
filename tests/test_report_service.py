import pytest
from datetime import date

from motelbot.database.models import RoomStatus, ContractStatus, PaymentType, PaymentStatus
from motelbot.services.contract_service import move_in
from motelbot.services.payment_service import add_manual_payment
from motelbot.services.report_service import (
    OccupancyStats, get_dashboard_stats, get_monthly_report, rooms_with_contracts_in
)
from motelbot.services.utility_service import save_reading


def test_occupancy_rate_rounds_to_percent():
    assert OccupancyStats(total=3, occupied=1, vacant=2, maintenance=0).rate == 33
    assert OccupancyStats(total=3, occupied=2, vacant=1, maintenance=0).rate == 67
    assert OccupancyStats(total=0, occupied=0, vacant=0, maintenance=0).rate == 0


@pytest.mark.asyncio
async def test_dashboard_stats(async_session, rooms, tenants):
    rooms[2].status = RoomStatus.maintenance.value
    await async_session.commit()
    await move_in(async_session, rooms[0].id, tenants[0].id, 3000000)

    stats = await get_dashboard_stats(async_session)

    assert stats.occupancy.total == 3
    assert stats.occupancy.occupied == 1
    assert stats.occupancy.vacant == 1
    assert stats.occupancy.maintenance == 1
    assert stats.active_contracts == 1
    assert stats.total_tenants == 3


@pytest.mark.asyncio
async def test_monthly_report_income_and_unpaid(async_session, rooms, tenants):
    contract = (await move_in(async_session, rooms[0].id, tenants[0].id, 3000000)).value
    cid = contract.id
    await add_manual_payment(async_session, cid, 3000000, "2026-03", status=PaymentStatus.paid)
    await add_manual_payment(async_session, cid, 1000000, "2026-03", type=PaymentType.deposit, status=PaymentStatus.paid)
    await add_manual_payment(async_session, cid, 500000, "2026-02", status=PaymentStatus.paid)
    await add_manual_payment(async_session, cid, 120000, "2026-03", type=PaymentType.utility)
    await add_manual_payment(async_session, cid, 3000000, "2026-01")

    report = await get_monthly_report(async_session, "2026-03", today=date(2026, 3, 15))

    assert report.income == {"rent": 3000000, "deposit": 1000000, "utility": 0, "other": 0, "total": 4000000}
    # Pending payments of any month count as unpaid, newest month first
    assert [p.month for p in report.unpaid_payments] == ["2026-03", "2026-01"]
    assert report.total_unpaid == 3120000
    assert report.unpaid_payments[0].contract.room.number == 101


@pytest.mark.asyncio
async def test_monthly_report_utility_cost(async_session, rooms):
    await save_reading(async_session, rooms[0].id, "2026-03", electric_end=10, electric_rate=3500)
    await save_reading(async_session, rooms[1].id, "2026-03", water_end=2, water_rate=20000)
    await save_reading(async_session, rooms[1].id, "2026-02", water_end=5, water_rate=20000)

    report = await get_monthly_report(async_session, "2026-03", today=date(2026, 3, 1))

    assert report.total_utility_cost == 75000


@pytest.mark.asyncio
async def test_rooms_with_contracts_in_month(async_session, rooms, tenants):
    ended = (await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, start_date=date(2026, 1, 10))).value
    ended.status = ContractStatus.ended.value
    ended.end_date = date(2026, 2, 3)
    rooms[0].status = RoomStatus.vacant.value
    await async_session.commit()
    await move_in(async_session, rooms[1].id, tenants[1].id, 3000000, start_date=date(2026, 2, 20))

    assert await rooms_with_contracts_in(async_session, "2025-12") == 0
    assert await rooms_with_contracts_in(async_session, "2026-01") == 1
    assert await rooms_with_contracts_in(async_session, "2026-02") == 2
    assert await rooms_with_contracts_in(async_session, "2026-03") == 1


@pytest.mark.asyncio
async def test_occupancy_history_ends_at_current_month(async_session, rooms, tenants):
    await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, start_date=date(2026, 2, 1))

    report = await get_monthly_report(async_session, "2026-01", today=date(2026, 3, 5), history_months=4)

    assert report.occupancy_history == [("2025-12", 0), ("2026-01", 0), ("2026-02", 1), ("2026-03", 1)]
    assert report.occupancy.occupied == 1
