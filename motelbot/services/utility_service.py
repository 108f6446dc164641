"""
Utility usage: meter readings per room and month.

Usage is end - start clamped at zero, so a meter rollback or a typo never
produces a negative bill. Each month's start readings carry over from the
previous month's end readings.
"""
import logging
from typing import List, NamedTuple, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.database.models import Room, Utility
from motelbot.services.settings_service import UtilityRates
from motelbot.utils.months import previous_month


class UtilityRow(NamedTuple):
    room_id: int
    room_number: int
    utility_id: Optional[int]
    electric_start: float
    electric_end: float
    electric_rate: float
    water_start: float
    water_end: float
    water_rate: float
    total_amount: float


class MonthUtilities(NamedTuple):
    month: str
    rows: List[UtilityRow]
    total_electric: float
    total_water: float
    total_all: float


def compute_usage_and_cost(start: float, end: float, rate: float) -> Tuple[float, float]:
    """Return (usage, cost); usage never goes below zero."""
    usage = max(0.0, float(end) - float(start))
    return usage, usage * float(rate)


def compute_total(
    electric_start: float, electric_end: float, electric_rate: float,
    water_start: float, water_end: float, water_rate: float
) -> float:
    _, electric_cost = compute_usage_and_cost(electric_start, electric_end, electric_rate)
    _, water_cost = compute_usage_and_cost(water_start, water_end, water_rate)
    return electric_cost + water_cost


async def get_utility(session: AsyncSession, room_id: int, month: str) -> Optional[Utility]:
    stmt = select(Utility).where(Utility.room_id == room_id, Utility.month == month)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def save_reading(
    session: AsyncSession,
    room_id: int,
    month: str,
    electric_start: float = 0,
    electric_end: float = 0,
    electric_rate: float = 0,
    water_start: float = 0,
    water_end: float = 0,
    water_rate: float = 0
) -> Utility:
    """Insert or update the (room, month) reading; total is stored now."""
    total_amount = compute_total(
        electric_start, electric_end, electric_rate,
        water_start, water_end, water_rate
    )
    values = dict(
        electric_start=electric_start,
        electric_end=electric_end,
        electric_rate=electric_rate,
        water_start=water_start,
        water_end=water_end,
        water_rate=water_rate,
        total_amount=total_amount,
    )

    utility = await get_utility(session, room_id, month)
    if utility is None:
        utility = Utility(room_id=room_id, month=month, **values)
        session.add(utility)
    else:
        for field, value in values.items():
            setattr(utility, field, value)

    await session.commit()
    return utility


async def generate_all_for_month(session: AsyncSession, month: str, rates: UtilityRates) -> int:
    """
    Create a reading row for every room that has none for month.
    Start and end both equal last month's end reading (0 without one),
    so usage is zero until the real end reading is entered.
    Existing rows are left untouched. Returns the number created.
    """
    prev = previous_month(month)

    rooms = (await session.execute(select(Room).order_by(Room.number))).scalars().all()
    prev_rows = (await session.execute(select(Utility).where(Utility.month == prev))).scalars().all()
    current_rows = (await session.execute(select(Utility.room_id).where(Utility.month == month))).scalars().all()

    prev_by_room = {u.room_id: u for u in prev_rows}
    already = set(current_rows)

    created = 0
    for room in rooms:
        if room.id in already:
            continue
        last = prev_by_room.get(room.id)
        electric = float(last.electric_end) if last else 0.0
        water = float(last.water_end) if last else 0.0
        session.add(Utility(
            room_id=room.id,
            month=month,
            electric_start=electric,
            electric_end=electric,
            electric_rate=rates.electric_rate,
            water_start=water,
            water_end=water,
            water_rate=rates.water_rate,
            total_amount=0,
        ))
        created += 1

    await session.commit()
    logging.info(f"Utility generation for {month}: {created} rows created (carried from {prev})")
    return created


async def get_month_utilities(session: AsyncSession, month: str, rates: UtilityRates) -> MonthUtilities:
    """One row per room; rooms without a reading show zeros and default rates."""
    rooms = (await session.execute(select(Room).order_by(Room.number))).scalars().all()
    rows_stmt = select(Utility).where(Utility.month == month)
    by_room = {u.room_id: u for u in (await session.execute(rows_stmt)).scalars().all()}

    rows = []
    for room in rooms:
        u = by_room.get(room.id)
        if u:
            rows.append(UtilityRow(
                room_id=room.id,
                room_number=room.number,
                utility_id=u.id,
                electric_start=float(u.electric_start),
                electric_end=float(u.electric_end),
                electric_rate=float(u.electric_rate),
                water_start=float(u.water_start),
                water_end=float(u.water_end),
                water_rate=float(u.water_rate),
                total_amount=float(u.total_amount),
            ))
        else:
            rows.append(UtilityRow(
                room_id=room.id,
                room_number=room.number,
                utility_id=None,
                electric_start=0.0,
                electric_end=0.0,
                electric_rate=rates.electric_rate,
                water_start=0.0,
                water_end=0.0,
                water_rate=rates.water_rate,
                total_amount=0.0,
            ))

    total_electric = sum(compute_usage_and_cost(r.electric_start, r.electric_end, r.electric_rate)[1] for r in rows)
    total_water = sum(compute_usage_and_cost(r.water_start, r.water_end, r.water_rate)[1] for r in rows)
    total_all = sum(r.total_amount for r in rows)

    return MonthUtilities(
        month=month,
        rows=rows,
        total_electric=total_electric,
        total_water=total_water,
        total_all=total_all,
    )
