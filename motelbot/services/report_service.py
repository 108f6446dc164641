from datetime import date
from typing import Dict, List, NamedTuple, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from motelbot.database.models import (
    Room, Tenant, Contract, Payment, Utility,
    RoomStatus, ContractStatus, PaymentType, PaymentStatus
)
from motelbot.utils.months import current_month, shift_month, month_bounds


class OccupancyStats:
    def __init__(self, total, occupied, vacant, maintenance):
        self.total = total
        self.occupied = occupied
        self.vacant = vacant
        self.maintenance = maintenance
        self.rate = round(occupied / total * 100) if total > 0 else 0


class DashboardStats(NamedTuple):
    occupancy: OccupancyStats
    active_contracts: int
    total_tenants: int


class MonthlyReport(NamedTuple):
    month: str
    income: Dict[str, float]  # per payment type + "total"
    unpaid_payments: List[Payment]
    total_unpaid: float
    occupancy: OccupancyStats
    occupancy_history: List[tuple]  # (month, rooms with a contract)
    total_utility_cost: float


async def _occupancy(session: AsyncSession) -> OccupancyStats:
    stmt = select(Room.status, func.count(Room.id)).group_by(Room.status)
    counts = {status: count for status, count in (await session.execute(stmt)).all()}
    return OccupancyStats(
        total=sum(counts.values()),
        occupied=counts.get(RoomStatus.occupied.value, 0),
        vacant=counts.get(RoomStatus.vacant.value, 0),
        maintenance=counts.get(RoomStatus.maintenance.value, 0),
    )


async def get_dashboard_stats(session: AsyncSession) -> DashboardStats:
    active_stmt = select(func.count(Contract.id)).where(Contract.status == ContractStatus.active.value)
    tenants_stmt = select(func.count(Tenant.id))
    return DashboardStats(
        occupancy=await _occupancy(session),
        active_contracts=(await session.execute(active_stmt)).scalar() or 0,
        total_tenants=(await session.execute(tenants_stmt)).scalar() or 0,
    )


async def rooms_with_contracts_in(session: AsyncSession, month: str) -> int:
    """Distinct rooms with a contract overlapping the month."""
    first, last = month_bounds(month)
    stmt = select(func.count(func.distinct(Contract.room_id))).where(
        Contract.start_date <= last,
        or_(Contract.end_date.is_(None), Contract.end_date >= first)
    )
    return (await session.execute(stmt)).scalar() or 0


async def get_monthly_report(
    session: AsyncSession,
    month: str,
    today: Optional[date] = None,
    history_months: int = 6
) -> MonthlyReport:
    # Income: paid payments of the month by type
    income_stmt = (
        select(Payment.type, func.coalesce(func.sum(Payment.amount), 0))
        .where(Payment.month == month, Payment.status == PaymentStatus.paid.value)
        .group_by(Payment.type)
    )
    by_type = {t: float(total) for t, total in (await session.execute(income_stmt)).all()}
    income = {t.value: by_type.get(t.value, 0.0) for t in PaymentType}
    income["total"] = sum(income.values())

    # Unpaid: every pending payment regardless of month
    unpaid_stmt = (
        select(Payment)
        .where(Payment.status == PaymentStatus.pending.value)
        .options(
            selectinload(Payment.contract).selectinload(Contract.room),
            selectinload(Payment.contract).selectinload(Contract.tenant),
        )
        .order_by(Payment.month.desc(), Payment.id)
    )
    unpaid = list((await session.execute(unpaid_stmt)).scalars().all())

    base = current_month(today)
    history = []
    for i in range(-(history_months - 1), 1):
        m = shift_month(base, i)
        history.append((m, await rooms_with_contracts_in(session, m)))

    utility_stmt = select(func.coalesce(func.sum(Utility.total_amount), 0)).where(Utility.month == month)

    return MonthlyReport(
        month=month,
        income=income,
        unpaid_payments=unpaid,
        total_unpaid=sum(float(p.amount) for p in unpaid),
        occupancy=await _occupancy(session),
        occupancy_history=history,
        total_utility_cost=float((await session.execute(utility_stmt)).scalar() or 0),
    )
