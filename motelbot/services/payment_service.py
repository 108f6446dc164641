"""
Payment ledger: monthly rent generation, paid/pending toggling,
manual payments and the per-month totals shown on the payments screen.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, NamedTuple
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from motelbot.database.models import (
    Contract, Payment, Room, ContractStatus,
    PaymentType, PaymentMethod, PaymentStatus
)
from motelbot.services.results import ServiceResult, success


class RentStatus(NamedTuple):
    """Rent state of one active contract for a month"""
    contract_id: int
    room_number: int
    tenant_name: str
    monthly_rent: float
    paid: bool
    payment_id: Optional[int]
    paid_amount: float


class MonthLedger(NamedTuple):
    month: str
    rent_status: List[RentStatus]
    payments: List[Payment]
    # expected = sum of active contracts' rent
    # collected = every paid payment of the month, any type
    # pending = expected minus rent of contracts whose rent payment is paid
    total_expected: float
    total_collected: float
    total_pending: float


async def _find_rent_payment(session: AsyncSession, contract_id: int, month: str) -> Optional[Payment]:
    stmt = select(Payment).where(
        Payment.contract_id == contract_id,
        Payment.month == month,
        Payment.type == PaymentType.rent.value
    ).order_by(Payment.id).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def generate_rent_for_month(session: AsyncSession, month: str) -> int:
    """
    Ensure every active contract has a rent payment for month.
    Only fills gaps: existing rent rows are never duplicated or changed.
    Returns the number of payments created.
    """
    stmt = select(Contract).where(Contract.status == ContractStatus.active.value)
    result = await session.execute(stmt)
    contracts = result.scalars().all()

    created = 0
    for contract in contracts:
        existing = await _find_rent_payment(session, contract.id, month)
        if existing:
            continue
        session.add(Payment(
            contract_id=contract.id,
            amount=contract.monthly_rent,
            month=month,
            type=PaymentType.rent.value,
            method=PaymentMethod.cash.value,
            status=PaymentStatus.pending.value,
        ))
        created += 1

    await session.commit()
    logging.info(f"Rent generation for {month}: {created} created, {len(contracts) - created} already present")
    return created


async def set_payment_status(session: AsyncSession, payment_id: int, paid: bool) -> Payment:
    """Mark a payment paid (stamps paid_at) or pending (clears it)."""
    payment = await session.get(Payment, payment_id)
    if not payment:
        raise ValueError(f"Payment ID {payment_id} not found")

    if paid:
        payment.status = PaymentStatus.paid.value
        payment.paid_at = datetime.now(timezone.utc)
    else:
        payment.status = PaymentStatus.pending.value
        payment.paid_at = None

    await session.commit()
    return payment


async def add_manual_payment(
    session: AsyncSession,
    contract_id: int,
    amount: float,
    month: str,
    type: PaymentType = PaymentType.rent,
    method: PaymentMethod = PaymentMethod.cash,
    status: PaymentStatus = PaymentStatus.pending,
    notes: str = ""
) -> ServiceResult:
    contract = await session.get(Contract, contract_id)
    if not contract:
        raise ValueError(f"Contract ID {contract_id} not found")

    status = PaymentStatus(status)
    payment = Payment(
        contract_id=contract_id,
        amount=amount,
        month=month,
        type=PaymentType(type).value,
        method=PaymentMethod(method).value,
        status=status.value,
        paid_at=datetime.now(timezone.utc) if status == PaymentStatus.paid else None,
        notes=notes or "",
    )
    session.add(payment)
    await session.commit()
    logging.info(f"Manual payment {payment.id}: contract {contract_id}, {amount} ({payment.type}, {payment.status})")
    return success(payment)


async def delete_payment(session: AsyncSession, payment_id: int) -> bool:
    result = await session.execute(delete(Payment).where(Payment.id == payment_id))
    await session.commit()
    return result.rowcount > 0


async def get_month_ledger(session: AsyncSession, month: str) -> MonthLedger:
    contracts_stmt = (
        select(Contract)
        .join(Room, Contract.room_id == Room.id)
        .where(Contract.status == ContractStatus.active.value)
        .options(selectinload(Contract.room), selectinload(Contract.tenant))
        .order_by(Room.number)
    )
    contracts = (await session.execute(contracts_stmt)).scalars().all()

    payments_stmt = (
        select(Payment)
        .where(Payment.month == month)
        .options(
            selectinload(Payment.contract).selectinload(Contract.room),
            selectinload(Payment.contract).selectinload(Contract.tenant),
        )
        .order_by(Payment.created_at.desc(), Payment.id.desc())
    )
    payments = list((await session.execute(payments_stmt)).scalars().all())

    rent_by_contract = {}
    for payment in sorted(payments, key=lambda p: p.id):
        if payment.type == PaymentType.rent.value:
            rent_by_contract.setdefault(payment.contract_id, payment)

    rent_status = []
    for contract in contracts:
        rent = rent_by_contract.get(contract.id)
        rent_status.append(RentStatus(
            contract_id=contract.id,
            room_number=contract.room.number,
            tenant_name=contract.tenant.full_name,
            monthly_rent=float(contract.monthly_rent),
            paid=rent is not None and rent.status == PaymentStatus.paid.value,
            payment_id=rent.id if rent else None,
            paid_amount=float(rent.amount) if rent else 0.0,
        ))

    total_expected = sum(r.monthly_rent for r in rent_status)
    total_collected = sum(float(p.amount) for p in payments if p.status == PaymentStatus.paid.value)
    total_pending = total_expected - sum(r.monthly_rent for r in rent_status if r.paid)

    return MonthLedger(
        month=month,
        rent_status=rent_status,
        payments=payments,
        total_expected=total_expected,
        total_collected=total_collected,
        total_pending=total_pending,
    )
