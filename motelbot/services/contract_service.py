"""
Occupancy Engine - move-in / move-out of contracts.

Invariants:
- a room has at most one active contract, a tenant at most one;
- an active contract's headcount (tenant + occupants) never exceeds
  the room's max_occupants;
- rooms flip vacant -> occupied -> vacant only through this module.

Every business violation is returned as a ServiceResult; validation
always completes before the first write.
"""
import logging
from datetime import date
from typing import Optional, List, Sequence, NamedTuple
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from motelbot.database.models import (
    Room, Tenant, Contract, Occupant, RoomStatus, ContractStatus
)
from motelbot.schemas.validation import OccupantInput
from motelbot.services.identity_service import find_duplicate_identity
from motelbot.services.results import (
    ServiceResult, success, failure,
    MAX_OCCUPANTS, DUPLICATE_OCCUPANT_IDS, DUPLICATE_ID,
    ROOM_NOT_VACANT, TENANT_HAS_ACTIVE_CONTRACT
)


class MoveInCandidates(NamedTuple):
    vacant_rooms: List[Room]
    tenants: List[Tenant]  # tenants without an active contract


async def _reject(session: AsyncSession, code: str, **params) -> ServiceResult:
    """Roll back so the room row lock is released before reporting"""
    await session.rollback()
    return failure(code, **params)


async def move_in(
    session: AsyncSession,
    room_id: int,
    tenant_id: int,
    monthly_rent: float,
    deposit: float = 0,
    start_date: Optional[date] = None,
    notes: str = "",
    occupants: Optional[Sequence[OccupantInput]] = None
) -> ServiceResult:
    """
    Create an active contract for tenant in room, with its occupants.

    Validation order (first failure wins):
    1. headcount vs room capacity          -> MAX_OCCUPANTS
    2. repeated id among new occupants     -> DUPLICATE_OCCUPANT_IDS
    3. id already held by someone else     -> DUPLICATE_ID
    4. room not vacant                     -> ROOM_NOT_VACANT
    5. tenant already has active contract  -> TENANT_HAS_ACTIVE_CONTRACT

    Contract, occupants and room status are committed together. A rejection
    rolls the session back, which releases the room lock.
    """
    rows = [o for o in (occupants or []) if not o.is_blank]

    # Lock the room row so two move-ins for one room serialize (PostgreSQL)
    lock_stmt = (
        select(Room)
        .where(Room.id == room_id)
        .with_for_update()
    )
    lock_result = await session.execute(lock_stmt)
    room = lock_result.scalar_one_or_none()

    if not room:
        raise ValueError(f"Room ID {room_id} not found")

    tenant = await session.get(Tenant, tenant_id)
    if not tenant:
        raise ValueError(f"Tenant ID {tenant_id} not found")

    # 1. Capacity
    headcount = 1 + len(rows)
    if headcount > room.max_occupants:
        logging.info(f"Move-in rejected for room {room.number}: {headcount} people > {room.max_occupants}")
        return await _reject(session, MAX_OCCUPANTS, max=room.max_occupants, rest=room.max_occupants - 1)

    # 2. Duplicates inside the submission
    seen = set()
    for row in rows:
        if not row.id_number:
            continue
        if row.id_number in seen:
            return await _reject(session, DUPLICATE_OCCUPANT_IDS, id_number=row.id_number)
        seen.add(row.id_number)

    # 3. Global identity uniqueness (new contract, nothing to exclude)
    for row in rows:
        if not row.id_number:
            continue
        holder = await find_duplicate_identity(session, row.id_number)
        if holder:
            logging.info(f"Move-in rejected: id {row.id_number} already used by {holder}")
            return await _reject(session, DUPLICATE_ID, id_number=row.id_number, holder=holder)

    # 4-5. One active contract per room / per tenant
    if room.status != RoomStatus.vacant.value:
        return await _reject(session, ROOM_NOT_VACANT, room=room.number, status=room.status)

    active_stmt = select(Contract.id).where(
        Contract.tenant_id == tenant_id,
        Contract.status == ContractStatus.active.value
    )
    active_result = await session.execute(active_stmt)
    if active_result.first() is not None:
        return await _reject(session, TENANT_HAS_ACTIVE_CONTRACT, tenant=tenant.full_name)

    contract = Contract(
        room_id=room.id,
        tenant_id=tenant.id,
        monthly_rent=monthly_rent,
        deposit=deposit or 0,
        start_date=start_date or date.today(),
        status=ContractStatus.active.value,
        notes=notes or "",
        occupants=[
            Occupant(
                first_name=row.first_name,
                last_name=row.last_name,
                phone=row.phone,
                id_type=row.id_type,
                id_number=row.id_number,
                relation=row.relation,
            )
            for row in rows
        ],
    )
    session.add(contract)
    room.status = RoomStatus.occupied.value

    try:
        await session.commit()
    except IntegrityError:
        # Lost a race against the partial unique indexes
        await session.rollback()
        logging.warning(f"Move-in for room {room_id} / tenant {tenant_id} conflicted on commit")
        raise

    logging.info(
        f"Move-in: contract {contract.id}, room {room.number}, tenant {tenant.id}, "
        f"{headcount} people"
    )
    return success(contract)


async def move_out(session: AsyncSession, contract_id: int) -> ServiceResult:
    """
    End a contract and free its room.

    Missing or already-ended contracts are accepted silently (idempotent).
    Occupants and payments stay attached to the ended contract as history.
    """
    lock_stmt = (
        select(Contract)
        .where(Contract.id == contract_id)
        .with_for_update()
    )
    result = await session.execute(lock_stmt)
    contract = result.scalar_one_or_none()

    if not contract:
        logging.info(f"Move-out: contract {contract_id} not found, nothing to do")
        return success(None)

    if contract.status == ContractStatus.ended.value:
        logging.info(f"Move-out: contract {contract_id} already ended")
        return success(contract)

    contract.status = ContractStatus.ended.value
    # A contract that starts in the future ends no earlier than its start
    contract.end_date = max(date.today(), contract.start_date)

    room = await session.get(Room, contract.room_id)
    if room:
        room.status = RoomStatus.vacant.value

    await session.commit()

    logging.info(f"Move-out: contract {contract_id}, room {contract.room_id} is vacant")
    return success(contract)


# --- Read helpers ---

def _with_relations(stmt):
    return stmt.options(
        selectinload(Contract.room),
        selectinload(Contract.tenant),
        selectinload(Contract.occupants),
    )


async def get_contract(session: AsyncSession, contract_id: int) -> Optional[Contract]:
    stmt = _with_relations(select(Contract).where(Contract.id == contract_id))
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_contracts(session: AsyncSession, status: Optional[ContractStatus] = None) -> List[Contract]:
    """Active contracts first, newest start date first."""
    stmt = _with_relations(select(Contract))
    if status:
        stmt = stmt.where(Contract.status == status.value)
    stmt = stmt.order_by(Contract.status.asc(), Contract.start_date.desc(), Contract.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_active_contracts(session: AsyncSession) -> List[Contract]:
    """Active contracts ordered by room number."""
    stmt = (
        _with_relations(select(Contract))
        .join(Room, Contract.room_id == Room.id)
        .where(Contract.status == ContractStatus.active.value)
        .order_by(Room.number)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_move_in_candidates(session: AsyncSession) -> MoveInCandidates:
    rooms_stmt = (
        select(Room)
        .where(Room.status == RoomStatus.vacant.value)
        .order_by(Room.number)
    )
    rooms_result = await session.execute(rooms_stmt)

    tenants_stmt = (
        select(Tenant)
        .where(~Tenant.contracts.any(Contract.status == ContractStatus.active.value))
        .order_by(Tenant.first_name, Tenant.last_name)
    )
    tenants_result = await session.execute(tenants_stmt)

    return MoveInCandidates(
        vacant_rooms=list(rooms_result.scalars().all()),
        tenants=list(tenants_result.scalars().all()),
    )
