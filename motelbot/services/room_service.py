import logging
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from motelbot.database.models import Room, Contract, RoomStatus
from motelbot.services.results import ServiceResult, success, failure, ROOM_STATUS_LOCKED


async def get_room(session: AsyncSession, room_id: int) -> Optional[Room]:
    stmt = (
        select(Room)
        .where(Room.id == room_id)
        .options(
            selectinload(Room.contracts).selectinload(Contract.tenant),
            selectinload(Room.contracts).selectinload(Contract.occupants),
        )
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_rooms(session: AsyncSession) -> List[Room]:
    """All rooms by number, with contracts, tenants and occupants loaded."""
    stmt = (
        select(Room)
        .options(
            selectinload(Room.contracts).selectinload(Contract.tenant),
            selectinload(Room.contracts).selectinload(Contract.occupants),
        )
        .order_by(Room.number)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_room(
    session: AsyncSession,
    room_id: int,
    rate: Optional[float] = None,
    status: Optional[RoomStatus] = None,
    notes: Optional[str] = None
) -> ServiceResult:
    """
    Manual room edit. Status may only move between vacant and
    maintenance; occupied is owned by move-in / move-out.
    """
    room = await session.get(Room, room_id)
    if not room:
        raise ValueError(f"Room ID {room_id} not found")

    if status is not None:
        status = RoomStatus(status)
        if status.value != room.status:
            if status == RoomStatus.occupied or room.status == RoomStatus.occupied.value:
                return failure(ROOM_STATUS_LOCKED, room=room.number, status=room.status)

    if rate is not None:
        room.rate = rate
    if status is not None:
        room.status = status.value
    if notes is not None:
        room.notes = notes

    await session.commit()
    logging.info(f"Room {room.number} updated: rate={room.rate}, status={room.status}")
    return success(room)


async def seed_rooms(
    session: AsyncSession,
    count: int = 10,
    rate: float = 3000000,
    max_occupants: int = 5
) -> int:
    """Create rooms 1..count that don't exist yet. Returns count created."""
    result = await session.execute(select(Room.number))
    existing = set(result.scalars().all())

    created = 0
    for number in range(1, count + 1):
        if number in existing:
            continue
        session.add(Room(
            number=number,
            name=f"Room {number}",
            floor=1 if number <= 5 else 2,
            rate=rate,
            max_occupants=max_occupants,
            status=RoomStatus.vacant.value,
        ))
        created += 1

    await session.commit()
    return created
