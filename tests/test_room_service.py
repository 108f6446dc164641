import pytest

from motelbot.database.models import RoomStatus
from motelbot.services.contract_service import move_in
from motelbot.services.results import ROOM_STATUS_LOCKED
from motelbot.services.room_service import get_room, list_rooms, update_room, seed_rooms


@pytest.mark.asyncio
async def test_seed_rooms_is_idempotent(async_session):
    created = await seed_rooms(async_session, count=10, rate=2800000)
    again = await seed_rooms(async_session, count=10)

    rooms = await list_rooms(async_session)
    assert created == 10
    assert again == 0
    assert [r.number for r in rooms] == list(range(1, 11))
    assert [r.floor for r in rooms] == [1] * 5 + [2] * 5
    assert all(float(r.rate) == 2800000 for r in rooms)
    assert all(r.status == RoomStatus.vacant.value for r in rooms)


@pytest.mark.asyncio
async def test_seed_rooms_fills_missing_numbers(async_session, rooms):
    # rooms fixture uses 101..103, so 1..3 are all missing
    assert await seed_rooms(async_session, count=3) == 3
    assert len(await list_rooms(async_session)) == 6


@pytest.mark.asyncio
async def test_update_room_rate_and_notes(async_session, rooms):
    result = await update_room(async_session, rooms[0].id, rate=3300000, notes="new AC")

    assert result.ok
    room = await get_room(async_session, rooms[0].id)
    assert float(room.rate) == 3300000
    assert room.notes == "new AC"


@pytest.mark.asyncio
async def test_vacant_and_maintenance_are_interchangeable(async_session, rooms):
    to_maintenance = await update_room(async_session, rooms[0].id, status=RoomStatus.maintenance)
    back = await update_room(async_session, rooms[0].id, status="vacant")

    assert to_maintenance.ok and back.ok
    assert back.value.status == RoomStatus.vacant.value


@pytest.mark.asyncio
async def test_room_cannot_be_marked_occupied_by_hand(async_session, rooms):
    result = await update_room(async_session, rooms[0].id, status=RoomStatus.occupied)

    assert result.error.code == ROOM_STATUS_LOCKED
    assert (await get_room(async_session, rooms[0].id)).status == RoomStatus.vacant.value


@pytest.mark.asyncio
async def test_occupied_room_status_is_locked(async_session, rooms, tenants):
    await move_in(async_session, rooms[0].id, tenants[0].id, 3000000)

    result = await update_room(async_session, rooms[0].id, rate=1, status=RoomStatus.vacant)

    assert result.error.code == ROOM_STATUS_LOCKED
    assert result.error.params == {"room": 101, "status": RoomStatus.occupied.value}
    # Nothing applied
    assert float((await get_room(async_session, rooms[0].id)).rate) == 3000000


@pytest.mark.asyncio
async def test_occupied_room_keeps_editable_rate(async_session, rooms, tenants):
    await move_in(async_session, rooms[0].id, tenants[0].id, 3000000)

    result = await update_room(async_session, rooms[0].id, rate=3100000, status=RoomStatus.occupied)

    assert result.ok
    assert float(result.value.rate) == 3100000


@pytest.mark.asyncio
async def test_get_room_loads_contracts(async_session, rooms, tenants):
    await move_in(async_session, rooms[0].id, tenants[0].id, 3000000)
    async_session.expunge_all()

    room = await get_room(async_session, rooms[0].id)

    assert room.contracts[0].tenant.full_name == "Nguyen An"
    assert room.contracts[0].occupants == []
