import pytest
from datetime import date, timedelta

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from motelbot.database.models import Contract, Occupant, Room, ContractStatus, RoomStatus
from motelbot.schemas.validation import OccupantInput
from motelbot.services.contract_service import (
    move_in, move_out, get_contract, list_contracts, list_active_contracts, get_move_in_candidates
)
from motelbot.services.results import (
    MAX_OCCUPANTS, DUPLICATE_OCCUPANT_IDS, DUPLICATE_ID, ROOM_NOT_VACANT, TENANT_HAS_ACTIVE_CONTRACT
)


def occupants(count, prefix="OCC"):
    return [
        OccupantInput(first_name="Person", last_name=str(i), id_number=f"{prefix}-{i}")
        for i in range(count)
    ]


async def count_rows(session, model):
    return (await session.execute(select(func.count(model.id)))).scalar()


async def room_status(session, room_id):
    return (await session.execute(select(Room.status).where(Room.id == room_id))).scalar_one()


@pytest.mark.asyncio
async def test_move_in_with_four_occupants_fills_room(async_session, rooms, tenants):
    """Tenant + 4 occupants = 5 people in a 5-person room"""
    room, tenant = rooms[0], tenants[0]

    result = await move_in(
        async_session, room.id, tenant.id, monthly_rent=3000000, deposit=1000000,
        start_date=date(2026, 1, 1), occupants=occupants(4)
    )

    assert result.ok
    contract = result.value
    assert contract.status == ContractStatus.active.value
    assert contract.headcount == 5
    assert room.status == RoomStatus.occupied.value
    assert await count_rows(async_session, Occupant) == 4


@pytest.mark.asyncio
async def test_move_in_over_capacity_is_rejected_without_writes(async_session, rooms, tenants):
    room_id, tenant_id = rooms[0].id, tenants[0].id

    result = await move_in(async_session, room_id, tenant_id, 3000000, occupants=occupants(5))

    assert not result.ok
    assert result.error.code == MAX_OCCUPANTS
    assert result.error.params == {"max": 5, "rest": 4}
    assert await count_rows(async_session, Contract) == 0
    assert await count_rows(async_session, Occupant) == 0
    assert await room_status(async_session, room_id) == RoomStatus.vacant.value


@pytest.mark.asyncio
async def test_blank_occupant_rows_are_ignored(async_session, rooms, tenants):
    rows = occupants(4) + [OccupantInput(first_name="", last_name=""), OccupantInput(first_name="Only")]

    result = await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, occupants=rows)

    assert result.ok
    assert result.value.headcount == 5


@pytest.mark.asyncio
async def test_duplicate_ids_inside_submission(async_session, rooms, tenants):
    rows = [
        OccupantInput(first_name="A", last_name="One", id_number="X1"),
        OccupantInput(first_name="B", last_name="Two", id_number="X1"),
    ]

    result = await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, occupants=rows)

    assert result.error.code == DUPLICATE_OCCUPANT_IDS
    assert result.error.params == {"id_number": "X1"}
    assert await count_rows(async_session, Contract) == 0


@pytest.mark.asyncio
async def test_occupant_id_already_held_by_tenant(async_session, rooms, tenants):
    rows = [OccupantInput(first_name="A", last_name="One", id_number="ID-B")]

    result = await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, occupants=rows)

    assert result.error.code == DUPLICATE_ID
    assert result.error.params == {"id_number": "ID-B", "holder": "Tran Binh (tenant)"}


@pytest.mark.asyncio
async def test_occupant_id_already_held_by_occupant(async_session, rooms, tenants):
    first = await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, occupants=[
        OccupantInput(first_name="Pham", last_name="Dung", id_number="OCC-9")
    ])
    assert first.ok

    second = await move_in(async_session, rooms[1].id, tenants[1].id, 3000000, occupants=[
        OccupantInput(first_name="Vo", last_name="Em", id_number="OCC-9")
    ])

    assert second.error.code == DUPLICATE_ID
    assert second.error.params["holder"] == "Pham Dung (occupant)"


@pytest.mark.asyncio
async def test_validation_order_capacity_first(async_session, rooms, tenants):
    """Over capacity AND duplicated ids: capacity is reported"""
    rows = [OccupantInput(first_name="Same", last_name=str(i), id_number="ID-A") for i in range(5)]

    result = await move_in(async_session, rooms[0].id, tenants[1].id, 3000000, occupants=rows)

    assert result.error.code == MAX_OCCUPANTS


@pytest.mark.asyncio
async def test_validation_order_submission_duplicates_before_global(async_session, rooms, tenants):
    rows = [
        OccupantInput(first_name="A", last_name="One", id_number="ID-A"),
        OccupantInput(first_name="B", last_name="Two", id_number="ID-A"),
    ]

    result = await move_in(async_session, rooms[0].id, tenants[1].id, 3000000, occupants=rows)

    assert result.error.code == DUPLICATE_OCCUPANT_IDS


@pytest.mark.asyncio
async def test_one_active_contract_per_room(async_session, rooms, tenants):
    room_id, number = rooms[0].id, rooms[0].number
    assert (await move_in(async_session, room_id, tenants[0].id, 3000000)).ok

    result = await move_in(async_session, room_id, tenants[1].id, 3000000)

    assert result.error.code == ROOM_NOT_VACANT
    assert result.error.params["room"] == number
    active = await async_session.execute(
        select(func.count(Contract.id)).where(
            Contract.room_id == room_id, Contract.status == ContractStatus.active.value
        )
    )
    assert active.scalar() == 1


@pytest.mark.asyncio
async def test_one_active_contract_per_tenant(async_session, rooms, tenants):
    tenant_id, free_room_id = tenants[0].id, rooms[1].id
    assert (await move_in(async_session, rooms[0].id, tenant_id, 3000000)).ok

    result = await move_in(async_session, free_room_id, tenant_id, 3000000)

    assert result.error.code == TENANT_HAS_ACTIVE_CONTRACT
    assert result.error.params == {"tenant": "Nguyen An"}
    assert await room_status(async_session, free_room_id) == RoomStatus.vacant.value


@pytest.mark.asyncio
async def test_room_under_maintenance_is_not_vacant(async_session, rooms, tenants):
    rooms[0].status = RoomStatus.maintenance.value
    await async_session.commit()

    result = await move_in(async_session, rooms[0].id, tenants[0].id, 3000000)

    assert result.error.code == ROOM_NOT_VACANT


@pytest.mark.asyncio
async def test_missing_room_raises(async_session, tenants):
    with pytest.raises(ValueError):
        await move_in(async_session, 999, tenants[0].id, 3000000)


@pytest.mark.asyncio
async def test_move_in_move_out_round_trip(async_session, rooms, tenants):
    room = rooms[0]
    moved_in = await move_in(
        async_session, room.id, tenants[0].id, 3000000,
        start_date=date(2026, 1, 1), occupants=occupants(2)
    )

    moved_out = await move_out(async_session, moved_in.value.id)

    assert moved_out.ok
    contract = await get_contract(async_session, moved_in.value.id)
    assert contract.status == ContractStatus.ended.value
    assert contract.end_date >= contract.start_date
    assert (await async_session.get(Room, room.id)).status == RoomStatus.vacant.value
    # Occupants stay as history
    assert len(contract.occupants) == 2
    assert await count_rows(async_session, Contract) == 1


@pytest.mark.asyncio
async def test_move_out_is_idempotent(async_session, rooms, tenants):
    moved_in = await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, start_date=date(2026, 1, 1))
    first = await move_out(async_session, moved_in.value.id)
    end_date = first.value.end_date

    again = await move_out(async_session, moved_in.value.id)
    missing = await move_out(async_session, 999)

    assert again.ok and again.value.end_date == end_date
    assert missing.ok and missing.value is None


@pytest.mark.asyncio
async def test_room_can_be_rented_again_after_move_out(async_session, rooms, tenants):
    room = rooms[0]
    first = await move_in(async_session, room.id, tenants[0].id, 3000000, start_date=date(2026, 1, 1))
    await move_out(async_session, first.value.id)

    second = await move_in(async_session, room.id, tenants[1].id, 3200000)

    assert second.ok
    assert len(await list_contracts(async_session)) == 2
    assert len(await list_contracts(async_session, ContractStatus.ended)) == 1


@pytest.mark.asyncio
async def test_move_in_candidates(async_session, rooms, tenants):
    await move_in(async_session, rooms[1].id, tenants[0].id, 3000000)

    candidates = await get_move_in_candidates(async_session)

    assert [r.number for r in candidates.vacant_rooms] == [101, 103]
    assert {t.id for t in candidates.tenants} == {tenants[1].id, tenants[2].id}


@pytest.mark.asyncio
async def test_active_contracts_ordered_by_room(async_session, rooms, tenants):
    await move_in(async_session, rooms[2].id, tenants[0].id, 3000000)
    await move_in(async_session, rooms[0].id, tenants[1].id, 3000000)

    active = await list_active_contracts(async_session)

    assert [c.room.number for c in active] == [101, 103]


@pytest.mark.asyncio
async def test_move_out_before_future_start_ends_on_start_date(async_session, rooms, tenants):
    start = date.today() + timedelta(days=10)
    moved_in = await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, start_date=start)

    moved_out = await move_out(async_session, moved_in.value.id)

    assert moved_out.value.end_date == start
    assert moved_out.value.end_date >= moved_out.value.start_date


@pytest.mark.asyncio
@pytest.mark.parametrize("shared", ["room", "tenant"])
async def test_database_allows_one_active_contract(async_session, rooms, tenants, shared):
    """Inserted directly, bypassing the service checks"""
    room_ids = [rooms[0].id, rooms[0].id if shared == "room" else rooms[1].id]
    tenant_ids = [tenants[0].id, tenants[0].id if shared == "tenant" else tenants[1].id]

    # An ended contract next to an active one is history, not a conflict
    async_session.add_all([
        Contract(
            room_id=room_ids[0], tenant_id=tenant_ids[0], monthly_rent=3000000,
            start_date=date(2025, 1, 1), end_date=date(2025, 6, 30), status=ContractStatus.ended.value
        ),
        Contract(
            room_id=room_ids[0], tenant_id=tenant_ids[0], monthly_rent=3000000,
            start_date=date(2026, 1, 1), status=ContractStatus.active.value
        ),
    ])
    await async_session.commit()

    async_session.add(Contract(
        room_id=room_ids[1], tenant_id=tenant_ids[1], monthly_rent=3000000,
        start_date=date(2026, 2, 1), status=ContractStatus.active.value
    ))
    with pytest.raises(IntegrityError):
        await async_session.commit()
    await async_session.rollback()

    assert await count_rows(async_session, Contract) == 2


@pytest.mark.asyncio
async def test_move_in_losing_race_rolls_back(async_session, rooms, tenants):
    room_id, tenant_id = rooms[0].id, tenants[0].id
    # Another admin's contract landed after the room was read as vacant
    async_session.add(Contract(
        room_id=room_id, tenant_id=tenants[1].id, monthly_rent=3000000,
        start_date=date(2026, 1, 1), status=ContractStatus.active.value
    ))
    await async_session.commit()

    with pytest.raises(IntegrityError):
        await move_in(async_session, room_id, tenant_id, 3000000, occupants=occupants(1))

    assert await room_status(async_session, room_id) == RoomStatus.vacant.value
    assert await count_rows(async_session, Contract) == 1
    assert await count_rows(async_session, Occupant) == 0
