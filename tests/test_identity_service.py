import pytest

from motelbot.database.models import Tenant
from motelbot.schemas.validation import OccupantInput
from motelbot.services.contract_service import move_in
from motelbot.services.identity_service import find_duplicate_identity


@pytest.mark.asyncio
async def test_blank_id_never_conflicts(async_session, tenants):
    # "Le Chi" is stored with an empty id number
    assert await find_duplicate_identity(async_session, "") is None
    assert await find_duplicate_identity(async_session, None) is None
    assert await find_duplicate_identity(async_session, "   ") is None


@pytest.mark.asyncio
async def test_finds_tenant_holder(async_session, tenants):
    assert await find_duplicate_identity(async_session, " ID-A ") == "Nguyen An (tenant)"
    assert await find_duplicate_identity(async_session, "ID-Z") is None


@pytest.mark.asyncio
async def test_excluding_the_tenant_itself(async_session, tenants):
    assert await find_duplicate_identity(async_session, "ID-A", exclude_tenant_id=tenants[0].id) is None
    assert await find_duplicate_identity(async_session, "ID-B", exclude_tenant_id=tenants[0].id) == "Tran Binh (tenant)"


@pytest.mark.asyncio
async def test_finds_occupant_holder(async_session, rooms, tenants):
    contract = (await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, occupants=[
        OccupantInput(first_name="Pham", last_name="Dung", id_number="OCC-1")
    ])).value
    occupant_id = contract.occupants[0].id

    assert await find_duplicate_identity(async_session, "OCC-1") == "Pham Dung (occupant)"
    assert await find_duplicate_identity(async_session, "OCC-1", exclude_occupant_ids=[occupant_id]) is None


@pytest.mark.asyncio
async def test_tenants_are_checked_before_occupants(async_session, rooms, tenants):
    await move_in(async_session, rooms[0].id, tenants[0].id, 3000000, occupants=[
        OccupantInput(first_name="Pham", last_name="Dung", id_number="SHARED")
    ])
    # Inserted directly, bypassing the service checks
    async_session.add(Tenant(first_name="Vo", last_name="Em", id_number="SHARED"))
    await async_session.commit()

    assert await find_duplicate_identity(async_session, "SHARED") == "Vo Em (tenant)"
