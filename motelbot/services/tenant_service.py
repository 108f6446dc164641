import logging
from typing import Optional, List
from sqlalchemy import select, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, with_loader_criteria

from motelbot.database.models import Tenant, Contract, Occupant, Payment, ContractStatus
from motelbot.schemas.validation import TenantInput
from motelbot.services.identity_service import find_duplicate_identity
from motelbot.services.results import (
    ServiceResult, success, failure, DUPLICATE_ID, TENANT_HAS_ACTIVE_CONTRACTS
)


async def get_tenant(session: AsyncSession, tenant_id: int) -> Tenant | None:
    stmt = select(Tenant).where(Tenant.id == tenant_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def search_tenants(session: AsyncSession, search: str = "") -> List[Tenant]:
    """
    Tenants matching search in name, phone or id number (newest first).
    Only active contracts (with their room) are loaded on each tenant.
    """
    stmt = select(Tenant).options(
        selectinload(Tenant.contracts).selectinload(Contract.room),
        with_loader_criteria(Contract, Contract.status == ContractStatus.active.value),
    )
    search = (search or "").strip()
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(
            Tenant.first_name.ilike(pattern),
            Tenant.last_name.ilike(pattern),
            Tenant.phone.ilike(pattern),
            Tenant.id_number.ilike(pattern),
        ))
    stmt = stmt.order_by(Tenant.created_at.desc(), Tenant.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_tenant(session: AsyncSession, data: TenantInput) -> ServiceResult:
    if data.id_number:
        holder = await find_duplicate_identity(session, data.id_number)
        if holder:
            return failure(DUPLICATE_ID, id_number=data.id_number, holder=holder)

    tenant = Tenant(**data.model_dump())
    session.add(tenant)
    await session.commit()
    logging.info(f"Tenant {tenant.id} created ({tenant.full_name})")
    return success(tenant)


async def update_tenant(session: AsyncSession, tenant_id: int, data: TenantInput) -> ServiceResult:
    tenant = await get_tenant(session, tenant_id)
    if not tenant:
        raise ValueError(f"Tenant ID {tenant_id} not found")

    if data.id_number:
        holder = await find_duplicate_identity(session, data.id_number, exclude_tenant_id=tenant_id)
        if holder:
            return failure(DUPLICATE_ID, id_number=data.id_number, holder=holder)

    for field, value in data.model_dump().items():
        setattr(tenant, field, value)
    await session.commit()
    return success(tenant)


async def delete_tenant(session: AsyncSession, tenant_id: int) -> ServiceResult:
    """
    Delete a tenant together with its ended contracts, their occupants
    and payments. Refused while the tenant has an active contract.
    """
    count_stmt = select(func.count(Contract.id)).where(
        Contract.tenant_id == tenant_id,
        Contract.status == ContractStatus.active.value
    )
    active_count = (await session.execute(count_stmt)).scalar()
    if active_count:
        return failure(TENANT_HAS_ACTIVE_CONTRACTS, count=active_count)

    tenant = await get_tenant(session, tenant_id)
    if not tenant:
        raise ValueError(f"Tenant ID {tenant_id} not found")

    ids_stmt = select(Contract.id).where(Contract.tenant_id == tenant_id)
    contract_ids = list((await session.execute(ids_stmt)).scalars().all())

    if contract_ids:
        await session.execute(delete(Occupant).where(Occupant.contract_id.in_(contract_ids)))
        await session.execute(delete(Payment).where(Payment.contract_id.in_(contract_ids)))
        await session.execute(delete(Contract).where(Contract.tenant_id == tenant_id))
    await session.execute(delete(Tenant).where(Tenant.id == tenant_id))
    await session.commit()

    logging.info(f"Tenant {tenant_id} deleted with {len(contract_ids)} past contracts")
    return success(tenant_id)
