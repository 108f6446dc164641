"""
Identity Registry - global uniqueness of identification numbers.

An id number may be held by at most one record across tenants AND
occupants. This is a point-in-time check (no locking).
"""
from typing import Optional, Iterable
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.database.models import Tenant, Occupant


async def find_duplicate_identity(
    session: AsyncSession,
    id_number: Optional[str],
    exclude_tenant_id: Optional[int] = None,
    exclude_occupant_ids: Optional[Iterable[int]] = None
) -> Optional[str]:
    """
    Return a description of whoever already holds id_number, or None.

    Tenants are searched before occupants; the first match wins.
    A blank id number never conflicts (identification is optional).
    """
    id_number = (id_number or "").strip()
    if not id_number:
        return None

    stmt = select(Tenant).where(Tenant.id_number == id_number)
    if exclude_tenant_id:
        stmt = stmt.where(Tenant.id != exclude_tenant_id)
    result = await session.execute(stmt.order_by(Tenant.id).limit(1))
    tenant = result.scalar_one_or_none()

    if tenant:
        return f"{tenant.full_name} (tenant)"

    excluded = list(exclude_occupant_ids or [])
    stmt = select(Occupant).where(Occupant.id_number == id_number)
    if excluded:
        stmt = stmt.where(Occupant.id.not_in(excluded))
    result = await session.execute(stmt.order_by(Occupant.id).limit(1))
    occupant = result.scalar_one_or_none()

    if occupant:
        return f"{occupant.full_name} (occupant)"

    return None
