"""
User Service - Manage bot admins/owners
"""
import logging
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from motelbot.database.models import User, UserRole


async def get_user_by_tg_id(session: AsyncSession, tg_id: int) -> Optional[User]:
    """Get user by Telegram ID"""
    stmt = select(User).where(User.tg_id == tg_id, User.is_active == True)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_all_admins(session: AsyncSession) -> List[User]:
    """Get all active admins"""
    stmt = select(User).where(User.is_active == True).order_by(User.role, User.full_name)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_admin(
    session: AsyncSession,
    tg_id: int,
    full_name: str,
    role: UserRole = UserRole.admin,
    username: str = None
) -> User:
    """Create new admin, or reactivate an existing one"""
    stmt = select(User).where(User.tg_id == tg_id)
    user = (await session.execute(stmt)).scalar_one_or_none()
    if user:
        user.is_active = True
        user.role = role.value
        user.full_name = full_name or user.full_name
    else:
        user = User(
            tg_id=tg_id,
            tg_username=username,
            full_name=full_name,
            role=role.value,
            is_active=True
        )
        session.add(user)
    await session.commit()
    return user


async def reload_admin_cache(session: AsyncSession = None) -> int:
    """
    Rebuild config.ADMIN_IDS / OWNER_IDS from env ids plus active users.
    AdminFilter reads those lists, so call this after any admin change.
    Returns the number of admins found in the database.
    """
    from motelbot.config import config
    from motelbot.database.core import AsyncSessionLocal

    if session is None:
        async with AsyncSessionLocal() as session:
            return await reload_admin_cache(session)

    admins = await get_all_admins(session)
    owners = [u.tg_id for u in admins if u.role == UserRole.owner.value]

    # Owners pass AdminFilter too
    config.ADMIN_IDS = sorted(set(config._env_admin_ids) | {u.tg_id for u in admins})
    config.OWNER_IDS = sorted(set(config._env_owner_ids) | set(owners))

    logging.info(f"Admin cache: {len(config.OWNER_IDS)} owners, {len(config.ADMIN_IDS)} admins")
    return len(admins)
