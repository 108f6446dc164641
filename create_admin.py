"""
Bootstrap the first bot owner (or add another admin) and seed the motel:
default settings plus any of rooms 1..10 that do not exist yet.
"""
import asyncio
import sys

from motelbot.database.core import AsyncSessionLocal
from motelbot.database.models import UserRole
from motelbot.services.room_service import seed_rooms
from motelbot.services.settings_service import ensure_default_settings, SettingsProvider
from motelbot.services.user_service import create_admin, get_all_admins, get_user_by_tg_id


async def bootstrap():
    print("Enter the Telegram ID (ask @userinfobot):")
    raw = input().strip()
    if not raw.isdigit():
        print("❌ Telegram ID must be a number")
        return 1
    tg_id = int(raw)

    print("Enter the full name:")
    full_name = input().strip()

    print("Role [owner/admin] (default owner):")
    role = UserRole(input().strip().lower() or UserRole.owner.value)

    async with AsyncSessionLocal() as session:
        existing = await get_user_by_tg_id(session, tg_id)
        if existing:
            print(f"ℹ️ {existing.full_name} is already an active {existing.role}, updating")

        user = await create_admin(session, tg_id, full_name, role=role)
        print(f"✅ {user.role}: {user.full_name} ({user.tg_id})")

        created = await ensure_default_settings(session)
        if created:
            print(f"✅ {created} default settings created")

        settings = await SettingsProvider.load(session)
        rooms = await seed_rooms(session, rate=float(settings.get("default_room_rate")))
        if rooms:
            print(f"✅ {rooms} rooms created")

        print("\n📋 Admins in database:")
        for u in await get_all_admins(session):
            print(f"  - {u.full_name} (ID: {u.tg_id}, Role: {u.role})")
    return 0


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    sys.exit(asyncio.run(bootstrap()))
