"""
Settings Service - motel-wide key/value settings
"""
from typing import Optional, Dict, NamedTuple
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from motelbot.database.models import Setting, Room


DEFAULT_SETTINGS: Dict[str, str] = {
    "motel_name": "My Motel",
    "motel_address": "",
    "motel_phone": "",
    "default_room_rate": "3000000",
    "electric_rate": "3500",
    "water_rate": "20000",
    "currency": "VND",
}


class UtilityRates(NamedTuple):
    electric_rate: float
    water_rate: float


def _to_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except ValueError:
        return default


class SettingsProvider:
    """
    Read-only view over the settings table handed to the helpers that
    need rates, so they never query the store themselves.
    """

    def __init__(self, values: Dict[str, str]):
        self.values = values

    @classmethod
    async def load(cls, session: AsyncSession) -> "SettingsProvider":
        return cls(await get_settings(session))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(key, DEFAULT_SETTINGS.get(key, default))

    @property
    def utility_rates(self) -> UtilityRates:
        return UtilityRates(
            electric_rate=_to_float(self.values.get("electric_rate"), float(DEFAULT_SETTINGS["electric_rate"])),
            water_rate=_to_float(self.values.get("water_rate"), float(DEFAULT_SETTINGS["water_rate"])),
        )

    @property
    def currency(self) -> str:
        return self.values.get("currency") or DEFAULT_SETTINGS["currency"]


async def get_settings(session: AsyncSession) -> Dict[str, str]:
    """All stored settings as a dict"""
    result = await session.execute(select(Setting))
    return {s.key: s.value for s in result.scalars().all()}


async def get_setting(session: AsyncSession, key: str, default: Optional[str] = None) -> Optional[str]:
    setting = await session.get(Setting, key)
    if setting is None:
        return default
    return setting.value


async def _upsert(session: AsyncSession, key: str, value: Optional[str]) -> None:
    setting = await session.get(Setting, key)
    if setting is None:
        session.add(Setting(key=key, value=value or ""))
    else:
        setting.value = value or ""


async def save_settings(session: AsyncSession, values: Dict[str, Optional[str]]) -> Dict[str, str]:
    """Upsert each key; None is stored as an empty string"""
    for key, value in values.items():
        await _upsert(session, key, value)
    await session.commit()
    return await get_settings(session)


async def save_motel_info(session: AsyncSession, name: str, address: str, phone: str) -> Dict[str, str]:
    return await save_settings(session, {
        "motel_name": name,
        "motel_address": address,
        "motel_phone": phone,
    })


async def save_rates(
    session: AsyncSession,
    default_room_rate: Optional[str] = None,
    electric_rate: Optional[str] = None,
    water_rate: Optional[str] = None,
    currency: Optional[str] = None
) -> Dict[str, str]:
    """
    Store rate settings; keys passed as None are left unchanged.
    A non-empty default room rate is also applied to every room.
    """
    for key, value in (
        ("default_room_rate", default_room_rate),
        ("electric_rate", electric_rate),
        ("water_rate", water_rate),
        ("currency", currency),
    ):
        if value is None:
            continue
        await _upsert(session, key, value)

    if default_room_rate:
        await session.execute(update(Room).values(rate=float(default_room_rate)))

    await session.commit()
    return await get_settings(session)


async def ensure_default_settings(session: AsyncSession) -> int:
    """Create missing default settings, never overwriting. Returns count created."""
    existing = await get_settings(session)
    created = 0
    for key, value in DEFAULT_SETTINGS.items():
        if key not in existing:
            session.add(Setting(key=key, value=value))
            created += 1
    await session.commit()
    return created
