import logging

from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.handlers.common import AdminFilter
from motelbot.schemas.validation import MoneyModel
from motelbot.services.settings_service import (
    SettingsProvider, save_settings, save_motel_info, save_rates
)
from motelbot.states import EditSettingState
from motelbot.utils.i18n import t
from motelbot.utils.ui import (
    UIEmojis, UIMessages, UIKeyboards, format_amount, format_number,
    get_lang, reset_state, is_menu_text
)

router = Router()
router.message.filter(AdminFilter())
router.callback_query.filter(AdminFilter())

# Callback data carries the index; keys contain underscores
SETTING_KEYS = [
    "motel_name",
    "motel_address",
    "motel_phone",
    "default_room_rate",
    "electric_rate",
    "water_rate",
    "currency",
]
INFO_KEYS = ("motel_name", "motel_address", "motel_phone")
RATE_KEYS = ("default_room_rate", "electric_rate", "water_rate")


async def _settings_view(session: AsyncSession, lang: str):
    settings = await SettingsProvider.load(session)

    text = UIMessages.header(t("settings.title", lang), UIEmojis.SETTINGS)
    for key in SETTING_KEYS:
        value = settings.get(key) or "—"
        if key in RATE_KEYS and settings.get(key):
            value = format_amount(float(settings.get(key)), settings.currency)
        text += UIMessages.field(t(f"settings.{key}", lang), value)

    items = [(f"{UIEmojis.EDIT} {t(f'settings.{key}', lang)}", f"set_edit_{i}") for i, key in enumerate(SETTING_KEYS)]
    return text, UIKeyboards.menu_grid(items)


@router.message(F.text.startswith(UIEmojis.SETTINGS))
@router.message(Command("settings"))
async def settings_show(message: Message, state: FSMContext, session: AsyncSession):
    await reset_state(state)
    text, kb = await _settings_view(session, await get_lang(state))
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data.startswith("set_edit_"))
async def settings_edit_start(call: CallbackQuery, state: FSMContext):
    lang = await get_lang(state)
    key = SETTING_KEYS[int(call.data.split("_")[-1])]
    await state.update_data(setting_key=key)

    prompt = t("settings.ask_value", lang, name=t(f"settings.{key}", lang))
    if key not in RATE_KEYS:
        prompt += f"\n<i>{t('common.skip', lang)}</i>"
    await call.message.answer(prompt)
    await state.set_state(EditSettingState.waiting_for_value)
    await call.answer()


@router.message(EditSettingState.waiting_for_value)
async def settings_edit_process(message: Message, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    if not message.text or is_menu_text(message.text) or message.text.startswith("/"):
        await message.answer(UIMessages.warning(t("common.use_cancel", lang)))
        return

    key = (await state.get_data())["setting_key"]
    raw = message.text.strip()
    settings = await SettingsProvider.load(session)

    if key in RATE_KEYS:
        try:
            value = format_number(MoneyModel(amount=raw).amount)
        except ValidationError:
            await message.answer(UIMessages.error(t("error.invalid", lang, detail=raw)))
            return
        await save_rates(session, **{key: value})
        if key == "default_room_rate":
            await message.answer(UIMessages.info_box(t("settings.rates_applied", lang)))
    elif key in INFO_KEYS:
        info = {k: settings.get(k) for k in INFO_KEYS}
        info[key] = "" if raw == "-" else raw
        await save_motel_info(session, info["motel_name"], info["motel_address"], info["motel_phone"])
    else:
        await save_settings(session, {key: raw.upper()})

    logging.info(f"Admin {message.from_user.id} changed setting {key}")
    await reset_state(state)

    text, kb = await _settings_view(session, lang)
    await message.answer(UIMessages.success(t("common.saved", lang)) + "\n" + text, reply_markup=kb)
