import logging

from aiogram import Router, F
from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.handlers.common import AdminFilter
from motelbot.schemas.validation import MonthModel, UtilityReadingInput, first_error
from motelbot.services.settings_service import SettingsProvider
from motelbot.services.utility_service import generate_all_for_month, get_month_utilities, save_reading
from motelbot.states import UtilityReadingState
from motelbot.utils.i18n import t
from motelbot.utils.months import current_month, format_month
from motelbot.utils.ui import (
    UIEmojis, UIMessages, UIKeyboards, format_amount, format_number,
    get_lang, reset_state, is_menu_text
)

router = Router()
router.message.filter(AdminFilter())
router.callback_query.filter(AdminFilter())


async def _utilities_view(session: AsyncSession, month: str, lang: str):
    settings = await SettingsProvider.load(session)
    overview = await get_month_utilities(session, month, settings.utility_rates)
    currency = settings.currency

    text = UIMessages.header(t("utilities.title", lang, month=format_month(month)), UIEmojis.ELECTRIC)
    items = []
    for row in overview.rows:
        text += (
            f"{UIEmojis.HOME} <b>{row.room_number}</b> · "
            f"{UIEmojis.ELECTRIC} {format_number(row.electric_start)}→{format_number(row.electric_end)} · "
            f"{UIEmojis.WATER} {format_number(row.water_start)}→{format_number(row.water_end)} · "
            f"{format_amount(row.total_amount, currency)}\n"
        )
        items.append((f"{UIEmojis.EDIT} {row.room_number}", f"util_edit_{row.room_id}_{month}"))

    text += "\n"
    text += UIMessages.field(t("utilities.electric", lang), format_amount(overview.total_electric, currency), UIEmojis.ELECTRIC)
    text += UIMessages.field(t("utilities.water", lang), format_amount(overview.total_water, currency), UIEmojis.WATER)
    text += UIMessages.field(t("utilities.total", lang), format_amount(overview.total_all, currency), UIEmojis.MONEY)

    kb = UIKeyboards.menu_grid(items, columns=5)
    kb.inline_keyboard.append([InlineKeyboardButton(text=t("utilities.generate", lang), callback_data=f"util_gen_{month}")])
    kb.inline_keyboard.append(UIKeyboards.month_switcher("util_month_", month))
    return text, kb


@router.message(F.text.startswith(UIEmojis.ELECTRIC))
@router.message(Command("utilities"))
async def utilities_overview(message: Message, state: FSMContext, session: AsyncSession):
    """/utilities [YYYY-MM]"""
    await reset_state(state)
    lang = await get_lang(state)

    month = current_month()
    parts = (message.text or "").split()
    if message.text and message.text.startswith("/") and len(parts) > 1:
        try:
            month = MonthModel(month=parts[1]).month
        except ValidationError:
            await message.answer(UIMessages.error(t("error.invalid", lang, detail=parts[1])))
            return

    text, kb = await _utilities_view(session, month, lang)
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data.startswith("util_month_"))
async def utilities_month(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    text, kb = await _utilities_view(session, call.data.split("_")[-1], await get_lang(state))
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer()


@router.callback_query(F.data.startswith("util_gen_"))
async def utilities_generate(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    month = call.data.split("_")[-1]

    settings = await SettingsProvider.load(session)
    created = await generate_all_for_month(session, month, settings.utility_rates)
    logging.info(f"Admin {call.from_user.id} generated utilities for {month}: {created}")

    text, kb = await _utilities_view(session, month, lang)
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer(t("utilities.generated", lang, count=created, month=format_month(month)), show_alert=True)


@router.callback_query(F.data.startswith("util_edit_"))
async def utilities_edit_start(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    _, _, room_id, month = call.data.split("_")

    settings = await SettingsProvider.load(session)
    overview = await get_month_utilities(session, month, settings.utility_rates)
    row = next((r for r in overview.rows if r.room_id == int(room_id)), None)
    if row is None:
        await call.answer("❌", show_alert=True)
        return

    await state.update_data(utility_row=row._asdict(), month=month)
    await call.message.answer(t(
        "utilities.ask_readings", lang,
        room=row.room_number,
        electric_start=format_number(row.electric_start),
        water_start=format_number(row.water_start),
    ))
    await state.set_state(UtilityReadingState.waiting_for_readings)
    await call.answer()


@router.message(UtilityReadingState.waiting_for_readings)
async def utilities_edit_process(message: Message, state: FSMContext, session: AsyncSession):
    """
    "electric_end water_end", or all four readings as
    "electric_start electric_end water_start water_end".
    """
    lang = await get_lang(state)
    if not message.text or is_menu_text(message.text) or message.text.startswith("/"):
        await message.answer(UIMessages.warning(t("common.use_cancel", lang)))
        return

    data = await state.get_data()
    row = data["utility_row"]
    numbers = message.text.split()

    if len(numbers) == 2:
        values = dict(
            electric_start=row["electric_start"], electric_end=numbers[0],
            water_start=row["water_start"], water_end=numbers[1],
        )
    elif len(numbers) == 4:
        values = dict(
            electric_start=numbers[0], electric_end=numbers[1],
            water_start=numbers[2], water_end=numbers[3],
        )
    else:
        await message.answer(UIMessages.error(t("error.invalid", lang, detail=message.text)))
        return

    try:
        reading = UtilityReadingInput(
            electric_rate=row["electric_rate"],
            water_rate=row["water_rate"],
            **values
        )
    except ValidationError as e:
        await message.answer(UIMessages.error(t("error.invalid", lang, detail=first_error(e))))
        return

    utility = await save_reading(session, row["room_id"], data["month"], **reading.model_dump())
    logging.info(f"Admin {message.from_user.id} saved utility reading for room {row['room_number']} ({data['month']})")
    await reset_state(state)

    currency = (await SettingsProvider.load(session)).currency
    await message.answer(UIMessages.success(t(
        "utilities.saved", lang, room=row["room_number"], total=format_amount(utility.total_amount, currency)
    )))
    text, kb = await _utilities_view(session, data["month"], lang)
    await message.answer(text, reply_markup=kb)
