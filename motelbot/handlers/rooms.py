import logging

from aiogram import Router, F
from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.database.models import RoomStatus
from motelbot.handlers.common import AdminFilter
from motelbot.schemas.validation import MoneyModel
from motelbot.services.room_service import get_room, list_rooms, update_room, seed_rooms
from motelbot.services.settings_service import SettingsProvider
from motelbot.states import EditRoomState
from motelbot.utils.i18n import t, render_error
from motelbot.utils.ui import (
    UIEmojis, UIMessages, UIKeyboards, format_amount, get_status_badge, status_label,
    get_lang, reset_state, is_menu_text
)

router = Router()
router.message.filter(AdminFilter())
router.callback_query.filter(AdminFilter())


async def _rooms_view(session: AsyncSession, lang: str):
    rooms = await list_rooms(session)
    settings = await SettingsProvider.load(session)

    text = UIMessages.header(t("rooms.title", lang), UIEmojis.HOME)
    if not rooms:
        text += UIMessages.info_box(t("rooms.empty", lang))
        return text, None

    kb_rows = []
    for room in rooms:
        contract = room.active_contract
        people = f"{contract.headcount}/{room.max_occupants}" if contract else f"0/{room.max_occupants}"
        line = f"{get_status_badge(room.status)} <b>{room.number}</b> · {format_amount(room.rate, settings.currency)} · {people}"
        if contract:
            line += f" · {contract.tenant.full_name}"
        text += line + "\n"
        kb_rows.append(InlineKeyboardButton(
            text=f"{get_status_badge(room.status)} {room.number}",
            callback_data=f"room_view_{room.id}"
        ))

    # Five room buttons per row
    grid = [kb_rows[i:i + 5] for i in range(0, len(kb_rows), 5)]
    return text, InlineKeyboardMarkup(inline_keyboard=grid)


@router.message(F.text.startswith(UIEmojis.HOME))
@router.message(Command("rooms"))
async def rooms_list(message: Message, state: FSMContext, session: AsyncSession):
    await reset_state(state)
    text, kb = await _rooms_view(session, await get_lang(state))
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data == "rooms_list")
async def rooms_list_callback(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    text, kb = await _rooms_view(session, await get_lang(state))
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer()


async def _room_card(session: AsyncSession, room_id: int, lang: str):
    room = await get_room(session, room_id)
    if not room:
        return None, None
    settings = await SettingsProvider.load(session)

    text = UIMessages.header(f"{room.name or room.number}", UIEmojis.HOME)
    text += UIMessages.field(t("rooms.rate", lang), format_amount(room.rate, settings.currency))
    text += UIMessages.field(t("rooms.status", lang), status_label("room", room.status, lang))
    text += UIMessages.field(t("rooms.floor", lang), str(room.floor))

    contract = room.active_contract
    if contract:
        text += UIMessages.section(t("contracts.title", lang))
        text += UIMessages.field(t("reports.tenants", lang), contract.tenant.full_name, UIEmojis.TENANT)
        text += UIMessages.field(t("rooms.people", lang), f"{contract.headcount}/{room.max_occupants}", UIEmojis.GROUP)
        for occupant in contract.occupants:
            relation = f" ({occupant.relation})" if occupant.relation else ""
            text += f"   • {occupant.full_name}{relation}\n"
    if room.notes:
        text += "\n" + UIMessages.info_box(room.notes)

    kb_rows = [
        [
            InlineKeyboardButton(text=f"{UIEmojis.EDIT} {t('rooms.rate', lang)}", callback_data=f"room_rate_{room.id}"),
            InlineKeyboardButton(text=f"{UIEmojis.EDIT} {t('rooms.notes', lang)}", callback_data=f"room_notes_{room.id}"),
        ]
    ]
    # Only vacant <-> maintenance is offered; occupied is set by move-in
    if room.status == RoomStatus.vacant.value:
        kb_rows.append([InlineKeyboardButton(
            text=status_label("room", RoomStatus.maintenance.value, lang),
            callback_data=f"room_status_{room.id}_{RoomStatus.maintenance.value}"
        )])
    elif room.status == RoomStatus.maintenance.value:
        kb_rows.append([InlineKeyboardButton(
            text=status_label("room", RoomStatus.vacant.value, lang),
            callback_data=f"room_status_{room.id}_{RoomStatus.vacant.value}"
        )])
    kb_rows.append([InlineKeyboardButton(text=t("common.back", lang), callback_data="rooms_list")])

    return text, InlineKeyboardMarkup(inline_keyboard=kb_rows)


@router.callback_query(F.data.startswith("room_view_"))
async def room_view(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    room_id = int(call.data.split("_")[-1])
    text, kb = await _room_card(session, room_id, await get_lang(state))
    if text is None:
        await call.answer("❌", show_alert=True)
        return
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer()


@router.callback_query(F.data.startswith("room_status_"))
async def room_set_status(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    _, _, room_id, status = call.data.split("_", 3)

    result = await update_room(session, int(room_id), status=RoomStatus(status))
    if not result.ok:
        await call.answer(render_error(result.error, lang), show_alert=True)
        return

    logging.info(f"Admin {call.from_user.id} set room {room_id} to {status}")
    text, kb = await _room_card(session, int(room_id), lang)
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer(t("common.saved", lang))


@router.callback_query(F.data.startswith("room_rate_"))
async def room_rate_start(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    room = await get_room(session, int(call.data.split("_")[-1]))
    await state.update_data(room_id=room.id, room_number=room.number)
    await call.message.answer(t("rooms.edit_rate", lang, room=room.number))
    await state.set_state(EditRoomState.waiting_for_rate)
    await call.answer()


@router.message(EditRoomState.waiting_for_rate)
async def room_rate_process(message: Message, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    if is_menu_text(message.text):
        await message.answer(UIMessages.warning(t("common.use_cancel", lang)))
        return

    try:
        rate = MoneyModel(amount=message.text).amount
    except ValidationError:
        await message.answer(UIMessages.error(t("error.invalid", lang, detail=message.text)))
        return

    data = await state.get_data()
    await update_room(session, data["room_id"], rate=rate)
    await reset_state(state)

    text, kb = await _room_card(session, data["room_id"], lang)
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data.startswith("room_notes_"))
async def room_notes_start(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    room = await get_room(session, int(call.data.split("_")[-1]))
    await state.update_data(room_id=room.id)
    await call.message.answer(t("rooms.edit_notes", lang, room=room.number))
    await state.set_state(EditRoomState.waiting_for_notes)
    await call.answer()


@router.message(EditRoomState.waiting_for_notes)
async def room_notes_process(message: Message, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    if not message.text or is_menu_text(message.text):
        await message.answer(UIMessages.warning(t("common.use_cancel", lang)))
        return

    notes = "" if message.text.strip() == "-" else message.text.strip()
    data = await state.get_data()
    await update_room(session, data["room_id"], notes=notes)
    await reset_state(state)

    text, kb = await _room_card(session, data["room_id"], lang)
    await message.answer(text, reply_markup=kb)


@router.message(Command("seed_rooms"))
async def cmd_seed_rooms(message: Message, state: FSMContext, session: AsyncSession):
    """/seed_rooms [count] creates missing rooms 1..count"""
    lang = await get_lang(state)
    parts = (message.text or "").split()
    count = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else 10

    settings = await SettingsProvider.load(session)
    rate = float(settings.get("default_room_rate") or 0)
    created = await seed_rooms(session, count=count, rate=rate)
    logging.info(f"Admin {message.from_user.id} seeded {created} rooms")

    await message.answer(
        UIMessages.success(t("rooms.seeded", lang, count=created)),
        reply_markup=UIKeyboards.back_button("rooms_list", lang)
    )
