import logging
from datetime import date

from aiogram import Router, F
from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.database.models import ContractStatus
from motelbot.handlers.common import AdminFilter
from motelbot.schemas.validation import (
    AmountModel, MoneyModel, DateModel, MoveInInput, parse_occupant_line, first_error
)
from motelbot.services.contract_service import (
    move_in, move_out, get_contract, list_contracts, list_active_contracts, get_move_in_candidates
)
from motelbot.services.results import MAX_OCCUPANTS, DUPLICATE_OCCUPANT_IDS, DUPLICATE_ID
from motelbot.services.settings_service import SettingsProvider
from motelbot.states import MoveInState
from motelbot.utils.i18n import t, render_error
from motelbot.utils.ui import (
    UIEmojis, UIMessages, UIKeyboards, format_amount, format_date, status_label,
    get_lang, reset_state, is_menu_text
)

router = Router()
router.message.filter(AdminFilter())
router.callback_query.filter(AdminFilter())

# Errors fixed by re-entering the occupant list
OCCUPANT_ERRORS = (MAX_OCCUPANTS, DUPLICATE_OCCUPANT_IDS, DUPLICATE_ID)

PAST_LISTED = 20


# --- Lists ---

async def _contracts_view(session: AsyncSession, lang: str):
    contracts = await list_active_contracts(session)
    currency = (await SettingsProvider.load(session)).currency

    text = UIMessages.header(t("contracts.title", lang), UIEmojis.CONTRACT)
    text += UIMessages.section(t("contracts.active", lang, count=len(contracts)))
    if not contracts:
        text += UIMessages.info_box(t("contracts.none_active", lang)) + "\n"

    kb_rows = []
    for contract in contracts:
        text += (
            f"{UIEmojis.HOME} <b>{contract.room.number}</b> · {contract.tenant.full_name} · "
            f"{UIEmojis.GROUP} {contract.headcount} · {format_amount(contract.monthly_rent, currency)} · "
            f"{format_date(contract.start_date)}\n"
        )
        kb_rows.append([InlineKeyboardButton(
            text=f"{contract.room.number} · {contract.tenant.full_name}",
            callback_data=f"contract_view_{contract.id}"
        )])

    kb_rows.append([
        InlineKeyboardButton(text=t("contracts.move_in", lang), callback_data="movein_start"),
        InlineKeyboardButton(text=f"{UIEmojis.HISTORY}", callback_data="contracts_past"),
    ])
    return text, InlineKeyboardMarkup(inline_keyboard=kb_rows)


@router.message(F.text.startswith(UIEmojis.CONTRACT))
@router.message(Command("contracts"))
async def contracts_list(message: Message, state: FSMContext, session: AsyncSession):
    await reset_state(state)
    text, kb = await _contracts_view(session, await get_lang(state))
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data == "contracts_list")
async def contracts_list_callback(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    text, kb = await _contracts_view(session, await get_lang(state))
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer()


@router.callback_query(F.data == "contracts_past")
async def contracts_past(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    contracts = await list_contracts(session, ContractStatus.ended)

    text = UIMessages.header(t("contracts.past", lang, count=len(contracts)), UIEmojis.HISTORY)
    for contract in contracts[:PAST_LISTED]:
        text += (
            f"• <b>{contract.room.number}</b> · {contract.tenant.full_name} · "
            f"{format_date(contract.start_date)} – {format_date(contract.end_date)}\n"
        )
    await call.message.edit_text(text, reply_markup=UIKeyboards.back_button("contracts_list", lang))
    await call.answer()


@router.callback_query(F.data.startswith("contract_view_"))
async def contract_view(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    contract = await get_contract(session, int(call.data.split("_")[-1]))
    if not contract:
        await call.answer("❌", show_alert=True)
        return
    currency = (await SettingsProvider.load(session)).currency

    text = UIMessages.header(
        t("contracts.summary", lang, room=contract.room.number, tenant=contract.tenant.full_name, people=contract.headcount),
        UIEmojis.CONTRACT
    )
    text += UIMessages.field(t("rooms.status", lang), status_label("contract", contract.status, lang))
    text += UIMessages.field(t("rooms.rate", lang), format_amount(contract.monthly_rent, currency), UIEmojis.MONEY)
    text += UIMessages.field(t("type.deposit", lang), format_amount(contract.deposit, currency))
    text += UIMessages.field(UIEmojis.CALENDAR, f"{format_date(contract.start_date)} – {format_date(contract.end_date)}")
    for occupant in contract.occupants:
        extra = ", ".join(x for x in (occupant.relation, occupant.id_number, occupant.phone) if x)
        text += f"   • {occupant.full_name}" + (f" ({extra})" if extra else "") + "\n"

    kb_rows = []
    if contract.status == ContractStatus.active.value:
        kb_rows.append([InlineKeyboardButton(text=t("contracts.move_out", lang), callback_data=f"moveout_ask_{contract.id}")])
    kb_rows.append([InlineKeyboardButton(text=t("common.back", lang), callback_data="contracts_list")])

    await call.message.edit_text(text, reply_markup=InlineKeyboardMarkup(inline_keyboard=kb_rows))
    await call.answer()


# --- Move-in Wizard ---
# room -> tenant -> rent -> deposit -> start date -> occupants -> confirm

@router.callback_query(F.data == "movein_start")
async def movein_start(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    candidates = await get_move_in_candidates(session)

    if not candidates.vacant_rooms:
        await call.answer(t("contracts.no_vacant", lang), show_alert=True)
        return
    if not candidates.tenants:
        kb = InlineKeyboardMarkup(inline_keyboard=[
            [InlineKeyboardButton(text=t("tenants.add", lang), callback_data="tenant_add")]
        ])
        await call.message.answer(UIMessages.warning(t("contracts.no_tenants", lang)), reply_markup=kb)
        await call.answer()
        return

    items = [(f"{UIEmojis.HOME} {room.number}", f"movein_room_{room.id}") for room in candidates.vacant_rooms]
    kb = UIKeyboards.menu_grid(items, columns=4)
    kb.inline_keyboard.append([InlineKeyboardButton(text=t("common.cancel", lang), callback_data="cancel")])

    await call.message.answer(
        UIMessages.header(t("contracts.move_in", lang)) + t("contracts.pick_room", lang),
        reply_markup=kb
    )
    await state.set_state(MoveInState.waiting_for_room)
    await call.answer()


@router.callback_query(MoveInState.waiting_for_room, F.data.startswith("movein_room_"))
async def movein_room(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    candidates = await get_move_in_candidates(session)
    room_id = int(call.data.split("_")[-1])
    room = next((r for r in candidates.vacant_rooms if r.id == room_id), None)
    if room is None:
        await call.answer(t("contracts.no_vacant", lang), show_alert=True)
        return

    await state.update_data(
        room_id=room.id,
        room_number=room.number,
        room_rate=float(room.rate),
        max_occupants=room.max_occupants,
    )

    kb_rows = [
        [InlineKeyboardButton(text=tenant.full_name, callback_data=f"movein_tenant_{tenant.id}")]
        for tenant in candidates.tenants
    ]
    kb_rows.append([InlineKeyboardButton(text=t("common.cancel", lang), callback_data="cancel")])

    await call.message.edit_text(
        f"{UIEmojis.HOME} <b>{room.number}</b>\n\n{t('contracts.pick_tenant', lang)}",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=kb_rows)
    )
    await state.set_state(MoveInState.waiting_for_tenant)
    await call.answer()


@router.callback_query(MoveInState.waiting_for_tenant, F.data.startswith("movein_tenant_"))
async def movein_tenant(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    tenant_id = int(call.data.split("_")[-1])
    candidates = await get_move_in_candidates(session)
    tenant = next((x for x in candidates.tenants if x.id == tenant_id), None)
    if tenant is None:
        await call.answer("❌", show_alert=True)
        return

    data = await state.get_data()
    currency = (await SettingsProvider.load(session)).currency
    await state.update_data(tenant_id=tenant.id, tenant_name=tenant.full_name, currency=currency)

    await call.message.edit_text(
        f"{UIEmojis.TENANT} <b>{tenant.full_name}</b>\n\n"
        f"{t('contracts.ask_rent', lang, rate=format_amount(data['room_rate'], currency))}\n"
        f"<i>- = {format_amount(data['room_rate'], currency)}</i>"
    )
    await state.set_state(MoveInState.waiting_for_rent)
    await call.answer()


async def _guard(message: Message, lang: str) -> bool:
    if not message.text or is_menu_text(message.text) or message.text.startswith("/"):
        await message.answer(UIMessages.warning(t("common.use_cancel", lang)))
        return False
    return True


@router.message(MoveInState.waiting_for_rent)
async def movein_rent(message: Message, state: FSMContext):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return

    data = await state.get_data()
    raw = message.text.strip()
    try:
        rent = data["room_rate"] if raw == "-" else AmountModel(amount=raw).amount
    except ValidationError:
        await message.answer(UIMessages.error(t("error.invalid", lang, detail=raw)))
        return

    await state.update_data(monthly_rent=rent)
    await message.answer(f"{t('contracts.ask_deposit', lang)}\n<i>- = 0</i>")
    await state.set_state(MoveInState.waiting_for_deposit)


@router.message(MoveInState.waiting_for_deposit)
async def movein_deposit(message: Message, state: FSMContext):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return

    raw = message.text.strip()
    try:
        deposit = 0.0 if raw == "-" else MoneyModel(amount=raw).amount
    except ValidationError:
        await message.answer(UIMessages.error(t("error.invalid", lang, detail=raw)))
        return

    await state.update_data(deposit=deposit)
    await message.answer(t("contracts.ask_start", lang))
    await state.set_state(MoveInState.waiting_for_start_date)


@router.message(MoveInState.waiting_for_start_date)
async def movein_start_date(message: Message, state: FSMContext):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return

    raw = message.text.strip()
    try:
        start = date.today() if raw == "-" else DateModel(value=raw).value
    except ValidationError as e:
        await message.answer(UIMessages.error(t("error.invalid", lang, detail=first_error(e))))
        return

    data = await state.get_data()
    await state.update_data(start_date=start.isoformat())
    await message.answer(t("contracts.ask_occupants", lang, rest=data["max_occupants"] - 1))
    await state.set_state(MoveInState.waiting_for_occupants)


@router.message(MoveInState.waiting_for_occupants)
async def movein_occupants(message: Message, state: FSMContext):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return

    raw = message.text.strip()
    rows = []
    if raw != "-":
        for line in raw.splitlines():
            if not line.strip():
                continue
            try:
                occupant = parse_occupant_line(line)
            except ValidationError as e:
                await message.answer(UIMessages.error(t("error.invalid", lang, detail=first_error(e))))
                return
            if not occupant.is_blank:
                rows.append(occupant.model_dump())

    await state.update_data(occupants=rows)
    data = await state.get_data()
    currency = data.get("currency", "VND")

    text = UIMessages.header(t("contracts.move_in", lang))
    text += t("contracts.summary", lang, room=data["room_number"], tenant=data["tenant_name"], people=1 + len(rows)) + "\n\n"
    text += UIMessages.field(t("rooms.rate", lang), format_amount(data["monthly_rent"], currency), UIEmojis.MONEY)
    text += UIMessages.field(t("type.deposit", lang), format_amount(data["deposit"], currency))
    text += UIMessages.field(UIEmojis.CALENDAR, format_date(date.fromisoformat(data["start_date"])))
    for row in rows:
        text += f"   • {row['first_name']} {row['last_name']}\n"

    await message.answer(text, reply_markup=UIKeyboards.confirm_cancel("movein_confirm", "cancel", lang))
    await state.set_state(MoveInState.confirm)


@router.callback_query(MoveInState.confirm, F.data == "movein_confirm")
async def movein_confirm(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    data = await state.get_data()
    payload = MoveInInput.model_validate(data)

    result = await move_in(
        session,
        room_id=payload.room_id,
        tenant_id=payload.tenant_id,
        monthly_rent=payload.monthly_rent,
        deposit=payload.deposit,
        start_date=payload.start_date,
        occupants=payload.occupants,
    )

    if not result.ok:
        text = UIMessages.error(render_error(result.error, lang))
        if result.error.code in OCCUPANT_ERRORS:
            # Back to the occupant step with everything else kept
            text += "\n\n" + t("contracts.ask_occupants", lang, rest=data["max_occupants"] - 1)
            await state.set_state(MoveInState.waiting_for_occupants)
        else:
            await reset_state(state)
        await call.message.edit_text(text)
        await call.answer()
        return

    contract = result.value
    logging.info(f"Admin {call.from_user.id} moved tenant {data['tenant_id']} into room {data['room_number']}")
    await reset_state(state)

    await call.message.edit_text(
        UIMessages.success(t("contracts.created", lang, id=contract.id, room=data["room_number"])),
        reply_markup=UIKeyboards.back_button("contracts_list", lang)
    )
    await call.answer()


# --- Move-out ---

@router.callback_query(F.data.startswith("moveout_ask_"))
async def moveout_ask(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    contract = await get_contract(session, int(call.data.split("_")[-1]))
    if not contract:
        await call.answer("❌", show_alert=True)
        return

    kb = InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text=t("contracts.move_out", lang), callback_data=f"moveout_yes_{contract.id}"),
            InlineKeyboardButton(text=t("common.cancel", lang), callback_data=f"contract_view_{contract.id}")
        ]
    ])
    await call.message.edit_text(
        UIMessages.warning(f"<b>{t('contracts.move_out_confirm', lang, tenant=contract.tenant.full_name, room=contract.room.number)}</b>"),
        reply_markup=kb
    )
    await call.answer()


@router.callback_query(F.data.startswith("moveout_yes_"))
async def moveout_confirm(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    contract_id = int(call.data.split("_")[-1])
    contract = await get_contract(session, contract_id)
    room_number = contract.room.number if contract else "?"

    await move_out(session, contract_id)
    logging.info(f"Admin {call.from_user.id} ended contract {contract_id}")

    await call.message.edit_text(
        UIMessages.success(t("contracts.moved_out", lang, room=room_number)),
        reply_markup=UIKeyboards.back_button("contracts_list", lang)
    )
    await call.answer()
