import logging

from aiogram import Router, F
from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.handlers.common import AdminFilter
from motelbot.schemas.validation import TenantInput, first_error
from motelbot.services.tenant_service import (
    get_tenant, search_tenants, create_tenant, update_tenant, delete_tenant
)
from motelbot.states import AddTenantState, EditTenantState
from motelbot.utils.i18n import t, render_error
from motelbot.utils.ui import UIEmojis, UIMessages, UIKeyboards, get_lang, reset_state, is_menu_text

router = Router()
router.message.filter(AdminFilter())
router.callback_query.filter(AdminFilter())

# Telegram caps inline keyboards; long lists are narrowed with search
MAX_LISTED = 30

EDITABLE_FIELDS = {
    "phone": "tenants.ask_phone",
    "idn": "tenants.ask_id_number",
}


async def _tenants_view(session: AsyncSession, search: str, lang: str):
    tenants = await search_tenants(session, search)

    title = t("tenants.title", lang) + (f" · {search}" if search else "")
    text = UIMessages.header(title, UIEmojis.GROUP)
    kb_rows = []

    if not tenants:
        text += UIMessages.info_box(t("tenants.empty", lang))
    for tenant in tenants[:MAX_LISTED]:
        # Only active contracts are loaded
        room = tenant.contracts[0].room.number if tenant.contracts else None
        line = f"{UIEmojis.TENANT} <b>{tenant.full_name}</b>"
        if tenant.phone:
            line += f" · {tenant.phone}"
        if room is not None:
            line += f" · {UIEmojis.HOME} {room}"
        text += line + "\n"
        kb_rows.append([InlineKeyboardButton(text=tenant.full_name, callback_data=f"tenant_view_{tenant.id}")])

    if len(tenants) > MAX_LISTED:
        text += f"\n… +{len(tenants) - MAX_LISTED}\n"
    text += "\n" + UIMessages.info_box(t("tenants.search_hint", lang))

    kb_rows.append([InlineKeyboardButton(text=t("tenants.add", lang), callback_data="tenant_add")])
    return text, InlineKeyboardMarkup(inline_keyboard=kb_rows)


@router.message(F.text.startswith(UIEmojis.GROUP))
@router.message(Command("tenants"))
async def tenants_list(message: Message, state: FSMContext, session: AsyncSession):
    await reset_state(state)
    search = ""
    if message.text and message.text.startswith("/"):
        parts = message.text.split(maxsplit=1)
        search = parts[1].strip() if len(parts) > 1 else ""

    text, kb = await _tenants_view(session, search, await get_lang(state))
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data == "tenants_list")
async def tenants_list_callback(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    text, kb = await _tenants_view(session, "", await get_lang(state))
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer()


async def _tenant_card(session: AsyncSession, tenant_id: int, lang: str):
    tenant = await get_tenant(session, tenant_id)
    if not tenant:
        return None, None

    text = UIMessages.header(tenant.full_name, UIEmojis.TENANT)
    text += UIMessages.field(t("tenants.ask_phone", lang).rstrip(":"), tenant.phone or "—")
    text += UIMessages.field(t("tenants.ask_id_number", lang).rstrip(":"), tenant.id_number or "—")
    if tenant.email:
        text += UIMessages.field("Email", tenant.email)
    if tenant.notes:
        text += "\n" + UIMessages.info_box(tenant.notes)

    kb = InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text=f"{UIEmojis.EDIT} 📞", callback_data=f"tenant_phone_{tenant.id}"),
            InlineKeyboardButton(text=f"{UIEmojis.EDIT} 🪪", callback_data=f"tenant_idn_{tenant.id}"),
        ],
        [InlineKeyboardButton(text=f"{UIEmojis.DELETE}", callback_data=f"tenant_del_{tenant.id}")],
        [InlineKeyboardButton(text=t("common.back", lang), callback_data="tenants_list")],
    ])
    return text, kb


@router.callback_query(F.data.startswith("tenant_view_"))
async def tenant_view(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    text, kb = await _tenant_card(session, int(call.data.split("_")[-1]), await get_lang(state))
    if text is None:
        await call.answer("❌", show_alert=True)
        return
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer()


# --- Add Tenant Flow ---

@router.callback_query(F.data == "tenant_add")
async def tenant_add_start(call: CallbackQuery, state: FSMContext):
    lang = await get_lang(state)
    text = UIMessages.header(t("tenants.add", lang))
    text += t("tenants.ask_first_name", lang)
    await call.message.answer(text)
    await state.set_state(AddTenantState.waiting_for_first_name)
    await call.answer()


async def _guard(message: Message, lang: str) -> bool:
    """True when the message is usable as a text answer"""
    if not message.text or is_menu_text(message.text) or message.text.startswith("/"):
        await message.answer(UIMessages.warning(t("common.use_cancel", lang)))
        return False
    return True


@router.message(AddTenantState.waiting_for_first_name)
async def tenant_add_first_name(message: Message, state: FSMContext):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return
    await state.update_data(first_name=message.text.strip())
    await message.answer(t("tenants.ask_last_name", lang))
    await state.set_state(AddTenantState.waiting_for_last_name)


@router.message(AddTenantState.waiting_for_last_name)
async def tenant_add_last_name(message: Message, state: FSMContext):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return
    await state.update_data(last_name=message.text.strip())
    await message.answer(f"{t('tenants.ask_phone', lang)}\n<i>{t('common.skip', lang)}</i>")
    await state.set_state(AddTenantState.waiting_for_phone)


@router.message(AddTenantState.waiting_for_phone)
async def tenant_add_phone(message: Message, state: FSMContext):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return
    phone = "" if message.text.strip() == "-" else message.text.strip()
    await state.update_data(phone=phone)
    await message.answer(f"{t('tenants.ask_id_number', lang)}\n<i>{t('common.skip', lang)}</i>")
    await state.set_state(AddTenantState.waiting_for_id_number)


@router.message(AddTenantState.waiting_for_id_number)
async def tenant_add_finish(message: Message, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return
    id_number = "" if message.text.strip() == "-" else message.text.strip()
    data = await state.get_data()

    try:
        tenant_input = TenantInput(
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            phone=data.get("phone", ""),
            id_type="CCCD" if id_number else "",
            id_number=id_number,
        )
    except ValidationError as e:
        await message.answer(UIMessages.error(t("error.invalid", lang, detail=first_error(e))))
        await reset_state(state)
        return

    result = await create_tenant(session, tenant_input)
    if not result.ok:
        # Stay on this step so another id number can be entered
        await message.answer(UIMessages.error(render_error(result.error, lang)))
        return

    tenant = result.value
    logging.info(f"Admin {message.from_user.id} created tenant {tenant.id}")
    await reset_state(state)

    text, kb = await _tenant_card(session, tenant.id, lang)
    await message.answer(UIMessages.success(t("tenants.created", lang, name=tenant.full_name)))
    await message.answer(text, reply_markup=kb)


# --- Edit Tenant ---

@router.callback_query(F.data.startswith("tenant_phone_") | F.data.startswith("tenant_idn_"))
async def tenant_edit_start(call: CallbackQuery, state: FSMContext):
    lang = await get_lang(state)
    _, field, tenant_id = call.data.split("_")
    await state.update_data(tenant_id=int(tenant_id), field=field)
    await call.message.answer(f"{t(EDITABLE_FIELDS[field], lang)}\n<i>{t('common.skip', lang)}</i>")
    await state.set_state(EditTenantState.waiting_for_value)
    await call.answer()


@router.message(EditTenantState.waiting_for_value)
async def tenant_edit_process(message: Message, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    if not await _guard(message, lang):
        return

    data = await state.get_data()
    tenant = await get_tenant(session, data["tenant_id"])
    if not tenant:
        await reset_state(state)
        return

    value = "" if message.text.strip() == "-" else message.text.strip()
    values = dict(
        first_name=tenant.first_name,
        last_name=tenant.last_name,
        phone=tenant.phone,
        email=tenant.email,
        id_type=tenant.id_type,
        id_number=tenant.id_number,
        notes=tenant.notes,
    )
    if data["field"] == "phone":
        values["phone"] = value
    else:
        values["id_number"] = value

    result = await update_tenant(session, tenant.id, TenantInput(**values))
    if not result.ok:
        await message.answer(UIMessages.error(render_error(result.error, lang)))
        return

    await reset_state(state)
    text, kb = await _tenant_card(session, tenant.id, lang)
    await message.answer(text, reply_markup=kb)


# --- Delete Tenant ---

@router.callback_query(F.data.startswith("tenant_del_"))
async def tenant_delete_ask(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    tenant = await get_tenant(session, int(call.data.split("_")[-1]))
    if not tenant:
        await call.answer("❌", show_alert=True)
        return

    kb = UIKeyboards.confirm_cancel(
        confirm_callback=f"tenant_delyes_{tenant.id}",
        cancel_callback=f"tenant_view_{tenant.id}",
        lang=lang
    )
    await call.message.edit_text(
        UIMessages.warning(f"<b>{t('tenants.delete_confirm', lang, name=tenant.full_name)}</b>"),
        reply_markup=kb
    )
    await call.answer()


@router.callback_query(F.data.startswith("tenant_delyes_"))
async def tenant_delete_confirm(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    tenant_id = int(call.data.split("_")[-1])

    result = await delete_tenant(session, tenant_id)
    if not result.ok:
        await call.answer(render_error(result.error, lang), show_alert=True)
        return

    logging.info(f"Admin {call.from_user.id} deleted tenant {tenant_id}")
    await call.message.edit_text(
        UIMessages.success(t("tenants.deleted", lang)),
        reply_markup=UIKeyboards.back_button("tenants_list", lang)
    )
    await call.answer()
