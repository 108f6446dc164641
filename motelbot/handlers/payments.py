import logging

from aiogram import Router, F
from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.database.models import PaymentType, PaymentMethod, PaymentStatus
from motelbot.handlers.common import AdminFilter
from motelbot.schemas.validation import AmountModel, MonthModel, PaymentInput, first_error
from motelbot.services.contract_service import list_active_contracts
from motelbot.services.payment_service import (
    generate_rent_for_month, set_payment_status, add_manual_payment, delete_payment, get_month_ledger
)
from motelbot.services.settings_service import SettingsProvider
from motelbot.states import ManualPaymentState
from motelbot.utils.i18n import t
from motelbot.utils.months import current_month, format_month
from motelbot.utils.ui import (
    UIEmojis, UIMessages, UIKeyboards, format_amount, get_status_badge,
    get_lang, reset_state, is_menu_text
)

router = Router()
router.message.filter(AdminFilter())
router.callback_query.filter(AdminFilter())


async def _ledger_view(session: AsyncSession, month: str, lang: str):
    ledger = await get_month_ledger(session, month)
    currency = (await SettingsProvider.load(session)).currency

    text = UIMessages.header(t("payments.title", lang, month=format_month(month)), UIEmojis.PAYMENT)
    text += UIMessages.field(t("payments.expected", lang), format_amount(ledger.total_expected, currency))
    text += UIMessages.field(t("payments.collected", lang), format_amount(ledger.total_collected, currency), UIEmojis.CHECK)
    text += UIMessages.field(t("payments.pending", lang), format_amount(ledger.total_pending, currency), UIEmojis.PENDING)

    text += UIMessages.section(t("type.rent", lang))
    for row in ledger.rent_status:
        if row.payment_id is None:
            state_text = f"<i>{t('payments.no_rent', lang)}</i>"
        else:
            badge = get_status_badge(PaymentStatus.paid.value if row.paid else PaymentStatus.pending.value)
            state_text = f"{badge} {format_amount(row.paid_amount, currency)}"
        text += f"{UIEmojis.HOME} <b>{row.room_number}</b> · {row.tenant_name} · {state_text}\n"

    kb_rows = []
    for payment in ledger.payments:
        label = (
            f"{get_status_badge(payment.status)} {payment.contract.room.number} · "
            f"{t('type.' + payment.type, lang)} · {format_amount(payment.amount, currency)}"
        )
        kb_rows.append([
            InlineKeyboardButton(text=label, callback_data=f"pay_toggle_{payment.id}_{month}"),
            InlineKeyboardButton(text=UIEmojis.DELETE, callback_data=f"pay_del_{payment.id}_{month}"),
        ])

    kb_rows.append([
        InlineKeyboardButton(text=t("payments.generate", lang), callback_data=f"pay_gen_{month}"),
        InlineKeyboardButton(text=t("payments.add", lang), callback_data=f"pay_add_{month}"),
    ])
    kb_rows.append(UIKeyboards.month_switcher("pay_month_", month))
    return text, InlineKeyboardMarkup(inline_keyboard=kb_rows)


@router.message(F.text.startswith(UIEmojis.PAYMENT))
@router.message(Command("payments"))
async def payments_ledger(message: Message, state: FSMContext, session: AsyncSession):
    """/payments [YYYY-MM]"""
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

    text, kb = await _ledger_view(session, month, lang)
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data.startswith("pay_month_"))
async def payments_month(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    month = call.data.split("_")[-1]
    text, kb = await _ledger_view(session, month, await get_lang(state))
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer()


@router.callback_query(F.data.startswith("pay_gen_"))
async def payments_generate(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    month = call.data.split("_")[-1]

    created = await generate_rent_for_month(session, month)
    logging.info(f"Admin {call.from_user.id} generated rent for {month}: {created}")

    text, kb = await _ledger_view(session, month, lang)
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer(t("payments.generated", lang, count=created, month=format_month(month)), show_alert=True)


@router.callback_query(F.data.startswith("pay_toggle_"))
async def payments_toggle(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    _, _, payment_id, month = call.data.split("_")

    ledger = await get_month_ledger(session, month)
    payment = next((p for p in ledger.payments if p.id == int(payment_id)), None)
    if payment is None:
        await call.answer("❌", show_alert=True)
        return

    payment = await set_payment_status(session, payment.id, paid=payment.status != PaymentStatus.paid.value)
    logging.info(f"Admin {call.from_user.id} set payment {payment.id} to {payment.status}")

    text, kb = await _ledger_view(session, month, lang)
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer(t(f"payment.{payment.status}", lang))


@router.callback_query(F.data.startswith("pay_del_"))
async def payments_delete(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    _, _, payment_id, month = call.data.split("_")

    if await delete_payment(session, int(payment_id)):
        logging.info(f"Admin {call.from_user.id} deleted payment {payment_id}")

    text, kb = await _ledger_view(session, month, lang)
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer(t("payments.deleted", lang))


# --- Manual Payment Flow ---
# contract -> amount -> type -> method -> status

@router.callback_query(F.data.startswith("pay_add_"))
async def manual_payment_start(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    month = call.data.split("_")[-1]
    contracts = await list_active_contracts(session)
    if not contracts:
        await call.answer(t("contracts.none_active", lang), show_alert=True)
        return

    await state.update_data(month=month)
    kb_rows = [
        [InlineKeyboardButton(
            text=f"{contract.room.number} · {contract.tenant.full_name}",
            callback_data=f"paycontract_{contract.id}"
        )]
        for contract in contracts
    ]
    kb_rows.append([InlineKeyboardButton(text=t("common.cancel", lang), callback_data="cancel")])

    await call.message.answer(
        UIMessages.header(f"{t('payments.add', lang)} · {format_month(month)}") + t("payments.ask_contract", lang),
        reply_markup=InlineKeyboardMarkup(inline_keyboard=kb_rows)
    )
    await state.set_state(ManualPaymentState.waiting_for_contract)
    await call.answer()


@router.callback_query(ManualPaymentState.waiting_for_contract, F.data.startswith("paycontract_"))
async def manual_payment_contract(call: CallbackQuery, state: FSMContext):
    lang = await get_lang(state)
    await state.update_data(contract_id=int(call.data.split("_")[-1]))
    await call.message.edit_text(t("payments.ask_amount", lang))
    await state.set_state(ManualPaymentState.waiting_for_amount)
    await call.answer()


@router.message(ManualPaymentState.waiting_for_amount)
async def manual_payment_amount(message: Message, state: FSMContext):
    lang = await get_lang(state)
    if not message.text or is_menu_text(message.text) or message.text.startswith("/"):
        await message.answer(UIMessages.warning(t("common.use_cancel", lang)))
        return

    try:
        amount = AmountModel(amount=message.text).amount
    except ValidationError:
        await message.answer(UIMessages.error(t("error.invalid", lang, detail=message.text)))
        return

    await state.update_data(amount=amount)
    kb = UIKeyboards.menu_grid([(t(f"type.{pt.value}", lang), f"paytype_{pt.value}") for pt in PaymentType])
    await message.answer(t("payments.ask_type", lang), reply_markup=kb)
    await state.set_state(ManualPaymentState.waiting_for_type)


@router.callback_query(ManualPaymentState.waiting_for_type, F.data.startswith("paytype_"))
async def manual_payment_type(call: CallbackQuery, state: FSMContext):
    lang = await get_lang(state)
    await state.update_data(type=call.data.split("_")[-1])
    kb = UIKeyboards.menu_grid([(t(f"method.{pm.value}", lang), f"paymethod_{pm.value}") for pm in PaymentMethod], columns=3)
    await call.message.edit_text(t("payments.ask_method", lang), reply_markup=kb)
    await state.set_state(ManualPaymentState.waiting_for_method)
    await call.answer()


@router.callback_query(ManualPaymentState.waiting_for_method, F.data.startswith("paymethod_"))
async def manual_payment_method(call: CallbackQuery, state: FSMContext):
    lang = await get_lang(state)
    await state.update_data(method=call.data.split("_")[-1])
    kb = UIKeyboards.menu_grid([
        (f"{get_status_badge(ps.value)} {t(f'payment.{ps.value}', lang)}", f"paystatus_{ps.value}")
        for ps in PaymentStatus
    ])
    await call.message.edit_text(t("payments.ask_status", lang), reply_markup=kb)
    await state.set_state(ManualPaymentState.waiting_for_status)
    await call.answer()


@router.callback_query(ManualPaymentState.waiting_for_status, F.data.startswith("paystatus_"))
async def manual_payment_finish(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    lang = await get_lang(state)
    data = await state.get_data()

    try:
        payment_input = PaymentInput(
            contract_id=data["contract_id"],
            amount=data["amount"],
            month=data["month"],
            type=data["type"],
            method=data["method"],
            status=call.data.split("_")[-1],
        )
    except ValidationError as e:
        await call.message.edit_text(UIMessages.error(t("error.invalid", lang, detail=first_error(e))))
        await reset_state(state)
        await call.answer()
        return

    await add_manual_payment(session, **payment_input.model_dump())
    logging.info(f"Admin {call.from_user.id} added payment for contract {payment_input.contract_id}")
    await reset_state(state)

    text, kb = await _ledger_view(session, payment_input.month, lang)
    await call.message.edit_text(UIMessages.success(t("payments.added", lang)) + "\n" + text, reply_markup=kb)
    await call.answer()
