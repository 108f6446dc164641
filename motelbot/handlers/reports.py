from aiogram import Router, F
from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from motelbot.database.models import PaymentType
from motelbot.handlers.common import AdminFilter
from motelbot.schemas.validation import MonthModel
from motelbot.services.report_service import get_dashboard_stats, get_monthly_report
from motelbot.services.settings_service import SettingsProvider
from motelbot.utils.i18n import t
from motelbot.utils.months import current_month, format_month
from motelbot.utils.ui import (
    UIEmojis, UIMessages, UIKeyboards, format_amount, status_label, get_lang, reset_state
)

router = Router()
router.message.filter(AdminFilter())
router.callback_query.filter(AdminFilter())

UNPAID_LISTED = 15


def _occupancy_lines(occupancy, lang: str) -> str:
    text = UIMessages.field(t("reports.occupancy", lang), f"{occupancy.rate}% ({occupancy.occupied}/{occupancy.total})", UIEmojis.CHART)
    text += f"   {status_label('room', 'vacant', lang)}: {occupancy.vacant}\n"
    text += f"   {status_label('room', 'occupied', lang)}: {occupancy.occupied}\n"
    text += f"   {status_label('room', 'maintenance', lang)}: {occupancy.maintenance}\n"
    return text


@router.message(F.text.startswith(UIEmojis.CHART))
@router.message(Command("dashboard"))
async def dashboard(message: Message, state: FSMContext, session: AsyncSession):
    await reset_state(state)
    lang = await get_lang(state)
    stats = await get_dashboard_stats(session)
    settings = await SettingsProvider.load(session)

    text = UIMessages.header(f"{settings.get('motel_name')} · {t('reports.dashboard', lang)}", UIEmojis.CHART)
    text += _occupancy_lines(stats.occupancy, lang)
    text += UIMessages.field(t("reports.active_contracts", lang), str(stats.active_contracts), UIEmojis.CONTRACT)
    text += UIMessages.field(t("reports.tenants", lang), str(stats.total_tenants), UIEmojis.GROUP)

    kb = InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(
            text=f"{UIEmojis.CALENDAR} {t('reports.title', lang, month=format_month(current_month()))}",
            callback_data=f"report_{current_month()}"
        )]
    ])
    await message.answer(text, reply_markup=kb)


async def _report_view(session: AsyncSession, month: str, lang: str):
    report = await get_monthly_report(session, month)
    currency = (await SettingsProvider.load(session)).currency

    text = UIMessages.header(t("reports.title", lang, month=format_month(month)), UIEmojis.CHART)

    text += UIMessages.section(t("reports.income", lang))
    for payment_type in PaymentType:
        text += UIMessages.field(t(f"type.{payment_type.value}", lang), format_amount(report.income[payment_type.value], currency))
    text += UIMessages.field(t("utilities.total", lang), f"<b>{format_amount(report.income['total'], currency)}</b>", UIEmojis.MONEY)
    text += UIMessages.field(t("reports.utility_cost", lang), format_amount(report.total_utility_cost, currency), UIEmojis.ELECTRIC)

    text += UIMessages.section(f"{t('reports.unpaid', lang)} ({len(report.unpaid_payments)})")
    for payment in report.unpaid_payments[:UNPAID_LISTED]:
        text += (
            f"{UIEmojis.PENDING} {format_month(payment.month)} · {payment.contract.room.number} · "
            f"{payment.contract.tenant.full_name} · {format_amount(payment.amount, currency)}\n"
        )
    if len(report.unpaid_payments) > UNPAID_LISTED:
        text += f"… +{len(report.unpaid_payments) - UNPAID_LISTED}\n"
    text += UIMessages.field(t("utilities.total", lang), format_amount(report.total_unpaid, currency))

    text += UIMessages.section(t("reports.occupancy", lang))
    text += _occupancy_lines(report.occupancy, lang)

    text += UIMessages.section(t("reports.history", lang))
    total = report.occupancy.total or 1
    for history_month, rooms in report.occupancy_history:
        bar = "▓" * round(rooms / total * 10)
        text += f"<code>{format_month(history_month)}</code> {bar} {rooms}\n"

    kb = InlineKeyboardMarkup(inline_keyboard=[UIKeyboards.month_switcher("report_", month)])
    return text, kb


@router.message(Command("report"))
async def monthly_report(message: Message, state: FSMContext, session: AsyncSession):
    """/report [YYYY-MM]"""
    await reset_state(state)
    lang = await get_lang(state)

    month = current_month()
    parts = (message.text or "").split()
    if len(parts) > 1:
        try:
            month = MonthModel(month=parts[1]).month
        except ValidationError:
            await message.answer(UIMessages.error(t("error.invalid", lang, detail=parts[1])))
            return

    text, kb = await _report_view(session, month, lang)
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data.startswith("report_"))
async def monthly_report_callback(call: CallbackQuery, state: FSMContext, session: AsyncSession):
    text, kb = await _report_view(session, call.data.split("_")[-1], await get_lang(state))
    await call.message.edit_text(text, reply_markup=kb)
    await call.answer()
