from aiogram.fsm.context import FSMContext
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton, ReplyKeyboardMarkup, KeyboardButton
from typing import List, Tuple

from motelbot.config import config
from motelbot.database.models import RoomStatus, ContractStatus, PaymentStatus
from motelbot.utils.i18n import t
from motelbot.utils.months import format_month, shift_month

# ========== UI Constants ==========
class UIEmojis:
    # Main menu sections
    HOME = "🏠"
    GROUP = "👥"
    CONTRACT = "📝"
    PAYMENT = "💳"
    ELECTRIC = "⚡"
    CHART = "📊"
    SETTINGS = "⚙️"
    HELP = "❔"

    # Room card / tenant card
    TENANT = "👤"
    MONEY = "💰"
    WATER = "💧"
    CALENDAR = "📅"
    HISTORY = "📜"

    # Actions and states
    EDIT = "✏️"
    DELETE = "🗑️"
    CHECK = "✅"
    PENDING = "⏳"


# Menu button texts start with these; FSM steps ignore them as input
MENU_EMOJIS = [
    UIEmojis.HOME, UIEmojis.GROUP, UIEmojis.CONTRACT, UIEmojis.PAYMENT,
    UIEmojis.ELECTRIC, UIEmojis.CHART, UIEmojis.SETTINGS, UIEmojis.HELP,
]


class UIMessages:
    """HTML snippets shared by every screen (bot runs with parse_mode=HTML)"""

    DIVIDER = "━" * 22

    @staticmethod
    def header(title: str, emoji: str = "") -> str:
        if emoji:
            return f"\n{emoji} <b>{title}</b>\n{UIMessages.DIVIDER}\n"
        return f"\n<b>{title}</b>\n{UIMessages.DIVIDER}\n"

    @staticmethod
    def section(title: str) -> str:
        return f"\n<b>▪️ {title}</b>\n"

    @staticmethod
    def field(name: str, value: str, emoji: str = "") -> str:
        prefix = f"{emoji} " if emoji else "• "
        return f"{prefix}<b>{name}:</b> {value}\n"

    @staticmethod
    def info_box(text: str) -> str:
        return f"ℹ️ <i>{text}</i>"

    @staticmethod
    def success(text: str) -> str:
        return f"✅ {text}"

    @staticmethod
    def error(text: str) -> str:
        return f"❌ {text}"

    @staticmethod
    def warning(text: str) -> str:
        return f"⚠️ {text}"


class UIKeyboards:
    """Common keyboard layouts"""

    @staticmethod
    def back_button(callback_data: str = "back_to_menu", lang: str = None) -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup(inline_keyboard=[
            [InlineKeyboardButton(text=t("common.back", lang), callback_data=callback_data)]
        ])

    @staticmethod
    def confirm_cancel(
        confirm_callback: str = "confirm",
        cancel_callback: str = "cancel",
        lang: str = None
    ) -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup(inline_keyboard=[
            [
                InlineKeyboardButton(text=t("common.confirm", lang), callback_data=confirm_callback),
                InlineKeyboardButton(text=t("common.cancel", lang), callback_data=cancel_callback)
            ]
        ])

    @staticmethod
    def menu_grid(items: List[Tuple[str, str]], columns: int = 2) -> InlineKeyboardMarkup:
        """Create a grid menu from list of (text, callback_data) tuples"""
        keyboard = []
        row = []

        for text, callback in items:
            row.append(InlineKeyboardButton(text=text, callback_data=callback))
            if len(row) == columns:
                keyboard.append(row)
                row = []

        if row:
            keyboard.append(row)

        return InlineKeyboardMarkup(inline_keyboard=keyboard)

    @staticmethod
    def month_switcher(prefix: str, month: str) -> List[InlineKeyboardButton]:
        """◀️ MM/YYYY ▶️ row; callbacks are f"{prefix}{YYYY-MM}" """
        return [
            InlineKeyboardButton(text="◀️", callback_data=f"{prefix}{shift_month(month, -1)}"),
            InlineKeyboardButton(text=f"{UIEmojis.CALENDAR} {format_month(month)}", callback_data="ignore"),
            InlineKeyboardButton(text="▶️", callback_data=f"{prefix}{shift_month(month, 1)}"),
        ]

    @staticmethod
    def main_reply_keyboard(lang: str = None) -> ReplyKeyboardMarkup:
        """Persistent main menu"""
        keyboard = [
            [KeyboardButton(text=t("menu.rooms", lang)), KeyboardButton(text=t("menu.tenants", lang))],
            [KeyboardButton(text=t("menu.contracts", lang)), KeyboardButton(text=t("menu.payments", lang))],
            [KeyboardButton(text=t("menu.utilities", lang)), KeyboardButton(text=t("menu.reports", lang))],
            [KeyboardButton(text=t("menu.settings", lang)), KeyboardButton(text=t("menu.help", lang))]
        ]
        return ReplyKeyboardMarkup(keyboard=keyboard, resize_keyboard=True)


# === Language in FSM data ===

async def get_lang(state: FSMContext) -> str:
    data = await state.get_data()
    return data.get("lang") or config.DEFAULT_LANGUAGE


async def reset_state(state: FSMContext) -> None:
    """Clear the FSM but keep the chosen language"""
    lang = (await state.get_data()).get("lang")
    await state.clear()
    if lang:
        await state.update_data(lang=lang)


def is_menu_text(text: str) -> bool:
    return bool(text) and any(e in text for e in MENU_EMOJIS)


# === Helper Functions ===

def format_amount(amount: float, currency: str = "VND") -> str:
    """3000000 -> "3.000.000 ₫" for VND, two decimals otherwise"""
    if amount is None:
        return "—"
    if currency == "VND":
        return f"{float(amount):,.0f}".replace(",", ".") + " ₫"
    return f"{float(amount):,.2f} {currency}"


def format_number(value: float) -> str:
    value = float(value)
    return f"{value:.0f}" if value == int(value) else f"{value:g}"


def format_date(date_obj) -> str:
    if not date_obj:
        return "—"
    return date_obj.strftime("%d/%m/%Y")


STATUS_BADGES = {
    RoomStatus.vacant.value: "🟢",
    RoomStatus.occupied.value: "🔴",
    RoomStatus.maintenance.value: "🟡",
    ContractStatus.active.value: "🟢",
    ContractStatus.ended.value: "📦",
    PaymentStatus.pending.value: UIEmojis.PENDING,
    PaymentStatus.paid.value: UIEmojis.CHECK,
}


def get_status_badge(status: str) -> str:
    return STATUS_BADGES.get(status, "⚪")


def status_label(kind: str, status: str, lang: str = None) -> str:
    """Badge + translated label, e.g. status_label("room", "vacant")"""
    return f"{get_status_badge(status)} {t(f'{kind}.{status}', lang)}"
