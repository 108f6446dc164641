from datetime import date

from motelbot.utils.i18n import t
from motelbot.utils.ui import (
    UIKeyboards, format_amount, format_number, format_date, get_status_badge, status_label, is_menu_text
)


def test_format_amount():
    assert format_amount(3000000) == "3.000.000 ₫"
    assert format_amount(1234.5, "USD") == "1,234.50 USD"
    assert format_amount(None) == "—"


def test_format_number_and_date():
    assert format_number(120.0) == "120"
    assert format_number(12.5) == "12.5"
    assert format_date(date(2026, 3, 5)) == "05/03/2026"
    assert format_date(None) == "—"


def test_status_badges():
    assert get_status_badge("occupied") == "🔴"
    assert get_status_badge("unknown") == "⚪"
    assert status_label("room", "vacant", "en") == "🟢 Vacant"


def test_menu_texts_in_both_languages():
    for lang in ("en", "vi"):
        assert is_menu_text(t("menu.rooms", lang))
        assert is_menu_text(t("menu.settings", lang))
    assert not is_menu_text("Nguyen Van A")
    assert not is_menu_text("")


def test_month_switcher_callbacks():
    back, label, forward = UIKeyboards.month_switcher("pay_month_", "2026-01")

    assert back.callback_data == "pay_month_2025-12"
    assert label.callback_data == "ignore"
    assert forward.callback_data == "pay_month_2026-02"
