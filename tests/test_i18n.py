from datetime import date

from motelbot.services.results import BusinessError, failure, MAX_OCCUPANTS, DUPLICATE_ID
from motelbot.utils.i18n import TRANSLATIONS, LANGUAGES, t, render_error
from motelbot.utils.months import shift_month, previous_month, current_month, month_bounds, month_options, format_month


def test_every_language_covers_english_keys():
    english = set(TRANSLATIONS["en"])
    for lang in LANGUAGES:
        assert english - set(TRANSLATIONS[lang]) == set(), lang


def test_translation_fallbacks():
    assert t("menu.rooms", "vi") != t("menu.rooms", "en")
    assert t("menu.rooms", "xx") == t("menu.rooms", "en")
    assert t("menu.rooms") == t("menu.rooms", "en")
    assert t("no.such.key", "vi") == "no.such.key"


def test_params_are_substituted():
    assert t("ROOM_NOT_VACANT", "en", room=7) == "Room 7 is not vacant"
    # Unknown params stay as placeholders
    assert "{room}" in t("ROOM_NOT_VACANT", "en")


def test_render_error():
    error = failure(MAX_OCCUPANTS, max=5, rest=4).error

    assert render_error(error, "en") == "Maximum 5 people per room (1 tenant + 4 occupants)"
    assert render_error(error, "vi") == "Tối đa 5 người mỗi phòng (1 người thuê + 4 người ở cùng)"


def test_render_duplicate_id_names_holder():
    error = BusinessError(DUPLICATE_ID, {"id_number": "123", "holder": "Tenant A (tenant)"})

    assert render_error(error, "en") == 'ID number "123" is already used by Tenant A (tenant)'


def test_month_arithmetic():
    assert shift_month("2026-01", -1) == "2025-12"
    assert shift_month("2025-11", 3) == "2026-02"
    assert previous_month("2026-03") == "2026-02"
    assert current_month(date(2026, 7, 31)) == "2026-07"
    assert month_options(1, 1, today=date(2026, 1, 5)) == ["2025-12", "2026-01", "2026-02"]
    assert format_month("2026-03") == "03/2026"


def test_month_bounds():
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds("2026-12") == (date(2026, 12, 1), date(2026, 12, 31))
