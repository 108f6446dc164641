import pytest
from datetime import date

from pydantic import ValidationError

from motelbot.database.models import PaymentType, PaymentStatus
from motelbot.schemas.validation import (
    AmountModel, MoneyModel, MonthModel, DateModel, TenantInput, PaymentInput,
    UtilityReadingInput, MoveInInput, parse_occupant_line, first_error
)


@pytest.mark.parametrize("raw, expected", [
    ("3000000", 3000000.0),
    ("3.000.000", 3000000.0),
    ("3 000 000", 3000000.0),
    ("3,5", 3.5),
    (1500, 1500.0),
])
def test_amount_formats(raw, expected):
    assert AmountModel(amount=raw).amount == expected


def test_amount_must_be_positive():
    with pytest.raises(ValidationError):
        AmountModel(amount="0")
    with pytest.raises(ValidationError):
        AmountModel(amount="abc")
    assert MoneyModel(amount="0").amount == 0


def test_month_model():
    assert MonthModel(month="2026-03").month == "2026-03"
    assert MonthModel(month=" 3/2026 ").month == "2026-03"
    with pytest.raises(ValidationError):
        MonthModel(month="2026-13")


@pytest.mark.parametrize("raw", ["2026-03-15", "15/03/2026", "15.03.2026"])
def test_date_formats(raw):
    assert DateModel(value=raw).value == date(2026, 3, 15)


def test_date_rejects_garbage():
    with pytest.raises(ValidationError) as exc:
        DateModel(value="tomorrow")
    assert first_error(exc.value)


def test_tenant_input_strips_and_requires_names():
    tenant = TenantInput(first_name=" An ", last_name="Nguyen", phone=None)
    assert tenant.first_name == "An"
    assert tenant.phone == ""
    with pytest.raises(ValidationError):
        TenantInput(first_name="  ", last_name="Nguyen")


def test_parse_occupant_line():
    occupant = parse_occupant_line("Tran Thi Mai; 0903; 0790123; wife")

    assert occupant.first_name == "Tran Thi"
    assert occupant.last_name == "Mai"
    assert occupant.phone == "0903"
    assert occupant.id_number == "0790123"
    assert occupant.relation == "wife"
    assert not occupant.is_blank


def test_parse_occupant_line_name_only():
    occupant = parse_occupant_line("Binh")

    assert occupant.first_name == "Binh"
    assert occupant.last_name == ""
    assert occupant.id_number == ""
    # One name is not enough for a row to count
    assert occupant.is_blank


def test_payment_input():
    payment = PaymentInput(contract_id=1, amount="1.200.000", month="2026-03", type="utility", status="paid")

    assert payment.amount == 1200000
    assert payment.type == PaymentType.utility
    assert payment.status == PaymentStatus.paid
    with pytest.raises(ValidationError):
        PaymentInput(contract_id=1, amount="100", month="03-2026")


def test_utility_reading_input_blank_is_zero():
    reading = UtilityReadingInput(electric_start="", electric_end="120", water_end=None)

    assert reading.electric_start == 0
    assert reading.electric_end == 120
    assert reading.water_end == 0
    with pytest.raises(ValidationError):
        UtilityReadingInput(electric_end="-5")


def test_move_in_input_from_wizard_data():
    data = {
        "lang": "vi", "room_id": 1, "room_number": 101, "tenant_id": 2, "tenant_name": "Nguyen An",
        "max_occupants": 5, "monthly_rent": 3000000.0, "deposit": 0.0, "start_date": "2026-03-01",
        "occupants": [{"first_name": "Pham", "last_name": "Dung", "id_number": " OCC-1 "}],
    }

    payload = MoveInInput.model_validate(data)

    assert payload.start_date == date(2026, 3, 1)
    assert payload.occupants[0].id_number == "OCC-1"
    assert payload.notes == ""

    with pytest.raises(ValidationError):
        MoveInInput.model_validate({**data, "monthly_rent": -1})
