from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, ValidationError

from motelbot.database.models import PaymentType, PaymentMethod, PaymentStatus


def _parse_number(v):
    if v is None:
        raise ValueError("Must be a number")
    if isinstance(v, str):
        # Replace common separators: "3.000.000", "3 000 000", "3,5"
        v = v.strip().replace(' ', '').replace(',', '.')
        if v.count('.') > 1:
            v = v.replace('.', '')
    return float(v)


class AmountModel(BaseModel):
    amount: float = Field(gt=0, description="Positive amount")

    @field_validator('amount', mode='before')
    def parse_float(cls, v):
        return _parse_number(v)


class MoneyModel(BaseModel):
    """Amount that may be zero (deposit, rates)"""
    amount: float = Field(ge=0)

    @field_validator('amount', mode='before')
    def parse_float(cls, v):
        return _parse_number(v)


class MonthModel(BaseModel):
    month: str = Field(pattern=r'^\d{4}-(0[1-9]|1[0-2])$', description="YYYY-MM")

    @field_validator('month', mode='before')
    def normalize(cls, v):
        if isinstance(v, str):
            v = v.strip()
            # Accept "MM/YYYY" as shown in the UI
            if '/' in v:
                m, y = v.split('/', 1)
                v = f"{y.strip()}-{int(m):02d}" if m.strip().isdigit() else v
        return v


class DateModel(BaseModel):
    value: date

    @field_validator('value', mode='before')
    def parse_date(cls, v):
        if isinstance(v, str):
            v = v.strip()
            for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d.%m.%Y"):
                try:
                    return datetime.strptime(v, fmt).date()
                except ValueError:
                    continue
            raise ValueError("Expected YYYY-MM-DD or DD/MM/YYYY")
        return v


class TenantInput(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str = ""
    email: str = ""
    id_type: str = ""
    id_number: str = ""
    notes: str = ""

    @field_validator('*', mode='before')
    def strip_strings(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


class OccupantInput(BaseModel):
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    id_type: str = ""
    id_number: str = ""
    relation: str = ""

    @field_validator('*', mode='before')
    def strip_strings(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @property
    def is_blank(self) -> bool:
        """Rows without both names are dropped, like an empty form row"""
        return not (self.first_name and self.last_name)


def parse_occupant_line(line: str) -> OccupantInput:
    """
    Parse one occupant line typed in the bot:
    "First Last; phone; id number; relationship"
    Only the name is required. The last word of the name is the last name.
    """
    parts = [p.strip() for p in line.split(';')]
    names = parts[0].split()
    if len(names) >= 2:
        first_name, last_name = " ".join(names[:-1]), names[-1]
    else:
        first_name, last_name = (names[0] if names else ""), ""
    fields = parts[1:] + [""] * (3 - len(parts[1:]))
    return OccupantInput(
        first_name=first_name,
        last_name=last_name,
        phone=fields[0],
        id_number=fields[1],
        relation=fields[2],
    )


class MoveInInput(BaseModel):
    """Move-in wizard answers as kept in FSM data"""
    room_id: int
    tenant_id: int
    monthly_rent: float = Field(ge=0)
    deposit: float = Field(default=0, ge=0)
    start_date: date
    notes: str = ""
    occupants: list[OccupantInput] = []


class PaymentInput(BaseModel):
    contract_id: int
    amount: float = Field(gt=0)
    month: str = Field(pattern=r'^\d{4}-(0[1-9]|1[0-2])$')
    type: PaymentType = PaymentType.rent
    method: PaymentMethod = PaymentMethod.cash
    status: PaymentStatus = PaymentStatus.pending
    notes: str = ""

    @field_validator('amount', mode='before')
    def parse_float(cls, v):
        return _parse_number(v)


class UtilityReadingInput(BaseModel):
    electric_start: float = Field(default=0, ge=0)
    electric_end: float = Field(default=0, ge=0)
    electric_rate: float = Field(default=0, ge=0)
    water_start: float = Field(default=0, ge=0)
    water_end: float = Field(default=0, ge=0)
    water_rate: float = Field(default=0, ge=0)

    @field_validator('*', mode='before')
    def parse_float(cls, v):
        if v is None or v == "":
            return 0
        return _parse_number(v)


def first_error(exc: ValidationError) -> Optional[str]:
    errors = exc.errors()
    if not errors:
        return None
    return errors[0].get("msg")
