import enum
from datetime import datetime, date
from typing import Optional, List
from sqlalchemy import BigInteger, String, Boolean, ForeignKey, Integer, Numeric, DateTime, Text, DATE, UniqueConstraint, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from motelbot.database.core import Base

# Enums
class RoomStatus(str, enum.Enum):
    vacant = "vacant"
    occupied = "occupied"
    maintenance = "maintenance"

class ContractStatus(str, enum.Enum):
    active = "active"
    ended = "ended"

class PaymentType(str, enum.Enum):
    rent = "rent"
    deposit = "deposit"
    utility = "utility"
    other = "other"

class PaymentMethod(str, enum.Enum):
    cash = "cash"
    transfer = "transfer"
    card = "card"

class PaymentStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"

class UserRole(str, enum.Enum):
    owner = "owner"
    admin = "admin"


# Room
class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    number: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    name: Mapped[str] = mapped_column(String, default="")
    floor: Mapped[int] = mapped_column(Integer, default=1)
    rate: Mapped[float] = mapped_column(Numeric(14, 2), default=0)
    max_occupants: Mapped[int] = mapped_column(Integer, default=5)
    # Only the occupancy engine writes "occupied"
    status: Mapped[RoomStatus] = mapped_column(String, default=RoomStatus.vacant.value)
    notes: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    contracts: Mapped[List["Contract"]] = relationship(back_populates="room")
    utilities: Mapped[List["Utility"]] = relationship(back_populates="room")

    @property
    def active_contract(self) -> Optional["Contract"]:
        for contract in self.contracts:
            if contract.status == ContractStatus.active.value:
                return contract
        return None


# Tenant
class Tenant(Base):
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String)
    last_name: Mapped[str] = mapped_column(String)
    phone: Mapped[str] = mapped_column(String, default="")
    email: Mapped[str] = mapped_column(String, default="")
    id_type: Mapped[str] = mapped_column(String, default="")
    # Optional; when set it is unique across tenants AND occupants
    id_number: Mapped[str] = mapped_column(String, default="", index=True)
    notes: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    contracts: Mapped[List["Contract"]] = relationship(back_populates="tenant")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# Contract (one active per room and per tenant)
class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id"))
    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id"))

    monthly_rent: Mapped[float] = mapped_column(Numeric(14, 2))
    deposit: Mapped[float] = mapped_column(Numeric(14, 2), default=0)
    start_date: Mapped[date] = mapped_column(DATE)
    end_date: Mapped[Optional[date]] = mapped_column(DATE, nullable=True)

    status: Mapped[ContractStatus] = mapped_column(String, default=ContractStatus.active.value)
    notes: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    room: Mapped["Room"] = relationship(back_populates="contracts")
    tenant: Mapped["Tenant"] = relationship(back_populates="contracts")
    occupants: Mapped[List["Occupant"]] = relationship(back_populates="contract", cascade="all, delete-orphan")
    payments: Mapped[List["Payment"]] = relationship(back_populates="contract", cascade="all, delete-orphan")

    __table_args__ = (
        Index(
            "uq_contract_active_room", "room_id", unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index(
            "uq_contract_active_tenant", "tenant_id", unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index("ix_contracts_status_start", "status", "start_date"),
    )

    @property
    def headcount(self) -> int:
        """Tenant plus registered occupants"""
        return 1 + len(self.occupants)


# Occupant (fixed batch created with its contract)
class Occupant(Base):
    __tablename__ = "occupants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"))

    first_name: Mapped[str] = mapped_column(String)
    last_name: Mapped[str] = mapped_column(String)
    phone: Mapped[str] = mapped_column(String, default="")
    id_type: Mapped[str] = mapped_column(String, default="")
    id_number: Mapped[str] = mapped_column(String, default="", index=True)
    relation: Mapped[str] = mapped_column("relationship", String, default="")  # spouse, child, roommate...

    contract: Mapped["Contract"] = relationship(back_populates="occupants")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# Payment
class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"))

    amount: Mapped[float] = mapped_column(Numeric(14, 2))
    month: Mapped[str] = mapped_column(String(7))  # "YYYY-MM"
    type: Mapped[PaymentType] = mapped_column(String, default=PaymentType.rent.value)
    method: Mapped[PaymentMethod] = mapped_column(String, default=PaymentMethod.cash.value)
    status: Mapped[PaymentStatus] = mapped_column(String, default=PaymentStatus.pending.value)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    contract: Mapped["Contract"] = relationship(back_populates="payments")

    __table_args__ = (
        Index("ix_payments_contract_month_type", "contract_id", "month", "type"),
        Index("ix_payments_month_status", "month", "status"),
    )


# Utility (meter readings per room and month)
class Utility(Base):
    __tablename__ = "utilities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"))
    month: Mapped[str] = mapped_column(String(7))

    electric_start: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    electric_end: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    electric_rate: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    water_start: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    water_end: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    water_rate: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    # Stored at save time, never recomputed on read
    total_amount: Mapped[float] = mapped_column(Numeric(14, 2), default=0)

    room: Mapped["Room"] = relationship(back_populates="utilities")

    __table_args__ = (
        UniqueConstraint('room_id', 'month', name='uq_utility_room_month'),
    )


# Setting (plain key/value store)
class Setting(Base):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text, default="")


# User (bot admins)
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tg_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    tg_username: Mapped[Optional[str]] = mapped_column(String)
    full_name: Mapped[str] = mapped_column(String)

    role: Mapped[UserRole] = mapped_column(String, default=UserRole.admin.value)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
