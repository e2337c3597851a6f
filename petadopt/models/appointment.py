from datetime import UTC, datetime
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class ServiceType(str, Enum):
    GENERAL_CHECKUP = "General Checkup"
    VACCINATION = "Vaccination"
    GROOMING = "Grooming"


class AppointmentStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    # store "General Checkup", not "GENERAL_CHECKUP"
    return [member.value for member in enum_cls]


ACTIVE_SLOT_CLAUSE = sa.text("status <> 'Cancelled'")


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        # At most one non-cancelled appointment per (date, time) slot
        sa.Index(
            "uq_appointments_active_slot",
            "date",
            "time",
            unique=True,
            postgresql_where=ACTIVE_SLOT_CLAUSE,
            sqlite_where=ACTIVE_SLOT_CLAUSE,
        ),
        sa.Index("ix_appointments_user_id_status", "user_id", "status"),
    )

    id: int | None = Field(default=None, primary_key=True)
    pet_id: int = Field(foreign_key="pets.id", index=True)
    user_id: int = Field(foreign_key="users.id")
    service_type: ServiceType = Field(
        default=ServiceType.GENERAL_CHECKUP,
        sa_column=sa.Column(
            "service_type",
            sa.Enum(ServiceType, values_callable=_enum_values, native_enum=False, length=32),
            nullable=False,
            index=True,
        ),
    )
    date: str = Field(index=True, max_length=10)  # YYYY-MM-DD
    time: str = Field(max_length=5)  # HH:MM slot label
    notes: str = ""
    status: AppointmentStatus = Field(
        default=AppointmentStatus.PENDING,
        sa_column=sa.Column(
            "status",
            sa.Enum(AppointmentStatus, values_callable=_enum_values, native_enum=False, length=16),
            nullable=False,
            index=True,
        ),
    )
    # naive UTC, TIMESTAMP WITHOUT TIME ZONE
    created_at: datetime = Field(
        default_factory=_utc_naive_now,
        sa_column=sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=_utc_naive_now,
        sa_column=sa.Column("updated_at", sa.DateTime(), nullable=False),
    )


class AppointmentCreate(SQLModel):
    """Booking input. Fields stay plain strings; the booking service
    validates them and reports user-facing messages."""

    pet_id: int | None = None
    service_type: str | None = None
    date: str | None = None
    time: str | None = None
    notes: str | None = None


class AppointmentUpdate(SQLModel):
    pet_id: int | None = None
    service_type: str | None = None
    date: str | None = None
    time: str | None = None
    notes: str | None = None


class PetSummary(SQLModel):
    id: int
    name: str
    type: str | None = None
    breed: str | None = None
    image_url: str | None = None


class OwnerSummary(SQLModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None


class AppointmentPublic(SQLModel):
    id: int
    pet_id: int
    user_id: int
    service_type: ServiceType
    date: str
    time: str
    notes: str = ""
    status: AppointmentStatus
    created_at: datetime
    updated_at: datetime
    pet: PetSummary | None = None
    user: OwnerSummary | None = None
