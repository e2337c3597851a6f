"""Persistence for appointments.

Every call reads or writes through the given session; nothing is cached, so a
cancellation or reschedule is visible to the very next availability query.
The partial unique index ``uq_appointments_active_slot`` is the final word on
double booking: a write that would put two active appointments in one slot
fails here with ``Conflict`` even when the caller's pre-check passed.
"""
import logging
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from petadopt.core.exceptions import Conflict, NotFound
from petadopt.models.appointment import Appointment, AppointmentStatus, ServiceType
from petadopt.models.pet import Pet
from petadopt.models.user import User
from petadopt.services.pet_service import pet_exists

logger = logging.getLogger(__name__)

ACTIVE_SLOT_INDEX = "uq_appointments_active_slot"

UPDATABLE_FIELDS = frozenset({"pet_id", "service_type", "date", "time", "notes", "status"})


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _is_active_slot_violation(exc: IntegrityError) -> bool:
    # PostgreSQL names the index; SQLite reports the offending columns instead
    text = str(exc.orig)
    return ACTIVE_SLOT_INDEX in text or "appointments.date, appointments.time" in text


async def _flush_or_conflict(session: AsyncSession) -> None:
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        if _is_active_slot_violation(exc):
            logger.info("Active slot index rejected write: %s", exc.orig)
            raise Conflict() from exc
        raise


async def create(
    session: AsyncSession,
    *,
    pet_id: int,
    user_id: int,
    date: str,
    time: str,
    service_type: ServiceType = ServiceType.GENERAL_CHECKUP,
    notes: str = "",
) -> Appointment:
    if not await pet_exists(session, pet_id):
        raise NotFound("Pet not found")
    now = _utc_naive_now()
    appointment = Appointment(
        pet_id=pet_id,
        user_id=user_id,
        service_type=service_type,
        date=date,
        time=time,
        notes=notes,
        status=AppointmentStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    session.add(appointment)
    await _flush_or_conflict(session)
    await session.refresh(appointment)
    return appointment


async def find_by_id(session: AsyncSession, appointment_id: int) -> Appointment:
    appointment = await session.get(Appointment, appointment_id)
    if appointment is None:
        raise NotFound("Appointment not found")
    return appointment


async def find_by_user(session: AsyncSession, user_id: int) -> list[Appointment]:
    result = await session.execute(
        select(Appointment)
        .where(Appointment.user_id == user_id)
        .order_by(Appointment.date, Appointment.time)
    )
    return list(result.scalars().all())


async def find_conflicting(
    session: AsyncSession, date: str, time: str, exclude_id: int | None = None
) -> list[Appointment]:
    q = select(Appointment).where(
        Appointment.date == date,
        Appointment.time == time,
        Appointment.status != AppointmentStatus.CANCELLED,
    )
    if exclude_id is not None:
        q = q.where(Appointment.id != exclude_id)
    result = await session.execute(q)
    return list(result.scalars().all())


async def find_by_date_range(
    session: AsyncSession, start: date, end: date
) -> list[Appointment]:
    """Active appointments with start <= date <= end (ISO strings sort as dates)."""
    result = await session.execute(
        select(Appointment)
        .where(
            Appointment.date >= start.isoformat(),
            Appointment.date <= end.isoformat(),
            Appointment.status != AppointmentStatus.CANCELLED,
        )
        .order_by(Appointment.date, Appointment.time)
    )
    return list(result.scalars().all())


async def update(
    session: AsyncSession, appointment_id: int, fields: dict[str, Any]
) -> Appointment:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"cannot update appointment fields: {sorted(unknown)}")
    appointment = await find_by_id(session, appointment_id)
    for name, value in fields.items():
        setattr(appointment, name, value)
    appointment.updated_at = _utc_naive_now()
    session.add(appointment)
    await _flush_or_conflict(session)
    await session.refresh(appointment)
    return appointment


async def cancel(session: AsyncSession, appointment_id: int) -> Appointment:
    """Soft delete: the row stays, the slot is released."""
    return await update(session, appointment_id, {"status": AppointmentStatus.CANCELLED})


async def search(
    session: AsyncSession,
    *,
    status: AppointmentStatus | None = None,
    pet_id: int | None = None,
    date: str | None = None,
    service_type: ServiceType | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[tuple[Appointment, Pet | None, User | None]], int]:
    conditions = []
    if status is not None:
        conditions.append(Appointment.status == status)
    if pet_id is not None:
        conditions.append(Appointment.pet_id == pet_id)
    if date:
        conditions.append(Appointment.date == date)
    if service_type is not None:
        conditions.append(Appointment.service_type == service_type)
    if search:
        conditions.append(Pet.name.icontains(search, autoescape=True))

    total_q = (
        select(func.count(Appointment.id))
        .select_from(Appointment)
        .outerjoin(Pet, Pet.id == Appointment.pet_id)
        .where(*conditions)
    )
    total = (await session.execute(total_q)).scalar_one()

    rows_q = (
        select(Appointment, Pet, User)
        .outerjoin(Pet, Pet.id == Appointment.pet_id)
        .outerjoin(User, User.id == Appointment.user_id)
        .where(*conditions)
        .order_by(Appointment.date, Appointment.time, Appointment.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await session.execute(rows_q)
    return [(a, p, u) for a, p, u in result.all()], total
