"""Booking, amendment and status changes for vet appointments.

Each function validates and authorizes before it writes, and writes through
``appointment_store`` so the active-slot unique index backs up the
application-level conflict check.
"""
import logging
import math
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from petadopt.core.config import settings
from petadopt.core.exceptions import Conflict, Forbidden, InvalidInput, NotFound
from petadopt.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
    OwnerSummary,
    PetSummary,
    ServiceType,
)
from petadopt.models.pet import Pet
from petadopt.models.user import User
from petadopt.services import appointment_store
from petadopt.services.pet_service import get_pets_by_ids, pet_exists
from petadopt.services.slot_grid import is_slot_label, parse_calendar_date

logger = logging.getLogger(__name__)


def parse_service_type(value: str) -> ServiceType:
    try:
        return ServiceType(value)
    except ValueError:
        raise InvalidInput("Invalid service type") from None


def parse_status(value: str | None) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise InvalidInput("Invalid status value") from None


def _check_date(value: str) -> str:
    try:
        return parse_calendar_date(value).isoformat()
    except ValueError:
        raise InvalidInput("Invalid appointment date") from None


def _check_time(value: str) -> str:
    if not is_slot_label(value):
        raise InvalidInput("Invalid appointment time")
    return value


def _can_manage(appointment: Appointment, caller: User) -> bool:
    return appointment.user_id == caller.id or caller.is_admin


def to_public(
    appointment: Appointment, pet: Pet | None = None, user: User | None = None
) -> AppointmentPublic:
    return AppointmentPublic(
        id=appointment.id,
        pet_id=appointment.pet_id,
        user_id=appointment.user_id,
        service_type=appointment.service_type,
        date=appointment.date,
        time=appointment.time,
        notes=appointment.notes or "",
        status=appointment.status,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
        pet=PetSummary.model_validate(pet, from_attributes=True) if pet else None,
        user=OwnerSummary.model_validate(user, from_attributes=True) if user else None,
    )


async def describe(session: AsyncSession, appointment: Appointment) -> AppointmentPublic:
    """Public shape with pet and owner summaries loaded."""
    pet = await session.get(Pet, appointment.pet_id)
    user = await session.get(User, appointment.user_id)
    return to_public(appointment, pet, user)


async def book_appointment(
    session: AsyncSession, caller: User, data: AppointmentCreate
) -> Appointment:
    if data.pet_id is None or not await pet_exists(session, data.pet_id):
        raise NotFound("Pet not found")
    if not data.date or not data.time:
        raise InvalidInput("Please provide appointment date and time")
    service_type = (
        parse_service_type(data.service_type) if data.service_type else ServiceType.GENERAL_CHECKUP
    )
    day = _check_date(data.date)
    time = _check_time(data.time)

    if await appointment_store.find_conflicting(session, day, time):
        logger.info("Booking rejected, slot %s %s already taken (user_id=%s)", day, time, caller.id)
        raise Conflict()

    # the unique index turns a lost race between the check above and this insert into Conflict
    appointment = await appointment_store.create(
        session,
        pet_id=data.pet_id,
        user_id=caller.id,
        service_type=service_type,
        date=day,
        time=time,
        notes=data.notes or "",
    )
    logger.info(
        "Appointment %s booked: %s %s %s for pet %s by user %s",
        appointment.id, appointment.service_type.value, day, time, data.pet_id, caller.id,
    )
    return appointment


async def amend_appointment(
    session: AsyncSession, appointment_id: int, caller: User, data: AppointmentUpdate
) -> Appointment:
    """Apply the fields present in ``data``; status is left alone.

    The slot check runs only when the effective (date, time) moves, and skips
    this appointment so re-selecting its own slot never conflicts.
    """
    appointment = await appointment_store.find_by_id(session, appointment_id)
    if not _can_manage(appointment, caller):
        raise Forbidden("Not authorized to update this appointment")

    provided = data.model_dump(exclude_unset=True)
    changes: dict = {}

    if provided.get("service_type"):
        changes["service_type"] = parse_service_type(provided["service_type"])

    new_date = _check_date(provided["date"]) if provided.get("date") else appointment.date
    new_time = _check_time(provided["time"]) if provided.get("time") else appointment.time
    if (new_date, new_time) != (appointment.date, appointment.time):
        if await appointment_store.find_conflicting(
            session, new_date, new_time, exclude_id=appointment.id
        ):
            logger.info(
                "Reschedule of appointment %s rejected, slot %s %s already taken",
                appointment.id, new_date, new_time,
            )
            raise Conflict()
        changes["date"] = new_date
        changes["time"] = new_time

    if provided.get("pet_id") is not None:
        if not await pet_exists(session, provided["pet_id"]):
            raise NotFound("Pet not found")
        changes["pet_id"] = provided["pet_id"]

    if provided.get("notes") is not None:
        changes["notes"] = provided["notes"]

    if not changes:
        return appointment
    updated = await appointment_store.update(session, appointment.id, changes)
    logger.info("Appointment %s amended by user %s: %s", updated.id, caller.id, sorted(changes))
    return updated


async def change_status(
    session: AsyncSession, appointment_id: int, status: str | None
) -> Appointment:
    """Admin status transition. Cancelled is terminal."""
    target = parse_status(status)
    appointment = await appointment_store.find_by_id(session, appointment_id)
    if appointment.status == target:
        return appointment
    if appointment.status == AppointmentStatus.CANCELLED:
        raise InvalidInput("Cancelled appointments cannot be reopened")
    updated = await appointment_store.update(session, appointment.id, {"status": target})
    logger.info("Appointment %s status -> %s", updated.id, target.value)
    return updated


async def cancel_appointment(
    session: AsyncSession, appointment_id: int, caller: User
) -> Appointment:
    appointment = await appointment_store.find_by_id(session, appointment_id)
    if not _can_manage(appointment, caller):
        raise Forbidden("Not authorized to cancel this appointment")
    if appointment.status == AppointmentStatus.CANCELLED:
        return appointment
    cancelled = await appointment_store.cancel(session, appointment.id)
    logger.info(
        "Appointment %s cancelled by user %s, slot %s %s released",
        cancelled.id, caller.id, cancelled.date, cancelled.time,
    )
    return cancelled


async def get_appointment(
    session: AsyncSession, appointment_id: int, caller: User
) -> Appointment:
    appointment = await appointment_store.find_by_id(session, appointment_id)
    if not _can_manage(appointment, caller):
        raise Forbidden("Not authorized to access this appointment")
    return appointment


async def list_user_appointments(session: AsyncSession, user_id: int) -> list[AppointmentPublic]:
    appointments = await appointment_store.find_by_user(session, user_id)
    pets = await get_pets_by_ids(session, {a.pet_id for a in appointments})
    return [to_public(a, pets.get(a.pet_id)) for a in appointments]


@dataclass
class AppointmentPage:
    appointments: list[AppointmentPublic]
    total: int
    total_pages: int
    current_page: int


async def list_appointments(
    session: AsyncSession,
    *,
    status: str | None = None,
    pet_id: int | None = None,
    date: str | None = None,
    service_type: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> AppointmentPage:
    """Admin listing, sorted by date then time."""
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    page = max(page, 1)
    rows, total = await appointment_store.search(
        session,
        status=parse_status(status) if status else None,
        pet_id=pet_id,
        date=date,
        service_type=parse_service_type(service_type) if service_type else None,
        search=search,
        page=page,
        limit=limit,
    )
    return AppointmentPage(
        appointments=[to_public(a, p, u) for a, p, u in rows],
        total=total,
        total_pages=math.ceil(total / limit),
        current_page=page,
    )
