from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from petadopt.models.appointment import Appointment, AppointmentStatus
from petadopt.services import appointment_store
from petadopt.services.slot_grid import horizon_dates, slot_labels, total_daily_capacity


@dataclass
class DayAvailability:
    date: date
    appointment_count: int
    total_slots: int
    available: bool


@dataclass
class HorizonAvailability:
    dates: list[DayAvailability]
    booked_slots: dict[str, list[str]] = field(default_factory=dict)


async def get_horizon_availability(
    session: AsyncSession, now: date | datetime
) -> HorizonAvailability:
    """Per-day booking counts for the horizon, plus the occupied labels per date.

    The label map also covers today, so same-day bookings show up in it even
    though today is not a bookable horizon date.
    """
    horizon = horizon_dates(now)
    today = horizon.first - timedelta(days=1)
    booked = await appointment_store.find_by_date_range(session, today, horizon.last)
    booked_slots: dict[str, list[str]] = {}
    for a in booked:
        booked_slots.setdefault(a.date, []).append(a.time)

    capacity = total_daily_capacity()
    dates: list[DayAvailability] = []
    for d in horizon:
        count = len(booked_slots.get(d.isoformat(), []))
        dates.append(
            DayAvailability(
                date=d,
                appointment_count=count,
                total_slots=capacity,
                available=count < capacity,
            )
        )
    return HorizonAvailability(dates=dates, booked_slots=booked_slots)


async def get_day_availability(
    session: AsyncSession, day: date, exclude_id: int | None = None
) -> list[str]:
    """Occupied slot labels on ``day`` in grid order.

    Pass ``exclude_id`` when editing an appointment so its own current slot
    shows up as free.
    """
    q = select(Appointment.time).where(
        Appointment.date == day.isoformat(),
        Appointment.status != AppointmentStatus.CANCELLED,
    )
    if exclude_id is not None:
        q = q.where(Appointment.id != exclude_id)
    result = await session.execute(q)
    taken = {row[0] for row in result.all()}
    ordered = [label for label in slot_labels() if label in taken]
    # labels outside the grid (legacy rows) still count as occupied
    ordered.extend(sorted(taken.difference(ordered)))
    return ordered


async def get_day_slots(
    session: AsyncSession, day: date, exclude_id: int | None = None
) -> list[tuple[str, bool]]:
    """Returns (label, available) for every slot on ``day``."""
    occupied = set(await get_day_availability(session, day, exclude_id=exclude_id))
    return [(label, label not in occupied) for label in slot_labels()]
