from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from petadopt.api.deps import get_admin_user, get_current_user, get_now, get_session
from petadopt.api.schemas.appointment import (
    AppointmentListResponse,
    DayAvailabilityInfo,
    DayBookedSlotsResponse,
    HorizonSlotsResponse,
    StatusUpdateRequest,
)
from petadopt.core.exceptions import InvalidInput
from petadopt.models.appointment import AppointmentCreate, AppointmentPublic, AppointmentUpdate
from petadopt.models.user import User
from petadopt.services import appointment_service
from petadopt.services.slot_grid import parse_calendar_date
from petadopt.services.slot_service import get_day_availability, get_horizon_availability

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("/booked-slots", response_model=HorizonSlotsResponse | DayBookedSlotsResponse)
async def booked_slots(
    date_param: str | None = Query(None, alias="date"),
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(get_now),
) -> HorizonSlotsResponse | DayBookedSlotsResponse:
    """Occupied times for one date, or the whole 30-day horizon when no date is given."""
    if date_param:
        try:
            day = parse_calendar_date(date_param)
        except ValueError:
            raise InvalidInput("Invalid appointment date") from None
        times = await get_day_availability(session, day)
        return DayBookedSlotsResponse(date=day.isoformat(), booked_times=times)

    summary = await get_horizon_availability(session, now)
    return HorizonSlotsResponse(
        booked_slots=summary.booked_slots,
        dates=[
            DayAvailabilityInfo(
                date=d.date.isoformat(),
                appointment_count=d.appointment_count,
                total_slots=d.total_slots,
                available=d.available,
            )
            for d in summary.dates
        ],
    )


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: AppointmentCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    appointment = await appointment_service.book_appointment(session, current_user, body)
    return await appointment_service.describe(session, appointment)


@router.get("/user", response_model=list[AppointmentPublic])
async def list_my_appointments(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[AppointmentPublic]:
    return await appointment_service.list_user_appointments(session, current_user.id)


@router.get("", response_model=AppointmentListResponse)
async def list_all_appointments_admin(
    status_filter: str | None = Query(None, alias="status"),
    pet_id: int | None = Query(None),
    date_filter: str | None = Query(None, alias="date"),
    service_type: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    session: AsyncSession = Depends(get_session),
    _admin: User = Depends(get_admin_user),
) -> AppointmentListResponse:
    result = await appointment_service.list_appointments(
        session,
        status=status_filter,
        pet_id=pet_id,
        date=date_filter,
        service_type=service_type,
        search=search,
        page=page,
        limit=limit,
    )
    return AppointmentListResponse(
        count=len(result.appointments),
        total=result.total,
        total_pages=result.total_pages,
        current_page=result.current_page,
        appointments=result.appointments,
    )


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def get_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    appointment = await appointment_service.get_appointment(session, appointment_id, current_user)
    return await appointment_service.describe(session, appointment)


@router.put("/{appointment_id}", response_model=AppointmentPublic)
async def update_appointment(
    appointment_id: int,
    body: AppointmentUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    appointment = await appointment_service.amend_appointment(
        session, appointment_id, current_user, body
    )
    return await appointment_service.describe(session, appointment)


@router.patch("/{appointment_id}/status", response_model=AppointmentPublic)
async def update_appointment_status(
    appointment_id: int,
    body: StatusUpdateRequest,
    session: AsyncSession = Depends(get_session),
    _admin: User = Depends(get_admin_user),
) -> AppointmentPublic:
    appointment = await appointment_service.change_status(session, appointment_id, body.status)
    return await appointment_service.describe(session, appointment)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> None:
    await appointment_service.cancel_appointment(session, appointment_id, current_user)
