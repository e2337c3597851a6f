from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from petadopt.api.deps import get_session
from petadopt.api.schemas.appointment import AvailableSlotsResponse, SlotInfo
from petadopt.services.slot_service import get_day_slots

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=AvailableSlotsResponse)
async def available_slots(
    date_param: date = Query(..., alias="date"),
    exclude_appointment_id: int | None = Query(None),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlotsResponse:
    """Every slot on the given date with an available flag. Pass
    exclude_appointment_id while editing so the appointment's own slot reads as free."""
    slots = await get_day_slots(session, date_param, exclude_id=exclude_appointment_id)
    return AvailableSlotsResponse(
        date=date_param.isoformat(),
        slots=[SlotInfo(time=label, available=avail) for label, avail in slots],
    )
