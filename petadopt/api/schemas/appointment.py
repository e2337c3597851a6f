from pydantic import BaseModel

from petadopt.models.appointment import AppointmentPublic


class StatusUpdateRequest(BaseModel):
    status: str | None = None


class AppointmentListResponse(BaseModel):
    count: int
    total: int
    total_pages: int
    current_page: int
    appointments: list[AppointmentPublic]


class DayAvailabilityInfo(BaseModel):
    date: str  # YYYY-MM-DD
    appointment_count: int
    total_slots: int
    available: bool


class HorizonSlotsResponse(BaseModel):
    booked_slots: dict[str, list[str]]  # YYYY-MM-DD -> ["09:00", ...]
    dates: list[DayAvailabilityInfo]


class DayBookedSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    booked_times: list[str]


class SlotInfo(BaseModel):
    time: str
    available: bool


class AvailableSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    slots: list[SlotInfo]
