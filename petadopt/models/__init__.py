from petadopt.models.user import User
from petadopt.models.pet import Pet
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

__all__ = [
    "User",
    "Pet",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
    "AppointmentUpdate",
    "OwnerSummary",
    "PetSummary",
    "ServiceType",
]
