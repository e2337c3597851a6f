from fastapi import status

SLOT_TAKEN_MESSAGE = "This time slot is already booked. Please select another time."


class AppointmentError(Exception):
    """Base exception for scheduling failures; carries the HTTP status to surface."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(AppointmentError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(AppointmentError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(AppointmentError):
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(AppointmentError):
    """Raised when a (date, time) slot is already held by an active appointment."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = SLOT_TAKEN_MESSAGE):
        super().__init__(message)
