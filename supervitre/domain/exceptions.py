"""
Domain-specific exception hierarchy for the reservation scheduling core.
"""


class ReservationError(Exception):
    """Base class for all application-level errors."""


class SlotUnavailableError(ReservationError):
    """
    Raised when a requested slot is no longer bookable.

    This is a recoverable validation failure: callers should ask the customer
    to pick another time rather than abort the session.
    """

    def __init__(self, selected_date: str, selected_time: str, reason: str = ""):
        self.selected_date = selected_date
        self.selected_time = selected_time
        self.reason = reason
        message = (
            f"The {selected_time} slot on {selected_date} is no longer available. "
            "Please choose another time."
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class BookingFetchError(ReservationError):
    """Raised when existing bookings cannot be read. Safe to retry."""


class BookingWriteError(ReservationError):
    """Raised when a reservation cannot be written to the store."""


class ReservationNotFoundError(ReservationError):
    """Raised when no reservation matches a booking reference."""
