"""
Service layer helpers that orchestrate store adapters and domain logic.
"""

from .forms import ReservationRequest, generate_booking_reference
from .reservation_service import BookingStoreProtocol, ReservationService

__all__ = [
    "BookingStoreProtocol",
    "ReservationRequest",
    "ReservationService",
    "generate_booking_reference",
]
