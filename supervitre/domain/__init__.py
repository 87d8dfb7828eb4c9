"""
Domain layer - Pure scheduling logic without external I/O.
"""

from .availability import AvailabilityEngine
from .clock import Clock, FixedClock, SystemClock
from .models import (
    SERVICE_DURATION_HOURS,
    Booking,
    BusinessHours,
    CalendarDay,
    HourRange,
    SlotAvailability,
    TimeSlot,
)
from .pricing import PriceEstimator, PriceRange, PricingRates
from .reservation import Reservation

__all__ = [
    "AvailabilityEngine",
    "Booking",
    "BusinessHours",
    "CalendarDay",
    "Clock",
    "FixedClock",
    "HourRange",
    "PriceEstimator",
    "PriceRange",
    "PricingRates",
    "Reservation",
    "SERVICE_DURATION_HOURS",
    "SlotAvailability",
    "SystemClock",
    "TimeSlot",
]
