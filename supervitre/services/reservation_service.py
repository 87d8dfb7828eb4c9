"""
Application service for the reservation flow.

The service coordinates reading existing bookings through a store adapter,
delegates slot evaluation to the domain-level ``AvailabilityEngine`` and
writes new reservations. The store dependency is expressed as a protocol so
the Firestore adapter and the in-memory store are interchangeable.
"""

from __future__ import annotations

import logging
from datetime import date as _date
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Union

from pendulum import Date

from ..domain.availability import AvailabilityEngine
from ..domain.clock import Clock
from ..domain.exceptions import BookingFetchError, SlotUnavailableError
from ..domain.models import (
    STATUS_PENDING,
    Booking,
    CalendarDay,
    SlotAvailability,
    as_date,
    format_hour_label,
)
from ..domain.pricing import PriceEstimator, PriceRange
from ..domain.reservation import DATE_FORMAT, SUBMITTED_AT_FORMAT, Reservation
from .forms import ReservationRequest, generate_booking_reference

logger = logging.getLogger(__name__)

DEFAULT_VIEW_DAYS = 28


class BookingStoreProtocol(Protocol):
    """Protocol describing the booking persistence the service needs."""

    def list_bookings(self, start_date: Date, end_date: Date) -> List[Booking]:
        """Return active bookings whose date lies within the inclusive range."""

    def create_reservation(self, reservation: Reservation, occupied_hours: Iterable[int]) -> Reservation:
        """
        Store a reservation atomically.

        Must raise SlotUnavailableError if any (date, hour) in
        ``occupied_hours`` is already held by an active booking.
        """

    def cancel_reservation(self, booking_reference: str) -> Reservation:
        """Cancel a reservation and release the hours it held."""


class ReservationService:
    """
    Orchestrates booking retrieval, availability and reservation submission.
    """

    def __init__(
        self,
        store: BookingStoreProtocol,
        engine: AvailabilityEngine,
        clock: Clock,
        pricing: Optional[PriceEstimator] = None,
        view_days: int = DEFAULT_VIEW_DAYS,
        reference_factory: Callable[[], str] = generate_booking_reference,
    ) -> None:
        self._store = store
        self._engine = engine
        self._clock = clock
        self._pricing = pricing or PriceEstimator()
        self._view_days = view_days
        self._reference_factory = reference_factory

    def calendar_view(self, anchor: _date) -> List[CalendarDay]:
        """
        Build the calendar view containing ``anchor``.

        The view starts on the Monday of the anchor's week and spans the
        configured number of days.
        """
        anchor_day = as_date(anchor)
        view_start = anchor_day.subtract(days=anchor_day.isoweekday() - 1)
        view_end = view_start.add(days=self._view_days - 1)

        bookings = self.fetch_bookings(view_start, view_end)

        return self._engine.build_calendar(
            view_start=view_start,
            days=self._view_days,
            bookings=bookings,
            now=self._clock.now(),
        )

    def slots_for_date(self, selected_date: _date) -> List[SlotAvailability]:
        """Evaluate the slots of one day against freshly fetched bookings."""
        day = as_date(selected_date)
        bookings = self.fetch_bookings(day, day)
        return self._engine.availability_for_date(day, bookings, self._clock.now())

    def fetch_bookings(self, start_date: Date, end_date: Date) -> List[Booking]:
        """
        Fetch active bookings in a date range.

        Any store failure is surfaced as BookingFetchError; a failed read is
        never mistaken for an empty schedule.
        """
        try:
            bookings = self._store.list_bookings(start_date, end_date)
        except BookingFetchError:
            raise
        except Exception as exc:
            raise BookingFetchError(
                f"Could not load bookings between {start_date} and {end_date}: {exc}"
            ) from exc

        return [booking for booking in bookings if booking.is_active]

    def submit_reservation(self, request: ReservationRequest) -> Reservation:
        """
        Validate the chosen slot against the latest bookings and store it.

        Raises:
            SlotUnavailableError: The slot was taken or has passed since the
                customer loaded the calendar; ask them to pick another one.
            BookingFetchError: Existing bookings could not be read.
        """
        day = as_date(request.selected_date)
        date_str = day.format(DATE_FORMAT)
        start_hour = request.start_hour
        now = self._clock.now()

        # Re-check against a fresh snapshot right before writing.
        bookings_by_date = self._bookings_by_date(self.fetch_bookings(day, day))
        if not self._engine.slot_is_available(day, start_hour, bookings_by_date.get(day, []), now):
            logger.info("Rejected reservation for %s %s: slot unavailable", date_str, request.selected_time)
            raise SlotUnavailableError(date_str, request.selected_time)

        estimate = self._pricing.estimate(
            windows=request.windows,
            stories=request.stories,
            include_interior=request.include_interior,
        )

        reservation = Reservation(
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            phone=request.phone,
            address=request.address,
            city=request.city,
            zip_code=request.zip_code,
            property_type=request.property_type,
            windows=request.windows,
            stories=request.stories,
            include_interior=request.include_interior,
            special_instructions=request.special_instructions,
            preferred_contact=request.preferred_contact,
            selected_date=date_str,
            selected_time=format_hour_label(start_hour),
            booking_reference=self._reference_factory(),
            status=STATUS_PENDING,
            submitted_at=now.format(SUBMITTED_AT_FORMAT),
            estimated_price_range=str(estimate) if estimate else None,
            locale=request.locale,
        )

        stored = self._store.create_reservation(
            reservation,
            occupied_hours=self._engine.occupied_hours(start_hour),
        )
        logger.info(
            "Stored reservation %s for %s %s",
            stored.booking_reference,
            stored.selected_date,
            stored.selected_time,
        )
        return stored

    def cancel_reservation(self, booking_reference: str) -> Reservation:
        """Cancel a reservation so its slot becomes bookable again."""
        reservation = self._store.cancel_reservation(booking_reference)
        logger.info("Cancelled reservation %s", booking_reference)
        return reservation

    def estimate_price(
        self,
        windows: Union[int, str],
        stories: Union[int, str],
        include_interior: bool = True,
    ) -> Optional[PriceRange]:
        """Price bracket for the booking form, or None if it can't be priced."""
        return self._pricing.estimate(windows, stories, include_interior)

    @staticmethod
    def _bookings_by_date(bookings: Iterable[Booking]) -> Dict[Date, List[Booking]]:
        """
        Group bookings per calendar day.

        Stores may return more than asked for; only the bookings of a day are
        ever compared against that day's slots.
        """
        grouped: Dict[Date, List[Booking]] = {}
        for booking in bookings:
            grouped.setdefault(as_date(booking.date), []).append(booking)
        return grouped
