"""
Core business logic for calculating bookable appointment slots.

Pure domain logic without any external dependencies (no database, no I/O,
no implicit system clock): the current time is always passed in.
"""

from collections import defaultdict
from datetime import date as _date
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

import pendulum
from pendulum import Date, DateTime

from .models import (
    SERVICE_DURATION_HOURS,
    Booking,
    BusinessHours,
    CalendarDay,
    SlotAvailability,
    TimeSlot,
    as_date,
    format_hour_label,
)


class AvailabilityEngine:
    """
    Derives bookable time slots per day and flags the ones that cannot be taken.

    Algorithm:
    1. Look up the business hours for the weekday of the date
    2. Emit one slot per hour from opening through closing hour
    3. Mark a slot unavailable if a booking's service window overlaps its own
    4. Mark a slot unavailable if it has already started
    """

    def __init__(
        self,
        business_hours: BusinessHours,
        service_duration_hours: int = SERVICE_DURATION_HOURS,
        timezone: str = "America/Toronto",
    ):
        if service_duration_hours < 1:
            raise ValueError(
                f"Service duration must be at least one hour, got {service_duration_hours}"
            )
        self.business_hours = business_hours
        self.service_duration_hours = service_duration_hours
        self.timezone = timezone

    def generate_slots_for_date(self, date: _date) -> List[TimeSlot]:
        """
        Generate the candidate slots of a day in ascending hour order.

        Closed days yield an empty list.
        """
        day = as_date(date)
        hour_range = self.business_hours.range_for(day)

        if hour_range is None:
            return []

        return [
            TimeSlot(date=day, start_hour=hour, label=format_hour_label(hour))
            for hour in hour_range.hours()
        ]

    def compute_availability(
        self,
        date: _date,
        candidate_slots: Sequence[TimeSlot],
        bookings_for_date: Iterable[Booking],
        now: datetime,
    ) -> List[SlotAvailability]:
        """
        Flag every candidate slot as available or not.

        Args:
            date: Day the slots belong to
            candidate_slots: Slots from ``generate_slots_for_date``
            bookings_for_date: Existing bookings on that same day
            now: Current time

        Returns:
            One SlotAvailability per candidate slot, in input order
        """
        day = as_date(date)
        current = self._localize(now)
        booked_hours = [
            booking.start_hour for booking in bookings_for_date if booking.is_active
        ]

        return [
            SlotAvailability(
                slot=slot,
                available=(
                    not self._conflicts(slot.start_hour, booked_hours)
                    and not self._has_started(slot, day, current)
                ),
            )
            for slot in candidate_slots
        ]

    def availability_for_date(
        self,
        date: _date,
        bookings_for_date: Iterable[Booking],
        now: datetime,
    ) -> List[SlotAvailability]:
        """Generate and evaluate the slots of a day in one call."""
        return self.compute_availability(
            date,
            self.generate_slots_for_date(date),
            bookings_for_date,
            now,
        )

    def is_date_selectable(
        self,
        date: _date,
        bookings_for_date: Iterable[Booking],
        now: datetime,
    ) -> bool:
        """
        A date can be picked if it is not before today and has a free slot.
        """
        day = as_date(date)
        if day < self._today(now):
            return False

        return any(
            slot.available
            for slot in self.availability_for_date(day, bookings_for_date, now)
        )

    def slot_is_available(
        self,
        date: _date,
        start_hour: int,
        bookings_for_date: Iterable[Booking],
        now: datetime,
    ) -> bool:
        """
        Check a single start hour, e.g. right before committing a booking.

        Hours outside the day's business hours are never available.
        """
        for slot in self.availability_for_date(date, bookings_for_date, now):
            if slot.start_hour == start_hour:
                return slot.available
        return False

    def occupied_hours(self, start_hour: int) -> range:
        """
        Hours a booking starting at ``start_hour`` keeps busy.

        Two bookings overlap exactly when their occupied hours intersect.
        """
        return range(start_hour, start_hour + self.service_duration_hours)

    def build_calendar(
        self,
        view_start: _date,
        days: int,
        bookings: Iterable[Booking],
        now: datetime,
    ) -> List[CalendarDay]:
        """
        Build a consecutive run of calendar days starting at ``view_start``.

        ``bookings`` may span the whole view; they are split per day here.
        """
        start = as_date(view_start)
        today = self._today(now)
        by_date = self._group_by_date(bookings)

        calendar: List[CalendarDay] = []
        for offset in range(days):
            day = start.add(days=offset)
            calendar.append(
                CalendarDay(
                    date=day,
                    is_today=day == today,
                    is_past=day < today,
                    slots=self.availability_for_date(day, by_date.get(day, []), now),
                )
            )
        return calendar

    def _conflicts(self, slot_hour: int, booked_hours: Iterable[int]) -> bool:
        duration = self.service_duration_hours
        for booked_hour in booked_hours:
            if slot_hour < booked_hour + duration and slot_hour + duration > booked_hour:
                return True
        return False

    def _has_started(self, slot: TimeSlot, day: Date, now: DateTime) -> bool:
        # The date argument wins over whatever date the candidate slot carries.
        return TimeSlot(day, slot.start_hour, slot.label).starts_at(self.timezone) <= now

    def _localize(self, moment: datetime) -> DateTime:
        # Naive datetimes are read as business-local wall time.
        return pendulum.instance(moment, tz=self.timezone).in_timezone(self.timezone)

    def _today(self, now: datetime) -> Date:
        return as_date(self._localize(now))

    @staticmethod
    def _group_by_date(bookings: Iterable[Booking]) -> Dict[Date, List[Booking]]:
        grouped: Dict[Date, List[Booking]] = defaultdict(list)
        for booking in bookings:
            grouped[as_date(booking.date)].append(booking)
        return grouped
