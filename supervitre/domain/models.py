"""
Domain models for business hours, time slots and bookings.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date as _date
from typing import Any, Dict, List, Mapping, Optional

import pendulum
from pendulum import Date, DateTime

logger = logging.getLogger(__name__)

SERVICE_DURATION_HOURS = 4

# Sunday=0 ... Saturday=6
WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"

_LABEL_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


def as_date(value: _date) -> Date:
    """
    Reduce a date or datetime to its calendar day.

    The time of day (and timezone) of a datetime is ignored, only the
    calendar identity matters.
    """
    return pendulum.date(value.year, value.month, value.day)


def weekday_of(value: _date) -> int:
    """Return the weekday of a date with Sunday=0 ... Saturday=6."""
    return value.isoweekday() % 7


def format_hour_label(hour: int) -> str:
    """
    Format an hour of the day in 12-hour clock notation.

    Example: 9 -> "9:00 AM", 12 -> "12:00 PM", 16 -> "4:00 PM"
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour must be between 0 and 23, got {hour}")
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:00 {suffix}"


def parse_hour_label(label: str) -> int:
    """
    Parse a 12-hour clock label ("1:00 PM") back into an hour of the day.

    Slots start on the hour, so the minutes must be "00".

    Raises:
        ValueError: If the label is not in "h:00 AM/PM" form
    """
    match = _LABEL_PATTERN.match(label or "")
    if not match:
        raise ValueError(f"Invalid time label: {label!r}")

    hour, minute, suffix = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hour <= 12 or not 0 <= minute <= 59:
        raise ValueError(f"Invalid time label: {label!r}")
    if minute != 0:
        raise ValueError(f"Invalid time label: {label!r} (slots start on the hour)")

    hour = hour % 12
    if suffix == "PM":
        hour += 12
    return hour


@dataclass(frozen=True)
class HourRange:
    """
    Opening hours of a single day, both ends inclusive.

    Invariant: 0 <= open_hour <= close_hour <= 23.
    """
    open_hour: int
    close_hour: int

    def __post_init__(self):
        for value in (self.open_hour, self.close_hour):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Hours must be integers, got {value!r}")
            if not 0 <= value <= 23:
                raise ValueError(f"Hour must be between 0 and 23, got {value}")
        if self.open_hour > self.close_hour:
            raise ValueError(
                f"Open hour {self.open_hour} must not be after close hour {self.close_hour}"
            )

    def hours(self) -> range:
        """Every bookable start hour, open through close."""
        return range(self.open_hour, self.close_hour + 1)


@dataclass
class BusinessHours:
    """
    Business hours rule set: weekday (Sunday=0) -> optional HourRange.

    A weekday that is absent or mapped to None is closed.
    """
    rules: Dict[int, Optional[HourRange]] = field(default_factory=dict)

    def range_for(self, day: _date) -> Optional[HourRange]:
        """Get the opening hours for the weekday of a date, or None if closed."""
        return self.rules.get(weekday_of(day))

    def is_open(self, day: _date) -> bool:
        """Check if the business takes appointments on a given date."""
        return self.range_for(day) is not None

    @classmethod
    def default(cls) -> "BusinessHours":
        """Sunday closed, weekdays 9 AM - 4 PM, Saturday 9 AM - 11 AM."""
        weekday = HourRange(open_hour=9, close_hour=16)
        return cls(
            rules={
                0: None,
                1: weekday,
                2: weekday,
                3: weekday,
                4: weekday,
                5: weekday,
                6: HourRange(open_hour=9, close_hour=11),
            }
        )

    @classmethod
    def from_mapping(cls, raw: Any) -> "BusinessHours":
        """
        Build a rule set from loosely typed configuration data.

        Keys may be weekday numbers (Sunday=0), numeric strings or weekday
        names. Values may be None, a mapping with ``open_hour``/``close_hour``
        or a two-item ``[open, close]`` list. Anything malformed is logged and
        the weekday is treated as closed.
        """
        rules: Dict[int, Optional[HourRange]] = {}

        if not isinstance(raw, Mapping):
            logger.warning("Business hours configuration is not a mapping (%r); all days closed", raw)
            return cls(rules=rules)

        for key, value in raw.items():
            weekday = _parse_weekday_key(key)
            if weekday is None:
                logger.warning("Ignoring business hours for unknown weekday %r", key)
                continue
            rules[weekday] = _parse_hour_range(WEEKDAY_NAMES[weekday], value)

        return cls(rules=rules)

    def describe(self) -> List[str]:
        """Human readable summary, one line per weekday starting Monday."""
        lines: List[str] = []
        for weekday in (1, 2, 3, 4, 5, 6, 0):
            hour_range = self.rules.get(weekday)
            name = WEEKDAY_NAMES[weekday].capitalize()
            if hour_range is None:
                lines.append(f"{name}: closed")
            else:
                lines.append(
                    f"{name}: {format_hour_label(hour_range.open_hour)}"
                    f" - {format_hour_label(hour_range.close_hour)}"
                )
        return lines


def _parse_weekday_key(key: Any) -> Optional[int]:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key if 0 <= key <= 6 else None
    if isinstance(key, str):
        text = key.strip().lower()
        if text.isdigit():
            number = int(text)
            return number if 0 <= number <= 6 else None
        if text in WEEKDAY_NAMES:
            return WEEKDAY_NAMES.index(text)
    return None


def _parse_hour_range(weekday_name: str, value: Any) -> Optional[HourRange]:
    if value is None:
        return None

    if isinstance(value, Mapping):
        open_hour = value.get("open_hour")
        close_hour = value.get("close_hour")
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        open_hour, close_hour = value
    else:
        logger.warning("Malformed business hours for %s (%r); treating as closed", weekday_name, value)
        return None

    try:
        return HourRange(open_hour=open_hour, close_hour=close_hour)
    except ValueError as exc:
        logger.warning("Invalid business hours for %s: %s; treating as closed", weekday_name, exc)
        return None


@dataclass(frozen=True)
class TimeSlot:
    """
    One bookable hour-start on a given day.
    """
    date: Date
    start_hour: int
    label: str

    def starts_at(self, timezone: str) -> DateTime:
        """The instant the slot begins, in the business timezone."""
        return pendulum.datetime(
            self.date.year,
            self.date.month,
            self.date.day,
            self.start_hour,
            tz=timezone,
        )


@dataclass(frozen=True)
class SlotAvailability:
    """
    A candidate slot together with its computed availability.
    """
    slot: TimeSlot
    available: bool

    @property
    def label(self) -> str:
        return self.slot.label

    @property
    def start_hour(self) -> int:
        return self.slot.start_hour


@dataclass(frozen=True)
class Booking:
    """
    An existing reservation, reduced to what conflict detection needs.
    """
    date: Date
    start_hour: int
    reference: str = ""
    status: str = STATUS_PENDING

    @property
    def is_active(self) -> bool:
        """Cancelled bookings no longer occupy the schedule."""
        return self.status != STATUS_CANCELLED

    @property
    def label(self) -> str:
        return format_hour_label(self.start_hour)


@dataclass
class CalendarDay:
    """
    One day of the reservation calendar view.
    """
    date: Date
    is_today: bool
    is_past: bool
    slots: List[SlotAvailability]

    @property
    def has_available_slot(self) -> bool:
        return any(slot.available for slot in self.slots)

    @property
    def selectable(self) -> bool:
        """Past days and days without a free slot cannot be picked."""
        return not self.is_past and self.has_available_slot

    def available_labels(self) -> List[str]:
        return [slot.label for slot in self.slots if slot.available]

    def format_display(self) -> str:
        """
        Format the day for display.
        Format: Weekday, YYYY-MM-DD | n/m slots free
        """
        weekday = WEEKDAY_NAMES[weekday_of(self.date)].capitalize()
        free = len(self.available_labels())
        if not self.slots:
            return f"{weekday}, {self.date.to_date_string()} | closed"
        return f"{weekday}, {self.date.to_date_string()} | {free}/{len(self.slots)} slots free"
