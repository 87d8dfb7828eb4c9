"""
Tests for domain models.
"""

import logging
from datetime import date, datetime

import pendulum
import pytest

from supervitre.domain.models import (
    Booking,
    BusinessHours,
    CalendarDay,
    HourRange,
    SlotAvailability,
    TimeSlot,
    as_date,
    format_hour_label,
    parse_hour_label,
    weekday_of,
)


class TestHourLabels:
    """Tests for 12-hour clock labels."""

    @pytest.mark.parametrize(
        "hour, label",
        [(0, "12:00 AM"), (9, "9:00 AM"), (11, "11:00 AM"), (12, "12:00 PM"), (16, "4:00 PM"), (23, "11:00 PM")],
    )
    def test_format_and_parse(self, hour, label):
        """Labels are formatted in 12-hour notation and parse back to the hour."""
        assert format_hour_label(hour) == label
        assert parse_hour_label(label) == hour

    def test_parse_is_lenient_about_case_and_spacing(self):
        assert parse_hour_label(" 1:00 pm ") == 13
        assert parse_hour_label("9:00AM") == 9

    @pytest.mark.parametrize("label", ["9:30 AM", "12:15 PM", "4:59 PM"])
    def test_parse_rejects_minutes_off_the_hour(self, label):
        """Slots are whole hours; "9:30 AM" must not quietly become 9:00."""
        with pytest.raises(ValueError, match="start on the hour"):
            parse_hour_label(label)

    @pytest.mark.parametrize("label", ["", "13:00 PM", "9 AM", "9:00", "0:00 AM", "nine"])
    def test_parse_rejects_malformed_labels(self, label):
        with pytest.raises(ValueError, match="Invalid time label"):
            parse_hour_label(label)

    def test_format_rejects_out_of_range_hour(self):
        with pytest.raises(ValueError):
            format_hour_label(24)


class TestDates:
    """Tests for date helpers."""

    def test_weekday_is_sunday_based(self):
        """Sunday=0 ... Saturday=6."""
        assert weekday_of(date(2024, 11, 24)) == 0  # Sunday
        assert weekday_of(date(2024, 11, 25)) == 1  # Monday
        assert weekday_of(date(2024, 11, 30)) == 6  # Saturday

    def test_as_date_drops_time_of_day(self):
        moment = pendulum.parse("2024-11-25 23:30", tz="America/Toronto")
        assert as_date(moment) == pendulum.date(2024, 11, 25)
        assert as_date(datetime(2024, 11, 25, 7)) == pendulum.date(2024, 11, 25)


class TestHourRange:
    """Tests for HourRange model."""

    def test_hours_are_inclusive(self):
        assert list(HourRange(9, 11).hours()) == [9, 10, 11]

    def test_single_hour_day(self):
        assert list(HourRange(10, 10).hours()) == [10]

    def test_open_after_close_raises_error(self):
        with pytest.raises(ValueError, match="must not be after close hour"):
            HourRange(open_hour=17, close_hour=9)

    @pytest.mark.parametrize("open_hour, close_hour", [(-1, 5), (9, 24), ("9", 16), (True, 5)])
    def test_invalid_hours_raise_error(self, open_hour, close_hour):
        with pytest.raises(ValueError):
            HourRange(open_hour=open_hour, close_hour=close_hour)


class TestBusinessHours:
    """Tests for BusinessHours rule set."""

    def test_default_rules(self):
        """Sunday closed, weekdays 9-16, Saturday 9-11."""
        hours = BusinessHours.default()

        assert hours.range_for(date(2024, 11, 24)) is None
        assert hours.range_for(date(2024, 11, 25)) == HourRange(9, 16)
        assert hours.range_for(date(2024, 11, 29)) == HourRange(9, 16)
        assert hours.range_for(date(2024, 11, 30)) == HourRange(9, 11)
        assert not hours.is_open(date(2024, 11, 24))
        assert hours.is_open(date(2024, 11, 25))

    def test_from_mapping_accepts_names_numbers_and_lists(self):
        hours = BusinessHours.from_mapping(
            {
                "Monday": {"open_hour": 8, "close_hour": 12},
                2: [10, 14],
                "3": {"open_hour": 9, "close_hour": 9},
                "sunday": None,
            }
        )

        assert hours.rules[1] == HourRange(8, 12)
        assert hours.rules[2] == HourRange(10, 14)
        assert hours.rules[3] == HourRange(9, 9)
        assert hours.rules[0] is None

    def test_missing_weekday_is_closed(self):
        hours = BusinessHours.from_mapping({"monday": [9, 16]})
        assert hours.range_for(date(2024, 11, 26)) is None  # Tuesday

    def test_malformed_entries_are_closed(self, caplog):
        """Bad configuration never raises; the day is treated as closed."""
        with caplog.at_level(logging.WARNING):
            hours = BusinessHours.from_mapping(
                {
                    "monday": {"open_hour": 16, "close_hour": 9},
                    "tuesday": "9-16",
                    "wednesday": {"open_hour": "nine", "close_hour": 16},
                    "thursday": [9],
                    "friday": {"open_hour": 9, "close_hour": 16},
                    "funday": [9, 16],
                }
            )

        assert hours.rules[1] is None
        assert hours.rules[2] is None
        assert hours.rules[3] is None
        assert hours.rules[4] is None
        assert hours.rules[5] == HourRange(9, 16)
        assert "funday" in caplog.text

    def test_non_mapping_configuration_closes_every_day(self):
        hours = BusinessHours.from_mapping(["monday"])
        assert hours.rules == {}

    def test_describe(self):
        lines = BusinessHours.default().describe()
        assert lines[0] == "Monday: 9:00 AM - 4:00 PM"
        assert lines[5] == "Saturday: 9:00 AM - 11:00 AM"
        assert lines[6] == "Sunday: closed"


class TestTimeSlot:
    """Tests for TimeSlot and related models."""

    def test_starts_at(self):
        slot = TimeSlot(date=pendulum.date(2024, 11, 25), start_hour=13, label="1:00 PM")
        starts_at = slot.starts_at("America/Toronto")

        assert starts_at == pendulum.datetime(2024, 11, 25, 13, tz="America/Toronto")

    def test_cancelled_booking_is_inactive(self):
        day = pendulum.date(2024, 11, 25)
        assert Booking(date=day, start_hour=9).is_active
        assert not Booking(date=day, start_hour=9, status="cancelled").is_active
        assert Booking(date=day, start_hour=13).label == "1:00 PM"

    def test_calendar_day_selectable(self):
        day = pendulum.date(2024, 11, 25)
        free = SlotAvailability(TimeSlot(day, 9, "9:00 AM"), available=True)
        taken = SlotAvailability(TimeSlot(day, 10, "10:00 AM"), available=False)

        assert CalendarDay(date=day, is_today=False, is_past=False, slots=[taken, free]).selectable
        assert not CalendarDay(date=day, is_today=False, is_past=False, slots=[taken]).selectable
        assert not CalendarDay(date=day, is_today=False, is_past=True, slots=[free]).selectable
        assert not CalendarDay(date=day, is_today=False, is_past=False, slots=[]).selectable

    def test_calendar_day_display(self):
        day = pendulum.date(2024, 11, 25)
        free = SlotAvailability(TimeSlot(day, 9, "9:00 AM"), available=True)
        taken = SlotAvailability(TimeSlot(day, 10, "10:00 AM"), available=False)

        calendar_day = CalendarDay(date=day, is_today=False, is_past=False, slots=[free, taken])

        assert calendar_day.available_labels() == ["9:00 AM"]
        assert calendar_day.format_display() == "Monday, 2024-11-25 | 1/2 slots free"
