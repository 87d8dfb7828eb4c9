"""
Tests for reservation documents and form validation.
"""

import random

import pendulum
import pytest
from pydantic import ValidationError

from supervitre.domain.reservation import Reservation
from supervitre.services.forms import ReservationRequest, generate_booking_reference

DOCUMENT = {
    "firstName": "Camille",
    "lastName": "Tremblay",
    "email": "camille.tremblay@example.com",
    "phone": "514-555-0134",
    "address": "1200 Rue Sherbrooke O",
    "city": "Montréal",
    "zipCode": "H3A 1H6",
    "propertyType": "residential",
    "windows": 12,
    "stories": "2",
    "includeInterior": True,
    "specialInstructions": "",
    "preferredContact": "email",
    "selectedDate": "2024-11-25",
    "selectedTime": "1:00 PM",
    "bookingReference": "SV1048213",
    "status": "confirmed",
    "submittedAt": "2024-11-12 18:04:51",
    "estimatedPriceRange": "$116 - $270",
    "specialInstructionsImageUrls": [],
    "locale": "fr",
}


class TestReservation:
    """Tests for the Reservation document mapping."""

    def test_from_document(self):
        reservation = Reservation.from_document(DOCUMENT, "abc123")

        assert reservation.id == "abc123"
        assert reservation.first_name == "Camille"
        assert reservation.zip_code == "H3A 1H6"
        assert reservation.windows == "12"
        assert reservation.status == "confirmed"
        assert reservation.date == pendulum.date(2024, 11, 25)
        assert reservation.start_hour == 13

    def test_as_booking(self):
        booking = Reservation.from_document(DOCUMENT).as_booking()

        assert booking.date == pendulum.date(2024, 11, 25)
        assert booking.start_hour == 13
        assert booking.reference == "SV1048213"
        assert booking.is_active

    def test_to_document_uses_stored_field_names(self):
        document = Reservation.from_document(DOCUMENT, "abc123").to_document()

        assert document["firstName"] == "Camille"
        assert document["selectedDate"] == "2024-11-25"
        assert document["selectedTime"] == "1:00 PM"
        assert document["bookingReference"] == "SV1048213"
        assert "id" not in document
        assert "specialInstructionsImageUrls" not in document

    def test_to_document_omits_missing_estimate(self):
        reservation = Reservation.from_document({"selectedDate": "2024-11-25", "selectedTime": "9:00 AM"})
        assert "estimatedPriceRange" not in reservation.to_document()

    def test_document_without_time_is_rejected(self):
        with pytest.raises(ValueError, match="selected_time"):
            Reservation.from_document({"selectedDate": "2024-11-25"})

    def test_bad_time_label_is_detected_on_use(self):
        reservation = Reservation.from_document({"selectedDate": "2024-11-25", "selectedTime": "soon"})
        with pytest.raises(ValueError):
            reservation.as_booking()


class TestReservationRequest:
    """Tests for form validation."""

    def _data(self, **overrides):
        data = dict(
            first_name="Olivier",
            last_name="Gagnon",
            email="olivier@example.com",
            phone="438-555-0190",
            address="45 Avenue Laurier E",
            city="Montréal",
            zip_code="H2T 1E9",
            selected_date="2024-11-26",
            selected_time="9:00 am",
        )
        data.update(overrides)
        return data

    def test_valid_request(self):
        request = ReservationRequest(**self._data())

        assert request.selected_time == "9:00 AM"
        assert request.start_hour == 9
        assert request.selected_date == pendulum.date(2024, 11, 26)
        assert request.windows == "10"
        assert request.include_interior is True

    @pytest.mark.parametrize("field", ["first_name", "phone", "zip_code", "stories"])
    def test_blank_required_field(self, field):
        with pytest.raises(ValidationError, match="Please fill in the"):
            ReservationRequest(**self._data(**{field: "   "}))

    def test_invalid_email(self):
        with pytest.raises(ValidationError, match="Invalid email"):
            ReservationRequest(**self._data(email="not-an-email"))

    def test_invalid_time(self):
        with pytest.raises(ValidationError):
            ReservationRequest(**self._data(selected_time="25:00"))

    def test_time_off_the_hour_is_rejected(self):
        with pytest.raises(ValidationError, match="start on the hour"):
            ReservationRequest(**self._data(selected_time="9:30 AM"))


class TestBookingReference:

    def test_format(self):
        reference = generate_booking_reference(random.Random(7))

        assert reference.startswith("SV")
        assert reference[2:].isdigit()
        assert 7 <= len(reference[2:]) <= 8

    def test_deterministic_with_seeded_rng(self):
        assert generate_booking_reference(random.Random(1)) == generate_booking_reference(random.Random(1))
