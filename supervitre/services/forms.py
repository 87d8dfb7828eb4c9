"""
Validation of reservation form input.
"""

import random
from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator

from ..domain.models import format_hour_label, parse_hour_label

REFERENCE_PREFIX = "SV"


class ReservationRequest(BaseModel):
    """A customer's booking request as submitted from the reservation form."""
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    zip_code: str
    selected_date: date
    selected_time: str
    property_type: str = "residential"
    windows: str = "10"
    stories: str = "1"
    include_interior: bool = True
    special_instructions: str = ""
    preferred_contact: str = "email"
    locale: str = "fr"

    @field_validator(
        "first_name",
        "last_name",
        "email",
        "phone",
        "address",
        "city",
        "zip_code",
        "windows",
        "stories",
        "preferred_contact",
        mode="before",
    )
    @classmethod
    def validate_required(cls, value, info):
        """Required fields may not be blank."""
        text = "" if value is None else str(value).strip()
        if not text:
            field_name = info.field_name.replace("_", " ")
            raise ValueError(f"Please fill in the {field_name} field.")
        return text

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError(f"Invalid email address: {value}")
        return value.lower()

    @field_validator("selected_time")
    @classmethod
    def validate_selected_time(cls, value: str) -> str:
        """Normalise the label so "9:00 am" and "9:00 AM" compare equal."""
        return format_hour_label(parse_hour_label(value))

    @property
    def start_hour(self) -> int:
        return parse_hour_label(self.selected_time)


def generate_booking_reference(rng: Optional[random.Random] = None) -> str:
    """
    Generate a customer-facing booking reference such as ``SV0042137``.
    """
    rng = rng or random.Random()
    return f"{REFERENCE_PREFIX}{rng.randrange(100_000_000):07d}"
