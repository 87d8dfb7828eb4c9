"""
Reservation documents as stored in the ``reservations`` collection.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import pendulum
from pendulum import Date

from .models import STATUS_PENDING, Booking, parse_hour_label

DATE_FORMAT = "YYYY-MM-DD"
SUBMITTED_AT_FORMAT = "YYYY-MM-DD HH:mm:ss"

# Python attribute -> stored document field
_DOCUMENT_FIELDS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "email": "email",
    "phone": "phone",
    "address": "address",
    "city": "city",
    "zip_code": "zipCode",
    "property_type": "propertyType",
    "windows": "windows",
    "stories": "stories",
    "include_interior": "includeInterior",
    "special_instructions": "specialInstructions",
    "preferred_contact": "preferredContact",
    "selected_date": "selectedDate",
    "selected_time": "selectedTime",
    "booking_reference": "bookingReference",
    "status": "status",
    "submitted_at": "submittedAt",
    "estimated_price_range": "estimatedPriceRange",
    "locale": "locale",
}


@dataclass
class Reservation:
    """
    A customer's reservation for a window cleaning appointment.

    ``selected_date`` is "YYYY-MM-DD" and ``selected_time`` a 12-hour label
    such as "9:00 AM", matching the stored documents.
    """
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    zip_code: str
    selected_date: str
    selected_time: str
    booking_reference: str
    property_type: str = "residential"
    windows: str = "10"
    stories: str = "1"
    include_interior: bool = True
    special_instructions: str = ""
    preferred_contact: str = "email"
    status: str = STATUS_PENDING
    submitted_at: str = ""
    estimated_price_range: Optional[str] = None
    locale: str = "fr"
    id: Optional[str] = None

    @property
    def date(self) -> Date:
        return pendulum.from_format(self.selected_date, DATE_FORMAT).date()

    @property
    def start_hour(self) -> int:
        return parse_hour_label(self.selected_time)

    def as_booking(self) -> Booking:
        """Reduce to the data conflict detection works with."""
        return Booking(
            date=self.date,
            start_hour=self.start_hour,
            reference=self.booking_reference,
            status=self.status,
        )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored document shape (camelCase keys, no id)."""
        values = asdict(self)
        document = {
            stored: values[attribute]
            for attribute, stored in _DOCUMENT_FIELDS.items()
        }
        if document["estimatedPriceRange"] is None:
            del document["estimatedPriceRange"]
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any], document_id: Optional[str] = None) -> "Reservation":
        """
        Build a reservation from a stored document.

        Raises:
            ValueError: If required fields are missing
        """
        values: Dict[str, Any] = {}
        for attribute, stored in _DOCUMENT_FIELDS.items():
            if stored in document and document[stored] is not None:
                values[attribute] = document[stored]

        missing = [
            attribute for attribute in ("selected_date", "selected_time")
            if attribute not in values
        ]
        if missing:
            raise ValueError(f"Reservation document is missing {', '.join(missing)}")

        for attribute in ("first_name", "last_name", "email", "phone", "address", "city",
                          "zip_code", "booking_reference"):
            values.setdefault(attribute, "")

        # Older documents stored counts as numbers
        for attribute in ("windows", "stories"):
            if attribute in values:
                values[attribute] = str(values[attribute])

        return cls(id=document_id, **values)
