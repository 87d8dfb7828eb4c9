"""
In-memory booking store for tests and offline runs.
"""

import json
import logging
import threading
from dataclasses import replace
from itertools import count
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from pendulum import Date

from ..domain.exceptions import ReservationNotFoundError, SlotUnavailableError
from ..domain.models import SERVICE_DURATION_HOURS, STATUS_CANCELLED, Booking, as_date
from ..domain.reservation import Reservation

logger = logging.getLogger(__name__)

DEFAULT_SEED_FILE = Path(__file__).parent / "mock_reservations.json"


class InMemoryBookingStore:
    """
    Store that keeps reservations in a dict.

    It mirrors the Firestore adapter's guarantees: every (date, hour) a
    reservation occupies is held by at most one active reservation, and the
    check-and-insert happens under a lock. Seeded data may already overlap;
    a shared hour stays held until every reservation on it is cancelled.
    """

    def __init__(
        self,
        reservations: Iterable[Reservation] = (),
        seed_file: Optional[Path] = None,
        service_duration_hours: int = SERVICE_DURATION_HOURS,
    ):
        """
        Initialize the store.

        Args:
            reservations: Reservations already on the books
            seed_file: Optional JSON file of stored reservation documents
            service_duration_hours: Hours a seeded reservation occupies
        """
        self.service_duration_hours = service_duration_hours
        self._lock = threading.Lock()
        self._ids = count(1)
        self._reservations: Dict[str, Reservation] = {}
        # (date, hour) -> ids of the active reservations occupying it
        self._held: Dict[Tuple[str, int], List[str]] = {}

        if seed_file is not None:
            for reservation in self._load_seed_file(seed_file):
                self._seed(reservation)

        for reservation in reservations:
            self._seed(reservation)

    def _load_seed_file(self, seed_file: Path) -> List[Reservation]:
        """Load stored reservation documents from a JSON list."""
        if not seed_file.exists():
            logger.warning("Seed file %s not found; starting empty", seed_file)
            return []

        with open(seed_file, "r", encoding="utf-8") as f:
            documents = json.load(f)

        reservations: List[Reservation] = []
        for document in documents:
            try:
                reservations.append(Reservation.from_document(document, document.get("id")))
            except ValueError as exc:
                logger.warning("Skipping invalid seed reservation: %s", exc)
        return reservations

    def _seed(self, reservation: Reservation) -> None:
        stored = replace(reservation, id=reservation.id or self._new_id())
        self._reservations[stored.id] = stored
        if stored.status == STATUS_CANCELLED:
            return
        try:
            start_hour = stored.start_hour
        except ValueError as exc:
            logger.warning("Seeded reservation %s has no usable time: %s", stored.id, exc)
            return
        overlapping = set()
        for hour in range(start_hour, start_hour + self.service_duration_hours):
            owners = self._held.setdefault((stored.selected_date, hour), [])
            overlapping.update(owners)
            owners.append(stored.id)
        if overlapping:
            logger.warning("Seeded reservation %s overlaps %s on %s", stored.id,
                           ", ".join(sorted(overlapping)), stored.selected_date)

    def _new_id(self) -> str:
        return f"mem-{next(self._ids)}"

    def list_bookings(self, start_date: Date, end_date: Date) -> List[Booking]:
        """Return active bookings within the inclusive date range, in time order."""
        start, end = as_date(start_date), as_date(end_date)
        bookings: List[Booking] = []

        with self._lock:
            reservations = list(self._reservations.values())

        for reservation in reservations:
            try:
                booking = reservation.as_booking()
            except ValueError as exc:
                logger.warning("Skipping reservation %s: %s", reservation.id, exc)
                continue
            if booking.is_active and start <= booking.date <= end:
                bookings.append(booking)

        return sorted(bookings, key=lambda b: (b.date, b.start_hour))

    def create_reservation(self, reservation: Reservation, occupied_hours: Iterable[int]) -> Reservation:
        """
        Insert a reservation if none of its hours are held.

        Raises:
            SlotUnavailableError: If another active reservation holds one of the hours
        """
        keys = [(reservation.selected_date, hour) for hour in occupied_hours]

        with self._lock:
            taken = [key for key in keys if self._held.get(key)]
            if taken:
                raise SlotUnavailableError(
                    reservation.selected_date,
                    reservation.selected_time,
                    reason=f"{len(taken)} hour(s) already booked",
                )

            stored = replace(reservation, id=reservation.id or self._new_id())
            self._reservations[stored.id] = stored
            for key in keys:
                self._held[key] = [stored.id]

        return stored

    def cancel_reservation(self, booking_reference: str) -> Reservation:
        """
        Mark a reservation cancelled and release its hours.

        Raises:
            ReservationNotFoundError: If no reservation has this reference
        """
        with self._lock:
            match = next(
                (r for r in self._reservations.values() if r.booking_reference == booking_reference),
                None,
            )
            if match is None:
                raise ReservationNotFoundError(f"No reservation with reference {booking_reference}")

            cancelled = replace(match, status=STATUS_CANCELLED)
            self._reservations[cancelled.id] = cancelled
            for key, owners in list(self._held.items()):
                if cancelled.id in owners:
                    owners.remove(cancelled.id)
                    if not owners:
                        del self._held[key]

        return cancelled

    def reservations(self) -> List[Reservation]:
        """Snapshot of every stored reservation, cancelled ones included."""
        with self._lock:
            return list(self._reservations.values())
