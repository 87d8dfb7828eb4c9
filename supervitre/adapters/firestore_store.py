"""
Cloud Firestore booking store.

Reservations live in the ``reservations`` collection. Every hour a reservation
occupies is claimed by a lock document keyed ``{date}_{hour}`` in a second
collection, so overlapping reservations cannot both be committed.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from pendulum import Date

from ..domain.exceptions import (
    BookingFetchError,
    BookingWriteError,
    ReservationNotFoundError,
    SlotUnavailableError,
)
from ..domain.models import STATUS_CANCELLED, Booking, as_date
from ..domain.reservation import DATE_FORMAT, Reservation

logger = logging.getLogger(__name__)


def create_firestore_client(
    credentials_path: Optional[Path] = None,
    project_id: Optional[str] = None,
):
    """
    Return a Firestore client, initializing the firebase-admin app once.

    Without a credentials file, Application Default Credentials are used.
    """
    try:
        app = firebase_admin.get_app()
    except ValueError:
        credential = credentials.Certificate(str(credentials_path)) if credentials_path else None
        options = {"projectId": project_id} if project_id else None
        app = firebase_admin.initialize_app(credential, options)
        logger.info("Firebase Admin SDK initialized (project %s)", project_id or "default")

    return firestore.client(app)


def lock_document_id(selected_date: str, hour: int) -> str:
    """Lock document id for one occupied hour, e.g. ``2024-11-25_09``."""
    return f"{selected_date}_{hour:02d}"


def booking_from_document(document: Dict[str, Any], document_id: str = "") -> Optional[Booking]:
    """
    Convert a stored reservation document into a Booking.

    Returns None (and logs) for documents without a usable date or time.
    """
    try:
        return Reservation.from_document(document, document_id).as_booking()
    except ValueError as exc:
        logger.warning("Skipping reservation %s: %s", document_id or "<unknown>", exc)
        return None


class FirestoreBookingStore:
    """
    Booking source and sink backed by Cloud Firestore.
    """

    def __init__(
        self,
        client,
        collection: str = "reservations",
        locks_collection: str = "slotLocks",
    ):
        self._client = client
        self.collection = collection
        self.locks_collection = locks_collection

    def list_bookings(self, start_date: Date, end_date: Date) -> List[Booking]:
        """
        Fetch active bookings whose ``selectedDate`` lies within the range.

        Raises:
            BookingFetchError: If Firestore cannot be queried
        """
        query = (
            self._client.collection(self.collection)
            .where("selectedDate", ">=", as_date(start_date).format(DATE_FORMAT))
            .where("selectedDate", "<=", as_date(end_date).format(DATE_FORMAT))
        )

        try:
            snapshots = list(query.stream())
        except google_exceptions.GoogleAPICallError as exc:
            raise BookingFetchError(f"Failed to fetch reservations from Firestore: {exc}") from exc

        bookings: List[Booking] = []
        for snapshot in snapshots:
            booking = booking_from_document(snapshot.to_dict() or {}, snapshot.id)
            if booking is not None and booking.is_active:
                bookings.append(booking)

        logger.debug("Fetched %d active bookings between %s and %s", len(bookings), start_date, end_date)
        return bookings

    def create_reservation(self, reservation: Reservation, occupied_hours: Iterable[int]) -> Reservation:
        """
        Write the reservation and claim its hours in a single transaction.

        Raises:
            SlotUnavailableError: If any of the hours is already claimed
            BookingWriteError: If the transaction fails
        """
        hours = list(occupied_hours)
        reservation_ref = self._client.collection(self.collection).document()
        lock_refs = [
            self._client.collection(self.locks_collection).document(
                lock_document_id(reservation.selected_date, hour)
            )
            for hour in hours
        ]
        client = self._client

        @firestore.transactional
        def _claim(transaction) -> bool:
            # All reads must happen before the first write.
            held = [
                snapshot.id
                for snapshot in client.get_all(lock_refs, transaction=transaction)
                if snapshot.exists
            ]
            if held:
                logger.info("Slot %s %s already claimed by %s", reservation.selected_date,
                            reservation.selected_time, ", ".join(sorted(held)))
                return False

            transaction.create(reservation_ref, reservation.to_document())
            for hour, lock_ref in zip(hours, lock_refs):
                transaction.create(
                    lock_ref,
                    {
                        "reservationId": reservation_ref.id,
                        "bookingReference": reservation.booking_reference,
                        "selectedDate": reservation.selected_date,
                        "hour": hour,
                        "createdAt": firestore.SERVER_TIMESTAMP,
                    },
                )
            return True

        try:
            committed = _claim(client.transaction())
        except google_exceptions.GoogleAPICallError as exc:
            raise BookingWriteError(f"Failed to store reservation: {exc}") from exc
        except ValueError as exc:
            # Raised by the transaction wrapper once its commit attempts run out.
            logger.warning("Gave up storing reservation %s: %s", reservation.booking_reference, exc)
            raise BookingWriteError(f"Failed to store reservation: {exc}") from exc

        if not committed:
            raise SlotUnavailableError(
                reservation.selected_date,
                reservation.selected_time,
                reason="claimed by another reservation",
            )

        return replace(reservation, id=reservation_ref.id)

    def cancel_reservation(self, booking_reference: str) -> Reservation:
        """
        Mark a reservation cancelled and delete its hour locks atomically.

        Raises:
            ReservationNotFoundError: If no reservation has this reference
        """
        reservations = self._client.collection(self.collection)
        locks = self._client.collection(self.locks_collection)

        try:
            matches = list(
                reservations.where("bookingReference", "==", booking_reference).limit(1).stream()
            )
        except google_exceptions.GoogleAPICallError as exc:
            raise BookingFetchError(f"Failed to look up reservation {booking_reference}: {exc}") from exc

        if not matches:
            raise ReservationNotFoundError(f"No reservation with reference {booking_reference}")

        snapshot = matches[0]
        reservation = Reservation.from_document(snapshot.to_dict() or {}, snapshot.id)
        if reservation.status == STATUS_CANCELLED:
            return reservation

        try:
            lock_snapshots = list(locks.where("reservationId", "==", snapshot.id).stream())
            batch = self._client.batch()
            batch.update(snapshot.reference, {"status": STATUS_CANCELLED})
            for lock_snapshot in lock_snapshots:
                batch.delete(lock_snapshot.reference)
            batch.commit()
        except google_exceptions.GoogleAPICallError as exc:
            raise BookingWriteError(f"Failed to cancel reservation {booking_reference}: {exc}") from exc

        return replace(reservation, status=STATUS_CANCELLED)
