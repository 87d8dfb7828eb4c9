"""
Adapters layer - Booking persistence (Cloud Firestore and in-memory).
"""

from .firestore_store import FirestoreBookingStore, create_firestore_client
from .memory_store import InMemoryBookingStore

__all__ = ["FirestoreBookingStore", "InMemoryBookingStore", "create_firestore_client"]
