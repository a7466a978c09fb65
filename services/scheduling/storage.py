"""Contrato do colaborador de persistência e uma implementação em memória.

Escritas concorrentes no mesmo ``booking_group_id`` devem ser serializadas
pela implementação real; o engine não arbitra isso.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol
from uuid import UUID

from .models import Booking


class BookingStore(Protocol):
    def get(self, booking_id: UUID) -> Optional[Booking]:
        ...

    def list_group(self, group_id: UUID) -> List[Booking]:
        ...

    def list_day(self, day: date, room_id: Optional[UUID] = None) -> List[Booking]:
        ...

    def add_many(self, rows: Iterable[Booking]) -> List[Booking]:
        ...

    def update_many(self, rows: Iterable[Booking]) -> List[Booking]:
        ...


class InMemoryBookingStore:
    def __init__(self, bookings: Iterable[Booking] = ()):
        self._bookings: Dict[UUID, Booking] = {b.id: b for b in bookings}

    def all(self) -> List[Booking]:
        return list(self._bookings.values())

    def get(self, booking_id: UUID) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def list_group(self, group_id: UUID) -> List[Booking]:
        return [b for b in self._bookings.values() if b.booking_group_id == group_id]

    def list_day(self, day: date, room_id: Optional[UUID] = None) -> List[Booking]:
        return [
            b for b in self._bookings.values()
            if b.date == day and (room_id is None or b.room_id == room_id)
        ]

    def add_many(self, rows: Iterable[Booking]) -> List[Booking]:
        added = []
        for row in rows:
            if row.id in self._bookings:
                raise ValueError(f"Booking {row.id} already exists")
            self._bookings[row.id] = row
            added.append(row)
        return added

    def update_many(self, rows: Iterable[Booking]) -> List[Booking]:
        updated = []
        for row in rows:
            if row.id not in self._bookings:
                raise LookupError(f"Booking {row.id} not found")
            self._bookings[row.id] = row
            updated.append(row)
        return updated
