from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from .models import Booking
from .overlap import bookings_overlap


def find_conflicts(
    candidate: Booking,
    existing: Iterable[Booking],
    ignore_booking_id: Optional[UUID] = None,
) -> List[Booking]:
    """Reservas ativas na mesma sala e data cujo horário cruza o do candidato."""
    return [
        booking
        for booking in existing
        if booking.id != candidate.id
        and booking.id != ignore_booking_id
        and booking.is_active
        and booking.room_id == candidate.room_id
        and booking.date == candidate.date
        and bookings_overlap(booking, candidate)
    ]


def has_conflict(
    candidate: Booking,
    existing: Iterable[Booking],
    ignore_booking_id: Optional[UUID] = None,
) -> bool:
    return bool(find_conflicts(candidate, existing, ignore_booking_id))


def find_plan_conflicts(rows: Sequence[Booking], existing: Sequence[Booking]) -> Dict[UUID, List[Booking]]:
    conflicts: Dict[UUID, List[Booking]] = {}
    for row in rows:
        found = find_conflicts(row, existing)
        if found:
            conflicts[row.id] = found
    return conflicts
