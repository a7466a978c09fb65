"""Extensão de séries recorrentes.

Calcula somente as ocorrências que faltam entre a última data já presente
no grupo e a nova data final, sem recalcular nem duplicar as existentes.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Iterator, List, Sequence
from uuid import UUID, uuid4

import structlog

from .dates import normalize_date
from .models import Booking, BookingStatus
from .recurring import next_occurrence, validate_recurrence_rule
from .series import find_parent

logger = structlog.get_logger(__name__)


def _iter_additional(members: Sequence[Booking], new_end_date: Any) -> Iterator[date]:
    parent = find_parent(members)
    if parent is None:
        return
    rule = parent.recurrence_rule()
    if rule is None:
        logger.info("series_extension_skipped", reason="not_recurring", booking_id=str(parent.id))
        return
    validate_recurrence_rule(rule)

    until = normalize_date(new_end_date)
    existing = {b.date for b in members}
    # A última data vem dos membros, não de recurrence_end_date
    current = max(existing)
    while True:
        current = next_occurrence(current, rule, anchor=parent.date)
        if current > until:
            return
        if current not in existing:
            yield current


def additional_dates(members: Sequence[Booking], new_end_date: Any) -> List[date]:
    """Datas que uma extensão até ``new_end_date`` acrescentaria à série.

    Args:
        members: Todas as reservas do grupo (canceladas inclusive)
        new_end_date: Nova data final, inclusiva

    Returns:
        Lista ordenada; vazia se a nova data não for posterior à última
        ocorrência existente ou se a série não for recorrente
    """
    return list(_iter_additional(members, new_end_date))


def additional_occurrences(members: Sequence[Booking], new_end_date: Any) -> int:
    return sum(1 for _ in _iter_additional(members, new_end_date))


def build_extension_rows(
    members: Sequence[Booking],
    new_end_date: Any,
    *,
    id_factory: Callable[[], UUID] = uuid4,
) -> List[Booking]:
    """Novas reservas filhas para cada data adicional em cada sala ativa do grupo."""
    dates = additional_dates(members, new_end_date)
    if not dates:
        return []

    parent = find_parent(members)
    group_id = parent.booking_group_id or id_factory()
    rooms = {}
    for booking in members:
        if booking.is_active:
            rooms.setdefault(booking.room_id, booking.room_name)
    if not rooms:
        rooms[parent.room_id] = parent.room_name

    rows = []
    for occurrence in dates:
        for room_id, room_name in rooms.items():
            rows.append(
                Booking(
                    id=id_factory(),
                    room_id=room_id,
                    room_name=room_name,
                    user_id=parent.user_id,
                    date=occurrence,
                    start_time=parent.start_time,
                    end_time=parent.end_time,
                    status=BookingStatus.PENDING,
                    booking_group_id=group_id,
                    parent_booking_id=parent.id,
                )
            )
    return rows
