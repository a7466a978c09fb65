"""Operações de alto nível sobre um ``BookingStore``.

Combina planejamento, detecção de conflitos, extensão e cancelamento de
séries; cada função lê o estado atual do store antes de decidir.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional
from uuid import UUID, uuid4

import structlog

from .config import EngineConfig
from .conflicts import find_conflicts, find_plan_conflicts
from .dates import normalize_date
from .extension import build_extension_rows
from .logging import bind_booking_context, clear_booking_context
from .models import Booking
from .planner import BookingRequest, plan_booking_group
from .series import cancel_bookings, find_parent, select_group_targets
from .storage import BookingStore

logger = structlog.get_logger(__name__)


class BookingConflictError(ValueError):
    """Linhas planejadas colidem com reservas ativas."""

    def __init__(self, conflicts: Dict[UUID, List[Booking]]):
        self.conflicts = conflicts
        total = sum(len(found) for found in conflicts.values())
        super().__init__(f"{len(conflicts)} planned booking(s) conflict with {total} existing booking(s)")


def _existing_for(store: BookingStore, rows: List[Booking]) -> List[Booking]:
    existing: Dict[UUID, Booking] = {}
    for day in sorted({row.date for row in rows}):
        for booking in store.list_day(day):
            existing[booking.id] = booking
    return list(existing.values())


def create_booking_group(
    store: BookingStore,
    request: BookingRequest,
    *,
    id_factory: Callable[[], UUID] = uuid4,
    config: Optional[EngineConfig] = None,
) -> List[Booking]:
    """Planeja, verifica conflitos e persiste as linhas de um pedido.

    Raises:
        ValueError: pedido inválido
        BookingConflictError: alguma linha colide com reserva ativa
    """
    rows = plan_booking_group(request, id_factory=id_factory, config=config)
    conflicts = find_plan_conflicts(rows, _existing_for(store, rows))
    if conflicts:
        logger.warning("booking_group_conflict", planned=len(rows), conflicting=len(conflicts))
        raise BookingConflictError(conflicts)

    created = store.add_many(rows)
    logger.info(
        "booking_group_created",
        group_id=str(rows[0].booking_group_id),
        bookings=len(created),
    )
    return created


def extend_booking_series(
    store: BookingStore,
    booking_id: UUID,
    new_end_date: Any,
    *,
    id_factory: Callable[[], UUID] = uuid4,
) -> List[Booking]:
    """Acrescenta as ocorrências que faltam até ``new_end_date``.

    Returns:
        As novas reservas; lista vazia quando não há nada a acrescentar

    Raises:
        LookupError: reserva inexistente
        BookingConflictError: alguma nova ocorrência colide com reserva ativa
    """
    booking = store.get(booking_id)
    if booking is None:
        raise LookupError(f"Booking {booking_id} not found")

    members = store.list_group(booking.booking_group_id) if booking.booking_group_id else [booking]
    parent = find_parent(members)
    bind_booking_context(group_id=parent.booking_group_id, booking_id=parent.id)
    try:
        rows = build_extension_rows(members, new_end_date, id_factory=id_factory)
        if not rows:
            logger.info("series_extension_noop", new_end_date=str(new_end_date))
            return []

        conflicts = find_plan_conflicts(rows, _existing_for(store, rows))
        if conflicts:
            logger.warning("series_extension_conflict", conflicting=len(conflicts))
            raise BookingConflictError(conflicts)

        end_date = normalize_date(new_end_date)
        updated_parent = parent.model_copy(
            update={
                "booking_group_id": rows[0].booking_group_id,
                "recurrence_end_date": max(end_date, parent.recurrence_end_date or end_date),
            }
        )
        store.update_many([updated_parent])
        created = store.add_many(rows)
        logger.info("series_extended", added=len(created), new_end_date=end_date.isoformat())
        return created
    finally:
        clear_booking_context()


def cancel_booking(store: BookingStore, booking_id: UUID, *, apply_to_series: bool = False) -> List[Booking]:
    """Cancela a reserva, ou todas as reservas ativas do grupo.

    Raises:
        LookupError: reserva inexistente
    """
    booking = store.get(booking_id)
    if booking is None:
        raise LookupError(f"Booking {booking_id} not found")

    group = store.list_group(booking.booking_group_id) if booking.booking_group_id else [booking]
    targets = [b for b in select_group_targets(group, booking, apply_to_series=apply_to_series) if b.is_active]
    cancelled = store.update_many(cancel_bookings(targets))
    logger.info(
        "bookings_cancelled",
        booking_id=str(booking_id),
        apply_to_series=apply_to_series,
        cancelled=len(cancelled),
    )
    return cancelled


def check_booking_conflicts(
    store: BookingStore,
    candidate: Booking,
    ignore_booking_id: Optional[UUID] = None,
) -> List[Booking]:
    return find_conflicts(candidate, store.list_day(candidate.date, candidate.room_id), ignore_booking_id)
