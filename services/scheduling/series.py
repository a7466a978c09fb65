"""Agrupamento de reservas por ``booking_group_id``.

Um grupo nasce de uma única ação do usuário: uma série recorrente, uma
reserva em várias salas, ou as duas coisas juntas. A classificação é sempre
recalculada a partir do conjunto atual de reservas; nada aqui é cacheado.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

import structlog

from .models import Booking, BookingStatus

logger = structlog.get_logger(__name__)


class SeriesStatus:
    ALL_CONFIRMED = "all_confirmed"
    ALL_CANCELLED = "all_cancelled"
    PARTIALLY_CONFIRMED = "partially_confirmed"
    PENDING = "pending"


def _chronological(booking: Booking) -> Tuple[date, object]:
    return booking.date, booking.start_time


def _hierarchical(booking: Booking) -> Tuple[bool, date, object]:
    # Pai primeiro, depois filhas por data e horário
    return booking.parent_booking_id is not None, booking.date, booking.start_time


def find_parent(members: Sequence[Booking]) -> Optional[Booking]:
    """Reserva pai do grupo: a que não referencia outra, senão a primeira."""
    if not members:
        return None
    for booking in members:
        if booking.parent_booking_id is None:
            return booking
    logger.warning(
        "series_parent_missing",
        group_id=str(members[0].booking_group_id),
        fallback_booking_id=str(members[0].id),
    )
    return members[0]


@dataclass(frozen=True)
class GroupInfo:
    group_id: UUID
    members: Tuple[Booking, ...]
    history: Tuple[Booking, ...]
    parent: Booking
    room_names: Tuple[str, ...]
    dates: Tuple[date, ...]

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def is_multi_room(self) -> bool:
        return len(self.room_names) > 1

    @property
    def is_recurring(self) -> bool:
        return len(self.dates) > 1

    @property
    def children(self) -> Tuple[Booking, ...]:
        return tuple(b for b in self.history if b.id != self.parent.id)

    def is_parent(self, booking: Booking) -> bool:
        return booking.id == self.parent.id

    def is_child(self, booking: Booking) -> bool:
        return booking.booking_group_id == self.group_id and not self.is_parent(booking)

    @property
    def status_summary(self) -> str:
        statuses = [b.status for b in self.history]
        if all(s == BookingStatus.CONFIRMED for s in statuses):
            return SeriesStatus.ALL_CONFIRMED
        if all(s == BookingStatus.CANCELLED for s in statuses):
            return SeriesStatus.ALL_CANCELLED
        if any(s == BookingStatus.CONFIRMED for s in statuses):
            return SeriesStatus.PARTIALLY_CONFIRMED
        return SeriesStatus.PENDING


def classify_group(
    all_bookings: Iterable[Booking],
    group_id: Optional[UUID],
    *,
    include_cancelled: bool = False,
) -> Optional[GroupInfo]:
    """Classifica o grupo ``group_id`` dentro de ``all_bookings``.

    Args:
        all_bookings: Conjunto atual de reservas
        group_id: Grupo a classificar
        include_cancelled: Se True, reservas canceladas contam para o
            tamanho do grupo e para multi-sala/recorrente

    Returns:
        GroupInfo, ou None se restarem menos de 2 membros
    """
    if group_id is None:
        return None

    history = sorted((b for b in all_bookings if b.booking_group_id == group_id), key=_chronological)
    members = [b for b in history if include_cancelled or b.is_active]
    if len(members) < 2:
        return None

    parent = find_parent(history)
    return GroupInfo(
        group_id=group_id,
        members=tuple(members),
        history=tuple(history),
        parent=parent,
        room_names=tuple(sorted({b.room_label for b in members})),
        dates=tuple(sorted({b.date for b in members})),
    )


def partition_bookings(bookings: Iterable[Booking]) -> Tuple[Dict[UUID, List[Booking]], List[Booking]]:
    """Separa reservas agrupadas das avulsas, para exibição hierárquica."""
    groups: Dict[UUID, List[Booking]] = {}
    standalone: List[Booking] = []
    for booking in bookings:
        if booking.booking_group_id is None:
            standalone.append(booking)
        else:
            groups.setdefault(booking.booking_group_id, []).append(booking)
    for members in groups.values():
        members.sort(key=_hierarchical)
    return groups, standalone


def select_group_targets(
    all_bookings: Iterable[Booking],
    booking: Booking,
    *,
    apply_to_series: bool,
) -> List[Booking]:
    """Reservas afetadas por uma edição/cancelamento de ``booking``.

    Sem ``apply_to_series`` (ou fora de um grupo) só a própria reserva.
    Com ``apply_to_series`` todas as reservas ativas do grupo; as já
    canceladas ficam como histórico.
    """
    if not apply_to_series or booking.booking_group_id is None:
        return [booking]
    targets = [
        b for b in all_bookings
        if b.booking_group_id == booking.booking_group_id and b.is_active
    ]
    if not any(b.id == booking.id for b in targets):
        targets.append(booking)
    return sorted(targets, key=_chronological)


def cancel_bookings(targets: Iterable[Booking]) -> List[Booking]:
    return [b.model_copy(update={"status": BookingStatus.CANCELLED}) for b in targets]
