"""Detecção de sobreposição entre reservas de um mesmo dia."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple
from uuid import UUID

from .dates import minutes_of, normalize_date
from .models import Booking


@dataclass
class LayoutEntry:
    """Uma faixa no calendário do dia.

    ``overlap_index``/``overlap_count`` ficam None quando a faixa ocupa a
    largura inteira (sem sobreposição, ou reserva multi-sala).
    """

    bookings: List[Booking]
    is_multi_room: bool = False
    overlap_index: Optional[int] = None
    overlap_count: Optional[int] = None

    @property
    def booking(self) -> Booking:
        return self.bookings[0]


def bookings_overlap(a: Booking, b: Booking) -> bool:
    """Teste de intervalo semiaberto; reservas que só se tocam não conflitam."""
    return (
        minutes_of(a.start_time) < minutes_of(b.end_time)
        and minutes_of(a.end_time) > minutes_of(b.start_time)
    )


def _multi_room_key(booking: Booking) -> Optional[Tuple[Hashable, ...]]:
    if booking.booking_group_id is None:
        return None
    return booking.booking_group_id, booking.user_id, booking.start_time, booking.end_time


def _collapse_multi_room(bookings: List[Booking]) -> List[LayoutEntry]:
    slots: Dict[Tuple[Hashable, ...], LayoutEntry] = {}
    entries: List[LayoutEntry] = []
    for booking in bookings:
        key = _multi_room_key(booking)
        if key is not None and key in slots:
            slots[key].bookings.append(booking)
            continue
        entry = LayoutEntry(bookings=[booking])
        if key is not None:
            slots[key] = entry
        entries.append(entry)
    for entry in entries:
        entry.is_multi_room = len(entry.bookings) > 1
    return entries


def _annotate_clusters(entries: List[LayoutEntry]) -> None:
    # Só entra quem sobrepõe a semente diretamente; não é fecho transitivo
    clustered = set()
    for seed_pos, seed in enumerate(entries):
        if seed_pos in clustered:
            continue
        cluster = [seed_pos]
        clustered.add(seed_pos)
        for pos in range(seed_pos + 1, len(entries)):
            if pos in clustered:
                continue
            if bookings_overlap(seed.booking, entries[pos].booking):
                cluster.append(pos)
                clustered.add(pos)
        if len(cluster) < 2:
            continue
        for index, member in enumerate(cluster):
            entries[member].overlap_index = index
            entries[member].overlap_count = len(cluster)


def layout_day(bookings: Iterable[Booking]) -> List[LayoutEntry]:
    """Anota as reservas de um dia com posição dentro do grupo de sobreposição.

    Reservas canceladas são descartadas. Reservas do mesmo grupo, mesmo dono
    e mesmo horário viram uma única faixa multi-sala, que nunca participa do
    agrupamento de sobreposição.
    """
    active = [b for b in bookings if b.is_active]
    entries = _collapse_multi_room(active)
    regular = [entry for entry in entries if not entry.is_multi_room]
    _annotate_clusters(regular)
    return entries


def bookings_for_day(
    bookings: Iterable[Booking],
    day: Any,
    *,
    room_id: Optional[UUID] = None,
) -> List[Booking]:
    target = normalize_date(day)
    return [
        b for b in bookings
        if b.date == target and b.is_active and (room_id is None or b.room_id == room_id)
    ]
