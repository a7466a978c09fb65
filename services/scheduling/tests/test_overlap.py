"""Testes para detecção de sobreposição no calendário do dia."""

from uuid import uuid4

import pytest

from scheduling.models import BookingStatus
from scheduling.overlap import bookings_for_day, bookings_overlap, layout_day


def _annotations(entries):
    return [(entry.overlap_index, entry.overlap_count) for entry in entries]


class TestBookingsOverlap:
    """Testes para o teste de intervalo semiaberto."""

    def test_touching_bookings_do_not_overlap(self, make_booking):
        first = make_booking(start="09:00", end="10:00")
        second = make_booking(start="10:00", end="11:00")

        assert not bookings_overlap(first, second)
        assert not bookings_overlap(second, first)

    @pytest.mark.parametrize(
        "a, b",
        [
            (("09:00", "11:00"), ("10:00", "12:00")),
            (("09:00", "12:00"), ("10:00", "11:00")),
            (("09:00", "10:00"), ("09:00", "10:00")),
            (("09:00", "09:45"), ("09:30", "10:00")),
        ],
    )
    def test_intersecting_bookings_overlap(self, make_booking, a, b):
        first = make_booking(start=a[0], end=a[1])
        second = make_booking(start=b[0], end=b[1])

        assert bookings_overlap(first, second)
        assert bookings_overlap(second, first)


class TestLayoutDay:
    """Testes para layout_day."""

    def test_no_overlap_gets_no_annotation(self, make_booking):
        entries = layout_day([
            make_booking(start="09:00", end="10:00"),
            make_booking(start="10:00", end="11:00"),
        ])

        assert _annotations(entries) == [(None, None), (None, None)]

    def test_overlapping_pair_shares_count(self, make_booking):
        entries = layout_day([
            make_booking(start="09:00", end="11:00"),
            make_booking(start="10:00", end="12:00"),
        ])

        assert _annotations(entries) == [(0, 2), (1, 2)]

    def test_only_direct_overlap_with_seed_joins(self, make_booking):
        """Testa A-B e B-C sobrepostos, A-C não: com A como semente, C fica de fora."""
        a = make_booking(start="09:00", end="10:30")
        b = make_booking(start="10:00", end="11:30")
        c = make_booking(start="11:00", end="12:00")
        assert not bookings_overlap(a, c)

        entries = layout_day([a, b, c])

        assert _annotations(entries) == [(0, 2), (1, 2), (None, None)]

    def test_chain_seeded_by_middle_booking_is_one_cluster(self, make_booking):
        """Testa que B como semente puxa A e C para o mesmo grupo plano."""
        a = make_booking(start="09:00", end="10:30")
        b = make_booking(start="10:00", end="11:30")
        c = make_booking(start="11:00", end="12:00")

        entries = layout_day([b, a, c])

        assert _annotations(entries) == [(0, 3), (1, 3), (2, 3)]

    def test_leftover_booking_seeds_its_own_cluster(self, make_booking):
        a = make_booking(start="09:00", end="10:30")
        b = make_booking(start="10:00", end="11:30")
        c = make_booking(start="11:00", end="12:00")
        d = make_booking(start="11:30", end="12:30")

        entries = layout_day([a, b, c, d])

        # b já está no grupo de a; c vira semente e leva d
        assert _annotations(entries) == [(0, 2), (1, 2), (0, 2), (1, 2)]

    def test_separate_clusters(self, make_booking):
        entries = layout_day([
            make_booking(start="09:00", end="10:00"),
            make_booking(start="09:30", end="10:00"),
            make_booking(start="14:00", end="15:00"),
            make_booking(start="14:30", end="16:00"),
            make_booking(start="17:00", end="18:00"),
        ])

        assert _annotations(entries) == [(0, 2), (1, 2), (0, 2), (1, 2), (None, None)]

    def test_cancelled_bookings_are_ignored(self, make_booking):
        entries = layout_day([
            make_booking(start="09:00", end="11:00"),
            make_booking(start="10:00", end="12:00", status=BookingStatus.CANCELLED),
        ])

        assert len(entries) == 1
        assert _annotations(entries) == [(None, None)]

    def test_multi_room_slot_is_collapsed_and_never_annotated(self, make_booking):
        """Testa que a faixa multi-sala não entra no agrupamento de sobreposição."""
        group_id = uuid4()
        owner = uuid4()
        hall = make_booking(start="09:00", end="11:00", booking_group_id=group_id, user_id=owner)
        kitchen = make_booking(
            start="09:00", end="11:00", booking_group_id=group_id, user_id=owner, parent_booking_id=hall.id
        )
        other = make_booking(start="10:00", end="12:00")
        another = make_booking(start="10:30", end="11:30")

        entries = layout_day([hall, other, kitchen, another])

        assert len(entries) == 3
        multi = entries[0]
        assert multi.is_multi_room is True
        assert [b.id for b in multi.bookings] == [hall.id, kitchen.id]
        assert (multi.overlap_index, multi.overlap_count) == (None, None)
        assert _annotations(entries[1:]) == [(0, 2), (1, 2)]

    def test_group_members_with_different_times_are_not_collapsed(self, make_booking):
        group_id = uuid4()
        entries = layout_day([
            make_booking(start="09:00", end="10:00", booking_group_id=group_id),
            make_booking(start="09:30", end="10:30", booking_group_id=group_id),
        ])

        assert [entry.is_multi_room for entry in entries] == [False, False]
        assert _annotations(entries) == [(0, 2), (1, 2)]

    def test_empty_day(self):
        assert layout_day([]) == []


def test_bookings_for_day_filters_date_room_and_status(make_booking):
    room = uuid4()
    keep = make_booking(day="2025-03-10", room_id=room)
    other_room = make_booking(day="2025-03-10")
    other_day = make_booking(day="2025-03-11", room_id=room)
    cancelled = make_booking(day="2025-03-10", room_id=room, status=BookingStatus.CANCELLED)
    bookings = [keep, other_room, other_day, cancelled]

    assert bookings_for_day(bookings, "2025-03-10T08:00:00Z", room_id=room) == [keep]
    assert bookings_for_day(bookings, "2025-03-10") == [keep, other_room]
