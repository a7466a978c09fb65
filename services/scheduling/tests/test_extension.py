"""Testes para extensão de séries recorrentes."""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from scheduling.extension import additional_dates, additional_occurrences, build_extension_rows
from scheduling.models import BookingStatus
from scheduling.series import cancel_bookings


@pytest.fixture
def weekly_series(make_booking):
    """Série semanal de 17/02 a 10/03/2025 (segundas), sala única."""
    group_id = uuid4()
    room_id = uuid4()
    owner = uuid4()
    days = ["2025-02-17", "2025-02-24", "2025-03-03", "2025-03-10"]
    parent = make_booking(
        day=days[0],
        room_id=room_id,
        room_name="Hall",
        user_id=owner,
        booking_group_id=group_id,
        recurrence_pattern="weekly",
        recurrence_end_date=days[-1],
    )
    children = [
        make_booking(
            day=day,
            room_id=room_id,
            room_name="Hall",
            user_id=owner,
            booking_group_id=group_id,
            parent_booking_id=parent.id,
        )
        for day in days[1:]
    ]
    return [parent] + children


class TestAdditionalDates:
    """Testes para additional_dates/additional_occurrences."""

    def test_weekly_extension(self, weekly_series):
        """Testa extensão de 10/03 até 31/03: três novas segundas."""
        dates = additional_dates(weekly_series, "2025-03-31")

        assert dates == [date(2025, 3, 17), date(2025, 3, 24), date(2025, 3, 31)]
        assert additional_occurrences(weekly_series, date(2025, 3, 31)) == 3

    @pytest.mark.parametrize("new_end", ["2025-03-10", "2025-03-01", "2025-03-16"])
    def test_no_extension_when_not_after_latest(self, weekly_series, new_end):
        assert additional_dates(weekly_series, new_end) == []
        assert additional_occurrences(weekly_series, new_end) == 0

    def test_latest_date_comes_from_members_not_end_date(self, weekly_series, make_booking):
        """Testa que uma data acrescentada fora da série move o ponto de partida."""
        parent = weekly_series[0]
        extra = make_booking(
            day="2025-03-17",
            room_id=parent.room_id,
            booking_group_id=parent.booking_group_id,
            parent_booking_id=parent.id,
        )

        dates = additional_dates(weekly_series + [extra], "2025-03-31")

        assert dates == [date(2025, 3, 24), date(2025, 3, 31)]

    def test_cancelled_dates_are_not_regenerated(self, weekly_series):
        series = weekly_series[:-1] + cancel_bookings(weekly_series[-1:])

        assert date(2025, 3, 10) not in additional_dates(series, "2025-03-31")

    def test_weekly_with_days_extension(self, make_booking):
        """Testa extensão com segunda/quarta a partir de uma quarta."""
        group_id = uuid4()
        parent = make_booking(
            day="2025-03-10",
            booking_group_id=group_id,
            recurrence_pattern="weekly",
            recurrence_days=[1, 3],
        )
        child = make_booking(day="2025-03-12", booking_group_id=group_id, parent_booking_id=parent.id)

        assert additional_dates([parent, child], "2025-03-24") == [
            date(2025, 3, 17),
            date(2025, 3, 19),
            date(2025, 3, 24),
        ]

    def test_monthly_weekday_extension(self, make_booking):
        """Testa extensão de última sexta-feira do mês."""
        group_id = uuid4()
        parent = make_booking(
            day="2025-01-31",
            booking_group_id=group_id,
            recurrence_pattern="monthly",
            recurrence_week_of_month=5,
            recurrence_day_of_week=5,
        )
        child = make_booking(day="2025-02-28", booking_group_id=group_id, parent_booking_id=parent.id)

        assert additional_dates([parent, child], "2025-05-31") == [
            date(2025, 3, 28),
            date(2025, 4, 25),
            date(2025, 5, 30),
        ]

    def test_monthly_same_day_keeps_anchor(self, make_booking):
        """Testa que a extensão mensal volta ao dia 31 depois de fevereiro."""
        group_id = uuid4()
        parent = make_booking(day="2025-01-31", booking_group_id=group_id, recurrence_pattern="monthly")
        child = make_booking(day="2025-02-28", booking_group_id=group_id, parent_booking_id=parent.id)

        assert additional_dates([parent, child], "2025-04-30") == [date(2025, 3, 31), date(2025, 4, 30)]

    def test_non_recurring_group_is_noop(self, make_booking):
        group_id = uuid4()
        parent = make_booking(booking_group_id=group_id)
        sibling = make_booking(booking_group_id=group_id, parent_booking_id=parent.id)

        assert additional_dates([parent, sibling], "2025-12-31") == []

    def test_empty_members(self):
        assert additional_dates([], "2025-12-31") == []


class TestBuildExtensionRows:
    """Testes para as novas linhas de extensão."""

    def test_rows_copy_parent_slot(self, weekly_series):
        parent = weekly_series[0]

        rows = build_extension_rows(weekly_series, "2025-03-31")

        assert [row.date for row in rows] == [date(2025, 3, 17), date(2025, 3, 24), date(2025, 3, 31)]
        for row in rows:
            assert row.booking_group_id == parent.booking_group_id
            assert row.parent_booking_id == parent.id
            assert row.room_id == parent.room_id
            assert row.user_id == parent.user_id
            assert (row.start_time, row.end_time) == (parent.start_time, parent.end_time)
            assert row.status == BookingStatus.PENDING
            assert row.recurrence_pattern is None
        assert len({row.id for row in rows}) == 3

    def test_multi_room_series_extends_every_room(self, weekly_series, make_booking):
        parent = weekly_series[0]
        kitchen = uuid4()
        siblings = [
            make_booking(
                day=b.date,
                room_id=kitchen,
                booking_group_id=parent.booking_group_id,
                parent_booking_id=parent.id,
            )
            for b in weekly_series
        ]

        rows = build_extension_rows(weekly_series + siblings, parent.date + timedelta(days=28))

        assert len(rows) == 2
        assert {row.room_id for row in rows} == {parent.room_id, kitchen}

    def test_nothing_to_add(self, weekly_series):
        assert build_extension_rows(weekly_series, "2025-03-10") == []
