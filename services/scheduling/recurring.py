"""Lógica de recorrência para bookings.

Expande um padrão de recorrência (diário, semanal, mensal) em datas de
calendário concretas. As funções são puras: nada aqui acessa relógio,
banco ou estado global.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, TYPE_CHECKING

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from .dates import js_weekday
from .models import LAST_WEEK_OF_MONTH, RecurrencePattern

if TYPE_CHECKING:
    from .models import Booking


@dataclass(frozen=True)
class RecurrenceRule:
    """Definição de recorrência da reserva pai.

    ``days`` e ``day_of_week`` usam 0=Domingo ... 6=Sábado.
    """

    pattern: str
    days: FrozenSet[int] = field(default_factory=frozenset)
    week_of_month: Optional[int] = None
    day_of_week: Optional[int] = None

    @property
    def by_weekday_of_month(self) -> bool:
        return (
            self.pattern == RecurrencePattern.MONTHLY
            and self.week_of_month is not None
            and self.day_of_week is not None
        )

    @classmethod
    def from_booking(cls, booking: "Booking") -> Optional["RecurrenceRule"]:
        if not booking.recurrence_pattern:
            return None
        return cls(
            pattern=booking.recurrence_pattern,
            days=frozenset(booking.recurrence_days or ()),
            week_of_month=booking.recurrence_week_of_month,
            day_of_week=booking.recurrence_day_of_week,
        )

    @classmethod
    def from_dict(cls, pattern: Dict[str, Any]) -> "RecurrenceRule":
        rule = cls(
            pattern=pattern.get("pattern") or pattern.get("frequency"),
            days=frozenset(int(day) for day in pattern.get("days") or ()),
            week_of_month=pattern.get("week_of_month"),
            day_of_week=pattern.get("day_of_week"),
        )
        validate_recurrence_rule(rule)
        return rule


def validate_recurrence_rule(rule: RecurrenceRule) -> bool:
    """Valida uma regra de recorrência.

    Returns:
        True se válida

    Raises:
        ValueError: Se a regra for inválida
    """
    if rule.pattern not in RecurrencePattern.ALL:
        raise ValueError(f"Invalid pattern: {rule.pattern}. Must be 'daily', 'weekly', or 'monthly'")

    if not all(0 <= day <= 6 for day in rule.days):
        raise ValueError("days must contain values between 0 (Sunday) and 6 (Saturday)")

    if rule.week_of_month is not None and not 1 <= rule.week_of_month <= LAST_WEEK_OF_MONTH:
        raise ValueError(f"week_of_month must be between 1 and {LAST_WEEK_OF_MONTH}, got {rule.week_of_month}")

    if rule.day_of_week is not None and not 0 <= rule.day_of_week <= 6:
        raise ValueError(f"day_of_week must be between 0 (Sunday) and 6 (Saturday), got {rule.day_of_week}")

    if rule.pattern == RecurrencePattern.MONTHLY and (rule.week_of_month is None) != (rule.day_of_week is None):
        raise ValueError("Monthly recurrence needs both week_of_month and day_of_week, or neither")

    return True


# Indexado como o engine: 0=Domingo ... 6=Sábado
_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)


def nth_weekday_of_month(year: int, month: int, week_of_month: int, day_of_week: int) -> Optional[date]:
    """Data da N-ésima ocorrência de um dia da semana no mês.

    Args:
        year: Ano
        month: Mês (1-12)
        week_of_month: 1-4, ou 5 para a última ocorrência
        day_of_week: 0=Domingo ... 6=Sábado

    Returns:
        A data, ou None se a ocorrência não existir no mês
    """
    first_day = date(year, month, 1)
    target = _WEEKDAYS[day_of_week]

    if week_of_month == LAST_WEEK_OF_MONTH:
        # Volta a partir do último dia do mês
        return first_day + relativedelta(day=31, weekday=target(-1))

    candidate = first_day + relativedelta(weekday=target(+week_of_month))
    if candidate.month != month:
        return None
    return candidate


def _next_weekly_day(current: date, days: FrozenSet[int]) -> date:
    for offset in range(1, 8):
        candidate = current + timedelta(days=offset)
        if js_weekday(candidate) in days:
            return candidate
    # Inalcançável com days não vazio; sete dias cobrem todos os dias da semana
    raise ValueError("days must not be empty")


def _next_monthly_weekday(current: date, week_of_month: int, day_of_week: int) -> date:
    month_start = current.replace(day=1)
    # Sempre existe uma ocorrência em no máximo 12 meses (semana 1-4 existe em todo mês)
    for months_ahead in range(1, 13):
        target_month = month_start + relativedelta(months=months_ahead)
        candidate = nth_weekday_of_month(target_month.year, target_month.month, week_of_month, day_of_week)
        if candidate is not None:
            return candidate
    raise ValueError(f"No occurrence of week {week_of_month} / weekday {day_of_week} within a year")


def next_occurrence(current: date, rule: RecurrenceRule, *, anchor: Optional[date] = None) -> date:
    """Calcula a próxima ocorrência a partir de ``current``.

    Args:
        current: Ocorrência atual
        rule: Regra de recorrência
        anchor: Data inicial da série; define o dia do mês na recorrência
            mensal simples (31/01 -> 28/02 -> 31/03)

    Returns:
        Próxima ocorrência, sempre estritamente depois de ``current``
    """
    if rule.pattern == RecurrencePattern.DAILY:
        return current + timedelta(days=1)
    elif rule.pattern == RecurrencePattern.WEEKLY:
        if rule.days:
            return _next_weekly_day(current, rule.days)
        return current + timedelta(weeks=1)
    elif rule.pattern == RecurrencePattern.MONTHLY:
        if rule.by_weekday_of_month:
            return _next_monthly_weekday(current, rule.week_of_month, rule.day_of_week)
        day_of_month = (anchor or current).day
        return current + relativedelta(months=1, day=day_of_month)
    else:
        raise ValueError(f"Unsupported pattern: {rule.pattern}")


def iter_occurrences(start: date, rule: RecurrenceRule, until: date) -> Iterator[date]:
    """Gera as ocorrências de ``start`` até ``until`` (inclusivo).

    ``start`` é sempre a primeira ocorrência, mesmo quando ``until`` é
    anterior a ela.
    """
    validate_recurrence_rule(rule)

    current = start
    yield current
    while True:
        current = next_occurrence(current, rule, anchor=start)
        if current > until:
            return
        yield current


def expand_occurrences(start: date, rule: RecurrenceRule, until: date) -> List[date]:
    """Calcula todas as datas da série.

    Args:
        start: Data da primeira ocorrência
        rule: Regra de recorrência
        until: Data final inclusiva

    Returns:
        Lista ordenada de datas
    """
    return list(iter_occurrences(start, rule, until))


def count_occurrences(start: date, rule: RecurrenceRule, until: date) -> int:
    """Conta as ocorrências sem montar a lista de datas."""
    return sum(1 for _ in iter_occurrences(start, rule, until))
