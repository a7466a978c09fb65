"""Normalização de datas e horários para o engine de agendamento.

Tudo o que entra no engine passa por aqui: datas viram datas de calendário
(sem hora, sem timezone) e horários viram ``datetime.time`` no relógio de 24h.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Optional
from zoneinfo import ZoneInfo

import structlog
from dateutil import parser as date_parser

from .config import load_engine_config, resolve_timezone

logger = structlog.get_logger(__name__)

# Timestamps acima deste valor são tratados como milissegundos (convenção do browser)
_MILLISECONDS_THRESHOLD = 1e11

# Formatos de exibição aceitos quando a string não é ISO
_FALLBACK_FORMATS = (
    "%d-%b-%Y",
    "%b %d, %Y",
    "%d/%m/%Y",
    "%m/%d/%Y",
)

_TIME_24H = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")
_TIME_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


def _zone(tz: Optional[str]) -> ZoneInfo:
    if tz:
        return ZoneInfo(resolve_timezone(tz, origin="tz"))
    return load_engine_config().zone


def today_in(tz: Optional[str] = None) -> date:
    """Data atual no timezone configurado."""
    return datetime.now(_zone(tz)).date()


def _from_timestamp(value: float, tz: Optional[str]) -> date:
    seconds = value / 1000 if abs(value) > _MILLISECONDS_THRESHOLD else value
    return datetime.fromtimestamp(seconds, tz=_zone(tz)).date()


def _parse_string(raw: str, tz: Optional[str], today: Optional[date]) -> Optional[date]:
    trimmed = raw.strip()
    if not trimmed:
        return None
    if trimmed.isdigit():
        return _from_timestamp(int(trimmed), tz)

    date_part = trimmed.split("T")[0].split(" ")[0]
    try:
        return date.fromisoformat(date_part)
    except ValueError:
        pass

    for candidate in (date_part, trimmed):
        for fmt in _FALLBACK_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).date()
            except ValueError:
                continue

    # Campos ausentes (ano, mês, dia) vêm de today, nunca do relógio do dateutil
    reference = datetime.combine(today or today_in(tz), time())
    try:
        return date_parser.parse(trimmed, default=reference).date()
    except (ValueError, OverflowError):
        return None


def normalize_date(
    value: Any,
    *,
    today: Optional[date] = None,
    tz: Optional[str] = None,
) -> date:
    """Converte qualquer representação de data em uma data de calendário.

    Args:
        value: ``date``, ``datetime``, timestamp (segundos ou milissegundos)
            ou string (ISO, com ou sem sufixo de hora/timezone, ou formatos
            de exibição como ``15-Jan-2025``)
        today: data usada quando ``value`` não pode ser interpretado
        tz: timezone para converter timestamps (padrão: DEFAULT_TIMEZONE)

    Returns:
        Data de calendário. Nunca lança exceção: entradas inválidas caem
        para ``today``.
    """
    result: Optional[date] = None
    try:
        if isinstance(value, datetime):
            result = value.date()
        elif isinstance(value, date):
            result = value
        elif isinstance(value, bool):
            result = None
        elif isinstance(value, (int, float)):
            result = _from_timestamp(value, tz)
        elif isinstance(value, str):
            result = _parse_string(value, tz, today)
    except (ValueError, OverflowError, OSError):
        result = None

    if result is None:
        fallback = today or today_in(tz)
        logger.warning("date_normalization_fallback", value=repr(value), fallback=fallback.isoformat())
        return fallback
    return result


def normalize_time(value: Any) -> time:
    """Converte ``HH:MM``, ``HH:MM:SS`` ou ``h:MM AM/PM`` em ``datetime.time``.

    Raises:
        ValueError: se o valor não representar um horário válido
    """
    if isinstance(value, datetime):
        return value.time().replace(second=0, microsecond=0, tzinfo=None)
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        raise ValueError(f"Invalid time value: {value!r}")

    match = _TIME_12H.match(value)
    if match:
        hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
        if not 1 <= hour <= 12:
            raise ValueError(f"Invalid time value: {value!r}")
        if period == "PM" and hour != 12:
            hour += 12
        if period == "AM" and hour == 12:
            hour = 0
        return time(hour, minute)

    match = _TIME_24H.match(value)
    if match:
        # hour/minute fora do intervalo levantam ValueError em time()
        return time(int(match.group(1)), int(match.group(2)))

    # Strings de timestamp completas ("2025-01-15T09:30:00Z")
    if "T" in value:
        return normalize_time(value.split("T", 1)[1][:5])

    raise ValueError(f"Invalid time value: {value!r}")


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def date_key(value: date) -> str:
    return value.isoformat()


def js_weekday(value: date) -> int:
    """Dia da semana com 0=Domingo ... 6=Sábado."""
    return value.isoweekday() % 7


def minutes_of(value: time) -> int:
    return value.hour * 60 + value.minute
