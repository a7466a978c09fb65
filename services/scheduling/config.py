"""Configuration helpers for the scheduling engine."""

from __future__ import annotations

from dataclasses import dataclass
import os
import warnings
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Valores padrão usados quando as variáveis de ambiente não estão definidas
_DEFAULT_TIMEZONE = "UTC"
_DEFAULT_MAX_HORIZON_MONTHS = 12
_DEFAULT_LOG_LEVEL = "INFO"

_MIN_HORIZON_MONTHS = 1
_MAX_HORIZON_MONTHS = 60


@dataclass(frozen=True)
class EngineConfig:
    timezone: str
    max_horizon_months: int
    log_level: str

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def resolve_timezone(tz_name: str, origin: str = "DEFAULT_TIMEZONE") -> str:
    """Valida o nome do timezone, caindo para UTC (com aviso) se for desconhecido."""
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        warnings.warn(
            f"Timezone desconhecido '{tz_name}' em {origin}. Usando {_DEFAULT_TIMEZONE}.",
            UserWarning,
            stacklevel=3,
        )
        return _DEFAULT_TIMEZONE
    return tz_name


def _lookup_timezone() -> str:
    """Lookup DEFAULT_TIMEZONE, falling back to UTC for unknown zone names."""
    tz_name = os.getenv("DEFAULT_TIMEZONE", _DEFAULT_TIMEZONE).strip() or _DEFAULT_TIMEZONE
    return resolve_timezone(tz_name)


def _lookup_horizon() -> int:
    raw = os.getenv("RECURRENCE_MAX_MONTHS", str(_DEFAULT_MAX_HORIZON_MONTHS))
    try:
        months = int(raw)
    except ValueError:
        raise ValueError(f"RECURRENCE_MAX_MONTHS must be an integer, got {raw!r}")
    if months < _MIN_HORIZON_MONTHS or months > _MAX_HORIZON_MONTHS:
        raise ValueError(
            f"RECURRENCE_MAX_MONTHS must be between {_MIN_HORIZON_MONTHS} and "
            f"{_MAX_HORIZON_MONTHS}, got {months}"
        )
    return months


def load_engine_config() -> EngineConfig:
    """Aggregate engine configuration from env vars with sane fallbacks.

    Returns:
        EngineConfig: configuração do engine

    Raises:
        ValueError: se RECURRENCE_MAX_MONTHS não for um inteiro válido
    """

    return EngineConfig(
        timezone=_lookup_timezone(),
        max_horizon_months=_lookup_horizon(),
        log_level=os.getenv("LOG_LEVEL", _DEFAULT_LOG_LEVEL).upper(),
    )
