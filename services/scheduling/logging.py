"""Structured logging helpers for the scheduling engine."""

from __future__ import annotations

from datetime import date
import logging
import sys
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import structlog


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        from .config import load_engine_config

        level = load_engine_config().log_level
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _render_booking_ids(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """UUIDs e datas viram texto simples antes do JSONRenderer."""
    for key, value in event_dict.items():
        if isinstance(value, (UUID, date)):
            event_dict[key] = str(value)
    return event_dict


def _processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _render_booking_ids,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(
    service_name: str,
    level: Optional[Union[int, str]] = None,
) -> structlog.stdlib.BoundLogger:
    """Configure structlog to emit JSON logs carrying the booking context.

    ``level`` aceita int ou nome ("DEBUG"); sem valor usa LOG_LEVEL.
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=_resolve_level(level))
    structlog.configure(
        processors=_processors(),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger().bind(service=service_name)


def bind_booking_context(**context: Any) -> None:
    """Attach booking identifiers (group_id, booking_id, ...) to every log line.

    Valores None são ignorados; UUIDs são convertidos para texto na renderização.
    """
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in context.items() if value is not None}
    )


def clear_booking_context() -> None:
    structlog.contextvars.clear_contextvars()
