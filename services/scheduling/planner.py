"""Expansão de um pedido de reserva (multi-sala e/ou recorrente) em linhas."""

from __future__ import annotations

import datetime as dt
from typing import Callable, List, Optional
from uuid import UUID, uuid4

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field, field_validator, model_validator

from .config import EngineConfig, load_engine_config
from .dates import normalize_date, normalize_time
from .models import Booking, BookingStatus
from .recurring import RecurrenceRule, count_occurrences, expand_occurrences, validate_recurrence_rule


class BookingRequest(BaseModel):
    """Pedido de reserva como vem do formulário de criação."""

    room_ids: List[UUID] = Field(min_length=1, description="Salas selecionadas")
    room_names: Optional[List[str]] = Field(default=None, description="Nomes das salas, na mesma ordem")
    user_id: Optional[UUID] = Field(default=None, description="Dono das reservas")
    date: dt.date = Field(description="Data da primeira ocorrência")
    start_time: dt.time
    end_time: dt.time
    status: str = Field(default=BookingStatus.PENDING)
    recurrence: Optional[RecurrenceRule] = Field(default=None, description="Regra de recorrência")
    recurrence_end_date: Optional[dt.date] = Field(default=None, description="Fim inclusivo da série")

    @field_validator("date", mode="before")
    @classmethod
    def normalizar_data(cls, value):
        return normalize_date(value)

    @field_validator("recurrence_end_date", mode="before")
    @classmethod
    def normalizar_fim(cls, value):
        if value is None or value == "":
            return None
        return normalize_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalizar_horario(cls, value):
        return normalize_time(value)

    @field_validator("recurrence", mode="before")
    @classmethod
    def converter_regra(cls, value):
        if isinstance(value, dict):
            return RecurrenceRule.from_dict(value)
        return value

    @field_validator("status")
    @classmethod
    def validar_status(cls, value):
        if value not in BookingStatus.ACTIVE:
            raise ValueError(f"Invalid status for a new booking: {value}")
        return value

    @model_validator(mode="after")
    def validar_intervalo(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.room_names is not None and len(self.room_names) != len(self.room_ids):
            raise ValueError("room_names must match room_ids")
        return self


def _validate_window(request: BookingRequest, config: EngineConfig) -> None:
    if request.recurrence is None:
        return
    validate_recurrence_rule(request.recurrence)
    if request.recurrence_end_date is None:
        raise ValueError("recurrence_end_date is required for recurring bookings")
    if request.recurrence_end_date <= request.date:
        raise ValueError("recurrence_end_date must be after the first booking date")
    horizon = request.date + relativedelta(months=config.max_horizon_months)
    if request.recurrence_end_date > horizon:
        raise ValueError(
            f"recurrence_end_date must be within {config.max_horizon_months} months of the first booking"
        )


def planned_dates(request: BookingRequest, config: Optional[EngineConfig] = None) -> List[dt.date]:
    _validate_window(request, config or load_engine_config())
    if request.recurrence is None:
        return [request.date]
    return expand_occurrences(request.date, request.recurrence, request.recurrence_end_date)


def planned_booking_count(request: BookingRequest, config: Optional[EngineConfig] = None) -> int:
    """Quantas reservas o pedido cria (ocorrências x salas)."""
    _validate_window(request, config or load_engine_config())
    occurrences = 1
    if request.recurrence is not None:
        occurrences = count_occurrences(request.date, request.recurrence, request.recurrence_end_date)
    return occurrences * len(request.room_ids)


def plan_booking_group(
    request: BookingRequest,
    *,
    id_factory: Callable[[], UUID] = uuid4,
    config: Optional[EngineConfig] = None,
) -> List[Booking]:
    """Expande o pedido em linhas prontas para persistir.

    A primeira linha (primeira sala, primeira data) é a pai e carrega a
    definição de recorrência; as demais referenciam a pai. Um único
    ``booking_group_id`` é atribuído quando há mais de uma linha.

    Raises:
        ValueError: regra inválida, data final ausente, anterior à data
            inicial ou além do horizonte configurado
    """
    dates = planned_dates(request, config)
    total = len(dates) * len(request.room_ids)
    group_id = id_factory() if total > 1 else None
    names = request.room_names or [None] * len(request.room_ids)
    rule = request.recurrence

    rows: List[Booking] = []
    parent_id: Optional[UUID] = None
    for occurrence in dates:
        for room_id, room_name in zip(request.room_ids, names):
            booking_id = id_factory()
            fields = dict(
                id=booking_id,
                room_id=room_id,
                room_name=room_name,
                user_id=request.user_id,
                date=occurrence,
                start_time=request.start_time,
                end_time=request.end_time,
                status=request.status,
                booking_group_id=group_id,
                parent_booking_id=parent_id,
            )
            if parent_id is None and rule is not None:
                fields.update(
                    recurrence_pattern=rule.pattern,
                    recurrence_end_date=request.recurrence_end_date,
                    recurrence_days=rule.days or None,
                    recurrence_week_of_month=rule.week_of_month,
                    recurrence_day_of_week=rule.day_of_week,
                )
            rows.append(Booking(**fields))
            if parent_id is None:
                parent_id = booking_id
    return rows
