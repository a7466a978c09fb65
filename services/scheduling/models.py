from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, FrozenSet, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .dates import format_time, normalize_date, normalize_time

if TYPE_CHECKING:
    from .recurring import RecurrenceRule


class BookingStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    ALL = {PENDING, CONFIRMED, CANCELLED}
    ACTIVE = {PENDING, CONFIRMED}


class RecurrencePattern:
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    ALL = {DAILY, WEEKLY, MONTHLY}


# Semana 5 significa "última" ocorrência do dia da semana no mês
LAST_WEEK_OF_MONTH = 5


class Booking(BaseModel):
    """Reserva de uma sala em uma data, no intervalo [start_time, end_time).

    Campos de recorrência só existem na reserva pai do grupo; as filhas
    carregam apenas data e horário próprios.
    """

    id: UUID = Field(description="ID único da reserva")
    room_id: UUID = Field(description="Sala ocupada")
    room_name: Optional[str] = Field(default=None, description="Nome da sala para exibição")
    user_id: Optional[UUID] = Field(default=None, description="Dono da reserva")
    date: dt.date = Field(description="Data de calendário (sem hora/timezone)")
    start_time: dt.time = Field(description="Início, relógio de 24h")
    end_time: dt.time = Field(description="Término, relógio de 24h, mesmo dia")
    status: str = Field(default=BookingStatus.PENDING, description="pending, confirmed ou cancelled")
    booking_group_id: Optional[UUID] = Field(default=None, description="Grupo (série e/ou multi-sala)")
    parent_booking_id: Optional[UUID] = Field(default=None, description="Reserva pai; nulo na própria pai")
    recurrence_pattern: Optional[str] = Field(default=None, description="daily, weekly ou monthly")
    recurrence_end_date: Optional[dt.date] = Field(default=None, description="Fim inclusivo da série")
    recurrence_days: Optional[FrozenSet[int]] = Field(
        default=None, description="Dias da semana para recorrência semanal (0=Domingo, 6=Sábado)"
    )
    recurrence_week_of_month: Optional[int] = Field(default=None, ge=1, le=5, description="1-4, 5=última")
    recurrence_day_of_week: Optional[int] = Field(default=None, ge=0, le=6, description="0=Domingo, 6=Sábado")

    model_config = ConfigDict(frozen=True)

    @field_validator("date", mode="before")
    @classmethod
    def normalizar_data(cls, value):
        return normalize_date(value)

    @field_validator("recurrence_end_date", mode="before")
    @classmethod
    def normalizar_fim_recorrencia(cls, value):
        if value is None or value == "":
            return None
        return normalize_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalizar_horario(cls, value):
        return normalize_time(value)

    @field_validator("status")
    @classmethod
    def validar_status(cls, value):
        if value not in BookingStatus.ALL:
            raise ValueError(f"Invalid status: {value}")
        return value

    @field_validator("recurrence_pattern")
    @classmethod
    def validar_padrao(cls, value):
        if value is not None and value not in RecurrencePattern.ALL:
            raise ValueError(f"Invalid recurrence pattern: {value}. Must be 'daily', 'weekly', or 'monthly'")
        return value

    @field_validator("recurrence_days", mode="before")
    @classmethod
    def validar_dias_semana(cls, value):
        if value is None:
            return value
        # Dias chegam como strings quando vêm do formulário ("1", "3")
        days = frozenset(int(day) for day in value)
        if not all(0 <= day <= 6 for day in days):
            raise ValueError("recurrence_days must contain values between 0 (Sunday) and 6 (Saturday)")
        return days

    @model_validator(mode="after")
    def validar_intervalo(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    @property
    def is_parent(self) -> bool:
        return self.parent_booking_id is None

    @property
    def room_label(self) -> str:
        return self.room_name or str(self.room_id)

    @property
    def time_range(self) -> str:
        return f"{format_time(self.start_time)}-{format_time(self.end_time)}"

    def recurrence_rule(self) -> Optional["RecurrenceRule"]:
        from .recurring import RecurrenceRule

        return RecurrenceRule.from_booking(self)
