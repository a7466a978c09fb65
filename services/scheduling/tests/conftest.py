"""Test configuration for scheduling engine tests."""

import os
import sys
from datetime import date
from pathlib import Path
from uuid import uuid4

import pytest

# Setup paths - add the services directory to the path
SERVICE_DIR = Path(__file__).resolve().parents[1]
ROOT_DIR = SERVICE_DIR.parent

services_path = str(ROOT_DIR)
if services_path not in sys.path:
    sys.path.insert(0, services_path)

# Datas de timestamp nos testes são interpretadas em UTC
os.environ["DEFAULT_TIMEZONE"] = "UTC"

from scheduling.models import Booking, BookingStatus  # noqa: E402


@pytest.fixture
def make_booking():
    """Fábrica de reservas com valores padrão razoáveis."""

    def _make(
        day="2025-03-10",
        start="09:00",
        end="10:00",
        room_id=None,
        **overrides,
    ) -> Booking:
        fields = {
            "id": uuid4(),
            "room_id": room_id or uuid4(),
            "date": day,
            "start_time": start,
            "end_time": end,
            "status": BookingStatus.CONFIRMED,
        }
        fields.update(overrides)
        return Booking(**fields)

    return _make


@pytest.fixture
def today():
    return date(2025, 6, 1)
