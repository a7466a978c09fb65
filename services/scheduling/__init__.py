"""Booking recurrence and scheduling-conflict engine."""

from .config import EngineConfig, load_engine_config
from .conflicts import find_conflicts, find_plan_conflicts, has_conflict
from .dates import format_time, js_weekday, normalize_date, normalize_time
from .extension import additional_dates, additional_occurrences, build_extension_rows
from .models import Booking, BookingStatus, RecurrencePattern
from .overlap import LayoutEntry, bookings_for_day, bookings_overlap, layout_day
from .planner import BookingRequest, plan_booking_group, planned_booking_count
from .recurring import (
    RecurrenceRule,
    count_occurrences,
    expand_occurrences,
    iter_occurrences,
    next_occurrence,
    nth_weekday_of_month,
    validate_recurrence_rule,
)
from .series import (
    GroupInfo,
    SeriesStatus,
    cancel_bookings,
    classify_group,
    find_parent,
    partition_bookings,
    select_group_targets,
)
from .service import (
    BookingConflictError,
    cancel_booking,
    check_booking_conflicts,
    create_booking_group,
    extend_booking_series,
)
from .storage import BookingStore, InMemoryBookingStore

__all__ = [
    "EngineConfig",
    "load_engine_config",
    "Booking",
    "BookingStatus",
    "RecurrencePattern",
    "normalize_date",
    "normalize_time",
    "format_time",
    "js_weekday",
    "RecurrenceRule",
    "validate_recurrence_rule",
    "nth_weekday_of_month",
    "next_occurrence",
    "iter_occurrences",
    "expand_occurrences",
    "count_occurrences",
    "GroupInfo",
    "SeriesStatus",
    "classify_group",
    "find_parent",
    "partition_bookings",
    "select_group_targets",
    "cancel_bookings",
    "LayoutEntry",
    "bookings_overlap",
    "layout_day",
    "bookings_for_day",
    "additional_dates",
    "additional_occurrences",
    "build_extension_rows",
    "find_conflicts",
    "has_conflict",
    "find_plan_conflicts",
    "BookingRequest",
    "plan_booking_group",
    "planned_booking_count",
    "BookingStore",
    "InMemoryBookingStore",
    "BookingConflictError",
    "create_booking_group",
    "extend_booking_series",
    "cancel_booking",
    "check_booking_conflicts",
]
