"""Analytics layer facade for the coffee statistics engine."""

from .aggregate import aggregate_range, count_actual_days, resolve_effective_range
from .buckets import period_interval, period_key_for, sub_buckets
from .classifier import classify_events, parse_dose
from .fallback import estimate_from_inventory, should_use_fallback
from .habits import HabitStats, compute_habits
from .inventory import InventoryReport, InventorySummary, summarize_inventory
from .periods import available_periods
from .trend import build_trend

__all__ = [
    "aggregate_range",
    "count_actual_days",
    "resolve_effective_range",
    "period_interval",
    "period_key_for",
    "sub_buckets",
    "classify_events",
    "parse_dose",
    "estimate_from_inventory",
    "should_use_fallback",
    "HabitStats",
    "compute_habits",
    "InventoryReport",
    "InventorySummary",
    "summarize_inventory",
    "available_periods",
    "build_trend",
]
