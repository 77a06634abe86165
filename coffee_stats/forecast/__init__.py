"""재고 소진 예측 모듈."""

from .inventory import (
    daily_rates_from_aggregate,
    days_until_empty,
    estimate_finish_date,
    forecast_inventory,
)

__all__ = [
    "daily_rates_from_aggregate",
    "days_until_empty",
    "estimate_finish_date",
    "forecast_inventory",
]
