"""재고 소진 예측.

카테고리별 잔량과 현재 일평균 소비율로 남은 일수를 추정합니다.
예측은 항상 "전체 기간" 집계의 현재 소비율을 기준으로 하며,
과거 기간 뷰에서는 계산하지 않습니다.
"""

from __future__ import annotations

import logging
import math
from typing import Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..core.config import CONFIG, StatsConfig
from ..domain.models import AggregateResult, ForecastEntry, ForecastResult, InventoryItem

logger = logging.getLogger(__name__)


def _safe_rate(value: Optional[float]) -> float:
    """음수/NaN/무한대 소비율은 0으로 취급합니다."""
    if value is None:
        return 0.0
    rate = float(value)
    if not np.isfinite(rate) or rate <= 0:
        return 0.0
    return rate


def days_until_empty(remaining: float, daily_rate: float) -> int:
    """
    ceil(잔량 / 일평균 소비율)을 반환합니다.

    소비율이 0 이하이거나 잔량이 없으면 0(추정 불가)입니다.
    """
    rate = _safe_rate(daily_rate)
    if rate <= 0 or remaining <= 0:
        return 0
    return int(math.ceil(remaining / rate))


def daily_rates_from_aggregate(aggregate: AggregateResult) -> dict[str, float]:
    """집계 결과의 카테고리별 소비량을 달력 일수로 나눈 일평균 소비율."""
    days = max(1, aggregate.actual_days)
    return {c: stats.amount / days for c, stats in aggregate.by_category.items()}


def forecast_inventory(
    items: Sequence[InventoryItem],
    daily_rates_by_category: Mapping[str, float],
    *,
    total_daily_rate: Optional[float] = None,
    config: StatsConfig = CONFIG,
) -> ForecastResult:
    """
    전체 및 카테고리별 재고 소진일을 추정합니다.

    카테고리별:
    - remaining: 해당 카테고리 원두 잔량 합계
    - remaining_value: sum(잔량 * 가격 / 용량)
    - estimated_days_until_empty: ceil(remaining / daily_rate), 소비율이 0이면 0

    잔량과 소비율이 모두 0인 카테고리는 결과에서 제외됩니다.

    Args:
        items: 원두 재고 목록
        daily_rates_by_category: 카테고리 -> 일평균 소비율
        total_daily_rate: 전체 일평균 소비율 (None이면 카테고리 합계)
        config: 통계 설정

    Returns:
        ForecastResult

    Examples:
        >>> result = forecast_inventory(items, {"espresso": 18.0})
        >>> result.by_category[0].estimated_days_until_empty
        12
    """
    categories = list(config.forecast.categories)
    default_category = config.classifier.default_category

    # ========================================
    # 카테고리별 잔량/잔존 가치
    # ========================================
    if items:
        frame = pd.DataFrame(
            {
                "category": [
                    i.category if i.category in categories else default_category for i in items
                ],
                "remaining": [float(i.remaining) for i in items],
                "remaining_value": [float(i.remaining_value) for i in items],
            }
        )
        grouped = frame.groupby("category")[["remaining", "remaining_value"]].sum()
        total_remaining = float(frame["remaining"].sum())
        total_value = float(frame["remaining_value"].sum())
    else:
        grouped = pd.DataFrame(columns=["remaining", "remaining_value"])
        total_remaining = 0.0
        total_value = 0.0

    entries: list[ForecastEntry] = []
    for category in categories:
        remaining = float(grouped.at[category, "remaining"]) if category in grouped.index else 0.0
        value = float(grouped.at[category, "remaining_value"]) if category in grouped.index else 0.0
        rate = _safe_rate(daily_rates_by_category.get(category))

        # 보여줄 것이 없는 카테고리 제외
        if remaining <= 0 and rate <= 0:
            continue

        entries.append(
            ForecastEntry(
                category=category,
                label=config.forecast.labels.get(category, category),
                remaining=remaining,
                remaining_value=value,
                daily_rate=rate,
                estimated_days_until_empty=days_until_empty(remaining, rate),
            )
        )

    # ========================================
    # 전체 합계
    # ========================================
    if total_daily_rate is None:
        total_rate = sum(_safe_rate(r) for r in daily_rates_by_category.values())
    else:
        total_rate = _safe_rate(total_daily_rate)

    total = ForecastEntry(
        category=None,
        label="전체",
        remaining=total_remaining,
        remaining_value=total_value,
        daily_rate=total_rate,
        estimated_days_until_empty=days_until_empty(total_remaining, total_rate),
    )

    logger.debug(
        f"Forecast: remaining={total_remaining:.2f}, rate={total_rate:.2f}, "
        f"categories={[e.category for e in entries]}"
    )

    return ForecastResult(total=total, by_category=entries)


def estimate_finish_date(
    remaining: float,
    daily_rate: float,
    now: int,
    *,
    config: StatsConfig = CONFIG,
) -> Optional[pd.Timestamp]:
    """
    재고가 소진될 것으로 예상되는 날짜를 계산합니다.

    일평균 소비율은 최소값(기본 1/일)으로 보정합니다.
    잔량이 없거나 소비율이 0이면 None을 반환합니다.

    Args:
        remaining: 잔량
        daily_rate: 일평균 소비율
        now: 현재 시각 (epoch 밀리초)
        config: 통계 설정

    Returns:
        소진 예상 날짜 (설정 시간대의 자정) 또는 None
    """
    rate = _safe_rate(daily_rate)
    if remaining <= 0 or rate <= 0:
        return None

    adjusted = max(config.forecast.min_daily_rate_for_finish_date, rate)
    days = int(math.ceil(remaining / adjusted))
    today = pd.Timestamp(int(now), unit="ms", tz="UTC").tz_convert(config.calendar.timezone)
    return today.normalize() + pd.DateOffset(days=days)
