"""범위 집계, 실제 데이터 구간 계산, 일평균 정규화.

분류된 기록 테이블을 명목 구간 [start, end)으로 잘라 총량/비용과
카테고리별 비중을 계산하고, 실제 데이터가 존재하는 구간의 달력 일수로
일평균을 구합니다.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import pandas as pd

from ..core.config import CONFIG, StatsConfig
from ..domain.models import (
    AggregateResult,
    CategoryStats,
    ClassifiedEvents,
    EffectiveRange,
    Interval,
)
from .buckets import calendar_days

logger = logging.getLogger(__name__)


# ========================================
# 실제 데이터 구간
# ========================================


def resolve_effective_range(
    in_range: pd.DataFrame,
    interval: Interval,
    now: int,
) -> Optional[EffectiveRange]:
    """
    명목 구간 안에서 실제로 데이터가 존재하는 구간을 계산합니다.

    규칙:
    - 시작: 명목 구간 시작과 구간 내 첫 기록 중 늦은 쪽
    - 끝: 명목 구간의 끝과 현재 시각 중 이른 쪽 (전체 기간은 현재 시각)

    이렇게 하면 첫 기록 이전의 날짜나 아직 오지 않은 날짜가
    일평균을 희석하지 않습니다.

    Args:
        in_range: 명목 구간으로 필터링된 분류 테이블
        interval: 명목 구간
        now: 현재 시각 (epoch 밀리초)

    Returns:
        EffectiveRange. 구간 안에 기록이 없으면 None.
    """
    if in_range.empty:
        return None

    first_record = int(in_range["timestamp"].min())
    start = max(int(interval.start), first_record)

    end = min(int(interval.end), int(now)) if interval.is_bounded else int(now)

    return EffectiveRange(start=start, end=end)


def count_actual_days(
    effective: Optional[EffectiveRange], *, config: StatsConfig = CONFIG
) -> int:
    """
    실제 데이터 구간의 달력 일수 (양 끝 포함, 최소 1).

    구간이 없으면 1을 반환하여 일평균 계산의 0 나누기를 막습니다.
    """
    if effective is None:
        return 1
    return calendar_days(effective.start, effective.end, config=config)


# ========================================
# 범위 집계
# ========================================


def summarize_frame(
    frame: pd.DataFrame,
    categories: Sequence[str],
) -> tuple[float, float, dict[str, CategoryStats]]:
    """
    분류 테이블의 총량/비용과 카테고리별 통계를 계산합니다.

    카테고리가 None(미확인)인 기록은 총량에는 포함되지만
    카테고리별 집계에서는 제외됩니다.

    Args:
        frame: 분류 테이블 (timestamp 오름차순)
        categories: 결과에 포함할 카테고리 목록

    Returns:
        (총량, 총비용, 카테고리 -> CategoryStats)
    """
    if frame.empty:
        return 0.0, 0.0, {c: CategoryStats() for c in categories}

    total_amount = float(frame["amount"].sum())
    total_cost = float(frame["cost"].sum())

    # groupby는 None 카테고리를 자동으로 제외합니다.
    grouped = frame.groupby("category", sort=False)[["amount", "cost"]].sum()

    by_category: dict[str, CategoryStats] = {}
    for category in categories:
        if category in grouped.index:
            amount = float(grouped.at[category, "amount"])
            cost = float(grouped.at[category, "cost"])
        else:
            amount, cost = 0.0, 0.0
        percentage = amount / total_amount * 100 if total_amount > 0 else 0.0
        by_category[category] = CategoryStats(amount=amount, cost=cost, percentage=percentage)

    return total_amount, total_cost, by_category


def aggregate_range(
    classified: ClassifiedEvents,
    interval: Interval,
    now: int,
    *,
    config: StatsConfig = CONFIG,
) -> AggregateResult:
    """
    명목 구간의 집계 결과를 계산합니다.

    이 함수는 다음 단계로 집계합니다:
    1. start <= timestamp < end 기록 선택
    2. 총량/비용 및 카테고리별 비중 계산
    3. 실제 데이터 구간과 달력 일수 계산
    4. 일평균 정규화 (달력 일수는 항상 1 이상)

    Args:
        classified: 분류된 기록 테이블
        interval: 명목 구간
        now: 현재 시각 (epoch 밀리초)
        config: 통계 설정

    Returns:
        AggregateResult
    """
    in_range = classified.in_range(interval)
    total_amount, total_cost, by_category = summarize_frame(
        in_range, config.classifier.categories
    )

    effective = resolve_effective_range(in_range, interval, now)
    actual_days = count_actual_days(effective, config=config)

    logger.debug(
        f"Aggregated {len(in_range)} events: amount={total_amount:.2f}, "
        f"cost={total_cost:.2f}, days={actual_days}"
    )

    return AggregateResult(
        total_amount=total_amount,
        total_cost=total_cost,
        by_category=by_category,
        daily_amount=total_amount / actual_days,
        daily_cost=total_cost / actual_days,
        actual_days=actual_days,
        effective_range=effective,
        event_count=int(len(in_range)),
        used_fallback=False,
    )
