"""추출 습관 통계.

기록의 시각 분포로 가장 이른/늦은 추출 시각, 가장 활발한 시간대,
최장 연속 기록 일수, 평점 상위/하위 원두를 계산합니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
import pandas as pd

from ..core.config import CONFIG, SOURCE_CAPACITY_ADJUSTMENT, StatsConfig
from ..domain.models import LogEvent
from .buckets import local_series

logger = logging.getLogger(__name__)

# 하루의 시작 시각. 이보다 이른 기록은 전날 밤의 연장으로 봅니다.
DAY_START_HOUR = 6

# (이름, 시작 시, 끝 시). 마지막 시간대는 나머지 시각(22시~5시) 전부입니다.
TIME_PERIODS = (
    ("이른 아침", 5, 9),
    ("오전", 9, 12),
    ("점심", 12, 14),
    ("오후", 14, 18),
    ("저녁", 18, 22),
    ("심야", 22, 5),
)

RANKING_SIZE = 3

NO_VALUE = "-"


@dataclass(frozen=True)
class RatedItem:
    name: str
    rating: float


@dataclass(frozen=True)
class HabitStats:
    """
    추출 습관 통계.

    Attributes:
        total_events: 용량 조정을 제외한 기록 수
        earliest_time: 가장 이른 추출 시각 "HH:MM" (06:00 기준)
        latest_time: 가장 늦은 추출 시각 "HH:MM" (06:00 기준)
        most_active_period: 기록이 가장 많은 시간대 이름
        longest_streak: 하루 이상 기록이 있는 연속 일수의 최댓값
        top_rated: 평균 평점 상위 원두
        lowest_rated: 평균 평점 하위 원두
    """

    total_events: int = 0
    earliest_time: str = NO_VALUE
    latest_time: str = NO_VALUE
    most_active_period: str = NO_VALUE
    longest_streak: int = 0
    top_rated: list[RatedItem] = field(default_factory=list)
    lowest_rated: list[RatedItem] = field(default_factory=list)


def time_period_name(hour: int) -> str:
    """시각(0~23)이 속하는 시간대 이름을 반환합니다."""
    for name, start, end in TIME_PERIODS[:-1]:
        if start <= hour < end:
            return name
    return TIME_PERIODS[-1][0]


def _longest_streak(days: pd.Series) -> int:
    unique_days = days.drop_duplicates().sort_values().reset_index(drop=True)
    if unique_days.empty:
        return 0

    # 전날과 하루 차이가 아니면 새 구간이 시작됩니다.
    gaps = unique_days.diff().dt.days.ne(1)
    run_ids = gaps.cumsum()
    return int(run_ids.value_counts().max())


def _rankings(events: Sequence[LogEvent]) -> tuple[list[RatedItem], list[RatedItem]]:
    rated = pd.DataFrame(
        [
            {"name": e.item_name, "rating": float(e.rating)}
            for e in events
            if e.rating and e.rating > 0 and e.item_name
        ],
        columns=["name", "rating"],
    )
    if rated.empty:
        return [], []

    averages = rated.groupby("name", sort=False)["rating"].mean()
    top = averages.sort_values(ascending=False, kind="mergesort").head(RANKING_SIZE)
    bottom = averages.sort_values(ascending=True, kind="mergesort").head(RANKING_SIZE)

    def to_items(series: pd.Series) -> list[RatedItem]:
        return [RatedItem(name=str(n), rating=round(float(r), 1)) for n, r in series.items()]

    return to_items(top), to_items(bottom)


def compute_habits(
    events: Sequence[LogEvent],
    *,
    config: StatsConfig = CONFIG,
) -> HabitStats:
    """
    추출 습관 통계를 계산합니다.

    용량 조정 기록은 소비가 아니므로 제외합니다. 빠른 차감 기록은 평점이
    없지만 시각 관련 통계에는 포함됩니다.

    Args:
        events: 기록 목록
        config: 통계 설정 (시간대)

    Returns:
        HabitStats
    """
    valid = [e for e in events if e.source_kind != SOURCE_CAPACITY_ADJUSTMENT]
    timed = [e for e in valid if e.timestamp]

    top_rated, lowest_rated = _rankings(valid)
    if not timed:
        return HabitStats(
            total_events=len(valid), top_rated=top_rated, lowest_rated=lowest_rated
        )

    local = local_series(
        pd.Series([int(e.timestamp) for e in timed]), config.calendar.timezone
    )
    hours = local.dt.hour
    minutes = hours * 60 + local.dt.minute

    # ========================================
    # 이른/늦은 시각 (06:00 이전은 24시간을 더해 비교)
    # ========================================
    sortable = np.where(hours < DAY_START_HOUR, minutes + 24 * 60, minutes)
    earliest = local.iloc[int(np.argmin(sortable))]
    latest = local.iloc[int(np.argmax(sortable))]

    # ========================================
    # 가장 활발한 시간대 (동률이면 이른 시간대)
    # ========================================
    counts = hours.map(time_period_name).value_counts()
    most_active = NO_VALUE
    best = 0
    for name, _, _ in TIME_PERIODS:
        count = int(counts.get(name, 0))
        if count > best:
            best = count
            most_active = name

    streak = _longest_streak(local.dt.tz_localize(None).dt.normalize())

    logger.debug(f"Computed habits over {len(valid)} events, longest streak {streak}")

    return HabitStats(
        total_events=len(valid),
        earliest_time=earliest.strftime("%H:%M"),
        latest_time=latest.strftime("%H:%M"),
        most_active_period=most_active,
        longest_streak=streak,
        top_rated=top_rated,
        lowest_rated=lowest_rated,
    )
