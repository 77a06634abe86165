"""달력 버킷 계산.

집계 단위(year / month / day)와 기간 키로부터 집계 구간 [start, end)을 구하고,
추세 차트용 하위 버킷(연 -> 월, 월 -> 일)을 나열합니다.
모든 경계는 설정된 시간대의 자정 기준으로 계산합니다.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from ..core.config import CONFIG, StatsConfig
from ..domain.models import Interval
from ..domain.validation import parse_period_key, validate_granularity

# 집계 단위별 기간 키 형식
PERIOD_KEY_FORMATS = {
    "year": "%Y",
    "month": "%Y-%m",
    "day": "%Y-%m-%d",
}

# 추세 차트 하위 버킷 단위
SUB_GRANULARITY = {
    "year": "month",
    "month": "day",
}


@dataclass(frozen=True)
class Bucket:
    """추세 차트의 하위 버킷 한 칸 [start, end)."""

    key: str
    label: str
    start: int
    end: int


# ========================================
# 시각 변환 헬퍼
# ========================================


def to_local(timestamp_ms: int, tz: str) -> pd.Timestamp:
    """epoch 밀리초를 지정 시간대의 Timestamp로 변환합니다."""
    return pd.Timestamp(int(timestamp_ms), unit="ms", tz="UTC").tz_convert(tz)


def to_ms(ts: pd.Timestamp) -> int:
    """Timestamp를 epoch 밀리초로 변환합니다."""
    return int(ts.value // 1_000_000)


def local_series(timestamps: pd.Series, tz: str) -> pd.Series:
    """epoch 밀리초 Series를 지정 시간대의 datetime Series로 변환합니다."""
    return pd.to_datetime(timestamps.astype("int64"), unit="ms", utc=True).dt.tz_convert(tz)


def period_key_for(timestamp_ms: int, granularity: str, *, config: StatsConfig = CONFIG) -> str:
    """시각이 속하는 기간 키를 반환합니다 (예: month -> "2024-06")."""
    validate_granularity(granularity)
    local = to_local(timestamp_ms, config.calendar.timezone)
    return local.strftime(PERIOD_KEY_FORMATS[granularity])


def calendar_days(start_ms: int, end_ms: int, *, config: StatsConfig = CONFIG) -> int:
    """
    두 시각 사이의 달력 일수를 양 끝을 포함하여 계산합니다.

    시각을 각 날짜의 자정으로 내린 뒤 날짜 차이 + 1을 반환하며,
    결과는 최소 1입니다 (같은 날이면 1일).

    Examples:
        >>> calendar_days(jan_1_09h, jan_3_18h)
        3
    """
    tz = config.calendar.timezone
    start_day = to_local(start_ms, tz).date()
    end_day = to_local(end_ms, tz).date()
    days = (end_day - start_day).days + 1
    return max(1, days)


# ========================================
# 기간 구간 계산
# ========================================


def period_interval(
    granularity: str,
    period_key: Optional[str],
    *,
    now: Optional[int] = None,
    clamp_to_now: bool = False,
    config: StatsConfig = CONFIG,
) -> Interval:
    """
    집계 단위와 기간 키로부터 반개구간 [start, end)을 계산합니다.

    - year "2024" -> [2024-01-01, 2025-01-01)
    - month "2024-06" -> [2024-06-01, 2024-07-01)
    - day "2024-06-15" -> [2024-06-15, 2024-06-16)
    - None -> [0, inf) (전체 기간, 실제 범위는 데이터로 결정)

    Args:
        granularity: 집계 단위
        period_key: 기간 키 또는 None
        now: 현재 시각 (epoch 밀리초, clamp_to_now에 사용)
        clamp_to_now: True이면 진행 중인 기간의 끝을 now로 자름
        config: 통계 설정

    Returns:
        Interval

    Raises:
        ValidationError: 잘못된 집계 단위 또는 기간 키
    """
    parts = parse_period_key(granularity, period_key)
    if parts is None:
        return Interval(start=0, end=math.inf)

    year, month, day = parts
    start = pd.Timestamp(year=year, month=month, day=day, tz=config.calendar.timezone)

    if granularity == "year":
        end = start + pd.DateOffset(years=1)
    elif granularity == "month":
        end = start + pd.DateOffset(months=1)
    else:
        end = start + pd.DateOffset(days=1)

    start_ms = to_ms(start)
    end_ms = to_ms(end)

    # 진행 중인 기간만 자릅니다. 시작 전인 기간은 구간이 비지 않도록 그대로 둡니다.
    if clamp_to_now and now is not None and start_ms < now < end_ms:
        end_ms = int(now)

    return Interval(start=start_ms, end=end_ms)


def day_interval(timestamp_ms: int, *, config: StatsConfig = CONFIG) -> Interval:
    """시각이 속하는 하루의 구간 [자정, 다음 날 자정)을 반환합니다."""
    key = period_key_for(timestamp_ms, "day", config=config)
    return period_interval("day", key, config=config)


# ========================================
# 하위 버킷 나열
# ========================================


def sub_buckets(
    granularity: str,
    period_key: Optional[str],
    *,
    config: StatsConfig = CONFIG,
) -> list[Bucket]:
    """
    선택한 기간의 하위 버킷을 시간 오름차순으로 나열합니다.

    - year: 해당 연도의 12개월
    - month: 해당 월의 모든 날짜
    - day 또는 전체 기간(None): 빈 목록 (추세 차트를 표시하지 않음)

    Args:
        granularity: 집계 단위
        period_key: 기간 키 또는 None
        config: 통계 설정

    Returns:
        Bucket 목록. 버킷들의 합집합은 기간 구간과 정확히 일치합니다.
    """
    validate_granularity(granularity)
    if period_key is None or granularity not in SUB_GRANULARITY:
        return []

    interval = period_interval(granularity, period_key, config=config)
    tz = config.calendar.timezone
    sub = SUB_GRANULARITY[granularity]
    freq = "MS" if sub == "month" else "D"

    starts = pd.date_range(
        start=to_local(interval.start, tz),
        end=to_local(int(interval.end), tz),
        freq=freq,
        inclusive="left",
    )

    buckets: list[Bucket] = []
    for i, bucket_start in enumerate(starts):
        if i + 1 < len(starts):
            bucket_end = to_ms(starts[i + 1])
        else:
            bucket_end = int(interval.end)

        if sub == "month":
            label = config.calendar.month_label_format.format(month=bucket_start.month)
        else:
            label = config.calendar.day_label_format.format(
                month=bucket_start.month, day=bucket_start.day
            )

        buckets.append(
            Bucket(
                key=bucket_start.strftime(PERIOD_KEY_FORMATS[sub]),
                label=label,
                start=to_ms(bucket_start),
                end=bucket_end,
            )
        )
    return buckets
