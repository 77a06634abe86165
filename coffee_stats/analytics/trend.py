"""추세 시계열 생성.

선택한 기간의 하위 버킷(연 -> 월, 월 -> 일)마다 소비량을 다시 집계하여
0으로 채워진 차트용 시계열을 만듭니다.
"""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from ..core.config import CONFIG, StatsConfig
from ..domain.models import ClassifiedEvents, TrendPoint
from .buckets import PERIOD_KEY_FORMATS, SUB_GRANULARITY, local_series, period_interval, sub_buckets

logger = logging.getLogger(__name__)


def build_trend(
    classified: ClassifiedEvents,
    granularity: str,
    period_key: Optional[str],
    *,
    config: StatsConfig = CONFIG,
) -> list[TrendPoint]:
    """
    선택한 기간의 추세 시계열을 생성합니다.

    이 함수는 다음 단계로 시계열을 구축합니다:
    1. 하위 버킷 전체를 시간 오름차순으로 나열하고 0으로 초기화
    2. 명목 구간 안의 기록을 하위 버킷 키로 묶어 소비량 합산
    3. 버킷 순서대로 TrendPoint 생성 (기록이 없는 버킷은 0)

    전체 기간(None)이나 일 단위 선택에서는 빈 목록을 반환합니다.

    Args:
        classified: 분류된 기록 테이블
        granularity: 집계 단위
        period_key: 기간 키 또는 None
        config: 통계 설정

    Returns:
        TrendPoint 목록
    """
    buckets = sub_buckets(granularity, period_key, config=config)
    if not buckets:
        return []

    # ========================================
    # 1단계: 0으로 초기화된 버킷
    # ========================================
    values = pd.Series(0.0, index=[b.key for b in buckets])

    # ========================================
    # 2단계: 버킷별 합산
    # ========================================
    interval = period_interval(granularity, period_key, config=config)
    in_range = classified.in_range(interval)
    if not in_range.empty:
        sub = SUB_GRANULARITY[granularity]
        keys = local_series(in_range["timestamp"], config.calendar.timezone).dt.strftime(
            PERIOD_KEY_FORMATS[sub]
        )
        sums = in_range["amount"].groupby(keys.values).sum()
        values = sums.reindex(values.index, fill_value=0.0).astype(float)

    logger.debug(f"Built trend for {granularity} {period_key}: {len(buckets)} buckets")

    # ========================================
    # 3단계: TrendPoint 변환
    # ========================================
    return [
        TrendPoint(bucket_key=b.key, label=b.label, value=float(values.at[b.key]))
        for b in buckets
    ]
