"""기간 선택 목록.

기록이 존재하는 기간 키를 최신순으로 나열하여 기간 선택 컨트롤을 채웁니다.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from ..core.config import CONFIG, SOURCE_ROASTING, VIEW_GREEN, StatsConfig
from ..domain.models import LogEvent
from ..domain.validation import validate_granularity, validate_view
from .buckets import PERIOD_KEY_FORMATS, local_series


def available_periods(
    events: Sequence[LogEvent],
    granularity: str,
    *,
    view: str = "roasted",
    config: StatsConfig = CONFIG,
) -> list[str]:
    """
    기록에 존재하는 기간 키를 중복 없이 최신순으로 반환합니다.

    원두 뷰는 timestamp가 있는 모든 기록을, 생두 뷰는 로스팅 기록만 사용합니다.

    Args:
        events: 기록 목록
        granularity: 집계 단위
        view: "roasted" 또는 "green"
        config: 통계 설정

    Returns:
        기간 키 목록 (예: ["2024-06", "2024-05"])
    """
    validate_granularity(granularity)
    validate_view(view)

    timestamps = [
        int(e.timestamp)
        for e in events
        if e.timestamp and (view != VIEW_GREEN or e.source_kind == SOURCE_ROASTING)
    ]
    if not timestamps:
        return []

    keys = local_series(pd.Series(timestamps), config.calendar.timezone).dt.strftime(
        PERIOD_KEY_FORMATS[granularity]
    )
    return sorted(keys.unique().tolist(), reverse=True)
