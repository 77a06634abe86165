"""
호출 인자 검증 로직

이 모듈은 집계 단위, 기간 키, 통계 뷰 값의 형식을 검증합니다.
검증 실패는 호출자 오류이므로 ValidationError를 발생시킵니다.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

import pandas as pd

from ..core.config import GRANULARITIES, VIEWS
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

# 집계 단위별 기간 키 형식
_PERIOD_KEY_PATTERNS = {
    "year": re.compile(r"^(\d{4})$"),
    "month": re.compile(r"^(\d{4})-(\d{2})$"),
    "day": re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"),
}

# 시간대 보정 후에도 구간 경계가 pandas Timestamp 범위 안에 있도록 양 끝 연도를 제외합니다.
MIN_PERIOD_YEAR = pd.Timestamp.min.year + 1
MAX_PERIOD_YEAR = pd.Timestamp.max.year - 1


def validate_granularity(granularity: object) -> str:
    """
    집계 단위가 year / month / day 중 하나인지 확인합니다.

    Raises:
        ValidationError: 지원하지 않는 집계 단위
    """
    if granularity not in GRANULARITIES:
        logger.error(f"Invalid granularity: {granularity!r}")
        raise ValidationError(
            f"지원하지 않는 집계 단위입니다: {granularity!r} (year, month, day 중 선택)"
        )
    return str(granularity)


def validate_view(view: object) -> str:
    """통계 뷰가 roasted / green 중 하나인지 확인합니다."""
    if view not in VIEWS:
        logger.error(f"Invalid stats view: {view!r}")
        raise ValidationError(
            f"지원하지 않는 통계 뷰입니다: {view!r} (roasted, green 중 선택)"
        )
    return str(view)


def parse_period_key(
    granularity: str, period_key: Optional[str]
) -> Optional[Tuple[int, int, int]]:
    """
    기간 키를 (year, month, day) 튜플로 해석합니다.

    연 단위 키는 month=1, day=1, 월 단위 키는 day=1로 채웁니다.

    Args:
        granularity: 집계 단위
        period_key: "YYYY" | "YYYY-MM" | "YYYY-MM-DD" 또는 None(전체 기간)

    Returns:
        (year, month, day) 튜플. period_key가 None이면 None.

    Raises:
        ValidationError: 집계 단위와 키 형식이 맞지 않거나 달력에 없는 날짜

    Examples:
        >>> parse_period_key("month", "2024-06")
        (2024, 6, 1)
        >>> parse_period_key("year", None) is None
        True
    """
    validate_granularity(granularity)
    if period_key is None:
        return None

    match = _PERIOD_KEY_PATTERNS[granularity].match(str(period_key).strip())
    if match is None:
        logger.error(f"Malformed period key {period_key!r} for {granularity}")
        raise ValidationError(
            f"기간 키 형식이 올바르지 않습니다: {period_key!r} ({granularity})"
        )

    parts = [int(p) for p in match.groups()]
    year = parts[0]
    month = parts[1] if len(parts) > 1 else 1
    day = parts[2] if len(parts) > 2 else 1

    # ========================================
    # 달력 범위 검증
    # ========================================
    if not MIN_PERIOD_YEAR <= year <= MAX_PERIOD_YEAR:
        logger.error(f"Year out of supported range in period key {period_key!r}")
        raise ValidationError(
            f"지원하지 않는 연도입니다 ({MIN_PERIOD_YEAR}~{MAX_PERIOD_YEAR}): {period_key!r}"
        )

    if not 1 <= month <= 12:
        logger.error(f"Month out of range in period key {period_key!r}")
        raise ValidationError(f"존재하지 않는 월입니다: {period_key!r}")

    if not 1 <= day <= pd.Timestamp(year=year, month=month, day=1).days_in_month:
        logger.error(f"Day out of range in period key {period_key!r}")
        raise ValidationError(f"존재하지 않는 날짜입니다: {period_key!r}")

    return year, month, day
