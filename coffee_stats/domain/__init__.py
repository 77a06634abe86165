"""
도메인 계층 퍼블릭 API

이 모듈은 도메인 계층의 주요 클래스와 함수를 재수출하여
일관된 퍼블릭 API를 제공합니다.
"""
from __future__ import annotations

from .exceptions import DataLoadError, DomainError, ValidationError
from .models import (
    AggregateResult,
    CategoryStats,
    ClassifiedEvents,
    DetailItem,
    EffectiveRange,
    ForecastEntry,
    ForecastResult,
    GreenStatsMetadata,
    Interval,
    InventoryItem,
    LogEvent,
    TrendPoint,
)
from .normalization import (
    normalize_event,
    normalize_events,
    normalize_item,
    normalize_items,
    parse_numeric,
)
from .validation import parse_period_key, validate_granularity, validate_view

__all__ = [
    # 예외
    "DomainError",
    "ValidationError",
    "DataLoadError",
    # 입력 모델
    "LogEvent",
    "InventoryItem",
    # 기간 모델
    "Interval",
    "EffectiveRange",
    "ClassifiedEvents",
    # 결과 모델
    "AggregateResult",
    "CategoryStats",
    "TrendPoint",
    "ForecastEntry",
    "ForecastResult",
    "DetailItem",
    "GreenStatsMetadata",
    # 정규화
    "normalize_event",
    "normalize_events",
    "normalize_item",
    "normalize_items",
    "parse_numeric",
    # 검증
    "parse_period_key",
    "validate_granularity",
    "validate_view",
]
