"""End-to-end orchestration for the coffee statistics engine.

프레젠테이션 계층이 호출하는 퍼블릭 연산을 제공합니다. 모든 연산은
입력 스냅샷과 주입된 now에 대한 순수 함수이며 결과를 저장하지 않습니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from .analytics.aggregate import aggregate_range
from .analytics.buckets import day_interval, period_interval
from .analytics.classifier import classify_events
from .analytics.fallback import estimate_from_inventory, should_use_fallback
from .analytics.inventory import InventoryReport, summarize_inventory
from .analytics.periods import available_periods
from .analytics.trend import build_trend
from .common.performance import measure_time
from .core.config import CONFIG, SOURCE_ROASTING, VIEW_GREEN, VIEW_ROASTED, StatsConfig
from .data_sources.settings import StatsSelection
from .domain.models import (
    AggregateResult,
    ClassifiedEvents,
    DetailItem,
    ForecastResult,
    GreenStatsMetadata,
    Interval,
    InventoryItem,
    LogEvent,
    TrendPoint,
)
from .domain.validation import validate_granularity, validate_view
from .forecast.inventory import daily_rates_from_aggregate, forecast_inventory

logger = logging.getLogger(__name__)

UNKNOWN_ITEM_NAME = "unknown"


@dataclass(frozen=True)
class TodayStats:
    """오늘(now가 속한 날) 소비(로스팅)량과 비용."""

    amount: float = 0.0
    cost: float = 0.0
    event_count: int = 0


@dataclass(frozen=True)
class StatsView:
    """
    통계 화면 한 장에 필요한 결과 묶음.

    Attributes:
        selection: 계산에 사용한 선택 상태
        aggregate: 선택 기간 집계
        trend: 추세 시계열 (연/월 기간 선택 시)
        forecast: 재고 소진 예측 (전체 기간 뷰에서만)
        inventory: 재고 요약 (전체 기간 뷰에서만)
        today: 오늘 통계 (표시하지 않는 뷰에서는 None)
        details: 단일 일자 뷰의 기록 상세 (최신순)
        today_details: 오늘 기록 상세 (생두 뷰, 전체 기간에서만)
        is_historical: 특정 기간을 선택했는지 여부
        available_periods: 선택 가능한 기간 키 (최신순)
        conversion_rate: 생두 뷰의 로스팅 전환율(%)
        metadata: 생두 뷰의 데이터 품질 메타데이터
    """

    selection: StatsSelection
    aggregate: AggregateResult
    trend: list[TrendPoint] = field(default_factory=list)
    forecast: Optional[ForecastResult] = None
    inventory: Optional[InventoryReport] = None
    today: Optional[TodayStats] = None
    details: list[DetailItem] = field(default_factory=list)
    today_details: list[DetailItem] = field(default_factory=list)
    is_historical: bool = False
    available_periods: list[str] = field(default_factory=list)
    conversion_rate: Optional[float] = None
    metadata: Optional[GreenStatsMetadata] = None


# ========================================
# 내부 헬퍼
# ========================================


def view_items(items: Sequence[InventoryItem], view: str) -> list[InventoryItem]:
    """생두 뷰는 생두만, 원두 뷰는 생두가 아닌 원두만 사용합니다."""
    if view == VIEW_GREEN:
        return [i for i in items if i.is_green]
    return [i for i in items if not i.is_green]


def _aggregate(
    classified: ClassifiedEvents,
    items: Sequence[InventoryItem],
    granularity: str,
    period_key: Optional[str],
    now: int,
    config: StatsConfig,
) -> AggregateResult:
    interval = period_interval(granularity, period_key, config=config)
    result = aggregate_range(classified, interval, now, config=config)
    if should_use_fallback(period_key, result.event_count, items):
        return estimate_from_inventory(items, now, config=config)
    return result


def _today(classified: ClassifiedEvents, now: int, config: StatsConfig) -> TodayStats:
    frame = classified.in_range(day_interval(now, config=config))
    if frame.empty:
        return TodayStats()
    return TodayStats(
        amount=float(frame["amount"].sum()),
        cost=float(frame["cost"].sum()),
        event_count=int(len(frame)),
    )


def _details(classified: ClassifiedEvents, interval: Interval) -> list[DetailItem]:
    frame = classified.in_range(interval)
    if frame.empty:
        return []

    frame = frame.iloc[::-1]
    return [
        DetailItem(
            id=str(row.id),
            timestamp=int(row.timestamp),
            item_name=(
                row.item_name
                if isinstance(row.item_name, str) and row.item_name
                else UNKNOWN_ITEM_NAME
            ),
            amount=float(row.amount),
            cost=float(row.cost),
        )
        for row in frame.itertuples(index=False)
    ]


def conversion_rate(total_amount: float, items: Sequence[InventoryItem]) -> float:
    """로스팅량 / 생두 구매 용량 합계 * 100. 용량이 없으면 0."""
    purchased = sum(i.capacity for i in items if i.is_green)
    if purchased <= 0:
        return 0.0
    return total_amount / purchased * 100


# ========================================
# 퍼블릭 연산
# ========================================


@measure_time
def compute_aggregate(
    events: Sequence[LogEvent],
    items: Sequence[InventoryItem],
    granularity: str,
    period_key: Optional[str],
    now: int,
    *,
    view: str = VIEW_ROASTED,
    config: StatsConfig = CONFIG,
) -> AggregateResult:
    """
    선택한 기간의 집계 결과를 계산합니다.

    이 함수는 다음 단계로 집계합니다:
    1. 통계 뷰에 맞는 원두만 선택 (생두 뷰는 생두만)
    2. 기록 분류 (소비량, 비용, 카테고리)
    3. 명목 구간 집계와 실제 데이터 구간의 일평균 계산
    4. 전체 기간에 집계 기록이 0건이고 원두가 있으면 용량 차이로 추정

    Args:
        events: 기록 목록
        items: 원두 재고 목록
        granularity: "year" | "month" | "day"
        period_key: 기간 키 또는 None(전체 기간)
        now: 현재 시각 (epoch 밀리초)
        view: "roasted" 또는 "green"
        config: 통계 설정

    Returns:
        AggregateResult

    Raises:
        ValidationError: 잘못된 집계 단위, 기간 키 또는 통계 뷰

    Examples:
        >>> result = compute_aggregate(events, items, "month", "2024-06", now)
        >>> result.daily_amount
        15.0
    """
    validate_granularity(granularity)
    validate_view(view)

    scoped_items = view_items(items, view)
    classified = classify_events(events, scoped_items, view=view, config=config)
    return _aggregate(classified, scoped_items, granularity, period_key, now, config)


@measure_time
def compute_trend(
    events: Sequence[LogEvent],
    granularity: str,
    period_key: Optional[str],
    now: int,
    *,
    items: Sequence[InventoryItem] = (),
    view: str = VIEW_ROASTED,
    config: StatsConfig = CONFIG,
) -> list[TrendPoint]:
    """
    선택한 기간의 0으로 채워진 추세 시계열을 계산합니다.

    추세는 기간 전체를 표시하므로 now 이후의 버킷도 0으로 포함됩니다.
    전체 기간(None)이나 일 단위에서는 빈 목록을 반환합니다.

    Args:
        events: 기록 목록
        granularity: "year" | "month" | "day"
        period_key: 기간 키 또는 None
        now: 현재 시각. 다른 집계 함수와 호출 형태를 맞추기 위한 인자로,
            추세는 기간 전체를 표시하므로 사용하지 않습니다.
        items: 원두 재고 목록 (수량 계산에는 필요하지 않음)
        view: "roasted" 또는 "green"
        config: 통계 설정

    Returns:
        TrendPoint 목록 (시간 오름차순)
    """
    validate_granularity(granularity)
    validate_view(view)

    classified = classify_events(events, view_items(items, view), view=view, config=config)
    return build_trend(classified, granularity, period_key, config=config)


@measure_time
def compute_forecast(
    items: Sequence[InventoryItem],
    daily_rates_by_category: Mapping[str, float],
    *,
    total_daily_rate: Optional[float] = None,
    config: StatsConfig = CONFIG,
) -> ForecastResult:
    """
    카테고리별 재고 소진일을 추정합니다.

    소비율은 전체 기간 집계의 현재 일평균이어야 합니다.
    total_daily_rate가 없으면 카테고리 소비율 합계를 사용합니다.
    """
    return forecast_inventory(
        items, daily_rates_by_category, total_daily_rate=total_daily_rate, config=config
    )


@measure_time
def list_available_periods(
    events: Sequence[LogEvent],
    granularity: str,
    *,
    view: str = VIEW_ROASTED,
    config: StatsConfig = CONFIG,
) -> list[str]:
    """기록이 존재하는 기간 키를 최신순으로 반환합니다."""
    return available_periods(events, granularity, view=view, config=config)


@measure_time
def compute_today(
    events: Sequence[LogEvent],
    items: Sequence[InventoryItem],
    now: int,
    *,
    view: str = VIEW_ROASTED,
    config: StatsConfig = CONFIG,
) -> TodayStats:
    """now가 속한 달력 날짜의 소비(로스팅)량과 비용을 계산합니다."""
    validate_view(view)
    classified = classify_events(events, view_items(items, view), view=view, config=config)
    return _today(classified, now, config)


@measure_time
def compute_details(
    events: Sequence[LogEvent],
    items: Sequence[InventoryItem],
    granularity: str,
    period_key: Optional[str],
    now: int,
    *,
    view: str = VIEW_ROASTED,
    config: StatsConfig = CONFIG,
) -> list[DetailItem]:
    """
    기간 안의 기록 상세를 최신순으로 반환합니다.

    이름을 알 수 없는 기록은 "unknown"으로 표시합니다.
    """
    validate_granularity(granularity)
    validate_view(view)

    classified = classify_events(events, view_items(items, view), view=view, config=config)
    return _details(classified, period_interval(granularity, period_key, config=config))


@measure_time
def build_stats_view(
    events: Sequence[LogEvent],
    items: Sequence[InventoryItem],
    selection: StatsSelection,
    now: int,
    *,
    config: StatsConfig = CONFIG,
) -> StatsView:
    """
    통계 화면 한 장에 필요한 모든 결과를 계산합니다.

    이 함수는 다음 단계로 결과를 구성합니다:
    1. 선택 검증과 기록 분류 (한 번만 수행하여 모든 결과가 공유)
    2. 선택 기간 집계와 추세
    3. 전체 기간 뷰: 재고 소진 예측, 재고 요약, 오늘 통계
    4. 단일 일자 뷰: 기록 상세
    5. 생두 뷰: 전환율과 메타데이터

    Args:
        events: 기록 목록
        items: 원두 재고 목록
        selection: 집계 단위, 기간 키, 통계 뷰
        now: 현재 시각 (epoch 밀리초)
        config: 통계 설정

    Returns:
        StatsView
    """
    granularity = validate_granularity(selection.granularity)
    view = validate_view(selection.view)
    period_key = selection.period_key
    is_historical = period_key is not None

    # ========================================
    # 1단계: 분류
    # ========================================
    scoped_items = view_items(items, view)
    classified = classify_events(events, scoped_items, view=view, config=config)

    # ========================================
    # 2단계: 집계와 추세
    # ========================================
    aggregate = _aggregate(classified, scoped_items, granularity, period_key, now, config)
    trend = build_trend(classified, granularity, period_key, config=config)

    # ========================================
    # 3단계: 전체 기간 전용 결과
    # ========================================
    forecast: Optional[ForecastResult] = None
    inventory: Optional[InventoryReport] = None
    if not is_historical:
        forecast = forecast_inventory(
            scoped_items,
            daily_rates_from_aggregate(aggregate),
            total_daily_rate=aggregate.daily_amount,
            config=config,
        )
        inventory = summarize_inventory(scoped_items, config=config)

    today: Optional[TodayStats] = None
    today_details: list[DetailItem] = []
    if view == VIEW_GREEN:
        if not is_historical:
            today = _today(classified, now, config)
            today_details = _details(classified, day_interval(now, config=config))
    elif granularity != "day":
        today = _today(classified, now, config)

    # ========================================
    # 4단계: 단일 일자 상세
    # ========================================
    details: list[DetailItem] = []
    if granularity == "day" and is_historical:
        details = _details(classified, period_interval(granularity, period_key, config=config))

    # ========================================
    # 5단계: 생두 뷰 부가 정보
    # ========================================
    rate: Optional[float] = None
    metadata: Optional[GreenStatsMetadata] = None
    if view == VIEW_GREEN:
        rate = conversion_rate(aggregate.total_amount, scoped_items)
        metadata = GreenStatsMetadata(
            total_roasting_records=sum(1 for e in events if e.source_kind == SOURCE_ROASTING),
            valid_roasting_records=aggregate.event_count,
            actual_days=aggregate.actual_days,
            items_with_price=sum(1 for i in scoped_items if i.unit_price > 0),
            items_total=len(scoped_items),
            today_roasting_records=today.event_count if today is not None else 0,
        )

    periods = available_periods(events, granularity, view=view, config=config)

    logger.debug(
        f"Stats view {view}/{granularity}/{period_key}: "
        f"{aggregate.event_count} events, fallback={aggregate.used_fallback}"
    )

    return StatsView(
        selection=selection,
        aggregate=aggregate,
        trend=trend,
        forecast=forecast,
        inventory=inventory,
        today=today,
        details=details,
        today_details=today_details,
        is_historical=is_historical,
        available_periods=periods,
        conversion_rate=rate,
        metadata=metadata,
    )
