"""
도메인 모델: 통계 엔진의 핵심 데이터 구조

이 모듈은 통계 엔진이 읽는 입력(기록, 원두 재고)과 계산 결과를 정의합니다.
모든 모델은 불변(frozen) 데이터클래스로 구현되어 안전한 데이터 전달을 보장합니다.
입력은 외부 저장소가 소유하며, 엔진은 읽기만 합니다.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Union

import pandas as pd

from ..core.config import SOURCE_BREW, STATE_GREEN, STATE_ROASTED

# 분류된 이벤트 테이블 스키마
CLASSIFIED_COLUMNS = [
    "id",
    "timestamp",
    "source_kind",
    "amount",
    "cost",
    "category",
    "item_id",
    "item_name",
]


# ============================================================
# 입력 모델
# ============================================================


@dataclass(frozen=True)
class LogEvent:
    """
    추출/차감/용량 조정/로스팅 기록 한 건.

    Attributes:
        id: 기록 ID
        timestamp: 기록 시각 (epoch 밀리초)
        source_kind: "brew" | "quick-decrement" | "capacity-adjustment" | "roasting"
        amount: 명시적 수량 (빠른 차감량, 로스팅량)
        dose: 추출 기록의 자유 형식 원두량 문자열 (예: "15g")
        unit_price: 비용 계산용 가격 (연결 원두 가격보다 우선)
        total_capacity: 비용 계산용 용량 (연결 원두 용량보다 우선)
        linked_item_id: 연결된 원두 ID (로스팅은 생두 ID)
        item_name: 기록 당시의 원두 이름
        rating: 추출 평점
    """

    id: str
    timestamp: int
    source_kind: str = SOURCE_BREW
    amount: Optional[float] = None
    dose: Optional[str] = None
    unit_price: Optional[float] = None
    total_capacity: Optional[float] = None
    linked_item_id: Optional[str] = None
    item_name: Optional[str] = None
    rating: Optional[float] = None


@dataclass(frozen=True)
class InventoryItem:
    """
    재고 원두 한 봉지.

    Attributes:
        id: 원두 ID
        category: "espresso" | "filter" | "omni" | "other" (없으면 None)
        capacity: 구매 용량 (g)
        remaining: 잔량 (g)
        unit_price: 봉지 가격
        created_at: 등록 시각 (epoch 밀리초)
        state: "roasted" | "green"
        name: 원두 이름
    """

    id: str
    category: Optional[str] = None
    capacity: float = 0.0
    remaining: float = 0.0
    unit_price: float = 0.0
    created_at: int = 0
    state: str = STATE_ROASTED
    name: str = ""

    @property
    def is_green(self) -> bool:
        return self.state == STATE_GREEN

    @property
    def consumed(self) -> float:
        """용량 대비 사용량. 잔량이 용량보다 많으면 0."""
        return max(0.0, self.capacity - self.remaining)

    @property
    def price_per_unit(self) -> float:
        if self.capacity <= 0 or self.unit_price <= 0:
            return 0.0
        return self.unit_price / self.capacity

    @property
    def remaining_value(self) -> float:
        return self.remaining * self.price_per_unit


# ============================================================
# 기간 모델
# ============================================================


@dataclass(frozen=True)
class Interval:
    """
    반개구간 [start, end) (epoch 밀리초).

    "전체 기간"은 start=0, end=math.inf 로 표현합니다.
    """

    start: int
    end: Union[int, float]

    @property
    def is_bounded(self) -> bool:
        return not math.isinf(self.end)

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp < self.end


@dataclass(frozen=True)
class EffectiveRange:
    """명목 구간 안에서 실제 데이터가 존재하는 구간 (양 끝 포함)."""

    start: int
    end: int


@dataclass(frozen=True)
class ClassifiedEvents:
    """
    분류기를 통과한 이벤트 테이블.

    소비량이 0 이하이거나 용량 조정 기록은 이미 제외되어 있으며,
    timestamp 오름차순으로 정렬되어 있습니다.

    Attributes:
        data: CLASSIFIED_COLUMNS 컬럼을 가진 데이터프레임.
              category가 None이면 카테고리 미확인 이벤트입니다.
    """

    data: pd.DataFrame

    @classmethod
    def empty(cls) -> "ClassifiedEvents":
        return cls(pd.DataFrame(columns=CLASSIFIED_COLUMNS))

    @property
    def is_empty(self) -> bool:
        return self.data.empty

    def in_range(self, interval: Interval) -> pd.DataFrame:
        """
        start <= timestamp < end 조건의 이벤트만 반환합니다.

        Args:
            interval: 명목 구간

        Returns:
            필터링된 데이터프레임 복사본 (timestamp 오름차순)
        """
        if self.data.empty:
            return self.data.copy()

        ts = self.data["timestamp"]
        mask = ts >= interval.start
        if interval.is_bounded:
            mask &= ts < interval.end
        return self.data[mask].copy()


# ============================================================
# 결과 모델
# ============================================================


@dataclass(frozen=True)
class CategoryStats:
    """카테고리별 소비량/비용/비중(%)."""

    amount: float = 0.0
    cost: float = 0.0
    percentage: float = 0.0


@dataclass(frozen=True)
class AggregateResult:
    """
    선택한 기간의 집계 결과.

    Attributes:
        total_amount: 총 소비(로스팅)량
        total_cost: 총 비용
        by_category: 카테고리 -> CategoryStats (카테고리 미확인 이벤트 제외)
        daily_amount: 일평균 소비량
        daily_cost: 일평균 비용
        actual_days: 일평균 계산에 사용한 달력 일수 (>= 1)
        effective_range: 실제 데이터 구간 (이벤트가 없으면 None)
        event_count: 집계에 포함된 이벤트 수
        used_fallback: 용량 차이 기반 추정치를 사용했는지 여부
    """

    total_amount: float = 0.0
    total_cost: float = 0.0
    by_category: dict[str, CategoryStats] = field(default_factory=dict)
    daily_amount: float = 0.0
    daily_cost: float = 0.0
    actual_days: int = 1
    effective_range: Optional[EffectiveRange] = None
    event_count: int = 0
    used_fallback: bool = False


@dataclass(frozen=True)
class TrendPoint:
    """추세 차트의 한 점. bucket_key는 "YYYY-MM" 또는 "YYYY-MM-DD"."""

    bucket_key: str
    label: str
    value: float = 0.0


@dataclass(frozen=True)
class ForecastEntry:
    """
    재고 소진 예측 한 행.

    estimated_days_until_empty가 0이면 "추정 불가"를 뜻합니다.
    """

    category: Optional[str]
    label: str
    remaining: float = 0.0
    remaining_value: float = 0.0
    daily_rate: float = 0.0
    estimated_days_until_empty: int = 0


@dataclass(frozen=True)
class ForecastResult:
    """전체 및 카테고리별 재고 소진 예측."""

    total: ForecastEntry
    by_category: list[ForecastEntry] = field(default_factory=list)


@dataclass(frozen=True)
class DetailItem:
    """단일 일자 뷰의 기록 상세 한 행."""

    id: str
    timestamp: int
    item_name: str
    amount: float
    cost: float


@dataclass(frozen=True)
class GreenStatsMetadata:
    """생두(로스팅) 뷰의 데이터 품질 메타데이터."""

    total_roasting_records: int = 0
    valid_roasting_records: int = 0
    actual_days: int = 1
    items_with_price: int = 0
    items_total: int = 0
    today_roasting_records: int = 0
