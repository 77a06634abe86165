"""기록 분류기.

기록 한 건에서 소비(로스팅)량, 비용, 카테고리를 추출하고,
소비가 아닌 기록(용량 조정 등)을 걸러냅니다.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..core.config import (
    CONFIG,
    SOURCE_CAPACITY_ADJUSTMENT,
    SOURCE_QUICK_DECREMENT,
    SOURCE_ROASTING,
    VIEW_GREEN,
    StatsConfig,
)
from ..domain.models import CLASSIFIED_COLUMNS, ClassifiedEvents, InventoryItem, LogEvent
from ..domain.validation import validate_view

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def _dose_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def _finite(value: float) -> float:
    """NaN/무한대 수량은 0으로 취급합니다."""
    return value if np.isfinite(value) else 0.0


def parse_dose(dose: Optional[str], *, config: StatsConfig = CONFIG) -> float:
    """
    자유 형식 원두량 문자열에서 첫 번째 숫자를 추출합니다.

    Examples:
        >>> parse_dose("15g")
        15.0
        >>> parse_dose("약 18.5 그램")
        18.5
        >>> parse_dose("적당히")
        0.0
    """
    if not dose:
        return 0.0
    match = _dose_regex(config.classifier.dose_pattern).search(str(dose))
    if match is None:
        return 0.0
    return _finite(float(match.group(0)))


def event_amount(event: LogEvent, *, config: StatsConfig = CONFIG) -> float:
    """
    기록의 소비(로스팅)량을 반환합니다.

    규칙 (순서대로):
    1. 용량 조정 기록: 0 (소비가 아닌 보정)
    2. 빠른 차감: 명시적 차감량
    3. 로스팅: 로스팅한 생두량
    4. 그 외(추출): 원두량 문자열의 첫 숫자, 해석 실패 시 0
    """
    if event.source_kind == SOURCE_CAPACITY_ADJUSTMENT:
        return 0.0
    if event.source_kind in (SOURCE_QUICK_DECREMENT, SOURCE_ROASTING):
        return _finite(float(event.amount)) if event.amount else 0.0
    return parse_dose(event.dose, config=config)


def event_cost(
    event: LogEvent,
    amount: float,
    item: Optional[InventoryItem],
) -> float:
    """
    amount * 가격 / 용량으로 비용을 계산합니다.

    기록에 비용 입력(unit_price, total_capacity)이 있으면 연결 원두 값보다
    우선합니다. 가격이나 용량이 0 이하이면 0입니다.
    """
    price = event.unit_price if event.unit_price is not None else (item.unit_price if item else 0.0)
    capacity = (
        event.total_capacity
        if event.total_capacity is not None
        else (item.capacity if item else 0.0)
    )
    if not price or not capacity or price <= 0 or capacity <= 0:
        return 0.0
    return _finite(amount * price / capacity)


def items_by_id(items: Iterable[InventoryItem]) -> dict[str, InventoryItem]:
    """원두 목록을 ID로 색인합니다. 중복 ID는 처음 나온 원두를 사용합니다."""
    index: dict[str, InventoryItem] = {}
    for item in items:
        index.setdefault(item.id, item)
    return index


def is_view_event(event: LogEvent, view: str) -> bool:
    """
    기록이 통계 뷰에 속하는지 확인합니다.

    생두 뷰는 로스팅 기록만, 원두 뷰는 로스팅을 제외한 기록만 사용합니다.
    """
    if view == VIEW_GREEN:
        return event.source_kind == SOURCE_ROASTING
    return event.source_kind != SOURCE_ROASTING


def classify_events(
    events: Sequence[LogEvent],
    items: Iterable[InventoryItem] = (),
    *,
    view: str = "roasted",
    config: StatsConfig = CONFIG,
) -> ClassifiedEvents:
    """
    기록 목록을 분류하여 집계용 테이블을 만듭니다.

    이 함수는 다음 단계로 테이블을 구축합니다:
    1. 통계 뷰에 속하지 않는 기록과 용량 조정 기록 제외
    2. 출처별 규칙으로 수량 추출 (0 이하이면 제외)
    3. 연결 원두의 가격/용량으로 비용 계산
    4. 연결 원두의 카테고리 확인 (원두가 없으면 None = 미확인)
    5. timestamp 오름차순 정렬

    Args:
        events: 기록 목록
        items: 원두 재고 목록 (비용/카테고리 조회용)
        view: "roasted" 또는 "green"
        config: 통계 설정

    Returns:
        ClassifiedEvents
    """
    validate_view(view)
    index: Mapping[str, InventoryItem] = items_by_id(items)
    categories = config.classifier.categories

    rows: list[dict] = []
    skipped = 0
    for event in events:
        # ========================================
        # 1단계: 제외 대상 기록
        # ========================================
        if event.source_kind == SOURCE_CAPACITY_ADJUSTMENT or not is_view_event(event, view):
            continue

        # ========================================
        # 2단계: 수량 추출
        # ========================================
        amount = event_amount(event, config=config)
        if amount <= 0:
            skipped += 1
            continue

        # ========================================
        # 3~4단계: 비용 및 카테고리
        # ========================================
        item = index.get(event.linked_item_id) if event.linked_item_id else None
        cost = event_cost(event, amount, item)

        category: Optional[str] = None
        if item is not None:
            category = item.category if item.category in categories else config.classifier.default_category

        rows.append(
            {
                "id": event.id,
                "timestamp": int(event.timestamp),
                "source_kind": event.source_kind,
                "amount": float(amount),
                "cost": float(cost),
                "category": category,
                "item_id": item.id if item is not None else None,
                "item_name": event.item_name or (item.name if item is not None else None),
            }
        )

    if skipped:
        logger.debug(f"Skipped {skipped} events without a usable amount")

    if not rows:
        return ClassifiedEvents.empty()

    # 문자열 열은 object로 유지해야 미확인 카테고리가 NaN이 아닌 None으로 남습니다.
    frame = pd.DataFrame(
        {c: pd.Series([row[c] for row in rows], dtype=object) for c in CLASSIFIED_COLUMNS}
    )
    frame = frame.astype({"timestamp": "int64", "amount": "float64", "cost": "float64"})
    frame = frame.sort_values("timestamp", kind="mergesort").reset_index(drop=True)
    return ClassifiedEvents(frame)
