"""원두 재고 요약.

원두 목록 전체(및 카테고리별)의 개수, 중량, 비용 요약을 계산합니다.
기록과 무관하게 재고 스냅샷만으로 계산합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import pandas as pd

from ..core.config import CONFIG, StatsConfig
from ..domain.models import InventoryItem

_SUMMARY_COLUMNS = ["category", "capacity", "remaining", "price", "consumed", "consumed_cost", "is_empty"]


@dataclass(frozen=True)
class InventorySummary:
    """
    원두 재고 요약 한 묶음.

    Attributes:
        total_items: 원두 수
        empty_items: 소진된 원두 수
        active_items: 사용 중인 원두 수
        total_weight: 구매 용량 합계
        remaining_weight: 잔량 합계
        consumed_weight: 사용량 합계
        total_cost: 구매 가격 합계
        consumed_cost: 사용량에 해당하는 비용
        average_item_price: 원두 한 봉지 평균 가격
        average_price_per_gram: 구매 가격 합계 / 구매 용량 합계
    """

    total_items: int = 0
    empty_items: int = 0
    active_items: int = 0
    total_weight: float = 0.0
    remaining_weight: float = 0.0
    consumed_weight: float = 0.0
    total_cost: float = 0.0
    consumed_cost: float = 0.0
    average_item_price: float = 0.0
    average_price_per_gram: float = 0.0


@dataclass(frozen=True)
class InventoryReport:
    """전체 요약과 카테고리별 요약."""

    overall: InventorySummary
    by_category: dict[str, InventorySummary] = field(default_factory=dict)


def is_empty_item(item: InventoryItem, *, config: StatsConfig = CONFIG) -> bool:
    """용량이 있고 잔량이 임계값(0.001) 미만이면 소진된 원두입니다."""
    return item.capacity > 0 and item.remaining < config.forecast.empty_threshold


def _summarize(frame: pd.DataFrame) -> InventorySummary:
    if frame.empty:
        return InventorySummary()

    total_items = int(len(frame))
    empty_items = int(frame["is_empty"].sum())
    total_weight = float(frame["capacity"].sum())
    total_cost = float(frame["price"].sum())

    return InventorySummary(
        total_items=total_items,
        empty_items=empty_items,
        active_items=total_items - empty_items,
        total_weight=total_weight,
        remaining_weight=float(frame["remaining"].sum()),
        consumed_weight=float(frame["consumed"].sum()),
        total_cost=total_cost,
        consumed_cost=float(frame["consumed_cost"].sum()),
        average_item_price=total_cost / total_items,
        average_price_per_gram=total_cost / total_weight if total_weight > 0 else 0.0,
    )


def summarize_inventory(
    items: Sequence[InventoryItem],
    *,
    config: StatsConfig = CONFIG,
) -> InventoryReport:
    """
    원두 재고 요약을 계산합니다.

    카테고리가 없거나 알 수 없는 원두는 기본 카테고리로 묶습니다.
    카테고리별 요약은 설정의 카테고리 순서를 따르며, 원두가 없는 카테고리는
    0으로 채워집니다.

    Args:
        items: 원두 재고 목록
        config: 통계 설정

    Returns:
        InventoryReport
    """
    categories = list(config.classifier.categories)
    default_category = config.classifier.default_category

    frame = pd.DataFrame(
        [
            {
                "category": item.category if item.category in categories else default_category,
                "capacity": item.capacity,
                "remaining": item.remaining,
                "price": item.unit_price,
                "consumed": item.consumed,
                "consumed_cost": item.consumed * item.price_per_unit,
                "is_empty": is_empty_item(item, config=config),
            }
            for item in items
        ],
        columns=_SUMMARY_COLUMNS,
    )

    by_category = {
        category: _summarize(frame[frame["category"] == category]) for category in categories
    }
    return InventoryReport(overall=_summarize(frame), by_category=by_category)
