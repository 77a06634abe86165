"""용량 차이 기반 소비량 추정.

기록이 하나도 없지만 원두의 용량과 잔량이 다를 때(기록 기능 이전에 소비했거나
기록을 남기지 않은 경우), 용량 - 잔량 합계로 전체 기간 소비량을 추정합니다.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.config import CONFIG, StatsConfig
from ..domain.models import AggregateResult, CategoryStats, EffectiveRange, InventoryItem
from .buckets import calendar_days

logger = logging.getLogger(__name__)


def should_use_fallback(
    period_key: Optional[str],
    event_count: int,
    items: Sequence[InventoryItem],
) -> bool:
    """
    추정치 사용 조건을 확인합니다.

    전체 기간 뷰이고, 집계된 기록이 정확히 0건이며, 원두가 1개 이상일 때만
    사용합니다. 기록이 일부라도 있으면 추정치를 쓰지 않습니다.
    """
    return period_key is None and event_count == 0 and len(items) > 0


def estimate_from_inventory(
    items: Sequence[InventoryItem],
    now: int,
    *,
    config: StatsConfig = CONFIG,
) -> AggregateResult:
    """
    원두의 용량 - 잔량으로 전체 기간 소비량과 비용을 추정합니다.

    - 총량: sum(max(0, 용량 - 잔량))
    - 비용: 용량이 0보다 큰 원두에 대해 sum(사용량 * 가격 / 용량)
    - 달력 일수: 가장 먼저 등록된 원두부터 현재까지 (추정 사용량이 없으면 1)

    Args:
        items: 원두 재고 목록
        now: 현재 시각 (epoch 밀리초)
        config: 통계 설정

    Returns:
        used_fallback=True 인 AggregateResult
    """
    categories = config.classifier.categories
    totals = {c: [0.0, 0.0] for c in categories}
    total_amount = 0.0
    total_cost = 0.0
    earliest: Optional[int] = None

    for item in items:
        consumed = item.consumed
        if consumed > 0:
            cost = consumed * item.price_per_unit
            total_amount += consumed
            total_cost += cost

            category = item.category if item.category in totals else config.classifier.default_category
            totals[category][0] += consumed
            totals[category][1] += cost

        if item.created_at and (earliest is None or item.created_at < earliest):
            earliest = int(item.created_at)

    by_category = {
        c: CategoryStats(
            amount=amount,
            cost=cost,
            percentage=amount / total_amount * 100 if total_amount > 0 else 0.0,
        )
        for c, (amount, cost) in totals.items()
    }

    effective: Optional[EffectiveRange] = None
    actual_days = 1
    if earliest is not None and total_amount > 0:
        effective = EffectiveRange(start=earliest, end=int(now))
        actual_days = calendar_days(earliest, int(now), config=config)

    logger.info(
        f"Using inventory fallback: consumed={total_amount:.2f} over {actual_days} days "
        f"from {len(items)} items"
    )

    return AggregateResult(
        total_amount=total_amount,
        total_cost=total_cost,
        by_category=by_category,
        daily_amount=total_amount / actual_days,
        daily_cost=total_cost / actual_days,
        actual_days=actual_days,
        effective_range=effective,
        event_count=0,
        used_fallback=True,
    )
