"""
원본 기록 정규화 유틸리티

이 모듈은 앱이 저장하는 원본 JSON 레코드(brewingNotes, coffeeBeans)를
통계 엔진의 LogEvent / InventoryItem 모델로 변환합니다.
숫자 필드는 "250g", "¥98" 같은 문자열도 허용하며, 해석할 수 없는
값은 0(또는 None)으로 처리합니다. 정규화는 예외를 던지지 않습니다.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Optional, Sequence

import pandas as pd

from ..core.config import (
    CONFIG,
    SOURCE_BREW,
    SOURCE_CAPACITY_ADJUSTMENT,
    SOURCE_KINDS,
    SOURCE_QUICK_DECREMENT,
    SOURCE_ROASTING,
    STATE_GREEN,
    STATE_ROASTED,
    StatsConfig,
)
from .models import InventoryItem, LogEvent

logger = logging.getLogger(__name__)

# 숫자와 소수점 이외의 문자
_NON_NUMERIC = re.compile(r"[^\d.]")

# 원본 source 값 -> source_kind
# 값이 없거나 외부 앱에서 가져온 기록은 일반 추출 기록으로 취급합니다.
SOURCE_ALIASES: dict[str, str] = {
    "quick-decrement": SOURCE_QUICK_DECREMENT,
    "capacity-adjustment": SOURCE_CAPACITY_ADJUSTMENT,
    "roasting": SOURCE_ROASTING,
    "beanconqueror-import": SOURCE_BREW,
    "brew": SOURCE_BREW,
}


# ========================================
# 숫자 필드 헬퍼
# ========================================


def parse_numeric(value: Any) -> float:
    """
    숫자 또는 숫자가 섞인 문자열을 float로 변환합니다.

    숫자와 소수점 이외의 문자를 모두 제거한 뒤 해석하며,
    실패하면 0.0을 반환합니다.

    Examples:
        >>> parse_numeric("250g")
        250.0
        >>> parse_numeric("¥98.5")
        98.5
        >>> parse_numeric(None)
        0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if pd.notna(value) else 0.0

    cleaned = _NON_NUMERIC.sub("", str(value))
    parsed = pd.to_numeric(cleaned, errors="coerce") if cleaned else float("nan")
    if pd.isna(parsed):
        return 0.0
    return float(parsed)


def _optional_numeric(value: Any) -> Optional[float]:
    """값이 없으면 None, 있으면 parse_numeric 결과를 반환합니다."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_numeric(value)


def _timestamp_ms(value: Any) -> Optional[int]:
    """epoch 밀리초 또는 날짜 문자열을 epoch 밀리초 정수로 변환합니다."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if pd.notna(value) else None

    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(ts):
        return None
    return int(ts.value // 1_000_000)


# ========================================
# 원두(재고) 정규화
# ========================================


def normalize_item(
    raw: Mapping[str, Any], *, config: StatsConfig = CONFIG
) -> Optional[InventoryItem]:
    """
    원본 원두 레코드를 InventoryItem으로 변환합니다.

    필드 매핑:
    - beanType -> category (알 수 없는 값은 기본 카테고리)
    - beanState -> state ("green"이 아니면 "roasted")
    - capacity / remaining / price -> 숫자 (문자열 허용)
    - timestamp -> created_at

    Args:
        raw: 원본 원두 레코드
        config: 통계 설정

    Returns:
        InventoryItem. id가 없으면 None.

    Examples:
        >>> normalize_item({"id": "b1", "name": "예가체프", "capacity": "200g",
        ...                 "remaining": "120", "price": "68", "beanType": "filter"})
        InventoryItem(id='b1', category='filter', capacity=200.0, ...)
    """
    item_id = raw.get("id")
    if item_id is None or str(item_id).strip() == "":
        logger.debug("Skipping bean record without id")
        return None

    category = raw.get("beanType", raw.get("category"))
    if category not in config.classifier.categories:
        category = config.classifier.default_category

    state = raw.get("beanState", raw.get("state"))
    state = STATE_GREEN if state == STATE_GREEN else STATE_ROASTED

    capacity = max(0.0, parse_numeric(raw.get("capacity")))
    remaining = max(0.0, parse_numeric(raw.get("remaining")))

    return InventoryItem(
        id=str(item_id),
        category=category,
        capacity=capacity,
        remaining=remaining,
        unit_price=max(0.0, parse_numeric(raw.get("price", raw.get("unit_price")))),
        created_at=_timestamp_ms(raw.get("timestamp", raw.get("created_at"))) or 0,
        state=state,
        name=str(raw.get("name") or ""),
    )


def normalize_items(
    records: Iterable[Mapping[str, Any]], *, config: StatsConfig = CONFIG
) -> list[InventoryItem]:
    """원두 레코드 목록을 정규화합니다. 변환할 수 없는 레코드는 건너뜁니다."""
    items: list[InventoryItem] = []
    for raw in records or []:
        if not isinstance(raw, Mapping):
            logger.debug(f"Skipping non-mapping bean record: {type(raw)}")
            continue
        item = normalize_item(raw, config=config)
        if item is not None:
            items.append(item)
    return items


# ========================================
# 기록(이벤트) 정규화
# ========================================


def normalize_event(
    raw: Mapping[str, Any],
    items_by_name: Optional[Mapping[str, InventoryItem]] = None,
) -> Optional[LogEvent]:
    """
    원본 기록(노트) 레코드를 LogEvent로 변환합니다.

    필드 매핑:
    - source -> source_kind (없으면 "brew")
    - quickDecrementAmount / changeRecord.quickDecrementAmount -> amount
    - changeRecord.roastingRecord.roastedAmount -> amount (로스팅)
    - changeRecord.roastingRecord.greenBeanId -> linked_item_id (로스팅)
    - params.coffee -> dose (추출)
    - beanId -> linked_item_id, 없으면 coffeeBeanInfo.name으로 원두 이름 매칭

    Args:
        raw: 원본 기록 레코드
        items_by_name: 원두 이름 -> InventoryItem (이름 매칭용)

    Returns:
        LogEvent. id 또는 timestamp가 없으면 None.
    """
    event_id = raw.get("id")
    timestamp = _timestamp_ms(raw.get("timestamp"))
    if event_id is None or timestamp is None:
        logger.debug(f"Skipping note without id/timestamp: {event_id!r}")
        return None

    source = raw.get("source") or raw.get("source_kind")
    source_kind = SOURCE_ALIASES.get(source, source) if source else SOURCE_BREW
    if source_kind not in SOURCE_KINDS:
        source_kind = SOURCE_BREW

    change_record = raw.get("changeRecord") or {}
    bean_info = raw.get("coffeeBeanInfo") or {}
    params = raw.get("params") or {}

    amount: Optional[float] = None
    dose: Optional[str] = None
    linked_item_id = raw.get("beanId")
    item_name = bean_info.get("name") if isinstance(bean_info, Mapping) else None

    # ========================================
    # 출처별 수량 필드 선택
    # ========================================
    if source_kind == SOURCE_QUICK_DECREMENT:
        amount = _optional_numeric(
            raw.get("quickDecrementAmount") or change_record.get("quickDecrementAmount")
        )
    elif source_kind == SOURCE_ROASTING:
        roasting = change_record.get("roastingRecord") or {}
        amount = _optional_numeric(roasting.get("roastedAmount"))
        # 로스팅은 생두 재고를 차감하므로 생두에 연결합니다.
        linked_item_id = roasting.get("greenBeanId") or linked_item_id
        item_name = roasting.get("greenBeanName") or item_name
    elif source_kind == SOURCE_CAPACITY_ADJUSTMENT:
        adjustment = change_record.get("capacityAdjustment") or {}
        amount = _optional_numeric(adjustment.get("changeAmount"))

    if isinstance(params, Mapping) and params.get("coffee") is not None:
        dose = str(params.get("coffee"))

    # ========================================
    # 원두 연결 (ID 우선, 없으면 이름 매칭)
    # ========================================
    if not linked_item_id and item_name and items_by_name:
        matched = items_by_name.get(item_name)
        if matched is not None:
            linked_item_id = matched.id

    rating = _optional_numeric(raw.get("rating"))

    return LogEvent(
        id=str(event_id),
        timestamp=timestamp,
        source_kind=source_kind,
        amount=amount,
        dose=dose,
        linked_item_id=str(linked_item_id) if linked_item_id else None,
        item_name=str(item_name) if item_name else None,
        rating=rating if rating else None,
    )


def normalize_events(
    records: Iterable[Mapping[str, Any]],
    items: Sequence[InventoryItem] = (),
) -> list[LogEvent]:
    """
    기록 레코드 목록을 정규화합니다.

    같은 이름의 원두가 여러 개면 먼저 나온 원두에 연결합니다.
    """
    items_by_name: dict[str, InventoryItem] = {}
    for item in items:
        if item.name and item.name not in items_by_name:
            items_by_name[item.name] = item

    events: list[LogEvent] = []
    for raw in records or []:
        if not isinstance(raw, Mapping):
            logger.debug(f"Skipping non-mapping note record: {type(raw)}")
            continue
        event = normalize_event(raw, items_by_name)
        if event is not None:
            events.append(event)

    logger.debug(f"Normalized {len(events)} events")
    return events
