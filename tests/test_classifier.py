"""
기록 분류기 테스트

수량 추출, 비용 계산, 카테고리 확인, 통계 뷰 필터를 테스트합니다.
"""
from __future__ import annotations

import pytest

from coffee_stats.analytics.classifier import (
    classify_events,
    event_amount,
    event_cost,
    parse_dose,
)
from coffee_stats.domain.exceptions import ValidationError
from coffee_stats.domain.models import InventoryItem, LogEvent


def _brew(event_id, ts, dose, item_id=None, **kwargs):
    return LogEvent(id=event_id, timestamp=ts, dose=dose, linked_item_id=item_id, **kwargs)


# ============================================================
# 수량 추출
# ============================================================

@pytest.mark.parametrize(
    "dose, expected",
    [
        ("15g", 15.0),
        ("약 18.5 그램", 18.5),
        ("20", 20.0),
        ("적당히", 0.0),
        ("", 0.0),
        (None, 0.0),
    ],
)
def test_parse_dose(dose, expected):
    """원두량 문자열의 첫 숫자"""
    assert parse_dose(dose) == expected


def test_event_amount_by_source_kind():
    """출처별 수량 규칙"""
    adjustment = LogEvent(id="a", timestamp=1, source_kind="capacity-adjustment", amount=500.0)
    quick = LogEvent(id="q", timestamp=1, source_kind="quick-decrement", amount=12.0, dose="99g")
    roast = LogEvent(id="r", timestamp=1, source_kind="roasting", amount=250.0)
    brew = _brew("b", 1, "16g")

    assert event_amount(adjustment) == 0.0
    assert event_amount(quick) == 12.0
    assert event_amount(roast) == 250.0
    assert event_amount(brew) == 16.0


def test_event_cost_prefers_event_inputs():
    """기록의 비용 입력이 연결 원두 값보다 우선"""
    item = InventoryItem(id="i1", capacity=200.0, unit_price=100.0)
    plain = _brew("b1", 1, "20g", "i1")
    override = _brew("b2", 1, "20g", "i1", unit_price=300.0, total_capacity=300.0)

    assert event_cost(plain, 20.0, item) == pytest.approx(10.0)
    assert event_cost(override, 20.0, item) == pytest.approx(20.0)
    assert event_cost(plain, 20.0, None) == 0.0


# ============================================================
# 분류 테이블
# ============================================================

def test_classify_excludes_non_consumption(ms):
    """용량 조정과 수량 0 기록 제외"""
    events = [
        LogEvent(id="adj", timestamp=ms("2024-06-02"), source_kind="capacity-adjustment", amount=1000.0),
        _brew("bad", ms("2024-06-03"), "적당히"),
        _brew("ok", ms("2024-06-04"), "15g"),
    ]

    classified = classify_events(events)

    assert classified.data["id"].tolist() == ["ok"]


def test_classify_category_resolution(ms):
    """카테고리: 연결 원두 기준, 미연결은 None, 카테고리 없는 원두는 other"""
    items = [
        InventoryItem(id="f", category="filter", capacity=200, unit_price=100),
        InventoryItem(id="x", category=None, capacity=200),
    ]
    events = [
        _brew("e1", ms("2024-06-01"), "15g", "f"),
        _brew("e2", ms("2024-06-02"), "15g", "x"),
        _brew("e3", ms("2024-06-03"), "15g", "missing"),
    ]

    data = classify_events(events, items).data.set_index("id")

    assert data.at["e1", "category"] == "filter"
    assert data.at["e1", "cost"] == pytest.approx(7.5)
    assert data.at["e2", "category"] == "other"
    assert data.at["e3", "category"] is None
    assert data.at["e3", "cost"] == 0.0
    assert data["category"].dtype == object
    assert data["category"].isna().sum() == 1


def test_classify_sorted_by_timestamp(ms):
    """timestamp 오름차순 정렬"""
    events = [
        _brew("late", ms("2024-06-05"), "10g"),
        _brew("early", ms("2024-06-01"), "10g"),
    ]

    assert classify_events(events).data["id"].tolist() == ["early", "late"]


def test_classify_view_filter(ms):
    """생두 뷰는 로스팅만, 원두 뷰는 로스팅 제외"""
    events = [
        _brew("brew", ms("2024-06-01"), "15g"),
        LogEvent(id="roast", timestamp=ms("2024-06-02"), source_kind="roasting", amount=200.0),
    ]

    assert classify_events(events, view="roasted").data["id"].tolist() == ["brew"]
    assert classify_events(events, view="green").data["id"].tolist() == ["roast"]


def test_classify_empty_and_invalid_view():
    """빈 입력은 빈 테이블, 잘못된 뷰는 ValidationError"""
    assert classify_events([]).is_empty
    with pytest.raises(ValidationError):
        classify_events([], view="instant")
