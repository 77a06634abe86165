"""
퍼블릭 API 및 통계 화면 묶음 테스트

build_stats_view가 선택 상태에 따라 필요한 결과만 계산하는지 확인합니다.
"""
from __future__ import annotations

import pytest

from coffee_stats import (
    StatsSelection,
    build_stats_view,
    compute_details,
    compute_today,
    list_available_periods,
)
from coffee_stats.domain.exceptions import ValidationError
from coffee_stats.domain.models import InventoryItem, LogEvent


@pytest.fixture
def items():
    return [
        InventoryItem(id="e", name="브라질", category="espresso", capacity=500.0, remaining=300.0, unit_price=100.0),
        InventoryItem(id="f", name="케냐", category="filter", capacity=200.0, remaining=150.0, unit_price=80.0),
        InventoryItem(
            id="g", name="생두 콜롬비아", category="filter", capacity=1000.0, remaining=600.0,
            unit_price=50.0, state="green",
        ),
    ]


@pytest.fixture
def events(ms):
    return [
        LogEvent(id="n1", timestamp=ms("2024-05-20 08:00"), dose="18g", linked_item_id="e", item_name="브라질"),
        LogEvent(id="n2", timestamp=ms("2024-06-01 08:00"), dose="18g", linked_item_id="e", item_name="브라질"),
        LogEvent(id="n3", timestamp=ms("2024-06-10 09:00"), dose="15g", linked_item_id="f", item_name="케냐"),
        LogEvent(id="n4", timestamp=ms("2024-06-10 15:00"), dose="15g", linked_item_id="f"),
        LogEvent(
            id="r1", timestamp=ms("2024-06-10 11:00"), source_kind="roasting", amount=400.0,
            linked_item_id="g", item_name="생두 콜롬비아",
        ),
    ]


NOW = "2024-06-10 18:00"


def test_all_time_view(events, items, ms):
    """전체 기간 - 예측, 재고 요약, 오늘 통계 포함"""
    view = build_stats_view(events, items, StatsSelection("month", None), ms(NOW))

    assert not view.is_historical
    assert view.aggregate.total_amount == 66.0
    assert view.trend == []
    assert view.forecast is not None
    assert view.inventory is not None
    assert view.inventory.overall.total_items == 2
    assert view.today.amount == 30.0
    assert view.available_periods == ["2024-06", "2024-05"]
    assert view.conversion_rate is None
    assert view.metadata is None

    rows = {e.category: e for e in view.forecast.by_category}
    # 5/20 ~ 6/10 = 22일
    assert view.aggregate.actual_days == 22
    assert rows["espresso"].daily_rate == pytest.approx(36.0 / 22)
    assert view.forecast.total.daily_rate == pytest.approx(view.aggregate.daily_amount)


def test_historical_month_view(events, items, ms):
    """특정 월 - 추세 포함, 예측 없음"""
    view = build_stats_view(events, items, StatsSelection("month", "2024-06"), ms(NOW))

    assert view.is_historical
    assert view.forecast is None
    assert view.inventory is None
    assert len(view.trend) == 30
    assert sum(p.value for p in view.trend) == view.aggregate.total_amount == 48.0
    assert view.details == []


def test_single_day_view_details(events, items, ms):
    """단일 일자 - 최신순 상세, 이름 없으면 unknown, 오늘 통계 없음"""
    view = build_stats_view(events, items, StatsSelection("day", "2024-06-10"), ms(NOW))

    assert [d.id for d in view.details] == ["n4", "n3"]
    assert view.details[0].item_name == "케냐"
    assert view.today is None
    assert view.trend == []


def test_green_view(events, items, ms):
    """생두 뷰 - 로스팅 기록만, 전환율과 메타데이터"""
    view = build_stats_view(events, items, StatsSelection("month", None, "green"), ms(NOW))

    assert view.aggregate.total_amount == 400.0
    assert view.aggregate.total_cost == pytest.approx(20.0)
    assert view.conversion_rate == pytest.approx(40.0)
    assert view.metadata.total_roasting_records == 1
    assert view.metadata.valid_roasting_records == 1
    assert view.metadata.items_total == 1
    assert view.metadata.items_with_price == 1
    assert view.metadata.today_roasting_records == 1
    assert [d.id for d in view.today_details] == ["r1"]
    assert view.available_periods == ["2024-06"]
    assert view.inventory.overall.total_weight == 1000.0


def test_compute_details_unknown_name(ms):
    """이름을 알 수 없는 기록"""
    events = [LogEvent(id="x", timestamp=ms("2024-06-10 10:00"), dose="12g")]

    details = compute_details(events, [], "day", "2024-06-10", ms(NOW))

    assert details[0].item_name == "unknown"
    assert details[0].amount == 12.0


def test_compute_today(events, items, ms):
    """now가 속한 날의 소비량"""
    today = compute_today(events, items, ms(NOW))

    assert today.amount == 30.0
    assert today.event_count == 2
    assert today.cost == pytest.approx(12.0)


def test_list_available_periods(events, ms):
    """기간 키 최신순, 생두 뷰는 로스팅 기록만"""
    assert list_available_periods(events, "day") == ["2024-06-10", "2024-06-01", "2024-05-20"]
    assert list_available_periods(events, "year") == ["2024"]
    assert list_available_periods(events, "month", view="green") == ["2024-06"]
    assert list_available_periods([], "month") == []


def test_invalid_selection_raises(events, items, ms):
    """잘못된 집계 단위/기간 키는 ValidationError"""
    with pytest.raises(ValidationError):
        build_stats_view(events, items, StatsSelection("week", None), ms(NOW))
    with pytest.raises(ValidationError):
        build_stats_view(events, items, StatsSelection("month", "2024-6"), ms(NOW))
