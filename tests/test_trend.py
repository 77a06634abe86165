"""
추세 시계열 테스트

하위 버킷 0 채우기, 합계 보존, 시간대 경계를 테스트합니다.
"""
from __future__ import annotations

import pytest

from coffee_stats import compute_aggregate, compute_trend
from coffee_stats.core.config import CalendarConfig, StatsConfig
from coffee_stats.domain.models import InventoryItem, LogEvent

FILTER_BEAN = InventoryItem(id="f", category="filter", capacity=200.0, remaining=100.0)


def _brew(event_id, ts, dose):
    return LogEvent(id=event_id, timestamp=ts, dose=dose, linked_item_id="f")


def test_month_trend_has_every_day(ms):
    """6월 - 30개 버킷, 기록일만 값이 있음"""
    events = [_brew("n1", ms("2024-06-10 08:00"), "15g")]

    trend = compute_trend(events, "month", "2024-06", ms("2024-07-15"))

    assert len(trend) == 30
    assert [p.value for p in trend].count(0.0) == 29
    hit = [p for p in trend if p.value]
    assert hit[0].bucket_key == "2024-06-10"
    assert hit[0].label == "6/10"
    assert hit[0].value == 15.0


def test_year_trend_has_every_month(ms):
    """연 선택 - 12개월 버킷"""
    events = [
        _brew("n1", ms("2024-03-02"), "15g"),
        _brew("n2", ms("2024-03-20"), "5g"),
        _brew("n3", ms("2024-11-01"), "10g"),
    ]

    trend = compute_trend(events, "year", "2024", ms("2025-01-01"))

    values = {p.bucket_key: p.value for p in trend}
    assert len(trend) == 12
    assert values["2024-03"] == 20.0
    assert values["2024-11"] == 10.0
    assert values["2024-01"] == 0.0
    assert trend[2].label == "3월"


def test_trend_conserves_total(ms):
    """추세 합계 = 같은 기간의 총량"""
    events = [
        _brew("n1", ms("2024-06-01 00:00"), "15g"),
        _brew("n2", ms("2024-06-15 12:00"), "18.5g"),
        _brew("n3", ms("2024-06-30 23:59"), "20g"),
        _brew("n4", ms("2024-07-01 00:00"), "99g"),
        _brew("n5", ms("2024-05-31 23:59"), "99g"),
    ]
    now = ms("2024-08-01")

    trend = compute_trend(events, "month", "2024-06", now)
    aggregate = compute_aggregate(events, [FILTER_BEAN], "month", "2024-06", now)

    assert sum(p.value for p in trend) == pytest.approx(aggregate.total_amount)
    assert aggregate.total_amount == pytest.approx(53.5)


def test_trend_excludes_capacity_adjustment(ms):
    """용량 조정 기록은 추세에 나타나지 않음"""
    events = [
        LogEvent(id="adj", timestamp=ms("2024-06-05"), source_kind="capacity-adjustment", amount=800.0),
    ]

    trend = compute_trend(events, "month", "2024-06", ms("2024-07-01"))

    assert all(p.value == 0.0 for p in trend)


def test_trend_empty_for_day_and_all_time(ms):
    """일 단위 또는 전체 기간은 추세 없음"""
    events = [_brew("n1", ms("2024-06-10"), "15g")]

    assert compute_trend(events, "day", "2024-06-10", ms("2024-07-01")) == []
    assert compute_trend(events, "month", None, ms("2024-07-01")) == []


def test_trend_future_days_are_zero(ms):
    """진행 중인 월도 모든 날짜를 0으로 채움"""
    events = [_brew("n1", ms("2024-06-02"), "15g")]

    trend = compute_trend(events, "month", "2024-06", ms("2024-06-03"))

    assert len(trend) == 30
    assert trend[-1].value == 0.0


def test_trend_does_not_depend_on_now(ms):
    """추세는 기간 전체를 표시하므로 now와 무관"""
    events = [_brew("n1", ms("2024-06-02"), "15g"), _brew("n2", ms("2024-06-20"), "10g")]

    during = compute_trend(events, "month", "2024-06", ms("2024-06-03"))
    after = compute_trend(events, "month", "2024-06", ms("2025-01-01"))

    assert during == after
    assert sum(p.value for p in during) == 25.0


def test_trend_respects_timezone(ms):
    """시간대에 따라 날짜 버킷이 달라짐"""
    seoul = StatsConfig(calendar=CalendarConfig(timezone="Asia/Seoul"))
    # 서울 기준 7월 1일 01:00
    events = [_brew("n1", ms("2024-06-30 16:00"), "15g")]

    june = compute_trend(events, "month", "2024-06", ms("2024-08-01"), config=seoul)
    july = compute_trend(events, "month", "2024-07", ms("2024-08-01"), config=seoul)

    assert sum(p.value for p in june) == 0.0
    assert july[0].bucket_key == "2024-07-01"
    assert july[0].value == 15.0


def test_green_trend_uses_roasting_only(ms):
    """생두 뷰 추세는 로스팅량만"""
    events = [
        _brew("brew", ms("2024-06-02"), "15g"),
        LogEvent(id="roast", timestamp=ms("2024-06-03"), source_kind="roasting", amount=300.0),
    ]

    trend = compute_trend(events, "month", "2024-06", ms("2024-07-01"), view="green")

    assert sum(p.value for p in trend) == 300.0
    assert trend[2].value == 300.0
