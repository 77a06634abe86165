"""
달력 버킷 테스트

기간 구간 [start, end), 하위 버킷, 달력 일수 계산을 테스트합니다.
"""
from __future__ import annotations

import math

import pytest

from coffee_stats.analytics.buckets import (
    calendar_days,
    day_interval,
    period_interval,
    period_key_for,
    sub_buckets,
)
from coffee_stats.core.config import CalendarConfig, StatsConfig
from coffee_stats.domain.exceptions import ValidationError

SEOUL = StatsConfig(calendar=CalendarConfig(timezone="Asia/Seoul"))


# ============================================================
# 기간 구간
# ============================================================

def test_period_interval_month(ms):
    """월 단위 구간 - 1일 자정부터 다음 달 1일 자정까지"""
    interval = period_interval("month", "2024-06")

    assert interval.start == ms("2024-06-01")
    assert interval.end == ms("2024-07-01")


def test_period_interval_year_and_day(ms):
    """연/일 단위 구간"""
    year = period_interval("year", "2024")
    day = period_interval("day", "2024-02-29")

    assert (year.start, year.end) == (ms("2024-01-01"), ms("2025-01-01"))
    assert (day.start, day.end) == (ms("2024-02-29"), ms("2024-03-01"))


def test_period_interval_all_time():
    """전체 기간 - [0, inf)"""
    interval = period_interval("month", None)

    assert interval.start == 0
    assert math.isinf(interval.end)
    assert not interval.is_bounded


def test_period_interval_clamp_to_now(ms):
    """진행 중인 기간만 now로 잘림"""
    now = ms("2024-06-10 12:00")

    clamped = period_interval("month", "2024-06", now=now, clamp_to_now=True)
    past = period_interval("month", "2024-05", now=now, clamp_to_now=True)

    assert clamped.end == now
    assert past.end == ms("2024-06-01")


def test_period_interval_uses_configured_timezone(ms):
    """설정된 시간대의 자정 기준"""
    interval = period_interval("day", "2024-06-15", config=SEOUL)

    assert interval.start == ms("2024-06-14 15:00")
    assert interval.end - interval.start == 24 * 60 * 60 * 1000


@pytest.mark.parametrize(
    "granularity, key",
    [
        ("month", "2024-13"),
        ("month", "2024/06"),
        ("day", "2023-02-29"),
        ("year", "24"),
        ("week", "2024-W01"),
        ("year", "2262"),
        ("year", "1600"),
        ("month", "0000-01"),
        ("day", "2262-01-01"),
    ],
)
def test_period_interval_rejects_malformed_keys(granularity, key):
    """잘못된 기간 키나 집계 단위는 ValidationError"""
    with pytest.raises(ValidationError):
        period_interval(granularity, key)


def test_period_key_for_and_day_interval(ms):
    """시각이 속하는 기간 키와 하루 구간"""
    ts = ms("2024-06-15 23:30")

    assert period_key_for(ts, "year") == "2024"
    assert period_key_for(ts, "month") == "2024-06"
    assert period_key_for(ts, "day") == "2024-06-15"
    assert period_key_for(ts, "day", config=SEOUL) == "2024-06-16"

    interval = day_interval(ts)
    assert interval.contains(ts)
    assert interval.start == ms("2024-06-15")


# ============================================================
# 하위 버킷
# ============================================================

def test_sub_buckets_month_covers_interval():
    """월 선택 - 모든 날짜가 빈틈없이 이어짐"""
    interval = period_interval("month", "2024-06")
    buckets = sub_buckets("month", "2024-06")

    assert len(buckets) == 30
    assert buckets[0].key == "2024-06-01"
    assert buckets[0].label == "6/1"
    assert buckets[-1].key == "2024-06-30"
    assert buckets[0].start == interval.start
    assert buckets[-1].end == interval.end
    for prev, nxt in zip(buckets, buckets[1:]):
        assert prev.end == nxt.start


def test_sub_buckets_leap_february():
    """윤년 2월은 29일"""
    assert len(sub_buckets("month", "2024-02")) == 29
    assert len(sub_buckets("month", "2023-02")) == 28


def test_sub_buckets_year_has_twelve_months():
    """연 선택 - 12개월"""
    buckets = sub_buckets("year", "2024")

    assert [b.key for b in buckets][:2] == ["2024-01", "2024-02"]
    assert len(buckets) == 12
    assert buckets[0].label == "1월"
    assert buckets[-1].end == period_interval("year", "2024").end


def test_sub_buckets_none_for_day_or_all_time():
    """일 단위 또는 전체 기간은 하위 버킷 없음"""
    assert sub_buckets("day", "2024-06-15") == []
    assert sub_buckets("month", None) == []


# ============================================================
# 달력 일수
# ============================================================

def test_calendar_days_inclusive(ms):
    """양 끝 포함 달력 일수"""
    assert calendar_days(ms("2024-01-01 09:00"), ms("2024-01-03 18:00")) == 3
    assert calendar_days(ms("2024-01-01 09:00"), ms("2024-01-01 10:00")) == 1


def test_calendar_days_minimum_one(ms):
    """끝이 시작보다 앞서도 최소 1"""
    assert calendar_days(ms("2024-01-03"), ms("2024-01-01")) == 1
