"""
선택 상태 저장소 테스트

집계 단위별 기간 선택 기억, 잘못된 값의 기본값 대체, JSON 파일 저장을 테스트합니다.
"""
from __future__ import annotations

import json
import logging

from coffee_stats.data_sources.settings import (
    InMemorySettingsStore,
    JsonSettingsStore,
    StatsSelection,
)


def test_default_selection():
    """저장된 값이 없으면 월 단위 / 전체 기간 / 원두 뷰"""
    assert InMemorySettingsStore().load() == StatsSelection("month", None, "roasted")


def test_in_memory_round_trip():
    """저장한 선택을 그대로 복원"""
    store = InMemorySettingsStore()
    selection = StatsSelection(granularity="day", period_key="2024-06-15", view="green")

    store.save(selection)

    assert store.load() == selection


def test_period_remembered_per_granularity():
    """집계 단위를 바꿔도 다른 단위의 선택은 유지"""
    store = InMemorySettingsStore()
    store.save(StatsSelection("month", "2024-06"))
    store.save(StatsSelection("year", "2024"))

    assert store.data["selectedDate_month"] == "2024-06"
    assert store.load() == StatsSelection("year", "2024")

    store.save(StatsSelection("month", "2024-06").with_period(None))
    assert store.load().period_key is None


def test_invalid_stored_values_fall_back(caplog):
    """알 수 없는 값은 경고 후 기본값"""
    store = InMemorySettingsStore(
        {
            "dateGroupingMode": "week",
            "statsBeanState": "instant",
        }
    )
    malformed = InMemorySettingsStore(
        {"dateGroupingMode": "month", "selectedDate_month": "2024-13"}
    )

    with caplog.at_level(logging.WARNING):
        assert store.load() == StatsSelection()
        assert malformed.load() == StatsSelection("month", None)

    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3


def test_json_store_creates_parent_directories(tmp_path):
    """저장 시 상위 디렉터리 생성"""
    path = tmp_path / "nested" / "dir" / "stats.json"
    store = JsonSettingsStore(path)

    store.save(StatsSelection("year", "2023", "green"))

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["dateGroupingMode"] == "year"
    assert saved["selectedDate_year"] == "2023"
    assert saved["statsBeanState"] == "green"
    assert JsonSettingsStore(path).load() == StatsSelection("year", "2023", "green")


def test_json_store_tolerates_bad_content(tmp_path):
    """파일이 없거나 내용이 잘못되면 기본값"""
    missing = JsonSettingsStore(tmp_path / "missing.json")
    broken_path = tmp_path / "broken.json"
    broken_path.write_text("{oops", encoding="utf-8")
    array_path = tmp_path / "array.json"
    array_path.write_text("[1, 2]", encoding="utf-8")

    assert missing.load() == StatsSelection()
    assert JsonSettingsStore(broken_path).load() == StatsSelection()
    assert JsonSettingsStore(array_path).load() == StatsSelection()


def test_out_of_range_stored_period_is_discarded():
    """지원 범위 밖 연도의 저장된 기간은 버리고 전체 기간으로"""
    store = InMemorySettingsStore({"dateGroupingMode": "year", "selectedDate_year": "2262"})

    assert store.load() == StatsSelection("year", None)
