"""
통계 화면 선택 상태 저장소

현재 선택(집계 단위, 기간 키, 통계 뷰)을 명시적인 설정 객체로 표현하고,
주입 가능한 저장소를 통해 읽고 씁니다. 통계 엔진 자체는 저장소를 알지 못합니다.

저장 형식은 집계 단위별로 마지막 선택 기간을 따로 기억합니다:

    {
        "dateGroupingMode": "month",
        "selectedDate_year": "2024",
        "selectedDate_month": "2024-06",
        "statsBeanState": "roasted"
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Union

from ..core.config import GRANULARITIES, VIEW_ROASTED, VIEWS
from ..domain.exceptions import DataLoadError, ValidationError
from ..domain.validation import parse_period_key

logger = logging.getLogger(__name__)

GRANULARITY_KEY = "dateGroupingMode"
VIEW_KEY = "statsBeanState"
SELECTED_KEY_PREFIX = "selectedDate_"

DEFAULT_GRANULARITY = "month"


@dataclass(frozen=True)
class StatsSelection:
    """
    통계 화면의 현재 선택.

    Attributes:
        granularity: "year" | "month" | "day"
        period_key: 기간 키 또는 None(전체 기간)
        view: "roasted" | "green"
    """

    granularity: str = DEFAULT_GRANULARITY
    period_key: Optional[str] = None
    view: str = VIEW_ROASTED

    def with_period(self, period_key: Optional[str]) -> StatsSelection:
        return replace(self, period_key=period_key)


def selection_from_mapping(raw: Mapping[str, Any]) -> StatsSelection:
    """
    저장된 매핑에서 선택 상태를 복원합니다.

    알 수 없는 집계 단위/뷰나 형식이 맞지 않는 기간 키는
    경고 로그를 남기고 기본값으로 대체합니다.
    """
    granularity = raw.get(GRANULARITY_KEY, DEFAULT_GRANULARITY)
    if granularity not in GRANULARITIES:
        logger.warning(f"Unknown stored granularity {granularity!r}, using {DEFAULT_GRANULARITY}")
        granularity = DEFAULT_GRANULARITY

    view = raw.get(VIEW_KEY, VIEW_ROASTED)
    if view not in VIEWS:
        logger.warning(f"Unknown stored stats view {view!r}, using {VIEW_ROASTED}")
        view = VIEW_ROASTED

    period_key = raw.get(f"{SELECTED_KEY_PREFIX}{granularity}") or None
    if period_key is not None:
        try:
            parse_period_key(granularity, period_key)
        except ValidationError:
            logger.warning(f"Discarding malformed stored period {period_key!r} for {granularity}")
            period_key = None

    return StatsSelection(granularity=granularity, period_key=period_key, view=view)


def selection_to_mapping(
    selection: StatsSelection, previous: Optional[Mapping[str, Any]] = None
) -> dict[str, Any]:
    """선택 상태를 저장용 매핑으로 변환합니다. 다른 집계 단위의 선택은 유지합니다."""
    data = dict(previous or {})
    data[GRANULARITY_KEY] = selection.granularity
    data[VIEW_KEY] = selection.view
    data[f"{SELECTED_KEY_PREFIX}{selection.granularity}"] = selection.period_key or ""
    return data


class SettingsStore(Protocol):
    """선택 상태를 읽고 쓰는 저장소 프로토콜."""

    def load(self) -> StatsSelection:  # pragma: no cover - interface definition
        ...

    def save(self, selection: StatsSelection) -> None:  # pragma: no cover - interface definition
        ...


class InMemorySettingsStore:
    """메모리에 선택 상태를 보관하는 저장소 (테스트 및 임시 세션용)."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._data)

    def load(self) -> StatsSelection:
        return selection_from_mapping(self._data)

    def save(self, selection: StatsSelection) -> None:
        self._data = selection_to_mapping(selection, self._data)


class JsonSettingsStore:
    """
    JSON 파일에 선택 상태를 저장하는 저장소.

    파일이 없거나 내용이 JSON 객체가 아니면 기본값을 사용합니다.
    파일 입출력 자체가 실패하면 DataLoadError를 발생시킵니다.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error(f"Failed to read settings file {self.path}: {exc}")
            raise DataLoadError(f"설정 파일을 읽을 수 없습니다: {self.path}") from exc

        try:
            raw = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError:
            logger.warning(f"Settings file {self.path} is not valid JSON, using defaults")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Settings file {self.path} does not hold an object, using defaults")
            return {}
        return raw

    def load(self) -> StatsSelection:
        return selection_from_mapping(self._read())

    def save(self, selection: StatsSelection) -> None:
        data = selection_to_mapping(selection, self._read())
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error(f"Failed to write settings file {self.path}: {exc}")
            raise DataLoadError(f"설정 파일을 저장할 수 없습니다: {self.path}") from exc

        logger.debug(f"Saved stats selection to {self.path}: {selection}")
