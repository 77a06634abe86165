"""
앱 내보내기(JSON 백업) 데이터 로더

이 모듈은 앱의 백업 파일에서 추출 기록(brewingNotes)과
원두 재고(coffeeBeans)를 읽어 통계 엔진 모델로 변환합니다.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

from ..common.performance import measure_time_context
from ..core.config import CONFIG, StatsConfig
from ..domain.exceptions import DataLoadError
from ..domain.models import InventoryItem, LogEvent
from ..domain.normalization import normalize_events, normalize_items

logger = logging.getLogger(__name__)

# 백업 파일의 컬렉션 키
NOTES_KEY = "brewingNotes"
BEANS_KEY = "coffeeBeans"


@dataclass(frozen=True)
class LoadedData:
    """
    로드된 데이터를 담는 컨테이너.

    Attributes:
        events: 정규화된 기록 목록
        items: 정규화된 원두 재고 목록
        export_date: 백업 생성 시각 (있으면)
        app_version: 백업을 만든 앱 버전 (있으면)
    """

    events: list[LogEvent] = field(default_factory=list)
    items: list[InventoryItem] = field(default_factory=list)
    export_date: Any = None
    app_version: Any = None


def _read_json(path: Path) -> Any:
    """JSON 파일을 읽습니다. 실패하면 DataLoadError를 발생시킵니다."""
    if not path.exists():
        logger.error(f"Export file not found: {path}")
        raise DataLoadError(f"백업 파일을 찾을 수 없습니다: {path}")

    try:
        with path.open("r", encoding="utf-8") as fp:
            return json.load(fp)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error(f"Failed to read export file {path}: {exc}")
        raise DataLoadError(f"백업 파일을 읽을 수 없습니다: {path}") from exc


def load_export(
    source: Union[str, Path, Mapping[str, Any]],
    *,
    config: StatsConfig = CONFIG,
) -> LoadedData:
    """
    앱 백업을 로드하고 정규화합니다.

    다음 두 형태를 모두 허용합니다:
    - 전체 백업: {"exportDate", "appVersion", "data": {"brewingNotes", "coffeeBeans"}}
    - data 부분만: {"brewingNotes": [...], "coffeeBeans": [...]}

    원두를 먼저 정규화한 뒤, 기록의 원두 이름 매칭에 사용합니다.

    Args:
        source: 백업 파일 경로 또는 이미 파싱된 매핑
        config: 통계 설정

    Returns:
        LoadedData

    Raises:
        DataLoadError: 파일을 읽을 수 없거나 최상위 구조가 매핑이 아닌 경우

    Examples:
        >>> data = load_export("brew-guide-backup.json")
        >>> print(f"Loaded {len(data.events)} notes, {len(data.items)} beans")
    """
    with measure_time_context("load export"):
        # ========================================
        # 1단계: 원본 읽기
        # ========================================
        if isinstance(source, Mapping):
            payload: Any = source
        else:
            payload = _read_json(Path(source))

        if not isinstance(payload, Mapping):
            logger.error(f"Export root must be an object, got {type(payload).__name__}")
            raise DataLoadError("백업 데이터의 최상위 구조가 객체가 아닙니다.")

        data = payload.get("data", payload)
        if not isinstance(data, Mapping):
            logger.error(f"Export 'data' must be an object, got {type(data).__name__}")
            raise DataLoadError("백업 데이터의 data 항목이 객체가 아닙니다.")

        raw_notes = data.get(NOTES_KEY) or []
        raw_beans = data.get(BEANS_KEY) or []
        if not isinstance(raw_notes, list) or not isinstance(raw_beans, list):
            logger.error("Export collections must be arrays")
            raise DataLoadError("brewingNotes / coffeeBeans 항목은 배열이어야 합니다.")

        # ========================================
        # 2단계: 정규화 (원두 -> 기록 순서)
        # ========================================
        items = normalize_items(raw_beans, config=config)
        events = normalize_events(raw_notes, items)

    logger.info(
        f"Loaded export: {len(events)}/{len(raw_notes)} notes, "
        f"{len(items)}/{len(raw_beans)} beans"
    )

    return LoadedData(
        events=events,
        items=items,
        export_date=payload.get("exportDate"),
        app_version=payload.get("appVersion"),
    )
