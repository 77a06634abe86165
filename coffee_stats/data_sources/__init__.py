"""
데이터 소스 계층

앱 백업(JSON) 로딩과 통계 화면 선택 상태 저장소를 제공합니다.
"""

from .json_export import LoadedData, load_export
from .settings import (
    InMemorySettingsStore,
    JsonSettingsStore,
    SettingsStore,
    StatsSelection,
)

__all__ = [
    # 데이터 모델
    "LoadedData",
    "StatsSelection",
    # 로더 함수
    "load_export",
    # 설정 저장소
    "SettingsStore",
    "InMemorySettingsStore",
    "JsonSettingsStore",
]
