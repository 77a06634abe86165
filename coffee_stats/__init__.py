"""
Coffee Stats 패키지

커피 원두 재고와 추출/로스팅 기록으로부터 통계를 계산하는 엔진입니다.
주요 구성:
- 도메인 모델과 원본 데이터 정규화 (domain)
- 기간 버킷, 이벤트 분류, 범위 집계, 추세 시계열 (analytics)
- 카테고리별 재고 소진 예측 (forecast)
- 앱 백업 로딩과 선택 상태 저장소 (data_sources)
- 프레젠테이션 계층이 호출하는 퍼블릭 API (pipeline)
"""

from __future__ import annotations

from .data_sources import StatsSelection, load_export
from .pipeline import (
    StatsView,
    TodayStats,
    build_stats_view,
    compute_aggregate,
    compute_details,
    compute_forecast,
    compute_today,
    compute_trend,
    list_available_periods,
)

__version__ = "1.0.0"

__all__ = [
    "StatsSelection",
    "StatsView",
    "TodayStats",
    "build_stats_view",
    "compute_aggregate",
    "compute_details",
    "compute_forecast",
    "compute_today",
    "compute_trend",
    "list_available_periods",
    "load_export",
]
