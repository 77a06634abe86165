"""Configuration and constants for the coffee statistics engine.

달력 버킷, 이벤트 분류, 재고 예측에 쓰이는 전역 설정을 제공합니다.
"""

from __future__ import annotations
from dataclasses import dataclass, field

# ============================================================
# 공통 상수
# ============================================================

# 하루의 밀리초
DAY_MS = 24 * 60 * 60 * 1000

# 집계 단위
GRANULARITIES = ("year", "month", "day")

# 이벤트 출처
SOURCE_BREW = "brew"
SOURCE_QUICK_DECREMENT = "quick-decrement"
SOURCE_CAPACITY_ADJUSTMENT = "capacity-adjustment"
SOURCE_ROASTING = "roasting"

SOURCE_KINDS = (
    SOURCE_BREW,
    SOURCE_QUICK_DECREMENT,
    SOURCE_CAPACITY_ADJUSTMENT,
    SOURCE_ROASTING,
)

# 원두 상태
STATE_ROASTED = "roasted"
STATE_GREEN = "green"

# 통계 뷰: 원두(추출 소비) / 생두(로스팅)
VIEW_ROASTED = "roasted"
VIEW_GREEN = "green"
VIEWS = (VIEW_ROASTED, VIEW_GREEN)


# ============================================================
# 달력 설정
# ============================================================

@dataclass(frozen=True)
class CalendarConfig:
    """기간 경계 계산 및 추세 라벨 관련 설정"""

    # 기간 경계를 계산할 시간대 (pandas/zoneinfo 이름)
    timezone: str = "UTC"

    # 일별 추세 라벨 형식 (예: 6/1)
    day_label_format: str = "{month}/{day}"

    # 월별 추세 라벨 형식 (예: 6월)
    month_label_format: str = "{month}월"


# ============================================================
# 이벤트 분류 설정
# ============================================================

@dataclass(frozen=True)
class ClassifierConfig:
    """기록 분류 관련 설정"""

    # 자유 형식 원두량 필드에서 첫 숫자를 찾는 패턴
    dose_pattern: str = r"\d+(\.\d+)?"

    # 카테고리별 집계에 사용하는 카테고리 목록
    categories: tuple[str, ...] = ("espresso", "filter", "omni", "other")

    # 카테고리가 없거나 알 수 없는 원두에 부여할 카테고리
    default_category: str = "other"


# ============================================================
# 재고 예측 설정
# ============================================================

@dataclass(frozen=True)
class ForecastConfig:
    """재고 소진 예측 관련 설정"""

    # 예측 테이블에 표시할 카테고리 (표시 순서)
    categories: tuple[str, ...] = ("espresso", "filter", "omni", "other")

    # 카테고리 표시 이름
    labels: dict[str, str] = field(
        default_factory=lambda: {
            "espresso": "에스프레소 원두",
            "filter": "필터 원두",
            "omni": "옴니 원두",
            "other": "기타 원두",
        }
    )

    # 이 값보다 잔량이 적으면 소진된 원두로 간주
    empty_threshold: float = 0.001

    # 소진일 추정 시 사용하는 최소 일일 소비량
    min_daily_rate_for_finish_date: float = 1.0


@dataclass(frozen=True)
class StatsConfig:
    """통계 엔진 전역 설정"""

    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)


# ============================================================
# 전역 설정 인스턴스
# ============================================================

# 전역 설정 객체 (불변)
CONFIG = StatsConfig()
