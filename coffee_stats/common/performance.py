"""
성능 모니터링 유틸리티

통계 계산 함수의 실행 시간을 측정하여 로깅하는 데코레이터와 컨텍스트 매니저를 제공합니다.
통계 계산은 화면 갱신마다 호출되므로 임계값을 짧게 잡습니다.
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# 로그 레벨 임계값 (초)
SLOW_THRESHOLD = 0.5
VERY_SLOW_THRESHOLD = 2.0


def _log_elapsed(operation_name: str, elapsed: float, failed: bool = False) -> None:
    """경과 시간에 따라 로그 레벨을 골라 기록합니다."""
    if failed:
        logger.error(f"{operation_name} failed after {elapsed:.3f}s")
    elif elapsed >= VERY_SLOW_THRESHOLD:
        logger.error(
            f"SLOW: {operation_name} took {elapsed:.3f}s (threshold: {VERY_SLOW_THRESHOLD}s)"
        )
    elif elapsed >= SLOW_THRESHOLD:
        logger.warning(f"{operation_name} took {elapsed:.3f}s (threshold: {SLOW_THRESHOLD}s)")
    else:
        logger.debug(f"{operation_name} completed in {elapsed:.3f}s")


def measure_time(func: F) -> F:
    """
    함수 실행 시간을 측정하고 로깅하는 데코레이터.

    실행 시간이 0.5초 이상이면 WARNING, 2초 이상이면 ERROR,
    그 외에는 DEBUG 레벨로 로깅합니다. 예외는 그대로 전파됩니다.

    Examples:
        >>> @measure_time
        ... def compute_aggregate(...):
        ...     ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = time.perf_counter()
        failed = True
        try:
            result = func(*args, **kwargs)
            failed = False
            return result
        finally:
            _log_elapsed(func.__name__, time.perf_counter() - start_time, failed)

    return wrapper  # type: ignore[return-value]


def measure_time_context(operation_name: str) -> PerformanceContext:
    """
    코드 블록의 실행 시간을 측정합니다.

    Examples:
        >>> with measure_time_context("load export"):
        ...     data = load_export(path)
    """
    return PerformanceContext(operation_name)


class PerformanceContext:
    """
    코드 블록의 실행 시간을 측정하는 컨텍스트 매니저.

    Attributes:
        operation_name: 측정할 작업의 이름
        elapsed: 경과 시간 (초)
    """

    def __init__(self, operation_name: str) -> None:
        self.operation_name = operation_name
        self.start_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> PerformanceContext:
        self.start_time = time.perf_counter()
        logger.debug(f"Starting: {self.operation_name}")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        _log_elapsed(self.operation_name, self.elapsed, failed=exc_type is not None)
