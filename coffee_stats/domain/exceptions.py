"""
도메인 계층 예외 정의

통계 엔진은 데이터 문제로 예외를 던지지 않습니다. 여기 정의된 예외는
호출자 오류(잘못된 집계 단위나 기간 키)와 데이터 로딩 경계의
입출력 오류에만 사용됩니다.
"""

from __future__ import annotations


class DomainError(Exception):
    """
    도메인 계층의 기본 예외 클래스.

    모든 도메인 예외는 이 클래스를 상속합니다.
    """

    pass


class ValidationError(DomainError):
    """
    호출 인자 검증 실패 시 발생하는 예외.

    예: 지원하지 않는 집계 단위, "2024-13" 같은 잘못된 기간 키
    """

    pass


class DataLoadError(DomainError):
    """
    데이터 로드 실패 시 발생하는 예외.

    앱 내보내기 JSON 파일이나 설정 파일을 읽지 못한 경우 사용합니다.
    """

    pass
