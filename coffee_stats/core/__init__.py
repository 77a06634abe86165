"""전역 설정과 상수."""
