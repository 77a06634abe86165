import sys
from pathlib import Path

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def to_ms(text: str, tz: str = "UTC") -> int:
    """"2024-06-10 08:00" 형식의 시각을 epoch 밀리초로 변환합니다."""
    ts = pd.Timestamp(text)
    ts = ts.tz_localize(tz) if ts.tzinfo is None else ts.tz_convert(tz)
    return int(ts.value // 1_000_000)


@pytest.fixture
def ms():
    """시각 문자열 -> epoch 밀리초 변환기"""
    return to_ms
