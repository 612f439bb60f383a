"""
타임존 유틸리티

내부 저장: UTC epoch 초 원칙 준수를 위한 헬퍼 함수
"""

import math
from datetime import date, datetime, timezone

# 표현 가능한 epoch 초 범위 (0001-01-01 ~ 9999-12-31T23:59:59 UTC)
EPOCH_MIN = -62135596800
EPOCH_MAX = 253402300799


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def now_epoch() -> int:
    """현재 UTC epoch 초 반환"""
    return int(now_utc().timestamp())


def utc_from_epoch(ts: int) -> datetime:
    """epoch 초를 UTC datetime으로 변환

    Example:
        >>> utc_from_epoch(1708444800)
        datetime(2024, 2, 20, 16, 0, tzinfo=timezone.utc)
    """
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def to_epoch_seconds(value: int | float | str | datetime | date) -> int:
    """다양한 날짜 표현을 epoch 초로 변환

    허용 형식:
        - int/float: epoch 초 (소수점 이하 버림)
        - 숫자 문자열: epoch 초
        - ISO-8601 날짜 ("2026-10-19") 또는 일시 ("2026-10-19T09:30:00+09:00")
        - datetime/date 객체

    naive datetime은 UTC로 간주.

    Raises:
        ValueError: 해석할 수 없는 값 또는 표현 범위(1~9999년) 밖의 값
    """
    if isinstance(value, bool):
        raise ValueError(f"not a valid date: {value!r}")

    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"not a valid date: {value!r}")

    if isinstance(value, (int, float)):
        return _check_epoch_range(int(value), value)

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("date is empty")
        if text.isdigit():
            return _check_epoch_range(int(text), value)
        # Python 3.10 fromisoformat은 'Z' 접미사 미지원
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"invalid date format: {value!r}") from e
    else:
        raise ValueError(f"not a valid date: {value!r}")

    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def _check_epoch_range(ts: int, original: object) -> int:
    if not EPOCH_MIN <= ts <= EPOCH_MAX:
        raise ValueError(f"date is out of range: {original!r}")
    return ts
