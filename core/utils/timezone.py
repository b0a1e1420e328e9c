"""
타임존 유틸리티

내부 저장: UTC | 외부 표시: ART(아르헨티나, UTC-3) 원칙 준수를 위한 헬퍼 함수
"""

from datetime import datetime, timezone, timedelta

# ART 타임존 (UTC-3, 서머타임 없음)
ART = timezone(timedelta(hours=-3))


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def to_db_timestamp(dt: datetime) -> str:
    """DB 저장용 ISO-8601 문자열 (UTC, 마이크로초 포함)

    고정 폭 포맷이라 문자열 정렬이 시간 정렬과 일치한다.

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)

    Returns:
        예: '2026-02-21T01:00:00.000123+00:00'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None) -> datetime | None:
    """DB 문자열을 UTC datetime으로 변환"""
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_local(dt: datetime) -> datetime:
    """UTC datetime을 ART로 변환

    Args:
        dt: datetime 객체 (UTC 권장, naive면 UTC로 간주)

    Returns:
        ART 타임존의 datetime
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(ART)


def format_local(dt: datetime, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """UTC datetime을 ART 문자열로 포맷

    Example:
        >>> format_local(datetime(2026, 2, 20, 16, 0, 0, tzinfo=timezone.utc))
        '2026-02-20 13:00:00'
    """
    return to_local(dt).strftime(fmt)
