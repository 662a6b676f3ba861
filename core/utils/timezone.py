"""
타임존 / 날짜 유틸리티

내부 저장: UTC | 장부 기준: 매장 현지 날짜(기본 IST) 원칙 준수를 위한 헬퍼 함수

문서 저장소의 날짜 필드는 형식이 제각각이다:
- ISO 문자열 ("2024-05-17", "2024-05-17T10:00:00Z")
- Timestamp 객체 (to_datetime() / ToDatetime() / toDate() 제공)
- Timestamp JSON ({"seconds": ..., "nanoseconds": ...})
- datetime / date
- epoch 숫자 (밀리초)

모든 변환은 parse_date() 하나로 통일. 실패해도 예외를 던지지 않고
DateParseFailure를 반환한다.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

from core.constants import Defaults

# IST 타임존 (UTC+5:30)
IST = timezone(timedelta(minutes=Defaults.UTC_OFFSET_MINUTES))

# 밀리초 epoch 허용 범위 (1970 ~ 9999년)
_MAX_EPOCH_MS = 253402300799999

# Timestamp 객체 접근자 (우선순위 순)
_TIMESTAMP_ACCESSORS = ("to_datetime", "ToDatetime", "toDate")

# 소수 초 (fromisoformat은 3자리 또는 6자리만 허용)
_FRACTION_RE = re.compile(r"\.(\d+)")


def make_timezone(utc_offset_minutes: int) -> timezone:
    """UTC 오프셋(분)으로 timezone 생성"""
    return timezone(timedelta(minutes=utc_offset_minutes))


@dataclass(frozen=True)
class DateParseFailure:
    """날짜 파싱 실패 결과 (예외 대신 반환)"""

    raw: Any
    reason: str

    def __bool__(self) -> bool:
        return False


def to_local(dt: datetime, tz: timezone = IST) -> datetime:
    """datetime을 매장 시간대로 변환

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)
        tz: 매장 시간대

    Returns:
        매장 시간대의 datetime
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)"""
    return datetime.now(timezone.utc)


def today_local(tz: timezone = IST) -> date:
    """매장 시간대 기준 오늘 날짜"""
    return datetime.now(tz).date()


def utc_from_timestamp_ms(ts_ms: int) -> datetime:
    """밀리초 타임스탬프를 UTC datetime으로 변환

    Example:
        >>> utc_from_timestamp_ms(1708444800000)
        datetime(2024, 2, 20, 16, 0, 0, tzinfo=timezone.utc)
    """
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)


def format_date(day: date) -> str:
    """장부 표시용 날짜 문자열 (YYYY-MM-DD)"""
    return day.isoformat()


def _from_datetime(dt: datetime, tz: timezone) -> date:
    # naive datetime은 이미 매장 현지 시각으로 기록된 값으로 간주
    if dt.tzinfo is None:
        return dt.date()
    return dt.astimezone(tz).date()


def _from_string(raw: str, tz: timezone) -> date | DateParseFailure:
    text = raw.strip()
    if not text:
        return DateParseFailure(raw=raw, reason="empty string")

    # YYYY-MM-DD (달력 날짜 그대로)
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return DateParseFailure(raw=raw, reason="invalid ISO date")

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        return _from_datetime(datetime.fromisoformat(text), tz)
    except ValueError:
        return DateParseFailure(raw=raw, reason="invalid ISO datetime")


def _from_epoch_ms(value: int | float, tz: timezone) -> date | DateParseFailure:
    if value != value or abs(value) > _MAX_EPOCH_MS:  # NaN 또는 범위 초과
        return DateParseFailure(raw=value, reason="epoch out of range")
    try:
        return utc_from_timestamp_ms(value).astimezone(tz).date()
    except (OverflowError, OSError, ValueError) as e:
        return DateParseFailure(raw=value, reason=f"epoch conversion failed: {e}")


def _from_timestamp_dict(raw: dict[str, Any], tz: timezone) -> date | DateParseFailure:
    seconds = raw.get("seconds", raw.get("_seconds"))
    nanos = raw.get("nanoseconds", raw.get("_nanoseconds", 0)) or 0
    if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
        return DateParseFailure(raw=raw, reason="timestamp dict without seconds")
    if not isinstance(nanos, (int, float)) or isinstance(nanos, bool):
        return DateParseFailure(raw=raw, reason="timestamp dict with non-numeric nanoseconds")
    return _from_epoch_ms(seconds * 1000 + nanos / 1_000_000, tz)


def parse_date(value: Any, tz: timezone = IST) -> date | DateParseFailure:
    """임의의 날짜 표현을 매장 기준 달력 날짜로 변환

    예외를 던지지 않는다. 변환 불가 시 DateParseFailure 반환.

    Args:
        value: 날짜 표현 (문자열, Timestamp, dict, datetime, date, epoch ms)
        tz: 매장 시간대

    Returns:
        date 또는 DateParseFailure

    Example:
        >>> parse_date("2024-05-17")
        datetime.date(2024, 5, 17)
        >>> parse_date("yesterday")
        DateParseFailure(raw='yesterday', reason='invalid ISO datetime')
    """
    if value is None:
        return DateParseFailure(raw=value, reason="missing")

    # datetime은 date의 서브클래스이므로 먼저 검사
    if isinstance(value, datetime):
        return _from_datetime(value, tz)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return _from_string(value, tz)
    if isinstance(value, bool):
        return DateParseFailure(raw=value, reason="boolean is not a date")
    if isinstance(value, (int, float)):
        return _from_epoch_ms(value, tz)
    if isinstance(value, dict):
        return _from_timestamp_dict(value, tz)

    for accessor in _TIMESTAMP_ACCESSORS:
        method = getattr(value, accessor, None)
        if callable(method):
            try:
                converted = method()
            except Exception as e:
                return DateParseFailure(raw=value, reason=f"{accessor}() failed: {e}")
            if isinstance(converted, (datetime, date)):
                return parse_date(converted, tz)
            return DateParseFailure(raw=value, reason=f"{accessor}() returned {type(converted).__name__}")

    return DateParseFailure(raw=value, reason=f"unsupported type {type(value).__name__}")
