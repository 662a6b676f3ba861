"""
유틸리티 패키지

타임존 처리, 날짜 파싱 등 공통 유틸리티
"""

from core.utils.timezone import (
    IST,
    DateParseFailure,
    format_date,
    make_timezone,
    now_utc,
    parse_date,
    to_local,
    today_local,
    utc_from_timestamp_ms,
)

__all__ = [
    "IST",
    "DateParseFailure",
    "format_date",
    "make_timezone",
    "now_utc",
    "parse_date",
    "to_local",
    "today_local",
    "utc_from_timestamp_ms",
]
