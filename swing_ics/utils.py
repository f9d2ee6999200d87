from __future__ import annotations

import hashlib
import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from .config import DAY_PLACEHOLDER, DEFAULT_TIMEZONE, MONTHS, WEEKDAY_CODES, WEEKDAY_LETTERS

DATE_REGEX = re.compile(r"^\d{1,2}-[A-Za-z]{3}-\d{4}$")
TIME_REGEX = re.compile(r"^\d{3,4}-\d{3,4}$")
DAYS_REGEX = re.compile(r"^[-MTWRFSUmtwrfsu]{7}$")


def decode_date(raw: Optional[str]) -> Optional[str]:
    """Decode a Banner date such as ``06-MAY-2024`` into ``20240506``.

    Returns None for malformed input, an unknown month, or a date that does
    not exist on the calendar (``30-FEB-2024``).
    """
    if not raw or not isinstance(raw, str):
        return None
    parts = raw.strip().split("-")
    if len(parts) != 3:
        return None
    day_str, month_abbr, year_str = parts
    month = MONTHS.get(month_abbr.upper())
    if not month:
        return None
    if not (day_str.isdigit() and 1 <= len(day_str) <= 2):
        return None
    if not (year_str.isdigit() and len(year_str) == 4):
        return None
    try:
        value = date(int(year_str), month, int(day_str))
    except ValueError:
        return None
    return value.strftime("%Y%m%d")


def _format_clock(raw: str) -> str:
    padded = raw.zfill(4)
    hours, minutes = padded[:-2], padded[-2:]
    return f"{hours.zfill(2)}:{minutes}"


def decode_time(raw: Optional[str]) -> Optional[tuple[str, str]]:
    """Decode ``1230-1420`` or ``830-1025`` into ``("12:30", "14:20")``."""
    if not raw or not isinstance(raw, str):
        return None
    parts = raw.strip().split("-")
    if len(parts) != 2:
        return None
    start_raw, end_raw = (p.strip() for p in parts)
    if not (start_raw.isdigit() and end_raw.isdigit()):
        return None
    # HMM or HHMM on both sides
    if not (3 <= len(start_raw) <= 4 and 3 <= len(end_raw) <= 4):
        return None
    return _format_clock(start_raw), _format_clock(end_raw)


def decode_days(raw: Optional[str]) -> List[str]:
    """Turn a 7-character weekday mask into RRULE BYDAY codes, Monday first.

    >>> decode_days("-T-R---")
    ['TU', 'TH']
    """
    if not raw or not isinstance(raw, str):
        return []
    mask = raw.strip().upper()
    if not DAYS_REGEX.match(mask):
        return []
    days: List[str] = []
    for letter, code, char in zip(WEEKDAY_LETTERS, WEEKDAY_CODES, mask):
        if char == DAY_PLACEHOLDER:
            continue
        if char == letter:
            days.append(code)
    return days


def build_datetime(iso_date: str, time_str: str) -> datetime:
    """Naive wall-clock datetime for a ``YYYYMMDD`` date and ``HH:MM`` time."""
    hours, minutes = time_str.split(":", 1)
    return datetime.strptime(iso_date, "%Y%m%d").replace(hour=int(hours), minute=int(minutes))


def to_calendar_datetime(iso_date: str, time_str: str) -> str:
    if not iso_date or not time_str:
        return ""
    return build_datetime(iso_date, time_str).strftime("%Y%m%dT%H%M00")


def standard_offset(tz: ZoneInfo, when: datetime) -> timedelta:
    """UTC offset of ``tz`` at ``when`` with any daylight-saving shift removed."""
    aware = when.replace(tzinfo=tz)
    return aware.utcoffset() - (aware.dst() or timedelta(0))


def to_utc_datetime(
    iso_date: str, time_str: str, tz: Optional[ZoneInfo] = None, follow_dst: bool = False
) -> str:
    """Local date and time to an RFC 5545 UTC stamp.

    By default the zone's standard offset is applied all year (PST, UTC-8,
    for the default zone). With ``follow_dst`` the zone's real offset on that
    date is used.
    """
    if not iso_date or not time_str:
        return ""
    tz = tz or ZoneInfo(DEFAULT_TIMEZONE)
    local = build_datetime(iso_date, time_str)
    if follow_dst:
        utc = local.replace(tzinfo=tz).astimezone(timezone.utc)
    else:
        utc = local - standard_offset(tz, local)
    return utc.strftime("%Y%m%dT%H%M00Z")


def hash_source(parts: Iterable[str]) -> str:
    hasher = hashlib.sha1()
    joined = "|".join(parts)
    hasher.update(joined.encode("utf-8"))
    return hasher.hexdigest()


def cell_text(node) -> str:
    return node.get_text(" ", strip=True) if node else ""
