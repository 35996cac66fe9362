# petgrid/util/timeparse.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional, Tuple

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_HOUR_RANGE_RE = re.compile(r"^(\d{1,2})(?::00)?-(\d{1,2})(?::00)?$")
_LOCAL_TS_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ](\d{2}:\d{2})(?::\d{2}(?:\.\d+)?)?$")


def parse_hhmm(s: str) -> Tuple[int, int]:
    m = _HHMM_RE.match(str(s).strip())
    if not m:
        raise ValueError(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise ValueError(f"Invalid HH:MM: {s!r}")
    return hh, mm


def format_hhmm(hour: int, minute: int) -> str:
    return f"{int(hour):02d}:{int(minute):02d}"


def hhmm_to_minutes(s: str) -> int:
    hh, mm = parse_hhmm(s)
    return hh * 60 + mm


def parse_grid_hours(s: str) -> Tuple[int, int]:
    """Parse a displayable hour range like ``05-20`` or ``05:00-20:00``.

    Both bounds are inclusive hour rows of the day grid.
    """
    m = _HOUR_RANGE_RE.match(str(s).strip())
    if not m:
        raise ValueError("grid hours must be like 05-20")
    start = int(m.group(1))
    end = int(m.group(2))
    if not (0 <= start <= 23 and 0 <= end <= 23):
        raise ValueError(f"grid hours out of range: {s!r}")
    if end < start:
        raise ValueError("grid hours end must not be before start")
    return start, end


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def split_local_timestamp(s: str) -> Optional[Tuple[dt.date, str]]:
    """Split a local ``YYYY-MM-DDTHH:MM[:SS]`` timestamp into (date, "HH:MM").

    Timestamps are wall-clock times with no offset; returns None when the
    value does not parse.
    """
    m = _LOCAL_TS_RE.match(str(s or "").strip())
    if not m:
        return None
    try:
        day = parse_date_yyyy_mm_dd(m.group(1))
        hh, mm = parse_hhmm(m.group(2))
    except ValueError:
        return None
    return day, format_hhmm(hh, mm)


def join_local_timestamp(day: dt.date, start_time: str) -> str:
    hh, mm = parse_hhmm(start_time)
    return f"{day.isoformat()}T{format_hhmm(hh, mm)}:00"
