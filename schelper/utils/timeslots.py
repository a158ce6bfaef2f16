import re
from datetime import datetime, time
from typing import Iterable, List, Optional

DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DAY_INDEX = {d: i for i, d in enumerate(DAYS)}

# FullCalendar daysOfWeek: 0 = Sunday
CALENDAR_WEEKDAY = {"Sun": 0, "Mon": 1, "Tue": 2, "Wed": 3, "Thu": 4, "Fri": 5, "Sat": 6}

# roster sheet day columns; S and U are only present on weekend rosters
ROSTER_DAY_COLUMNS = {"M": "Mon", "T": "Tue", "W": "Wed", "R": "Thu", "F": "Fri", "S": "Sat", "U": "Sun"}

_CLOCK_24 = re.compile(r"^(\d{1,2}):(\d{2})$")
_CLOCK_12 = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?\s*([AaPp])\.?\s*[Mm]\.?$")
_CLOCK_SECONDS = re.compile(r"^(\d{1,2}):(\d{2}):\d{2}$")


def normalize_days(days: Optional[Iterable[str]]) -> List[str]:
    """
    ["Wed", "mon", "Wed"] -> ["Mon", "Wed"]
    Unknown names raise ValueError.
    """
    if not days:
        return []
    out = set()
    for d in days:
        d = (d or "").strip()
        if not d:
            continue
        key = d[:1].upper() + d[1:3].lower()
        if key not in DAY_INDEX:
            raise ValueError(f"unknown day: {d}")
        out.add(key)
    return sorted(out, key=DAY_INDEX.__getitem__)


def clock_to_minutes(text: Optional[str]) -> Optional[int]:
    """
    "09:30" -> 570, "" / None / garbage -> None
    """
    m = _CLOCK_24.match((text or "").strip())
    if not m:
        return None
    h, mi = int(m.group(1)), int(m.group(2))
    if h > 23 or mi > 59:
        return None
    return h * 60 + mi


def minutes_to_clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_valid_clock(text: str) -> bool:
    return clock_to_minutes(text) is not None


def to_24h(value) -> str:
    """
    Roster time cell -> "HH:MM".

    "9:30 AM" -> "09:30", "1:15 PM" -> "13:15", "12:00 PM" -> "12:00",
    "12:10 AM" -> "00:10", "14:05" -> "14:05", time(8, 0) -> "08:00".
    Empty -> "". Anything else raises ValueError.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.time()
    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}"

    s = str(value).strip()
    if not s or s.lower() == "nan":
        return ""

    m = _CLOCK_12.match(s)
    if m:
        h, mi, ampm = int(m.group(1)), int(m.group(2)), m.group(3).lower()
        if not 1 <= h <= 12 or mi > 59:
            raise ValueError(f"bad time: {s}")
        if ampm == "a":
            h = 0 if h == 12 else h
        else:
            h = 12 if h == 12 else h + 12
        return minutes_to_clock(h * 60 + mi)

    m = _CLOCK_SECONDS.match(s)
    if m:
        s = f"{m.group(1)}:{m.group(2)}"

    minutes = clock_to_minutes(s)
    if minutes is None:
        raise ValueError(f"bad time: {s}")
    return minutes_to_clock(minutes)
