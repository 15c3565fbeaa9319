"""Portuguese (pt-BR) date/time parsing for purchase confirmations."""

import math
import re
from datetime import datetime, tzinfo
from typing import Optional

MONTHS_FULL = {
    "janeiro": 1, "fevereiro": 2, "março": 3, "abril": 4, "maio": 5, "junho": 6,
    "julho": 7, "agosto": 8, "setembro": 9, "outubro": 10, "novembro": 11, "dezembro": 12,
}
MONTHS_SHORT = {
    "jan": 1, "fev": 2, "mar": 3, "abr": 4, "mai": 5, "jun": 6,
    "jul": 7, "ago": 8, "set": 9, "out": 10, "nov": 11, "dez": 12,
}

# "16 de janeiro de 2025 às 13:11"
LONG_FORM = r'(\d{1,2})\s+de\s+([a-zà-ú]+)\s+de\s+(\d{4})\s+às\s+(\d{1,2}):(\d{2})'
# "29 jul, terça 10:01" -- up to 15 non-digit characters before the time
SHORT_FORM = (
    r'(\d{1,2})\s+(' + "|".join(MONTHS_SHORT) + r')[^0-9]{1,15}?(\d{1,2}):(\d{2})'
)

_LONG = re.compile(LONG_FORM, re.I)
_SHORT = re.compile(SHORT_FORM, re.I)


def parse_date(raw: str, now: Optional[datetime] = None,
               tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse a long- or short-form mention into a datetime, or None.

    Short-form mentions carry no year; the current year (of ``now``) is used,
    so a January trip parsed in late December resolves to the wrong year.
    """
    if not raw:
        return None

    m = _LONG.search(raw)
    if m:
        day, month_name, year, hour, minute = m.groups()
        month = MONTHS_FULL.get(month_name.lower())
        if month is None:
            return None
        return _build(int(year), month, int(day), int(hour), int(minute), tz)

    m = _SHORT.search(raw)
    if m:
        day, month_name, hour, minute = m.groups()
        year = (now or datetime.now(tz)).year
        return _build(year, MONTHS_SHORT[month_name.lower()], int(day), int(hour), int(minute), tz)

    return None


def _build(year, month, day, hour, minute, tz) -> Optional[datetime]:
    try:
        return datetime(year, month, day, hour, minute, tzinfo=tz)
    except ValueError:
        return None


_REMINDER = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([mh])\s*$', re.I)


def reminder_to_minutes(value: str) -> int:
    """ "30m" -> 30, "1h" -> 60, "1.5h" -> 90 (rounded half up)."""
    m = _REMINDER.match(value or "")
    if not m:
        raise ValueError(f"Invalid reminder {value!r}; expected e.g. 30m or 1.5h")
    amount = float(m.group(1))
    if m.group(2).lower() == "h":
        amount *= 60
    return int(math.floor(amount + 0.5))
