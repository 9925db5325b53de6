from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError

_HHMM = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    if not isinstance(value, str) or not _ISO_DATE.match(value.strip()):
        raise ValidationError("Invalid date format (YYYY-MM-DD)")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def parse_hhmm(value: str) -> time:
    """Parse a wall-clock "HH:mm" (or "H:mm") string, 00:00-23:59."""
    m = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if not m:
        raise ValidationError("Invalid time format (HH:mm)")
    return time(hour=int(m.group(1)), minute=int(m.group(2)))


def format_hhmm(value: Optional[time]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%H:%M")


def minutes_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
