from __future__ import annotations
import math, re
from datetime import date
from typing import Any, Optional

_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

# YYYY-MM-DD or YYYY/MM/DD with an optional time and offset.
_ISO_DATE_PATTERN = re.compile(
    r"^(?P<year>\d{4})(?P<sep>[-/])(?P<month>\d{1,2})(?P=sep)(?P<day>\d{1,2})"
    r"(?:[T ](?P<hour>\d{2}):(?P<minute>\d{2})(?::(?P<second>\d{2})(?:\.\d+)?)?"
    r"(?P<offset>Z|[+-]\d{2}:?\d{2})?)?$",
    re.IGNORECASE,
)
_YEAR_MONTH_PATTERN = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})$")
_MONTH_FIRST_PATTERN = re.compile(r"^(?P<month>[A-Za-z]+)\.?\s+(?P<day>\d{1,2}),?\s+(?P<year>\d{4})$")
_DAY_FIRST_PATTERN = re.compile(r"^(?P<day>\d{1,2})\s+(?P<month>[A-Za-z]+)\.?,?\s+(?P<year>\d{4})$")

_MONTHS = {
    name: index
    for index, names in enumerate(
        [
            ("jan", "january"),
            ("feb", "february"),
            ("mar", "march"),
            ("apr", "april"),
            ("may",),
            ("jun", "june"),
            ("jul", "july"),
            ("aug", "august"),
            ("sep", "sept", "september"),
            ("oct", "october"),
            ("nov", "november"),
            ("dec", "december"),
        ],
        start=1,
    )
    for name in names
}


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def try_parse_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it is not numeric.

    This is the single definition of "numeric-looking" shared by inference,
    aggregation and plan building.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _NUMBER_PATTERN.match(text):
        return None
    number = float(text)
    if not math.isfinite(number):
        return None
    return number


def _valid_calendar_date(year: int, month: int, day: int) -> bool:
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def _valid_time(hour: Optional[str], minute: Optional[str], second: Optional[str]) -> bool:
    if hour is None:
        return True
    return int(hour) < 24 and int(minute or 0) < 60 and int(second or 0) < 60


def looks_like_date(value: Any) -> bool:
    """Recognise calendar dates.

    Accepted forms:

    * ``YYYY-MM-DD`` / ``YYYY/MM/DD`` with an optional ``T`` or space
      separated ``HH:MM[:SS[.fff]]`` and ``Z`` / ``+HH:MM`` offset
    * ``YYYY-MM``
    * ``Jan 5, 2025`` / ``January 5 2025`` / ``5 Jan 2025``

    Bare numbers, including four digit years, are not dates.
    """
    if isinstance(value, date):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    if not text:
        return False

    match = _ISO_DATE_PATTERN.match(text)
    if match:
        return _valid_calendar_date(
            int(match.group("year")), int(match.group("month")), int(match.group("day"))
        ) and _valid_time(match.group("hour"), match.group("minute"), match.group("second"))

    match = _YEAR_MONTH_PATTERN.match(text)
    if match:
        return 1 <= int(match.group("month")) <= 12

    for pattern in (_MONTH_FIRST_PATTERN, _DAY_FIRST_PATTERN):
        match = pattern.match(text)
        if match:
            month = _MONTHS.get(match.group("month").lower())
            if month is None:
                return False
            return _valid_calendar_date(int(match.group("year")), month, int(match.group("day")))

    return False
