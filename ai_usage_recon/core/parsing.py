"""
Cell-level parsing primitives.

Converts loosely-typed spreadsheet and CSV cells into numbers, currency
amounts, timestamps and calendar dates. Every parser is total: bad input
yields a default (or None for dates) instead of an exception.
"""

import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

# Spreadsheet serial day 0 (serial 25569 is 1970-01-01)
SPREADSHEET_EPOCH = date(1899, 12, 30)

_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
)

_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y-%m-%d",
    "%m/%d/%Y",
)

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_CURRENCY_STRIP_RE = re.compile(r"[$,\s]")


def _clean_numeric_text(value: Any) -> str:
    return str(value).strip().replace(",", "")


def parse_number(value: Any, default: float = 0.0) -> float:
    """Parse a numeric-looking cell into a float.

    Accepts ints, floats and strings with thousands separators. NaN,
    infinities and anything unparseable fall back to ``default`` so they
    never reach downstream arithmetic.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        text = _clean_numeric_text(value)
        if not text:
            return default
        try:
            result = float(text)
        except ValueError:
            return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def parse_int(value: Any, default: int = 0) -> int:
    """Parse a numeric-looking cell into an int, truncating fractions."""
    result = parse_number(value, default=float("nan"))
    if math.isnan(result):
        return default
    return int(result)


def parse_currency(value: Any) -> float:
    """Extract a numeric amount from a currency display string.

    ``"$1,234.50"`` -> 1234.5. Sentinels such as ``"Included"`` and empty
    cells are worth 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return parse_number(value)
    text = _CURRENCY_STRIP_RE.sub("", str(value))
    if not text:
        return 0.0
    return parse_number(text)


def is_numeric_cost(value: Any) -> bool:
    """True when a cost cell carries an actual amount rather than a sentinel."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return True
    text = _CURRENCY_STRIP_RE.sub("", str(value or ""))
    return bool(_NUMERIC_RE.match(text))


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an event timestamp cell into a UTC-aware datetime.

    Naive timestamps are taken to be UTC already.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    text = str(value).strip()
    if not text:
        return None
    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _as_utc(datetime.fromisoformat(iso_text))
    except ValueError:
        pass
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def serial_to_date(serial: float) -> Optional[date]:
    """Convert a spreadsheet date serial into a calendar date."""
    if math.isnan(serial) or math.isinf(serial) or serial <= 1:
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(days=int(serial))
    except OverflowError:
        return None


def parse_snapshot_date(value: Any) -> Optional[date]:
    """Parse a snapshot date cell.

    Accepts date/datetime objects, spreadsheet serial numbers and common
    date strings. Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return serial_to_date(float(value))

    text = str(value).strip()
    if not text:
        return None
    if _NUMERIC_RE.match(text):
        return serial_to_date(float(text))
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    moment = parse_timestamp(text)
    return moment.date() if moment is not None else None
