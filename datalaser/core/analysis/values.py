"""
Value Normalizer — Raw Cell Value Interpretation
==================================================
Every component that reads a cell goes through these helpers, so a value
is classified exactly one way everywhere: missing, numeric, percentage,
date-like, or plain text.

  is_missing          None, "" and float NaN are absent (never coerced to 0)
  parse_numeric       number | None  ("45%" -> 45, "1,234.5" -> 1234.5)
  is_percentage_value structural "<number>%" test
  is_numeric_value    lenient test used by type detection (strips , % £ $ €)
  is_date_value       ISO / D-M-Y shaped string that a date parser accepts
  parse_date          datetime | None
  to_label            trimmed string form of a present value
"""

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.parser import ParserError

PERCENT_PATTERN = re.compile(r"^(-?\d+(?:\.\d+)?)\s*%$")
PERCENT_VALUE_PATTERN = re.compile(r"^\s*-?\d+(\.\d+)?\s*%\s*$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
DELIMITED_DATE_PATTERN = re.compile(r"^\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}$")
CURRENCY_CHARS = re.compile(r"[,%£$€]")


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def is_number(value: Any) -> bool:
    """True for native ints/floats; bools are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_label(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _parse_float(text: str) -> Optional[float]:
    try:
        parsed = float(text)
    except ValueError:
        return None
    if math.isnan(parsed) or math.isinf(parsed):
        return None
    return parsed


def parse_numeric(value: Any) -> Optional[float]:
    """
    Parse a raw cell into a number, or None when it has no numeric reading.
    Percentages keep their literal magnitude: "45%" -> 45.0.
    """
    if is_missing(value):
        return None

    if is_number(value):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value

    if not isinstance(value, str):
        return None

    trimmed = value.strip()
    if trimmed == "":
        return None

    match = PERCENT_PATTERN.match(trimmed)
    if match:
        return float(match.group(1))

    return _parse_float(trimmed.replace(",", ""))


def is_percentage_value(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return bool(PERCENT_VALUE_PATTERN.match(value))


def is_numeric_value(value: Any) -> bool:
    if is_number(value):
        return True
    if not isinstance(value, str):
        return False
    cleaned = CURRENCY_CHARS.sub("", value.strip())
    return cleaned != "" and _parse_float(cleaned.strip()) is not None


def _as_naive_utc(when: datetime) -> datetime:
    if when.tzinfo is None:
        return when
    return when.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date(value: Any) -> Optional[datetime]:
    """Offset-aware inputs are shifted to UTC and returned naive, so any two results compare."""
    if isinstance(value, datetime):
        return _as_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or value.strip() == "":
        return None
    try:
        return _as_naive_utc(date_parser.parse(value.strip()))
    except (ParserError, ValueError, OverflowError):
        return None


def is_date_value(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    if ISO_DATE_PATTERN.match(text) or DELIMITED_DATE_PATTERN.match(text):
        return parse_date(text) is not None
    return False
