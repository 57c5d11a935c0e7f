"""Utility functions for mongoquery.

String recognisers and coercions shared by the classifier and the builders.
"""

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import parse_qsl

from .settings import settings

# ===========================================================================
# Key sanitizing
# ===========================================================================

_KEY_STRIP = re.compile(r"[^A-Za-z0-9_.]")
# "A-z" also spans [ \ ] ^ _ ` in ASCII
_KEY_STRIP_LENIENT = re.compile(r"[^A-z0-9_.]")
_REGEX_STRIP = re.compile(r"[^\w\s@.\-}]")


def sanitize_key(raw: str, lenient: Optional[bool] = None) -> str:
    """Drop every character that is not a letter, digit, `_` or `.`.

    Never raises; an all-invalid key sanitizes to an empty string.

    Args:
        raw: Field path as received in the query string
        lenient: Keep the historical `A-z` range (defaults to settings)
    """
    if lenient is None:
        lenient = settings.MONGOQUERY_LENIENT_KEYS
    pattern = _KEY_STRIP_LENIENT if lenient else _KEY_STRIP
    return pattern.sub("", raw)


def sanitize_regex(raw: str) -> str:
    """Keep only word characters, whitespace, `@`, `.`, `-` and `}`."""
    return _REGEX_STRIP.sub("", raw)


# ===========================================================================
# Recognisers
# ===========================================================================

_INT_RE = re.compile(r"^[-+]?\d+$")
_NUMBER_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_ISO_DATETIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})(?::(\d{2})(?:[.,](\d+))?)?(Z|[+-]\d{2}(?::?\d{2})?)?$"
)


def is_int_string(value: Any) -> bool:
    return isinstance(value, str) and bool(_INT_RE.match(value))


def is_number_string(value: str) -> bool:
    return bool(_NUMBER_RE.match(value))


def to_number(value: str) -> Union[int, float]:
    """Convert a string accepted by `is_number_string` to int or float."""
    if _INT_RE.match(value):
        return int(value)
    return float(value)


def parse_json_container(value: str) -> Optional[Union[Dict[str, Any], List[Any]]]:
    """Return the parsed value if `value` is a JSON object or array, else None.

    Bare JSON primitives ("5", "true", "null") are not containers.
    """
    try:
        parsed = json.loads(value)
    except ValueError:
        return None
    if isinstance(parsed, (dict, list)):
        return parsed
    return None


def _parse_offset(raw: Optional[str]) -> timezone:
    if not raw or raw == "Z":
        return timezone.utc
    sign = -1 if raw[0] == "-" else 1
    digits = raw[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:4] or 0)
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_iso_date(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 date or date-time string into an aware UTC datetime.

    Returns None when the string does not have ISO syntax or names an
    impossible calendar date. Values without an offset are read as UTC.
    """
    m = _ISO_DATE_RE.match(value)
    try:
        if m:
            year, month, day = (int(g) for g in m.groups())
            return datetime(year, month, day, tzinfo=timezone.utc)
        m = _ISO_DATETIME_RE.match(value)
        if not m:
            return None
        year, month, day, hour, minute = (int(g) for g in m.groups()[:5])
        second = int(m.group(6) or 0)
        millis = int(((m.group(7) or "") + "000")[:3])
        dt = datetime(year, month, day, hour, minute, second, millis * 1000, tzinfo=_parse_offset(m.group(8)))
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def to_iso_string(dt: datetime) -> str:
    """Format a UTC datetime as `YYYY-MM-DDTHH:MM:SS.mmmZ`."""
    # Years below 1000 keep four digits
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}.{dt.microsecond // 1000:03d}Z"
    )


# ===========================================================================
# Query-string helpers
# ===========================================================================


def parse_query_string(qs: str, multi: bool = True) -> Dict[str, Any]:
    """Decode a URL query string into a raw query mapping.

    Args:
        qs: Query string, with or without the leading `?`
        multi: Repeated keys and `key[]` keys produce lists; when False the
            last value for a key wins and every value stays a string

    Examples:
        parse_query_string("?a=1&a=2&b=x") -> {"a": ["1", "2"], "b": "x"}
        parse_query_string("tags[]=x") -> {"tags": ["x"]}
    """
    pairs = parse_qsl(qs[1:] if qs.startswith("?") else qs, keep_blank_values=True)
    if not multi:
        return dict(pairs)
    result: Dict[str, Any] = {}
    for key, value in pairs:
        if key.endswith("[]"):
            key = key[:-2]
            current = result.get(key)
            if current is None:
                result[key] = [value]
            elif isinstance(current, list):
                current.append(value)
            else:
                result[key] = [current, value]
        elif key in result:
            current = result[key]
            if isinstance(current, list):
                current.append(value)
            else:
                result[key] = [current, value]
        else:
            result[key] = value
    return result


def split_list(raw: Union[str, Iterable[str], None], sep: str = ",") -> List[str]:
    """Split a separated string (or several of them) into trimmed, non-empty parts."""
    if not raw:
        return []
    chunks = [raw] if isinstance(raw, str) else [c for c in raw if isinstance(c, str)]
    return [part.strip() for chunk in chunks for part in chunk.split(sep) if part.strip()]
