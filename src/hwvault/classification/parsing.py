"""
Value parsing helpers for raw probe records.

Probe values arrive as strings, numbers, booleans, lists or WMI CIM datetime
strings depending on the platform. These helpers convert them into Python
values, returning None for anything that cannot be interpreted.
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

_WHITESPACE = re.compile(r"\s+")

# yyyymmddHHMMSS.ffffff+UUU (UUU = UTC offset in minutes)
_CIM_DATETIME = re.compile(
    r"^(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(?:\.(\d{1,6}))?([+-]\d{3})?"
)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "ok", "running", "present", "enabled"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "stopped", "absent", "disabled"})

BYTES_PER_GB = 1024 ** 3


def first_value(value: Any) -> Any:
    """First element of a list/tuple value (e.g. ``ChassisTypes``), else the value."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def parse_int(value: Any) -> Optional[int]:
    """Parse an integer from int, float or numeric string; None otherwise."""
    value = first_value(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    base = 16 if text.lower().startswith("0x") else 10
    try:
        return int(text, base)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return None


def parse_bool_status(value: Any) -> Optional[bool]:
    """
    Interpret a WMI/registry style status value as a boolean.

    Accepts real booleans, integers and strings such as "True", "OK",
    "Running" or "0". Unrecognized values give None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def parse_cim_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a CIM datetime (``20240115083000.000000+060``) or ISO-8601 string.

    Args:
        value: Raw value; datetime objects are returned unchanged

    Returns:
        A timezone-aware datetime when an offset is present, else naive;
        None when the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None

    match = _CIM_DATETIME.match(text)
    if match:
        year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
        micro = int((match.group(7) or "0").ljust(6, "0"))
        try:
            parsed = datetime(year, month, day, hour, minute, second, micro)
        except ValueError:
            return None
        offset = match.group(8)
        if offset:
            parsed = parsed.replace(tzinfo=timezone(timedelta(minutes=int(offset))))
        return parsed

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_driver_date(value: Any) -> Optional[date]:
    """Date part of a driver date string; only the leading ``yyyymmdd`` is used."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) < 8 or not text[:8].isdigit():
        return None
    try:
        return date(int(text[:4]), int(text[4:6]), int(text[6:8]))
    except ValueError:
        return None


def clean_brand_text(text: Optional[str]) -> Optional[str]:
    """Replace (R)/(TM)/(C) with their symbols and collapse runs of whitespace."""
    if text is None:
        return None
    cleaned = text.replace("(R)", "®").replace("(TM)", "™").replace("(C)", "©")
    return _WHITESPACE.sub(" ", cleaned).strip()


def bytes_to_gb(value: Any, digits: int = 2) -> Optional[float]:
    size = parse_int(value)
    if size is None or size < 0:
        return None
    return round(size / BYTES_PER_GB, digits)


def format_uptime(uptime: timedelta) -> str:
    """Human readable uptime, e.g. "3 days 4 hours 12 minutes"."""
    total_minutes = int(uptime.total_seconds()) // 60
    days, remainder = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(remainder, 60)
    return f"{days} days {hours} hours {minutes} minutes"
