"""
Placeholder Filter

Firmware and OEM tools fill unset DMI/SMBIOS fields with boilerplate such as
"To be filled by O.E.M." or "Default string". Those values carry no
information, so every raw string is passed through ``filter_placeholder``
before it is stored or classified.
"""

from typing import Any, Optional

# Default substituted by ``or_unknown``
UNKNOWN = "Unknown"

# Compared case-insensitively against the trimmed value
PLACEHOLDER_VALUES = frozenset({
    "default string",
    "default",
    "unknown",
    "not available",
    "not specified",
    "n/a",
    "na",
    "none",
    "null",
    "to be filled by o.e.m.",
    "to be filled by oem",
    "o.e.m.",
    "oem",
    "system manufacturer",
    "system product name",
    "system version",
    "system serial number",
    "type1productconfigid",
    "sku",
    "system sku",
    "x.x",
    "chassis manufacture",
    "chassis version",
    "chassis serial number",
    "base board serial number",
    "ffffffff-ffff-ffff-ffff-ffffffffffff",
})

# All-zero serials shorter than this are left alone ("0" can be a real value)
MIN_ZERO_SERIAL_LENGTH = 8


def _is_zero_serial(value: str) -> bool:
    digits = value.replace("-", "").replace(" ", "")
    return len(digits) >= MIN_ZERO_SERIAL_LENGTH and set(digits) == {"0"}


def is_placeholder(value: Any) -> bool:
    """True if ``value`` is absent, blank, or a known sentinel string."""
    return filter_placeholder(value) is None


def filter_placeholder(value: Any) -> Optional[str]:
    """
    Canonicalize a raw vendor string.

    Args:
        value: Raw field value. Non-strings are converted with ``str()``.

    Returns:
        The trimmed value, or None for absent, blank and placeholder values.
        Applying the filter twice gives the same result as applying it once.

    Examples:
        >>> filter_placeholder("  To Be Filled By O.E.M. ")
        >>> filter_placeholder(" ASUSTeK COMPUTER INC. ")
        'ASUSTeK COMPUTER INC.'
    """
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    if not text:
        return None
    if text.lower() in PLACEHOLDER_VALUES or _is_zero_serial(text):
        return None
    return text


def or_unknown(value: Any, default: str = UNKNOWN) -> str:
    """Filter ``value`` and substitute ``default`` when nothing is left."""
    filtered = filter_placeholder(value)
    return filtered if filtered is not None else default
