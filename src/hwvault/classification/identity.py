"""
Identity extraction for device records.

Parses vendor/product ids out of PnP device identifiers and derives the
identity keys used to deduplicate list sections (USB devices, disks, GPUs).
"""

import re
from typing import Any, Mapping, Optional, Tuple

from .placeholders import filter_placeholder

# USB\VID_046D&PID_0843&MI_00\7&2A8E&0&0000
_VID_PID = re.compile(r"VID_([0-9A-F]{4})&PID_([0-9A-F]{4})", re.IGNORECASE)
# sysfs / lsusb style "046d:0843"
_COLON_PAIR = re.compile(r"(?<![0-9A-F])([0-9A-F]{4}):([0-9A-F]{4})(?![0-9A-F])", re.IGNORECASE)
_INTERFACE = re.compile(r"(?:^|[&\\])MI_([0-9A-F]{2})", re.IGNORECASE)


def extract_vid_pid(device_id: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Extract the vendor and product id from a device identifier.

    Args:
        device_id: PnP device id such as ``USB\\VID_046D&PID_0843\\...``

    Returns:
        ``("0x046D", "0x0843")``, or ``(None, None)`` when no id pair is present
    """
    if not device_id:
        return None, None
    match = _VID_PID.search(device_id) or _COLON_PAIR.search(device_id)
    if not match:
        return None, None
    return f"0x{match.group(1).upper()}", f"0x{match.group(2).upper()}"


def interface_number(device_id: Optional[str]) -> Optional[str]:
    """The ``MI_xx`` interface marker of a composite device id, e.g. ``"00"``."""
    if not device_id:
        return None
    match = _INTERFACE.search(device_id)
    return match.group(1).upper() if match else None


def _first_key(record: Mapping[str, Any], *fields: str) -> Optional[str]:
    for name in fields:
        value = filter_placeholder(record.get(name))
        if value is not None:
            return value.upper()
    return None


def usb_identity(record: Mapping[str, Any]) -> Optional[str]:
    return _first_key(record, "DeviceID")


def disk_identity(record: Mapping[str, Any]) -> Optional[str]:
    """Disk device id, else its serial number."""
    return _first_key(record, "DeviceID", "SerialNumber")


def gpu_identity(record: Mapping[str, Any]) -> Optional[str]:
    return _first_key(record, "PNPDeviceID", "DeviceID")
