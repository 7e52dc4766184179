#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Default probe for the machine hwvault runs on.

No external commands are executed. Records are gathered from:
1. WMI (``wmi`` package) and the registry (``winreg``) on Windows.
2. ``platform``, ``psutil`` and ``py-cpuinfo`` on every platform.
3. Kernel filesystems on Linux: /etc/os-release, /sys/class/dmi/id,
   /sys/block, /sys/bus/pci/devices, /sys/bus/usb/devices and the raw SMBIOS
   entries under /sys/firmware/dmi/entries.

Every handler returns records in the WMI vocabulary documented in
``hwvault.hardware.probes``. Components a platform cannot provide raise
ProbeUnavailableError.
"""

import getpass
import locale
import logging
import os
import platform
import struct
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..exceptions import ProbeError, ProbeUnavailableError
from ..utils import safe_import
from .probes import ComponentKind

logger = logging.getLogger(__name__)

# --- Constants ---
DMI_ID_DIR = "sys/class/dmi/id"
DMI_ENTRIES_DIR = "sys/firmware/dmi/entries"
BLOCK_DIR = "sys/block"
CLASS_BLOCK_DIR = "sys/class/block"
PCI_DEVICES_DIR = "sys/bus/pci/devices"
USB_DEVICES_DIR = "sys/bus/usb/devices"
OS_RELEASE = "etc/os-release"

# Block devices that are never physical disks
VIRTUAL_BLOCK_PREFIXES = ("loop", "ram", "zram", "dm-", "md", "sr", "fd", "nbd")

SECTOR_SIZE = 512

SMBIOS_MEMORY_ARRAY = 16
SMBIOS_MEMORY_DEVICE = 17
SMBIOS_ARRAY_USE_SYSTEM_MEMORY = 0x03

# SMBIOS type 17 form factor -> Win32_PhysicalMemory.FormFactor
SMBIOS_FORM_FACTORS = {
    0x01: 1,   # Other
    0x02: 0,   # Unknown
    0x03: 7,   # SIMM
    0x04: 2,   # SIP
    0x06: 3,   # DIP
    0x07: 4,   # ZIP
    0x08: 6,   # Proprietary card
    0x09: 8,   # DIMM
    0x0A: 9,   # TSOP
    0x0C: 11,  # RIMM
    0x0D: 12,  # SODIMM
    0x0E: 13,  # SRIMM
}

# PCI display subclasses, named as lspci names them
PCI_DISPLAY_CLASSES = {
    "0x0300": "VGA compatible controller",
    "0x0301": "XGA compatible controller",
    "0x0302": "3D controller",
    "0x0380": "Display controller",
}

PCI_DISPLAY_VENDORS = {
    "0x10de": "NVIDIA",
    "0x1002": "AMD",
    "0x8086": "Intel",
    "0x1af4": "Red Hat virtio",
    "0x15ad": "VMware SVGA",
    "0x80ee": "VirtualBox",
    "0x1b36": "Red Hat QXL",
    "0x1414": "Microsoft Hyper-V Video",
    "0x5143": "Qualcomm",
}

# USB classes that defer to the interface descriptors
USB_DEFER_TO_INTERFACE = ("00", "EF")

# Logical drive types (Win32_LogicalDisk.DriveType)
DRIVE_TYPE_REMOVABLE = 2
DRIVE_TYPE_LOCAL = 3
DRIVE_TYPE_NETWORK = 4
DRIVE_TYPE_CDROM = 5
NETWORK_FILESYSTEMS = ("nfs", "nfs4", "cifs", "smbfs", "sshfs", "9p")

# WMI class and properties read per component
WMI_CLASSES = {
    ComponentKind.OPERATING_SYSTEM: ("Win32_OperatingSystem", (
        "Caption", "Version", "BuildNumber", "OSArchitecture", "ServicePackMajorVersion",
        "ServicePackMinorVersion", "InstallDate", "LastBootUpTime", "NumberOfProcesses",
        "NumberOfUsers", "RegisteredUser", "Organization", "SerialNumber", "SystemDirectory",
        "WindowsDirectory", "Locale", "ProductType", "OperatingSystemSKU", "CSName",
        "TotalVisibleMemorySize", "FreePhysicalMemory", "TotalVirtualMemorySize", "FreeVirtualMemory",
    )),
    ComponentKind.COMPUTER_SYSTEM: ("Win32_ComputerSystem", (
        "Manufacturer", "Model", "TotalPhysicalMemory", "HypervisorPresent",
    )),
    ComponentKind.COMPUTER_PRODUCT: ("Win32_ComputerSystemProduct", ("UUID",)),
    ComponentKind.BASEBOARD: ("Win32_BaseBoard", (
        "Manufacturer", "Product", "SerialNumber", "Version", "Model",
    )),
    ComponentKind.CHASSIS: ("Win32_SystemEnclosure", (
        "Manufacturer", "SerialNumber", "Model", "ChassisTypes", "Description", "SMBIOSAssetTag",
        "SKU", "BootupState", "PowerSupplyState", "ThermalState", "NumberOfPowerCords",
    )),
    ComponentKind.PROCESSOR: ("Win32_Processor", (
        "Name", "Manufacturer", "MaxClockSpeed", "CurrentClockSpeed", "NumberOfCores",
        "NumberOfLogicalProcessors", "Architecture", "Family", "Stepping", "ProcessorId",
        "L2CacheSize", "L3CacheSize",
    )),
    ComponentKind.VIDEO_CONTROLLER: ("Win32_VideoController", (
        "Name", "AdapterCompatibility", "AdapterRAM", "DriverVersion", "DriverDate",
        "VideoProcessor", "DeviceID", "PNPDeviceID", "Status", "CurrentHorizontalResolution",
        "CurrentVerticalResolution", "CurrentRefreshRate",
    )),
    ComponentKind.DISK_DRIVE: ("Win32_DiskDrive", (
        "DeviceID", "Model", "Manufacturer", "SerialNumber", "InterfaceType", "MediaType",
        "FirmwareRevision", "Size",
    )),
    ComponentKind.LOGICAL_DISK: ("Win32_LogicalDisk", (
        "DeviceID", "VolumeName", "FileSystem", "DriveType", "Size", "FreeSpace",
    )),
    ComponentKind.PHYSICAL_MEMORY: ("Win32_PhysicalMemory", (
        "DeviceLocator", "BankLabel", "Capacity", "SMBIOSMemoryType", "MemoryType", "FormFactor",
        "Speed", "ConfiguredClockSpeed", "Manufacturer", "PartNumber", "SerialNumber",
        "ConfiguredVoltage", "MinVoltage", "MaxVoltage",
    )),
    ComponentKind.MEMORY_ARRAY: ("Win32_PhysicalMemoryArray", ("MaxCapacity", "MemoryDevices")),
    ComponentKind.USB_CONTROLLER: ("Win32_USBController", (
        "DeviceID", "Name", "Description", "Manufacturer", "Status",
    )),
}

_PNP_USB_FIELDS = ("DeviceID", "Name", "Description", "Manufacturer", "Present")
_USER_ACCOUNT_FIELDS = ("Name", "FullName", "Description", "Disabled", "Lockout")

_UAC_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Policies\System"
_BITLOCKER_KEY = r"SYSTEM\CurrentControlSet\Control\BitLockerStatus"


# ============================================================================
# SMBIOS PARSING
# ============================================================================

def parse_smbios_structure(raw: bytes) -> Tuple[int, bytes, List[str]]:
    """
    Split a raw SMBIOS structure into its type, formatted area and strings.

    Args:
        raw: Bytes of one structure, as found in ``/sys/firmware/dmi/entries/*/raw``

    Returns:
        (structure type, formatted area, string table); string references in
        the formatted area are 1-based indexes into the string table

    Raises:
        ProbeError: If the structure is truncated
    """
    if len(raw) < 4 or raw[1] < 4 or len(raw) < raw[1]:
        raise ProbeError("truncated SMBIOS structure")
    length = raw[1]
    strings = [s.decode("utf-8", "replace").strip() for s in raw[length:].split(b"\x00")]
    return raw[0], raw[:length], strings


def _smbios_byte(formatted: bytes, offset: int) -> Optional[int]:
    return formatted[offset] if len(formatted) > offset else None


def _smbios_word(formatted: bytes, offset: int) -> Optional[int]:
    if len(formatted) < offset + 2:
        return None
    return struct.unpack_from("<H", formatted, offset)[0]


def _smbios_dword(formatted: bytes, offset: int) -> Optional[int]:
    if len(formatted) < offset + 4:
        return None
    return struct.unpack_from("<I", formatted, offset)[0]


def _smbios_qword(formatted: bytes, offset: int) -> Optional[int]:
    if len(formatted) < offset + 8:
        return None
    return struct.unpack_from("<Q", formatted, offset)[0]


def _smbios_string(formatted: bytes, strings: List[str], offset: int) -> Optional[str]:
    index = _smbios_byte(formatted, offset)
    if not index or index > len(strings):
        return None
    return strings[index - 1] or None


def memory_device_record(formatted: bytes, strings: List[str]) -> Optional[Dict[str, Any]]:
    """
    Win32_PhysicalMemory-style record from an SMBIOS type 17 structure.

    Returns None for empty slots.
    """
    size = _smbios_word(formatted, 0x0C)
    if not size:
        return None
    if size == 0xFFFF:
        capacity = None
    elif size == 0x7FFF:
        extended = _smbios_dword(formatted, 0x1C)
        capacity = (extended & 0x7FFFFFFF) * 1024 * 1024 if extended else None
    elif size & 0x8000:
        capacity = (size & 0x7FFF) * 1024
    else:
        capacity = size * 1024 * 1024

    def _speed(offset):
        value = _smbios_word(formatted, offset)
        return value if value and value != 0xFFFF else None

    return {
        "DeviceLocator": _smbios_string(formatted, strings, 0x10),
        "BankLabel": _smbios_string(formatted, strings, 0x11),
        "Capacity": capacity,
        "SMBIOSMemoryType": _smbios_byte(formatted, 0x12),
        "FormFactor": SMBIOS_FORM_FACTORS.get(_smbios_byte(formatted, 0x0E), 0),
        "Speed": _speed(0x15),
        "Manufacturer": _smbios_string(formatted, strings, 0x17),
        "SerialNumber": _smbios_string(formatted, strings, 0x18),
        "PartNumber": _smbios_string(formatted, strings, 0x1A),
        "ConfiguredClockSpeed": _speed(0x20),
        "MinVoltage": _smbios_word(formatted, 0x22),
        "MaxVoltage": _smbios_word(formatted, 0x24),
        "ConfiguredVoltage": _smbios_word(formatted, 0x26),
    }


def memory_array_record(formatted: bytes) -> Optional[Dict[str, Any]]:
    """Win32_PhysicalMemoryArray-style record from an SMBIOS type 16 structure."""
    use = _smbios_byte(formatted, 0x05)
    if use is not None and use != SMBIOS_ARRAY_USE_SYSTEM_MEMORY:
        return None
    max_capacity_kb = _smbios_dword(formatted, 0x07)
    if max_capacity_kb == 0x80000000:
        extended = _smbios_qword(formatted, 0x0F)
        max_capacity_kb = extended // 1024 if extended else None
    return {
        "MaxCapacity": max_capacity_kb,
        "MemoryDevices": _smbios_word(formatted, 0x0D),
    }


# ============================================================================
# PROBE
# ============================================================================

class LocalProbe:
    """
    Probe for the local machine.

    Args:
        root: Filesystem root for /etc and /sys reads (tests point this at a
            temporary directory)
        system: Platform name as returned by ``platform.system()``
    """

    def __init__(self, root: Union[str, Path] = "/", system: Optional[str] = None):
        self.root = Path(root)
        self.system = system or platform.system()

    def __repr__(self) -> str:
        return f"LocalProbe(root={str(self.root)!r}, system={self.system!r})"

    def query(self, kind: ComponentKind) -> List[Dict[str, Any]]:
        """Records for one component kind (blocking; the aggregator runs this in a thread)."""
        kind = ComponentKind(kind)
        prefix = {"Windows": "_windows", "Linux": "_linux"}.get(self.system)
        handler = getattr(self, f"{prefix}_{kind.value}", None) if prefix else None
        if handler is None:
            handler = getattr(self, f"_generic_{kind.value}", None)
        if handler is None:
            raise ProbeUnavailableError(f"not supported on {self.system}", kind.value)
        return handler()

    # ------------------------------------------------------------------
    # Filesystem helpers
    # ------------------------------------------------------------------

    def _path(self, *parts: str) -> Path:
        return self.root.joinpath(*parts)

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        """Stripped text content, or None when the file is missing or unreadable."""
        try:
            return path.read_text(encoding="utf-8", errors="replace").strip() or None
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            return None
        except OSError as e:
            # Some sysfs attributes fail with EIO/EINVAL on read
            logger.debug(f"Could not read {path}: {e}")
            return None

    def _dmi(self, name: str) -> Optional[str]:
        return self._read(self._path(DMI_ID_DIR, name))

    def _require_dmi(self, kind: ComponentKind):
        if not self._path(DMI_ID_DIR).is_dir():
            raise ProbeUnavailableError("no DMI information exposed by the kernel", kind.value)

    def _os_release(self) -> Dict[str, str]:
        text = self._read(self._path(OS_RELEASE))
        values = {}
        for line in (text or "").splitlines():
            if "=" not in line or line.lstrip().startswith("#"):
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip().strip('"').strip("'")
        return values

    # ------------------------------------------------------------------
    # Generic (psutil / py-cpuinfo / platform)
    # ------------------------------------------------------------------

    @staticmethod
    def _psutil():
        psutil = safe_import("psutil")
        if psutil is None:
            raise ProbeUnavailableError("psutil is not installed")
        return psutil

    def _generic_operating_system(self) -> List[Dict[str, Any]]:
        psutil = self._psutil()
        memory = psutil.virtual_memory()
        swap = psutil.swap_memory()
        return [{
            "Caption": f"{platform.system()} {platform.release()}".strip(),
            "Version": platform.release(),
            "BuildNumber": platform.version(),
            "OSArchitecture": platform.machine(),
            "LastBootUpTime": datetime.fromtimestamp(psutil.boot_time(), timezone.utc),
            "NumberOfProcesses": len(psutil.pids()),
            "NumberOfUsers": len(psutil.users()),
            "CSName": platform.node(),
            "Locale": locale.getlocale()[0],
            "TimeZone": time.tzname[0],
            "Platform": platform.system(),
            "TotalVisibleMemorySize": memory.total // 1024,
            "FreePhysicalMemory": memory.available // 1024,
            "TotalVirtualMemorySize": (memory.total + swap.total) // 1024,
            "FreeVirtualMemory": (memory.available + swap.free) // 1024,
        }]

    def _generic_computer_system(self) -> List[Dict[str, Any]]:
        psutil = self._psutil()
        return [{"TotalPhysicalMemory": psutil.virtual_memory().total}]

    def _generic_processor(self) -> List[Dict[str, Any]]:
        record = {
            "Name": platform.processor() or None,
            "Architecture": platform.machine(),
        }

        cpuinfo = safe_import("cpuinfo")
        if cpuinfo:
            info = cpuinfo.get_cpu_info()
            advertised = info.get("hz_advertised")
            l2 = info.get("l2_cache_size")
            l3 = info.get("l3_cache_size")
            record.update({
                "Name": info.get("brand_raw") or record["Name"],
                "Manufacturer": info.get("vendor_id_raw"),
                "Architecture": info.get("arch_string_raw") or record["Architecture"],
                "Family": info.get("family"),
                "Model": info.get("model"),
                "Stepping": info.get("stepping"),
                "MaxClockSpeed": advertised[0] // 1_000_000 if advertised else None,
                "L2CacheSize": l2 // 1024 if isinstance(l2, int) else None,
                "L3CacheSize": l3 // 1024 if isinstance(l3, int) else None,
            })

        psutil = safe_import("psutil")
        if psutil:
            record["NumberOfCores"] = psutil.cpu_count(logical=False)
            record["NumberOfLogicalProcessors"] = psutil.cpu_count(logical=True)
            frequency = psutil.cpu_freq()
            if frequency:
                record["CurrentClockSpeed"] = int(frequency.current)
                if frequency.max:
                    record["MaxClockSpeed"] = int(frequency.max)
        return [record]

    def _generic_logical_disk(self) -> List[Dict[str, Any]]:
        psutil = self._psutil()
        records = []
        for part in psutil.disk_partitions(all=False):
            fstype = (part.fstype or "").lower()
            if fstype in NETWORK_FILESYSTEMS:
                drive_type = DRIVE_TYPE_NETWORK
            elif "cdrom" in part.opts or fstype in ("iso9660", "udf"):
                drive_type = DRIVE_TYPE_CDROM
            elif "removable" in part.opts:
                drive_type = DRIVE_TYPE_REMOVABLE
            else:
                drive_type = DRIVE_TYPE_LOCAL

            try:
                usage = psutil.disk_usage(part.mountpoint)
            except (PermissionError, FileNotFoundError, OSError) as e:
                logger.debug(f"Skipping usage for {part.mountpoint}: {e}")
                usage = None

            records.append({
                "DeviceID": part.mountpoint,
                "FileSystem": part.fstype or None,
                "DriveType": drive_type,
                "Size": usage.total if usage else None,
                "FreeSpace": usage.free if usage else None,
                "DiskDeviceID": self._owning_disk(part.device),
            })
        return records

    def _owning_disk(self, device: str) -> Optional[str]:
        """``/dev/nvme0n1p2`` -> ``/dev/nvme0n1`` using the sysfs block hierarchy."""
        if self.system != "Linux" or not device.startswith("/dev/"):
            return None
        name = Path(device).name
        entry = self._path(CLASS_BLOCK_DIR, name)
        if not entry.exists():
            return None
        if (entry / "partition").exists():
            return f"/dev/{entry.resolve().parent.name}"
        return f"/dev/{name}"

    def _generic_active_user(self) -> List[Dict[str, Any]]:
        name = getpass.getuser()
        login_time = None
        psutil = safe_import("psutil")
        if psutil:
            sessions = [u for u in psutil.users() if u.name == name]
            if sessions:
                login_time = datetime.fromtimestamp(min(u.started for u in sessions), timezone.utc)

        interactive = sys.stdin is not None and sys.stdin.isatty()
        return [{
            "Name": name,
            "Domain": os.environ.get("USERDOMAIN") or platform.node(),
            "HomeDirectory": str(Path.home()),
            "SessionType": "Interactive" if interactive else "Service",
            "LoginTime": login_time,
        }]

    # ------------------------------------------------------------------
    # Linux
    # ------------------------------------------------------------------

    def _linux_operating_system(self) -> List[Dict[str, Any]]:
        record = self._generic_operating_system()[0]
        release = self._os_release()
        if release:
            record["Caption"] = release.get("PRETTY_NAME") or release.get("NAME") or record["Caption"]
            record["Version"] = release.get("VERSION_ID") or record["Version"]
            record["BuildNumber"] = release.get("BUILD_ID") or platform.release()
        return [record]

    def _linux_computer_system(self) -> List[Dict[str, Any]]:
        record = self._generic_computer_system()[0]
        record.update({
            "Manufacturer": self._dmi("sys_vendor"),
            "Model": self._dmi("product_name"),
        })
        cpuinfo = safe_import("cpuinfo")
        if cpuinfo:
            record["HypervisorPresent"] = "hypervisor" in cpuinfo.get_cpu_info().get("flags", [])
        return [record]

    def _linux_computer_product(self) -> List[Dict[str, Any]]:
        self._require_dmi(ComponentKind.COMPUTER_PRODUCT)
        return [{"UUID": self._dmi("product_uuid")}]

    def _linux_baseboard(self) -> List[Dict[str, Any]]:
        self._require_dmi(ComponentKind.BASEBOARD)
        return [{
            "Manufacturer": self._dmi("board_vendor"),
            "Product": self._dmi("board_name"),
            "SerialNumber": self._dmi("board_serial"),
            "Version": self._dmi("board_version"),
        }]

    def _linux_chassis(self) -> List[Dict[str, Any]]:
        self._require_dmi(ComponentKind.CHASSIS)
        chassis_type = self._dmi("chassis_type")
        return [{
            "Manufacturer": self._dmi("chassis_vendor"),
            "SerialNumber": self._dmi("chassis_serial"),
            "ChassisTypes": [int(chassis_type)] if chassis_type and chassis_type.isdigit() else None,
            "SMBIOSAssetTag": self._dmi("chassis_asset_tag"),
            "SKU": self._dmi("product_sku"),
        }]

    def _linux_video_controller(self) -> List[Dict[str, Any]]:
        devices_dir = self._path(PCI_DEVICES_DIR)
        if not devices_dir.is_dir():
            raise ProbeUnavailableError("no PCI bus in sysfs", ComponentKind.VIDEO_CONTROLLER.value)

        records = []
        for device in sorted(devices_dir.iterdir()):
            pci_class = (self._read(device / "class") or "")[:6].lower()
            if pci_class not in PCI_DISPLAY_CLASSES:
                continue
            vendor = (self._read(device / "vendor") or "").lower()
            device_id = (self._read(device / "device") or "").lower()
            vendor_name = PCI_DISPLAY_VENDORS.get(vendor)
            name = self._read(device / "label") or " ".join(
                part for part in (vendor_name, PCI_DISPLAY_CLASSES[pci_class]) if part
            )

            driver = None
            driver_link = device / "driver"
            if driver_link.is_symlink():
                driver = os.path.basename(os.readlink(driver_link))
            vram = self._read(device / "mem_info_vram_total")

            pnp_id = f"PCI\\VEN_{vendor[2:].upper()}&DEV_{device_id[2:].upper()}\\{device.name}"
            records.append({
                "Name": name,
                "AdapterCompatibility": vendor_name,
                "AdapterRAM": int(vram) if vram and vram.isdigit() else None,
                "DriverVersion": self._read(self._path("sys/module", driver, "version")) if driver else None,
                "VideoProcessor": driver,
                "DeviceID": device.name,
                "PNPDeviceID": pnp_id,
                "Status": "OK" if driver else None,
            })
        return records

    def _linux_disk_drive(self) -> List[Dict[str, Any]]:
        block_dir = self._path(BLOCK_DIR)
        if not block_dir.is_dir():
            raise ProbeUnavailableError("no block devices in sysfs", ComponentKind.DISK_DRIVE.value)

        records = []
        for entry in sorted(block_dir.iterdir()):
            name = entry.name
            if name.startswith(VIRTUAL_BLOCK_PREFIXES):
                continue
            device = entry / "device"
            sectors = self._read(entry / "size")
            rotational = self._read(entry / "queue" / "rotational")
            resolved = str(entry.resolve())

            if name.startswith("nvme"):
                interface = "NVMe"
            elif "/usb" in resolved:
                interface = "USB"
            elif name.startswith(("sd", "hd")):
                interface = "SCSI" if name.startswith("sd") else "IDE"
            elif name.startswith("mmcblk"):
                interface = "MMC"
            elif name.startswith(("vd", "xvd")):
                interface = "Virtual"
            else:
                interface = None

            if rotational == "1":
                media = "Fixed hard disk media"
            elif rotational == "0":
                media = "SSD"
            else:
                media = None

            records.append({
                "DeviceID": f"/dev/{name}",
                "Model": self._read(device / "model"),
                "Manufacturer": self._read(device / "vendor"),
                "SerialNumber": self._read(device / "serial") or self._read(device / "wwid"),
                "InterfaceType": interface,
                "MediaType": media,
                "FirmwareRevision": self._read(device / "firmware_rev") or self._read(device / "rev"),
                "Size": int(sectors) * SECTOR_SIZE if sectors and sectors.isdigit() else None,
            })
        return records

    def _smbios_structures(self, structure_type: int, kind: ComponentKind):
        entries_dir = self._path(DMI_ENTRIES_DIR)
        if not entries_dir.is_dir():
            raise ProbeUnavailableError("no SMBIOS entries exposed by the kernel", kind.value)

        prefix = f"{structure_type}-"
        entries = [e for e in entries_dir.iterdir() if e.name.startswith(prefix)]
        entries.sort(key=lambda e: int(e.name[len(prefix):]) if e.name[len(prefix):].isdigit() else 0)
        for entry in entries:
            try:
                raw = (entry / "raw").read_bytes()
            except PermissionError as e:
                raise ProbeError("reading SMBIOS entries requires root privileges", kind.value) from e
            except FileNotFoundError:
                continue
            yield parse_smbios_structure(raw)

    def _linux_physical_memory(self) -> List[Dict[str, Any]]:
        records = []
        for _, formatted, strings in self._smbios_structures(SMBIOS_MEMORY_DEVICE, ComponentKind.PHYSICAL_MEMORY):
            record = memory_device_record(formatted, strings)
            if record is not None:
                records.append(record)
        return records

    def _linux_memory_array(self) -> List[Dict[str, Any]]:
        records = []
        for _, formatted, _ in self._smbios_structures(SMBIOS_MEMORY_ARRAY, ComponentKind.MEMORY_ARRAY):
            record = memory_array_record(formatted)
            if record is not None:
                records.append(record)
        return records

    def _usb_entries(self):
        usb_dir = self._path(USB_DEVICES_DIR)
        if not usb_dir.is_dir():
            raise ProbeUnavailableError("no USB bus in sysfs")
        # Interface directories ("1-1:1.0") carry no idVendor
        return [e for e in sorted(usb_dir.iterdir()) if (e / "idVendor").exists()]

    def _usb_class(self, entry: Path) -> Optional[str]:
        device_class = (self._read(entry / "bDeviceClass") or "").upper() or None
        if device_class in USB_DEFER_TO_INTERFACE:
            interface = self._read(entry.parent / f"{entry.name}:1.0" / "bInterfaceClass")
            if interface:
                return interface.upper()
        return device_class

    def _linux_pnp_usb_device(self) -> List[Dict[str, Any]]:
        records = []
        for entry in self._usb_entries():
            if entry.name.startswith("usb"):
                continue
            vendor = (self._read(entry / "idVendor") or "").upper()
            product = (self._read(entry / "idProduct") or "").upper()
            serial = self._read(entry / "serial")
            records.append({
                "DeviceID": f"USB\\VID_{vendor}&PID_{product}\\{serial or entry.name}",
                "Name": self._read(entry / "product"),
                "Manufacturer": self._read(entry / "manufacturer"),
                "ClassCode": self._usb_class(entry),
                "SerialNumber": serial,
                "Present": True,
            })
        return records

    def _linux_usb_controller(self) -> List[Dict[str, Any]]:
        records = []
        for entry in self._usb_entries():
            if not entry.name.startswith("usb"):
                continue
            name = self._read(entry / "product")
            version = self._read(entry / "version")
            records.append({
                "DeviceID": f"USB\\ROOT_HUB\\{entry.name.upper()}",
                "Name": name,
                "Description": f"USB {version} root hub" if version else None,
                "Manufacturer": self._read(entry / "manufacturer"),
                "Status": "OK",
            })
        return records

    def _linux_user_account(self) -> List[Dict[str, Any]]:
        pwd = safe_import("pwd")
        if pwd is None:
            raise ProbeUnavailableError("pwd module not available", ComponentKind.USER_ACCOUNT.value)
        records = []
        for entry in pwd.getpwall():
            # Regular accounts only; system accounts sit below 1000, nobody at 65534
            if entry.pw_uid != 0 and not (1000 <= entry.pw_uid < 65534):
                continue
            records.append({
                "Name": entry.pw_name,
                "FullName": entry.pw_gecos.split(",")[0] or None,
                "HomeDirectory": entry.pw_dir,
                "Disabled": entry.pw_shell.endswith(("nologin", "false")),
            })
        return records

    # ------------------------------------------------------------------
    # Windows
    # ------------------------------------------------------------------

    @staticmethod
    def _wmi_connection(namespace: Optional[str] = None):
        wmi = safe_import("wmi")
        if wmi is None:
            raise ProbeUnavailableError("the 'wmi' package is not installed")
        # COM must be initialized in every worker thread
        pythoncom = safe_import("pythoncom")
        if pythoncom is not None:
            pythoncom.CoInitialize()
        return wmi.WMI(namespace=namespace) if namespace else wmi.WMI()

    @staticmethod
    def _wmi_record(instance, fields) -> Dict[str, Any]:
        return {name: getattr(instance, name, None) for name in fields}

    def _wmi_query(self, kind: ComponentKind) -> List[Dict[str, Any]]:
        class_name, fields = WMI_CLASSES[kind]
        connection = self._wmi_connection()
        return [self._wmi_record(i, fields) for i in getattr(connection, class_name)()]

    def _windows_operating_system(self) -> List[Dict[str, Any]]:
        records = self._wmi_query(ComponentKind.OPERATING_SYSTEM)
        for record in records:
            record["Platform"] = "Windows"
            record["TimeZone"] = time.tzname[0]
        return records

    def _windows_computer_system(self):
        return self._wmi_query(ComponentKind.COMPUTER_SYSTEM)

    def _windows_computer_product(self):
        return self._wmi_query(ComponentKind.COMPUTER_PRODUCT)

    def _windows_baseboard(self):
        return self._wmi_query(ComponentKind.BASEBOARD)

    def _windows_chassis(self):
        return self._wmi_query(ComponentKind.CHASSIS)

    def _windows_processor(self):
        return self._wmi_query(ComponentKind.PROCESSOR)

    def _windows_video_controller(self):
        return self._wmi_query(ComponentKind.VIDEO_CONTROLLER)

    def _windows_disk_drive(self):
        return self._wmi_query(ComponentKind.DISK_DRIVE)

    def _windows_physical_memory(self):
        return self._wmi_query(ComponentKind.PHYSICAL_MEMORY)

    def _windows_memory_array(self):
        return self._wmi_query(ComponentKind.MEMORY_ARRAY)

    def _windows_usb_controller(self):
        return self._wmi_query(ComponentKind.USB_CONTROLLER)

    def _windows_logical_disk(self) -> List[Dict[str, Any]]:
        connection = self._wmi_connection()
        _, fields = WMI_CLASSES[ComponentKind.LOGICAL_DISK]

        owners = {}
        for disk in connection.Win32_DiskDrive():
            for partition in disk.associators("Win32_DiskDriveToDiskPartition"):
                for logical in partition.associators("Win32_LogicalDiskToPartition"):
                    owners.setdefault(logical.DeviceID, disk.DeviceID)

        records = []
        for logical in connection.Win32_LogicalDisk():
            record = self._wmi_record(logical, fields)
            record["DiskDeviceID"] = owners.get(logical.DeviceID)
            records.append(record)
        return records

    def _windows_pnp_usb_device(self) -> List[Dict[str, Any]]:
        connection = self._wmi_connection()
        entities = connection.query("SELECT * FROM Win32_PnPEntity WHERE DeviceID LIKE 'USB%'")
        return [self._wmi_record(e, _PNP_USB_FIELDS) for e in entities]

    def _windows_user_account(self) -> List[Dict[str, Any]]:
        connection = self._wmi_connection()
        return [self._wmi_record(u, _USER_ACCOUNT_FIELDS) for u in connection.Win32_UserAccount(LocalAccount=True)]

    def _windows_active_user(self) -> List[Dict[str, Any]]:
        record = self._generic_active_user()[0]
        domain = os.environ.get("USERDOMAIN")
        if domain:
            record["Name"] = f"{domain}\\{record['Name']}"
        return [record]

    @staticmethod
    def _registry_value(key_path: str, value_name: Optional[str] = None) -> Tuple[bool, Any]:
        """(key exists, value) for an HKEY_LOCAL_MACHINE key."""
        winreg = safe_import("winreg")
        if winreg is None:
            raise ProbeUnavailableError("winreg not available")
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key_path) as key:
                if value_name is None:
                    return True, None
                try:
                    return True, winreg.QueryValueEx(key, value_name)[0]
                except FileNotFoundError:
                    return True, None
        except FileNotFoundError:
            return False, None

    def _windows_security(self) -> List[Dict[str, Any]]:
        connection = self._wmi_connection()
        services = connection.Win32_Service(Name="MpsSvc")
        firewall = bool(services) and services[0].State == "Running"

        try:
            products = self._wmi_connection("root/SecurityCenter2").AntiVirusProduct()
            antivirus, center = len(products) > 0, "Windows Security Center"
        except Exception as e:
            # SecurityCenter2 does not exist on Windows Server editions
            logger.debug(f"SecurityCenter2 unavailable: {e}")
            antivirus, center = None, None

        bitlocker, _ = self._registry_value(_BITLOCKER_KEY)
        _, lua = self._registry_value(_UAC_KEY, "EnableLUA")

        return [{
            "FirewallEnabled": firewall,
            "AntivirusEnabled": antivirus,
            "SecurityCenter": center,
            "BitLockerEnabled": bitlocker,
            "UacEnabled": None if lua is None else lua == 1,
        }]
