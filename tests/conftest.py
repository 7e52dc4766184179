"""
Shared fixtures: the bundled dataset registry and dict-backed fake probes.
"""

import copy

import pytest

from hwvault.config import HwVaultConfig
from hwvault.datasets.registry import DatasetRegistry
from hwvault.hardware.probes import ComponentKind


class FakeProbe:
    """
    Probe answering from a dict of ComponentKind -> records.

    A value may be a list of records, a single record, an exception instance
    (raised when queried) or a callable returning records. Kinds missing from
    the dict return no records.
    """

    def __init__(self, records=None):
        self.records = dict(records or {})
        self.calls = []

    def query(self, kind):
        self.calls.append(kind)
        value = self.records.get(kind, [])
        if isinstance(value, BaseException):
            raise value
        if callable(value):
            return value()
        return value


class AsyncFakeProbe(FakeProbe):
    """Same as FakeProbe, with a coroutine ``query``."""

    async def query(self, kind):
        return FakeProbe.query(self, kind)


DESKTOP_RECORDS = {
    ComponentKind.OPERATING_SYSTEM: [{
        "Caption": "Microsoft Windows 11 Pro",
        "Version": "10.0.22631",
        "BuildNumber": "22631",
        "OSArchitecture": "64-bit",
        "ServicePackMajorVersion": 0,
        "ServicePackMinorVersion": 0,
        "InstallDate": "20240115083000.000000+060",
        "LastBootUpTime": "20260110080000.000000+000",
        "NumberOfProcesses": 245,
        "NumberOfUsers": 2,
        "RegisteredUser": "dev",
        "Organization": "",
        "ProductType": 1,
        "OperatingSystemSKU": 48,
        "CSName": "WORKSTATION-01",
        "Locale": "0409",
        "TotalVisibleMemorySize": 33554432,
        "FreePhysicalMemory": 8388608,
        "Platform": "Windows",
    }],
    ComponentKind.COMPUTER_SYSTEM: [{
        "Manufacturer": "System manufacturer",
        "Model": "System Product Name",
        "TotalPhysicalMemory": 34359738368,
        "HypervisorPresent": False,
    }],
    ComponentKind.COMPUTER_PRODUCT: [{"UUID": "FFFFFFFF-FFFF-FFFF-FFFF-FFFFFFFFFFFF"}],
    ComponentKind.BASEBOARD: [{
        "Manufacturer": "ASUSTeK COMPUTER INC.",
        "Product": "ROG STRIX X570-E GAMING",
        "SerialNumber": "210490123456789",
        "Version": "Rev X.0x",
    }],
    ComponentKind.CHASSIS: [{
        "Manufacturer": "Default string",
        "SerialNumber": "Default string",
        "ChassisTypes": [3],
        "SMBIOSAssetTag": "Default string",
        "BootupState": 3,
        "PowerSupplyState": 3,
        "ThermalState": 4,
    }],
    ComponentKind.PROCESSOR: [{
        "Name": "AMD Ryzen 9 5900X 12-Core Processor   ",
        "Manufacturer": "AuthenticAMD",
        "Architecture": 9,
        "NumberOfCores": 12,
        "NumberOfLogicalProcessors": 24,
        "MaxClockSpeed": 3701,
    }],
    ComponentKind.VIDEO_CONTROLLER: [
        {
            "Name": "NVIDIA GeForce RTX 3080",
            "AdapterCompatibility": "NVIDIA",
            "AdapterRAM": 4293918720,
            "DriverVersion": "31.0.15.5222",
            "DriverDate": "20240315000000.000000-000",
            "PNPDeviceID": "PCI\\VEN_10DE&DEV_2206\\4&1",
            "CurrentHorizontalResolution": 2560,
            "CurrentVerticalResolution": 1440,
            "CurrentRefreshRate": 144,
        },
        {
            "Name": "NVIDIA GeForce RTX 3080 (duplicate)",
            "PNPDeviceID": "pci\\ven_10de&dev_2206\\4&1",
        },
    ],
    ComponentKind.DISK_DRIVE: [
        {
            "DeviceID": "\\\\.\\PHYSICALDRIVE0",
            "Model": "Samsung SSD 980 PRO 1TB NVMe",
            "InterfaceType": "SCSI",
            "MediaType": "Fixed hard disk media",
            "SerialNumber": "0025_3852_1190_1234.",
            "Size": 1000202273280,
        },
        {
            "DeviceID": "\\\\.\\PHYSICALDRIVE1",
            "Model": "ST2000DM008-2FR102",
            "InterfaceType": "IDE",
            "MediaType": "Fixed hard disk media",
            "Size": 2000396321280,
        },
    ],
    ComponentKind.LOGICAL_DISK: [{
        "DeviceID": "C:",
        "VolumeName": "Windows",
        "FileSystem": "NTFS",
        "DriveType": 3,
        "Size": 1000000000000,
        "FreeSpace": 250000000000,
        "DiskDeviceID": "\\\\.\\PHYSICALDRIVE0",
    }],
    ComponentKind.PHYSICAL_MEMORY: [
        {
            "DeviceLocator": "DIMM_A2",
            "BankLabel": "BANK 1",
            "Capacity": 17179869184,
            "SMBIOSMemoryType": 26,
            "FormFactor": 8,
            "Speed": 3200,
            "Manufacturer": "80CE",
            "PartNumber": "M378A2K43EB1-CWE",
        },
        {
            "DeviceLocator": "DIMM_B2",
            "BankLabel": "BANK 3",
            "Capacity": 17179869184,
            "SMBIOSMemoryType": 26,
            "FormFactor": 8,
            "Speed": 2666,
            "Manufacturer": "Kingston",
        },
    ],
    ComponentKind.MEMORY_ARRAY: [{"MaxCapacity": 134217728, "MemoryDevices": 4}],
    ComponentKind.PNP_USB_DEVICE: [
        {
            "DeviceID": "USB\\VID_046D&PID_085B&MI_00\\7&2A8E&0&0000",
            "Name": "Logitech Webcam C925e",
            "Present": True,
        },
        {
            "DeviceID": "USB\\VID_046D&PID_C52B\\5&1",
            "Name": "USB Input Device",
            "Present": True,
        },
        {
            "DeviceID": "USB\\VID_8087&PID_0029\\5&2",
            "Name": "Intel(R) Wireless Bluetooth(R)",
            "Present": False,
        },
    ],
    ComponentKind.USB_CONTROLLER: [
        {
            "DeviceID": "PCI\\VEN_1022&DEV_149C\\4&1",
            "Name": "AMD USB 3.10 eXtensible Host Controller - 1.10 (Microsoft)",
        },
        {
            "DeviceID": "PCI\\VEN_8086&DEV_A36D\\3&1",
            "Name": "Standard Enhanced PCI to USB Host Controller",
        },
    ],
    ComponentKind.USER_ACCOUNT: [
        {"Name": "dev", "FullName": "Dev User", "Disabled": False, "Lockout": False},
        {"Name": "Guest", "Disabled": True, "Lockout": False},
    ],
    ComponentKind.ACTIVE_USER: [{"Name": "WORKSTATION-01\\dev", "SessionType": "Interactive"}],
    ComponentKind.SECURITY: [{
        "FirewallEnabled": True,
        "AntivirusEnabled": True,
        "SecurityCenter": "Windows Security Center",
        "BitLockerEnabled": False,
        "UacEnabled": True,
    }],
}


@pytest.fixture(scope="session")
def registry():
    """Registry loaded from the bundled datasets."""
    return DatasetRegistry.load()


@pytest.fixture
def empty_registry():
    return DatasetRegistry.empty()


@pytest.fixture
def settings():
    return HwVaultConfig(probe_timeout=2.0)


@pytest.fixture
def desktop_records():
    """Fresh, mutable copy of a typical custom-built desktop."""
    return copy.deepcopy(DESKTOP_RECORDS)


@pytest.fixture
def desktop_probe(desktop_records):
    return FakeProbe(desktop_records)


@pytest.fixture
def make_probe():
    """Factory for FakeProbe (``async_=True`` gives a coroutine probe)."""
    def _make(records=None, async_=False):
        return AsyncFakeProbe(records) if async_ else FakeProbe(records)
    return _make
