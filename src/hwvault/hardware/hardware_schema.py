#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Hardware Snapshot Schema Definitions

Pydantic BaseModel schemas that define the output structure of
SnapshotAggregator.collect() and the derived system summary.

Every section has usable defaults, so a snapshot can always be built even when
the probe for a component failed: the section is then simply empty.
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..classification.tables import UNKNOWN
from ..datasets.chipsets import DEFAULT_PCIE_VERSION


# ============================================================================
# OPERATING SYSTEM
# ============================================================================

class BuildInfo(BaseModel):
    """Operating system build details."""
    number: Optional[str] = Field(None, description="OS build number")
    architecture: Optional[str] = Field(None, description="OS architecture (e.g., '64-bit', 'x86_64')")
    service_pack: Optional[str] = Field(None, description="Installed service pack, if any")


class InstallationInfo(BaseModel):
    """Installation and boot timestamps."""
    install_date: Optional[datetime] = Field(None, description="When the OS was installed")
    last_boot_up_time: Optional[datetime] = Field(None, description="Last boot time")
    uptime: Optional[str] = Field(None, description="Uptime at collection (e.g., '3 days 4 hours 12 minutes')")


class ProcessInfo(BaseModel):
    """Process and session counts."""
    number_of_processes: Optional[int] = Field(None, description="Running processes")
    number_of_users: Optional[int] = Field(None, description="Logged-in user sessions")


class OperatingSystem(BaseModel):
    """Operating system information."""
    name: Optional[str] = Field(None, description="OS product name (e.g., 'Microsoft Windows 11 Pro', 'Ubuntu 24.04 LTS')")
    version: Optional[str] = Field(None, description="OS version/release")
    platform: Optional[str] = Field(None, description="Platform family ('Windows', 'Linux', 'Darwin')")
    hostname: Optional[str] = Field(None, description="Computer name")
    build: BuildInfo = Field(default_factory=BuildInfo)
    installation: InstallationInfo = Field(default_factory=InstallationInfo)
    processes: ProcessInfo = Field(default_factory=ProcessInfo)
    registered_user: Optional[str] = Field(None, description="Registered owner")
    organization: Optional[str] = Field(None, description="Registered organization")
    serial_number: Optional[str] = Field(None, description="OS serial/product id")
    system_directory: Optional[str] = Field(None, description="System directory")
    windows_directory: Optional[str] = Field(None, description="Windows directory (Windows only)")
    locale: Optional[str] = Field(None, description="System locale")
    time_zone: Optional[str] = Field(None, description="Local time zone")
    product_type: Optional[str] = Field(None, description="Workstation, Domain Controller or Server")
    sku_name: Optional[str] = Field(None, description="Edition name derived from the OS SKU code")
    is_hypervisor_present: Optional[bool] = Field(None, description="Whether the OS runs under a hypervisor")


# ============================================================================
# BASEBOARD / CHASSIS
# ============================================================================

class PciSlot(BaseModel):
    """PCIe slot provided by the chipset."""
    type: str = Field(..., description="Slot type (e.g., 'PCIe 4.0 x16')")
    speed_per_lane: str = Field(..., description="Transfer rate per lane (e.g., '16 GT/s')")
    total_bandwidth: str = Field(..., description="Total slot bandwidth (e.g., '31.5 GB/s')")


class PciSlotInfo(BaseModel):
    """Chipset identity and the PCIe capabilities it implies."""
    model: str = Field(UNKNOWN, description="Chipset model (e.g., 'X570', 'Z790')")
    version: str = Field(DEFAULT_PCIE_VERSION, description="Highest PCIe generation of the chipset")
    available_slots: Optional[List[PciSlot]] = Field(None, description="Slot layout from the chipset dataset")
    release_year: Optional[int] = Field(None, description="Chipset release year")


class Baseboard(BaseModel):
    """Motherboard information."""
    manufacturer: Optional[str] = Field(None, description="Board manufacturer")
    product: Optional[str] = Field(None, description="Board product string (e.g., 'ROG STRIX X570-E GAMING')")
    serial_number: Optional[str] = Field(None, description="Board serial number")
    version: Optional[str] = Field(None, description="Board revision")
    model: Optional[str] = Field(None, description="Board model (product text preceding the chipset)")
    pci_slot_info: PciSlotInfo = Field(default_factory=PciSlotInfo)
    usb_version: str = Field(UNKNOWN, description="Newest USB generation among host controllers")


class Chassis(BaseModel):
    """System enclosure information."""
    manufacturer: str = Field(UNKNOWN, description="Chassis manufacturer")
    serial_number: str = Field(UNKNOWN, description="Chassis serial number")
    chassis_type: str = Field(UNKNOWN, description="Chassis type name")
    chassis_type_description: str = Field(UNKNOWN, description="Chassis type description used for the system type")
    chassis_type_code: Optional[int] = Field(None, description="SMBIOS chassis type code")
    model: Optional[str] = Field(None, description="Chassis model")
    asset_tag: Optional[str] = Field(None, description="SMBIOS asset tag")
    sku: Optional[str] = Field(None, description="Chassis SKU")
    bootup_state: Optional[bool] = Field(None, description="True when the boot-up state is 'Safe'")
    power_supply_state: Optional[bool] = Field(None, description="True when the power supply state is 'Safe'")
    thermal_state: Optional[bool] = Field(None, description="True when the thermal state is 'Safe'")
    number_of_power_cords: Optional[int] = Field(None, description="Number of power cords")


# ============================================================================
# PROCESSOR / GRAPHICS / STORAGE
# ============================================================================

class CPU(BaseModel):
    """CPU information."""
    name: Optional[str] = Field(None, description="Processor brand string")
    manufacturer: Optional[str] = Field(None, description="Processor vendor")
    max_clock_speed: Optional[int] = Field(None, description="Maximum clock speed in MHz")
    current_clock_speed: Optional[int] = Field(None, description="Current clock speed in MHz")
    number_of_cores: Optional[int] = Field(None, description="Physical cores")
    number_of_logical_processors: Optional[int] = Field(None, description="Logical processors")
    architecture: str = Field(UNKNOWN, description="Canonical architecture ('x64', 'ARM64', ...)")
    family: Optional[str] = Field(None, description="Processor family")
    model: Optional[str] = Field(None, description="Processor model number")
    stepping: Optional[str] = Field(None, description="Processor stepping")
    processor_id: Optional[str] = Field(None, description="Processor id")
    l2_cache_size: Optional[int] = Field(None, description="L2 cache size in KB")
    l3_cache_size: Optional[int] = Field(None, description="L3 cache size in KB")


class GPU(BaseModel):
    """Display adapter information."""
    name: Optional[str] = Field(None, description="Adapter name")
    manufacturer: Optional[str] = Field(None, description="Adapter vendor")
    type: str = Field(UNKNOWN, description="'Integrated', 'Dedicated', 'Virtual' or 'Unknown'")
    memory_mb: Optional[int] = Field(None, description="Adapter memory in MB")
    memory_gb: Optional[float] = Field(None, description="Adapter memory in GB")
    driver_version: Optional[str] = Field(None, description="Driver version")
    driver_date: Optional[date] = Field(None, description="Driver release date")
    video_processor: Optional[str] = Field(None, description="Video processor name")
    device_id: Optional[str] = Field(None, description="Device identifier")
    status: Optional[str] = Field(None, description="Device status")
    current_resolution: Optional[str] = Field(None, description="Current resolution (e.g., '2560x1440')")
    refresh_rate: Optional[int] = Field(None, description="Current refresh rate in Hz")


class Partition(BaseModel):
    """Logical volume information."""
    drive_letter: Optional[str] = Field(None, description="Drive letter or mount point")
    label: Optional[str] = Field(None, description="Volume label")
    file_system: Optional[str] = Field(None, description="File system")
    drive_type: Optional[str] = Field(None, description="Logical drive type ('Local Disk', ...)")
    total_size_gb: Optional[float] = Field(None, description="Volume size in GB")
    free_size_gb: Optional[float] = Field(None, description="Free space in GB")
    usage_percentage: Optional[float] = Field(None, description="Used space percentage")


class StorageDevice(BaseModel):
    """Physical disk information."""
    model: Optional[str] = Field(None, description="Disk model")
    manufacturer: Optional[str] = Field(None, description="Disk manufacturer")
    serial_number: Optional[str] = Field(None, description="Disk serial number")
    interface_type: Optional[str] = Field(None, description="Interface ('SCSI', 'IDE', 'USB', 'NVMe')")
    media_type: Optional[str] = Field(None, description="Media type")
    firmware_revision: Optional[str] = Field(None, description="Firmware revision")
    drive_type: str = Field(UNKNOWN, description="'NVMe SSD', 'SATA SSD', 'HDD', 'USB Drive' or 'Unknown'")
    device_id: Optional[str] = Field(None, description="Disk device identifier")
    size_bytes: Optional[int] = Field(None, description="Capacity in bytes")
    size_gb: Optional[float] = Field(None, description="Capacity in GB")
    partitions: List[Partition] = Field(default_factory=list)


# ============================================================================
# MEMORY
# ============================================================================

class MemoryModule(BaseModel):
    """One installed memory module."""
    device_locator: Optional[str] = Field(None, description="Slot locator (e.g., 'DIMM_A1')")
    bank_label: Optional[str] = Field(None, description="Bank label")
    capacity_mb: Optional[int] = Field(None, description="Module capacity in MB")
    memory_type: str = Field(UNKNOWN, description="Memory technology ('DDR4', 'DDR5', ...)")
    form_factor: str = Field(UNKNOWN, description="Module form factor ('DIMM', 'SODIMM', ...)")
    speed: Optional[int] = Field(None, description="Rated speed in MT/s")
    manufacturer: str = Field(UNKNOWN, description="Module manufacturer")
    part_number: Optional[str] = Field(None, description="Part number")
    serial_number: Optional[str] = Field(None, description="Serial number")
    configured_speed: Optional[int] = Field(None, description="Configured speed in MT/s")
    configured_voltage: Optional[int] = Field(None, description="Configured voltage in mV")
    min_voltage: Optional[int] = Field(None, description="Minimum voltage in mV")
    max_voltage: Optional[int] = Field(None, description="Maximum voltage in mV")


class DetailedMemory(BaseModel):
    """Installed memory and the statistics derived from its modules."""
    installed_memory_mb: Optional[int] = Field(None, description="Installed physical memory in MB")
    max_memory_capacity_mb: Optional[int] = Field(None, description="Maximum supported memory in MB")
    total_memory_slots: Optional[int] = Field(None, description="Total slots (reported, or a best-effort estimate)")
    used_memory_slots: int = Field(0, description="Number of installed modules")
    memory_modules: List[MemoryModule] = Field(default_factory=list)
    memory_architecture: Optional[str] = Field(None, description="Distinct module technologies (e.g., 'DDR4')")
    memory_speed: Optional[int] = Field(None, description="Slowest module speed in MT/s")


class BasicMemory(BaseModel):
    """OS-level memory counters (KB)."""
    total_visible_memory_size: Optional[int] = Field(None, description="Total visible memory in KB")
    free_physical_memory: Optional[int] = Field(None, description="Free physical memory in KB")
    total_virtual_memory_size: Optional[int] = Field(None, description="Total virtual memory in KB")
    free_virtual_memory: Optional[int] = Field(None, description="Free virtual memory in KB")
    memory_usage_percentage: Optional[float] = Field(None, description="Used physical memory percentage")


class Hardware(BaseModel):
    """Cross-component hardware view."""
    memory: DetailedMemory = Field(default_factory=DetailedMemory)
    basic_memory: BasicMemory = Field(default_factory=BasicMemory)
    manufacturer: Optional[str] = Field(None, description="System manufacturer")
    model: Optional[str] = Field(None, description="System model")
    system_type: str = Field(UNKNOWN, description="'Laptop', 'Desktop', 'Server', 'Tablet', 'All-in-One', 'Workstation' or the chassis description")


class ManufacturerInfo(BaseModel):
    """Who built the machine and its parts."""
    system_manufacturer: str = Field(UNKNOWN, description="System manufacturer")
    baseboard_manufacturer: Optional[str] = Field(None, description="Baseboard manufacturer")
    chassis_manufacturer: str = Field(UNKNOWN, description="Chassis manufacturer")
    memory_manufacturers: Optional[str] = Field(None, description="Distinct memory module manufacturers")
    is_oem: bool = Field(False, description="Whether the system comes from a known OEM")
    is_custom_build: bool = Field(True, description="Whether the system is a custom build")
    system_integrator: Optional[str] = Field(None, description="OEM name, or 'Custom Build'")


# ============================================================================
# PERIPHERALS / USERS / SECURITY
# ============================================================================

class UsbDevice(BaseModel):
    """USB device or host controller."""
    device_id: Optional[str] = Field(None, description="PnP device identifier")
    name: str = Field(UNKNOWN, description="Device name")
    description: str = Field(UNKNOWN, description="Device description")
    manufacturer: str = Field(UNKNOWN, description="Device manufacturer")
    device_class: str = Field("FF", description="USB class code (two hex digits)")
    device_class_description: str = Field("Vendor Specific", description="USB class name")
    vendor_id: Optional[str] = Field(None, description="Vendor id (e.g., '0x046D')")
    product_id: Optional[str] = Field(None, description="Product id (e.g., '0x0843')")
    version: Optional[str] = Field(None, description="USB generation (controllers only)")
    serial_number: Optional[str] = Field(None, description="Device serial number")
    is_connected: Optional[bool] = Field(None, description="Whether the device is currently present")
    is_controller: bool = Field(False, description="Whether this entry is a host controller")


class User(BaseModel):
    """Local user account."""
    name: Optional[str] = Field(None, description="Account name")
    full_name: Optional[str] = Field(None, description="Full name")
    description: Optional[str] = Field(None, description="Account description")
    is_active: Optional[bool] = Field(None, description="Whether the account is enabled")
    is_locked: Optional[bool] = Field(None, description="Whether the account is locked out")
    last_login: Optional[datetime] = Field(None, description="Last login time")
    home_directory: Optional[str] = Field(None, description="Home directory")


class ActiveUser(BaseModel):
    """The user running the collection."""
    name: Optional[str] = Field(None, description="User name")
    full_name: Optional[str] = Field(None, description="Full name")
    domain: Optional[str] = Field(None, description="Domain or machine name")
    login_time: Optional[datetime] = Field(None, description="Session start time")
    session_type: Optional[str] = Field(None, description="'Interactive' or 'Service'")
    home_directory: Optional[str] = Field(None, description="Home directory")


class Uuids(BaseModel):
    """Hardware identifiers."""
    system_uuid: str = Field(UNKNOWN, description="SMBIOS system UUID")
    baseboard_uuid: str = Field(UNKNOWN, description="Baseboard serial number")
    chassis_uuid: str = Field(UNKNOWN, description="Chassis serial number")


class Security(BaseModel):
    """Security posture."""
    firewall_enabled: Optional[bool] = Field(None, description="Firewall service running")
    antivirus_enabled: Optional[bool] = Field(None, description="At least one antivirus product registered")
    security_center: Optional[str] = Field(None, description="Security center providing the status")
    bitlocker_enabled: Optional[bool] = Field(None, description="Disk encryption configured")
    uac_enabled: Optional[bool] = Field(None, description="User Account Control enabled")


# ============================================================================
# DIAGNOSTICS / SNAPSHOT
# ============================================================================

class ProbeFailure(BaseModel):
    """A component whose probe did not succeed."""
    kind: str = Field(..., description="Component kind that was probed")
    status: str = Field(..., description="'failed', 'timed_out' or 'unavailable'")
    error: Optional[str] = Field(None, description="Error message")


class CollectionDiagnostics(BaseModel):
    """How the snapshot was collected."""
    succeeded_probes: List[str] = Field(default_factory=list, description="Component kinds probed successfully")
    failed_probes: List[ProbeFailure] = Field(default_factory=list, description="Component kinds that failed")
    dataset_loaded: Dict[str, bool] = Field(default_factory=dict, description="Per-domain dataset load status")
    dataset_failures: Dict[str, str] = Field(default_factory=dict, description="Per-domain dataset load errors")
    dataset_statistics: Dict[str, int] = Field(default_factory=dict, description="Entries per dataset table")
    duration_seconds: Optional[float] = Field(None, description="Wall time of the collection")


class Snapshot(BaseModel):
    """Complete inventory snapshot of one machine."""
    os: OperatingSystem = Field(default_factory=OperatingSystem)
    hardware: Hardware = Field(default_factory=Hardware)
    baseboard: Baseboard = Field(default_factory=Baseboard)
    chassis: Chassis = Field(default_factory=Chassis)
    cpu: CPU = Field(default_factory=CPU)
    gpus: List[GPU] = Field(default_factory=list)
    storage: List[StorageDevice] = Field(default_factory=list)
    usb_devices: List[UsbDevice] = Field(default_factory=list)
    users: List[User] = Field(default_factory=list)
    active_user: ActiveUser = Field(default_factory=ActiveUser)
    uuids: Uuids = Field(default_factory=Uuids)
    manufacturer_info: ManufacturerInfo = Field(default_factory=ManufacturerInfo)
    security: Security = Field(default_factory=Security)
    collected_at: Optional[datetime] = Field(None, description="UTC time the snapshot was assembled")
    diagnostics: CollectionDiagnostics = Field(default_factory=CollectionDiagnostics)


class SystemSummary(BaseModel):
    """Flat summary derived from a snapshot."""
    system_manufacturer: str = Field(UNKNOWN, description="System manufacturer")
    system_model: str = Field(UNKNOWN, description="System model")
    system_type: str = Field(UNKNOWN, description="System form factor")
    chassis_type: str = Field(UNKNOWN, description="Chassis description")
    operating_system: str = Field("", description="OS name and version")
    total_memory_gb: float = Field(0.0, description="Installed memory in GB (1 decimal)")
    memory_modules: int = Field(0, description="Installed memory modules")
    memory_slots: str = Field("0/0", description="'used/total' memory slots")
    chipset_model: str = Field(UNKNOWN, description="Chipset model")
    pcie_version: str = Field(DEFAULT_PCIE_VERSION, description="PCIe generation")
    usb_version: str = Field(UNKNOWN, description="USB generation")
    connected_usb_devices: int = Field(0, description="Currently connected USB devices")
    system_uuid: str = Field(UNKNOWN, description="System UUID")
    is_oem: bool = Field(False, description="Whether the system comes from a known OEM")
    dataset_enhanced: bool = Field(False, description="Whether every reference dataset was loaded")
