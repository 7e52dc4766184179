"""
Section builders: raw probe records in, snapshot sections out.

Every builder takes the (possibly empty) record tuples of the components it
needs plus the dataset registry, filters placeholders from every raw string
and classifies the values. Builders never look at probe status; an empty
tuple simply gives a default section.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, TypeVar

from ..classification.classifiers import (
    classify_chassis_type,
    classify_cpu_architecture,
    classify_drive_type,
    classify_form_factor,
    classify_gpu_type,
    classify_manufacturer,
    classify_memory_type,
    classify_system_type,
    classify_usb_device,
    classify_usb_version,
    highest_usb_version,
    is_oem_manufacturer,
    logical_drive_type_name,
    os_product_type_name,
    os_sku_name,
)
from ..classification.identity import (
    disk_identity,
    extract_vid_pid,
    gpu_identity,
    usb_identity,
)
from ..classification.parsing import (
    BYTES_PER_GB,
    bytes_to_gb,
    clean_brand_text,
    format_uptime,
    parse_bool_status,
    parse_cim_datetime,
    parse_driver_date,
    parse_int,
)
from ..classification.placeholders import filter_placeholder, or_unknown
from ..classification.tables import UNKNOWN
from ..datasets.registry import DatasetRegistry
from .hardware_schema import (
    CPU,
    GPU,
    ActiveUser,
    Baseboard,
    BasicMemory,
    BuildInfo,
    Chassis,
    DetailedMemory,
    Hardware,
    InstallationInfo,
    ManufacturerInfo,
    MemoryModule,
    OperatingSystem,
    Partition,
    PciSlot,
    PciSlotInfo,
    ProcessInfo,
    Security,
    Snapshot,
    StorageDevice,
    SystemSummary,
    UsbDevice,
    User,
    Uuids,
)

Record = Mapping[str, Any]
T = TypeVar("T")

BYTES_PER_MB = 1024 * 1024

# SMBIOS enclosure state value meaning "Safe"
CHASSIS_STATE_SAFE = 3

# Slot estimate used when the memory array does not report a count
SMALL_BOARD_SLOTS = 4
LARGE_BOARD_SLOTS = 8


def _first(records: Sequence[Record]) -> Record:
    return records[0] if records else {}


def _text(record: Record, field: str) -> Optional[str]:
    return filter_placeholder(record.get(field))


def dedupe(items: Iterable[T], key: Callable[[T], Optional[str]]) -> List[T]:
    """
    Drop items whose identity key was already seen.

    The first occurrence wins. Items without a key are always kept.
    """
    seen = set()
    kept = []
    for item in items:
        identity = key(item)
        if identity is not None:
            if identity in seen:
                continue
            seen.add(identity)
        kept.append(item)
    return kept


# ============================================================================
# OPERATING SYSTEM
# ============================================================================

def _service_pack(record: Record) -> Optional[str]:
    major = parse_int(record.get("ServicePackMajorVersion"))
    if not major:
        return None
    minor = parse_int(record.get("ServicePackMinorVersion"))
    return f"Service Pack {major}.{minor}" if minor else f"Service Pack {major}"


def _uptime(last_boot: Optional[datetime], now: Optional[datetime]) -> Optional[str]:
    if last_boot is None:
        return None
    if now is None:
        now = datetime.now(timezone.utc) if last_boot.tzinfo else datetime.now()
    elif (now.tzinfo is None) != (last_boot.tzinfo is None):
        return None
    if now < last_boot:
        return None
    return format_uptime(now - last_boot)


def build_operating_system(os_records: Sequence[Record], system_records: Sequence[Record] = (),
                           now: Optional[datetime] = None) -> OperatingSystem:
    """
    Build the operating system section.

    Args:
        os_records: OPERATING_SYSTEM records
        system_records: COMPUTER_SYSTEM records (hypervisor flag)
        now: Reference time for the uptime; defaults to the current time
    """
    record = _first(os_records)
    system = _first(system_records)

    last_boot = parse_cim_datetime(record.get("LastBootUpTime"))
    product_type = record.get("ProductType")
    sku = record.get("OperatingSystemSKU")

    return OperatingSystem(
        name=_text(record, "Caption"),
        version=_text(record, "Version"),
        platform=_text(record, "Platform"),
        hostname=_text(record, "CSName"),
        build=BuildInfo(
            number=_text(record, "BuildNumber"),
            architecture=_text(record, "OSArchitecture"),
            service_pack=_service_pack(record),
        ),
        installation=InstallationInfo(
            install_date=parse_cim_datetime(record.get("InstallDate")),
            last_boot_up_time=last_boot,
            uptime=_uptime(last_boot, now),
        ),
        processes=ProcessInfo(
            number_of_processes=parse_int(record.get("NumberOfProcesses")),
            number_of_users=parse_int(record.get("NumberOfUsers")),
        ),
        registered_user=_text(record, "RegisteredUser"),
        organization=_text(record, "Organization"),
        serial_number=_text(record, "SerialNumber"),
        system_directory=_text(record, "SystemDirectory"),
        windows_directory=_text(record, "WindowsDirectory"),
        locale=_text(record, "Locale"),
        time_zone=_text(record, "TimeZone"),
        product_type=os_product_type_name(product_type) if product_type is not None else None,
        sku_name=os_sku_name(sku) if sku is not None else None,
        is_hypervisor_present=parse_bool_status(system.get("HypervisorPresent")),
    )


def build_basic_memory(os_records: Sequence[Record]) -> BasicMemory:
    record = _first(os_records)
    total = parse_int(record.get("TotalVisibleMemorySize"))
    free = parse_int(record.get("FreePhysicalMemory"))

    usage = None
    if total and total > 0 and free is not None:
        usage = round((total - free) / total * 100, 2)

    return BasicMemory(
        total_visible_memory_size=total,
        free_physical_memory=free,
        total_virtual_memory_size=parse_int(record.get("TotalVirtualMemorySize")),
        free_virtual_memory=parse_int(record.get("FreeVirtualMemory")),
        memory_usage_percentage=usage,
    )


# ============================================================================
# BASEBOARD / CHASSIS
# ============================================================================

def build_baseboard(records: Sequence[Record], registry: DatasetRegistry) -> Baseboard:
    """
    Build the baseboard section with chipset and PCIe details.

    The chipset is found by substring match of the catalog models against the
    product string ("ROG STRIX X570-E GAMING" -> X570). The board model is the
    product text before the chipset.
    """
    record = _first(records)
    product = _text(record, "Product")
    catalog = registry.chipsets

    board_model, chipset = catalog.extract_model_and_chipset(product)
    key = chipset or product
    slots = catalog.available_slots(key)

    return Baseboard(
        manufacturer=_text(record, "Manufacturer"),
        product=product,
        serial_number=_text(record, "SerialNumber"),
        version=_text(record, "Version"),
        model=_text(record, "Model") or board_model,
        pci_slot_info=PciSlotInfo(
            model=chipset or UNKNOWN,
            version=catalog.pcie_version(key),
            available_slots=[
                PciSlot(type=s.type, speed_per_lane=s.speed_per_lane, total_bandwidth=s.total_bandwidth)
                for s in slots
            ] if slots else None,
            release_year=catalog.release_year(key),
        ),
    )


def _state_is_safe(value: Any) -> Optional[bool]:
    state = parse_int(value)
    if state is None:
        return None
    return state == CHASSIS_STATE_SAFE


def build_chassis(records: Sequence[Record], registry: DatasetRegistry) -> Chassis:
    record = _first(records)
    classified = classify_chassis_type(record.get("ChassisTypes"), record.get("Description"), registry)

    return Chassis(
        manufacturer=or_unknown(record.get("Manufacturer")),
        serial_number=or_unknown(record.get("SerialNumber")),
        chassis_type=classified.value,
        chassis_type_description=classified.value,
        chassis_type_code=parse_int(classified.code),
        model=_text(record, "Model"),
        asset_tag=_text(record, "SMBIOSAssetTag"),
        sku=_text(record, "SKU"),
        bootup_state=_state_is_safe(record.get("BootupState")),
        power_supply_state=_state_is_safe(record.get("PowerSupplyState")),
        thermal_state=_state_is_safe(record.get("ThermalState")),
        number_of_power_cords=parse_int(record.get("NumberOfPowerCords")),
    )


# ============================================================================
# PROCESSOR / GRAPHICS / STORAGE
# ============================================================================

def build_cpu(records: Sequence[Record]) -> CPU:
    record = _first(records)
    return CPU(
        name=clean_brand_text(_text(record, "Name")),
        manufacturer=_text(record, "Manufacturer"),
        max_clock_speed=parse_int(record.get("MaxClockSpeed")),
        current_clock_speed=parse_int(record.get("CurrentClockSpeed")),
        number_of_cores=parse_int(record.get("NumberOfCores")),
        number_of_logical_processors=parse_int(record.get("NumberOfLogicalProcessors")),
        architecture=classify_cpu_architecture(record.get("Architecture")).value,
        family=_text(record, "Family"),
        model=_text(record, "Model"),
        stepping=_text(record, "Stepping"),
        processor_id=_text(record, "ProcessorId"),
        l2_cache_size=parse_int(record.get("L2CacheSize")),
        l3_cache_size=parse_int(record.get("L3CacheSize")),
    )


def build_gpu(record: Record) -> GPU:
    name = _text(record, "Name")
    manufacturer = _text(record, "AdapterCompatibility") or _text(record, "Manufacturer")

    memory_mb = memory_gb = None
    adapter_ram = parse_int(record.get("AdapterRAM"))
    if adapter_ram and adapter_ram > 0:
        memory_mb = adapter_ram // BYTES_PER_MB
        memory_gb = round(memory_mb / 1024, 2)

    width = parse_int(record.get("CurrentHorizontalResolution"))
    height = parse_int(record.get("CurrentVerticalResolution"))
    resolution = f"{width}x{height}" if width and height else None

    return GPU(
        name=clean_brand_text(name),
        manufacturer=clean_brand_text(manufacturer),
        type=classify_gpu_type(name, manufacturer).value,
        memory_mb=memory_mb,
        memory_gb=memory_gb,
        driver_version=_text(record, "DriverVersion"),
        driver_date=parse_driver_date(record.get("DriverDate")),
        video_processor=clean_brand_text(_text(record, "VideoProcessor")),
        device_id=_text(record, "PNPDeviceID") or _text(record, "DeviceID"),
        status=_text(record, "Status"),
        current_resolution=resolution,
        refresh_rate=parse_int(record.get("CurrentRefreshRate")) or None,
    )


def build_gpus(records: Sequence[Record]) -> List[GPU]:
    """One GPU per distinct adapter; duplicates by PnP device id are dropped."""
    return [build_gpu(r) for r in dedupe(records, gpu_identity)]


def build_partition(record: Record) -> Partition:
    total_bytes = parse_int(record.get("Size"))
    free_bytes = parse_int(record.get("FreeSpace"))

    usage = None
    if total_bytes and total_bytes > 0 and free_bytes is not None:
        usage = round((total_bytes - free_bytes) / total_bytes * 100, 1)

    drive_type = record.get("DriveType")
    return Partition(
        drive_letter=_text(record, "DeviceID"),
        label=_text(record, "VolumeName"),
        file_system=_text(record, "FileSystem"),
        drive_type=logical_drive_type_name(drive_type) if drive_type is not None else None,
        total_size_gb=bytes_to_gb(total_bytes),
        free_size_gb=bytes_to_gb(free_bytes),
        usage_percentage=usage,
    )


def _partitions_for(disk: Record, logical_records: Sequence[Record]) -> List[Partition]:
    disk_id = disk_identity(disk)
    partitions = []
    for logical in logical_records:
        owner = _text(logical, "DiskDeviceID")
        # Volumes without an owning disk are listed under every disk
        if owner is None or (disk_id is not None and owner.upper() == disk_id):
            partitions.append(build_partition(logical))
    return partitions


def build_storage(disk_records: Sequence[Record], logical_records: Sequence[Record] = ()) -> List[StorageDevice]:
    devices = []
    for record in dedupe(disk_records, disk_identity):
        model = _text(record, "Model")
        size = parse_int(record.get("Size"))
        devices.append(StorageDevice(
            model=model.replace("\\", "").strip() if model else None,
            manufacturer=_text(record, "Manufacturer"),
            serial_number=_text(record, "SerialNumber"),
            interface_type=_text(record, "InterfaceType"),
            media_type=_text(record, "MediaType"),
            firmware_revision=_text(record, "FirmwareRevision"),
            drive_type=classify_drive_type(model, record.get("InterfaceType"), record.get("MediaType")).value,
            device_id=_text(record, "DeviceID"),
            size_bytes=size if size and size > 0 else None,
            size_gb=bytes_to_gb(size) if size and size > 0 else None,
            partitions=_partitions_for(record, logical_records),
        ))
    return devices


# ============================================================================
# MEMORY
# ============================================================================

def build_memory_module(record: Record, registry: DatasetRegistry) -> MemoryModule:
    locator = _text(record, "DeviceLocator")

    # SMBIOSMemoryType is the precise code; MemoryType is 0 on DDR4 and newer
    code = parse_int(record.get("SMBIOSMemoryType"))
    if not code:
        code = parse_int(record.get("MemoryType"))

    capacity = parse_int(record.get("Capacity"))
    speed = parse_int(record.get("Speed"))

    return MemoryModule(
        device_locator=locator,
        bank_label=_text(record, "BankLabel"),
        capacity_mb=capacity // BYTES_PER_MB if capacity and capacity > 0 else None,
        memory_type=classify_memory_type(code, locator, record.get("MemoryTypeName"), registry).value,
        form_factor=classify_form_factor(record.get("FormFactor"), locator, registry).value,
        speed=speed if speed and speed > 0 else None,
        manufacturer=classify_manufacturer(record.get("Manufacturer"), registry).value,
        part_number=_text(record, "PartNumber"),
        serial_number=_text(record, "SerialNumber"),
        configured_speed=parse_int(record.get("ConfiguredClockSpeed")) or None,
        configured_voltage=parse_int(record.get("ConfiguredVoltage")) or None,
        min_voltage=parse_int(record.get("MinVoltage")) or None,
        max_voltage=parse_int(record.get("MaxVoltage")) or None,
    )


def estimate_total_slots(reported: Optional[int], used: int, default_slots: int) -> int:
    """
    Total memory slots: the reported count, else a guess from the module count.

    The guess is 4 slots for up to four modules, 8 beyond that, and
    ``default_slots`` when no modules are visible at all.
    """
    if reported and reported > 0:
        return reported
    if used == 0:
        return default_slots
    return SMALL_BOARD_SLOTS if used <= SMALL_BOARD_SLOTS else LARGE_BOARD_SLOTS


def build_memory(module_records: Sequence[Record], array_records: Sequence[Record],
                 system_records: Sequence[Record], registry: DatasetRegistry,
                 default_slots: int = SMALL_BOARD_SLOTS) -> DetailedMemory:
    """
    Build the detailed memory section with its derived statistics.

    Args:
        module_records: PHYSICAL_MEMORY records, one per installed module
        array_records: MEMORY_ARRAY records (slot count, max capacity)
        system_records: COMPUTER_SYSTEM records (installed memory)
        registry: Loaded datasets
        default_slots: Slot count when nothing else is known

    Returns:
        DetailedMemory with slot usage, minimum speed and architecture
    """
    modules = [build_memory_module(r, registry) for r in module_records]
    array = _first(array_records)
    system = _first(system_records)

    installed_bytes = parse_int(system.get("TotalPhysicalMemory"))
    if installed_bytes and installed_bytes > 0:
        installed_mb = installed_bytes // BYTES_PER_MB
    else:
        installed_mb = sum(m.capacity_mb for m in modules if m.capacity_mb) or None

    max_capacity_kb = parse_int(array.get("MaxCapacity"))
    max_capacity_mb = max_capacity_kb // 1024 if max_capacity_kb and max_capacity_kb > 0 else None

    speeds = [m.speed for m in modules if m.speed and m.speed > 0]
    technologies = []
    for module in modules:
        if module.memory_type != UNKNOWN and module.memory_type not in technologies:
            technologies.append(module.memory_type)

    used = len(modules)
    return DetailedMemory(
        installed_memory_mb=installed_mb,
        max_memory_capacity_mb=max_capacity_mb,
        total_memory_slots=estimate_total_slots(parse_int(array.get("MemoryDevices")), used, default_slots),
        used_memory_slots=used,
        memory_modules=modules,
        memory_architecture=", ".join(technologies) or None,
        memory_speed=min(speeds) if speeds else None,
    )


# ============================================================================
# USB
# ============================================================================

def build_usb_device(record: Record, registry: DatasetRegistry) -> UsbDevice:
    device_id = _text(record, "DeviceID")
    vendor_id, product_id = extract_vid_pid(device_id)
    classified = classify_usb_device(
        record.get("Name"), record.get("Description"), device_id, vendor_id,
        record.get("ClassCode"), registry,
    )
    return UsbDevice(
        device_id=device_id,
        name=or_unknown(record.get("Name")),
        description=or_unknown(record.get("Description")),
        manufacturer=or_unknown(record.get("Manufacturer")),
        device_class=classified.code,
        device_class_description=classified.value,
        vendor_id=vendor_id,
        product_id=product_id,
        serial_number=_text(record, "SerialNumber"),
        is_connected=parse_bool_status(record.get("Present")),
    )


def build_usb_controller(record: Record, registry: DatasetRegistry) -> UsbDevice:
    device_id = _text(record, "DeviceID")
    vendor_id, product_id = extract_vid_pid(device_id)
    hub = classify_usb_device(None, None, None, None, 0x09, registry)
    label = " ".join(t for t in (_text(record, "Name"), _text(record, "Description")) if t)
    return UsbDevice(
        device_id=device_id,
        name=or_unknown(record.get("Name")),
        description=or_unknown(record.get("Description")),
        manufacturer=or_unknown(record.get("Manufacturer")),
        device_class=hub.code,
        device_class_description=hub.value,
        vendor_id=vendor_id,
        product_id=product_id,
        version=classify_usb_version(label).value,
        is_connected=True,
        is_controller=True,
    )


def build_usb_devices(device_records: Sequence[Record], controller_records: Sequence[Record],
                      registry: DatasetRegistry) -> List[UsbDevice]:
    """USB devices followed by host controllers, deduplicated by device id."""
    tagged = [(r, False) for r in device_records] + [(r, True) for r in controller_records]
    devices = []
    for record, is_controller in dedupe(tagged, lambda item: usb_identity(item[0])):
        if is_controller:
            devices.append(build_usb_controller(record, registry))
        else:
            devices.append(build_usb_device(record, registry))
    return devices


# ============================================================================
# USERS / IDENTIFIERS / SECURITY
# ============================================================================

def build_users(records: Sequence[Record]) -> List[User]:
    users = []
    for record in records:
        disabled = parse_bool_status(record.get("Disabled"))
        users.append(User(
            name=_text(record, "Name"),
            full_name=_text(record, "FullName"),
            description=_text(record, "Description"),
            is_active=None if disabled is None else not disabled,
            is_locked=parse_bool_status(record.get("Lockout")),
            last_login=parse_cim_datetime(record.get("LastLogin")),
            home_directory=_text(record, "HomeDirectory"),
        ))
    return users


def build_active_user(records: Sequence[Record]) -> ActiveUser:
    record = _first(records)
    name = _text(record, "Name")
    domain = _text(record, "Domain")
    if name and "\\" in name:
        prefix, name = name.split("\\", 1)
        domain = domain or filter_placeholder(prefix)
        name = filter_placeholder(name)

    return ActiveUser(
        name=name,
        full_name=_text(record, "FullName"),
        domain=domain,
        login_time=parse_cim_datetime(record.get("LoginTime")),
        session_type=_text(record, "SessionType"),
        home_directory=_text(record, "HomeDirectory"),
    )


def current_user_fallback(active_user: ActiveUser) -> List[User]:
    """Single-entry user list for the current user, used when accounts cannot be listed."""
    if not active_user.name:
        return []
    return [User(
        name=active_user.name,
        full_name=active_user.full_name,
        description="Current logged-in user",
        is_active=True,
        is_locked=False,
        last_login=active_user.login_time,
        home_directory=active_user.home_directory,
    )]


def build_uuids(product_records: Sequence[Record], baseboard_records: Sequence[Record],
                chassis_records: Sequence[Record]) -> Uuids:
    return Uuids(
        system_uuid=or_unknown(_first(product_records).get("UUID")),
        baseboard_uuid=or_unknown(_first(baseboard_records).get("SerialNumber")),
        chassis_uuid=or_unknown(_first(chassis_records).get("SerialNumber")),
    )


def build_security(records: Sequence[Record]) -> Security:
    record = _first(records)
    return Security(
        firewall_enabled=parse_bool_status(record.get("FirewallEnabled")),
        antivirus_enabled=parse_bool_status(record.get("AntivirusEnabled")),
        security_center=_text(record, "SecurityCenter"),
        bitlocker_enabled=parse_bool_status(record.get("BitLockerEnabled")),
        uac_enabled=parse_bool_status(record.get("UacEnabled")),
    )


# ============================================================================
# CROSS-SECTION DERIVATIONS
# ============================================================================

def build_manufacturer_info(system_records: Sequence[Record], baseboard: Baseboard, chassis: Chassis,
                            modules: Sequence[MemoryModule]) -> ManufacturerInfo:
    system_manufacturer = _text(_first(system_records), "Manufacturer")

    memory_manufacturers = []
    for module in modules:
        if module.manufacturer != UNKNOWN and module.manufacturer not in memory_manufacturers:
            memory_manufacturers.append(module.manufacturer)

    is_oem = is_oem_manufacturer(system_manufacturer)
    return ManufacturerInfo(
        system_manufacturer=system_manufacturer or UNKNOWN,
        baseboard_manufacturer=baseboard.manufacturer,
        chassis_manufacturer=chassis.manufacturer,
        memory_manufacturers=", ".join(memory_manufacturers) or None,
        is_oem=is_oem,
        is_custom_build=not is_oem,
        system_integrator=system_manufacturer if is_oem else "Custom Build",
    )


def build_hardware(memory: DetailedMemory, basic_memory: BasicMemory, manufacturer_info: ManufacturerInfo,
                   baseboard: Baseboard, chassis: Chassis, system_records: Sequence[Record] = ()) -> Hardware:
    """Hardware view; the model is the board product, else the system model."""
    return Hardware(
        memory=memory,
        basic_memory=basic_memory,
        manufacturer=manufacturer_info.system_manufacturer,
        model=baseboard.product or _text(_first(system_records), "Model"),
        system_type=classify_system_type(chassis.chassis_type_description).value,
    )


def usb_version_from_controllers(devices: Iterable[UsbDevice]) -> str:
    return highest_usb_version(d.version for d in devices if d.is_controller)


def build_summary(snapshot: Snapshot) -> SystemSummary:
    """
    Flat summary of a snapshot.

    Args:
        snapshot: Assembled snapshot

    Returns:
        SystemSummary; ``dataset_enhanced`` is True only when every dataset
        domain was loaded
    """
    memory = snapshot.hardware.memory
    installed_mb = memory.installed_memory_mb or 0
    os_name = " ".join(part for part in (snapshot.os.name, snapshot.os.version) if part)
    loaded = snapshot.diagnostics.dataset_loaded

    return SystemSummary(
        system_manufacturer=snapshot.manufacturer_info.system_manufacturer,
        system_model=snapshot.hardware.model or UNKNOWN,
        system_type=snapshot.hardware.system_type,
        chassis_type=snapshot.chassis.chassis_type_description,
        operating_system=os_name,
        total_memory_gb=round(installed_mb / 1024, 1),
        memory_modules=len(memory.memory_modules),
        memory_slots=f"{memory.used_memory_slots}/{memory.total_memory_slots or 0}",
        chipset_model=snapshot.baseboard.pci_slot_info.model,
        pcie_version=snapshot.baseboard.pci_slot_info.version,
        usb_version=snapshot.baseboard.usb_version,
        connected_usb_devices=sum(1 for d in snapshot.usb_devices if d.is_connected is True),
        system_uuid=snapshot.uuids.system_uuid,
        is_oem=snapshot.manufacturer_info.is_oem,
        dataset_enhanced=bool(loaded) and all(loaded.values()),
    )
