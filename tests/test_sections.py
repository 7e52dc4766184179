"""
Tests for the section builders.
"""

from datetime import date, datetime, timezone

import pytest

from hwvault.hardware import sections
from hwvault.hardware.probes import ComponentKind as K


def test_dedupe_keeps_first_and_keyless():
    items = [("a", 1), ("b", 2), ("a", 3), (None, 4), (None, 5)]
    kept = sections.dedupe(items, key=lambda item: item[0])
    assert kept == [("a", 1), ("b", 2), (None, 4), (None, 5)]


class TestOperatingSystem:

    def test_windows_record(self, desktop_records):
        now = datetime(2026, 1, 12, 10, 30, tzinfo=timezone.utc)
        os_info = sections.build_operating_system(
            desktop_records[K.OPERATING_SYSTEM], desktop_records[K.COMPUTER_SYSTEM], now=now)

        assert os_info.name == "Microsoft Windows 11 Pro"
        assert os_info.hostname == "WORKSTATION-01"
        assert os_info.build.number == "22631"
        assert os_info.build.service_pack is None
        assert os_info.product_type == "Workstation"
        assert os_info.sku_name == "Windows Professional"
        assert os_info.organization is None
        assert os_info.is_hypervisor_present is False
        assert os_info.installation.uptime == "2 days 2 hours 30 minutes"
        assert os_info.processes.number_of_processes == 245

    def test_service_pack(self):
        record = {"ServicePackMajorVersion": 3, "ServicePackMinorVersion": 1}
        assert sections.build_operating_system([record]).build.service_pack == "Service Pack 3.1"

    def test_uptime_needs_comparable_times(self):
        record = {"LastBootUpTime": "20260110080000.000000+000"}
        naive_now = datetime(2026, 1, 12, 10, 30)
        assert sections.build_operating_system([record], now=naive_now).installation.uptime is None

    def test_empty_records(self):
        os_info = sections.build_operating_system(())
        assert os_info.name is None
        assert os_info.product_type is None

    def test_basic_memory_usage(self, desktop_records):
        basic = sections.build_basic_memory(desktop_records[K.OPERATING_SYSTEM])
        assert basic.memory_usage_percentage == 75.0
        assert sections.build_basic_memory([{"TotalVisibleMemorySize": 0}]).memory_usage_percentage is None


class TestBaseboardAndChassis:

    def test_baseboard_chipset(self, desktop_records, registry):
        board = sections.build_baseboard(desktop_records[K.BASEBOARD], registry)
        assert board.model == "ROG STRIX"
        assert board.pci_slot_info.model == "X570"
        assert board.pci_slot_info.version == "PCIe 4.0"
        assert board.pci_slot_info.release_year == 2019
        assert len(board.pci_slot_info.available_slots) == 3
        assert board.usb_version == "Unknown"

    def test_baseboard_without_datasets(self, desktop_records, empty_registry):
        board = sections.build_baseboard(desktop_records[K.BASEBOARD], empty_registry)
        assert board.model == "ROG STRIX X570-E GAMING"
        assert board.pci_slot_info.model == "Unknown"
        assert board.pci_slot_info.version == "PCIe 3.0+"
        assert board.pci_slot_info.available_slots is None

    def test_placeholder_product(self, registry):
        board = sections.build_baseboard([{"Product": "Default string"}], registry)
        assert board.product is None
        assert board.model is None
        assert board.pci_slot_info.model == "Unknown"

    def test_chassis(self, desktop_records, registry):
        chassis = sections.build_chassis(desktop_records[K.CHASSIS], registry)
        assert chassis.chassis_type == "Desktop"
        assert chassis.chassis_type_code == 3
        assert chassis.manufacturer == "Unknown"
        assert chassis.serial_number == "Unknown"
        assert chassis.asset_tag is None
        assert chassis.bootup_state is True
        assert chassis.thermal_state is False

    def test_chassis_from_description(self, empty_registry):
        chassis = sections.build_chassis([{"Description": "Portable Notebook"}], empty_registry)
        assert chassis.chassis_type_description == "Notebook"


class TestDevices:

    def test_cpu(self, desktop_records):
        cpu = sections.build_cpu(desktop_records[K.PROCESSOR])
        assert cpu.name == "AMD Ryzen 9 5900X 12-Core Processor"
        assert cpu.architecture == "x64"
        assert cpu.number_of_logical_processors == 24

    def test_gpus_are_deduplicated(self, desktop_records):
        gpus = sections.build_gpus(desktop_records[K.VIDEO_CONTROLLER])
        assert len(gpus) == 1
        gpu = gpus[0]
        assert gpu.name == "NVIDIA GeForce RTX 3080"
        assert gpu.type == "Dedicated"
        assert gpu.memory_mb == 4095
        assert gpu.memory_gb == 4.0
        assert gpu.current_resolution == "2560x1440"
        assert gpu.refresh_rate == 144
        assert gpu.driver_date == date(2024, 3, 15)

    def test_gpu_without_memory(self):
        gpu = sections.build_gpu({"Name": "Microsoft Basic Display Adapter", "AdapterRAM": 0})
        assert gpu.memory_mb is None
        assert gpu.type == "Virtual"

    def test_storage(self, desktop_records):
        disks = sections.build_storage(desktop_records[K.DISK_DRIVE], desktop_records[K.LOGICAL_DISK])
        assert [d.drive_type for d in disks] == ["NVMe SSD", "HDD"]
        assert len(disks[0].partitions) == 1
        assert disks[1].partitions == []

        partition = disks[0].partitions[0]
        assert partition.drive_letter == "C:"
        assert partition.drive_type == "Local Disk"
        assert partition.usage_percentage == 75.0
        assert partition.total_size_gb == 931.32

    def test_unowned_volumes_attach_to_every_disk(self):
        disks = sections.build_storage(
            [{"DeviceID": "disk0"}, {"DeviceID": "disk1"}],
            [{"DeviceID": "/", "Size": 100, "FreeSpace": 50}],
        )
        assert [len(d.partitions) for d in disks] == [1, 1]

    def test_storage_model_cleanup_and_dedupe(self):
        disks = sections.build_storage([
            {"DeviceID": "X", "Model": "Vendor\\Model SSD", "Size": 0},
            {"DeviceID": "x", "Model": "Duplicate"},
        ])
        assert len(disks) == 1
        assert disks[0].model == "VendorModel SSD"
        assert disks[0].size_gb is None


class TestMemory:

    def test_desktop_memory(self, desktop_records, registry):
        memory = sections.build_memory(
            desktop_records[K.PHYSICAL_MEMORY],
            desktop_records[K.MEMORY_ARRAY],
            desktop_records[K.COMPUTER_SYSTEM],
            registry,
        )
        assert memory.installed_memory_mb == 32768
        assert memory.max_memory_capacity_mb == 131072
        assert memory.total_memory_slots == 4
        assert memory.used_memory_slots == 2
        assert memory.memory_speed == 2666
        assert memory.memory_architecture == "DDR4"

        first, second = memory.memory_modules
        assert first.capacity_mb == 16384
        assert first.memory_type == "DDR4"
        assert first.form_factor == "DIMM"
        assert first.manufacturer == "Samsung"
        assert second.manufacturer == "Kingston"

    def test_installed_memory_from_modules(self, registry):
        modules = [{"Capacity": 8 * 1024 ** 3}, {"Capacity": 8 * 1024 ** 3}]
        memory = sections.build_memory(modules, (), (), registry)
        assert memory.installed_memory_mb == 16384

    def test_minimum_speed_ignores_missing(self, registry):
        modules = [{"Speed": 4800}, {"Speed": 0}, {"Speed": 5600}, {}]
        memory = sections.build_memory(modules, (), (), registry)
        assert memory.memory_speed == 4800

    def test_memory_type_name_is_mapped(self, registry):
        module = sections.build_memory_module({"MemoryTypeName": "DDR5 SDRAM", "SMBIOSMemoryType": 0}, registry)
        assert module.memory_type == "DDR5"

    def test_mixed_architectures(self, registry):
        modules = [{"SMBIOSMemoryType": 26}, {"SMBIOSMemoryType": 34}, {"SMBIOSMemoryType": 26}]
        memory = sections.build_memory(modules, (), (), registry)
        assert memory.memory_architecture == "DDR4, DDR5"

    def test_no_modules(self, empty_registry):
        memory = sections.build_memory((), (), (), empty_registry, default_slots=2)
        assert memory.installed_memory_mb is None
        assert memory.total_memory_slots == 2
        assert memory.used_memory_slots == 0
        assert memory.memory_architecture is None

    @pytest.mark.parametrize("reported,used,expected", [
        (4, 2, 4),
        (2, 2, 2),
        (None, 2, 4),
        (0, 4, 4),
        (None, 5, 8),
        (None, 0, 6),
    ])
    def test_slot_estimate(self, reported, used, expected):
        assert sections.estimate_total_slots(reported, used, default_slots=6) == expected


class TestUsb:

    def test_desktop_usb(self, desktop_records, registry):
        devices = sections.build_usb_devices(
            desktop_records[K.PNP_USB_DEVICE], desktop_records[K.USB_CONTROLLER], registry)
        assert len(devices) == 5

        webcam, keyboard, bluetooth, xhci, ehci = devices
        assert webcam.device_class == "0E"
        assert webcam.device_class_description == "Video"
        assert webcam.vendor_id == "0x046D"
        assert webcam.product_id == "0x085B"
        assert keyboard.device_class == "03"
        assert bluetooth.device_class == "E0"
        assert bluetooth.is_connected is False

        assert xhci.is_controller and ehci.is_controller
        assert xhci.device_class == "09"
        assert xhci.device_class_description == "Hub"
        assert xhci.version == "USB 3.1"
        assert ehci.version == "USB 2.0+"
        assert sections.usb_version_from_controllers(devices) == "USB 3.1"

    def test_duplicate_device_ids_keep_first(self, registry):
        record = {"DeviceID": "USB\\ROOT_HUB30\\4&1", "Name": "USB Root Hub (USB 3.0)"}
        devices = sections.build_usb_devices([record], [dict(record, DeviceID="usb\\root_hub30\\4&1")], registry)
        assert len(devices) == 1
        assert devices[0].is_controller is False

    def test_placeholder_names(self, empty_registry):
        device = sections.build_usb_device({"Name": "Default string"}, empty_registry)
        assert device.name == "Unknown"
        assert device.device_class == "FF"
        assert device.is_connected is None

    def test_no_controllers(self):
        assert sections.usb_version_from_controllers([]) == "Unknown"


class TestUsersAndIdentity:

    def test_users(self, desktop_records):
        users = sections.build_users(desktop_records[K.USER_ACCOUNT])
        assert [(u.name, u.is_active) for u in users] == [("dev", True), ("Guest", False)]

    def test_active_user_domain_split(self, desktop_records):
        active = sections.build_active_user(desktop_records[K.ACTIVE_USER])
        assert active.name == "dev"
        assert active.domain == "WORKSTATION-01"
        assert active.session_type == "Interactive"

    def test_current_user_fallback(self):
        active = sections.build_active_user([{"Name": "alice"}])
        users = sections.current_user_fallback(active)
        assert len(users) == 1
        assert users[0].description == "Current logged-in user"
        assert sections.current_user_fallback(sections.build_active_user(())) == []

    def test_uuids(self, desktop_records):
        uuids = sections.build_uuids(
            desktop_records[K.COMPUTER_PRODUCT], desktop_records[K.BASEBOARD], desktop_records[K.CHASSIS])
        assert uuids.system_uuid == "Unknown"
        assert uuids.baseboard_uuid == "210490123456789"
        assert uuids.chassis_uuid == "Unknown"

    def test_security(self, desktop_records):
        security = sections.build_security(desktop_records[K.SECURITY])
        assert security.firewall_enabled is True
        assert security.bitlocker_enabled is False
        assert security.security_center == "Windows Security Center"


class TestManufacturerInfo:

    def test_custom_build(self, desktop_records, registry):
        board = sections.build_baseboard(desktop_records[K.BASEBOARD], registry)
        chassis = sections.build_chassis(desktop_records[K.CHASSIS], registry)
        modules = [sections.build_memory_module(r, registry) for r in desktop_records[K.PHYSICAL_MEMORY]]

        info = sections.build_manufacturer_info(desktop_records[K.COMPUTER_SYSTEM], board, chassis, modules)
        assert info.system_manufacturer == "Unknown"
        assert info.baseboard_manufacturer == "ASUSTeK COMPUTER INC."
        assert info.memory_manufacturers == "Samsung, Kingston"
        assert info.is_oem is False
        assert info.is_custom_build is True
        assert info.system_integrator == "Custom Build"

    def test_oem(self, registry):
        board = sections.build_baseboard((), registry)
        chassis = sections.build_chassis((), registry)
        info = sections.build_manufacturer_info([{"Manufacturer": "Dell Inc."}], board, chassis, [])
        assert info.is_oem is True
        assert info.is_custom_build is False
        assert info.system_integrator == "Dell Inc."
        assert info.memory_manufacturers is None
