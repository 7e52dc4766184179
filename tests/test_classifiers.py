"""
Tests for the tiered classifiers.
"""

import pytest

from hwvault.classification import (
    SourceTier,
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
from hwvault.classification.rules import ClassifiedAttribute, Rule, RuleInput, RuleTable, contains_any
from hwvault.classification.tables import USB_DEVICE_RULES


ODD_INPUTS = [None, "", "   ", "Default string", 0, -1, "garbage \x00 value", ["x"], 3.5]


class TestNeverEmpty:

    @pytest.mark.parametrize("value", ODD_INPUTS)
    def test_every_classifier_returns_a_value(self, registry, value):
        results = [
            classify_cpu_architecture(value),
            classify_gpu_type(value, value),
            classify_drive_type(value, value, value),
            classify_memory_type(value, value, value, registry),
            classify_form_factor(value, value, registry),
            classify_chassis_type(value, value, registry),
            classify_system_type(value),
            classify_manufacturer(value, registry),
            classify_usb_device(value, value, value, value, value, registry),
            classify_usb_version(value),
        ]
        for result in results:
            assert isinstance(result, ClassifiedAttribute)
            assert result.value

    def test_empty_value_is_rejected(self):
        with pytest.raises(ValueError):
            ClassifiedAttribute("x", "", SourceTier.HEURISTIC)


class TestCpuArchitecture:

    @pytest.mark.parametrize("value,expected", [
        (9, "x64"),
        ("9", "x64"),
        (12, "ARM64"),
        (0, "x86"),
        ("x86_64", "x64"),
        ("AMD64", "x64"),
        ("aarch64", "ARM64"),
        ("i686", "x86"),
        ("armv7l", "ARM"),
    ])
    def test_known_architectures(self, value, expected):
        assert classify_cpu_architecture(value).value == expected

    def test_unknown_code_keeps_number(self):
        result = classify_cpu_architecture(42)
        assert result.value == "Architecture 42"
        assert result.tier is SourceTier.FALLBACK_DEFAULT

    def test_unknown_text(self):
        assert classify_cpu_architecture("riscv64").value == "Unknown"


class TestGpuType:

    @pytest.mark.parametrize("name,manufacturer,expected", [
        ("Intel(R) UHD Graphics 770", "Intel Corporation", "Integrated"),
        ("Intel(R) Iris(R) Xe Graphics", None, "Integrated"),
        ("AMD Radeon(TM) Graphics", "Advanced Micro Devices, Inc.", "Integrated"),
        ("AMD Radeon Vega 8", None, "Integrated"),
        ("NVIDIA GeForce RTX 4090", "NVIDIA", "Dedicated"),
        ("Intel(R) Arc(TM) A770 Graphics", "Intel Corporation", "Dedicated"),
        ("AMD Radeon RX 7900 XTX", None, "Dedicated"),
        ("VMware SVGA 3D", "VMware, Inc.", "Virtual"),
        ("Microsoft Basic Display Adapter", "(Standard display types)", "Virtual"),
        ("Mystery Adapter", "ATI Technologies Inc.", "Dedicated"),
    ])
    def test_rules(self, name, manufacturer, expected):
        result = classify_gpu_type(name, manufacturer)
        assert result.value == expected
        assert result.tier is SourceTier.HEURISTIC

    def test_vendor_word_must_be_whole(self):
        # "Corporation" contains "ati"
        assert classify_gpu_type("Display Adapter", "Matrox Graphics Corporation").value == "Unknown"


class TestDriveType:

    @pytest.mark.parametrize("model,interface,media,expected", [
        ("Samsung SSD 980 PRO 1TB NVMe", "SCSI", "Fixed hard disk media", "NVMe SSD"),
        ("WD_BLACK SN850X", "NVMe", None, "NVMe SSD"),
        ("Crucial MX500 SSD", "IDE", "Fixed hard disk media", "SATA SSD"),
        ("ST2000DM008-2FR102", "IDE", "Fixed hard disk media", "HDD"),
        ("SanDisk Cruzer", "USB", "Removable Media", "USB Drive"),
    ])
    def test_rules(self, model, interface, media, expected):
        assert classify_drive_type(model, interface, media).value == expected

    def test_unknown(self):
        assert classify_drive_type("Virtual Disk").value == "Unknown"


class TestMemoryType:

    def test_dataset_exact(self, registry):
        result = classify_memory_type(26, registry=registry)
        assert result.value == "DDR4"
        assert result.tier is SourceTier.DATASET_EXACT
        assert result.code == "26"

    def test_dataset_code_of_unknown_is_ignored(self, registry):
        result = classify_memory_type(0, locator="DDR5 DIMM A1", registry=registry)
        assert result.value == "DDR5"
        assert result.tier is SourceTier.HEURISTIC

    def test_raw_type_mapping(self, registry):
        result = classify_memory_type(None, raw_type="DDR4 SDRAM", registry=registry)
        assert result.value == "DDR4"
        assert result.tier is SourceTier.DATASET_EXACT

    def test_raw_type_partial_mapping(self, registry):
        result = classify_memory_type(None, raw_type="DDR5 SDRAM Registered", registry=registry)
        assert result.value == "DDR5"
        assert result.tier is SourceTier.DATASET_PARTIAL

    def test_locator_prefers_lpddr(self, empty_registry):
        assert classify_memory_type(None, locator="LPDDR4X onboard", registry=empty_registry).value == "LPDDR4"

    def test_builtin_generation_codes(self):
        assert classify_memory_type(34).value == "DDR5"
        assert classify_memory_type(35).value == "LPDDR5"
        assert classify_memory_type(24).tier is SourceTier.HEURISTIC

    def test_unknown(self):
        result = classify_memory_type(99)
        assert result.value == "Unknown"
        assert result.tier is SourceTier.FALLBACK_DEFAULT


class TestFormFactor:

    def test_dataset(self, registry):
        assert classify_form_factor(8, registry=registry).value == "DIMM"
        assert classify_form_factor(12, registry=registry).value == "SODIMM"

    def test_locator_heuristics(self):
        assert classify_form_factor(0, locator="ChannelA-SODIMM0").value == "SODIMM"
        assert classify_form_factor(None, locator="DIMM_A1").value == "DIMM"
        assert classify_form_factor(None, locator="Onboard Memory").value == "Chip"

    def test_unknown(self, registry):
        assert classify_form_factor(0, locator="Bank 0", registry=registry).value == "Unknown"


class TestChassisAndSystemType:

    def test_chassis_list_code(self, registry):
        result = classify_chassis_type([10, 3], registry=registry)
        assert result.value == "Notebook"
        assert result.code == "10"

    def test_chassis_code_two_is_unknown(self, registry):
        assert classify_chassis_type(2, registry=registry).value == "Unknown"

    def test_chassis_description_fallback(self, empty_registry):
        assert classify_chassis_type(None, "Mini Tower", empty_registry).value == "Mini Tower"
        assert classify_chassis_type(None, "Gaming Tower", empty_registry).value == "Tower"

    @pytest.mark.parametrize("description,expected", [
        ("Notebook", "Laptop"),
        ("Laptop", "Laptop"),
        ("Portable", "Laptop"),
        ("Desktop", "Desktop"),
        ("Mini Tower", "Desktop"),
        ("Rack Mount Chassis", "Server"),
        ("Tablet", "Tablet"),
        ("All in One", "All-in-One"),
    ])
    def test_system_type(self, description, expected):
        assert classify_system_type(description).value == expected

    def test_system_type_passthrough(self):
        result = classify_system_type("Docking Station")
        assert result.value == "Docking Station"
        assert result.tier is SourceTier.FALLBACK_DEFAULT

    def test_system_type_unknown(self):
        assert classify_system_type(None).value == "Unknown"


class TestManufacturer:

    def test_jedec_id(self, registry):
        result = classify_manufacturer("80CE", registry)
        assert result.value == "Samsung"
        assert result.tier is SourceTier.DATASET_EXACT

    def test_names_pass_through(self, registry):
        result = classify_manufacturer("Kingston", registry)
        assert result.value == "Kingston"
        assert result.tier is SourceTier.FALLBACK_DEFAULT

    def test_without_registry(self):
        assert classify_manufacturer("80CE").value == "80CE"

    def test_placeholder(self, registry):
        assert classify_manufacturer("Default string", registry).value == "Unknown"

    @pytest.mark.parametrize("name,expected", [
        ("Dell Inc.", True),
        ("LENOVO", True),
        ("HP", True),
        ("Micro-Star International Co., Ltd.", False),
        ("", False),
        (None, False),
    ])
    def test_is_oem(self, name, expected):
        assert is_oem_manufacturer(name) is expected


class TestUsbDevice:

    def test_explicit_class_code(self, registry):
        result = classify_usb_device("Thing", class_code="08", registry=registry)
        assert result.value == "Mass Storage"
        assert result.code == "08"
        assert result.tier is SourceTier.DATASET_EXACT

    def test_integer_class_code(self):
        result = classify_usb_device("Thing", class_code=9)
        assert result.value == "Hub"
        assert result.code == "09"

    def test_common_device_pattern(self, registry):
        result = classify_usb_device("Logitech Webcam C925e", registry=registry)
        assert result.code == "0E"
        assert result.value == "Video"
        assert result.tier is SourceTier.DATASET_PARTIAL

    def test_description_pattern(self, registry):
        result = classify_usb_device("Device 1", description="USB Mass Storage Device", registry=registry)
        assert result.code == "08"

    def test_composite_interface_marker(self, empty_registry):
        result = classify_usb_device(
            "HD USB Device", device_id="USB\\VID_046D&PID_085B&MI_00\\7&2A8E&0&0000", registry=empty_registry)
        assert result.code == "0E"
        assert result.tier is SourceTier.HEURISTIC

    def test_audio_interface_marker(self):
        result = classify_usb_device("USB Device", device_id="USB\\VID_046D&PID_0A44&MI_02\\1")
        assert result.code == "01"

    def test_marker_text_outside_interface_position(self):
        # "MI_02" inside the instance path is not an interface marker
        result = classify_usb_device("USB Device", device_id="USB\\VID_046D&PID_0A44\\XMI_02")
        assert result.code == "FF"

    def test_rules_read_parsed_interface(self):
        assert USB_DEVICE_RULES.match(RuleInput(label="usb device", interface="02")).value == "Audio"
        assert USB_DEVICE_RULES.match(RuleInput(label="hd usb device", interface="00")).code == "0E"
        assert USB_DEVICE_RULES.match(RuleInput(label="usb device", device_id="usb\\mi_02")) is None

    def test_hid_heuristic(self, registry):
        result = classify_usb_device("USB Input Device", registry=registry)
        assert result.code == "03"
        assert result.value == "HID (Human Interface Device)"

    def test_vendor_id_heuristic(self):
        assert classify_usb_device("Device", vendor_id="0x8087").code == "02"
        assert classify_usb_device("Device", vendor_id="0x05E3").code == "09"

    def test_fallback(self):
        result = classify_usb_device("Unknown Device")
        assert result.code == "FF"
        assert result.value == "Vendor Specific"
        assert result.tier is SourceTier.FALLBACK_DEFAULT

    def test_invalid_class_code_is_ignored(self):
        assert classify_usb_device("USB Hub", class_code="XYZ").code == "09"


class TestUsbVersion:

    @pytest.mark.parametrize("name,expected", [
        ("AMD USB 3.10 eXtensible Host Controller - 1.10 (Microsoft)", "USB 3.1"),
        ("USB 3.2 Host Controller", "USB 3.2"),
        ("Intel(R) USB 3.0 eXtensible Host Controller", "USB 3.0"),
        ("xHCI Host Controller", "USB 3.0"),
        ("EHCI Host Controller", "USB 2.0"),
        ("UHCI Host Controller", "USB 1.1"),
        ("Standard Enhanced PCI to USB Host Controller", "USB 2.0+"),
    ])
    def test_controller_names(self, name, expected):
        assert classify_usb_version(name).value == expected

    def test_highest(self):
        assert highest_usb_version(["USB 2.0+", "USB 3.1", "USB 2.0"]) == "USB 3.1"
        assert highest_usb_version([None, "bogus"]) == "Unknown"
        assert highest_usb_version([]) == "Unknown"


class TestOsCodes:

    def test_product_type(self):
        assert os_product_type_name(1) == "Workstation"
        assert os_product_type_name("3") == "Server"
        assert os_product_type_name(None) == "Unknown"

    def test_sku(self):
        assert os_sku_name(48) == "Windows Professional"
        assert os_sku_name(9999) == "Unknown"

    def test_logical_drive_type(self):
        assert logical_drive_type_name(3) == "Local Disk"
        assert logical_drive_type_name(4) == "Network Drive"


class TestRuleTable:

    def test_first_match_wins(self):
        table = RuleTable("demo", (
            Rule("first", contains_any("a")),
            Rule("second", contains_any("ab")),
        ))
        result = table.classify(RuleInput(name="ABC"))
        assert result.value == "first"
        assert result.tier is SourceTier.HEURISTIC

    def test_no_match(self):
        table = RuleTable("demo", (Rule("x", contains_any("zzz")),))
        assert table.classify(RuleInput(name=None)) is None
        assert len(table) == 1
