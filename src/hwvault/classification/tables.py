"""
Built-in lookup tables and heuristic rule tables.

The built-in tables cover codes that are fixed by WMI/SMBIOS and do not need a
dataset file. The rule tables are the heuristic tier of each classifier; the
order of rules inside a table is part of its behavior.
"""

from types import MappingProxyType

from .rules import (
    Rule,
    RuleTable,
    all_of,
    any_of,
    contains_any,
    field_in,
    not_,
    starts_with_any,
    whole_word,
)

# ============================================================================
# FALLBACK VALUES
# ============================================================================

UNKNOWN = "Unknown"
USB_FALLBACK_CODE = "FF"
USB_FALLBACK_NAME = "Vendor Specific"
USB_VERSION_FALLBACK = "USB 2.0+"


# ============================================================================
# BUILT-IN CODE TABLES
# ============================================================================

# Win32_Processor.Architecture
CPU_ARCHITECTURES = MappingProxyType({
    0: "x86",
    1: "MIPS",
    2: "Alpha",
    3: "PowerPC",
    5: "ARM",
    6: "Itanium",
    9: "x64",
    12: "ARM64",
})

# SMBIOS memory type codes by DRAM generation
MEMORY_GENERATIONS = MappingProxyType({
    20: "DDR",
    21: "DDR2",
    24: "DDR3",
    26: "DDR4",
    34: "DDR5",
    35: "LPDDR5",
})

# USB base class names, used when the USB dataset is unavailable
USB_CLASS_NAMES = MappingProxyType({
    "00": "Use class information in the Interface Descriptors",
    "01": "Audio",
    "02": "Communications and CDC Control",
    "03": "HID (Human Interface Device)",
    "05": "Physical",
    "06": "Image",
    "07": "Printer",
    "08": "Mass Storage",
    "09": "Hub",
    "0A": "CDC-Data",
    "0B": "Smart Card",
    "0D": "Content Security",
    "0E": "Video",
    "0F": "Personal Healthcare",
    "10": "Audio/Video Devices",
    "11": "Billboard Device Class",
    "12": "USB Type-C Bridge Class",
    "DC": "Diagnostic Device",
    "E0": "Wireless Controller",
    "EF": "Miscellaneous",
    "FE": "Application Specific",
    "FF": USB_FALLBACK_NAME,
})

# Win32_OperatingSystem.ProductType
OS_PRODUCT_TYPES = MappingProxyType({
    1: "Workstation",
    2: "Domain Controller",
    3: "Server",
})

# Win32_OperatingSystem.OperatingSystemSKU
OS_SKUS = MappingProxyType({
    0: "Undefined",
    1: "Ultimate Edition",
    2: "Home Basic Edition",
    3: "Home Premium Edition",
    4: "Enterprise Edition",
    6: "Business Edition",
    7: "Standard Server Edition (Desktop Experience)",
    8: "Datacenter Server Edition (Desktop Experience)",
    9: "Small Business Server Edition",
    10: "Enterprise Server Edition",
    11: "Starter Edition",
    12: "Datacenter Server Core Edition",
    13: "Standard Server Core Edition",
    14: "Enterprise Server Core Edition",
    17: "Web Server Edition",
    19: "Home Server Edition",
    20: "Storage Express Server Edition",
    21: "Storage Standard Server Edition (Desktop Experience)",
    22: "Storage Workgroup Server Edition (Desktop Experience)",
    23: "Storage Enterprise Server Edition",
    24: "Server For Small Business Edition",
    25: "Small Business Server Premium Edition",
    27: "Windows Enterprise Edition",
    28: "Windows Ultimate Edition",
    29: "Web Server Edition (Server Core)",
    36: "Server Standard Edition without Hyper-V",
    37: "Datacenter Edition without Hyper-V",
    38: "Enterprise Edition without Hyper-V",
    39: "Datacenter Core Edition without Hyper-V",
    40: "Standard Core Edition without Hyper-V",
    41: "Enterprise Core Edition without Hyper-V",
    42: "Microsoft Hyper-V Server",
    43: "Storage Express Edition (Server Core)",
    44: "Storage Standard Edition (Server Core)",
    45: "Storage Workgroup Edition (Server Core)",
    46: "Storage Enterprise Edition (Server Core)",
    48: "Windows Professional",
    50: "Windows Server Essentials (Desktop Experience)",
    63: "Small Business Server Premium (Server Core)",
    64: "Compute Cluster Server without Hyper-V",
    97: "Windows RT",
    101: "Windows Home",
    103: "Windows Professional with Media Center",
    104: "Windows Mobile",
    123: "Windows IoT Core",
    143: "Datacenter Edition (Nano Server)",
    144: "Standard Edition (Nano Server)",
    147: "Datacenter Edition (Server Core)",
    148: "Standard Edition (Server Core)",
    175: "Enterprise for Virtual Desktops",
})

# Win32_LogicalDisk.DriveType
LOGICAL_DRIVE_TYPES = MappingProxyType({
    0: "Unknown",
    1: "No Root Directory",
    2: "Removable Disk",
    3: "Local Disk",
    4: "Network Drive",
    5: "Compact Disc",
    6: "RAM Disk",
})

# Substrings of a system manufacturer that mark an OEM machine
OEM_MANUFACTURERS = (
    "dell", "hp", "lenovo", "asus", "acer", "msi", "sony", "toshiba", "samsung", "apple",
)


# ============================================================================
# HEURISTIC RULE TABLES
# ============================================================================

CPU_ARCHITECTURE_RULES = RuleTable("cpu_architecture", (
    Rule("ARM64", contains_any("aarch64", "arm64", "armv8", "armv9")),
    Rule("x64", contains_any("x86_64", "amd64", "x64", "em64t")),
    Rule("x86", contains_any("x86", "i386", "i486", "i586", "i686")),
    Rule("ARM", contains_any("arm")),
    Rule("PowerPC", contains_any("ppc", "powerpc")),
    Rule("Itanium", contains_any("ia64", "itanium")),
    Rule("MIPS", contains_any("mips")),
    Rule("Alpha", contains_any("alpha")),
))

_INTEL_IGPU = all_of(contains_any("intel", field="name"),
                     contains_any("uhd", "iris", "hd graphics", field="name"))
_AMD_APU = all_of(contains_any("amd", field="name"),
                  any_of(contains_any("vega", field="name"),
                         all_of(contains_any("radeon", field="name"),
                                contains_any("graphics", field="name"))))

GPU_TYPE_RULES = RuleTable("gpu_type", (
    Rule("Integrated", _INTEL_IGPU),
    Rule("Integrated", _AMD_APU),
    Rule("Dedicated", contains_any("nvidia", "geforce", "quadro", "titan", field="name")),
    Rule("Dedicated", all_of(contains_any("intel", field="name"), whole_word("arc", field="name"))),
    Rule("Dedicated", all_of(contains_any("radeon", field="name"),
                             not_(contains_any("graphics", field="name")))),
    Rule("Virtual", contains_any("vmware svga", "virtualbox", "basic display", "basic render",
                                 "qxl", "virtio", "hyper-v video", field="name")),
    Rule("Dedicated", any_of(whole_word("nvidia", "amd", "ati", field="manufacturer"),
                             contains_any("advanced micro devices", field="manufacturer"))),
))

_SSD = any_of(
    contains_any("ssd", "nvme", "solid state", field="model"),
    contains_any("nvme", field="interface"),
    contains_any("ssd", field="media"),
)
_NVME = any_of(contains_any("nvme", field="interface"), contains_any("nvme", field="model"))

DRIVE_TYPE_RULES = RuleTable("drive_type", (
    Rule("NVMe SSD", all_of(_SSD, _NVME)),
    Rule("SATA SSD", _SSD),
    Rule("HDD", any_of(contains_any("fixed hard disk", field="media"),
                       contains_any("hdd", "hard disk", field="model"))),
    Rule("USB Drive", contains_any("usb", field="interface")),
))

# Prefixes of the device locator; LPDDR before DDR
MEMORY_LOCATOR_RULES = RuleTable("memory_type", (
    Rule("LPDDR5", starts_with_any("lpddr5", field="locator")),
    Rule("LPDDR4", starts_with_any("lpddr4", field="locator")),
    Rule("LPDDR3", starts_with_any("lpddr3", field="locator")),
    Rule("DDR5", starts_with_any("ddr5", field="locator")),
    Rule("DDR4", starts_with_any("ddr4", field="locator")),
    Rule("DDR3", starts_with_any("ddr3", field="locator")),
    Rule("DDR2", starts_with_any("ddr2", field="locator")),
    Rule("DDR", starts_with_any("ddr", field="locator")),
))

FORM_FACTOR_RULES = RuleTable("form_factor", (
    Rule("SODIMM", contains_any("sodimm", "so-dimm", "so dimm")),
    Rule("RDIMM", contains_any("rdimm")),
    Rule("DIMM", contains_any("dimm")),
    Rule("Chip", contains_any("onboard", "soldered", "lpddr")),
))

CHASSIS_TYPE_RULES = RuleTable("chassis_type", (
    Rule("Notebook", contains_any("notebook")),
    Rule("Laptop", contains_any("laptop")),
    Rule("Portable", contains_any("portable")),
    Rule("Convertible", contains_any("convertible", "2-in-1", "2 in 1")),
    Rule("Tablet", contains_any("tablet")),
    Rule("All in One", contains_any("all in one", "all-in-one")),
    Rule("Mini PC", contains_any("mini pc", "nuc")),
    Rule("Rack Mount Chassis", contains_any("rack")),
    Rule("Main Server Chassis", contains_any("server")),
    Rule("Mini Tower", contains_any("mini tower")),
    Rule("Tower", contains_any("tower")),
    Rule("Desktop", contains_any("desktop")),
))

# "interface" is the MI_xx marker of one interface of a composite device
_VIDEO = any_of(
    contains_any("webcam", "camera", "c960", field="label"),
    all_of(field_in("interface", "00"), contains_any("hd", field="label")),
)
_AUDIO = any_of(contains_any("audio", field="label"), field_in("interface", "02"))

USB_DEVICE_RULES = RuleTable("usb_device_class", (
    Rule("Video", _VIDEO, code="0E"),
    Rule("Audio", _AUDIO, code="01"),
    Rule("HID (Human Interface Device)",
         any_of(contains_any("input", "keyboard", "mouse", field="label"),
                field_in("vendor_id", "0x04f3", "0x30fa", "0x048d")),
         code="03"),
    Rule("Communications and CDC Control",
         any_of(contains_any("bluetooth", field="label"), field_in("vendor_id", "0x8087")),
         code="02"),
    Rule("Hub",
         any_of(contains_any("hub", field="label"), field_in("vendor_id", "0x05e3", "0x0bda")),
         code="09"),
    Rule("Use class information in the Interface Descriptors",
         contains_any("composite", field="label"), code="00"),
))

USB_VERSION_RULES = RuleTable("usb_version", (
    Rule("USB 3.2", contains_any("usb 3.2", "3.20")),
    Rule("USB 3.1", contains_any("usb 3.1", "3.10")),
    Rule("USB 3.0", contains_any("usb 3.0", "3.0", "xhci")),
    Rule("USB 2.0", contains_any("usb 2.0", "2.0", "ehci")),
    Rule("USB 1.1", contains_any("usb 1.1", "1.1", "ohci", "uhci")),
))

# Ranking used to pick the newest controller generation
USB_VERSION_ORDER = ("USB 1.1", USB_VERSION_FALLBACK, "USB 2.0", "USB 3.0", "USB 3.1", "USB 3.2")

SYSTEM_TYPE_RULES = RuleTable("system_type", (
    Rule("Laptop", contains_any("laptop", "notebook", "portable")),
    Rule("Desktop", contains_any("desktop", "tower", "mini tower")),
    Rule("Server", contains_any("server", "rack")),
    Rule("Tablet", contains_any("tablet")),
    Rule("All-in-One", contains_any("all in one")),
    Rule("Workstation", contains_any("workstation")),
))
