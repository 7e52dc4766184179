"""
Per-domain classifiers.

Every classifier is a pure function that returns a ``ClassifiedAttribute`` and
never raises for bad input. Tiers are tried in a fixed order:

1. dataset-exact   - registry table hit on the (normalized) code or value
2. dataset-partial - substring match against a registry table
3. heuristic       - the first matching rule of the domain's ``RuleTable``
4. fallback        - a category constant such as "Unknown"

Numeric codes (memory type, form factor, chassis type, USB class) are only
looked up exactly; substring matches between small integers mean nothing.
"""

import re
from typing import Any, Iterable, Optional

from ..datasets.registry import DatasetDomain, DatasetRegistry, LookupResult, normalize_key
from .identity import interface_number
from .parsing import first_value, parse_int
from .placeholders import filter_placeholder
from .rules import ClassifiedAttribute, RuleInput, SourceTier
from .tables import (
    CHASSIS_TYPE_RULES,
    CPU_ARCHITECTURE_RULES,
    CPU_ARCHITECTURES,
    DRIVE_TYPE_RULES,
    FORM_FACTOR_RULES,
    GPU_TYPE_RULES,
    LOGICAL_DRIVE_TYPES,
    MEMORY_GENERATIONS,
    MEMORY_LOCATOR_RULES,
    OEM_MANUFACTURERS,
    OS_PRODUCT_TYPES,
    OS_SKUS,
    SYSTEM_TYPE_RULES,
    UNKNOWN,
    USB_CLASS_NAMES,
    USB_DEVICE_RULES,
    USB_FALLBACK_CODE,
    USB_FALLBACK_NAME,
    USB_VERSION_FALLBACK,
    USB_VERSION_ORDER,
    USB_VERSION_RULES,
)

_HEX_ID = re.compile(r"^(0x)?[0-9a-f]{2,16}$", re.IGNORECASE)


# ============================================================================
# HELPERS
# ============================================================================

def _fallback(category: str, value: str = UNKNOWN, code: Optional[str] = None) -> ClassifiedAttribute:
    return ClassifiedAttribute(category, value, SourceTier.FALLBACK_DEFAULT, code)


def _from_lookup(category: str, result: LookupResult, code: Optional[str] = None) -> ClassifiedAttribute:
    tier = SourceTier.DATASET_EXACT if result.exact else SourceTier.DATASET_PARTIAL
    return ClassifiedAttribute(category, result.value, tier, code)


def _code_lookup(registry: Optional[DatasetRegistry], domain: DatasetDomain,
                 table: str, code: Optional[int]) -> Optional[LookupResult]:
    """Exact lookup of a numeric code, ignoring table entries that say "Unknown"."""
    if registry is None or code is None:
        return None
    result = registry.lookup(domain, table, code, partial=False)
    if result is None or filter_placeholder(result.value) is None:
        return None
    return result


# ============================================================================
# CPU / GPU / STORAGE
# ============================================================================

def classify_cpu_architecture(value: Any) -> ClassifiedAttribute:
    """
    Canonical CPU architecture from a Win32 architecture code or an arch string.

    Args:
        value: Numeric code (``9``) or text such as ``"x86_64"`` or ``"aarch64"``

    Returns:
        ClassifiedAttribute; unknown numeric codes become "Architecture <code>"
    """
    category = "cpu_architecture"
    code = parse_int(value)
    if code is not None:
        if code in CPU_ARCHITECTURES:
            return ClassifiedAttribute(category, CPU_ARCHITECTURES[code], SourceTier.DATASET_EXACT, str(code))
        return _fallback(category, f"Architecture {code}", str(code))

    text = filter_placeholder(value)
    if text is not None:
        classified = CPU_ARCHITECTURE_RULES.classify(RuleInput(arch=text))
        if classified is not None:
            return classified
    return _fallback(category)


def classify_gpu_type(name: Any, manufacturer: Any = None) -> ClassifiedAttribute:
    """Integrated, Dedicated or Virtual from the adapter name and vendor."""
    inp = RuleInput(name=filter_placeholder(name), manufacturer=filter_placeholder(manufacturer))
    return GPU_TYPE_RULES.classify(inp) or _fallback("gpu_type")


def classify_drive_type(model: Any, interface_type: Any = None, media_type: Any = None) -> ClassifiedAttribute:
    inp = RuleInput(
        model=filter_placeholder(model),
        interface=filter_placeholder(interface_type),
        media=filter_placeholder(media_type),
    )
    return DRIVE_TYPE_RULES.classify(inp) or _fallback("drive_type")


# ============================================================================
# MEMORY
# ============================================================================

def classify_memory_type(code: Any, locator: Any = None, raw_type: Any = None,
                         registry: Optional[DatasetRegistry] = None) -> ClassifiedAttribute:
    """
    Canonical memory technology (DDR4, LPDDR5, ...) for one module.

    Tier order: dataset ``memoryTypes`` on the code, dataset
    ``memoryTypeMappings`` on the raw type string, device locator prefixes,
    the built-in SMBIOS generation codes, then "Unknown".

    Args:
        code: SMBIOS / Win32 memory type code
        locator: Device locator (e.g. "DDR4 DIMM A1", "ChannelA-DIMM0")
        raw_type: Free-text memory type reported by the probe
        registry: Loaded datasets, or None for heuristics only
    """
    category = "memory_type"
    number = parse_int(code)
    code_str = str(number) if number is not None else None

    result = _code_lookup(registry, DatasetDomain.MEMORY, "memoryTypes", number)
    if result is not None:
        return _from_lookup(category, result, code_str)

    raw = filter_placeholder(raw_type)
    if raw is not None and registry is not None:
        result = registry.lookup(DatasetDomain.MEMORY, "memoryTypeMappings", raw, partial=True)
        if result is not None:
            return _from_lookup(category, result, code_str)

    classified = MEMORY_LOCATOR_RULES.classify(RuleInput(locator=filter_placeholder(locator)))
    if classified is not None:
        return ClassifiedAttribute(category, classified.value, classified.tier, code_str)

    if number in MEMORY_GENERATIONS:
        return ClassifiedAttribute(category, MEMORY_GENERATIONS[number], SourceTier.HEURISTIC, code_str)
    return _fallback(category, code=code_str)


def classify_form_factor(code: Any, locator: Any = None,
                         registry: Optional[DatasetRegistry] = None) -> ClassifiedAttribute:
    category = "form_factor"
    number = parse_int(code)
    code_str = str(number) if number is not None else None

    result = _code_lookup(registry, DatasetDomain.MEMORY, "formFactors", number)
    if result is not None:
        return _from_lookup(category, result, code_str)

    classified = FORM_FACTOR_RULES.classify(RuleInput(locator=filter_placeholder(locator)))
    if classified is not None:
        return ClassifiedAttribute(category, classified.value, classified.tier, code_str)
    return _fallback(category, code=code_str)


# ============================================================================
# CHASSIS / SYSTEM
# ============================================================================

def classify_chassis_type(code: Any, description: Any = None,
                          registry: Optional[DatasetRegistry] = None) -> ClassifiedAttribute:
    """
    Chassis description from an SMBIOS chassis type code.

    ``code`` may be the raw ``ChassisTypes`` list; its first entry is used.
    Without a usable code, keywords in ``description`` decide.
    """
    category = "chassis_type"
    number = parse_int(first_value(code))
    code_str = str(number) if number is not None else None

    result = _code_lookup(registry, DatasetDomain.CHASSIS, "chassisTypes", number)
    if result is not None:
        return _from_lookup(category, result, code_str)

    classified = CHASSIS_TYPE_RULES.classify(RuleInput(description=filter_placeholder(description)))
    if classified is not None:
        return ClassifiedAttribute(category, classified.value, classified.tier, code_str)
    return _fallback(category, code=code_str)


def classify_system_type(chassis_description: Any) -> ClassifiedAttribute:
    """
    System form factor (Laptop, Desktop, Server, ...) from a chassis description.

    Descriptions that match no rule are passed through unchanged.

    Examples:
        >>> classify_system_type("Notebook").value
        'Laptop'
    """
    description = filter_placeholder(chassis_description)
    if description is None:
        return _fallback("system_type")
    classified = SYSTEM_TYPE_RULES.classify(RuleInput(description=description))
    return classified or _fallback("system_type", description)


def classify_manufacturer(raw: Any, registry: Optional[DatasetRegistry] = None) -> ClassifiedAttribute:
    """Vendor name for a JEDEC/PCI id (e.g. "80CE" -> Samsung); names pass through."""
    category = "manufacturer"
    value = filter_placeholder(raw)
    if value is None:
        return _fallback(category)
    if registry is not None and _HEX_ID.match(value):
        result = registry.lookup(DatasetDomain.MANUFACTURERS, "manufacturers", value, partial=True)
        if result is not None:
            return _from_lookup(category, result, normalize_key(value))
    return _fallback(category, value)


def is_oem_manufacturer(name: Optional[str]) -> bool:
    """True when the system manufacturer is a known OEM brand."""
    if not name or not name.strip():
        return False
    lowered = name.lower()
    return any(oem in lowered for oem in OEM_MANUFACTURERS)


# ============================================================================
# USB
# ============================================================================

def normalize_usb_class_code(code: Any) -> Optional[str]:
    """Two-digit upper-case hex class code ("3", 3, "0x03" -> "03")."""
    if code is None or isinstance(code, bool):
        return None
    if isinstance(code, int):
        return f"{code:02X}" if 0 <= code <= 0xFF else None
    text = normalize_key(code)
    if not text or len(text) > 2 or any(c not in "0123456789ABCDEF" for c in text):
        return None
    return text.zfill(2)


def usb_class_description(code: str, registry: Optional[DatasetRegistry] = None) -> Optional[str]:
    if registry is not None:
        name = registry.usb_class_name(code)
        if name:
            return name
    return USB_CLASS_NAMES.get(code)


def classify_usb_device(name: Any, description: Any = None, device_id: Any = None,
                        vendor_id: Any = None, class_code: Any = None,
                        registry: Optional[DatasetRegistry] = None) -> ClassifiedAttribute:
    """
    USB device class for one device record.

    The returned attribute's ``value`` is the class description and ``code``
    the two-digit class code.

    Order of evaluation:
        1. an explicit class code looked up in the class table
        2. the dataset's common-device name patterns (name, then description)
        3. keyword rules: video, audio, HID, bluetooth, hub, composite. A
           ``MI_00``/``MI_02`` interface marker in the device id marks a
           camera or audio interface of a composite device.
        4. "FF" / "Vendor Specific"
    """
    category = "usb_device_class"
    name = filter_placeholder(name)
    description = filter_placeholder(description)

    code = normalize_usb_class_code(class_code)
    if code is not None:
        label = usb_class_description(code, registry)
        if label:
            return ClassifiedAttribute(category, label, SourceTier.DATASET_EXACT, code)

    if registry is not None:
        for text in (name, description):
            matched = registry.usb_class_from_name(text)
            matched = normalize_usb_class_code(matched)
            if matched is not None:
                label = usb_class_description(matched, registry) or USB_FALLBACK_NAME
                return ClassifiedAttribute(category, label, SourceTier.DATASET_PARTIAL, matched)

    inp = RuleInput(
        label=" ".join(t for t in (name, description) if t),
        interface=interface_number(filter_placeholder(device_id)),
        vendor_id=vendor_id,
    )
    rule = USB_DEVICE_RULES.match(inp)
    if rule is not None:
        label = usb_class_description(rule.code, registry) or rule.value
        return ClassifiedAttribute(category, label, SourceTier.HEURISTIC, rule.code)

    return _fallback(category, USB_FALLBACK_NAME, USB_FALLBACK_CODE)


def classify_usb_version(controller_name: Any) -> ClassifiedAttribute:
    """USB generation supported by a host controller, from its name."""
    inp = RuleInput(name=filter_placeholder(controller_name))
    return USB_VERSION_RULES.classify(inp) or _fallback("usb_version", USB_VERSION_FALLBACK)


def highest_usb_version(versions: Iterable[Optional[str]]) -> str:
    """Newest USB generation among controller versions, or "Unknown"."""
    ranked = [v for v in versions if v in USB_VERSION_ORDER]
    if not ranked:
        return UNKNOWN
    return max(ranked, key=USB_VERSION_ORDER.index)


# ============================================================================
# OPERATING SYSTEM CODES
# ============================================================================

def os_product_type_name(code: Any) -> str:
    return OS_PRODUCT_TYPES.get(parse_int(code), UNKNOWN)


def os_sku_name(code: Any) -> str:
    return OS_SKUS.get(parse_int(code), UNKNOWN)


def logical_drive_type_name(code: Any) -> str:
    return LOGICAL_DRIVE_TYPES.get(parse_int(code), UNKNOWN)
