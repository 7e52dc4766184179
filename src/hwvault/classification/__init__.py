"""
Classification engine: placeholder filtering, value parsing, identity keys
and the tiered per-domain classifiers.
"""

from .classifiers import (
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
from .identity import disk_identity, extract_vid_pid, gpu_identity, interface_number, usb_identity
from .placeholders import PLACEHOLDER_VALUES, filter_placeholder, is_placeholder, or_unknown
from .rules import ClassifiedAttribute, Rule, RuleInput, RuleTable, SourceTier

__all__ = [
    # Results
    "ClassifiedAttribute",
    "SourceTier",
    # Rules
    "Rule",
    "RuleInput",
    "RuleTable",
    # Placeholders
    "filter_placeholder",
    "or_unknown",
    "is_placeholder",
    "PLACEHOLDER_VALUES",
    # Classifiers
    "classify_cpu_architecture",
    "classify_gpu_type",
    "classify_drive_type",
    "classify_memory_type",
    "classify_form_factor",
    "classify_chassis_type",
    "classify_system_type",
    "classify_manufacturer",
    "classify_usb_device",
    "classify_usb_version",
    "highest_usb_version",
    "is_oem_manufacturer",
    "os_product_type_name",
    "os_sku_name",
    "logical_drive_type_name",
    # Identity
    "extract_vid_pid",
    "interface_number",
    "usb_identity",
    "disk_identity",
    "gpu_identity",
]
