"""Reference datasets: load-once lookup tables for classification."""

from .chipsets import ChipsetCatalog, ChipsetEntry, PciSlot, DEFAULT_PCIE_VERSION
from .registry import (
    BUNDLED_DATA_DIR,
    DatasetDomain,
    DatasetLoadOutcome,
    DatasetRegistry,
    DatasetTable,
    LookupResult,
    load_domain,
    normalize_key,
)

__all__ = [
    # Registry
    "DatasetRegistry",
    "DatasetDomain",
    "DatasetTable",
    "DatasetLoadOutcome",
    "LookupResult",
    "load_domain",
    "normalize_key",
    "BUNDLED_DATA_DIR",
    # Chipsets
    "ChipsetCatalog",
    "ChipsetEntry",
    "PciSlot",
    "DEFAULT_PCIE_VERSION",
]
