"""
hwvault - Hardware inventory snapshots with dataset-backed classification.

Submodules:
    - hwvault.hardware: Snapshot collection, probes and schemas
    - hwvault.classification: Placeholder filtering and classifiers
    - hwvault.datasets: Reference dataset registry
"""

__version__ = "0.1.0"

# Import submodules for namespace access (hv.hardware.system_info())
from . import datasets
from . import classification
from . import hardware

# Top-level convenience exports (most common operations)
from .hardware import (
    system_info,
    system_summary,
    collect_snapshot,
    SnapshotAggregator,
    LocalProbe,
    ComponentKind,
    Snapshot,
    SystemSummary,
)
from .datasets import DatasetRegistry
from .classification import filter_placeholder, ClassifiedAttribute, SourceTier
from .config import HwVaultConfig, load_config
from .exceptions import (
    HwVaultError,
    DatasetLoadError,
    ProbeError,
    ProbeUnavailableError,
    AggregationError,
)

__all__ = [
    # Submodules
    "datasets",
    "classification",
    "hardware",

    # Primary API
    "system_info",
    "system_summary",
    "collect_snapshot",
    "SnapshotAggregator",
    "LocalProbe",
    "ComponentKind",
    "Snapshot",
    "SystemSummary",
    "DatasetRegistry",
    "filter_placeholder",
    "ClassifiedAttribute",
    "SourceTier",

    # Configuration
    "HwVaultConfig",
    "load_config",

    # Errors
    "HwVaultError",
    "DatasetLoadError",
    "ProbeError",
    "ProbeUnavailableError",
    "AggregationError",
]
