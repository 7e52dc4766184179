"""
Hardware inventory snapshots.

Provides probe-driven snapshot collection, the snapshot schemas and the
default local probe.
"""

from .system_info import system_info, system_summary, collect_snapshot, collect_summary, default_registry
from .aggregator import SnapshotAggregator, assemble_snapshot
from .probes import ComponentKind, Probe, ProbeOutcome, ProbeStatus, run_probe
from .local_probe import LocalProbe
from .hardware_schema import (
    Snapshot,
    SystemSummary,
    CollectionDiagnostics,
    ProbeFailure,
    OperatingSystem,
    Hardware,
    Baseboard,
    PciSlotInfo,
    Chassis,
    CPU,
    GPU,
    StorageDevice,
    Partition,
    MemoryModule,
    DetailedMemory,
    BasicMemory,
    ManufacturerInfo,
    UsbDevice,
    User,
    ActiveUser,
    Uuids,
    Security,
)

__all__ = [
    # Primary API
    "system_info",
    "system_summary",
    "collect_snapshot",
    "collect_summary",
    "default_registry",

    # Aggregation
    "SnapshotAggregator",
    "assemble_snapshot",

    # Probes
    "ComponentKind",
    "Probe",
    "ProbeOutcome",
    "ProbeStatus",
    "run_probe",
    "LocalProbe",

    # Schemas
    "Snapshot",
    "SystemSummary",
    "CollectionDiagnostics",
    "ProbeFailure",
    "OperatingSystem",
    "Hardware",
    "Baseboard",
    "PciSlotInfo",
    "Chassis",
    "CPU",
    "GPU",
    "StorageDevice",
    "Partition",
    "MemoryModule",
    "DetailedMemory",
    "BasicMemory",
    "ManufacturerInfo",
    "UsbDevice",
    "User",
    "ActiveUser",
    "Uuids",
    "Security",
]
