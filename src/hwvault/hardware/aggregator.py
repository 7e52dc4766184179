"""
Snapshot aggregation.

Runs one probe call per component kind concurrently, captures each call as a
ProbeOutcome and merges the outcomes into a Snapshot. A failed or timed out
component only empties its own section.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..config import HwVaultConfig
from ..datasets.registry import DatasetDomain, DatasetRegistry
from ..exceptions import AggregationError
from . import sections
from .hardware_schema import CollectionDiagnostics, ProbeFailure, Snapshot, SystemSummary
from .probes import ComponentKind, Probe, ProbeOutcome, run_probe

logger = logging.getLogger(__name__)


class SnapshotAggregator:
    """
    Collects a hardware snapshot from a probe.

    Example:
        >>> aggregator = SnapshotAggregator(LocalProbe(), DatasetRegistry.load())
        >>> snapshot = await aggregator.collect()
        >>> snapshot.baseboard.pci_slot_info.model
        'X570'
    """

    def __init__(self, probe: Probe, registry: Optional[DatasetRegistry] = None,
                 settings: Optional[HwVaultConfig] = None,
                 kinds: Optional[Iterable[ComponentKind]] = None):
        """
        Args:
            probe: Probe collaborator answering ``query(kind)``
            registry: Loaded reference datasets; an empty registry when None
            settings: Runtime settings; defaults when None
            kinds: Component kinds to query; all kinds when None
        """
        self.probe = probe
        self.registry = registry if registry is not None else DatasetRegistry.empty()
        self.settings = settings if settings is not None else HwVaultConfig()
        self.kinds = tuple(kinds) if kinds is not None else tuple(ComponentKind)

    async def gather_outcomes(self) -> Dict[ComponentKind, ProbeOutcome]:
        """Query every component concurrently; outcomes keep dispatch order."""
        timeout = self.settings.probe_timeout
        outcomes = await asyncio.gather(*(run_probe(self.probe, kind, timeout) for kind in self.kinds))
        return {outcome.kind: outcome for outcome in outcomes}

    async def collect(self) -> Snapshot:
        """
        Collect and assemble a snapshot.

        Returns:
            Snapshot with one section per component; failed components leave
            their section at its defaults

        Raises:
            AggregationError: If every probe failed, or a section could not be built
        """
        started = time.perf_counter()
        outcomes = await self.gather_outcomes()

        if self.kinds and not any(outcome.ok for outcome in outcomes.values()):
            failures = {str(kind): outcome.error for kind, outcome in outcomes.items()}
            raise AggregationError(f"all {len(outcomes)} probes failed", failures)

        try:
            snapshot = assemble_snapshot(
                outcomes,
                self.registry,
                default_memory_slots=self.settings.default_memory_slots,
            )
        except Exception as e:
            logger.error(f"Snapshot assembly failed: {type(e).__name__}: {e}")
            raise AggregationError(f"internal fault while building sections: {e}") from e

        duration = time.perf_counter() - started
        snapshot.diagnostics.duration_seconds = round(duration, 3)
        failed = len(snapshot.diagnostics.failed_probes)
        logger.info(f"Snapshot collected in {duration:.2f}s ({failed} component(s) failed)")
        return snapshot

    async def summarize(self) -> Tuple[Snapshot, SystemSummary]:
        """Collect a snapshot and derive its summary."""
        snapshot = await self.collect()
        return snapshot, sections.build_summary(snapshot)


# ============================================================================
# ASSEMBLY
# ============================================================================

def _records(outcomes: Mapping[ComponentKind, ProbeOutcome], kind: ComponentKind):
    outcome = outcomes.get(kind)
    return outcome.records if outcome is not None and outcome.ok else ()


def build_diagnostics(outcomes: Mapping[ComponentKind, ProbeOutcome],
                      registry: DatasetRegistry) -> CollectionDiagnostics:
    return CollectionDiagnostics(
        succeeded_probes=[str(kind) for kind, o in outcomes.items() if o.ok],
        failed_probes=[
            ProbeFailure(kind=str(kind), status=str(o.status), error=o.error)
            for kind, o in outcomes.items() if not o.ok
        ],
        dataset_loaded={str(domain): registry.is_loaded(domain) for domain in DatasetDomain},
        dataset_failures=registry.failures,
        dataset_statistics=registry.statistics(),
    )


def assemble_snapshot(outcomes: Mapping[ComponentKind, ProbeOutcome], registry: DatasetRegistry,
                      default_memory_slots: int = sections.SMALL_BOARD_SLOTS,
                      collected_at: Optional[datetime] = None) -> Snapshot:
    """
    Merge probe outcomes into a snapshot.

    Sections are built independently first, then the cross-section fields
    (system type, baseboard USB version, manufacturer info, hardware
    manufacturer and model) are derived from the merged result.

    Args:
        outcomes: Probe outcome per component kind
        registry: Loaded reference datasets
        default_memory_slots: Slot count when neither probe nor modules tell
        collected_at: Collection time; now (UTC) when None

    Returns:
        Snapshot
    """
    K = ComponentKind
    os_records = _records(outcomes, K.OPERATING_SYSTEM)
    system_records = _records(outcomes, K.COMPUTER_SYSTEM)
    baseboard_records = _records(outcomes, K.BASEBOARD)
    chassis_records = _records(outcomes, K.CHASSIS)

    baseboard = sections.build_baseboard(baseboard_records, registry)
    chassis = sections.build_chassis(chassis_records, registry)
    memory = sections.build_memory(
        _records(outcomes, K.PHYSICAL_MEMORY),
        _records(outcomes, K.MEMORY_ARRAY),
        system_records,
        registry,
        default_slots=default_memory_slots,
    )
    usb_devices = sections.build_usb_devices(
        _records(outcomes, K.PNP_USB_DEVICE),
        _records(outcomes, K.USB_CONTROLLER),
        registry,
    )
    active_user = sections.build_active_user(_records(outcomes, K.ACTIVE_USER))
    users = sections.build_users(_records(outcomes, K.USER_ACCOUNT))
    if not users:
        users = sections.current_user_fallback(active_user)

    # Cross-section derivations
    baseboard.usb_version = sections.usb_version_from_controllers(usb_devices)
    manufacturer_info = sections.build_manufacturer_info(system_records, baseboard, chassis, memory.memory_modules)
    hardware = sections.build_hardware(
        memory,
        sections.build_basic_memory(os_records),
        manufacturer_info,
        baseboard,
        chassis,
        system_records,
    )

    return Snapshot(
        os=sections.build_operating_system(os_records, system_records),
        hardware=hardware,
        baseboard=baseboard,
        chassis=chassis,
        cpu=sections.build_cpu(_records(outcomes, K.PROCESSOR)),
        gpus=sections.build_gpus(_records(outcomes, K.VIDEO_CONTROLLER)),
        storage=sections.build_storage(_records(outcomes, K.DISK_DRIVE), _records(outcomes, K.LOGICAL_DISK)),
        usb_devices=usb_devices,
        users=users,
        active_user=active_user,
        uuids=sections.build_uuids(_records(outcomes, K.COMPUTER_PRODUCT), baseboard_records, chassis_records),
        manufacturer_info=manufacturer_info,
        security=sections.build_security(_records(outcomes, K.SECURITY)),
        collected_at=collected_at or datetime.now(timezone.utc),
        diagnostics=build_diagnostics(outcomes, registry),
    )
