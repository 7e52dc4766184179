#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
System Information Module

Provides a simple interface to get a hardware inventory snapshot of the
local machine as a validated Pydantic BaseModel.
"""

import asyncio
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple, Union

from ..config import HwVaultConfig, load_config
from ..datasets.registry import DatasetRegistry
from .aggregator import SnapshotAggregator
from .hardware_schema import Snapshot, SystemSummary
from .local_probe import LocalProbe
from .probes import Probe


@lru_cache(maxsize=8)
def _cached_registry(data_dir: str) -> DatasetRegistry:
    return DatasetRegistry.load(data_dir)


def default_registry(data_dir: Union[Path, str, None] = None) -> DatasetRegistry:
    """
    Process-wide registry for a dataset directory, loaded on first use.

    Args:
        data_dir: Dataset directory; the configured (or bundled) one when None
    """
    if data_dir is None:
        data_dir = load_config().dataset_dir
    return _cached_registry(str(Path(data_dir).expanduser().resolve()))


def _aggregator(probe: Optional[Probe], registry: Optional[DatasetRegistry],
                settings: Optional[HwVaultConfig]) -> SnapshotAggregator:
    settings = settings or load_config()
    registry = registry or default_registry(settings.dataset_dir)
    return SnapshotAggregator(probe or LocalProbe(), registry, settings)


async def collect_snapshot(probe: Optional[Probe] = None, registry: Optional[DatasetRegistry] = None,
                           settings: Optional[HwVaultConfig] = None) -> Snapshot:
    """
    Collect a snapshot from inside a running event loop.

    Args:
        probe: Probe collaborator; the local machine when None
        registry: Reference datasets; the default registry when None
        settings: Runtime settings; read from the environment when None

    Returns:
        Snapshot

    Raises:
        AggregationError: If every probe failed
    """
    return await _aggregator(probe, registry, settings).collect()


async def collect_summary(probe: Optional[Probe] = None, registry: Optional[DatasetRegistry] = None,
                          settings: Optional[HwVaultConfig] = None) -> Tuple[Snapshot, SystemSummary]:
    return await _aggregator(probe, registry, settings).summarize()


def system_info(probe: Optional[Probe] = None, settings: Optional[HwVaultConfig] = None) -> Snapshot:
    """
    Get a complete hardware inventory snapshot as a validated Pydantic BaseModel.

    Returns:
        Snapshot: OS, hardware, baseboard, chassis, CPU, GPUs, storage, USB
        devices, users, identifiers, manufacturer info and security posture

    Example:
        >>> info = system_info()
        >>> print(f"OS: {info.os.name}")
        >>> print(f"Chipset: {info.baseboard.pci_slot_info.model}")
        >>> print(f"Memory: {info.hardware.memory.memory_architecture}")
    """
    return asyncio.run(collect_snapshot(probe, settings=settings))


def system_summary(probe: Optional[Probe] = None, settings: Optional[HwVaultConfig] = None) -> SystemSummary:
    """
    Get the flat system summary.

    Example:
        >>> summary = system_summary()
        >>> print(f"{summary.system_manufacturer} {summary.system_model} ({summary.system_type})")
        >>> print(f"Memory slots: {summary.memory_slots}")
    """
    _, summary = asyncio.run(collect_summary(probe, settings=settings))
    return summary
