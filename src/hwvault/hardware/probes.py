"""
Probe contract and probe execution.

A probe is any object with a ``query(kind)`` method, sync or async, that
returns the raw attribute records for one component kind. Raising any
exception marks that component as failed; the snapshot is still built from
the other components.

Raw record vocabulary
---------------------
Field names follow the WMI class properties so that a Windows probe can pass
records through unchanged. Other probes translate into the same names.

=================  ==========================  ======================================================
ComponentKind      Source (Windows)            Fields read
=================  ==========================  ======================================================
OPERATING_SYSTEM   Win32_OperatingSystem       Caption, Version, BuildNumber, OSArchitecture,
                                               ServicePackMajorVersion, ServicePackMinorVersion,
                                               InstallDate, LastBootUpTime, NumberOfProcesses,
                                               NumberOfUsers, RegisteredUser, Organization,
                                               SerialNumber, SystemDirectory, WindowsDirectory,
                                               Locale, ProductType, OperatingSystemSKU, CSName,
                                               TotalVisibleMemorySize, FreePhysicalMemory,
                                               TotalVirtualMemorySize, FreeVirtualMemory,
                                               Platform, TimeZone
COMPUTER_SYSTEM    Win32_ComputerSystem        Manufacturer, Model, TotalPhysicalMemory (bytes),
                                               HypervisorPresent
COMPUTER_PRODUCT   Win32_ComputerSystemProduct UUID
BASEBOARD          Win32_BaseBoard             Manufacturer, Product, SerialNumber, Version, Model
CHASSIS            Win32_SystemEnclosure       Manufacturer, SerialNumber, Model, ChassisTypes, Description,
                                               SMBIOSAssetTag, SKU, BootupState, PowerSupplyState,
                                               ThermalState, NumberOfPowerCords
PROCESSOR          Win32_Processor             Name, Manufacturer, MaxClockSpeed, CurrentClockSpeed,
                                               NumberOfCores, NumberOfLogicalProcessors,
                                               Architecture, Family, Model, Stepping, ProcessorId,
                                               L2CacheSize, L3CacheSize
VIDEO_CONTROLLER   Win32_VideoController       Name, AdapterCompatibility, AdapterRAM, DriverVersion,
                                               DriverDate, VideoProcessor, DeviceID, PNPDeviceID,
                                               Status, CurrentHorizontalResolution,
                                               CurrentVerticalResolution, CurrentRefreshRate
DISK_DRIVE         Win32_DiskDrive             DeviceID, Model, Manufacturer, SerialNumber,
                                               InterfaceType, MediaType, FirmwareRevision, Size
LOGICAL_DISK       Win32_LogicalDisk           DeviceID, VolumeName, FileSystem, DriveType, Size,
                                               FreeSpace, DiskDeviceID (owning disk, optional)
PHYSICAL_MEMORY    Win32_PhysicalMemory        DeviceLocator, BankLabel, Capacity (bytes),
                                               SMBIOSMemoryType, MemoryType, MemoryTypeName (text),
                                               FormFactor, Speed, ConfiguredClockSpeed,
                                               Manufacturer, PartNumber, SerialNumber,
                                               ConfiguredVoltage, MinVoltage, MaxVoltage
MEMORY_ARRAY       Win32_PhysicalMemoryArray   MaxCapacity (KB), MemoryDevices
PNP_USB_DEVICE     Win32_PnPEntity (USB%)      DeviceID, Name, Description, Manufacturer, Present,
                                               ClassCode (optional), SerialNumber (optional)
USB_CONTROLLER     Win32_USBController         DeviceID, Name, Description, Manufacturer, Status
USER_ACCOUNT       Win32_UserAccount           Name, FullName, Description, Disabled, Lockout,
                                               LastLogin, HomeDirectory
ACTIVE_USER        environment                 Name (may be DOMAIN\\user), Domain, FullName,
                                               SessionType, LoginTime, HomeDirectory
SECURITY           SecurityCenter2 / registry  AntivirusEnabled, FirewallEnabled, BitLockerEnabled,
                                               UacEnabled, SecurityCenter
=================  ==========================  ======================================================
"""

import asyncio
import inspect
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Protocol, Tuple, runtime_checkable

from ..exceptions import ProbeError, ProbeUnavailableError

logger = logging.getLogger(__name__)

RawRecord = Mapping[str, Any]


class ComponentKind(str, Enum):
    """Components queried for a snapshot, in dispatch and merge order."""

    OPERATING_SYSTEM = "operating_system"
    COMPUTER_SYSTEM = "computer_system"
    COMPUTER_PRODUCT = "computer_product"
    BASEBOARD = "baseboard"
    CHASSIS = "chassis"
    PROCESSOR = "processor"
    VIDEO_CONTROLLER = "video_controller"
    DISK_DRIVE = "disk_drive"
    LOGICAL_DISK = "logical_disk"
    PHYSICAL_MEMORY = "physical_memory"
    MEMORY_ARRAY = "memory_array"
    PNP_USB_DEVICE = "pnp_usb_device"
    USB_CONTROLLER = "usb_controller"
    USER_ACCOUNT = "user_account"
    ACTIVE_USER = "active_user"
    SECURITY = "security"

    def __str__(self):
        return self.value


class ProbeStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    UNAVAILABLE = "unavailable"

    def __str__(self):
        return self.value


@runtime_checkable
class Probe(Protocol):
    """Source of raw attribute records."""

    def query(self, kind: ComponentKind) -> Any:
        """Records for ``kind``: a sequence of mappings, one mapping, or None."""
        ...


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of one probe invocation. Never raised, always returned."""

    kind: ComponentKind
    status: ProbeStatus
    records: Tuple[RawRecord, ...] = ()
    error: Optional[str] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is ProbeStatus.OK

    @property
    def first(self) -> RawRecord:
        """First record, or an empty mapping for scalar components."""
        return self.records[0] if self.records else MappingProxyType({})


def freeze_records(result: Any, kind: Optional[ComponentKind] = None) -> Tuple[RawRecord, ...]:
    """
    Normalize a probe result into a tuple of read-only records.

    Args:
        result: None, a single mapping, or an iterable of mappings
        kind: Component kind, used in error messages

    Returns:
        Tuple of ``MappingProxyType`` records

    Raises:
        ProbeError: If the result contains something other than mappings
    """
    if result is None:
        return ()
    if isinstance(result, Mapping):
        return (MappingProxyType(dict(result)),)
    if isinstance(result, (str, bytes)):
        raise ProbeError(f"probe returned {type(result).__name__}, expected records", str(kind) if kind else None)

    frozen = []
    try:
        items = list(result)
    except TypeError as e:
        raise ProbeError(f"probe returned {type(result).__name__}, expected records",
                         str(kind) if kind else None) from e
    for item in items:
        if not isinstance(item, Mapping):
            raise ProbeError(f"malformed record of type {type(item).__name__}", str(kind) if kind else None)
        frozen.append(MappingProxyType(dict(item)))
    return tuple(frozen)


def run_in_daemon_thread(func: Callable[..., Any], *args: Any) -> "asyncio.Future":
    """
    Run a blocking call on a daemon thread and return a future for its result.

    The thread belongs to no executor, so neither ``asyncio.run`` nor
    interpreter exit waits for it. A call that outlives its timeout keeps
    running in the background and its result is dropped.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _resolve(value: Any, error: Optional[BaseException]):
        if future.cancelled():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(value)

    def _worker():
        value, error = None, None
        try:
            value = func(*args)
        except BaseException as e:
            error = e
        try:
            loop.call_soon_threadsafe(_resolve, value, error)
        except RuntimeError:
            # Loop already closed: the caller gave up on this call
            logger.debug(f"Discarding late result of {getattr(func, '__qualname__', func)!r}")

    name = f"hwvault-probe-{getattr(func, '__name__', 'call')}"
    threading.Thread(target=_worker, name=name, daemon=True).start()
    return future


async def _query(probe: Probe, kind: ComponentKind) -> Any:
    query = probe.query
    if inspect.iscoroutinefunction(query):
        result = await query(kind)
    else:
        result = await run_in_daemon_thread(query, kind)
    if inspect.isawaitable(result):
        result = await result
    return result


async def run_probe(probe: Probe, kind: ComponentKind, timeout: float) -> ProbeOutcome:
    """
    Query one component with a timeout and capture the result as an outcome.

    A synchronous probe runs on a daemon thread. When it times out the thread
    is abandoned (threads cannot be cancelled) and its late result discarded.

    Args:
        probe: Probe collaborator
        kind: Component to query
        timeout: Seconds before the call is abandoned

    Returns:
        ProbeOutcome with status ok, failed, timed_out or unavailable
    """
    started = time.perf_counter()
    try:
        result = await asyncio.wait_for(_query(probe, kind), timeout)
        records = freeze_records(result, kind)
    except asyncio.TimeoutError:
        elapsed = time.perf_counter() - started
        logger.warning(f"Probe for {kind} timed out after {timeout:.1f}s")
        return ProbeOutcome(kind, ProbeStatus.TIMED_OUT, error=f"timed out after {timeout:.1f}s", elapsed=elapsed)
    except ProbeUnavailableError as e:
        elapsed = time.perf_counter() - started
        logger.debug(f"Probe for {kind} unavailable: {e}")
        return ProbeOutcome(kind, ProbeStatus.UNAVAILABLE, error=str(e), elapsed=elapsed)
    except Exception as e:
        # Any exception from a collaborator marks only this component as failed
        elapsed = time.perf_counter() - started
        logger.warning(f"Probe for {kind} failed: {type(e).__name__}: {e}")
        return ProbeOutcome(kind, ProbeStatus.FAILED, error=f"{type(e).__name__}: {e}", elapsed=elapsed)

    elapsed = time.perf_counter() - started
    logger.debug(f"Probe for {kind} returned {len(records)} record(s) in {elapsed:.3f}s")
    return ProbeOutcome(kind, ProbeStatus.OK, records=records, elapsed=elapsed)
