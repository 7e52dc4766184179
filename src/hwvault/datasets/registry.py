"""
Dataset Registry

Loads the static JSON reference tables (manufacturer ids, memory type codes,
form factors, chassis types, USB classes, chipsets) once and exposes them as
immutable lookup tables shared by every classifier.

Each domain loads independently: a missing or corrupt file disables only that
domain, and the classifiers that depend on it fall back to their heuristic
rules.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field

from ..exceptions import DatasetLoadError
from .chipsets import ChipsetCatalog, ChipsetEntry, ChipsetFile, entries_from_file

# Module logger
logger = logging.getLogger(__name__)

# Reference files shipped inside the package
BUNDLED_DATA_DIR = Path(__file__).resolve().parent / "data"


class DatasetDomain(str, Enum):
    """Independently loadable groups of reference tables."""
    MANUFACTURERS = "manufacturers"
    MEMORY = "memory"
    CHASSIS = "chassis"
    USB_CLASSES = "usb_classes"
    CHIPSETS = "chipsets"

    def __str__(self):
        return self.value


# Files backing each domain, in load order
DOMAIN_FILES: Dict[DatasetDomain, Tuple[str, ...]] = {
    DatasetDomain.MANUFACTURERS: ("manufacturers.json",),
    DatasetDomain.MEMORY: ("memory_types.json",),
    DatasetDomain.CHASSIS: ("chassis_types.json",),
    DatasetDomain.USB_CLASSES: ("usb_device_classes.json",),
    DatasetDomain.CHIPSETS: ("amd_chipsets.json", "intel_chipsets.json"),
}


# ============================================================================
# FILE SCHEMAS
# ============================================================================

class _ManufacturersFile(BaseModel):
    manufacturers: Dict[str, str]


class _MemoryTypesFile(BaseModel):
    memoryTypes: Dict[str, str]
    formFactors: Dict[str, str] = Field(default_factory=dict)
    memoryTypeMappings: Dict[str, str] = Field(default_factory=dict)


class _ChassisTypesFile(BaseModel):
    chassisTypes: Dict[str, str]


class _CommonDevice(BaseModel):
    # "class" is a keyword, so the field is aliased
    class_code: str = Field(alias="class")


class _UsbClassesFile(BaseModel):
    deviceClasses: Dict[str, str]
    commonDevices: Dict[str, _CommonDevice] = Field(default_factory=dict)


# ============================================================================
# TABLES
# ============================================================================

def normalize_key(key: Any) -> str:
    """Uppercase a lookup key and strip a leading ``0x`` hex prefix."""
    if key is None:
        return ""
    text = str(key).strip().upper()
    if text.startswith("0X"):
        text = text[2:]
    return text


@dataclass(frozen=True)
class LookupResult:
    """A table hit: the key that matched, its value, and how it matched."""
    key: str
    value: str
    exact: bool


class DatasetTable(Mapping[str, str]):
    """
    Immutable, insertion-ordered key -> canonical name table.

    ``lookup`` tries the raw key, then the normalized key (both exact), then,
    when allowed, the first entry whose normalized key contains or is
    contained in the normalized query.
    """

    def __init__(self, name: str, entries: Mapping[str, str]):
        self.name = name
        self._entries = MappingProxyType(dict(entries))
        normalized: Dict[str, str] = {}
        for key in self._entries:
            normalized.setdefault(normalize_key(key), key)
        self._normalized = MappingProxyType(normalized)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DatasetTable({self.name!r}, {len(self)} entries)"

    def lookup(self, key: Any, partial: bool = True) -> Optional[LookupResult]:
        """
        Resolve ``key`` against the table.

        Args:
            key: Raw code or text (``"0x1234"``, ``26``, ``"DDR4 SDRAM"``)
            partial: Allow substring matching as a last resort

        Returns:
            LookupResult, or None when nothing matches or the key is empty
        """
        if key is None:
            return None
        raw = str(key).strip()
        query = normalize_key(raw)
        if not query:
            return None

        if raw in self._entries:
            return LookupResult(raw, self._entries[raw], exact=True)
        if query in self._normalized:
            original = self._normalized[query]
            return LookupResult(original, self._entries[original], exact=True)

        if not partial:
            return None
        for normalized, original in self._normalized.items():
            if normalized and (normalized in query or query in normalized):
                return LookupResult(original, self._entries[original], exact=False)
        return None


# ============================================================================
# LOADING
# ============================================================================

@dataclass(frozen=True)
class DatasetLoadOutcome:
    """Result of loading one domain: its tables, or the reason it failed."""
    domain: DatasetDomain
    tables: Mapping[str, DatasetTable] = field(default_factory=lambda: MappingProxyType({}))
    chipsets: Tuple[ChipsetEntry, ...] = ()
    error: Optional[str] = None
    # Files of a multi-file domain that failed while the others loaded
    file_errors: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def complete(self) -> bool:
        """Loaded with every file of the domain."""
        return self.ok and not self.file_errors


def _read_json(path: Path, domain: DatasetDomain) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise DatasetLoadError(f"{path.name} not found in {path.parent}", domain=domain.value)
    except (OSError, ValueError) as e:
        raise DatasetLoadError(f"{path.name}: {e}", domain=domain.value) from e


def _parse(model, payload: Any, filename: str, domain: DatasetDomain):
    try:
        return model.model_validate(payload)
    except ValueError as e:
        raise DatasetLoadError(f"{filename} has an unexpected layout: {e}", domain=domain.value) from e


def _tables(**tables: Mapping[str, str]) -> Mapping[str, DatasetTable]:
    return MappingProxyType({name: DatasetTable(name, entries) for name, entries in tables.items()})


def _read_chipsets(domain: DatasetDomain, data_dir: Path) -> DatasetLoadOutcome:
    """
    Read each chipset file on its own and keep the ones that parse.

    Only when no file loads does the domain fail; otherwise the failed files
    are recorded in ``file_errors``.
    """
    files = DOMAIN_FILES[domain]
    entries, file_errors = [], []
    last_error = None
    for name in files:
        try:
            payload = _read_json(data_dir / name, domain)
            entries.extend(entries_from_file(_parse(ChipsetFile, payload, name, domain)))
        except DatasetLoadError as e:
            logger.warning(f"{e}; continuing without {name}")
            file_errors.append(str(e))
            last_error = e

    if len(file_errors) == len(files):
        raise DatasetLoadError(f"none of {', '.join(files)} could be loaded", domain=domain.value) from last_error
    return DatasetLoadOutcome(domain, chipsets=tuple(entries), file_errors=tuple(file_errors))


def _read_domain(domain: DatasetDomain, data_dir: Path) -> DatasetLoadOutcome:
    """Read and validate every file of a domain. Raises DatasetLoadError."""
    if domain is DatasetDomain.CHIPSETS:
        return _read_chipsets(domain, data_dir)

    files = DOMAIN_FILES[domain]
    payloads = [(name, _read_json(data_dir / name, domain)) for name in files]

    if domain is DatasetDomain.MANUFACTURERS:
        data = _parse(_ManufacturersFile, payloads[0][1], payloads[0][0], domain)
        return DatasetLoadOutcome(domain, _tables(manufacturers=data.manufacturers))

    if domain is DatasetDomain.MEMORY:
        data = _parse(_MemoryTypesFile, payloads[0][1], payloads[0][0], domain)
        return DatasetLoadOutcome(domain, _tables(
            memoryTypes=data.memoryTypes,
            formFactors=data.formFactors,
            memoryTypeMappings=data.memoryTypeMappings,
        ))

    if domain is DatasetDomain.CHASSIS:
        data = _parse(_ChassisTypesFile, payloads[0][1], payloads[0][0], domain)
        return DatasetLoadOutcome(domain, _tables(chassisTypes=data.chassisTypes))

    if domain is DatasetDomain.USB_CLASSES:
        data = _parse(_UsbClassesFile, payloads[0][1], payloads[0][0], domain)
        common = {pattern.lower(): device.class_code for pattern, device in data.commonDevices.items()}
        return DatasetLoadOutcome(domain, _tables(
            deviceClasses=data.deviceClasses,
            commonDevices=common,
        ))

    raise DatasetLoadError("no loader for domain", domain=domain.value)


def load_domain(domain: Union[DatasetDomain, str], data_dir: Union[Path, str, None] = None) -> DatasetLoadOutcome:
    """
    Load one dataset domain without raising.

    Args:
        domain: Domain to load
        data_dir: Directory holding the JSON files (defaults to the bundled data)

    Returns:
        DatasetLoadOutcome carrying either the tables or the error message
    """
    domain = DatasetDomain(domain)
    data_dir = Path(data_dir) if data_dir is not None else BUNDLED_DATA_DIR
    try:
        return _read_domain(domain, data_dir)
    except DatasetLoadError as e:
        return DatasetLoadOutcome(domain, error=str(e))


# ============================================================================
# REGISTRY
# ============================================================================

class DatasetRegistry:
    """
    Load-once, read-many collection of reference tables.

    Instances are immutable after construction and safe to share between
    concurrent probes. Build one with ``DatasetRegistry.load()`` and pass it
    to the classifiers explicitly.
    """

    __slots__ = ("_outcomes", "_chipsets", "data_dir")

    def __init__(self, outcomes: Iterable[DatasetLoadOutcome] = (), data_dir: Optional[Path] = None):
        by_domain = {outcome.domain: outcome for outcome in outcomes}
        for domain in DatasetDomain:
            by_domain.setdefault(domain, DatasetLoadOutcome(domain, error="not loaded"))
        self._outcomes = MappingProxyType(by_domain)
        self._chipsets = ChipsetCatalog(by_domain[DatasetDomain.CHIPSETS].chipsets)
        self.data_dir = data_dir

    @classmethod
    def load(cls, data_dir: Union[Path, str, None] = None) -> "DatasetRegistry":
        """Load every domain independently, logging the ones that fail."""
        data_dir = Path(data_dir) if data_dir is not None else BUNDLED_DATA_DIR
        outcomes = []
        for domain in DatasetDomain:
            outcome = load_domain(domain, data_dir)
            if outcome.ok:
                logger.debug(f"Loaded dataset domain '{domain}' from {data_dir}")
            else:
                logger.warning(f"{outcome.error}; falling back to heuristics")
            outcomes.append(outcome)
        return cls(outcomes, data_dir=data_dir)

    @classmethod
    def empty(cls) -> "DatasetRegistry":
        """A registry with no domains loaded (heuristics only)."""
        return cls()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def is_loaded(self, domain: Union[DatasetDomain, str]) -> bool:
        return self._outcomes[DatasetDomain(domain)].ok

    @property
    def fully_loaded(self) -> bool:
        return all(outcome.complete for outcome in self._outcomes.values())

    @property
    def failures(self) -> Dict[str, str]:
        """Domain name -> error message for every domain that did not load completely."""
        return {
            domain.value: outcome.error or "; ".join(outcome.file_errors)
            for domain, outcome in self._outcomes.items()
            if not outcome.complete
        }

    def statistics(self) -> Dict[str, int]:
        """Entry counts per table (zero for tables whose domain failed)."""
        stats = {
            "manufacturers": 0,
            "memoryTypes": 0,
            "formFactors": 0,
            "memoryTypeMappings": 0,
            "chassisTypes": 0,
            "deviceClasses": 0,
            "commonDevices": 0,
        }
        for outcome in self._outcomes.values():
            for name, table in outcome.tables.items():
                stats[name] = len(table)
        stats["chipsets"] = len(self._chipsets)
        return stats

    # ------------------------------------------------------------------
    # Table access
    # ------------------------------------------------------------------

    def table(self, domain: Union[DatasetDomain, str], name: str) -> Optional[DatasetTable]:
        """Return a named table of a loaded domain, or None."""
        return self._outcomes[DatasetDomain(domain)].tables.get(name)

    def lookup(self, domain: Union[DatasetDomain, str], name: str, key: Any,
               partial: bool = True) -> Optional[LookupResult]:
        table = self.table(domain, name)
        if table is None:
            return None
        return table.lookup(key, partial=partial)

    @property
    def chipsets(self) -> ChipsetCatalog:
        return self._chipsets

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    def _value(self, domain, name, key, partial=False) -> Optional[str]:
        result = self.lookup(domain, name, key, partial=partial)
        return result.value if result else None

    def manufacturer_name(self, manufacturer_id: Any) -> Optional[str]:
        """JEDEC/PCI manufacturer id -> vendor name (exact, then partial)."""
        return self._value(DatasetDomain.MANUFACTURERS, "manufacturers", manufacturer_id, partial=True)

    def is_known_manufacturer(self, name: Optional[str]) -> bool:
        table = self.table(DatasetDomain.MANUFACTURERS, "manufacturers")
        if table is None or not name or not name.strip():
            return False
        wanted = name.strip().lower()
        return any(value.lower() == wanted for value in table.values())

    def memory_type_name(self, code: Any) -> Optional[str]:
        return self._value(DatasetDomain.MEMORY, "memoryTypes", code)

    def form_factor_name(self, code: Any) -> Optional[str]:
        return self._value(DatasetDomain.MEMORY, "formFactors", code)

    def map_memory_type(self, raw_type: Optional[str]) -> Optional[str]:
        """Map a raw memory type string to its canonical name; unmapped strings pass through."""
        if raw_type is None or not str(raw_type).strip():
            return raw_type
        return self._value(DatasetDomain.MEMORY, "memoryTypeMappings", raw_type, partial=True) or raw_type

    def chassis_type_name(self, code: Any) -> Optional[str]:
        return self._value(DatasetDomain.CHASSIS, "chassisTypes", code)

    def usb_class_name(self, code: Any) -> Optional[str]:
        if isinstance(code, int):
            code = f"{code:02X}"
        return self._value(DatasetDomain.USB_CLASSES, "deviceClasses", code)

    def usb_class_from_name(self, device_name: Optional[str]) -> Optional[str]:
        """Class code of the first common-device pattern found in ``device_name``."""
        if not device_name or not device_name.strip():
            return None
        table = self.table(DatasetDomain.USB_CLASSES, "commonDevices")
        if table is None:
            return None
        lowered = device_name.lower()
        for pattern, class_code in table.items():
            if pattern and pattern in lowered:
                return class_code
        return None
