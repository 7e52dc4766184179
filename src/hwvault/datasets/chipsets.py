"""
Chipset Catalog

Motherboard chipset reference data (AMD and Intel) used to identify the
chipset hidden in a baseboard product string and to report the PCIe
generation and slot layout the chipset provides.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Reported when no chipset could be identified
DEFAULT_PCIE_VERSION = "PCIe 3.0+"


# ============================================================================
# FILE SCHEMA
# ============================================================================

class _SlotRecord(BaseModel):
    """One slot descriptor as stored in a chipset JSON file."""
    model_config = ConfigDict(populate_by_name=True)

    type: str
    speed_per_lane: str = Field(alias="speedPerLane")
    total_bandwidth: str = Field(alias="totalBandwidth")


class _ChipsetRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str
    release_year: Optional[int] = Field(None, alias="releaseYear")
    pci_version: Optional[str] = Field(None, alias="pciVersion")
    slots: List[_SlotRecord] = Field(default_factory=list)


class ChipsetFile(BaseModel):
    """Top-level layout of ``amd_chipsets.json`` / ``intel_chipsets.json``."""
    manufacturer: str
    chipsets: List[_ChipsetRecord] = Field(default_factory=list)


# ============================================================================
# CATALOG
# ============================================================================

@dataclass(frozen=True)
class PciSlot:
    """A PCIe slot descriptor offered by a chipset."""
    type: str
    speed_per_lane: str
    total_bandwidth: str


@dataclass(frozen=True)
class ChipsetEntry:
    """A single chipset model and what it provides."""
    model: str
    release_year: Optional[int] = None
    pci_version: Optional[str] = None
    slots: Tuple[PciSlot, ...] = field(default_factory=tuple)
    manufacturer: Optional[str] = None


def entries_from_file(data: ChipsetFile) -> Tuple[ChipsetEntry, ...]:
    """Convert a validated chipset file into catalog entries, keeping file order."""
    return tuple(
        ChipsetEntry(
            model=record.model.strip(),
            release_year=record.release_year,
            pci_version=record.pci_version,
            slots=tuple(
                PciSlot(slot.type, slot.speed_per_lane, slot.total_bandwidth)
                for slot in record.slots
            ),
            manufacturer=data.manufacturer,
        )
        for record in data.chipsets
        if record.model and record.model.strip()
    )


class ChipsetCatalog:
    """
    Ordered, read-only collection of chipset entries.

    Matching is a case-insensitive substring test of each entry's model
    against the query text. The first entry in catalog order wins, so more
    specific models (``X670E``) are listed before the models they contain
    (``X670``).
    """

    def __init__(self, entries: Iterable[ChipsetEntry] = ()):
        self._entries: Tuple[ChipsetEntry, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> Tuple[ChipsetEntry, ...]:
        return self._entries

    def find_by_model(self, text: Optional[str]) -> Optional[ChipsetEntry]:
        """Return the first chipset whose model appears in ``text``."""
        if not text or not text.strip():
            return None
        haystack = text.lower()
        for entry in self._entries:
            if entry.model.lower() in haystack:
                return entry
        return None

    def extract_model_and_chipset(self, product: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        """
        Split a baseboard product string into board model and chipset.

        The board model is the text preceding the chipset name. When the
        chipset starts the string, or none is found, the whole trimmed
        product string is the model.

        Args:
            product: Raw baseboard product string (e.g. "ASUS X570-E")

        Returns:
            Tuple of (model, chipset); both None for an empty product

        Examples:
            >>> catalog.extract_model_and_chipset("ASUS X570-E")
            ('ASUS', 'X570')
        """
        if not product or not product.strip():
            return None, None

        entry = self.find_by_model(product)
        if entry is None:
            return product.strip(), None

        index = product.lower().find(entry.model.lower())
        model = product[:index].strip() if index > 0 else product.strip()
        return model, entry.model

    def pcie_version(self, text: Optional[str]) -> str:
        entry = self.find_by_model(text)
        if entry is None or not entry.pci_version:
            return DEFAULT_PCIE_VERSION
        return entry.pci_version

    def available_slots(self, text: Optional[str]) -> Optional[Tuple[PciSlot, ...]]:
        entry = self.find_by_model(text)
        return entry.slots if entry is not None else None

    def release_year(self, text: Optional[str]) -> Optional[int]:
        entry = self.find_by_model(text)
        return entry.release_year if entry is not None else None
