"""Pydantic models and result types for the normalized GPU catalog."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class MemorySource(str, Enum):
    """How a device's VRAM figure was obtained."""

    DIRECT = "direct"  # Parsed from a memory field
    INFERRED = "inferred"  # Known product name
    FAMILY = "family"  # Product family/generation default
    FLOOR = "floor"  # Nothing matched
    STATIC = "static"  # Built-in fallback list


class CatalogSource(str, Enum):
    """Where a loaded catalog came from.

    remote and cache are healthy loads; stale_cache and static are degraded
    fallbacks used when the catalog could not be downloaded.
    """

    REMOTE = "remote"
    CACHE = "cache"
    STALE_CACHE = "stale_cache"
    STATIC = "static"


class GpuDevice(BaseModel):
    """Normalized GPU (or unified memory SoC) catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Derived ID, not stable across catalog refreshes")
    name: str = Field(..., description="Model name without vendor prefix")
    vendor: str = Field("", description="Vendor name")
    vram_gb: float = Field(..., ge=0, description="Memory capacity in GB")
    is_unified_memory: bool = Field(False, description="CPU and GPU share memory")
    launch_date: Optional[str] = Field(None, description="Launch date as reported")
    memory_source: MemorySource = Field(
        MemorySource.DIRECT, description="How vram_gb was determined"
    )

    @property
    def display_name(self) -> str:
        """Vendor and model name for display."""
        if self.vendor and not self.name.lower().startswith(self.vendor.lower()):
            return f"{self.vendor} {self.name}"
        return self.name

    @property
    def is_usable(self) -> bool:
        """Devices with unknown (zero) VRAM are excluded from recommendations."""
        return self.vram_gb > 0


@dataclass
class ExtractionStats:
    """Counts of how each device's VRAM was resolved."""

    direct: int = 0
    inferred: int = 0
    family: int = 0
    floor: int = 0
    skipped: int = 0
    total: int = 0

    def record(self, source: MemorySource) -> None:
        if source == MemorySource.DIRECT:
            self.direct += 1
        elif source == MemorySource.INFERRED:
            self.inferred += 1
        elif source == MemorySource.FAMILY:
            self.family += 1
        elif source == MemorySource.FLOOR:
            self.floor += 1

    def to_dict(self) -> Dict[str, int]:
        return {
            "direct": self.direct,
            "inferred": self.inferred,
            "family": self.family,
            "floor": self.floor,
            "skipped": self.skipped,
            "total": self.total,
        }


@dataclass(frozen=True)
class CatalogResult:
    """A loaded, normalized catalog and where it came from."""

    devices: Tuple[GpuDevice, ...]
    source: CatalogSource
    loaded_at: float
    stats: ExtractionStats = field(default_factory=ExtractionStats)
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        """True when the catalog is degraded (download failed)."""
        return self.source in (CatalogSource.STALE_CACHE, CatalogSource.STATIC)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source.value,
            "is_fallback": self.is_fallback,
            "loaded_at": self.loaded_at,
            "device_count": len(self.devices),
            "stats": self.stats.to_dict(),
            "error": self.error,
        }
