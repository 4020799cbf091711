"""Normalize a raw, heterogeneously formatted GPU catalog.

Each record's VRAM is resolved in three stages, first success wins:

1. Direct extraction from a known memory field
2. Inference from the product name (embedded size or known product)
3. Family / generation default, then an absolute floor

The output is sorted by VRAM descending then name, so normalizing the same
input twice yields identical results.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Tuple

from llm_hardware_calc.utils.errors import CatalogParseError
from .heuristics import (
    LAUNCH_FIELDS,
    MODEL_FIELD,
    VENDOR_FIELD,
    clean_model_name,
    detect_unified_memory,
    extract_memory_size,
    family_default_vram,
    guess_vendor,
    infer_vram_from_name,
    is_missing,
)
from .models import ExtractionStats, GpuDevice, MemorySource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedCatalog:
    """Normalized devices plus extraction statistics."""

    devices: Tuple[GpuDevice, ...]
    stats: ExtractionStats = field(default_factory=ExtractionStats)


def _sort_key(device: GpuDevice):
    return (-device.vram_gb, device.name.lower(), device.name, device.id)


def sort_devices(devices: Iterable[GpuDevice]) -> Tuple[GpuDevice, ...]:
    """Canonical catalog order: VRAM descending, then name, then ID."""
    return tuple(sorted(devices, key=_sort_key))


def resolve_vram(record: Mapping[str, Any], full_name: str) -> Tuple[float, MemorySource]:
    """Resolve a record's VRAM in GB and how it was obtained."""
    size, field_name = extract_memory_size(record)
    if size is not None:
        return size, MemorySource.DIRECT

    size = infer_vram_from_name(full_name)
    if size is not None:
        return size, MemorySource.INFERRED

    size, matched = family_default_vram(full_name)
    return size, MemorySource.FAMILY if matched else MemorySource.FLOOR


def _text(value: Any) -> str:
    if is_missing(value) or isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value).strip()


def normalize_record(key: str, record: Mapping[str, Any]) -> Optional[GpuDevice]:
    """Normalize a single raw record.

    Returns:
        GpuDevice, or None if the record has no usable model name
    """
    model = _text(record.get(MODEL_FIELD))
    if not model:
        return None

    vendor = _text(record.get(VENDOR_FIELD))
    full_name = model if not vendor or model.lower().startswith(vendor.lower()) else f"{vendor} {model}"
    if not vendor:
        vendor = guess_vendor(model)

    name = clean_model_name(model, vendor)
    if not name:
        return None

    vram, source = resolve_vram(record, full_name)
    vram = round(vram, 1)

    launch_date = None
    for launch_field in LAUNCH_FIELDS:
        launch_date = _text(record.get(launch_field)) or None
        if launch_date:
            break

    return GpuDevice(
        id=f"{key}_{name}_{vram:g}",
        name=name,
        vendor=vendor,
        vram_gb=vram,
        is_unified_memory=detect_unified_memory(model, vendor),
        launch_date=launch_date,
        memory_source=source,
    )


def normalize_catalog(raw: Any) -> NormalizedCatalog:
    """Normalize a raw catalog keyed by opaque IDs.

    Args:
        raw: Mapping of ID -> record (dict of heterogeneous fields)

    Returns:
        NormalizedCatalog with devices in canonical order

    Raises:
        CatalogParseError: If the catalog is not a mapping
    """
    if not isinstance(raw, Mapping):
        raise CatalogParseError(
            f"Expected catalog object keyed by ID, got {type(raw).__name__}"
        )

    stats = ExtractionStats()
    devices = []

    for key, record in raw.items():
        if not isinstance(record, Mapping):
            stats.skipped += 1
            continue

        device = normalize_record(str(key), record)
        if device is None:
            stats.skipped += 1
            continue

        stats.total += 1
        stats.record(device.memory_source)
        devices.append(device)

    logger.debug(f"Normalized {len(devices)} devices, extraction stats: {stats.to_dict()}")

    return NormalizedCatalog(devices=sort_devices(devices), stats=stats)
