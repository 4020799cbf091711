"""Catalog search and category filters."""

import logging
import re
from typing import Iterable, List, Optional

from .heuristics import is_workstation_gpu
from .models import GpuDevice

logger = logging.getLogger(__name__)

BRAND_QUERIES = ("nvidia", "amd", "intel", "radeon", "geforce", "apple")

_VRAM_QUERY_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:gb|gib|g|vram)\b")
_SERIES_QUERY_RE = re.compile(r"\b(rtx|gtx|rx)\s*(\d{1,4})\s*(series|ti|super)?\b")


def _limit(devices: List[GpuDevice], limit: Optional[int]) -> List[GpuDevice]:
    return devices[:limit] if limit else devices


def unified_devices(devices: Iterable[GpuDevice], limit: Optional[int] = None) -> List[GpuDevice]:
    """Apple silicon, APUs and other shared-memory devices."""
    return _limit([d for d in devices if d.is_unified_memory], limit)


def workstation_devices(devices: Iterable[GpuDevice], limit: Optional[int] = None) -> List[GpuDevice]:
    """Professional, workstation and data center discrete GPUs."""
    return _limit(
        [d for d in devices if not d.is_unified_memory and is_workstation_gpu(d.name, d.vendor)],
        limit,
    )


def consumer_devices(devices: Iterable[GpuDevice], limit: Optional[int] = None) -> List[GpuDevice]:
    """Discrete GPUs that are not workstation products."""
    return _limit(
        [d for d in devices if not d.is_unified_memory and not is_workstation_gpu(d.name, d.vendor)],
        limit,
    )


def search_devices(devices: Iterable[GpuDevice], query: str) -> List[GpuDevice]:
    """Filter devices by a free-text query.

    Supported forms:
        "24gb"          exact VRAM size
        "rtx 30 series" series prefix and number ("rtx 4070 ti", "rx 7900")
        "nvidia"        brand, matched against vendor or name
        anything else   every whitespace-separated term must appear in
                        "<vendor> <name>" or the device ID

    An empty query returns all devices. Order is preserved.
    """
    devices = list(devices)
    query = (query or "").strip().lower()
    if not query:
        return devices

    match = _VRAM_QUERY_RE.fullmatch(query)
    if match:
        size = float(match.group(1))
        results = [d for d in devices if d.vram_gb == size]
        logger.debug(f"VRAM search for {size:g}GB returned {len(results)} devices")
        return results

    match = _SERIES_QUERY_RE.search(query)
    if match:
        prefix, number, suffix = match.groups()
        pattern = re.compile(rf"\b{prefix}\s*{number}")
        results = []
        for device in devices:
            name = device.name.lower()
            if not pattern.search(name):
                continue
            if suffix and suffix != "series" and suffix not in name:
                continue
            results.append(device)
        logger.debug(f"Series search for '{query}' returned {len(results)} devices")
        return results

    if query in BRAND_QUERIES:
        return [d for d in devices if query in d.vendor.lower() or query in d.name.lower()]

    terms = query.split()
    results = []
    for device in devices:
        haystack = f"{device.vendor} {device.name}".lower()
        if all(term in haystack for term in terms) or query in device.id.lower():
            results.append(device)

    logger.debug(f"Search for '{query}' returned {len(results)} devices")
    return results
