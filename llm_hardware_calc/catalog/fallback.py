"""Built-in device list used when no catalog can be downloaded or read from cache."""

import re
from typing import Tuple

from .models import GpuDevice, MemorySource
from .normalizer import sort_devices

# (name, vendor, VRAM GB, unified memory)
DEFAULT_GPU_LIST: Tuple[Tuple[str, str, float, bool], ...] = (
    # NVIDIA consumer
    ("RTX 4090", "NVIDIA", 24, False),
    ("RTX 4080", "NVIDIA", 16, False),
    ("RTX 4070 Ti", "NVIDIA", 12, False),
    ("RTX 3090", "NVIDIA", 24, False),
    ("RTX 3080", "NVIDIA", 10, False),
    ("RTX 3070", "NVIDIA", 8, False),
    ("RTX 2080 Ti", "NVIDIA", 11, False),
    ("RTX 2080", "NVIDIA", 8, False),
    ("RTX 2070", "NVIDIA", 8, False),
    # NVIDIA professional
    ("A100", "NVIDIA", 80, False),
    ("A6000", "NVIDIA", 48, False),
    ("A5000", "NVIDIA", 24, False),
    ("A4000", "NVIDIA", 16, False),
    # AMD
    ("Radeon RX 7900 XTX", "AMD", 24, False),
    ("Radeon RX 6900 XT", "AMD", 16, False),
    ("Radeon RX 6800 XT", "AMD", 16, False),
    # Apple silicon
    ("M1", "Apple", 8, True),
    ("M1", "Apple", 16, True),
    ("M1 Pro", "Apple", 16, True),
    ("M1 Pro", "Apple", 32, True),
    ("M1 Max", "Apple", 32, True),
    ("M1 Max", "Apple", 64, True),
    ("M1 Ultra", "Apple", 64, True),
    ("M1 Ultra", "Apple", 128, True),
    ("M2", "Apple", 8, True),
    ("M2", "Apple", 16, True),
    ("M2", "Apple", 24, True),
    ("M2 Pro", "Apple", 16, True),
    ("M2 Pro", "Apple", 32, True),
    ("M2 Max", "Apple", 32, True),
    ("M2 Max", "Apple", 64, True),
    ("M2 Max", "Apple", 96, True),
    ("M2 Ultra", "Apple", 64, True),
    ("M2 Ultra", "Apple", 128, True),
    ("M2 Ultra", "Apple", 192, True),
    ("M3", "Apple", 8, True),
    ("M3", "Apple", 16, True),
    ("M3", "Apple", 24, True),
    ("M3 Pro", "Apple", 18, True),
    ("M3 Pro", "Apple", 36, True),
    ("M3 Max", "Apple", 36, True),
    ("M3 Max", "Apple", 64, True),
    ("M3 Max", "Apple", 128, True),
    ("M3 Ultra", "Apple", 128, True),
    ("M3 Ultra", "Apple", 192, True),
    # AMD APUs
    ("Ryzen 7 7840U", "AMD", 32, True),
    ("Ryzen 9 7940HS", "AMD", 32, True),
    ("Ryzen 7 6800U", "AMD", 32, True),
    ("Ryzen 9 6900HX", "AMD", 32, True),
    ("Ryzen 7 5800U", "AMD", 32, True),
    # Intel integrated graphics
    ("Core Ultra 7 155H", "Intel", 32, True),
    ("Core Ultra 9 185H", "Intel", 32, True),
    ("Core i7-1370P Iris Xe", "Intel", 32, True),
    ("Core i9-13900H Iris Xe", "Intel", 32, True),
    # Qualcomm
    ("Snapdragon X Elite", "Qualcomm", 32, True),
    ("Snapdragon 8cx Gen 3", "Qualcomm", 32, True),
    # Intel data center
    ("Data Center GPU Max 1550", "Intel", 128, False),
    ("Data Center GPU Max 1100", "Intel", 48, False),
)


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def default_devices() -> Tuple[GpuDevice, ...]:
    """Build the static fallback catalog in canonical order."""
    devices = [
        GpuDevice(
            id=f"static_{_slug(vendor)}_{_slug(name)}_{vram:g}",
            name=name,
            vendor=vendor,
            vram_gb=float(vram),
            is_unified_memory=unified,
            memory_source=MemorySource.STATIC,
        )
        for name, vendor, vram, unified in DEFAULT_GPU_LIST
    ]
    return sort_devices(devices)
