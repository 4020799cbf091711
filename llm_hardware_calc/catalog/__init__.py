"""GPU catalog acquisition, normalization and search."""

from .models import (
    CatalogResult,
    CatalogSource,
    ExtractionStats,
    GpuDevice,
    MemorySource,
)
from .normalizer import NormalizedCatalog, normalize_catalog, sort_devices
from .fallback import DEFAULT_GPU_LIST, default_devices
from .fetcher import DEFAULT_CATALOG_URL, CatalogClient
from .cache import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_TTL,
    CatalogCache,
    FileCatalogCache,
    MemoryCatalogCache,
)
from .service import GpuCatalog
from .search import (
    consumer_devices,
    search_devices,
    unified_devices,
    workstation_devices,
)

__all__ = [
    "CatalogResult",
    "CatalogSource",
    "ExtractionStats",
    "GpuDevice",
    "MemorySource",
    "NormalizedCatalog",
    "normalize_catalog",
    "sort_devices",
    "DEFAULT_GPU_LIST",
    "default_devices",
    "DEFAULT_CATALOG_URL",
    "CatalogClient",
    "DEFAULT_CACHE_DIR",
    "DEFAULT_CACHE_TTL",
    "CatalogCache",
    "FileCatalogCache",
    "MemoryCatalogCache",
    "GpuCatalog",
    "consumer_devices",
    "search_devices",
    "unified_devices",
    "workstation_devices",
]
