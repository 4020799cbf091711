"""GPU catalog service.

Loads the normalized catalog using, in order:

1. The in-process result, until it expires
2. A fresh local cache entry
3. A download (stored in the cache on success)
4. An expired cache entry
5. The built-in device list

Loading never raises; degraded sources are flagged on the result and logged
at WARNING with the catalog_source they fell back to.
"""

import asyncio
import time
from typing import Any, Dict, Optional

from llm_hardware_calc.diagnostics.logger import StructuredLogger
from llm_hardware_calc.utils.errors import CatalogError
from .cache import DEFAULT_CACHE_TTL, CatalogCache, Clock, FileCatalogCache
from .fallback import default_devices
from .fetcher import CatalogClient
from .models import CatalogResult, CatalogSource, ExtractionStats
from .normalizer import normalize_catalog


class GpuCatalog:
    """Loads and holds the normalized GPU catalog.

    Usage:
        catalog = GpuCatalog()
        result = await catalog.load()
        if result.is_fallback:
            print(f"Using {result.source.value} data")
    """

    def __init__(
        self,
        fetcher: Optional[CatalogClient] = None,
        cache: Optional[CatalogCache] = None,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Clock = time.time,
    ):
        self.fetcher = fetcher or CatalogClient()
        self.cache = cache if cache is not None else FileCatalogCache(ttl=ttl, clock=clock)
        self.ttl = ttl
        self._clock = clock
        self._result: Optional[CatalogResult] = None
        self._lock: Optional[asyncio.Lock] = None
        self.log = StructuredLogger(component="catalog")

    @property
    def current(self) -> Optional[CatalogResult]:
        """The last loaded result, if any."""
        return self._result

    def _is_fresh(self, result: Optional[CatalogResult]) -> bool:
        return (
            result is not None
            and not result.is_fallback
            and self._clock() - result.loaded_at <= self.ttl
        )

    def _build(
        self,
        raw: Dict[str, Any],
        source: CatalogSource,
        error: Optional[str] = None,
        loaded_at: Optional[float] = None,
    ) -> Optional[CatalogResult]:
        try:
            normalized = normalize_catalog(raw)
        except CatalogError as e:
            self.log.warning(f"Discarding unusable catalog: {e}", catalog_source=source.value)
            return None

        if not normalized.devices:
            self.log.warning("Catalog contained no usable devices", catalog_source=source.value)
            return None

        return CatalogResult(
            devices=normalized.devices,
            source=source,
            loaded_at=self._clock() if loaded_at is None else loaded_at,
            stats=normalized.stats,
            error=error,
        )

    def _static(self, error: Optional[str]) -> CatalogResult:
        devices = default_devices()
        return CatalogResult(
            devices=devices,
            source=CatalogSource.STATIC,
            loaded_at=self._clock(),
            stats=ExtractionStats(total=len(devices)),
            error=error,
        )

    async def _download(self) -> Dict[str, Any]:
        async with self.fetcher as client:
            return await client.fetch_raw_catalog()

    async def _load(self, force_refresh: bool) -> CatalogResult:
        if not force_refresh:
            entry = self.cache.get()
            if entry is not None:
                # Age from when the data was stored, not when it was read back
                result = self._build(entry.raw, CatalogSource.CACHE, loaded_at=entry.stored_at)
                if result is not None:
                    self.log.info(
                        "Loaded catalog from cache",
                        catalog_source=result.source.value,
                        devices=len(result.devices),
                    )
                    return result

        error: Optional[str] = None
        try:
            raw = await self._download()
        except CatalogError as e:
            error = str(e)
            self.log.bind(url=self.fetcher.url).error(
                f"Catalog download failed: {e}",
                status_code=getattr(e, "status_code", None),
            )
        else:
            result = self._build(raw, CatalogSource.REMOTE)
            if result is not None:
                self.cache.set(raw)
                self.log.info(
                    "Downloaded catalog",
                    catalog_source=result.source.value,
                    url=self.fetcher.url,
                    **result.stats.to_dict(),
                )
                return result
            error = "Downloaded catalog contained no usable devices"

        entry = self.cache.get(allow_stale=True)
        if entry is not None:
            result = self._build(entry.raw, CatalogSource.STALE_CACHE, error=error)
            if result is not None:
                age_hours = (self._clock() - entry.stored_at) / 3600
                self.log.warning(
                    "Using cached catalog after failed download",
                    catalog_source=result.source.value,
                    age_hours=round(age_hours, 1),
                    devices=len(result.devices),
                )
                return result

        result = self._static(error)
        self.log.warning(
            "Using built-in GPU list",
            catalog_source=result.source.value,
            devices=len(result.devices),
        )
        return result

    async def load(self, force_refresh: bool = False) -> CatalogResult:
        """Load the catalog.

        Args:
            force_refresh: Skip the in-process result and fresh cache and
                attempt a download

        Returns:
            CatalogResult; never raises for network or parse failures
        """
        if not force_refresh and self._is_fresh(self._result):
            return self._result

        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            # Another caller may have finished a load while we waited
            if not force_refresh and self._is_fresh(self._result):
                return self._result

            result = await self._load(force_refresh)
            self._result = result
            return result

    def clear(self) -> None:
        """Drop the in-process result and the local cache."""
        self._result = None
        self.cache.clear()
