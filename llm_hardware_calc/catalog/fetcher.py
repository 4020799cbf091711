"""HTTP client for the public GPU catalog.

The catalog is a single JSON document keyed by opaque IDs. Network failures
are retried with backoff; a payload that downloads but does not parse is not.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx

from llm_hardware_calc import __version__
from llm_hardware_calc.utils.errors import CatalogError, CatalogFetchError, CatalogParseError
from llm_hardware_calc.utils.retry import CATALOG_BACKOFF, BackoffPolicy, retry_with_backoff

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://raw.githubusercontent.com/voidful/gpu-info-api/gpu-data/gpu.json"

DEFAULT_TIMEOUT = 5.0
DEFAULT_MAX_ATTEMPTS = CATALOG_BACKOFF.max_attempts
DEFAULT_INITIAL_BACKOFF = CATALOG_BACKOFF.initial_interval


class CatalogClient:
    """Downloads the raw GPU catalog.

    Usage:
        async with CatalogClient() as client:
            raw = await client.fetch_raw_catalog()
    """

    def __init__(
        self,
        url: str = DEFAULT_CATALOG_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the catalog client.

        Args:
            url: Catalog JSON URL
            timeout: Per-request timeout in seconds
            max_attempts: Download attempts before giving up
            initial_backoff: Wait before the first retry, doubled each time
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.url = url
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.initial_backoff = initial_backoff
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "CatalogClient":
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
            follow_redirects=True,
            headers={
                "User-Agent": f"llm-hardware-calc/{__version__}",
                "Accept": "application/json",
            },
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        """Explicitly close the client (for non-context-manager usage)."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        return self._client

    async def _get(self) -> httpx.Response:
        try:
            # Overall deadline; httpx.Timeout only bounds each connect/read step
            response = await asyncio.wait_for(self.client.get(self.url), self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise CatalogFetchError(
                f"Request timeout after {self.timeout}s: {self.url}", url=self.url
            ) from e
        except httpx.ConnectError as e:
            raise CatalogFetchError(f"Connection failed: {self.url}", url=self.url) from e
        except httpx.RequestError as e:
            raise CatalogFetchError(f"Request error: {e}", url=self.url) from e
        except httpx.InvalidURL as e:
            # Malformed URL, not retried
            raise CatalogError(f"Invalid catalog URL {self.url!r}: {e}", url=self.url) from e

        if response.status_code != 200:
            raise CatalogFetchError(
                f"Catalog download failed with HTTP {response.status_code}",
                url=self.url,
                status_code=response.status_code,
            )
        return response

    def _on_retry(self, error: Exception, attempt: int, wait: float) -> None:
        logger.warning(
            f"Catalog download attempt {attempt}/{self.max_attempts} failed: {error}. "
            f"Retrying in {wait:.1f}s"
        )

    async def fetch_raw_catalog(self) -> Dict[str, Any]:
        """Download and decode the catalog.

        Returns:
            The raw catalog mapping (ID -> record)

        Raises:
            CatalogFetchError: If every attempt failed
            CatalogParseError: If the payload is not a JSON object
            CatalogError: If the URL is malformed
        """
        response = await retry_with_backoff(
            self._get,
            BackoffPolicy(max_attempts=self.max_attempts, initial_interval=self.initial_backoff),
            retryable_exceptions=(CatalogFetchError,),
            on_retry=self._on_retry,
        )

        try:
            data = json.loads(response.content)
        except ValueError as e:
            raise CatalogParseError(f"Catalog is not valid JSON: {e}", url=self.url) from e

        if not isinstance(data, dict):
            raise CatalogParseError(
                f"Expected a JSON object, got {type(data).__name__}", url=self.url
            )

        logger.info(f"Downloaded catalog with {len(data)} records from {self.url}")
        return data
