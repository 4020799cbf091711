"""Error hierarchy for the LLM Hardware Calculator.

Only input validation errors are meant to reach callers. Catalog errors are
raised by the fetch layer and recovered by the catalog service, which falls
back to cached or built-in data.
"""

from typing import Optional


class CalculatorError(Exception):
    """Base exception for all calculator errors."""

    pass


class InvalidModelConfigError(CalculatorError, ValueError):
    """Raised when estimator inputs violate their preconditions.

    Examples: non-positive parameter count, zero context length.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class CatalogError(CalculatorError):
    """Base exception for GPU catalog acquisition errors."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class CatalogFetchError(CatalogError):
    """Raised when the raw catalog cannot be downloaded.

    Covers timeouts, connection failures and non-200 responses.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, url)
        self.status_code = status_code


class CatalogParseError(CatalogError):
    """Raised when the catalog payload is not valid JSON or has the wrong shape."""

    pass
