"""Utility modules for the LLM Hardware Calculator."""

from .errors import (
    CalculatorError,
    InvalidModelConfigError,
    CatalogError,
    CatalogFetchError,
    CatalogParseError,
)
from .retry import CATALOG_BACKOFF, BackoffPolicy, retry_with_backoff

__all__ = [
    "CalculatorError",
    "InvalidModelConfigError",
    "CatalogError",
    "CatalogFetchError",
    "CatalogParseError",
    "BackoffPolicy",
    "CATALOG_BACKOFF",
    "retry_with_backoff",
]
