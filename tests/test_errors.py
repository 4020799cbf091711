"""Tests for error hierarchy."""

import pytest
from llm_hardware_calc.utils.errors import (
    CalculatorError,
    CatalogError,
    CatalogFetchError,
    CatalogParseError,
    InvalidModelConfigError,
)


class TestErrorHierarchy:
    """Tests for error class hierarchy."""

    def test_all_errors_inherit_from_base(self):
        """All errors should inherit from CalculatorError."""
        errors = [
            InvalidModelConfigError("test"),
            CatalogError("test"),
            CatalogFetchError("test"),
            CatalogParseError("test"),
        ]
        for error in errors:
            assert isinstance(error, CalculatorError)

    def test_catalog_errors_inherit_from_catalog_error(self):
        """Fetch and parse errors should inherit from CatalogError."""
        for error in (CatalogFetchError("test"), CatalogParseError("test")):
            assert isinstance(error, CatalogError)

    def test_invalid_config_is_value_error(self):
        """Validation errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            raise InvalidModelConfigError("bad input", field="context_length")


class TestInvalidModelConfigError:
    """Tests for InvalidModelConfigError."""

    def test_captures_field(self):
        """Should capture the offending field."""
        error = InvalidModelConfigError("must be positive", field="parameters_billions")
        assert error.field == "parameters_billions"
        assert str(error) == "must be positive"

    def test_field_optional(self):
        """Field defaults to None."""
        assert InvalidModelConfigError("bad").field is None


class TestCatalogFetchError:
    """Tests for CatalogFetchError."""

    def test_captures_url_and_status(self):
        """Should capture URL and HTTP status."""
        error = CatalogFetchError(
            "Catalog download failed with HTTP 503",
            url="https://example.com/gpu.json",
            status_code=503,
        )
        assert error.url == "https://example.com/gpu.json"
        assert error.status_code == 503
        assert "503" in str(error)

    def test_status_optional(self):
        """Network failures have no status code."""
        error = CatalogFetchError("Request timeout after 5.0s")
        assert error.status_code is None
        assert error.url is None


class TestCatalogParseError:
    """Tests for CatalogParseError."""

    def test_captures_url(self):
        """Should capture the catalog URL."""
        error = CatalogParseError("Catalog is not valid JSON", url="https://example.com/gpu.json")
        assert error.url == "https://example.com/gpu.json"
        assert not hasattr(error, "status_code")
