"""Tests for structured logging."""

import json
import logging

from llm_hardware_calc.diagnostics import StructuredLogger, setup_logging


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_entries_recorded(self):
        """Every call leaves an entry."""
        log = StructuredLogger()
        log.info("first")
        log.warning("second")

        entries = log.get_entries()
        assert [e.message for e in entries] == ["first", "second"]
        assert [e.level for e in entries] == ["info", "warning"]
        assert entries[0].timestamp.endswith("+00:00")

    def test_component_in_context(self):
        """The component is added to every entry."""
        log = StructuredLogger(component="catalog")
        entry = log.error("Download failed", url="https://example.com", status_code=502)
        assert entry.context == {
            "component": "catalog",
            "url": "https://example.com",
            "status_code": 502,
        }

    def test_bind(self):
        """Bound loggers add context and share the buffer."""
        log = StructuredLogger(component="catalog")
        child = log.bind(url="https://example.com")
        child.error("Download failed", status_code=500)
        log.info("unrelated")

        entries = log.get_entries()
        assert len(entries) == 2
        assert entries[0].context["url"] == "https://example.com"
        assert "url" not in entries[1].context
        assert len(child.get_entries()) == 2

    def test_filters(self):
        """Entries can be filtered by level and context."""
        log = StructuredLogger(component="catalog")
        log.info("Downloaded catalog", catalog_source="remote")
        log.warning("Using built-in GPU list", catalog_source="static")
        log.warning("Catalog contained no usable devices", catalog_source="remote")

        assert [e.message for e in log.get_entries(level="warning", catalog_source="static")] == [
            "Using built-in GPU list"
        ]
        assert len(log.get_entries(catalog_source="remote")) == 2
        assert log.get_entries()[1].catalog_source == "static"

    def test_bounded_buffer(self):
        """Oldest entries are dropped past max_entries."""
        log = StructuredLogger(max_entries=2)
        for i in range(3):
            log.debug(f"entry {i}")
        assert [e.message for e in log.get_entries()] == ["entry 1", "entry 2"]

    def test_forwards_to_python_logging(self, caplog):
        """Entries reach the standard logger with key=value fields."""
        log = StructuredLogger(component="catalog")
        with caplog.at_level(logging.INFO, logger="llm_hardware_calc"):
            log.info("Catalog loaded", catalog_source="remote")
        assert "Catalog loaded | catalog_source=remote" in caplog.text

    def test_json(self):
        """Entries serialize to JSON."""
        log = StructuredLogger(component="catalog")
        log.debug("one", devices=3)
        data = json.loads(log.to_json())
        assert data[0]["message"] == "one"
        assert data[0]["context"]["devices"] == 3

    def test_output_json_to_stderr(self, capsys):
        """output_json echoes each entry to stderr."""
        log = StructuredLogger(output_json=True)
        log.info("hello")
        line = capsys.readouterr().err.strip()
        assert json.loads(line)["message"] == "hello"

    def test_clear(self):
        """clear() drops all entries."""
        log = StructuredLogger()
        log.info("x")
        log.clear()
        assert log.get_entries() == []


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_quiet_http_by_default(self):
        """httpx chatter is suppressed unless requested."""
        setup_logging("WARNING")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_debug_http(self):
        """debug_http turns on transport logging."""
        setup_logging("DEBUG", debug_http=True)
        assert logging.getLogger("httpx").level == logging.DEBUG
        setup_logging("WARNING")
