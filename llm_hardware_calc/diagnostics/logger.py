"""Structured logging for catalog acquisition.

Catalog loads can silently degrade (stale cache, built-in list), so each
event is kept as a LogEntry with machine-readable context as well as being
forwarded to the standard ``logging`` tree. Callers and tests can then ask
which source a load actually used.
"""

import json
import logging
import sys
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

DEFAULT_MAX_ENTRIES = 500


@dataclass
class LogEntry:
    """One structured event."""

    created: float
    level: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def timestamp(self) -> str:
        """ISO 8601 UTC timestamp."""
        return datetime.fromtimestamp(self.created, timezone.utc).isoformat()

    @property
    def catalog_source(self) -> Optional[str]:
        return self.context.get("catalog_source")

    def matches(self, **context: Any) -> bool:
        """True if every given key is present in the context with that value."""
        return all(self.context.get(k) == v for k, v in context.items())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level,
            "message": self.message,
            "context": dict(self.context),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class StructuredLogger:
    """Logger that records entries with context fields.

    Usage:
        log = StructuredLogger(component="catalog")
        log.info("Downloaded catalog", catalog_source="remote", total=812)
        log.warning("Using built-in GPU list", catalog_source="static")

        degraded = log.get_entries(level="warning")
        log.bind(url=url).error("Catalog download failed")

    Bound children share the parent's entry buffer.
    """

    def __init__(
        self,
        component: Optional[str] = None,
        logger_name: str = "llm_hardware_calc",
        output_json: bool = False,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        """Initialize structured logger.

        Args:
            component: Added to every entry's context
            logger_name: Standard logger entries are forwarded to
            output_json: Also echo each entry as a JSON line on stderr
            max_entries: Oldest entries are dropped beyond this many
        """
        self.output_json = output_json
        self._context: Dict[str, Any] = {"component": component} if component else {}
        self._entries: Deque[LogEntry] = deque(maxlen=max_entries)
        self._logger = logging.getLogger(logger_name)

    def bind(self, **context: Any) -> "StructuredLogger":
        """Child logger with extra context and a shared entry buffer."""
        child = StructuredLogger.__new__(StructuredLogger)
        child.output_json = self.output_json
        child._context = {**self._context, **context}
        child._entries = self._entries
        child._logger = self._logger
        return child

    def log(self, level: int, message: str, **context: Any) -> LogEntry:
        """Record an entry at a ``logging`` level and forward it."""
        merged = {**self._context, **context}
        entry = LogEntry(
            created=time.time(),
            level=logging.getLevelName(level).lower(),
            message=message,
            context=merged,
        )
        self._entries.append(entry)

        if context:
            fields = " ".join(f"{k}={v}" for k, v in context.items())
            self._logger.log(level, f"{message} | {fields}")
        else:
            self._logger.log(level, message)

        if self.output_json:
            print(entry.to_json(), file=sys.stderr)
        return entry

    def debug(self, message: str, **context: Any) -> LogEntry:
        return self.log(logging.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> LogEntry:
        return self.log(logging.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> LogEntry:
        return self.log(logging.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> LogEntry:
        return self.log(logging.ERROR, message, **context)

    def get_entries(self, level: Optional[str] = None, **context: Any) -> List[LogEntry]:
        """Recorded entries, oldest first, optionally filtered.

        Args:
            level: Only entries at this level ("info", "warning", ...)
            **context: Only entries whose context has these values
        """
        return [
            e
            for e in self._entries
            if (level is None or e.level == level) and e.matches(**context)
        ]

    def to_json(self) -> str:
        """All entries as a JSON array."""
        return json.dumps([e.to_dict() for e in self._entries], indent=2, default=str)

    def clear(self) -> None:
        self._entries.clear()


def setup_logging(
    level: str = "INFO",
    debug_http: bool = False,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        debug_http: Show httpx/httpcore request logging for catalog downloads
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    http_level = logging.DEBUG if debug_http else logging.WARNING
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(http_level)
