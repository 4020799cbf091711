"""Structured logging helpers."""

from .logger import StructuredLogger, LogEntry, setup_logging

__all__ = [
    "StructuredLogger",
    "LogEntry",
    "setup_logging",
]
