"""Structured logging utilities."""

from .audit import (
    ERROR_SKIPPED,
    MATCH,
    SCAN_COMPLETED,
    SCAN_FAILED,
    SCAN_STARTED,
    AuditEvent,
    JsonlAuditLogger,
    build_event,
    utc_timestamp,
)

__all__ = [
    "AuditEvent",
    "ERROR_SKIPPED",
    "JsonlAuditLogger",
    "MATCH",
    "SCAN_COMPLETED",
    "SCAN_FAILED",
    "SCAN_STARTED",
    "build_event",
    "utc_timestamp",
]
