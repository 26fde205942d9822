"""Structured JSONL audit log for scan runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from dll_scan.errors import AuditLogError

SCAN_STARTED = "scan_started"
MATCH = "match"
ERROR_SKIPPED = "error_skipped"
SCAN_COMPLETED = "scan_completed"
SCAN_FAILED = "scan_failed"


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Single scan lifecycle event."""

    timestamp: str
    event: str
    path: str | None
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_event(
    event: str,
    *,
    path: str | None = None,
    ok: bool = True,
    error_code: str | None = None,
    metadata: dict[str, object] | None = None,
) -> AuditEvent:
    """Stamp an event with the current time."""
    return AuditEvent(
        timestamp=utc_timestamp(),
        event=event,
        path=path,
        ok=ok,
        error_code=error_code,
        metadata=dict(metadata or {}),
    )


class JsonlAuditLogger:
    """Appends scan events to a JSONL file, one sorted-key object per line.

    Filesystem failures surface as :class:`AuditLogError`.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise AuditLogError(
                reason=f"Cannot create audit log directory: {exc.strerror or exc}",
                code="AUDIT_LOG_UNAVAILABLE",
                path=str(self._path),
            ) from exc

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        line = json.dumps(asdict(event), sort_keys=True)
        try:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(f"{line}\n")
        except OSError as exc:
            raise AuditLogError(
                reason=f"Cannot append to audit log: {exc.strerror or exc}",
                code="AUDIT_LOG_WRITE_FAILED",
                path=str(self._path),
            ) from exc
