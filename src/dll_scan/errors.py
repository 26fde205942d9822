"""Error taxonomy and failure policy for scans."""

from __future__ import annotations

from enum import Enum


class ErrorPolicy(str, Enum):
    """How the traversal reacts to a failed directory, archive or binary."""

    ABORT = "abort"
    SKIP = "skip"


class DllScanError(Exception):
    """Failure reported to the user with a reason and a machine code."""

    def __init__(self, reason: str, code: str, path: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.code = code
        self.path = path

    def __str__(self) -> str:
        if self.path is None:
            return self.reason
        return f"{self.reason} ({self.path})"


class ScanError(DllScanError):
    """Raised when one scan step cannot complete; subject to the error policy."""


class DirectoryReadError(ScanError):
    """Raised when a directory cannot be listed."""


class ArchiveReadError(ScanError):
    """Raised when a zip archive or one of its entries cannot be read or unpacked."""


class VersionReadError(ScanError):
    """Raised when a binary cannot be opened or parsed as a PE image."""


class AuditLogError(DllScanError):
    """Raised when the audit log cannot be created or appended to."""


class ConfigError(ValueError):
    """Raised when configuration values are missing or malformed."""
