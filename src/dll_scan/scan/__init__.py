"""Directory traversal and zip inspection."""

from .archive import inspect_archive
from .engine import TreeScanner, scan_tree
from .models import (
    ZIP_EXTENSION,
    ArchiveEntryCandidate,
    FileCandidate,
    ScanSummary,
    ScanTarget,
    VersionRecord,
)
from .paths import archive_display_path, normalize_separators

__all__ = [
    "ArchiveEntryCandidate",
    "FileCandidate",
    "ScanSummary",
    "ScanTarget",
    "TreeScanner",
    "VersionRecord",
    "ZIP_EXTENSION",
    "archive_display_path",
    "inspect_archive",
    "normalize_separators",
    "scan_tree",
]
