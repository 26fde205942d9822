"""Typed models for scan targets, candidates and results."""

from __future__ import annotations

import os
import zipfile
from dataclasses import dataclass

from dll_scan.errors import ConfigError

ZIP_EXTENSION = ".zip"

# Bit 0 of a zip entry's internal attributes marks it as text.
_ZIP_TEXT_ATTRIBUTE = 0x1


@dataclass(slots=True, frozen=True)
class ScanTarget:
    """Filename searched for on disk and inside archives."""

    filename: str

    def __post_init__(self) -> None:
        if not self.filename or not self.filename.strip():
            raise ConfigError("Scan target filename must be a non-empty string.")

    def matches_file(self, name: str) -> bool:
        """Return True when a filesystem file name equals the target exactly."""
        return name == self.filename

    def matches_entry(self, entry_name: str) -> bool:
        """Return True when an archive entry's internal path ends with the target."""
        return entry_name.endswith(self.filename)


@dataclass(slots=True, frozen=True)
class FileCandidate:
    """A file seen while listing one directory."""

    full_path: str
    name: str

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1].lower()

    @property
    def is_zip(self) -> bool:
        return self.extension == ZIP_EXTENSION


@dataclass(slots=True, frozen=True)
class ArchiveEntryCandidate:
    """An entry seen while enumerating one zip archive."""

    name: str
    is_dir: bool
    is_text: bool

    @classmethod
    def from_zip_info(cls, info: zipfile.ZipInfo) -> ArchiveEntryCandidate:
        return cls(
            name=info.filename,
            is_dir=info.is_dir(),
            is_text=bool(info.internal_attr & _ZIP_TEXT_ATTRIBUTE),
        )

    @property
    def inspectable(self) -> bool:
        """Directory and text entries are never considered for matches."""
        return not (self.is_dir or self.is_text)


@dataclass(slots=True, frozen=True)
class VersionRecord:
    """One reported match."""

    display_path: str
    product_version: str
    file_version: str


@dataclass(slots=True)
class ScanSummary:
    """Deterministic counters for one traversal."""

    directories_visited: int = 0
    directories_revisited: int = 0
    files_inspected: int = 0
    archives_inspected: int = 0
    matches: int = 0
    errors_skipped: int = 0
    total_seconds: float = 0.0
