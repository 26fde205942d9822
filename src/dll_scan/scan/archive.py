"""Zip archive inspection for target binaries."""

from __future__ import annotations

import os
import tempfile
import zipfile
import zlib
from collections.abc import Callable
from pathlib import Path

from dll_scan.errors import ArchiveReadError, ScanError
from dll_scan.scan.models import ArchiveEntryCandidate, ScanTarget, VersionRecord
from dll_scan.scan.paths import archive_display_path
from dll_scan.sinks.base import LogFunction, discard_log
from dll_scan.version import VersionInfo, VersionReader, read_version_info

_ENTRY_READ_ERRORS = (zipfile.BadZipFile, OSError, RuntimeError, NotImplementedError, zlib.error)


def _raise(error: ScanError) -> None:
    raise error


def inspect_archive(
    archive_path: str,
    target: ScanTarget,
    emit: Callable[[VersionRecord], None],
    *,
    log: LogFunction = discard_log,
    read_version: VersionReader = read_version_info,
    temp_dir: Path | None = None,
    on_entry_error: Callable[[ScanError], None] = _raise,
) -> int:
    """Report every matching entry of one zip archive through ``emit``.

    Entries match when their internal path ends with the target filename.
    Each match is unpacked to a temporary file that is removed before the
    next entry is considered. Errors opening the archive always raise;
    per-entry failures go to ``on_entry_error``, which raises by default.
    Returns the number of records emitted.
    """
    log(f"Found zip file {archive_path}")
    try:
        archive = zipfile.ZipFile(archive_path)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ArchiveReadError(
            reason=f"Zip is corrupted or unreadable: {exc}",
            code="ARCHIVE_UNREADABLE",
            path=archive_path,
        ) from exc

    emitted = 0
    with archive:
        for info in archive.infolist():
            entry = ArchiveEntryCandidate.from_zip_info(info)
            if not entry.inspectable or not target.matches_entry(entry.name):
                continue
            log(f"Found match at {entry.name}")
            display_path = archive_display_path(archive_path, entry.name)
            try:
                version = _read_entry_version(
                    archive, info, display_path, log, read_version, temp_dir
                )
            except ScanError as error:
                on_entry_error(error)
                continue
            emit(
                VersionRecord(
                    display_path=display_path,
                    product_version=version.product_version,
                    file_version=version.file_version,
                )
            )
            emitted += 1
    return emitted


def _read_entry_version(
    archive: zipfile.ZipFile,
    info: zipfile.ZipInfo,
    display_path: str,
    log: LogFunction,
    read_version: VersionReader,
    temp_dir: Path | None,
) -> VersionInfo:
    try:
        payload = archive.read(info)
    except _ENTRY_READ_ERRORS as exc:
        raise ArchiveReadError(
            reason=f"Cannot unpack archive entry: {exc}",
            code="ENTRY_UNREADABLE",
            path=display_path,
        ) from exc

    temp_path = _write_temp_file(payload, display_path, temp_dir)
    del payload
    log(f"Unpacked to {temp_path}")
    try:
        version = read_version(temp_path)
    except BaseException as exc:
        try:
            _remove_temp_file(temp_path, display_path)
        except ArchiveReadError as cleanup_error:
            exc.add_note(str(cleanup_error))
        raise
    _remove_temp_file(temp_path, display_path)
    return version


def _write_temp_file(payload: bytes, display_path: str, temp_dir: Path | None) -> str:
    try:
        handle, temp_path = tempfile.mkstemp(
            prefix="dll_scan_", suffix=".bin", dir=str(temp_dir) if temp_dir else None
        )
    except OSError as exc:
        raise ArchiveReadError(
            reason=f"Cannot create temporary file: {exc}",
            code="TEMP_FILE_WRITE_FAILED",
            path=display_path,
        ) from exc
    try:
        with os.fdopen(handle, "wb") as stream:
            stream.write(payload)
    except OSError as exc:
        error = ArchiveReadError(
            reason=f"Cannot write temporary file: {exc}",
            code="TEMP_FILE_WRITE_FAILED",
            path=display_path,
        )
        try:
            _remove_temp_file(temp_path, display_path)
        except ArchiveReadError as cleanup_error:
            error.add_note(str(cleanup_error))
        raise error from exc
    return temp_path


def _remove_temp_file(temp_path: str, display_path: str) -> None:
    try:
        os.unlink(temp_path)
    except OSError as exc:
        raise ArchiveReadError(
            reason=f"Cannot remove temporary file {temp_path}: {exc.strerror or exc}",
            code="TEMP_FILE_REMOVE_FAILED",
            path=display_path,
        ) from exc
