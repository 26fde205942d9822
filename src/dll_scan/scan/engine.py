"""Breadth-first traversal that finds target binaries and reports their versions."""

from __future__ import annotations

import os
import time
from collections import deque
from dataclasses import asdict
from pathlib import Path

from dll_scan.config import ScanConfig
from dll_scan.errors import DirectoryReadError, ErrorPolicy, ScanError
from dll_scan.logging import (
    ERROR_SKIPPED,
    MATCH,
    SCAN_COMPLETED,
    SCAN_FAILED,
    SCAN_STARTED,
    JsonlAuditLogger,
    build_event,
)
from dll_scan.scan.archive import inspect_archive
from dll_scan.scan.models import FileCandidate, ScanSummary, ScanTarget, VersionRecord
from dll_scan.sinks.base import ScanHooks
from dll_scan.version import VersionReader, read_version_info

_PSEUDO_ENTRIES = frozenset({".", ".."})

DirectoryIdentity = tuple[int, int]


class TreeScanner:
    """Single-use breadth-first scanner over one starting directory."""

    def __init__(
        self,
        start: str | Path,
        config: ScanConfig,
        hooks: ScanHooks,
        *,
        read_version: VersionReader = read_version_info,
        audit: JsonlAuditLogger | None = None,
    ) -> None:
        self._start = os.path.abspath(start)
        self._config = config
        self._target = ScanTarget(config.target)
        self._hooks = hooks
        self._read_version = read_version
        self._audit = audit
        self._queue: deque[str] = deque()
        self._seen: set[DirectoryIdentity] = set()
        self._summary = ScanSummary()

    def run(self) -> ScanSummary:
        """Walk the tree, invoking the sink hooks at their fixed points."""
        started = time.perf_counter()
        self._record(SCAN_STARTED, path=self._start, metadata={"target": self._target.filename})
        self._hooks.sink.before_scan()
        try:
            self._enqueue(self._start)
            while self._queue:
                self._visit(self._queue.popleft())
        except ScanError as error:
            self._record(
                SCAN_FAILED,
                path=error.path,
                ok=False,
                error_code=error.code,
                metadata={"reason": error.reason},
            )
            raise
        self._summary.total_seconds = time.perf_counter() - started
        self._hooks.sink.after_scan()
        self._record(SCAN_COMPLETED, path=self._start, metadata=asdict(self._summary))
        return self._summary

    def _enqueue(self, directory: str) -> None:
        try:
            stat = os.stat(directory)
        except OSError as exc:
            self._handle_error(
                DirectoryReadError(
                    reason=f"Cannot stat directory: {exc.strerror or exc}",
                    code="DIRECTORY_UNREADABLE",
                    path=directory,
                )
            )
            return
        identity = (stat.st_dev, stat.st_ino)
        if identity in self._seen:
            self._summary.directories_revisited += 1
            self._hooks.log(f"Skipping already visited {directory}")
            return
        self._seen.add(identity)
        self._queue.append(directory)

    def _visit(self, directory: str) -> None:
        self._hooks.log(f"Checking {directory}...")
        try:
            files, subdirectories = self._list_directory(directory)
        except DirectoryReadError as error:
            self._handle_error(error)
            return
        self._summary.directories_visited += 1
        for candidate in files:
            self._inspect_file(candidate)
        for subdirectory in subdirectories:
            self._enqueue(subdirectory)

    def _list_directory(self, directory: str) -> tuple[list[FileCandidate], list[str]]:
        follow = self._config.follow_symlinks
        files: list[FileCandidate] = []
        subdirectories: list[str] = []
        try:
            with os.scandir(directory) as entries:
                ordered_entries = sorted(entries, key=lambda item: item.name)
            for entry in ordered_entries:
                if entry.name in _PSEUDO_ENTRIES:
                    continue
                if entry.is_dir(follow_symlinks=follow):
                    subdirectories.append(os.path.join(directory, entry.name))
                elif entry.is_file(follow_symlinks=follow):
                    files.append(
                        FileCandidate(full_path=os.path.join(directory, entry.name), name=entry.name)
                    )
        except OSError as exc:
            raise DirectoryReadError(
                reason=f"Cannot list directory: {exc.strerror or exc}",
                code="DIRECTORY_UNREADABLE",
                path=directory,
            ) from exc
        return files, subdirectories

    def _inspect_file(self, candidate: FileCandidate) -> None:
        self._summary.files_inspected += 1
        if self._target.matches_file(candidate.name):
            try:
                version = self._read_version(candidate.full_path)
            except ScanError as error:
                self._handle_error(error)
            else:
                self._emit(
                    VersionRecord(
                        display_path=candidate.full_path,
                        product_version=version.product_version,
                        file_version=version.file_version,
                    )
                )
        if candidate.is_zip:
            self._summary.archives_inspected += 1
            try:
                inspect_archive(
                    candidate.full_path,
                    self._target,
                    self._emit,
                    log=self._hooks.log,
                    read_version=self._read_version,
                    temp_dir=self._config.temp_dir,
                    on_entry_error=self._handle_error,
                )
            except ScanError as error:
                self._handle_error(error)

    def _emit(self, record: VersionRecord) -> None:
        self._summary.matches += 1
        self._hooks.sink.on_match(record.display_path, record.product_version, record.file_version)
        self._record(
            MATCH,
            path=record.display_path,
            metadata={
                "product_version": record.product_version,
                "file_version": record.file_version,
            },
        )

    def _handle_error(self, error: ScanError) -> None:
        if self._config.on_error is ErrorPolicy.ABORT:
            raise error
        self._summary.errors_skipped += 1
        self._hooks.log(f"Skipping {error.path}: {error.reason} [{error.code}]")
        self._hooks.warn(f"Skipped ({error.code}): {error}")
        self._record(
            ERROR_SKIPPED,
            path=error.path,
            ok=False,
            error_code=error.code,
            metadata={"reason": error.reason},
        )

    def _record(
        self,
        event: str,
        *,
        path: str | None,
        ok: bool = True,
        error_code: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> None:
        if self._audit is None:
            return
        self._audit.append(
            build_event(event, path=path, ok=ok, error_code=error_code, metadata=metadata)
        )


def scan_tree(
    start: str | Path,
    config: ScanConfig,
    hooks: ScanHooks,
    *,
    read_version: VersionReader = read_version_info,
    audit: JsonlAuditLogger | None = None,
) -> ScanSummary:
    """Scan ``start`` breadth-first and report each match through ``hooks``."""
    scanner = TreeScanner(start, config, hooks, read_version=read_version, audit=audit)
    return scanner.run()
