"""Stream-backed sinks for CSV and verbose console output."""

from __future__ import annotations

from typing import TextIO

from .base import LogFunction, ScanHooks, discard_log

CSV_HEADER = "Path,ProductVersion,FileVersion"


class CsvSink:
    """Writes a header then one quoted line per match.

    Field values are written verbatim; embedded quotes and commas are not
    escaped.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def before_scan(self) -> None:
        self._stream.write(f"{CSV_HEADER}\n")

    def on_match(self, display_path: str, product_version: str, file_version: str) -> None:
        self._stream.write(f'"{display_path}","{product_version}","{file_version}"\n')

    def after_scan(self) -> None:
        self._stream.flush()


class VerboseSink:
    """Writes plain diagnostic lines; no header and no completion output."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def before_scan(self) -> None:
        pass

    def on_match(self, display_path: str, product_version: str, file_version: str) -> None:
        self._stream.write(
            f"File: {display_path}, Version: {product_version}, File version: {file_version}\n"
        )

    def after_scan(self) -> None:
        pass

    def log(self, message: str) -> None:
        self._stream.write(f"{message}\n")


def line_writer(stream: TextIO) -> LogFunction:
    """Return a log function that writes each message as one line."""

    def write(message: str) -> None:
        stream.write(f"{message}\n")

    return write


def build_console_hooks(
    stream: TextIO, verbose: bool = False, warn_stream: TextIO | None = None
) -> ScanHooks:
    """Select CSV or verbose output for a stream.

    Skipped failures are written to ``warn_stream`` in either mode.
    """
    warn = line_writer(warn_stream) if warn_stream is not None else discard_log
    if verbose:
        sink = VerboseSink(stream)
        return ScanHooks(sink=sink, log=sink.log, warn=warn)
    return ScanHooks(sink=CsvSink(stream), warn=warn)
