"""Result sinks that receive scan output."""

from .base import LogFunction, ResultSink, ScanHooks, discard_log
from .console import CSV_HEADER, CsvSink, VerboseSink, build_console_hooks, line_writer
from .memory import CollectingSink

__all__ = [
    "CSV_HEADER",
    "CollectingSink",
    "CsvSink",
    "LogFunction",
    "ResultSink",
    "ScanHooks",
    "VerboseSink",
    "build_console_hooks",
    "discard_log",
    "line_writer",
]
