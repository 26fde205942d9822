"""Result sink protocol and the hooks bundle handed to the traversal."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

LogFunction = Callable[[str], None]


class ResultSink(Protocol):
    """Receives scan lifecycle events; must not influence traversal."""

    def before_scan(self) -> None:
        """Called once before the first directory is visited."""

    def on_match(self, display_path: str, product_version: str, file_version: str) -> None:
        """Called once per match, in discovery order."""

    def after_scan(self) -> None:
        """Called once after the last directory has been visited."""


def discard_log(message: str) -> None:
    """Default diagnostic log that drops every message."""


@dataclass(slots=True, frozen=True)
class ScanHooks:
    """Output callbacks built once from parsed options and passed to the scan."""

    sink: ResultSink
    log: LogFunction = field(default=discard_log)
    warn: LogFunction = field(default=discard_log)
