"""In-memory sink for programmatic callers."""

from __future__ import annotations

from dataclasses import dataclass, field

from dll_scan.scan.models import VersionRecord


@dataclass(slots=True)
class CollectingSink:
    """Keeps every reported record and lifecycle call count."""

    records: list[VersionRecord] = field(default_factory=list)
    started: int = 0
    completed: int = 0

    def before_scan(self) -> None:
        self.started += 1

    def on_match(self, display_path: str, product_version: str, file_version: str) -> None:
        self.records.append(
            VersionRecord(
                display_path=display_path,
                product_version=product_version,
                file_version=file_version,
            )
        )

    def after_scan(self) -> None:
        self.completed += 1
