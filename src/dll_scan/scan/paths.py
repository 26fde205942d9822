"""Display-path helpers for filesystem and archive matches."""

from __future__ import annotations

import os
import re
from typing import Final

_SEPARATOR_PATTERN: Final[re.Pattern[str]] = re.compile(r"[\\/]")


def normalize_separators(entry_name: str, sep: str = os.sep) -> str:
    """Rewrite both slash styles in an archive entry path to ``sep``."""
    return _SEPARATOR_PATTERN.sub(lambda _match: sep, entry_name)


def archive_display_path(archive_path: str, entry_name: str, sep: str = os.sep) -> str:
    """Join an archive's path and an entry's internal path for reporting."""
    return f"{archive_path}{sep}{normalize_separators(entry_name, sep)}"
