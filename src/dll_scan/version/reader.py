"""Read product and file version strings from PE version resources."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pefile

from dll_scan.errors import VersionReadError

PRODUCT_VERSION_KEY = "ProductVersion"
FILE_VERSION_KEY = "FileVersion"

_RESOURCE_DIRECTORY = pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_RESOURCE"]


@dataclass(slots=True, frozen=True)
class VersionInfo:
    """Version strings found in a binary; empty when the resource is absent."""

    product_version: str = ""
    file_version: str = ""


VersionReader = Callable[[str], VersionInfo]


def read_version_info(path: str | Path) -> VersionInfo:
    """Parse ``path`` as a PE image and return its version strings.

    Only the resource data directory is loaded. A valid image without a
    version resource yields empty strings; a file that cannot be opened or
    is not a PE image raises :class:`VersionReadError`.
    """
    location = str(path)
    try:
        with open(location, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise VersionReadError(
            reason=f"Cannot open binary: {exc.strerror or exc}",
            code="BINARY_UNREADABLE",
            path=location,
        ) from exc
    try:
        pe = pefile.PE(data=data, fast_load=True)
    except pefile.PEFormatError as exc:
        raise VersionReadError(
            reason=f"Not a PE image: {exc.value}",
            code="NOT_A_PE_IMAGE",
            path=location,
        ) from exc
    try:
        pe.parse_data_directories(directories=[_RESOURCE_DIRECTORY])
        strings = version_strings(pe)
    finally:
        pe.close()
    return VersionInfo(
        product_version=strings.get(PRODUCT_VERSION_KEY, ""),
        file_version=strings.get(FILE_VERSION_KEY, ""),
    )


def version_strings(pe: pefile.PE) -> dict[str, str]:
    """Flatten all StringFileInfo tables; the first table defining a key wins."""
    output: dict[str, str] = {}
    for file_info in getattr(pe, "FileInfo", []):
        for structure in file_info:
            for table in getattr(structure, "StringTable", []):
                for raw_key, raw_value in table.entries.items():
                    key = _text(raw_key)
                    if key not in output:
                        output[key] = _text(raw_value)
    return output


def _text(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return value
