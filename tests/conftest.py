"""Shared fixtures: minimal PE32 images and zip archives built on the fly."""

from __future__ import annotations

import struct
import zipfile
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

_FILE_ALIGNMENT = 0x200
_SECTION_ALIGNMENT = 0x1000
_RSRC_RVA = 0x1000
_RT_VERSION = 16
_LANG_EN_US = 0x409
_FIXED_FILE_INFO_SIGNATURE = 0xFEEF04BD
_SUBDIRECTORY_FLAG = 0x80000000
# Offsets inside .rsrc: three one-entry directories, one data entry, then VS_VERSIONINFO.
_NAME_DIRECTORY_OFFSET = 0x18
_LANG_DIRECTORY_OFFSET = 0x30
_DATA_ENTRY_OFFSET = 0x48
_VERSION_INFO_OFFSET = 0x58


def _utf16z(text: str) -> bytes:
    return (text + "\0").encode("utf-16-le")


def _pad4(data: bytes) -> bytes:
    return data + b"\0" * (-len(data) % 4)


def _align(value: int, alignment: int) -> int:
    return (value + alignment - 1) // alignment * alignment


def _version_block(
    key: str,
    value: bytes = b"",
    value_length: int = 0,
    value_type: int = 1,
    children: Iterable[bytes] = (),
) -> bytes:
    body = _pad4(struct.pack("<HHH", 0, value_length, value_type) + _utf16z(key)) + value
    children = tuple(children)
    if children:
        body = _pad4(body) + b"".join(_pad4(child) for child in children)
    return struct.pack("<H", len(body)) + body[2:]


def _version_info(strings: dict[str, str]) -> bytes:
    fixed = struct.pack(
        "<13I",
        _FIXED_FILE_INFO_SIGNATURE,
        0x00010000,
        *([0] * 11),
    )
    string_entries = [
        _version_block(key, value=_utf16z(value), value_length=len(value) + 1)
        for key, value in strings.items()
    ]
    table = _version_block("040904B0", children=string_entries)
    string_file_info = _version_block("StringFileInfo", children=[table])
    return _version_block(
        "VS_VERSION_INFO",
        value=fixed,
        value_length=len(fixed),
        value_type=0,
        children=[string_file_info],
    )


def _directory(entry_id: int, offset: int) -> bytes:
    return struct.pack("<IIHHHH", 0, 0, 0, 0, 0, 1) + struct.pack("<II", entry_id, offset)


def _resource_section(version_info: bytes) -> bytes:
    section = (
        _directory(_RT_VERSION, _SUBDIRECTORY_FLAG | _NAME_DIRECTORY_OFFSET)
        + _directory(1, _SUBDIRECTORY_FLAG | _LANG_DIRECTORY_OFFSET)
        + _directory(_LANG_EN_US, _DATA_ENTRY_OFFSET)
        + struct.pack("<IIII", _RSRC_RVA + _VERSION_INFO_OFFSET, len(version_info), 0, 0)
    )
    assert len(section) == _VERSION_INFO_OFFSET
    return section + version_info


def build_pe_image(strings: dict[str, str] | None) -> bytes:
    """Build a PE32 dll, with a version resource holding ``strings`` unless None."""
    if strings is None:
        rsrc = b"\0" * 16
    else:
        rsrc = _resource_section(_version_info(strings))
    raw_size = _align(len(rsrc), _FILE_ALIGNMENT)
    size_of_image = _RSRC_RVA + _align(len(rsrc), _SECTION_ALIGNMENT)

    dos_header = bytearray(0x40)
    dos_header[0:2] = b"MZ"
    struct.pack_into("<I", dos_header, 0x3C, 0x40)
    file_header = struct.pack("<HHIIIHH", 0x14C, 1, 0, 0, 0, 224, 0x2102)
    optional_header = struct.pack(
        "<HBB9I6H4I2H6I",
        0x10B,
        14,
        0,
        0,
        raw_size,
        0,
        0,
        0,
        0,
        0x10000000,
        _SECTION_ALIGNMENT,
        _FILE_ALIGNMENT,
        6,
        0,
        0,
        0,
        6,
        0,
        0,
        size_of_image,
        _FILE_ALIGNMENT,
        0,
        2,
        0,
        0x100000,
        0x1000,
        0x100000,
        0x1000,
        0,
        16,
    )
    data_directories = [(0, 0)] * 16
    if strings is not None:
        data_directories[2] = (_RSRC_RVA, len(rsrc))
    optional_header += b"".join(struct.pack("<II", *entry) for entry in data_directories)
    section_header = struct.pack(
        "<8sIIIIIIHHI",
        b".rsrc",
        len(rsrc),
        _RSRC_RVA,
        raw_size,
        _FILE_ALIGNMENT,
        0,
        0,
        0,
        0,
        0x40000040,
    )
    headers = bytes(dos_header) + b"PE\0\0" + file_header + optional_header + section_header
    return headers.ljust(_FILE_ALIGNMENT, b"\0") + rsrc.ljust(raw_size, b"\0")


@pytest.fixture
def make_dll() -> Callable[..., bytes]:
    """Return a factory for dll bytes; pass ``versioned=False`` to omit the resource."""

    def factory(
        product_version: str = "1.2.3.4",
        file_version: str = "1.2.3.4",
        versioned: bool = True,
    ) -> bytes:
        if not versioned:
            return build_pe_image(None)
        return build_pe_image({"FileVersion": file_version, "ProductVersion": product_version})

    return factory


@pytest.fixture
def write_zip() -> Callable[..., Path]:
    """Return a helper that writes a zip; names listed in ``text`` get the text flag."""

    def factory(
        path: Path,
        entries: dict[str, bytes],
        text: Iterable[str] = (),
    ) -> Path:
        text_names = set(text)
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, payload in entries.items():
                info = zipfile.ZipInfo(name, date_time=(2024, 1, 1, 0, 0, 0))
                info.compress_type = zipfile.ZIP_DEFLATED
                if name in text_names:
                    info.internal_attr = 1
                if name.endswith("/"):
                    info.external_attr = 0o40755 << 16 | 0x10
                archive.writestr(info, payload)
        return path

    return factory
