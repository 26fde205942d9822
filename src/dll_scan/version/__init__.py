"""Embedded version metadata extraction."""

from .reader import VersionInfo, VersionReader, read_version_info, version_strings

__all__ = ["VersionInfo", "VersionReader", "read_version_info", "version_strings"]
