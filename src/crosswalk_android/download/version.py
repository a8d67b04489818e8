"""
Version Management for the Crosswalk Release Subsystem

This module provides version parsing and comparison, latest-version selection,
and release archive name parsing used by the resolver and the importer.
"""

import os
import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, List, Optional, Tuple, Union

from packaging.version import InvalidVersion, Version
from packaging.version import parse as parse_version

from crosswalk_android.constants import ARCHIVE_PREFIX, ZIP_EXTENSION
from crosswalk_android.exceptions import MalformedArchiveNameError


@dataclass(frozen=True)
class ArchiveName:
    """Fields derived from a release archive file name."""

    file_name: str
    """Archive file name, e.g. 'crosswalk-14.43.343.17.zip'"""

    root_entry: str
    """Root entry inside the archive, e.g. 'crosswalk-14.43.343.17/'"""

    version: str
    """Dot-separated version token, e.g. '14.43.343.17'"""

    major: int
    """Major version number, e.g. 14"""


class VersionManager:
    """
    Parses, compares and orders Crosswalk release versions.

    Versions are dotted numeric strings such as '14.43.343.17'. Comparison uses
    PEP 440 semantics via packaging when both sides parse, with a natural-sort
    fallback for anything else.
    """

    VERSION_BASE_RX = re.compile(r"^(\d+(?:\.\d+)*)")

    def normalize_version(self, version: Optional[str]) -> Optional[Version]:
        """
        Parse a version string into a packaging Version.

        A leading "v" is stripped. Returns None for empty, missing or unparsable input.
        """
        if version is None:
            return None

        trimmed = version.strip()
        if not trimmed:
            return None

        if trimmed.lower().startswith("v"):
            trimmed = trimmed[1:]

        try:
            return parse_version(trimmed)
        except InvalidVersion:
            return None

    def get_release_tuple(self, version: Optional[str]) -> Optional[Tuple[int, ...]]:
        """
        Return the leading numeric components of a version string.

        Returns:
            Tuple of integers such as (14, 43, 343, 17), or None if the string does
            not start with a number.
        """
        if version is None:
            return None

        match = self.VERSION_BASE_RX.match(version.strip())
        if not match:
            return None
        return tuple(int(part) for part in match.group(1).split("."))

    def get_major_version(self, version: Optional[str]) -> Optional[int]:
        """Return the first numeric component of a version, or None."""
        release = self.get_release_tuple(version)
        return release[0] if release else None

    def compare_versions(self, version1: str, version2: str) -> int:
        """
        Compare two version strings.

        Returns:
            int: 1 if version1 > version2, 0 if equal, -1 if version1 < version2
        """
        v1 = self.normalize_version(version1)
        v2 = self.normalize_version(version2)
        if v1 is not None and v2 is not None:
            if v1 > v2:
                return 1
            elif v1 < v2:
                return -1
            else:
                return 0

        # Natural comparison fallback for non-standard versions
        def _nat_key(s: str) -> List[Tuple[int, Union[int, str]]]:
            parts = re.findall(r"\d+|[A-Za-z]+", s.lower())
            return [(1, int(p)) if p.isdigit() else (0, p) for p in parts]

        k1, k2 = _nat_key(version1), _nat_key(version2)

        if k1 > k2:
            return 1
        elif k1 < k2:
            return -1
        return 0

    def sort_versions(self, versions: Iterable[str]) -> List[str]:
        """Return versions sorted ascending by the version ordering rule."""
        return sorted(versions, key=cmp_to_key(self.compare_versions))

    def pick_latest(self, versions: Iterable[str]) -> Optional[str]:
        """
        Return the highest version, or None if `versions` is empty.
        """
        ordered = self.sort_versions(versions)
        return ordered[-1] if ordered else None

    def archive_file_name(self, version: str) -> str:
        """Return the release archive file name for a version."""
        return f"{ARCHIVE_PREFIX}-{version}{ZIP_EXTENSION}"

    def parse_archive_name(self, archive_path: str) -> ArchiveName:
        """
        Derive root entry, version and major version from a release archive path.

        The file name has the form `<prefix>-<major>.<minor>...[-<suffix>].zip`. The
        root entry is the file name without the extension plus a trailing slash; the
        version is the token after the first hyphen.

        Raises:
            MalformedArchiveNameError: If the name has no `.zip` extension, no version
                token, or a non-numeric major version.
        """
        file_name = os.path.basename(os.fspath(archive_path))
        if not file_name.lower().endswith(ZIP_EXTENSION):
            raise MalformedArchiveNameError(
                f"Not a release archive: {file_name}", archive_path=str(archive_path)
            )

        base = file_name[: -len(ZIP_EXTENSION)]
        parts = base.split("-")
        if len(parts) < 2 or not parts[1]:
            raise MalformedArchiveNameError(
                f"Cannot derive version from archive name {file_name}",
                archive_path=str(archive_path),
            )

        version = parts[1]
        major = self.get_major_version(version)
        if major is None:
            raise MalformedArchiveNameError(
                f"Cannot derive major version from archive name {file_name}",
                archive_path=str(archive_path),
            )

        return ArchiveName(
            file_name=file_name,
            root_entry=f"{base}/",
            version=version,
            major=major,
        )
