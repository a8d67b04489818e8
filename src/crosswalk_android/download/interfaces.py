"""
Core Interfaces for the Crosswalk Release Subsystem

This module defines the interfaces and data structures shared by the release
index, the version resolver, the archive importer, and the update orchestrator.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from crosswalk_android.constants import CHANNELS
from crosswalk_android.exceptions import VersionTooNewWarning

Pathish = Union[str, Path]


def is_channel(name: Optional[str]) -> bool:
    """Return True if `name` is one of the known release channels."""
    return name in CHANNELS


def next_channel(channel: str) -> Optional[str]:
    """
    Return the channel after `channel` in priority order.

    Returns:
        The next channel name, or None when `channel` is the last one.

    Raises:
        ValueError: If `channel` is not a known channel.
    """
    index = CHANNELS.index(channel)
    if index + 1 < len(CHANNELS):
        return CHANNELS[index + 1]
    return None


@dataclass(frozen=True)
class ResolvedRelease:
    """A release version located on the server."""

    version: str
    """The version string, e.g. '14.43.343.17'"""

    channel: str
    """The channel the version was found in"""


@dataclass
class ImportResult:
    """Outcome of importing a Crosswalk release into a project tree."""

    source: Path
    """Archive file or release directory that was imported"""

    project_path: Path
    """Project the release was imported into"""

    version: Optional[str] = None
    """Release version derived from the archive name (None for directory imports)"""

    major: Optional[int] = None
    """Major version number (None for directory imports)"""

    extracted: List[Path] = field(default_factory=list)
    """Project paths that were written, in extraction order"""

    warnings: List[VersionTooNewWarning] = field(default_factory=list)
    """Non-fatal compatibility warnings emitted during the import"""


class ReleaseIndex(ABC):
    """
    Abstract source of published release versions, one set per channel.
    """

    @abstractmethod
    def fetch_versions(self, channel: str) -> List[str]:
        """
        Retrieve the versions published in a channel.

        Parameters:
            channel (str): Release channel name.

        Returns:
            List[str]: Version strings; order is not significant.

        Raises:
            ChannelNotFoundError: If the channel has no published data.
            NetworkError: On transport failures.
        """

    @abstractmethod
    def pick_latest(self, versions: List[str]) -> Optional[str]:
        """
        Return the highest version by the version ordering rule, or None for an empty list.
        """

    @abstractmethod
    def find_locally(
        self, version: str, search_dirs: Iterable[Pathish]
    ) -> Optional[str]:
        """
        Return the path of an archive of `version` already on disk, or None.

        The first of `search_dirs` holding the archive wins.
        """

    @abstractmethod
    def download(self, version: str, channel: str, dest_dir: Pathish) -> str:
        """
        Fetch the archive of `version` from `channel` into `dest_dir`.

        Returns:
            str: Path of the archive on disk.

        Raises:
            NetworkError: If the archive cannot be obtained.
        """
