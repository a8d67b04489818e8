"""
HTTP Release Index

This module reads the per-channel directory listing published by the Crosswalk
release server and turns it into version lists. It also knows where a version's
archive lives, both on the server and in local download directories.
"""

import os
import re
from typing import Iterable, List, Optional

import requests  # type: ignore[import-untyped]

from crosswalk_android.constants import (
    RELEASE_INDEX_TIMEOUT,
    RELEASE_SERVER_URL,
    VERSION_DIR_PATTERN,
)
from crosswalk_android.exceptions import ChannelNotFoundError, NetworkError
from crosswalk_android.log_utils import logger
from crosswalk_android.utils import create_retry_session, download_archive

from .interfaces import Pathish, ReleaseIndex
from .version import VersionManager


class HttpReleaseIndex(ReleaseIndex):
    """
    Release index backed by the release server's HTML directory listings.

    Layout on the server:
        <server_url>/<channel>/                        index page with version links
        <server_url>/<channel>/<version>/<archive>     release archive

    Usage:
        index = HttpReleaseIndex()
        versions = index.fetch_versions("stable")
        latest = index.pick_latest(versions)
    """

    def __init__(
        self,
        server_url: str = RELEASE_SERVER_URL,
        session: Optional[requests.Session] = None,
        version_manager: Optional[VersionManager] = None,
    ):
        self.server_url = server_url.rstrip("/") + "/"
        self.session = session or create_retry_session()
        self.version_manager = version_manager or VersionManager()
        self._version_rx = re.compile(VERSION_DIR_PATTERN)

    def channel_url(self, channel: str) -> str:
        return f"{self.server_url}{channel}/"

    def archive_name(self, version: str) -> str:
        return self.version_manager.archive_file_name(version)

    def archive_url(self, version: str, channel: str) -> str:
        return f"{self.channel_url(channel)}{version}/{self.archive_name(version)}"

    def parse_index(self, html: str) -> List[str]:
        """
        Extract version directory names from a channel index page.

        Duplicates are dropped; first-seen order is kept.
        """
        seen = set()
        versions: List[str] = []
        for match in self._version_rx.finditer(html):
            version = match.group(1)
            if version not in seen:
                seen.add(version)
                versions.append(version)
        return versions

    def fetch_versions(self, channel: str) -> List[str]:
        url = self.channel_url(channel)
        logger.debug(f"Fetching release index {url}")
        try:
            response = self.session.get(url, timeout=RELEASE_INDEX_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Failed to fetch release index for channel '{channel}'",
                url=url,
                details=str(e),
            ) from e

        try:
            if response.status_code == 404:
                raise ChannelNotFoundError(channel, url=url)
            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as e:
                raise NetworkError(
                    f"Release server returned HTTP {response.status_code}",
                    url=url,
                    details=str(e),
                ) from e
            versions = self.parse_index(response.text)
        finally:
            response.close()

        logger.debug(f"Found {len(versions)} versions in channel {channel}")
        return versions

    def pick_latest(self, versions: List[str]) -> Optional[str]:
        return self.version_manager.pick_latest(versions)

    def find_locally(
        self, version: str, search_dirs: Iterable[Pathish]
    ) -> Optional[str]:
        """
        Look for an already-downloaded archive of `version`.

        Returns:
            The path of the first matching file in `search_dirs`, or None.
        """
        name = self.archive_name(version)
        for directory in search_dirs:
            candidate = os.path.join(os.fspath(directory), name)
            if os.path.isfile(candidate):
                logger.debug(f"Using local archive {candidate}")
                return candidate
        return None

    def download(self, version: str, channel: str, dest_dir: Pathish) -> str:
        """
        Download the archive of `version` from `channel` into `dest_dir`.

        Returns:
            str: Path of the downloaded (or already present and verified) archive.

        Raises:
            NetworkError: If the download fails or the archive is corrupted.
        """
        url = self.archive_url(version, channel)
        dest_path = os.path.join(os.fspath(dest_dir), self.archive_name(version))
        if not download_archive(url, dest_path):
            raise NetworkError(f"Failed to download {self.archive_name(version)}", url)
        return dest_path
