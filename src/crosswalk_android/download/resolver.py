"""
Version Resolver

Decides which release to use: the latest release of a channel, or the first
channel (in priority order) that publishes a specific requested version.
"""

from typing import List, Optional

from crosswalk_android.constants import CHANNELS
from crosswalk_android.exceptions import ChannelNotFoundError, VersionNotFoundError
from crosswalk_android.log_utils import logger
from crosswalk_android.output import NullOutput, Output

from .interfaces import ReleaseIndex, ResolvedRelease, next_channel


class VersionResolver:
    """
    Resolves a requested version and channel against a release index.

    Channels are searched iteratively in the fixed priority order, starting at the
    requested channel (or the first one), and each channel is visited at most once.
    """

    def __init__(self, index: ReleaseIndex, output: Optional[Output] = None):
        self.index = index
        self.output = output or NullOutput()

    def _start_channel(self, channel: Optional[str]) -> str:
        if channel is None:
            return CHANNELS[0]
        if channel not in CHANNELS:
            raise ChannelNotFoundError(
                channel, details=f"expected one of {', '.join(CHANNELS)}"
            )
        return channel

    def resolve(
        self, version: Optional[str] = None, channel: Optional[str] = None
    ) -> ResolvedRelease:
        """
        Resolve a release.

        Parameters:
            version: Specific version to look for, or None for the latest release.
            channel: Channel to start from; defaults to the first channel.

        Returns:
            ResolvedRelease: The chosen version and the channel it was found in.

        Raises:
            VersionNotFoundError: If the requested version is in no remaining channel,
                or the channel has no release when the latest one was requested.
            ChannelNotFoundError: If the latest release of a missing channel was requested.
            NetworkError: On transport failures; these end the search immediately.
        """
        current: Optional[str] = self._start_channel(channel)
        self.output.info(
            f"Looking for {version or 'latest version'} in channel '{current}'"
        )

        if version is None:
            versions = self.index.fetch_versions(current)
            latest = self.index.pick_latest(versions)
            if latest is None:
                raise VersionNotFoundError(
                    "latest", details=f"channel '{current}' has no releases"
                )
            logger.debug(f"Latest {current} release is {latest}")
            return ResolvedRelease(version=latest, channel=current)

        visited: List[str] = []
        while current is not None:
            visited.append(current)
            try:
                versions = self.index.fetch_versions(current)
            except ChannelNotFoundError:
                logger.debug(f"Channel {current} has no published data")
                versions = []

            if version in versions:
                logger.debug(f"Found version {version} in channel {current}")
                return ResolvedRelease(version=version, channel=current)

            current = next_channel(current)
            if current is not None:
                self.output.info(
                    f"Version {version} not found in '{visited[-1]}', trying next channel"
                )
            else:
                self.output.info(
                    f"Version {version} not found in '{visited[-1]}', search failed"
                )

        raise VersionNotFoundError(
            version, details=f"searched channels: {', '.join(visited)}"
        )
