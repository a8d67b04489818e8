from typing import Dict, List, Optional

import pytest

from crosswalk_android.download.interfaces import ReleaseIndex, ResolvedRelease
from crosswalk_android.download.resolver import VersionResolver
from crosswalk_android.download.version import VersionManager
from crosswalk_android.exceptions import (
    ChannelNotFoundError,
    NetworkError,
    VersionNotFoundError,
)

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]


class FakeIndex(ReleaseIndex):
    """In-memory release index recording every channel it is asked about."""

    def __init__(self, channels: Dict[str, object]):
        self.channels = channels
        self.calls: List[str] = []

    def fetch_versions(self, channel: str) -> List[str]:
        self.calls.append(channel)
        value = self.channels.get(channel)
        if value is None:
            raise ChannelNotFoundError(channel)
        if isinstance(value, Exception):
            raise value
        return list(value)

    def pick_latest(self, versions: List[str]) -> Optional[str]:
        return VersionManager().pick_latest(versions)

    def find_locally(self, version, search_dirs):
        return None

    def download(self, version, channel, dest_dir):
        raise NetworkError(f"No archive for {version}")


CHANNEL_DATA = {
    "stable": ["9.38.208.10", "10.39.235.15"],
    "beta": ["11.40.277.7", "10.39.235.15"],
    "canary": ["12.41.296.5"],
}


def test_latest_in_default_channel():
    index = FakeIndex(CHANNEL_DATA)
    release = VersionResolver(index).resolve()

    assert release == ResolvedRelease("10.39.235.15", "stable")
    assert index.calls == ["stable"]


def test_latest_in_given_channel_never_searches_further():
    index = FakeIndex(CHANNEL_DATA)
    release = VersionResolver(index).resolve(None, "beta")

    assert release == ResolvedRelease("11.40.277.7", "beta")
    assert index.calls == ["beta"]


def test_version_present_in_requested_channel():
    index = FakeIndex(CHANNEL_DATA)
    release = VersionResolver(index).resolve("10.39.235.15", "beta")

    assert release == ResolvedRelease("10.39.235.15", "beta")
    assert index.calls == ["beta"]


def test_version_found_in_later_channel():
    index = FakeIndex(CHANNEL_DATA)
    release = VersionResolver(index).resolve("12.41.296.5")

    assert release == ResolvedRelease("12.41.296.5", "canary")
    assert index.calls == ["stable", "beta", "canary"]


def test_missing_version_visits_each_channel_once():
    index = FakeIndex(CHANNEL_DATA)

    with pytest.raises(VersionNotFoundError) as exc_info:
        VersionResolver(index).resolve("7.36.154.13")

    assert index.calls == ["stable", "beta", "canary"]
    assert "7.36.154.13 seems not to be available" in str(exc_info.value)


def test_search_starting_at_later_channel_does_not_go_back():
    index = FakeIndex(CHANNEL_DATA)

    with pytest.raises(VersionNotFoundError):
        VersionResolver(index).resolve("9.38.208.10", "beta")

    assert index.calls == ["beta", "canary"]


def test_empty_channel_is_not_found_not_error():
    index = FakeIndex({"stable": [], "beta": ["11.40.277.7"], "canary": []})
    release = VersionResolver(index).resolve("11.40.277.7")

    assert release.channel == "beta"


def test_missing_channel_during_search_moves_on():
    index = FakeIndex({"stable": ["10.39.235.15"], "canary": ["12.41.296.5"]})
    release = VersionResolver(index).resolve("12.41.296.5")

    assert release == ResolvedRelease("12.41.296.5", "canary")
    assert index.calls == ["stable", "beta", "canary"]


def test_network_error_short_circuits():
    index = FakeIndex(
        {
            "stable": ["10.39.235.15"],
            "beta": NetworkError("connection refused"),
            "canary": ["12.41.296.5"],
        }
    )

    with pytest.raises(NetworkError):
        VersionResolver(index).resolve("12.41.296.5")

    assert index.calls == ["stable", "beta"]


def test_latest_of_empty_channel_is_not_found():
    index = FakeIndex({"stable": []})

    with pytest.raises(VersionNotFoundError):
        VersionResolver(index).resolve()


def test_unknown_channel_rejected():
    index = FakeIndex(CHANNEL_DATA)

    with pytest.raises(ChannelNotFoundError):
        VersionResolver(index).resolve(None, "nightly")

    assert index.calls == []
