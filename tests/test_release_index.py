import pytest
import requests

from crosswalk_android.download.release_index import HttpReleaseIndex
from crosswalk_android.exceptions import ChannelNotFoundError, NetworkError

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]

INDEX_HTML = """
<html><body>
<a href="../">Parent</a>
<a href="10.39.235.15/">10.39.235.15/</a>
<a href="9.38.208.10/">9.38.208.10/</a>
<a href="10.39.235.15/">10.39.235.15/</a>
<a href="latest/">latest/</a>
<a href="11.40.277.7/">11.40.277.7/</a>
</body></html>
"""


@pytest.fixture
def session(mocker):
    return mocker.MagicMock(spec=requests.Session)


@pytest.fixture
def index(session):
    return HttpReleaseIndex("https://example.org/crosswalk/android", session=session)


def _response(mocker, status_code=200, text=""):
    response = mocker.MagicMock()
    response.status_code = status_code
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} error"
        )
    return response


def test_fetch_versions_parses_listing(mocker, index, session):
    session.get.return_value = _response(mocker, text=INDEX_HTML)

    versions = index.fetch_versions("stable")

    assert versions == ["10.39.235.15", "9.38.208.10", "11.40.277.7"]
    session.get.assert_called_once()
    assert session.get.call_args[0][0] == "https://example.org/crosswalk/android/stable/"


def test_fetch_versions_empty_listing(mocker, index, session):
    session.get.return_value = _response(mocker, text="<html></html>")
    assert index.fetch_versions("beta") == []


def test_fetch_versions_404_is_channel_not_found(mocker, index, session):
    session.get.return_value = _response(mocker, status_code=404)

    with pytest.raises(ChannelNotFoundError) as exc_info:
        index.fetch_versions("canary")

    assert exc_info.value.channel == "canary"


def test_fetch_versions_http_error_is_network_error(mocker, index, session):
    session.get.return_value = _response(mocker, status_code=503)

    with pytest.raises(NetworkError):
        index.fetch_versions("stable")


def test_fetch_versions_transport_error_is_network_error(index, session):
    session.get.side_effect = requests.exceptions.ConnectionError("boom")

    with pytest.raises(NetworkError) as exc_info:
        index.fetch_versions("stable")

    assert exc_info.value.url.endswith("/stable/")


def test_pick_latest(index):
    assert index.pick_latest(["9.38.208.10", "11.40.277.7", "10.39.235.15"]) == (
        "11.40.277.7"
    )
    assert index.pick_latest([]) is None


def test_archive_url(index):
    assert index.archive_url("11.40.277.7", "beta") == (
        "https://example.org/crosswalk/android/beta/11.40.277.7/"
        "crosswalk-11.40.277.7.zip"
    )


def test_find_locally(tmp_path, index):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (second / "crosswalk-11.40.277.7.zip").write_bytes(b"zip")

    assert index.find_locally("11.40.277.7", [first, second]) == str(
        second / "crosswalk-11.40.277.7.zip"
    )
    assert index.find_locally("12.41.296.5", [first, second]) is None


def test_download_success(mocker, tmp_path, index):
    mock_download = mocker.patch(
        "crosswalk_android.download.release_index.download_archive",
        return_value=True,
    )

    path = index.download("11.40.277.7", "stable", tmp_path)

    assert path == str(tmp_path / "crosswalk-11.40.277.7.zip")
    mock_download.assert_called_once_with(
        "https://example.org/crosswalk/android/stable/11.40.277.7/"
        "crosswalk-11.40.277.7.zip",
        path,
    )


def test_download_failure_raises(mocker, tmp_path, index):
    mocker.patch(
        "crosswalk_android.download.release_index.download_archive",
        return_value=False,
    )

    with pytest.raises(NetworkError):
        index.download("11.40.277.7", "stable", tmp_path)
