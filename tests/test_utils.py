import io
import os
import zipfile
from unittest.mock import MagicMock, patch

import pytest
import requests

from crosswalk_android import utils

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]

URL = "https://example.org/crosswalk-11.40.277.7.zip"


def _zip_bytes():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("crosswalk-11.40.277.7/xwalk_core_library/a", "a")
    return buffer.getvalue()


@pytest.fixture
def archive(tmp_path):
    path = tmp_path / "crosswalk-11.40.277.7.zip"
    path.write_bytes(_zip_bytes())
    return path


def test_checksum_record_and_read(archive):
    checksum = utils.ArchiveChecksum(str(archive))

    digest = checksum.record()

    assert checksum.path == str(archive) + ".sha256"
    assert checksum.read() == digest
    line = (archive.parent / (archive.name + ".sha256")).read_text()
    assert line == f"{digest}  {archive.name}\n"


def test_checksum_verify_records_on_first_sight(archive):
    checksum = utils.ArchiveChecksum(str(archive))

    assert checksum.read() is None
    assert checksum.verify()
    assert checksum.read() == checksum.compute()


def test_checksum_verify_detects_tampering(archive):
    checksum = utils.ArchiveChecksum(str(archive))
    checksum.record()

    with zipfile.ZipFile(archive, "a") as zf:
        zf.writestr("extra", "x")

    assert not checksum.verify()


def test_checksum_rejects_non_zip(tmp_path):
    path = tmp_path / "crosswalk-11.40.277.7.zip"
    path.write_bytes(b"not a zip")

    assert not utils.ArchiveChecksum(str(path)).verify()


def test_checksum_compute_missing_file(tmp_path):
    assert utils.ArchiveChecksum(str(tmp_path / "missing.zip")).compute() is None


def test_checksum_discard(archive):
    checksum = utils.ArchiveChecksum(str(archive))
    checksum.record()

    checksum.discard()

    assert os.listdir(archive.parent) == []


def test_user_agent():
    assert utils.get_user_agent().startswith("crosswalk-android/")


def test_retry_session_has_adapters():
    session = utils.create_retry_session()
    adapter = session.get_adapter("https://download.01.org/")
    assert adapter.max_retries.total == 5
    assert 503 in adapter.max_retries.status_forcelist
    assert session.headers["User-Agent"] == utils.get_user_agent()


@patch("crosswalk_android.utils.requests.Session")
def test_download_archive_success(mock_session, tmp_path):
    payload = _zip_bytes()
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.iter_content.return_value = [payload[:10], payload[10:]]
    mock_session.return_value.get.return_value = mock_response

    download_path = tmp_path / "downloads" / "crosswalk-11.40.277.7.zip"

    assert utils.download_archive(URL, str(download_path)) is True
    assert download_path.read_bytes() == payload
    assert utils.ArchiveChecksum(str(download_path)).read() is not None
    mock_response.close.assert_called_once()


@patch("crosswalk_android.utils.requests.Session")
def test_download_archive_reuses_verified(mock_session, archive):
    utils.ArchiveChecksum(str(archive)).record()

    assert utils.download_archive(URL, str(archive)) is True
    mock_session.return_value.get.assert_not_called()


@patch("crosswalk_android.utils.requests.Session")
def test_download_archive_replaces_corrupted_existing(mock_session, tmp_path):
    payload = _zip_bytes()
    existing = tmp_path / "crosswalk-11.40.277.7.zip"
    existing.write_bytes(b"truncated")
    mock_response = MagicMock()
    mock_response.iter_content.return_value = [payload]
    mock_session.return_value.get.return_value = mock_response

    assert utils.download_archive(URL, str(existing)) is True
    assert existing.read_bytes() == payload


@patch("crosswalk_android.utils.requests.Session")
def test_download_archive_corrupted_zip(mock_session, tmp_path):
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.iter_content.return_value = [b"not a zip"]
    mock_session.return_value.get.return_value = mock_response

    download_path = tmp_path / "crosswalk-11.40.277.7.zip"

    assert utils.download_archive(URL, str(download_path)) is False
    assert os.listdir(tmp_path) == []


@patch("crosswalk_android.utils.requests.Session")
def test_download_archive_network_error(mock_session, tmp_path):
    mock_session.return_value.get.side_effect = requests.exceptions.RequestException

    download_path = tmp_path / "crosswalk-11.40.277.7.zip"

    assert utils.download_archive(URL, str(download_path)) is False
    assert not download_path.exists()


@patch("crosswalk_android.utils.requests.Session")
def test_download_archive_http_error(mock_session, tmp_path):
    mock_response = MagicMock()
    mock_response.status_code = 404
    mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("404")
    mock_session.return_value.get.return_value = mock_response

    download_path = tmp_path / "crosswalk-11.40.277.7.zip"

    assert utils.download_archive(URL, str(download_path)) is False
    mock_response.close.assert_called_once()
