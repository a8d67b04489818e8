# src/crosswalk_android/utils.py
import hashlib
import importlib.metadata
import os
import time
import zipfile
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry  # type: ignore

from crosswalk_android.constants import (
    APP_NAME,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONNECT_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    RETRY_STATUS_FORCELIST,
)
from crosswalk_android.log_utils import logger

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `crosswalk-android/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(APP_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"{APP_NAME}/{app_version}"

    return _USER_AGENT_CACHE


def create_retry_session() -> requests.Session:
    """
    Build a requests Session whose adapters retry transient transport and server failures.

    Status-based retries are applied by urllib3 before the response is handed back, so
    callers only need `raise_for_status()` to surface the final HTTP error.
    """
    session = requests.Session()
    retry_strategy: Retry = Retry(
        total=DEFAULT_CONNECT_RETRIES,
        connect=DEFAULT_CONNECT_RETRIES,
        read=DEFAULT_CONNECT_RETRIES,
        status=DEFAULT_CONNECT_RETRIES,
        backoff_factor=DEFAULT_BACKOFF_FACTOR,
        status_forcelist=list(RETRY_STATUS_FORCELIST),
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": get_user_agent()})
    return session


class ArchiveChecksum:
    """
    SHA-256 record kept next to a downloaded release archive.

    The record lives in `<archive>.sha256` as a single `<digest>  <file name>` line. It
    lets a later run reuse an archive that is already on disk without downloading it again.
    """

    SUFFIX = ".sha256"

    def __init__(self, archive_path: str):
        self.archive_path = archive_path
        self.path = archive_path + self.SUFFIX

    def compute(self) -> Optional[str]:
        """Hash the archive; None if it cannot be read."""
        digest = hashlib.sha256()
        try:
            with open(self.archive_path, "rb") as f:
                for chunk in iter(lambda: f.read(DEFAULT_CHUNK_SIZE), b""):
                    digest.update(chunk)
        except OSError as exc:
            logger.debug("Cannot hash %s: %s", self.archive_path, exc)
            return None
        return digest.hexdigest()

    def read(self) -> Optional[str]:
        try:
            with open(self.path, "r", encoding="ascii") as f:
                fields = f.readline().split()
        except (OSError, UnicodeDecodeError):
            return None
        return fields[0] if fields else None

    def record(self) -> Optional[str]:
        """Hash the archive and write the record atomically; returns the digest."""
        digest = self.compute()
        if digest is None:
            return None
        tmp_path = f"{self.path}.tmp.{os.getpid()}"
        try:
            with open(tmp_path, "w", encoding="ascii", newline="\n") as f:
                f.write(f"{digest}  {os.path.basename(self.archive_path)}\n")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.debug("Could not write %s: %s", self.path, exc)
            try:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
            except OSError:
                pass
        return digest

    def verify(self) -> bool:
        """
        Check that the archive is a readable zip whose digest matches the record.

        An archive with no record yet is accepted and recorded.
        """
        if not os.path.isfile(self.archive_path) or not is_zip_intact(self.archive_path):
            return False

        stored = self.read()
        if stored is None:
            return self.record() is not None

        if self.compute() != stored:
            logger.warning(
                "Checksum mismatch for %s, the archive may be corrupted",
                os.path.basename(self.archive_path),
            )
            return False
        return True

    def discard(self) -> None:
        """Remove the archive together with its record."""
        for path in (self.archive_path, self.path):
            if os.path.exists(path):
                os.remove(path)


def is_zip_intact(file_path: str) -> bool:
    """
    Perform a quick integrity check of a ZIP archive.

    Returns:
        bool: `True` if the archive opens and contains no corrupt members, `False` otherwise.
    """
    try:
        with zipfile.ZipFile(file_path, "r") as zf:
            return zf.testzip() is None
    except (OSError, zipfile.BadZipFile):
        return False


def download_archive(url: str, archive_path: str) -> bool:
    """
    Fetch a release archive into `archive_path`.

    An archive already at `archive_path` is reused when its checksum record still
    matches. Otherwise the URL is streamed into a temporary file next to the
    destination, checked as a zip, moved into place and recorded.

    Returns:
        bool: `True` if a verified archive is in place, `False` otherwise.
    """
    archive_name = os.path.basename(archive_path)
    checksum = ArchiveChecksum(archive_path)

    if os.path.exists(archive_path):
        if checksum.verify():
            logger.info("Using existing %s", archive_name)
            return True
        logger.info("Existing %s failed verification, downloading again", archive_name)
        try:
            checksum.discard()
        except OSError as exc:
            logger.error("Could not remove stale %s: %s", archive_name, exc)
            return False

    temp_path = f"{archive_path}.tmp.{os.getpid()}.{int(time.time() * 1000)}"
    session = create_retry_session()
    response = None
    try:
        logger.debug("Downloading %s", url)
        response = session.get(url, stream=True, timeout=DEFAULT_REQUEST_TIMEOUT)
        response.raise_for_status()

        parent_dir = os.path.dirname(archive_path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)
        size = 0
        with open(temp_path, "wb") as f:
            for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
                    size += len(chunk)

        if not is_zip_intact(temp_path):
            logger.error("Downloaded archive %s is corrupted", archive_name)
            return False

        os.replace(temp_path, archive_path)
        checksum.record()
        logger.info("Downloaded %s (%.1f MB)", archive_name, size / (1024 * 1024))
        return True
    except requests.exceptions.RequestException as exc:
        logger.error("Network error downloading %s: %s", url, exc)
    except OSError as exc:
        logger.error("Could not write %s: %s", archive_path, exc)
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as exc:
                logger.warning("Error removing temporary file %s: %s", temp_path, exc)
        if response is not None:
            response.close()
        session.close()
    return False
