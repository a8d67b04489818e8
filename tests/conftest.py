import os
import time
import zipfile
from pathlib import Path

import platformdirs
import pytest
import requests

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used across the test suite.
    """
    for marker, description in (
        ("unit", "fast tests without external processes"),
        ("core_downloads", "release index, resolver, importer and orchestrator"),
        ("build", "variant build controller and build tool"),
        ("configuration", "configuration and logging setup"),
        ("integration", "tests spanning several components"),
    ):
        config.addinivalue_line("markers", f"{marker}: {description}")


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs and the XDG variables at a temporary directory layout.
    """
    base = tmp_path_factory.mktemp("crosswalk-android")
    cache_dir = base / "cache"
    config_dir = base / "config"
    log_dir = base / "log"

    for path in (cache_dir, config_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))

    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.head = _block_network
    requests.Session.request = _block_network


@pytest.fixture(autouse=True)
def _mock_time_sleep(monkeypatch):
    """
    Make time.sleep instant for all tests to prevent delays.
    """
    monkeypatch.setattr(time, "sleep", lambda *_args, **_kwargs: None)


# =============================================================================
# Release and project fixtures
# =============================================================================


def write_release_zip(
    directory: Path,
    version: str,
    *,
    legacy_jar: bool = True,
    app_jar: bool = True,
    res: bool = True,
    core: bool = True,
    directory_entries: bool = True,
    core_files=("libs/x86/libxwalkcore.so", "libs/armeabi-v7a/libxwalkcore.so"),
) -> Path:
    """Write a release archive `crosswalk-<version>.zip` with the standard layout."""
    root = f"crosswalk-{version}/"
    path = Path(directory) / f"crosswalk-{version}.zip"
    with zipfile.ZipFile(path, "w") as zf:
        if directory_entries:
            zf.writestr(root, "")
        if core:
            if directory_entries:
                zf.writestr(root + "xwalk_core_library/", "")
            zf.writestr(root + "xwalk_core_library/project.properties", version)
            for name in core_files:
                zf.writestr(root + "xwalk_core_library/" + name, b"\x7fELF")
        if legacy_jar:
            zf.writestr(root + "template/libs/xwalk_runtime_java.jar", b"legacy")
        if app_jar:
            zf.writestr(root + "template/libs/xwalk_app_runtime_java.jar", b"app")
        if res:
            if directory_entries:
                zf.writestr(root + "template/res/", "")
            zf.writestr(root + "template/res/values/strings.xml", "<resources/>")
    return path


@pytest.fixture
def release_zip(tmp_path):
    """Factory fixture building release archives in a scratch directory."""
    archive_dir = tmp_path / "archives"
    archive_dir.mkdir()

    def _make(version: str = "11.40.277.7", **kwargs) -> Path:
        return write_release_zip(archive_dir, version, **kwargs)

    return _make


@pytest.fixture
def project_dir(tmp_path):
    """An empty project directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def abi_project(tmp_path):
    """A project whose runtime library has x86 and armeabi-v7a variant directories."""
    path = tmp_path / "abi-project"
    libs = path / "xwalk_core_library" / "libs"
    for abi in ("armeabi-v7a", "x86"):
        (libs / abi).mkdir(parents=True)
        os.chmod(libs / abi, 0o755)
    (path / "bin").mkdir()
    return path
