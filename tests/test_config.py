import os

import pytest
import yaml

from crosswalk_android import config
from crosswalk_android.constants import RELEASE_SERVER_URL
from crosswalk_android.exceptions import ConfigFileError, ConfigurationError

pytestmark = [pytest.mark.unit, pytest.mark.configuration]


def test_defaults_when_file_missing(tmp_path):
    loaded = config.load_config(str(tmp_path / "missing.yaml"))

    assert loaded["CHANNEL"] == "stable"
    assert loaded["RELEASE_SERVER_URL"] == RELEASE_SERVER_URL
    assert loaded["DOWNLOAD_DIR"].endswith("downloads")
    assert loaded["ANT_PATH"] is None


def test_default_location_uses_platformdirs():
    assert config.get_config_file().startswith(config.get_config_dir())
    assert config.get_config_file().endswith("crosswalk-android.yaml")


def test_values_override_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump({"CHANNEL": "beta", "ANT_PATH": "/opt/ant/bin/ant"})
    )

    loaded = config.load_config(str(path))

    assert loaded["CHANNEL"] == "beta"
    assert loaded["ANT_PATH"] == "/opt/ant/bin/ant"


def test_unknown_keys_ignored(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("FOO: bar\n")

    loaded = config.load_config(str(path))

    assert "FOO" not in loaded


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert config.load_config(str(path))["CHANNEL"] == "stable"


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("CHANNEL: [unterminated\n")

    with pytest.raises(ConfigFileError):
        config.load_config(str(path))


def test_non_mapping_document(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ConfigurationError):
        config.load_config(str(path))


def test_unknown_channel_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("CHANNEL: nightly\n")

    with pytest.raises(ConfigurationError):
        config.load_config(str(path))


def test_empty_server_url_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("RELEASE_SERVER_URL: ''\n")

    with pytest.raises(ConfigurationError):
        config.load_config(str(path))


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    data = config.default_config()
    data["CHANNEL"] = "canary"

    written = config.save_config(data, str(path))

    assert written == str(path)
    raw = yaml.safe_load(path.read_text())
    assert "ANT_PATH" not in raw
    assert config.load_config(str(path))["CHANNEL"] == "canary"
    assert [name for name in os.listdir(path.parent) if name.startswith("tmp-")] == []
