import pytest

from crosswalk_android import cli
from crosswalk_android.build.controller import BuildResult
from crosswalk_android.download.interfaces import ImportResult, ResolvedRelease
from crosswalk_android.exceptions import NetworkError, VersionNotFoundError

pytestmark = [pytest.mark.unit]


@pytest.fixture
def orchestrator(mocker):
    orchestrator = mocker.MagicMock()
    mocker.patch("crosswalk_android.cli._make_orchestrator", return_value=orchestrator)
    return orchestrator


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_versions(orchestrator, capsys):
    orchestrator.list_versions.return_value = ["10.39.235.15", "11.40.277.7"]

    assert cli.main(["versions", "beta"]) == 0

    orchestrator.list_versions.assert_called_once_with("beta")
    assert capsys.readouterr().out.split() == ["10.39.235.15", "11.40.277.7"]


def test_versions_uses_configured_channel(orchestrator):
    orchestrator.list_versions.return_value = []

    cli.main(["versions"])

    orchestrator.list_versions.assert_called_once_with("stable")


def test_resolve(orchestrator, capsys):
    orchestrator.resolver.resolve.return_value = ResolvedRelease("12.41.296.5", "canary")

    assert cli.main(["resolve", "--version", "12.41.296.5"]) == 0

    orchestrator.resolver.resolve.assert_called_once_with("12.41.296.5", None)
    assert "12.41.296.5 (canary)" in capsys.readouterr().out


def test_resolve_failure_exit_code(orchestrator):
    orchestrator.resolver.resolve.side_effect = VersionNotFoundError("1.2.3.4")

    assert cli.main(["resolve", "--version", "1.2.3.4"]) == 1


def test_import(orchestrator, tmp_path):
    orchestrator.import_latest_or_local.return_value = ImportResult(
        source=tmp_path / "crosswalk-11.40.277.7.zip",
        project_path=tmp_path,
        version="11.40.277.7",
        major=11,
    )

    assert cli.main(["import", str(tmp_path), "--channel", "beta"]) == 0

    orchestrator.import_latest_or_local.assert_called_once_with(
        None, "beta", str(tmp_path)
    )


def test_update_network_failure(orchestrator, tmp_path):
    orchestrator.update.side_effect = NetworkError("Failed to download")

    assert cli.main(["update", str(tmp_path), "canary"]) == 1
    orchestrator.update.assert_called_once_with("canary", str(tmp_path))


def test_build(mocker, tmp_path):
    controller_cls = mocker.patch("crosswalk_android.cli.VariantBuildController")
    controller_cls.return_value.build.return_value = BuildResult(True, ["a.x86.apk"])

    code = cli.main(
        [
            "build",
            str(tmp_path),
            "--variant",
            "x86",
            "--variant",
            "armeabi-v7a",
            "--release",
            "--package-dir",
            str(tmp_path / "pkg"),
        ]
    )

    assert code == 0
    controller_cls.return_value.build.assert_called_once_with(
        ["x86", "armeabi-v7a"], release=True, export_dir=str(tmp_path / "pkg")
    )


def test_build_failure_exit_code(mocker, tmp_path):
    controller_cls = mocker.patch("crosswalk_android.cli.VariantBuildController")
    controller_cls.return_value.build.return_value = BuildResult(False, [])

    assert cli.main(["build", str(tmp_path), "--variant", "x86"]) == 1


def test_bad_config_exit_code(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("CHANNEL: nightly\n")

    assert cli.main(["--config", str(config_path), "versions"]) == 1
