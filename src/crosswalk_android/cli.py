# src/crosswalk_android/cli.py

import argparse
import sys
from typing import Any, Dict, List, Optional

from crosswalk_android import config as config_module
from crosswalk_android import log_utils
from crosswalk_android.build import (
    AntBuildTool,
    VariantBuildController,
    resolve_android_sdk_root,
)
from crosswalk_android.constants import CHANNELS
from crosswalk_android.download import (
    HttpReleaseIndex,
    ProjectUpdateOrchestrator,
    VersionResolver,
)
from crosswalk_android.exceptions import CrosswalkError
from crosswalk_android.output import ConsoleOutput, Output


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crosswalk-android",
        description="crosswalk-android - Crosswalk release import and multi-ABI builds",
    )
    parser.add_argument(
        "--log-level",
        help="Console log level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--config",
        help="Path to the YAML configuration file",
    )
    subparsers = parser.add_subparsers(dest="command")

    # List versions of a channel
    versions_parser = subparsers.add_parser(
        "versions", help="List the versions published in a channel"
    )
    versions_parser.add_argument("channel", nargs="?", choices=CHANNELS)

    # Resolve a version
    resolve_parser = subparsers.add_parser(
        "resolve", help="Find a version, or the latest one, across channels"
    )
    resolve_parser.add_argument("--version", dest="crosswalk_version")
    resolve_parser.add_argument("--channel", choices=CHANNELS)

    # First-time import
    import_parser = subparsers.add_parser(
        "import", help="Import Crosswalk into a freshly created project"
    )
    import_parser.add_argument("project", help="Project root directory")
    import_parser.add_argument(
        "--archive", help="Local release archive or unpacked release directory"
    )
    import_parser.add_argument("--channel", choices=CHANNELS)

    # Update an existing project
    update_parser = subparsers.add_parser(
        "update", help="Update the Crosswalk release of a project"
    )
    update_parser.add_argument("project", help="Project root directory")
    update_parser.add_argument("spec", help="Channel name or specific version")

    # Multi-ABI build
    build_parser = subparsers.add_parser("build", help="Build one package per ABI")
    build_parser.add_argument("project", help="Project root directory")
    build_parser.add_argument(
        "--variant",
        dest="variants",
        action="append",
        required=True,
        help="ABI to build, e.g. armeabi-v7a or x86 (can be passed multiple times)",
    )
    build_parser.add_argument(
        "--release", action="store_true", help="Build release instead of debug packages"
    )
    build_parser.add_argument("--package-dir", help="Directory to export packages to")

    return parser


def _configure_logging(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    level = args.log_level or config.get("LOG_LEVEL")
    if level:
        log_utils.set_log_level(level)
    if config.get("LOG_DIR"):
        log_utils.add_file_logging(config["LOG_DIR"], level or "INFO")


def _make_orchestrator(
    config: Dict[str, Any], output: Output
) -> ProjectUpdateOrchestrator:
    index = HttpReleaseIndex(config["RELEASE_SERVER_URL"])
    return ProjectUpdateOrchestrator(
        index,
        resolver=VersionResolver(index, output),
        output=output,
        download_dir=config["DOWNLOAD_DIR"],
    )


def _run_command(
    args: argparse.Namespace, config: Dict[str, Any], output: Output
) -> int:
    if args.command == "versions":
        orchestrator = _make_orchestrator(config, output)
        channel = args.channel or config["CHANNEL"]
        for version in orchestrator.list_versions(channel):
            print(version)
    elif args.command == "resolve":
        orchestrator = _make_orchestrator(config, output)
        release = orchestrator.resolver.resolve(args.crosswalk_version, args.channel)
        print(f"{release.version} ({release.channel})")
    elif args.command == "import":
        orchestrator = _make_orchestrator(config, output)
        result = orchestrator.import_latest_or_local(
            args.archive, args.channel or config["CHANNEL"], args.project
        )
        output.info(f"Imported Crosswalk {result.version or result.source}")
    elif args.command == "update":
        orchestrator = _make_orchestrator(config, output)
        orchestrator.update(args.spec, args.project)
    elif args.command == "build":
        tool = AntBuildTool(
            args.project,
            ant_path=config.get("ANT_PATH"),
            sdk_root=resolve_android_sdk_root(config.get("ANDROID_SDK_ROOT")),
        )
        controller = VariantBuildController(args.project, tool, output=output)
        result = controller.build(
            args.variants,
            release=args.release,
            export_dir=args.package_dir or config.get("PACKAGE_DIR"),
        )
        return 0 if result.success else 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    # Logging is automatically initialized by importing log_utils

    """
    Entry point for the crosswalk-android command-line interface.

    Parses arguments, loads configuration, and dispatches the versions, resolve,
    import, update and build subcommands. Any CrosswalkError is logged and turned
    into exit status 1.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = config_module.load_config(args.config)
        _configure_logging(args, config)
        return _run_command(args, config, ConsoleOutput())
    except CrosswalkError as e:
        log_utils.logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        log_utils.logger.error("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
