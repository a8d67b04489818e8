"""
Android project facade.

`AndroidPlatform` is what an application backend talks to: it creates a
Crosswalk project from the SDK skeleton and templates, updates the bundled
Crosswalk release, and builds one package per ABI.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple

from crosswalk_android.build import (
    AntBuildTool,
    BuildResult,
    BuildTool,
    VariantBuildController,
    resolve_android_sdk_root,
)
from crosswalk_android.build.controller import BuildCallback
from crosswalk_android.constants import (
    CHANNELS,
    DEFAULT_CHANNEL,
    MAIN_ACTIVITY_TEMPLATE,
    MIN_API_LEVEL,
    PROJECT_ASSETS_DIR_NAME,
    PROJECT_WWW_DIR_NAME,
    TEMPLATE_FILES,
)
from crosswalk_android.download import (
    HttpReleaseIndex,
    ImportResult,
    ProjectUpdateOrchestrator,
)
from crosswalk_android.exceptions import ProjectError
from crosswalk_android.log_utils import logger
from crosswalk_android.output import NullOutput, Output


class TemplateRenderer(Protocol):
    def render(self, template: str, data: Mapping[str, Any], destination: str) -> None:
        """Render the named template with `data` into `destination`."""
        ...


class SdkProbe(Protocol):
    def query_target(self, min_api_level: int) -> str:
        """Return the API target to build against; raise ProjectError if none fits."""
        ...

    def generate_project_skeleton(
        self, platform_path: str, package_id: str, api_target: str
    ) -> Tuple[str, str]:
        """Create an empty Android project; return its path and the tool log."""
        ...


class AndroidPlatform:
    def __init__(
        self,
        platform_path: str,
        package_id: str,
        app_path: str,
        sdk_probe: SdkProbe,
        template_renderer: TemplateRenderer,
        output: Optional[Output] = None,
        config: Optional[Dict[str, Any]] = None,
        orchestrator: Optional[ProjectUpdateOrchestrator] = None,
        build_tool: Optional[BuildTool] = None,
    ):
        self.platform_path = os.fspath(platform_path)
        self.package_id = package_id
        self.app_path = os.fspath(app_path)
        self.sdk_probe = sdk_probe
        self.template_renderer = template_renderer
        self.output = output or NullOutput()
        self.config = config or {}
        self.orchestrator = orchestrator or self._make_orchestrator()
        self.build_tool = build_tool

    def _make_orchestrator(self) -> ProjectUpdateOrchestrator:
        server_url = self.config.get("RELEASE_SERVER_URL")
        index = HttpReleaseIndex(server_url) if server_url else HttpReleaseIndex()
        return ProjectUpdateOrchestrator(
            index,
            output=self.output,
            download_dir=self.config.get("DOWNLOAD_DIR"),
        )

    def fill_templates(self, api_target: str, project_path: str) -> None:
        """
        Render the project templates and link the web application into the assets.
        """
        parts = self.package_id.split(".")
        data = {
            "packageId": self.package_id,
            "packageName": parts[-1],
            "apiTarget": api_target,
        }

        for name in TEMPLATE_FILES:
            self.template_renderer.render(name, data, os.path.join(project_path, name))

        activity_dir = os.path.join(project_path, "src", *parts)
        self.template_renderer.render(
            MAIN_ACTIVITY_TEMPLATE,
            data,
            os.path.join(activity_dir, MAIN_ACTIVITY_TEMPLATE),
        )

        assets_path = os.path.join(project_path, PROJECT_ASSETS_DIR_NAME)
        os.makedirs(assets_path, exist_ok=True)
        www_path = os.path.join(assets_path, PROJECT_WWW_DIR_NAME)
        if not os.path.lexists(www_path):
            os.symlink(os.path.abspath(self.app_path), www_path)

    def generate(
        self, crosswalk: Optional[str] = None, channel: Optional[str] = None
    ) -> ImportResult:
        """
        Create the project skeleton, fill in templates and import Crosswalk.

        Parameters:
            crosswalk: Local release archive or directory to try first.
            channel: Release channel; unknown or missing values fall back to stable.
        """
        api_target = self.sdk_probe.query_target(MIN_API_LEVEL)
        self.output.info(f"Building against API level {api_target}")

        path, log = self.sdk_probe.generate_project_skeleton(
            self.platform_path, self.package_id, api_target
        )
        if log:
            logger.debug(log)
        if not path:
            raise ProjectError("Creating project skeleton failed")

        if channel not in CHANNELS:
            channel = DEFAULT_CHANNEL
            self.output.info(f"Defaulting to download channel {channel}")

        self.fill_templates(api_target, path)
        result = self.orchestrator.import_latest_or_local(crosswalk, channel, path)
        self.output.info(f"Project template created at '{path}'")
        return result

    def update(self, version_spec: str) -> ImportResult:
        return self.orchestrator.update(version_spec, self.platform_path)

    def build(
        self,
        variants: Sequence[str],
        release: bool = False,
        callback: Optional[BuildCallback] = None,
    ) -> BuildResult:
        tool = self.build_tool or AntBuildTool(
            self.platform_path,
            ant_path=self.config.get("ANT_PATH"),
            sdk_root=resolve_android_sdk_root(self.config.get("ANDROID_SDK_ROOT")),
        )
        controller = VariantBuildController(self.platform_path, tool, output=self.output)
        return controller.build(
            variants,
            release=release,
            callback=callback,
            export_dir=self.config.get("PACKAGE_DIR"),
        )
