"""
External build tool invocation.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from typing import Callable, List, Mapping, Optional, Protocol

from crosswalk_android.constants import (
    PROGRESS_TAG_MAX_LENGTH,
    PROGRESS_TAG_SCAN_CHARS,
    SDK_ROOT_ENV_VARS,
)
from crosswalk_android.log_utils import logger

OutputCallback = Callable[[str], None]


def resolve_android_sdk_root(configured: Optional[str] = None) -> Optional[str]:
    """
    Resolve an Android SDK root from configuration, environment variables or common default locations.
    """
    if configured and os.path.isdir(configured):
        return configured

    for name in SDK_ROOT_ENV_VARS:
        env_root = os.environ.get(name)
        if env_root and os.path.isdir(env_root):
            return env_root

    candidates = [
        os.path.expanduser("~/Android/sdk"),
        os.path.expanduser("~/Android/Sdk"),
        os.path.expanduser("~/Library/Android/sdk"),
        os.path.expanduser("~/Library/Android/Sdk"),
    ]
    for candidate in candidates:
        if os.path.isdir(os.path.join(candidate, "platforms")):
            return candidate

    return None


def parse_progress_tag(line: str) -> Optional[str]:
    """
    Extract a build-step tag such as "javac" from a line like "    [javac] Compiling ...".

    Leading spaces within the first few characters are skipped; the tag must open
    there and close shortly after.
    """
    start = None
    for i, char in enumerate(line[:PROGRESS_TAG_SCAN_CHARS]):
        if char == " ":
            continue
        if char == "[":
            start = i
        break
    if start is None:
        return None

    window = line[start + 1 : start + 1 + PROGRESS_TAG_MAX_LENGTH]
    end = window.find("]")
    if end <= 0:
        return None
    return window[:end]


class BuildTool(Protocol):
    def invoke(self, release: bool, on_data: Optional[OutputCallback] = None) -> bool:
        """Run one build pass; return True on success."""
        ...


class AntBuildTool:
    """Runs `ant release` or `ant debug` in the project directory."""

    def __init__(
        self,
        project_path: str,
        ant_path: Optional[str] = None,
        sdk_root: Optional[str] = None,
    ):
        self.project_path = os.fspath(project_path)
        self.ant_path = ant_path
        self.sdk_root = sdk_root

    def _resolve_ant(self) -> Optional[str]:
        if self.ant_path:
            return self.ant_path
        return shutil.which("ant")

    def _build_env(self) -> Mapping[str, str]:
        build_env = os.environ.copy()
        if self.sdk_root:
            build_env.setdefault("ANDROID_SDK_ROOT", self.sdk_root)
            build_env.setdefault("ANDROID_HOME", self.sdk_root)
        return build_env

    def command(self, release: bool) -> List[str]:
        ant = self._resolve_ant() or "ant"
        return [ant, "release" if release else "debug"]

    def invoke(self, release: bool, on_data: Optional[OutputCallback] = None) -> bool:
        if self._resolve_ant() is None:
            logger.error("Could not find 'ant' on PATH; set ANT_PATH in the configuration")
            return False

        cmd = self.command(release)
        logger.debug("Running %s in %s", " ".join(cmd), self.project_path)
        try:
            process = subprocess.Popen(
                cmd,
                cwd=self.project_path,
                env=self._build_env(),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as exc:
            logger.error("Failed to start build tool: %s", exc)
            return False

        assert process.stdout is not None
        try:
            with process.stdout:
                for line in process.stdout:
                    line = line.rstrip("\n")
                    logger.debug(line)
                    if on_data is not None:
                        on_data(line)
        finally:
            returncode = process.wait()
        if returncode != 0:
            logger.debug("Build tool exited with status %d", returncode)
        return returncode == 0
