"""
Variant Build Controller

Builds one package per requested hardware variant. For each variant in turn the
controller enables only that variant, runs the build tool, and renames the
produced package so the next pass does not overwrite it. Whatever the outcome,
every variant is enabled again when the run ends.
"""

from __future__ import annotations

import glob
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from crosswalk_android.constants import (
    APK_EXTENSION,
    DEBUG_APK_PATTERN,
    PACKAGE_DIR_NAME,
    PROJECT_BIN_DIR_NAME,
    RELEASE_APK_PATTERN,
    UNALIGNED_APK_PATTERN,
)
from crosswalk_android.exceptions import (
    BuildCancelledError,
    BuildError,
    BuildToolFailure,
    CrosswalkError,
    RenameFailure,
)
from crosswalk_android.log_utils import logger
from crosswalk_android.output import NullOutput, Output

from .tool import BuildTool, parse_progress_tag
from .variants import PermissionVariantStore, VariantStateStore

BuildCallback = Callable[[Optional[CrosswalkError]], None]


class BuildState(Enum):
    INIT = "init"
    BUILDING = "building"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class BuildClosure:
    """State of one multi-variant build invocation."""

    variants: List[str]
    release: bool = False
    callback: Optional[BuildCallback] = None
    index: int = 0
    error: Optional[CrosswalkError] = None
    finished: bool = False
    _artifacts: List[str] = field(default_factory=list, repr=False)

    @property
    def artifacts(self) -> Tuple[str, ...]:
        return tuple(self._artifacts)

    def add_artifact(self, name: str) -> None:
        if self.finished:
            raise RuntimeError("Cannot add artifacts to a finished build")
        self._artifacts.append(name)

    def finish(self, error: Optional[CrosswalkError] = None) -> None:
        if self.finished:
            return
        self.finished = True
        self.error = error
        if self.callback is not None:
            self.callback(error)


@dataclass
class BuildResult:
    success: bool
    artifacts: List[str]
    error: Optional[CrosswalkError] = None
    exported: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.success:
            return f"Built {len(self.artifacts)} package(s)"
        return str(self.error)


class VariantBuildController:
    """
    Drives the build tool once per variant.

    The variant enable flags are owned by this controller for the duration of a run;
    nothing else may change them while a build is in progress.
    """

    def __init__(
        self,
        project_path: str,
        tool: BuildTool,
        store: Optional[VariantStateStore] = None,
        output: Optional[Output] = None,
    ):
        self.project_path = os.fspath(project_path)
        self.tool = tool
        self.store = store or PermissionVariantStore(self.project_path)
        self.output = output or NullOutput()
        self._cancelled = False

    @property
    def bin_dir(self) -> str:
        return os.path.join(self.project_path, PROJECT_BIN_DIR_NAME)

    def enable_variant(self, variant: Optional[str] = None) -> None:
        """
        Enable a single variant, or all of them when `variant` is None.

        Raises:
            NotACrosswalkProjectError: If the project has no variant directories.
            UnknownVariantError: If `variant` does not exist.
        """
        if variant is None:
            self.store.enable_all()
        else:
            self.store.enable_only(variant)

    def rename_artifact(self, variant: str, release: bool) -> str:
        """
        Rename the package the build tool just produced to carry the variant name.

        `app-release-unsigned.apk` becomes `app-release-unsigned.<variant>.apk`.

        Returns:
            str: The new file name inside the bin directory.

        Raises:
            RenameFailure: If no freshly built package is present.
        """
        pattern = RELEASE_APK_PATTERN if release else DEBUG_APK_PATTERN
        matches = sorted(glob.glob(os.path.join(self.bin_dir, pattern)))
        if not matches:
            raise RenameFailure(
                variant, details=f"{PROJECT_BIN_DIR_NAME}/{pattern} not found"
            )

        source = matches[0]
        name = os.path.basename(source)
        out_name = f"{name[: -len(APK_EXTENSION)]}.{variant}{APK_EXTENSION}"
        target = os.path.join(self.bin_dir, out_name)
        try:
            os.replace(source, target)
        except OSError as exc:
            raise RenameFailure(variant, details=str(exc)) from exc

        if not os.path.isfile(target):
            raise RenameFailure(
                variant, details=f"{PROJECT_BIN_DIR_NAME}/{out_name} not found"
            )
        logger.debug("Renamed %s to %s", name, out_name)
        return out_name

    def remove_unaligned(self) -> List[str]:
        """Delete intermediate unaligned packages; returns the removed file names."""
        removed = []
        for path in glob.glob(os.path.join(self.bin_dir, UNALIGNED_APK_PATTERN)):
            try:
                os.remove(path)
                removed.append(os.path.basename(path))
            except OSError as exc:
                logger.warning("Could not remove %s: %s", path, exc)
        return removed

    def cancel(self) -> None:
        """Stop the running build before its next variant."""
        self._cancelled = True

    def _build_one(self, variant: str, release: bool) -> bool:
        indicator = self.output.create_infinite_progress(f"Building {variant}")

        def on_data(line: str) -> None:
            tag = parse_progress_tag(line)
            if tag:
                indicator.update(tag)

        try:
            return self.tool.invoke(release, on_data)
        finally:
            indicator.done()

    def _restore_baseline(self) -> None:
        try:
            self.enable_variant(None)
        except (CrosswalkError, OSError) as exc:
            logger.error("Could not re-enable variants: %s", exc)

    def iter_transitions(
        self, closure: BuildClosure
    ) -> Iterator[Tuple[BuildState, Optional[str]]]:
        """
        Run the build one step at a time.

        Yields `(state, variant)` once on start, once per variant being built, and
        once for the terminal state. The baseline (all variants enabled) is restored
        before the terminal state is yielded, and also if the iterator is closed early.
        """
        restored = False
        try:
            yield BuildState.INIT, None
            try:
                self.enable_variant(None)
            except CrosswalkError as exc:
                closure.finish(exc)
                restored = True
                yield BuildState.FAILED, None
                return
            except OSError as exc:
                closure.finish(BuildError("Could not enable variants", details=str(exc)))
                restored = True
                yield BuildState.FAILED, None
                return

            while closure.index < len(closure.variants):
                variant = closure.variants[closure.index]
                error: Optional[CrosswalkError] = None
                try:
                    if self._cancelled:
                        raise BuildCancelledError(variant)
                    self.enable_variant(variant)
                    closure.index += 1
                    yield BuildState.BUILDING, variant

                    if not self._build_one(variant, closure.release):
                        raise BuildToolFailure(variant)
                    closure.add_artifact(self.rename_artifact(variant, closure.release))
                    self.remove_unaligned()
                except CrosswalkError as exc:
                    error = exc
                except Exception as exc:
                    logger.exception("Unexpected error while building %s", variant)
                    error = BuildToolFailure(variant, details=str(exc))

                if error is not None:
                    self._restore_baseline()
                    restored = True
                    logger.debug("Build failed for %s: %s", variant, error)
                    closure.finish(error)
                    yield BuildState.FAILED, variant
                    return

            self._restore_baseline()
            restored = True
            closure.finish(None)
            yield BuildState.SUCCESS, None
        finally:
            if not restored:
                self._restore_baseline()
            self._cancelled = False

    def run(self, closure: BuildClosure) -> BuildResult:
        for state, variant in self.iter_transitions(closure):
            logger.debug("Build state %s (%s)", state.value, variant or "-")
        return BuildResult(
            success=closure.error is None,
            artifacts=list(closure.artifacts),
            error=closure.error,
        )

    def default_export_dir(self) -> str:
        parent = os.path.dirname(os.path.abspath(self.project_path))
        return os.path.join(parent, PACKAGE_DIR_NAME)

    def export_package(self, artifact: str, export_dir: str) -> str:
        """Copy a built package from the bin directory into `export_dir`."""
        os.makedirs(export_dir, exist_ok=True)
        dest_path = os.path.join(export_dir, artifact)
        shutil.copy2(os.path.join(self.bin_dir, artifact), dest_path)
        return dest_path

    def build(
        self,
        variants: Sequence[str],
        release: bool = False,
        callback: Optional[BuildCallback] = None,
        export_dir: Optional[str] = None,
    ) -> BuildResult:
        """
        Build every variant and export the packages.

        `callback` is called exactly once with None on success or the error that
        ended the build.
        """
        closure = BuildClosure(variants=list(variants), release=release)
        result = self.run(closure)

        if result.success:
            target_dir = export_dir or self.default_export_dir()
            try:
                for artifact in result.artifacts:
                    result.exported.append(self.export_package(artifact, target_dir))
                    self.output.highlight(f"  {PACKAGE_DIR_NAME}/{artifact}")
            except OSError as exc:
                result.success = False
                result.error = BuildError("Exporting packages failed", details=str(exc))

        if result.error is not None:
            self.output.error(str(result.error))
        if callback is not None:
            callback(result.error)
        return result
