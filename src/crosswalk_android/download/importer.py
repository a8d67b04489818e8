"""
Archive Importer

Places a Crosswalk release into an Android project tree. Releases come either as
the distributed zip archive or as an already unpacked release directory.
"""

import glob
import os
import shutil
import zipfile
from pathlib import Path
from typing import List, Optional

from crosswalk_android.constants import (
    ARCHIVE_APP_RUNTIME_JAR,
    ARCHIVE_CORE_LIBRARY_DIR,
    ARCHIVE_LEGACY_RUNTIME_JAR,
    ARCHIVE_RES_DIR,
    ARCHIVE_TEMPLATE_LIBS_DIR,
    CORE_LIBRARY_DIR_NAME,
    MAX_VALIDATED_MAJOR,
    MIN_SUPPORTED_MAJOR,
    PROJECT_LIBS_DIR_NAME,
    PROJECT_RES_DIR_NAME,
)
from crosswalk_android.exceptions import (
    CorruptedArchiveError,
    MissingArchiveEntryError,
    UnsupportedVersionError,
    VersionTooNewWarning,
)
from crosswalk_android.log_utils import logger
from crosswalk_android.output import NullOutput, Output

from .files import FileOperations
from .interfaces import ImportResult, Pathish
from .version import VersionManager


class ArchiveImporter:
    """
    Extracts the runtime library, auxiliary jars and resources of a release into a project.

    Layout below the release root:
        xwalk_core_library/                      -> <project>/xwalk_core_library/
        template/libs/xwalk_runtime_java.jar     -> <project>/libs/  (major 8 only)
        template/libs/xwalk_app_runtime_java.jar -> <project>/libs/
        template/res/                            -> <project>/res/
    """

    def __init__(
        self,
        output: Optional[Output] = None,
        file_operations: Optional[FileOperations] = None,
        version_manager: Optional[VersionManager] = None,
    ):
        self.output = output or NullOutput()
        self.file_operations = file_operations or FileOperations()
        self.version_manager = version_manager or VersionManager()

    def check_major_version(self, major: int) -> Optional[VersionTooNewWarning]:
        """
        Check a release major version against the supported range.

        Returns:
            A VersionTooNewWarning if the release is newer than validated, else None.

        Raises:
            UnsupportedVersionError: If the release is older than the minimum supported.
        """
        if major < MIN_SUPPORTED_MAJOR:
            raise UnsupportedVersionError(major, MIN_SUPPORTED_MAJOR)
        if major > MAX_VALIDATED_MAJOR:
            warning = VersionTooNewWarning(major, MAX_VALIDATED_MAJOR)
            self.output.warning(str(warning))
            return warning
        return None

    def import_from_archive(
        self, archive_path: Pathish, project_path: Pathish
    ) -> ImportResult:
        """
        Import a release zip archive into a project.

        The project's runtime library directory is removed before extraction so no
        files from a previously imported release survive.

        Returns:
            ImportResult: Version information and the paths written.

        Raises:
            MalformedArchiveNameError: If no version can be derived from the file name.
            UnsupportedVersionError: If the release major version is below 8.
            CorruptedArchiveError: If the archive cannot be opened.
            MissingArchiveEntryError: If a required entry is missing.
        """
        archive_path = os.fspath(archive_path)
        project = Path(project_path)
        name = self.version_manager.parse_archive_name(archive_path)
        result = ImportResult(
            source=Path(archive_path),
            project_path=project,
            version=name.version,
            major=name.major,
        )

        warning = self.check_major_version(name.major)
        if warning is not None:
            result.warnings.append(warning)

        indicator = self.output.create_finite_progress(f"Extracting {archive_path}")
        try:
            indicator.update(0.1)
            try:
                zip_ref = zipfile.ZipFile(archive_path, "r")
            except (zipfile.BadZipFile, OSError) as e:
                raise CorruptedArchiveError(
                    f"Failed to open {archive_path}",
                    archive_path=archive_path,
                    details=str(e),
                ) from e

            with zip_ref:
                indicator.update(0.3)
                root = name.root_entry
                if not self.file_operations.has_entry(zip_ref, root):
                    raise MissingArchiveEntryError(root, archive_path)

                indicator.update(0.4)
                self._extract_core_library(zip_ref, root, project, result)

                indicator.update(0.5)
                libs_dir = project / PROJECT_LIBS_DIR_NAME
                if name.major == MIN_SUPPORTED_MAJOR:
                    self._extract_jar(
                        zip_ref, root + ARCHIVE_LEGACY_RUNTIME_JAR, libs_dir, result
                    )

                indicator.update(0.6)
                self._extract_jar(
                    zip_ref, root + ARCHIVE_APP_RUNTIME_JAR, libs_dir, result
                )

                indicator.update(0.7)
                res_entry = root + ARCHIVE_RES_DIR
                if not self.file_operations.has_entry(zip_ref, res_entry):
                    raise MissingArchiveEntryError(res_entry, archive_path)
                result.extracted.extend(
                    self.file_operations.extract_subtree(
                        zip_ref, res_entry, project / PROJECT_RES_DIR_NAME
                    )
                )
        except zipfile.BadZipFile as e:
            raise CorruptedArchiveError(
                f"Failed to read {archive_path}",
                archive_path=archive_path,
                details=str(e),
            ) from e
        else:
            indicator.update(1.0)
        finally:
            indicator.done()

        logger.info(
            "Imported Crosswalk %s into %s (%d files)",
            name.version,
            project,
            len(result.extracted),
        )
        return result

    def _extract_core_library(
        self,
        zip_ref: zipfile.ZipFile,
        root: str,
        project: Path,
        result: ImportResult,
    ) -> None:
        entry = root + ARCHIVE_CORE_LIBRARY_DIR
        if not self.file_operations.has_entry(zip_ref, entry):
            raise MissingArchiveEntryError(entry, zip_ref.filename)

        dest = project / CORE_LIBRARY_DIR_NAME
        if self.file_operations.remove_tree(dest):
            logger.debug(f"Removed existing {dest}")
        dest.mkdir(parents=True, exist_ok=True)
        result.extracted.extend(
            self.file_operations.extract_subtree(zip_ref, entry, dest)
        )

    def _extract_jar(
        self,
        zip_ref: zipfile.ZipFile,
        entry: str,
        libs_dir: Path,
        result: ImportResult,
    ) -> None:
        if not self.file_operations.has_entry(zip_ref, entry):
            raise MissingArchiveEntryError(entry, zip_ref.filename)
        result.extracted.append(
            self.file_operations.extract_member(zip_ref, entry, libs_dir)
        )

    def import_from_directory(
        self, release_dir: Pathish, project_path: Pathish
    ) -> ImportResult:
        """
        Import an unpacked release directory into a project.

        Copies the runtime library, every `*.jar` of `template/libs` and the resources.
        Existing files of the same name are overwritten; nothing is removed first.

        Raises:
            MissingArchiveEntryError: If one of the source subtrees is missing.
        """
        source = Path(release_dir)
        project = Path(project_path)
        result = ImportResult(source=source, project_path=project)

        core_src = source / CORE_LIBRARY_DIR_NAME
        libs_src = source / ARCHIVE_TEMPLATE_LIBS_DIR
        res_src = source / ARCHIVE_RES_DIR.rstrip("/")
        for required in (core_src, libs_src, res_src):
            if not required.is_dir():
                raise MissingArchiveEntryError(str(required), str(source))

        result.extracted.append(
            self.file_operations.copy_tree(core_src, project / CORE_LIBRARY_DIR_NAME)
        )

        jars: List[str] = sorted(glob.glob(os.path.join(os.fspath(libs_src), "*.jar")))
        if jars:
            libs_dest = project / PROJECT_LIBS_DIR_NAME
            libs_dest.mkdir(parents=True, exist_ok=True)
            for jar in jars:
                target = libs_dest / os.path.basename(jar)
                shutil.copy2(jar, target)
                result.extracted.append(target)

        result.extracted.append(
            self.file_operations.copy_tree(res_src, project / PROJECT_RES_DIR_NAME)
        )

        logger.info(f"Imported Crosswalk from {source} into {project}")
        return result
