"""
Project Update Orchestrator

Ties the version resolver, release index and archive importer together for the
two project flows: first-time import and updating an existing project.
"""

import os
from pathlib import Path
from typing import Iterable, List, Optional

from crosswalk_android.exceptions import CrosswalkError
from crosswalk_android.log_utils import logger
from crosswalk_android.output import NullOutput, Output

from .importer import ArchiveImporter
from .interfaces import (
    ImportResult,
    Pathish,
    ReleaseIndex,
    ResolvedRelease,
    is_channel,
)
from .resolver import VersionResolver
from .version import VersionManager


class ProjectUpdateOrchestrator:
    """
    Obtains a release archive and imports it into a project.

    An archive already present in the download directory (or the current working
    directory) is used instead of downloading it again.

    Usage:
        orchestrator = ProjectUpdateOrchestrator(index, download_dir="~/.cache/...")
        orchestrator.import_latest_or_local(None, "beta", "/path/to/project")
        orchestrator.update("14.43.343.17", "/path/to/project")
    """

    def __init__(
        self,
        index: ReleaseIndex,
        resolver: Optional[VersionResolver] = None,
        importer: Optional[ArchiveImporter] = None,
        output: Optional[Output] = None,
        download_dir: Optional[Pathish] = None,
    ):
        self.output = output or NullOutput()
        self.index = index
        self.resolver = resolver or VersionResolver(index, self.output)
        self.importer = importer or ArchiveImporter(self.output)
        self.download_dir = Path(download_dir) if download_dir else Path.cwd()
        self.version_manager = VersionManager()

    def _search_dirs(self) -> List[Path]:
        dirs = [self.download_dir]
        cwd = Path.cwd()
        if cwd != self.download_dir:
            dirs.append(cwd)
        return dirs

    def obtain_archive(self, release: ResolvedRelease) -> str:
        """
        Return a local path to the archive of `release`, downloading it if needed.

        Raises:
            NetworkError: If the archive has to be downloaded and the download fails.
        """
        local = self.index.find_locally(release.version, self._search_dirs())
        if local:
            self.output.info(f"Using local {local}")
            return local

        self.download_dir.mkdir(parents=True, exist_ok=True)
        return self.index.download(release.version, release.channel, self.download_dir)

    def _import_local(
        self, local_path: Pathish, project_path: Pathish
    ) -> Optional[ImportResult]:
        self.output.info(f"Attempting to use local Crosswalk {local_path}")
        try:
            if os.path.isdir(local_path):
                return self.importer.import_from_directory(local_path, project_path)
            if os.path.isfile(local_path):
                return self.importer.import_from_archive(local_path, project_path)
            logger.debug(f"Local Crosswalk {local_path} does not exist")
        except CrosswalkError as e:
            logger.debug(f"Local import failed: {e}")
        self.output.warning("Import of local Crosswalk failed, attempting download ...")
        return None

    def import_latest_or_local(
        self,
        local_path: Optional[Pathish],
        channel: Optional[str],
        project_path: Pathish,
    ) -> ImportResult:
        """
        Import a release into a freshly created project.

        A given local archive or release directory is tried first; if that fails the
        latest release of `channel` is used.

        Raises:
            CrosswalkError: The first failure of the network path.
        """
        if local_path:
            result = self._import_local(local_path, project_path)
            if result is not None:
                return result

        release = self.resolver.resolve(None, channel)
        self.output.info(f"Latest version is {release.version}")
        archive = self.obtain_archive(release)
        return self.importer.import_from_archive(archive, project_path)

    def update(self, spec: str, project_path: Pathish) -> ImportResult:
        """
        Update a project to a channel's latest release or to a specific version.

        Parameters:
            spec: A channel name, or otherwise a version string.

        Raises:
            CrosswalkError: The first failure encountered.
        """
        if is_channel(spec):
            release = self.resolver.resolve(None, spec)
        else:
            release = self.resolver.resolve(spec, None)

        archive = self.obtain_archive(release)
        result = self.importer.import_from_archive(archive, project_path)
        self.output.info(f"Project updated to version {release.version}")
        return result

    def list_versions(self, channel: str) -> List[str]:
        """Return a channel's versions ordered oldest to newest."""
        versions: Iterable[str] = self.index.fetch_versions(channel)
        return self.version_manager.sort_versions(versions)
