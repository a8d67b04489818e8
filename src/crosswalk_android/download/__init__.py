"""
Crosswalk Release Subsystem

This package locates Crosswalk releases on the release server and imports them
into Android project trees.

Core Components:
- interfaces: Shared data structures and the release index interface
- version: Version ordering and archive name parsing
- release_index: HTTP access to the per-channel release listings
- resolver: Channel search for a requested or latest version
- importer: Extraction of release archives and directories into a project
- orchestrator: First-time import and update flows
- files: Archive and directory tree primitives
"""

from .files import FileOperations
from .importer import ArchiveImporter
from .interfaces import ImportResult, ReleaseIndex, ResolvedRelease
from .orchestrator import ProjectUpdateOrchestrator
from .release_index import HttpReleaseIndex
from .resolver import VersionResolver
from .version import ArchiveName, VersionManager

__all__ = [
    # Interfaces
    "ReleaseIndex",
    "ResolvedRelease",
    "ImportResult",
    # Release server
    "HttpReleaseIndex",
    "VersionResolver",
    # Import
    "ArchiveImporter",
    "FileOperations",
    # Orchestration
    "ProjectUpdateOrchestrator",
    # Core components
    "VersionManager",
    "ArchiveName",
]
