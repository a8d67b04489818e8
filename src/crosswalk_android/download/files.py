"""
File Operations for Release Imports

Archive member lookup, subtree extraction with traversal protection, and the
directory copy/remove helpers the importer uses to place runtime files into a
project tree.
"""

import os
import shutil
import zipfile
from pathlib import Path
from typing import List

from crosswalk_android.log_utils import logger

from .interfaces import Pathish


def _is_within_base(real_base_dir: str, candidate: str) -> bool:
    """
    Determine whether the candidate path resides within the given base directory.

    Returns:
        True if the candidate path is inside `real_base_dir`, False otherwise.
    """
    try:
        return os.path.commonpath([real_base_dir, candidate]) == real_base_dir
    except ValueError:
        return False


def safe_extract_path(extract_dir: str, file_path: str) -> str:
    """
    Resolve a safe absolute extraction path and prevent directory traversal.

    Parameters:
        extract_dir (str): Base directory intended for extraction.
        file_path (str): Relative member path to be written below `extract_dir`.

    Returns:
        str: Absolute, normalized path inside extract_dir.

    Raises:
        ValueError: If the resolved path is outside extract_dir.
    """
    real_extract_dir = os.path.realpath(extract_dir)
    prospective_path = os.path.join(real_extract_dir, file_path)
    normalized_path = os.path.realpath(prospective_path)

    if not _is_within_base(real_extract_dir, normalized_path):
        raise ValueError(
            f"Unsafe extraction path '{file_path}' is outside base '{extract_dir}'"
        )

    return normalized_path


class FileOperations:
    """
    Provides file operations for placing release content into a project.

    Includes methods for:
    - Archive entry lookup
    - Subtree and single-member extraction
    - Directory tree copy and removal
    """

    def _is_safe_archive_member(self, member_name: str) -> bool:
        """
        Determine whether an archive member name is safe to extract.

        Returns:
            `True` if the member name contains no absolute paths, parent-directory references, or null bytes, `False` otherwise.
        """
        if (
            not member_name
            or member_name.startswith("/")
            or member_name.startswith("\\")
        ):
            return False
        normalized = os.path.normpath(member_name)
        if os.path.isabs(normalized):
            return False
        if normalized == "..":
            return False
        if normalized.startswith(f"..{os.sep}"):
            return False
        if os.altsep and normalized.startswith(f"..{os.altsep}"):
            return False
        if "\x00" in normalized:
            return False
        return True

    def has_entry(self, zip_ref: zipfile.ZipFile, entry: str) -> bool:
        """
        Check whether an archive contains `entry`.

        Directory entries (ending in "/") also count as present when any member lives
        below them, since many zip writers omit explicit directory records.
        """
        names = zip_ref.namelist()
        if entry in names:
            return True
        if entry.endswith("/"):
            return any(name.startswith(entry) for name in names)
        return False

    def extract_subtree(
        self, zip_ref: zipfile.ZipFile, prefix: str, dest_dir: Pathish
    ) -> List[Path]:
        """
        Extract every member under `prefix` into `dest_dir`, stripping the prefix.

        Members with unsafe names are skipped with a warning.

        Returns:
            List[Path]: Files that were written, in archive order.
        """
        dest_dir = os.fspath(dest_dir)
        os.makedirs(dest_dir, exist_ok=True)
        extracted: List[Path] = []

        for file_info in zip_ref.infolist():
            name = file_info.filename
            if not name.startswith(prefix):
                continue
            relative = name[len(prefix) :]
            if not relative:
                continue
            if not self._is_safe_archive_member(name) or not self._is_safe_archive_member(
                relative
            ):
                logger.warning(
                    "Skipping unsafe archive member %s (possible traversal)", name
                )
                continue

            try:
                target = safe_extract_path(dest_dir, relative)
            except ValueError as e:
                logger.warning(f"Skipping unsafe extraction path: {e}")
                continue

            if file_info.is_dir():
                os.makedirs(target, exist_ok=True)
                continue

            os.makedirs(os.path.dirname(target), exist_ok=True)
            with zip_ref.open(file_info) as source, open(target, "wb") as out:
                shutil.copyfileobj(source, out)
            extracted.append(Path(target))

        logger.debug(
            "Extracted %d files from %s into %s", len(extracted), prefix, dest_dir
        )
        return extracted

    def extract_member(
        self, zip_ref: zipfile.ZipFile, name: str, dest_dir: Pathish
    ) -> Path:
        """
        Extract a single archive member into `dest_dir`, keeping only its base name.

        Raises:
            KeyError: If the member does not exist.
        """
        dest_dir = os.fspath(dest_dir)
        os.makedirs(dest_dir, exist_ok=True)
        target = safe_extract_path(dest_dir, os.path.basename(name))
        with zip_ref.open(name) as source, open(target, "wb") as out:
            shutil.copyfileobj(source, out)
        logger.debug(f"Extracted {name} to {target}")
        return Path(target)

    def copy_tree(self, source_dir: Pathish, dest_dir: Pathish) -> Path:
        """Copy a directory tree, merging into `dest_dir` if it exists."""
        shutil.copytree(os.fspath(source_dir), os.fspath(dest_dir), dirs_exist_ok=True)
        logger.debug(f"Copied {source_dir} to {dest_dir}")
        return Path(dest_dir)

    def remove_tree(self, path: Pathish) -> bool:
        """
        Remove a directory tree or file if present.

        Returns:
            bool: True if something was removed, False if the path did not exist.
        """
        path = os.fspath(path)
        if os.path.islink(path) or os.path.isfile(path):
            os.remove(path)
            return True
        if os.path.isdir(path):
            shutil.rmtree(path)
            return True
        return False
