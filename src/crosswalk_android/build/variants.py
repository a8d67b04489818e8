"""
Variant enable state.

Which hardware variants the build tool includes is decided by the state of the
per-variant directories below `xwalk_core_library/libs`. The store classes here
own that encoding so the build controller only deals in enabled/disabled flags.
"""

from __future__ import annotations

import os
import stat
from abc import ABC, abstractmethod
from typing import List, Optional

from crosswalk_android.constants import (
    CORE_LIBRARY_DIR_NAME,
    PROJECT_LIBS_DIR_NAME,
    VARIANT_ENABLE_BITS,
)
from crosswalk_android.exceptions import NotACrosswalkProjectError, UnknownVariantError
from crosswalk_android.log_utils import logger


class VariantStateStore(ABC):
    """Persistence of the per-variant enable flag."""

    @abstractmethod
    def list_variants(self) -> List[str]:
        """
        Return the identifiers of all variants present in the project.

        Raises:
            NotACrosswalkProjectError: If the project has no variant area.
        """

    @abstractmethod
    def is_enabled(self, variant: str) -> bool: ...

    @abstractmethod
    def set_enabled(self, variant: str, enabled: bool) -> None: ...

    def enable_all(self) -> None:
        for variant in self.list_variants():
            self.set_enabled(variant, True)

    def enable_only(self, variant: str) -> None:
        """
        Enable `variant` and disable every other variant.

        Raises:
            UnknownVariantError: If no variant named `variant` exists.
        """
        variants = self.list_variants()
        if variant not in variants:
            raise UnknownVariantError(variant)
        for name in variants:
            self.set_enabled(name, name == variant)


class PermissionVariantStore(VariantStateStore):
    """
    Encodes the enable flag in the read and execute permission bits of each variant directory.

    Enabled directories get r-x for user, group and other added; disabled ones have
    those bits cleared. Write bits are left untouched.
    """

    def __init__(self, project_path: str):
        self.project_path = os.fspath(project_path)

    @property
    def libs_dir(self) -> str:
        return os.path.join(
            self.project_path, CORE_LIBRARY_DIR_NAME, PROJECT_LIBS_DIR_NAME
        )

    def _variant_dir(self, variant: str) -> str:
        return os.path.join(self.libs_dir, variant)

    def list_variants(self) -> List[str]:
        if not os.path.isdir(self.libs_dir):
            raise NotACrosswalkProjectError(self.project_path)
        return sorted(
            name
            for name in os.listdir(self.libs_dir)
            if os.path.isdir(self._variant_dir(name))
        )

    def _mode(self, variant: str) -> Optional[int]:
        try:
            return stat.S_IMODE(os.stat(self._variant_dir(variant)).st_mode)
        except FileNotFoundError:
            return None

    def is_enabled(self, variant: str) -> bool:
        mode = self._mode(variant)
        if mode is None:
            raise UnknownVariantError(variant)
        return mode & VARIANT_ENABLE_BITS == VARIANT_ENABLE_BITS

    def set_enabled(self, variant: str, enabled: bool) -> None:
        mode = self._mode(variant)
        if mode is None:
            raise UnknownVariantError(variant)
        if enabled:
            new_mode = mode | VARIANT_ENABLE_BITS
        else:
            new_mode = mode & ~VARIANT_ENABLE_BITS
        os.chmod(self._variant_dir(variant), new_mode)
        logger.debug(
            "%s variant %s (mode %o)",
            "Enabled" if enabled else "Disabled",
            variant,
            new_mode,
        )
