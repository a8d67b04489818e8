"""
Variant build support for Crosswalk projects.
"""

from .controller import BuildClosure, BuildResult, BuildState, VariantBuildController
from .tool import AntBuildTool, BuildTool, parse_progress_tag, resolve_android_sdk_root
from .variants import PermissionVariantStore, VariantStateStore

__all__ = [
    "AntBuildTool",
    "BuildClosure",
    "BuildResult",
    "BuildState",
    "BuildTool",
    "PermissionVariantStore",
    "VariantBuildController",
    "VariantStateStore",
    "parse_progress_tag",
    "resolve_android_sdk_root",
]
