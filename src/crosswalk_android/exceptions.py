"""
Custom exceptions for crosswalk-android.

This module defines domain-specific exceptions so that failures in release
lookup, archive import, and variant builds surface as human-readable messages
with enough context for callers to react to them.
"""


class CrosswalkError(Exception):
    """
    Base exception for all crosswalk-android errors.

    All custom exceptions in the package inherit from this class so that the
    CLI can catch every application-specific error in one place.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CrosswalkError):
    """Exception raised when configuration is invalid."""

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the configuration file cannot be read or written."""

    pass


# =============================================================================
# Release Server Errors
# =============================================================================


class ReleaseServerError(CrosswalkError):
    """
    Base exception for release server access.

    Attributes:
        url: The URL that was being accessed when the error occurred.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class NetworkError(ReleaseServerError):
    """
    Exception raised for transport failures talking to the release server.

    This includes:
    - Connection timeouts
    - DNS resolution failures
    - HTTP error responses other than a missing channel
    - Failed or corrupted archive downloads
    """

    pass


class ChannelNotFoundError(ReleaseServerError):
    """Exception raised when a release channel has no published data."""

    def __init__(
        self,
        channel: str,
        url: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(f"Release channel '{channel}' not found", url, details)
        self.channel = channel


# =============================================================================
# Version Errors
# =============================================================================


class VersionError(CrosswalkError):
    """Exception raised when a release version cannot be used."""

    pass


class VersionNotFoundError(VersionError):
    """Exception raised when a requested version is not available in any channel."""

    def __init__(self, version: str, details: str | None = None) -> None:
        super().__init__(
            f"Version {version} seems not to be available on the server", details
        )
        self.version = version


class UnsupportedVersionError(VersionError):
    """Exception raised when a release major version is below the supported minimum."""

    def __init__(self, major: int, minimum: int) -> None:
        super().__init__(
            f"Crosswalk version {major} not supported. Use {minimum}+.",
        )
        self.major = major
        self.minimum = minimum


class VersionTooNewWarning(UserWarning):
    """
    Non-fatal notice that a release is newer than anything the importer was validated with.

    Never raised; the importer logs it and records it on the import result.
    """

    def __init__(self, major: int, maximum: int) -> None:
        self.major = major
        self.maximum = maximum
        super().__init__(
            f"This tool has not been tested with Crosswalk {major} "
            f"(validated up to {maximum})."
        )


# =============================================================================
# Archive Errors
# =============================================================================


class ArchiveError(CrosswalkError):
    """
    Exception raised for release archive errors.

    Attributes:
        archive_path: Path to the problematic archive or release directory.
    """

    def __init__(
        self,
        message: str,
        archive_path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.archive_path = archive_path


class MissingArchiveEntryError(ArchiveError):
    """Exception raised when an expected entry is missing from a release archive."""

    def __init__(self, entry: str, archive_path: str | None = None) -> None:
        super().__init__(f"Failed to find entry {entry}", archive_path)
        self.entry = entry


class CorruptedArchiveError(ArchiveError):
    """Exception raised when an archive cannot be opened or read."""

    pass


class MalformedArchiveNameError(ArchiveError):
    """Exception raised when no version can be derived from an archive file name."""

    pass


# =============================================================================
# Project Errors
# =============================================================================


class ProjectError(CrosswalkError):
    """Exception raised for problems with the project tree."""

    pass


class NotACrosswalkProjectError(ProjectError):
    """Exception raised when a directory lacks the Crosswalk runtime library layout."""

    def __init__(self, path: str) -> None:
        super().__init__(
            "This does not appear to be the root of a Crosswalk project.",
            details=path,
        )
        self.path = path


# =============================================================================
# Build Errors
# =============================================================================


class BuildError(CrosswalkError):
    """
    Base exception for variant build failures.

    Attributes:
        variant: Identifier of the variant that was being built.
    """

    def __init__(
        self, message: str, variant: str | None = None, details: str | None = None
    ) -> None:
        super().__init__(message, details)
        self.variant = variant


class BuildToolFailure(BuildError):
    """Exception raised when the external build tool reports failure."""

    def __init__(self, variant: str, details: str | None = None) -> None:
        super().__init__(f"Building ABI '{variant}' failed", variant, details)


class RenameFailure(BuildError):
    """Exception raised when a build artifact cannot be renamed for its variant."""

    def __init__(self, variant: str, details: str | None = None) -> None:
        super().__init__(
            f"Renaming package for ABI '{variant}' failed", variant, details
        )


class UnknownVariantError(BuildError):
    """Exception raised when a requested variant has no directory in the project."""

    def __init__(self, variant: str) -> None:
        super().__init__(f"Enabling ABI '{variant}' failed", variant)


class BuildCancelledError(BuildError):
    """Exception raised when a multi-variant build is cancelled between variants."""

    def __init__(self, variant: str | None = None) -> None:
        super().__init__("Build cancelled", variant)
