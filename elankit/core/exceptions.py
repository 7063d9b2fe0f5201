"""
Centralized exception hierarchy for elankit.

This module defines all custom exceptions used across the codebase
to eliminate duplication and provide clear exception semantics.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ElanKitError(Exception):
    """Base exception for all elankit errors."""

    pass


# ============================================================================
# Toolchain-related Exceptions
# ============================================================================


class ToolchainError(ElanKitError):
    """Base exception for toolchain-related errors."""

    pass


class ToolchainNotInstalledError(ToolchainError):
    """Raised when an operation requires a toolchain that is not installed."""

    def __init__(self, toolchain_name: str):
        self.toolchain_name = toolchain_name
        super().__init__(f"toolchain '{toolchain_name}' is not installed")


class InvalidCustomToolchainNameError(ToolchainError):
    """Raised when a custom-only operation targets a distribution toolchain."""

    def __init__(self, toolchain_name: str):
        self.toolchain_name = toolchain_name
        super().__init__(f"invalid custom toolchain name: '{toolchain_name}'")


class BadInstallerTypeError(ToolchainError):
    """Raised when an installer does not have a supported archive extension."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"invalid extension for installer: '{extension}'")


class BinaryNotFoundError(ToolchainError):
    """Raised when a binary cannot be resolved for a toolchain."""

    def __init__(self, toolchain_name: str, binary: str):
        self.toolchain_name = toolchain_name
        self.binary = binary
        super().__init__(
            f"toolchain '{toolchain_name}' does not have the binary `{binary}`"
        )


class NoToolchainSelectedError(ToolchainError):
    """Raised when no toolchain is named, overridden or set as default."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"no default toolchain configured and no override for '{path}'")


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(ElanKitError):
    """Base exception for filesystem operations."""

    pass


class NotADirectory(FilesystemError):
    """Path was expected to be a directory."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"not a directory: '{path}'")


class NotAFile(FilesystemError):
    """Path was expected to be a regular file."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"not a file: '{path}'")


class LinkCreationError(FilesystemError):
    """Failed to create a symbolic link or junction."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Network / Distribution Exceptions
# ============================================================================


class DownloadError(ElanKitError):
    """Exception raised when download fails."""

    pass


class ChecksumError(DownloadError):
    """Exception raised when checksum verification fails."""

    pass


class DistError(ElanKitError):
    """Base exception for distribution errors."""

    pass


class InvalidToolchainDescError(DistError):
    """Raised when a toolchain name does not parse as a distribution descriptor."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"invalid toolchain name: '{name}'")


class ReleaseResolutionError(DistError):
    """Raised when a release channel cannot be resolved to a concrete release."""

    pass


# ============================================================================
# Settings / Telemetry Exceptions
# ============================================================================


class SettingsError(ElanKitError):
    """Raised when the settings file cannot be read or written."""

    pass


class TelemetryError(ElanKitError):
    """Raised when a telemetry event cannot be recorded."""

    pass
