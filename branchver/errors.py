"""
Error types raised while computing a version.

Every error aborts the whole computation. The engine never exits the
process itself; the CLI maps these to exit codes.
"""

from typing import Optional


class VersionError(Exception):
    """Base class for all failures raised by the version engine."""


class ConfigurationError(VersionError):
    """Raised when the supplied configuration cannot be used."""


class RepositoryError(VersionError):
    """Raised when the git repository is missing or a git command fails."""


class DetachedHeadError(VersionError):
    """Raised when a branch name is needed but HEAD is detached."""


class BranchFormatError(VersionError):
    """Raised when a branch name does not reduce to ``major.minor``."""

    def __init__(self, branch_name: str, fragment: Optional[str] = None):
        self.branch_name = branch_name
        self.fragment = fragment if fragment is not None else branch_name
        super().__init__(
            f"Branch name '{branch_name}' does not contain a 'major.minor' version "
            f"(extracted fragment: '{self.fragment}')"
        )


class VersionParseError(VersionError):
    """Raised when a version string is not valid semantic version text."""

    def __init__(self, version: str, reason: str = ''):
        self.version = version
        message = f"Invalid semantic version '{version}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnresolvedVersionError(VersionError):
    """Raised when no-increment mode is requested without a current version."""
