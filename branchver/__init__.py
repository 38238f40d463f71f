"""
branchver

Derives a deterministic semantic version for a build from the checked out
git branch name and the tags reachable from it.
"""

from ._version import __version__
from .config import Config, load_config
from .engine import ComputationResult, compute, run
from .errors import (
    BranchFormatError,
    ConfigurationError,
    DetachedHeadError,
    RepositoryError,
    UnresolvedVersionError,
    VersionError,
    VersionParseError,
)

__description__ = "Compute semantic versions from git branch names and tags"

__all__ = [
    "__version__",
    "Config",
    "load_config",
    "ComputationResult",
    "compute",
    "run",
    "VersionError",
    "ConfigurationError",
    "RepositoryError",
    "DetachedHeadError",
    "BranchFormatError",
    "VersionParseError",
    "UnresolvedVersionError",
]
