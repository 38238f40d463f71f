"""
Branch name resolution and parsing.

A release branch is named after the ``major.minor`` line it produces,
optionally behind a prefix such as ``release/1.2``.
"""

import re
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .errors import BranchFormatError, ConfigurationError, DetachedHeadError

BARE_VERSION_RE = re.compile(r'^\d+\.\d+$')


@dataclass(frozen=True)
class BranchInfo:
    """Parsed branch name."""
    
    name: str
    bare_version: str
    prefix: str = ''


async def resolve_branch_name(branch_name_override: Optional[str], repository) -> str:
    """
    Determine the branch name to derive the version from.
    
    Args:
        branch_name_override: Explicit branch name; used verbatim when set
        repository: Repository collaborator queried when there is no override
        
    Returns:
        str: Branch name
        
    Raises:
        DetachedHeadError: If HEAD is detached and no override was given
    """
    if branch_name_override:
        logger.debug(f"Using branch name override '{branch_name_override}'")
        return branch_name_override
    
    current = await repository.current_branch()
    if current.is_detached:
        raise DetachedHeadError(
            'HEAD is detached, cannot determine the branch name. '
            'Check out a branch or pass --branch-name.'
        )
    logger.debug(f"Current branch is '{current.name}'")
    return current.name


def compile_prefix_pattern(pattern: str) -> re.Pattern:
    """Compile a user supplied branch prefix pattern, case-insensitive."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise ConfigurationError(f"Invalid ignore branch prefix pattern '{pattern}': {e}") from e


def parse_branch_name(branch_name: str, ignore_branch_prefix: Optional[str] = None) -> BranchInfo:
    """
    Split a branch name into an optional prefix and a ``major.minor`` version.
    
    The prefix pattern is matched at the start of the name. The matched text,
    minus one trailing ``/``, becomes the prefix and the rest of the name must
    be the bare version.
    
    Args:
        branch_name: Raw branch name
        ignore_branch_prefix: Regular expression matching the prefix (optional)
        
    Returns:
        BranchInfo: Parsed branch
        
    Raises:
        BranchFormatError: If the name does not reduce to ``major.minor``
        ConfigurationError: If the prefix pattern is not a valid expression
    """
    prefix = ''
    fragment = branch_name
    
    if ignore_branch_prefix:
        match = compile_prefix_pattern(ignore_branch_prefix).match(branch_name)
        if match:
            matched = match.group(0)
            prefix = matched[:-1] if matched.endswith('/') else matched
            fragment = branch_name[match.end():]
            logger.debug(f"Stripped branch prefix '{matched}' from '{branch_name}'")
        else:
            logger.debug(f"Branch prefix pattern '{ignore_branch_prefix}' did not match '{branch_name}'")
    
    if not BARE_VERSION_RE.match(fragment):
        raise BranchFormatError(branch_name, fragment)
    
    return BranchInfo(name=branch_name, bare_version=fragment, prefix=prefix)
