"""
Version computation and build number reconciliation.

Pure functions over the tag scan result and the configuration. Semantic
version text is parsed and rendered with the ``semver`` package; the
increment rules follow npm's ``semver.inc`` so versions line up with
JavaScript tooling fed the same tags.
"""

import re
from typing import Optional

import semver
from loguru import logger

from .errors import UnresolvedVersionError, VersionParseError
from .tags import TagMatchResult

TRAILING_NUMBER_RE = re.compile(r'\d+$')


def parse_semver(version_str: str) -> semver.Version:
    """
    Parse a semantic version string.
    
    Args:
        version_str: Version string like "1.2.3" or "1.2.4-alpha.0"
        
    Returns:
        semver.Version: Parsed version
        
    Raises:
        VersionParseError: If the text is not a valid semantic version
    """
    try:
        return semver.Version.parse(version_str)
    except (ValueError, TypeError) as e:
        raise VersionParseError(str(version_str), str(e)) from e


def prerelease_identifier(suffix: str, branch_prefix: str = '') -> str:
    """Return the prerelease identifier, e.g. ``release-alpha`` for branch prefix ``release``."""
    return f'{branch_prefix}-{suffix}' if branch_prefix else suffix


def increment(version_str: str, release_type: str, identifier: Optional[str] = None) -> str:
    """
    Increment a version.
    
    ``patch`` turns a prerelease into its release and otherwise bumps the
    patch number. ``prerelease`` starts ``<identifier>.0`` on the next patch
    for a release, or advances the last numeric part of an existing
    prerelease; a prerelease with a different identifier restarts at
    ``<identifier>.0``. Build metadata is dropped.
    
    Args:
        version_str: Version to increment
        release_type: "patch" or "prerelease"
        identifier: Prerelease identifier (prerelease only)
        
    Returns:
        str: Incremented version
    """
    version = parse_semver(version_str).replace(build=None)
    
    if release_type == 'patch':
        if version.prerelease:
            return str(version.replace(prerelease=None))
        return str(version.bump_patch())
    
    if release_type != 'prerelease':
        raise ValueError(f"Unsupported release type: {release_type}")
    
    if not version.prerelease:
        version = version.bump_patch()
        parts = [identifier, '0'] if identifier else ['0']
        return str(version.replace(prerelease='.'.join(parts)))
    
    parts = version.prerelease.split('.')
    for i in range(len(parts) - 1, -1, -1):
        if parts[i].isdigit():
            parts[i] = str(int(parts[i]) + 1)
            break
    else:
        parts.append('0')
    
    if identifier:
        if parts[0] != identifier or len(parts) < 2 or not parts[1].isdigit():
            parts = [identifier, '0']
    
    return str(version.replace(prerelease='.'.join(parts)))


def compute_version(match: TagMatchResult, config, branch_prefix: str = '') -> str:
    """
    Compute the next version from the tag scan result.
    
    Rules are evaluated top to bottom, the first applicable one wins:
    
    1. no increment with a current version: the current version
    2. HEAD is on the matched tag: the tag's version
    3. no tag matched: the synthesized ``major.minor.0`` baseline, as
       ``<identifier>.0`` prerelease in prerelease mode
    4. no increment without a current version: error
    5. otherwise: patch or prerelease increment of the matched version
    
    Args:
        match: Tag scan result
        config: Run configuration (pre, suffix, current_version, no_increment)
        branch_prefix: Stripped branch prefix
        
    Returns:
        str: Computed version
        
    Raises:
        UnresolvedVersionError: If rule 4 applies
        VersionParseError: If the matched version can not be incremented
    """
    if config.no_increment and config.current_version:
        logger.debug('No increment requested, keeping current version')
        return config.current_version
    
    if match.is_on_current_commit:
        logger.debug(f'HEAD is already tagged as {match.matched_version}')
        return match.matched_version
    
    if match.is_synthesized:
        if config.pre:
            identifier = prerelease_identifier(config.suffix, branch_prefix)
            return f'{match.matched_version}-{identifier}.0'
        return match.matched_version
    
    if config.no_increment:
        raise UnresolvedVersionError(
            'No increment requested but no current version was given; '
            'pass --current-version or drop --no-increment'
        )
    
    if config.pre:
        identifier = prerelease_identifier(config.suffix, branch_prefix)
        return increment(match.matched_version, 'prerelease', identifier)
    return increment(match.matched_version, 'patch')


def reconcile_build_number(version: str, match: TagMatchResult, config, branch_prefix: str = '') -> str:
    """
    Pin or continue the prerelease ordinal of a computed version.
    
    An explicit build number replaces the trailing ordinal. Otherwise a
    current version on the same ``major.minor.patch-identifier`` line is
    treated as the predecessor and its ordinal is advanced.
    
    Args:
        version: Version produced by compute_version
        match: Tag scan result
        config: Run configuration (pre, build_number, current_version, no_increment)
        branch_prefix: Stripped branch prefix
        
    Returns:
        str: Final version
    """
    if not config.pre or match.is_on_current_commit or config.no_increment:
        return version
    if config.build_number is None and not config.current_version:
        return version
    
    if config.build_number is not None:
        pinned = TRAILING_NUMBER_RE.sub(str(config.build_number), version)
        logger.debug(f'Applied build number {config.build_number}: {version} -> {pinned}')
        return pinned
    
    computed = parse_semver(version)
    reference = parse_semver(config.current_version)
    if _same_prerelease_line(computed, reference):
        identifier = prerelease_identifier(config.suffix, branch_prefix)
        continued = increment(config.current_version, 'prerelease', identifier)
        logger.debug(f'Continuing from current version {config.current_version}: {continued}')
        return continued
    
    logger.debug(f'Current version {config.current_version} is on another line, keeping {version}')
    return version


def _same_prerelease_line(left: semver.Version, right: semver.Version) -> bool:
    return (
        (left.major, left.minor, left.patch) == (right.major, right.minor, right.patch)
        and _first_prerelease_token(left) == _first_prerelease_token(right)
    )


def _first_prerelease_token(version: semver.Version) -> Optional[str]:
    if not version.prerelease:
        return None
    return version.prerelease.split('.')[0]
