"""
Tag lookup for the branch version.

Finds the tag describing the last release of the branch's ``major.minor``
line and whether HEAD sits exactly on it.

Tags are scanned in the order git's log returns them (newest commit first)
and the first matching tag wins. Tags are never ranked by version.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from .branch import BranchInfo
from .errors import ConfigurationError

HEAD_MARKER = 'HEAD'
TAG_MARKER = 'tag: '


@dataclass(frozen=True)
class TagMatchResult:
    """Outcome of the tag scan."""
    
    matched_version: str
    is_on_current_commit: bool = False
    is_synthesized: bool = False


def parse_decorations(entry: str) -> List[str]:
    """Split a ``(HEAD -> main, tag: v1.0)`` log entry into its ref names."""
    entry = entry.strip()
    if entry.startswith('(') and entry.endswith(')'):
        entry = entry[1:-1]
    return [ref.strip() for ref in entry.split(',') if ref.strip()]


def is_head_entry(entry: str) -> bool:
    """Check whether a log entry decorates the commit HEAD points at."""
    for ref in parse_decorations(entry):
        if ref == HEAD_MARKER or ref.startswith(f'{HEAD_MARKER} -> '):
            return True
    return False


def filter_to_head(entries: List[str]) -> List[str]:
    """
    Drop the entries listed before HEAD's entry.
    
    Git lists newest commits first, so those entries belong to commits beyond
    HEAD and their tags can not describe the current build. HEAD's own entry
    is kept. Without a HEAD entry the list is returned unchanged.
    
    Args:
        entries: Decorated log entries in git's order
        
    Returns:
        List of entries from HEAD onwards, in the original order
    """
    if not any(is_head_entry(entry) for entry in entries):
        return list(entries)
    
    kept = []
    for entry in reversed(entries):
        kept.append(entry)
        if is_head_entry(entry):
            break
    kept.reverse()
    return kept


def extract_tag_names(entries: List[str]) -> List[str]:
    """Collect tag names from the log entries, keeping their order."""
    tags = []
    for entry in entries:
        for ref in parse_decorations(entry):
            if ref.startswith(TAG_MARKER):
                tags.append(ref[len(TAG_MARKER):].strip())
    return tags


def build_tag_pattern(bare_version: str, tag_prefix: str = '') -> re.Pattern:
    """
    Build the expression matching tags of a ``major.minor`` line.
    
    The version must be followed by the end of the tag or a dot, so branch
    ``1.2`` never picks up ``1.20.0``. The version is a named group so
    groups inside the prefix pattern do not shift it.
    """
    source = f'^{tag_prefix or ""}(?P<version>{re.escape(bare_version)}(?:\\..+?)?)$'
    try:
        return re.compile(source, re.IGNORECASE)
    except re.error as e:
        raise ConfigurationError(f"Invalid tag prefix pattern '{tag_prefix}': {e}") from e


def match_tag(tags: List[str], bare_version: str, tag_prefix: str = '') -> Optional[tuple]:
    """
    Find the first tag belonging to the branch version.
    
    Args:
        tags: Tag names in scan order
        bare_version: Branch ``major.minor``
        tag_prefix: Regular expression matching the tag prefix
        
    Returns:
        tuple: (tag name, version fragment) of the first match, or None
    """
    pattern = build_tag_pattern(bare_version, tag_prefix)
    for tag in tags:
        match = pattern.match(tag)
        if match:
            return tag, match.group('version')
    return None


async def scan_tags(branch: BranchInfo, tag_prefix: str, repository) -> TagMatchResult:
    """
    Locate the last release tag of the branch and compare it with HEAD.
    
    Args:
        branch: Parsed branch
        tag_prefix: Regular expression matching the tag prefix ('' for none)
        repository: Repository collaborator
        
    Returns:
        TagMatchResult: Matched or synthesized version
    """
    # Validate the pattern before querying git
    build_tag_pattern(branch.bare_version, tag_prefix)
    
    entries = await repository.decorated_tag_log()
    candidates = filter_to_head(entries)
    logger.debug(f"Kept {len(candidates)} of {len(entries)} decorated log entries")
    
    tags = extract_tag_names(candidates)
    found = match_tag(tags, branch.bare_version, tag_prefix)
    
    if found is None:
        synthesized = f'{branch.bare_version}.0'
        logger.debug(f"No tag matches version {branch.bare_version}, starting from {synthesized}")
        return TagMatchResult(matched_version=synthesized, is_synthesized=True)
    
    tag, fragment = found
    tag_commit, head_commit = await asyncio.gather(
        repository.commit_of(tag),
        repository.current_commit(),
    )
    on_head = tag_commit == head_commit
    logger.debug(f"Matched tag '{tag}' ({fragment}) at {tag_commit[:12]}, HEAD is {head_commit[:12]}")
    return TagMatchResult(matched_version=fragment, is_on_current_commit=on_head)
