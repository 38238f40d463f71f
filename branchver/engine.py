"""
Version computation pipeline.

Runs the stages in order: resolve branch, parse branch, scan tags,
compute version, reconcile build number. Each stage consumes the previous
stage's immutable result; a failure in any of them aborts the run.
"""

import asyncio
from dataclasses import asdict, dataclass
from typing import Dict

from loguru import logger

from .branch import compile_prefix_pattern, parse_branch_name, resolve_branch_name
from .errors import ConfigurationError
from .git_client import GitRepository
from .tags import scan_tags
from .versioning import compute_version, reconcile_build_number

ENV_PREFIX = 'BRANCHVER_'


@dataclass(frozen=True)
class ComputationResult:
    """Result of a version computation."""
    
    branch_name: str
    branch_prefix: str
    branch_version: str
    last_matching_version: str
    version: str
    
    def as_dict(self) -> Dict[str, str]:
        return asdict(self)
    
    def as_environment(self) -> Dict[str, str]:
        """Environment variables handed to the post-computation command."""
        return {f'{ENV_PREFIX}{key.upper()}': value for key, value in asdict(self).items()}


def validate_config(config) -> None:
    """
    Reject configurations the pipeline can not run with.
    
    Called before any repository query.
    
    Raises:
        ConfigurationError: If prerelease mode has no suffix, the build number
            is negative or a pattern is invalid
    """
    if config.pre and not config.suffix:
        raise ConfigurationError('Prerelease version requested but no suffix was given (use --suffix)')
    if config.build_number is not None and config.build_number < 0:
        # -1 is resolved to a timestamp by load_config, never by the pipeline
        raise ConfigurationError(f'Build number must be a non-negative integer (got: {config.build_number})')
    if config.ignore_branch_prefix:
        compile_prefix_pattern(config.ignore_branch_prefix)


async def compute(config, repository=None) -> ComputationResult:
    """
    Compute the version for the current state of the repository.
    
    Args:
        config: Run configuration
        repository: Repository collaborator, defaults to a GitRepository
            in config.working_directory
        
    Returns:
        ComputationResult: Fully populated result
        
    Raises:
        VersionError: Any failure; no partial result is produced
    """
    validate_config(config)
    
    if repository is None:
        repository = GitRepository(config.working_directory)
    await repository.check_accessible()
    
    branch_name = await resolve_branch_name(config.branch_name, repository)
    branch = parse_branch_name(branch_name, config.ignore_branch_prefix)
    logger.debug(f"Branch '{branch.name}': prefix '{branch.prefix}', version {branch.bare_version}")
    
    match = await scan_tags(branch, config.tag_prefix, repository)
    
    version = compute_version(match, config, branch.prefix)
    version = reconcile_build_number(version, match, config, branch.prefix)
    
    return ComputationResult(
        branch_name=branch.name,
        branch_prefix=branch.prefix,
        branch_version=branch.bare_version,
        last_matching_version=match.matched_version,
        version=version,
    )


def run(config, repository=None) -> ComputationResult:
    """Synchronous wrapper around compute()."""
    return asyncio.run(compute(config, repository))
