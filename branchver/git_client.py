"""
Git repository queries.

The only module that talks to git. Every query runs ``git`` through
``subprocess.run`` in a worker thread so the engine can await it, and any
failure is raised as a RepositoryError; nothing here retries.
"""

import asyncio
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from .errors import RepositoryError

GIT_TIMEOUT = 30


@dataclass(frozen=True)
class CurrentBranch:
    """Branch checked out in the working tree."""
    
    name: str
    is_detached: bool


class GitRepository:
    """
    Read-only access to a git working tree.
    
    Args:
        working_directory: Directory git is run in (None uses the current directory)
        git_path: Git executable to invoke
    """
    
    def __init__(self, working_directory: Optional[str] = None, git_path: str = 'git'):
        self.working_directory = working_directory
        self.git_path = git_path
    
    def _run_git_sync(self, args: List[str]) -> str:
        cmd = [self.git_path, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=GIT_TIMEOUT,
                cwd=self.working_directory
            )
        except FileNotFoundError as e:
            raise RepositoryError(f"Git executable not found: {self.git_path}") from e
        except subprocess.TimeoutExpired as e:
            raise RepositoryError(f"Git command timed out after {GIT_TIMEOUT}s: {' '.join(cmd)}") from e
        except OSError as e:
            # e.g. the working directory does not exist
            raise RepositoryError(f"Failed to run {' '.join(cmd)}: {e}") from e
        
        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise RepositoryError(
                f"Git command failed ({result.returncode}): {' '.join(cmd)}"
                + (f": {stderr}" if stderr else '')
            )
        return result.stdout
    
    async def _run_git(self, *args: str) -> str:
        return await asyncio.to_thread(self._run_git_sync, list(args))
    
    async def check_accessible(self) -> None:
        """Verify the working directory is inside a git work tree."""
        try:
            output = await self._run_git('rev-parse', '--is-inside-work-tree')
        except RepositoryError as e:
            location = self.working_directory or 'current directory'
            raise RepositoryError(f"Not a git repository ({location}): {e}") from e
        if output.strip() != 'true':
            location = self.working_directory or 'current directory'
            raise RepositoryError(f"Not inside a git work tree ({location})")
    
    async def current_branch(self) -> CurrentBranch:
        """Return the checked out branch; ``HEAD`` output means detached."""
        name = (await self._run_git('rev-parse', '--abbrev-ref', 'HEAD')).strip()
        return CurrentBranch(name=name, is_detached=(not name or name == 'HEAD'))
    
    async def decorated_tag_log(self) -> List[str]:
        """
        Return the decorations of every tagged commit plus HEAD.
        
        No ancestry is walked: git lists one line per commit that is pointed
        at by a tag or by HEAD, newest commit first. Each line looks like
        ``(HEAD -> 1.2, tag: v1.2.3, origin/1.2)``.
        
        Returns:
            List of decoration strings in the order git returned them
        """
        output = await self._run_git(
            'log', '--no-walk', '--tags', 'HEAD',
            '--decorate=short', '--pretty=format:%d'
        )
        return [line for line in output.splitlines() if line.strip()]
    
    async def commit_of(self, tag: str) -> str:
        """Return the commit a tag points at (annotated tags are peeled)."""
        return (await self._run_git('rev-list', '-n', '1', f'refs/tags/{tag}')).strip()
    
    async def current_commit(self) -> str:
        """Return the commit hash of HEAD."""
        return (await self._run_git('rev-parse', 'HEAD')).strip()
