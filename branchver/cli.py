"""
Command-line interface for branchver.

Main entry point: loads configuration, runs the version computation,
prints the result and optionally runs a command with the computed
version in its environment.
"""

import argparse
import os
import subprocess
import sys
from typing import List, Optional

from loguru import logger
from rich.console import Console

from ._version import __version__
from .config import Config, load_config
from .engine import ComputationResult, run
from .errors import VersionError
from .logging_config import setup_logging

# Logs share stderr so stdout only carries requested output
console = Console(stderr=True)
stdout_console = Console()


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='branchver',
        description='Compute a semantic version from the git branch name and its tags'
    )
    
    # Branch and tag matching
    parser.add_argument('--branch-name', help='Branch name to use instead of the checked out branch')
    parser.add_argument('--ignore-branch-prefix', help='Regular expression matching a branch prefix to strip (e.g. "release/")')
    parser.add_argument('--tag-prefix', help='Regular expression matching a tag prefix to strip (e.g. "v")')
    
    # Version computation
    parser.add_argument('--pre', action='store_true', default=None, help='Compute a prerelease version')
    parser.add_argument('--suffix', help='Prerelease suffix, required with --pre (e.g. "alpha")')
    parser.add_argument('--build-number', type=int, help='Build number used as prerelease ordinal (-1 uses a timestamp)')
    parser.add_argument('--current-version', help='Previously computed version to continue from')
    parser.add_argument('--no-increment', action='store_true', default=None, help='Keep --current-version instead of incrementing')
    
    # Repository and configuration
    parser.add_argument('--working-directory', help='Path of the git repository (default: current directory)')
    parser.add_argument('--config', help='JSON configuration file (default: branchver.json if present)')
    
    # Output
    parser.add_argument('--execute', help='Shell command to run with the computed version in BRANCHVER_VERSION')
    parser.add_argument('--json', action='store_true', help='Print the result as JSON on stdout')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'debug', 'info', 'warning', 'error'], help='Logging level (default: INFO)')
    
    return parser.parse_args(argv)


def print_result(result: ComputationResult, as_json: bool = False) -> None:
    """Print the computation result."""
    if as_json:
        stdout_console.print_json(data=result.as_dict())
        return
    
    lines = [
        f"Branch name is '{result.branch_name}'",
        f"Branch prefix is '{result.branch_prefix}'",
        f"Branch version is '{result.branch_version}'",
        f"Last matching version is '{result.last_matching_version}'",
        f"Computed version is '{result.version}'",
    ]
    for line in lines:
        stdout_console.print(line, markup=False, highlight=False, soft_wrap=True)


def execute_command(command: str, result: ComputationResult, working_directory: Optional[str] = None) -> int:
    """
    Run a shell command with the computed values in its environment.
    
    Args:
        command: Shell command line
        result: Computation result exported as BRANCHVER_* variables
        working_directory: Directory the command runs in
        
    Returns:
        int: Exit code of the command
    """
    env = os.environ.copy()
    env.update(result.as_environment())
    
    logger.info(f'Executing: {command}')
    try:
        proc = subprocess.run(command, shell=True, env=env, cwd=working_directory)
    except OSError as e:
        logger.error(f'❌ Failed to execute command: {e}')
        return 1
    
    if proc.returncode != 0:
        logger.error(f'❌ Command exited with code {proc.returncode}')
    return proc.returncode


def setup_application(argv: Optional[List[str]] = None) -> tuple:
    """Set up logging, parse arguments and load the configuration."""
    setup_logging(console=console)
    
    args = parse_arguments(argv)
    
    if args.log_level:
        setup_logging(args.log_level.upper(), console=console)
    
    config = load_config(args)
    if config is None:
        return args, None
    
    setup_logging(config.log_level, console=console)
    return args, config


def run_computation(config: Config) -> Optional[ComputationResult]:
    """Run the version engine, logging failures instead of raising them."""
    try:
        return run(config)
    except VersionError as e:
        logger.error(f"Processing failed: '{e}'!")
        return None


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args, config = setup_application(argv)
    if config is None:
        logger.info('💡 Use --help to see all available options.')
        return 1
    
    result = run_computation(config)
    if result is None:
        return 1
    
    print_result(result, as_json=args.json)
    
    if config.execute:
        return execute_command(config.execute, result, config.working_directory)
    return 0


if __name__ == '__main__':
    sys.exit(main())
