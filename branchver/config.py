"""
Configuration management for branchver.

Merges CLI arguments, environment variables (including a .env file) and
an optional JSON configuration file into one immutable Config object.
"""

import json
import os
import re
import time
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

from .errors import VersionParseError
from .versioning import parse_semver

# Load environment variables from .env file
load_dotenv()

DEFAULT_CONFIG_FILE = 'branchver.json'
TIMESTAMP_BUILD_NUMBER = -1
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

_MISSING = object()
TRUE_VALUES = ('true', '1', 'yes')
FALSE_VALUES = ('false', '0', 'no')


def _coerce_file_value(value, value_type: type):
    """Convert string values from the configuration file like env values.

    Values that do not convert are returned unchanged so load_config reports them.
    """
    if not isinstance(value, str):
        return value
    if value_type == bool:
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        return value
    if value_type == int:
        try:
            return int(value)
        except ValueError:
            return value
    return value


def get_config_value(cli_args, field_name: str, env_key: str, default, value_type: type = str,
                     file_values: Optional[dict] = None, file_key: Optional[str] = None):
    """
    Get configuration value with proper precedence: CLI args > env vars > config file > defaults.
    
    Args:
        cli_args: CLI arguments object or None
        field_name: Name of the CLI argument field
        env_key: Environment variable key
        default: Default value if no source sets the value
        value_type: Type to convert the value to (str, int, bool)
        file_values: Values read from the configuration file (optional)
        file_key: Key of the value in the configuration file (optional)
        
    Returns:
        The configuration value converted to the specified type
    """
    cli_value = getattr(cli_args, field_name, None) if cli_args else None
    if cli_value is not None:
        return cli_value
    
    env_value = os.environ.get(env_key, '')
    
    if value_type == bool:
        if env_value.strip().lower() in TRUE_VALUES:
            return True
        elif env_value.strip().lower() in FALSE_VALUES:
            return False
    elif env_value:
        try:
            return value_type(env_value)
        except (ValueError, TypeError):
            logger.warning(f'Ignoring invalid {env_key} value: {env_value}')
    
    if file_values and file_key:
        file_value = file_values.get(file_key, _MISSING)
        if file_value is not _MISSING and file_value is not None:
            return _coerce_file_value(file_value, value_type)
    
    return default


@dataclass(frozen=True)
class Config:
    """Configuration object containing all settings of one run."""
    
    # Version derivation
    branch_name: Optional[str] = None
    tag_prefix: str = ''
    ignore_branch_prefix: Optional[str] = None
    pre: bool = False
    suffix: Optional[str] = None
    build_number: Optional[int] = None
    current_version: Optional[str] = None
    no_increment: bool = False
    
    # Repository location
    working_directory: Optional[str] = None
    
    # Command run after a successful computation
    execute: Optional[str] = None
    
    # Logging
    log_level: str = 'INFO'


def read_config_file(path: str, validation_errors: list) -> dict:
    """
    Read the JSON configuration file.
    
    Args:
        path: Path to the file
        validation_errors: List to append read or format errors to
        
    Returns:
        dict: Values from the file, empty if the file could not be used
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            values = json.load(f)
    except OSError as e:
        validation_errors.append(f'Cannot read configuration file {path}: {e}')
        return {}
    except json.JSONDecodeError as e:
        validation_errors.append(f'Configuration file {path} is not valid JSON: {e}')
        return {}
    
    if not isinstance(values, dict):
        validation_errors.append(f'Configuration file {path} must contain a JSON object')
        return {}
    
    logger.debug(f'Loaded configuration file {path}')
    return values


def resolve_build_number(build_number: Optional[int]) -> Optional[int]:
    """Replace the timestamp sentinel (-1) with the current time in milliseconds."""
    if build_number == TIMESTAMP_BUILD_NUMBER:
        return int(time.time() * 1000)
    return build_number


def _config_file_path(cli_args, working_directory: Optional[str]) -> tuple:
    """Return (path, explicitly_requested) of the configuration file to read."""
    explicit = get_config_value(cli_args, 'config', 'BRANCHVER_CONFIG', None)
    if explicit:
        return explicit, True
    return os.path.join(working_directory or os.getcwd(), DEFAULT_CONFIG_FILE), False


def _validate_patterns(tag_prefix: str, ignore_branch_prefix: Optional[str], validation_errors: list) -> None:
    for name, pattern in (('TAG_PREFIX', tag_prefix), ('IGNORE_BRANCH_PREFIX', ignore_branch_prefix)):
        if not pattern:
            continue
        try:
            re.compile(pattern)
        except re.error as e:
            validation_errors.append(f'{name} is not a valid regular expression ({pattern}): {e}')


def load_config(cli_args=None) -> Optional[Config]:
    """
    Load and validate configuration from CLI arguments, environment variables
    and the configuration file.
    
    Args:
        cli_args: Parsed CLI arguments or None
        
    Returns:
        Config: Validated configuration object, or None if validation failed
    """
    validation_errors = []
    
    working_directory = get_config_value(cli_args, 'working_directory', 'BRANCHVER_WORKING_DIRECTORY', None)
    
    config_path, explicit = _config_file_path(cli_args, working_directory)
    file_values = {}
    if explicit or os.path.isfile(config_path):
        file_values = read_config_file(config_path, validation_errors)
    
    def value(field_name, env_key, file_key, default, value_type=str):
        return get_config_value(cli_args, field_name, env_key, default, value_type, file_values, file_key)
    
    if working_directory is None:
        working_directory = file_values.get('workingDirectory')
    
    branch_name = value('branch_name', 'BRANCHVER_BRANCH_NAME', 'branchName', None)
    build_number = value('build_number', 'BRANCHVER_BUILD_NUMBER', 'buildNumber', None, int)
    tag_prefix = value('tag_prefix', 'BRANCHVER_TAG_PREFIX', 'tagPrefix', '')
    ignore_branch_prefix = value('ignore_branch_prefix', 'BRANCHVER_IGNORE_BRANCH_PREFIX', 'ignoreBranchPrefix', None)
    pre = value('pre', 'BRANCHVER_PRE', 'pre', False, bool)
    suffix = value('suffix', 'BRANCHVER_SUFFIX', 'suffix', None)
    current_version = value('current_version', 'BRANCHVER_CURRENT_VERSION', 'currentVersion', None)
    no_increment = value('no_increment', 'BRANCHVER_NO_INCREMENT', 'noIncrement', False, bool)
    execute = value('execute', 'BRANCHVER_EXECUTE', 'execute', None)
    
    # Handle log_level (case insensitive)
    log_level = str(value('log_level', 'LOG_LEVEL', 'logLevel', 'INFO')).upper()
    
    if log_level not in VALID_LOG_LEVELS:
        validation_errors.append(f'LOG_LEVEL must be one of {VALID_LOG_LEVELS} (got: {log_level})')
    
    if build_number is not None:
        if isinstance(build_number, bool) or not isinstance(build_number, int):
            validation_errors.append(f'BUILD_NUMBER must be an integer (got: {build_number!r})')
        elif build_number < TIMESTAMP_BUILD_NUMBER:
            validation_errors.append(f'BUILD_NUMBER must be -1 (timestamp) or a non-negative integer (got: {build_number})')
    
    for name, flag in (('PRE', pre), ('NO_INCREMENT', no_increment)):
        if not isinstance(flag, bool):
            validation_errors.append(f'{name} must be true or false (got: {flag!r})')
    
    if pre is True and not suffix:
        validation_errors.append('SUFFIX is required for prerelease versions (use --suffix or set BRANCHVER_SUFFIX)')
    
    if current_version:
        try:
            parse_semver(current_version)
        except VersionParseError as e:
            validation_errors.append(f'CURRENT_VERSION is not a semantic version: {e}')
    
    _validate_patterns(tag_prefix, ignore_branch_prefix, validation_errors)
    
    if working_directory and not os.path.isdir(working_directory):
        validation_errors.append(f'WORKING_DIRECTORY ({working_directory}) does not exist')
    
    if validation_errors:
        logger.error('❌ Configuration Error:')
        for i, error_msg in enumerate(validation_errors, 1):
            logger.error(f'   {i}. {error_msg}')
        return None
    
    config = Config(
        branch_name=branch_name,
        tag_prefix=tag_prefix or '',
        ignore_branch_prefix=ignore_branch_prefix,
        pre=pre,
        suffix=suffix,
        build_number=resolve_build_number(build_number),
        current_version=current_version,
        no_increment=no_increment,
        working_directory=working_directory,
        execute=execute,
        log_level=log_level
    )
    
    logger.debug(f'BRANCH_NAME = {config.branch_name}')
    logger.debug(f'TAG_PREFIX = {config.tag_prefix}')
    logger.debug(f'IGNORE_BRANCH_PREFIX = {config.ignore_branch_prefix}')
    logger.debug(f'PRE = {config.pre}')
    logger.debug(f'SUFFIX = {config.suffix}')
    logger.debug(f'BUILD_NUMBER = {config.build_number}')
    logger.debug(f'CURRENT_VERSION = {config.current_version}')
    logger.debug(f'NO_INCREMENT = {config.no_increment}')
    logger.debug(f'WORKING_DIRECTORY = {config.working_directory}')
    
    return config
