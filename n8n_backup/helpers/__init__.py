"""Helper modules and utilities for n8n-backup."""

from .config import Config, create_default_config
from .constants import VERSION, DEFAULT_CONFIG_PATHS
from .docker_runtime import DockerRuntime, CommandResult
from .logging import get_logger, log_manager
from .output_parser import CountParser, RegexCountParser
from .settings import BackupSettings
from .system_utils import SystemUtils

__all__ = [
    'Config',
    'create_default_config',
    'VERSION',
    'DEFAULT_CONFIG_PATHS',
    'DockerRuntime',
    'CommandResult',
    'get_logger',
    'log_manager',
    'CountParser',
    'RegexCountParser',
    'BackupSettings',
    'SystemUtils',
]
