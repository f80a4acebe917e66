#!/usr/bin/env python3
################################################################################
# N8N-BACKUP
#
# @file:        config.py
# @module:      n8n_backup.helpers.config
# @description: INI configuration loading, masking and conversion to settings
# @author:      Markus F. (TZERO78) & KI-Assistenten
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT-Lizenz: siehe LICENSE oder https://opensource.org/licenses/MIT
################################################################################

"""
Configuration management for n8n-backup.

Handles loading, validation, and access to configuration settings.
The INI file is the persisted form; to_settings() turns it into the
validated BackupSettings model used by the backup run.
"""

from __future__ import annotations

import configparser
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Optional, List, Dict, Any

from pydantic import ValidationError

from ..errors import ConfigError
from .constants import DEFAULT_CONFIG_PATHS, ENV_SMTP_PASSWORD
from .logging import get_logger
from .settings import BackupSettings

logger = get_logger(__name__)

TEMPLATE_PATH = Path(__file__).parent.parent / "templates" / "config_template.conf"

SENSITIVE_PATTERN = re.compile(
    r'(password|secret|token|credential|auth|webhook|url)',
    re.IGNORECASE
)


class Config:
    """
    Configuration manager for n8n-backup.

    Loads configuration from INI files and offers typed getters.
    """

    def __init__(self, config_path: Optional[Path] = None, create: bool = True):
        """
        Initialize configuration.

        Args:
            config_path: Optional path to config file
            create: Create the file from the template when it is missing
        """
        # WICHTIG: Interpolation deaktivieren wegen % in Passwörtern
        self._config = configparser.ConfigParser(interpolation=None)

        self.config_file = self._find_config_file(config_path)
        if not self.config_file.exists():
            if not create:
                raise ConfigError(f"Configuration file not found: {self.config_file}")
            logger.info(f"No configuration found. Creating default at {self.config_file}")
            create_default_config(self.config_file)

        self._load_config()

    # --------------- Core Methods ---------------

    def get(self, section: str, option: str, fallback: Any = None) -> Any:
        """Get configuration value with fallback."""
        try:
            return self._config.get(section, option)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        """Get integer value; unparseable values fall back with a warning."""
        value = self.get(section, option)
        if value is None or str(value).strip() == '':
            return fallback
        try:
            return int(value)
        except ValueError:
            logger.warning(f"[{section}] {option} is not an integer: {value!r}, using {fallback}")
            return fallback

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        """Get boolean value (true/false, yes/no, on/off, 1/0)."""
        try:
            return self._config.getboolean(section, option)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback
        except ValueError:
            logger.warning(f"[{section}] {option} is not a boolean, using {fallback}")
            return fallback

    def getlist(self, section: str, option: str, fallback: Optional[List[str]] = None) -> List[str]:
        """Get a comma/whitespace separated list."""
        value = self.get(section, option)
        if not value:
            return list(fallback or [])
        return [item for item in re.split(r'[,\s]+', value) if item]

    def set(self, section: str, option: str, value: Any) -> None:
        """Set configuration value."""
        if not self._config.has_section(section):
            self._config.add_section(section)
        self._config.set(section, option, str(value))

    def save(self) -> None:
        """Save configuration to file atomically with proper permissions."""
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.config_file.parent,
            prefix='.n8n-backup-config-',
            suffix='.tmp'
        )

        try:
            with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
                self._config.write(f)
            os.replace(temp_path, self.config_file)
            # Enthält SMTP-Passwort und evtl. Archiv-Passwort
            os.chmod(self.config_file, 0o600)
            logger.info(f"Configuration saved to {self.config_file}")
        except Exception as e:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            logger.error(f"Failed to save configuration: {e}")
            raise

    def masked_items(self) -> Dict[str, Dict[str, str]]:
        """Return all sections with sensitive values masked."""
        result: Dict[str, Dict[str, str]] = {}
        for section in self._config.sections():
            result[section] = {}
            for option, value in self._config.items(section):
                if SENSITIVE_PATTERN.search(option) and value:
                    value = f"{value[:3]}***MASKED***" if len(value) > 3 else '***MASKED***'
                result[section][option] = value
        return result

    def get_smtp_password(self) -> str:
        """SMTP password; the environment variable wins over the file."""
        return os.environ.get(ENV_SMTP_PASSWORD) or self.get('email', 'smtp_password', fallback='')

    def to_settings(self) -> BackupSettings:
        """
        Build the validated settings model.

        Raises:
            ConfigError: If any value fails validation
        """
        raw = {
            "containers": {
                "manual": self.get('containers', 'manual', fallback=''),
                "auto_detect": self.getboolean('containers', 'auto_detect', True),
                "name_filter": self.get('containers', 'name_filter', fallback='n8n'),
            },
            "paths": self._section_dict('paths', ('base_dir', 'files_dir_name', 'logs_dir_name')),
            "export": self._section_dict(
                'export',
                ('workflows_path', 'credentials_path', 'docker_user', 'n8n_command', 'count_pattern'),
            ),
            "encryption": {
                "enabled": self.getboolean('encryption', 'enabled', True),
                "prompt_for_password": self.getboolean('encryption', 'prompt_for_password', True),
                "default_password": self.get('encryption', 'default_password', fallback=''),
            },
            "email": {
                **self._section_dict(
                    'email',
                    ('smtp_host', 'smtp_user', 'from_address', 'recipients', 'subject_prefix'),
                ),
                "enabled": self.getboolean('email', 'enabled', False),
                "smtp_port": self.getint('email', 'smtp_port', 587),
                "smtp_tls": self.getboolean('email', 'smtp_tls', True),
                "smtp_password": self.get_smtp_password(),
            },
            "webhook": {
                "enabled": self.getboolean('webhook', 'enabled', False),
                "url": self.get('webhook', 'url', fallback=''),
                "timeout": self.getint('webhook', 'timeout', 10),
                "report_actual_status": self.getboolean('webhook', 'report_actual_status', False),
            },
            "docker": {
                "command_timeout": self.getint('docker', 'command_timeout', 0),
            },
            "log_level": self.get('logging', 'level', fallback='INFO'),
        }
        try:
            return BackupSettings.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.config_file}:\n{e}") from e

    def validate(self) -> List[str]:
        """
        Validate the configuration.

        Returns:
            List of error messages (empty if everything is fine)
        """
        errors = []
        try:
            settings = self.to_settings()
        except ConfigError as e:
            return [str(e)]

        base_dir = settings.paths.base_dir
        if base_dir.exists() and not os.access(base_dir, os.W_OK):
            errors.append(f"Base directory not writable: {base_dir}")

        if not settings.containers.manual and not settings.containers.auto_detect:
            errors.append("No manual containers configured and auto_detect is off")

        if settings.encryption.enabled and not settings.encryption.prompt_for_password \
                and not settings.encryption.default_password:
            logger.warning("Encryption enabled without prompt or default password - "
                           "archives will be unencrypted unless N8N_BACKUP_PASSWORD is set")

        return errors

    # --------------- Private Methods ---------------

    def _section_dict(self, section: str, options: tuple) -> Dict[str, str]:
        """Collect options that are present (absent ones use model defaults)."""
        values = {}
        for option in options:
            value = self.get(section, option)
            if value is not None and value != '':
                values[option] = value
        return values

    def _find_config_file(self, config_path: Optional[Path] = None) -> Path:
        """
        Find or determine configuration file path.

        Args:
            config_path: Explicitly provided configuration path

        Returns:
            Path to configuration file
        """
        # Expliziten Pfad respektieren, auch wenn die Datei noch fehlt
        if config_path:
            config_path = Path(config_path).expanduser().resolve()
            config_path.parent.mkdir(parents=True, exist_ok=True)
            return config_path

        search_order = [
            DEFAULT_CONFIG_PATHS['user'],
            DEFAULT_CONFIG_PATHS['root'],
        ]

        for location in search_order:
            expanded_location = Path(location).expanduser()
            if expanded_location.exists():
                if os.access(expanded_location, os.R_OK):
                    logger.debug(f"Using config file: {expanded_location}")
                    return expanded_location
                logger.warning(f"Config file exists but not readable: {expanded_location}")

        if os.geteuid() == 0:
            path = Path(DEFAULT_CONFIG_PATHS['root'])
        else:
            path = Path(DEFAULT_CONFIG_PATHS['user']).expanduser()

        path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Using default config path: {path}")
        return path

    def _load_config(self) -> None:
        """Load configuration from file with UTF-8 encoding."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                self._config.read_file(f)
            logger.debug(f"Configuration loaded from {self.config_file}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Config file encoding error (expected UTF-8): {e}") from e
        except configparser.Error as e:
            raise ConfigError(f"Failed to parse {self.config_file}: {e}") from e


def create_default_config(path: Optional[Path] = None, force: bool = False) -> Path:
    """
    Create default configuration from template.

    Args:
        path: Optional path where to create the config file
        force: Overwrite existing file if True

    Returns:
        Path to the created config file
    """
    if path is None:
        if os.geteuid() == 0:
            path = Path(DEFAULT_CONFIG_PATHS['root'])
        else:
            path = Path(DEFAULT_CONFIG_PATHS['user'])
    path = Path(path).expanduser()

    if path.exists() and not force:
        logger.warning(f"Configuration file already exists at {path}")
        return path

    if not TEMPLATE_PATH.exists():
        raise ConfigError(
            f"Configuration template not found at {TEMPLATE_PATH}. "
            f"Template missing from package installation."
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(TEMPLATE_PATH, path)
    path.chmod(0o600)

    logger.info(f"Configuration created at {path}")
    return path
