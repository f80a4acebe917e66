"""
Constants used throughout the n8n-backup application.

This module defines all constant values used across different modules
to ensure consistency and ease of maintenance.
"""

from pathlib import Path

# Version information
VERSION = "1.0.0"

# Default paths
DEFAULT_CONFIG_PATHS = {
    'root': Path('/etc/n8n-backup.conf'),
    'user': Path.home() / '.config' / 'n8n-backup' / 'config.conf'
}

# Host-side layout below base_dir
FILES_DIR_NAME = 'files'
LOGS_DIR_NAME = 'logs'
ARCHIVE_PREFIX = 'n8n_backup'
LOG_PREFIX = 'n8n_backup'
UNENCRYPTED_SUFFIX = '_unencrypted'
TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'

# Container selection
DEFAULT_NAME_FILTER = 'n8n'

# In-container export
DEFAULT_DOCKER_USER = 'node'
DEFAULT_N8N_COMMAND = 'n8n'
DEFAULT_WORKFLOWS_PATH = '/tmp/n8n_backup/workflows/'
DEFAULT_CREDENTIALS_PATH = '/tmp/n8n_backup/credentials/'
DEFAULT_COUNT_PATTERN = r'Successfully exported (\d+)'

# n8n CLI subcommands per category (without --output)
EXPORT_COMMANDS = {
    'workflows': ['export:workflow', '--backup'],
    'credentials': ['export:credentials', '--backup', '--decrypted'],
}

# Environment overrides
ENV_ARCHIVE_PASSWORD = 'N8N_BACKUP_PASSWORD'
ENV_SMTP_PASSWORD = 'N8N_BACKUP_SMTP_PASSWORD'

# Notifications
DEFAULT_SUBJECT_PREFIX = 'n8n Backup'
DEFAULT_SMTP_PORT = 587
WEBHOOK_TIMEOUT = 10
WEBHOOK_STATUS_LITERAL = 'completed'

# Logging
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
RUN_LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
SUCCESS_LEVEL = 25
LOG_SEPARATOR = '=' * 20
