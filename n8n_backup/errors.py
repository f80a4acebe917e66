"""
Exception hierarchy for n8n-backup.

Everything raised on purpose derives from BackupError so the CLI can tell
expected failures from programming errors.
"""


class BackupError(Exception):
    """Base class for all n8n-backup errors."""


class ConfigError(BackupError):
    """Configuration-related errors"""


class RuntimeUnavailableError(BackupError):
    """The docker CLI is missing or the daemon is not reachable."""


class ContainerNotFoundError(BackupError):
    """A selected container does not exist or is not running."""

    def __init__(self, name: str, exists: bool = False):
        self.name = name
        self.exists = exists
        if exists:
            message = f"Container {name} exists but is not running"
        else:
            message = f"Container {name} not found"
        super().__init__(message)


class ArchiveError(BackupError):
    """Creating the backup archive failed."""


class NotifyError(BackupError):
    """Sending an email or webhook notification failed."""
