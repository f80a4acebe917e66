"""Core backup logic for n8n-backup."""

from .archive_manager import ArchiveManager, archive_path_for
from .backup_manager import BackupManager
from .container_exporter import ContainerExporter
from .container_selector import ContainerSelector
from .notification_manager import (
    EmailWebhookNotifier,
    Notifier,
    NullNotifier,
    build_notifier,
    parse_recipients,
)
from .result_tracker import ResultTracker

__all__ = [
    'ArchiveManager',
    'archive_path_for',
    'BackupManager',
    'ContainerExporter',
    'ContainerSelector',
    'EmailWebhookNotifier',
    'Notifier',
    'NullNotifier',
    'build_notifier',
    'parse_recipients',
    'ResultTracker',
]
