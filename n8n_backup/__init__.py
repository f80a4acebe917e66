################################################################################
# N8N-BACKUP
#
# @file:        __init__.py
# @module:      n8n_backup
# @description: Exposes version, logging, and core managers for package consumers.
# @author:      Markus F. (TZERO78) & KI-Assistenten
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# Copyright (c) 2025 Markus F. (TZERO78)
# MIT-Lizenz: siehe LICENSE oder https://opensource.org/licenses/MIT
# ==============================================================================
# Hinweise:
# - Re-exports Config, BackupManager and the result types
# - Sets __version__ from constants.VERSION for tooling introspection
################################################################################

"""
n8n-backup: exports workflows and credentials from n8n Docker containers.

Exported files are packed into a password protected ZIP archive, every run
writes its own log, and results can be mailed or posted to a webhook.
"""

from .helpers.constants import VERSION

__version__ = VERSION

from .helpers.logging import get_logger, log_manager, setup_logging
from .helpers.config import Config
from .types import (
    ExportCategory,
    ExportStatus,
    ExportResult,
    OverallStatus,
    BackupRunReport,
)
from .cores.backup_manager import BackupManager
from .cores.result_tracker import ResultTracker

__all__ = [
    "VERSION",
    "Config",
    "BackupManager",
    "ResultTracker",
    "ExportCategory",
    "ExportStatus",
    "ExportResult",
    "OverallStatus",
    "BackupRunReport",
    "get_logger",
    "log_manager",
    "setup_logging",
]
