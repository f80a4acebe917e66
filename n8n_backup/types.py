################################################################################
# N8N-BACKUP
#
# @file:        types.py
# @module:      n8n_backup.types
# @description: Shared data models for export results, archives and run reports.
# @author:      Markus F. (TZERO78) & KI-Assistenten
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# Copyright (c) 2025 Markus F. (TZERO78)
# MIT-Lizenz: siehe LICENSE oder https://opensource.org/licenses/MIT
# ==============================================================================
# Hinweise:
# - ExportCategory names the two data kinds pulled out of each container
# - ExportResult is one terminal outcome per (container, category)
# - BackupRunReport is what the driver hands to the CLI and notifiers
################################################################################

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional


# ---- Enums ----

class ExportCategory(Enum):
    WORKFLOWS = "workflows"
    CREDENTIALS = "credentials"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ExportStatus(Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class ContainerState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"  # exists but not running
    MISSING = "missing"


class OverallStatus(Enum):
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ---- Core DTOs ----

@dataclass(frozen=True)
class ExportResult:
    container: str
    category: ExportCategory
    status: ExportStatus
    item_count: int = 0
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is ExportStatus.SUCCESS


@dataclass
class ArchiveInfo:
    path: Path
    encrypted: bool
    size_bytes: int = 0


@dataclass
class BackupRunReport:
    started_at: datetime
    containers: List[str] = field(default_factory=list)
    success_count: int = 0
    overall_status: OverallStatus = OverallStatus.ERROR
    archive: Optional[ArchiveInfo] = None
    log_file: Optional[Path] = None
    errors: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.containers)

    @property
    def exit_code(self) -> int:
        # Partial success still counts as a usable run
        if not self.containers or self.success_count == 0 or self.archive is None:
            return 1
        return 0
