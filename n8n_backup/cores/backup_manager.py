################################################################################
# N8N-BACKUP
#
# @file:        backup_manager.py
# @module:      n8n_backup.cores
# @description: Orchestrates one backup run from container selection to notification.
# @author:      Markus F. (TZERO78) & KI-Assistenten
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# Copyright (c) 2025 Markus F. (TZERO78)
# MIT-Lizenz: siehe LICENSE oder https://opensource.org/licenses/MIT
# ==============================================================================
# Hinweise:
# - Strictly sequential: one container at a time, archive after all are done
# - A container with any FAILED category is dropped from the archive
# - files/ is cleared at the start and at the end of every run
################################################################################

"""
Backup management module for n8n-backup.

This module drives a complete run: select containers, export each of them,
archive the successful ones, notify, and report.
"""

from __future__ import annotations

import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..errors import ArchiveError, ContainerNotFoundError, RuntimeUnavailableError
from ..helpers.constants import ENV_ARCHIVE_PASSWORD, LOG_PREFIX, TIMESTAMP_FORMAT
from ..helpers.docker_runtime import DockerRuntime
from ..helpers.logging import get_logger, log_manager
from ..helpers.settings import BackupSettings
from ..helpers.system_utils import SystemUtils
from ..types import BackupRunReport, ContainerState, OverallStatus
from .archive_manager import ArchiveManager, archive_path_for
from .container_exporter import ContainerExporter
from .container_selector import ContainerSelector
from .notification_manager import Notifier, build_notifier
from .result_tracker import ResultTracker


logger = get_logger(__name__)

PasswordPrompt = Callable[[], str]


class BackupManager:
    """
    Runs n8n backups.

    One instance can run several times; every run() gets its own
    ResultTracker, run log and archive.
    """

    def __init__(
        self,
        settings: BackupSettings,
        runtime: Optional[DockerRuntime] = None,
        notifier: Optional[Notifier] = None,
        password_prompt: Optional[PasswordPrompt] = None,
        archiver: Optional[ArchiveManager] = None,
    ):
        """
        Initialize backup manager.

        Args:
            settings: Validated configuration
            runtime: Docker CLI wrapper (default: DockerRuntime with configured timeout)
            notifier: Post-run notifier (default: built from settings)
            password_prompt: Asks for the archive password when prompting is enabled
            archiver: ZIP writer
        """
        self.settings = settings
        self.runtime = runtime or DockerRuntime(timeout=settings.docker.timeout)
        self.notifier = notifier or build_notifier(settings)
        self.password_prompt = password_prompt
        self.archiver = archiver or ArchiveManager()
        self.selector = ContainerSelector(self.runtime)
        self.exporter = ContainerExporter(self.runtime, settings.export)

    @property
    def files_dir(self) -> Path:
        return self.settings.paths.files_dir

    @property
    def logs_dir(self) -> Path:
        return self.settings.paths.logs_dir

    def run(self, extra_containers: Sequence[str] = ()) -> BackupRunReport:
        """
        Perform a complete backup run.

        Args:
            extra_containers: Names from the command line

        Returns:
            Run report; report.exit_code is the process exit status

        Raises:
            RuntimeUnavailableError: docker CLI missing or daemon unreachable
        """
        started_at = datetime.now()
        report = BackupRunReport(started_at=started_at)

        self.files_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        # Run-Log wird erst nach der Auswahl angehängt (siehe _open_run_log)
        report.log_file = self.logs_dir / f"{LOG_PREFIX}_{started_at.strftime(TIMESTAMP_FORMAT)}.log"

        try:
            self._run(report, extra_containers)
        finally:
            log_manager.stop_run_log()
        return report

    # --------------- Run steps ---------------

    def _run(self, report: BackupRunReport, extra_containers: Sequence[str]) -> None:
        if not self.runtime.is_available():
            self._open_run_log(report)
            logger.error("Docker is not available (docker CLI missing or daemon not reachable)")
            raise RuntimeUnavailableError("Docker is not available")

        # Reste eines abgebrochenen Laufs entfernen
        SystemUtils.clear_directory(self.files_dir)

        containers_cfg = self.settings.containers
        containers = self.selector.resolve(
            containers_cfg.manual,
            containers_cfg.auto_detect,
            containers_cfg.name_filter,
            extra_containers,
        )
        report.containers = containers
        self._open_run_log(report)

        if not containers:
            logger.error("No n8n containers found running")
            logger.info("Usage: n8n-backup run [additional_container1] [additional_container2] ...")
            logger.info(f"Containers with '{containers_cfg.name_filter}' in their name are found automatically")
            report.errors.append("No containers selected")
            return

        logger.info("Starting n8n backup")
        logger.info(f"Base directory: {self.settings.paths.base_dir}")
        logger.info(f"Files directory: {self.files_dir}")
        logger.info(f"Logs directory: {self.logs_dir}")
        logger.info(f"Containers to backup: {' '.join(containers)}")

        tracker = ResultTracker()
        for container in containers:
            if self._process_container(container, tracker):
                report.success_count += 1

        log_manager.separator(logger, "Backup Summary")
        logger.info(f"Container processing completed. Successes: {report.success_count}/{report.total}")
        report.overall_status = tracker.aggregate_status(report.total, report.success_count)

        if report.success_count == 0:
            logger.error("No containers backed up successfully. Cleaning up files directory")
            report.errors.append("No containers backed up successfully")
            SystemUtils.clear_directory(self.files_dir)
        else:
            self._archive(report)

        self._notify(report, tracker)
        self._log_completion(report)

    def _open_run_log(self, report: BackupRunReport) -> None:
        """
        Attach the run log file.

        Docker probing and auto-detection happen before this, so an empty
        selection leaves only the failure notice in the file.
        """
        log_manager.start_run_log(report.log_file)

    def _process_container(self, container: str, tracker: ResultTracker) -> bool:
        """Export one container; returns True if both categories succeeded."""
        log_manager.separator(logger, f"Processing container: {container}")
        ctx = {'container': container}

        state = self.runtime.container_state(container)
        if state is not ContainerState.RUNNING:
            reason = str(ContainerNotFoundError(container, exists=state is ContainerState.STOPPED))
            logger.error(reason, extra=ctx)
            logger.error(f"Skipping container: {container}", extra=ctx)
            tracker.record_skipped_container(container, reason)
            return False

        container_dir = self.files_dir / container
        self.exporter.export_container(container, container_dir, tracker)

        succeeded = tracker.container_succeeded(container)
        if succeeded:
            log_manager.success(logger, f"Backup completed successfully for container: {container}", extra=ctx)
        else:
            logger.error(f"Backup failed for container: {container}", extra=ctx)
            shutil.rmtree(container_dir, ignore_errors=True)

        logger.info(f"Finished processing container: {container}", extra=ctx)
        return succeeded

    def _archive(self, report: BackupRunReport) -> None:
        try:
            password = self.resolve_password()
            destination = archive_path_for(self.settings.paths.base_dir, report.started_at, bool(password))
            report.archive = self.archiver.archive(self.files_dir, destination, password)
        except ArchiveError as e:
            logger.error(f"Archive creation failed: {e}")
            report.errors.append(str(e))
            report.overall_status = OverallStatus.ERROR
        finally:
            SystemUtils.clear_directory(self.files_dir)

    def resolve_password(self) -> Optional[str]:
        """
        Archive password for this run, or None for an unencrypted archive.

        Order: N8N_BACKUP_PASSWORD, interactive prompt (if enabled), default_password.
        """
        encryption = self.settings.encryption
        if not encryption.enabled:
            logger.info("Encryption disabled. Creating regular ZIP file")
            return None

        password = os.environ.get(ENV_ARCHIVE_PASSWORD, '')
        if not password:
            if encryption.prompt_for_password and self.password_prompt is not None:
                try:
                    password = self.password_prompt() or ''
                except EOFError:
                    # Kein Terminal (cron, CI): wie eine leere Eingabe behandeln
                    logger.warning("No terminal available for the password prompt")
                    password = ''
            else:
                password = encryption.default_password

        if not password:
            logger.warning("No password provided. Creating regular ZIP without encryption")
            return None
        return password

    def _notify(self, report: BackupRunReport, tracker: ResultTracker) -> None:
        try:
            self.notifier.notify(report, tracker)
        except Exception as e:
            # Benachrichtigung darf das Backup-Ergebnis nie ändern
            logger.error(f"Notification failed: {e}")

    def _log_completion(self, report: BackupRunReport) -> None:
        log_manager.separator(logger, "Script Completion Summary")
        if report.archive is not None:
            logger.info("Backup script completed successfully")
            logger.info(f"Backup file: {report.archive.path}")
        else:
            logger.error("Backup script completed without creating an archive")
        logger.info(f"Log file: {report.log_file}")
        logger.info(f"Files directory: {self.files_dir}")
        logger.info(f"Logs directory: {self.logs_dir}")
