################################################################################
# N8N-BACKUP
#
# @file:        container_exporter.py
# @module:      n8n_backup.cores
# @description: Runs the n8n export commands inside a container and copies the result out.
# @author:      Markus F. (TZERO78) & KI-Assistenten
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# Copyright (c) 2025 Markus F. (TZERO78)
# MIT-Lizenz: siehe LICENSE oder https://opensource.org/licenses/MIT
# ==============================================================================
# Hinweise:
# - Each category: mkdir in container, n8n export, docker cp, rm -rf
# - SUCCESS requires both export and copy; cleanup failures are only logged
# - Export output always goes to the run log and is scanned for a count
################################################################################

"""
Container export module for n8n-backup.

Exports workflows and credentials from one n8n container into the
host-side files directory.
"""

from pathlib import Path
from typing import Dict, List, Optional

from ..helpers.constants import EXPORT_COMMANDS
from ..helpers.docker_runtime import CommandResult, DockerRuntime
from ..helpers.logging import get_logger, log_manager
from ..helpers.output_parser import CountParser, RegexCountParser
from ..helpers.settings import ExportSettings
from ..types import ExportCategory, ExportResult, ExportStatus
from .result_tracker import ResultTracker


logger = get_logger(__name__)


class ContainerExporter:
    """
    Exports n8n data categories from a running container.

    Categories are independent: a failed workflow export does not stop the
    credential export of the same container.
    """

    def __init__(
        self,
        runtime: DockerRuntime,
        settings: ExportSettings,
        count_parser: Optional[CountParser] = None,
    ):
        """
        Initialize the exporter.

        Args:
            runtime: Docker CLI wrapper
            settings: In-container paths, user and n8n command
            count_parser: Strategy for reading the item count from output
        """
        self.runtime = runtime
        self.settings = settings
        self.count_parser = count_parser or RegexCountParser(settings.count_pattern)

    def container_path(self, category: ExportCategory) -> str:
        """Temporary export directory inside the container."""
        if category is ExportCategory.WORKFLOWS:
            return self.settings.workflows_path
        return self.settings.credentials_path

    def export_command(self, category: ExportCategory) -> List[str]:
        """Full n8n CLI invocation for one category."""
        return (
            [self.settings.n8n_command]
            + EXPORT_COMMANDS[category.value]
            + [f"--output={self.container_path(category)}"]
        )

    def export_container(
        self,
        container: str,
        container_dir: Path,
        tracker: ResultTracker,
    ) -> Dict[ExportCategory, ExportResult]:
        """
        Export all categories of one container and record the results.

        Args:
            container: Container name
            container_dir: Host directory for this container (files/<container>)
            tracker: Result tracker of the current run

        Returns:
            Result per category
        """
        results = {}
        for category in ExportCategory:
            host_dir = container_dir / category.value
            try:
                host_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Cannot create host directory {host_dir}: {e}",
                             extra={'container': container, 'category': category.value})
                result = ExportResult(container, category, ExportStatus.FAILED, 0, str(e))
            else:
                result = self.export_category(container, category, host_dir)
            tracker.record(result)
            results[category] = result
        return results

    def export_category(self, container: str, category: ExportCategory, host_dir: Path) -> ExportResult:
        """
        Export one category from a container to host_dir.

        Args:
            container: Container name
            category: Workflows or credentials
            host_dir: Host destination directory (must exist)

        Returns:
            Terminal ExportResult (SUCCESS or FAILED)
        """
        ctx = {'container': container, 'category': category.value}
        label = category.label
        path = self.container_path(category)
        user = self.settings.docker_user

        logger.info(f"Starting {category.value} export for container: {container}", extra=ctx)

        # 1) temp dir inside the container
        mkdir = self.runtime.exec(container, ['mkdir', '-p', path], user=user)
        if not mkdir.ok:
            self._log_output(mkdir)
            logger.error(f"{label} export failed for {container}: cannot create {path}", extra=ctx)
            return self._failed(container, category, f"mkdir {path} failed")

        # 2) n8n export
        export = self.runtime.exec(container, self.export_command(category), user=user)
        self._log_output(export)

        # 3) count, never fails the export
        count = self.count_parser.parse(export.output)

        if not export.ok:
            if count:
                logger.debug(f"Output reported {count} items before the failure", extra=ctx)
            logger.error(f"{label} export failed for {container} (exit code {export.returncode})",
                         extra=ctx)
            return self._failed(container, category, f"export exited with {export.returncode}")

        # 4) copy to host
        copy = self.runtime.copy_from(container, f"{path.rstrip('/')}/.", f"{host_dir}/")
        self._log_output(copy)
        if not copy.ok:
            logger.error(f"{label} copy failed for {container}", extra=ctx)
            return self._failed(container, category, "docker cp failed")

        log_manager.success(
            logger,
            f"{label} export and copy completed successfully for {container} ({count} items)",
            extra=ctx,
        )

        # 5) best-effort cleanup, data is already on the host
        self._cleanup(container, path, ctx)

        return ExportResult(container, category, ExportStatus.SUCCESS, count)

    def _cleanup(self, container: str, path: str, ctx: dict) -> None:
        try:
            cleanup = self.runtime.exec(container, ['rm', '-rf', path], user=self.settings.docker_user)
        except Exception as e:
            logger.warning(f"Cleanup of {path} in {container} raised: {e}", extra=ctx)
            return
        if not cleanup.ok:
            logger.warning(f"Could not remove {path} inside {container}: {cleanup.output.strip()}",
                           extra=ctx)

    @staticmethod
    def _failed(container: str, category: ExportCategory, message: str) -> ExportResult:
        return ExportResult(container, category, ExportStatus.FAILED, 0, message)

    @staticmethod
    def _log_output(result: CommandResult) -> None:
        for line in result.output.splitlines():
            if line.strip():
                logger.info(line.rstrip())
