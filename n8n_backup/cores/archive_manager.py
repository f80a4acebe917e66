################################################################################
# N8N-BACKUP
#
# @file:        archive_manager.py
# @module:      n8n_backup.cores
# @description: Packs the exported files tree into a (password protected) ZIP archive.
# @author:      Markus F. (TZERO78) & KI-Assistenten
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# Copyright (c) 2025 Markus F. (TZERO78)
# MIT-Lizenz: siehe LICENSE oder https://opensource.org/licenses/MIT
# ==============================================================================
# Hinweise:
# - AES-256 (WinZip AES) via pyzipper when a password is given
# - Entries are rooted at the tree's own directory name (files/...), directories included
# - A failed attempt never leaves a half-written archive behind
################################################################################

"""
Archive module for n8n-backup.

Creates the single ZIP file of a backup run. No external zip binary is
needed; pyzipper writes both protected and unprotected archives.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import pyzipper

from ..errors import ArchiveError
from ..helpers.constants import ARCHIVE_PREFIX, TIMESTAMP_FORMAT, UNENCRYPTED_SUFFIX
from ..helpers.logging import get_logger, log_manager
from ..helpers.system_utils import SystemUtils
from ..types import ArchiveInfo


logger = get_logger(__name__)


def archive_path_for(base_dir: Path, timestamp: datetime, encrypted: bool) -> Path:
    """
    Archive file name for a run.

    Unprotected archives always carry the _unencrypted suffix.
    """
    name = f"{ARCHIVE_PREFIX}_{timestamp.strftime(TIMESTAMP_FORMAT)}"
    if not encrypted:
        name += UNENCRYPTED_SUFFIX
    return Path(base_dir) / f"{name}.zip"


class ArchiveManager:
    """Builds ZIP archives from a directory tree."""

    def archive(
        self,
        source_tree: Path,
        destination_file: Path,
        password: Optional[str] = None,
    ) -> ArchiveInfo:
        """
        Create an archive of source_tree.

        Args:
            source_tree: Directory to pack; its name becomes the archive root
            destination_file: Target .zip path
            password: Non-empty → AES encrypted archive

        Returns:
            ArchiveInfo with path, encryption flag and size

        Raises:
            ArchiveError: Source missing, destination not writable or write error
        """
        source_tree = Path(source_tree)
        destination_file = Path(destination_file)
        encrypted = bool(password)

        if not source_tree.is_dir():
            raise ArchiveError(f"Source directory does not exist: {source_tree}")
        if not os.access(source_tree, os.R_OK | os.X_OK):
            raise ArchiveError(f"Source directory not readable: {source_tree}")

        target_dir = destination_file.parent
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveError(f"Failed to create directory {target_dir}: {e}") from e
        if not os.access(target_dir, os.W_OK):
            raise ArchiveError(f"Archive directory not writable: {target_dir}")

        self._check_free_space(source_tree, target_dir)

        kind = "encrypted" if encrypted else "unencrypted"
        logger.info(f"Creating {kind} ZIP: {destination_file}", extra={'archive': destination_file.name})

        try:
            file_count = self._write_zip(source_tree, destination_file, password)
        except Exception as e:
            self._remove_partial(destination_file)
            raise ArchiveError(f"ZIP creation failed: {e}") from e

        info = ArchiveInfo(
            path=destination_file,
            encrypted=encrypted,
            size_bytes=destination_file.stat().st_size,
        )
        log_manager.success(
            logger,
            f"{kind.capitalize()} ZIP created successfully: {destination_file} "
            f"({file_count} files, {SystemUtils.format_bytes(info.size_bytes)})",
        )
        return info

    def _write_zip(self, source_tree: Path, destination_file: Path, password: Optional[str]) -> int:
        root = source_tree.parent

        if password:
            zf = pyzipper.AESZipFile(
                destination_file,
                "w",
                compression=pyzipper.ZIP_DEFLATED,
                encryption=pyzipper.WZ_AES,
            )
            zf.setpassword(password.encode("utf-8"))
        else:
            zf = pyzipper.ZipFile(destination_file, "w", compression=pyzipper.ZIP_DEFLATED)

        file_count = 0
        with zf:
            for dirpath, dirnames, filenames in os.walk(source_tree):
                dirnames.sort()
                # Verzeichnis-Eintrag, damit leere Kategorien erhalten bleiben
                dir_arcname = Path(dirpath).relative_to(root).as_posix() + "/"
                zf.write(dirpath, dir_arcname)
                logger.debug(f"  adding: {dir_arcname}")
                for filename in sorted(filenames):
                    file_path = Path(dirpath) / filename
                    arcname = file_path.relative_to(root).as_posix()
                    zf.write(file_path, arcname)
                    logger.debug(f"  adding: {arcname}")
                    file_count += 1
        return file_count

    @staticmethod
    def _check_free_space(source_tree: Path, target_dir: Path) -> None:
        needed = SystemUtils.directory_size(source_tree)
        free = SystemUtils.get_available_disk_space(target_dir)
        if free and free < needed:
            logger.warning(
                f"Low disk space in {target_dir}: {SystemUtils.format_bytes(free)} free, "
                f"export tree is {SystemUtils.format_bytes(needed)}"
            )

    @staticmethod
    def _remove_partial(destination_file: Path) -> None:
        try:
            if destination_file.exists():
                destination_file.unlink()
                logger.warning(f"Removed incomplete archive {destination_file}")
        except OSError as e:
            logger.warning(f"Could not remove incomplete archive {destination_file}: {e}")
