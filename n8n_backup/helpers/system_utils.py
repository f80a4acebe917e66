"""
System utilities module for n8n-backup.

Disk space checks, directory sizes and formatting helpers used around
the archive step.
"""

import os
import shutil
from pathlib import Path
from typing import Union

import psutil

from .logging import get_logger


logger = get_logger(__name__)


class SystemUtils:
    """
    System utilities for resource checks and formatting.
    """

    @staticmethod
    def check_docker(binary: str = 'docker') -> bool:
        """
        Check if the docker CLI is installed.

        Args:
            binary: Executable name or path

        Returns:
            True if the binary is on PATH
        """
        return shutil.which(binary) is not None

    @staticmethod
    def get_available_disk_space(path: Union[str, Path] = '/') -> int:
        """
        Get available disk space in bytes.

        Args:
            path: Path on the filesystem to check

        Returns:
            Free bytes, 0 if it cannot be determined
        """
        try:
            return psutil.disk_usage(str(path)).free
        except Exception as e:
            logger.error(f"Failed to get disk space for {path}: {e}")
            return 0

    @staticmethod
    def directory_size(path: Union[str, Path]) -> int:
        """Total size in bytes of all files below path."""
        total_size = 0
        for dirpath, _dirnames, filenames in os.walk(path):
            for filename in filenames:
                try:
                    total_size += os.path.getsize(os.path.join(dirpath, filename))
                except OSError:
                    continue
        return total_size

    @staticmethod
    def format_bytes(size_bytes: float) -> str:
        """
        Format bytes into human-readable string.

        Args:
            size_bytes: Size in bytes

        Returns:
            Formatted string (e.g., "1.50 GB")
        """
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size_bytes < 1024.0:
                return f"{size_bytes:.2f} {unit}"
            size_bytes /= 1024.0
        return f"{size_bytes:.2f} PB"

    @staticmethod
    def clear_directory(path: Path) -> None:
        """Remove everything inside path but keep path itself."""
        if not path.exists():
            return
        for child in path.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child, ignore_errors=True)
            else:
                try:
                    child.unlink()
                except OSError as e:
                    logger.warning(f"Could not remove {child}: {e}")
