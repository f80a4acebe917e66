"""Unit tests for system_utils module."""

import pytest
from unittest.mock import patch, MagicMock

from n8n_backup.helpers.system_utils import SystemUtils


class TestFormatBytes:
    """Tests for format_bytes()."""

    def test_units(self):
        assert SystemUtils.format_bytes(0) == "0.00 B"
        assert SystemUtils.format_bytes(1536) == "1.50 KB"
        assert SystemUtils.format_bytes(5 * 1024 ** 3) == "5.00 GB"


class TestDiskAndDirectories:
    """Tests for disk space and directory helpers."""

    @patch("n8n_backup.helpers.system_utils.psutil.disk_usage")
    def test_available_disk_space(self, mock_usage, tmp_path):
        mock_usage.return_value = MagicMock(free=4096)

        assert SystemUtils.get_available_disk_space(tmp_path) == 4096
        mock_usage.assert_called_once_with(str(tmp_path))

    @patch("n8n_backup.helpers.system_utils.psutil.disk_usage")
    def test_disk_space_error_returns_zero(self, mock_usage, tmp_path):
        mock_usage.side_effect = OSError("no such device")

        assert SystemUtils.get_available_disk_space(tmp_path) == 0

    def test_directory_size(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "x.json").write_bytes(b"12345")
        (tmp_path / "y.json").write_bytes(b"123")

        assert SystemUtils.directory_size(tmp_path) == 8

    def test_clear_directory_keeps_root(self, tmp_path):
        target = tmp_path / "files"
        (target / "n8n" / "workflows").mkdir(parents=True)
        (target / "n8n" / "workflows" / "1.json").write_text("{}")
        (target / "stray.txt").write_text("x")

        SystemUtils.clear_directory(target)

        assert target.is_dir()
        assert list(target.iterdir()) == []

    def test_clear_missing_directory(self, tmp_path):
        SystemUtils.clear_directory(tmp_path / "absent")

        assert not (tmp_path / "absent").exists()

    @pytest.mark.unit
    @patch("n8n_backup.helpers.system_utils.shutil.which")
    def test_check_docker(self, mock_which):
        mock_which.return_value = "/usr/bin/docker"
        assert SystemUtils.check_docker() is True

        mock_which.return_value = None
        assert SystemUtils.check_docker() is False
        mock_which.assert_called_with("docker")
