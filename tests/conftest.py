"""
Shared pytest fixtures for n8n-backup tests.

Provides a fake docker runtime, settings factories and temporary config files.
"""

import pytest
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple
from unittest.mock import patch
from typer.testing import CliRunner

from n8n_backup.helpers.docker_runtime import CommandResult
from n8n_backup.helpers.logging import log_manager
from n8n_backup.helpers.settings import BackupSettings
from n8n_backup.types import ContainerState


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external tools")
    config.addinivalue_line("markers", "integration: full backup runs against a fake runtime")


class FakeRuntime:
    """
    In-memory stand-in for DockerRuntime.

    Export commands "produce" files that a later copy_from() writes to the
    host. Failures are injected as (container, category, step) tuples where
    step is one of mkdir, export, copy, rm.
    """

    def __init__(
        self,
        running: Optional[List[str]] = None,
        stopped: Optional[List[str]] = None,
        counts: Optional[Dict[Tuple[str, str], int]] = None,
        failures: Optional[Set[Tuple[str, str, str]]] = None,
        available: bool = True,
    ):
        self.running = list(running or [])
        self.stopped = set(stopped or [])
        self.counts = counts or {}
        self.failures = set(failures or [])
        self.available = available
        self.calls: List[tuple] = []
        self._produced: Dict[Tuple[str, str], Dict[str, str]] = {}

    @staticmethod
    def _norm(path: str) -> str:
        if path.endswith("/."):
            path = path[:-2]
        return path.rstrip("/")

    @staticmethod
    def _category(path: str) -> str:
        return "workflows" if "workflows" in path else "credentials"

    def is_available(self) -> bool:
        return self.available

    def list_running(self) -> List[str]:
        self.calls.append(("ps",))
        return list(self.running)

    def container_state(self, name: str) -> ContainerState:
        self.calls.append(("state", name))
        if name in self.running:
            return ContainerState.RUNNING
        if name in self.stopped:
            return ContainerState.STOPPED
        return ContainerState.MISSING

    def exec(self, container: str, command: List[str], user: Optional[str] = None) -> CommandResult:
        self.calls.append(("exec", container, tuple(command), user))
        args = ["docker", "exec", container] + list(command)

        if command[0] in ("mkdir", "rm"):
            step = "mkdir" if command[0] == "mkdir" else "rm"
            category = self._category(command[-1])
            if (container, category, step) in self.failures:
                return CommandResult(args, 1, f"{step}: permission denied")
            return CommandResult(args, 0, "")

        output_arg = next(a for a in command if a.startswith("--output="))
        path = self._norm(output_arg.split("=", 1)[1])
        category = self._category(path)
        count = self.counts.get((container, category), 2)

        if (container, category, "export") in self.failures:
            return CommandResult(args, 1, f"Successfully exported {count} {category}.\nError: export crashed")

        self._produced[(container, path)] = {
            f"{i}.json": f'{{"container": "{container}", "category": "{category}", "id": {i}}}'
            for i in range(count)
        }
        return CommandResult(args, 0, f"Successfully exported {count} {category}.")

    def copy_from(self, container: str, source: str, destination: str) -> CommandResult:
        self.calls.append(("cp", container, source, destination))
        src_path = self._norm(source)
        category = self._category(src_path)
        args = ["docker", "cp", f"{container}:{source}", destination]

        if (container, category, "copy") in self.failures:
            return CommandResult(args, 1, "Error: No such container:path")

        target = Path(destination)
        for filename, content in self._produced.get((container, src_path), {}).items():
            (target / filename).write_text(content)
        return CommandResult(args, 0, "")


@pytest.fixture
def fake_runtime_factory():
    """Factory for FakeRuntime instances."""
    return FakeRuntime


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach log handlers so no test writes into another test's files."""
    yield
    log_manager.reset()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Environment overrides must be set explicitly per test."""
    monkeypatch.delenv("N8N_BACKUP_PASSWORD", raising=False)
    monkeypatch.delenv("N8N_BACKUP_SMTP_PASSWORD", raising=False)


@pytest.fixture
def cli_runner():
    """Typer CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def settings_factory(tmp_path):
    """
    Factory for BackupSettings rooted in tmp_path.

    Usage:
        settings = settings_factory(encryption={"enabled": False})
    """

    def _make(**sections) -> BackupSettings:
        data = {
            "paths": {"base_dir": str(tmp_path / "backup")},
            "containers": {"manual": [], "auto_detect": True, "name_filter": "n8n"},
            "encryption": {"enabled": True, "prompt_for_password": False, "default_password": "s3cret"},
        }
        for key, value in sections.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        return BackupSettings.model_validate(data)

    return _make


@pytest.fixture
def tmp_config(tmp_path):
    """Create a temporary n8n-backup config file."""
    config_file = tmp_path / "n8n-backup.conf"
    config_file.write_text(
        "[containers]\n"
        "manual = n8n-main, n8n-worker\n"
        "auto_detect = false\n"
        "name_filter = n8n\n"
        "\n"
        "[paths]\n"
        f"base_dir = {tmp_path / 'backup'}\n"
        "\n"
        "[export]\n"
        "docker_user = node\n"
        "\n"
        "[encryption]\n"
        "enabled = true\n"
        "prompt_for_password = false\n"
        "default_password = test-password-123\n"
        "\n"
        "[email]\n"
        "enabled = false\n"
        "smtp_host = smtp.example.com\n"
        "smtp_port = 587\n"
        "smtp_user = backup@example.com\n"
        "smtp_password = mail-secret\n"
        "recipients = ops@example.com; admin@example.com\n"
        "\n"
        "[webhook]\n"
        "enabled = false\n"
        "url =\n"
        "\n"
        "[logging]\n"
        "level = INFO\n"
    )
    return config_file


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for external commands."""
    with patch("subprocess.run") as mock_run:
        yield mock_run
