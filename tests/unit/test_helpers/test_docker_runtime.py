"""
Unit tests for DockerRuntime.

subprocess.run is mocked; no docker binary is needed.
"""

import subprocess
from unittest.mock import Mock, patch

import pytest

from n8n_backup.errors import RuntimeUnavailableError
from n8n_backup.helpers.docker_runtime import DockerRuntime
from n8n_backup.types import ContainerState


def completed(returncode=0, stdout=""):
    return Mock(returncode=returncode, stdout=stdout)


@pytest.mark.unit
class TestDockerRuntime:

    def test_list_running(self, mock_subprocess):
        mock_subprocess.return_value = completed(stdout="n8n\n\npostgres\n")

        assert DockerRuntime().list_running() == ["n8n", "postgres"]
        cmd = mock_subprocess.call_args.args[0]
        assert cmd == ["docker", "ps", "--format", "{{.Names}}"]

    def test_list_running_failure_is_empty(self, mock_subprocess):
        mock_subprocess.return_value = completed(1, "Cannot connect to the Docker daemon")

        assert DockerRuntime().list_running() == []

    def test_output_merges_stderr(self, mock_subprocess):
        mock_subprocess.return_value = completed()

        DockerRuntime(timeout=30).exec("n8n", ["ls"])

        kwargs = mock_subprocess.call_args.kwargs
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["timeout"] == 30

    def test_exec_as_user(self, mock_subprocess):
        mock_subprocess.return_value = completed(stdout="ok")

        result = DockerRuntime().exec("n8n", ["mkdir", "-p", "/tmp/x"], user="node")

        assert result.ok
        assert result.output == "ok"
        assert mock_subprocess.call_args.args[0] == [
            "docker", "exec", "-u", "node", "n8n", "mkdir", "-p", "/tmp/x",
        ]

    def test_copy_from(self, mock_subprocess):
        mock_subprocess.return_value = completed()

        DockerRuntime().copy_from("n8n", "/tmp/n8n_backup/workflows/.", "/backup/files/n8n/workflows/")

        assert mock_subprocess.call_args.args[0] == [
            "docker", "cp", "n8n:/tmp/n8n_backup/workflows/.", "/backup/files/n8n/workflows/",
        ]

    def test_nonzero_exit_does_not_raise(self, mock_subprocess):
        mock_subprocess.return_value = completed(2, "boom")

        result = DockerRuntime().exec("n8n", ["false"])

        assert not result.ok
        assert result.returncode == 2

    def test_timeout_returns_124(self, mock_subprocess):
        mock_subprocess.side_effect = subprocess.TimeoutExpired(cmd="docker", timeout=5)

        result = DockerRuntime(timeout=5).exec("n8n", ["sleep", "60"])

        assert result.returncode == 124
        assert not result.ok

    def test_missing_binary_raises(self, mock_subprocess):
        mock_subprocess.side_effect = FileNotFoundError("docker")

        with pytest.raises(RuntimeUnavailableError):
            DockerRuntime().exec("n8n", ["ls"])

    @patch("n8n_backup.helpers.docker_runtime.SystemUtils.check_docker", return_value=True)
    def test_is_available(self, _mock_check, mock_subprocess):
        mock_subprocess.return_value = completed()
        assert DockerRuntime().is_available() is True
        assert mock_subprocess.call_args.args[0] == ["docker", "version"]

        mock_subprocess.return_value = completed(1, "Cannot connect to the Docker daemon")
        assert DockerRuntime().is_available() is False

    @patch("n8n_backup.helpers.docker_runtime.SystemUtils.check_docker", return_value=False)
    def test_not_available_without_binary(self, _mock_check, mock_subprocess):
        assert DockerRuntime().is_available() is False
        mock_subprocess.assert_not_called()


@pytest.mark.unit
class TestContainerState:

    def test_running(self, mock_subprocess):
        mock_subprocess.return_value = completed(stdout="abc123\n")

        assert DockerRuntime().container_state("n8n") is ContainerState.RUNNING
        assert mock_subprocess.call_args.args[0] == ["docker", "ps", "-q", "-f", "name=^n8n$"]

    def test_stopped(self, mock_subprocess):
        mock_subprocess.side_effect = [completed(stdout=""), completed(stdout="abc123\n")]

        assert DockerRuntime().container_state("n8n") is ContainerState.STOPPED

    def test_missing(self, mock_subprocess):
        mock_subprocess.side_effect = [completed(stdout=""), completed(stdout="")]

        assert DockerRuntime().container_state("n8n") is ContainerState.MISSING
