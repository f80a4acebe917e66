"""
Integration tests for a complete backup run.

Config file -> settings -> BackupManager with a fake docker runtime ->
real encrypted ZIP, extracted again and compared byte for byte.
"""

import json

import pytest
import pyzipper

from n8n_backup.cores.backup_manager import BackupManager
from n8n_backup.helpers.config import Config
from n8n_backup.types import ExportStatus, OverallStatus


@pytest.mark.integration
class TestBackupRunCycle:

    def test_config_to_archive(self, tmp_config, fake_runtime_factory, tmp_path):
        settings = Config(tmp_config).to_settings()
        runtime = fake_runtime_factory(
            running=["n8n-main", "n8n-worker"],
            counts={("n8n-main", "workflows"): 3, ("n8n-worker", "credentials"): 1},
        )

        report = BackupManager(settings, runtime=runtime).run()

        assert report.exit_code == 0
        assert report.overall_status is OverallStatus.SUCCESS
        assert report.archive.path.parent == tmp_path / "backup"

        extract_dir = tmp_path / "restore"
        with pyzipper.AESZipFile(report.archive.path) as zf:
            zf.setpassword(b"test-password-123")
            zf.extractall(extract_dir)

        workflows = sorted((extract_dir / "files" / "n8n-main" / "workflows").iterdir())
        assert [p.name for p in workflows] == ["0.json", "1.json", "2.json"]
        data = json.loads((workflows[0]).read_text())
        assert data == {"container": "n8n-main", "category": "workflows", "id": 0}
        assert len(list((extract_dir / "files" / "n8n-worker" / "credentials").iterdir())) == 1

    def test_mixed_outcomes(self, settings_factory, fake_runtime_factory):
        settings = settings_factory(
            containers={"manual": ["n8n-main", "n8n-gone", "n8n-broken"], "auto_detect": False},
        )
        runtime = fake_runtime_factory(
            running=["n8n-main", "n8n-broken"],
            failures={("n8n-broken", "credentials", "copy")},
        )
        notifications = []

        class RecordingNotifier:
            def notify(self, report, tracker):
                notifications.append((report, tracker.snapshot()))
                return True

        report = BackupManager(settings, runtime=runtime, notifier=RecordingNotifier()).run()

        assert report.success_count == 1
        assert report.total == 3
        assert report.overall_status is OverallStatus.WARNING
        assert report.exit_code == 0

        with pyzipper.AESZipFile(report.archive.path) as zf:
            tops = {name.split("/")[1] for name in zf.namelist() if name != "files/"}
        assert tops == {"n8n-main"}

        _, results = notifications[0]
        statuses = {(r.container, r.category.value): r.status for r in results.values()}
        assert statuses[("n8n-gone", "workflows")] is ExportStatus.SKIPPED
        assert statuses[("n8n-broken", "workflows")] is ExportStatus.SUCCESS
        assert statuses[("n8n-broken", "credentials")] is ExportStatus.FAILED

        # in-container temp dirs are removed after every successful copy
        rm_calls = [c for c in runtime.calls if c[0] == "exec" and c[2][0] == "rm"]
        assert {c[1] for c in rm_calls} == {"n8n-main", "n8n-broken"}

    def test_no_archive_without_successes(self, settings_factory, fake_runtime_factory):
        settings = settings_factory(containers={"manual": ["n8n-gone"], "auto_detect": False})

        report = BackupManager(settings, runtime=fake_runtime_factory()).run()

        assert report.exit_code == 1
        assert list(settings.paths.base_dir.glob("*.zip")) == []
        log = report.log_file.read_text()
        assert "Container n8n-gone not found" in log
        assert "Backup script completed without creating an archive" in log
