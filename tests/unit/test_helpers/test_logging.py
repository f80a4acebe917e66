"""
Unit tests for the logging helpers.

Tests the run log format and the SUCCESS level.
"""

import logging

import pytest

from n8n_backup.helpers.logging import StructuredFormatter, get_logger, log_manager


@pytest.mark.unit
class TestRunLog:

    def test_line_format(self, tmp_path):
        logger = get_logger("tests.runlog")
        path = log_manager.start_run_log(tmp_path / "logs" / "run.log")

        logger.info("Starting n8n backup")
        log_manager.success(logger, "done")
        logger.error("broken")
        log_manager.stop_run_log()

        lines = path.read_text().splitlines()
        assert lines[0].endswith("] [INFO] Starting n8n backup")
        assert lines[1].endswith("] [SUCCESS] done")
        assert lines[2].endswith("] [ERROR] broken")
        assert lines[0].startswith("[20")

    def test_stop_detaches_handler(self, tmp_path):
        logger = get_logger("tests.runlog")
        path = log_manager.start_run_log(tmp_path / "run.log")
        logger.info("inside")
        log_manager.stop_run_log()

        logger.info("outside")

        assert "outside" not in path.read_text()

    def test_separator(self, tmp_path):
        logger = get_logger("tests.runlog")
        path = log_manager.start_run_log(tmp_path / "run.log")

        log_manager.separator(logger, "Backup Summary")
        log_manager.stop_run_log()

        messages = [line.split("] ", 2)[-1] for line in path.read_text().splitlines()]
        assert messages[1:4] == ["====================", "Backup Summary", "===================="]


@pytest.mark.unit
class TestLoggerHelpers:

    def test_get_logger_prefix(self):
        assert get_logger("x").name == "n8n_backup.x"
        assert get_logger("n8n_backup.cores").name == "n8n_backup.cores"

    def test_success_level_name(self):
        assert logging.getLevelName(25) == "SUCCESS"

    def test_configure_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            log_manager.configure(level="LOUD")

    def test_structured_formatter_context(self):
        record = logging.LogRecord("n8n_backup", logging.INFO, __file__, 1, "exported", None, None)
        record.container = "n8n"

        line = StructuredFormatter(use_color=False).format(record)

        assert line.endswith("INFO     exported (container=n8n)")
