"""
Unit tests for ContainerSelector.

Tests precedence order, de-duplication and the case rules of auto-detection.
"""

import pytest
from unittest.mock import Mock

from n8n_backup.cores.container_selector import ContainerSelector


def make_selector(running=None) -> ContainerSelector:
    runtime = Mock()
    runtime.list_running.return_value = list(running or [])
    return ContainerSelector(runtime)


@pytest.mark.unit
class TestResolve:
    """Tests for resolve()."""

    def test_merges_sources_without_duplicates(self):
        """manual=[a], docker=[a, b], args=[b, c] gives [a, b, c]."""
        selector = make_selector(running=["a", "b"])

        result = selector.resolve(["a"], True, "", ["b", "c"])

        assert result == ["a", "b", "c"]

    def test_precedence_manual_then_detected_then_args(self):
        selector = make_selector(running=["n8n-2", "n8n-1"])

        result = selector.resolve(["custom"], True, "n8n", ["extra"])

        assert result == ["custom", "n8n-2", "n8n-1", "extra"]

    def test_filter_is_case_insensitive(self):
        selector = make_selector(running=["N8N-Prod", "postgres", "my_n8n_worker"])

        result = selector.resolve([], True, "n8n", [])

        assert result == ["N8N-Prod", "my_n8n_worker"]

    def test_deduplication_is_case_sensitive(self):
        """'N8N' and 'n8n' are different container names."""
        selector = make_selector(running=["N8N"])

        result = selector.resolve(["n8n"], True, "n8n", ["N8N"])

        assert result == ["n8n", "N8N"]

    def test_auto_detect_disabled_skips_query(self):
        selector = make_selector(running=["n8n"])

        result = selector.resolve(["manual"], False, "n8n", [])

        assert result == ["manual"]
        selector.runtime.list_running.assert_not_called()

    def test_empty_when_no_source_yields_names(self):
        selector = make_selector(running=["postgres", "redis"])

        assert selector.resolve([], True, "n8n", []) == []

    def test_blank_and_repeated_manual_entries_dropped(self):
        selector = make_selector()

        result = selector.resolve(["a", "", "a", "b"], False, "n8n", None)

        assert result == ["a", "b"]

    def test_no_duplicates_for_any_input(self):
        selector = make_selector(running=["x", "y", "x", "z"])

        result = selector.resolve(["y", "x"], True, "", ["z", "y", "w", "w"])

        assert len(result) == len(set(result))
        assert result == ["y", "x", "z", "w"]
