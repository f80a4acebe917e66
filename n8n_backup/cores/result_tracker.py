"""
Per-run result bookkeeping.

One ResultTracker is created per backup run and handed from the export
loop to the archive and notification steps.
"""

from typing import Dict, List, Optional, Tuple

from ..types import ExportCategory, ExportResult, ExportStatus, OverallStatus


ResultKey = Tuple[str, ExportCategory]


class ResultTracker:
    """Maps (container, category) to the terminal ExportResult."""

    def __init__(self):
        self._results: Dict[ResultKey, ExportResult] = {}
        self._containers: List[str] = []

    def record(self, result: ExportResult) -> None:
        # Last write wins; the export loop writes each key once
        if result.container not in self._containers:
            self._containers.append(result.container)
        self._results[(result.container, result.category)] = result

    def record_skipped_container(self, name: str, reason: Optional[str] = None) -> None:
        """Mark both categories of a container as SKIPPED with count 0."""
        for category in ExportCategory:
            self.record(ExportResult(
                container=name,
                category=category,
                status=ExportStatus.SKIPPED,
                item_count=0,
                message=reason,
            ))

    def get(self, container: str, category: ExportCategory) -> Optional[ExportResult]:
        return self._results.get((container, category))

    def results_for(self, container: str) -> Dict[ExportCategory, ExportResult]:
        return {
            category: self._results[(container, category)]
            for category in ExportCategory
            if (container, category) in self._results
        }

    def containers(self) -> List[str]:
        """Containers in the order they were first recorded."""
        return list(self._containers)

    def container_succeeded(self, container: str) -> bool:
        results = self.results_for(container)
        return len(results) == len(ExportCategory) and all(r.succeeded for r in results.values())

    def successful_containers(self) -> List[str]:
        return [name for name in self._containers if self.container_succeeded(name)]

    def has_failures(self) -> bool:
        return any(r.status is ExportStatus.FAILED for r in self._results.values())

    def snapshot(self) -> Dict[ResultKey, ExportResult]:
        """Copy of all results; ExportResult itself is immutable."""
        return dict(self._results)

    def aggregate_status(self, total: int, success_count: int) -> OverallStatus:
        """
        Classify a run.

        ERROR when nothing succeeded, SUCCESS when everything succeeded and
        no category failed, WARNING otherwise.
        """
        if success_count == 0:
            return OverallStatus.ERROR
        if success_count == total and not self.has_failures():
            return OverallStatus.SUCCESS
        return OverallStatus.WARNING

    def __len__(self) -> int:
        return len(self._results)
