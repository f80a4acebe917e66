"""
Container selection for n8n-backup.

Resolves the ordered set of containers to back up from the configured
manual list, the running containers matching a name filter and the names
given on the command line.
"""

from typing import Iterable, List, Optional, Sequence

from ..helpers.docker_runtime import DockerRuntime
from ..helpers.logging import get_logger


logger = get_logger(__name__)


class ContainerSelector:
    """
    Builds the container selection set.

    Order is manual list, then auto-detected containers in docker's order,
    then extra names. A name is only added once (exact, case-sensitive match).
    """

    def __init__(self, runtime: DockerRuntime):
        self.runtime = runtime

    def resolve(
        self,
        manual: Sequence[str],
        auto_detect: bool,
        name_filter: str,
        extra_args: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """
        Resolve the final container list.

        Args:
            manual: Configured container names
            auto_detect: Query running containers matching name_filter
            name_filter: Case-insensitive substring for auto-detection
            extra_args: Additional names from the command line

        Returns:
            De-duplicated container names; may be empty
        """
        selected: List[str] = []
        self._extend_unique(selected, manual)

        if auto_detect:
            detected = self.detect(name_filter)
            logger.debug(f"Auto-detected containers: {detected}")
            self._extend_unique(selected, detected)

        self._extend_unique(selected, extra_args or [])
        return selected

    def detect(self, name_filter: str) -> List[str]:
        """Running containers whose name contains name_filter (any case)."""
        needle = name_filter.lower()
        return [name for name in self.runtime.list_running() if needle in name.lower()]

    @staticmethod
    def _extend_unique(target: List[str], names: Iterable[str]) -> None:
        for name in names:
            if name and name not in target:
                target.append(name)
