"""
Item count extraction from n8n export output.

The n8n CLI only reports how many items it exported in a human readable
line ("Successfully exported 12 workflows."). Parsing is kept behind the
CountParser interface so another strategy can be plugged in when the
message format changes. A parser never raises; unknown means 0.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional, Pattern, Union

from .constants import DEFAULT_COUNT_PATTERN


class CountParser(ABC):
    """Interface: turn captured export output into an item count."""

    @abstractmethod
    def parse(self, output: Optional[str]) -> int:
        ...


class RegexCountParser(CountParser):
    """First match of a regex; group 1 is the count."""

    def __init__(self, pattern: Union[str, Pattern] = DEFAULT_COUNT_PATTERN):
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def parse(self, output: Optional[str]) -> int:
        if not output:
            return 0
        match = self.pattern.search(output)
        if not match:
            return 0
        try:
            return max(0, int(match.group(1)))
        except (IndexError, ValueError, TypeError):
            return 0
