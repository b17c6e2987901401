"""Ignore-glob matching for directory entry names."""

import fnmatch
import re
from typing import Iterable, List, Pattern


class IgnoreGlobs:
    """A compiled set of glob patterns matched against bare entry names.

    Matching is case-sensitive on every platform and ``*`` also matches
    path separators, so a pattern is always compared to the final path
    component only.
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns: List[str] = list(patterns)
        self._compiled: List[Pattern[str]] = [
            re.compile(fnmatch.translate(pattern)) for pattern in self.patterns
        ]

    def is_match(self, name: str) -> bool:
        """Check whether ``name`` matches any pattern.

        Args:
            name: Entry name (no directory part)

        Returns:
            True if the entry should be ignored
        """
        return any(regex.match(name) for regex in self._compiled)

    def __bool__(self) -> bool:
        return bool(self._compiled)

    def __len__(self) -> int:
        return len(self._compiled)

    def __repr__(self) -> str:
        return f"IgnoreGlobs({self.patterns!r})"
