"""Configuration system for lstreelib.

This module defines how callers describe a listing walk: how deep to go,
which entries are visible, what to ignore and whether directory sizes
should be aggregated once the tree is built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence


# Explicit depths above this are treated as configuration mistakes.
# Use max_depth=None for an unbounded walk.
MAX_SANE_DEPTH = 4096


class Display(Enum):
    """Which entries of a directory end up in the tree.

    The renderer picks one of these from its command line; the walker
    only consumes it.
    """
    DISPLAY_DIRECTORY_ITSELF = "directory_itself"  # The named entry only
    DISPLAY_ONLY_VISIBLE = "only_visible"          # Skip leading-dot names
    DISPLAY_ALL = "all"                            # Hidden plus "." and ".."


@dataclass
class WalkConfig:
    """Complete configuration for building a metadata tree.

    Attributes:
        max_depth: Levels to expand below the root (None = unbounded,
            0 = do not expand even the root)
        display: Visibility mode for directory entries
        ignore_globs: Glob patterns; matching entry names are skipped
        total_size: Aggregate recursive directory sizes after the walk
        max_concurrent: Maximum concurrent blocking I/O operations
    """

    max_depth: Optional[int] = None
    display: Display = Display.DISPLAY_ONLY_VISIBLE
    ignore_globs: Sequence[str] = field(default_factory=tuple)
    total_size: bool = False
    max_concurrent: int = 100

    @classmethod
    def listing(cls, display: Display = Display.DISPLAY_ONLY_VISIBLE) -> 'WalkConfig':
        """Create config for a plain one-level listing.

        Args:
            display: Visibility mode

        Returns:
            WalkConfig expanding only the root directory
        """
        return cls(max_depth=1, display=display)

    @classmethod
    def tree(cls, total_size: bool = False) -> 'WalkConfig':
        """Create config for a full recursive tree.

        Args:
            total_size: Whether directory sizes should be aggregated

        Returns:
            WalkConfig with no depth limit
        """
        return cls(max_depth=None, total_size=total_size)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.max_depth is not None:
            if self.max_depth < 0:
                errors.append("max_depth cannot be negative")
            elif self.max_depth > MAX_SANE_DEPTH:
                errors.append(
                    f"max_depth cannot exceed {MAX_SANE_DEPTH} (use None for unbounded)"
                )

        if not isinstance(self.display, Display):
            errors.append(f"display must be a Display member, got {self.display!r}")

        if isinstance(self.ignore_globs, str):
            errors.append("ignore_globs must be a sequence of patterns, not a string")

        if self.max_concurrent <= 0:
            errors.append("max_concurrent must be positive")

        return errors
