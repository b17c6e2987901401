"""Symbolic link resolution.

A link's target is read once and checked for existence once. The result
is a snapshot: a link that is repaired or broken after the scan keeps the
value it had when the node was built.
"""

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class SymLink:
    """Target text and validity of a symbolic link.

    ``target is None`` means the entry is not a link; ``valid`` only has
    meaning when a target is set.
    """

    target: Optional[str] = None
    valid: bool = False

    @classmethod
    def from_path(cls, path) -> 'SymLink':
        """Read the link at ``path``.

        Relative targets are resolved against the link's parent
        directory, absolute ones as-is.

        Args:
            path: Path of the entry (need not be a link)

        Returns:
            SymLink for the entry
        """
        path = Path(path)
        try:
            target = os.readlink(path)
        except (OSError, ValueError):
            return cls()

        target_path = Path(target)
        if target_path.is_absolute() or path.parent == path:
            candidate = target_path
        else:
            candidate = path.parent / target_path

        return cls(target=str(target), valid=os.path.exists(candidate))

    @property
    def is_link(self) -> bool:
        return self.target is not None

    def symlink_string(self) -> Optional[str]:
        return self.target


async def resolve_symlink(path) -> SymLink:
    """Awaitable ``SymLink.from_path`` that runs off the event loop."""
    return await asyncio.to_thread(SymLink.from_path, path)
