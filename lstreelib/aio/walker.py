"""Depth-bounded async walker that builds the listing tree.

Blocking filesystem calls run in worker threads under a semaphore, and
sibling entries are built concurrently with ``asyncio.gather``. Each child
is its own task, so deep trees do not grow the native call stack.
"""

import asyncio
import os
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Set, Tuple, Union

from .._common.config import Display
from .._common.globs import IgnoreGlobs
from .._common.platform import AttributeResolver, default_resolver
from .error_policies import ErrorPolicy, InvalidEntryNameError, ReportErrorsPolicy
from .meta import Meta


def _scan_directory_sync(path: Path) -> List[Tuple[str, Path]]:
    """Synchronous function to be run in executor with proper resource management."""
    with os.scandir(path) as iterator:
        return [(entry.name, path / entry.name) for entry in iterator]


def _canonical_parent(path: Path) -> Path:
    # The root's parent is the root itself
    return Path(path).resolve(strict=True).parent


def _is_decodable(name: str) -> bool:
    # Undecodable bytes come back from scandir as lone surrogates
    try:
        name.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True


class MetaWalker:
    """Builds ``Meta`` trees from a starting path.

    The walker owns everything that is shared across one walk: the
    owner/permission resolver (and with it the owner cache), the
    concurrency semaphore and the error policy that receives diagnostics.
    Separate walkers never share state.
    """

    def __init__(
        self,
        display: Display = Display.DISPLAY_ONLY_VISIBLE,
        ignore_globs: Union[IgnoreGlobs, Iterable[str], None] = None,
        policy: Optional[ErrorPolicy] = None,
        resolver: Optional[AttributeResolver] = None,
        max_concurrent: int = 100,
    ):
        """Initialize walker.

        Args:
            display: Visibility mode for directory entries
            ignore_globs: Patterns (or a compiled IgnoreGlobs) for names to skip
            policy: Diagnostic channel for entry-local errors
                (defaults to ReportErrorsPolicy)
            resolver: Owner/permission resolver (defaults to the platform's)
            max_concurrent: Maximum concurrent blocking I/O operations
        """
        if not isinstance(ignore_globs, IgnoreGlobs):
            ignore_globs = IgnoreGlobs(ignore_globs or ())
        self.display = display
        self.ignore_globs = ignore_globs
        self.policy = policy or ReportErrorsPolicy()
        self.resolver = resolver or default_resolver()
        self.max_concurrent = max_concurrent
        self.semaphore = asyncio.Semaphore(max_concurrent)

        self.entries_built = 0
        self.directories_read = 0
        self.entries_skipped = 0
        # Directories that could not be read, already reported once
        self.unreadable: Set[Path] = set()

    async def _run_blocking(self, func: Callable[..., Any], *args: Any) -> Any:
        async with self.semaphore:
            return await asyncio.to_thread(func, *args)

    async def build_meta(self, path) -> Meta:
        """Build the node for one path using this walker's resolver.

        Raises:
            OSError: If the entry cannot be stat'd
        """
        meta = await self._run_blocking(Meta.from_path_sync, path, self.resolver)
        self.entries_built += 1
        return meta

    async def walk(self, path, depth: Optional[int] = None) -> Meta:
        """Build the root node for ``path`` and expand it.

        Failures on the root itself are not diagnostics: they propagate.

        Args:
            path: Starting path
            depth: Levels to expand (None = unbounded, 0 = root only)

        Returns:
            Root Meta with ``content`` populated

        Raises:
            ValueError: If ``depth`` is negative
        """
        if depth is not None and depth < 0:
            raise ValueError(f"depth cannot be negative: {depth}")
        root = await self.build_meta(path)
        root.content = await self.recurse_into(root, depth)
        return root

    async def recurse_into(self, meta: Meta, depth: Optional[int]) -> Optional[List[Meta]]:
        """Collect the children of ``meta``.

        Args:
            meta: Node to expand
            depth: Remaining depth (None = unbounded)

        Returns:
            List of child nodes, or None when the node is not expanded

        Raises:
            InvalidEntryNameError: An entry name cannot be represented as text
            OSError: The "." / ".." entries could not be built
            ValueError: If ``depth`` is negative
        """
        if depth is not None and depth < 0:
            raise ValueError(f"depth cannot be negative: {depth}")
        if depth == 0:
            return None
        if self.display is Display.DISPLAY_DIRECTORY_ITSELF:
            return None
        if not meta.is_directory:
            return None

        try:
            entries = await self._run_blocking(_scan_directory_sync, meta.path)
        except OSError as e:
            self.unreadable.add(meta.path)
            await self.policy.handle(e, 'recurse_into', meta.path)
            return None
        self.directories_read += 1

        content: List[Meta] = []

        if self.display is Display.DISPLAY_ALL:
            parent_path = await self._run_blocking(_canonical_parent, meta.path)
            parent = await self.build_meta(parent_path)
            content.append(meta.relabel('.'))
            content.append(parent.relabel('..'))

        pending: List[Path] = []
        for name, path in entries:
            if not _is_decodable(name):
                raise InvalidEntryNameError(path)

            if self.ignore_globs.is_match(name):
                continue

            if self.display is Display.DISPLAY_ONLY_VISIBLE and name.startswith('.'):
                continue

            pending.append(path)

        next_depth = None if depth is None else depth - 1
        children = await asyncio.gather(
            *(self._build_child(path, next_depth) for path in pending)
        )
        content.extend(child for child in children if child is not None)
        return content

    async def _build_child(self, path: Path, depth: Optional[int]) -> Optional[Meta]:
        """Build and expand one entry, reporting instead of raising."""
        try:
            child = await self.build_meta(path)
        except OSError as e:
            self.entries_skipped += 1
            await self.policy.handle(e, 'from_path', path)
            return None

        try:
            child.content = await self.recurse_into(child, depth)
        except OSError as e:
            # The whole subtree is dropped, not kept with empty content
            self.entries_skipped += 1
            await self.policy.handle(e, 'recurse_into', path)
            return None

        return child

    async def get_stats(self) -> dict:
        """Get walker statistics.

        Returns:
            Statistics dictionary
        """
        return {
            'max_concurrent': self.max_concurrent,
            'display': self.display.value,
            'ignore_globs': list(self.ignore_globs.patterns),
            'entries_built': self.entries_built,
            'directories_read': self.directories_read,
            'entries_skipped': self.entries_skipped,
            'unreadable_directories': len(self.unreadable),
        }

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        return None
