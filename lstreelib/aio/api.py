"""High-level async API for lstreelib.

This module provides simple entry points for building a listing tree
in one call and for iterating over the result.
"""

from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

from .._common.config import Display, WalkConfig
from .._common.platform import AttributeResolver
from .error_policies import ErrorPolicy, ReportErrorsPolicy
from .meta import Meta
from .sizes import calculate_total_size
from .walker import MetaWalker


async def build_tree(
    root: Union[str, Path],
    max_depth: Optional[int] = None,
    display: Display = Display.DISPLAY_ONLY_VISIBLE,
    ignore_globs: Iterable[str] = (),
    total_size: bool = False,
    policy: Optional[ErrorPolicy] = None,
    max_concurrent: int = 100,
    resolver: Optional[AttributeResolver] = None,
    config: Optional[WalkConfig] = None,
) -> Meta:
    """Build the metadata tree for ``root``.

    Args:
        root: Path to list
        max_depth: Levels to expand (None = unbounded, 0 = root only)
        display: Visibility mode for directory entries
        ignore_globs: Glob patterns for entry names to skip
        total_size: Aggregate recursive directory sizes after the walk
        policy: Diagnostic channel (defaults to ReportErrorsPolicy)
        max_concurrent: Maximum concurrent blocking I/O operations
        resolver: Owner/permission resolver (defaults to the platform's)
        config: Full configuration; overrides the individual arguments

    Returns:
        Root Meta of the tree

    Raises:
        ValueError: If the configuration is invalid
        OSError: If the root itself cannot be accessed

    Example:
        >>> root = await build_tree('/tmp/t', max_depth=2, total_size=True)
        >>> for node, depth in iter_tree(root):
        ...     print(f"{'  ' * depth}{node.name.name} {node.size.get_bytes()}")
    """
    if config is None:
        config = WalkConfig(
            max_depth=max_depth,
            display=display,
            ignore_globs=tuple(ignore_globs),
            total_size=total_size,
            max_concurrent=max_concurrent,
        )

    errors = config.validate()
    if errors:
        raise ValueError("Invalid walk configuration: " + "; ".join(errors))

    if policy is None:
        policy = ReportErrorsPolicy()

    async with MetaWalker(
        display=config.display,
        ignore_globs=config.ignore_globs,
        policy=policy,
        resolver=resolver,
        max_concurrent=config.max_concurrent,
    ) as walker:
        meta = await walker.walk(root, config.max_depth)

    if config.total_size:
        await calculate_total_size(meta, policy, unreadable=walker.unreadable)

    return meta


def iter_tree(meta: Meta) -> Iterator[Tuple[Meta, int]]:
    """Iterate a built tree in pre-order.

    Children are visited in the order the walk stored them.

    Args:
        meta: Root of the tree

    Yields:
        Tuples of (node, depth) with the root at depth 0
    """
    stack = [(meta, 0)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if node.content:
            stack.extend((child, depth + 1) for child in reversed(node.content))
