"""Recursive directory size aggregation.

Runs after the walk. Expanded directories are summed bottom-up from
their children; directories the depth limit left unexpanded get an
independent size-only walk of the disk, so totals do not depend on how
deep the tree was built.
"""

import asyncio
import os
import stat as stat_module
from pathlib import Path
from typing import Collection, Optional

from .._common.attributes import Size
from .error_policies import ErrorPolicy, ReportErrorsPolicy
from .meta import Meta, read_metadata


def disk_usage(path, policy: Optional[ErrorPolicy] = None) -> int:
    """Total bytes under ``path``, including ``path`` itself.

    Size-only walk: no nodes are built and no ignore globs apply. Links
    are not followed and count with their own size. Anything that cannot
    be read contributes zero and is reported once through ``policy``;
    the walk itself never fails.

    The walk keeps an explicit stack, so directory depth is not bounded by
    the interpreter's recursion limit. It blocks; async callers should run
    it in a worker thread.

    Args:
        path: Entry to measure
        policy: Diagnostic channel (defaults to ReportErrorsPolicy)

    Returns:
        Size in bytes
    """
    if policy is None:
        policy = ReportErrorsPolicy()

    total = 0
    stack = [Path(path)]

    while stack:
        current = stack.pop()
        try:
            st = read_metadata(current)
        except OSError as e:
            policy.handle_sync(e, 'disk_usage', current)
            continue

        total += st.st_size
        if not stat_module.S_ISDIR(st.st_mode):
            continue

        try:
            with os.scandir(current) as iterator:
                names = [entry.name for entry in iterator]
        except OSError as e:
            policy.handle_sync(e, 'disk_usage', current)
            continue

        stack.extend(current / name for name in names)

    return total


async def calculate_total_size(
    meta: Meta,
    policy: Optional[ErrorPolicy] = None,
    semaphore: Optional[asyncio.Semaphore] = None,
    unreadable: Optional[Collection[Path]] = None,
) -> None:
    """Back-fill the size of every directory in the tree rooted at ``meta``.

    After this returns, each directory's ``size`` is its own on-disk size
    plus the sizes of everything below it. Sizes are updated in place, so
    call it once per tree. The "." and ".." entries are not descendants
    and are left alone.

    Args:
        meta: Root of the (possibly depth-truncated) tree
        policy: Diagnostic channel for the fallback walks
        semaphore: Optional bound on concurrent fallback walks
        unreadable: Directories the walk already failed to read and
            reported; they keep their own size and are not read again
    """
    if not meta.is_directory:
        return

    if policy is None:
        policy = ReportErrorsPolicy()

    if meta.content is not None:
        children = [child for child in meta.content if not child.is_synthetic]
        await asyncio.gather(
            *(calculate_total_size(child, policy, semaphore, unreadable) for child in children)
        )
        accumulated = meta.size.get_bytes() + sum(child.size.get_bytes() for child in children)
        meta.size = Size(accumulated)
        return

    if unreadable and meta.path in unreadable:
        return

    # Not expanded: the depth limit stopped the walk here
    if semaphore is None:
        total = await asyncio.to_thread(disk_usage, meta.path, policy)
    else:
        async with semaphore:
            total = await asyncio.to_thread(disk_usage, meta.path, policy)
    meta.size = Size(total)
