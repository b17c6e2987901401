"""Asynchronous tree building for lstreelib.

This package contains the async engine: the metadata node, the walker
that expands it, the size aggregator and the diagnostic channel. All
blocking filesystem calls run in worker threads.
"""

# Core abstractions
from .core import AsyncTreeNode

# Nodes
from .meta import Meta, read_metadata
from .symlink import SymLink, resolve_symlink

# Walking and sizing
from .walker import MetaWalker
from .sizes import calculate_total_size, disk_usage

# Error handling
from .error_policies import (
    ErrorPolicy,
    FailFastPolicy,
    CollectErrorsPolicy,
    ReportErrorsPolicy,
    InvalidEntryNameError,
    create_policy,
    format_diagnostic,
)

# High-level API
from .api import build_tree, iter_tree

__all__ = [
    # Core abstractions
    'AsyncTreeNode',
    # Nodes
    'Meta',
    'read_metadata',
    'SymLink',
    'resolve_symlink',
    # Walking and sizing
    'MetaWalker',
    'calculate_total_size',
    'disk_usage',
    # Error handling
    'ErrorPolicy',
    'FailFastPolicy',
    'CollectErrorsPolicy',
    'ReportErrorsPolicy',
    'InvalidEntryNameError',
    'create_policy',
    'format_diagnostic',
    # High-level API
    'build_tree',
    'iter_tree',
]
