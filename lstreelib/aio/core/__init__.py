"""Core abstractions for async tree building.

This module defines the node interface shared by every tree the
library produces.
"""

from .node import AsyncTreeNode

__all__ = [
    'AsyncTreeNode',
]
