"""lstreelib - metadata trees for enhanced directory listings.

lstreelib walks a filesystem subtree and builds an in-memory tree of
``Meta`` nodes (type, owner, permissions, size, dates, inode, symlink
target) for a renderer to display. The walk is async, depth-bounded and
keeps going past entries it cannot read.

    from lstreelib.aio import build_tree, iter_tree
    from lstreelib import Display

    root = await build_tree('.', max_depth=2, display=Display.DISPLAY_ALL)
"""

__version__ = "0.1.0"

from . import aio
from ._common import (
    Display,
    WalkConfig,
    IgnoreGlobs,
    FileKind,
    FileType,
    Permissions,
    Size,
    Date,
    INode,
    Name,
    Indicator,
    Owner,
    OwnerCache,
    AttributeResolver,
    default_resolver,
)

__all__ = [
    "__version__",
    "aio",
    "Display",
    "WalkConfig",
    "IgnoreGlobs",
    "FileKind",
    "FileType",
    "Permissions",
    "Size",
    "Date",
    "INode",
    "Name",
    "Indicator",
    "Owner",
    "OwnerCache",
    "AttributeResolver",
    "default_resolver",
]
