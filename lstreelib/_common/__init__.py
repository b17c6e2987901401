"""Common components shared by the lstreelib engine.

This internal package contains non-async code: configuration, ignore
globs, the attribute value types and the per-platform owner/permission
resolvers. It should NOT be imported directly by users.

Important: This package must NEVER import from aio to avoid circular
dependencies.
"""

from .config import (
    Display,
    WalkConfig,
    MAX_SANE_DEPTH,
)
from .globs import IgnoreGlobs
from .attributes import (
    FileKind,
    FileType,
    Permissions,
    Size,
    Date,
    INode,
    Name,
    Indicator,
)
from .platform import (
    Owner,
    OwnerCache,
    AttributeResolver,
    PosixAttributeResolver,
    FallbackAttributeResolver,
    default_resolver,
)

__all__ = [
    # Configuration
    'Display',
    'WalkConfig',
    'MAX_SANE_DEPTH',
    'IgnoreGlobs',
    # Attributes
    'FileKind',
    'FileType',
    'Permissions',
    'Size',
    'Date',
    'INode',
    'Name',
    'Indicator',
    # Platform
    'Owner',
    'OwnerCache',
    'AttributeResolver',
    'PosixAttributeResolver',
    'FallbackAttributeResolver',
    'default_resolver',
]
