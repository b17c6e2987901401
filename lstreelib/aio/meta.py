"""Metadata node for one filesystem entry.

A ``Meta`` aggregates every attribute the listing renders for an entry.
It is created once from a path, gets its ``content`` filled in by the
walker, may have its ``size`` back-filled by the size aggregator, and is
read-only after that.
"""

import asyncio
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .._common.attributes import (
    Date,
    FileKind,
    FileType,
    INode,
    Indicator,
    Name,
    Permissions,
    Size,
)
from .._common.platform import AttributeResolver, Owner, default_resolver
from .core import AsyncTreeNode
from .symlink import SymLink


def read_metadata(path) -> os.stat_result:
    """Stat an entry the way the listing needs it.

    Links get their own attributes (``lstat``) so their type and size
    describe the link. Anything that cannot be read as a link is stat'd
    normally and that error, if any, is propagated.

    Args:
        path: Path of the entry

    Returns:
        Stat result for the entry

    Raises:
        OSError: If the entry cannot be stat'd
    """
    try:
        os.readlink(path)
    except (OSError, ValueError):
        return os.stat(path)
    return os.lstat(path)


@dataclass
class Meta(AsyncTreeNode):
    """One entry of the listing tree.

    ``content`` is None for anything that was not expanded (not a
    directory, depth limit reached, display mode, unreadable directory)
    and a list, possibly empty, for expanded directories.
    """

    name: Name
    path: Path
    permissions: Permissions
    date: Date
    owner: Owner
    file_type: FileType
    size: Size
    symlink: SymLink
    indicator: Indicator
    inode: INode
    content: Optional[List['Meta']] = None
    synthetic: bool = False

    @classmethod
    async def from_path(cls, path, resolver: Optional[AttributeResolver] = None) -> 'Meta':
        """Build the node for ``path`` without blocking the event loop.

        Args:
            path: Path of the entry
            resolver: Owner/permission resolver (a fresh platform default
                when omitted)

        Returns:
            New Meta with ``content`` unset

        Raises:
            OSError: If the entry cannot be stat'd
        """
        if resolver is None:
            resolver = default_resolver()
        return await asyncio.to_thread(cls.from_path_sync, path, resolver)

    @classmethod
    def from_path_sync(cls, path, resolver: AttributeResolver) -> 'Meta':
        """Blocking counterpart of ``from_path``, run in worker threads."""
        path = Path(path)
        st = read_metadata(path)
        return cls.from_metadata(path, st, resolver)

    @classmethod
    def from_metadata(cls, path: Path, st: os.stat_result, resolver: AttributeResolver) -> 'Meta':
        """Build a node from a stat result that was already read.

        Args:
            path: Path of the entry
            st: Stat result for the entry
            resolver: Owner/permission resolver

        Returns:
            New Meta with ``content`` unset
        """
        owner, permissions = resolver.resolve(path, st)
        file_type = FileType.from_stat(st, permissions)

        if file_type.kind is FileKind.SYMLINK:
            symlink = SymLink.from_path(path)
        else:
            symlink = SymLink()

        return cls(
            name=Name.new(path, file_type),
            path=path,
            permissions=permissions,
            date=Date.from_stat(st),
            owner=owner,
            file_type=file_type,
            size=Size.from_stat(st),
            symlink=symlink,
            indicator=Indicator.from_file_type(file_type),
            inode=INode.from_stat(st),
        )

    @property
    def is_directory(self) -> bool:
        return self.file_type.is_dirlike()

    @property
    def is_synthetic(self) -> bool:
        """True for the "." and ".." entries added in DISPLAY_ALL mode."""
        return self.synthetic

    def relabel(self, name: str) -> 'Meta':
        """Copy of this node displayed as ``name``.

        The copy keeps every attribute snapshot but not the children, so
        each list of children still has exactly one owner.
        """
        return replace(self, name=self.name.with_name(name), content=None, synthetic=True)

    async def calculate_total_size(self, policy=None, unreadable=None) -> None:
        """Back-fill directory sizes below (and including) this node.

        See ``lstreelib.aio.sizes.calculate_total_size``.
        """
        from .sizes import calculate_total_size
        await calculate_total_size(self, policy, unreadable=unreadable)

    # AsyncTreeNode interface

    async def identifier(self) -> str:
        return str(self.path)

    async def metadata(self) -> Dict[str, Any]:
        return {
            'path': str(self.path),
            'name': self.name.name,
            'extension': self.name.extension,
            'type': self.file_type.kind.value,
            'size': self.size.get_bytes(),
            'modified_time': self.date.timestamp,
            'mode': self.permissions.octal,
            'user': self.owner.user,
            'group': self.owner.group,
            'inode': self.inode.index,
            'device': self.inode.device,
            'symlink_target': self.symlink.target,
            'symlink_valid': self.symlink.valid,
            'indicator': self.indicator.value,
        }

    def children(self) -> Optional[List['Meta']]:
        return self.content

    async def display_name(self) -> str:
        return self.name.name

    def __repr__(self) -> str:
        return f"Meta({self.path}, {self.file_type.kind.value})"
