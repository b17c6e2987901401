"""Attribute resolvers for filesystem entries.

Each type here is a small immutable value built from an ``os.stat_result``
(or from values derived from one). None of them perform I/O, so they are
shared by every part of the library and are safe to build in worker
threads.
"""

import stat as stat_module  # To avoid name collision with stat results
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class FileKind(Enum):
    """Classification of a filesystem entry by its mode bits."""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    PIPE = "pipe"
    BLOCK_DEVICE = "block_device"
    CHAR_DEVICE = "char_device"
    SOCKET = "socket"
    SPECIAL = "special"


@dataclass(frozen=True)
class Permissions:
    """Permission bits plus the special set-id and sticky flags."""

    user_read: bool = False
    user_write: bool = False
    user_execute: bool = False

    group_read: bool = False
    group_write: bool = False
    group_execute: bool = False

    other_read: bool = False
    other_write: bool = False
    other_execute: bool = False

    sticky: bool = False
    setgid: bool = False
    setuid: bool = False

    @classmethod
    def from_mode(cls, mode: int) -> 'Permissions':
        """Build permissions from a raw ``st_mode`` value.

        Args:
            mode: Mode bits as returned by stat

        Returns:
            Permissions for the entry
        """
        return cls(
            user_read=bool(mode & stat_module.S_IRUSR),
            user_write=bool(mode & stat_module.S_IWUSR),
            user_execute=bool(mode & stat_module.S_IXUSR),
            group_read=bool(mode & stat_module.S_IRGRP),
            group_write=bool(mode & stat_module.S_IWGRP),
            group_execute=bool(mode & stat_module.S_IXGRP),
            other_read=bool(mode & stat_module.S_IROTH),
            other_write=bool(mode & stat_module.S_IWOTH),
            other_execute=bool(mode & stat_module.S_IXOTH),
            sticky=bool(mode & stat_module.S_ISVTX),
            setgid=bool(mode & stat_module.S_ISGID),
            setuid=bool(mode & stat_module.S_ISUID),
        )

    def is_executable(self) -> bool:
        """True if any of the three execute bits is set."""
        return self.user_execute or self.group_execute or self.other_execute

    @property
    def octal(self) -> int:
        """Permission and special bits packed back into ``0o7777`` form."""
        bits = (
            (self.setuid, stat_module.S_ISUID),
            (self.setgid, stat_module.S_ISGID),
            (self.sticky, stat_module.S_ISVTX),
            (self.user_read, stat_module.S_IRUSR),
            (self.user_write, stat_module.S_IWUSR),
            (self.user_execute, stat_module.S_IXUSR),
            (self.group_read, stat_module.S_IRGRP),
            (self.group_write, stat_module.S_IWGRP),
            (self.group_execute, stat_module.S_IXGRP),
            (self.other_read, stat_module.S_IROTH),
            (self.other_write, stat_module.S_IWOTH),
            (self.other_execute, stat_module.S_IXOTH),
        )
        return sum(mask for flag, mask in bits if flag)


@dataclass(frozen=True)
class FileType:
    """File type classification.

    ``uid`` carries the set-uid bit for files and directories and ``exec``
    marks regular files with any execute bit, so the renderer can pick a
    color without looking at the permissions again.
    """

    kind: FileKind
    uid: bool = False
    exec: bool = False

    @classmethod
    def from_stat(cls, st, permissions: Permissions) -> 'FileType':
        """Classify an entry from its stat result.

        Args:
            st: Result of ``os.stat``/``os.lstat``
            permissions: Permissions already resolved for the entry

        Returns:
            FileType for the entry
        """
        mode = st.st_mode
        if stat_module.S_ISREG(mode):
            return cls(FileKind.FILE, uid=permissions.setuid,
                       exec=permissions.is_executable())
        if stat_module.S_ISDIR(mode):
            return cls(FileKind.DIRECTORY, uid=permissions.setuid)
        if stat_module.S_ISLNK(mode):
            return cls(FileKind.SYMLINK)
        if stat_module.S_ISFIFO(mode):
            return cls(FileKind.PIPE)
        if stat_module.S_ISBLK(mode):
            return cls(FileKind.BLOCK_DEVICE)
        if stat_module.S_ISCHR(mode):
            return cls(FileKind.CHAR_DEVICE)
        if stat_module.S_ISSOCK(mode):
            return cls(FileKind.SOCKET)
        return cls(FileKind.SPECIAL)

    def is_dirlike(self) -> bool:
        return self.kind is FileKind.DIRECTORY


@dataclass(frozen=True)
class Size:
    """Size of an entry in bytes."""

    bytes: int = 0

    @classmethod
    def from_stat(cls, st) -> 'Size':
        return cls(st.st_size)

    def get_bytes(self) -> int:
        return self.bytes


@dataclass(frozen=True)
class Date:
    """Modification time of an entry as a Unix timestamp."""

    timestamp: float

    @classmethod
    def from_stat(cls, st) -> 'Date':
        return cls(st.st_mtime)

    @property
    def datetime(self) -> datetime:
        """Modification time as a local ``datetime``."""
        return datetime.fromtimestamp(self.timestamp)


@dataclass(frozen=True)
class INode:
    """Inode number together with the device that holds it."""

    index: int
    device: int

    @classmethod
    def from_stat(cls, st) -> 'INode':
        return cls(index=st.st_ino, device=st.st_dev)


@dataclass(frozen=True)
class Name:
    """Display name of an entry.

    The file type is kept alongside the name because the renderer decides
    colors and icons from both.
    """

    name: str
    path: str
    extension: Optional[str]
    file_type: FileType

    @classmethod
    def new(cls, path: Path, file_type: FileType) -> 'Name':
        """Build the display name for ``path``.

        Args:
            path: Path of the entry
            file_type: Type already resolved for the entry

        Returns:
            Name whose display text is the final path component, or the
            whole path when there is none (for example ``/``)
        """
        path = Path(path)
        name = path.name or str(path)
        extension = path.suffix[1:] if path.suffix else None
        return cls(name=name, path=str(path), extension=extension, file_type=file_type)

    def with_name(self, name: str) -> 'Name':
        """Return a copy displayed as ``name`` (used for "." and "..")."""
        return replace(self, name=name)


class Indicator(Enum):
    """Trailing classification character appended by ``ls -F`` style output."""
    DIRECTORY = "/"
    EXECUTABLE = "*"
    PIPE = "|"
    SOCKET = "="
    SYMLINK = "@"
    NONE = ""

    @classmethod
    def from_file_type(cls, file_type: FileType) -> 'Indicator':
        """Pick the indicator for a file type.

        Args:
            file_type: Type of the entry

        Returns:
            Matching Indicator (NONE when the type has no marker)
        """
        kind = file_type.kind
        if kind is FileKind.DIRECTORY:
            return cls.DIRECTORY
        if kind is FileKind.FILE and file_type.exec:
            return cls.EXECUTABLE
        if kind is FileKind.PIPE:
            return cls.PIPE
        if kind is FileKind.SOCKET:
            return cls.SOCKET
        if kind is FileKind.SYMLINK:
            return cls.SYMLINK
        return cls.NONE

    def __str__(self) -> str:
        return self.value
