"""Owner and permission resolution per platform.

The node constructor only ever talks to an ``AttributeResolver``. Which
implementation backs it is decided once, at startup, by
``default_resolver()``.
"""

import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .attributes import Permissions


@dataclass(frozen=True)
class Owner:
    """User and group names owning an entry."""

    user: str
    group: str


class OwnerCache:
    """Memoizes uid/gid to name lookups for the lifetime of a walk.

    Directory-service lookups (``getpwuid``/``getgrgid``) can hit NSS,
    LDAP and friends, so each id is resolved once. Stat work runs in
    worker threads, so all access goes through a lock.
    """

    def __init__(self):
        self._users: Dict[int, str] = {}
        self._groups: Dict[int, str] = {}
        self._lock = threading.Lock()
        self.lookups = 0

    def get_by_uid_and_gid(self, uid: int, gid: int) -> Owner:
        return Owner(user=self.get_user(uid), group=self.get_group(gid))

    def get_by_stat(self, st) -> Owner:
        """Resolve the owner recorded in a stat result.

        Args:
            st: Result of ``os.stat``/``os.lstat``

        Returns:
            Owner with names, or decimal ids where no name exists
        """
        return self.get_by_uid_and_gid(st.st_uid, st.st_gid)

    def get_user(self, uid: int) -> str:
        with self._lock:
            name = self._users.get(uid)
            if name is None:
                name = _lookup_user(uid)
                self._users[uid] = name
                self.lookups += 1
            return name

    def get_group(self, gid: int) -> str:
        with self._lock:
            name = self._groups.get(gid)
            if name is None:
                name = _lookup_group(gid)
                self._groups[gid] = name
                self.lookups += 1
            return name

    def __len__(self) -> int:
        return len(self._users) + len(self._groups)


def _lookup_user(uid: int) -> str:
    import pwd

    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def _lookup_group(gid: int) -> str:
    import grp

    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


class AttributeResolver(ABC):
    """Capability interface: owner and permissions from a raw stat result."""

    @abstractmethod
    def resolve(self, path, st) -> Tuple[Owner, Permissions]:
        """Resolve owner and permissions for an entry.

        Args:
            path: Path of the entry (some platforms query it directly)
            st: Stat result already read for the entry

        Returns:
            Tuple of (Owner, Permissions)
        """
        pass


class PosixAttributeResolver(AttributeResolver):
    """Resolver backed by the POSIX user and group databases."""

    def __init__(self, owner_cache: Optional[OwnerCache] = None):
        self.owner_cache = owner_cache or OwnerCache()

    def resolve(self, path, st) -> Tuple[Owner, Permissions]:
        return self.owner_cache.get_by_stat(st), Permissions.from_mode(st.st_mode)


class FallbackAttributeResolver(AttributeResolver):
    """Resolver for hosts without ``pwd``/``grp``.

    Python emulates ``st_mode`` on these hosts, which is what the
    permissions come from. Owners are reported as the numeric ids.
    """

    def resolve(self, path, st) -> Tuple[Owner, Permissions]:
        owner = Owner(user=str(st.st_uid), group=str(st.st_gid))
        return owner, Permissions.from_mode(st.st_mode)


def default_resolver() -> AttributeResolver:
    """Create the resolver for the running platform.

    Every call returns a new resolver with its own owner cache.
    """
    if os.name == 'posix':
        return PosixAttributeResolver(OwnerCache())
    return FallbackAttributeResolver()
