"""Attribute views: typed access to groups of file attributes.

A view is bound to a path but performs no I/O until one of its methods is
called; failures surface from those methods as OSError.
"""

import errno
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any, ClassVar

from ufiles.domain.attributes import (
    BasicFileAttributes,
    GroupPrincipal,
    PosixFileAttributes,
    UnixFileAttributes,
    UserPrincipal,
    time_to_ns,
)
from ufiles.domain.errors import UnsupportedOperationError
from ufiles.domain.permissions import PosixFilePermission, to_mode
from ufiles.infrastructure.principals import group_from_gid, user_from_uid

logger = logging.getLogger(__name__)


class FileAttributeView(ABC):
    """Base class of all attribute views."""

    name: ClassVar[str]
    attribute_names: ClassVar[frozenset[str]]

    def __init__(self, path: Path, follow_links: bool = True) -> None:
        self.path = path
        self.follow_links = follow_links

    def _stat(self) -> os.stat_result:
        return os.stat(self.path, follow_symlinks=self.follow_links)

    @abstractmethod
    def read_attribute_map(self) -> dict[str, Any]:
        """Read every attribute of this view, keyed by attribute name."""
        raise NotImplementedError

    @abstractmethod
    def set_attribute(self, name: str, value: Any) -> None:
        """
        Set one attribute of this view.

        Raises:
            ValueError: If the attribute is unknown or read-only.
            OSError: If the update fails.
        """
        raise NotImplementedError

    def _not_recognized(self, name: str) -> ValueError:
        return ValueError(f"'{self.name}:{name}' not recognized")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.path}, follow_links={self.follow_links})"


class BasicFileAttributeView(FileAttributeView):
    """Timestamps, size and file type."""

    name = "basic"
    attribute_names = frozenset(BasicFileAttributes.model_fields)

    def read_attributes(self) -> BasicFileAttributes:
        return BasicFileAttributes.from_stat(self._stat())

    def read_attribute_map(self) -> dict[str, Any]:
        return dict(self.read_attributes())

    def set_times(
        self,
        last_modified_time: datetime | None = None,
        last_access_time: datetime | None = None,
        creation_time: datetime | None = None,
    ) -> None:
        """
        Update file timestamps. None leaves a timestamp unchanged.

        creation_time is accepted and ignored where the platform cannot set it.
        """
        if last_modified_time is None and last_access_time is None:
            return

        st = self._stat()
        mtime_ns = st.st_mtime_ns
        atime_ns = st.st_atime_ns
        if last_modified_time is not None:
            mtime_ns = time_to_ns(last_modified_time)
        if last_access_time is not None:
            atime_ns = time_to_ns(last_access_time)
        os.utime(self.path, ns=(atime_ns, mtime_ns), follow_symlinks=self.follow_links)
        logger.debug(f"Set times on {self.path}: mtime_ns={mtime_ns}, atime_ns={atime_ns}")

    def set_attribute(self, name: str, value: Any) -> None:
        if name == "last_modified_time":
            self.set_times(last_modified_time=value)
        elif name == "last_access_time":
            self.set_times(last_access_time=value)
        elif name == "creation_time":
            self.set_times(creation_time=value)
        else:
            raise self._not_recognized(name)


class FileOwnerAttributeView(FileAttributeView):
    """The file owner."""

    name = "owner"
    attribute_names = frozenset({"owner"})

    def get_owner(self) -> UserPrincipal:
        return user_from_uid(self._stat().st_uid)

    def set_owner(self, owner: UserPrincipal) -> None:
        if isinstance(owner, GroupPrincipal):
            raise ValueError(f"Owner must be a user, got group {owner.name}")
        self._chown(owner.id, -1)

    def _chown(self, uid: int, gid: int) -> None:
        os.chown(self.path, uid, gid, follow_symlinks=self.follow_links)
        logger.debug(f"Changed ownership of {self.path}: uid={uid}, gid={gid}")

    def read_attribute_map(self) -> dict[str, Any]:
        return {"owner": self.get_owner()}

    def set_attribute(self, name: str, value: Any) -> None:
        if name != "owner":
            raise self._not_recognized(name)
        self.set_owner(value)


class PosixFileAttributeView(BasicFileAttributeView, FileOwnerAttributeView):
    """Basic attributes plus owner, group and permissions."""

    name = "posix"
    attribute_names = frozenset(PosixFileAttributes.model_fields)

    def read_attributes(self) -> PosixFileAttributes:
        st = self._stat()
        return PosixFileAttributes.from_stat_with_principals(
            st, user_from_uid(st.st_uid), group_from_gid(st.st_gid)
        )

    def set_permissions(self, perms: Iterable[PosixFilePermission]) -> None:
        self._chmod(to_mode(perms))

    def set_group(self, group: GroupPrincipal) -> None:
        self._chown(-1, group.id)

    def _chmod(self, mode: int) -> None:
        if not self.follow_links and os.chmod not in os.supports_follow_symlinks:
            raise OSError(errno.EOPNOTSUPP, os.strerror(errno.EOPNOTSUPP), str(self.path))
        os.chmod(self.path, mode, follow_symlinks=self.follow_links)
        logger.debug(f"Changed mode of {self.path} to {oct(mode)}")

    def set_attribute(self, name: str, value: Any) -> None:
        if name == "permissions":
            self.set_permissions(value)
        elif name == "owner":
            self.set_owner(value)
        elif name == "group":
            self.set_group(value)
        else:
            super().set_attribute(name, value)


class UnixFileAttributeView(PosixFileAttributeView):
    """POSIX attributes plus the raw stat fields."""

    name = "unix"
    attribute_names = frozenset(UnixFileAttributes.model_fields)

    def read_attributes(self) -> UnixFileAttributes:
        st = self._stat()
        return UnixFileAttributes.from_stat_with_principals(
            st, user_from_uid(st.st_uid), group_from_gid(st.st_gid)
        )

    def set_attribute(self, name: str, value: Any) -> None:
        if name == "mode":
            self._chmod(int(value))
        elif name == "uid":
            self._chown(int(value), -1)
        elif name == "gid":
            self._chown(-1, int(value))
        else:
            super().set_attribute(name, value)


VIEWS: dict[str, type[FileAttributeView]] = {
    view.name: view
    for view in (
        BasicFileAttributeView,
        FileOwnerAttributeView,
        PosixFileAttributeView,
        UnixFileAttributeView,
    )
}

# Attribute model class -> view able to read it.
ATTRIBUTE_TYPES: dict[type[BasicFileAttributes], type[BasicFileAttributeView]] = {
    BasicFileAttributes: BasicFileAttributeView,
    PosixFileAttributes: PosixFileAttributeView,
    UnixFileAttributes: UnixFileAttributeView,
}


def view_by_name(view_name: str, path: Path, follow_links: bool) -> FileAttributeView:
    """
    Create the view registered under view_name.

    Raises:
        UnsupportedOperationError: If no such view exists.
    """
    view_type = VIEWS.get(view_name)
    if view_type is None:
        raise UnsupportedOperationError(f"View '{view_name}' not available")
    return view_type(path, follow_links)


def parse_attribute(attribute: str) -> tuple[str, str]:
    """Split "view:names" into (view, names); the view defaults to "basic"."""
    view_name, sep, names = attribute.partition(":")
    if not sep:
        return "basic", view_name
    return view_name, names
