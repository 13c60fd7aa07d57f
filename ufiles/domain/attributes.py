"""File attribute models."""

import os
import stat
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ufiles.domain.permissions import PosixFilePermission, from_mode

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def time_from_ns(ns: int) -> datetime:
    """Convert nanoseconds since the epoch to an aware UTC datetime (microsecond precision)."""
    return EPOCH + timedelta(microseconds=ns // 1000)


def time_to_ns(value: datetime) -> int:
    """Convert a datetime to nanoseconds since the epoch. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    delta = value - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000


class UserPrincipal(BaseModel):
    """A user identity that can own files."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="User name, or the numeric id when it has no name")
    id: int = Field(description="Numeric user id")

    def __str__(self) -> str:
        return self.name


class GroupPrincipal(UserPrincipal):
    """A group identity."""

    id: int = Field(description="Numeric group id")


class FileAttribute(BaseModel):
    """An attribute set atomically when a file or directory is created."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Qualified attribute name", examples=["posix:permissions"])
    value: Any = Field(description="Attribute value")


def posix_permissions_attribute(perms: set[PosixFilePermission]) -> FileAttribute:
    """Build a creation attribute carrying initial POSIX permissions."""
    return FileAttribute(name="posix:permissions", value=frozenset(perms))


class BasicFileAttributes(BaseModel):
    """
    Attributes common to all filesystems.
    Built from a stat result; file_key identifies the file within the system.
    """

    model_config = ConfigDict(frozen=True)

    last_modified_time: datetime
    last_access_time: datetime
    creation_time: datetime
    is_regular_file: bool
    is_directory: bool
    is_symbolic_link: bool
    is_other: bool
    size: int
    file_key: tuple[int, int] | None = None

    @classmethod
    def _stat_fields(cls, st: os.stat_result) -> dict[str, Any]:
        mode = st.st_mode
        birth_ns = getattr(st, "st_birthtime_ns", None)
        if birth_ns is None:
            birth = getattr(st, "st_birthtime", None)
            birth_ns = int(birth * 1_000_000_000) if birth is not None else st.st_mtime_ns
        return {
            "last_modified_time": time_from_ns(st.st_mtime_ns),
            "last_access_time": time_from_ns(st.st_atime_ns),
            "creation_time": time_from_ns(birth_ns),
            "is_regular_file": stat.S_ISREG(mode),
            "is_directory": stat.S_ISDIR(mode),
            "is_symbolic_link": stat.S_ISLNK(mode),
            "is_other": not (stat.S_ISREG(mode) or stat.S_ISDIR(mode) or stat.S_ISLNK(mode)),
            "size": st.st_size,
            "file_key": (st.st_dev, st.st_ino),
        }

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "BasicFileAttributes":
        """
        Build the attributes from a stat result.

        Args:
            st: Result of os.stat or os.lstat.

        Returns:
            The attributes.
        """
        return cls(**cls._stat_fields(st))


class PosixFileAttributes(BasicFileAttributes):
    """Basic attributes plus ownership and permissions."""

    owner: UserPrincipal
    group: GroupPrincipal
    permissions: frozenset[PosixFilePermission]

    @classmethod
    def from_stat_with_principals(
        cls, st: os.stat_result, owner: UserPrincipal, group: GroupPrincipal
    ) -> "PosixFileAttributes":
        """
        Build the attributes from a stat result and resolved principals.

        Args:
            st: Result of os.stat or os.lstat.
            owner: Resolved owner of st_uid.
            group: Resolved group of st_gid.

        Returns:
            The attributes.
        """
        return cls(
            **cls._stat_fields(st),
            owner=owner,
            group=group,
            permissions=frozenset(from_mode(st.st_mode)),
        )


class UnixFileAttributes(PosixFileAttributes):
    """POSIX attributes plus the raw stat fields."""

    mode: int
    ino: int
    dev: int
    rdev: int
    nlink: int
    uid: int
    gid: int
    ctime: datetime

    @classmethod
    def from_stat_with_principals(
        cls, st: os.stat_result, owner: UserPrincipal, group: GroupPrincipal
    ) -> "UnixFileAttributes":
        return cls(
            **cls._stat_fields(st),
            owner=owner,
            group=group,
            permissions=frozenset(from_mode(st.st_mode)),
            mode=st.st_mode,
            ino=st.st_ino,
            dev=st.st_dev,
            rdev=st.st_rdev,
            nlink=st.st_nlink,
            uid=st.st_uid,
            gid=st.st_gid,
            ctime=time_from_ns(st.st_ctime_ns),
        )


class FileStore(BaseModel):
    """A mounted filesystem and its space usage."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Device or source name", examples=["/dev/sda1", "tmpfs"])
    type: str = Field(description="Filesystem type", examples=["ext4"])
    mount_point: Path
    total_space: int
    usable_space: int
    unallocated_space: int
    block_size: int
    read_only: bool

    def __str__(self) -> str:
        return f"{self.mount_point} ({self.name})"
