"""POSIX permission set and its string/mode conversions."""

import stat
from collections.abc import Iterable
from enum import StrEnum, auto


class PosixFilePermission(StrEnum):
    """A single POSIX permission bit."""

    OWNER_READ = auto()
    OWNER_WRITE = auto()
    OWNER_EXECUTE = auto()
    GROUP_READ = auto()
    GROUP_WRITE = auto()
    GROUP_EXECUTE = auto()
    OTHERS_READ = auto()
    OTHERS_WRITE = auto()
    OTHERS_EXECUTE = auto()


# Ordered as in the "rwxrwxrwx" string form.
_MODE_BITS: tuple[tuple[PosixFilePermission, int, str], ...] = (
    (PosixFilePermission.OWNER_READ, stat.S_IRUSR, "r"),
    (PosixFilePermission.OWNER_WRITE, stat.S_IWUSR, "w"),
    (PosixFilePermission.OWNER_EXECUTE, stat.S_IXUSR, "x"),
    (PosixFilePermission.GROUP_READ, stat.S_IRGRP, "r"),
    (PosixFilePermission.GROUP_WRITE, stat.S_IWGRP, "w"),
    (PosixFilePermission.GROUP_EXECUTE, stat.S_IXGRP, "x"),
    (PosixFilePermission.OTHERS_READ, stat.S_IROTH, "r"),
    (PosixFilePermission.OTHERS_WRITE, stat.S_IWOTH, "w"),
    (PosixFilePermission.OTHERS_EXECUTE, stat.S_IXOTH, "x"),
)


def to_mode(perms: Iterable[PosixFilePermission]) -> int:
    """
    Convert a permission set to mode bits.

    Args:
        perms: Permissions to convert.

    Returns:
        The permission bits (e.g. 0o750).
    """
    wanted = set(perms)
    mode = 0
    for perm, bit, _ in _MODE_BITS:
        if perm in wanted:
            mode |= bit
    return mode


def from_mode(mode: int) -> set[PosixFilePermission]:
    """
    Convert mode bits to a permission set.

    Args:
        mode: A st_mode value or bare permission bits.

    Returns:
        The permissions whose bits are set.
    """
    return {perm for perm, bit, _ in _MODE_BITS if mode & bit}


def to_string(perms: Iterable[PosixFilePermission]) -> str:
    """
    Render a permission set in "rwxr-x---" form.

    Args:
        perms: Permissions to render.

    Returns:
        A nine character permission string.
    """
    wanted = set(perms)
    return "".join(char if perm in wanted else "-" for perm, _, char in _MODE_BITS)


def from_string(perms: str) -> set[PosixFilePermission]:
    """
    Parse a "rwxr-x---" permission string.

    Args:
        perms: A nine character permission string.

    Returns:
        The parsed permission set.

    Raises:
        ValueError: If the string is malformed.
    """
    if len(perms) != len(_MODE_BITS):
        raise ValueError(f"Invalid mode: {perms!r}")

    result: set[PosixFilePermission] = set()
    for char, (perm, _, expected) in zip(perms, _MODE_BITS, strict=True):
        if char == expected:
            result.add(perm)
        elif char != "-":
            raise ValueError(f"Invalid mode: {perms!r}")
    return result
