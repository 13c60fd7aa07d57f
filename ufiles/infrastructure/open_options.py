"""Translation of open options and creation attributes to os.open arguments."""

import io
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ufiles.domain.attributes import FileAttribute
from ufiles.domain.errors import UnsupportedOperationError
from ufiles.domain.options import LinkOption, OpenOption, StandardOpenOption
from ufiles.domain.permissions import to_mode

logger = logging.getLogger(__name__)

DEFAULT_WRITE_OPTIONS: tuple[StandardOpenOption, ...] = (
    StandardOpenOption.CREATE,
    StandardOpenOption.TRUNCATE_EXISTING,
    StandardOpenOption.WRITE,
)

_PERMISSION_ATTRIBUTES = frozenset({"posix:permissions", "unix:permissions"})


@dataclass(frozen=True)
class OpenFlags:
    """Resolved form of a set of open options.

    Attributes:
        flags: Flags for os.open
        read: Handle is readable
        write: Handle is writable
        append: Writes go to the end of the file
        delete_on_close: File is removed when the handle closes
    """

    flags: int
    read: bool
    write: bool
    append: bool
    delete_on_close: bool

    @property
    def file_mode(self) -> str:
        """Mode string for io.FileIO over an already opened descriptor."""
        if self.append:
            return "a"
        if self.read and self.write:
            return "r+"
        if self.write:
            return "w"
        return "r"


def parse_open_options(options: Iterable[OpenOption]) -> OpenFlags:
    """
    Resolve open options to os.open flags.

    With neither READ nor WRITE/APPEND the file is opened for reading.
    CREATE, CREATE_NEW and TRUNCATE_EXISTING only apply when writing.

    Args:
        options: The options.

    Returns:
        The resolved flags.

    Raises:
        ValueError: If APPEND is combined with READ or TRUNCATE_EXISTING.
        UnsupportedOperationError: If an option is not an open option.
    """
    opts = set(options)
    for option in opts:
        if not isinstance(option, StandardOpenOption | LinkOption):
            raise UnsupportedOperationError(f"Unsupported open option: {option!r}")

    append = StandardOpenOption.APPEND in opts
    read = StandardOpenOption.READ in opts
    write = append or StandardOpenOption.WRITE in opts

    if append and read:
        raise ValueError("READ + APPEND not allowed")
    if append and StandardOpenOption.TRUNCATE_EXISTING in opts:
        raise ValueError("APPEND + TRUNCATE_EXISTING not allowed")

    if read and write:
        flags = os.O_RDWR
    elif write:
        flags = os.O_WRONLY
    else:
        read = True
        flags = os.O_RDONLY

    if write:
        if StandardOpenOption.CREATE_NEW in opts:
            flags |= os.O_CREAT | os.O_EXCL
        elif StandardOpenOption.CREATE in opts:
            flags |= os.O_CREAT
        if StandardOpenOption.TRUNCATE_EXISTING in opts:
            flags |= os.O_TRUNC
    if append:
        flags |= os.O_APPEND
    if StandardOpenOption.SYNC in opts:
        flags |= getattr(os, "O_SYNC", 0)
    if StandardOpenOption.DSYNC in opts:
        flags |= getattr(os, "O_DSYNC", 0)
    if LinkOption.NOFOLLOW_LINKS in opts:
        flags |= getattr(os, "O_NOFOLLOW", 0)

    return OpenFlags(
        flags=flags,
        read=read,
        write=write,
        append=append,
        delete_on_close=StandardOpenOption.DELETE_ON_CLOSE in opts,
    )


def creation_mode(attrs: Iterable[FileAttribute], default: int) -> int:
    """
    Resolve creation attributes to permission bits for os.open/os.mkdir.

    Args:
        attrs: Creation attributes; only posix:permissions is supported.
        default: Mode when no permission attribute is given.

    Returns:
        The mode (still subject to the process umask).

    Raises:
        UnsupportedOperationError: If an attribute cannot be set at creation.
    """
    mode = default
    for attr in attrs:
        if attr.name not in _PERMISSION_ATTRIBUTES:
            raise UnsupportedOperationError(f"'{attr.name}' not supported as initial attribute")
        mode = to_mode(attr.value)
    return mode


class FileChannel(io.FileIO):
    """
    A seekable raw byte handle on an open file.

    When opened with DELETE_ON_CLOSE the file is unlinked once the handle is
    closed.
    """

    def __init__(self, fd: int, open_flags: OpenFlags, path: Path) -> None:
        super().__init__(fd, open_flags.file_mode, closefd=True)
        self.path = path
        self._delete_on_close = open_flags.delete_on_close

    def close(self) -> None:
        if self.closed:
            return
        try:
            super().close()
        finally:
            if self._delete_on_close:
                self._delete_on_close = False
                os.unlink(self.path)
                logger.debug(f"Deleted on close: {self.path}")


def open_channel(
    path: Path, options: Iterable[OpenOption], attrs: Iterable[FileAttribute] = ()
) -> FileChannel:
    """
    Open a file as a FileChannel.

    Args:
        path: File to open.
        options: Open options.
        attrs: Creation attributes used if the file is created.

    Returns:
        The open channel.

    Raises:
        OSError: If the file cannot be opened.
    """
    open_flags = parse_open_options(options)
    mode = creation_mode(attrs, 0o666)
    fd = os.open(path, open_flags.flags, mode)
    try:
        return FileChannel(fd, open_flags, path)
    except BaseException:
        os.close(fd)
        raise
