"""
Filesystem operations.

A flat set of stateless functions over os, io and stat. I/O failures are
raised as OSError (or its native subclasses such as FileNotFoundError and
FileExistsError) carrying errno and the offending filename(s); callers are
expected to handle them where they call. See ufiles.unchecked for the same
operations raising UncheckedIOError instead.

Illegal option combinations and malformed attribute names or patterns raise
ValueError; unsupported views, attribute types and creation attributes raise
UnsupportedOperationError.
"""

import codecs
import contextlib
import errno
import io
import logging
import mimetypes
import os
import shutil
import stat
import tempfile
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, TextIO, TypeVar, overload

import uuid6

from ufiles.config import get_config
from ufiles.domain.attributes import (
    BasicFileAttributes,
    FileAttribute,
    FileStore,
    UserPrincipal,
)
from ufiles.domain.errors import CharacterCodingError, UnsupportedOperationError
from ufiles.domain.file_visitor import FileVisitor
from ufiles.domain.options import (
    MAX_DEPTH,
    CopyOption,
    FileVisitOption,
    FileVisitResult,
    LinkOption,
    OpenOption,
    StandardCopyOption,
    StandardOpenOption,
    follows_links,
)
from ufiles.domain.permissions import PosixFilePermission, from_mode
from ufiles.domain.stream import DirectoryStream, Stream
from ufiles.infrastructure.attribute_views import (
    ATTRIBUTE_TYPES,
    VIEWS,
    BasicFileAttributeView,
    FileAttributeView,
    FileOwnerAttributeView,
    PosixFileAttributeView,
    parse_attribute,
    view_by_name,
)
from ufiles.infrastructure.file_store import file_store_for
from ufiles.infrastructure.file_tree_walker import EventType, FileTreeWalker, WalkEvent
from ufiles.infrastructure.glob_matcher import name_matcher
from ufiles.infrastructure.open_options import (
    DEFAULT_WRITE_OPTIONS,
    FileChannel,
    creation_mode,
    open_channel,
)
from ufiles.infrastructure.principals import (
    lookup_principal_by_group_name,
    lookup_principal_by_name,
)

logger = logging.getLogger(__name__)

StrPath = str | os.PathLike[str]
A = TypeVar("A", bound=BasicFileAttributes)
V = TypeVar("V", bound=FileAttributeView)

__all__ = [
    "copy",
    "create_directories",
    "create_directory",
    "create_file",
    "create_link",
    "create_symbolic_link",
    "create_temp_directory",
    "create_temp_file",
    "delete",
    "delete_if_exists",
    "exists",
    "find",
    "get_attribute",
    "get_file_attribute_view",
    "get_file_store",
    "get_last_modified_time",
    "get_owner",
    "get_posix_file_permissions",
    "is_directory",
    "is_executable",
    "is_hidden",
    "is_readable",
    "is_regular_file",
    "is_same_file",
    "is_symbolic_link",
    "is_writable",
    "lines",
    "list_directory",
    "lookup_principal_by_group_name",
    "lookup_principal_by_name",
    "mismatch",
    "move",
    "new_buffered_reader",
    "new_buffered_writer",
    "new_byte_channel",
    "new_directory_stream",
    "new_input_stream",
    "new_output_stream",
    "not_exists",
    "probe_content_type",
    "read_all_bytes",
    "read_all_lines",
    "read_attributes",
    "read_string",
    "read_symbolic_link",
    "set_attribute",
    "set_last_modified_time",
    "set_owner",
    "set_posix_file_permissions",
    "size",
    "walk",
    "walk_file_tree",
    "write",
    "write_lines",
    "write_string",
]


def _error(code: int, path: StrPath, path2: StrPath | None = None) -> OSError:
    # OSError() picks the matching subclass (FileExistsError, ...) from the errno
    if path2 is None:
        return OSError(code, os.strerror(code), os.fspath(path))
    return OSError(code, os.strerror(code), os.fspath(path), None, os.fspath(path2))


def _encoding(encoding: str | None) -> str:
    return encoding if encoding is not None else get_config().default_encoding


def _is_stream(obj: object, method: str) -> bool:
    return not isinstance(obj, str | bytes | os.PathLike) and callable(getattr(obj, method, None))


def _transfer(source: BinaryIO, target: BinaryIO) -> int:
    # shutil.copyfileobj does not report the byte count
    buffer_size = get_config().buffer_size
    count = 0
    while chunk := source.read(buffer_size):
        target.write(chunk)
        count += len(chunk)
    return count


def _strip_terminator(line: str) -> str:
    # Universal newline mode has already folded "\r\n" and "\r" into "\n"
    return line[:-1] if line.endswith("\n") else line


@contextlib.contextmanager
def _coding_errors(path: StrPath) -> Iterator[None]:
    try:
        yield
    except UnicodeError as e:
        raise CharacterCodingError(os.fspath(path), str(e)) from e


# ---------------------------------------------------------------------------
# Existence and metadata
# ---------------------------------------------------------------------------


def exists(path: StrPath, *options: LinkOption) -> bool:
    """
    Test whether a file exists.

    Returns False when existence cannot be determined (e.g. permission denied).
    """
    try:
        os.stat(path, follow_symlinks=follows_links(options))
        return True
    except OSError:
        return False


def not_exists(path: StrPath, *options: LinkOption) -> bool:
    """
    Test whether a file is confirmed absent.

    exists() and not_exists() are both False when existence cannot be determined.
    """
    try:
        os.stat(path, follow_symlinks=follows_links(options))
        return False
    except FileNotFoundError:
        return True
    except OSError:
        return False


def _test_mode(path: StrPath, test: Callable[[int], bool], follow_links: bool) -> bool:
    try:
        return test(os.stat(path, follow_symlinks=follow_links).st_mode)
    except OSError:
        return False


def is_regular_file(path: StrPath, *options: LinkOption) -> bool:
    return _test_mode(path, stat.S_ISREG, follows_links(options))


def is_directory(path: StrPath, *options: LinkOption) -> bool:
    return _test_mode(path, stat.S_ISDIR, follows_links(options))


def is_symbolic_link(path: StrPath) -> bool:
    return _test_mode(path, stat.S_ISLNK, follow_links=False)


def is_hidden(path: StrPath) -> bool:
    """A file is hidden when its name starts with a dot."""
    return Path(path).name.startswith(".")


def is_readable(path: StrPath) -> bool:
    return os.access(path, os.R_OK)


def is_writable(path: StrPath) -> bool:
    return os.access(path, os.W_OK)


def is_executable(path: StrPath) -> bool:
    return os.access(path, os.X_OK)


def size(path: StrPath) -> int:
    """Return the size of a file in bytes."""
    return os.stat(path).st_size


def is_same_file(path: StrPath, path2: StrPath) -> bool:
    """
    Test whether two paths locate the same file.

    Equal paths are the same file without touching the filesystem; otherwise
    both files must exist.
    """
    if Path(path) == Path(path2):
        return True
    return os.path.samestat(os.stat(path), os.stat(path2))


def mismatch(path: StrPath, path2: StrPath) -> int:
    """
    Find the first differing byte of two files.

    Args:
        path: First file.
        path2: Second file.

    Returns:
        -1 if the contents are identical, otherwise the offset of the first
        mismatch (the size of the shorter file if it is a prefix of the other).
    """
    if is_same_file(path, path2):
        return -1

    buffer_size = get_config().buffer_size
    position = 0
    with open(path, "rb") as first, open(path2, "rb") as second:
        while True:
            chunk1 = first.read(buffer_size)
            chunk2 = second.read(buffer_size)
            if chunk1 != chunk2:
                common = min(len(chunk1), len(chunk2))
                for i in range(common):
                    if chunk1[i] != chunk2[i]:
                        return position + i
                return position + common
            if not chunk1:
                return -1
            position += len(chunk1)


def probe_content_type(path: StrPath) -> str | None:
    """Guess the MIME type of a file from its name; None if unknown."""
    content_type, _ = mimetypes.guess_type(os.fspath(path), strict=False)
    return content_type


def get_file_store(path: StrPath) -> FileStore:
    """Describe the mounted filesystem holding path."""
    return file_store_for(Path(path))


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


@overload
def read_attributes(path: StrPath, attributes: type[A], *options: LinkOption) -> A: ...


@overload
def read_attributes(path: StrPath, attributes: str, *options: LinkOption) -> dict[str, Any]: ...


def read_attributes(
    path: StrPath, attributes: type[BasicFileAttributes] | str, *options: LinkOption
) -> BasicFileAttributes | dict[str, Any]:
    """
    Read a group of attributes.

    Args:
        path: The file.
        attributes: An attribute model class (BasicFileAttributes,
            PosixFileAttributes, UnixFileAttributes), or a string
            "view:name1,name2" / "view:*". The view defaults to "basic".
        *options: NOFOLLOW_LINKS to read a link's own attributes.

    Returns:
        A model instance for a class, a name -> value dict for a string.

    Raises:
        ValueError: If an attribute name is unknown.
        UnsupportedOperationError: If the view or type is not supported.
        OSError: If the attributes cannot be read.
    """
    follow = follows_links(options)

    if not isinstance(attributes, str):
        view_type = ATTRIBUTE_TYPES.get(attributes)
        if view_type is None:
            raise UnsupportedOperationError(f"Attribute type {attributes!r} not supported")
        return view_type(Path(path), follow).read_attributes()

    view_name, names = parse_attribute(attributes)
    view = view_by_name(view_name, Path(path), follow)
    requested = names.split(",")
    for name in requested:
        if name != "*" and name not in view.attribute_names:
            raise ValueError(f"'{view_name}:{name}' not recognized")

    values = view.read_attribute_map()
    if "*" in requested:
        return values
    return {name: values[name] for name in requested}


def get_attribute(path: StrPath, attribute: str, *options: LinkOption) -> Any:
    """
    Read a single attribute, e.g. "size" or "posix:permissions".

    Raises:
        ValueError: If the name is unknown or names more than one attribute.
    """
    _, name = parse_attribute(attribute)
    if name == "*" or "," in name:
        raise ValueError(f"Single attribute expected, got {attribute!r}")
    return read_attributes(path, attribute, *options)[name]


def set_attribute(path: StrPath, attribute: str, value: Any, *options: LinkOption) -> Path:
    """
    Set a single attribute, e.g. "basic:last_modified_time" or "posix:permissions".

    Returns:
        The path.
    """
    view_name, name = parse_attribute(attribute)
    view = view_by_name(view_name, Path(path), follows_links(options))
    view.set_attribute(name, value)
    return Path(path)


def get_file_attribute_view(path: StrPath, view_type: type[V], *options: LinkOption) -> V | None:
    """
    Return an attribute view bound to path, or None if the type is not supported.

    No I/O happens until a view method is called.
    """
    if view_type not in VIEWS.values():
        return None
    return view_type(Path(path), follows_links(options))


def get_last_modified_time(path: StrPath, *options: LinkOption) -> datetime:
    view = BasicFileAttributeView(Path(path), follows_links(options))
    return view.read_attributes().last_modified_time


def set_last_modified_time(path: StrPath, time: datetime) -> Path:
    BasicFileAttributeView(Path(path)).set_times(last_modified_time=time)
    return Path(path)


def get_owner(path: StrPath, *options: LinkOption) -> UserPrincipal:
    return FileOwnerAttributeView(Path(path), follows_links(options)).get_owner()


def set_owner(path: StrPath, owner: UserPrincipal) -> Path:
    FileOwnerAttributeView(Path(path)).set_owner(owner)
    return Path(path)


def get_posix_file_permissions(path: StrPath, *options: LinkOption) -> set[PosixFilePermission]:
    return from_mode(os.stat(path, follow_symlinks=follows_links(options)).st_mode)


def set_posix_file_permissions(path: StrPath, perms: Iterable[PosixFilePermission]) -> Path:
    PosixFileAttributeView(Path(path)).set_permissions(perms)
    return Path(path)


# ---------------------------------------------------------------------------
# Creation and removal
# ---------------------------------------------------------------------------


def create_file(path: StrPath, *attrs: FileAttribute) -> Path:
    """
    Create a new, empty file.

    Raises:
        FileExistsError: If the file already exists.
    """
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, creation_mode(attrs, 0o666))
    os.close(fd)
    logger.debug(f"Created file: {path}")
    return Path(path)


def create_directory(directory: StrPath, *attrs: FileAttribute) -> Path:
    """
    Create a new directory; its parent must exist.

    Raises:
        FileExistsError: If the directory already exists.
    """
    os.mkdir(directory, creation_mode(attrs, 0o777))
    logger.debug(f"Created directory: {directory}")
    return Path(directory)


def create_directories(directory: StrPath, *attrs: FileAttribute) -> Path:
    """
    Create a directory and any missing parents.

    No error is raised if the directory already exists; attrs apply to every
    directory created.

    Raises:
        FileExistsError: If the path exists but is not a directory.
    """
    target = Path(directory)
    mode = creation_mode(attrs, 0o777)

    missing: list[Path] = []
    current = target.absolute()
    while not os.path.isdir(current):
        if os.path.lexists(current):
            raise _error(errno.EEXIST, current)
        missing.append(current)
        if current.parent == current:
            break
        current = current.parent

    for child in reversed(missing):
        try:
            os.mkdir(child, mode)
        except FileExistsError:
            # Created concurrently; acceptable only as a directory
            if not os.path.isdir(child):
                raise
    if missing:
        logger.debug(f"Created directories: {target} ({len(missing)} new)")
    return target


def create_link(link: StrPath, existing: StrPath) -> Path:
    """Create a hard link named link to the existing file."""
    os.link(existing, link)
    logger.debug(f"Created link: {link} -> {existing}")
    return Path(link)


def create_symbolic_link(link: StrPath, target: StrPath, *attrs: FileAttribute) -> Path:
    """
    Create a symbolic link named link pointing at target.

    Raises:
        UnsupportedOperationError: If attrs are given.
    """
    if attrs:
        raise UnsupportedOperationError(
            "Initial file attributes not supported when creating symbolic link"
        )
    os.symlink(target, link)
    logger.debug(f"Created symbolic link: {link} -> {target}")
    return Path(link)


def _check_affix(value: str, what: str) -> None:
    separators = [os.sep] + ([os.altsep] if os.altsep else [])
    if any(sep in value for sep in separators) or "\0" in value:
        raise ValueError(f"Invalid {what}: {value!r}")


def _temp_base(directory: StrPath | None) -> Path:
    if directory is not None:
        return Path(directory)
    configured = get_config().temp_dir
    return configured if configured is not None else Path(tempfile.gettempdir())


def _temp_name(prefix: str, suffix: str) -> str:
    return f"{prefix}{uuid6.uuid7().hex}{suffix}"


def create_temp_file(
    prefix: str | None = None,
    suffix: str | None = None,
    *attrs: FileAttribute,
    directory: StrPath | None = None,
) -> Path:
    """
    Create a new empty file with a generated name.

    The name is prefix + a time-ordered unique id + suffix.

    Args:
        prefix: Name prefix (default "").
        suffix: Name suffix (default ".tmp").
        *attrs: Creation attributes (default permissions rw-------).
        directory: Where to create it (default: configured or system temp dir).

    Returns:
        The new file.

    Raises:
        ValueError: If prefix or suffix contains a path separator.
    """
    prefix = prefix or ""
    suffix = ".tmp" if suffix is None else suffix
    _check_affix(prefix, "prefix")
    _check_affix(suffix, "suffix")
    base = _temp_base(directory)
    mode = creation_mode(attrs, 0o600)

    while True:
        path = base / _temp_name(prefix, suffix)
        try:
            fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_EXCL, mode)
        except FileExistsError:
            continue
        os.close(fd)
        logger.debug(f"Created temp file: {path}")
        return path


def create_temp_directory(
    prefix: str | None = None,
    *attrs: FileAttribute,
    directory: StrPath | None = None,
) -> Path:
    """
    Create a new directory with a generated name.

    Args:
        prefix: Name prefix (default "").
        *attrs: Creation attributes (default permissions rwx------).
        directory: Where to create it (default: configured or system temp dir).

    Returns:
        The new directory.

    Raises:
        ValueError: If prefix contains a path separator.
    """
    prefix = prefix or ""
    _check_affix(prefix, "prefix")
    base = _temp_base(directory)
    mode = creation_mode(attrs, 0o700)

    while True:
        path = base / _temp_name(prefix, "")
        try:
            os.mkdir(path, mode)
        except FileExistsError:
            continue
        logger.debug(f"Created temp directory: {path}")
        return path


def delete(path: StrPath) -> None:
    """
    Delete a file, a symbolic link (not its target) or an empty directory.

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: ENOTEMPTY if a directory is not empty.
    """
    if stat.S_ISDIR(os.lstat(path).st_mode):
        os.rmdir(path)
    else:
        os.unlink(path)
    logger.debug(f"Deleted: {path}")


def delete_if_exists(path: StrPath) -> bool:
    """
    Delete a file if it exists.

    Returns:
        True if the file was deleted, False if it did not exist.
    """
    try:
        delete(path)
    except FileNotFoundError:
        return False
    return True


# ---------------------------------------------------------------------------
# Bulk content I/O
# ---------------------------------------------------------------------------


def read_all_bytes(path: StrPath) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def read_string(path: StrPath, encoding: str | None = None) -> str:
    """
    Read a whole file as text. Line endings are returned untranslated.

    Raises:
        CharacterCodingError: If the content is not valid in the encoding.
    """
    with open(path, encoding=_encoding(encoding), errors="strict", newline="") as f:
        with _coding_errors(path):
            return f.read()


def read_all_lines(path: StrPath, encoding: str | None = None) -> list[str]:
    """
    Read a whole file as lines.

    Lines are split on "\\n", "\\r" and "\\r\\n"; terminators are removed.
    """
    with new_buffered_reader(path, encoding) as reader, _coding_errors(path):
        return [_strip_terminator(line) for line in reader]


def read_symbolic_link(link: StrPath) -> Path:
    """
    Return the target of a symbolic link.

    Raises:
        OSError: EINVAL if link is not a symbolic link.
    """
    return Path(os.readlink(link))


def write(path: StrPath, data: bytes, *options: OpenOption) -> Path:
    """
    Write bytes to a file.

    Args:
        path: The file.
        data: Content to write.
        *options: Open options (default CREATE, TRUNCATE_EXISTING, WRITE).

    Returns:
        The path.
    """
    with new_output_stream(path, *options) as out:
        out.write(bytes(data))
    logger.debug(f"Wrote {len(data)} bytes to {path}")
    return Path(path)


def write_lines(
    path: StrPath, lines: Iterable[str], *options: OpenOption, encoding: str | None = None
) -> Path:
    """
    Write lines of text, each followed by the configured line separator.

    Returns:
        The path.
    """
    separator = get_config().line_separator
    with new_buffered_writer(path, *options, encoding=encoding) as writer, _coding_errors(path):
        for line in lines:
            writer.write(str(line))
            writer.write(separator)
    return Path(path)


def write_string(
    path: StrPath, text: str, *options: OpenOption, encoding: str | None = None
) -> Path:
    """
    Write text to a file.

    The text is encoded before the file is opened, so an encoding error
    leaves the file untouched.

    Returns:
        The path.

    Raises:
        CharacterCodingError: If the text cannot be encoded.
    """
    with _coding_errors(path):
        data = str(text).encode(_encoding(encoding))
    return write(path, data, *options)


# ---------------------------------------------------------------------------
# Streaming I/O
# ---------------------------------------------------------------------------


def new_input_stream(path: StrPath, *options: OpenOption) -> io.BufferedReader:
    """
    Open a file for buffered binary reading.

    Raises:
        ValueError: If WRITE or APPEND is given.
    """
    for option in options:
        if option in (StandardOpenOption.WRITE, StandardOpenOption.APPEND):
            raise ValueError(f"'{option}' not allowed")
    channel = open_channel(Path(path), options)
    return io.BufferedReader(channel, get_config().buffer_size)


def new_output_stream(path: StrPath, *options: OpenOption) -> io.BufferedWriter:
    """
    Open a file for buffered binary writing.

    Without options the file is created or truncated; WRITE is implied.

    Raises:
        ValueError: If READ is given.
    """
    opts: set[OpenOption] = set(options) if options else set(DEFAULT_WRITE_OPTIONS)
    if StandardOpenOption.READ in opts:
        raise ValueError("READ not allowed")
    opts.add(StandardOpenOption.WRITE)
    channel = open_channel(Path(path), opts)
    return io.BufferedWriter(channel, get_config().buffer_size)


def new_byte_channel(
    path: StrPath, *options: OpenOption, attrs: Iterable[FileAttribute] = ()
) -> FileChannel:
    """
    Open a seekable raw byte channel. Reads are the default.

    Args:
        path: The file.
        *options: Open options.
        attrs: Creation attributes used if the file is created.
    """
    return open_channel(Path(path), options, attrs)


def new_buffered_reader(path: StrPath, encoding: str | None = None) -> TextIO:
    """Open a file for reading text, with universal newlines."""
    encoding = _encoding(encoding)
    codecs.lookup(encoding)
    return io.TextIOWrapper(new_input_stream(path), encoding=encoding, errors="strict")


def new_buffered_writer(
    path: StrPath, *options: OpenOption, encoding: str | None = None
) -> TextIO:
    """Open a file for writing text. Newlines are written untranslated."""
    encoding = _encoding(encoding)
    codecs.lookup(encoding)
    return io.TextIOWrapper(
        new_output_stream(path, *options), encoding=encoding, errors="strict", newline=""
    )


def lines(path: StrPath, encoding: str | None = None) -> Stream[str]:
    """
    Lazily read the lines of a file.

    The file is opened immediately and stays open until the stream is closed.
    Undecodable content raises CharacterCodingError while iterating.
    """
    reader = new_buffered_reader(path, encoding)
    return Stream(_read_lines(path, reader), on_close=reader.close)


def _read_lines(path: StrPath, reader: TextIO) -> Iterator[str]:
    with _coding_errors(path):
        for line in reader:
            yield _strip_terminator(line)


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def list_directory(directory: StrPath) -> Stream[Path]:
    """
    Lazily list the entries of a directory (not recursive).

    The directory is opened immediately and stays open until the stream is closed.
    """
    entries = os.scandir(directory)
    return Stream((Path(entry.path) for entry in entries), on_close=entries.close)


def new_directory_stream(
    directory: StrPath, entry_filter: str | Callable[[Path], bool] | None = None
) -> DirectoryStream:
    """
    Open a directory for iterating over its entries.

    Args:
        directory: The directory.
        entry_filter: A glob matched against entry names (e.g. "*.{py,txt}"),
            or a predicate over entry paths. None accepts every entry.

    Returns:
        A single-use directory stream.

    Raises:
        ValueError: If the glob is malformed.
    """
    if entry_filter is None:
        accept: Callable[[Path], bool] = lambda path: True  # noqa: E731
    elif isinstance(entry_filter, str):
        accept = name_matcher(entry_filter)
    else:
        accept = entry_filter

    entries = os.scandir(directory)
    paths = (Path(entry.path) for entry in entries)
    return DirectoryStream((path for path in paths if accept(path)), on_close=entries.close)


def _walk_events(walker: FileTreeWalker, first: WalkEvent) -> Iterator[WalkEvent]:
    try:
        event: WalkEvent | None = first
        while event is not None:
            if event.error is not None:
                raise event.error
            if event.type != EventType.END_DIRECTORY:
                yield event
            event = walker.next()
    finally:
        walker.close()


def _start_walk(
    start: StrPath, options: Iterable[FileVisitOption], max_depth: int
) -> Stream[WalkEvent]:
    walker = FileTreeWalker(options, max_depth)
    first = walker.walk(Path(start))
    if first.error is not None:
        walker.close()
        raise first.error
    return Stream(_walk_events(walker, first), on_close=walker.close)


def walk(start: StrPath, *options: FileVisitOption, max_depth: int = MAX_DEPTH) -> Stream[Path]:
    """
    Lazily walk a file tree, depth first, start first.

    Args:
        start: Where to start.
        *options: FOLLOW_LINKS to descend into linked directories.
        max_depth: Levels below start to visit; 0 yields start only.

    Returns:
        A stream of paths. Close it to release open directories.

    Raises:
        ValueError: If max_depth is negative.
        OSError: If start cannot be accessed. Failures below start are raised
            while iterating; FileSystemLoopError on a link cycle.
    """
    events = _start_walk(start, options, max_depth)
    return Stream((event.file for event in events), on_close=events.close)


def find(
    start: StrPath,
    max_depth: int,
    matcher: Callable[[Path, BasicFileAttributes], bool],
    *options: FileVisitOption,
) -> Stream[Path]:
    """
    Lazily walk a file tree, keeping the paths accepted by matcher.

    Args:
        start: Where to start.
        max_depth: Levels below start to visit.
        matcher: Predicate over a path and its basic attributes.
        *options: FOLLOW_LINKS to descend into linked directories.

    Returns:
        A stream of matching paths.
    """
    events = _start_walk(start, options, max_depth)
    return Stream(
        (
            event.file
            for event in events
            if event.attrs is not None and matcher(event.file, event.attrs)
        ),
        on_close=events.close,
    )


def walk_file_tree(
    start: StrPath,
    visitor: FileVisitor,
    options: Iterable[FileVisitOption] = (),
    max_depth: int = MAX_DEPTH,
) -> Path:
    """
    Walk a file tree, invoking visitor callbacks.

    Args:
        start: Where to start.
        visitor: Receives every directory and entry.
        options: FOLLOW_LINKS to descend into linked directories.
        max_depth: Levels below start to visit.

    Returns:
        The start path.

    Raises:
        TypeError: If a visitor callback returns something other than a FileVisitResult.
        Exception: Whatever a visitor callback raises.
    """
    start_path = Path(start)
    walker = FileTreeWalker(options, max_depth)
    try:
        event: WalkEvent | None = walker.walk(start_path)
        while event is not None:
            if event.type == EventType.ENTRY:
                if event.error is not None:
                    result = visitor.visit_file_failed(event.file, event.error)
                else:
                    assert event.attrs is not None
                    result = visitor.visit_file(event.file, event.attrs)
            elif event.type == EventType.START_DIRECTORY:
                assert event.attrs is not None
                result = visitor.pre_visit_directory(event.file, event.attrs)
                if result in (FileVisitResult.SKIP_SUBTREE, FileVisitResult.SKIP_SIBLINGS):
                    walker.pop()
            else:
                result = visitor.post_visit_directory(event.file, event.error)
                if result == FileVisitResult.SKIP_SIBLINGS:
                    result = FileVisitResult.CONTINUE

            if not isinstance(result, FileVisitResult):
                raise TypeError(f"FileVisitor returned {result!r}, expected a FileVisitResult")
            if result == FileVisitResult.TERMINATE:
                break
            if result == FileVisitResult.SKIP_SIBLINGS:
                walker.skip_remaining_siblings()

            event = walker.next()
    finally:
        walker.close()
    return start_path


# ---------------------------------------------------------------------------
# Transfer
# ---------------------------------------------------------------------------


def _check_copy_options(
    options: Iterable[CopyOption], allowed: set[CopyOption]
) -> set[CopyOption]:
    opts = set(options)
    for option in opts:
        if option not in allowed:
            raise UnsupportedOperationError(f"Unsupported copy option: {option!r}")
    return opts


def _copy_from_stream(source: BinaryIO, target: Path, options: Iterable[CopyOption]) -> int:
    opts = _check_copy_options(options, {StandardCopyOption.REPLACE_EXISTING})
    if StandardCopyOption.REPLACE_EXISTING in opts:
        delete_if_exists(target)

    channel = open_channel(target, (StandardOpenOption.CREATE_NEW, StandardOpenOption.WRITE))
    with io.BufferedWriter(channel, get_config().buffer_size) as out:
        count = _transfer(source, out)
    logger.debug(f"Copied {count} bytes from stream to {target}")
    return count


def _copy_to_stream(source: Path, target: BinaryIO) -> int:
    with open(source, "rb") as f:
        return _transfer(f, target)


def _copy_entry(source: Path, target: Path, st: os.stat_result, copy_attributes: bool) -> None:
    """Create target as a copy of the single entry source described by st."""
    if stat.S_ISDIR(st.st_mode):
        os.mkdir(target, stat.S_IMODE(st.st_mode))
    elif stat.S_ISLNK(st.st_mode):
        os.symlink(os.readlink(source), target)
    elif stat.S_ISREG(st.st_mode):
        with open(source, "rb") as src:
            fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_EXCL, stat.S_IMODE(st.st_mode))
            try:
                with os.fdopen(fd, "wb") as dst:
                    shutil.copyfileobj(src, dst, get_config().buffer_size)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(target)
                raise
    else:
        os.mknod(target, st.st_mode, st.st_rdev)

    if copy_attributes:
        follow = not stat.S_ISLNK(st.st_mode)
        if follow or os.utime in os.supports_follow_symlinks:
            os.utime(target, ns=(st.st_atime_ns, st.st_mtime_ns), follow_symlinks=follow)
        if follow:
            os.chmod(target, stat.S_IMODE(st.st_mode))


def _prepare_target(source_st: os.stat_result, target: Path, replace: bool) -> bool:
    """Clear the way for target. Returns True if source and target are the same file."""
    try:
        target_st = os.lstat(target)
    except FileNotFoundError:
        return False
    if os.path.samestat(source_st, target_st):
        return True
    if not replace:
        raise _error(errno.EEXIST, target)
    delete(target)
    return False


def _copy_path(source: Path, target: Path, options: Iterable[CopyOption]) -> Path:
    opts = _check_copy_options(
        options,
        {
            StandardCopyOption.REPLACE_EXISTING,
            StandardCopyOption.COPY_ATTRIBUTES,
            LinkOption.NOFOLLOW_LINKS,
        },
    )
    st = os.stat(source, follow_symlinks=follows_links(opts))
    if _prepare_target(st, target, StandardCopyOption.REPLACE_EXISTING in opts):
        return target

    _copy_entry(source, target, st, StandardCopyOption.COPY_ATTRIBUTES in opts)
    logger.debug(f"Copied {source} to {target}")
    return target


@overload
def copy(source: BinaryIO, target: StrPath, *options: CopyOption) -> int: ...


@overload
def copy(source: StrPath, target: BinaryIO) -> int: ...


@overload
def copy(source: StrPath, target: StrPath, *options: CopyOption) -> Path: ...


def copy(source: Any, target: Any, *options: CopyOption) -> Path | int:
    """
    Copy between two paths, or between a path and a binary stream.

    * stream -> path: returns the number of bytes written; only
      REPLACE_EXISTING is accepted.
    * path -> stream: returns the number of bytes read.
    * path -> path: returns target. REPLACE_EXISTING, COPY_ATTRIBUTES and
      NOFOLLOW_LINKS are accepted. A directory is copied as an empty
      directory; with NOFOLLOW_LINKS a link is copied as a link.

    Raises:
        FileExistsError: If target exists and REPLACE_EXISTING is not given.
        OSError: ENOTEMPTY if target is a non-empty directory to be replaced.
        UnsupportedOperationError: If an option is not supported.
    """
    if _is_stream(source, "read"):
        return _copy_from_stream(source, Path(target), options)
    if _is_stream(target, "write"):
        if options:
            raise UnsupportedOperationError("Copy options not supported when copying to a stream")
        return _copy_to_stream(Path(source), target)
    return _copy_path(Path(source), Path(target), options)


def move(source: StrPath, target: StrPath, *options: CopyOption) -> Path:
    """
    Move or rename a file.

    Across filesystems the file is copied then deleted; a directory can only
    be moved across filesystems when it is empty.

    Args:
        source: File to move.
        target: Destination.
        *options: REPLACE_EXISTING, ATOMIC_MOVE (other options are ignored).

    Returns:
        The target.

    Raises:
        FileExistsError: If target exists and REPLACE_EXISTING is not given.
        OSError: EXDEV if ATOMIC_MOVE is given and the move crosses filesystems.
    """
    source_path = Path(source)
    target_path = Path(target)
    opts = _check_copy_options(
        options,
        {
            StandardCopyOption.REPLACE_EXISTING,
            StandardCopyOption.ATOMIC_MOVE,
            StandardCopyOption.COPY_ATTRIBUTES,
            LinkOption.NOFOLLOW_LINKS,
        },
    )

    if StandardCopyOption.ATOMIC_MOVE in opts:
        os.rename(source_path, target_path)
        logger.debug(f"Moved (atomic) {source_path} to {target_path}")
        return target_path

    st = os.lstat(source_path)
    if _prepare_target(st, target_path, StandardCopyOption.REPLACE_EXISTING in opts):
        return target_path

    try:
        os.rename(source_path, target_path)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        _move_across_devices(source_path, target_path, st)
    logger.debug(f"Moved {source_path} to {target_path}")
    return target_path


def _move_across_devices(source: Path, target: Path, st: os.stat_result) -> None:
    if stat.S_ISDIR(st.st_mode):
        with os.scandir(source) as entries:
            if next(entries, None) is not None:
                raise _error(errno.ENOTEMPTY, source)

    _copy_entry(source, target, st, copy_attributes=True)
    try:
        delete(source)
    except OSError:
        with contextlib.suppress(OSError):
            delete(target)
        raise
