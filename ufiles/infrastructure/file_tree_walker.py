"""
Depth-first file tree walker.

The walker turns a directory tree into a sequence of events. Directories are
held open on an explicit stack, so depth is not limited by the interpreter's
recursion limit and a consumer can prune the walk (pop, skip siblings) between
events. Both walk_file_tree and the walk/find streams are built on it.
"""

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum, auto
from pathlib import Path

from ufiles.domain.attributes import BasicFileAttributes
from ufiles.domain.errors import FileSystemLoopError
from ufiles.domain.options import MAX_DEPTH, FileVisitOption

logger = logging.getLogger(__name__)


class EventType(StrEnum):
    """Kinds of walk events.

    Attributes:
        START_DIRECTORY: A directory was opened; its entries follow
        END_DIRECTORY: All entries of a directory were produced
        ENTRY: A file, a directory at the depth limit, or a failed entry
    """

    START_DIRECTORY = auto()
    END_DIRECTORY = auto()
    ENTRY = auto()


@dataclass(frozen=True)
class WalkEvent:
    """A single step of a walk.

    Attributes:
        type: Event kind
        file: The entry the event is about
        attrs: Entry attributes (None when they could not be read)
        error: Failure attached to the entry, if any
    """

    type: EventType
    file: Path
    attrs: BasicFileAttributes | None = None
    error: OSError | None = None


@dataclass
class _DirectoryNode:
    directory: Path
    key: tuple[int, int] | None
    entries: Iterator[os.DirEntry[str]]
    skipped: bool = False

    def close(self) -> None:
        close = getattr(self.entries, "close", None)
        if close is not None:
            close()


class FileTreeWalker:
    """
    Produces walk events for a tree, one at a time.

    Example:
        walker = FileTreeWalker(max_depth=2)
        event = walker.walk(root)
        while event is not None:
            print(event.type, event.file)
            event = walker.next()
    """

    def __init__(self, options: Iterable[FileVisitOption] = (), max_depth: int = MAX_DEPTH) -> None:
        """
        Initialize the walker.

        Args:
            options: FOLLOW_LINKS to descend into linked directories.
            max_depth: Maximum number of directory levels below the start.

        Raises:
            ValueError: If max_depth is negative or an option is unknown.
        """
        if max_depth < 0:
            raise ValueError("'max_depth' is negative")

        opts = set(options)
        for option in opts:
            if not isinstance(option, FileVisitOption):
                raise ValueError(f"Unsupported walk option: {option!r}")

        self._follow_links = FileVisitOption.FOLLOW_LINKS in opts
        self._max_depth = max_depth
        self._stack: list[_DirectoryNode] = []
        self._closed = False

    def _read_attributes(self, file: Path) -> BasicFileAttributes:
        if self._follow_links:
            try:
                st = os.stat(file)
            except OSError:
                # Broken link: report the link itself
                st = os.lstat(file)
        else:
            st = os.lstat(file)
        return BasicFileAttributes.from_stat(st)

    def _would_loop(self, key: tuple[int, int] | None) -> bool:
        if key is None:
            return False
        return any(node.key == key for node in self._stack)

    def _visit(self, entry: Path) -> WalkEvent:
        try:
            attrs = self._read_attributes(entry)
        except OSError as e:
            return WalkEvent(EventType.ENTRY, entry, error=e)

        if len(self._stack) >= self._max_depth or not attrs.is_directory:
            return WalkEvent(EventType.ENTRY, entry, attrs=attrs)

        if self._follow_links and self._would_loop(attrs.file_key):
            logger.debug(f"Loop detected at {entry}")
            return WalkEvent(EventType.ENTRY, entry, error=FileSystemLoopError(str(entry)))

        try:
            entries = os.scandir(entry)
        except OSError as e:
            return WalkEvent(EventType.ENTRY, entry, error=e)

        self._stack.append(_DirectoryNode(entry, attrs.file_key, entries))
        return WalkEvent(EventType.START_DIRECTORY, entry, attrs=attrs)

    def walk(self, start: Path) -> WalkEvent:
        """
        Start walking at start.

        Returns:
            The first event (ENTRY or START_DIRECTORY for start).

        Raises:
            RuntimeError: If the walker is closed.
        """
        if self._closed:
            raise RuntimeError("Walker is closed")
        return self._visit(start)

    def next(self) -> WalkEvent | None:
        """
        Produce the next event.

        Returns:
            The next event, or None when the walk is complete.
        """
        while self._stack:
            top = self._stack[-1]
            error: OSError | None = None
            entry: os.DirEntry[str] | None = None

            if not top.skipped:
                try:
                    entry = next(top.entries, None)
                except OSError as e:
                    error = e

            if entry is None:
                try:
                    top.close()
                except OSError as e:
                    if error is None:
                        error = e
                self._stack.pop()
                return WalkEvent(EventType.END_DIRECTORY, top.directory, error=error)

            return self._visit(Path(entry.path))
        return None

    def pop(self) -> None:
        """Close the most recently opened directory without an END_DIRECTORY event."""
        if self._stack:
            self._stack.pop().close()

    def skip_remaining_siblings(self) -> None:
        """Make the current directory produce no further entries."""
        if self._stack:
            self._stack[-1].skipped = True

    @property
    def is_open(self) -> bool:
        return not self._closed

    def close(self) -> None:
        """Close all open directories. Idempotent."""
        if self._closed:
            return
        while self._stack:
            self.pop()
        self._closed = True
