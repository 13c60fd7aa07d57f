"""Visitor port driven by a recursive file tree walk."""

from abc import ABC, abstractmethod
from pathlib import Path

from ufiles.domain.attributes import BasicFileAttributes
from ufiles.domain.options import FileVisitResult


class FileVisitor(ABC):
    """
    Abstract visitor for walk_file_tree.

    Each callback returns a FileVisitResult that steers the walk. An exception
    raised from a callback stops the walk and propagates to the caller.
    """

    @abstractmethod
    def pre_visit_directory(self, directory: Path, attrs: BasicFileAttributes) -> FileVisitResult:
        """
        Invoked before the entries of a directory are visited.

        Args:
            directory: The directory.
            attrs: Its basic attributes.

        Returns:
            SKIP_SUBTREE to skip the entries, SKIP_SIBLINGS to skip the
            directory and its siblings, TERMINATE to stop, CONTINUE otherwise.
        """
        raise NotImplementedError

    @abstractmethod
    def visit_file(self, file: Path, attrs: BasicFileAttributes) -> FileVisitResult:
        """
        Invoked for a non-directory entry, or a directory at the depth limit.

        Args:
            file: The entry.
            attrs: Its basic attributes.

        Returns:
            The visit result.
        """
        raise NotImplementedError

    @abstractmethod
    def visit_file_failed(self, file: Path, exc: OSError) -> FileVisitResult:
        """
        Invoked for an entry whose attributes could not be read, a directory
        that could not be opened, or a directory that forms a link cycle.

        Args:
            file: The entry.
            exc: The failure.

        Returns:
            The visit result.
        """
        raise NotImplementedError

    @abstractmethod
    def post_visit_directory(self, directory: Path, exc: OSError | None) -> FileVisitResult:
        """
        Invoked after all entries of a directory (and their descendants) are visited.

        Args:
            directory: The directory.
            exc: The failure that ended iteration early, or None.

        Returns:
            The visit result.
        """
        raise NotImplementedError


class SimpleFileVisitor(FileVisitor):
    """Visitor that continues everywhere and re-raises failures."""

    def pre_visit_directory(self, directory: Path, attrs: BasicFileAttributes) -> FileVisitResult:
        return FileVisitResult.CONTINUE

    def visit_file(self, file: Path, attrs: BasicFileAttributes) -> FileVisitResult:
        return FileVisitResult.CONTINUE

    def visit_file_failed(self, file: Path, exc: OSError) -> FileVisitResult:
        raise exc

    def post_visit_directory(self, directory: Path, exc: OSError | None) -> FileVisitResult:
        if exc is not None:
            raise exc
        return FileVisitResult.CONTINUE
