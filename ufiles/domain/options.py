"""Option enumerations accepted by the filesystem operations."""

from collections.abc import Collection
from enum import StrEnum, auto


class StandardOpenOption(StrEnum):
    """Options controlling how a file is opened or created.

    Attributes:
        READ: Open for reading
        WRITE: Open for writing
        APPEND: Write at the end of the file
        TRUNCATE_EXISTING: Truncate to zero length when opened for writing
        CREATE: Create the file if it does not exist
        CREATE_NEW: Create the file, failing if it already exists
        DELETE_ON_CLOSE: Delete the file when the handle is closed
        SPARSE: Hint that the file will be sparse (ignored)
        SYNC: Write content and metadata synchronously
        DSYNC: Write content synchronously
    """

    READ = auto()
    WRITE = auto()
    APPEND = auto()
    TRUNCATE_EXISTING = auto()
    CREATE = auto()
    CREATE_NEW = auto()
    DELETE_ON_CLOSE = auto()
    SPARSE = auto()
    SYNC = auto()
    DSYNC = auto()


class LinkOption(StrEnum):
    """How symbolic links are handled."""

    NOFOLLOW_LINKS = auto()


class StandardCopyOption(StrEnum):
    """Options for copy and move.

    Attributes:
        REPLACE_EXISTING: Replace an existing target
        COPY_ATTRIBUTES: Copy timestamps and permissions to the target
        ATOMIC_MOVE: Move as an atomic rename, or fail
    """

    REPLACE_EXISTING = auto()
    COPY_ATTRIBUTES = auto()
    ATOMIC_MOVE = auto()


class FileVisitOption(StrEnum):
    """Options for recursive traversal."""

    FOLLOW_LINKS = auto()


class FileVisitResult(StrEnum):
    """Returned by FileVisitor callbacks to steer a tree walk.

    Attributes:
        CONTINUE: Keep walking
        TERMINATE: Stop the walk
        SKIP_SUBTREE: Do not visit the entries of this directory
        SKIP_SIBLINGS: Do not visit the remaining entries of the parent directory
    """

    CONTINUE = auto()
    TERMINATE = auto()
    SKIP_SUBTREE = auto()
    SKIP_SIBLINGS = auto()


OpenOption = StandardOpenOption | LinkOption
CopyOption = StandardCopyOption | LinkOption

# Effectively unbounded traversal depth.
MAX_DEPTH = 2**31 - 1


def follows_links(options: Collection[object]) -> bool:
    """Return False if NOFOLLOW_LINKS is among options."""
    return LinkOption.NOFOLLOW_LINKS not in options
