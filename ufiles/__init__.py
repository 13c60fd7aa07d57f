"""Filesystem operations whose I/O failures are raised as UncheckedIOError."""

from .config import FilesConfig, configure, get_config, reset_config
from .domain.attributes import (
    BasicFileAttributes,
    FileAttribute,
    FileStore,
    GroupPrincipal,
    PosixFileAttributes,
    UnixFileAttributes,
    UserPrincipal,
    posix_permissions_attribute,
)
from .domain.errors import (
    CharacterCodingError,
    FileSystemLoopError,
    UncheckedIOError,
    UnsupportedOperationError,
    UserPrincipalNotFoundError,
)
from .domain.file_visitor import FileVisitor, SimpleFileVisitor
from .domain.options import (
    MAX_DEPTH,
    FileVisitOption,
    FileVisitResult,
    LinkOption,
    StandardCopyOption,
    StandardOpenOption,
)
from .domain.permissions import PosixFilePermission
from .domain.permissions import from_string as permissions_from_string
from .domain.permissions import to_string as permissions_to_string
from .domain.stream import DirectoryStream, Stream
from .infrastructure.attribute_views import (
    BasicFileAttributeView,
    FileAttributeView,
    FileOwnerAttributeView,
    PosixFileAttributeView,
    UnixFileAttributeView,
)
from .infrastructure.glob_matcher import PathMatcher, path_matcher
from .unchecked import *  # noqa: F403
from .unchecked import __all__ as _operations

__all__ = [
    "FilesConfig",
    "configure",
    "get_config",
    "reset_config",
    "BasicFileAttributes",
    "FileAttribute",
    "FileStore",
    "GroupPrincipal",
    "PosixFileAttributes",
    "UnixFileAttributes",
    "UserPrincipal",
    "posix_permissions_attribute",
    "CharacterCodingError",
    "FileSystemLoopError",
    "UncheckedIOError",
    "UnsupportedOperationError",
    "UserPrincipalNotFoundError",
    "FileVisitor",
    "SimpleFileVisitor",
    "MAX_DEPTH",
    "FileVisitOption",
    "FileVisitResult",
    "LinkOption",
    "StandardCopyOption",
    "StandardOpenOption",
    "PosixFilePermission",
    "permissions_from_string",
    "permissions_to_string",
    "DirectoryStream",
    "Stream",
    "BasicFileAttributeView",
    "FileAttributeView",
    "FileOwnerAttributeView",
    "PosixFileAttributeView",
    "UnixFileAttributeView",
    "PathMatcher",
    "path_matcher",
    *_operations,
]
