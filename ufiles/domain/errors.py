"""Error types for the filesystem API and its unchecked facade."""

import errno


class UncheckedIOError(RuntimeError):
    """
    An I/O failure raised by the unchecked facade.

    Wraps the original OSError without altering it. The message, errno and
    filenames are those of the wrapped error, and the wrapped error is also
    chained as ``__cause__`` when raised with ``raise ... from``.

    Being a RuntimeError, it is not intercepted by ``except OSError``
    handlers along the way; callers that care catch it explicitly.
    """

    def __init__(self, cause: OSError) -> None:
        """
        Initialize the error.

        Args:
            cause: The underlying I/O failure.

        Raises:
            TypeError: If cause is not an OSError.
        """
        if not isinstance(cause, OSError):
            raise TypeError(f"cause must be an OSError, got {type(cause).__name__}")
        super().__init__(cause)
        self._cause = cause

    @property
    def cause(self) -> OSError:
        """The wrapped OSError."""
        return self._cause

    @property
    def errno(self) -> int | None:
        return self._cause.errno

    @property
    def strerror(self) -> str | None:
        return self._cause.strerror

    @property
    def filename(self) -> str | None:
        return self._cause.filename  # type: ignore[no-any-return]

    @property
    def filename2(self) -> str | None:
        return self._cause.filename2  # type: ignore[no-any-return]

    def __str__(self) -> str:
        return str(self._cause)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._cause!r})"

    def __reduce__(self) -> tuple[type["UncheckedIOError"], tuple[OSError]]:
        return (self.__class__, (self._cause,))


class FileSystemLoopError(OSError):
    """Raised when a link-following walk meets a directory cycle."""

    def __init__(self, path: str) -> None:
        super().__init__(errno.ELOOP, "File system loop detected", path)


class UserPrincipalNotFoundError(OSError):
    """Raised when a user or group name cannot be resolved."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Principal not found: {name}")
        self.name = name


class UnsupportedOperationError(Exception):
    """Raised for attribute views, attribute types or options that are not supported."""


class CharacterCodingError(OSError):
    """Raised when file content cannot be decoded, or text cannot be encoded, in a charset."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(errno.EILSEQ, reason, path)
