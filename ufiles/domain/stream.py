"""Closeable lazy sequences returned by listing, walking and line reading."""

import logging
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from types import TracebackType
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Stream(Iterator[T], Generic[T]):
    """
    A lazily produced, single-use sequence that may hold open handles.

    Iterate it once, and close it (or use it as a context manager) to release
    the handles it holds. Close handlers run once, in registration order.

    Example:
        with files.walk(root) as paths:
            for path in paths:
                print(path)
    """

    def __init__(self, source: Iterable[T], on_close: Callable[[], None] | None = None) -> None:
        """
        Initialize the stream.

        Args:
            source: The elements, produced lazily.
            on_close: Optional handler releasing resources held by source.
        """
        self._source = source
        self._iterator: Iterator[T] | None = None
        self._close_handlers: list[Callable[[], None]] = []
        self._closed = False
        if on_close is not None:
            self._close_handlers.append(on_close)

    @property
    def closed(self) -> bool:
        return self._closed

    def on_close(self, handler: Callable[[], None]) -> "Stream[T]":
        """
        Register an additional close handler.

        Args:
            handler: Called once when the stream is closed.

        Returns:
            This stream, for chaining.
        """
        self._close_handlers.append(handler)
        return self

    def __iter__(self) -> "Stream[T]":
        return self

    def __next__(self) -> T:
        if self._closed:
            raise RuntimeError("Stream is closed")
        if self._iterator is None:
            self._iterator = iter(self._source)
        return next(self._iterator)

    def close(self) -> None:
        """Release the resources held by the stream. Idempotent."""
        if self._closed:
            return
        self._closed = True

        # Generators run their finally blocks here
        close_source = getattr(self._iterator or self._source, "close", None)
        handlers = list(self._close_handlers)
        if callable(close_source):
            handlers.insert(0, close_source)

        first_error: BaseException | None = None
        for handler in handlers:
            try:
                handler()
            except Exception as e:
                logger.debug(f"Stream close handler failed: {e}")
                if first_error is None:
                    first_error = e
                else:
                    first_error.add_note(f"Also failed while closing: {e!r}")
        if first_error is not None:
            raise first_error

    def __enter__(self) -> "Stream[T]":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class DirectoryStream(Stream[Path]):
    """
    Entries of a single directory.

    Unlike a plain Stream, a directory stream hands out its iterator only once;
    a second ``iter()`` raises RuntimeError.
    """

    def __init__(
        self, source: Iterable[Path], on_close: Callable[[], None] | None = None
    ) -> None:
        super().__init__(source, on_close)
        self._iterated = False

    def __iter__(self) -> "DirectoryStream":
        if self.closed:
            raise RuntimeError("Directory stream is closed")
        if self._iterated:
            raise RuntimeError("Iterator already obtained")
        self._iterated = True
        return self
