"""
Unchecked filesystem operations.

Every function here forwards to the function of the same name in
ufiles.infrastructure.files with the same arguments and returns its result
unchanged. The only difference is the failure convention: an OSError raised
by the underlying call is re-raised as UncheckedIOError wrapping it, so it
travels past ``except OSError`` handlers until a caller explicitly asks for it.

Streams returned by list_directory, new_directory_stream, walk, find and lines
are wrapped so that failures raised while iterating or closing them are
translated as well. File handles (new_input_stream, new_output_stream,
new_byte_channel, new_buffered_reader, new_buffered_writer) and attribute views
are returned as they are; their own methods keep raising OSError.

Example:
    import ufiles

    root = ufiles.create_temp_directory("demo")
    ufiles.write_string(root / "hello.txt", "hello")
    assert ufiles.read_string(root / "hello.txt") == "hello"
"""

import functools
import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any, ParamSpec, TypeVar

from ufiles.domain.errors import UncheckedIOError
from ufiles.domain.stream import Stream
from ufiles.infrastructure import files

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T")
S = TypeVar("S", bound=Stream[Any])


def unchecked(func: Callable[P, R]) -> Callable[P, R]:
    """
    Decorate an I/O function so that OSError is raised as UncheckedIOError.

    Any other exception propagates unchanged.

    Args:
        func: The function to wrap.

    Returns:
        The wrapped function, with func's name, docstring and signature.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except OSError as e:
            logger.debug(f"{func.__name__} failed: {e!r}")
            raise UncheckedIOError(e) from e

    return wrapper


def _translate_iteration(source: Iterable[T]) -> Iterator[T]:
    try:
        yield from source
    except OSError as e:
        logger.debug(f"Stream iteration failed: {e!r}")
        raise UncheckedIOError(e) from e


def unchecked_stream(func: Callable[P, S]) -> Callable[P, S]:
    """
    Like unchecked, for functions returning a Stream.

    The returned stream is of the same type as the original and translates
    OSError raised while iterating or closing it. Closing it closes the original.
    """
    call = unchecked(func)

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> S:
        stream = call(*args, **kwargs)
        return type(stream)(_translate_iteration(stream), on_close=unchecked(stream.close))

    return wrapper


# Existence and metadata
exists = files.exists
not_exists = files.not_exists
is_regular_file = files.is_regular_file
is_directory = files.is_directory
is_symbolic_link = files.is_symbolic_link
is_readable = files.is_readable
is_writable = files.is_writable
is_executable = files.is_executable
is_hidden = unchecked(files.is_hidden)
is_same_file = unchecked(files.is_same_file)
size = unchecked(files.size)
mismatch = unchecked(files.mismatch)
probe_content_type = unchecked(files.probe_content_type)
get_file_store = unchecked(files.get_file_store)

# Attributes
get_attribute = unchecked(files.get_attribute)
set_attribute = unchecked(files.set_attribute)
read_attributes = unchecked(files.read_attributes)
get_file_attribute_view = files.get_file_attribute_view
get_last_modified_time = unchecked(files.get_last_modified_time)
set_last_modified_time = unchecked(files.set_last_modified_time)
get_owner = unchecked(files.get_owner)
set_owner = unchecked(files.set_owner)
get_posix_file_permissions = unchecked(files.get_posix_file_permissions)
set_posix_file_permissions = unchecked(files.set_posix_file_permissions)
lookup_principal_by_name = unchecked(files.lookup_principal_by_name)
lookup_principal_by_group_name = unchecked(files.lookup_principal_by_group_name)

# Creation and removal
create_file = unchecked(files.create_file)
create_directory = unchecked(files.create_directory)
create_directories = unchecked(files.create_directories)
create_link = unchecked(files.create_link)
create_symbolic_link = unchecked(files.create_symbolic_link)
create_temp_file = unchecked(files.create_temp_file)
create_temp_directory = unchecked(files.create_temp_directory)
delete = unchecked(files.delete)
delete_if_exists = unchecked(files.delete_if_exists)

# Bulk content I/O
read_all_bytes = unchecked(files.read_all_bytes)
read_string = unchecked(files.read_string)
read_all_lines = unchecked(files.read_all_lines)
read_symbolic_link = unchecked(files.read_symbolic_link)
write = unchecked(files.write)
write_lines = unchecked(files.write_lines)
write_string = unchecked(files.write_string)

# Streaming I/O
new_input_stream = unchecked(files.new_input_stream)
new_output_stream = unchecked(files.new_output_stream)
new_byte_channel = unchecked(files.new_byte_channel)
new_buffered_reader = unchecked(files.new_buffered_reader)
new_buffered_writer = unchecked(files.new_buffered_writer)
lines = unchecked_stream(files.lines)

# Traversal
list_directory = unchecked_stream(files.list_directory)
new_directory_stream = unchecked_stream(files.new_directory_stream)
walk = unchecked_stream(files.walk)
find = unchecked_stream(files.find)
walk_file_tree = unchecked(files.walk_file_tree)

# Transfer
copy = unchecked(files.copy)
move = unchecked(files.move)

__all__ = [
    "unchecked",
    "unchecked_stream",
    *files.__all__,
]
