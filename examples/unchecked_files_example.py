"""
Unchecked Files Example

This example demonstrates how to use ufiles to:
1. Create a scratch directory and write files into it
2. Read content back as text and lines
3. List, walk and find files
4. Handle an I/O failure as UncheckedIOError
5. Delete the whole tree with a FileVisitor
"""

import logging
from pathlib import Path

import ufiles
from ufiles import (
    BasicFileAttributes,
    FileVisitResult,
    SimpleFileVisitor,
    UncheckedIOError,
)


class DeleteTree(SimpleFileVisitor):
    """Delete every file, then each directory once it is empty."""

    def visit_file(self, file: Path, attrs: BasicFileAttributes) -> FileVisitResult:
        ufiles.delete(file)
        return FileVisitResult.CONTINUE

    def post_visit_directory(self, directory: Path, exc: OSError | None) -> FileVisitResult:
        if exc is not None:
            raise exc
        ufiles.delete(directory)
        return FileVisitResult.CONTINUE


def main() -> None:
    """Run the example."""
    logging.basicConfig(level=logging.INFO)

    print("=" * 60)
    print("Unchecked Files Example")
    print("=" * 60)

    # 1. Scratch directory
    root = ufiles.create_temp_directory("ufiles-example-")
    print(f"\n1. Created {root}")
    ufiles.write_string(root / "hello.txt", "hello")
    ufiles.create_directories(root / "notes" / "2024")
    ufiles.write_lines(root / "notes" / "2024" / "todo.txt", ["write docs", "ship it"])

    # 2. Read back
    print("\n2. Contents:")
    print(f"   hello.txt: {ufiles.read_string(root / 'hello.txt')!r}")
    for line in ufiles.read_all_lines(root / "notes" / "2024" / "todo.txt"):
        print(f"   todo: {line}")

    # 3. Traverse
    print("\n3. Traversal:")
    with ufiles.list_directory(root) as entries:
        print(f"   top level: {sorted(p.name for p in entries)}")
    with ufiles.walk(root) as paths:
        for path in paths:
            print(f"   walk: {path.relative_to(root)}")
    with ufiles.find(root, ufiles.MAX_DEPTH, lambda p, a: a.is_regular_file) as found:
        total = sum(ufiles.size(p) for p in found)
    print(f"   bytes in regular files: {total}")

    # 4. Failures
    print("\n4. Failure handling:")
    try:
        ufiles.read_string(root / "missing.txt")
    except UncheckedIOError as e:
        print(f"   {type(e.cause).__name__} (errno {e.errno}): {e}")

    # 5. Clean up
    ufiles.walk_file_tree(root, DeleteTree())
    print(f"\n5. Deleted tree, exists={ufiles.exists(root)}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
