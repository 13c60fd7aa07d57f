"""Locate the mounted filesystem holding a path."""

import logging
import os
from pathlib import Path

from ufiles.domain.attributes import FileStore

logger = logging.getLogger(__name__)

_MOUNT_TABLES = (Path("/proc/self/mounts"), Path("/proc/mounts"), Path("/etc/mtab"))


def _unescape(field: str) -> str:
    # Mount tables escape space, tab, newline and backslash as octal
    return (
        field.replace("\\040", " ")
        .replace("\\011", "\t")
        .replace("\\012", "\n")
        .replace("\\134", "\\")
    )


def _find_mount_point(path: Path) -> Path:
    current = Path(os.path.realpath(path))
    while not os.path.ismount(current):
        parent = current.parent
        if parent == current:
            break
        current = parent
    return current


def _mount_entry(mount_point: Path) -> tuple[str, str]:
    """Return (device, fstype) for mount_point, or ("", "unknown")."""
    for table in _MOUNT_TABLES:
        try:
            lines = table.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError:
            continue

        # Later entries shadow earlier ones mounted on the same point
        found: tuple[str, str] | None = None
        for line in lines:
            fields = line.split()
            if len(fields) >= 3 and Path(_unescape(fields[1])) == mount_point:
                found = (_unescape(fields[0]), fields[2])
        if found is not None:
            return found
    return "", "unknown"


def file_store_for(path: Path) -> FileStore:
    """
    Describe the file store (mount) holding path.

    Args:
        path: An existing file.

    Returns:
        The file store.

    Raises:
        OSError: If path does not exist or the store cannot be queried.
    """
    os.stat(path)
    mount_point = _find_mount_point(path)
    name, fs_type = _mount_entry(mount_point)
    vfs = os.statvfs(mount_point)

    store = FileStore(
        name=name,
        type=fs_type,
        mount_point=mount_point,
        total_space=vfs.f_blocks * vfs.f_frsize,
        usable_space=vfs.f_bavail * vfs.f_frsize,
        unallocated_space=vfs.f_bfree * vfs.f_frsize,
        block_size=vfs.f_frsize,
        read_only=bool(vfs.f_flag & os.ST_RDONLY),
    )
    logger.debug(f"Resolved file store for {path}: {store}")
    return store
