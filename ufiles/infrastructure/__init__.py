"""Infrastructure layer: the filesystem operations over os and stat."""

from . import files

__all__ = ["files"]
