"""Library-wide defaults for the filesystem operations.

The active configuration is a validated pydantic model. Replace it with
``configure(...)``; every operation reads it at call time.
"""

import codecs
import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class FilesConfig(BaseModel):
    """Defaults applied when an operation is called without an explicit value."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_encoding: str = Field("utf-8", description="Encoding for text reads and writes")
    buffer_size: int = Field(8192, gt=0, description="Chunk size for copy and compare")
    line_separator: str = Field(os.linesep, description="Written after each line by write_lines")
    temp_dir: Path | None = Field(None, description="Temp file directory (None = system default)")

    @field_validator("default_encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Reject encodings unknown to the codec registry."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v

    @field_validator("line_separator")
    @classmethod
    def validate_line_separator(cls, v: str) -> str:
        if v not in ("\n", "\r\n", "\r"):
            raise ValueError(f"line_separator must be one of \\n, \\r\\n, \\r, got {v!r}")
        return v


_config = FilesConfig()


def get_config() -> FilesConfig:
    """Return the active configuration."""
    return _config


def configure(**overrides: object) -> FilesConfig:
    """
    Install a new configuration derived from the active one.

    Args:
        **overrides: Field values to change.

    Returns:
        The new active configuration.

    Raises:
        pydantic.ValidationError: If a value is invalid or a name is unknown.
    """
    global _config
    _config = FilesConfig.model_validate({**_config.model_dump(), **overrides})
    logger.debug(f"Configured ufiles: {_config}")
    return _config


def reset_config() -> FilesConfig:
    """Restore the default configuration."""
    global _config
    _config = FilesConfig()
    return _config
