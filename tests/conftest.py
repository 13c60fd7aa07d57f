"""Pytest configuration and shared fixtures."""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from ufiles.config import reset_config


@pytest.fixture
def tmp_dir() -> Iterator[Path]:
    """Create a temporary directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tree(tmp_dir: Path) -> Path:
    """
    Create a small file tree and return its root.

    root/
        a.txt
        empty/
        sub/
            b.txt
            deep/
                c.txt
    """
    root = tmp_dir / "root"
    (root / "sub" / "deep").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "a.txt").write_text("a")
    (root / "sub" / "b.txt").write_text("bb")
    (root / "sub" / "deep" / "c.txt").write_text("ccc")
    return root


@pytest.fixture(autouse=True)
def default_config() -> Iterator[None]:
    """Run every test with the default configuration."""
    reset_config()
    yield
    reset_config()
