"""Tests for attribute views."""

import os
from datetime import UTC, datetime
from pathlib import Path

import pytest

from ufiles.domain.attributes import PosixFileAttributes
from ufiles.domain.errors import UnsupportedOperationError
from ufiles.infrastructure.attribute_views import (
    VIEWS,
    BasicFileAttributeView,
    PosixFileAttributeView,
    UnixFileAttributeView,
    parse_attribute,
    view_by_name,
)


class TestParseAttribute:
    """Test splitting attribute names."""

    @pytest.mark.parametrize(
        ("attribute", "expected"),
        [
            ("size", ("basic", "size")),
            ("posix:permissions", ("posix", "permissions")),
            ("unix:*", ("unix", "*")),
            ("basic:size,is_directory", ("basic", "size,is_directory")),
        ],
    )
    def test_parse(self, attribute: str, expected: tuple[str, str]) -> None:
        """Test that the view defaults to basic."""
        assert parse_attribute(attribute) == expected


class TestViewRegistry:
    """Test looking up views by name."""

    def test_registered_views(self) -> None:
        """Test the available view names."""
        assert set(VIEWS) == {"basic", "owner", "posix", "unix"}

    def test_view_by_name(self, tmp_dir: Path) -> None:
        """Test creating a view without touching the file."""
        view = view_by_name("unix", tmp_dir / "missing", follow_links=False)
        assert isinstance(view, UnixFileAttributeView)
        assert view.follow_links is False

    def test_unknown_view(self, tmp_dir: Path) -> None:
        """Test that unknown views are unsupported."""
        with pytest.raises(UnsupportedOperationError, match="not available"):
            view_by_name("acl", tmp_dir, follow_links=True)


class TestBasicFileAttributeView:
    """Test the basic view."""

    def test_set_times_keeps_unset(self, tmp_dir: Path) -> None:
        """Test that a None timestamp is left unchanged."""
        path = tmp_dir / "f"
        path.write_text("x")
        os.utime(path, ns=(1_000_000_000, 2_000_000_000))
        view = BasicFileAttributeView(path)

        view.set_times(last_modified_time=datetime(2022, 5, 5, tzinfo=UTC))

        st = os.stat(path)
        assert st.st_atime_ns == 1_000_000_000
        assert view.read_attributes().last_modified_time == datetime(2022, 5, 5, tzinfo=UTC)

    def test_creation_time_ignored(self, tmp_dir: Path) -> None:
        """Test that setting only the creation time changes nothing."""
        path = tmp_dir / "f"
        path.write_text("x")
        before = os.stat(path).st_mtime_ns

        BasicFileAttributeView(path).set_attribute("creation_time", datetime(2000, 1, 1))

        assert os.stat(path).st_mtime_ns == before


class TestPosixFileAttributeView:
    """Test the posix view."""

    def test_read_attributes(self, tmp_dir: Path) -> None:
        """Test reading owner, group and permissions."""
        path = tmp_dir / "f"
        path.write_text("x")
        os.chmod(path, 0o604)

        attrs = PosixFileAttributeView(path).read_attributes()

        assert isinstance(attrs, PosixFileAttributes)
        assert attrs.owner.id == os.getuid()
        assert attrs.group.id == os.getgid() or attrs.group.id == os.stat(path).st_gid
        assert {p.value for p in attrs.permissions} == {"owner_read", "owner_write", "others_read"}

    def test_unknown_attribute(self, tmp_dir: Path) -> None:
        """Test setting an attribute the view does not have."""
        with pytest.raises(ValueError, match="'posix:colour' not recognized"):
            PosixFileAttributeView(tmp_dir).set_attribute("colour", 1)

    def test_repr(self, tmp_dir: Path) -> None:
        """Test the representation names the path."""
        assert str(tmp_dir) in repr(PosixFileAttributeView(tmp_dir))
