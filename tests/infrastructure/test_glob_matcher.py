"""Tests for glob and regex path matchers."""

from pathlib import Path

import pytest

from ufiles.infrastructure.glob_matcher import glob_to_regex, name_matcher, path_matcher


class TestGlobMatching:
    """Test glob pattern semantics."""

    @pytest.mark.parametrize(
        ("glob", "path", "expected"),
        [
            ("*.txt", "a.txt", True),
            ("*.txt", "a.py", False),
            ("*.txt", "dir/a.txt", False),
            ("**/*.py", "src/pkg/mod.py", True),
            ("**.py", "src/pkg/mod.py", True),
            ("?.txt", "a.txt", True),
            ("?.txt", "ab.txt", False),
            ("*.{py,txt}", "a.py", True),
            ("*.{py,txt}", "a.txt", True),
            ("*.{py,txt}", "a.md", False),
            ("[abc].txt", "b.txt", True),
            ("[abc].txt", "d.txt", False),
            ("[!abc].txt", "d.txt", True),
            ("[!abc].txt", "a.txt", False),
            ("[a-c].txt", "b.txt", True),
            ("[-a].txt", "-.txt", True),
            ("\\*.txt", "*.txt", True),
            ("\\*.txt", "a.txt", False),
            ("a+b(1).txt", "a+b(1).txt", True),
            ("a.txt", "abtxt", False),
        ],
    )
    def test_glob(self, glob: str, path: str, expected: bool) -> None:
        """Test that a glob matches exactly the expected paths."""
        assert path_matcher(f"glob:{glob}")(Path(path)) is expected

    def test_wildcards_do_not_match_separator(self) -> None:
        """Test that ? and classes never match '/'."""
        assert not path_matcher("glob:a?b")(Path("a/b"))
        assert not path_matcher("glob:a[!x]b")(Path("a/b"))

    @pytest.mark.parametrize(
        "glob",
        ["[abc", "[]", "[!]", "{a,{b}}", "{a,b", "[a/b]", "abc\\"],
    )
    def test_malformed(self, glob: str) -> None:
        """Test that malformed globs are rejected."""
        with pytest.raises(ValueError):
            glob_to_regex(glob)


class TestPathMatcher:
    """Test matcher construction."""

    def test_regex_syntax(self) -> None:
        """Test regex matchers match the whole path."""
        matcher = path_matcher("regex:.*\\.py")
        assert matcher(Path("src/mod.py"))
        assert not matcher(Path("src/mod.pyc"))

    def test_syntax_is_case_insensitive(self) -> None:
        """Test that the syntax prefix ignores case."""
        assert path_matcher("GLOB:*.txt")(Path("a.txt"))

    @pytest.mark.parametrize("pattern", ["*.txt", ":*.txt", "sh:*.txt", "regex:("])
    def test_invalid(self, pattern: str) -> None:
        """Test that missing or unknown syntax and bad regexes are rejected."""
        with pytest.raises(ValueError):
            path_matcher(pattern)

    def test_name_matcher(self) -> None:
        """Test that a name matcher only looks at the file name."""
        matcher = name_matcher("*.txt")
        assert matcher(Path("/some/dir/a.txt"))
        assert not matcher(Path("/some/dir.txt/a.py"))
