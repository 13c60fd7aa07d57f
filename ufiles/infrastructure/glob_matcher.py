"""Glob and regex path matchers."""

import re
from collections.abc import Callable
from pathlib import Path

PathMatcher = Callable[[Path], bool]

_REGEX_META = set(".^$+{[]|()")
_GLOB_META = set("\\*?[{")


def glob_to_regex(glob: str) -> str:
    """
    Translate a glob pattern to an anchored regular expression.

    Supported syntax:
        *       any characters within a name (does not cross "/")
        **      any characters, crossing "/"
        ?       one character within a name
        [abc]   one character from the set; ranges and a leading "!" are allowed
        {a,b}   one of the comma separated alternatives (no nesting)
        \\x      the literal character x

    Args:
        glob: The glob pattern.

    Returns:
        The equivalent regular expression.

    Raises:
        ValueError: If the pattern is malformed.
    """
    out = ["^"]
    in_group = False
    i = 0
    n = len(glob)

    while i < n:
        c = glob[i]
        i += 1

        if c == "\\":
            if i == n:
                raise ValueError(f"No character to escape at end of glob: {glob!r}")
            nxt = glob[i]
            i += 1
            if nxt in _GLOB_META or nxt in _REGEX_META:
                out.append("\\")
            out.append(nxt)

        elif c == "/":
            out.append(c)

        elif c == "[":
            out.append("(?!/)[")
            if i < n and glob[i] in "!^":
                out.append("^")
                i += 1
            empty = True
            if i < n and glob[i] == "-":
                out.append("-")
                i += 1
                empty = False
            closed = False
            while i < n:
                ch = glob[i]
                i += 1
                if ch == "]":
                    closed = True
                    break
                if ch == "/":
                    raise ValueError(f"Explicit 'name separator' in class: {glob!r}")
                if ch in "\\[^":
                    out.append("\\")
                out.append(ch)
                empty = False
            if not closed:
                raise ValueError(f"Missing ']' in glob: {glob!r}")
            if empty:
                raise ValueError(f"Empty character class in glob: {glob!r}")
            out.append("]")

        elif c == "{":
            if in_group:
                raise ValueError(f"Cannot nest groups in glob: {glob!r}")
            out.append("(?:(?:")
            in_group = True

        elif c == "}":
            if in_group:
                out.append("))")
                in_group = False
            else:
                out.append("}")

        elif c == ",":
            out.append(")|(?:" if in_group else ",")

        elif c == "*":
            if i < n and glob[i] == "*":
                out.append(".*")
                i += 1
            else:
                out.append("[^/]*")

        elif c == "?":
            out.append("[^/]")

        else:
            if c in _REGEX_META:
                out.append("\\")
            out.append(c)

    if in_group:
        raise ValueError(f"Missing '}}' in glob: {glob!r}")

    out.append("$")
    return "".join(out)


def path_matcher(syntax_and_pattern: str) -> PathMatcher:
    """
    Build a matcher from "glob:<pattern>" or "regex:<pattern>".

    The returned callable matches the whole string form of a path.

    Args:
        syntax_and_pattern: Syntax prefix and pattern.

    Returns:
        A predicate over paths.

    Raises:
        ValueError: If the syntax is missing or unknown, or the pattern is malformed.
    """
    syntax, sep, pattern = syntax_and_pattern.partition(":")
    if not sep or not syntax:
        raise ValueError(f"Pattern must be 'syntax:pattern', got {syntax_and_pattern!r}")

    if syntax.lower() == "glob":
        regex = glob_to_regex(pattern)
    elif syntax.lower() == "regex":
        regex = pattern
    else:
        raise ValueError(f"Syntax '{syntax}' not recognized")

    try:
        compiled = re.compile(regex, re.DOTALL)
    except re.error as e:
        raise ValueError(f"Invalid pattern {pattern!r}: {e}") from e

    def matches(path: Path) -> bool:
        return compiled.fullmatch(str(path)) is not None

    return matches


def name_matcher(glob: str) -> PathMatcher:
    """
    Build a matcher that applies a glob to the file name of a path.

    Args:
        glob: The glob pattern.

    Returns:
        A predicate over paths.
    """
    matcher = path_matcher(f"glob:{glob}")

    def matches(path: Path) -> bool:
        return matcher(Path(path.name))

    return matches
