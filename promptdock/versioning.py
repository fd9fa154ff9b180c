"""Semantic version ordering and bumping for prompt files."""

from enum import Enum
from typing import Optional, Union
import re

from .frontmatter import Defaulted, Ok, Parsed

DEFAULT_VERSION = "1.0.0"

Version = tuple[int, int, int]

_LEADING_DIGITS = re.compile(r"\s*(\d+)")
_STRICT_VERSION = re.compile(r"(\d+)\.(\d+)\.(\d+)")


class BumpKind(str, Enum):
    """Which part of a version to increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @classmethod
    def parse(cls, text: str) -> Optional["BumpKind"]:
        """Case-insensitive lookup; None for anything that is not a bump kind."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            return None


def _segment(raw: str) -> tuple[int, bool]:
    match = _LEADING_DIGITS.match(raw)
    if not match:
        return 0, False
    return int(match.group(1)), match.end() == len(raw)


def read_version(version: str) -> Parsed[Version]:
    """
    Parse ``MAJOR.MINOR.PATCH`` into a tuple.

    Missing or non-numeric segments become 0 and mark the result as
    Defaulted. Segments past the third are ignored.
    """
    parts = version.split(".")
    numbers = []
    exact = True
    for i in range(3):
        if i < len(parts):
            value, clean = _segment(parts[i])
        else:
            value, clean = 0, False
        numbers.append(value)
        exact = exact and clean

    result = (numbers[0], numbers[1], numbers[2])
    return Ok(result) if exact else Defaulted(result)


def parse_version(version: str) -> Version:
    return read_version(version).value


def version_key(version: str) -> Version:
    """Sort key; use with ``reverse=True`` for newest first."""
    return parse_version(version)


def compare_versions(a: str, b: str) -> int:
    """Return 1 if a > b, -1 if a < b, 0 when they compare equal."""
    left, right = parse_version(a), parse_version(b)
    if left > right:
        return 1
    if left < right:
        return -1
    return 0


def bump_version(version: str, kind: Union[BumpKind, str]) -> str:
    """
    Increment a version.

    A version that is not exactly three numeric segments is not repaired:
    the result is DEFAULT_VERSION.
    """
    kind = BumpKind(kind)

    match = _STRICT_VERSION.fullmatch(version.strip())
    if not match:
        return DEFAULT_VERSION

    major, minor, patch = (int(g) for g in match.groups())

    if kind == BumpKind.MAJOR:
        return f"{major + 1}.0.0"
    if kind == BumpKind.MINOR:
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"
