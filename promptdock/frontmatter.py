"""
Frontmatter parsing for prompt files.

A prompt file starts with a metadata block bounded by two ``---`` lines:

    ---
    name: api-review
    namespace: web
    version: 1.2.0
    author: Jane Doe
    description: Review REST endpoints
    created: 2024-05-01
    tags: ["api", "review"]
    ---

    <body>

The parser is deliberately small: one ``key: value`` per line, values kept
verbatim, and ``tags`` decoded as a JSON array. Anything it cannot make
sense of is skipped or defaulted rather than raised.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union
import json
import re

DELIMITER = "---"

REQUIRED_FIELDS = ("name", "namespace", "version", "author", "description", "created")

_LINE_RE = re.compile(r"^(\w+):\s*(.*)$")

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A value read verbatim from input."""

    value: T
    defaulted = False


@dataclass(frozen=True)
class Defaulted(Generic[T]):
    """A value substituted because the input was missing or malformed."""

    value: T
    defaulted = True


Parsed = Union[Ok[T], Defaulted[T]]


@dataclass
class Frontmatter:
    """Parsed metadata block plus the body that follows it."""

    metadata: dict[str, str] = field(default_factory=dict)
    body: str = ""
    tags_result: Parsed[list[str]] = field(default_factory=lambda: Defaulted([]))

    @property
    def tags(self) -> list[str]:
        return list(self.tags_result.value)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return a metadata value, treating empty strings as absent."""
        value = self.metadata.get(key)
        if value is None or value == "":
            return default
        return value


def _find_delimiters(lines: list[str]) -> Optional[tuple[int, int]]:
    start = None
    for i, line in enumerate(lines):
        if line.strip() == DELIMITER:
            if start is None:
                start = i
            else:
                return start, i
    return None


def parse_tags(raw: str) -> Parsed[list[str]]:
    """Decode a JSON array of tags. Anything else yields ``Defaulted([])``."""
    try:
        value = json.loads(raw)
    except ValueError:
        return Defaulted([])
    if not isinstance(value, list):
        return Defaulted([])
    return Ok([v if isinstance(v, str) else str(v) for v in value])


def parse_frontmatter(text: str) -> Optional[Frontmatter]:
    """
    Split prompt text into metadata and body.

    Returns None when the text does not contain two ``---`` lines; such a
    file is simply not a prompt. Never raises for string input.
    """
    lines = text.split("\n")
    bounds = _find_delimiters(lines)
    if bounds is None:
        return None

    start, end = bounds
    result = Frontmatter(body="\n".join(lines[end + 1:]))

    for line in lines[start + 1:end]:
        match = _LINE_RE.match(line)
        if not match:
            continue
        key, raw = match.group(1), match.group(2)
        if key == "tags":
            result.tags_result = parse_tags(raw)
        else:
            result.metadata[key] = raw

    return result


def strip_frontmatter(text: str) -> str:
    """
    Return only the body of a prompt, or the text unchanged if it has no header.

    The blank line that render_header() writes after the block is dropped so
    that re-rendering does not accumulate empty lines.
    """
    parsed = parse_frontmatter(text)
    if parsed is None:
        return text
    body = parsed.body
    if body.startswith("\n"):
        body = body[1:]
    return body


def missing_header_fields(text: str) -> list[str]:
    """
    List required header fields absent from a prompt's metadata block.

    Stricter than the parser: the file must open with ``---`` on its first
    line and the block must be closed. Only the presence of ``key:`` at the
    start of a header line is checked, not its value.
    """
    lines = text.split("\n")
    if not lines or lines[0] != DELIMITER:
        return list(REQUIRED_FIELDS)

    try:
        end = lines.index(DELIMITER, 1)
    except ValueError:
        return list(REQUIRED_FIELDS)

    header = lines[1:end]
    return [
        name for name in REQUIRED_FIELDS
        if not any(line.startswith(f"{name}:") for line in header)
    ]


def validate_header(text: str) -> bool:
    """True when the prompt text carries every required header field."""
    return not missing_header_fields(text)


def format_tags(tags: list[str]) -> str:
    return "[" + ", ".join(json.dumps(tag) for tag in tags) + "]"


def render_header(
    name: str,
    namespace: str,
    version: str,
    author: str,
    description: str,
    created: str,
    tags: Optional[list[str]] = None,
) -> str:
    """Build the metadata block, followed by the blank line that precedes the body."""
    lines = [
        DELIMITER,
        f"name: {name}",
        f"namespace: {namespace}",
        f"version: {version}",
        f"author: {author}",
        f"description: {description}",
        f"created: {created}",
    ]
    if tags:
        lines.append(f"tags: {format_tags(tags)}")
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n\n"


def render_prompt(meta: Any, body: str) -> str:
    """Render a full prompt file from any object carrying the header attributes."""
    header = render_header(
        name=meta.name,
        namespace=meta.namespace,
        version=meta.version,
        author=meta.author,
        description=meta.description,
        created=meta.created,
        tags=list(meta.tags),
    )
    return header + body
