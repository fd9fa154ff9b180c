"""
Import of existing AI-assistant instruction files.

Finds CLAUDE.md / .cursorrules style files in a working tree and turns them
into registry prompts, optionally split into one prompt per section.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional
import logging
import re

from .errors import NotReadable
from .frontmatter import parse_tags
from .registry import sanitize_name
from .versioning import DEFAULT_VERSION

logger = logging.getLogger(__name__)

SKIP_DIRS = {"node_modules", ".git", "dist", "build", ".next", "target"}

CLAUDE_FILENAMES = {"claude.md", "claude.local.md"}
CURSOR_FILENAMES = {".cursorrules"}

DEFAULT_NAMESPACE = "imported"

_CURSOR_SECTION = re.compile(r"^[A-Z_][A-Z_\s]*:?\s*$")
_CURSOR_CONTENT_HINTS = ("cursorrules", "cursor", "code_style", "ai_reasoning")


class FileType(str, Enum):
    CLAUDE = "claude"
    CURSOR = "cursor"


# Tags written by each import path
PUSH_TAGS = {
    FileType.CLAUDE: ["claude", "context", "pushed"],
    FileType.CURSOR: ["cursor", "rules", "pushed"],
}
PULL_TAGS = {
    FileType.CLAUDE: ["claude", "pulled"],
    FileType.CURSOR: ["cursor", "rules", "pulled"],
}
SPLIT_TAGS = {
    FileType.CLAUDE: ["claude", "pulled", "split"],
    FileType.CURSOR: ["cursor", "rules", "pulled", "split"],
}
LOCAL_TARGETS = {
    FileType.CLAUDE: "CLAUDE.md",
    FileType.CURSOR: ".cursorrules",
}


@dataclass
class FoundFile:
    """An instruction file discovered in a working tree."""

    path: Path
    file_type: FileType
    name: str
    description: str
    content: str
    size: int


@dataclass
class ImportedPrompt:
    """A foreign instruction file converted to registry fields."""

    name: str
    description: str
    content: str
    file_type: FileType
    namespace: str = DEFAULT_NAMESPACE
    version: str = DEFAULT_VERSION
    tags: list[str] = field(default_factory=list)


@dataclass
class Section:
    title: str
    content: str = ""


def classify(path: Path) -> Optional[FileType]:
    """File type from the name alone; None for files push does not pick up."""
    name = path.name.lower()
    suffix = path.suffix.lower()
    if name in CLAUDE_FILENAMES or suffix == ".claude":
        return FileType.CLAUDE
    if name in CURSOR_FILENAMES or suffix in (".cursorrules", ".mdc"):
        return FileType.CURSOR
    return None


def detect_file_type(path: Path, content: str) -> FileType:
    """File type from the name, then the content; markdown defaults to Claude."""
    by_name = classify(path)
    if by_name is not None:
        return by_name
    if "claude" in path.name.lower():
        return FileType.CLAUDE
    if any(hint in content for hint in _CURSOR_CONTENT_HINTS):
        return FileType.CURSOR
    return FileType.CLAUDE


def _strip_quotes(value: str) -> str:
    return value.strip().replace('"', "").replace("'", "")


def _header_end(lines: list[str], allow_dots: bool = True) -> int:
    """Index of the line closing a leading frontmatter block, or -1."""
    if not lines or lines[0] != "---":
        return -1
    closers = ("---", "...") if allow_dots else ("---",)
    for i in range(1, len(lines)):
        if lines[i] in closers:
            return i
    return -1


def _header_value(lines: list[str], key: str) -> Optional[str]:
    """
    Value of ``key:`` in a foreign file's frontmatter, quotes removed.

    Foreign files (Cursor .mdc, Claude docs) commonly quote titles, unlike
    registry prompts whose values are kept verbatim.
    """
    if not lines or lines[0] != "---":
        return None
    end = _header_end(lines)
    stop = end if end != -1 else len(lines)
    prefix = f"{key}:"
    for line in lines[1:stop]:
        if line.startswith(prefix):
            return _strip_quotes(line[len(prefix):])
    return None


def _first_heading(lines: list[str]) -> Optional[str]:
    for line in lines:
        if line.startswith("#"):
            return re.sub(r"^#+\s*", "", line).strip()
    return None


def extract_title(content: str, path: Path, file_type: FileType) -> str:
    lines = content.split("\n")

    title = _header_value(lines, "title")
    if title:
        return title

    heading = _first_heading(lines)
    if heading:
        return heading

    if file_type == FileType.CURSOR:
        return "cursor-rules"

    stem = path.stem
    return "claude-context" if stem.lower() == "claude" else stem


def extract_description(content: str, file_type: FileType) -> str:
    lines = content.split("\n")

    description = _header_value(lines, "description")
    if description:
        return description

    seen_heading = False
    for line in lines:
        text = line.strip()
        if not text:
            continue
        if text.startswith("#") or text.startswith("---"):
            seen_heading = True
            continue
        if seen_heading and len(text) > 10:
            return text[:100] + ("..." if len(text) > 100 else "")

    if file_type == FileType.CURSOR:
        return "Cursor AI rules and guidelines"
    return "Claude context and instructions"


def scan_directory(directory: Path, max_depth: int = 3) -> list[FoundFile]:
    """Find Claude and Cursor instruction files up to max_depth levels deep."""
    found: list[FoundFile] = []
    _scan(Path(directory), max_depth, 0, found)
    return found


def _scan(directory: Path, max_depth: int, depth: int, found: list[FoundFile]) -> None:
    if depth >= max_depth:
        return

    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        logger.debug(f"Skipping unreadable directory {directory}: {e}")
        return

    for entry in entries:
        if entry.is_dir():
            if entry.name not in SKIP_DIRS:
                _scan(entry, max_depth, depth + 1, found)
            continue

        file_type = classify(entry)
        if file_type is None or not entry.is_file():
            continue

        try:
            content = entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping {entry}: {e}")
            continue

        found.append(FoundFile(
            path=entry,
            file_type=file_type,
            name=extract_title(content, entry, file_type),
            description=extract_description(content, file_type),
            content=content,
            size=entry.stat().st_size,
        ))


def _body_after_header(lines: list[str], allow_dots: bool = True) -> str:
    end = _header_end(lines, allow_dots)
    start = 0 if end == -1 else end + 1
    return "\n".join(lines[start:]).strip()


def parse_claude_file(content: str, path: Path) -> ImportedPrompt:
    lines = content.split("\n")
    end = _header_end(lines)
    header = lines[1:end] if end != -1 else []

    title = _header_value(lines, "title") or ""
    description = _header_value(lines, "description") or ""
    tags: list[str] = []
    for line in header:
        if line.startswith("tags:"):
            raw = line[len("tags:"):].strip()
            if raw.startswith("[") and raw.endswith("]"):
                parsed = parse_tags(raw)
                if parsed.defaulted:
                    tags = [_strip_quotes(t) for t in raw[1:-1].split(",") if t.strip()]
                else:
                    tags = parsed.value

    if not title:
        title = _first_heading(lines) or path.stem

    return ImportedPrompt(
        name=sanitize_name(title),
        description=description or "Pulled Claude prompt",
        content=_body_after_header(lines),
        file_type=FileType.CLAUDE,
        tags=tags or list(PULL_TAGS[FileType.CLAUDE]),
    )


def parse_cursor_file(content: str, path: Path) -> ImportedPrompt:
    lines = content.split("\n")
    description = _header_value(lines, "description") or ""

    name = path.stem if path.suffix else path.name
    if name in (".cursorrules", ""):
        name = "cursor-rules"

    return ImportedPrompt(
        name=sanitize_name(name),
        description=description or "Pulled Cursor rules",
        content=_body_after_header(lines, allow_dots=False),
        file_type=FileType.CURSOR,
        tags=list(PULL_TAGS[FileType.CURSOR]),
    )


def parse_file(path: Path) -> ImportedPrompt:
    """Read and convert a Claude or Cursor file."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise NotReadable(Path(path), e.strerror or str(e)) from e

    file_type = detect_file_type(Path(path), content)
    if file_type == FileType.CLAUDE:
        return parse_claude_file(content, Path(path))
    return parse_cursor_file(content, Path(path))


def split_into_sections(content: str, file_type: FileType) -> list[Section]:
    """
    Split a file into sections at markdown headings.

    Cursor files also split at ALL-CAPS label lines such as ``CODE_STYLE:``.
    Text before the first heading becomes ``main-context`` (Claude) or
    ``general-rules`` (Cursor). Empty sections are dropped.
    """
    lines = content.split("\n")
    end = _header_end(lines)
    start = 0 if end == -1 else end + 1

    sections: list[Section] = []
    current: Optional[Section] = None

    for line in lines[start:]:
        is_heading = line.startswith("#")
        is_label = file_type == FileType.CURSOR and bool(_CURSOR_SECTION.match(line))

        if is_heading or is_label:
            if current and current.content.strip():
                sections.append(current)
            if is_heading:
                title = re.sub(r"^#+\s*", "", line).strip()
            else:
                title = re.sub(r"\s+", "-", re.sub(r":?\s*$", "", line).strip().lower())
            current = Section(title=title or f"section-{len(sections) + 1}")
            continue

        if current is None:
            current = Section(title="main-context" if file_type == FileType.CLAUDE else "general-rules")
        current.content += line + "\n"

    if current and current.content.strip():
        sections.append(current)

    return sections
