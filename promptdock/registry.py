"""
Prompt registry for PromptDock.

The registry is a directory tree: each immediate subdirectory of the root is
a namespace, and each markdown file inside it with a frontmatter block is a
prompt. Nothing is cached; every call re-reads the filesystem so results are
never staler than the last file operation.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union
import logging
import re

from .errors import NotReadable
from .frontmatter import Frontmatter, parse_frontmatter
from .versioning import version_key

logger = logging.getLogger(__name__)

PROMPT_SUFFIX = ".md"
LATEST = "latest"

DEFAULT_AUTHOR = "Unknown"
DEFAULT_DESCRIPTION = "No description"
DEFAULT_CREATED = "Unknown"
DEFAULT_RECORD_VERSION = "0.0.0"

_VERSION_SUFFIX = re.compile(r"-\d+\.\d+\.\d+$")


def sanitize_name(name: str) -> str:
    """Lowercase a prompt name and reduce it to letters, digits and single hyphens."""
    name = re.sub(r"[^a-z0-9-]", "-", name.lower())
    return re.sub(r"-+", "-", name)


def versioned_filename(name: str, version: str) -> str:
    return f"{name}-{version}{PROMPT_SUFFIX}"


@dataclass
class PromptRecord:
    """One prompt file on disk."""

    name: str
    namespace: str
    version: str
    author: str = DEFAULT_AUTHOR
    description: str = DEFAULT_DESCRIPTION
    created: str = DEFAULT_CREATED
    tags: list[str] = field(default_factory=list)
    content: str = ""
    source_path: Optional[Path] = None

    # Fields that were filled in because the file did not provide them
    defaulted: frozenset[str] = frozenset()

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.namespace, self.name, self.version)

    @property
    def label(self) -> str:
        """``namespace/name@version`` for display."""
        return f"{self.namespace}/{self.name}@{self.version}"

    @property
    def filename(self) -> str:
        return self.source_path.name if self.source_path else versioned_filename(self.name, self.version)

    @classmethod
    def from_frontmatter(cls, parsed: Frontmatter, path: Path) -> "PromptRecord":
        """
        Build a record from a parsed file.

        namespace falls back to the enclosing folder and name to the file
        stem without its version suffix.
        """
        defaulted = set()

        def pick(key: str, fallback: str) -> str:
            value = parsed.get(key)
            if value is None:
                defaulted.add(key)
                return fallback
            return value

        stem = _VERSION_SUFFIX.sub("", path.stem)
        record = cls(
            name=pick("name", stem),
            namespace=pick("namespace", path.parent.name),
            version=pick("version", DEFAULT_RECORD_VERSION),
            author=pick("author", DEFAULT_AUTHOR),
            description=pick("description", DEFAULT_DESCRIPTION),
            created=pick("created", DEFAULT_CREATED),
            tags=parsed.tags,
            content=parsed.body,
            source_path=path,
        )
        if parsed.tags_result.defaulted:
            defaulted.add("tags")
        record.defaulted = frozenset(defaulted)
        return record


@dataclass(frozen=True)
class PromptSpecifier:
    """Parsed form of ``[namespace/]name[@version]``."""

    name: str
    namespace: Optional[str] = None
    version: Optional[str] = None

    @property
    def is_latest(self) -> bool:
        return self.version == LATEST

    def matches(self, record: PromptRecord) -> bool:
        if record.name != self.name:
            return False
        if self.namespace is not None and record.namespace != self.namespace:
            return False
        if self.version is not None and not self.is_latest and record.version != self.version:
            return False
        return True

    def __str__(self) -> str:
        text = f"{self.namespace}/{self.name}" if self.namespace is not None else self.name
        if self.version is not None:
            text += f"@{self.version}"
        return text


def parse_specifier(raw: str) -> PromptSpecifier:
    """
    Parse ``name``, ``namespace/name``, ``name@version`` or
    ``namespace/name@version``.

    The last ``@`` separates the version, the first ``/`` the namespace.
    Characters are not validated here; a bad name just matches nothing.
    """
    path, version = raw, None
    at = raw.rfind("@")
    if at != -1:
        path, version = raw[:at], raw[at + 1:]

    if "/" in path:
        namespace, name = path.split("/", 1)
        return PromptSpecifier(name=name, namespace=namespace, version=version)
    return PromptSpecifier(name=path, version=version)


class ResolutionStatus(str, Enum):
    NOT_FOUND = "not_found"
    UNIQUE = "unique"
    AMBIGUOUS = "ambiguous"


@dataclass
class Resolution:
    """Outcome of resolving a specifier; matches are ordered newest first."""

    specifier: PromptSpecifier
    status: ResolutionStatus
    matches: list[PromptRecord] = field(default_factory=list)

    @property
    def record(self) -> Optional[PromptRecord]:
        if self.status == ResolutionStatus.UNIQUE:
            return self.matches[0]
        return None

    @property
    def found(self) -> bool:
        return self.status != ResolutionStatus.NOT_FOUND


def newest_first(records: Iterable[PromptRecord]) -> list[PromptRecord]:
    """Order by version descending; equal versions by file name ascending."""
    by_name = sorted(records, key=lambda r: r.filename)
    return sorted(by_name, key=lambda r: version_key(r.version), reverse=True)


def latest_only(records: Iterable[PromptRecord]) -> list[PromptRecord]:
    """Keep the newest version of each namespace/name pair."""
    groups: dict[tuple[str, str], list[PromptRecord]] = {}
    for record in records:
        groups.setdefault((record.namespace, record.name), []).append(record)
    return [newest_first(group)[0] for group in groups.values()]


def sort_for_listing(records: Iterable[PromptRecord]) -> list[PromptRecord]:
    """Namespace, then name, then newest version first."""
    ordered = newest_first(records)
    return sorted(ordered, key=lambda r: (r.namespace, r.name))


class PromptRegistry:
    """
    Read access to a prompt repository checkout.

    Missing directories read as empty. A directory or file that exists but
    cannot be read raises NotReadable, so "no prompts yet" and "permission
    denied" stay distinguishable.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _entries(self, directory: Path) -> list[Path]:
        try:
            return sorted(directory.iterdir())
        except FileNotFoundError:
            return []
        except NotADirectoryError:
            return []
        except OSError as e:
            raise NotReadable(directory, e.strerror or str(e)) from e

    def namespaces(self) -> list[str]:
        return [
            entry.name for entry in self._entries(self.root)
            if entry.is_dir() and not entry.name.startswith(".")
        ]

    def load(self, path: Path) -> Optional[PromptRecord]:
        """Parse one file; None when it is not a prompt."""
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError:
            logger.warning(f"Skipping {path}: not valid UTF-8")
            return None
        except OSError as e:
            raise NotReadable(path, e.strerror or str(e)) from e

        parsed = parse_frontmatter(text)
        if parsed is None:
            logger.debug(f"Skipping {path}: no frontmatter")
            return None
        return PromptRecord.from_frontmatter(parsed, path)

    def list_all(self) -> list[PromptRecord]:
        """Every prompt under the root, in no guaranteed order."""
        records = []
        for namespace in self.namespaces():
            for path in self._entries(self.root / namespace):
                if path.suffix != PROMPT_SUFFIX or not path.is_file():
                    continue
                record = self.load(path)
                if record is not None:
                    records.append(record)
        return records

    def resolve(self, specifier: Union[str, PromptSpecifier]) -> Resolution:
        """
        Find the prompt(s) a specifier refers to.

        ``@latest`` always collapses to the newest match. Otherwise several
        matches are returned as AMBIGUOUS for the caller to choose from.
        """
        if isinstance(specifier, str):
            specifier = parse_specifier(specifier)

        matches = newest_first(r for r in self.list_all() if specifier.matches(r))

        if not matches:
            return Resolution(specifier, ResolutionStatus.NOT_FOUND)
        if specifier.is_latest or len(matches) == 1:
            return Resolution(specifier, ResolutionStatus.UNIQUE, matches[:1])
        return Resolution(specifier, ResolutionStatus.AMBIGUOUS, matches)

    def find_file(self, namespace: str, name: str, version: str) -> Optional[Path]:
        """
        Locate a prompt by path convention.

        Tries ``<namespace>/<name>-<version>.md`` first, then the legacy
        unversioned ``<namespace>/<name>.md``.
        """
        directory = self.root / namespace
        for candidate in (directory / versioned_filename(name, version), directory / f"{name}{PROMPT_SUFFIX}"):
            if candidate.is_file():
                return candidate
        return None

    def path_for(self, namespace: str, name: str, version: str) -> Path:
        """Where a new version of a prompt should be written."""
        return self.root / namespace / versioned_filename(name, version)
