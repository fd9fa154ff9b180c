"""
Project-side prompt installation.

A project's prompt.json lists prompt sources (a registry repo plus a
namespace). Pulling a source clones the repo, copies the namespace's files
into ``<source>/<folder>/`` and regenerates provider configs.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import tempfile

from .config import ProjectConfig, PromptSource
from .git import GitRepo
from .providers import ProviderHandler

logger = logging.getLogger(__name__)

GENERAL_FOLDER = "general"
SOURCE_SUFFIXES = (".md", ".txt")
GITIGNORE_MARKER = "# PromptDock"

DOCUMENTATION_TEMPLATE = """# {folder} Prompts

## Purpose
Description of what prompts in this folder are for.

## Usage
How to use these prompts.

## Examples
Example use cases or scenarios.
"""


@dataclass
class SourceFile:
    """A file taken from a source repository's namespace."""

    relative_path: str
    content: str
    folder: str
    name: str


@dataclass
class PullResult:
    source: str
    files: int
    written: list[Path]
    provider_files: list[Path]


def collect_source_files(namespace_dir: Path) -> list[SourceFile]:
    """Every .md/.txt file below a namespace, tagged with its parent folder."""
    files = []
    for path in sorted(namespace_dir.rglob("*")):
        if not path.is_file() or path.suffix not in SOURCE_SUFFIXES:
            continue
        relative = path.relative_to(namespace_dir)
        folder = relative.parent.name if len(relative.parts) > 1 else GENERAL_FOLDER
        files.append(SourceFile(
            relative_path=relative.as_posix(),
            content=path.read_text(encoding="utf-8"),
            folder=folder,
            name=path.stem,
        ))
    return files


def download_source(source: PromptSource) -> list[SourceFile]:
    """Clone a source repo into a temporary directory and read its namespace."""
    with tempfile.TemporaryDirectory(prefix="promptdock-") as tmp:
        checkout = Path(tmp) / "repo"
        GitRepo.clone(source.repo, checkout)

        namespace_dir = checkout / source.namespace
        if not namespace_dir.is_dir():
            logger.warning(f"Namespace '{source.namespace}' not found in {source.repo}")
            return []
        return collect_source_files(namespace_dir)


def organize_by_folder(files: list[SourceFile], folders: list[str]) -> dict[str, list[SourceFile]]:
    """Group files into configured folders; anything else lands in ``general``."""
    organized: dict[str, list[SourceFile]] = {folder: [] for folder in folders}
    for file in files:
        target = file.folder if file.folder in folders else GENERAL_FOLDER
        organized.setdefault(target, []).append(file)
    return organized


def save_to_folders(organized: dict[str, list[SourceFile]], source_name: str, base_dir: Path) -> list[Path]:
    written = []
    for folder, files in organized.items():
        if not files:
            continue
        folder_path = base_dir / source_name / folder
        folder_path.mkdir(parents=True, exist_ok=True)
        for file in files:
            output = folder_path / f"{file.name}.md"
            output.write_text(file.content)
            written.append(output)
    return written


def pull_source(
    source: PromptSource,
    config: ProjectConfig,
    base_dir: Path,
    files: Optional[list[SourceFile]] = None,
) -> PullResult:
    """Install one prompt source into the project and regenerate provider files."""
    if files is None:
        files = download_source(source)

    organized = organize_by_folder(files, source.folders)
    written = save_to_folders(organized, source.name, base_dir)

    provider_files: list[Path] = []
    if files and config.providers:
        handler = ProviderHandler(config, base_dir)
        contents = [f.content for group in organized.values() for f in group]
        provider_files = handler.write(handler.generate(contents, only=source.providers or None))

    return PullResult(source=source.name, files=len(files), written=written, provider_files=provider_files)


def update_gitignore(project_root: Path, entries: list[str]) -> list[str]:
    """Append missing entries under a PromptDock marker; returns what was added."""
    path = project_root / ".gitignore"
    content = path.read_text() if path.exists() else ""
    existing = set(content.splitlines())
    new_entries = [entry for entry in entries if entry not in existing]

    if new_entries:
        if content and not content.endswith("\n"):
            content += "\n"
        content += f"\n{GITIGNORE_MARKER}\n" + "\n".join(new_entries) + "\n"
        path.write_text(content)

    return new_entries


def create_folder_structure(project_root: Path, config: ProjectConfig) -> list[Path]:
    """Create prompt folders with documentation stubs, plus provider folders."""
    created = []
    for source in config.prompts:
        for folder in source.folders:
            folder_path = project_root / source.name / folder
            folder_path.mkdir(parents=True, exist_ok=True)
            doc = folder_path / "documentation.md"
            if not doc.exists():
                doc.write_text(DOCUMENTATION_TEMPLATE.format(folder=folder))
            created.append(folder_path)

    for settings in config.providers.values():
        folder_path = project_root / settings.folder
        folder_path.mkdir(parents=True, exist_ok=True)
        created.append(folder_path)

    return created
