"""
Notion mirror for project prompts.

Copies prompts from a project's ``<prompt>/<folder>/*.md`` layout into a
Notion database, one page per prompt, matched on Name + Namespace + Folder.
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Optional
import logging
import re

from notion_client import APIResponseError, Client
from notion_client.helpers import collect_paginated_api

from .config import NotionConfig
from .frontmatter import parse_frontmatter
from .registry import PromptRecord

logger = logging.getLogger(__name__)

# Notion rejects rich_text segments longer than this
RICH_TEXT_LIMIT = 2000
DOCUMENTATION_FILE = "documentation.md"

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DATABASE_PROPERTIES = {
    "Name": {"title": {}},
    "Namespace": {"select": {"options": []}},
    "Folder": {"select": {"options": []}},
    "Version": {"rich_text": {}},
    "Author": {"rich_text": {}},
    "Description": {"rich_text": {}},
    "Created": {"date": {}},
    "Tags": {"multi_select": {"options": []}},
    "Content": {"rich_text": {}},
    "File Path": {"rich_text": {}},
    "Last Synced": {"date": {}},
}


@dataclass
class MirroredPrompt:
    """A project prompt and the folder it was found in."""

    record: PromptRecord
    folder: str

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.record.name, self.record.namespace, self.folder)


@dataclass
class SyncSummary:
    created: int = 0
    updated: int = 0
    failed: list[str] = field(default_factory=list)


def _rich_text(text: str) -> list[dict]:
    chunks = [text[i:i + RICH_TEXT_LIMIT] for i in range(0, len(text), RICH_TEXT_LIMIT)] or [""]
    return [{"text": {"content": chunk}} for chunk in chunks]


def _date(value: str) -> dict:
    return {"start": value if _ISO_DATE.match(value) else date.today().isoformat()}


def load_project_prompt(path: Path, prompt_name: str, folder: str) -> MirroredPrompt:
    """
    Read one project prompt file.

    Pulled prompts carry frontmatter; hand-written local ones don't and get
    local defaults instead.
    """
    text = path.read_text(encoding="utf-8")
    parsed = parse_frontmatter(text)
    today = date.today().isoformat()

    if parsed is not None and parsed.metadata:
        record = PromptRecord(
            name=parsed.get("name", path.stem),
            namespace=parsed.get("namespace", prompt_name),
            version=parsed.get("version", "1.0.0"),
            author=parsed.get("author", "Unknown"),
            description=parsed.get("description", "No description"),
            created=parsed.get("created", today),
            tags=parsed.tags or [folder],
            content=parsed.body,
            source_path=path,
        )
    else:
        record = PromptRecord(
            name=path.stem,
            namespace=prompt_name,
            version="1.0.0",
            author="Local",
            description=f"Local prompt from {folder} folder",
            created=today,
            tags=[folder, "local"],
            content=text,
            source_path=path,
        )
    return MirroredPrompt(record=record, folder=folder)


def scan_project(base_dir: Path) -> list[MirroredPrompt]:
    """Collect prompts from ``<base>/<prompt>/<folder>/*.md``."""
    prompts = []
    for prompt_dir in sorted(Path(base_dir).iterdir()):
        if not prompt_dir.is_dir() or prompt_dir.name.startswith("."):
            continue
        for folder in sorted(prompt_dir.iterdir()):
            if not folder.is_dir():
                continue
            for path in sorted(folder.glob("*.md")):
                if path.name == DOCUMENTATION_FILE:
                    continue
                try:
                    prompts.append(load_project_prompt(path, prompt_dir.name, folder.name))
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning(f"Could not parse {path}: {e}")
    return prompts


def page_properties(prompt: MirroredPrompt, full: bool = True) -> dict[str, Any]:
    """Notion property payload; ``full=False`` leaves out the identifying fields."""
    record = prompt.record
    properties: dict[str, Any] = {
        "Version": {"rich_text": _rich_text(record.version)},
        "Author": {"rich_text": _rich_text(record.author)},
        "Description": {"rich_text": _rich_text(record.description)},
        "Tags": {"multi_select": [{"name": tag} for tag in record.tags]},
        "Content": {"rich_text": _rich_text(record.content)},
        "Last Synced": {"date": {"start": date.today().isoformat()}},
    }
    if full:
        properties.update({
            "Name": {"title": [{"text": {"content": record.name}}]},
            "Namespace": {"select": {"name": record.namespace}},
            "Folder": {"select": {"name": prompt.folder}},
            "Created": {"date": _date(record.created)},
            "File Path": {"rich_text": _rich_text(str(record.source_path or ""))},
        })
    return properties


def property_value(page: dict, name: str) -> str:
    prop = page.get("properties", {}).get(name)
    if not prop:
        return ""
    kind = prop.get("type")
    if kind in ("title", "rich_text"):
        parts = prop.get(kind) or []
        if not parts:
            return ""
        return parts[0].get("plain_text") or parts[0].get("text", {}).get("content", "")
    if kind == "select":
        return (prop.get("select") or {}).get("name", "")
    return ""


class NotionMirror:
    """Upserts project prompts into a Notion database."""

    def __init__(self, config: NotionConfig, client: Optional[Client] = None):
        self.config = config
        self.client = client or Client(auth=config.token)

    def test_connection(self) -> bool:
        try:
            self.client.databases.retrieve(database_id=self.config.database_id)
        except APIResponseError as e:
            logger.debug(f"Notion connection test failed: {e}")
            return False
        return True

    def setup_database(self) -> None:
        """Create or update the database columns prompts are written to."""
        self.client.databases.update(
            database_id=self.config.database_id,
            properties=DATABASE_PROPERTIES,
        )

    def existing_pages(self) -> dict[tuple[str, str, str], str]:
        pages = collect_paginated_api(
            self.client.databases.query,
            database_id=self.config.database_id,
        )
        return {
            (
                property_value(page, "Name"),
                property_value(page, "Namespace"),
                property_value(page, "Folder"),
            ): page["id"]
            for page in pages
        }

    def sync(self, prompts: list[MirroredPrompt]) -> SyncSummary:
        summary = SyncSummary()
        existing = self.existing_pages()

        for prompt in prompts:
            try:
                page_id = existing.get(prompt.key)
                if page_id:
                    self.client.pages.update(page_id=page_id, properties=page_properties(prompt, full=False))
                    summary.updated += 1
                else:
                    self.client.pages.create(
                        parent={"database_id": self.config.database_id},
                        properties=page_properties(prompt),
                    )
                    summary.created += 1
            except APIResponseError as e:
                logger.error(f"Failed to sync {prompt.record.name}: {e}")
                summary.failed.append(prompt.record.name)

        return summary
