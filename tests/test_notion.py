"""Tests for the Notion mirror, using a mocked Notion client."""

from pathlib import Path
from unittest.mock import MagicMock

from promptdock.config import NotionConfig
from promptdock.notion import (
    DATABASE_PROPERTIES,
    RICH_TEXT_LIMIT,
    NotionMirror,
    page_properties,
    property_value,
    scan_project,
)


def _page(page_id: str, name: str, namespace: str, folder: str) -> dict:
    return {
        "id": page_id,
        "properties": {
            "Name": {"type": "title", "title": [{"plain_text": name}]},
            "Namespace": {"type": "select", "select": {"name": namespace}},
            "Folder": {"type": "select", "select": {"name": folder}},
        },
    }


def _client(pages: list) -> MagicMock:
    client = MagicMock()
    client.databases.query.return_value = {"results": pages, "has_more": False, "next_cursor": None}
    return client


def _project(tmp_path: Path) -> Path:
    system = tmp_path / "web-prompts" / "system"
    system.mkdir(parents=True)
    (system / "documentation.md").write_text("# docs")
    (system / "local.md").write_text("Be concise.")
    (system / "pulled.md").write_text(
        '---\nname: pulled\nnamespace: web\nversion: 1.2.0\nauthor: Ann\n'
        'description: Pulled one\ncreated: 2024-01-01\ntags: ["x"]\n---\nBody'
    )
    return tmp_path


class TestScanProject:
    def test_reads_prompts_and_skips_docs(self, tmp_path: Path):
        prompts = scan_project(_project(tmp_path))

        assert [p.key for p in prompts] == [
            ("local", "web-prompts", "system"),
            ("pulled", "web", "system"),
        ]

    def test_local_defaults(self, tmp_path: Path):
        local = scan_project(_project(tmp_path))[0].record
        assert local.author == "Local"
        assert local.tags == ["system", "local"]
        assert local.content == "Be concise."

    def test_frontmatter_fields(self, tmp_path: Path):
        pulled = scan_project(_project(tmp_path))[1].record
        assert pulled.version == "1.2.0"
        assert pulled.tags == ["x"]


class TestProperties:
    def test_long_content_is_chunked(self, tmp_path: Path):
        prompt = scan_project(_project(tmp_path))[0]
        prompt.record.content = "x" * (RICH_TEXT_LIMIT + 5)

        chunks = page_properties(prompt)["Content"]["rich_text"]

        assert [len(c["text"]["content"]) for c in chunks] == [RICH_TEXT_LIMIT, 5]

    def test_update_payload_omits_identity(self, tmp_path: Path):
        prompt = scan_project(_project(tmp_path))[0]
        properties = page_properties(prompt, full=False)
        assert "Name" not in properties
        assert "Namespace" not in properties

    def test_property_value(self):
        page = _page("p1", "foo", "web", "system")
        assert property_value(page, "Name") == "foo"
        assert property_value(page, "Folder") == "system"
        assert property_value(page, "Missing") == ""


class TestNotionMirror:
    def test_setup_database(self):
        client = _client([])
        NotionMirror(NotionConfig(token="t", database_id="db"), client=client).setup_database()
        client.databases.update.assert_called_once_with(database_id="db", properties=DATABASE_PROPERTIES)

    def test_sync_creates_and_updates(self, tmp_path: Path):
        client = _client([_page("page-1", "pulled", "web", "system")])
        mirror = NotionMirror(NotionConfig(token="t", database_id="db"), client=client)

        summary = mirror.sync(scan_project(_project(tmp_path)))

        assert (summary.created, summary.updated, summary.failed) == (1, 1, [])
        client.pages.update.assert_called_once()
        assert client.pages.update.call_args.kwargs["page_id"] == "page-1"
        created = client.pages.create.call_args.kwargs
        assert created["parent"] == {"database_id": "db"}
        assert created["properties"]["Name"]["title"][0]["text"]["content"] == "local"

    def test_connection(self):
        client = _client([])
        assert NotionMirror(NotionConfig(token="t", database_id="db"), client=client).test_connection()
        client.databases.retrieve.assert_called_once_with(database_id="db")
