"""Tests for the prompt registry and specifier resolution."""

import os
from pathlib import Path

import pytest

from conftest import write_prompt
from promptdock.errors import NotReadable
from promptdock.frontmatter import render_prompt
from promptdock.registry import (
    PromptRegistry,
    PromptSpecifier,
    ResolutionStatus,
    latest_only,
    parse_specifier,
    sanitize_name,
    sort_for_listing,
)


class TestParseSpecifier:
    def test_name_only(self):
        assert parse_specifier("foo") == PromptSpecifier(name="foo")

    def test_namespace_and_version(self):
        assert parse_specifier("web/foo@1.0.0") == PromptSpecifier("foo", "web", "1.0.0")

    def test_latest(self):
        spec = parse_specifier("foo@latest")
        assert spec.is_latest
        assert spec.namespace is None

    def test_last_at_separates_version(self):
        assert parse_specifier("web/a@b@1.0.0") == PromptSpecifier("a@b", "web", "1.0.0")

    def test_first_slash_separates_namespace(self):
        assert parse_specifier("web/a/b") == PromptSpecifier("a/b", "web")

    def test_str(self):
        assert str(PromptSpecifier("foo", "web", "1.0.0")) == "web/foo@1.0.0"
        assert str(PromptSpecifier("foo")) == "foo"
        assert str(parse_specifier("/foo@")) == "/foo@"

    def test_empty_parts_are_kept(self):
        assert parse_specifier("/bar") == PromptSpecifier("bar", "")
        assert parse_specifier("bar@") == PromptSpecifier("bar", None, "")


class TestSanitizeName:
    def test_lowercases_and_replaces(self):
        assert sanitize_name("My Great_Prompt!") == "my-great-prompt-"

    def test_collapses_hyphens(self):
        assert sanitize_name("a  --  b") == "a-b"


class TestListAll:
    def test_lists_every_prompt(self, registry_root: Path):
        records = PromptRegistry(registry_root).list_all()
        assert sorted(r.label for r in records) == ["api/bar@1.0.0", "web/foo@1.0.0", "web/foo@2.0.0"]

    def test_missing_root_is_empty(self, tmp_path: Path):
        assert PromptRegistry(tmp_path / "nope").list_all() == []

    def test_skips_files_without_header(self, registry_root: Path):
        (registry_root / "web" / "notes.md").write_text("no header here")
        assert len(PromptRegistry(registry_root).list_all()) == 3

    def test_skips_dot_directories(self, registry_root: Path):
        write_prompt(registry_root, ".git", "hidden", "1.0.0")
        assert "hidden" not in [r.name for r in PromptRegistry(registry_root).list_all()]

    def test_skips_non_utf8_files(self, registry_root: Path):
        (registry_root / "web" / "binary.md").write_bytes(b"---\nname: \xff\xfe\n---\n")
        assert len(PromptRegistry(registry_root).list_all()) == 3

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs POSIX permissions")
    def test_unreadable_namespace_raises(self, registry_root: Path):
        namespace = registry_root / "web"
        namespace.chmod(0)
        try:
            with pytest.raises(NotReadable):
                PromptRegistry(registry_root).list_all()
        finally:
            namespace.chmod(0o755)


class TestDefaults:
    def test_missing_fields_are_defaulted(self, tmp_path: Path):
        path = tmp_path / "web" / "foo-1.2.0.md"
        path.parent.mkdir()
        path.write_text("---\ntags: nope\n---\nBody")

        record = PromptRegistry(tmp_path).load(path)

        assert record.name == "foo"
        assert record.namespace == "web"
        assert record.version == "0.0.0"
        assert record.author == "Unknown"
        assert record.description == "No description"
        assert record.tags == []
        assert {"name", "namespace", "version", "author", "tags"} <= record.defaulted

    def test_metadata_namespace_wins_over_folder(self, tmp_path: Path):
        path = write_prompt(tmp_path, "folder", "foo", "1.0.0")
        path.write_text(path.read_text().replace("namespace: folder", "namespace: other"))
        assert PromptRegistry(tmp_path).load(path).namespace == "other"


class TestResolve:
    def test_unique(self, registry_root: Path):
        resolution = PromptRegistry(registry_root).resolve("web/foo@1.0.0")
        assert resolution.status == ResolutionStatus.UNIQUE
        assert resolution.record.description == "First foo"

    def test_ambiguous_is_newest_first(self, registry_root: Path):
        resolution = PromptRegistry(registry_root).resolve("foo")
        assert resolution.status == ResolutionStatus.AMBIGUOUS
        assert resolution.record is None
        assert [r.version for r in resolution.matches] == ["2.0.0", "1.0.0"]

    def test_latest(self, registry_root: Path):
        resolution = PromptRegistry(registry_root).resolve("foo@latest")
        assert resolution.status == ResolutionStatus.UNIQUE
        assert resolution.record.version == "2.0.0"

    def test_latest_compares_numerically(self, tmp_path: Path):
        write_prompt(tmp_path, "web", "foo", "1.9.0")
        write_prompt(tmp_path, "web", "foo", "1.10.0")
        assert PromptRegistry(tmp_path).resolve("web/foo@latest").record.version == "1.10.0"

    def test_not_found(self, registry_root: Path):
        resolution = PromptRegistry(registry_root).resolve("missing")
        assert resolution.status == ResolutionStatus.NOT_FOUND
        assert not resolution.found

    def test_empty_root(self, tmp_path: Path):
        assert PromptRegistry(tmp_path).resolve("foo").status == ResolutionStatus.NOT_FOUND

    def test_namespace_filter(self, registry_root: Path):
        assert PromptRegistry(registry_root).resolve("api/foo").status == ResolutionStatus.NOT_FOUND

    def test_empty_namespace_or_version_matches_nothing(self, registry_root: Path):
        registry = PromptRegistry(registry_root)
        assert registry.resolve("/bar").status == ResolutionStatus.NOT_FOUND
        assert registry.resolve("api/bar@").status == ResolutionStatus.NOT_FOUND
        assert registry.resolve("bar@").status == ResolutionStatus.NOT_FOUND

    def test_same_name_in_two_namespaces(self, registry_root: Path):
        write_prompt(registry_root, "api", "foo", "1.5.0")
        registry = PromptRegistry(registry_root)

        resolution = registry.resolve("foo")
        assert resolution.status == ResolutionStatus.AMBIGUOUS
        assert [r.label for r in resolution.matches] == ["web/foo@2.0.0", "api/foo@1.5.0", "web/foo@1.0.0"]

        scoped = registry.resolve("api/foo")
        assert scoped.status == ResolutionStatus.UNIQUE
        assert scoped.record.label == "api/foo@1.5.0"

    def test_equal_versions_tie_break_on_filename(self, tmp_path: Path):
        write_prompt(tmp_path, "web", "foo", "1.0.0")
        legacy = tmp_path / "web" / "foo.md"
        legacy.write_text((tmp_path / "web" / "foo-1.0.0.md").read_text())

        matches = PromptRegistry(tmp_path).resolve("foo").matches
        assert [m.filename for m in matches] == ["foo-1.0.0.md", "foo.md"]

    def test_resolution_sees_new_files(self, registry_root: Path):
        registry = PromptRegistry(registry_root)
        assert registry.resolve("baz").status == ResolutionStatus.NOT_FOUND
        write_prompt(registry_root, "web", "baz", "1.0.0")
        assert registry.resolve("baz").status == ResolutionStatus.UNIQUE


class TestFindFile:
    def test_versioned_file(self, registry_root: Path):
        path = PromptRegistry(registry_root).find_file("web", "foo", "1.0.0")
        assert path == registry_root / "web" / "foo-1.0.0.md"

    def test_legacy_fallback(self, registry_root: Path):
        legacy = registry_root / "web" / "old.md"
        legacy.write_text("---\nname: old\n---\n")
        assert PromptRegistry(registry_root).find_file("web", "old", "3.0.0") == legacy

    def test_missing(self, registry_root: Path):
        assert PromptRegistry(registry_root).find_file("web", "foo", "9.9.9") is None


class TestOrdering:
    def test_latest_only(self, registry_root: Path):
        records = latest_only(PromptRegistry(registry_root).list_all())
        assert sorted(r.label for r in records) == ["api/bar@1.0.0", "web/foo@2.0.0"]

    def test_sort_for_listing(self, registry_root: Path):
        records = sort_for_listing(PromptRegistry(registry_root).list_all())
        assert [r.label for r in records] == ["api/bar@1.0.0", "web/foo@2.0.0", "web/foo@1.0.0"]


class TestRoundTrip:
    def test_rendered_record_loads_back(self, registry_root: Path):
        registry = PromptRegistry(registry_root)
        original = registry.resolve("web/foo@1.0.0").record

        path = registry.path_for("web", "foo", "1.0.1")
        original.version = "1.0.1"
        path.write_text(render_prompt(original, "Edited body"))

        loaded = registry.load(path)
        assert loaded.identity == ("web", "foo", "1.0.1")
        assert loaded.description == "First foo"
        assert loaded.tags == ["test"]
        assert loaded.content.strip() == "Edited body"
        assert loaded.defaulted == frozenset()
