"""Tests for prompt frontmatter parsing and rendering."""

from types import SimpleNamespace

from promptdock.frontmatter import (
    Defaulted,
    Ok,
    missing_header_fields,
    parse_frontmatter,
    parse_tags,
    render_header,
    render_prompt,
    strip_frontmatter,
    validate_header,
)


class TestParseFrontmatter:
    """Tests for parse_frontmatter."""

    def test_basic_header(self):
        text = "---\nname: foo\nversion: 1.2.0\n---\nBody"
        parsed = parse_frontmatter(text)

        assert parsed is not None
        assert parsed.metadata == {"name": "foo", "version": "1.2.0"}
        assert parsed.body == "Body"

    def test_no_delimiters_is_not_a_prompt(self):
        assert parse_frontmatter("just some text") is None
        assert parse_frontmatter("---\nname: foo\n") is None
        assert parse_frontmatter("") is None

    def test_values_are_kept_verbatim(self):
        parsed = parse_frontmatter('---\ndescription: "quoted": yes\n---\n')
        assert parsed.get("description") == '"quoted": yes'

    def test_lines_without_key_are_skipped(self):
        parsed = parse_frontmatter("---\nname: foo\nnot a field\n- item\n---\n")
        assert parsed.metadata == {"name": "foo"}

    def test_empty_value_reads_as_absent(self):
        parsed = parse_frontmatter("---\nauthor:\n---\n")
        assert parsed.metadata["author"] == ""
        assert parsed.get("author") is None
        assert parsed.get("author", "Unknown") == "Unknown"

    def test_tags_json_array(self):
        parsed = parse_frontmatter('---\ntags: ["a", "b"]\n---\n')
        assert parsed.tags == ["a", "b"]
        assert not parsed.tags_result.defaulted

    def test_invalid_tags_default_to_empty(self):
        parsed = parse_frontmatter("---\ntags: [a, b\n---\n")
        assert parsed.tags == []
        assert parsed.tags_result.defaulted

    def test_missing_tags_default_to_empty(self):
        parsed = parse_frontmatter("---\nname: foo\n---\n")
        assert parsed.tags == []
        assert parsed.tags_result.defaulted

    def test_body_keeps_later_delimiters(self):
        parsed = parse_frontmatter("---\nname: foo\n---\nintro\n---\nmore")
        assert parsed.body == "intro\n---\nmore"


class TestParseTags:
    def test_non_string_elements_are_stringified(self):
        assert parse_tags("[1, true]") == Ok(["1", "True"])

    def test_non_list_json(self):
        assert parse_tags('"tag"') == Defaulted([])

    def test_garbage(self):
        assert parse_tags("nope") == Defaulted([])


class TestStripFrontmatter:
    def test_drops_header_and_blank_line(self):
        text = render_header("foo", "web", "1.0.0", "me", "desc", "2024-01-01") + "Body\n"
        assert strip_frontmatter(text) == "Body\n"

    def test_text_without_header_is_unchanged(self):
        assert strip_frontmatter("plain text") == "plain text"


class TestHeaderValidation:
    def test_complete_header(self):
        text = render_header("foo", "web", "1.0.0", "me", "desc", "2024-01-01")
        assert missing_header_fields(text) == []
        assert validate_header(text)

    def test_missing_fields_are_listed(self):
        text = "---\nname: foo\nnamespace: web\n---\n"
        assert missing_header_fields(text) == ["version", "author", "description", "created"]

    def test_header_must_start_on_first_line(self):
        text = "\n" + render_header("foo", "web", "1.0.0", "me", "desc", "2024-01-01")
        assert not validate_header(text)

    def test_unclosed_header(self):
        assert not validate_header("---\nname: foo\nnamespace: web\n")


class TestRender:
    def test_header_layout(self):
        header = render_header("foo", "web", "1.0.0", "me", "desc", "2024-01-01", tags=["a", "b"])
        assert header == (
            "---\n"
            "name: foo\n"
            "namespace: web\n"
            "version: 1.0.0\n"
            "author: me\n"
            "description: desc\n"
            "created: 2024-01-01\n"
            'tags: ["a", "b"]\n'
            "---\n\n"
        )

    def test_tags_line_omitted_without_tags(self):
        header = render_header("foo", "web", "1.0.0", "me", "desc", "2024-01-01")
        assert "tags:" not in header

    def test_rendered_prompt_parses_back(self):
        meta = SimpleNamespace(
            name="foo",
            namespace="web",
            version="1.2.3",
            author="me",
            description="desc",
            created="2024-01-01",
            tags=["x"],
        )
        parsed = parse_frontmatter(render_prompt(meta, "Hello"))

        assert parsed.get("name") == "foo"
        assert parsed.get("version") == "1.2.3"
        assert parsed.tags == ["x"]
        assert parsed.body == "\nHello"
