"""Unit tests for core/frontmatter.py"""

import pytest

from helpparse.core.frontmatter import FrontmatterExtractor, extract_frontmatter


def test_extract_simple_block():
    """A fenced block at offset 0 becomes metadata; the rest is body."""
    result = extract_frontmatter("---\ntitle: X\n---\n# H1\n## H2")
    assert result.metadata == {"title": "X"}
    assert result.content == "# H1\n## H2"
    assert result.warnings == ()


def test_extract_no_frontmatter():
    """Text without a fence passes through untouched, without warnings."""
    text = "# Just a heading\n\nBody.\n"
    result = extract_frontmatter(text)
    assert result.metadata == {}
    assert result.content == text
    assert result.block == ""
    assert result.warnings == ()


@pytest.mark.parametrize("text", [
    "---\ntitle: X\n# never closed\n",
    "\n---\ntitle: X\n---\nbody",
    "intro\n---\ntitle: X\n---\n",
])
def test_extract_requires_fences_at_offset_zero(text):
    """A missing closing fence or a fence not at the very start is not frontmatter."""
    result = extract_frontmatter(text)
    assert result.metadata == {}
    assert result.content == text


def test_extract_value_kinds():
    """Scalars, flow lists, block lists and nested mappings all load."""
    text = (
        "---\n"
        "title: Setup\n"
        "order: 3\n"
        "published: false\n"
        "tags: [a, b]\n"
        "related:\n"
        "  - one\n"
        "  - two\n"
        "author:\n"
        "  name: Ann\n"
        "---\n"
        "body\n"
    )
    meta = extract_frontmatter(text).metadata
    assert meta == {
        "title": "Setup",
        "order": 3,
        "published": False,
        "tags": ["a", "b"],
        "related": ["one", "two"],
        "author": {"name": "Ann"},
    }


def test_extract_preserves_key_order():
    """Metadata keys keep their source order."""
    meta = extract_frontmatter("---\nz: 1\na: 2\nm: 3\n---\n").metadata
    assert list(meta) == ["z", "a", "m"]


def test_extract_dates_become_iso_strings():
    """YAML dates are normalized to ISO-8601 strings."""
    meta = extract_frontmatter("---\ncreatedAt: 2026-01-15\n---\nbody").metadata
    assert meta == {"createdAt": "2026-01-15"}


def test_extract_skips_unparseable_line_with_warning():
    """A broken entry is dropped with a warning naming its line; the others survive."""
    text = "---\ntitle: Ok\nbad: [unclosed\nauthor: Ann\n---\nbody"
    result = extract_frontmatter(text)
    assert result.metadata == {"title": "Ok", "author": "Ann"}
    assert len(result.warnings) == 1
    assert "line 3" in result.warnings[0]
    assert "bad: [unclosed" in result.warnings[0]
    assert result.content == "body"


def test_extract_non_mapping_block():
    """A block that is a list rather than key/value pairs yields empty metadata and a warning."""
    result = extract_frontmatter("---\n- a\n- b\n---\nbody")
    assert result.metadata == {}
    assert result.content == "body"
    assert len(result.warnings) == 1


def test_extract_empty_block():
    """An empty fenced block is valid and yields no metadata."""
    result = extract_frontmatter("---\n---\nbody")
    assert result.metadata == {}
    assert result.content == "body"


def test_extract_crlf_line_endings():
    """Windows line endings are accepted around the fences."""
    result = extract_frontmatter("---\r\ntitle: X\r\n---\r\nbody")
    assert result.metadata == {"title": "X"}
    assert result.content == "body"


@pytest.mark.parametrize("text", [
    "---\ntitle: X\n---\n# H1\n",
    "---\ntitle: X\ntags:\n  - a\n---\n\nBody\n",
    "---   \nkey: value\n---",
    "no frontmatter at all",
    "---\nbad: [\n---\ntext",
])
def test_extract_block_plus_content_is_original(text):
    """The removed block re-joined with the body reproduces the input byte for byte."""
    result = extract_frontmatter(text)
    assert result.block + result.content == text


def test_extractor_object_matches_function():
    """FrontmatterExtractor.extract delegates to extract_frontmatter."""
    text = "---\ntitle: X\n---\nbody"
    assert FrontmatterExtractor().extract(text) == extract_frontmatter(text)
