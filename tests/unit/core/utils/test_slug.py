"""Unit tests for core/utils/slug.py"""

import pytest

from helpparse.core.utils.slug import Slugger, slug_from_filename, slugify


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-chrs"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify converts text to lowercase hyphenated slug."""
    assert slugify(text) == expected


@pytest.mark.parametrize("filename,expected", [
    ("getting-started.md", "getting-started"),
    ("docs/Getting Started.MDX", "getting-started"),
    ("C:\\help\\FAQ_2024.csv", "faq-2024"),
])
def test_slug_from_filename(filename, expected):
    """slug_from_filename slugs the stem, ignoring directories and extension."""
    assert slug_from_filename(filename) == expected


def test_slugger_suffixes_repeats():
    """Repeated heading text gets -2, -3 appended."""
    s = Slugger()
    assert [s.slug("Setup"), s.slug("Setup"), s.slug("Setup")] == ["setup", "setup-2", "setup-3"]


def test_slugger_skips_taken_suffix():
    """A suffix already claimed by a literal heading is skipped."""
    s = Slugger()
    assert s.slug("Setup 2") == "setup-2"
    assert s.slug("Setup") == "setup"
    assert s.slug("Setup") == "setup-3"


def test_slugger_fallback_for_symbol_only_text():
    """Text with no slug characters falls back to a fixed base."""
    s = Slugger()
    assert s.slug("!!!") == "section"
    assert s.slug("???") == "section-2"
