"""Unit tests for core/utils/toc.py"""

from helpparse.core.utils.toc import build_toc, flatten_toc


def test_build_toc_nests_by_level():
    """Deeper headings nest under the nearest shallower one."""
    toc = build_toc([("a", "A", 1), ("b", "B", 2), ("c", "C", 3), ("d", "D", 2)])
    assert len(toc) == 1
    assert [c.id for c in toc[0].children] == ["b", "d"]
    assert toc[0].children[0].children[0].id == "c"


def test_build_toc_orphans_become_roots():
    """A heading with no shallower predecessor is a root even when it is deep."""
    toc = build_toc([("x", "X", 3), ("y", "Y", 2), ("z", "Z", 1)])
    assert [e.id for e in toc] == ["x", "y", "z"]


def test_build_toc_skipped_levels():
    """An h3 directly after an h1 is still the h1's child."""
    toc = build_toc([("a", "A", 1), ("c", "C", 3)])
    assert toc[0].children[0].level == 3


def test_flatten_toc_preserves_source_order():
    """Pre-order flattening reproduces the input heading order and levels."""
    headings = [("a", "A", 2), ("b", "B", 1), ("c", "C", 3), ("d", "D", 2), ("e", "E", 4), ("f", "F", 1)]
    flat = flatten_toc(build_toc(headings))
    assert [(e.id, e.text, e.level) for e in flat] == headings


def test_build_toc_empty():
    assert build_toc([]) == ()
