"""Frontmatter extraction: split a leading YAML block from document text"""

import datetime
import logging
import re
from typing import Any

import yaml

from helpparse.core.models import FrontmatterResult


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)', re.DOTALL)

# First line of the block sits on line 2 of the document (after the opening fence).
_FIRST_BLOCK_LINE = 2


def _normalize(value: Any) -> Any:
    """Make YAML output JSON-safe: ISO strings for dates, string keys for mappings."""
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_normalize(v) for v in value]
    return value


def _split_entries(raw: str) -> list[tuple[int, str]]:
    """Group block lines into top-level entries: a key line plus its continuation lines."""
    entries: list[tuple[int, list[str]]] = []
    for i, line in enumerate(raw.splitlines()):
        starts_entry = bool(line) and not line[0].isspace() and not line.startswith(('-', '#'))
        if starts_entry or not entries:
            entries.append((i, [line]))
        else:
            entries[-1][1].append(line)
    return [(i, '\n'.join(lines)) for i, lines in entries]


def _load_entries(raw: str) -> tuple[dict[str, Any], list[str]]:
    """Load each top-level entry on its own, skipping the ones YAML rejects."""
    metadata: dict[str, Any] = {}
    warnings: list[str] = []
    for i, text in _split_entries(raw):
        if not text.strip() or text.lstrip().startswith('#'):
            continue
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError:
            data = None
        if isinstance(data, dict):
            metadata.update(_normalize(data))
        else:
            first = text.splitlines()[0].strip()
            warnings.append(f"Ignored unparseable frontmatter line {i + _FIRST_BLOCK_LINE}: {first!r}")
    return metadata, warnings


def _load_block(raw: str) -> tuple[dict[str, Any], list[str]]:
    if not raw.strip():
        return {}, []
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        logger.debug("Frontmatter block failed to load as a whole, retrying per entry: %s", e)
        return _load_entries(raw)
    if data is None:
        return {}, []
    if not isinstance(data, dict):
        return {}, [f"Ignored frontmatter: expected key/value pairs, got {type(data).__name__}"]
    return _normalize(data), []


def extract_frontmatter(text: str) -> FrontmatterResult:
    """Return metadata and body; text without an opening fence at offset 0 passes through whole."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return FrontmatterResult(content=text)
    metadata, warnings = _load_block(m.group(1) or '')
    return FrontmatterResult(
        metadata=metadata,
        content=text[m.end():],
        block=m.group(0),
        warnings=tuple(warnings),
    )


class FrontmatterExtractor:
    """Object form of extract_frontmatter for callers that inject collaborators."""

    def extract(self, text: str) -> FrontmatterResult:
        return extract_frontmatter(text)
