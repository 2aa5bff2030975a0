"""Slug generation for heading anchors and document identifiers"""

import re
from pathlib import PurePosixPath


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def slug_from_filename(filename: str) -> str:
    """Slug of a filename's stem, e.g. 'docs/Getting Started.md' -> 'getting-started'."""
    stem = PurePosixPath(filename.replace('\\', '/')).stem
    return re.sub(r'[^a-z0-9]+', '-', stem.lower()).strip('-')


class Slugger:
    """Hands out heading ids unique within one document.

    The first heading keeps its plain slug; repeats get -2, -3, ... appended,
    skipping any suffix another heading already claimed.
    """

    def __init__(self, fallback: str = "section"):
        self.fallback = fallback
        self._seen: set[str] = set()
        self._counts: dict[str, int] = {}

    def slug(self, text: str) -> str:
        base = slugify(text) or self.fallback
        candidate = base
        n = self._counts.get(base, 1)
        while candidate in self._seen:
            n += 1
            candidate = f"{base}-{n}"
        self._counts[base] = n
        self._seen.add(candidate)
        return candidate
