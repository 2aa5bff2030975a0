"""Structural-signal heuristics used to score how well content fits each format.

Every scorer returns a value in [0, 1] from the content alone. Filename
extensions are handled by the parsers on top of these scores.
"""

import csv
import io
import json
import re
import threading
from contextlib import contextmanager
from typing import Optional

from helpparse.core.frontmatter import FRONTMATTER_RE


FENCED_BLOCK_RE = re.compile(r'^(`{3,}|~{3,})[^\n]*\n.*?^\1[ \t]*$', re.DOTALL | re.MULTILINE)

# (pattern, weight) pairs; each pattern counts once however often it matches
MARKDOWN_SIGNALS: list[tuple[re.Pattern, float]] = [
    (re.compile(r'^#{1,6}[ \t]+\S', re.MULTILINE),                              0.25),   # ATX heading
    (re.compile(r'^[^\n]*\w[^\n]*\n(?:=+|-{2,})[ \t]*$', re.MULTILINE),         0.25),   # setext heading
    (re.compile(r'!?\[[^\]\n]+\]\([^)\s]+[^)\n]*\)'),                           0.15),   # link / image
    (re.compile(r'^(`{3,}|~{3,})', re.MULTILINE),                               0.15),   # fenced code
    (re.compile(r'(\*\*|__)[^\s*_][^\n]*?\1|(?<![\w*])\*[^\s*][^*\n]*\*(?!\*)'), 0.10),  # emphasis
    (re.compile(r'^[ \t]*(?:[-*+]|\d+[.)])[ \t]+\S', re.MULTILINE),             0.10),   # list item
    (re.compile(r'^>[ \t]?\S', re.MULTILINE),                                   0.10),   # block quote
    (re.compile(r'^\|?[ \t]*:?-{3,}:?[ \t]*(?:\|[ \t]*:?-{3,}:?[ \t]*)+\|?[ \t]*$', re.MULTILINE), 0.10),  # pipe table
]
FRONTMATTER_WEIGHT = 0.3
BLOCK_SYNTAX_RE = re.compile(r'^(?:#{1,6}[ \t]|>[ \t]?|[-*+][ \t]|`{3}|~{3})', re.MULTILINE)

IMPORT_RE     = re.compile(r'^import\s+(?:[\w*{}\s,]+\s+from\s+)?[\'"]', re.MULTILINE)
EXPORT_RE     = re.compile(r'^export\s+(?:default\s+)?(?:async\s+)?(?:function|const|let|var|class)\b', re.MULTILINE)
COMPONENT_RE  = re.compile(r'<[A-Z][\w.]*(?=[\s/>])')
EXPRESSION_RE = re.compile(r'\{[^{}\n]+\}')

CSV_DELIMITERS = (',', '\t', ';')

# Scale applied to markdown scores when MDX signals are present, keeping
# MDX_BASE strictly above any scaled markdown score.
MDX_MARKDOWN_SCALE = 0.6
MDX_BASE = 0.65


def strip_fenced_code(text: str) -> str:
    return FENCED_BLOCK_RE.sub('', text)


def looks_like_json(text: str) -> bool:
    t = text.strip()
    return (t.startswith('{') and t.endswith('}')) or (t.startswith('[') and t.endswith(']'))


def braces_balanced(text: str) -> bool:
    """True when {}/[] nest correctly outside of double-quoted strings."""
    pairs = {'}': '{', ']': '['}
    stack: list[str] = []
    in_string = escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in '{[':
            stack.append(ch)
        elif ch in pairs:
            if not stack or stack.pop() != pairs[ch]:
                return False
    return not stack and not in_string


def json_score(text: str) -> float:
    t = text.strip()
    if not looks_like_json(t):
        return 0.0
    try:
        data = json.loads(t)
    except (ValueError, RecursionError):
        return 0.3 if braces_balanced(t) else 0.15
    if isinstance(data, dict):
        return 1.0 if isinstance(data.get('content'), list) else 0.7
    return 0.5


def mdx_signals(text: str) -> set[str]:
    """Kinds of MDX-only syntax present outside fenced code."""
    body = strip_fenced_code(text)
    kinds = set()
    if IMPORT_RE.search(body):
        kinds.add('import')
    if EXPORT_RE.search(body):
        kinds.add('export')
    if COMPONENT_RE.search(body):
        kinds.add('component')
        if EXPRESSION_RE.search(body):
            kinds.add('expression')
    return kinds


def _markdown_signal_score(text: str) -> float:
    score = FRONTMATTER_WEIGHT if FRONTMATTER_RE.match(text) else 0.0
    score += sum(weight for pattern, weight in MARKDOWN_SIGNALS if pattern.search(text))
    return min(score, 1.0)


def markdown_score(text: str) -> float:
    if not text.strip() or looks_like_json(text):
        return 0.0
    score = _markdown_signal_score(text)
    if mdx_signals(text):
        score *= MDX_MARKDOWN_SCALE
    return round(score, 4)


def mdx_score(text: str) -> float:
    if not text.strip() or looks_like_json(text):
        return 0.0
    kinds = mdx_signals(text)
    if not kinds:
        return 0.0
    score = MDX_BASE + 0.1 * (len(kinds) - 1)
    if _markdown_signal_score(text) > 0:
        score += 0.1
    return round(min(score, 1.0), 4)


# csv.field_size_limit is process-wide; readers swap it under this lock
_FIELD_LIMIT_LOCK = threading.Lock()
UNLIMITED_FIELD_SIZE = 2**31 - 1


@contextmanager
def csv_field_limit(limit: Optional[int] = None):
    """Run csv readers with a per-cell size cap; None lifts the module's 128 KiB default."""
    with _FIELD_LIMIT_LOCK:
        previous = csv.field_size_limit(limit or UNLIMITED_FIELD_SIZE)
        try:
            yield
        finally:
            csv.field_size_limit(previous)


def delimiter_regularity(text: str, delimiter: str) -> float:
    """Share of rows after the first whose quote-aware field count matches the first row's."""
    try:
        with csv_field_limit():
            rows = [r for r in csv.reader(io.StringIO(text), delimiter=delimiter) if any(c.strip() for c in r)]
    except csv.Error:
        return 0.0
    if len(rows) < 2 or len(rows[0]) < 2:
        return 0.0
    width = len(rows[0])
    return sum(1 for r in rows[1:] if len(r) == width) / (len(rows) - 1)


def csv_score(text: str) -> float:
    if looks_like_json(text) or sum(1 for line in text.splitlines() if line.strip()) < 2:
        return 0.0
    best = max(delimiter_regularity(text, d) for d in CSV_DELIMITERS)
    if best >= 0.9:
        score = 0.9
    elif best >= 0.7:
        score = 0.7
    elif best >= 0.5:
        score = 0.4
    else:
        return 0.0
    if FRONTMATTER_RE.match(text) or BLOCK_SYNTAX_RE.search(text):
        score /= 2
    return score
