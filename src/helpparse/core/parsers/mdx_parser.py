"""MDX parser: Markdown plus ESM stripping and component placeholder extraction.

Nothing embedded in the document is executed. Imports, exports and bare
expressions are removed; each component invocation is recorded by name and
props and replaced with a placeholder element that a rendering layer can
hydrate later.
"""

import html
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from helpparse.core.frontmatter import extract_frontmatter
from helpparse.core.models import MdxOptions, ParseResult
from helpparse.core.parsers.markdown_parser import MarkdownParser
from helpparse.core.utils.signals import mdx_score


logger = logging.getLogger(__name__)

FENCE_OPEN_RE = re.compile(r'^ {0,3}(`{3,}|~{3,})')
IMPORT_DONE_RE = re.compile(r'''(?:\bfrom\s*['"][^'"\n]+['"]|^import\s*['"][^'"\n]+['"])\s*;?\s*$''', re.DOTALL)
TAG_START_RE = re.compile(r'<([A-Z][\w.]*)(?=[\s/>])')
ATTR_NAME_RE = re.compile(r'[A-Za-z_$][\w$:.-]*')
UNQUOTED_RE = re.compile(r'[^\s/>]+')
CODE_SPAN_RE = re.compile(r'(`+)(?:(?!\1).)+?\1')

# Nested components below this depth stay in their parent's children text only
MAX_COMPONENT_DEPTH = 32

PlaceholderRenderer = Callable[[str, dict[str, Any]], str]


@dataclass
class ModuleSyntax:
    """Body text with ESM statements and bare expressions blanked out."""
    text:        str
    imports:     list[str] = field(default_factory=list)
    exports:     list[str] = field(default_factory=list)
    expressions: int = 0


@dataclass
class ExtractedComponent:
    name:     str
    props:    dict[str, Any]
    original: str
    start:    int
    end:      int


@dataclass
class ComponentScan:
    text:       str
    components: list[ExtractedComponent] = field(default_factory=list)
    warnings:   list[str] = field(default_factory=list)


def _depth_delta(line: str) -> int:
    return sum(line.count(c) for c in '{([') - sum(line.count(c) for c in '})]')


def _fence_ranges(lines: list[str]) -> list[bool]:
    """Per-line flag: True when the line belongs to a fenced code block."""
    flags = []
    fence: Optional[str] = None
    for line in lines:
        if fence is None:
            m = FENCE_OPEN_RE.match(line)
            if m:
                fence = m.group(1)
            flags.append(fence is not None)
        else:
            flags.append(True)
            if line.strip().startswith(fence[0] * len(fence)) and not line.strip().strip(fence[0]):
                fence = None
    return flags


def strip_module_syntax(text: str) -> ModuleSyntax:
    """Blank out import/export statements and line-level {expressions} outside fenced code.

    Stripped lines are replaced by empty lines so source line numbers survive.
    A statement never extends past a blank line.
    """
    lines = text.split('\n')
    in_fence = _fence_ranges(lines)
    out = list(lines)
    result = ModuleSyntax(text='')

    def _continues(end: int) -> bool:
        return end + 1 < len(lines) and bool(lines[end + 1].strip())

    def _balanced_end(start: int) -> int:
        end, depth = start, _depth_delta(lines[start])
        while depth > 0 and _continues(end):
            end += 1
            depth += _depth_delta(lines[end])
        return end

    i = 0
    while i < len(lines):
        line = lines[i]
        if in_fence[i]:
            i += 1
            continue
        if line.startswith('import ') or line.startswith('import{'):
            end = i
            while not IMPORT_DONE_RE.search('\n'.join(lines[i:end + 1])) and _continues(end):
                end += 1
            result.imports.append('\n'.join(lines[i:end + 1]).strip())
        elif line.startswith('export '):
            end = _balanced_end(i)
            result.exports.append('\n'.join(lines[i:end + 1]).strip())
        elif line.startswith('{'):
            end = _balanced_end(i)
            result.expressions += 1
        else:
            i += 1
            continue
        for k in range(i, end + 1):
            out[k] = ''
        i = end + 1
    result.text = '\n'.join(out)
    return result


def _match_brace(text: str, i: int) -> Optional[int]:
    """Index of the '}' closing the '{' at i, skipping quoted strings; None if unbalanced."""
    depth = 0
    quote: Optional[str] = None
    j = i
    while j < len(text):
        ch = text[j]
        if quote:
            if ch == '\\':
                j += 1
            elif ch == quote:
                quote = None
        elif ch in '"\'`':
            quote = ch
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return j
        j += 1
    return None


def decode_expression(expr: str) -> Any:
    """JSON-decodable expressions become values; anything else stays as source text."""
    try:
        return json.loads(expr)
    except ValueError:
        return expr


def parse_attributes(text: str, i: int) -> Optional[tuple[dict[str, Any], int, bool]]:
    """Parse attributes from i up to the end of the tag.

    Returns (props, index after the tag, self_closing), or None when the tag
    never closes or holds something that is not an attribute.
    """
    props: dict[str, Any] = {}
    n = len(text)
    while i < n:
        while i < n and text[i].isspace():
            i += 1
        if text.startswith('/>', i):
            return props, i + 2, True
        if i < n and text[i] == '>':
            return props, i + 1, False
        if i >= n:
            break
        if text[i] == '{':
            j = _match_brace(text, i)
            if j is None:
                return None
            props['...'] = text[i + 1:j].strip().removeprefix('...').strip()
            i = j + 1
            continue
        m = ATTR_NAME_RE.match(text, i)
        if not m:
            return None
        name, i = m.group(0), m.end()
        while i < n and text[i].isspace():
            i += 1
        if i >= n or text[i] != '=':
            props[name] = True
            continue
        i += 1
        while i < n and text[i].isspace():
            i += 1
        if i >= n:
            return None
        if text[i] in '"\'':
            j = text.find(text[i], i + 1)
            if j < 0:
                return None
            props[name], i = text[i + 1:j], j + 1
        elif text[i] == '{':
            j = _match_brace(text, i)
            if j is None:
                return None
            props[name], i = decode_expression(text[i + 1:j].strip()), j + 1
        else:
            m = UNQUOTED_RE.match(text, i)
            if not m:
                return None
            props[name], i = m.group(0), m.end()
    return None


def _find_close(text: str, name: str, start: int) -> Optional[tuple[int, int]]:
    """(start, end) of the closing tag matching an open <name> before start."""
    pattern = re.compile(rf'<{re.escape(name)}(?=[\s/>])|</{re.escape(name)}\s*>')
    depth = 1
    for m in pattern.finditer(text, start):
        if m.group(0).startswith('</'):
            depth -= 1
            if depth == 0:
                return m.start(), m.end()
        else:
            parsed = parse_attributes(text, m.end())
            if parsed and not parsed[2]:
                depth += 1
    return None


def _protected_spans(text: str) -> list[tuple[int, int]]:
    """Character ranges of fenced code blocks and inline code spans."""
    spans = []
    offset = 0
    lines = text.split('\n')
    for line, fenced in zip(lines, _fence_ranges(lines)):
        if fenced:
            spans.append((offset, offset + len(line)))
        else:
            spans.extend((offset + m.start(), offset + m.end()) for m in CODE_SPAN_RE.finditer(line))
        offset += len(line) + 1
    return spans


def default_placeholder(name: str, props: dict[str, Any], block: bool = True) -> str:
    tag = 'div' if block else 'span'
    kind = '' if block else ' help-mdx-placeholder-inline'
    shown = ' '.join(f"{k}={json.dumps(v, ensure_ascii=False, default=str)}" for k, v in props.items() if k != 'children')
    label = html.escape(name) + (' ' + html.escape(shown) if shown else '')
    if 'children' in props:
        label += ' (with children)'
    data = html.escape(json.dumps(props, ensure_ascii=False, default=str))
    return (
        f'<{tag} class="help-mdx-placeholder{kind}" data-component="{html.escape(name)}" data-props=\'{data}\'>'
        f'<span class="help-mdx-placeholder-label">&lt;{label} /&gt;</span></{tag}>'
    )


def extract_components(
    text: str,
    render_placeholders: bool = True,
    renderer: Optional[PlaceholderRenderer] = None,
    line_offset: int = 0,
    depth: int = 0,
    ) -> ComponentScan:
    """Find capitalized component invocations and swap each for a placeholder.

    Children of a closed component are scanned again (without placeholders)
    so nested invocations are recorded after their parent, down to
    MAX_COMPONENT_DEPTH levels.
    """
    scan = ComponentScan(text='')
    protected = _protected_spans(text)
    out: list[str] = []
    pos = 0

    def _line(index: int) -> int:
        return text.count('\n', 0, index) + 1 + line_offset

    while True:
        m = TAG_START_RE.search(text, pos)
        if not m:
            break
        if any(a <= m.start() < b for a, b in protected):
            out.append(text[pos:m.end()])
            pos = m.end()
            continue
        name = m.group(1)
        parsed = parse_attributes(text, m.end())
        if parsed is None:
            scan.warnings.append(f"Malformed component tag <{name}> on line {_line(m.start())}; left as text")
            out.append(text[pos:m.end()])
            pos = m.end()
            continue
        props, end, self_closing = parsed
        nested: list[ExtractedComponent] = []
        if not self_closing:
            close = _find_close(text, name, end)
            if close is None:
                scan.warnings.append(f"Unclosed component <{name}> on line {_line(m.start())}; treated as self-closing")
            else:
                children = text[end:close[0]]
                if children.strip():
                    props['children'] = children.strip()
                    if depth + 1 < MAX_COMPONENT_DEPTH:
                        inner = extract_components(
                            children, render_placeholders=False, line_offset=_line(end) - 1, depth=depth + 1,
                        )
                        nested = inner.components
                        scan.warnings.extend(inner.warnings)
                    elif TAG_START_RE.search(children):
                        scan.warnings.append(
                            f"Components nested more than {MAX_COMPONENT_DEPTH} levels deep inside <{name}> "
                            f"on line {_line(m.start())} were not recorded"
                        )
                end = close[1]

        scan.components.append(ExtractedComponent(name, props, text[m.start():end], m.start(), end))
        scan.components.extend(nested)

        line_start = text.rfind('\n', 0, m.start()) + 1
        line_end = text.find('\n', end)
        line_end = len(text) if line_end < 0 else line_end
        block = not text[line_start:m.start()].strip() and not text[end:line_end].strip()
        if not render_placeholders:
            out.append(text[pos:end])
        elif block:
            placeholder = renderer(name, props) if renderer else default_placeholder(name, props)
            # keep the indentation so the placeholder stays inside list items
            out.append(text[pos:m.start()] + placeholder + '\n')
        else:
            placeholder = renderer(name, props) if renderer else default_placeholder(name, props, block=False)
            out.append(text[pos:m.start()] + placeholder)
        pos = end

    out.append(text[pos:])
    scan.text = ''.join(out)
    return scan


class MdxParser(MarkdownParser):
    """MDX: Markdown with ESM statements and JSX-style component invocations."""
    name = "mdx"
    format = "mdx"
    extensions = ("mdx",)
    options_model = MdxOptions

    def sniff(self, content: str) -> float:
        return mdx_score(content)

    def _parse(self, content: str, options: MdxOptions) -> ParseResult:
        fm = extract_frontmatter(content)
        line_offset = fm.block.count('\n')
        module = strip_module_syntax(fm.content)
        scan = extract_components(
            module.text,
            render_placeholders=options.render_placeholders,
            renderer=options.placeholder_renderer,
            line_offset=line_offset,
        )
        body = self.render_body(scan.text, options, line_offset=line_offset)

        metadata = dict(fm.metadata)
        if module.imports or module.exports or scan.components:
            metadata["mdx"] = {
                "imports": module.imports,
                "exports": module.exports,
                "components": [{"name": c.name, "props": c.props} for c in scan.components],
            }
        names = tuple(dict.fromkeys(c.name for c in scan.components))
        logger.debug(
            "Parsed %s (mdx): %d components, %d imports, %d expressions stripped",
            options.filename or "<text>", len(scan.components), len(module.imports), module.expressions,
        )
        return ParseResult(
            html=body.html,
            metadata=metadata,
            toc=body.toc,
            assets=body.assets,
            warnings=fm.warnings + tuple(scan.warnings) + tuple(body.warnings),
            components=names,
        )
