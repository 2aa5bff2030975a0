"""Markdown parser: frontmatter, markdown-it tokenization, TOC, assets, HTML"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml, unescapeAll
from markdown_it.token import Token

from helpparse.core.base import ContentParser
from helpparse.core.frontmatter import extract_frontmatter
from helpparse.core.models import AssetReference, ParseResult, ParserOptions, TocEntry
from helpparse.core.utils.assets import AssetCollector, classify_image, classify_link, is_external
from helpparse.core.utils.signals import markdown_score
from helpparse.core.utils.slug import Slugger
from helpparse.core.utils.toc import build_toc
from helpparse.core.utils.tokens import add_class, heading_level, inline_text, source_line


logger = logging.getLogger(__name__)

BLOCK_CLASSES: dict[str, str] = {
    'paragraph_open':    'help-paragraph',
    'bullet_list_open':  'help-list help-list-unordered',
    'ordered_list_open': 'help-list help-list-ordered',
    'list_item_open':    'help-list-item',
    'blockquote_open':   'help-blockquote',
    'hr':                'help-divider',
    'table_open':        'help-table',
    'thead_open':        'help-table-head',
    'tbody_open':        'help-table-body',
    'tr_open':           'help-table-row',
    'th_open':           'help-table-header',
    'td_open':           'help-table-cell',
}

TASK_RE = re.compile(r'^\[([ xX])\][ \t]+')

# (marker shown in the warning, unescaped occurrence in source, leftover in rendered text)
UNMATCHED_INLINE = [
    ('**', re.compile(r'(?<!\\)\*\*'), '**'),
    ('`',  re.compile(r'(?<!\\)`'),    '`'),
    ('](', re.compile(r'\]\('),        ']('),
]


def _code_html(code: str, lang: str = '') -> str:
    lang_class = f" language-{escapeHtml(lang)}" if lang else ''
    return (
        f'<pre class="help-code-block{lang_class}">'
        f'<code class="help-code{lang_class}">{escapeHtml(code)}</code></pre>\n'
    )


def _render_fence(self, tokens, idx, options, env) -> str:
    info = unescapeAll(tokens[idx].info).strip() if tokens[idx].info else ''
    return _code_html(tokens[idx].content, info.split(maxsplit=1)[0] if info else '')


def _render_code_block(self, tokens, idx, options, env) -> str:
    return _code_html(tokens[idx].content)


@dataclass
class RenderedBody:
    """Output of rendering one markdown body."""
    html:     str
    toc:      tuple[TocEntry, ...] = ()
    assets:   tuple[AssetReference, ...] = ()
    warnings: list[str] = field(default_factory=list)


class _Annotator:
    """Single pass over a token stream: ids, classes, assets, task items, warnings."""

    def __init__(self, base_path: Optional[str], line_offset: int):
        self.slugger = Slugger()
        self.assets = AssetCollector(base_path)
        self.headings: list[tuple[str, str, int]] = []
        self.warnings: list[str] = []
        self.line_offset = line_offset

    def run(self, tokens: list[Token]) -> None:
        for i, tok in enumerate(tokens):
            level = heading_level(tok)
            if level:
                text = inline_text(tokens[i + 1])
                id_ = self.slugger.slug(text)
                tok.attrSet('id', id_)
                add_class(tok, 'help-heading', f'help-heading-{level}')
                self.headings.append((id_, text, level))
            elif tok.type in BLOCK_CLASSES:
                add_class(tok, BLOCK_CLASSES[tok.type])
            elif tok.type == 'inline':
                if i >= 2 and tokens[i - 2].type == 'list_item_open':
                    self._task_item(tokens[i - 2], tok)
                self._inline(tok)

    def _task_item(self, item: Token, inline: Token) -> None:
        first = inline.children[0] if inline.children else None
        if first is None or first.type != 'text':
            return
        m = TASK_RE.match(first.content)
        if not m:
            return
        first.content = first.content[m.end():]
        checked = ' checked' if m.group(1) in 'xX' else ''
        box = Token('html_inline', '', 0, content=f'<input type="checkbox"{checked} disabled class="help-checkbox" /> ')
        inline.children.insert(0, box)
        add_class(item, 'help-list-item-task')

    def _inline(self, tok: Token) -> None:
        children = tok.children or []
        for j, child in enumerate(children):
            if child.type == 'image':
                src = str(child.attrGet('src') or '')
                title = child.attrGet('title')
                url = self.assets.add(classify_image(src), src, alt=inline_text(child), title=title and str(title))
                child.attrSet('src', url)
                add_class(child, 'help-image')
                child.attrSet('loading', 'lazy')
            elif child.type == 'link_open':
                self._link(child, children[j + 1:])
            elif child.type == 'code_inline':
                add_class(child, 'help-inline-code')
        self._check_unmatched(tok)

    def _link(self, link: Token, following: list[Token]) -> None:
        href = str(link.attrGet('href') or '')
        kind = classify_link(href)
        if kind:
            text = ''.join(t.content for t in following[:self._link_end(following)] if t.type == 'text')
            title = link.attrGet('title')
            link.attrSet('href', self.assets.add(kind, href, title=str(title) if title else text.strip()))
        if is_external(href):
            link.attrSet('target', '_blank')
            link.attrSet('rel', 'noopener noreferrer')
            add_class(link, 'help-link', 'help-link-external')
        else:
            add_class(link, 'help-link')

    @staticmethod
    def _link_end(following: list[Token]) -> int:
        for k, t in enumerate(following):
            if t.type == 'link_close':
                return k
        return len(following)

    def _check_unmatched(self, tok: Token) -> None:
        texts = [c.content for c in tok.children or [] if c.type == 'text']
        for marker, in_source, leftover in UNMATCHED_INLINE:
            if any(leftover in t for t in texts) and in_source.search(tok.content):
                line = source_line(tok)
                where = f" on line {line + self.line_offset}" if line else ''
                self.warnings.append(f"Unmatched inline syntax '{marker}'{where}; rendered as literal text")


class MarkdownParser(ContentParser):
    """Markdown with YAML frontmatter, rendered through markdown-it's gfm-like preset."""
    name = "markdown"
    format = "md"
    extensions = ("md", "markdown")
    preset = "gfm-like"

    def sniff(self, content: str) -> float:
        return markdown_score(content)

    def _make_parser(self, options: ParserOptions) -> MarkdownIt:
        """Build a fresh MarkdownIt instance; one per call keeps parse calls independent."""
        update = {"linkify": False}
        if options.max_nesting:
            update["maxNesting"] = options.max_nesting
        md = MarkdownIt(self.preset, options_update=update)
        md.add_render_rule("fence", _render_fence)
        md.add_render_rule("code_block", _render_code_block)
        return md

    def render_body(self, body: str, options: ParserOptions, line_offset: int = 0) -> RenderedBody:
        """Tokenize and render a frontmatter-free body, collecting TOC, assets, and warnings."""
        md = self._make_parser(options)
        env: dict = {}
        tokens = md.parse(body, env)
        annotator = _Annotator(options.base_path, line_offset)
        annotator.run(tokens)
        return RenderedBody(
            html=md.renderer.render(tokens, md.options, env),
            toc=build_toc(annotator.headings),
            assets=annotator.assets.result(),
            warnings=annotator.warnings,
        )

    def _parse(self, content: str, options: ParserOptions) -> ParseResult:
        fm = extract_frontmatter(content)
        body = self.render_body(fm.content, options, line_offset=fm.block.count('\n'))
        logger.debug(
            "Parsed %s (%s): %d toc roots, %d assets, %d warnings",
            options.filename or "<text>", self.name, len(body.toc), len(body.assets), len(body.warnings),
        )
        return ParseResult(
            html=body.html,
            metadata=fm.metadata,
            toc=body.toc,
            assets=body.assets,
            warnings=fm.warnings + tuple(body.warnings),
        )
