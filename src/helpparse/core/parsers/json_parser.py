"""JSON parser: typed content blocks rendered to HTML"""

import html
import json
import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from helpparse.core.base import ContentParser
from helpparse.core.models import ParseResult, ParserOptions
from helpparse.core.utils.assets import AssetCollector, classify_image
from helpparse.core.utils.signals import json_score
from helpparse.core.utils.slug import Slugger
from helpparse.core.utils.toc import build_toc
from helpparse.errors import ParseError


logger = logging.getLogger(__name__)

CALLOUT_TYPES = ('info', 'warning', 'tip', 'danger')


class JsonBlock(BaseModel):
    """One entry of the `content` array; fields unused by a block's type are ignored."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type:         str
    content:      str = ""
    level:        int = 2                  # heading level; clamped to 1-6
    language:     Optional[str] = None
    src:          Optional[str] = None
    alt:          str = ""
    items:        Optional[list[str]] = None
    ordered:      bool = False
    callout_type: str = Field(default="info", alias="calloutType")


class _BlockRenderer:
    """Per-call rendering state: heading ids, TOC entries, assets, warnings."""

    def __init__(self, base_path: Optional[str]):
        self.slugger = Slugger()
        self.assets = AssetCollector(base_path)
        self.headings: list[tuple[str, str, int]] = []
        self.warnings: list[str] = []
        self.renderers: dict[str, Callable[[JsonBlock, int], str]] = {
            'heading':    self.heading,
            'paragraph':  self.paragraph,
            'code':       self.code,
            'list':       self.list_items,
            'image':      self.image,
            'blockquote': self.blockquote,
            'callout':    self.callout,
            'html':       self.raw_html,
        }

    def render(self, index: int, raw: Any) -> Optional[str]:
        """HTML for content[index], or None (with a warning) when the block is skipped."""
        if not isinstance(raw, dict):
            self.warnings.append(f"Skipped content[{index}]: expected an object, got {type(raw).__name__}")
            return None
        block_type = raw.get('type')
        if not isinstance(block_type, str) or block_type not in self.renderers:
            self.warnings.append(f"Skipped content[{index}]: unknown block type {block_type!r}")
            return None
        try:
            block = JsonBlock.model_validate(raw)
        except ValidationError as e:
            fields = ', '.join('.'.join(str(p) for p in err['loc']) for err in e.errors())
            self.warnings.append(f"Skipped content[{index}] ({block_type}): invalid field(s) {fields}")
            return None
        return self.renderers[block_type](block, index)

    def heading(self, block: JsonBlock, index: int) -> str:
        level = block.level
        if not 1 <= level <= 6:
            level = min(max(level, 1), 6)
            self.warnings.append(f"content[{index}]: heading level {block.level} clamped to {level}")
        id_ = self.slugger.slug(block.content)
        self.headings.append((id_, block.content, level))
        return f'<h{level} id="{id_}" class="help-heading help-heading-{level}">{html.escape(block.content)}</h{level}>'

    def paragraph(self, block: JsonBlock, index: int) -> str:
        return f'<p class="help-paragraph">{html.escape(block.content)}</p>'

    def code(self, block: JsonBlock, index: int) -> str:
        lang_class = f" language-{html.escape(block.language)}" if block.language else ''
        return (
            f'<pre class="help-code-block{lang_class}">'
            f'<code class="help-code{lang_class}">{html.escape(block.content)}</code></pre>'
        )

    def list_items(self, block: JsonBlock, index: int) -> str:
        items = block.items if block.items is not None else [block.content]
        tag, kind = ('ol', 'ordered') if block.ordered else ('ul', 'unordered')
        lis = ''.join(f'<li class="help-list-item">{html.escape(item)}</li>' for item in items)
        return f'<{tag} class="help-list help-list-{kind}">{lis}</{tag}>'

    def image(self, block: JsonBlock, index: int) -> str:
        src = block.src or block.content
        url = self.assets.add(classify_image(src), src, alt=block.alt)
        return f'<img src="{html.escape(url)}" alt="{html.escape(block.alt)}" class="help-image" loading="lazy" />'

    def blockquote(self, block: JsonBlock, index: int) -> str:
        return f'<blockquote class="help-blockquote"><p>{html.escape(block.content)}</p></blockquote>'

    def callout(self, block: JsonBlock, index: int) -> str:
        kind = block.callout_type
        if kind not in CALLOUT_TYPES:
            self.warnings.append(f"content[{index}]: unknown callout type {kind!r}, using 'info'")
            kind = 'info'
        return f'<div class="help-callout help-callout-{kind}" data-type="{kind}"><p>{html.escape(block.content)}</p></div>'

    def raw_html(self, block: JsonBlock, index: int) -> str:
        # raw passthrough; the content author owns its safety
        return block.content


class JsonParser(ContentParser):
    """JSON documents of the form {"metadata": {...}, "content": [block, ...]}."""
    name = "json"
    format = "json"
    extensions = ("json",)

    def sniff(self, content: str) -> float:
        return json_score(content)

    def _load(self, content: str, filename: Optional[str]) -> dict[str, Any]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON content: {e.msg} at line {e.lineno} column {e.colno}", filename=filename) from e
        except RecursionError as e:
            raise ParseError("Invalid JSON content: nested too deeply", filename=filename) from e
        if not isinstance(data, dict):
            raise ParseError(f"JSON content must be an object, got {type(data).__name__}", filename=filename)
        if not isinstance(data.get('content'), list):
            raise ParseError('JSON content must have a "content" array', filename=filename)
        return data

    def _parse(self, content: str, options: ParserOptions) -> ParseResult:
        data = self._load(content, options.filename)
        renderer = _BlockRenderer(options.base_path)

        metadata: dict[str, Any] = {}
        raw_meta = data.get('metadata')
        if isinstance(raw_meta, dict):
            metadata.update(raw_meta)
        elif raw_meta is not None:
            renderer.warnings.append(f"Ignored metadata: expected an object, got {type(raw_meta).__name__}")
        for key in ('title', 'description'):
            if isinstance(data.get(key), str):
                metadata.setdefault(key, data[key])

        parts = [renderer.render(i, raw) for i, raw in enumerate(data['content'])]
        body = '\n'.join(p for p in parts if p is not None)
        logger.debug(
            "Parsed %s (json): %d blocks, %d warnings",
            options.filename or "<text>", len(data['content']), len(renderer.warnings),
        )
        return ParseResult(
            html=f'<div class="help-json-content">{body}</div>',
            metadata=metadata,
            toc=build_toc(renderer.headings),
            assets=renderer.assets.result(),
            warnings=tuple(renderer.warnings),
        )
