"""Pipeline entry points: default parser registry, parse and detect orchestration"""

import logging
from pathlib import Path
from typing import Any, Optional

from helpparse.config import Settings
from helpparse.core.base import ContentParser
from helpparse.core.detect import create_format_detector
from helpparse.core.models import FormatDetectionResult, ParseResult, ParserOptions
from helpparse.core.parsers.csv_parser import CsvParser
from helpparse.core.parsers.json_parser import JsonParser
from helpparse.core.parsers.markdown_parser import MarkdownParser
from helpparse.core.parsers.mdx_parser import MdxParser
from helpparse.errors import ErrorKind, ParseError


logger = logging.getLogger(__name__)

AUTO_FORMAT = "auto"


def default_parsers() -> list[ContentParser]:
    """Fresh parser instances in registration order."""
    return [MarkdownParser(), MdxParser(), JsonParser(), CsvParser()]


def build_options(parser: ContentParser, settings: Settings, **overrides: Any) -> ParserOptions:
    """Parser options from settings; non-None overrides win. Keys a parser does not use are ignored."""
    data: dict[str, Any] = {
        "base_path": settings.base_path,
        "max_nesting": settings.max_nesting or None,
        "delimiter": settings.csv_delimiter,
        "has_header": settings.csv_has_header,
        "render_as_table": settings.csv_render_as_table,
        "max_rows": settings.max_rows or None,
        "max_field_size": settings.max_field_size or None,
        "render_placeholders": settings.render_placeholders,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    fields = parser.options_model.model_fields
    return parser.options_model(**{k: v for k, v in data.items() if k in fields})


def _select(content: str, filename: Optional[str], fmt: Optional[str]) -> ContentParser:
    detector = create_format_detector(default_parsers())
    if fmt and fmt != AUTO_FORMAT:
        parser = detector.get_parser(fmt)
        if parser is None:
            names = ', '.join(p.name for p in detector.parsers)
            raise ParseError(f"Unknown format '{fmt}' (expected one of: {names})", ErrorKind.unknown_format, filename)
        return parser
    parser = detector.get_parser_for_content(content, filename)
    if parser is None:
        raise ParseError("Could not detect content format", ErrorKind.unknown_format, filename)
    return parser


def parse_content(
    content: str,
    filename: Optional[str] = None,
    fmt: Optional[str] = None,
    settings: Optional[Settings] = None,
    **overrides: Any,
    ) -> tuple[str, ParseResult]:
    """Select (or detect) a parser and parse content. Returns (parser_name, result)."""
    settings = settings or Settings()
    parser = _select(content, filename, fmt or settings.default_format)
    logger.debug("Parsing %s with %s", filename or "<text>", parser.name)
    options = build_options(parser, settings, filename=filename, **overrides)
    return parser.name, parser.parse(content, options)


def parse_file(
    path: Path,
    fmt: Optional[str] = None,
    settings: Optional[Settings] = None,
    **overrides: Any,
    ) -> tuple[str, ParseResult]:
    """Read a UTF-8 file and parse its text; the file name drives extension matching."""
    path = Path(path)
    content = path.read_text(encoding='utf-8')
    return parse_content(content, filename=path.name, fmt=fmt, settings=settings, **overrides)


def detect_content(content: str, filename: Optional[str] = None) -> list[FormatDetectionResult]:
    return create_format_detector(default_parsers()).detect_all_formats(content, filename)
