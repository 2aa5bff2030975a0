"""CSV parser: delimited rows rendered as an HTML table or labeled list"""

import csv
import html
import io
import logging
from typing import Optional

from helpparse.core.base import ContentParser, file_extension
from helpparse.core.models import CsvOptions, ParseResult
from helpparse.core.utils.signals import csv_field_limit, csv_score
from helpparse.errors import ParseError


logger = logging.getLogger(__name__)

EMPTY_HTML = '<div class="help-csv-content help-csv-empty">No data</div>'


def read_rows(content: str, delimiter: str, quote: str, max_field_size: Optional[int] = None) -> list[tuple[int, list[str]]]:
    """(source line, trimmed cells) per non-blank row; quoted cells may span lines.

    A cell longer than max_field_size raises csv.Error; None means no cap.
    """
    reader = csv.reader(io.StringIO(content, newline=''), delimiter=delimiter, quotechar=quote)
    rows = []
    with csv_field_limit(max_field_size):
        for row in reader:
            cells = [c.strip() for c in row]
            if any(cells):
                rows.append((reader.line_num, cells))
    return rows


def _fit(cells: list[str], width: int) -> list[str]:
    return (cells + [''] * width)[:width]


def _table_html(headers: list[str], rows: list[list[str]]) -> str:
    head = ''.join(f'<th class="help-table-header">{html.escape(h)}</th>' for h in headers)
    body = ''.join(
        '<tr class="help-table-row">'
        + ''.join(f'<td class="help-table-cell">{html.escape(c)}</td>' for c in row)
        + '</tr>'
        for row in rows
    )
    return (
        '<div class="help-csv-content">'
        '<table class="help-table help-csv-table">'
        f'<thead class="help-table-head"><tr>{head}</tr></thead>'
        f'<tbody class="help-table-body">{body}</tbody>'
        '</table></div>'
    )


def _list_html(headers: list[str], rows: list[list[str]], title_idx: int, content_idx: Optional[int]) -> str:
    items = []
    for row in rows:
        parts = [f'<strong class="help-csv-item-title">{html.escape(row[title_idx])}</strong>']
        if content_idx is not None:
            parts.append(f'<span class="help-csv-item-content">{html.escape(row[content_idx])}</span>')
        parts.extend(
            f'<span class="help-csv-meta-item"><strong>{html.escape(h)}:</strong> {html.escape(row[i])}</span>'
            for i, h in enumerate(headers)
            if i not in (title_idx, content_idx) and row[i]
        )
        items.append(f'<li class="help-csv-item">{" ".join(parts)}</li>')
    return f'<ul class="help-csv-content help-list help-csv-list">{"".join(items)}</ul>'


class CsvParser(ContentParser):
    """Delimited tabular text with optional header row."""
    name = "csv"
    format = "csv"
    extensions = ("csv", "tsv")
    options_model = CsvOptions

    def sniff(self, content: str) -> float:
        return csv_score(content)

    def _column(self, headers: list[str], wanted: Optional[str], default: Optional[int], warnings: list[str]) -> Optional[int]:
        if wanted is None:
            return default
        if wanted in headers:
            return headers.index(wanted)
        warnings.append(f"Column {wanted!r} not found; using default")
        return default

    def _parse(self, content: str, options: CsvOptions) -> ParseResult:
        delimiter = options.delimiter or ('\t' if file_extension(options.filename) == 'tsv' else ',')
        try:
            rows = read_rows(content, delimiter, options.quote, options.max_field_size)
        except csv.Error as e:
            raise ParseError(f"Invalid CSV content: {e}", filename=options.filename) from e

        if not rows:
            return ParseResult(html=EMPTY_HTML, metadata={"rowCount": 0, "columnCount": 0, "columns": []})

        warnings: list[str] = []
        first = rows[0][1]
        headers = first if options.has_header else [f"Column {i + 1}" for i in range(len(first))]
        width = len(headers)

        data: list[list[str]] = []
        for line, cells in rows[1:] if options.has_header else rows:
            if len(cells) != width:
                action = "padded" if len(cells) < width else "truncated"
                warnings.append(f"Row on line {line} has {len(cells)} fields, expected {width}; {action}")
            data.append(_fit(cells, width))

        if options.max_rows and len(data) > options.max_rows:
            warnings.append(f"Rendered the first {options.max_rows} of {len(data)} rows")
            data = data[:options.max_rows]

        if options.render_as_table:
            body = _table_html(headers, data)
        else:
            title_idx = self._column(headers, options.title_column, 0, warnings)
            content_idx = self._column(headers, options.content_column, 1 if width > 1 else None, warnings)
            body = _list_html(headers, data, title_idx, content_idx)

        logger.debug("Parsed %s (csv): %d rows x %d columns", options.filename or "<text>", len(data), width)
        return ParseResult(
            html=body,
            metadata={"rowCount": len(data), "columnCount": width, "columns": headers},
            warnings=tuple(warnings),
        )
