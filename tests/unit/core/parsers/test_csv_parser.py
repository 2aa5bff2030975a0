"""Unit tests for core/parsers/csv_parser.py"""

import csv

import pytest
from pydantic import ValidationError

from helpparse.core.models import CsvOptions
from helpparse.errors import ErrorKind, ParseError


def test_header_table_example(csv_parser):
    """Header row becomes <thead>; each remaining row is one body row."""
    result = csv_parser.parse("A,B\n1,2\n3,4", CsvOptions(has_header=True, render_as_table=True))
    assert (
        '<thead class="help-table-head"><tr>'
        '<th class="help-table-header">A</th><th class="help-table-header">B</th>'
        '</tr></thead>'
    ) in result.html
    assert result.html.count('<tr class="help-table-row">') == 2
    assert '<td class="help-table-cell">3</td><td class="help-table-cell">4</td>' in result.html
    assert result.html.startswith('<div class="help-csv-content"><table class="help-table help-csv-table">')
    assert result.metadata == {"rowCount": 2, "columnCount": 2, "columns": ["A", "B"]}
    assert result.toc == ()
    assert result.assets == ()


def test_quoted_fields(csv_parser, sample_csv):
    """Embedded delimiters and doubled quotes survive; output is escaped."""
    result = csv_parser.parse(sample_csv)
    assert '<td class="help-table-cell">Can I pay, later?</td>' in result.html
    assert "Yes, within &quot;30&quot; days." in result.html
    assert result.metadata["rowCount"] == 2


def test_quoted_newline_stays_in_cell(csv_parser):
    result = csv_parser.parse('A,B\n"line one\nline two",2\n')
    assert result.metadata["rowCount"] == 1
    assert "line one\nline two" in result.html


@pytest.mark.parametrize("as_table", [True, False])
def test_rendered_rows_equal_input_rows_minus_header(csv_parser, as_table):
    text = "Name,Value\na,1\nb,2\nc,3\nd,4\n"
    result = csv_parser.parse(text, {"render_as_table": as_table})
    marker = '<tr class="help-table-row">' if as_table else '<li class="help-csv-item">'
    assert result.html.count(marker) == 4


def test_no_header_generates_column_names(csv_parser):
    result = csv_parser.parse("1,2\n3,4\n", {"has_header": False})
    assert result.metadata["columns"] == ["Column 1", "Column 2"]
    assert result.metadata["rowCount"] == 2
    assert '<th class="help-table-header">Column 1</th>' in result.html


def test_list_rendering(csv_parser, sample_csv):
    """Rows become labeled list items: title, content, then remaining columns."""
    result = csv_parser.parse(sample_csv, {"render_as_table": False})
    assert result.html.startswith('<ul class="help-csv-content help-list help-csv-list">')
    assert (
        '<li class="help-csv-item">'
        '<strong class="help-csv-item-title">How do I log in?</strong> '
        '<span class="help-csv-item-content">Use your email.</span> '
        '<span class="help-csv-meta-item"><strong>Category:</strong> account</span>'
        '</li>'
    ) in result.html


def test_list_columns_chosen_by_name(csv_parser, sample_csv):
    result = csv_parser.parse(sample_csv, {"render_as_table": False, "title_column": "Category"})
    assert '<strong class="help-csv-item-title">billing</strong>' in result.html
    assert "<strong>Question:</strong> How do I log in?" in result.html


def test_list_missing_column_warns(csv_parser, sample_csv):
    result = csv_parser.parse(sample_csv, {"render_as_table": False, "content_column": "Nope"})
    assert len(result.warnings) == 1
    assert "'Nope'" in result.warnings[0]


def test_ragged_rows_are_padded_or_truncated(csv_parser):
    """Short rows are padded, long rows truncated, one warning per row."""
    result = csv_parser.parse("A,B,C\n1,2\n1,2,3,4\n1,2,3\n")
    assert len(result.warnings) == 2
    assert "line 2" in result.warnings[0] and "padded" in result.warnings[0]
    assert "line 3" in result.warnings[1] and "truncated" in result.warnings[1]
    assert '<td class="help-table-cell">2</td><td class="help-table-cell"></td></tr>' in result.html
    assert ">4<" not in result.html
    assert result.metadata["rowCount"] == 3


def test_max_rows_truncates_with_warning(csv_parser):
    result = csv_parser.parse("A\n1\n2\n3\n", {"max_rows": 2})
    assert result.metadata["rowCount"] == 2
    assert result.html.count('<tr class="help-table-row">') == 2
    assert result.warnings == ("Rendered the first 2 of 3 rows",)


def test_blank_rows_and_whitespace(csv_parser):
    result = csv_parser.parse(" A , B \n\n 1 , 2 \n\n")
    assert result.metadata == {"rowCount": 1, "columnCount": 2, "columns": ["A", "B"]}
    assert '<td class="help-table-cell">1</td>' in result.html


@pytest.mark.parametrize("text", ["", "\n\n", " , \n"])
def test_empty_input(csv_parser, text):
    result = csv_parser.parse(text)
    assert result.html == '<div class="help-csv-content help-csv-empty">No data</div>'
    assert result.metadata["rowCount"] == 0


def test_tsv_filename_defaults_to_tab(csv_parser):
    result = csv_parser.parse("a\tb\n1\t2\n", {"filename": "data.tsv"})
    assert result.metadata["columns"] == ["a", "b"]


def test_custom_delimiter(csv_parser):
    result = csv_parser.parse("a;b\n1;2\n", {"delimiter": ";"})
    assert result.metadata["columnCount"] == 2


def test_delimiter_must_be_one_character(csv_parser):
    with pytest.raises(ValidationError):
        csv_parser.parse("a,b", {"delimiter": ";;"})


def test_cells_past_the_csv_module_default_limit_parse(csv_parser):
    """A 200 KB cell is valid input when no max_field_size is set."""
    text = 'a,b\n"' + "x" * 200_000 + '",1\n'
    result = csv_parser.parse(text, {"filename": "huge.csv"})
    assert result.metadata["rowCount"] == 1
    assert "x" * 200_000 in result.html


def test_max_field_size_exceeded_raises_parse_error(csv_parser):
    """A cell longer than max_field_size is malformed input."""
    text = 'a,b\n"' + "x" * 20 + '",1\n'
    with pytest.raises(ParseError) as exc:
        csv_parser.parse(text, {"filename": "huge.csv", "max_field_size": 10})
    assert exc.value.kind == ErrorKind.malformed_input
    assert "huge.csv" in str(exc.value)


def test_field_size_limit_is_restored(csv_parser):
    before = csv.field_size_limit()
    csv_parser.parse("a,b\n1,2\n", {"max_field_size": 10})
    assert csv.field_size_limit() == before


def test_confidence(csv_parser):
    assert csv_parser.confidence("A,B\n1,2\n3,4") == 0.9
    assert csv_parser.confidence("A,B\n1,2\n3,4", "faq.csv") == 1.0
    assert not csv_parser.can_parse("# Title\n\nProse.")
