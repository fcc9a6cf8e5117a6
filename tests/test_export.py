"""Tests for CSV and JSON lines export."""

import io
import json

from trawl.common.document import Document
from trawl.common.export import column_order, write_csv, write_jsonl


def test_column_order_is_first_appearance():
    rows = [{"b": "1", "a": "2"}, {"a": "3", "c": "4"}]
    assert column_order(rows) == ["b", "a", "c"]


def test_write_csv_from_extracted_table():
    doc = Document.parse(
        "<table><tr><th>Title</th><th>Rating</th></tr>"
        "<tr><td>Foo, the film</td><td>9.1</td></tr>"
        "<tr><td>Bar</td><td>7.0</td></tr></table>"
    )
    stream = io.StringIO()
    count = write_csv(doc.extract_table(), stream)
    assert count == 2
    assert stream.getvalue() == (
        'Title,Rating\n"Foo, the film",9.1\nBar,7.0\n'
    )


def test_write_csv_fills_missing_values():
    stream = io.StringIO()
    write_csv([{"a": "1"}, {"b": "2"}], stream)
    assert stream.getvalue() == "a,b\n1,\n,2\n"


def test_write_csv_empty():
    stream = io.StringIO()
    assert write_csv([], stream) == 0


def test_write_jsonl():
    stream = io.StringIO()
    count = write_jsonl(
        [{"name": "Ada", "pts": 31.4}, {"name": "Zoë", "pts": 1}], stream
    )
    assert count == 2
    lines = stream.getvalue().splitlines()
    assert [json.loads(line) for line in lines] == [
        {"name": "Ada", "pts": 31.4},
        {"name": "Zoë", "pts": 1},
    ]
    assert "Zoë" in lines[1]
