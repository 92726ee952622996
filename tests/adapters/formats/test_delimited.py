from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from linkchart.adapters.formats import DelimitedReader, parse_delimited
from linkchart.domain.errors import FormatError
from linkchart.domain.ports import ReadRequest

if TYPE_CHECKING:
    from collections.abc import Callable


def test_header_row_names_the_columns() -> None:
    headers, records = parse_delimited("id,name,zip,amount\n1,Ada,07302,12\n\n2,Bob,,3.5\n")

    assert headers == ["id", "name", "zip", "amount"]
    assert records == [
        {"id": "1", "name": "Ada", "zip": "07302", "amount": 12},
        {"id": "2", "name": "Bob", "zip": None, "amount": 3.5},
    ]


def test_ragged_rows_keep_every_value() -> None:
    _, records = parse_delimited("a,b\n1\n1,2,3\n")

    assert records == [{"a": 1, "b": None}, {"a": 1, "b": 2, "column_3": 3}]


def test_blank_and_repeated_headers_are_made_unique() -> None:
    headers, _ = parse_delimited("name,,name\nx,y,z\n")

    assert headers == ["name", "column_2", "name_2"]


def test_quoted_fields_may_span_lines() -> None:
    _, records = parse_delimited('id,notes\n1,"line one\nline two, still notes"\n')

    assert records[0]["notes"] == "line one\nline two, still notes"


def test_custom_delimiter() -> None:
    _, records = parse_delimited("id;name\n1;Ada\n", delimiter=";")

    assert records == [{"id": "1", "name": "Ada"}]


def test_malformed_quoting_is_a_format_error() -> None:
    with pytest.raises(FormatError) as excinfo:
        parse_delimited('id,name\n1,"Ada"x\n')

    assert excinfo.value.format_name == "csv"


def test_missing_header_is_a_format_error() -> None:
    with pytest.raises(FormatError, match="Missing header row"):
        parse_delimited("\n\n")


def test_reader_builds_tabular_graph_with_companion_links(
    write_file: Callable[[str, str | bytes], Path],
) -> None:
    people = write_file("people.tsv", "\ufeffid\tname\n1\tAda\n2\tBob\n")
    links = write_file("links.tsv", "from\tto\ttype\n1\t2\tknows\n")

    graph = DelimitedReader().read(ReadRequest(path=people, source_id="src", links_path=links))

    assert graph.needs_field_mapping
    assert list(graph.entities) == ["csv_src_0", "csv_src_1"]
    assert graph.entities["csv_src_0"].properties == {"id": "1", "name": "Ada"}
    assert graph.entities["csv_src_0"].id is None
    assert graph.links["csv_src_link_0"].properties == {"from": 1, "to": 2, "type": "knows"}


def test_unreadable_file_is_a_format_error(tmp_path: Path) -> None:
    request = ReadRequest(path=tmp_path / "missing.csv", source_id="src")

    with pytest.raises(FormatError, match="Cannot read"):
        DelimitedReader().read(request)


def test_invalid_encoding_is_a_format_error(
    write_file: Callable[[str, str | bytes], Path],
) -> None:
    path = write_file("latin.csv", "id,name\n1,Jos\xe9\n".encode("latin-1"))

    with pytest.raises(FormatError, match="not valid"):
        DelimitedReader().read(ReadRequest(path=path, source_id="src"))

    graph = DelimitedReader().read(ReadRequest(path=path, source_id="src", encoding="latin-1"))
    assert graph.entities["csv_src_0"].properties["name"] == "José"
