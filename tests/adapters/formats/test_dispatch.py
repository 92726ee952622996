from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from linkchart.adapters.formats import (
    CypherReader,
    FormatName,
    detect_format,
    read_source,
    reader_for,
    sniff_format,
)
from linkchart.domain.errors import FormatError
from linkchart.domain.ports import ReadRequest

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("people.json", FormatName.JSON),
        ("people.CSV", FormatName.DELIMITED),
        ("people.tsv", FormatName.DELIMITED),
        ("case.xlsx", FormatName.WORKBOOK),
        ("case.xls", FormatName.WORKBOOK),
        ("net.graphml", FormatName.GRAPHML),
        ("net.gexf", FormatName.GEXF),
        ("script.cql", FormatName.CYPHER),
    ],
)
def test_extension_decides_the_format(name: str, expected: FormatName) -> None:
    assert detect_format(Path(name), head=b"") == expected


@pytest.mark.parametrize(
    ("head", "expected"),
    [
        (b"PK\x03\x04rest", FormatName.WORKBOOK),
        (b"\xef\xbb\xbf  [{\"id\": 1}]", FormatName.JSON),
        (b"<?xml version='1.0'?><gexf version='1.3'>", FormatName.GEXF),
        (b"<?xml version='1.0'?>\n<graphml>", FormatName.GRAPHML),
        (b"// seed\ncreate (a:Person)", FormatName.CYPHER),
        (b"id,name\n1,Ada", None),
    ],
)
def test_sniff_format(head: bytes, expected: FormatName | None) -> None:
    assert sniff_format(head) == expected


def test_unknown_extension_is_sniffed() -> None:
    assert detect_format(Path("export.txt"), head=b'{"nodes": []}') == FormatName.JSON


def test_unrecognized_xml_defaults_to_graphml() -> None:
    assert detect_format(Path("export.xml"), head=b"<root/>") == FormatName.GRAPHML


def test_unrecognized_input_is_a_format_error() -> None:
    with pytest.raises(FormatError, match="Unsupported input format"):
        detect_format(Path("notes.txt"), head=b"hello")


def test_reader_for_returns_a_fresh_reader() -> None:
    assert isinstance(reader_for(FormatName.CYPHER), CypherReader)


def test_read_source_dispatches_on_the_sniffed_format(
    write_file: Callable[[str, str | bytes], Path],
) -> None:
    path = write_file("export.dat", json.dumps([{"id": "a", "name": "Ada"}]))

    graph = read_source(ReadRequest(path=path, source_id="src"))

    assert graph.entities["a"].label == "Ada"
    assert not graph.needs_field_mapping
