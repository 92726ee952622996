"""CSV/TSV reader."""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING

from linkchart.domain.errors import FormatError

from .base import read_text, rows_to_records, tabular_graph

if TYPE_CHECKING:
    from pathlib import Path

    from linkchart.domain.model import RawGraph
    from linkchart.domain.ports import ReadRequest

FORMAT_NAME = "csv"
TAB_SUFFIXES = frozenset({".tsv", ".tab"})


def default_delimiter(path: Path | None) -> str:
    if path is not None and path.suffix.lower() in TAB_SUFFIXES:
        return "\t"
    return ","


def parse_delimited(
    text: str, *, delimiter: str = ","
) -> tuple[list[str], list[dict[str, object]]]:
    """RFC-4180 parse with a required header row."""

    try:
        rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True))
    except csv.Error as exc:
        raise FormatError(f"Malformed delimited input: {exc}", format_name=FORMAT_NAME) from exc
    return rows_to_records(rows, format_name=FORMAT_NAME)


class DelimitedReader:
    format_name: str = FORMAT_NAME

    def read(self, request: ReadRequest) -> RawGraph:
        text = read_text(request.path, format_name=FORMAT_NAME, encoding=request.encoding)
        links_text = None
        if request.links_path is not None:
            links_text = read_text(
                request.links_path, format_name=FORMAT_NAME, encoding=request.encoding
            )
        return self.parse(
            text,
            source_id=request.source_id,
            links_text=links_text,
            delimiter=request.delimiter or default_delimiter(request.path),
            links_delimiter=request.delimiter or default_delimiter(request.links_path),
        )

    def parse(
        self,
        text: str,
        *,
        source_id: str,
        links_text: str | None = None,
        delimiter: str = ",",
        links_delimiter: str | None = None,
    ) -> RawGraph:
        _, entity_records = parse_delimited(text, delimiter=delimiter)
        link_records: list[dict[str, object]] = []
        if links_text is not None:
            _, link_records = parse_delimited(links_text, delimiter=links_delimiter or delimiter)
        return tabular_graph(FORMAT_NAME, source_id, entity_records, link_records)
