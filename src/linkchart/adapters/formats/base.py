"""Helpers shared by the format readers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from linkchart.domain.errors import FormatError
from linkchart.domain.model import RawEntity, RawGraph, RawLink, as_text
from linkchart.domain.recognizers import coerce_cell

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path


def synthesized_id(format_name: str, source_id: str, index: int) -> str:
    return f"{format_name}_{source_id}_{index}"


def synthesized_link_id(format_name: str, source_id: str, index: int) -> str:
    return f"{format_name}_{source_id}_link_{index}"


def read_bytes(path: Path, *, format_name: str) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FormatError(f"Cannot read {path}: {exc}", format_name=format_name) from exc


def read_text(path: Path, *, format_name: str, encoding: str = "utf-8") -> str:
    payload = read_bytes(path, format_name=format_name)
    if encoding.lower().replace("-", "") == "utf8":
        encoding = "utf-8-sig"
    try:
        return payload.decode(encoding)
    except UnicodeDecodeError as exc:
        msg = f"{path} is not valid {encoding}: {exc}"
        raise FormatError(msg, format_name=format_name) from exc


def _is_blank(cell: object) -> bool:
    return cell is None or (isinstance(cell, str) and not cell.strip())


def unique_columns(header: Sequence[object]) -> list[str]:
    """Header cells as column names; blanks get positional names, repeats a suffix."""

    columns: list[str] = []
    for index, cell in enumerate(header):
        name = as_text(cell) or f"column_{index + 1}"
        candidate, suffix = name, 2
        while candidate in columns:
            candidate = f"{name}_{suffix}"
            suffix += 1
        columns.append(candidate)
    return columns


def rows_to_records(
    rows: Iterable[Sequence[object]], *, format_name: str
) -> tuple[list[str], list[dict[str, object]]]:
    """Split off the header row and turn the remaining rows into records.

    Fully blank rows are skipped. Cells past the header get positional names
    so no value is dropped.
    """

    non_blank = [list(row) for row in rows if not all(_is_blank(cell) for cell in row)]
    if not non_blank:
        raise FormatError("Missing header row", format_name=format_name)
    columns = unique_columns(non_blank[0])

    records: list[dict[str, object]] = []
    for row in non_blank[1:]:
        record: dict[str, object] = {}
        for index, cell in enumerate(row):
            name = columns[index] if index < len(columns) else f"column_{index + 1}"
            record[name] = coerce_cell(name, cell)
        for name in columns[len(row) :]:
            record[name] = None
        records.append(record)
    return columns, records


def tabular_graph(
    format_name: str,
    source_id: str,
    entity_records: Sequence[dict[str, object]],
    link_records: Sequence[dict[str, object]] = (),
) -> RawGraph:
    """Raw graph whose records still need their columns assigned to roles."""

    return RawGraph(
        entities={
            synthesized_id(format_name, source_id, index): RawEntity(properties=record)
            for index, record in enumerate(entity_records)
        },
        links={
            synthesized_link_id(format_name, source_id, index): RawLink(properties=record)
            for index, record in enumerate(link_records)
        },
        needs_field_mapping=True,
    )
