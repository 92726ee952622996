"""Header and sample-row preview of tabular inputs, used to build field mappings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from linkchart.domain.errors import FormatError

from .base import read_text, rows_to_records
from .delimited import FORMAT_NAME as DELIMITED, default_delimiter, parse_delimited
from .dispatch import FormatName, detect_format
from .workbook import FORMAT_NAME as WORKBOOK, load_sheets

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_SAMPLE_SIZE = 5


@dataclass(frozen=True, slots=True)
class SheetPreview:
    name: str
    headers: list[str]
    rows: list[dict[str, object]]
    row_count: int


@dataclass(frozen=True, slots=True)
class SourcePreview:
    path: Path
    format_name: FormatName
    sheets: list[SheetPreview] = field(default_factory=list)

    @property
    def sheet_names(self) -> list[str]:
        return [sheet.name for sheet in self.sheets]


def preview(
    path: Path,
    *,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    delimiter: str | None = None,
) -> SourcePreview:
    format_name = detect_format(path)
    sheets: list[SheetPreview] = []
    if format_name == FormatName.DELIMITED:
        text = read_text(path, format_name=DELIMITED)
        headers, records = parse_delimited(text, delimiter=delimiter or default_delimiter(path))
        sheets.append(SheetPreview(path.name, headers, records[:sample_size], len(records)))
    elif format_name == FormatName.WORKBOOK:
        for name, rows in load_sheets(path).items():
            try:
                headers, records = rows_to_records(rows, format_name=WORKBOOK)
            except FormatError:
                sheets.append(SheetPreview(name, [], [], 0))
                continue
            sheets.append(SheetPreview(name, headers, records[:sample_size], len(records)))
    else:
        raise FormatError(f"Preview is only available for tabular inputs, not {format_name}")
    return SourcePreview(path=path, format_name=format_name, sheets=sheets)
