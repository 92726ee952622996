"""Spreadsheet reader for ``.xlsx`` (openpyxl) and legacy ``.xls`` (xlrd) workbooks."""

from __future__ import annotations

from datetime import date, datetime
from logging import getLogger
from typing import TYPE_CHECKING
from zipfile import BadZipFile

from linkchart.domain.errors import FormatError

from .base import read_bytes, rows_to_records, tabular_graph

if TYPE_CHECKING:
    from pathlib import Path

    from linkchart.domain.model import RawGraph
    from linkchart.domain.ports import ReadRequest

log = getLogger(__name__)

FORMAT_NAME = "workbook"
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

type Sheet = list[list[object]]


def _cell_value(value: object) -> object:
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _load_xlsx(path: Path) -> dict[str, Sheet]:
    import openpyxl  # noqa: PLC0415
    from openpyxl.utils.exceptions import InvalidFileException  # noqa: PLC0415

    try:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
        raise FormatError(f"Cannot open workbook {path}: {exc}", format_name=FORMAT_NAME) from exc
    try:
        return {
            worksheet.title: [
                [_cell_value(cell) for cell in row]
                for row in worksheet.iter_rows(values_only=True)
            ]
            for worksheet in workbook.worksheets
        }
    finally:
        workbook.close()


def _load_xls(path: Path) -> dict[str, Sheet]:
    import xlrd  # noqa: PLC0415

    try:
        book = xlrd.open_workbook(str(path))
    except (xlrd.XLRDError, OSError, ValueError) as exc:
        raise FormatError(f"Cannot open workbook {path}: {exc}", format_name=FORMAT_NAME) from exc

    sheets: dict[str, Sheet] = {}
    for sheet in book.sheets():
        rows: Sheet = []
        for row_index in range(sheet.nrows):
            row: list[object] = []
            for column_index in range(sheet.ncols):
                cell = sheet.cell(row_index, column_index)
                value: object = cell.value
                if cell.ctype == xlrd.XL_CELL_EMPTY:
                    value = None
                elif cell.ctype == xlrd.XL_CELL_DATE:
                    value = _cell_value(xlrd.xldate.xldate_as_datetime(cell.value, book.datemode))
                elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                    value = bool(cell.value)
                elif cell.ctype == xlrd.XL_CELL_NUMBER and float(cell.value).is_integer():
                    value = int(cell.value)
                row.append(value)
            rows.append(row)
        sheets[sheet.name] = rows
    return sheets


def load_sheets(path: Path) -> dict[str, Sheet]:
    """All sheets of a workbook as row lists, in workbook order."""

    head = read_bytes(path, format_name=FORMAT_NAME)[: len(OLE2_MAGIC)]
    if head == OLE2_MAGIC:
        return _load_xls(path)
    return _load_xlsx(path)


def _pick_sheet(sheets: dict[str, Sheet], name: str | None, *, fallback: int) -> Sheet | None:
    if name is not None:
        if name not in sheets:
            msg = f"Sheet {name!r} not found; available: {', '.join(sheets)}"
            raise FormatError(msg, format_name=FORMAT_NAME)
        return sheets[name]
    ordered = list(sheets.values())
    return ordered[fallback] if fallback < len(ordered) else None


class WorkbookReader:
    """Entities come from the first sheet and links from a second one when present."""

    format_name: str = FORMAT_NAME

    def read(self, request: ReadRequest) -> RawGraph:
        sheets = load_sheets(request.path)
        if not sheets:
            raise FormatError(f"{request.path} has no sheets", format_name=FORMAT_NAME)
        entity_rows = _pick_sheet(sheets, request.entities_sheet, fallback=0)
        link_rows = _pick_sheet(sheets, request.links_sheet, fallback=1)

        if request.links_path is not None:
            companion = load_sheets(request.links_path)
            link_rows = _pick_sheet(companion, request.links_sheet, fallback=0)

        _, entity_records = rows_to_records(entity_rows or [], format_name=FORMAT_NAME)
        link_records: list[dict[str, object]] = []
        if link_rows:
            _, link_records = rows_to_records(link_rows, format_name=FORMAT_NAME)
        log.debug(
            "Workbook %s: %d entity rows, %d link rows",
            request.path.name,
            len(entity_records),
            len(link_records),
        )
        return tabular_graph(FORMAT_NAME, request.source_id, entity_records, link_records)
