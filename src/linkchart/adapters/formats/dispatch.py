"""Format detection and reader dispatch."""

from __future__ import annotations

import re
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from linkchart.domain.errors import FormatError

from .cypher import CypherReader
from .delimited import DelimitedReader
from .gexf import GexfReader
from .graphml import GraphMLReader
from .json_graph import JsonGraphReader
from .workbook import OLE2_MAGIC, WorkbookReader

if TYPE_CHECKING:
    from pathlib import Path

    from linkchart.domain.model import RawGraph
    from linkchart.domain.ports import FormatReader, ReadRequest

log = getLogger(__name__)

HEAD_SIZE = 4096
ZIP_MAGIC = b"PK\x03\x04"
CYPHER_HINT = re.compile(r"\bCREATE\s*\(", re.IGNORECASE)


class FormatName(StrEnum):
    JSON = "json"
    DELIMITED = "csv"
    WORKBOOK = "workbook"
    GRAPHML = "graphml"
    GEXF = "gexf"
    CYPHER = "cypher"


EXTENSIONS: Final[dict[str, FormatName]] = {
    ".json": FormatName.JSON,
    ".csv": FormatName.DELIMITED,
    ".tsv": FormatName.DELIMITED,
    ".tab": FormatName.DELIMITED,
    ".xlsx": FormatName.WORKBOOK,
    ".xls": FormatName.WORKBOOK,
    ".graphml": FormatName.GRAPHML,
    ".gexf": FormatName.GEXF,
    ".cypher": FormatName.CYPHER,
    ".cql": FormatName.CYPHER,
}

TABULAR_FORMATS: Final = frozenset({FormatName.DELIMITED, FormatName.WORKBOOK})


def _read_head(path: Path) -> bytes:
    try:
        with path.open("rb") as handle:
            return handle.read(HEAD_SIZE)
    except OSError as exc:
        raise FormatError(f"Cannot read {path}: {exc}") from exc


def sniff_format(head: bytes) -> FormatName | None:
    """Guess the format from the first bytes of a file."""

    if head.startswith(ZIP_MAGIC) or head.startswith(OLE2_MAGIC):
        return FormatName.WORKBOOK
    text = head.decode("utf-8", errors="ignore").lstrip("\ufeff").lstrip()
    lowered = text.lower()
    if "<gexf" in lowered:
        return FormatName.GEXF
    if "<graphml" in lowered:
        return FormatName.GRAPHML
    if text.startswith(("[", "{")):
        return FormatName.JSON
    if CYPHER_HINT.search(text):
        return FormatName.CYPHER
    return None


def detect_format(path: Path, head: bytes | None = None) -> FormatName:
    suffix = path.suffix.lower()
    if suffix in EXTENSIONS:
        return EXTENSIONS[suffix]

    sniffed = sniff_format(head if head is not None else _read_head(path))
    if sniffed is None and suffix == ".xml":
        sniffed = FormatName.GRAPHML
    if sniffed is None:
        raise FormatError(f"Unsupported input format: {path.name}")
    log.debug("Sniffed %s as %s", path.name, sniffed)
    return sniffed


READERS: Final[dict[FormatName, type[FormatReader]]] = {
    FormatName.JSON: JsonGraphReader,
    FormatName.DELIMITED: DelimitedReader,
    FormatName.WORKBOOK: WorkbookReader,
    FormatName.GRAPHML: GraphMLReader,
    FormatName.GEXF: GexfReader,
    FormatName.CYPHER: CypherReader,
}


def reader_for(format_name: FormatName) -> FormatReader:
    return READERS[format_name]()


def read_source(request: ReadRequest) -> RawGraph:
    """Read ``request.path`` with the reader its format calls for."""

    format_name = detect_format(request.path)
    log.info("Reading %s as %s", request.path.name, format_name)
    return reader_for(format_name).read(request)
