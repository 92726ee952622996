"""Readers and writers for the supported graph and tabular formats."""

from __future__ import annotations

from .cypher import CypherReader
from .delimited import DelimitedReader, parse_delimited
from .dispatch import (
    EXTENSIONS,
    TABULAR_FORMATS,
    FormatName,
    detect_format,
    read_source,
    reader_for,
    sniff_format,
)
from .gexf import GexfReader
from .graphml import GraphMLReader
from .json_graph import JsonGraphReader, dumps_graph, graph_to_payload, write_graph
from .preview import SheetPreview, SourcePreview, preview
from .workbook import WorkbookReader, load_sheets

__all__ = [
    "EXTENSIONS",
    "TABULAR_FORMATS",
    "CypherReader",
    "DelimitedReader",
    "FormatName",
    "GexfReader",
    "GraphMLReader",
    "JsonGraphReader",
    "SheetPreview",
    "SourcePreview",
    "WorkbookReader",
    "detect_format",
    "dumps_graph",
    "graph_to_payload",
    "load_sheets",
    "parse_delimited",
    "preview",
    "read_source",
    "reader_for",
    "sniff_format",
    "write_graph",
]
