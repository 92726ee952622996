"""Ports for reading source files into raw graphs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from linkchart.domain.model import RawGraph


@dataclass(frozen=True, slots=True)
class ReadRequest:
    """What to read: the entities file plus an optional companion links file."""

    path: Path
    source_id: str
    links_path: Path | None = None
    delimiter: str | None = None
    entities_sheet: str | None = None
    links_sheet: str | None = None
    encoding: str = "utf-8"


@runtime_checkable
class FormatReader(Protocol):
    """A reader for one input format."""

    format_name: str

    def read(self, request: ReadRequest) -> RawGraph: ...


@runtime_checkable
class SourceReader(Protocol):
    """Callable port that picks the right reader for a request."""

    def __call__(self, request: ReadRequest) -> RawGraph: ...


__all__ = ["FormatReader", "ReadRequest", "SourceReader"]
