"""Import service: read, map, canonicalize and publish one source at a time."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.domain.errors import FormatError
from linkchart.domain.events import (
    DATA_CANONICALIZED,
    IMPORT_COMPLETE,
    IMPORT_DATA,
    IMPORT_ERROR,
    IMPORT_PROGRESS,
    ImportComplete,
    ImportEnvelope,
    ImportFailure,
    ImportProgress,
)
from linkchart.domain.field_mapping import FieldMapper
from linkchart.domain.model import CanonicalGraph, DataSource
from linkchart.domain.ports import ReadRequest

if TYPE_CHECKING:
    from pathlib import Path

    from linkchart.domain.events import EventBus
    from linkchart.domain.field_mapping import FieldMapping
    from linkchart.domain.ingest_pipeline import BatchReport, Canonicalizer
    from linkchart.domain.ports import SourceReader

log = getLogger(__name__)


class ImportState(StrEnum):
    IDLE = "idle"
    READING = "reading"
    MAPPING = "mapping"
    PROCESSING = "processing"
    PUBLISHING = "publishing"


@dataclass(frozen=True, slots=True)
class ImportRequest:
    path: Path
    links_path: Path | None = None
    mapping: FieldMapping | None = None
    merge: bool = False
    delimiter: str | None = None
    entities_sheet: str | None = None
    links_sheet: str | None = None
    source_name: str | None = None


@dataclass(slots=True)
class ImportOutcome:
    source: DataSource
    graph: CanonicalGraph | None = None
    report: BatchReport | None = None
    error: FormatError | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.graph is not None


class _Cancelled(Exception):
    pass


class ImportService:
    """Drive ``idle -> reading -> mapping -> processing -> publishing -> idle``.

    The canonicalizer is subscribed to ``import:data`` when the service is
    built, ahead of any listener registered later. Cancelling between stages
    abandons the batch and nothing is published for it.
    """

    def __init__(
        self,
        *,
        bus: EventBus,
        canonicalizer: Canonicalizer,
        reader: SourceReader,
        field_mapper: FieldMapper | None = None,
    ) -> None:
        self._bus = bus
        self._canonicalizer = canonicalizer
        self._reader = reader
        self._field_mapper = field_mapper or FieldMapper()
        self._state = ImportState.IDLE
        self._cancel_requested = False
        self._imports = 0
        bus.subscribe(IMPORT_DATA, canonicalizer.intercept)

    @property
    def state(self) -> ImportState:
        return self._state

    def cancel(self) -> None:
        if self._state is not ImportState.IDLE:
            self._cancel_requested = True

    def import_file(self, request: ImportRequest) -> ImportOutcome:
        if self._state is not ImportState.IDLE:
            raise RuntimeError(f"An import is already running (state: {self._state})")

        source = DataSource.create(request.source_name or request.path.name, index=self._imports)
        self._imports += 1
        self._cancel_requested = False
        try:
            return self._run(request, source)
        except _Cancelled:
            log.info("Import of %s cancelled", source.name)
            return ImportOutcome(source=source, cancelled=True)
        except FormatError as exc:
            self._state = ImportState.IDLE
            log.error("Cannot read %s: %s", request.path, exc.message)  # noqa: TRY400
            self._bus.publish(IMPORT_ERROR, ImportFailure(kind=exc.kind, message=exc.message))
            return ImportOutcome(source=source, error=exc)
        except Exception as exc:
            self._state = ImportState.IDLE
            self._bus.publish(IMPORT_ERROR, ImportFailure(kind="internal", message=str(exc)))
            raise
        finally:
            self._state = ImportState.IDLE
            self._cancel_requested = False

    def _run(self, request: ImportRequest, source: DataSource) -> ImportOutcome:
        self._enter(ImportState.READING)
        self._progress(f"Reading {source.name}", 10)
        raw = self._reader(
            ReadRequest(
                path=request.path,
                source_id=source.id,
                links_path=request.links_path,
                delimiter=request.delimiter,
                entities_sheet=request.entities_sheet,
                links_sheet=request.links_sheet,
            )
        )

        self._enter(ImportState.MAPPING)
        if raw.needs_field_mapping:
            raw = self._field_mapper.map_graph(raw, request.mapping)
        raw.assign_source(source)
        self._progress(
            f"Mapped {len(raw.entities)} entities and {len(raw.links)} links",
            40,
            warnings=len(raw.issues),
        )

        self._enter(ImportState.PROCESSING)
        envelope = self._bus.publish(
            IMPORT_DATA, ImportEnvelope(data=raw, source_id=source.id, merge=request.merge)
        )
        if not isinstance(envelope.data, CanonicalGraph) or envelope.report is None:
            raise RuntimeError("import:data was not canonicalized")
        graph, report = envelope.data, envelope.report
        self._progress("Canonicalized", 80, warnings=report.warnings)

        self._enter(ImportState.PUBLISHING)
        source.record_import(entity_count=len(graph.entities), link_count=len(graph.links))
        self._progress(
            f"Imported {len(graph.entities)} entities from {source.name}",
            100,
            warnings=report.warnings,
        )
        if request.merge:
            self._bus.publish(
                IMPORT_COMPLETE, ImportComplete(entities=graph.entities, links=graph.links)
            )
        self._bus.publish(DATA_CANONICALIZED, graph)
        return ImportOutcome(source=source, graph=graph, report=report)

    def _enter(self, state: ImportState) -> None:
        if self._cancel_requested:
            raise _Cancelled
        log.debug("Import state: %s -> %s", self._state, state)
        self._state = state

    def _progress(self, message: str, percentage: int, *, warnings: int = 0) -> None:
        self._bus.publish(IMPORT_PROGRESS, ImportProgress(message, percentage, warnings))
        if self._cancel_requested:
            raise _Cancelled
