"""Application orchestration entry points."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.adapters.formats import preview, read_source, write_graph
from linkchart.adapters.geocoding import HttpGeocoder
from linkchart.config import ConfigurationError, PipelineOptions, get_geocoding_config
from linkchart.domain.data_integration import ImportOutcome, ImportRequest, ImportService
from linkchart.domain.events import EventBus
from linkchart.domain.ingest_pipeline import Canonicalizer, PipelineContext

if TYPE_CHECKING:
    from pathlib import Path

    from linkchart.adapters.formats import SourcePreview
    from linkchart.domain.field_mapping import FieldMapping
    from linkchart.domain.ports import Geocoder, SourceReader

log = getLogger(__name__)


def load_options(path: Path) -> PipelineOptions:
    """Read pipeline options from a JSON settings file."""

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot load options from {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Options file {path} must contain a JSON object")
    return PipelineOptions.parse(raw)


def build_context(
    *,
    options: PipelineOptions | None = None,
    geocode: bool = False,
    geocoder: Geocoder | None = None,
) -> PipelineContext:
    """Create a pipeline context, wiring the HTTP geocoder when requested."""

    context = PipelineContext(geocoder=geocoder)
    if geocode and geocoder is None:
        service = options.services.get("geocoding") if options is not None else None
        if service is not None and not service.enabled:
            log.warning("Geocoding requested but disabled in the service options")
        else:
            context.geocoder = HttpGeocoder(config=get_geocoding_config(options=options))
    if options is not None:
        context.configure(options)
    return context


def build_import_service(
    *,
    context: PipelineContext | None = None,
    bus: EventBus | None = None,
    reader: SourceReader = read_source,
) -> ImportService:
    bus = bus or EventBus()
    return ImportService(bus=bus, canonicalizer=Canonicalizer(context), reader=reader)


def import_file(
    path: Path,
    *,
    links_path: Path | None = None,
    mapping: FieldMapping | None = None,
    delimiter: str | None = None,
    entities_sheet: str | None = None,
    links_sheet: str | None = None,
    source_name: str | None = None,
    options: PipelineOptions | None = None,
    geocode: bool = False,
    output: Path | None = None,
    bus: EventBus | None = None,
) -> ImportOutcome:
    """Import one source file and optionally write the canonical graph as JSON."""

    service = build_import_service(
        context=build_context(options=options, geocode=geocode), bus=bus
    )
    log.info("Starting import: path=%s, links=%s, geocode=%s", path, links_path, geocode)
    outcome = service.import_file(
        ImportRequest(
            path=path,
            links_path=links_path,
            mapping=mapping,
            delimiter=delimiter,
            entities_sheet=entities_sheet,
            links_sheet=links_sheet,
            source_name=source_name,
        )
    )

    if outcome.graph is not None and outcome.report is not None:
        counts = outcome.graph.type_counts()
        log.info(
            "Finished import: entities=%d, links=%d, warnings=%d, types=%s",
            len(outcome.graph.entities),
            len(outcome.graph.links),
            outcome.report.warnings,
            dict(sorted(counts.items())),
        )
        if output is not None:
            write_graph(outcome.graph, output)
    return outcome


def preview_file(
    path: Path, *, rows: int = 5, delimiter: str | None = None
) -> SourcePreview:
    return preview(path, sample_size=rows, delimiter=delimiter)
