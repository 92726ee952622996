"""Shared context structures for the ingest pipeline (graph + resources)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.domain.errors import (
    ExternalServiceError,
    LinkReferenceError,
    RecognizerError,
    SchemaError,
)
from linkchart.domain.model import CanonicalGraph
from linkchart.domain.profiles import DEFAULT_LINK_TYPES
from linkchart.domain.recognizers import DateRecognizer, RecognizerRegistry
from linkchart.domain.type_detection import TypeDetector

from .geocoding import GeocodingCache
from .rules import ProcessingRules

if TYPE_CHECKING:
    from collections.abc import Callable

    from linkchart.config.pipeline import PipelineOptions
    from linkchart.domain.errors import IngestError
    from linkchart.domain.model import Entity, Link, RawGraph
    from linkchart.domain.ports import Geocoder
    from linkchart.domain.profiles import LinkTypeProfile

    from .analysis import BatchStatistics, ProcessedStatistics

log = getLogger(__name__)


@dataclass(slots=True)
class IngestGraph:
    """Raw input of one batch plus the canonical records built from it."""

    raw: RawGraph
    entities: dict[str, Entity] = field(default_factory=dict)
    links: dict[str, Link] = field(default_factory=dict)

    def to_canonical(self) -> CanonicalGraph:
        return CanonicalGraph(entities=dict(self.entities), links=dict(self.links))


@dataclass(slots=True)
class BatchReport:
    """Non-fatal problems met while processing one batch."""

    errors: list[IngestError] = field(default_factory=list)
    skipped_entities: list[str] = field(default_factory=list)
    filtered_entities: list[str] = field(default_factory=list)
    skipped_links: list[str] = field(default_factory=list)
    orphaned_links: list[str] = field(default_factory=list)
    fallback_used: bool = False
    incoming: BatchStatistics | None = None
    processed: ProcessedStatistics | None = None

    def record(self, error: IngestError) -> None:
        self.errors.append(error)

    @property
    def schema_errors(self) -> list[SchemaError]:
        return [error for error in self.errors if isinstance(error, SchemaError)]

    @property
    def recognizer_errors(self) -> list[RecognizerError]:
        return [error for error in self.errors if isinstance(error, RecognizerError)]

    @property
    def geocoding_failures(self) -> list[ExternalServiceError]:
        return [error for error in self.errors if isinstance(error, ExternalServiceError)]

    @property
    def warnings(self) -> int:
        """Problems worth surfacing; dangling link references are not counted."""

        return sum(not isinstance(error, LinkReferenceError) for error in self.errors)


def _default_link_types() -> dict[str, LinkTypeProfile]:
    return {profile.name: profile for profile in DEFAULT_LINK_TYPES}


@dataclass(slots=True)
class PipelineContext:
    """Resources shared by the phases of a pipeline run.

    A context serves one batch at a time; ``configure`` is refused while a
    batch is in flight so recognizer settings stay fixed during processing.
    """

    recognizers: RecognizerRegistry = field(default_factory=RecognizerRegistry)
    type_detector: TypeDetector = field(default_factory=TypeDetector)
    rules: ProcessingRules = field(default_factory=ProcessingRules)
    link_types: dict[str, LinkTypeProfile] = field(default_factory=_default_link_types)
    geocoder: Geocoder | None = None
    geocoding_cache: GeocodingCache = field(default_factory=GeocodingCache)
    today: Callable[[], date] = date.today
    report: BatchReport = field(default_factory=BatchReport)
    options: PipelineOptions | None = None
    in_flight: bool = False

    def begin_batch(self) -> BatchReport:
        if self.in_flight:
            raise RuntimeError("A batch is already in flight on this pipeline context")
        self.in_flight = True
        self.report = BatchReport()
        return self.report

    def end_batch(self) -> None:
        self.in_flight = False

    def configure(self, options: PipelineOptions) -> None:
        """Apply validated pipeline options to the cache, rules and detectors."""

        if self.in_flight:
            raise RuntimeError("configure() must not be called while a batch is in flight")

        self.options = options
        self.geocoding_cache.resize(
            max_entries=options.max_cache_size,
            ttl_seconds=options.cache_timeout / 1000,
        )

        rules = options.processing_rules
        normalization = rules.normalization
        date_fields = (
            tuple(normalization.date_fields) if normalization.date_fields is not None else None
        )
        self.rules = self.rules.updated(
            renames={name: mapping.rename for name, mapping in rules.field_mapping.items()},
            date_fields=date_fields,
            text_cases=normalization.text_cases,
            value_replacements=normalization.value_replacements,
        )
        if date_fields is not None:
            self.recognizers.register(DateRecognizer(field_names=date_fields))
        for type_name, keywords in rules.type_detection.items():
            self.type_detector.extend_keywords(type_name.lower(), keywords)
        log.debug("Pipeline context configured: %s", options)
