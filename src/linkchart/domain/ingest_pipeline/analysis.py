"""Batch statistics logged before and after processing."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.domain.model import UNKNOWN_TYPE, as_text

if TYPE_CHECKING:
    from linkchart.domain.model import CanonicalGraph, RawGraph

    from .context import BatchReport, IngestGraph, PipelineContext

log = getLogger(__name__)

SAMPLE_SIZE = 100
TOP_PROPERTIES = 10


def value_kind(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "list"
    if isinstance(value, str):
        return "string"
    return "object"


@dataclass(slots=True)
class BatchStatistics:
    entity_count: int = 0
    link_count: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    top_properties: list[tuple[str, int]] = field(default_factory=list)
    value_kinds: dict[str, int] = field(default_factory=dict)
    missing_labels: int = 0
    missing_types: int = 0
    empty_entities: int = 0


@dataclass(slots=True)
class ProcessedStatistics:
    entity_count: int = 0
    link_count: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    generated_labels: int = 0
    changed_types: int = 0
    filtered_entities: int = 0
    skipped_entities: int = 0
    skipped_links: int = 0
    orphaned_links: int = 0
    warnings: int = 0
    fallback_used: bool = False


def analyze_raw(graph: RawGraph) -> BatchStatistics:
    """Type distribution, property frequency and quality indicators of raw input.

    Value kinds are sampled from the first entities only.
    """

    stats = BatchStatistics(entity_count=len(graph.entities), link_count=len(graph.links))
    types: Counter[str] = Counter()
    names: Counter[str] = Counter()
    kinds: Counter[str] = Counter()
    for index, entity in enumerate(graph.entities.values()):
        declared = as_text(entity.type)
        types[declared.lower() if declared else UNKNOWN_TYPE] += 1
        names.update(entity.properties.keys())
        if index < SAMPLE_SIZE:
            kinds.update(value_kind(value) for value in entity.properties.values())
        if as_text(entity.label) is None:
            stats.missing_labels += 1
        if declared is None or declared.lower() == UNKNOWN_TYPE:
            stats.missing_types += 1
        if not entity.properties:
            stats.empty_entities += 1
    stats.type_counts = dict(types)
    stats.top_properties = names.most_common(TOP_PROPERTIES)
    stats.value_kinds = dict(kinds)
    return stats


def analyze_canonical(graph: CanonicalGraph, report: BatchReport) -> ProcessedStatistics:
    entities = graph.entities.values()
    return ProcessedStatistics(
        entity_count=len(graph.entities),
        link_count=len(graph.links),
        type_counts=dict(graph.type_counts()),
        generated_labels=sum(entity.label_was_generated for entity in entities),
        changed_types=sum(entity.type_was_changed for entity in entities),
        filtered_entities=len(report.filtered_entities),
        skipped_entities=len(report.skipped_entities),
        skipped_links=len(report.skipped_links),
        orphaned_links=len(report.orphaned_links),
        warnings=report.warnings,
        fallback_used=report.fallback_used,
    )


class AnalysisPhase:
    name: str = "analysis"

    def run(self, graph: IngestGraph, *, context: PipelineContext) -> None:
        stats = analyze_raw(graph.raw)
        context.report.incoming = stats
        log.info(
            "Incoming batch: %d entities, %d links; types=%s",
            stats.entity_count,
            stats.link_count,
            stats.type_counts,
        )
        log.info(
            "Quality: missing labels=%d, missing types=%d, empty=%d; top properties=%s",
            stats.missing_labels,
            stats.missing_types,
            stats.empty_entities,
            stats.top_properties,
        )
        log.debug("Value kinds (sampled): %s", stats.value_kinds)


class SummaryPhase:
    name: str = "summary"

    def run(self, graph: IngestGraph, *, context: PipelineContext) -> None:
        stats = analyze_canonical(graph.to_canonical(), context.report)
        context.report.processed = stats
        log.info(
            "Processed batch: %d entities, %d links; types=%s",
            stats.entity_count,
            stats.link_count,
            stats.type_counts,
        )
        log.info(
            "Transformations: generated labels=%d, changed types=%d, filtered=%d, "
            "skipped entities=%d, skipped links=%d, orphaned links=%d, warnings=%d",
            stats.generated_labels,
            stats.changed_types,
            stats.filtered_entities,
            stats.skipped_entities,
            stats.skipped_links,
            stats.orphaned_links,
            stats.warnings,
        )
        if stats.fallback_used:
            log.warning("Every entity was filtered; unprocessed originals were kept")
