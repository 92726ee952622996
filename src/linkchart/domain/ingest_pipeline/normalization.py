"""Entity and link normalization phases."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.domain.errors import IngestError

from .entity_ops import EntityProcessor
from .link_ops import LinkProcessor, LinkRejection

if TYPE_CHECKING:
    from .context import IngestGraph, PipelineContext

log = getLogger(__name__)


class EntityNormalizationPhase:
    """Process every raw entity; a failing entity is skipped, not fatal.

    When nothing survives a non-empty batch the unprocessed originals are
    admitted instead.
    """

    name: str = "entities"

    def run(self, graph: IngestGraph, *, context: PipelineContext) -> None:
        processor = EntityProcessor(context)
        report = context.report
        source_name = graph.raw.source.name if graph.raw.source else None

        for key, raw in graph.raw.entities.items():
            try:
                entity = processor.process(raw, key=key)
            except Exception as exc:  # noqa: BLE001
                log.exception("Skipping entity %s from %s", raw.id or key, source_name)
                report.skipped_entities.append(raw.id or key)
                report.record(
                    IngestError(f"Entity processing failed: {exc}", record_id=raw.id or key)
                )
                continue
            if entity is None:
                report.filtered_entities.append(raw.id or key)
                continue
            graph.entities[entity.id] = entity

        if graph.raw.entities and not graph.entities:
            log.warning(
                "All %d entities were filtered; keeping the unprocessed originals",
                len(graph.raw.entities),
            )
            report.fallback_used = True
            for key, raw in graph.raw.entities.items():
                entity = processor.admit_unprocessed(raw, key=key)
                graph.entities[entity.id] = entity


class LinkNormalizationPhase:
    name: str = "links"

    def run(self, graph: IngestGraph, *, context: PipelineContext) -> None:
        processor = LinkProcessor(context.link_types)
        report = context.report
        for key, raw in graph.raw.links.items():
            result = processor.process(raw, key=key, entities=graph.entities)
            if isinstance(result, LinkRejection):
                report.skipped_links.append(result.error.record_id or key)
                report.record(result.error)
                log.debug("%s", result.error.message)
                continue
            graph.links[result.id] = result
