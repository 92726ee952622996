"""Orphan pruning: drop links whose endpoints are not in the entity map."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import IngestGraph, PipelineContext

log = getLogger(__name__)


class OrphanPruningPhase:
    name: str = "pruning"

    def run(self, graph: IngestGraph, *, context: PipelineContext) -> None:
        orphans = [
            link_id
            for link_id, link in graph.links.items()
            if link.source not in graph.entities or link.target not in graph.entities
        ]
        for link_id in orphans:
            del graph.links[link_id]
        context.report.orphaned_links.extend(orphans)
        if orphans:
            log.info("Pruned %d orphaned link(s)", len(orphans))
