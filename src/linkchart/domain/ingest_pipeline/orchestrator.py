"""Phase-based orchestrator for the canonicalization pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .context import PipelineContext

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .context import IngestGraph


class PipelinePhase(Protocol):
    """Contract implemented by each pipeline phase."""

    name: str

    def run(self, graph: IngestGraph, *, context: PipelineContext) -> None: ...


@dataclass(slots=True)
class IngestionPipeline:
    """Run phases in order against one ``IngestGraph``."""

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)

    @property
    def phase_names(self) -> tuple[str, ...]:
        return tuple(phase.name for phase in self.phases)

    def with_phase(self, phase: PipelinePhase, *, before: str | None = None) -> IngestionPipeline:
        """Return a new pipeline with ``phase`` inserted before ``before`` (or appended)."""

        if before is None:
            return IngestionPipeline(phases=(*self.phases, phase))
        names = self.phase_names
        if before not in names:
            raise ValueError(f"No phase named {before!r}")
        index = names.index(before)
        return IngestionPipeline(phases=(*self.phases[:index], phase, *self.phases[index:]))

    def extend(self, phases: Iterable[PipelinePhase]) -> IngestionPipeline:
        return IngestionPipeline(phases=(*self.phases, *tuple(phases)))

    def run(self, graph: IngestGraph, *, context: PipelineContext | None = None) -> IngestGraph:
        active_context = context or PipelineContext()
        for phase in self.phases:
            phase.run(graph, context=active_context)
        return graph
