"""Entry points for running the canonicalization pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.domain.events import DATA_CANONICALIZED
from linkchart.domain.model import CanonicalGraph, RawGraph

from .analysis import AnalysisPhase, SummaryPhase
from .context import BatchReport, IngestGraph, PipelineContext
from .geocoding import GeocodingPhase
from .normalization import EntityNormalizationPhase, LinkNormalizationPhase
from .orchestrator import IngestionPipeline
from .pruning import OrphanPruningPhase

if TYPE_CHECKING:
    from linkchart.domain.events import EventBus, ImportEnvelope

log = getLogger(__name__)


def default_pipeline(*, geocode: bool = False) -> IngestionPipeline:
    phases = [
        AnalysisPhase(),
        EntityNormalizationPhase(),
        LinkNormalizationPhase(),
        OrphanPruningPhase(),
        SummaryPhase(),
    ]
    if geocode:
        phases.insert(2, GeocodingPhase())
    return IngestionPipeline(phases=tuple(phases))


@dataclass(frozen=True, slots=True)
class CanonicalizationResult:
    graph: CanonicalGraph
    report: BatchReport


class Canonicalizer:
    """Run the pipeline over whole batches.

    Accepts raw reader output or an already canonical graph; feeding a
    canonical graph back in returns an equal graph.
    """

    def __init__(
        self,
        context: PipelineContext | None = None,
        *,
        pipeline: IngestionPipeline | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.context = context or PipelineContext()
        self.pipeline = pipeline or default_pipeline(geocode=self.context.geocoder is not None)
        self._bus = bus

    def canonicalize(
        self, data: RawGraph | CanonicalGraph, *, publish: bool = True
    ) -> CanonicalizationResult:
        raw = data if isinstance(data, RawGraph) else RawGraph.from_canonical(data)
        report = self.context.begin_batch()
        report.errors.extend(raw.issues)
        graph = IngestGraph(raw=raw)
        try:
            self.pipeline.run(graph, context=self.context)
        finally:
            self.context.end_batch()

        canonical = graph.to_canonical()
        if not canonical.is_closed:
            raise RuntimeError("Canonical graph has dangling links after pruning")
        if publish and self._bus is not None:
            self._bus.publish(DATA_CANONICALIZED, canonical)
        return CanonicalizationResult(graph=canonical, report=report)

    def intercept(self, envelope: ImportEnvelope) -> None:
        """``import:data`` handler: replace the envelope data with canonical output."""

        if envelope.processed:
            return
        result = self.canonicalize(envelope.data, publish=False)
        envelope.data = result.graph
        envelope.report = result.report
        envelope.processed = True


def canonicalize(
    data: RawGraph | CanonicalGraph, *, context: PipelineContext | None = None
) -> CanonicalizationResult:
    """Canonicalize one batch with a fresh (or the given) context."""

    return Canonicalizer(context).canonicalize(data)
