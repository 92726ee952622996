from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from linkchart.domain.ingest_pipeline import IngestGraph, IngestionPipeline, PipelineContext
from linkchart.domain.model import RawGraph


@dataclass
class RecordingPhase:
    name: str
    calls: list[str] = field(default_factory=list)

    def run(self, graph: IngestGraph, *, context: PipelineContext) -> None:
        del graph, context
        self.calls.append(self.name)


def test_phases_run_in_order_with_shared_context() -> None:
    calls: list[str] = []
    pipeline = IngestionPipeline(
        phases=(RecordingPhase("one", calls), RecordingPhase("two", calls))
    )
    graph = IngestGraph(raw=RawGraph())

    result = pipeline.run(graph, context=PipelineContext())

    assert result is graph
    assert calls == ["one", "two"]


def test_with_phase_inserts_before_named_phase() -> None:
    pipeline = IngestionPipeline(phases=(RecordingPhase("one"), RecordingPhase("three")))

    updated = pipeline.with_phase(RecordingPhase("two"), before="three")

    assert updated.phase_names == ("one", "two", "three")
    assert pipeline.phase_names == ("one", "three")
    assert updated.with_phase(RecordingPhase("four")).phase_names[-1] == "four"


def test_with_phase_rejects_unknown_anchor() -> None:
    pipeline = IngestionPipeline(phases=(RecordingPhase("one"),))

    with pytest.raises(ValueError, match="missing"):
        pipeline.with_phase(RecordingPhase("two"), before="missing")


def test_extend_appends_phases() -> None:
    pipeline = IngestionPipeline().extend([RecordingPhase("a"), RecordingPhase("b")])

    assert pipeline.phase_names == ("a", "b")
