"""Canonicalization pipeline.

Each batch runs through explicit phases (analysis, entities, optional
geocoding, links, pruning, summary) over an ``IngestGraph``. Phases share a
``PipelineContext`` that owns the recognizers, type detector, processing rules
and geocoding cache, so tests can create isolated contexts.
"""

from __future__ import annotations

from .analysis import AnalysisPhase, BatchStatistics, ProcessedStatistics, SummaryPhase
from .context import BatchReport, IngestGraph, PipelineContext
from .entity_ops import EntityProcessor, synthesize_label
from .geocoding import GeocodingCache, GeocodingPhase
from .link_ops import LinkProcessor, LinkRejection, infer_link_type
from .normalization import EntityNormalizationPhase, LinkNormalizationPhase
from .orchestrator import IngestionPipeline, PipelinePhase
from .pruning import OrphanPruningPhase
from .rules import ProcessingRules
from .runner import Canonicalizer, CanonicalizationResult, canonicalize, default_pipeline

__all__ = [
    "AnalysisPhase",
    "BatchReport",
    "BatchStatistics",
    "CanonicalizationResult",
    "Canonicalizer",
    "EntityNormalizationPhase",
    "EntityProcessor",
    "GeocodingCache",
    "GeocodingPhase",
    "IngestGraph",
    "IngestionPipeline",
    "LinkNormalizationPhase",
    "LinkProcessor",
    "LinkRejection",
    "OrphanPruningPhase",
    "PipelineContext",
    "PipelinePhase",
    "ProcessedStatistics",
    "ProcessingRules",
    "SummaryPhase",
    "canonicalize",
    "default_pipeline",
    "infer_link_type",
    "synthesize_label",
]
