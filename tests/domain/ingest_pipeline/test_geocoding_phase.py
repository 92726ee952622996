from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from linkchart.domain.errors import ExternalServiceError
from linkchart.domain.ingest_pipeline import (
    Canonicalizer,
    GeocodingCache,
    GeocodingPhase,
    IngestGraph,
    PipelineContext,
)
from linkchart.domain.model import Coordinates, Entity, RawGraph
from tests.helpers.graphs import raw_entity, raw_graph

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


@dataclass
class FakeGeocoder:
    results: dict[str, Coordinates | None] = field(default_factory=dict)
    failure: Exception | None = None
    calls: list[list[str]] = field(default_factory=list)

    def geocode(self, addresses: Sequence[str]) -> Mapping[str, Coordinates | None]:
        self.calls.append(list(addresses))
        if self.failure is not None:
            raise self.failure
        return {address: self.results[address] for address in addresses if address in self.results}


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _location(entity_id: str, address: str, **properties: object) -> Entity:
    return Entity(
        id=entity_id,
        type="location",
        label=entity_id,
        properties={"address": address, **properties},  # type: ignore[dict-item]
    )


def _graph(*entities: Entity) -> IngestGraph:
    return IngestGraph(raw=RawGraph(), entities={entity.id: entity for entity in entities})


def _context(geocoder: FakeGeocoder) -> PipelineContext:
    return PipelineContext(geocoder=geocoder)


def test_addresses_are_resolved_and_cached() -> None:
    geocoder = FakeGeocoder(results={"1 Main Street": Coordinates(1.5, 2.5)})
    context = _context(geocoder)
    graph = _graph(_location("l1", "1 Main Street"))

    GeocodingPhase().run(graph, context=context)
    again = _graph(_location("l2", "1 main street"))
    GeocodingPhase().run(again, context=context)

    assert graph.entities["l1"].properties["latitude"] == 1.5
    assert graph.entities["l1"].properties["longitude"] == 2.5
    assert again.entities["l2"].properties["latitude"] == 1.5
    assert geocoder.calls == [["1 Main Street"]]


def test_equivalent_addresses_share_one_query() -> None:
    geocoder = FakeGeocoder(results={"1 Main Street": Coordinates(1.5, 2.5)})
    graph = _graph(_location("l1", "1 Main Street"), _location("l2", "1 main  street"))

    GeocodingPhase().run(graph, context=_context(geocoder))

    assert geocoder.calls == [["1 Main Street"]]
    assert graph.entities["l2"].properties["longitude"] == 2.5


def test_only_locations_without_coordinates_are_queried() -> None:
    geocoder = FakeGeocoder()
    person = Entity(id="p", type="person", label="Ada", properties={"address": "2 Elm Street"})
    placed = _location("l1", "3 Oak Avenue", latitude=1.0, longitude=2.0)

    GeocodingPhase().run(_graph(person, placed), context=_context(geocoder))

    assert geocoder.calls == []


def test_no_match_is_cached_without_coordinates() -> None:
    geocoder = FakeGeocoder(results={"Atlantis": None})
    context = _context(geocoder)
    graph = _graph(_location("l1", "Atlantis"))

    GeocodingPhase().run(graph, context=context)
    GeocodingPhase().run(_graph(_location("l2", "Atlantis")), context=context)

    assert "latitude" not in graph.entities["l1"].properties
    assert len(geocoder.calls) == 1
    assert context.report.errors == []


def test_failed_lookup_is_reported_and_not_cached() -> None:
    geocoder = FakeGeocoder()
    context = _context(geocoder)
    graph = _graph(_location("l1", "Nowhere Road"))

    GeocodingPhase().run(graph, context=context)

    assert [error.record_id for error in context.report.geocoding_failures] == ["l1"]
    assert len(context.geocoding_cache) == 0
    assert graph.entities["l1"].properties == {"address": "Nowhere Road"}


def test_batch_failure_is_reported_per_entity() -> None:
    geocoder = FakeGeocoder(failure=ExternalServiceError("timed out", service="geocoding"))
    context = _context(geocoder)
    graph = _graph(_location("l1", "A Street"), _location("l2", "B Street"))

    GeocodingPhase().run(graph, context=context)

    failures = context.report.geocoding_failures
    assert [error.record_id for error in failures] == ["l1", "l2"]
    assert all(error.service == "geocoding" for error in failures)


def test_unexpected_geocoder_error_does_not_abort_the_batch() -> None:
    geocoder = FakeGeocoder(failure=RuntimeError("socket closed"))
    context = _context(geocoder)
    graph = raw_graph(
        [
            raw_entity("l1", type="location", label="HQ", address="1 Main Street, Springfield"),
            raw_entity("p1", type="person", label="Ada"),
        ]
    )

    result = Canonicalizer(context).canonicalize(graph)

    assert set(result.graph.entities) == {"l1", "p1"}
    assert "latitude" not in result.graph.entities["l1"].properties
    failures = result.report.geocoding_failures
    assert [error.record_id for error in failures] == ["l1"]
    assert isinstance(failures[0], ExternalServiceError)
    assert "socket closed" in failures[0].message


def test_canonicalizer_geocodes_when_a_geocoder_is_configured() -> None:
    geocoder = FakeGeocoder(results={"10 Downing Street, London": Coordinates(51.5, -0.13)})
    context = _context(geocoder)
    graph = raw_graph(
        [raw_entity("l1", type="location", label="No. 10", address="10 Downing Street, London")]
    )

    result = Canonicalizer(context).canonicalize(graph)

    assert result.graph.entities["l1"].properties["latitude"] == 51.5


def test_cache_evicts_least_recently_used() -> None:
    cache = GeocodingCache(max_entries=2)
    cache.store("a", Coordinates(1, 1))
    cache.store("b", Coordinates(2, 2))

    assert cache.lookup("a") == (True, Coordinates(1, 1))
    cache.store("c", None)

    assert cache.lookup("b") == (False, None)
    assert cache.lookup("a")[0]
    assert cache.lookup("c") == (True, None)


def test_cache_entries_expire() -> None:
    clock = FakeClock()
    cache = GeocodingCache(ttl_seconds=10, clock=clock)
    cache.store("a", Coordinates(1, 1))

    clock.now = 11
    assert cache.lookup("a") == (False, None)
    assert len(cache) == 0


def test_cache_resize_trims_oldest_entries() -> None:
    cache = GeocodingCache()
    for name in ("a", "b", "c"):
        cache.store(name, None)

    cache.resize(max_entries=1, ttl_seconds=5)

    assert len(cache) == 1
    assert cache.lookup("c") == (True, None)
