"""Address geocoding for location entities, backed by a bounded LRU cache."""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.domain.errors import ExternalServiceError
from linkchart.domain.model import EntityType
from linkchart.domain.recognizers import coordinates_from_properties

if TYPE_CHECKING:
    from collections.abc import Callable

    from linkchart.domain.model import Coordinates, Entity

    from .context import IngestGraph, PipelineContext

log = getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_TTL_SECONDS = 24 * 60 * 60.0


@dataclass(slots=True)
class GeocodingCache:
    """LRU cache keyed by normalized address text.

    ``None`` results (no match) are cached too; failed lookups never are.
    """

    max_entries: int = DEFAULT_MAX_ENTRIES
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    clock: Callable[[], float] = time.monotonic
    _entries: OrderedDict[str, tuple[float, Coordinates | None]] = field(
        default_factory=OrderedDict, init=False
    )

    @staticmethod
    def key(address: str) -> str:
        return " ".join(address.lower().split())

    def lookup(self, address: str) -> tuple[bool, Coordinates | None]:
        key = self.key(address)
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        stored_at, coordinates = entry
        if self.clock() - stored_at > self.ttl_seconds:
            del self._entries[key]
            return False, None
        self._entries.move_to_end(key)
        return True, coordinates

    def store(self, address: str, coordinates: Coordinates | None) -> None:
        key = self.key(address)
        self._entries[key] = (self.clock(), coordinates)
        self._entries.move_to_end(key)
        self._evict()

    def resize(self, *, max_entries: int, ttl_seconds: float) -> None:
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._evict()

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _evict(self) -> None:
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)


def _apply(entity: Entity, coordinates: Coordinates) -> None:
    entity.properties["latitude"] = coordinates.latitude
    entity.properties["longitude"] = coordinates.longitude


class GeocodingPhase:
    """Fill in coordinates for locations that only have an address.

    Failures are recorded on the batch report and leave the entity as it was.
    """

    name: str = "geocoding"

    def run(self, graph: IngestGraph, *, context: PipelineContext) -> None:
        geocoder = context.geocoder
        if geocoder is None:
            return
        cache = context.geocoding_cache

        pending: dict[str, tuple[str, list[Entity]]] = {}
        for entity in graph.entities.values():
            if entity.type != EntityType.LOCATION:
                continue
            if coordinates_from_properties(entity.properties) is not None:
                continue
            address = entity.properties.get("address")
            if not isinstance(address, str) or not address.strip():
                continue
            hit, coordinates = cache.lookup(address)
            if hit:
                if coordinates is not None:
                    _apply(entity, coordinates)
                continue
            key = cache.key(address)
            pending.setdefault(key, (address, []))[1].append(entity)

        if not pending:
            return

        queries = [address for address, _ in pending.values()]
        log.info("Geocoding %d address(es)", len(queries))
        try:
            results = geocoder.geocode(queries)
        except Exception as exc:  # noqa: BLE001
            failure = (
                exc
                if isinstance(exc, ExternalServiceError)
                else ExternalServiceError(f"Geocoder raised: {exc}", service="geocoding")
            )
            log.warning("Geocoding failed: %s", failure.message)
            for _, entities in pending.values():
                for entity in entities:
                    context.report.record(
                        ExternalServiceError(
                            failure.message, service=failure.service, record_id=entity.id
                        )
                    )
            return

        for address, entities in pending.values():
            if address not in results:
                for entity in entities:
                    context.report.record(
                        ExternalServiceError(
                            f"No geocoding result for {address!r}",
                            service="geocoding",
                            record_id=entity.id,
                        )
                    )
                continue
            coordinates = results[address]
            cache.store(address, coordinates)
            if coordinates is None:
                continue
            for entity in entities:
                _apply(entity, coordinates)
