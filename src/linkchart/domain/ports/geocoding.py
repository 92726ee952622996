"""Port for address geocoding services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from linkchart.domain.model import Coordinates


@runtime_checkable
class Geocoder(Protocol):
    """Resolve addresses to coordinates.

    The returned mapping is keyed by the requested address strings. ``None``
    means the service answered without a match; an address missing from the
    mapping means its lookup failed. Implementations raise
    ``ExternalServiceError`` only when the whole batch failed.
    """

    def geocode(self, addresses: Sequence[str]) -> Mapping[str, Coordinates | None]: ...


__all__ = ["Geocoder"]
