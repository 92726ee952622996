"""HTTP geocoder that resolves free-text addresses one request at a time."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from linkchart.adapters.http_resilience import ResilientClient
from linkchart.domain.errors import ExternalServiceError

from .schema import SEARCH_RESULTS

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from linkchart.config.geocoding import GeocodingConfig
    from linkchart.config.http_resilience import ResilienceConfig
    from linkchart.domain.model import Coordinates

log = getLogger(__name__)

SERVICE_NAME = "geocoding"
SEARCH_PATH = "/search"


class HttpGeocoder:
    """Geocoder backed by a Nominatim-style ``/search`` endpoint.

    Lookups share one client so the rate limit spans the whole batch. The
    batch stops at ``timeout_seconds``; addresses not reached by then are left
    out of the result like any other failed lookup.
    """

    def __init__(
        self,
        *,
        config: GeocodingConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def geocode(self, addresses: Sequence[str]) -> dict[str, Coordinates | None]:
        unique = list(dict.fromkeys(address for address in addresses if address.strip()))
        if not unique:
            return {}
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return self._run(unique)
        # asyncio.run refuses to nest inside a running loop
        with ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(self._run, unique).result()

    def _run(self, addresses: list[str]) -> dict[str, Coordinates | None]:
        try:
            return asyncio.run(self._geocode_async(addresses))
        except ExternalServiceError:
            raise
        except Exception as exc:
            log.exception("Geocoding batch failed")
            raise ExternalServiceError(f"Geocoding failed: {exc}", service=SERVICE_NAME) from exc

    async def _geocode_async(self, addresses: list[str]) -> dict[str, Coordinates | None]:
        results: dict[str, Coordinates | None] = {}
        attempted = 0
        try:
            async with asyncio.timeout(self._config.timeout_seconds):
                async with self._client_factory(self._resilience) as client:
                    for address in addresses:
                        attempted += 1
                        found, coordinates = await self._lookup(client, address)
                        if found:
                            results[address] = coordinates
        except TimeoutError:
            log.warning(
                "Geocoding timed out after %.1fs (%d of %d addresses attempted)",
                self._config.timeout_seconds,
                attempted,
                len(addresses),
            )
            if not results:
                msg = f"Geocoding timed out after {self._config.timeout_seconds}s"
                raise ExternalServiceError(msg, service=SERVICE_NAME) from None

        if not results:
            msg = f"All {len(addresses)} geocoding lookups failed"
            raise ExternalServiceError(msg, service=SERVICE_NAME)
        return results

    async def _lookup(
        self, client: ResilientClient, address: str
    ) -> tuple[bool, Coordinates | None]:
        params = {"q": address, "format": "jsonv2", "limit": "1"}
        if self._config.api_key:
            params["key"] = self._config.api_key
        try:
            response = await client.get(SEARCH_PATH, params=params)
            response.raise_for_status()
            places = SEARCH_RESULTS.validate_json(response.content)
        except (httpx.HTTPError, ValidationError) as exc:
            log.warning("Geocoding %r failed: %s", address, exc)
            return False, None
        if not places:
            log.debug("No geocoding match for %r", address)
            return True, None
        coordinates = places[0].coordinates()
        if not coordinates.is_valid:
            log.warning("Geocoder returned out-of-range coordinates for %r", address)
            return True, None
        return True, coordinates
