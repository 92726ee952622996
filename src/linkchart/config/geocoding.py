"""Geocoding service configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .env import optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from .pipeline import PipelineOptions

DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org"
DEFAULT_RATE_LIMIT_DELAY_MS = 100
DEFAULT_GEOCODING_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class GeocodingConfig:
    resilience: ResilienceConfig
    api_key: str | None = None
    timeout_seconds: float = DEFAULT_GEOCODING_TIMEOUT_SECONDS


def _ratelimit(delay_ms: int) -> RateLimit | None:
    if delay_ms <= 0:
        return None
    return RateLimit(max_calls=1, per_seconds=delay_ms / 1000)


def get_geocoding_config(*, options: PipelineOptions | None = None) -> GeocodingConfig:
    """Build the geocoder configuration from the environment.

    ``LINKCHART_GEOCODER_CONTACT`` is required because public Nominatim
    instances reject anonymous clients. A ``geocoding`` entry under the
    pipeline ``services`` option overrides the URL and API key, and
    ``rateLimitDelay`` sets the spacing between requests.
    """

    contact = require_env_vars(("LINKCHART_GEOCODER_CONTACT",))["LINKCHART_GEOCODER_CONTACT"]
    base_url = optional_env_var("LINKCHART_GEOCODER_URL", DEFAULT_GEOCODER_URL)
    api_key = optional_env_var("LINKCHART_GEOCODER_API_KEY")
    delay_ms = DEFAULT_RATE_LIMIT_DELAY_MS

    if options is not None:
        delay_ms = options.rate_limit_delay
        service = options.services.get("geocoding")
        if service is not None:
            base_url = service.url or base_url
            api_key = service.api_key or api_key

    resilience = ResilienceConfig(
        name="geocoding",
        base_url=base_url,
        ratelimit=_ratelimit(delay_ms),
        retry=RetryPolicy(total=2),
        cache=CacheConfig(enabled=True, backend="memory"),
        default_headers={"User-Agent": f"linkchart ({contact})"},
    )
    return GeocodingConfig(resilience=resilience, api_key=api_key)
