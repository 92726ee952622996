from __future__ import annotations

import asyncio

import httpx
import pytest

from linkchart.adapters.http_resilience import (
    ResilientClient,
    _build_cache_storage,  # type: ignore[reportPrivateUsage]
    build_retry,
)
from linkchart.config import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy


def test_build_retry_uses_policy_values() -> None:
    retry = build_retry(RetryPolicy(total=2, backoff_factor=0.1))

    assert retry.total == 2
    assert retry.backoff_factor == 0.1


def test_cache_storage_is_skipped_when_disabled() -> None:
    assert _build_cache_storage(None) is None
    assert _build_cache_storage(CacheConfig(enabled=False)) is None


def test_cache_storage_rejects_unknown_backend() -> None:
    with pytest.raises(ValueError, match="Unsupported cache backend"):
        _build_cache_storage(CacheConfig(backend="redis"))  # type: ignore[arg-type]


def test_client_sends_default_headers_through_rate_limiter() -> None:
    seen: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    config = ResilienceConfig(
        name="test",
        base_url="https://api.test",
        cache=None,
        ratelimit=RateLimit(max_calls=5, per_seconds=1),
        default_headers={"User-Agent": "linkchart (ops@example.com)"},
    )

    async def run() -> list[int]:
        client = ResilientClient(config)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url="https://api.test",
            headers=dict(config.default_headers or {}),
            transport=httpx.MockTransport(handler),
        )
        async with client:
            responses = [await client.get("/ping", params={"n": str(n)}) for n in range(3)]
        return [response.status_code for response in responses]

    assert asyncio.run(run()) == [200, 200, 200]
    assert [request.url.params["n"] for request in seen] == ["0", "1", "2"]
    assert seen[0].headers["User-Agent"] == "linkchart (ops@example.com)"
