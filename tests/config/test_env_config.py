from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from linkchart.config import (
    ConfigurationError,
    MissingConfigurationError,
    PipelineOptions,
    RateLimit,
    get_geocoding_config,
    get_storage_config,
    optional_env_var,
    require_env_vars,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINKCHART_PRESENT", " value ")
    monkeypatch.setenv("LINKCHART_BLANK", "  ")
    monkeypatch.delenv("LINKCHART_ABSENT", raising=False)

    assert require_env_vars(("LINKCHART_PRESENT",)) == {"LINKCHART_PRESENT": "value"}
    with pytest.raises(MissingConfigurationError, match="LINKCHART_ABSENT, LINKCHART_BLANK"):
        require_env_vars(("LINKCHART_PRESENT", "LINKCHART_BLANK", "LINKCHART_ABSENT"))


def test_optional_env_var_falls_back_on_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINKCHART_BLANK", "")
    monkeypatch.delenv("LINKCHART_ABSENT", raising=False)

    assert optional_env_var("LINKCHART_BLANK", "fallback") == "fallback"
    assert optional_env_var("LINKCHART_ABSENT") is None


def test_geocoding_config_requires_contact(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LINKCHART_GEOCODER_CONTACT", raising=False)

    with pytest.raises(MissingConfigurationError):
        get_geocoding_config()


def test_geocoding_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINKCHART_GEOCODER_CONTACT", "ops@example.com")
    monkeypatch.delenv("LINKCHART_GEOCODER_URL", raising=False)
    monkeypatch.delenv("LINKCHART_GEOCODER_API_KEY", raising=False)

    config = get_geocoding_config()

    assert config.resilience.base_url == "https://nominatim.openstreetmap.org"
    assert config.resilience.ratelimit == RateLimit(max_calls=1, per_seconds=0.1)
    assert config.resilience.default_headers == {"User-Agent": "linkchart (ops@example.com)"}
    assert config.api_key is None


def test_geocoding_config_applies_service_options(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINKCHART_GEOCODER_CONTACT", "ops@example.com")
    monkeypatch.setenv("LINKCHART_GEOCODER_URL", "https://env.test")
    monkeypatch.setenv("LINKCHART_GEOCODER_API_KEY", "env-key")
    options = PipelineOptions.parse(
        {
            "rateLimitDelay": 0,
            "services": {"geocoding": {"url": "https://options.test", "apiKey": "opt-key"}},
        }
    )

    config = get_geocoding_config(options=options)

    assert config.resilience.base_url == "https://options.test"
    assert config.api_key == "opt-key"
    assert config.resilience.ratelimit is None


def test_geocoding_config_reads_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINKCHART_GEOCODER_CONTACT", "ops@example.com")
    monkeypatch.setenv("LINKCHART_GEOCODER_URL", "https://env.test")
    monkeypatch.setenv("LINKCHART_GEOCODER_API_KEY", "env-key")

    config = get_geocoding_config(options=PipelineOptions.parse({"rateLimitDelay": 250}))

    assert config.resilience.base_url == "https://env.test"
    assert config.api_key == "env-key"
    assert config.resilience.ratelimit == RateLimit(max_calls=1, per_seconds=0.25)


def test_pipeline_options_defaults() -> None:
    options = PipelineOptions.parse({})

    assert options.cache_timeout == 24 * 60 * 60 * 1000
    assert options.max_cache_size == 1000
    assert options.rate_limit_delay == 100
    assert options.services == {}
    assert options.processing_rules.field_mapping == {}


def test_pipeline_options_accept_both_spellings() -> None:
    camel = PipelineOptions.parse({"maxCacheSize": 10, "cacheTimeout": 5})
    snake = PipelineOptions.parse({"max_cache_size": 10, "cache_timeout": 5})

    assert camel == snake
    assert camel.max_cache_size == 10


def test_pipeline_options_parse_processing_rules() -> None:
    options = PipelineOptions.parse(
        {
            "processingRules": {
                "fieldMapping": {"person": {"rename": {"handle": "username"}}},
                "normalization": {
                    "dateFields": ["seen_on"],
                    "textCases": {"uppercase": ["callsign"]},
                    "valueReplacements": {"status": {"act": "Active"}},
                },
                "typeDetection": {"vehicle": ["plate"]},
            }
        }
    )

    rules = options.processing_rules
    assert rules.field_mapping["person"].rename == {"handle": "username"}
    assert rules.normalization.date_fields == ["seen_on"]
    assert rules.normalization.text_cases == {"uppercase": ["callsign"]}
    assert rules.normalization.value_replacements == {"status": {"act": "Active"}}
    assert rules.type_detection == {"vehicle": ["plate"]}


@pytest.mark.parametrize(
    "raw",
    [
        {"maxCacheSize": 0},
        {"rateLimitDelay": -1},
        {"cacheTimeout": "soon"},
        {"services": {"geocoding": {"enabled": "maybe"}}},
    ],
)
def test_pipeline_options_reject_invalid_values(raw: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError, match="Invalid pipeline options"):
        PipelineOptions.parse(raw)


def test_pipeline_options_warn_about_unknown_keys(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="linkchart.config.pipeline"):
        PipelineOptions.parse({"theme": "dark", "processingRules": {"colours": {}}})

    messages = [record.getMessage() for record in caplog.records]
    assert "Ignoring unknown options: theme" in messages
    assert "Ignoring unknown processingRules: colours" in messages


def test_storage_config_honours_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("LINKCHART_DATA_DIR", str(tmp_path / "data"))

    config = get_storage_config()

    assert config.data_dir == tmp_path / "data"
    cache_path = config.http_cache_path()
    assert cache_path.parent.is_dir()
    assert cache_path.name == "http_cache.db"


def test_storage_config_uses_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("LINKCHART_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_storage_config().data_dir == tmp_path / "linkchart"
