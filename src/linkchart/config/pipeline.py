"""Validated pipeline options.

Options arrive as a plain mapping (usually parsed from a JSON settings file)
using the camelCase names of the workbench settings. Snake-case names are
accepted as well.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

DEFAULT_CACHE_TIMEOUT_MS = 24 * 60 * 60 * 1000
DEFAULT_MAX_CACHE_SIZE = 1000
DEFAULT_RATE_LIMIT_DELAY_MS = 100


class _OptionsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ServiceOptions(_OptionsModel):
    url: str | None = None
    enabled: bool = True
    api_key: str | None = Field(default=None, alias="apiKey")


class FieldMappingOptions(_OptionsModel):
    rename: dict[str, str] = Field(default_factory=dict)


class NormalizationOptions(_OptionsModel):
    date_fields: list[str] | None = Field(default=None, alias="dateFields")
    text_cases: dict[str, list[str]] | None = Field(default=None, alias="textCases")
    value_replacements: dict[str, dict[str, str]] | None = Field(
        default=None, alias="valueReplacements"
    )


class ProcessingRulesOptions(_OptionsModel):
    field_mapping: dict[str, FieldMappingOptions] = Field(
        default_factory=dict, alias="fieldMapping"
    )
    normalization: NormalizationOptions = Field(default_factory=NormalizationOptions)
    type_detection: dict[str, list[str]] = Field(default_factory=dict, alias="typeDetection")


class PipelineOptions(_OptionsModel):
    cache_timeout: int = Field(default=DEFAULT_CACHE_TIMEOUT_MS, alias="cacheTimeout", ge=0)
    max_cache_size: int = Field(default=DEFAULT_MAX_CACHE_SIZE, alias="maxCacheSize", ge=1)
    rate_limit_delay: int = Field(
        default=DEFAULT_RATE_LIMIT_DELAY_MS, alias="rateLimitDelay", ge=0
    )
    services: dict[str, ServiceOptions] = Field(default_factory=dict)
    processing_rules: ProcessingRulesOptions = Field(
        default_factory=ProcessingRulesOptions, alias="processingRules"
    )

    @classmethod
    def parse(cls, raw: Mapping[str, object]) -> PipelineOptions:
        """Validate ``raw`` and warn about keys that are not recognised."""

        _warn_unknown(cls, raw, scope="options")
        rules = raw.get("processingRules", raw.get("processing_rules"))
        if isinstance(rules, dict):
            _warn_unknown(ProcessingRulesOptions, rules, scope="processingRules")
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid pipeline options: {exc}") from exc


def _warn_unknown(model: type[BaseModel], raw: Mapping[str, object], *, scope: str) -> None:
    known: set[str] = set()
    for name, info in model.model_fields.items():
        known.add(name)
        if info.alias:
            known.add(info.alias)
    unknown = sorted(str(key) for key in raw if key not in known)
    if unknown:
        log.warning("Ignoring unknown %s: %s", scope, ", ".join(unknown))
