"""Errors raised while loading linkchart settings and pipeline options."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when pipeline options or service settings fail validation."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required ``LINKCHART_*`` environment variable is unset or blank."""
