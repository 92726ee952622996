"""Nominatim-compatible geocoding adapter."""

from __future__ import annotations

from .client import HttpGeocoder
from .schema import NominatimPlace

__all__ = ["HttpGeocoder", "NominatimPlace"]
