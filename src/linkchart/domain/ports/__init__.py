"""Domain port definitions for adapters."""

from __future__ import annotations

from .geocoding import Geocoder
from .reading import FormatReader, ReadRequest, SourceReader

__all__ = ["FormatReader", "Geocoder", "ReadRequest", "SourceReader"]
