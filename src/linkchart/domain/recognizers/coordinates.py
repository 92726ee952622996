from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from linkchart.domain.model import Coordinates

from .base import confidence_for, matches_field_name, parse_number

_PAIR_RE = re.compile(r"^\s*\(?\s*(-?\d{1,3}(?:\.\d+)?)\s*[,;\s]\s*(-?\d{1,3}(?:\.\d+)?)\s*\)?\s*$")
_DMS_PART = r"(\d{1,3})°\s*(\d{1,2})['′]\s*(\d{1,2}(?:\.\d+)?)(?:\"|″|'')?\s*([NSEW])"
_DMS_RE = re.compile(rf"^\s*{_DMS_PART}\s*[,;\s]?\s*{_DMS_PART}\s*$", re.IGNORECASE)

LATITUDE_KEYS = ("latitude", "lat")
LONGITUDE_KEYS = ("longitude", "lng", "lon", "long")


def _dms_to_decimal(degrees: str, minutes: str, seconds: str, hemisphere: str) -> float:
    value = float(degrees) + float(minutes) / 60 + float(seconds) / 3600
    return -value if hemisphere.upper() in {"S", "W"} else value


def _as_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        number = parse_number(value)
        return None if number is None else float(number)
    return None


def parse_coordinates(value: object) -> Coordinates | None:
    """Parse a ``lat,lng`` pair, a DMS pair or a ``{lat, lng}`` mapping."""

    if isinstance(value, Coordinates):
        return value if value.is_valid else None
    if isinstance(value, Mapping):
        lat = next((value[key] for key in LATITUDE_KEYS if key in value), None)
        lng = next((value[key] for key in LONGITUDE_KEYS if key in value), None)
        latitude, longitude = _as_float(lat), _as_float(lng)
        if latitude is None or longitude is None:
            return None
        coordinates = Coordinates(latitude, longitude)
        return coordinates if coordinates.is_valid else None
    if not isinstance(value, str):
        return None
    if match := _PAIR_RE.match(value):
        coordinates = Coordinates(float(match.group(1)), float(match.group(2)))
        return coordinates if coordinates.is_valid else None
    if match := _DMS_RE.match(value):
        parts = match.groups()
        first = _dms_to_decimal(*parts[:4])
        second = _dms_to_decimal(*parts[4:])
        if parts[3].upper() in {"E", "W"}:
            first, second = second, first
        coordinates = Coordinates(first, second)
        return coordinates if coordinates.is_valid else None
    return None


def coordinates_from_properties(properties: Mapping[str, object]) -> Coordinates | None:
    """Valid coordinates held by ``latitude``/``longitude`` style properties."""

    found = parse_coordinates(properties)
    if found is not None:
        return found
    return parse_coordinates(properties.get("coordinates"))


@dataclass(slots=True)
class CoordinatesRecognizer:
    kind: str = "coordinates"
    field_names: tuple[str, ...] = (
        "coordinates",
        "coords",
        "latlng",
        "latlong",
        "geo",
        "gps",
        *LATITUDE_KEYS,
        *LONGITUDE_KEYS,
    )

    def _pattern(self, value: object) -> bool:
        if isinstance(value, (str, Mapping)):
            return parse_coordinates(value) is not None
        return False

    def is_likely_type(self, field_name: str, value: object) -> bool:
        return self._pattern(value) or matches_field_name(field_name, self.field_names)

    def get_confidence(self, field_name: str, value: object) -> float:
        return confidence_for(
            name_match=matches_field_name(field_name, self.field_names),
            pattern_match=self._pattern(value),
        )

    def normalize(self, value: object) -> object:
        """Return ``Coordinates`` for pairs, a float for single components."""

        coordinates = parse_coordinates(value)
        if coordinates is not None:
            return coordinates
        if isinstance(value, str) or (
            isinstance(value, int) and not isinstance(value, bool)
        ):
            number = _as_float(value)
            return value if number is None else number
        return value
