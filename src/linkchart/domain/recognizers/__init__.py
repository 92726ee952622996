"""Field-value recognizers and the registry that arbitrates between them."""

from __future__ import annotations

from .address import AddressRecognizer
from .base import (
    STRING_NUMBER_FIELDS,
    Recognizer,
    coerce_cell,
    field_tokens,
    is_string_number_field,
    matches_field_name,
    parse_number,
)
from .coordinates import CoordinatesRecognizer, coordinates_from_properties, parse_coordinates
from .date import DEFAULT_DATE_FIELDS, DateRecognizer, parse_date
from .email import EmailRecognizer
from .numeric import NumericRecognizer
from .phone import PhoneRecognizer
from .registry import RecognizerRegistry, default_recognizers

__all__ = [
    "DEFAULT_DATE_FIELDS",
    "STRING_NUMBER_FIELDS",
    "AddressRecognizer",
    "CoordinatesRecognizer",
    "DateRecognizer",
    "EmailRecognizer",
    "NumericRecognizer",
    "PhoneRecognizer",
    "Recognizer",
    "RecognizerRegistry",
    "coerce_cell",
    "coordinates_from_properties",
    "default_recognizers",
    "field_tokens",
    "is_string_number_field",
    "matches_field_name",
    "parse_coordinates",
    "parse_date",
    "parse_number",
]
