from __future__ import annotations

from dataclasses import dataclass

from .base import parse_number

NUMERIC_CONFIDENCE = 0.6


@dataclass(slots=True)
class NumericRecognizer:
    """Turns numeric text into numbers.

    The string-number guard lives in the registry, so this recognizer never
    sees identifier-like fields.
    """

    kind: str = "numeric"

    def is_likely_type(self, field_name: str, value: object) -> bool:
        del field_name
        return isinstance(value, str) and parse_number(value) is not None

    def get_confidence(self, field_name: str, value: object) -> float:
        return NUMERIC_CONFIDENCE if self.is_likely_type(field_name, value) else 0.0

    def normalize(self, value: object) -> object:
        if isinstance(value, str):
            number = parse_number(value)
            return value if number is None else number
        return value
