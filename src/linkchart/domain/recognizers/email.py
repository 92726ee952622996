from __future__ import annotations

import re
from dataclasses import dataclass

from .base import confidence_for, matches_field_name

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(slots=True)
class EmailRecognizer:
    kind: str = "email"
    field_names: tuple[str, ...] = ("email", "e-mail", "mail", "email_address")

    def _pattern(self, value: object) -> bool:
        return isinstance(value, str) and bool(_EMAIL_RE.match(value.strip()))

    def is_likely_type(self, field_name: str, value: object) -> bool:
        return self._pattern(value) or matches_field_name(field_name, self.field_names)

    def get_confidence(self, field_name: str, value: object) -> float:
        return confidence_for(
            name_match=matches_field_name(field_name, self.field_names),
            pattern_match=self._pattern(value),
        )

    def normalize(self, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value
