from __future__ import annotations

import re
from dataclasses import dataclass

from .base import confidence_for, matches_field_name

MIN_DIGITS = 7
MAX_DIGITS = 15

_PHONE_CHARS_RE = re.compile(r"^\+?[\d\s().\-/]+$")
_SEPARATOR_RE = re.compile(r"[\s().\-/]")
_IPV4_RE = re.compile(r"^\d{1,3}(?:\.\d{1,3}){3}$")


def _digits(text: str) -> str:
    return "".join(char for char in text if char.isdigit())


@dataclass(slots=True)
class PhoneRecognizer:
    kind: str = "phone"
    field_names: tuple[str, ...] = (
        "phone",
        "telephone",
        "tel",
        "mobile",
        "cell",
        "fax",
        "msisdn",
        "contact_number",
    )

    def _pattern(self, value: object) -> bool:
        if not isinstance(value, str):
            return False
        text = value.strip()
        if not _PHONE_CHARS_RE.match(text) or _IPV4_RE.match(text):
            return False
        if not (text.startswith("+") or _SEPARATOR_RE.search(text)):
            return False
        return MIN_DIGITS <= len(_digits(text)) <= MAX_DIGITS

    def is_likely_type(self, field_name: str, value: object) -> bool:
        return self._pattern(value) or matches_field_name(field_name, self.field_names)

    def get_confidence(self, field_name: str, value: object) -> float:
        return confidence_for(
            name_match=matches_field_name(field_name, self.field_names),
            pattern_match=self._pattern(value),
        )

    def normalize(self, value: object) -> object:
        """Strip formatting; keep a leading ``+`` (E.164) when it is known or implied.

        Eleven digits starting with ``1`` are read as a NANP number with
        country code.
        """

        if not isinstance(value, str):
            return value
        text = value.strip()
        digits = _digits(text)
        if not MIN_DIGITS <= len(digits) <= MAX_DIGITS:
            return value
        if text.startswith("+") or (len(digits) == 11 and digits.startswith("1")):  # noqa: PLR2004
            return f"+{digits}"
        return digits
