"""Recognizer registry: picks the best recognizer for a field and applies it."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.domain.errors import RecognizerError
from linkchart.domain.model import is_property_value

from .address import AddressRecognizer
from .base import STRING_NUMBER_FIELDS, is_string_number_field
from .coordinates import CoordinatesRecognizer
from .date import DEFAULT_DATE_FIELDS, DateRecognizer
from .email import EmailRecognizer
from .numeric import NumericRecognizer
from .phone import PhoneRecognizer

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from linkchart.domain.model import PropertyValue

    from .base import Recognizer

log = getLogger(__name__)

CONFIDENCE_THRESHOLD = 0.5
EARLY_EXIT_CONFIDENCE = 0.9


def default_recognizers(
    *, date_fields: Iterable[str] = DEFAULT_DATE_FIELDS
) -> list[Recognizer]:
    """Built-in recognizers in tie-break order."""

    return [
        CoordinatesRecognizer(),
        DateRecognizer(field_names=tuple(date_fields)),
        EmailRecognizer(),
        PhoneRecognizer(),
        AddressRecognizer(),
        NumericRecognizer(),
    ]


@dataclass(slots=True)
class RecognizerRegistry:
    recognizers: list[Recognizer] = field(default_factory=default_recognizers)
    string_number_fields: tuple[str, ...] = STRING_NUMBER_FIELDS
    threshold: float = CONFIDENCE_THRESHOLD

    def register(self, recognizer: Recognizer, *, first: bool = False) -> None:
        """Add ``recognizer``; a recognizer of the same kind is replaced in place."""

        for index, item in enumerate(self.recognizers):
            if item.kind == recognizer.kind:
                self.recognizers[index] = recognizer
                return
        if first:
            self.recognizers.insert(0, recognizer)
        else:
            self.recognizers.append(recognizer)

    def get(self, kind: str) -> Recognizer | None:
        return next((item for item in self.recognizers if item.kind == kind), None)

    def best_match(self, field_name: str, value: object) -> tuple[Recognizer | None, float]:
        best: Recognizer | None = None
        best_confidence = 0.0
        for recognizer in self.recognizers:
            confidence = recognizer.get_confidence(field_name, value)
            if confidence > best_confidence:
                best, best_confidence = recognizer, confidence
                if confidence >= EARLY_EXIT_CONFIDENCE:
                    break
        return best, best_confidence

    def is_guarded(self, field_name: str) -> bool:
        return is_string_number_field(field_name, self.string_number_fields)

    def normalize_value(
        self,
        field_name: str,
        value: PropertyValue,
        *,
        on_error: Callable[[RecognizerError], None] | None = None,
    ) -> PropertyValue:
        """Normalize ``value`` with the most confident recognizer.

        Values below the confidence threshold, structured recognizer output
        and results that would change the type of a string-number field are
        all discarded in favour of the input value.
        """

        if value is None:
            return None
        if isinstance(value, list):
            return [
                self.normalize_value(field_name, item, on_error=on_error) for item in value
            ]

        recognizer, confidence = self.best_match(field_name, value)
        if recognizer is None or confidence < self.threshold:
            return value

        try:
            result = recognizer.normalize(value)
        except Exception as exc:  # noqa: BLE001
            error = RecognizerError(
                f"{recognizer.kind} recognizer failed on {field_name!r}: {exc}",
                recognizer=recognizer.kind,
                field_name=field_name,
            )
            log.warning("%s", error.message)
            if on_error is not None:
                on_error(error)
            return value

        if not is_property_value(result) or isinstance(result, list):
            return value
        if self.is_guarded(field_name) and type(result) is not type(value):
            return value
        log.debug("%s: %r -> %r via %s", field_name, value, result, recognizer.kind)
        return result  # type: ignore[return-value]
