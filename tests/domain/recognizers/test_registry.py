from __future__ import annotations

from dataclasses import dataclass

from linkchart.domain.errors import RecognizerError
from linkchart.domain.recognizers import DateRecognizer, RecognizerRegistry


@dataclass(slots=True)
class ExplodingRecognizer:
    kind: str = "exploding"

    def is_likely_type(self, field_name: str, value: object) -> bool:
        del field_name, value
        return True

    def get_confidence(self, field_name: str, value: object) -> float:
        del field_name, value
        return 1.0

    def normalize(self, value: object) -> object:
        raise ValueError(f"cannot handle {value!r}")


def test_default_recognizer_order() -> None:
    registry = RecognizerRegistry()

    assert [recognizer.kind for recognizer in registry.recognizers] == [
        "coordinates",
        "date",
        "email",
        "phone",
        "address",
        "numeric",
    ]


def test_normalize_value_uses_most_confident_recognizer() -> None:
    registry = RecognizerRegistry()

    assert registry.normalize_value("email", " Ada@Example.ORG ") == "ada@example.org"
    assert registry.normalize_value("amount", "42") == 42
    assert registry.normalize_value("latitude", "40.7") == 40.7
    assert registry.normalize_value("notes", "hello") == "hello"


def test_string_number_guard_keeps_value_type() -> None:
    registry = RecognizerRegistry()

    assert registry.normalize_value("zip", "07302") == "07302"
    assert registry.normalize_value("account_number", "000123") == "000123"
    assert registry.normalize_value("year", 1999) == 1999


def test_structured_normalizer_output_is_discarded() -> None:
    registry = RecognizerRegistry()

    assert registry.normalize_value("location", "40.7, -74.0") == "40.7, -74.0"


def test_lists_are_normalized_element_wise() -> None:
    registry = RecognizerRegistry()

    assert registry.normalize_value("emails", ["A@X.com", " b@y.org"]) == ["a@x.com", "b@y.org"]
    assert registry.normalize_value("notes", None) is None


def test_failing_recognizer_reports_and_passes_value_through() -> None:
    registry = RecognizerRegistry()
    registry.register(ExplodingRecognizer(), first=True)
    errors: list[RecognizerError] = []

    result = registry.normalize_value("anything", "value", on_error=errors.append)

    assert result == "value"
    assert len(errors) == 1
    assert errors[0].recognizer == "exploding"
    assert errors[0].field_name == "anything"


def test_register_replaces_same_kind_in_place() -> None:
    registry = RecognizerRegistry()
    before = [recognizer.kind for recognizer in registry.recognizers]

    registry.register(DateRecognizer(field_names=("when",)))

    assert [recognizer.kind for recognizer in registry.recognizers] == before
    replaced = registry.get("date")
    assert isinstance(replaced, DateRecognizer)
    assert replaced.field_names == ("when",)
    assert registry.normalize_value("when", "March 5, 2024") == "2024-03-05"
