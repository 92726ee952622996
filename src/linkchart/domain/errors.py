"""Error taxonomy for ingestion batches.

Only ``FormatError`` halts a batch. Every other error is recorded in the
batch report and the affected record or value is skipped or kept as-is.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base class for pipeline errors."""

    kind = "ingest"

    def __init__(self, message: str, *, record_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.record_id = record_id


class FormatError(IngestError):
    """The reader cannot parse the input syntax."""

    kind = "format"

    def __init__(self, message: str, *, format_name: str | None = None) -> None:
        super().__init__(message)
        self.format_name = format_name


class SchemaError(IngestError):
    """A required identifier can neither be resolved nor synthesized."""

    kind = "schema"


class LinkReferenceError(IngestError):
    """A link references an entity that is not part of the batch."""

    kind = "reference"

    def __init__(
        self,
        message: str,
        *,
        record_id: str | None = None,
        missing: str | None = None,
    ) -> None:
        super().__init__(message, record_id=record_id)
        self.missing = missing


class RecognizerError(IngestError):
    """A recognizer raised while normalizing a value."""

    kind = "recognizer"

    def __init__(self, message: str, *, recognizer: str, field_name: str) -> None:
        super().__init__(message)
        self.recognizer = recognizer
        self.field_name = field_name


class ExternalServiceError(IngestError):
    """An external lookup (geocoding) failed or timed out."""

    kind = "external_service"

    def __init__(self, message: str, *, service: str, record_id: str | None = None) -> None:
        super().__init__(message, record_id=record_id)
        self.service = service
