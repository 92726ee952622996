"""In-process publish/subscribe for pipeline stages.

Handlers run synchronously in registration order. Payloads are passed by
reference, so a handler on ``import:data`` may rewrite ``envelope.data``
before later handlers see it; the canonicalizer subscribes there first.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from collections.abc import Callable

    from linkchart.domain.ingest_pipeline.context import BatchReport
    from linkchart.domain.model import CanonicalGraph, Entity, Link, RawGraph

log = getLogger(__name__)

IMPORT_DATA: Final = "import:data"
IMPORT_PROGRESS: Final = "import:progress"
IMPORT_ERROR: Final = "import:error"
IMPORT_COMPLETE: Final = "import:complete"
DATA_CANONICALIZED: Final = "data:canonicalized"

type Handler = Callable[[Any], None]


@dataclass(slots=True)
class ImportEnvelope:
    data: RawGraph | CanonicalGraph
    source_id: str | None = None
    merge: bool = False
    processed: bool = False
    report: BatchReport | None = None


@dataclass(frozen=True, slots=True)
class ImportProgress:
    message: str
    percentage: int
    warnings: int = 0


@dataclass(frozen=True, slots=True)
class ImportFailure:
    kind: str
    message: str


@dataclass(frozen=True, slots=True)
class ImportComplete:
    entities: dict[str, Entity]
    links: dict[str, Link]


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` and return a callable that removes it again."""

        self._handlers.setdefault(topic, []).append(handler)
        return lambda: self.unsubscribe(topic, handler)

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        handlers = self._handlers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, topic: str) -> tuple[Handler, ...]:
        return tuple(self._handlers.get(topic, ()))

    def publish[T](self, topic: str, payload: T) -> T:
        """Deliver ``payload`` to every handler of ``topic`` and return it.

        A handler exception propagates to the publisher and stops delivery.
        """

        handlers = self.handlers(topic)
        log.debug("Publishing %s to %d handler(s)", topic, len(handlers))
        for handler in handlers:
            handler(payload)
        return payload
