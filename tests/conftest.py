from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from linkchart.domain.events import EventBus
from linkchart.domain.ingest_pipeline import PipelineContext

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

TODAY = date(2024, 6, 15)


@pytest.fixture
def context() -> PipelineContext:
    return PipelineContext(today=lambda: TODAY)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str | bytes], Path]:
    def write(name: str, content: str | bytes) -> Path:
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return write
