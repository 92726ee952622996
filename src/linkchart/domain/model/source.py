"""Data source descriptors (provenance of imported records)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Final
from uuid import uuid4

from .enums import SourceKind

SOURCE_PALETTE: Final[tuple[str, ...]] = (
    "#3498db",
    "#e74c3c",
    "#2ecc71",
    "#f39c12",
    "#9b59b6",
    "#1abc9c",
    "#e67e22",
    "#34495e",
)

SOURCE_ICONS: Final[dict[SourceKind, str]] = {
    SourceKind.FILE: "fa-file-import",
    SourceKind.API: "fa-cloud",
    SourceKind.STORAGE: "fa-hdd",
    SourceKind.DATABASE: "fa-database",
    SourceKind.IMPORTED: "fa-file-import",
}


@dataclass(slots=True)
class SourceMetadata:
    imported_at: datetime | None = None
    entity_count: int = 0
    link_count: int = 0


@dataclass(slots=True)
class DataSource:
    id: str
    name: str
    kind: SourceKind = SourceKind.FILE
    icon: str = SOURCE_ICONS[SourceKind.FILE]
    color: str = SOURCE_PALETTE[0]
    metadata: SourceMetadata = field(default_factory=SourceMetadata)

    @classmethod
    def create(
        cls,
        name: str,
        *,
        kind: SourceKind = SourceKind.FILE,
        index: int = 0,
    ) -> DataSource:
        """Create a descriptor with a fresh id and a palette color picked by ``index``."""

        return cls(
            id=f"source_{uuid4().hex[:12]}",
            name=name,
            kind=kind,
            icon=SOURCE_ICONS[kind],
            color=SOURCE_PALETTE[index % len(SOURCE_PALETTE)],
        )

    def record_import(self, *, entity_count: int, link_count: int) -> None:
        self.metadata = SourceMetadata(
            imported_at=datetime.now(UTC),
            entity_count=entity_count,
            link_count=link_count,
        )
