"""Pydantic models for JSON graph records."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from linkchart.domain.model import as_identifier, as_text


class _Record(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    type: str | None = None
    properties: dict[str, Any] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _identifier(cls, value: object) -> str | None:
        return as_identifier(value)

    @field_validator("type", mode="before")
    @classmethod
    def _text(cls, value: object) -> str | None:
        return as_text(value)

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class EntityRecord(_Record):
    label: Any = None
    source_id: str | None = Field(default=None, alias="sourceId")
    source_name: str | None = Field(default=None, alias="sourceName")
    source_color: str | None = Field(default=None, alias="sourceColor")
    type_was_changed: bool = Field(default=False, alias="_typeWasChanged")
    label_was_generated: bool = Field(default=False, alias="_labelWasGenerated")


class LinkRecord(_Record):
    source: str | None = Field(default=None, validation_alias=AliasChoices("source", "from"))
    target: str | None = Field(default=None, validation_alias=AliasChoices("target", "to"))
    label: Any = None

    @field_validator("source", "target", mode="before")
    @classmethod
    def _endpoint(cls, value: object) -> str | None:
        return as_identifier(value)
