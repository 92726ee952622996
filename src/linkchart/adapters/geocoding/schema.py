"""Response schema for Nominatim ``/search`` results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, TypeAdapter

from linkchart.domain.model import Coordinates


class NominatimPlace(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lat: float
    lon: float
    display_name: str | None = None

    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.lat, longitude=self.lon)


SEARCH_RESULTS = TypeAdapter(list[NominatimPlace])
