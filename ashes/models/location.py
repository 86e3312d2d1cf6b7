"""Storage location models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator


class Location(BaseModel):
    """A place records can be stored. Represents a row in ashes_locations."""

    id: str
    name: str
    description: str | None = None
    created_at: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value


class LocationForm(BaseModel):
    """What the user submits to create or edit a location."""

    model_config = {"extra": "ignore"}

    name: str = ""
    description: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def missing_fields(self) -> list[str]:
        return [] if self.name else ["name"]

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description or None}

    @classmethod
    def from_entity(cls, location: Location) -> LocationForm:
        return cls(name=location.name, description=location.description)
