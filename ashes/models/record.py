"""Storage record models: one ashes-storage entry per row in ashes_storage."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator

_DATE_FIELDS = ("storage_start_date", "retrieval_date", "cremation_date")


class StorageRecord(BaseModel):
    """Core record model. Represents a row in the ashes_storage table."""

    id: str
    storage_number: str
    location: str = ""
    deceased_name: str
    burial_register_number: str = ""
    renter_name: str = ""
    storage_start_date: str | None = None
    retrieval_date: str | None = None
    cremation_date: str | None = None
    created_at: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # Backends with integer or uuid keys still compare as opaque strings
        return str(value) if value is not None else value

    @field_validator("location", "burial_register_number", "renter_name", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator(*_DATE_FIELDS, mode="before")
    @classmethod
    def _empty_date_to_none(cls, value: Any) -> Any:
        return None if value == "" else value


class RecordForm(BaseModel):
    """
    What the user submits to create or edit a record.

    Every field is free text; dates are ISO yyyy-MM-dd strings or empty.
    No ordering is enforced between the three dates.
    """

    model_config = {"extra": "ignore"}

    storage_number: str = ""
    location: str = ""
    deceased_name: str = ""
    burial_register_number: str = ""
    renter_name: str = ""
    storage_start_date: str = ""
    retrieval_date: str = ""
    cremation_date: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def missing_fields(self) -> list[str]:
        """Names of required fields left empty."""
        return [name for name in ("storage_number", "deceased_name") if not getattr(self, name)]

    def to_payload(self) -> dict[str, Any]:
        """Column values for a gateway insert/update. Empty dates go out as null."""
        payload: dict[str, Any] = self.model_dump()
        for name in _DATE_FIELDS:
            payload[name] = payload[name] or None
        return payload

    @classmethod
    def from_entity(cls, record: StorageRecord) -> RecordForm:
        """Pre-fill a form from an existing record (edit/details)."""
        return cls(**record.model_dump(exclude={"id", "created_at"}))
