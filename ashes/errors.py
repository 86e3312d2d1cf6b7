"""
Error taxonomy for the ashes registry.

Single-record operations recover from GatewayUnavailable locally; everything
else is surfaced to the user with its message.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for errors the front-end shows as a message."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class GatewayUnavailable(RegistryError):
    """Any network or service error from the remote gateway."""

    default_message = "Gateway unavailable."


class ValidationFailure(RegistryError):
    """A required field is empty, or no CSV row carries the required columns."""

    default_message = "Required fields are missing."


class ParseFailure(RegistryError):
    """CSV text could not be parsed."""

    default_message = "Failed to parse CSV file."


class ImportFailed(RegistryError):
    """The gateway rejected a bulk import. There is no local fallback."""

    default_message = "Failed to import records. Please check the CSV format."


class NotFound(RegistryError):
    """No entity with the requested id in the local collection."""

    default_message = "Record not found."
