"""
Pydantic models for the ashes registry.

All data shapes defined here. No imports from gateway or services.
"""

from ashes.models.location import Location, LocationForm
from ashes.models.record import RecordForm, StorageRecord

__all__ = [
    # Record models
    "StorageRecord",
    "RecordForm",
    # Location models
    "Location",
    "LocationForm",
]
