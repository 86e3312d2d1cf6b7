"""
Demo data shown when the gateway has nothing to offer.

Fixed values, identical every session, so the registry is usable before a
backend is provisioned.
"""

from __future__ import annotations

from ashes.models.location import Location
from ashes.models.record import StorageRecord

SEED_CREATED_AT = "2024-01-01T00:00:00Z"


def seed_records() -> list[StorageRecord]:
    return [
        StorageRecord(
            id="1",
            storage_number="1975-07-08",
            location="Section A",
            deceased_name="李寶如",
            burial_register_number="1975-07-08",
            renter_name="",
            storage_start_date="1980-03-24",
            created_at=SEED_CREATED_AT,
        ),
        StorageRecord(
            id="2",
            storage_number="A1110/76",
            location="Section B",
            deceased_name="韋文(男)",
            burial_register_number="1976-05-20",
            renter_name="Kun",
            storage_start_date="1980-03-24",
            created_at=SEED_CREATED_AT,
        ),
        StorageRecord(
            id="3",
            storage_number="冇紙",  # "no paper"
            location="Section C",
            deceased_name="黃荷芳(女)",
            burial_register_number="1976-06-19",
            renter_name="",
            storage_start_date="1980-03-24",
            created_at=SEED_CREATED_AT,
        ),
    ]


def seed_locations() -> list[Location]:
    return [
        Location(id="1", name="Section A", description="Main area", created_at=SEED_CREATED_AT),
        Location(id="2", name="Section B", description="Secondary area", created_at=SEED_CREATED_AT),
        Location(id="3", name="Section C", description="Annex", created_at=SEED_CREATED_AT),
    ]
