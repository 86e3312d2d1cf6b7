"""
Reconciliation layer between the record store and the remote gateway.

Every single-record operation tries the gateway first and, when it fails,
applies the same change locally so the registry stays usable offline:

- refresh: gateway rows, or the seed dataset when the gateway errors or is empty
- create:  gateway-assigned entity, or one with a synthesized id and timestamp
- update:  gateway-returned entity, or the form merged into the local entity
- delete:  removed locally either way

Bulk CSV import has no local path. A gateway failure there is surfaced.
"""

from __future__ import annotations

import logging
import random
import string
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from ashes.errors import GatewayUnavailable, ImportFailed, NotFound, ValidationFailure
from ashes.gateway import TableGateway
from ashes.models.record import StorageRecord
from ashes.services import csv_codec
from ashes.services.collection import LOCATIONS, RECORDS, CollectionKind, ManagedCollection

logger = logging.getLogger(__name__)

Source = Literal["remote", "local"]

_ID_CHARS = string.ascii_lowercase + string.digits


@dataclass
class Outcome:
    """
    Result of a reconciled operation.

    source is "remote" when the gateway answered, "local" when the fallback
    ran. error carries the gateway message that triggered the fallback.
    """

    source: Source
    value: Any = None
    error: str | None = None

    @property
    def is_remote(self) -> bool:
        return self.source == "remote"


def synthetic_id(length: int = 9) -> str:
    """Process-unique-enough local id. Not cryptographic; collisions are possible."""
    return "".join(random.choice(_ID_CHARS) for _ in range(length))


def now_iso() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class Reconciler:
    """Mediates every create/update/delete/refresh/import against the gateway."""

    def __init__(
        self,
        gateway: TableGateway,
        records: ManagedCollection[StorageRecord] | None = None,
        locations: ManagedCollection | None = None,
    ):
        self.gateway = gateway
        self.records = records if records is not None else ManagedCollection(RECORDS)
        self.locations = locations if locations is not None else ManagedCollection(LOCATIONS)
        # One-way: set on the first non-empty record refresh, never cleared
        self.connected = False
        self._in_flight = 0

    def collection(self, kind: str) -> ManagedCollection:
        if kind == RECORDS.name:
            return self.records
        if kind == LOCATIONS.name:
            return self.locations
        raise ValueError(f"Unknown collection: {kind}")

    @property
    def loading(self) -> bool:
        """True while any gateway round trip is in flight."""
        return self._in_flight > 0

    @contextmanager
    def _busy(self):
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    # -- refresh --------------------------------------------------------------

    async def refresh(self, kind: str) -> Outcome:
        """
        Reload a collection from the gateway.

        Non-empty result replaces the collection. Empty result or any gateway
        error installs the seed dataset instead.
        """
        coll = self.collection(kind)
        with self._busy():
            try:
                rows = await self.gateway.select(
                    coll.kind.table,
                    order_by=coll.kind.order_by,
                    descending=coll.kind.descending,
                )
                entities = _parse_rows(coll.kind, rows)
            except GatewayUnavailable as e:
                logger.warning("reconciler: fetching %s failed, using seed data: %s", kind, e)
                coll.replace_all(coll.kind.seed())
                return Outcome("local", coll.items, error=e.message)

            if not entities:
                logger.info("reconciler: no %s on gateway, using seed data", kind)
                coll.replace_all(coll.kind.seed())
                return Outcome("local", coll.items)

            coll.replace_all(entities)
            if coll.kind is RECORDS:
                self.connected = True
            return Outcome("remote", coll.items)

    async def refresh_records(self) -> Outcome:
        return await self.refresh(RECORDS.name)

    async def refresh_locations(self) -> Outcome:
        return await self.refresh(LOCATIONS.name)

    async def refresh_all(self) -> tuple[Outcome, Outcome]:
        return await self.refresh_records(), await self.refresh_locations()

    # -- single-record mutations -------------------------------------------

    async def create(self, kind: str, form: BaseModel) -> Outcome:
        """
        Create an entity and put it at the head of its collection.

        Raises:
            ValidationFailure: a required field is empty (nothing changes)
        """
        coll = self.collection(kind)
        form = _check_form(coll.kind, form)
        payload = form.to_payload()

        with self._busy():
            try:
                rows = await self.gateway.insert(coll.kind.table, [payload])
                entity = _first(coll.kind, rows)
            except GatewayUnavailable as e:
                logger.warning("reconciler: create in %s failed, keeping local copy: %s", kind, e)
                entity = coll.kind.entity(id=synthetic_id(), created_at=now_iso(), **payload)
                coll.prepend(entity)
                return Outcome("local", entity, error=e.message)

            coll.prepend(entity)
            return Outcome("remote", entity)

    async def update(self, kind: str, entity_id: str, form: BaseModel) -> Outcome:
        """
        Update an entity in place.

        On gateway failure the submitted fields overwrite the local entity;
        id and created_at are kept.

        Raises:
            ValidationFailure: a required field is empty (nothing changes)
            NotFound: no entity with that id in the collection
        """
        coll = self.collection(kind)
        form = _check_form(coll.kind, form)
        existing = coll.get(entity_id)
        if existing is None:
            raise NotFound(f"No {kind} entry with id {entity_id}.")
        payload = form.to_payload()

        with self._busy():
            try:
                rows = await self.gateway.update(coll.kind.table, entity_id, payload)
                entity = _first(coll.kind, rows)
            except GatewayUnavailable as e:
                logger.warning("reconciler: update of %s/%s failed, merging locally: %s", kind, entity_id, e)
                entity = existing.model_copy(update=payload)
                coll.replace(entity_id, entity)
                return Outcome("local", entity, error=e.message)

            coll.replace(entity_id, entity)
            return Outcome("remote", entity)

    async def delete(self, kind: str, entity_id: str) -> Outcome:
        """Delete an entity. It leaves the local collection whatever the gateway says."""
        coll = self.collection(kind)
        with self._busy():
            try:
                await self.gateway.delete(coll.kind.table, entity_id)
            except GatewayUnavailable as e:
                logger.warning("reconciler: delete of %s/%s failed, removing locally: %s", kind, entity_id, e)
                coll.remove(entity_id)
                return Outcome("local", entity_id, error=e.message)

            coll.remove(entity_id)
            return Outcome("remote", entity_id)

    # -- CSV ------------------------------------------------------------------

    async def import_csv(self, text: str) -> list[StorageRecord]:
        """
        Bulk-create records from CSV text in one gateway insert.

        Returns:
            The inserted records, now at the head of the record collection

        Raises:
            ParseFailure: the text is not CSV
            ValidationFailure: no row has both Storage Number and Deceased Name
            ImportFailed: the gateway insert failed (nothing is added)
        """
        forms = csv_codec.rows_to_forms(csv_codec.parse_csv(text))

        with self._busy():
            try:
                rows = await self.gateway.insert(RECORDS.table, [form.to_payload() for form in forms])
                records = _parse_rows(RECORDS, rows)
            except GatewayUnavailable as e:
                logger.error("reconciler: import of %d records failed: %s", len(forms), e)
                raise ImportFailed(e.message) from e

        self.records.prepend_many(records)
        logger.info("reconciler: imported %d records", len(records))
        return records

    def export_csv(self, now: datetime | None = None) -> tuple[str, str]:
        """Filtered (not paginated) records as (filename, csv text)."""
        return csv_codec.export_filename(now), csv_codec.export_records(self.records.filtered())


def _check_form(kind: CollectionKind, form: BaseModel | dict[str, Any]) -> Any:
    if not isinstance(form, kind.form):
        form = kind.form.model_validate(form.model_dump() if isinstance(form, BaseModel) else form)
    missing = form.missing_fields()
    if missing:
        raise ValidationFailure(f"Required: {', '.join(missing)}")
    return form


def _parse_rows(kind: CollectionKind, rows: list[dict[str, Any]]) -> list[Any]:
    if not isinstance(rows, list):
        raise GatewayUnavailable(f"unexpected {kind.name} response from gateway: {type(rows).__name__}")
    try:
        return [kind.entity.model_validate(row) for row in rows]
    except ValidationError as e:
        raise GatewayUnavailable(f"unexpected {kind.name} row from gateway: {e.error_count()} errors") from e


def _first(kind: CollectionKind, rows: list[dict[str, Any]]) -> Any:
    entities = _parse_rows(kind, rows)
    if not entities:
        raise GatewayUnavailable("gateway returned no rows")
    return entities[0]
