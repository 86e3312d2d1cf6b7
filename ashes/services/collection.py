"""
Record store: one managed in-memory collection per entity kind.

Records and locations share the same list/filter/sort/page behaviour; a
CollectionKind describes what differs between them. Only the reconciler
mutates the entity list. Views are derived through the query pipeline.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ashes.config import settings
from ashes.models.location import Location, LocationForm
from ashes.models.record import RecordForm, StorageRecord
from ashes.services import query
from ashes.services.query import LocationFilter, QueryPage, RecordFilter, RowFilter, SortSpec
from ashes.services.seed import seed_locations, seed_records

E = TypeVar("E", bound=BaseModel)


@dataclass(frozen=True)
class CollectionKind:
    """Everything that differs between the two entity kinds."""

    name: str
    table: str
    entity: type[BaseModel]
    form: type[BaseModel]
    order_by: str
    descending: bool
    seed: Callable[[], list[Any]]
    empty_filter: Callable[[], RowFilter]
    columns: tuple[str, ...]


RECORDS = CollectionKind(
    name="records",
    table=settings.RECORDS_TABLE,
    entity=StorageRecord,
    form=RecordForm,
    order_by="created_at",
    descending=True,
    seed=seed_records,
    empty_filter=RecordFilter,
    columns=(
        "storage_number",
        "location",
        "deceased_name",
        "burial_register_number",
        "renter_name",
        "storage_start_date",
        "retrieval_date",
        "cremation_date",
    ),
)

LOCATIONS = CollectionKind(
    name="locations",
    table=settings.LOCATIONS_TABLE,
    entity=Location,
    form=LocationForm,
    order_by="name",
    descending=False,
    seed=seed_locations,
    empty_filter=LocationFilter,
    columns=("name", "description", "created_at"),
)

KINDS: dict[str, CollectionKind] = {RECORDS.name: RECORDS, LOCATIONS.name: LOCATIONS}


class ManagedCollection(Generic[E]):
    """Ordered entities of one kind plus the filter/sort/page the user has applied."""

    def __init__(self, kind: CollectionKind, page_size: int | None = None):
        self.kind = kind
        self.page_size = page_size or settings.PAGE_SIZE
        self.items: list[E] = []
        self.row_filter: RowFilter = kind.empty_filter()
        self.sort: SortSpec | None = None
        self.page = 1

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[E]:
        return iter(self.items)

    def get(self, entity_id: str) -> E | None:
        for item in self.items:
            if item.id == entity_id:
                return item
        return None

    # -- mutation (reconciler only) ---------------------------------------

    def replace_all(self, items: list[E]) -> None:
        self.items = _unique(items)

    def prepend(self, item: E) -> None:
        self.prepend_many([item])

    def prepend_many(self, items: list[E]) -> None:
        """Put new entities at the head, in the order given."""
        incoming = _unique(items)
        ids = {item.id for item in incoming}
        self.items = incoming + [item for item in self.items if item.id not in ids]

    def replace(self, entity_id: str, item: E) -> bool:
        for i, existing in enumerate(self.items):
            if existing.id == entity_id:
                self.items[i] = item
                return True
        return False

    def remove(self, entity_id: str) -> bool:
        before = len(self.items)
        self.items = [item for item in self.items if item.id != entity_id]
        return len(self.items) != before

    # -- view state ---------------------------------------------------------

    def apply_filter(self, row_filter: RowFilter) -> None:
        self.row_filter = row_filter
        self.page = 1

    def reset_filter(self) -> None:
        self.apply_filter(self.kind.empty_filter())

    def sort_by(self, key: str) -> SortSpec:
        """Click a column: toggle direction on the same key, else ascending."""
        self.sort = query.toggle_sort(self.sort, key)
        self.page = 1
        return self.sort

    def go_to_page(self, page: int) -> int:
        self.page = query.clamp_page(page, self.filtered_count(), self.page_size)
        return self.page

    def next_page(self) -> int:
        return self.go_to_page(self.page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self.page - 1)

    def first_page(self) -> int:
        return self.go_to_page(1)

    def last_page(self) -> int:
        return self.go_to_page(query.total_pages(self.filtered_count(), self.page_size))

    def filtered(self) -> list[E]:
        """Filtered and sorted, not paginated."""
        return query.sort_rows(query.filter_rows(self.items, self.row_filter), self.sort)

    def filtered_count(self) -> int:
        return len(query.filter_rows(self.items, self.row_filter))

    def view(self) -> QueryPage:
        return query.run_query(self.items, self.row_filter, self.sort, self.page, self.page_size)


def _unique(items: list[E]) -> list[E]:
    """Drop later duplicates so ids stay unique within a collection."""
    seen: set[str] = set()
    result = []
    for item in items:
        if item.id not in seen:
            seen.add(item.id)
            result.append(item)
    return result
