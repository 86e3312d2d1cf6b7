"""
Tests for ashes/services/collection.py
"""

from __future__ import annotations

from ashes.services.collection import LOCATIONS, RECORDS, ManagedCollection
from ashes.services.query import LocationFilter, RecordFilter, SortSpec


def _filled(make_record, n: int) -> ManagedCollection:
    coll = ManagedCollection(RECORDS, page_size=10)
    coll.replace_all([make_record(str(i), location="A" if i < 15 else "B") for i in range(n)])
    return coll


class TestMutation:
    def test_prepend_puts_entity_first(self, make_record):
        coll = _filled(make_record, 3)
        coll.prepend(make_record("new"))
        assert [r.id for r in coll][:2] == ["new", "0"]

    def test_prepend_many_keeps_given_order(self, make_record):
        coll = _filled(make_record, 2)
        coll.prepend_many([make_record("a"), make_record("b")])
        assert [r.id for r in coll] == ["a", "b", "0", "1"]

    def test_ids_stay_unique(self, make_record):
        coll = _filled(make_record, 3)
        coll.prepend(make_record("1", deceased_name="Replaced"))
        assert [r.id for r in coll] == ["1", "0", "2"]
        assert coll.get("1").deceased_name == "Replaced"

    def test_replace_all_drops_duplicate_ids(self, make_record):
        coll = ManagedCollection(RECORDS)
        coll.replace_all([make_record("1"), make_record("1"), make_record("2")])
        assert len(coll) == 2

    def test_replace_keeps_position(self, make_record):
        coll = _filled(make_record, 3)
        assert coll.replace("1", make_record("1", deceased_name="Edited"))
        assert [r.id for r in coll] == ["0", "1", "2"]
        assert coll.get("1").deceased_name == "Edited"

    def test_replace_unknown_id(self, make_record):
        coll = _filled(make_record, 3)
        assert not coll.replace("missing", make_record("missing"))
        assert len(coll) == 3

    def test_remove(self, make_record):
        coll = _filled(make_record, 3)
        assert coll.remove("1")
        assert coll.get("1") is None
        assert not coll.remove("1")


class TestViewState:
    def test_defaults(self):
        coll = ManagedCollection(LOCATIONS)
        assert coll.row_filter == LocationFilter()
        assert coll.sort is None
        assert coll.page == 1

    def test_filter_resets_to_first_page(self, make_record):
        coll = _filled(make_record, 25)
        coll.go_to_page(3)
        coll.apply_filter(RecordFilter(location="A"))
        assert coll.page == 1
        assert coll.view().total_count == 15

    def test_sort_resets_to_first_page_and_toggles(self, make_record):
        coll = _filled(make_record, 25)
        coll.go_to_page(2)
        assert coll.sort_by("deceased_name") == SortSpec("deceased_name", "asc")
        assert coll.page == 1
        assert coll.sort_by("deceased_name") == SortSpec("deceased_name", "desc")

    def test_page_navigation(self, make_record):
        coll = _filled(make_record, 25)
        assert coll.next_page() == 2
        assert coll.last_page() == 3
        assert coll.next_page() == 3
        assert coll.previous_page() == 2
        assert coll.first_page() == 1
        assert coll.previous_page() == 1

    def test_page_navigation_keeps_filter(self, make_record):
        coll = _filled(make_record, 25)
        coll.apply_filter(RecordFilter(location="A"))
        coll.next_page()
        view = coll.view()
        assert view.page == 2
        assert len(view.rows) == 5
        assert all(r.location == "A" for r in view.rows)

    def test_reset_filter(self, make_record):
        coll = _filled(make_record, 25)
        coll.apply_filter(RecordFilter(location="B"))
        coll.reset_filter()
        assert coll.row_filter == RecordFilter()
        assert coll.view().total_count == 25

    def test_filtered_is_not_paginated(self, make_record):
        coll = _filled(make_record, 25)
        coll.apply_filter(RecordFilter(location="A"))
        assert len(coll.filtered()) == 15

    def test_view_does_not_change_items(self, make_record):
        coll = _filled(make_record, 5)
        coll.sort_by("deceased_name")
        coll.sort_by("deceased_name")
        coll.view()
        assert [r.id for r in coll] == ["0", "1", "2", "3", "4"]
