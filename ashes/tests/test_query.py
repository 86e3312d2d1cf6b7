"""
Tests for ashes/services/query.py
"""

from __future__ import annotations

import pytest

from ashes.services.query import (
    LocationFilter,
    RecordFilter,
    SortSpec,
    filter_rows,
    paginate,
    run_query,
    sort_rows,
    toggle_sort,
    total_pages,
)


@pytest.fixture
def records(make_record):
    return [
        make_record("1", deceased_name="Alice Wong", storage_number="A-100", location="Section A",
                    storage_start_date="1980-03-24"),
        make_record("2", deceased_name="Bob Lee", storage_number="B-200", location="Section B",
                    renter_name="Kun", storage_start_date="1981-07-02"),
        make_record("3", deceased_name="Carol Chan", storage_number="no paper", location="Section A",
                    storage_start_date=None),
        make_record("4", deceased_name="Dan Ho", storage_number="A-101", location="section a",
                    storage_start_date="1980-11-30"),
    ]


class TestRecordFilter:
    def test_empty_filter_matches_everything(self, records):
        assert filter_rows(records, RecordFilter()) == records

    def test_text_matches_deceased_name_case_insensitive(self, records):
        result = filter_rows(records, RecordFilter(text="alice"))
        assert [r.id for r in result] == ["1"]

    def test_text_matches_storage_number(self, records):
        result = filter_rows(records, RecordFilter(text="a-10"))
        assert [r.id for r in result] == ["1", "4"]

    def test_text_matches_renter_name(self, records):
        result = filter_rows(records, RecordFilter(text="KUN"))
        assert [r.id for r in result] == ["2"]

    def test_location_is_exact_and_case_sensitive(self, records):
        result = filter_rows(records, RecordFilter(location="Section A"))
        assert [r.id for r in result] == ["1", "3"]

    def test_date_matches_partial_year(self, records):
        result = filter_rows(records, RecordFilter(date="1980"))
        assert [r.id for r in result] == ["1", "4"]

    def test_date_matches_year_month(self, records):
        result = filter_rows(records, RecordFilter(date="1981-07"))
        assert [r.id for r in result] == ["2"]

    def test_date_filter_excludes_missing_start_date(self, records):
        result = filter_rows(records, RecordFilter(date="19"))
        assert "3" not in [r.id for r in result]

    def test_predicates_are_conjunctive(self, records):
        result = filter_rows(records, RecordFilter(text="a-1", location="Section A", date="1980"))
        assert [r.id for r in result] == ["1"]

    def test_result_is_subset_satisfying_every_predicate(self, records):
        spec = RecordFilter(text="a", location="Section A")
        result = filter_rows(records, spec)
        assert all(r in records for r in result)
        assert all(spec.matches(r) for r in result)
        assert all(r in result for r in records if spec.matches(r))


class TestLocationFilter:
    def test_name_substring_case_insensitive(self, make_location):
        rows = [make_location("1", "Section A"), make_location("2", "Annex"), make_location("3", "Hall")]
        result = filter_rows(rows, LocationFilter(name="sec"))
        assert [r.id for r in result] == ["1"]

    def test_empty_name_matches_all(self, make_location):
        rows = [make_location("1", "Section A"), make_location("2", "Annex")]
        assert filter_rows(rows, LocationFilter()) == rows


class TestToggleSort:
    def test_new_key_starts_ascending(self):
        assert toggle_sort(None, "location") == SortSpec("location", "asc")

    def test_same_key_flips_to_descending(self):
        assert toggle_sort(SortSpec("location", "asc"), "location") == SortSpec("location", "desc")

    def test_descending_flips_back_to_ascending(self):
        assert toggle_sort(SortSpec("location", "desc"), "location") == SortSpec("location", "asc")

    def test_different_key_resets_to_ascending(self):
        assert toggle_sort(SortSpec("location", "desc"), "deceased_name") == SortSpec("deceased_name", "asc")


class TestSortRows:
    def test_no_sort_keeps_order(self, records):
        assert sort_rows(records, None) == records

    def test_ascending_lexicographic(self, records):
        result = sort_rows(records, SortSpec("storage_number"))
        assert [r.storage_number for r in result] == ["A-100", "A-101", "B-200", "no paper"]

    def test_absent_values_sort_as_empty_string(self, records):
        result = sort_rows(records, SortSpec("storage_start_date"))
        assert result[0].id == "3"

    def test_descending_reverses_distinct_keys(self, records):
        asc = sort_rows(records, SortSpec("deceased_name", "asc"))
        desc = sort_rows(records, SortSpec("deceased_name", "desc"))
        assert desc == list(reversed(asc))

    def test_ties_keep_prior_order_in_both_directions(self, make_record):
        rows = [
            make_record("1", location="B"),
            make_record("2", location="A"),
            make_record("3", location="B"),
            make_record("4", location="A"),
        ]
        asc = sort_rows(rows, SortSpec("location", "asc"))
        desc = sort_rows(rows, SortSpec("location", "desc"))
        assert [r.id for r in asc] == ["2", "4", "1", "3"]
        assert [r.id for r in desc] == ["1", "3", "2", "4"]

    def test_does_not_mutate_input(self, records):
        before = list(records)
        sort_rows(records, SortSpec("deceased_name", "desc"))
        assert records == before


class TestPagination:
    def test_total_pages_rounds_up(self):
        assert total_pages(21, 10) == 3

    def test_total_pages_minimum_one(self):
        assert total_pages(0, 10) == 1

    def test_page_never_exceeds_page_size(self, make_record):
        rows = [make_record(str(i)) for i in range(25)]
        assert len(paginate(rows, 1)) == 10
        assert len(paginate(rows, 3)) == 5

    def test_pages_concatenate_to_full_sequence(self, make_record):
        rows = [make_record(str(i)) for i in range(23)]
        pages = [paginate(rows, p) for p in range(1, total_pages(len(rows)) + 1)]
        assert [r for page in pages for r in page] == rows


class TestRunQuery:
    def test_filters_sorts_and_pages(self, make_record):
        rows = [make_record(str(i), location="A" if i % 2 else "B", storage_number=f"N{i:02d}") for i in range(30)]
        page = run_query(rows, RecordFilter(location="A"), SortSpec("storage_number", "desc"), page=2)
        assert page.total_count == 15
        assert page.total_pages == 2
        assert page.page == 2
        assert [r.storage_number for r in page.rows] == ["N09", "N07", "N05", "N03", "N01"]

    def test_empty_collection_shows_one_page(self):
        page = run_query([], RecordFilter(text="x"))
        assert page.rows == []
        assert page.total_pages == 1
        assert page.total_count == 0

    def test_out_of_range_page_is_clamped(self, make_record):
        rows = [make_record(str(i)) for i in range(12)]
        page = run_query(rows, page=9)
        assert page.page == 2
        assert len(page.rows) == 2
