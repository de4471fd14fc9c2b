"""
Tests for report filtering.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.models.report import Report
from app.schemas.report import ReportFilter
from app.services.report_filter import filter_reports


def _ids(records):
    return [record["id"] for record in records]


def test_no_criteria_keeps_everything(sample_records):
    assert filter_reports(sample_records) == sample_records
    assert filter_reports(sample_records, ReportFilter()) == sample_records


def test_empty_input_returns_empty_list():
    assert filter_reports([], ReportFilter(region="north")) == []


def test_blank_strings_are_unset(sample_records):
    criteria = ReportFilter(date="", category="  ", user="", region="")

    assert criteria.is_empty()
    assert filter_reports(sample_records, criteria) == sample_records


def test_region_is_case_insensitive_substring(sample_records):
    assert _ids(filter_reports(sample_records, ReportFilter(region="nor"))) == [1, 3]
    assert _ids(filter_reports(sample_records, ReportFilter(region="SOUTH"))) == [2]


def test_user_is_case_insensitive_substring(sample_records):
    assert _ids(filter_reports(sample_records, ReportFilter(user="ALI"))) == [1, 3]


def test_category_is_exact(sample_records):
    assert _ids(filter_reports(sample_records, ReportFilter(category="HR"))) == [2]
    assert filter_reports(sample_records, ReportFilter(category="hr")) == []
    assert filter_reports(sample_records, ReportFilter(category="Sal")) == []


def test_exact_date(sample_records):
    assert _ids(filter_reports(sample_records, ReportFilter(date="2025-06-02"))) == [2]


def test_date_range_is_inclusive(sample_records):
    criteria = ReportFilter(start_date="2025-06-02", end_date="2025-06-03")

    assert _ids(filter_reports(sample_records, criteria)) == [2, 3]


def test_one_sided_ranges(sample_records):
    assert _ids(filter_reports(sample_records, ReportFilter(start_date="2025-06-02"))) == [2, 3]
    assert _ids(filter_reports(sample_records, ReportFilter(end_date="2025-06-01"))) == [1]


def test_criteria_are_combined(sample_records):
    criteria = ReportFilter(user="alice", region="north", category="Finance")

    assert _ids(filter_reports(sample_records, criteria)) == [3]


def test_result_is_ordered_subset_and_idempotent(sample_records):
    criteria = ReportFilter(region="north")

    once = filter_reports(sample_records, criteria)
    twice = filter_reports(once, criteria)

    assert all(record in sample_records for record in once)
    assert _ids(once) == sorted(_ids(once))
    assert twice == once


def test_filters_orm_rows():
    rows = [
        Report(id=1, date=date(2025, 6, 1), category="Sales", amount=Decimal("1000.00"), user="Alice", region="North"),
        Report(id=2, date=date(2025, 6, 1), category="HR", amount=Decimal("10.00"), user="Bob", region="South"),
    ]

    assert filter_reports(rows, ReportFilter(region="nor")) == [rows[0]]
    assert filter_reports(rows, ReportFilter(region="south", category="Sales")) == []


def test_camel_case_aliases_and_timestamps():
    criteria = ReportFilter.model_validate(
        {"startDate": "2025-06-01T00:00:00.000Z", "endDate": "2025-06-30", "userId": 7}
    )

    assert criteria.start_date == date(2025, 6, 1)
    assert criteria.end_date == date(2025, 6, 30)
    assert criteria.user == "7"


def test_inverted_range_is_rejected():
    with pytest.raises(ValidationError):
        ReportFilter(start_date="2025-06-05", end_date="2025-06-01")


def test_malformed_date_is_rejected():
    with pytest.raises(ValidationError):
        ReportFilter(date="yesterday")


def test_snapshot_keeps_populated_criteria_only():
    criteria = ReportFilter(region="north", start_date="2025-06-01")

    assert criteria.snapshot() == {"region": "north", "start_date": "2025-06-01"}
