"""
In-memory filtering of report records.

``filter_reports`` is the single definition of the filter semantics used by
the API, the exports and the scheduled deliveries:

* ``date`` matches exactly,
* ``start_date`` / ``end_date`` are inclusive bounds,
* ``category`` matches exactly,
* ``user`` and ``region`` match as case-insensitive substrings.

Populated criteria are AND-combined and record order is preserved.
"""

import datetime as dt
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from app.schemas.report import ReportFilter
from app.utils import get_field

T = TypeVar("T")

Predicate = Callable[[Any], bool]


def _as_date(value: Any) -> Optional[dt.date]:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str) and value:
        try:
            return dt.date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _contains(needle: str) -> Predicate:
    needle = needle.lower()

    def check(value: Any) -> bool:
        return value is not None and needle in str(value).lower()

    return check


def _in_range(start: Optional[dt.date], end: Optional[dt.date]) -> Predicate:
    def check(record: Any) -> bool:
        value = _as_date(get_field(record, "date"))
        if value is None:
            return False
        if start is not None and value < start:
            return False
        if end is not None and value > end:
            return False
        return True

    return check


def build_predicates(criteria: ReportFilter) -> List[Predicate]:
    """Translate the populated criteria into record predicates."""
    predicates: List[Predicate] = []

    if criteria.date is not None:
        predicates.append(lambda r: _as_date(get_field(r, "date")) == criteria.date)
    if criteria.start_date is not None or criteria.end_date is not None:
        predicates.append(_in_range(criteria.start_date, criteria.end_date))
    if criteria.category is not None:
        predicates.append(lambda r: _category(get_field(r, "category")) == criteria.category)
    if criteria.user is not None:
        user_matches = _contains(criteria.user)
        predicates.append(lambda r: user_matches(get_field(r, "user", get_field(r, "user_id"))))
    if criteria.region is not None:
        region_matches = _contains(criteria.region)
        predicates.append(lambda r: region_matches(get_field(r, "region")))

    return predicates


def _category(value: Any) -> Any:
    # enum members compare by their stored label
    return getattr(value, "value", value)


def filter_reports(records: Iterable[T], criteria: Optional[ReportFilter] = None) -> List[T]:
    """
    Return the records matching every populated criterion, in input order.

    Args:
        records: ORM rows, pydantic models or plain mappings
        criteria: Filter criteria; ``None`` or an empty filter keeps everything

    Returns:
        The matching records as a new list
    """
    records = list(records)
    if criteria is None:
        return records

    predicates = build_predicates(criteria)
    if not predicates:
        return records

    return [record for record in records if all(check(record) for check in predicates)]
