"""
Filtering and sorting of records.

Every function here is pure: states are never changed in place, and
``visible_records`` recomputes the visible rows from the full record list
each time it is called.
"""
import logging
import math
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Sequence, Tuple

from cell_renderer import display_string
from schemas import RecordIssue, SortSpec, TableState

logger = logging.getLogger(__name__)

ASCENDING = "asc"
DESCENDING = "desc"


# State transitions

def toggle_sort(state: TableState, column: str) -> TableState:
    """
    Advance the sort of ``column``: unsorted -> asc -> desc -> unsorted.

    Only one column is sorted at a time; toggling another column starts it
    at ascending and drops the previous sort.
    """
    current = sort_direction(state, column)
    if current is None:
        sorting = [SortSpec(column=column, direction=ASCENDING)]
    elif current == ASCENDING:
        sorting = [SortSpec(column=column, direction=DESCENDING)]
    else:
        sorting = []
    return state.model_copy(update={"sorting": sorting})


def sort_direction(state: TableState, column: str) -> Optional[str]:
    for spec in state.sorting:
        if spec.column == column:
            return spec.direction
    return None


def set_global_filter(state: TableState, value: str) -> TableState:
    return state.model_copy(update={"global_filter": value or ""})


def set_column_filter(state: TableState, column: str, value: str) -> TableState:
    """Set the filter text of one column; empty text removes the filter."""
    filters = dict(state.column_filters)
    if value:
        filters[column] = value
    else:
        filters.pop(column, None)
    return state.model_copy(update={"column_filters": filters})


def clear_filters(state: TableState) -> TableState:
    """Drop the global and all column filters, keeping the sort."""
    return state.model_copy(update={"global_filter": "", "column_filters": {}})


# Columns

def derive_columns(records: Sequence[Dict[str, Any]], header: Optional[Sequence[str]] = None) -> List[str]:
    """Columns of the table: the header when known, else the first record's keys."""
    if header is not None:
        return list(dict.fromkeys(header))
    if not records:
        return []
    return list(records[0].keys())


def validate_records(records: Sequence[Dict[str, Any]], columns: Sequence[str]) -> List[RecordIssue]:
    """
    Report records whose keys differ from ``columns``.

    Returns:
        List[RecordIssue]: One entry per offending record, in row order
    """
    expected = set(columns)
    issues = []
    for index, record in enumerate(records):
        keys = set(record.keys())
        missing = [column for column in columns if column not in keys]
        extra = [key for key in record.keys() if key not in expected]
        if missing or extra:
            issues.append(RecordIssue(row_index=index, missing_keys=missing, extra_keys=extra))
    if issues:
        logger.warning(
            "Records do not match table columns",
            extra={"issue_count": len(issues), "columns": list(columns)}
        )
    return issues


# Filtering

def _contains(value: Any, needle: str) -> bool:
    if value is None:
        return False
    return needle.lower() in display_string(value).lower()


def matches_global_filter(record: Dict[str, Any], columns: Sequence[str], needle: str) -> bool:
    """True when some column of the record contains ``needle`` (case-insensitive)."""
    if not needle:
        return True
    return any(_contains(record.get(column), needle) for column in columns)


def matches_column_filters(record: Dict[str, Any], column_filters: Dict[str, str]) -> bool:
    """True when every non-empty column filter is contained in its column."""
    return all(
        _contains(record.get(column), needle)
        for column, needle in column_filters.items()
        if needle
    )


def filter_records(records: Sequence[Dict[str, Any]], state: TableState, columns: Sequence[str]) -> List[Dict[str, Any]]:
    return [
        record for record in records
        if matches_global_filter(record, columns, state.global_filter)
        and matches_column_filters(record, state.column_filters)
    ]


# Sorting

def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def _sort_key(value: Any) -> Tuple[int, Any]:
    number = _as_number(value)
    if number is not None:
        return (0, number)
    return (1, display_string(value))


def compare_values(left: Any, right: Any) -> int:
    """
    Three-way comparison used for sorting.

    Two numeric values (numbers or numeric strings) compare as numbers, two
    other values compare as strings, and numbers order before text.
    """
    left_key, right_key = _sort_key(left), _sort_key(right)
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def sort_records(records: Sequence[Dict[str, Any]], sorting: Sequence[SortSpec]) -> List[Dict[str, Any]]:
    """
    Stable sort by each spec in turn, last spec applied first.

    Records with equal keys keep their input order, also when descending.
    """
    ordered = list(records)
    for spec in reversed(list(sorting)):
        ordered = sorted(
            ordered,
            key=cmp_to_key(lambda a, b, column=spec.column: compare_values(a.get(column), b.get(column))),
            reverse=spec.direction == DESCENDING,
        )
    return ordered


def visible_records(records: Sequence[Dict[str, Any]], state: TableState, columns: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
    """
    Records to display for the given state: filtered, then sorted.

    Args:
        records: All records of the sheet
        state: Current filters and sort
        columns: Columns searched by the global filter; derived from the
            records when omitted

    Returns:
        List[Dict[str, Any]]: A subsequence of ``records`` in display order
    """
    if columns is None:
        columns = derive_columns(records)
    return sort_records(filter_records(records, state, columns), state.sorting)
