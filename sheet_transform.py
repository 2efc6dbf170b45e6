import logging
from typing import Any, Dict, List, Optional, Sequence

from cell_renderer import display_string

logger = logging.getLogger(__name__)

MISSING_CELL = ""


class SheetTransformError(ValueError):
    """Raised when sheet data is not a list of row lists."""


def _check_rows(sheet_data: Any) -> List[Sequence[Any]]:
    if not isinstance(sheet_data, (list, tuple)):
        raise SheetTransformError(
            f"Sheet data must be a list of rows, got {type(sheet_data).__name__}"
        )
    for index, row in enumerate(sheet_data):
        if not isinstance(row, (list, tuple)):
            raise SheetTransformError(
                f"Row {index} must be a list of cells, got {type(row).__name__}"
            )
    return list(sheet_data)


def header_keys(header_row: Sequence[Any]) -> List[str]:
    """Column keys of a header row, in order, duplicates included."""
    return [display_string(cell) for cell in header_row]


def columns_from_header(sheet_data: Optional[Any]) -> List[str]:
    """
    Ordered, de-duplicated column names taken from the header row.

    Returns:
        List[str]: Empty when there is no header row
    """
    if sheet_data is None:
        return []
    rows = _check_rows(sheet_data)
    if not rows:
        return []
    return list(dict.fromkeys(header_keys(rows[0])))


def records_from_sheet_data(sheet_data: Optional[Any]) -> List[Dict[str, Any]]:
    """
    Turn array-of-arrays sheet data into one record per data row.

    Row 0 is the header. Each later row is zipped with the header by position:
    cells past the end of a short row become ``""`` and cells past the end of
    the header are dropped. A repeated header name keeps the value of its last
    occurrence.

    Args:
        sheet_data: Header row followed by data rows, or None

    Returns:
        List[Dict[str, Any]]: Records in row order; empty when there is no
        data row

    Raises:
        SheetTransformError: When ``sheet_data`` or one of its rows is not a list
    """
    if sheet_data is None:
        return []

    rows = _check_rows(sheet_data)
    if len(rows) < 2:
        return []

    keys = header_keys(rows[0])
    records = []
    for row in rows[1:]:
        record = {}
        for index, key in enumerate(keys):
            record[key] = row[index] if index < len(row) else MISSING_CELL
        records.append(record)

    logger.debug("Built records from sheet data", extra={"record_count": len(records), "column_count": len(keys)})
    return records
