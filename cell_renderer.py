"""
Cell interpretation for display.

Spreadsheet cells arrive as untyped JSON scalars. ``classify_cell`` pins each
one to a variant so the link and date rules below are decided in one place,
and ``render_cell`` turns a variant into what the table shows.
"""
import logging
import math
import numbers
from datetime import date, datetime, timedelta
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

from schemas import CellDisplay

logger = logging.getLogger(__name__)

LINK_PREFIX = "http"
LINK_LABEL = "Open Link"
DATE_COLUMN_MARKER = "date"
DEFAULT_DATE_FORMAT = "%Y-%m-%d"

# Day 1 is 1900-01-01 but Excel also counts a 1900-02-29 that never
# existed, so serials are shifted by two against this epoch.
EXCEL_EPOCH = datetime(1900, 1, 1)
EXCEL_SERIAL_OFFSET = 2


class StringCell(BaseModel):
    model_config = ConfigDict(frozen=True)
    value: str


class NumberCell(BaseModel):
    model_config = ConfigDict(frozen=True)
    value: Union[int, float]


class BooleanCell(BaseModel):
    model_config = ConfigDict(frozen=True)
    value: bool


class EmptyCell(BaseModel):
    model_config = ConfigDict(frozen=True)


CellVariant = Union[StringCell, NumberCell, BooleanCell, EmptyCell]


def classify_cell(value: Any) -> CellVariant:
    """
    Map a raw cell value to its variant.

    Booleans are never numbers, NaN counts as empty, and anything that is not a
    scalar is kept as its string form.
    """
    if value is None:
        return EmptyCell()
    if isinstance(value, bool):
        return BooleanCell(value=value)
    if isinstance(value, numbers.Integral):
        return NumberCell(value=int(value))
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isnan(number):
            return EmptyCell()
        return NumberCell(value=number)
    if isinstance(value, str):
        return StringCell(value=value)
    return StringCell(value=str(value))


def display_string(value: Any) -> str:
    """
    String form of a cell as a browser would print it.

    ``None`` and NaN give ``""``, booleans are lower-case and whole floats drop
    their fraction (``30.0`` -> ``"30"``).
    """
    cell = classify_cell(value)
    if isinstance(cell, EmptyCell):
        return ""
    if isinstance(cell, BooleanCell):
        return "true" if cell.value else "false"
    if isinstance(cell, NumberCell):
        number = cell.value
        if isinstance(number, float):
            if math.isinf(number):
                return "Infinity" if number > 0 else "-Infinity"
            if number.is_integer():
                return str(int(number))
        return str(number)
    return cell.value


def excel_serial_to_date(serial: Union[int, float]) -> date:
    """
    Convert an Excel serial day number to a calendar date.

    Raises:
        OverflowError: when the serial falls outside the supported date range
        ValueError: when the serial is NaN
    """
    moment = EXCEL_EPOCH + timedelta(days=serial - EXCEL_SERIAL_OFFSET)
    return moment.date()


def is_date_column(column_key: Any) -> bool:
    return DATE_COLUMN_MARKER in str(column_key).lower()


def render_cell(column_key: Any, value: Any, date_format: str = DEFAULT_DATE_FORMAT) -> CellDisplay:
    """
    Decide how a cell is displayed.

    Args:
        column_key: Name of the column the cell belongs to
        value: Raw cell value
        date_format: strftime pattern for serial dates

    Returns:
        CellDisplay: ``Open Link`` with ``href`` for strings starting with
        ``http``; a formatted date for numbers in a column whose name contains
        ``date``; otherwise the plain string form
    """
    cell = classify_cell(value)

    if isinstance(cell, StringCell) and cell.value.startswith(LINK_PREFIX):
        return CellDisplay(text=LINK_LABEL, href=cell.value)

    if isinstance(cell, NumberCell) and is_date_column(column_key):
        try:
            return CellDisplay(text=excel_serial_to_date(cell.value).strftime(date_format))
        except (OverflowError, ValueError) as e:
            logger.debug(
                "Serial date out of range, showing raw value",
                extra={"column": str(column_key), "value": cell.value, "error": str(e)}
            )

    return CellDisplay(text=display_string(value))
