import html
import logging
from typing import Any, Dict, List, Optional, Sequence

from cell_renderer import DEFAULT_DATE_FORMAT, render_cell
from schemas import CellDisplay, RecordIssue, TableState, TableView
from table_engine import derive_columns, visible_records

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data available"
NO_RESULTS_MESSAGE = "No results found"

SORT_INDICATORS = {"asc": "↑", "desc": "↓"}
UNSORTED_INDICATOR = "↕"

THEME_COLORS = {
    "light": {"background": "#ffffff", "stripe": "#f9fafb", "header": "#f3f4f6", "text": "#111827", "muted": "#6b7280", "link": "#2563eb", "border": "#e5e7eb"},
    "dark": {"background": "#111827", "stripe": "#1f2937", "header": "#1f2937", "text": "#f3f4f6", "muted": "#9ca3af", "link": "#60a5fa", "border": "#374151"},
}


def build_table_view(
    records: Sequence[Dict[str, Any]],
    state: TableState,
    columns: Optional[Sequence[str]] = None,
    issues: Optional[List[RecordIssue]] = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> TableView:
    """
    Filter, sort and render records into a TableView.

    Args:
        records: All records of the sheet
        state: Current filters and sort
        columns: Display columns; the first record's keys when omitted
        issues: Record validation issues to pass through to the client
        date_format: strftime pattern for serial dates

    Returns:
        TableView: With ``message`` set when there is no data or no match
    """
    if columns is None:
        columns = derive_columns(records)
    columns = list(columns)

    if not records:
        return TableView(columns=columns, message=NO_DATA_MESSAGE, issues=issues or [])

    visible = visible_records(records, state, columns)
    rows = [
        [render_cell(column, record.get(column), date_format) for column in columns]
        for record in visible
    ]

    logger.debug(
        "Built table view",
        extra={"total_records": len(records), "visible_records": len(rows), "global_filter": state.global_filter}
    )

    return TableView(
        columns=columns,
        rows=rows,
        sorting={spec.column: spec.direction for spec in state.sorting},
        total_records=len(records),
        visible_records=len(rows),
        message=None if rows else NO_RESULTS_MESSAGE,
        issues=issues or [],
    )


def _render_html_cell(cell: CellDisplay) -> str:
    if cell.is_link:
        return (
            f'<a href="{html.escape(cell.href, quote=True)}" target="_blank" '
            f'rel="noopener noreferrer">{html.escape(cell.text)}</a>'
        )
    return html.escape(cell.text)


def table_view_to_html(view: TableView, theme: str = "light") -> str:
    """Render a TableView as a standalone HTML table styled for the theme."""
    colors = THEME_COLORS.get(theme, THEME_COLORS["light"])

    if not view.columns or view.message == NO_DATA_MESSAGE:
        return (
            f'<div class="excel-viewer-empty" style="padding:2rem;text-align:center;color:{colors["muted"]}">'
            f'{html.escape(view.message or NO_DATA_MESSAGE)}</div>'
        )

    header_cells = []
    for column in view.columns:
        indicator = SORT_INDICATORS.get(view.sorting.get(column, ""), UNSORTED_INDICATOR)
        header_cells.append(
            f'<th style="padding:0.75rem 1rem;text-align:left;background:{colors["header"]};'
            f'color:{colors["muted"]};border-bottom:1px solid {colors["border"]}">'
            f'{html.escape(column)} <span class="sort-indicator">{indicator}</span></th>'
        )

    body_rows = []
    for index, row in enumerate(view.rows):
        background = colors["background"] if index % 2 == 0 else colors["stripe"]
        cells = "".join(
            f'<td style="padding:0.75rem 1rem;white-space:nowrap">{_render_html_cell(cell)}</td>'
            for cell in row
        )
        row_class = "even" if index % 2 == 0 else "odd"
        body_rows.append(f'<tr class="{row_class}" style="background:{background}">{cells}</tr>')

    table = (
        f'<table class="excel-viewer-table {html.escape(theme)}" '
        f'style="width:100%;border-collapse:collapse;color:{colors["text"]}">'
        f'<thead><tr>{"".join(header_cells)}</tr></thead>'
        f'<tbody>{"".join(body_rows)}</tbody></table>'
    )
    style = f'<style>.excel-viewer-table a{{color:{colors["link"]}}}</style>'

    if view.message:
        table += (
            f'<div class="excel-viewer-empty" style="padding:2rem;text-align:center;color:{colors["muted"]}">'
            f'{html.escape(view.message)}</div>'
        )
    return f'<div style="overflow-x:auto">{style}{table}</div>'
