from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SortDirection = Literal["asc", "desc"]


class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    direction: SortDirection = "asc"


class TableState(BaseModel):
    """
    Sort and filter settings of the table.

    A fresh ``TableState()`` is the reset state: no filters, no sort.

    Attributes:
        global_filter: Text matched against every column
        column_filters: Column name -> text matched against that column only
        sorting: Active sort; the UI keeps at most one entry
    """
    model_config = ConfigDict(frozen=True)

    global_filter: str = ""
    column_filters: Dict[str, str] = Field(default_factory=dict)
    sorting: List[SortSpec] = Field(default_factory=list)


class RawSheet(BaseModel):
    """
    Spreadsheet payload returned by the upload endpoint.

    Attributes:
        sheet_name: Name of the sheet that was read (the workbook's first sheet)
        num_of_sheets: Number of sheets in the workbook
        sheet_data: Header row followed by data rows, as lists of cells. Left
            unchecked here; sheet_transform rejects anything that is not rows
    """
    model_config = ConfigDict(populate_by_name=True)

    sheet_name: str = Field(alias="sheetName")
    num_of_sheets: int = Field(alias="numOfSheets")
    sheet_data: Any = Field(default_factory=list, alias="sheetData")


class CellDisplay(BaseModel):
    """How one cell is shown: plain text, or a link labelled with ``text``."""
    text: str = ""
    href: Optional[str] = None

    @property
    def is_link(self) -> bool:
        return self.href is not None


class RecordIssue(BaseModel):
    """A record whose keys differ from the table's columns."""
    row_index: int
    missing_keys: List[str] = Field(default_factory=list)
    extra_keys: List[str] = Field(default_factory=list)


class TableViewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sheet_data: Optional[Any] = Field(default=None, alias="sheetData")
    state: TableState = Field(default_factory=TableState)


class TableView(BaseModel):
    """
    Rows ready for display, after filtering, sorting and cell rendering.

    Attributes:
        columns: Column names in display order
        rows: Rendered cells, one list per visible record
        sorting: Active sort, echoed so the UI can draw indicators
        total_records: Number of records before filtering
        visible_records: Number of rows in ``rows``
        message: Placeholder text when there is nothing to show
        issues: Records whose keys do not match the columns
    """
    columns: List[str] = Field(default_factory=list)
    rows: List[List[CellDisplay]] = Field(default_factory=list)
    sorting: Dict[str, str] = Field(default_factory=dict)
    total_records: int = 0
    visible_records: int = 0
    message: Optional[str] = None
    issues: List[RecordIssue] = Field(default_factory=list)
