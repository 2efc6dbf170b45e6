import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

import table_engine
from cell_renderer import DEFAULT_DATE_FORMAT
from presentation import build_table_view
from schemas import RawSheet, RecordIssue, TableState, TableView
from sheet_transform import SheetTransformError, columns_from_header, records_from_sheet_data
from upload_client import UploadClient

logger = logging.getLogger(__name__)

UPLOAD_FAILED_MESSAGE = "Failed to process the file. Please try again."
PROCESSING_FAILED_MESSAGE = "The file was uploaded but its data could not be processed."


class Notification(BaseModel):
    """A transient message for the user."""
    level: Literal["success", "error"]
    title: str
    description: str
    detail: Optional[str] = None


class ViewerSession:
    """
    State of one viewer: the loaded sheet, its records and the table settings.

    A successful upload replaces the sheet, derives its records once and
    resets the table settings. A failed upload or an unprocessable sheet
    leaves everything as it was and only queues a notification.
    """

    def __init__(self, date_format: str = DEFAULT_DATE_FORMAT):
        self.date_format = date_format
        self.file_name: Optional[str] = None
        self.raw_sheet: Optional[RawSheet] = None
        self.records: List[Dict[str, Any]] = []
        self.columns: List[str] = []
        self.issues: List[RecordIssue] = []
        self.table_state = TableState()
        self.notifications: List[Notification] = []

    @property
    def has_data(self) -> bool:
        return self.raw_sheet is not None

    def load_file(self, client: UploadClient, filename: str, content: bytes) -> bool:
        """
        Upload a file and, on success, show its records.

        Returns:
            bool: Whether the new sheet was loaded
        """
        result = client.upload(filename, content)
        if result.is_failure():
            logger.error("Upload failed", extra={"upload_filename": filename, "error": result.error})
            self._notify("error", "Error", UPLOAD_FAILED_MESSAGE, detail=result.error)
            return False

        raw_sheet = result.data
        try:
            records = records_from_sheet_data(raw_sheet.sheet_data)
            columns = columns_from_header(raw_sheet.sheet_data)
        except SheetTransformError as e:
            logger.error("Could not build records from sheet", extra={"upload_filename": filename, "error": str(e)})
            self._notify("error", "Data processing error", PROCESSING_FAILED_MESSAGE, detail=str(e))
            return False

        self.file_name = filename
        self.raw_sheet = raw_sheet
        self.records = records
        self.columns = columns
        self.issues = table_engine.validate_records(records, columns)
        self.table_state = TableState()

        logger.info(
            "Loaded sheet",
            extra={"upload_filename": filename, "sheet_name": raw_sheet.sheet_name, "record_count": len(records)}
        )
        self._notify("success", "Success!", f"Successfully loaded {len(records)} rows from {filename}")
        return True

    def reset(self) -> None:
        """Forget the loaded sheet and go back to the upload screen."""
        self.file_name = None
        self.raw_sheet = None
        self.records = []
        self.columns = []
        self.issues = []
        self.table_state = TableState()

    def toggle_sort(self, column: str) -> None:
        self.table_state = table_engine.toggle_sort(self.table_state, column)

    def set_global_filter(self, value: str) -> None:
        self.table_state = table_engine.set_global_filter(self.table_state, value)

    def set_column_filter(self, column: str, value: str) -> None:
        self.table_state = table_engine.set_column_filter(self.table_state, column, value)

    def clear_filters(self) -> None:
        self.table_state = table_engine.clear_filters(self.table_state)

    def view(self) -> TableView:
        return build_table_view(self.records, self.table_state, self.columns, self.issues, self.date_format)

    def pop_notifications(self) -> List[Notification]:
        notifications, self.notifications = self.notifications, []
        return notifications

    def _notify(self, level: str, title: str, description: str, detail: Optional[str] = None) -> None:
        self.notifications.append(Notification(level=level, title=title, description=description, detail=detail))
