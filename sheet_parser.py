import io
import os
import logging
import math
import time
import uuid
from datetime import date, datetime, time as dt_time
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

import config
from schemas import RawSheet
from utils.result import Result

logger = logging.getLogger(__name__)

# Serial 0 in Excel's 1900 date system, accounting for the phantom 1900-02-29
EXCEL_SERIAL_ZERO = datetime(1899, 12, 30)
SECONDS_PER_DAY = 86400


class LogContext:
    """Context manager that logs the start, end and duration of a parsing stage"""
    def __init__(self, operation_name: str, **kwargs):
        self.operation_name = operation_name
        self.start_time = None
        self.request_id = kwargs.pop('request_id', str(uuid.uuid4())[:8])
        self.extra = kwargs

    def __enter__(self):
        self.start_time = time.time()
        logger.info(f"Starting {self.operation_name}", extra={"request_id": self.request_id, **self.extra})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type:
            logger.error(
                f"Failed {self.operation_name} in {duration:.2f}s: {str(exc_val)}",
                extra={"request_id": self.request_id, "duration": duration, **self.extra},
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            logger.info(
                f"Completed {self.operation_name} in {duration:.2f}s",
                extra={"request_id": self.request_id, "duration": duration, **self.extra}
            )


def to_excel_serial(moment: datetime) -> Any:
    """Excel serial day number of a datetime; whole days come back as int."""
    if moment.tzinfo is not None:
        moment = moment.replace(tzinfo=None)
    delta = moment - EXCEL_SERIAL_ZERO
    serial = delta.days + (delta.seconds + delta.microseconds / 1_000_000) / SECONDS_PER_DAY
    return int(serial) if float(serial).is_integer() else serial


def to_json_cell(value: Any) -> Any:
    """
    Convert a cell read by pandas into a JSON scalar.

    Empty cells and NaN/NaT become None, numpy scalars become Python values,
    and dates/datetimes become Excel serial numbers (times become day fractions)
    so they look the same as in the workbook's raw values.
    """
    if value is None:
        return None
    if pd.api.types.is_scalar(value) and not isinstance(value, str) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return to_excel_serial(value.to_pydatetime())
    if isinstance(value, datetime):
        return to_excel_serial(value)
    if isinstance(value, date):
        return to_excel_serial(datetime(value.year, value.month, value.day))
    if isinstance(value, dt_time):
        seconds = value.hour * 3600 + value.minute * 60 + value.second + value.microsecond / 1_000_000
        return seconds / SECONDS_PER_DAY
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class SheetParser:
    """
    Turns an uploaded workbook into a RawSheet.

    Steps:
    - Check the file name's extension and the upload size
    - Read every sheet with pandas
    - Convert the first sheet to rows of JSON scalars
    """

    @staticmethod
    def parse_upload(filename: Optional[str], content: bytes, max_bytes: Optional[int] = None) -> Result[RawSheet]:
        """
        Parse an uploaded spreadsheet.

        Args:
            filename: Name of the uploaded file, used for the extension check
            content: Raw file bytes
            max_bytes: Size limit; defaults to the configured MAX_UPLOAD_MB

        Returns:
            Result[RawSheet]: The first sheet, or an error with its HTTP status
        """
        request_id = str(uuid.uuid4())[:8]
        log_context = {
            "request_id": request_id,
            "upload_filename": filename,
            "size_bytes": len(content or b"")
        }
        logger.info("Parsing uploaded spreadsheet", extra=log_context)

        if max_bytes is None:
            max_bytes = config.MAX_UPLOAD_MB * 1024 * 1024

        try:
            with LogContext("upload validation", **log_context):
                validation_result = SheetParser._validate_upload(filename, content, max_bytes)

            if not validation_result.is_success():
                logger.warning(f"Upload validation failed: {validation_result.error}", extra=log_context)
                return validation_result

            with LogContext("workbook read", **log_context):
                workbook_result = SheetParser._read_workbook(content)

            if not workbook_result.is_success():
                logger.warning(f"Workbook read failed: {workbook_result.error}", extra=log_context)
                return workbook_result

            with LogContext("sheet conversion", **log_context):
                sheet_result = SheetParser._build_raw_sheet(workbook_result.data)

            if sheet_result.is_success():
                logger.info(
                    f"Parsed sheet '{sheet_result.data.sheet_name}' with {len(sheet_result.data.sheet_data)} rows",
                    extra=log_context
                )
            return sheet_result

        except Exception as e:
            logger.exception("Unexpected error while parsing upload", extra={**log_context, "error": str(e)})
            return Result.server_error(f"Processing error: {str(e)}")

    @staticmethod
    def _validate_upload(filename: Optional[str], content: bytes, max_bytes: int) -> Result[bool]:
        if not filename:
            return Result.fail("No file provided")

        extension = os.path.splitext(filename)[1].lower()
        if extension not in config.ACCEPTED_EXTENSIONS:
            return Result.unsupported_file(
                f"Unsupported file type '{extension or filename}'; expected one of {', '.join(config.ACCEPTED_EXTENSIONS)}"
            )

        if not content:
            return Result.fail("Uploaded file is empty")

        if len(content) > max_bytes:
            return Result.too_large(f"Uploaded file exceeds {max_bytes // (1024 * 1024)} MB limit")

        return Result.ok(True)

    @staticmethod
    def _read_workbook(content: bytes) -> Result[Dict[str, pd.DataFrame]]:
        try:
            start_time = time.time()
            sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, header=None)
            logger.info(
                "Read workbook",
                extra={"sheet_count": len(sheets), "read_time_seconds": f"{time.time() - start_time:.2f}"}
            )
        except Exception as e:
            logger.error(
                "Failed to read workbook",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            return Result.unreadable(f"Failed to read Excel file: {str(e)}")

        if not sheets:
            return Result.unreadable("Workbook contains no sheets")
        return Result.ok(sheets)

    @staticmethod
    def _build_raw_sheet(sheets: Dict[str, pd.DataFrame]) -> Result[RawSheet]:
        sheet_name = next(iter(sheets))
        sheet_data = SheetParser._dataframe_to_rows(sheets[sheet_name])
        return Result.ok(RawSheet(
            sheet_name=str(sheet_name),
            num_of_sheets=len(sheets),
            sheet_data=sheet_data,
        ))

    @staticmethod
    def _dataframe_to_rows(df: pd.DataFrame) -> List[List[Any]]:
        """Rows of the sheet as lists of JSON scalars, header row included."""
        if df.empty:
            return []
        return [
            [to_json_cell(value) for value in row]
            for row in df.itertuples(index=False, name=None)
        ]
