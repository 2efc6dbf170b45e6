import io
from datetime import date, datetime, time
from http import HTTPStatus
from unittest.mock import patch

import numpy as np
import pandas as pd
import pytest

from sheet_parser import SheetParser, to_excel_serial, to_json_cell
from sheet_transform import records_from_sheet_data


def make_workbook(sheets):
    """
    Write DataFrames to an in-memory .xlsx workbook.

    Args:
        sheets: Mapping of sheet name to DataFrame, in sheet order

    Returns:
        bytes: The workbook file
    """
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, df in sheets.items():
            df.to_excel(writer, sheet_name=name, index=False)
    return buffer.getvalue()


@pytest.fixture
def people_workbook():
    """
    Fixture providing a one-sheet workbook with a header and two rows.

    Returns:
        bytes: .xlsx content
    """
    return make_workbook({"People": pd.DataFrame({"Name": ["Alice", "Bob"], "Age": [30, 25]})})


class TestToJsonCell:
    """
    Tests for the to_json_cell and to_excel_serial functions.
    """

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, None),
            (float("nan"), None),
            (pd.NaT, None),
            (np.int64(3), 3),
            (np.float64(2.5), 2.5),
            (np.bool_(True), True),
            ("text", "text"),
            (datetime(2023, 3, 15), 45000),
            (pd.Timestamp("2023-03-15 12:00"), 45000.5),
            (date(2023, 1, 1), 44927),
            (time(6, 0), 0.25),
        ],
        ids=["none", "nan", "nat", "numpy-int", "numpy-float", "numpy-bool", "string",
             "datetime", "timestamp-noon", "date", "time"]
    )
    def test_converts_to_json_scalars(self, value, expected):
        result = to_json_cell(value)

        assert result == expected
        assert type(result) is type(expected)

    def test_whole_day_serial_is_int(self):
        assert isinstance(to_excel_serial(datetime(2023, 3, 15)), int)

    def test_serial_round_trips_through_date_rule(self):
        """
        Test that serials written by the parser read back as the same date.
        """
        from cell_renderer import excel_serial_to_date

        assert excel_serial_to_date(to_excel_serial(datetime(2024, 2, 29))) == date(2024, 2, 29)


class TestParseUpload:
    """
    Tests for SheetParser.parse_upload.
    """

    def test_parses_first_sheet_with_header_row(self, people_workbook):
        """
        Test that the header row and data rows come back as arrays.
        """
        result = SheetParser.parse_upload("people.xlsx", people_workbook)

        assert result.is_success()
        sheet = result.data
        assert sheet.sheet_name == "People"
        assert sheet.num_of_sheets == 1
        assert sheet.sheet_data == [["Name", "Age"], ["Alice", 30], ["Bob", 25]]

    def test_reports_number_of_sheets_and_uses_first(self):
        content = make_workbook({
            "First": pd.DataFrame({"A": [1]}),
            "Second": pd.DataFrame({"B": [2]}),
            "Third": pd.DataFrame({"C": [3]}),
        })

        result = SheetParser.parse_upload("multi.xlsx", content)

        assert result.data.sheet_name == "First"
        assert result.data.num_of_sheets == 3
        assert result.data.sheet_data == [["A"], [1]]

    def test_dates_become_excel_serials(self):
        content = make_workbook({
            "Orders": pd.DataFrame({"OrderDate": [datetime(2023, 3, 15)], "Item": ["bolt"]})
        })

        result = SheetParser.parse_upload("orders.xlsx", content)

        assert result.data.sheet_data[1] == [45000, "bolt"]

    def test_empty_cells_become_none(self):
        content = make_workbook({
            "Sheet1": pd.DataFrame({"A": ["x", None], "B": ["y", "z"]})
        })

        result = SheetParser.parse_upload("gaps.xlsx", content)

        assert result.data.sheet_data == [["A", "B"], ["x", "y"], [None, "z"]]

    def test_output_feeds_sheet_transform(self, people_workbook):
        sheet = SheetParser.parse_upload("people.xlsx", people_workbook).data

        assert records_from_sheet_data(sheet.sheet_data) == [
            {"Name": "Alice", "Age": 30},
            {"Name": "Bob", "Age": 25},
        ]

    def test_extension_check_is_case_insensitive(self, people_workbook):
        assert SheetParser.parse_upload("PEOPLE.XLSX", people_workbook).is_success()

    @pytest.mark.parametrize(
        "filename",
        ["people.csv", "people.txt", "people"],
        ids=["csv", "txt", "no-extension"]
    )
    def test_rejects_unsupported_extensions(self, filename, people_workbook):
        result = SheetParser.parse_upload(filename, people_workbook)

        assert result.is_failure()
        assert result.status_code == HTTPStatus.UNSUPPORTED_MEDIA_TYPE

    def test_rejects_missing_filename(self, people_workbook):
        result = SheetParser.parse_upload(None, people_workbook)

        assert result.status_code == HTTPStatus.BAD_REQUEST

    def test_rejects_empty_file(self):
        result = SheetParser.parse_upload("empty.xlsx", b"")

        assert result.status_code == HTTPStatus.BAD_REQUEST
        assert "empty" in result.error

    def test_rejects_file_over_size_limit(self, people_workbook):
        result = SheetParser.parse_upload("people.xlsx", people_workbook, max_bytes=10)

        assert result.status_code == HTTPStatus.REQUEST_ENTITY_TOO_LARGE

    def test_unreadable_content_is_unprocessable(self):
        result = SheetParser.parse_upload("broken.xlsx", b"this is not a workbook")

        assert result.is_failure()
        assert result.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
        assert "Failed to read Excel file" in result.error

    def test_unexpected_error_is_server_error(self, people_workbook):
        with patch.object(SheetParser, "_build_raw_sheet", side_effect=RuntimeError("boom")):
            result = SheetParser.parse_upload("people.xlsx", people_workbook)

        assert result.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
        assert "boom" in result.error

    def test_empty_dataframe_gives_no_rows(self):
        assert SheetParser._dataframe_to_rows(pd.DataFrame()) == []
