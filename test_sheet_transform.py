import pytest

from sheet_transform import (
    SheetTransformError,
    columns_from_header,
    header_keys,
    records_from_sheet_data,
)


@pytest.fixture
def people_sheet():
    """
    Fixture providing a small header + data rows sheet.

    Returns:
        list: Sheet data with a Name/Age header and two rows
    """
    return [["Name", "Age"], ["Alice", "30"], ["Bob", "25"]]


class TestRecordsFromSheetData:
    """
    Tests for the records_from_sheet_data function.
    """

    def test_builds_one_record_per_data_row(self, people_sheet):
        """
        Test that each data row becomes a record keyed by the header.
        """
        records = records_from_sheet_data(people_sheet)

        assert records == [
            {"Name": "Alice", "Age": "30"},
            {"Name": "Bob", "Age": "25"},
        ]

    @pytest.mark.parametrize(
        "sheet_data",
        [None, [], [["Name", "Age"]]],
        ids=["none", "empty", "header-only"]
    )
    def test_without_data_rows_returns_empty_list(self, sheet_data):
        """
        Test that missing data, no rows or a lone header row give no records.
        """
        assert records_from_sheet_data(sheet_data) == []

    def test_short_row_fills_missing_cells_with_empty_string(self):
        """
        Test that cells past the end of a short row become empty strings.
        """
        records = records_from_sheet_data([["A", "B", "C"], [1]])

        assert records == [{"A": 1, "B": "", "C": ""}]

    def test_long_row_drops_cells_beyond_header(self):
        """
        Test that cells past the end of the header are dropped.
        """
        records = records_from_sheet_data([["A", "B"], [1, 2, 3, 4]])

        assert records == [{"A": 1, "B": 2}]

    def test_duplicate_header_keeps_last_value(self):
        """
        Test that a repeated header name keeps the value of its last occurrence.
        """
        records = records_from_sheet_data([["Id", "Id", "Name"], [1, 2, "x"]])

        assert records == [{"Id": 2, "Name": "x"}]
        assert list(records[0].keys()) == ["Id", "Name"]

    def test_none_cell_inside_row_is_kept(self):
        """
        Test that a present None cell stays None; only missing cells become "".
        """
        records = records_from_sheet_data([["A", "B"], [None, "b"]])

        assert records == [{"A": None, "B": "b"}]

    def test_header_cells_are_converted_to_strings(self):
        """
        Test that non-string header cells become their string form.
        """
        records = records_from_sheet_data([[2024, 1.0, True, None], ["a", "b", "c", "d"]])

        assert list(records[0].keys()) == ["2024", "1", "true", ""]

    def test_every_record_has_exactly_the_header_keys(self):
        """
        Test that rows of any length produce records with the same key set.
        """
        sheet = [["A", "B", "C"], [1], [1, 2], [1, 2, 3], [1, 2, 3, 4]]

        records = records_from_sheet_data(sheet)

        assert len(records) == 4
        assert all(list(record.keys()) == ["A", "B", "C"] for record in records)

    def test_is_repeatable_and_does_not_modify_input(self, people_sheet):
        """
        Test that calling twice gives equal output and leaves the input unchanged.
        """
        snapshot = [list(row) for row in people_sheet]

        first = records_from_sheet_data(people_sheet)
        second = records_from_sheet_data(people_sheet)

        assert first == second
        assert first is not second
        assert people_sheet == snapshot

    def test_accepts_tuples(self):
        """
        Test that tuple rows are handled like lists.
        """
        assert records_from_sheet_data((("A",), ("x",))) == [{"A": "x"}]

    @pytest.mark.parametrize(
        "sheet_data",
        ["not a sheet", 42, {"Name": "Alice"}, [["Name"], "Alice"]],
        ids=["string", "number", "dict", "row-not-a-list"]
    )
    def test_malformed_sheet_data_raises(self, sheet_data):
        """
        Test that sheet data that is not a list of row lists is rejected.
        """
        with pytest.raises(SheetTransformError):
            records_from_sheet_data(sheet_data)

    def test_transform_error_is_a_value_error(self):
        """
        Test that callers catching ValueError also catch transform failures.
        """
        with pytest.raises(ValueError):
            records_from_sheet_data("bad")


class TestColumnsFromHeader:
    """
    Tests for the columns_from_header and header_keys functions.
    """

    def test_returns_header_in_order(self, people_sheet):
        assert columns_from_header(people_sheet) == ["Name", "Age"]

    def test_collapses_duplicates_to_first_position(self):
        assert columns_from_header([["B", "A", "B"]]) == ["B", "A"]

    @pytest.mark.parametrize("sheet_data", [None, []], ids=["none", "empty"])
    def test_without_header_returns_empty_list(self, sheet_data):
        assert columns_from_header(sheet_data) == []

    def test_header_only_sheet_still_has_columns(self):
        assert columns_from_header([["Name", "Age"]]) == ["Name", "Age"]

    def test_header_keys_keeps_duplicates(self):
        assert header_keys(["A", "A", 3]) == ["A", "A", "3"]
