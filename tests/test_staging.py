"""
Tests for the CSV staging sink and the merge step.
"""

import json

import pytest
from openpyxl import load_workbook

from sqldiagnostics.infrastructure.excel import CsvStagingSink, merge_staging_files
from sqldiagnostics.infrastructure.excel.staging import INDEX_FILE_NAME, ordered_staging_files
from sqldiagnostics.infrastructure.sql import parse_catalog


@pytest.fixture
def catalog(sample_catalog_data):
    return parse_catalog(json.dumps(sample_catalog_data))


class TestOrderedStagingFiles:
    """Test cases for staging file ordering."""

    def test_index_first_then_numeric(self, tmp_path):
        for name in ["10_b.csv", "2_a.csv", "notes.csv", INDEX_FILE_NAME, "1_z.csv", "skip.txt"]:
            (tmp_path / name).write_text("h\n", encoding="utf-8")

        ordered = [p.name for p in ordered_staging_files(tmp_path)]

        assert ordered == [INDEX_FILE_NAME, "1_z.csv", "2_a.csv", "10_b.csv", "notes.csv"]


class TestMergeStagingFiles:
    """Test cases for merge_staging_files."""

    def test_merge_and_cleanup(self, tmp_path):
        stage = tmp_path / "stage"
        stage.mkdir()
        (stage / INDEX_FILE_NAME).write_text("Sr.No,Query,Query Notes\n1,SELECT 1,\n", encoding="utf-8")
        (stage / "1_First.csv").write_text("a,b\n1,2\n", encoding="utf-8")

        output = merge_staging_files(stage, tmp_path / "out.xlsx")

        wb = load_workbook(output)
        assert wb.sheetnames == ["executed_queries", "1_First"]
        assert [c.value for c in wb["1_First"][2]] == ["1", "2"]
        assert list(stage.glob("*.csv")) == []

    def test_unreadable_file_skipped(self, tmp_path):
        stage = tmp_path / "stage"
        stage.mkdir()
        (stage / INDEX_FILE_NAME).write_text("Sr.No,Query,Query Notes\n", encoding="utf-8")
        (stage / "1_Good.csv").write_text("a\n1\n", encoding="utf-8")
        (stage / "2_Bad.csv").write_bytes(b"\xff\xfe\x00broken")

        output = merge_staging_files(stage, tmp_path / "out.xlsx")

        assert load_workbook(output).sheetnames == ["executed_queries", "1_Good"]

    def test_long_staged_name_gets_sheet_name(self, tmp_path):
        stage = tmp_path / "stage"
        stage.mkdir()
        long_name = "4_" + "Long" * 20 + ".csv"
        (stage / long_name).write_text("a\n1\n", encoding="utf-8")

        output = merge_staging_files(stage, tmp_path / "out.xlsx")

        sheet = load_workbook(output).sheetnames[0]
        assert sheet.startswith("4_")
        assert len(sheet) == 31


class TestCsvStagingSink:
    """Test cases for CsvStagingSink."""

    def test_full_run(self, catalog, tmp_path):
        stage = tmp_path / "stage"
        sink = CsvStagingSink(stage)

        sink.write_index_unit(catalog)
        sink.begin_unit(sink.unit_name(1, "Single Value"))
        sink.write_header(["X"])
        sink.write_row([5])
        sink.begin_unit(sink.unit_name(2, "Broken"))
        sink.begin_unit(sink.unit_name(3, "Multi Row"))
        sink.write_header(["a", "note"])
        sink.write_row([1, "first\nsecond"])
        sink.write_row([None, b"bytes"])
        output = sink.finalize(tmp_path / "out.xlsx")
        sink.close()

        wb = load_workbook(output)
        assert wb.sheetnames == [
            "executed_queries", "1_Single_Value", "2_Broken", "3_Multi_Row"
        ]
        assert [c.value for c in wb["1_Single_Value"]["A"]] == ["X", "5"]
        assert wb["2_Broken"]["A1"].value is None
        assert [c.value for c in wb["3_Multi_Row"][2]] == ["1", "first second"]
        assert [c.value for c in wb["3_Multi_Row"][3]] == ["NULL", "bytes"]
        assert wb["executed_queries"].max_row == 4
        # caller-provided directory survives, staged files do not
        assert stage.is_dir()
        assert list(stage.iterdir()) == []

    def test_multiline_statement_kept(self, tmp_path):
        catalog = parse_catalog(json.dumps(
            {"queries": [{"query": "-- top waits\nSELECT 1 AS x", "notes": "a\nb"}]}
        ))
        sink = CsvStagingSink(tmp_path / "stage")

        sink.write_index_unit(catalog)
        output = sink.finalize(tmp_path / "out.xlsx")
        sink.close()

        ws = load_workbook(output)["executed_queries"]
        assert ws["B2"].value == "-- top waits\nSELECT 1 AS x"
        assert ws["C2"].value == "a\nb"
        assert ws.max_row == 2

    def test_unit_names_are_csv_files(self):
        sink = CsvStagingSink()
        try:
            assert sink.unit_name(1, "Sample Query Name!") == "1_Sample_Query_Name.csv"
        finally:
            sink.close()

    def test_owned_directory_removed_on_close(self):
        sink = CsvStagingSink()
        staging_dir = sink.staging_dir
        assert staging_dir.name.startswith("sql_diagnostics_")
        sink.begin_unit("1_A.csv")

        sink.close()

        assert not staging_dir.exists()
