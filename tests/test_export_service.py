"""Tests for CSV export and load."""

import csv

from recordgrid.services.export_service import export_csv, load_csv


class TestExportCsv:
    def test_writes_formatted_headers_and_values(self, tmp_path):
        path = tmp_path / "out.csv"
        records = [{"Name": "A", "DocumentPath": "c:/a.dwg"}, {"Name": 'Say "hi", ok'}]

        assert export_csv(str(path), records, ["Name", "DocumentPath"]) == 2

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows == [["name", "document path"], ["A", "c:/a.dwg"], ['Say "hi", ok', ""]]

    def test_custom_delimiter(self, tmp_path):
        path = tmp_path / "out.txt"
        export_csv(str(path), [{"A": 1, "B": 2}], ["A", "B"], delimiter="\t")
        assert path.read_text(encoding="utf-8").splitlines() == ["a\tb", "1\t2"]


class TestLoadCsv:
    def test_load(self, tmp_path):
        path = tmp_path / "in.csv"
        path.write_text("Name,Layer\nA,0\nB,A-WALL\n", encoding="utf-8")
        records, columns = load_csv(str(path))
        assert columns == ["Name", "Layer"]
        assert records == [{"Name": "A", "Layer": "0"}, {"Name": "B", "Layer": "A-WALL"}]
