"""
Tests for reading CSV/Excel uploads.
"""

import pandas as pd
import pytest
from skillsync.tabular import TabularError, read_headers, read_rows, read_table


class TestReadRows:
    """Test parsing of uploads into row dicts."""

    def test_csv_text(self, skills_csv):
        rows = read_rows(skills_csv)
        assert len(rows) == 3
        assert rows[0]["skill_code"] == "S1"
        assert rows[1]["station"] == ""

    def test_headers_normalized(self, areas_csv):
        rows = read_rows(areas_csv)
        assert set(rows[0].keys()) == {"area_code", "area_name"}

    def test_values_kept_as_text(self):
        """Codes with leading zeros must not be turned into numbers."""
        rows = read_rows("employee_number,name\n007,Bond\n")
        assert rows[0]["employee_number"] == "007"

    def test_na_like_values_kept(self):
        """'N' and 'NA' are data, not missing values."""
        rows = read_rows("employee_number,skill_code,rating\n1,S1,N\n2,S1,NA\n")
        assert [r["rating"] for r in rows] == ["N", "NA"]

    def test_values_trimmed(self):
        rows = read_rows("code,name\n A1 ,  Assembly \n")
        assert rows[0] == {"code": "A1", "name": "Assembly"}

    def test_blank_rows_skipped(self):
        rows = read_rows("code,name\nA1,Assembly\n\n,\nP1,Packaging\n")
        assert [r["code"] for r in rows] == ["A1", "P1"]

    def test_quoted_fields(self):
        rows = read_rows('code,name\nA1,"Assembly, north"\n')
        assert rows[0]["name"] == "Assembly, north"

    def test_csv_file(self, write_file, stations_csv):
        path = write_file("stations.csv", stations_csv)
        rows = read_rows(path)
        assert rows[0]["station_code"] == "1040.0"

    def test_csv_file_with_bom(self, write_file):
        path = write_file("areas.csv", "\ufeffArea Code,Area Name\nA1,Assembly\n")
        assert read_headers(path) == ["area_code", "area_name"]

    def test_excel_file(self, tmp_path):
        path = tmp_path / "skills.xlsx"
        pd.DataFrame({"Skill Code": ["S1"], "Skill Name": ["Press operation"]}).to_excel(path, index=False)
        rows = read_rows(path)
        assert rows == [{"skill_code": "S1", "skill_name": "Press operation"}]

    def test_header_only(self):
        assert read_rows("code,name\n") == []
        assert read_headers("code,name\n") == ["code", "name"]

    def test_empty_text_raises(self):
        with pytest.raises(TabularError):
            read_rows("   ")

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(TabularError):
            read_rows(tmp_path / "nope.csv")

    def test_unsupported_suffix_raises(self, write_file):
        path = write_file("data.json", "{}")
        with pytest.raises(TabularError):
            read_rows(path)

    def test_legacy_xls_rejected(self, tmp_path):
        path = tmp_path / "legacy.xls"
        # OLE2 compound document signature
        path.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504)
        with pytest.raises(TabularError, match="Unsupported file type: .xls"):
            read_rows(path)


class TestReadTable:
    """Test reading headers and rows in one pass."""

    def test_headers_and_rows(self, areas_csv):
        headers, rows = read_table(areas_csv)

        assert headers == ["area_code", "area_name"]
        assert rows[0] == {"area_code": "A1", "area_name": "Assembly"}

    def test_file_parsed_once(self, write_file, areas_csv, monkeypatch):
        calls = []
        original = pd.read_csv
        monkeypatch.setattr(pd, "read_csv", lambda *a, **kw: (calls.append(1), original(*a, **kw))[1])

        read_table(write_file("areas.csv", areas_csv))
        assert len(calls) == 1
