"""Tests for file parsing, upload validation and sample data."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pandas as pd
import pytest

from data.loader import _match_sheet, load_file, parse_halls, parse_students
from data.validator import validate_capacity_preview, validate_halls, validate_students
from data.sample_data import generate_halls_df, generate_students_df
from engine.allocation_engine import create_allocation_run, run_allocation


def make_halls_df(rows=None):
    return pd.DataFrame(rows or [
        {"Hall ID": "H1", "Hall Name": "Main Hall", "Rows": 4, "Columns": 5, "Active": "Yes"},
        {"Hall ID": "H2", "Hall Name": "Annex", "Rows": 2, "Columns": 3, "Active": "No"},
    ])


def make_students_df(groups):
    return pd.DataFrame([
        {"Student ID": f"S{i}", "Student Name": f"Student {i}", "Class Group": g}
        for i, g in enumerate(groups, start=1)
    ])


class FakeUpload:
    def __init__(self, name):
        self.name = name


class TestParsing:
    def test_parse_halls(self):
        halls = parse_halls(make_halls_df())
        assert [h.hall_id for h in halls] == ["H1", "H2"]
        assert halls[0].capacity == 20
        assert halls[0].is_active is True
        assert halls[1].is_active is False

    def test_parse_halls_without_active_column(self):
        df = pd.DataFrame([{"Hall ID": "H1", "Rows": 2, "Columns": 2}])
        hall = parse_halls(df)[0]
        assert hall.is_active is True
        assert hall.name == "H1"

    def test_parse_students_keeps_order_and_blank_groups(self):
        students = parse_students(make_students_df(["SS1", None, "JSS3"]))
        assert [s.student_id for s in students] == ["S1", "S2", "S3"]
        assert [s.class_group for s in students] == ["SS1", None, "JSS3"]
        assert students[1].group_key == "unassigned"

    def test_unsupported_file(self):
        with pytest.raises(ValueError):
            load_file(FakeUpload("halls.txt"))

    def test_sheet_aliases(self):
        assert _match_sheet(["Rooms", "Roster"], "halls") == "Rooms"
        assert _match_sheet(["Rooms", "Roster"], "students") == "Roster"
        with pytest.raises(ValueError):
            _match_sheet(["Sheet1"], "halls")


class TestValidateHalls:
    def test_valid(self):
        result = validate_halls(make_halls_df())
        assert result.is_valid
        assert result.errors == []

    def test_missing_columns(self):
        result = validate_halls(pd.DataFrame([{"Hall ID": "H1"}]))
        assert not result.is_valid
        assert "Rows" in result.errors[0]

    def test_non_positive_dimensions(self):
        df = make_halls_df([{"Hall ID": "H1", "Rows": 0, "Columns": 5}])
        assert not validate_halls(df).is_valid

    def test_duplicate_ids(self):
        df = make_halls_df([
            {"Hall ID": "H1", "Rows": 2, "Columns": 2},
            {"Hall ID": "H1", "Rows": 3, "Columns": 3},
        ])
        result = validate_halls(df)
        assert not result.is_valid
        assert any("Duplicate" in e for e in result.errors)

    def test_no_active_hall_warns(self):
        df = make_halls_df([{"Hall ID": "H1", "Rows": 2, "Columns": 2, "Active": "No"}])
        result = validate_halls(df)
        assert result.is_valid
        assert len(result.warnings) == 1


class TestValidateStudents:
    def test_duplicate_ids(self):
        df = pd.DataFrame([{"Student ID": "S1"}, {"Student ID": "S1"}])
        assert not validate_students(df).is_valid

    def test_missing_class_column_warns(self):
        result = validate_students(pd.DataFrame([{"Student ID": "S1"}]))
        assert result.is_valid
        assert "Class Group" in result.warnings[0]

    def test_blank_groups_warn(self):
        result = validate_students(make_students_df(["A", None, None]))
        assert result.is_valid
        assert "2 students" in result.warnings[0]

    def test_empty_file(self):
        result = validate_students(pd.DataFrame(columns=["Student ID"]))
        assert not result.is_valid


class TestCapacityPreview:
    def test_inactive_halls_excluded(self):
        result = validate_capacity_preview(make_halls_df(), make_students_df(["A"] * 21))
        assert not result.is_valid
        assert "20 active seats" in result.errors[0]

    def test_tight_fit_warns(self):
        result = validate_capacity_preview(make_halls_df(), make_students_df(["A"] * 19))
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_comfortable_fit(self):
        result = validate_capacity_preview(make_halls_df(), make_students_df(["A"] * 10))
        assert result.is_valid
        assert result.warnings == []


class TestSampleData:
    def test_students_reproducible(self):
        pd.testing.assert_frame_equal(generate_students_df(), generate_students_df())

    def test_sample_data_allocates(self):
        halls = parse_halls(generate_halls_df())
        students = parse_students(generate_students_df())
        assert validate_halls(generate_halls_df()).is_valid
        assert validate_students(generate_students_df()).is_valid

        result = run_allocation(create_allocation_run(seed="sample"), halls, students)
        assert result.success
        assert len(result.allocations) == 120
        assert "H4" not in {a.hall_id for a in result.allocations}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
