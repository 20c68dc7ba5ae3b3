"""
Tests for import schema validation.
"""

import pytest
from skillsync.schema import IMPORT_TYPES, first_value, validate_columns, validate_row


class TestValidateColumns:
    """Test header checks per import type."""

    def test_skills_columns_valid(self):
        assert validate_columns("skills", ["skill_code", "skill_name", "category"]) == []

    def test_aliases_accepted(self):
        """Alternative header names satisfy a required column."""
        assert validate_columns("skills", ["code", "name"]) == []
        assert validate_columns("employee_skills", ["employee_id", "skill", "level"]) == []

    def test_missing_column_reported(self):
        errors = validate_columns("employee_skills", ["employee_number", "skill_code"])
        assert len(errors) == 1
        assert "rating" in errors[0]

    def test_all_missing_columns_reported(self):
        errors = validate_columns("employees", ["email"])
        assert len(errors) == 2

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            validate_columns("payroll", ["x"])

    def test_every_type_has_columns(self):
        for import_type in IMPORT_TYPES:
            assert validate_columns(import_type, []) != []


class TestValidateRow:
    """Test per-row presence checks."""

    def test_valid_row(self):
        assert validate_row("skills", {"skill_code": "S1", "skill_name": "Press"}) == []

    def test_blank_required_field(self):
        errors = validate_row("skills", {"skill_code": "S1", "skill_name": "   "})
        assert errors == ["Missing skill_name"]

    def test_alias_value_used(self):
        assert validate_row("areas", {"code": "", "area": "A1"}) == []

    def test_scale_level_required(self):
        assert validate_row("rating_scales", {"level": "", "label": "Expert"}) == ["Missing level"]

    def test_blank_rating_allowed(self):
        """An empty rating means 'not rated' and is not a row error."""
        row = {"employee_number": "100", "skill_code": "S1", "rating": ""}
        assert validate_row("employee_skills", row) == []


class TestFirstValue:
    """Test column alias lookup."""

    def test_first_non_blank(self):
        row = {"skill_name": "", "name": " Press "}
        assert first_value(row, "skill_name", "name") == "Press"

    def test_none_when_all_blank(self):
        assert first_value({"a": " "}, "a", "b") is None
