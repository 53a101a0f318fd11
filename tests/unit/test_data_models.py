"""
Unit Tests for Data Models

Tests for:
- Field validation on extracted and catalog subjects
- Match result invariants
- Payload rendering
- Settings from environment
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from data_models import (
    CatalogSubject,
    ComputedSubject,
    ExtractedSubject,
    MatchResult,
    ProcessorSettings,
    SemesterResult,
)


class TestExtractedSubject:

    def test_code_and_grade_normalized(self):
        row = ExtractedSubject(subject_name=" Data Structures ", subject_code="3cs4-05", grade="b +")

        assert row.subject_name == "Data Structures"
        assert row.subject_code == "3CS4-05"
        assert row.grade == "B+"

    @pytest.mark.parametrize("kwargs", [
        {"subject_name": "   "},
        {"subject_name": "Physics", "subject_code": "CS-101"},
        {"subject_name": "Physics", "grade": "O"},
        {"subject_name": "Physics", "total_marks": -1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            ExtractedSubject(**kwargs)


class TestCatalogSubject:

    def test_catalog_key(self):
        subject = CatalogSubject(subject_name="Physics", branch="common", semester=1, credits=4)

        assert subject.branch == "COMMON"
        assert subject.catalog_key == "Physics|COMMON|1"

    @pytest.mark.parametrize("kwargs", [
        {"semester": 0, "credits": 3},
        {"semester": 9, "credits": 3},
        {"semester": 3, "credits": 0.25},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            CatalogSubject(subject_name="Physics", branch="CSE", **kwargs)


class TestResults:

    def test_empty_match_result(self):
        result = MatchResult()

        assert result.total == 0
        assert result.coverage == 0.0

    def test_semester_result_payload(self):
        result = SemesterResult(
            roll_no="21X",
            sgpa=8.5,
            total_credits=4,
            total_grade_points=34,
            subjects=[ComputedSubject(subject="Physics", credits=4, grade="A", grade_point=8.5, contribution=34)],
            matched_count=1,
            unmatched_count=1,
        )
        payload = result.to_payload()

        assert payload["rollNo"] == "21X"
        assert payload["name"] is None
        assert payload["subjects"][0]["gradePoint"] == 8.5
        assert result.coverage == 0.5


class TestProcessorSettings:

    def test_defaults(self):
        settings = ProcessorSettings()

        assert settings.min_coverage == 0.8
        assert settings.min_match_score == 0.55
        assert settings.use_credit_hints is False
        assert settings.credit_catalog_path.name == "credit_catalog.json"

    def test_from_env(self, tmp_path):
        settings = ProcessorSettings.from_env({
            "SGPA_DATA_DIR": str(tmp_path),
            "SGPA_SUBJECT_CATALOG": "subjects.csv",
            "SGPA_MIN_COVERAGE": "0.5",
            "SGPA_USE_CREDIT_HINTS": "yes",
        })

        assert settings.subject_catalog_path == Path(tmp_path) / "subjects.csv"
        assert settings.min_coverage == 0.5
        assert settings.use_credit_hints is True

    def test_from_env_rejects_bad_threshold(self):
        with pytest.raises(ValidationError):
            ProcessorSettings.from_env({"SGPA_MIN_COVERAGE": "1.5"})
