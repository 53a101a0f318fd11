"""
Unit Tests for Subject Matcher

Tests for:
- Similarity scoring
- Lab/theory compatibility
- At-most-once claiming and partition completeness
- Tie-breaking and thresholds
"""

import pytest

from data_models import CatalogSubject, ExtractedSubject
from subject_matcher import (
    SubjectMatcher,
    dice_coefficient,
    lab_compatible,
    match_subjects,
    score_name,
)
from text_normalizer import normalize_subject_name, tokenize


def extracted(name, code=None, grade="A"):
    return ExtractedSubject(subject_name=name, subject_code=code, grade=grade)


def score(a, b):
    a_norm = normalize_subject_name(a)
    b_norm = normalize_subject_name(b)
    return score_name(a_norm, b_norm, tokenize(a_norm), tokenize(b_norm))


class TestScoring:

    def test_dice_identical_and_disjoint(self):
        assert dice_coefficient("NIGHT", "NIGHT") == 1.0
        assert dice_coefficient("AB", "CD") == 0.0
        assert dice_coefficient("", "AB") == 0.0
        assert dice_coefficient("A", "B") == 0.0

    def test_dice_partial(self):
        # NI IG GH HT vs NA AC CH HT: one shared bigram
        assert dice_coefficient("NIGHT", "NACHT") == pytest.approx(0.25)

    def test_exact_match_capped(self):
        assert score("Data Structures & Algorithms", "Data Structures and Algorithms") == 1.0

    def test_abbreviation_matches_full_name(self):
        assert score("DBMS", "Database Management Systems") == 1.0

    def test_unrelated_names_score_low(self):
        assert score("Digital Electronics", "Technical Communication") < 0.55

    def test_empty_name_scores_zero(self):
        assert score_name("", "DIGITAL ELECTRONICS", [], ["DIGITAL", "ELECTRONICS"]) == 0.0

    def test_lab_compatibility(self):
        assert lab_compatible(True, True)
        assert not lab_compatible(True, False)
        assert lab_compatible(False, False)
        assert not lab_compatible(False, True)
        assert lab_compatible(None, False)
        assert not lab_compatible(None, True)


class TestSubjectMatcher:

    def test_matches_by_name(self, sample_catalog_subjects):
        result = match_subjects(
            [extracted("Data Structures & Algorithms"), extracted("Object Oriented Programming")],
            sample_catalog_subjects,
        )

        assert [m.subject.subject_name for m in result.matched] == [
            "Data Structures and Algorithms",
            "Object Oriented Programming",
        ]
        assert result.unmatched == []

    def test_lab_never_matches_theory(self):
        catalog = [CatalogSubject(subject_name="Database Management Systems", branch="CSE", semester=4, credits=3)]
        result = match_subjects([extracted("Database Management Systems Lab")], catalog)

        assert result.matched == []
        assert len(result.unmatched) == 1

    def test_lab_matches_lab(self, sample_catalog_subjects):
        result = match_subjects([extracted("Data Structures & Algorithms Lab")], sample_catalog_subjects)

        assert len(result.matched) == 1
        assert result.matched[0].subject.is_lab is True

    def test_each_catalog_subject_claimed_once(self, sample_catalog_subjects):
        rows = [extracted("Digital Electronics"), extracted("Digital Electronic")]
        result = match_subjects(rows, sample_catalog_subjects)

        keys = [m.subject.catalog_key for m in result.matched]
        assert len(keys) == len(set(keys))
        assert result.matched[0].extracted.subject_name == "Digital Electronics"
        assert [u.subject_name for u in result.unmatched] == ["Digital Electronic"]

    def test_partition_is_complete(self, sample_catalog_subjects):
        rows = [
            extracted("Software Engineering"),
            extracted("Underwater Basket Weaving"),
            extracted("Technical Communication"),
            extracted("Object Oriented Programming Lab"),
            extracted("Quantum Gravity"),
        ]
        result = match_subjects(rows, sample_catalog_subjects)

        assert len(result.matched) + len(result.unmatched) == len(rows)
        assert result.total == len(rows)
        assert result.coverage == pytest.approx(0.6)

    def test_tie_goes_to_first_candidate(self):
        catalog = [
            CatalogSubject(subject_name="Physics", branch="CSE", semester=1, credits=4),
            CatalogSubject(subject_name="Physics", branch="COMMON", semester=1, credits=3),
        ]
        result = match_subjects([extracted("Physics")], catalog)

        assert result.matched[0].subject.branch == "CSE"

    def test_threshold_is_configurable(self, sample_catalog_subjects):
        rows = [extracted("Digital Systems")]

        assert SubjectMatcher(min_score=0.99).match(rows, sample_catalog_subjects).matched == []
        assert len(SubjectMatcher(min_score=0.1).match(rows, sample_catalog_subjects).matched) == 1

    def test_unnormalizable_name_is_unmatched(self, sample_catalog_subjects):
        result = match_subjects([extracted("- 12 -", code="3CS4-05")], sample_catalog_subjects)

        assert result.matched == []
        assert len(result.unmatched) == 1

    def test_empty_inputs(self, sample_catalog_subjects):
        assert match_subjects([], sample_catalog_subjects).total == 0
        assert match_subjects([extracted("Physics")], []).unmatched[0].subject_name == "Physics"
