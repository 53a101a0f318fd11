"""
Unit Tests for Text Normalizer

Tests for:
- Raw text cleanup and idempotence
- Subject name normalization and tokenizing
- Lab inference
- Semester and branch parsing
"""

import pytest

from text_normalizer import (
    infer_is_lab,
    normalize_branch,
    normalize_subject_name,
    normalize_text,
    parse_semester,
    pick_most_common,
    to_title_case,
    tokenize,
)


class TestNormalizeText:
    """Tests for normalize_text"""

    def test_empty_input(self):
        assert normalize_text(None) == ""
        assert normalize_text("") == ""

    def test_line_endings_and_blank_runs(self):
        text = "Line one  \r\n\r\n\r\nLine two"
        assert normalize_text(text) == "Line one\nLine two"

    def test_dashes_and_quotes(self):
        text = "3CS4–05 — “Data” ‘Lab’"
        assert normalize_text(text) == "3CS4-05 - \"Data\" 'Lab'"

    def test_non_ascii_becomes_space(self):
        assert normalize_text("Maths Lab") == "Maths Lab"

    def test_ocr_digit_confusions_inside_words(self):
        assert normalize_text("C0MPUTER NETW0RKS") == "COMPUTER NETWORKS"
        assert normalize_text("ENG1NEERING") == "ENGINEERING"

    def test_digits_outside_words_untouched(self):
        text = "3CS4-05 78/100 10 A"
        assert normalize_text(text) == text

    @pytest.mark.parametrize("text", [
        "A0B0C",
        "X1Y1Z\r\n\r\n",
        "Data  \n\n\n Structures 3CS4-05 78/100 B+",
        "“Quoted” – text withé noise",
        "\n\n\n",
    ])
    def test_idempotent(self, text):
        once = normalize_text(text)
        assert normalize_text(once) == once


class TestSubjectNames:
    """Tests for normalize_subject_name and tokenize"""

    def test_uppercase_and_ampersand(self):
        assert normalize_subject_name("Data Structures & Algorithms") == "DATA STRUCTURES AND ALGORITHMS"

    def test_abbreviation_expansion(self):
        assert normalize_subject_name("DBMS Lab") == "DATABASE MANAGEMENT SYSTEMS LAB"
        assert normalize_subject_name("Intro to ML") == "INTRO TO MACHINE LEARNING"

    def test_machines_singular(self):
        assert normalize_subject_name("Electrical Machines-I") == "ELECTRICAL MACHINE I"

    def test_punctuation_and_numbers_stripped(self):
        assert normalize_subject_name("Mathematics - 2 (Part 1)") == "MATHEMATICS PART"

    def test_empty_name(self):
        assert normalize_subject_name(None) == ""
        assert normalize_subject_name("  ") == ""

    def test_tokenize_drops_stopwords(self):
        tokens = tokenize("THEORY OF COMPUTATION SEM III")
        assert tokens == ["THEORY", "COMPUTATION"]


class TestInferIsLab:
    """Tests for infer_is_lab"""

    @pytest.mark.parametrize("name", ["DBMS Lab", "Physics Laboratory", "Engineering Workshop", "Design Studio"])
    def test_lab_keywords(self, name):
        assert infer_is_lab(name) is True

    def test_theory_subject(self):
        assert infer_is_lab("Database Management Systems") is False

    def test_keyword_must_be_whole_word(self):
        assert infer_is_lab("Collaborative Design") is False

    def test_indeterminate_for_empty(self):
        assert infer_is_lab("") is None
        assert infer_is_lab(None) is None


class TestSemesterAndBranch:
    """Tests for parse_semester and normalize_branch"""

    @pytest.mark.parametrize("value,expected", [
        ("III", 3), ("viii", 8), ("5", 5), (4, 4), ("Sem 2", 2), ("9", None), ("", None), (None, None),
    ])
    def test_parse_semester(self, value, expected):
        assert parse_semester(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("CSE", "CSE"),
        ("Computer Science & Engineering", "CSE"),
        ("B.Tech (CSE)", "CSE"),
        ("Information Technology", "IT"),
        ("FY", "COMMON"),
        ("EC", "ECE"),
        ("Electronics & Communication", "ECE"),
        ("Electrical Engineering", "EE"),
        ("Mechanical Engineering", "ME"),
        ("Civil Engineering", "CE"),
        ("AIML", "AIML"),
        ("CS", "CS"),
        ("History", None),
        ("", None),
    ])
    def test_normalize_branch(self, value, expected):
        assert normalize_branch(value) == expected

    def test_title_case(self):
        assert to_title_case("RAHUL  KUMAR sharma") == "Rahul Kumar Sharma"
        assert to_title_case("") is None

    def test_pick_most_common(self):
        assert pick_most_common(["CSE", "IT", "CSE"]) == "CSE"
        assert pick_most_common([5, 3, 3, 5]) == 5
        assert pick_most_common([None, "IT"]) == "IT"
        assert pick_most_common([]) is None
