"""
Unit Tests for Metadata Extractor

Tests for:
- Roll number, name, branch, and semester line scan
- Parent-name and college-name lines skipped
- Branch/semester fallback from subject codes
"""

from metadata_extractor import detect_from_course_code, extract_metadata
from text_normalizer import normalize_text


class TestExtractMetadata:
    """Tests for extract_metadata"""

    def test_full_header(self, sample_transcript_text):
        metadata = extract_metadata(normalize_text(sample_transcript_text))

        assert metadata.roll_no == "22EJCCS101"
        assert metadata.name == "RAHUL SHARMA"
        assert metadata.branch == "CSE"
        assert metadata.semester == 3

    def test_roll_number_variants(self):
        assert extract_metadata("ROLL NUMBER - 21ABC123").roll_no == "21ABC123"
        assert extract_metadata("Roll No. 20/CS/45").roll_no == "20/CS/45"

    def test_enrollment_suffix_stripped(self):
        metadata = extract_metadata("ROLL NO: 22EJCCS101ENROLLMENTNO")
        assert metadata.roll_no == "22EJCCS101"

    def test_father_name_line_skipped(self):
        text = "Father's Name: SURESH SHARMA\nName of Student: PRIYA SHARMA"
        assert extract_metadata(text).name == "PRIYA SHARMA"

    def test_college_name_line_skipped(self):
        text = "College Name: ABC Institute\nName: Anil Kumar"
        assert extract_metadata(text).name == "Anil Kumar"

    def test_name_drops_non_letters(self):
        assert extract_metadata("Name: R@hul K. Verma").name == "R hul K. Verma"

    def test_program_line_gives_branch(self):
        metadata = extract_metadata("Programme: B.Tech (Information Technology)")
        assert metadata.branch == "IT"

    def test_first_branch_line_wins(self):
        text = "Branch: CSE\nProgram: B.Tech ECE"
        assert extract_metadata(text).branch == "CSE"

    def test_semester_roman_and_digits(self):
        assert extract_metadata("Semester: V").semester == 5
        assert extract_metadata("SEM - 7").semester == 7

    def test_empty_text(self):
        metadata = extract_metadata("")
        assert metadata.roll_no is None
        assert metadata.name is None
        assert metadata.branch is None
        assert metadata.semester is None

    def test_fallback_from_subject_codes(self):
        text = "Data Structures 3CS4-05 78\nOOP 3CS4-06 80\nMaths 3IT2-01 70"
        metadata = extract_metadata(text)

        assert metadata.branch == "CS"
        assert metadata.semester == 3

    def test_explicit_values_not_overridden(self):
        text = "Branch: IT\nSemester: 4\nData Structures 3CS4-05 78"
        metadata = extract_metadata(text)

        assert metadata.branch == "IT"
        assert metadata.semester == 4


class TestDetectFromCourseCode:
    """Tests for detect_from_course_code"""

    def test_most_frequent_wins(self):
        text = "4EC1-01 4CS4-05 4CS4-06 3CS4-07"
        assert detect_from_course_code(text) == ("CS", 4)

    def test_tie_goes_to_first_seen(self):
        text = "5IT4-01 3CS4-02"
        assert detect_from_course_code(text) == ("IT", 5)

    def test_ocr_leading_i_reads_as_one(self):
        assert detect_from_course_code("IFY2-01 Engineering Maths") == ("COMMON", 1)

    def test_no_codes(self):
        assert detect_from_course_code("no codes here") == (None, None)
