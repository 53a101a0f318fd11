#!/usr/bin/env python3
"""
SUBJECT LINE PARSER - Subject rows from normalized transcript text
Segments text into logical rows and extracts code, name, marks, and grade

SEGMENTATION:
✅ Serial-number prefixes ("1.", "2)") stripped
✅ Wrapped titles (letters only, no digits) buffered and joined to the next coded/graded row
✅ Header and footer lines filtered by the noise predicate

FIELD EXTRACTION (ordered strategy chain, each strategy pure):
1. Trailing grade token; text before it is the working line
2. Grade-anchored tail: packed credit/point/contribution digits after the grade
   (an unreadable tail is dropped, the grade is kept)
3. Explicit percentage (NN%) or marks/max fraction
4. Subject code; name is the text before it, marks from the digits after it
5. No code: 1-3 digit numbers give marks and plausible full marks
6. Reject rows whose residual name is shorter than 3 characters

PRECEDENCE:
- The grade-anchored marks candidate replaces marks only when none were
  found or the earlier candidate exceeds 100
- Rows are deduplicated by subject code (preferred) or name, first kept
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from data_models import ExtractedSubject

logger = logging.getLogger(__name__)


GRADE_POINT_ANCHORS = {
    "A++": 10.0,
    "A+": 9.0,
    "A": 8.5,
    "B+": 8.0,
    "B": 7.5,
    "C+": 7.0,
    "C": 6.5,
    "D+": 6.0,
    "D": 5.5,
    "E+": 5.0,
    "E": 4.0,
    "F": 0.0,
}

GRADE_ALTERNATION = r"A\+\+|A\+|A|B\+|B|C\+|C|D\+|D|E\+|E|F"

TRAILING_GRADE = re.compile(rf"(?<![A-Za-z+])({GRADE_ALTERNATION})\s*$")
GRADE_WITH_TAIL = re.compile(rf"(?<![A-Za-z+])({GRADE_ALTERNATION})\s*(\d[\d.\s]*)$")
GRADE_ANCHORED_MARKS = re.compile(r"(?<![\d/.\-])(\d{1,3})\s*$")

CODE_PATTERN = re.compile(r"([1-8][A-Z]{2,4}\d-\d{2}|FEC\d{2})")
OCR_CODE_PREFIX = re.compile(r"(?<![0-9A-Z])I(?=[A-Z]{2,4}\d-\d{2})")

PERCENT_PATTERN = re.compile(r"\b(\d{1,3})\s*%")
FRACTION_PATTERN = re.compile(r"\b(\d{1,3})\s*/\s*(\d{1,3})\b")
SMALL_NUMBER = re.compile(r"\b\d{1,3}\b")
MAX_KEYWORD = re.compile(r"\b(?:OUT\s*OF|MAX|MM)\b")

FULL_MARKS_PAIR = {50, 75, 80, 100, 150, 200}
FULL_MARKS_LARGEST = {100, 150, 200}

SERIAL_PREFIX = re.compile(r"^\s*(?:\d{1,2}\s*[.)](?!\d)\s*|\d{1,2}\s+(?=[A-Za-z]))")

NOISE_KEYWORDS = re.compile(
    r"\b(?:RAJASTHAN|UNIVERSITY|RESULT|ROLL|NAME|BRANCH|SEMESTER|SGPA|CGPA|TOTAL|"
    r"STATUS|COLLEGE|EXAM|EXAMINATION|INSTITUTE|COURSE|TITLE|CODE|MARKS|MARKSHEET|"
    r"GRADE|REMARKS|INSTRUCTION|INSTRUCTIONS|PAGE)\b"
)

MIN_LINE_LENGTH = 6
MIN_NAME_LENGTH = 3


@dataclass
class GradeTail:
    """Values unpacked from the digits that follow a grade token"""

    credits: Optional[float]
    point: float
    contribution: Optional[float]


@dataclass
class GradeSplit:
    """Grade token plus the working line in front of it"""

    grade: Optional[str]
    working_line: str
    tail: Optional[GradeTail] = None


def _is_number(value: str) -> bool:
    return bool(re.fullmatch(r"\d+(?:\.\d+)?", value))


def _point_forms(point: float) -> List[str]:
    """Printed forms of a grade point ("8", "8.0", "8.5", "8.50")"""
    if float(point).is_integer():
        whole = str(int(point))
        return [f"{point:.2f}", f"{point:.1f}", whole]
    return [f"{point:.2f}", f"{point:g}"]


def unpack_grade_tail(tail: str, point: float) -> Optional[GradeTail]:
    """
    Split packed digits after a grade into credits, point, and contribution

    The grade's known point value anchors the split, so "3824" after B+
    (point 8) reads as credits 3, point 8, contribution 24, and "824" reads
    as point 8, contribution 24 with credits 3 inferred. Credits followed by
    a bare point are only accepted from separated groups.

    Args:
        tail: Digits (and dots/spaces) following the grade token
        point: Grade point of the grade token

    Returns:
        GradeTail, or None if no split is consistent with the point
    """
    groups = (tail or "").split()
    packed = "".join(groups)
    if not packed:
        return None
    partial_ok = len(groups) > 1

    fallback = None
    for form in _point_forms(point):
        start = packed.find(form)
        while start != -1:
            prefix = packed[:start]
            suffix = packed[start + len(form):]
            start = packed.find(form, start + 1)

            if (prefix and not _is_number(prefix)) or (suffix and not _is_number(suffix)):
                continue
            credits = float(prefix) if prefix else None
            contribution = float(suffix) if suffix else None
            if credits is not None and not (0.5 <= credits <= 10):
                continue

            if credits is not None and contribution is not None:
                if abs(contribution - credits * point) <= 0.051:
                    return GradeTail(credits=credits, point=point, contribution=contribution)
                continue

            if credits is None and contribution is None:
                fallback = fallback or GradeTail(credits=None, point=point, contribution=None)
            elif contribution is None:
                if partial_ok:
                    fallback = fallback or GradeTail(credits=credits, point=point, contribution=None)
            elif point > 0:
                inferred = contribution / point
                if 0.5 <= inferred <= 10 and abs(inferred * 2 - round(inferred * 2)) < 1e-6:
                    fallback = fallback or GradeTail(
                        credits=round(inferred * 2) / 2, point=point, contribution=contribution
                    )

    return fallback


def split_grade(line: str) -> GradeSplit:
    """Locate the grade token near the end of the line"""
    match = TRAILING_GRADE.search(line)
    if match:
        working = line[:match.start()].strip()
        return GradeSplit(grade=match.group(1), working_line=working)

    match = GRADE_WITH_TAIL.search(line)
    if match:
        grade = match.group(1)
        tail = unpack_grade_tail(match.group(2), GRADE_POINT_ANCHORS[grade])
        if tail is None:
            logger.debug(f"⚠️ Unreadable digits after grade {grade}: {match.group(2).strip()!r}")
        working = line[:match.start()].strip()
        return GradeSplit(grade=grade, working_line=working, tail=tail)

    return GradeSplit(grade=None, working_line=line)


def grade_anchored_marks(working_line: str) -> Optional[int]:
    """Standalone 1-3 digit number printed right before the grade"""
    match = GRADE_ANCHORED_MARKS.search(working_line)
    return int(match.group(1)) if match else None


def find_explicit_marks(working_line: str) -> Tuple[Optional[int], Optional[int], bool]:
    """
    Explicit percentage or marks/max fraction

    Returns:
        Tuple of (total_marks, max_marks, is_percentage)
    """
    total = None
    maximum = None
    is_percentage = False

    percent = PERCENT_PATTERN.search(working_line)
    if percent:
        total = int(percent.group(1))
        is_percentage = True

    fraction = FRACTION_PATTERN.search(working_line)
    if fraction:
        total = int(fraction.group(1))
        maximum = int(fraction.group(2))

    return total, maximum, is_percentage


def marks_from_code_tail(tail: str) -> Optional[int]:
    """Marks from digits printed after the subject code"""
    digits = re.sub(r"\D", "", tail)
    if len(digits) >= 4:
        # Internal and external marks packed together: "2850" -> 28 + 50
        last4 = digits[-4:]
        return int(last4[:2]) + int(last4[2:])
    if len(digits) >= 2:
        return int(digits)
    return None


def marks_from_numbers(
    line: str, total: Optional[int], maximum: Optional[int]
) -> Tuple[Optional[int], Optional[int]]:
    """Marks and full marks from the 1-3 digit numbers on a line without a usable code"""
    values = [int(n) for n in SMALL_NUMBER.findall(line)]
    if not values:
        return total, maximum

    if total is None:
        total = values[-1]

    if maximum is None and len(values) >= 2:
        largest = max(values)
        smallest = min(values)

        if MAX_KEYWORD.search(line.upper()):
            maximum = largest
            if largest == total:
                total = smallest
        elif len(values) == 2:
            first, second = values
            if second > first and second in FULL_MARKS_PAIR:
                total = first
                maximum = second
        elif largest in FULL_MARKS_LARGEST and largest > total:
            maximum = largest

    return total, maximum


def clean_subject_name(text: str) -> str:
    """Strip numeric and code-shaped substrings, leaving the title"""
    name = CODE_PATTERN.sub(" ", text)
    name = re.sub(r"\b\d{1,3}\s*/\s*\d{1,3}\b", " ", name)
    name = re.sub(r"\b\d{1,3}\b", " ", name)
    name = re.sub(r"\b[A-Z]{1,3}\d{2,4}\b", " ", name)
    name = re.sub(r"\b\d{1,2}[A-Z]{2,4}\d?[- ]?\d{2}\b", " ", name)
    name = re.sub(r"\b(?:OUT\s*OF|MAX|MM)\b", " ", name, flags=re.IGNORECASE)
    name = re.sub(r"[|%]", " ", name)
    name = re.sub(r"\s+", " ", name)
    return name.strip(" -:,.")


def is_noise_line(line: str) -> bool:
    """Header, footer, numbering, and fragment lines"""
    upper = line.strip().upper()
    if len(upper) < MIN_LINE_LENGTH:
        return True
    if not re.search(r"[A-Z]", upper):
        return True
    return bool(NOISE_KEYWORDS.search(upper))


def parse_subject_line(line: str) -> Optional[ExtractedSubject]:
    """
    Extract one subject row from a candidate line

    Args:
        line: One logical (possibly merged) transcript line

    Returns:
        ExtractedSubject, or None when the line is not a subject row
    """
    if not re.search(r"[A-Za-z]", line) or not re.search(r"\d", line):
        return None

    normalized = OCR_CODE_PREFIX.sub("1", line.replace("|", " ")).strip()

    split = split_grade(normalized)
    working = split.working_line
    marks_candidate = grade_anchored_marks(working) if split.grade else None

    total, maximum, is_percentage = find_explicit_marks(working)

    code_match = CODE_PATTERN.search(working)
    subject_code = code_match.group(1) if code_match else None
    subject_name = None

    if code_match:
        before = working[:code_match.start()]
        subject_name = re.sub(r"\s+", " ", before.replace("|", " ")).strip(" -:,.")
        if subject_name and total is None:
            total = marks_from_code_tail(working[code_match.end():])

    if not subject_name:
        # Code-first layouts and lines without a code
        residual = CODE_PATTERN.sub(" ", working)
        total, maximum = marks_from_numbers(residual, total, maximum)
        subject_name = clean_subject_name(residual)

    if marks_candidate is not None and (total is None or total > 100):
        total = marks_candidate

    if not subject_name or len(subject_name) < MIN_NAME_LENGTH:
        return None
    if not re.search(r"[A-Za-z]", subject_name):
        return None

    return ExtractedSubject(
        subject_name=subject_name,
        subject_code=subject_code,
        total_marks=total,
        max_marks=maximum,
        grade=split.grade,
        is_percentage=is_percentage,
        credits_hint=split.tail.credits if split.tail else None,
        raw_line=line,
    )


def _strip_serial(line: str) -> str:
    return SERIAL_PREFIX.sub("", line, count=1).strip()


def merge_wrapped_lines(text: str) -> List[str]:
    """
    Join wrapped subject titles onto the row that carries their code or grade

    Args:
        text: Normalized transcript text

    Returns:
        Logical lines in document order
    """
    lines = [_strip_serial(l) for l in (text or "").splitlines()]
    lines = [l for l in lines if l]

    combined: List[str] = []
    buffer = ""

    for line in lines:
        has_letter = bool(re.search(r"[A-Za-z]", line))
        has_digit = bool(re.search(r"\d", line))

        if has_letter and not has_digit:
            if NOISE_KEYWORDS.search(line.upper()):
                # Column headers are never part of a wrapped title
                if buffer:
                    combined.append(buffer)
                    buffer = ""
                continue
            buffer = f"{buffer} {line}" if buffer else line
            continue

        if buffer:
            candidate = OCR_CODE_PREFIX.sub("1", line)
            if CODE_PATTERN.search(candidate) or TRAILING_GRADE.search(candidate):
                combined.append(f"{buffer} {line}".strip())
            else:
                combined.append(buffer)
                combined.append(line)
            buffer = ""
            continue

        combined.append(line)

    if buffer:
        combined.append(buffer)

    return combined


def _dedupe_key(subject: ExtractedSubject) -> str:
    if subject.subject_code:
        return subject.subject_code.upper()
    return re.sub(r"\s+", " ", subject.subject_name.upper()).strip()


class SubjectLineParser:
    """Parse subject rows out of normalized transcript text"""

    def __init__(self):
        self.parse_log: List[str] = []

    def parse(self, text: str) -> List[ExtractedSubject]:
        """
        Parse every subject row in the text

        Args:
            text: Normalized transcript text

        Returns:
            Extracted subjects in line order, deduplicated
        """
        self.parse_log = []
        subjects: List[ExtractedSubject] = []
        seen = set()
        rejected = 0

        for line in merge_wrapped_lines(text):
            if is_noise_line(line):
                continue

            try:
                parsed = parse_subject_line(line)
            except ValueError as e:
                # Field validation failed for this row only
                self.parse_log.append(f"⚠️ Dropped line {line!r}: {e}")
                parsed = None

            if parsed is None:
                rejected += 1
                continue

            key = _dedupe_key(parsed)
            if key in seen:
                self.parse_log.append(f"🔁 Duplicate row skipped: {key}")
                continue
            seen.add(key)
            subjects.append(parsed)

        self.parse_log.append(f"✅ Parsed {len(subjects)} subjects ({rejected} candidate lines rejected)")
        logger.debug("\n".join(self.parse_log))
        return subjects

    def get_parse_log(self) -> List[str]:
        return self.parse_log


def parse_subjects(text: str) -> List[ExtractedSubject]:
    """Parse subject rows with a fresh parser"""
    return SubjectLineParser().parse(text)


__all__ = [
    'GRADE_POINT_ANCHORS',
    'SubjectLineParser',
    'parse_subjects',
    'parse_subject_line',
    'merge_wrapped_lines',
    'is_noise_line',
    'split_grade',
    'unpack_grade_tail',
]
