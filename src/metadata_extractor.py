#!/usr/bin/env python3
"""
METADATA EXTRACTOR - Student identity from normalized transcript text
Keyword-anchored line scan for roll number, name, branch, and semester

EXTRACTION ORDER (first matching line wins per field):
✅ Roll number: "ROLL NO" / "ROLL NUMBER" keyword
✅ Name: "NAME" keyword, skipping college-name and parent-name lines
✅ Branch: "BRANCH" keyword, then "PROGRAM" / "PROGRAMME"
✅ Semester: "SEM" / "SEMESTER" keyword, roman or arabic numerals

FALLBACK:
- Branch and semester missing after the line scan are inferred from the most
  frequent subject-code pattern (1CS3-05 -> semester 1, branch CS)
"""

import re
import logging
from typing import List, Optional, Tuple

from data_models import StudentMetadata
from text_normalizer import normalize_branch, parse_semester, pick_most_common

logger = logging.getLogger(__name__)


ROLL_PATTERN = re.compile(r"\bROLL\s*(?:NO|NUMBER)\b[\s.:\-]*([A-Z0-9/\-]+)")
NAME_VALUE_PATTERN = re.compile(
    r"NAME(?:\s+OF\s+(?:THE\s+)?(?:STUDENT|CANDIDATE))?\s*[:\-]?\s*(.+)$", re.IGNORECASE
)
NAME_STOP_PATTERN = re.compile(r"FATHER|MOTHER|HUSBAND|GUARDIAN", re.IGNORECASE)
BRANCH_VALUE_PATTERN = re.compile(r"BRANCH\s*[:\-]?\s*(.+)$", re.IGNORECASE)
PROGRAM_VALUE_PATTERN = re.compile(r"PROGRAM(?:ME)?\s*[:\-]?\s*(.+)$", re.IGNORECASE)
SEMESTER_VALUE_PATTERN = re.compile(r"SEM(?:ESTER)?\s*[:\-]?\s*([IVX]+|\d+)", re.IGNORECASE)
COURSE_CODE_PATTERN = re.compile(r"([1-8I])([A-Z]{2,4})\d-\d{2}")


def _extract_roll_no(upper: str) -> Optional[str]:
    match = ROLL_PATTERN.search(upper)
    if not match:
        return None
    # Roll and enrollment numbers are sometimes printed without a separator
    roll_no = re.sub(r"ENROLL.*$", "", match.group(1))
    return roll_no or None


def _extract_name(line: str, upper: str) -> Optional[str]:
    if not re.search(r"\bNAME\b", upper) or re.search(r"COLLEGE\s*NAME", upper):
        return None

    name_idx = upper.find("NAME")
    stops = [upper.find(k) for k in ("FATHER", "MOTHER", "GUARDIAN")]
    stops = [i for i in stops if i >= 0]
    if stops and name_idx > min(stops):
        # "Father's Name: ..." line
        return None

    match = NAME_VALUE_PATTERN.search(line)
    if not match:
        return None

    value = NAME_STOP_PATTERN.split(match.group(1))[0]
    value = re.sub(r"[^A-Za-z\s.]", " ", value)
    value = re.sub(r"\s+", " ", value).strip()
    return value or None


def detect_from_course_code(text: str) -> Tuple[Optional[str], Optional[int]]:
    """
    Infer branch and semester from subject-code shaped tokens

    Args:
        text: Normalized transcript text

    Returns:
        Tuple of (branch, semester), either may be None
    """
    branches: List[str] = []
    semesters: List[int] = []

    for match in COURSE_CODE_PATTERN.finditer(text.upper()):
        sem_token = "1" if match.group(1) == "I" else match.group(1)
        semester = parse_semester(sem_token)
        branch = normalize_branch(match.group(2))
        if branch:
            branches.append(branch)
        if semester:
            semesters.append(semester)

    return pick_most_common(branches), pick_most_common(semesters)


def extract_metadata(text: str) -> StudentMetadata:
    """
    Scan normalized text for student roll number, name, branch, and semester

    Args:
        text: Normalized transcript text

    Returns:
        StudentMetadata with any fields that could be recovered
    """
    raw = text or ""
    roll_no = None
    name = None
    branch = None
    semester = None

    for line in raw.splitlines():
        upper = line.upper()

        if roll_no is None:
            roll_no = _extract_roll_no(upper)

        if name is None:
            name = _extract_name(line, upper)

        if branch is None and re.search(r"\bBRANCH\b", upper):
            match = BRANCH_VALUE_PATTERN.search(line)
            if match:
                branch = normalize_branch(match.group(1))

        if branch is None and re.search(r"\bPROGRAM(?:ME)?\b", upper):
            match = PROGRAM_VALUE_PATTERN.search(line)
            if match:
                branch = normalize_branch(match.group(1))

        if semester is None and re.search(r"\bSEM(?:ESTER)?\b", upper):
            match = SEMESTER_VALUE_PATTERN.search(line)
            if match:
                semester = parse_semester(match.group(1))

    if branch is None or semester is None:
        detected_branch, detected_semester = detect_from_course_code(raw)
        if branch is None and detected_branch:
            logger.info(f"  📝 Branch inferred from subject codes: {detected_branch}")
            branch = detected_branch
        if semester is None and detected_semester:
            logger.info(f"  📝 Semester inferred from subject codes: {detected_semester}")
            semester = detected_semester

    return StudentMetadata(roll_no=roll_no, name=name, branch=branch, semester=semester)


__all__ = ['extract_metadata', 'detect_from_course_code']
