#!/usr/bin/env python3
"""
TEXT NORMALIZER - Canonical text and subject-name forms for transcript parsing
Cleans PDF/OCR extraction noise so every downstream parser sees one shape

NORMALIZATION STEPS:
✅ Line endings: CR collapsed to LF, trailing whitespace removed, blank runs collapsed
✅ Punctuation: en/em dashes to hyphen, smart quotes to straight quotes
✅ Encoding noise: non-ASCII characters to spaces
✅ OCR confusions: lone 0 between letters -> O, lone 1 between letters -> I

SUBJECT NAMES:
- Uppercased, '&' expanded to AND
- Domain abbreviations expanded (DBMS, OS, AI, ...)
- Punctuation and standalone numbers stripped

Every function here is deterministic; normalize_text(normalize_text(t)) == normalize_text(t).
"""

import re
from collections import Counter
from typing import Iterable, List, Optional


STOPWORDS = {
    "THE", "OF", "AND", "IN", "TO", "FOR", "A", "AN", "WITH", "ON",
    "I", "II", "III", "IV", "V", "VI", "VII", "VIII",
    "SEM", "SEMESTER",
}

ROMAN_SEMESTERS = {
    "I": 1,
    "II": 2,
    "III": 3,
    "IV": 4,
    "V": 5,
    "VI": 6,
    "VII": 7,
    "VIII": 8,
}

# Applied in order; whole-word matches on the uppercased name
SUBJECT_ABBREVIATIONS = [
    (r"\bDBMS\b", "DATABASE MANAGEMENT SYSTEMS"),
    (r"\bOOP\b", "OBJECT ORIENTED PROGRAMMING"),
    (r"\bCN\b", "COMPUTER NETWORKS"),
    (r"\bOS\b", "OPERATING SYSTEMS"),
    (r"\bAI\b", "ARTIFICIAL INTELLIGENCE"),
    (r"\bML\b", "MACHINE LEARNING"),
    (r"\bDL\b", "DEEP LEARNING"),
    (r"\bNLP\b", "NATURAL LANGUAGE PROCESSING"),
    (r"\bDSP\b", "DIGITAL SIGNAL PROCESSING"),
    (r"\bIOT\b", "INTERNET OF THINGS"),
    (r"\bSE\b", "SOFTWARE ENGINEERING"),
    (r"\bMACHINES\b", "MACHINE"),
]

LAB_PATTERN = re.compile(r"\b(?:LAB|LABORATORY|PRACTICAL|WORKSHOP|STUDIO)\b")

# (prefix, branch) checked in order against the letters-only uppercase value
BRANCH_PREFIXES = [
    ("CSE", "CSE"),
    ("IT", "IT"),
    ("INFORMATIONTECH", "IT"),
    ("INFOTECH", "IT"),
    ("FY", "COMMON"),
    ("ECE", "ECE"),
    ("EE", "EE"),
    ("ME", "ME"),
    ("CE", "CE"),
    ("AIML", "AIML"),
    ("AI", "AI"),
    ("DS", "DS"),
    ("CS", "CS"),
    ("COMPUTERSCIENCE", "CSE"),
    ("ELECTRONICS", "ECE"),
    ("ELECTRICAL", "EE"),
    ("CIVIL", "CE"),
]

DEGREE_PREFIX = re.compile(r"^(?:BTECH|MTECH|BE)(?=[A-Z])")


def normalize_text(text: Optional[str]) -> str:
    """
    Clean raw extracted text into canonical line-oriented form

    Args:
        text: Raw PDF or OCR text, possibly None

    Returns:
        Normalized text ("" for empty input)
    """
    if not text:
        return ""

    t = text.replace("\r", "\n")
    t = re.sub(r"[–—]", "-", t)
    t = re.sub(r"[“”]", '"', t)
    t = re.sub(r"[‘’]", "'", t)
    t = re.sub(r"[^\x00-\x7F]", " ", t)

    # OCR digit/letter confusions, only inside alphabetic runs
    t = re.sub(r"(?<=[A-Za-z])0(?=[A-Za-z])", "O", t)
    t = re.sub(r"(?<=[A-Za-z])1(?=[A-Za-z])", "I", t)

    t = re.sub(r"\s+\n", "\n", t)
    t = re.sub(r"\n{2,}", "\n", t)
    return t


def normalize_subject_name(name: Optional[str]) -> str:
    """Uppercase, expand abbreviations, strip punctuation and numbers"""
    if not name:
        return ""

    n = name.upper()
    n = n.replace("&", " AND ")
    for pattern, replacement in SUBJECT_ABBREVIATIONS:
        n = re.sub(pattern, replacement, n)
    n = re.sub(r"[^A-Z0-9\s]", " ", n)
    n = re.sub(r"\b\d{1,3}\b", " ", n)
    n = re.sub(r"\s+", " ", n).strip()
    return n


def tokenize(text: Optional[str]) -> List[str]:
    """Split on whitespace and drop stop words"""
    if not text:
        return []
    return [t for t in text.split() if t and t not in STOPWORDS]


def infer_is_lab(name: Optional[str]) -> Optional[bool]:
    """
    Infer lab/practical status from the subject name

    Returns:
        True for lab keywords, False otherwise, None when there is no name
    """
    if not name:
        return None
    return bool(LAB_PATTERN.search(name.upper()))


def parse_semester(value) -> Optional[int]:
    """Parse a semester from roman numerals or digits (1-8)"""
    if value is None or value == "":
        return None

    v = str(value).upper().strip()
    if v in ROMAN_SEMESTERS:
        return ROMAN_SEMESTERS[v]

    digits = re.sub(r"\D", "", v)
    if not digits:
        return None
    num = int(digits)
    if 1 <= num <= 8:
        return num
    return None


def normalize_branch(value) -> Optional[str]:
    """Map free-form branch/program text to a branch code"""
    if not value:
        return None

    v = re.sub(r"[^A-Z]", "", str(value).upper())
    if not v:
        return None

    # "B.Tech (CSE)" style program lines
    v = DEGREE_PREFIX.sub("", v)
    if v == "EC":
        return "ECE"

    for prefix, branch in BRANCH_PREFIXES:
        if v.startswith(prefix):
            return branch
    return None


def to_title_case(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return " ".join(w[:1].upper() + w[1:].lower() for w in value.split())


def pick_most_common(values: Iterable) -> Optional[object]:
    """Most frequent value; ties go to the value seen first"""
    counts = Counter(v for v in values if v is not None)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


__all__ = [
    'STOPWORDS',
    'normalize_text',
    'normalize_subject_name',
    'tokenize',
    'infer_is_lab',
    'parse_semester',
    'normalize_branch',
    'to_title_case',
    'pick_most_common',
]
