#!/usr/bin/env python3
"""
GPA CALCULATOR - Grade points, credit resolution, and SGPA on the 10-point scale
Accurate semester GPA calculations from matched transcript subjects

CALCULATION TYPES:
✅ Grade from relative marks: first band whose threshold the marks meet
✅ Grade point from letter grade: explicit grades win over marks
✅ Credits: credit catalog (code, then title) -> matched catalog subject -> unknown
✅ Contribution: credits x grade point per subject
✅ SGPA: sum(credits x grade point) / sum(credits)

GRADE MAPPING (min relative marks -> grade -> point):
90 A++ 10    85 A+ 9     80 A 8.5    75 B+ 8
70 B 7.5     65 C+ 7     60 C 6.5    55 D+ 6
50 D 5.5     45 E+ 5     40 E 4      0 F 0

EDGE CASES HANDLED:
- Unknown credits or grade point: contribution is None, subject excluded from SGPA
- Zero total credits: SGPA is None
- Duplicate subjects: first by normalized code (else title) wins
- Rounding: half away from zero at 2 decimals

Priority: CRITICAL - Core academic calculations
Dependencies: data_models.py for type definitions, credit_catalog.py for credit lookup
"""

import math
import numbers
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from data_models import (
    CatalogSubject,
    ComputedSubject,
    ExtractedSubject,
    MatchResult,
    SgpaResult,
)
from credit_catalog import CreditCatalog, normalize_code, normalize_title_key

logger = logging.getLogger(__name__)


# (minimum relative marks, grade, point), highest threshold first
GRADE_BANDS: List[Tuple[float, str, float]] = [
    (90, "A++", 10.0),
    (85, "A+", 9.0),
    (80, "A", 8.5),
    (75, "B+", 8.0),
    (70, "B", 7.5),
    (65, "C+", 7.0),
    (60, "C", 6.5),
    (55, "D+", 6.0),
    (50, "D", 5.5),
    (45, "E+", 5.0),
    (40, "E", 4.0),
    (0, "F", 0.0),
]

GRADE_POINTS: Dict[str, float] = {grade: point for _, grade, point in GRADE_BANDS}

UNKNOWN_GRADE = "NA"


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def round2(value) -> Optional[float]:
    """Round to 2 decimals, half away from zero; None for non-numbers"""
    if not _is_number(value):
        return None
    scaled = abs(value) * 100
    rounded = math.floor(scaled + 0.5) / 100
    return math.copysign(rounded, value) if rounded else 0.0


def grade_from_relative_marks(relative_marks) -> Optional[Tuple[str, float]]:
    """
    Grade band for a relative mark (percentage)

    Returns:
        Tuple of (grade, point) or None if the marks are not a number
    """
    if not _is_number(relative_marks):
        return None
    for minimum, grade, point in GRADE_BANDS:
        if relative_marks >= minimum:
            return grade, point
    return None


def grade_point_from_grade(grade: Optional[str]) -> Optional[Tuple[str, float]]:
    """Normalize a letter grade and look up its point"""
    if not grade:
        return None
    normalized = "".join(str(grade).upper().split())
    if normalized not in GRADE_POINTS:
        return None
    return normalized, GRADE_POINTS[normalized]


def compute_relative_marks(extracted: ExtractedSubject) -> Optional[float]:
    """Marks as a percentage, when derivable"""
    if not _is_number(extracted.total_marks):
        return None
    if _is_number(extracted.max_marks) and extracted.max_marks > 0:
        return extracted.total_marks / extracted.max_marks * 100
    if extracted.is_percentage:
        return float(extracted.total_marks)
    return None


def calculate_sgpa(subjects: Sequence[ComputedSubject]) -> SgpaResult:
    """
    Credit-weighted mean of grade points

    Args:
        subjects: Computed subjects; those missing credits or grade point are skipped

    Returns:
        SgpaResult with values rounded to 2 decimals
    """
    total_credits = 0.0
    total_grade_points = 0.0

    for subject in subjects:
        if not _is_number(subject.grade_point) or not _is_number(subject.credits):
            continue
        total_credits += subject.credits
        total_grade_points += subject.credits * subject.grade_point

    sgpa = round2(total_grade_points / total_credits) if total_credits > 0 else None
    return SgpaResult(
        sgpa=sgpa,
        total_credits=round2(total_credits),
        total_grade_points=round2(total_grade_points),
    )


class SGPACalculator:
    """Compute per-subject results and SGPA from matched transcript subjects"""

    def __init__(self, credit_catalog: Optional[CreditCatalog] = None, use_credit_hints: bool = False):
        """
        Initialize calculator with the credit catalog

        Args:
            credit_catalog: Authoritative credit lookup (empty when None)
            use_credit_hints: Fall back to credits unpacked from the transcript
                line before giving up on a subject's credits
        """
        self.credit_catalog = credit_catalog or CreditCatalog.empty()
        self.use_credit_hints = use_credit_hints
        self.calculation_log: List[str] = []

    def resolve_credits(
        self, extracted: ExtractedSubject, subject: Optional[CatalogSubject] = None
    ) -> Optional[float]:
        """Credits by catalog code, catalog title, matched subject, then hint"""
        credits = self.credit_catalog.lookup_code(extracted.subject_code)
        if credits is not None:
            return credits

        credits = self.credit_catalog.lookup_title(extracted.subject_name)
        if credits is not None:
            return credits

        if subject is not None and _is_number(subject.credits):
            return subject.credits

        if self.use_credit_hints and _is_number(extracted.credits_hint):
            self.calculation_log.append(
                f"📝 Using transcript credits for {extracted.subject_name}: {extracted.credits_hint}"
            )
            return extracted.credits_hint

        return None

    def compute_subject(
        self, extracted: ExtractedSubject, subject: Optional[CatalogSubject] = None
    ) -> ComputedSubject:
        """Grade, grade point, credits, and contribution for one subject"""
        grade_info = None
        if extracted.grade:
            grade_info = grade_point_from_grade(extracted.grade)
        else:
            relative_marks = compute_relative_marks(extracted)
            if relative_marks is not None:
                grade_info = grade_from_relative_marks(relative_marks)

        grade, grade_point = grade_info if grade_info else (UNKNOWN_GRADE, None)
        credits = self.resolve_credits(extracted, subject)

        contribution = None
        if _is_number(credits) and _is_number(grade_point):
            contribution = round2(credits * grade_point)
        else:
            self.calculation_log.append(
                f"⚠️ Incomplete: {extracted.subject_name} (credits={credits}, grade point={grade_point})"
            )

        return ComputedSubject(
            subject=subject.subject_name if subject is not None else extracted.subject_name,
            subject_code=extracted.subject_code,
            credits=credits,
            marks=extracted.total_marks if _is_number(extracted.total_marks) else None,
            grade=grade,
            grade_point=grade_point,
            contribution=contribution,
        )

    def compute_subjects(self, match_result: MatchResult) -> List[ComputedSubject]:
        """
        Computed rows for matched then unmatched subjects, deduplicated

        Args:
            match_result: Output of the subject matcher

        Returns:
            One ComputedSubject per distinct code (else title), first wins
        """
        computed: List[ComputedSubject] = []
        seen = set()

        pairs: List[Tuple[ExtractedSubject, Optional[CatalogSubject]]] = [
            (m.extracted, m.subject) for m in match_result.matched
        ]
        pairs.extend((u, None) for u in match_result.unmatched)

        for extracted, subject in pairs:
            key = normalize_code(extracted.subject_code) or normalize_title_key(extracted.subject_name)
            if key:
                if key in seen:
                    self.calculation_log.append(f"🔁 Duplicate subject skipped: {key}")
                    continue
                seen.add(key)
            computed.append(self.compute_subject(extracted, subject))

        return computed

    def calculate(self, match_result: MatchResult) -> Tuple[List[ComputedSubject], SgpaResult]:
        """
        Compute subjects and SGPA for one transcript

        Returns:
            Tuple of (computed subjects, SGPA aggregate)
        """
        self.calculation_log = []
        self.calculation_log.append(
            f"📊 Calculating SGPA for {match_result.total} subjects "
            f"({len(match_result.matched)} matched, {len(match_result.unmatched)} unmatched)"
        )

        subjects = self.compute_subjects(match_result)
        result = calculate_sgpa(subjects)

        self.calculation_log.append("✅ Calculation complete:")
        self.calculation_log.append(f"   SGPA: {result.sgpa if result.sgpa is not None else 'N/A'}")
        self.calculation_log.append(f"   Total Credits: {result.total_credits:.2f}")
        self.calculation_log.append(f"   Total Grade Points: {result.total_grade_points:.2f}")

        return subjects, result

    def get_calculation_log(self) -> List[str]:
        """Get detailed calculation log for debugging"""
        return self.calculation_log


__all__ = [
    'GRADE_BANDS',
    'GRADE_POINTS',
    'round2',
    'grade_from_relative_marks',
    'grade_point_from_grade',
    'compute_relative_marks',
    'calculate_sgpa',
    'SGPACalculator',
]
