#!/usr/bin/env python3
"""
RESULT PROCESSOR - End-to-end semester result pipeline
Transcript text in, verified subject list and SGPA out

PIPELINE:
✅ Normalize raw text (OCR and PDF extraction noise)
✅ Extract student metadata; caller hints fill only the gaps
✅ Parse subject rows (marks, grade, code)
✅ Query the subject catalog by branch/semester and match rows
✅ Widen the catalog query while coverage stays below threshold
✅ Infer missing branch/semester from matched catalog subjects
✅ Resolve credits and compute per-subject contribution and SGPA

CATALOG WIDENING:
- Primary: (branch, semester) + (COMMON, semester) when both are known,
  semester only when only the semester is known, otherwise unfiltered
- Fallbacks in order: semester only, branch + COMMON, unfiltered
- A widened candidate set is adopted only when it yields strictly more matches

ERRORS:
- UnsupportedInputError: no letters or digits survive normalization
- NoSubjectsParsedError: no subject rows recognized (raised before matching)

Dependencies: every pipeline module; catalogs are injected or loaded once
"""

import re
import logging
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from data_models import (
    CatalogFilter,
    CatalogSubject,
    ExtractedSubject,
    MatchResult,
    ProcessorSettings,
    SemesterResult,
)
from exceptions import NoSubjectsParsedError, UnsupportedInputError
from text_normalizer import normalize_branch, normalize_text, parse_semester, pick_most_common, to_title_case
from metadata_extractor import extract_metadata
from subject_parser import SubjectLineParser
from subject_matcher import SubjectMatcher
from credit_catalog import CreditCatalog
from subject_catalog import CatalogProvider, SubjectCatalog
from gpa_calculator import SGPACalculator

logger = logging.getLogger(__name__)


COMMON_BRANCH = "COMMON"


@lru_cache(maxsize=None)
def get_default_credit_catalog() -> CreditCatalog:
    """Credit catalog from the configured data directory, loaded once"""
    return CreditCatalog.load(ProcessorSettings.from_env().credit_catalog_path)


@lru_cache(maxsize=None)
def get_default_subject_catalog() -> SubjectCatalog:
    """Subject catalog from the configured data directory, loaded once"""
    return SubjectCatalog.load(ProcessorSettings.from_env().subject_catalog_path)


class TranscriptResultProcessor:
    """Compose parsing, matching, and SGPA calculation for one transcript at a time"""

    def __init__(
        self,
        subject_catalog: Optional[CatalogProvider] = None,
        credit_catalog: Optional[CreditCatalog] = None,
        settings: Optional[ProcessorSettings] = None,
    ):
        """
        Initialize the processor

        Args:
            subject_catalog: Catalog provider (default: bundled CSV catalog)
            credit_catalog: Credit lookup (default: bundled JSON catalog)
            settings: Thresholds and data locations (default: from environment)
        """
        self.settings = settings or ProcessorSettings.from_env()
        self.subject_catalog = subject_catalog if subject_catalog is not None else get_default_subject_catalog()
        self.credit_catalog = credit_catalog if credit_catalog is not None else get_default_credit_catalog()
        self.matcher = SubjectMatcher(self.settings.min_match_score)

    # Catalog queries

    def _query(self, filters: Sequence[CatalogFilter]) -> List[CatalogSubject]:
        """Union of find_candidates over filters, first occurrence kept"""
        subjects: List[CatalogSubject] = []
        seen = set()
        for catalog_filter in filters:
            for subject in self.subject_catalog.find_candidates(catalog_filter):
                if subject.catalog_key in seen:
                    continue
                seen.add(subject.catalog_key)
                subjects.append(subject)
        return subjects

    def primary_filters(self, branch: Optional[str], semester: Optional[int]) -> List[CatalogFilter]:
        if branch and semester:
            return [
                CatalogFilter(branch=branch, semester=semester),
                CatalogFilter(branch=COMMON_BRANCH, semester=semester),
            ]
        if semester:
            return [CatalogFilter(semester=semester)]
        return [CatalogFilter()]

    def fallback_filters(
        self, branch: Optional[str], semester: Optional[int]
    ) -> List[List[CatalogFilter]]:
        """Progressively wider filter sets, excluding the primary query"""
        primary = self.primary_filters(branch, semester)
        if primary == [CatalogFilter()]:
            return []

        stages: List[List[CatalogFilter]] = []
        if semester:
            stages.append([CatalogFilter(semester=semester)])
        if branch:
            stages.append([CatalogFilter(branch=branch), CatalogFilter(branch=COMMON_BRANCH)])
        stages.append([CatalogFilter()])
        return [stage for stage in stages if stage != primary]

    def match_with_fallback(
        self, subjects: Sequence[ExtractedSubject], branch: Optional[str], semester: Optional[int]
    ) -> MatchResult:
        """
        Match against the primary catalog query, widening on low coverage

        Args:
            subjects: Parsed subject rows
            branch: Known branch code, if any
            semester: Known semester, if any

        Returns:
            The MatchResult with the most matches seen (earliest on ties)
        """
        candidates = self._query(self.primary_filters(branch, semester))
        result = self.matcher.match(subjects, candidates)
        logger.info(
            f"  🔗 Primary catalog query: {len(result.matched)}/{result.total} matched "
            f"from {len(candidates)} candidates"
        )

        for stage in self.fallback_filters(branch, semester):
            if result.coverage >= self.settings.min_coverage:
                break

            widened = self._query(stage)
            widened_result = self.matcher.match(subjects, widened)
            if len(widened_result.matched) > len(result.matched):
                logger.info(
                    f"  📈 Widened catalog query improved matches: "
                    f"{len(result.matched)} -> {len(widened_result.matched)}"
                )
                result = widened_result

        if result.coverage < self.settings.min_coverage:
            logger.warning(f"  ⚠️ Low catalog coverage: {result.coverage:.0%}")
        return result

    @staticmethod
    def infer_from_matches(match_result: MatchResult) -> Tuple[Optional[str], Optional[int]]:
        """Most frequent non-COMMON branch and most frequent semester among matches"""
        branches = [
            m.subject.branch for m in match_result.matched
            if m.subject.branch and m.subject.branch != COMMON_BRANCH
        ]
        semesters = [m.subject.semester for m in match_result.matched if m.subject.semester]
        return pick_most_common(branches), pick_most_common(semesters)

    # Pipeline

    def process_text(
        self,
        text: Optional[str],
        roll_no: Optional[str] = None,
        name: Optional[str] = None,
        branch: Optional[str] = None,
        semester=None,
    ) -> SemesterResult:
        """
        Compute the semester result for one transcript

        Args:
            text: Extracted transcript text
            roll_no: Roll number hint, used only if the text has none
            name: Student name hint, used only if the text has none
            branch: Branch hint, used only if the text has none
            semester: Semester hint (roman or digits), used only if the text has none

        Returns:
            SemesterResult

        Raises:
            UnsupportedInputError: Text has no usable content
            NoSubjectsParsedError: No subject rows were recognized
        """
        normalized = normalize_text(text)
        if not re.search(r"[A-Za-z0-9]", normalized):
            raise UnsupportedInputError("Transcript text is empty or has no readable content")

        metadata = extract_metadata(normalized)

        resolved_roll_no = metadata.roll_no or (roll_no or "").strip() or None
        resolved_name = metadata.name or (name or "").strip() or None
        resolved_name = to_title_case(resolved_name)
        resolved_branch = metadata.branch or normalize_branch(branch)
        resolved_semester = metadata.semester or parse_semester(semester)

        parser = SubjectLineParser()
        subjects = parser.parse(normalized)
        if not subjects:
            raise NoSubjectsParsedError("No subjects could be parsed from the transcript text")

        match_result = self.match_with_fallback(subjects, resolved_branch, resolved_semester)

        if not resolved_branch or not resolved_semester:
            inferred_branch, inferred_semester = self.infer_from_matches(match_result)
            if not resolved_branch and inferred_branch:
                logger.info(f"  📝 Branch inferred from matched subjects: {inferred_branch}")
                resolved_branch = inferred_branch
            if not resolved_semester and inferred_semester:
                logger.info(f"  📝 Semester inferred from matched subjects: {inferred_semester}")
                resolved_semester = inferred_semester

        calculator = SGPACalculator(self.credit_catalog, use_credit_hints=self.settings.use_credit_hints)
        computed, sgpa_result = calculator.calculate(match_result)
        for entry in calculator.get_calculation_log():
            logger.debug(entry)

        logger.info(
            f"✅ SGPA {sgpa_result.sgpa if sgpa_result.sgpa is not None else 'N/A'} "
            f"over {len(computed)} subjects ({sgpa_result.total_credits} credits)"
        )

        return SemesterResult(
            roll_no=resolved_roll_no,
            name=resolved_name,
            branch=resolved_branch,
            semester=resolved_semester,
            sgpa=sgpa_result.sgpa,
            total_credits=sgpa_result.total_credits,
            total_grade_points=sgpa_result.total_grade_points,
            subjects=computed,
            matched_count=len(match_result.matched),
            unmatched_count=len(match_result.unmatched),
        )


def process_transcript_text(text: Optional[str], **hints) -> SemesterResult:
    """Process text with the default catalogs and environment settings"""
    return TranscriptResultProcessor().process_text(text, **hints)


__all__ = [
    'TranscriptResultProcessor',
    'process_transcript_text',
    'get_default_credit_catalog',
    'get_default_subject_catalog',
]
