#!/usr/bin/env python3
"""
SUBJECT MATCHER - Reconcile extracted subject rows with catalog subjects
Greedy best-score assignment under lab/theory and at-most-once constraints

SCORING:
✅ Token overlap: shared tokens weighted 1.0, 1.2 for length >= 6, +0.6 for domain keywords,
   divided by the size of the token union
✅ String similarity: bigram Dice coefficient over whitespace-stripped names
✅ Combined: 0.7 x token + 0.3 x string, +0.2 for exact normalized equality, capped at 1.0

CONSTRAINTS:
- Lab rows only match lab subjects; theory and indeterminate rows only match theory subjects
- Each catalog subject is claimed by at most one extracted row per run
- Best candidate must score >= 0.55; ties go to the earlier candidate
- Extracted rows are processed in input order (earlier rows claim first)
"""

import logging
from typing import Dict, List, Optional, Sequence, Set

from data_models import CatalogSubject, ExtractedSubject, MatchResult, SubjectMatch
from text_normalizer import infer_is_lab, normalize_subject_name, tokenize

logger = logging.getLogger(__name__)


MIN_MATCH_SCORE = 0.55
TOKEN_WEIGHT = 0.7
STRING_WEIGHT = 0.3
EXACT_MATCH_BONUS = 0.2
LONG_TOKEN_LENGTH = 6
LONG_TOKEN_WEIGHT = 1.2
KEYWORD_BOOST = 0.6

BOOST_KEYWORDS = {
    "DATABASE", "NETWORKS", "OPERATING", "COMPILER", "ALGORITHMS", "MACHINE",
    "LEARNING", "CIRCUITS", "SIGNALS", "THERMODYNAMICS", "STRUCTURES", "ANALYSIS",
    "CONTROL", "POWER", "COMMUNICATION", "DESIGN", "SOFTWARE", "MICROPROCESSOR",
    "ELECTRICAL", "MECHANICS", "MINING", "CLOUD", "SECURITY", "VISION", "NATURAL",
    "LANGUAGE", "ENVIRONMENTAL", "GEOTECHNICAL", "TRANSPORTATION", "HYDROLOGY",
    "VLSI", "EMBEDDED", "WIRELESS", "DSP", "REFRIGERATION", "CONSTRUCTION",
    "VISUALIZATION",
}


def dice_coefficient(a: str, b: str) -> float:
    """Bigram Dice coefficient (multiset intersection)"""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0

    bigrams: Dict[str, int] = {}
    for i in range(len(a) - 1):
        gram = a[i:i + 2]
        bigrams[gram] = bigrams.get(gram, 0) + 1

    intersection = 0
    for i in range(len(b) - 1):
        gram = b[i:i + 2]
        count = bigrams.get(gram, 0)
        if count > 0:
            bigrams[gram] = count - 1
            intersection += 1

    return (2.0 * intersection) / (len(a) + len(b) - 2)


def score_name(a_norm: str, b_norm: str, a_tokens: Sequence[str], b_tokens: Sequence[str]) -> float:
    """
    Combined similarity of two normalized subject names

    Args:
        a_norm: Normalized extracted name
        b_norm: Normalized catalog name
        a_tokens: Tokens of a_norm (stop words removed)
        b_tokens: Tokens of b_norm (stop words removed)

    Returns:
        Score in [0, 1]
    """
    if not a_norm or not b_norm:
        return 0.0

    set_a = set(a_tokens)
    set_b = set(b_tokens)

    overlap = 0.0
    for token in set_a & set_b:
        weight = LONG_TOKEN_WEIGHT if len(token) >= LONG_TOKEN_LENGTH else 1.0
        if token in BOOST_KEYWORDS:
            weight += KEYWORD_BOOST
        overlap += weight

    union_size = len(set_a | set_b) or 1
    token_score = overlap / union_size

    string_score = dice_coefficient(a_norm.replace(" ", ""), b_norm.replace(" ", ""))
    score = token_score * TOKEN_WEIGHT + string_score * STRING_WEIGHT

    if a_norm == b_norm:
        score += EXACT_MATCH_BONUS
    return min(score, 1.0)


def lab_compatible(extracted_is_lab: Optional[bool], catalog_is_lab: bool) -> bool:
    """Lab rows pair with labs; theory and indeterminate rows pair with theory"""
    if extracted_is_lab is True:
        return catalog_is_lab
    return not catalog_is_lab


class _PreparedSubject:
    __slots__ = ("subject", "norm", "tokens")

    def __init__(self, subject: CatalogSubject):
        self.subject = subject
        self.norm = normalize_subject_name(subject.subject_name)
        self.tokens = tokenize(self.norm)


class SubjectMatcher:
    """Match extracted subject rows to catalog subjects"""

    def __init__(self, min_score: float = MIN_MATCH_SCORE):
        self.min_score = min_score

    def match(
        self, extracted: Sequence[ExtractedSubject], catalog: Sequence[CatalogSubject]
    ) -> MatchResult:
        """
        Partition extracted subjects into matched and unmatched

        Args:
            extracted: Parsed subject rows, in parse order
            catalog: Candidate catalog subjects

        Returns:
            MatchResult; no catalog subject appears in more than one match
        """
        prepared = [_PreparedSubject(s) for s in catalog]
        claimed: Set[str] = set()
        matched: List[SubjectMatch] = []
        unmatched: List[ExtractedSubject] = []

        for row in extracted:
            row_norm = normalize_subject_name(row.subject_name)
            if not row_norm:
                unmatched.append(row)
                continue

            row_tokens = tokenize(row_norm)
            row_is_lab = infer_is_lab(row.subject_name)

            best: Optional[_PreparedSubject] = None
            best_score = 0.0

            for candidate in prepared:
                if candidate.subject.catalog_key in claimed:
                    continue
                if not lab_compatible(row_is_lab, candidate.subject.is_lab):
                    continue

                score = score_name(row_norm, candidate.norm, row_tokens, candidate.tokens)
                if score > best_score:
                    best_score = score
                    best = candidate

            if best is not None and best_score >= self.min_score:
                claimed.add(best.subject.catalog_key)
                matched.append(SubjectMatch(extracted=row, subject=best.subject, score=best_score))
            else:
                unmatched.append(row)

        logger.debug(f"🔗 Matched {len(matched)}/{len(extracted)} subjects against {len(catalog)} candidates")
        return MatchResult(matched=matched, unmatched=unmatched)


def match_subjects(
    extracted: Sequence[ExtractedSubject],
    catalog: Sequence[CatalogSubject],
    min_score: float = MIN_MATCH_SCORE,
) -> MatchResult:
    return SubjectMatcher(min_score).match(extracted, catalog)


__all__ = [
    'MIN_MATCH_SCORE',
    'BOOST_KEYWORDS',
    'SubjectMatcher',
    'match_subjects',
    'score_name',
    'dice_coefficient',
    'lab_compatible',
]
