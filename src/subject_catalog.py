#!/usr/bin/env python3
"""
SUBJECT CATALOG - Candidate subject records by branch and semester
Catalog provider used by the matcher to reconcile extracted subject rows

PROVIDER INTERFACE:
✅ find_candidates(CatalogFilter) -> List[CatalogSubject]
✅ Unset filter fields are unconstrained (empty filter returns everything)

CSV-BACKED CATALOG:
- Required columns: subjectName, branch, semester, credits
- Optional columns: isLab (inferred from the subject name when absent), subjectCode
- Invalid rows are skipped and recorded as validation warnings
- Duplicate (subjectName, branch, semester) rows keep the first definition

Dependencies: pandas for CSV loading, pydantic models for row validation
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

import pandas as pd
from pydantic import ValidationError

from data_models import CatalogFilter, CatalogSubject
from text_normalizer import infer_is_lab

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = ["subjectName", "branch", "semester", "credits"]


class CatalogProvider(Protocol):
    """Anything that can answer filtered catalog queries"""

    def find_candidates(self, catalog_filter: CatalogFilter) -> List[CatalogSubject]:
        ...


def _parse_lab_flag(value: Any, subject_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return infer_is_lab(subject_name) is True
    text = str(value).strip().upper()
    if text in ("TRUE", "YES", "Y", "1"):
        return True
    if text in ("FALSE", "NO", "N", "0"):
        return False
    return infer_is_lab(subject_name) is True


class SubjectCatalog:
    """In-memory catalog of CatalogSubject records"""

    def __init__(self, subjects: Optional[Iterable[CatalogSubject]] = None):
        self.subjects: List[CatalogSubject] = []
        self.validation_errors: List[str] = []
        self.validation_warnings: List[str] = []

        seen = set()
        for subject in subjects or []:
            if subject.catalog_key in seen:
                continue
            seen.add(subject.catalog_key)
            self.subjects.append(subject)

    def __len__(self) -> int:
        return len(self.subjects)

    def find_candidates(self, catalog_filter: CatalogFilter) -> List[CatalogSubject]:
        """
        Subjects matching every set field of the filter

        Args:
            catalog_filter: Branch and/or semester constraint

        Returns:
            Matching subjects in catalog order
        """
        branch = catalog_filter.branch.upper() if catalog_filter.branch else None
        semester = catalog_filter.semester

        return [
            s for s in self.subjects
            if (branch is None or s.branch == branch)
            and (semester is None or s.semester == semester)
        ]

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "SubjectCatalog":
        """Build a catalog from raw dict rows, skipping invalid ones"""
        subjects: List[CatalogSubject] = []
        warnings: List[str] = []

        for index, row in enumerate(records):
            name = row.get("subjectName")
            if name is None or (isinstance(name, float) and pd.isna(name)):
                warnings.append(f"Row {index}: missing subjectName")
                continue
            name = str(name).strip()

            code = row.get("subjectCode")
            if code is not None and (isinstance(code, float) and pd.isna(code)):
                code = None

            try:
                subjects.append(CatalogSubject(
                    subject_name=name,
                    branch=str(row.get("branch", "")),
                    semester=int(row.get("semester")),
                    credits=float(row.get("credits")),
                    is_lab=_parse_lab_flag(row.get("isLab"), name),
                    subject_code=str(code).strip() if code else None,
                ))
            except (ValidationError, ValueError, TypeError) as e:
                warnings.append(f"Row {index} ({name}): {e}")

        catalog = cls(subjects)
        catalog.validation_warnings.extend(warnings)
        return catalog

    @classmethod
    def load(cls, file_path: Path) -> "SubjectCatalog":
        """
        Load the subject catalog CSV

        Args:
            file_path: CSV with subjectName, branch, semester, credits columns

        Returns:
            SubjectCatalog; empty (with validation errors recorded) on failure
        """
        file_path = Path(file_path)

        try:
            logger.info(f"📊 Loading subject catalog from: {file_path}")
            frame = pd.read_csv(file_path, encoding="utf-8-sig")
        except (OSError, ValueError, pd.errors.ParserError) as e:
            catalog = cls()
            catalog.validation_errors.append(f"Failed to load subject catalog: {e}")
            logger.error(f"  ❌ Failed to load subject catalog: {e}")
            return catalog

        missing_columns = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
        if missing_columns:
            catalog = cls()
            catalog.validation_errors.append(f"Subject catalog missing columns: {missing_columns}")
            logger.error(f"  ❌ Subject catalog missing columns: {missing_columns}")
            return catalog

        catalog = cls.from_records(frame.to_dict(orient="records"))
        logger.info(f"  ✅ Loaded {len(catalog)} catalog subjects")
        if catalog.validation_warnings:
            logger.warning(f"  ⚠️ {len(catalog.validation_warnings)} catalog rows skipped")
        return catalog

    def generate_validation_report(self) -> str:
        """Generate catalog validation report"""

        report = ["🔍 SUBJECT CATALOG REPORT", "=" * 50, ""]

        if not self.validation_errors and not self.validation_warnings:
            report.append("✅ All validation checks passed!")
        else:
            if self.validation_errors:
                report.append("❌ ERRORS (Must be fixed):")
                for error in self.validation_errors:
                    report.append(f"  • {error}")
                report.append("")

            if self.validation_warnings:
                report.append("⚠️ WARNINGS (Review recommended):")
                for warning in self.validation_warnings:
                    report.append(f"  • {warning}")
                report.append("")

        report.append("📊 DATA SUMMARY:")
        report.append(f"  Subjects: {len(self.subjects)}")
        branches = sorted({s.branch for s in self.subjects})
        if branches:
            report.append(f"  Branches: {', '.join(branches)}")

        return "\n".join(report)


__all__ = ['CatalogProvider', 'SubjectCatalog']
