#!/usr/bin/env python3
"""
CREDIT CATALOG - Authoritative credit values by subject code and title
Primary source of truth for subject credits during SGPA calculation

DATA SOURCE:
✅ JSON array of records (CSV also accepted), loaded once per process
✅ Code field: code | Code | Subject_Code
✅ Title field: Course_Title | course_title | Subject_Name
✅ Credits field: credits | Credits (numeric values only)

LOOKUP RULES:
- Codes normalized to uppercase without whitespace
- Titles normalized to uppercase words, '&' read as AND, punctuation dropped
- First definition per key wins on duplicates

FAILURE MODE:
- Missing or malformed data never raises; an empty catalog is returned and
  credits resolve to None downstream
"""

import re
import math
import numbers
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

logger = logging.getLogger(__name__)


CODE_FIELDS = ("code", "Code", "Subject_Code")
TITLE_FIELDS = ("Course_Title", "course_title", "Subject_Name")
CREDIT_FIELDS = ("credits", "Credits")


def normalize_code(code) -> Optional[str]:
    """Uppercase a subject code and drop whitespace"""
    if code is None or (isinstance(code, float) and math.isnan(code)):
        return None
    value = re.sub(r"\s+", "", str(code).upper())
    return value or None


def normalize_title_key(title) -> Optional[str]:
    """Uppercase words of a subject title, punctuation removed"""
    if title is None or (isinstance(title, float) and math.isnan(title)):
        return None
    value = str(title).upper().replace("&", " AND ")
    value = re.sub(r"[^A-Z0-9]+", " ", value)
    value = re.sub(r"\s+", " ", value).strip()
    return value or None


def _numeric(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    if math.isnan(value):
        return None
    return float(value)


def _first_present(item: Dict[str, Any], fields: Iterable[str]) -> Any:
    for field in fields:
        value = item.get(field)
        if value is None:
            continue
        if isinstance(value, float) and math.isnan(value):
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


class CreditCatalog:
    """Read-only credit lookup keyed by normalized code and title"""

    def __init__(self, by_code: Optional[Dict[str, float]] = None, by_title: Optional[Dict[str, float]] = None):
        self.by_code: Dict[str, float] = dict(by_code or {})
        self.by_title: Dict[str, float] = dict(by_title or {})

    def __len__(self) -> int:
        return len(self.by_code) + len(self.by_title)

    @property
    def is_empty(self) -> bool:
        return not self.by_code and not self.by_title

    def lookup_code(self, code) -> Optional[float]:
        key = normalize_code(code)
        if key is None:
            return None
        return self.by_code.get(key)

    def lookup_title(self, title) -> Optional[float]:
        key = normalize_title_key(title)
        if key is None:
            return None
        return self.by_title.get(key)

    @classmethod
    def empty(cls) -> "CreditCatalog":
        return cls()

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "CreditCatalog":
        """
        Build lookup tables from raw catalog records

        Args:
            records: Dicts bearing a code and/or title field plus numeric credits

        Returns:
            CreditCatalog (first definition per key wins)
        """
        by_code: Dict[str, float] = {}
        by_title: Dict[str, float] = {}
        skipped = 0

        for item in records:
            if not isinstance(item, dict):
                skipped += 1
                continue

            credits = None
            for field in CREDIT_FIELDS:
                credits = _numeric(item.get(field))
                if credits is not None:
                    break
            if credits is None:
                skipped += 1
                continue

            code_key = normalize_code(_first_present(item, CODE_FIELDS))
            if code_key and code_key not in by_code:
                by_code[code_key] = credits

            title_key = normalize_title_key(_first_present(item, TITLE_FIELDS))
            if title_key and title_key not in by_title:
                by_title[title_key] = credits

        if skipped:
            logger.warning(f"  ⚠️ Skipped {skipped} credit catalog records without numeric credits")

        return cls(by_code, by_title)

    @classmethod
    def load(cls, file_path: Path) -> "CreditCatalog":
        """
        Load the credit catalog from disk

        Args:
            file_path: JSON array (or CSV) of credit records

        Returns:
            CreditCatalog, empty when the file is missing or malformed
        """
        file_path = Path(file_path)

        if not file_path.exists():
            logger.warning(f"⚠️ Credit catalog not found: {file_path} - credits fall back to subject catalog")
            return cls.empty()

        try:
            logger.info(f"📊 Loading credit catalog from: {file_path}")
            if file_path.suffix.lower() == ".csv":
                frame = pd.read_csv(file_path, encoding="utf-8-sig")
            else:
                frame = pd.read_json(file_path, orient="records", dtype=False)
        except (ValueError, OSError) as e:
            logger.error(f"  ❌ Failed to load credit catalog: {e}")
            return cls.empty()

        if not isinstance(frame, pd.DataFrame):
            logger.error("  ❌ Credit catalog must be an array of records")
            return cls.empty()

        records: List[Dict[str, Any]] = frame.to_dict(orient="records")
        catalog = cls.from_records(records)
        logger.info(
            f"  ✅ Loaded {len(catalog.by_code)} credit entries by code, {len(catalog.by_title)} by title"
        )
        return catalog


__all__ = ['CreditCatalog', 'normalize_code', 'normalize_title_key']
