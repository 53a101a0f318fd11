#!/usr/bin/env python3
"""
DATA MODELS - Pydantic schemas for semester result extraction
Type-safe data structures for parsed subject rows, catalog records, and SGPA results

COMPREHENSIVE DATA VALIDATION:
✅ Extracted Subjects: One row recovered from transcript text
✅ Catalog Subjects: Authoritative subject records with credits and lab flag
✅ Match Results: Extracted rows partitioned into matched / unmatched
✅ Computed Subjects: Final per-subject grade, grade point, and contribution
✅ Semester Result: Student metadata plus SGPA aggregate

VALIDATION RULES:
- Subject names must be non-empty after cleanup
- Subject codes follow the branch-code pattern (1CS3-05) or FEC01
- Grades must be one of the fixed grade tokens (A++ ... F)
- Semesters must be 1-8
- Catalog credits must be at least 0.5

Priority: CRITICAL - Foundation for all result processing
Dependencies: Pydantic for validation
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, validator
from pathlib import Path
from enum import Enum
import os
import re


SUBJECT_CODE_PATTERN = re.compile(r"^(?:[1-8][A-Z]{2,4}\d-\d{2}|FEC\d{2})$")


class LetterGrade(str, Enum):
    """Valid letter grades on the 10-point scale"""
    A_PLUS_PLUS = "A++"
    A_PLUS = "A+"
    A = "A"
    B_PLUS = "B+"
    B = "B"
    C_PLUS = "C+"
    C = "C"
    D_PLUS = "D+"
    D = "D"
    E_PLUS = "E+"
    E = "E"
    F = "F"


VALID_GRADES = {g.value for g in LetterGrade}


class ExtractedSubject(BaseModel):
    """One subject row recovered from transcript text"""

    subject_name: str = Field(..., description="Subject title as printed")
    subject_code: Optional[str] = Field(None, description="Normalized subject code")
    total_marks: Optional[float] = Field(None, ge=0.0, description="Marks obtained")
    max_marks: Optional[float] = Field(None, ge=0.0, description="Full marks")
    grade: Optional[str] = Field(None, description="Letter grade token")
    is_percentage: bool = Field(False, description="Marks were printed as a percentage")
    credits_hint: Optional[float] = Field(None, ge=0.0, description="Credits unpacked from the grade tail")
    raw_line: Optional[str] = Field(None, description="Source line the row was parsed from")

    @validator('subject_name')
    def validate_subject_name(cls, v):
        """Subject name must survive cleanup"""
        v = v.strip() if v else v
        if not v:
            raise ValueError('Subject name must be non-empty')
        return v

    @validator('subject_code')
    def validate_subject_code(cls, v):
        """Validate subject code pattern"""
        if v is None:
            return v
        v = v.upper().replace(" ", "")
        if not SUBJECT_CODE_PATTERN.match(v):
            raise ValueError(f'Subject code must look like 1CS3-05 or FEC01, got: {v}')
        return v

    @validator('grade')
    def validate_grade(cls, v):
        """Grade must be one of the fixed tokens"""
        if v is None:
            return v
        v = re.sub(r"\s+", "", v.upper())
        if v not in VALID_GRADES:
            raise ValueError(f'Unknown grade token: {v}')
        return v

    class Config:
        frozen = True


class CatalogSubject(BaseModel):
    """Authoritative subject record from the subject catalog"""

    subject_name: str = Field(..., description="Canonical subject title")
    branch: str = Field(..., description="Branch code (CSE, IT, ...) or COMMON")
    semester: int = Field(..., ge=1, le=8, description="Semester number")
    credits: float = Field(..., ge=0.5, description="Credit value")
    is_lab: bool = Field(False, description="Whether the subject is a lab/practical")
    subject_code: Optional[str] = Field(None, description="Subject code if known")

    @validator('subject_name')
    def strip_subject_name(cls, v):
        """Subject name must be non-empty"""
        v = v.strip() if v else v
        if not v:
            raise ValueError('Catalog subject name must be non-empty')
        return v

    @validator('branch')
    def uppercase_branch(cls, v):
        """Branch codes are stored uppercase"""
        return v.strip().upper()

    @property
    def catalog_key(self) -> str:
        """Identity of a catalog record (name, branch, semester)"""
        return f"{self.subject_name}|{self.branch}|{self.semester}"

    class Config:
        frozen = True


class CatalogFilter(BaseModel):
    """Catalog query filter; unset fields are unconstrained"""

    branch: Optional[str] = Field(None, description="Branch code to match")
    semester: Optional[int] = Field(None, ge=1, le=8, description="Semester to match")

    class Config:
        frozen = True


class SubjectMatch(BaseModel):
    """One extracted subject paired with its catalog counterpart"""

    extracted: ExtractedSubject
    subject: CatalogSubject
    score: float = Field(..., ge=0.0, le=1.0, description="Combined similarity score")

    class Config:
        frozen = True


class MatchResult(BaseModel):
    """Partition of extracted subjects into matched and unmatched"""

    matched: List[SubjectMatch] = Field(default_factory=list)
    unmatched: List[ExtractedSubject] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.unmatched)

    @property
    def coverage(self) -> float:
        """Fraction of extracted subjects matched to the catalog"""
        if self.total == 0:
            return 0.0
        return len(self.matched) / self.total


class ComputedSubject(BaseModel):
    """Final per-subject output row"""

    subject: str = Field(..., description="Subject label (catalog name when matched)")
    subject_code: Optional[str] = Field(None, description="Subject code if extracted")
    credits: Optional[float] = Field(None, description="Resolved credits, None if unknown")
    marks: Optional[float] = Field(None, description="Marks obtained")
    grade: str = Field("NA", description="Letter grade or NA")
    grade_point: Optional[float] = Field(None, ge=0.0, le=10.0, description="Grade point")
    contribution: Optional[float] = Field(None, description="credits x grade point")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "subjectCode": self.subject_code,
            "credits": self.credits,
            "marks": self.marks,
            "grade": self.grade,
            "gradePoint": self.grade_point,
            "contribution": self.contribution,
        }


class SgpaResult(BaseModel):
    """SGPA aggregate, every value rounded to 2 decimals"""

    sgpa: Optional[float] = Field(None, ge=0.0, le=10.0, description="Semester GPA")
    total_credits: float = Field(0.0, ge=0.0, description="Credits counted in SGPA")
    total_grade_points: float = Field(0.0, ge=0.0, description="Sum of credits x grade point")


class StudentMetadata(BaseModel):
    """Student identity recovered from transcript text"""

    roll_no: Optional[str] = Field(None, description="Roll number")
    name: Optional[str] = Field(None, description="Student name")
    branch: Optional[str] = Field(None, description="Normalized branch code")
    semester: Optional[int] = Field(None, ge=1, le=8, description="Semester number")


class SemesterResult(BaseModel):
    """Complete structured result for one transcript"""

    roll_no: Optional[str] = None
    name: Optional[str] = None
    branch: Optional[str] = None
    semester: Optional[int] = None

    sgpa: Optional[float] = None
    total_credits: float = 0.0
    total_grade_points: float = 0.0
    subjects: List[ComputedSubject] = Field(default_factory=list)

    # Diagnostics
    matched_count: int = Field(0, ge=0, description="Subjects matched to the catalog")
    unmatched_count: int = Field(0, ge=0, description="Subjects with no catalog counterpart")

    @property
    def coverage(self) -> float:
        total = self.matched_count + self.unmatched_count
        return self.matched_count / total if total else 0.0

    def to_payload(self) -> Dict[str, Any]:
        """Render the camelCase response contract"""
        return {
            "rollNo": self.roll_no,
            "name": self.name,
            "branch": self.branch,
            "semester": self.semester,
            "sgpa": self.sgpa,
            "totalCredits": self.total_credits,
            "totalGradePoints": self.total_grade_points,
            "subjects": [s.to_payload() for s in self.subjects],
        }


DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


class ProcessorSettings(BaseModel):
    """Runtime configuration for the result pipeline"""

    data_dir: Path = Field(DEFAULT_DATA_DIR, description="Directory holding catalog files")
    credit_catalog_file: str = Field("credit_catalog.json", description="Credit catalog JSON file")
    subject_catalog_file: str = Field("subject_catalog.csv", description="Subject catalog CSV file")
    min_coverage: float = Field(0.8, ge=0.0, le=1.0, description="Coverage below which the catalog query widens")
    min_match_score: float = Field(0.55, ge=0.0, le=1.0, description="Minimum score to accept a match")
    use_credit_hints: bool = Field(False, description="Fall back to credits unpacked from the transcript")

    @property
    def credit_catalog_path(self) -> Path:
        return Path(self.data_dir) / self.credit_catalog_file

    @property
    def subject_catalog_path(self) -> Path:
        return Path(self.data_dir) / self.subject_catalog_file

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ProcessorSettings":
        """Build settings from SGPA_* environment variables"""
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        if env.get("SGPA_DATA_DIR"):
            values["data_dir"] = Path(env["SGPA_DATA_DIR"]).expanduser()
        if env.get("SGPA_CREDIT_CATALOG"):
            values["credit_catalog_file"] = env["SGPA_CREDIT_CATALOG"]
        if env.get("SGPA_SUBJECT_CATALOG"):
            values["subject_catalog_file"] = env["SGPA_SUBJECT_CATALOG"]
        if env.get("SGPA_MIN_COVERAGE"):
            values["min_coverage"] = float(env["SGPA_MIN_COVERAGE"])
        if env.get("SGPA_MIN_MATCH_SCORE"):
            values["min_match_score"] = float(env["SGPA_MIN_MATCH_SCORE"])
        if env.get("SGPA_USE_CREDIT_HINTS"):
            values["use_credit_hints"] = env["SGPA_USE_CREDIT_HINTS"].strip().lower() in ("1", "true", "yes")

        return cls(**values)


# Export all models
__all__ = [
    'LetterGrade',
    'VALID_GRADES',
    'ExtractedSubject',
    'CatalogSubject',
    'CatalogFilter',
    'SubjectMatch',
    'MatchResult',
    'ComputedSubject',
    'SgpaResult',
    'StudentMetadata',
    'SemesterResult',
    'ProcessorSettings',
]
