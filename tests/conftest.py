"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- Sample catalog subjects and credit records
- In-memory subject and credit catalogs
- A sample semester transcript text
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data_models import CatalogSubject, ProcessorSettings
from credit_catalog import CreditCatalog
from subject_catalog import SubjectCatalog

DATA_DIR = Path(__file__).parent.parent / "data"


@pytest.fixture
def data_dir() -> Path:
    """Bundled sample data directory"""
    return DATA_DIR


@pytest.fixture
def sample_catalog_subjects():
    """CSE semester 3 subjects plus one common subject"""
    return [
        CatalogSubject(subject_name="Data Structures and Algorithms", branch="CSE", semester=3, credits=3),
        CatalogSubject(subject_name="Object Oriented Programming", branch="CSE", semester=3, credits=3),
        CatalogSubject(subject_name="Digital Electronics", branch="CSE", semester=3, credits=3),
        CatalogSubject(subject_name="Software Engineering", branch="CSE", semester=3, credits=3),
        CatalogSubject(subject_name="Technical Communication", branch="CSE", semester=3, credits=2),
        CatalogSubject(
            subject_name="Data Structures and Algorithms Lab", branch="CSE", semester=3, credits=1.5, is_lab=True
        ),
        CatalogSubject(
            subject_name="Object Oriented Programming Lab", branch="CSE", semester=3, credits=1.5, is_lab=True
        ),
        CatalogSubject(subject_name="Engineering Mathematics-I", branch="COMMON", semester=1, credits=4),
    ]


@pytest.fixture
def sample_subject_catalog(sample_catalog_subjects):
    return SubjectCatalog(sample_catalog_subjects)


@pytest.fixture
def sample_credit_records():
    """Credit catalog records in the mixed field spellings seen in practice"""
    return [
        {"code": "3CS4-05", "Course_Title": "Data Structures and Algorithms", "credits": 4},
        {"Code": "3CS4-06", "course_title": "Object Oriented Programming", "Credits": 3},
        {"Subject_Code": "FEC01", "Subject_Name": "Social Outreach & Discipline", "credits": 0.5},
        {"Course_Title": "Digital Electronics", "credits": 3},
        {"code": "3CS4-05", "credits": 9},
    ]


@pytest.fixture
def sample_credit_catalog(sample_credit_records):
    return CreditCatalog.from_records(sample_credit_records)


@pytest.fixture
def bundled_settings(data_dir):
    """Settings pointing at the bundled sample data"""
    return ProcessorSettings(data_dir=data_dir)


@pytest.fixture
def bundled_subject_catalog(bundled_settings):
    return SubjectCatalog.load(bundled_settings.subject_catalog_path)


@pytest.fixture
def bundled_credit_catalog(bundled_settings):
    return CreditCatalog.load(bundled_settings.credit_catalog_path)


@pytest.fixture
def sample_transcript_text():
    """Extracted text of a CSE semester 3 result, name-first layout"""
    return "\n".join([
        "RAJASTHAN TECHNICAL UNIVERSITY, KOTA",
        "B.Tech. III Semester Examination 2024",
        "Roll No: 22EJCCS101",
        "Name: RAHUL SHARMA Father's Name: SURESH SHARMA",
        "Branch: Computer Science & Engineering",
        "Semester: III",
        "Course Title Course Code Marks Grade",
        "1 Advanced Engineering Mathematics 3CS2-01 78/100 B+",
        "2 Technical Communication 3CS1-02 65/100 C+",
        "3 Managerial Economics & Financial Accounting 3CS1-03 71/100 B",
        "4 Digital Electronics 3CS3-04 88/100 A+",
        "5 Data Structures & Algorithms 3CS4-05 92/100 A++",
        "6 Object Oriented Programming 3CS4-06 81/100 A",
        "7 Software Engineering 3CS4-07 58/100 D+",
        "8 Data Structures & Algorithms Lab 3CS4-21 45/50 A++",
        "9 Object Oriented Programming Lab 3CS4-22 40/50 A",
        "SGPA: 8.24",
        "Result: PASS",
    ])
