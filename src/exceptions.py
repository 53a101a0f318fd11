#!/usr/bin/env python3
"""
EXCEPTIONS - Errors surfaced to callers of the result pipeline
Only input-level conditions are raised

RAISED:
✅ UnsupportedInputError: text is empty or has no letters or digits
✅ NoSubjectsParsedError: text is usable but no subject rows were recognized

NOT RAISED:
- Missing credits, grades, or marks for a subject stay as None fields
- An unavailable catalog is replaced by an empty one
"""


class TranscriptProcessingError(Exception):
    """Base class for transcript processing failures"""


class UnsupportedInputError(TranscriptProcessingError):
    """The extracted text cannot be interpreted at all"""


class NoSubjectsParsedError(TranscriptProcessingError):
    """The text was usable but no subject rows were recognized"""


__all__ = [
    'TranscriptProcessingError',
    'UnsupportedInputError',
    'NoSubjectsParsedError',
]
