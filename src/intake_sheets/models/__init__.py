"""Data models and enums for the Intake Sheets system."""

from .enums import (
    COMPLEX_TYPES,
    ProtectionType,
    QuestionType,
    SheetColumn,
    ValueShape,
    is_complex_type,
)
from .intake import ABSENT, FieldSpec, FieldValue, IntakeDocument, Question, Section
from .rows import (
    FIRST_DATA_ROW,
    HEADER_ROW,
    RESERVED_ROWS,
    SHEET_HEADERS,
    FlatRow,
    RowSet,
)

__all__ = [
    # Enums
    "COMPLEX_TYPES",
    "ProtectionType",
    "QuestionType",
    "SheetColumn",
    "ValueShape",
    "is_complex_type",
    # Intake models
    "ABSENT",
    "FieldSpec",
    "FieldValue",
    "IntakeDocument",
    "Question",
    "Section",
    # Row models
    "FIRST_DATA_ROW",
    "HEADER_ROW",
    "RESERVED_ROWS",
    "SHEET_HEADERS",
    "FlatRow",
    "RowSet",
]
