"""Intake JSON parsing for the Intake Sheets system."""

from .intake_parser import IntakeParser, parse_intake_json
from .exceptions import (
    IntakeError,
    ParseError,
    StructuralError,
    DuplicateIdentifierError,
    SheetNotFoundError,
)

__all__ = [
    "IntakeParser",
    "parse_intake_json",
    "IntakeError",
    "ParseError",
    "StructuralError",
    "DuplicateIdentifierError",
    "SheetNotFoundError",
]
