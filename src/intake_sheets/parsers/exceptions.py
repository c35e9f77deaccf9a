"""Custom exceptions for intake import."""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class IntakeError(Exception):
    """
    Base exception for intake import errors.

    Every import failure is terminal for the current invocation. The
    pipeline turns these into a failed result carrying ``str(error)``.

    Attributes:
        message: Human-readable error description.
        location: Where in the input the problem was found, if known.
        details: Additional error details.
    """
    message: str
    location: Optional[str] = None
    details: Optional[dict] = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}
        super().__init__(str(self))

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "location": self.location,
            "details": self.details,
        }

    @property
    def has_location(self) -> bool:
        """Check if error has location information."""
        return self.location is not None and len(self.location) > 0


@dataclass
class ParseError(IntakeError):
    """
    Raised when the input text is not a JSON object.

    The message is the underlying decoder message; ``location`` holds the
    line and column when the decoder reports them.
    """


@dataclass
class StructuralError(IntakeError):
    """
    Raised when a parsed document lacks the fields flattening needs.

    Checked before any row is produced: ``template_name`` and
    ``conversation_flow.sections`` must be present, and every section and
    question must be a JSON object.
    """


@dataclass
class DuplicateIdentifierError(IntakeError):
    """
    Raised when flattened rows share a ``question_id``.

    Raised after flattening and before anything is written.
    """
    duplicates: List[Any] = field(default_factory=list)

    def __post_init__(self):
        if self.duplicates is None:
            self.duplicates = []
        super().__post_init__()

    @classmethod
    def from_duplicates(cls, duplicates: List[Any]) -> "DuplicateIdentifierError":
        return cls(
            message=f"Duplicate question IDs found: {', '.join(str(d) for d in duplicates)}",
            details={"duplicate_count": len(duplicates)},
            duplicates=list(duplicates),
        )


@dataclass
class SheetNotFoundError(IntakeError):
    """Raised when a schema sheet name does not exist in the store."""
    sheet_name: Optional[str] = None
