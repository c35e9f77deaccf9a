"""Flat row models for the Intake Sheets system."""

from dataclasses import astuple, dataclass, field
from typing import Any, List, Tuple

from .enums import SheetColumn


# Header row written above the data, one entry per column.
SHEET_HEADERS: Tuple[str, ...] = tuple(column.value for column in SheetColumn)

# Grid rows reserved above the header for the metadata banner and lock notice.
RESERVED_ROWS = 2
HEADER_ROW = RESERVED_ROWS + 1
FIRST_DATA_ROW = HEADER_ROW + 1


@dataclass(frozen=True)
class FlatRow:
    """
    One question, or one expanded sub-field, as a 12-column row.

    Field order matches ``SHEET_HEADERS``. ``required``, ``default`` and a parent
    ``question_id`` keep their source values; every other field is a string.
    """
    section_id: str
    section_name: str
    question_id: Any
    question: str
    context: str
    type: str
    required: Any
    validation: str
    maps_to: str
    default: Any
    examples: str
    options: str

    def to_cells(self) -> List[Any]:
        """Return the row as a list of cell values."""
        return list(astuple(self))


@dataclass
class RowSet:
    """Rows produced by flattening one intake document."""
    rows: List[FlatRow] = field(default_factory=list)
    section_count: int = 0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def question_ids(self) -> List[Any]:
        return [row.question_id for row in self.rows]

    def to_grid(self) -> List[List[Any]]:
        """Return all rows as cell lists, in order."""
        return [row.to_cells() for row in self.rows]
