"""Duplicate question identifier detection."""

from typing import Any, Iterable, List, Sequence, Union

from ..models.enums import SheetColumn
from ..models.rows import FlatRow


def _question_id(row: Union[FlatRow, Sequence[Any]]) -> Any:
    if isinstance(row, FlatRow):
        return row.question_id
    return row[SheetColumn.QUESTION_ID.index]


def find_duplicate_ids(rows: Iterable[Union[FlatRow, Sequence[Any]]]) -> List[Any]:
    """
    Find question identifiers used by more than one row.

    Parent ids and expanded child ids (``"q3.email"``) share one namespace.
    Each duplicate is reported once, in the order its second occurrence
    was met.

    Args:
        rows: FlatRow objects or 12-cell row sequences.

    Returns:
        Duplicate identifiers; empty when all are unique.
    """
    seen = set()
    duplicates: List[Any] = []
    reported = set()

    for row in rows:
        question_id = _question_id(row)
        if question_id in seen and question_id not in reported:
            duplicates.append(question_id)
            reported.add(question_id)
        seen.add(question_id)

    return duplicates
