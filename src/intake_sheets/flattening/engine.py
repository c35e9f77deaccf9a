"""Flattening engine for intake documents."""

import logging
from typing import List, Optional

from ..interfaces.flattening import IFlatteningEngine
from ..models.intake import IntakeDocument
from ..models.rows import FlatRow, RowSet
from .row_projector import RowProjector


logger = logging.getLogger(__name__)


class FlatteningEngine(IFlatteningEngine):
    """
    Walks sections and questions in document order and collects rows.

    Each question is projected completely before its rows are appended,
    so rows already collected are never touched again.
    """

    def __init__(self, projector: Optional[RowProjector] = None):
        """
        Initialize the flattening engine.

        Args:
            projector: Row projector to use (created with defaults if not provided).
        """
        self.projector = projector or RowProjector()

    def flatten(self, document: IntakeDocument) -> RowSet:
        """
        Flatten an intake document into sheet rows.

        Args:
            document: Structurally valid intake document.

        Returns:
            RowSet holding every row and the section count.
        """
        rows: List[FlatRow] = []

        for section in document.sections:
            before = len(rows)
            for question in section.questions:
                rows.extend(self.projector.project(question, section))
            logger.debug(
                f"Section '{section.section_id}': {len(section.questions)} questions, "
                f"{len(rows) - before} rows"
            )

        logger.info(
            f"Flattened '{document.template_name}' into {len(rows)} rows "
            f"from {len(document.sections)} sections"
        )
        return RowSet(rows=rows, section_count=len(document.sections))


def flatten_intake(document: IntakeDocument, default_max_items: int = 10) -> RowSet:
    """Convenience function to flatten an intake document."""
    return FlatteningEngine(RowProjector(default_max_items=default_max_items)).flatten(document)
