"""Flattening engine interface for the Intake Sheets system."""

from abc import ABC, abstractmethod

from ..models.intake import IntakeDocument
from ..models.rows import RowSet


class IFlatteningEngine(ABC):
    """
    Abstract interface for intake flattening.

    Implementations walk the section and question tree of an intake
    document and emit flat rows in encounter order.
    """

    @abstractmethod
    def flatten(self, document: IntakeDocument) -> RowSet:
        """
        Flatten an intake document into sheet rows.

        Args:
            document: Structurally valid intake document.

        Returns:
            RowSet with the rows and the number of sections walked.
        """
        pass
