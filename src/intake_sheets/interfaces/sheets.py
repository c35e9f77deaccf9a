"""Sheet collaborator interfaces for the Intake Sheets system."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Sequence


@dataclass(frozen=True)
class TableHandle:
    """Reference to a materialized schema sheet."""
    id: str
    name: str
    row_count: int = 0


class ISheetMaterializer(ABC):
    """
    Abstract interface for writing schema sheets.

    Implementations own the sheet namespace of a destination workbook.
    """

    @abstractmethod
    def sheet_exists(self, name: str) -> bool:
        """Check whether a sheet with this exact name exists."""
        pass

    @abstractmethod
    def create_or_replace_table(
        self,
        name: str,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
    ) -> TableHandle:
        """
        Create a sheet, replacing any sheet of the same name.

        The header goes in the first row after the reserved rows and the
        data rows follow it.

        Args:
            name: Sheet name.
            headers: Header cells.
            rows: Data rows, each as long as ``headers``.

        Returns:
            Handle to the created sheet.
        """
        pass

    @abstractmethod
    def list_sheet_names(self) -> List[str]:
        """Return all sheet names in creation order."""
        pass

    @abstractmethod
    def get_table(self, name: str) -> TableHandle:
        """
        Look up a sheet by name.

        Raises:
            SheetNotFoundError: If no sheet has this name.
        """
        pass

    @abstractmethod
    def get_values(self, table: TableHandle) -> List[List[Any]]:
        """Return the whole grid from row 1, with empty lists for blank rows."""
        pass


class IProtectionService(ABC):
    """
    Abstract interface for sheet protection.

    Locking removes edit grants from a sheet and from its identity
    columns and records why.
    """

    @abstractmethod
    def lock(self, table: TableHandle) -> None:
        """Protect a sheet and its critical columns."""
        pass

    @abstractmethod
    def unlock(self, table: TableHandle) -> None:
        """Remove every protection from a sheet."""
        pass

    @abstractmethod
    def is_locked(self, table: TableHandle) -> bool:
        """Check whether a sheet-level protection exists."""
        pass


class IMetadataStamper(ABC):
    """Abstract interface for the metadata banner of a sheet."""

    @abstractmethod
    def stamp_metadata(
        self,
        table: TableHandle,
        template_name: str,
        template_version: str,
    ) -> None:
        """Write template name, version and import time into the banner row."""
        pass
