"""Database-backed sheet storage.

Sheets are grids of rows addressed by one-based row numbers. A schema
sheet keeps rows 1 and 2 for the metadata banner and the lock notice, the
header in row 3 and the flattened questions from row 4.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy import func, select

from ..config.models import ImporterConfiguration
from ..interfaces.sheets import IMetadataStamper, ISheetMaterializer, TableHandle
from ..models.rows import FIRST_DATA_ROW, HEADER_ROW
from ..parsers.exceptions import SheetNotFoundError
from .database import DatabaseManager
from .models import SheetModel, SheetRowModel


logger = logging.getLogger(__name__)

METADATA_ROW = 1
NOTICE_ROW = 2


def find_sheet(session, name: str) -> SheetModel:
    """Load a sheet by name within an open session."""
    sheet = session.execute(
        select(SheetModel).where(SheetModel.name == name)
    ).scalar_one_or_none()
    if sheet is None:
        raise SheetNotFoundError(message=f"Sheet not found: {name}", sheet_name=name)
    return sheet


class SheetStore(ISheetMaterializer, IMetadataStamper):
    """
    Stores schema sheets in a relational database.

    Owns the sheet namespace: names are unique, and creating a sheet under
    an existing name replaces it.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        config: Optional[ImporterConfiguration] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the sheet store.

        Args:
            db_manager: Database manager providing sessions.
            config: Importer configuration (defaults if not provided).
            clock: Source of the import time written into the banner.
        """
        self._db_manager = db_manager
        self.config = config or ImporterConfiguration()
        self._clock = clock

    # ========== Namespace ==========

    def sheet_exists(self, name: str) -> bool:
        """Check whether a sheet with this exact name exists."""
        with self._db_manager.get_session() as session:
            count = session.execute(
                select(func.count()).select_from(SheetModel).where(SheetModel.name == name)
            ).scalar()
            return bool(count)

    def list_sheet_names(self, include_hidden: bool = True) -> List[str]:
        """Return sheet names in creation order."""
        with self._db_manager.get_session() as session:
            query = select(SheetModel.name).order_by(SheetModel.id.asc())
            if not include_hidden:
                query = query.where(SheetModel.hidden.is_(False))
            return list(session.execute(query).scalars().all())

    def list_schemas(self, prefix: Optional[str] = None) -> List[str]:
        """Return the names of sheets created from intake templates."""
        prefix = self.config.sheet_prefix if prefix is None else prefix
        return [name for name in self.list_sheet_names() if name.startswith(prefix)]

    def get_table(self, name: str) -> TableHandle:
        """
        Look up a sheet by name.

        Raises:
            SheetNotFoundError: If no sheet has this name.
        """
        with self._db_manager.get_session() as session:
            sheet = find_sheet(session, name)
            return self._handle(session, sheet)

    def delete_sheet(self, name: str) -> None:
        """Delete a sheet with its rows and protections."""
        with self._db_manager.get_session() as session:
            session.delete(find_sheet(session, name))
        logger.info(f"Deleted sheet '{name}'")

    # ========== Materialization ==========

    def create_or_replace_table(
        self,
        name: str,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
    ) -> TableHandle:
        """
        Create a schema sheet, replacing any sheet of the same name.

        Rows 1 and 2 are left empty for the banner and the lock notice.

        Args:
            name: Sheet name.
            headers: Header cells written to row 3.
            rows: Data rows written from row 4, each as long as ``headers``.

        Returns:
            Handle to the created sheet.

        Raises:
            ValueError: If a row length differs from the header length.
        """
        width = len(headers)
        for index, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index + FIRST_DATA_ROW} has {len(row)} cells, expected {width}"
                )

        with self._db_manager.get_session() as session:
            existing = session.execute(
                select(SheetModel).where(SheetModel.name == name)
            ).scalar_one_or_none()
            if existing is not None:
                logger.warning(f"Replacing existing sheet '{name}'")
                session.delete(existing)
                session.flush()

            sheet = SheetModel(name=name, hidden=False)
            sheet.rows.append(SheetRowModel(row_number=HEADER_ROW, cells=list(headers)))
            for offset, row in enumerate(rows):
                sheet.rows.append(
                    SheetRowModel(row_number=FIRST_DATA_ROW + offset, cells=list(row))
                )
            session.add(sheet)
            session.flush()

            handle = TableHandle(id=str(sheet.id), name=sheet.name, row_count=len(rows))

        logger.info(f"Created sheet '{name}' with {len(rows)} data rows")
        return handle

    def copy_sheet(self, table: TableHandle, new_name: str, hidden: bool = False) -> TableHandle:
        """
        Copy every row of a sheet into a new sheet. Protections are not copied.

        Raises:
            ValueError: If ``new_name`` is already taken.
        """
        with self._db_manager.get_session() as session:
            source = find_sheet(session, table.name)
            taken = session.execute(
                select(SheetModel.id).where(SheetModel.name == new_name)
            ).first()
            if taken is not None:
                raise ValueError(f"Sheet '{new_name}' already exists")

            copy = SheetModel(name=new_name, hidden=hidden)
            for row in source.rows:
                copy.rows.append(SheetRowModel(row_number=row.row_number, cells=list(row.cells)))
            session.add(copy)
            session.flush()

            handle = self._handle(session, copy)

        logger.info(f"Copied sheet '{table.name}' to '{new_name}'")
        return handle

    # ========== Cells ==========

    def get_row(self, table: TableHandle, row_number: int) -> List[Any]:
        """Return the cells of one row; missing rows are empty."""
        with self._db_manager.get_session() as session:
            row = self._find_row(session, table, row_number)
            return list(row.cells) if row is not None else []

    def set_row(self, table: TableHandle, row_number: int, cells: Sequence[Any]) -> None:
        """Write the cells of one row, replacing what was there."""
        if row_number < 1:
            raise ValueError(f"Row numbers start at 1, got {row_number}")

        with self._db_manager.get_session() as session:
            row = self._find_row(session, table, row_number)
            if row is None:
                sheet = find_sheet(session, table.name)
                sheet.rows.append(SheetRowModel(row_number=row_number, cells=list(cells)))
            else:
                row.cells = list(cells)

    def clear_row(self, table: TableHandle, row_number: int) -> None:
        """Remove the contents of one row."""
        with self._db_manager.get_session() as session:
            row = self._find_row(session, table, row_number)
            if row is not None:
                session.delete(row)

    def get_values(self, table: TableHandle) -> List[List[Any]]:
        """Return the whole grid from row 1, with empty lists for blank rows."""
        with self._db_manager.get_session() as session:
            sheet = find_sheet(session, table.name)
            by_number: Dict[int, List[Any]] = {r.row_number: list(r.cells) for r in sheet.rows}

        last = max(by_number) if by_number else 0
        return [by_number.get(number, []) for number in range(1, last + 1)]

    def get_data_rows(self, table: TableHandle) -> List[List[Any]]:
        """Return the rows below the header."""
        return self.get_values(table)[FIRST_DATA_ROW - 1:]

    # ========== Metadata ==========

    def stamp_metadata(
        self,
        table: TableHandle,
        template_name: str,
        template_version: str,
    ) -> None:
        """Write the metadata banner into row 1."""
        imported = self._clock().strftime(self.config.timestamp_format)
        version = template_version or self.config.default_template_version
        self.set_row(table, METADATA_ROW, [
            "METADATA",
            f"Template: {template_name}",
            f"Version: {version}",
            f"Imported: {imported}",
        ])
        logger.debug(f"Stamped metadata on '{table.name}'")

    # ========== Helpers ==========

    def _find_row(self, session, table: TableHandle, row_number: int) -> Optional[SheetRowModel]:
        sheet = find_sheet(session, table.name)
        return session.execute(
            select(SheetRowModel).where(
                SheetRowModel.sheet_id == sheet.id,
                SheetRowModel.row_number == row_number,
            )
        ).scalar_one_or_none()

    @staticmethod
    def _handle(session, sheet: SheetModel) -> TableHandle:
        data_rows = session.execute(
            select(func.count()).select_from(SheetRowModel).where(
                SheetRowModel.sheet_id == sheet.id,
                SheetRowModel.row_number >= FIRST_DATA_ROW,
            )
        ).scalar()
        return TableHandle(id=str(sheet.id), name=sheet.name, row_count=data_rows or 0)
