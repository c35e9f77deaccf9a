"""Protection of schema sheets against editing."""

import logging
import time
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select

from ..config.models import ImporterConfiguration
from ..interfaces.sheets import IProtectionService, TableHandle
from ..models.enums import ProtectionType, SheetColumn
from ..models.rows import HEADER_ROW
from .database import DatabaseManager
from .models import ProtectionModel
from .sheet_store import NOTICE_ROW, SheetStore, find_sheet


logger = logging.getLogger(__name__)


class LockManager(IProtectionService):
    """
    Locks schema sheets as immutable references.

    A lock is one sheet-wide protection with no editors plus one range
    protection per critical column, and a visible notice in row 2.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        sheet_store: SheetStore,
        config: Optional[ImporterConfiguration] = None,
    ):
        """
        Initialize the lock manager.

        Args:
            db_manager: Database manager providing sessions.
            sheet_store: Store used for the notice row and backups.
            config: Importer configuration (defaults if not provided).
        """
        self._db_manager = db_manager
        self._sheet_store = sheet_store
        self.config = config or ImporterConfiguration()

    def lock(self, table: TableHandle) -> None:
        """
        Protect a sheet and its critical columns.

        Locking an already locked sheet changes nothing.

        Args:
            table: Sheet to protect.
        """
        if self.is_locked(table):
            logger.info(f"Sheet '{table.name}' is already locked")
            return

        if self.config.backup_before_lock:
            self.create_backup(table)

        with self._db_manager.get_session() as session:
            sheet = find_sheet(session, table.name)
            sheet.protections.append(ProtectionModel(
                protection_type=ProtectionType.SHEET.value,
                description=self.config.lock_description,
                editors=[],
                warning_only=False,
            ))
            for column_name in self.config.protected_columns:
                column = SheetColumn(column_name)
                sheet.protections.append(ProtectionModel(
                    protection_type=ProtectionType.RANGE.value,
                    description=self.config.column_description(column.value),
                    column_name=column.value,
                    column_number=column.number,
                    start_row=HEADER_ROW,
                    num_rows=None,
                    editors=[],
                    warning_only=False,
                ))

        self._sheet_store.set_row(
            table,
            NOTICE_ROW,
            [self.config.lock_notice_title, self.config.lock_notice_message],
        )
        logger.info(
            f"Locked sheet '{table.name}' with "
            f"{len(self.config.protected_columns)} protected columns"
        )

    def unlock(self, table: TableHandle) -> None:
        """
        Remove every sheet and range protection and clear the notice.

        Args:
            table: Sheet to unlock.
        """
        with self._db_manager.get_session() as session:
            sheet = find_sheet(session, table.name)
            session.execute(delete(ProtectionModel).where(ProtectionModel.sheet_id == sheet.id))

        self._sheet_store.clear_row(table, NOTICE_ROW)
        logger.info(f"Unlocked sheet '{table.name}'")

    def is_locked(self, table: TableHandle) -> bool:
        """Check whether a sheet-wide protection exists."""
        with self._db_manager.get_session() as session:
            sheet = find_sheet(session, table.name)
            count = session.execute(
                select(func.count()).select_from(ProtectionModel).where(
                    ProtectionModel.sheet_id == sheet.id,
                    ProtectionModel.protection_type == ProtectionType.SHEET.value,
                )
            ).scalar()
            return bool(count)

    def get_protections(self, table: TableHandle) -> List[Dict[str, Any]]:
        """Describe the protections on a sheet, sheet-wide first."""
        with self._db_manager.get_session() as session:
            sheet = find_sheet(session, table.name)
            protections = sorted(
                sheet.protections,
                key=lambda p: (p.protection_type != ProtectionType.SHEET.value, p.column_number or 0),
            )
            return [
                {
                    "type": p.protection_type,
                    "description": p.description,
                    "column": p.column_name,
                    "column_number": p.column_number,
                    "start_row": p.start_row,
                    "editors": list(p.editors or []),
                    "warning_only": p.warning_only,
                }
                for p in protections
            ]

    def create_backup(self, table: TableHandle) -> TableHandle:
        """
        Copy a sheet to a hidden ``{name}_backup_{epoch_ms}`` sheet.

        Returns:
            Handle to the backup sheet.
        """
        backup_name = f"{table.name}_backup_{int(time.time() * 1000)}"
        backup = self._sheet_store.copy_sheet(table, backup_name, hidden=True)
        logger.info(f"Created backup '{backup_name}' of sheet '{table.name}'")
        return backup
