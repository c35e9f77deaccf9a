"""Schema sheet storage for the Intake Sheets system."""

from .database import DatabaseManager, get_database_url
from .models import (
    AuditEventModel,
    Base,
    ProtectionModel,
    SheetModel,
    SheetRowModel,
)
from .sheet_store import METADATA_ROW, NOTICE_ROW, SheetStore, find_sheet
from .lock_manager import LockManager

__all__ = [
    "DatabaseManager",
    "get_database_url",
    "AuditEventModel",
    "Base",
    "ProtectionModel",
    "SheetModel",
    "SheetRowModel",
    "METADATA_ROW",
    "NOTICE_ROW",
    "SheetStore",
    "find_sheet",
    "LockManager",
]
