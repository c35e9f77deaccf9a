"""Audit logger interface for the Intake Sheets system."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class AuditEventType(Enum):
    """Types of audit events tracked by the system."""
    SCHEMA_IMPORTED = "schema_imported"
    IMPORT_FAILED = "import_failed"
    SCHEMA_LOCKED = "schema_locked"
    SCHEMA_UNLOCKED = "schema_unlocked"
    EXPORT_COMPLETED = "export_completed"


@dataclass
class AuditEvent:
    """
    Audit event record.

    ``sheet_name`` ties the event to a schema sheet; failed imports that
    never resolved a name leave it empty.
    """
    id: str
    event_type: AuditEventType
    timestamp: datetime
    sheet_name: Optional[str] = None
    template_name: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}


class IAuditLogger(ABC):
    """
    Abstract interface for audit logging.

    Implementations record and query what happened to schema sheets.
    """

    @abstractmethod
    def log_event(self, event: AuditEvent) -> None:
        """
        Record an audit event.

        Args:
            event: The audit event to record.
        """
        pass

    @abstractmethod
    def get_events(
        self,
        sheet_name: Optional[str] = None,
        event_type: Optional[AuditEventType] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """
        Query audit events with optional filters.

        Args:
            sheet_name: Filter by sheet name.
            event_type: Filter by event type.
            start_time: Filter events after this time.
            end_time: Filter events before this time.

        Returns:
            List of matching audit events, newest first.
        """
        pass

    @abstractmethod
    def export_log(
        self,
        sheet_name: Optional[str] = None,
        format: str = "json",
    ) -> str:
        """
        Export the audit log.

        Args:
            sheet_name: Restrict the export to one sheet.
            format: Export format ("json" or "csv").

        Returns:
            Exported log content as a string.

        Raises:
            ValueError: If format is not supported.
        """
        pass
