"""Audit logger implementation for the Intake Sheets system."""

import csv
import io
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select

from ..interfaces.audit import AuditEvent, AuditEventType, IAuditLogger
from ..storage.database import DatabaseManager
from ..storage.models import AuditEventModel


class AuditLogger(IAuditLogger):
    """
    Audit logger backed by the sheet database.

    Records imports, failures, locks and exports so every schema sheet
    can be traced back to the request that produced it.
    """

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        database_url: Optional[str] = None,
    ):
        """
        Initialize the audit logger.

        Args:
            db_manager: Optional DatabaseManager instance. If not provided,
                       a new one will be created.
            database_url: Database URL for creating a new DatabaseManager.
        """
        if db_manager is not None:
            self._db_manager = db_manager
            self._owns_db_manager = False
        else:
            self._db_manager = DatabaseManager(database_url=database_url)
            self._owns_db_manager = True

    def _to_model(self, event: AuditEvent) -> AuditEventModel:
        """Convert AuditEvent dataclass to SQLAlchemy model."""
        return AuditEventModel(
            id=uuid.UUID(event.id) if isinstance(event.id, str) else event.id,
            event_type=event.event_type.value if isinstance(event.event_type, AuditEventType) else event.event_type,
            timestamp=event.timestamp,
            sheet_name=event.sheet_name,
            template_name=event.template_name,
            details=event.details or {},
        )

    def _from_model(self, model: AuditEventModel) -> AuditEvent:
        """Convert SQLAlchemy model to AuditEvent dataclass."""
        return AuditEvent(
            id=str(model.id),
            event_type=AuditEventType(model.event_type),
            timestamp=model.timestamp,
            sheet_name=model.sheet_name,
            template_name=model.template_name,
            details=model.details or {},
        )

    def log_event(self, event: AuditEvent) -> None:
        """
        Record an audit event to the database.

        Args:
            event: The audit event to record.
        """
        model = self._to_model(event)
        with self._db_manager.get_session() as session:
            session.add(model)

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
        with self._db_manager.get_session() as session:
            query = select(AuditEventModel)

            conditions = []
            if sheet_name:
                conditions.append(AuditEventModel.sheet_name == sheet_name)
            if event_type:
                event_type_value = event_type.value if isinstance(event_type, AuditEventType) else event_type
                conditions.append(AuditEventModel.event_type == event_type_value)
            if start_time:
                conditions.append(AuditEventModel.timestamp >= start_time)
            if end_time:
                conditions.append(AuditEventModel.timestamp <= end_time)

            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(AuditEventModel.timestamp.desc())

            models = session.execute(query).scalars().all()
            return [self._from_model(m) for m in models]

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
        if format not in ("json", "csv"):
            raise ValueError(f"Unsupported export format: {format}. Use 'json' or 'csv'.")

        events = self.get_events(sheet_name=sheet_name)

        if format == "json":
            return self._export_json(events)
        else:
            return self._export_csv(events)

    def _export_json(self, events: List[AuditEvent]) -> str:
        """Export events to JSON format with an import summary."""
        imports = [e for e in events if e.event_type == AuditEventType.SCHEMA_IMPORTED]
        failures = [e for e in events if e.event_type == AuditEventType.IMPORT_FAILED]

        data = {
            "export_timestamp": datetime.now(timezone.utc).isoformat(),
            "event_count": len(events),
            "import_summary": {
                "successful_imports": len(imports),
                "failed_imports": len(failures),
                "rows_written": sum(e.details.get("row_count", 0) for e in imports),
            },
            "events": [
                {
                    "id": e.id,
                    "event_type": e.event_type.value,
                    "timestamp": e.timestamp.isoformat() if e.timestamp else None,
                    "sheet_name": e.sheet_name,
                    "template_name": e.template_name,
                    "details": e.details,
                }
                for e in events
            ],
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _export_csv(self, events: List[AuditEvent]) -> str:
        """Export events to CSV format."""
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(["id", "event_type", "timestamp", "sheet_name", "template_name", "details"])

        for e in events:
            writer.writerow([
                e.id,
                e.event_type.value,
                e.timestamp.isoformat() if e.timestamp else "",
                e.sheet_name or "",
                e.template_name or "",
                json.dumps(e.details, ensure_ascii=False),
            ])

        return output.getvalue()

    # ========== Convenience Logging Methods ==========

    def _log(
        self,
        event_type: AuditEventType,
        sheet_name: Optional[str],
        template_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.log_event(AuditEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            timestamp=datetime.now(timezone.utc),
            sheet_name=sheet_name,
            template_name=template_name,
            details=details or {},
        ))

    def log_schema_imported(
        self,
        sheet_name: str,
        template_name: str,
        template_version: str,
        row_count: int,
        section_count: int,
    ) -> None:
        """Log a successful import."""
        self._log(AuditEventType.SCHEMA_IMPORTED, sheet_name, template_name, {
            "template_version": template_version,
            "row_count": row_count,
            "section_count": section_count,
        })

    def log_import_failed(
        self,
        error: str,
        error_type: str,
        template_name: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> None:
        """Log a rejected or failed import."""
        self._log(AuditEventType.IMPORT_FAILED, sheet_name, template_name, {
            "error": error,
            "error_type": error_type,
        })

    def log_schema_locked(self, sheet_name: str, protected_columns: List[str]) -> None:
        """Log a sheet lock."""
        self._log(AuditEventType.SCHEMA_LOCKED, sheet_name, details={
            "protected_columns": list(protected_columns),
        })

    def log_schema_unlocked(self, sheet_name: str) -> None:
        """Log a sheet unlock."""
        self._log(AuditEventType.SCHEMA_UNLOCKED, sheet_name)

    def log_export_completed(self, sheet_name: str, export_path: str, export_format: str) -> None:
        """Log a sheet export."""
        self._log(AuditEventType.EXPORT_COMPLETED, sheet_name, details={
            "export_path": export_path,
            "export_format": export_format,
        })

    def close(self) -> None:
        """Close the audit logger and release resources."""
        if self._owns_db_manager:
            self._db_manager.close()
