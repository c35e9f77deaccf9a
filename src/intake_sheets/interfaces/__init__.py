"""Abstract interfaces for the Intake Sheets system."""

from .flattening import IFlatteningEngine
from .sheets import IMetadataStamper, IProtectionService, ISheetMaterializer, TableHandle
from .audit import AuditEvent, AuditEventType, IAuditLogger

__all__ = [
    "IFlatteningEngine",
    "IMetadataStamper",
    "IProtectionService",
    "ISheetMaterializer",
    "TableHandle",
    "AuditEvent",
    "AuditEventType",
    "IAuditLogger",
]
