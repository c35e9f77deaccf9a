"""
Intake Sheets

Converts intake template JSON files into locked, versioned schema sheets.
"""

__version__ = "0.1.0"

# Export main components
from .models import (
    FieldValue,
    FlatRow,
    IntakeDocument,
    Question,
    RowSet,
    Section,
    SheetColumn,
    ValueShape,
    SHEET_HEADERS,
)
from .parsers import (
    IntakeParser,
    parse_intake_json,
    IntakeError,
    ParseError,
    StructuralError,
    DuplicateIdentifierError,
    SheetNotFoundError,
)
from .flattening import FlatteningEngine, RowProjector, flatten_intake, find_duplicate_ids
from .naming import NamingResolver, resolve_name
from .interfaces import (
    AuditEvent,
    AuditEventType,
    IAuditLogger,
    IFlatteningEngine,
    IMetadataStamper,
    IProtectionService,
    ISheetMaterializer,
    TableHandle,
)
from .storage import DatabaseManager, LockManager, SheetStore
from .audit import AuditLogger
from .generators import SheetExporter
from .config import (
    ConfigurationManager,
    ConfigurationError,
    ImporterConfiguration,
    ValidationResult,
)
from .pipeline import ImportResult, IntakeImportPipeline, PipelineConfig, PreviewResult

__all__ = [
    "FieldValue",
    "FlatRow",
    "IntakeDocument",
    "Question",
    "RowSet",
    "Section",
    "SheetColumn",
    "ValueShape",
    "SHEET_HEADERS",
    "IntakeParser",
    "parse_intake_json",
    "IntakeError",
    "ParseError",
    "StructuralError",
    "DuplicateIdentifierError",
    "SheetNotFoundError",
    "FlatteningEngine",
    "RowProjector",
    "flatten_intake",
    "find_duplicate_ids",
    "NamingResolver",
    "resolve_name",
    "AuditEvent",
    "AuditEventType",
    "IAuditLogger",
    "IFlatteningEngine",
    "IMetadataStamper",
    "IProtectionService",
    "ISheetMaterializer",
    "TableHandle",
    "DatabaseManager",
    "LockManager",
    "SheetStore",
    "AuditLogger",
    "SheetExporter",
    "ConfigurationManager",
    "ConfigurationError",
    "ImporterConfiguration",
    "ValidationResult",
    "ImportResult",
    "IntakeImportPipeline",
    "PipelineConfig",
    "PreviewResult",
]
