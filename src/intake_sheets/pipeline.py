"""Intake import pipeline for the Intake Sheets system.

This module wires parsing, flattening, duplicate detection, naming and the
sheet collaborators into the two operations the presentation layer calls:
importing an intake template into a locked schema sheet, and previewing
what an import would produce.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .audit.audit_logger import AuditLogger
from .config.config_manager import ConfigurationManager
from .config.models import ImporterConfiguration
from .flattening.engine import FlatteningEngine
from .flattening.identity_guard import find_duplicate_ids
from .flattening.row_projector import RowProjector
from .generators.sheet_exporter import SheetExporter
from .interfaces.audit import IAuditLogger
from .interfaces.flattening import IFlatteningEngine
from .interfaces.sheets import (
    IMetadataStamper,
    IProtectionService,
    ISheetMaterializer,
    TableHandle,
)
from .models.rows import SHEET_HEADERS
from .naming.resolver import NamingResolver
from .parsers.exceptions import DuplicateIdentifierError, IntakeError
from .parsers.intake_parser import IntakeParser
from .storage.database import DatabaseManager
from .storage.lock_manager import LockManager
from .storage.sheet_store import SheetStore


logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for the import pipeline."""

    # Database configuration
    database_url: Optional[str] = None
    init_database: bool = True

    # Importer configuration file (JSON)
    config_path: Optional[str] = None

    # Output directory for sheet exports
    export_dir: str = "data/exports"

    # Feature flags
    enable_audit_logging: bool = True


@dataclass
class ImportResult:
    """Outcome of one import request."""

    success: bool
    sheet_name: Optional[str] = None
    row_count: int = 0
    message: str = ""
    error: Optional[str] = None
    duplicates: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "sheet_name": self.sheet_name,
            "row_count": self.row_count,
            "message": self.message,
        }


@dataclass
class PreviewResult:
    """Outcome of a dry-run import."""

    success: bool
    template_name: Optional[str] = None
    question_count: int = 0
    section_count: int = 0
    has_duplicates: bool = False
    duplicates: List[Any] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "template_name": self.template_name,
            "question_count": self.question_count,
            "section_count": self.section_count,
            "has_duplicates": self.has_duplicates,
            "duplicates": self.duplicates,
        }


class IntakeImportPipeline:
    """
    Imports intake templates into locked, versioned schema sheets.

    Nothing is written until parsing, the structural check and the
    duplicate check have all passed. Every failure is reported as a failed
    result rather than raised.

    Imports against one sheet store must not run concurrently: the free
    name check and the sheet creation are separate steps.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        config_manager: Optional[ConfigurationManager] = None,
        db_manager: Optional[DatabaseManager] = None,
        materializer: Optional[ISheetMaterializer] = None,
        protection_service: Optional[IProtectionService] = None,
        metadata_stamper: Optional[IMetadataStamper] = None,
        flattening_engine: Optional[IFlatteningEngine] = None,
        audit_logger: Optional[IAuditLogger] = None,
    ):
        """
        Initialize the import pipeline.

        Args:
            config: Pipeline configuration.
            config_manager: Optional configuration manager (created if not provided).
            db_manager: Optional database manager (created if a store is needed).
            materializer: Optional sheet materializer (SheetStore if not provided).
            protection_service: Optional protection service (LockManager if not provided).
            metadata_stamper: Optional metadata stamper (the materializer if it stamps).
            flattening_engine: Optional flattening engine (created if not provided).
            audit_logger: Optional audit logger (created if auditing is enabled).
        """
        self.config = config or PipelineConfig()

        self._config_manager = config_manager or ConfigurationManager()
        if self.config.config_path and not self._config_manager.is_loaded:
            self._config_manager.load(self.config.config_path)
            logger.info(f"Loaded importer configuration from {self.config.config_path}")
        settings = self.settings

        if materializer is not None:
            if protection_service is None:
                raise ValueError("A protection service is required with a custom materializer")
            if metadata_stamper is None and not isinstance(materializer, IMetadataStamper):
                raise ValueError("A metadata stamper is required with a custom materializer")

        needs_database = (
            materializer is None
            or protection_service is None
            or (audit_logger is None and self.config.enable_audit_logging)
        )
        self._owns_db_manager = db_manager is None and needs_database
        self._db_manager = db_manager
        if self._db_manager is None and needs_database:
            self._db_manager = DatabaseManager(database_url=self.config.database_url)
        if self._db_manager is not None and self.config.init_database:
            self._db_manager.init_database()

        self._materializer = materializer or SheetStore(self._db_manager, config=settings)
        self._protection = protection_service or LockManager(
            self._db_manager, self._materializer, config=settings
        )
        self._stamper = metadata_stamper or self._materializer

        self._parser = IntakeParser(default_template_version=settings.default_template_version)
        self._engine = flattening_engine or FlatteningEngine(
            RowProjector(default_max_items=settings.default_max_items)
        )
        self._naming = NamingResolver(self._materializer.sheet_exists, prefix=settings.sheet_prefix)

        self._audit_logger = audit_logger
        if self._audit_logger is None and self.config.enable_audit_logging:
            self._audit_logger = AuditLogger(db_manager=self._db_manager)

        logger.info("Intake import pipeline initialized")

    @property
    def settings(self) -> ImporterConfiguration:
        """Active importer configuration."""
        return self._config_manager.configuration

    # ========== Import ==========

    def process_intake_json(self, json_text: str, force_new_version: bool = False) -> ImportResult:
        """
        Import an intake template into a new locked schema sheet.

        Args:
            json_text: Raw intake JSON.
            force_new_version: Create a versioned sheet even if the base
                name is free.

        Returns:
            ImportResult with the sheet name and row count, or the error.
        """
        template_name: Optional[str] = None
        sheet_name: Optional[str] = None

        try:
            document = self._parser.parse(json_text)
            template_name = document.template_name

            sheet_name = self._naming.resolve(template_name, force_new=force_new_version)

            row_set = self._engine.flatten(document)

            duplicates = find_duplicate_ids(row_set.rows)
            if duplicates:
                raise DuplicateIdentifierError.from_duplicates(duplicates)

            table = self._materializer.create_or_replace_table(
                sheet_name, SHEET_HEADERS, row_set.to_grid()
            )
            self._protection.lock(table)
            self._stamper.stamp_metadata(table, document.template_name, document.template_version)

            self._audit(
                "log_schema_imported",
                sheet_name=sheet_name,
                template_name=template_name,
                template_version=document.template_version,
                row_count=row_set.row_count,
                section_count=row_set.section_count,
            )
            self._audit(
                "log_schema_locked",
                sheet_name=sheet_name,
                protected_columns=self.settings.protected_columns,
            )

            logger.info(f"Imported '{template_name}' into '{sheet_name}' ({row_set.row_count} rows)")
            return ImportResult(
                success=True,
                sheet_name=sheet_name,
                row_count=row_set.row_count,
                message=f"Successfully created {sheet_name} with {row_set.row_count} questions",
            )

        except IntakeError as e:
            logger.warning(f"Intake import rejected: {e}")
            self._audit(
                "log_import_failed",
                error=str(e),
                error_type=e.__class__.__name__,
                template_name=template_name,
                sheet_name=sheet_name,
            )
            return ImportResult(
                success=False,
                error=str(e),
                duplicates=list(getattr(e, "duplicates", [])),
            )

        except Exception as e:
            logger.exception(f"Intake import failed: {e}")
            self._audit(
                "log_import_failed",
                error=str(e),
                error_type=e.__class__.__name__,
                template_name=template_name,
                sheet_name=sheet_name,
            )
            return ImportResult(success=False, error=str(e))

    def preview_json(self, json_text: str) -> PreviewResult:
        """
        Report what an import would produce without writing anything.

        ``question_count`` counts flat rows, expanded sub-fields included.
        """
        try:
            document = self._parser.parse(json_text)
            row_set = self._engine.flatten(document)
            duplicates = find_duplicate_ids(row_set.rows)

            return PreviewResult(
                success=True,
                template_name=document.template_name,
                question_count=row_set.row_count,
                section_count=row_set.section_count,
                has_duplicates=len(duplicates) > 0,
                duplicates=duplicates,
            )

        except IntakeError as e:
            logger.warning(f"Intake preview rejected: {e}")
            return PreviewResult(success=False, error=str(e))

        except Exception as e:
            logger.exception(f"Intake preview failed: {e}")
            return PreviewResult(success=False, error=str(e))

    # ========== Schema maintenance ==========

    def list_schemas(self) -> List[str]:
        """Names of all sheets carrying the intake prefix, in creation order."""
        prefix = self.settings.sheet_prefix
        return [name for name in self._materializer.list_sheet_names() if name.startswith(prefix)]

    def get_table(self, sheet_name: str) -> TableHandle:
        """Look up a stored sheet."""
        return self._materializer.get_table(sheet_name)

    def get_schema(self, sheet_name: str) -> Dict[str, Any]:
        """Grid values and lock state of one schema sheet."""
        table = self.get_table(sheet_name)
        return {
            "sheet_name": table.name,
            "row_count": table.row_count,
            "locked": self._protection.is_locked(table),
            "values": self._materializer.get_values(table),
        }

    def is_schema_locked(self, sheet_name: str) -> bool:
        return self._protection.is_locked(self.get_table(sheet_name))

    def unlock_schema(self, sheet_name: str) -> None:
        """Remove the protections of a schema sheet for maintenance."""
        self._protection.unlock(self.get_table(sheet_name))
        self._audit("log_schema_unlocked", sheet_name=sheet_name)

    def export_schema(self, sheet_name: str, format: str = "docx") -> str:
        """
        Export a schema sheet to a file.

        Returns:
            Path to the exported file.
        """
        table = self.get_table(sheet_name)
        exporter = SheetExporter(self._materializer, output_dir=self.config.export_dir)
        path = exporter.export(table, format=format)
        self._audit("log_export_completed", sheet_name=sheet_name, export_path=path, export_format=format)
        return path

    def about(self) -> Dict[str, str]:
        """Name, version and purpose of the importer."""
        from . import __version__

        return {
            "name": "Intake Sheets",
            "version": __version__,
            "description": (
                "Converts intake template JSON files into locked, versioned schema sheets "
                "that downstream tools read as an immutable reference."
            ),
        }

    # ========== Helpers ==========

    def _audit(self, method: str, **kwargs: Any) -> None:
        """Record an audit event; audit failures never fail the request."""
        if self._audit_logger is None:
            return
        try:
            getattr(self._audit_logger, method)(**kwargs)
        except Exception as e:
            logger.warning(f"Failed to record audit event {method}: {e}")

    def close(self) -> None:
        """Release database resources owned by the pipeline."""
        if self._owns_db_manager and self._db_manager is not None:
            self._db_manager.close()
