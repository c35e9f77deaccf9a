"""Data models for importer configuration."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..models.enums import SheetColumn


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another validation result into this one."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings
        )


class ConfigurationError(Exception):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, validation_result: Optional[ValidationResult] = None):
        super().__init__(message)
        self.message = message
        self.validation_result = validation_result


@dataclass
class ImporterConfiguration:
    """
    Settings for naming, projecting and locking schema sheets.

    Defaults reproduce the standard sheet layout; a configuration file only
    needs the keys it changes.
    """
    sheet_prefix: str = "Intake_"
    default_template_version: str = "1.0"
    default_max_items: int = 10
    lock_description: str = "Immutable schema — do not edit"
    column_lock_description: str = "Protected: {column} - DO NOT MODIFY"
    protected_columns: List[str] = field(default_factory=lambda: [
        SheetColumn.SECTION_ID.value,
        SheetColumn.SECTION_NAME.value,
        SheetColumn.QUESTION_ID.value,
        SheetColumn.MAPS_TO.value,
    ])
    lock_notice_title: str = "🔒 LOCKED SCHEMA"
    lock_notice_message: str = "This sheet is protected and serves as an immutable reference"
    backup_before_lock: bool = False
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"

    def column_description(self, column: str) -> str:
        """Protection description for one critical column."""
        return self.column_lock_description.format(column=column)
