"""Configuration Manager implementation for the Intake Sheets system.

This module loads, validates and saves the importer configuration that
controls sheet naming, text_array defaults and the wording of locks.
"""

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..models.enums import SheetColumn
from .models import ConfigurationError, ImporterConfiguration, ValidationResult


logger = logging.getLogger(__name__)

_STRING_FIELDS = (
    "sheet_prefix",
    "default_template_version",
    "lock_description",
    "column_lock_description",
    "lock_notice_title",
    "lock_notice_message",
    "timestamp_format",
)


class ConfigurationManager:
    """
    Manager for importer configuration.

    Handles loading from JSON files or dictionaries, validation, and
    access to the active ImporterConfiguration.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional JSON file to load immediately.
        """
        self._config_path = Path(config_path) if config_path else None
        self._configuration = ImporterConfiguration()
        self._is_loaded = False

        if self._config_path is not None:
            self.load(self._config_path)

    @property
    def configuration(self) -> ImporterConfiguration:
        """Get the current importer configuration."""
        return self._configuration

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._is_loaded

    def load(self, source: Union[str, Path, Dict[str, Any]]) -> ValidationResult:
        """
        Load and validate importer configuration.

        Keys missing from the source keep their defaults.

        Args:
            source: JSON file path or dictionary.

        Returns:
            ValidationResult with any warnings.

        Raises:
            ConfigurationError: If the source is unreadable or invalid.
        """
        raw_data = self._parse_source(source)
        result = self.validate(raw_data)

        if not result.is_valid:
            raise ConfigurationError(
                "Importer configuration validation failed",
                validation_result=result
            )

        known = {f.name for f in fields(ImporterConfiguration)}
        values = {key: value for key, value in raw_data.items() if key in known}
        self._configuration = ImporterConfiguration(**values)
        self._is_loaded = True

        for warning in result.warnings:
            logger.warning(f"Configuration warning: {warning}")

        return result

    def validate(self, data: Any) -> ValidationResult:
        """Validate a raw configuration dictionary without applying it."""
        result = ValidationResult(is_valid=True)

        if not isinstance(data, dict):
            result.add_error("Configuration must be a JSON object")
            return result

        known = {f.name for f in fields(ImporterConfiguration)}
        for key in data:
            if key not in known:
                result.add_warning(f"Unknown configuration key '{key}' ignored")

        for key in _STRING_FIELDS:
            if key in data and not isinstance(data[key], str):
                result.add_error(f"'{key}' must be a string")

        for key in ("lock_description", "default_template_version"):
            if isinstance(data.get(key), str) and not data[key].strip():
                result.add_error(f"'{key}' must be a non-empty string")

        if "default_max_items" in data:
            value = data["default_max_items"]
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                result.add_error("'default_max_items' must be a positive integer")

        if "backup_before_lock" in data and not isinstance(data["backup_before_lock"], bool):
            result.add_error("'backup_before_lock' must be a boolean")

        if "protected_columns" in data:
            result = result.merge(self._validate_protected_columns(data["protected_columns"]))

        template = data.get("column_lock_description")
        if isinstance(template, str):
            if "{column}" not in template:
                result.add_warning(
                    "'column_lock_description' has no {column} placeholder; "
                    "all column protections will share one description"
                )
            try:
                template.format(column="")
            except (KeyError, IndexError, ValueError) as e:
                result.add_error(f"'column_lock_description' is not a valid format string: {e}")

        return result

    def _validate_protected_columns(self, columns: Any) -> ValidationResult:
        """Validate the list of columns locked individually."""
        result = ValidationResult(is_valid=True)

        if not isinstance(columns, list):
            result.add_error("'protected_columns' must be a list")
            return result

        valid_columns = [c.value for c in SheetColumn]
        for column in columns:
            if column not in valid_columns:
                result.add_error(
                    f"Unknown protected column '{column}'; must be one of {valid_columns}"
                )

        duplicates = {c for c in columns if isinstance(c, str) and columns.count(c) > 1}
        if duplicates:
            result.add_warning(f"Protected columns listed more than once: {sorted(duplicates)}")

        return result

    def _parse_source(self, source: Union[str, Path, Dict[str, Any]]) -> Any:
        """Parse configuration source to raw data."""
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise ConfigurationError(f"Configuration file not found: {path}")

            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in configuration file {path}: {e}")

        return source

    def save(self, config_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Save the current configuration as JSON.

        Args:
            config_path: File to write. Uses the loaded path if None.

        Returns:
            Path of the written file.
        """
        path = Path(config_path) if config_path else self._config_path
        if not path:
            raise ConfigurationError("No configuration file specified")

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        self._config_path = path
        return path

    def reset(self) -> None:
        """Reset configuration to defaults."""
        self._configuration = ImporterConfiguration()
        self._is_loaded = False

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as a dictionary."""
        return asdict(self._configuration)
