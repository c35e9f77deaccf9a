"""Configuration management for the Intake Sheets system."""

from .config_manager import ConfigurationManager
from .models import (
    ConfigurationError,
    ImporterConfiguration,
    ValidationResult,
)

__all__ = [
    "ConfigurationManager",
    "ConfigurationError",
    "ImporterConfiguration",
    "ValidationResult",
]
