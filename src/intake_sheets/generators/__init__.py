"""Schema sheet exporters for the Intake Sheets system."""

from .sheet_exporter import SUPPORTED_FORMATS, SheetExporter

__all__ = [
    "SUPPORTED_FORMATS",
    "SheetExporter",
]
