"""Intake flattening for the Intake Sheets system."""

from .formatters import (
    format_examples,
    format_maps_to,
    format_options,
    format_validation,
    stringify,
)
from .row_projector import RowProjector
from .engine import FlatteningEngine, flatten_intake
from .identity_guard import find_duplicate_ids

__all__ = [
    "format_examples",
    "format_maps_to",
    "format_options",
    "format_validation",
    "stringify",
    "RowProjector",
    "FlatteningEngine",
    "flatten_intake",
    "find_duplicate_ids",
]
