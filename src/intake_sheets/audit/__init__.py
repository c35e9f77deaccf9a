"""Audit module for the Intake Sheets system."""

from .audit_logger import AuditLogger

__all__ = [
    "AuditLogger",
]
