"""SQLAlchemy models for schema sheet storage."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JSONType(TypeDecorator):
    """Platform-independent JSON type.

    Uses JSONB for PostgreSQL and JSON for other databases (like SQLite).
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class SheetModel(Base):
    """Sheet table model. Sheet ids grow in creation order."""
    __tablename__ = "sheets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    hidden = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    rows = relationship(
        "SheetRowModel",
        back_populates="sheet",
        cascade="all, delete-orphan",
        order_by="SheetRowModel.row_number",
    )
    protections = relationship(
        "ProtectionModel",
        back_populates="sheet",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_sheets_hidden", "hidden"),
    )


class SheetRowModel(Base):
    """One grid row of a sheet, stored as a list of cell values."""
    __tablename__ = "sheet_rows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sheet_id = Column(Integer, ForeignKey("sheets.id", ondelete="CASCADE"), nullable=False)
    row_number = Column(Integer, nullable=False)
    cells = Column(JSONType, nullable=False)

    sheet = relationship("SheetModel", back_populates="rows")

    __table_args__ = (
        UniqueConstraint("sheet_id", "row_number", name="uq_sheet_rows_sheet_row"),
        CheckConstraint("row_number >= 1", name="check_row_number"),
        Index("idx_sheet_rows_sheet_id", "sheet_id"),
    )


class ProtectionModel(Base):
    """
    Protection applied to a whole sheet or to a column range.

    A range with ``num_rows`` NULL extends to the end of the sheet.
    """
    __tablename__ = "protections"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sheet_id = Column(Integer, ForeignKey("sheets.id", ondelete="CASCADE"), nullable=False)
    protection_type = Column(String(10), nullable=False)
    description = Column(String(500), nullable=False)
    column_name = Column(String(50), nullable=True)
    column_number = Column(Integer, nullable=True)
    start_row = Column(Integer, nullable=True)
    num_rows = Column(Integer, nullable=True)
    editors = Column(JSONType, nullable=False, default=list)
    warning_only = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    sheet = relationship("SheetModel", back_populates="protections")

    __table_args__ = (
        CheckConstraint("protection_type IN ('sheet', 'range')", name="check_protection_type"),
        Index("idx_protections_sheet_id", "sheet_id"),
        Index("idx_protections_type", "sheet_id", "protection_type"),
    )


class AuditEventModel(Base):
    """Audit events table model."""
    __tablename__ = "audit_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_type = Column(String(50), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow)
    sheet_name = Column(String(255), nullable=True)
    template_name = Column(String(255), nullable=True)
    details = Column(JSONType)

    __table_args__ = (
        Index("idx_audit_events_event_type", "event_type"),
        Index("idx_audit_events_timestamp", "timestamp"),
        Index("idx_audit_events_sheet_name", "sheet_name"),
    )
