"""Unit tests for schema sheet exports."""

import csv
from pathlib import Path

import pytest
from docx import Document

from intake_sheets.generators.sheet_exporter import SheetExporter
from intake_sheets.models.rows import SHEET_HEADERS


ROWS = [
    ["s1", "Basics", "q1", "Name?", "", "text", True, "", "", "", "", ""],
    ["s1", "Basics", "q2", "Links", "", "social_links_object", None, "", "", "", "", ""],
]


@pytest.fixture
def table(sheet_store, lock_manager):
    table = sheet_store.create_or_replace_table("Intake_Contact", SHEET_HEADERS, ROWS)
    lock_manager.lock(table)
    sheet_store.stamp_metadata(table, "Contact", "1.0")
    return table


@pytest.fixture
def exporter(sheet_store, tmp_path):
    return SheetExporter(sheet_store, output_dir=str(tmp_path / "exports"))


class TestCsvExport:
    def test_grid_is_written_from_row_one(self, exporter, table):
        path = Path(exporter.export(table, format="csv"))

        with open(path, encoding="utf-8", newline="") as f:
            lines = list(csv.reader(f))

        assert path.name.startswith("Intake_Contact_")
        assert path.suffix == ".csv"
        assert lines[0][0] == "METADATA"
        assert lines[1][0] == "🔒 LOCKED SCHEMA"
        assert lines[2] == list(SHEET_HEADERS)
        assert lines[3][6] == "true"
        assert lines[4][6] == ""
        assert len(lines) == 5


class TestDocxExport:
    def test_document_layout(self, exporter, table):
        """Test the heading, banner, notice and row table of the document."""
        path = exporter.export(table)

        doc = Document(path)

        assert path.endswith(".docx")
        assert doc.paragraphs[0].text == "Intake_Contact"
        assert doc.paragraphs[1].text.startswith("Template: Contact | Version: 1.0")
        assert "LOCKED SCHEMA" in doc.paragraphs[2].text

        word_table = doc.tables[0]
        assert len(word_table.rows) == 1 + len(ROWS)
        assert [c.text for c in word_table.rows[0].cells] == list(SHEET_HEADERS)
        assert word_table.rows[1].cells[2].text == "q1"
        assert word_table.rows[1].cells[6].text == "true"


class TestFormats:
    def test_unsupported_format(self, exporter, table):
        with pytest.raises(ValueError, match="Unsupported export format"):
            exporter.export(table, format="pdf")
