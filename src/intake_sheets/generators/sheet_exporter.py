"""Export of schema sheets to .docx and .csv files."""

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List

from docx import Document
from docx.shared import Pt, RGBColor

from ..flattening.formatters import stringify
from ..interfaces.sheets import ISheetMaterializer, TableHandle
from ..models.rows import HEADER_ROW
from ..storage.sheet_store import METADATA_ROW, NOTICE_ROW


logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("docx", "csv")


class SheetExporter:
    """
    Exports a stored schema sheet for people without database access.

    The .docx export renders the banner and lock notice as paragraphs and
    the header plus data rows as one table. The .csv export writes the
    grid row by row from row 1.
    """

    def __init__(self, sheet_store: ISheetMaterializer, output_dir: str = "data/exports"):
        """
        Initialize the sheet exporter.

        Args:
            sheet_store: Store the sheets are read from.
            output_dir: Directory for exported files.
        """
        self._sheet_store = sheet_store
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export(self, table: TableHandle, format: str = "docx") -> str:
        """
        Export a sheet in the requested format.

        Returns:
            Path to the exported file.

        Raises:
            ValueError: If format is not supported.
        """
        if format == "docx":
            return self.export_docx(table)
        if format == "csv":
            return self.export_csv(table)
        raise ValueError(f"Unsupported export format: {format}. Use one of {list(SUPPORTED_FORMATS)}.")

    def export_docx(self, table: TableHandle) -> str:
        """Export a sheet as a Word document."""
        grid = self._sheet_store.get_values(table)
        banner = self._row(grid, METADATA_ROW)
        notice = self._row(grid, NOTICE_ROW)
        header = self._row(grid, HEADER_ROW)
        data = grid[HEADER_ROW:]

        doc = Document()
        doc.add_heading(table.name, level=1)

        if banner:
            doc.add_paragraph(" | ".join(stringify(cell) for cell in banner[1:]))

        if notice:
            paragraph = doc.add_paragraph()
            run = paragraph.add_run(" ".join(stringify(cell) for cell in notice))
            run.bold = True
            run.font.color.rgb = RGBColor(0xC6, 0x28, 0x28)

        if header:
            word_table = doc.add_table(rows=1, cols=len(header))
            word_table.style = "Table Grid"
            for cell, value in zip(word_table.rows[0].cells, header):
                cell.text = stringify(value)
                for run in cell.paragraphs[0].runs:
                    run.bold = True
                    run.font.size = Pt(9)

            for values in data:
                cells = word_table.add_row().cells
                for index, cell in enumerate(cells):
                    cell.text = stringify(values[index]) if index < len(values) else ""
                    for run in cell.paragraphs[0].runs:
                        run.font.size = Pt(9)

        output_path = self._output_path(table, "docx")
        doc.save(str(output_path))

        logger.info(f"Exported sheet '{table.name}' to: {output_path}")
        return str(output_path)

    def export_csv(self, table: TableHandle) -> str:
        """Export a sheet as CSV, one line per grid row."""
        grid = self._sheet_store.get_values(table)
        output_path = self._output_path(table, "csv")

        with open(output_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            for values in grid:
                writer.writerow([stringify(cell) for cell in values])

        logger.info(f"Exported sheet '{table.name}' to: {output_path}")
        return str(output_path)

    @staticmethod
    def _row(grid: List[List[Any]], row_number: int) -> List[Any]:
        return grid[row_number - 1] if len(grid) >= row_number else []

    def _output_path(self, table: TableHandle, suffix: str) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.output_dir / f"{table.name}_{timestamp}.{suffix}"
