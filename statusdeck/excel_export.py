"""
excel_export.py — Work Done records as an Excel workbook.

One "Work Done" sheet with the same five columns as the deck:
    - Branded header row, frozen, with auto-filter
    - Client column carries the global row label ("3. SNU")
    - Columns auto-fitted, descriptions wrapped

The workbook is a clean round-trip source: feeding it back through the
spreadsheet path yields the same records (with numbered client labels).
"""

import logging
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from statusdeck.config import load_config
from statusdeck.pagination import row_label
from statusdeck.records import COLUMN_TITLES, RecordSet

logger = logging.getLogger(__name__)

SHEET_NAME = "Work Done"

THIN = Side(style="thin")
THIN_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)


def _fill(hex_colour: str) -> PatternFill:
    return PatternFill(fill_type="solid", fgColor=hex_colour.lstrip("#"))


def _auto_fit(ws, min_w: int = 8, max_w: int = 60) -> None:
    for col in ws.columns:
        max_len = max(
            (len(str(cell.value)) if cell.value else 0 for cell in col), default=0
        )
        ws.column_dimensions[get_column_letter(col[0].column)].width = \
            min(max(max_len + 3, min_w), max_w)


def _write_header_row(ws, headers: tuple[str, ...], brand: dict) -> None:
    for col_i, h in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_i, value=h)
        cell.fill = _fill(brand["header_fill"])
        cell.font = Font(name="Calibri", bold=True, size=11)
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = THIN_BORDER


def build_workbook(records: RecordSet, cfg: dict[str, Any]) -> Workbook:
    """Build the in-memory workbook.

    Args:
        records: RecordSet in display order.
        cfg: Full configuration dict.

    Returns:
        openpyxl Workbook with a single sheet.
    """
    brand = cfg["report"]["brand"]
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME

    _write_header_row(ws, COLUMN_TITLES, brand)
    for number, record in enumerate(records, start=1):
        values = record.as_row()
        values[0] = row_label(number, record)
        for col_i, value in enumerate(values, start=1):
            cell = ws.cell(row=number + 1, column=col_i, value=value)
            cell.border = THIN_BORDER
            cell.alignment = Alignment(vertical="top", wrap_text=(col_i == 3))

    _auto_fit(ws)
    ws.freeze_panes = "A2"
    ws.auto_filter.ref = f"A1:{get_column_letter(len(COLUMN_TITLES))}{len(records) + 1}"
    return wb


def generate_excel(
    records: RecordSet,
    config_path: str = "config.yaml",
    stem: str = "report",
) -> Path:
    """Write the records workbook to the output directory.

    Args:
        records: RecordSet in display order.
        config_path: Path to configuration YAML.
        stem: Input file stem, substituted into the output filename.

    Returns:
        Path to the generated .xlsx file.
    """
    cfg = load_config(config_path)
    output_dir = Path(cfg["paths"]["output_dir"])
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / cfg["paths"]["excel_filename"].format(stem=stem)

    build_workbook(records, cfg).save(output_path)
    logger.info("Excel export saved to %s", output_path)
    return output_path
