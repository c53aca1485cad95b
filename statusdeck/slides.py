"""
slides.py — Work Done Status PowerPoint deck.

Builds a 10 x 7.5 in deck with python-pptx, one slide per page of records:

    Title          — "Work Done Status" (top left)
    Brand block    — organisation name + tagline (top right)
    Table          — Client | Module | Description | Deployment Status | Date of Delivery
    Footer         — credit line (centre) + "page/total" (right)

Rows are labelled "<global n>. <client>". When any description on a slide
is longer than max_chars_per_cell, every row on that slide gets its own
single-row table, stacked down the slide, so long text wraps instead of
overflowing one shared table.

Everything is written through BytesIO, so the server can stream the deck
without touching disk.
"""

import io
import logging
from pathlib import Path
from typing import Any

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import PP_ALIGN
from pptx.util import Inches, Pt

from statusdeck.config import load_config
from statusdeck.pagination import Page, paginate, row_label
from statusdeck.records import COLUMN_TITLES, RecordSet

logger = logging.getLogger(__name__)

SLIDE_W = Inches(10)
SLIDE_H = Inches(7.5)
TABLE_X = Inches(0.5)
TABLE_Y = Inches(1.8)
TABLE_W = Inches(9.0)
COL_WIDTHS = (1.3, 1.2, 4.0, 1.5, 1.0)
SPLIT_COL_WIDTHS = (1.5, 1.5, 3.5, 1.5, 1.0)
SPLIT_ROW_STEP = Inches(1.0)
FONT = "Arial"


def _rgb(h: str) -> RGBColor:
    return RGBColor.from_string(h.lstrip("#").upper())


def _add_text(slide, text: str, x: float, y: float, w: float, h: float, *,
              size: int, colour: str, bold: bool = False, italic: bool = False,
              align=PP_ALIGN.LEFT):
    box = slide.shapes.add_textbox(Inches(x), Inches(y), Inches(w), Inches(h))
    frame = box.text_frame
    frame.word_wrap = True
    para = frame.paragraphs[0]
    para.alignment = align
    run = para.add_run()
    run.text = text
    run.font.name = FONT
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.italic = italic
    run.font.color.rgb = _rgb(colour)
    return box


def _style_cell(cell, text: str, size: int, *, header: bool, brand: dict) -> None:
    cell.text = text
    para = cell.text_frame.paragraphs[0]
    cell.text_frame.word_wrap = True
    for run in para.runs:
        run.font.name = FONT
        run.font.size = Pt(size)
        run.font.bold = header
        run.font.color.rgb = _rgb("000000")
    cell.fill.solid()
    cell.fill.fore_color.rgb = _rgb(brand["header_fill"] if header else brand["background"])


def _add_table(slide, rows: list[list[str]], y, col_widths: tuple, size: int, brand: dict):
    """Add a header + data table at vertical offset y."""
    n_rows = len(rows) + 1
    shape = slide.shapes.add_table(n_rows, len(COLUMN_TITLES), TABLE_X, y, TABLE_W,
                                   Inches(0.4) * n_rows)
    table = shape.table
    for col, width in enumerate(col_widths):
        table.columns[col].width = Inches(width)
    for col, title in enumerate(COLUMN_TITLES):
        _style_cell(table.cell(0, col), title, size, header=True, brand=brand)
    for r, values in enumerate(rows, start=1):
        for col, value in enumerate(values):
            _style_cell(table.cell(r, col), value, size, header=False, brand=brand)
    return table


def _row_values(number: int, record) -> list[str]:
    values = record.as_row()
    values[0] = row_label(number, record)
    return values


def _build_slide(prs: Presentation, page: Page, report: dict, max_chars: int) -> None:
    brand = report["brand"]
    slide = prs.slides.add_slide(prs.slide_layouts[6])  # blank

    _add_text(slide, report["title"], 0.5, 0.5, 5.0, 0.8,
              size=36, colour=brand["title"], bold=True)
    _add_text(slide, report["organisation"], 7.5, 0.5, 2.0, 0.5,
              size=24, colour=brand["logo"], bold=True, align=PP_ALIGN.RIGHT)
    _add_text(slide, report["tagline"], 7.5, 1.0, 2.0, 0.5,
              size=16, colour=brand["muted"], italic=True, align=PP_ALIGN.RIGHT)

    if page.has_long_description(max_chars):
        logger.debug("Slide %s has long descriptions -- one table per row", page.label)
        for offset, (number, record) in enumerate(page.entries):
            _add_table(slide, [_row_values(number, record)],
                       TABLE_Y + SPLIT_ROW_STEP * offset, SPLIT_COL_WIDTHS, 12, brand)
    else:
        rows = [_row_values(number, record) for number, record in page.entries]
        _add_table(slide, rows, TABLE_Y, COL_WIDTHS, 11, brand)

    _add_text(slide, report["footer"], 0.5, 6.8, 9.0, 0.3,
              size=10, colour=brand["muted"], align=PP_ALIGN.CENTER)
    _add_text(slide, page.label, 9.0, 6.8, 0.5, 0.3,
              size=10, colour=brand["muted"], align=PP_ALIGN.RIGHT)


def build_presentation(records: RecordSet, cfg: dict[str, Any]) -> Presentation:
    """Build the in-memory deck.

    Args:
        records: Non-empty RecordSet.
        cfg: Full configuration dict.

    Returns:
        python-pptx Presentation.
    """
    if not records:
        raise ValueError("No data to generate PowerPoint file")

    report = cfg["report"]
    pag = cfg["pagination"]
    pages = paginate(records, pag["rows_per_slide"])
    logger.info("Creating %d slide(s) for %d row(s)", len(pages), len(records))

    prs = Presentation()
    prs.slide_width = SLIDE_W
    prs.slide_height = SLIDE_H
    props = prs.core_properties
    props.title = report["title"]
    props.subject = report["title"]
    if report.get("author"):
        props.author = report["author"]

    for page in pages:
        _build_slide(prs, page, report, pag["max_chars_per_cell"])
    return prs


def render_pptx_bytes(records: RecordSet, cfg: dict[str, Any]) -> bytes:
    """Render the deck to bytes (used by the HTTP service)."""
    buf = io.BytesIO()
    build_presentation(records, cfg).save(buf)
    return buf.getvalue()


def generate_pptx(
    records: RecordSet,
    config_path: str = "config.yaml",
    stem: str = "report",
) -> Path:
    """Render the deck and write it to the output directory.

    Args:
        records: Non-empty RecordSet.
        config_path: Path to configuration YAML.
        stem: Input file stem, substituted into the output filename.

    Returns:
        Path to the generated .pptx file.
    """
    cfg = load_config(config_path)
    output_dir = Path(cfg["paths"]["output_dir"])
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / cfg["paths"]["pptx_filename"].format(stem=stem)

    output_path.write_bytes(render_pptx_bytes(records, cfg))
    logger.info("Slide deck saved to %s", output_path)
    return output_path
