"""
pdf_deck.py — Printable PDF version of the slide deck.

Uses ReportLab (platypus) on a 10 x 7.5 in page so each PDF page lines up
with one slide of the PowerPoint deck. The title, brand block, footer and
page label are drawn on the canvas; the numbered table is a flowable with
wrapped Paragraph cells so long descriptions grow the row instead of
overflowing it. As in the slide deck, a page holding a description longer
than max_chars_per_cell gets one table per row; tables that still outgrow
the frame continue on the next physical page, and the page label counts
physical pages.
"""

import io
import logging
from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    PageBreak,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)

from statusdeck.config import load_config
from statusdeck.pagination import Page, paginate, row_label
from statusdeck.records import COLUMN_TITLES, RecordSet

logger = logging.getLogger(__name__)

PAGE_W, PAGE_H = 10 * inch, 7.5 * inch
MARGIN = 0.5 * inch
CONTENT_W = PAGE_W - 2 * MARGIN
COL_WIDTHS = [w * inch for w in (1.3, 1.2, 4.0, 1.5, 1.0)]
ROW_GAP = 0.15 * inch


def _hex(h: str):
    """Convert a hex colour string to ReportLab Color."""
    h = h.lstrip("#")
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    return colors.Color(r / 255, g / 255, b / 255)


def _build_styles() -> dict[str, ParagraphStyle]:
    styles = {}
    styles["cell"] = ParagraphStyle(
        "cell",
        fontName="Helvetica",
        fontSize=10,
        leading=12,
        alignment=TA_LEFT,
    )
    styles["header"] = ParagraphStyle(
        "header",
        fontName="Helvetica-Bold",
        fontSize=10,
        leading=12,
        alignment=TA_CENTER,
    )
    return styles


class _SlideChrome:
    """Draws title, brand block, footer and page label on every page."""

    def __init__(self, report: dict, total_pages: int):
        self.report = report
        self.brand = report["brand"]
        self.total_pages = total_pages

    def draw(self, canvas, doc):
        brand = self.brand
        canvas.saveState()

        canvas.setFont("Helvetica-Bold", 30)
        canvas.setFillColor(_hex(brand["title"]))
        canvas.drawString(MARGIN, PAGE_H - 1.0 * inch, self.report["title"])

        canvas.setFont("Helvetica-Bold", 20)
        canvas.setFillColor(_hex(brand["logo"]))
        canvas.drawRightString(PAGE_W - MARGIN, PAGE_H - 0.85 * inch, self.report["organisation"])
        canvas.setFont("Helvetica-Oblique", 12)
        canvas.setFillColor(_hex(brand["muted"]))
        canvas.drawRightString(PAGE_W - MARGIN, PAGE_H - 1.15 * inch, self.report["tagline"])

        canvas.setFont("Helvetica", 9)
        canvas.drawCentredString(PAGE_W / 2, 0.45 * inch, self.report["footer"])
        canvas.drawRightString(PAGE_W - MARGIN, 0.45 * inch, f"{doc.page}/{self.total_pages}")
        canvas.restoreState()


def _build_table(entries, styles: dict, brand: dict) -> Table:
    data = [[Paragraph(escape(t), styles["header"]) for t in COLUMN_TITLES]]
    for number, record in entries:
        cells = record.as_row()
        cells[0] = row_label(number, record)
        data.append([Paragraph(escape(c), styles["cell"]) for c in cells])

    table = Table(data, colWidths=COL_WIDTHS, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), _hex(brand["header_fill"])),
        ("BACKGROUND", (0, 1), (-1, -1), _hex(brand["background"])),
        ("GRID", (0, 0), (-1, -1), 0.75, _hex(brand["border"])),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ("LEFTPADDING", (0, 0), (-1, -1), 5),
    ]))
    return table


def _page_flowables(page: Page, styles: dict, brand: dict, max_chars: int) -> list:
    """Flowables for one slide; long descriptions get one table per row."""
    if not page.has_long_description(max_chars):
        return [_build_table(page.entries, styles, brand)]
    flowables = []
    for entry in page.entries:
        if flowables:
            flowables.append(Spacer(1, ROW_GAP))
        flowables.append(_build_table((entry,), styles, brand))
    return flowables


def _build_document(pages: list[Page], report: dict, max_chars: int,
                    total_pages: int) -> tuple[bytes, int]:
    """Build once, returning the PDF bytes and the physical page count."""
    styles = _build_styles()
    chrome = _SlideChrome(report, total_pages)

    buf = io.BytesIO()
    doc = BaseDocTemplate(
        buf,
        pagesize=(PAGE_W, PAGE_H),
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        title=report["title"],
    )
    frame = Frame(MARGIN, 0.8 * inch, CONTENT_W, PAGE_H - 2.3 * inch)
    doc.addPageTemplates([PageTemplate(id="Slide", frames=[frame], onPage=chrome.draw)])

    story = []
    for page in pages:
        story.extend(_page_flowables(page, styles, report["brand"], max_chars))
        if page.number < page.total:
            story.append(PageBreak())

    doc.build(story)
    return buf.getvalue(), doc.page


def render_pdf_bytes(records: RecordSet, cfg: dict[str, Any]) -> bytes:
    """Render the PDF deck to bytes.

    Tables that outgrow the frame continue on extra physical pages, so the
    "n/total" label counts physical pages. When the first build shows more
    pages than slides, the document is built again with the real total.

    Args:
        records: Non-empty RecordSet.
        cfg: Full configuration dict.

    Returns:
        PDF file content.
    """
    if not records:
        raise ValueError("No data to generate PDF file")

    report = cfg["report"]
    pag = cfg["pagination"]
    pages = paginate(records, pag["rows_per_slide"])
    max_chars = pag["max_chars_per_cell"]

    content, physical = _build_document(pages, report, max_chars, len(pages))
    if physical != len(pages):
        logger.debug("PDF spans %d pages for %d slides -- relabelling", physical, len(pages))
        content, _ = _build_document(pages, report, max_chars, physical)
    return content


def generate_pdf(
    records: RecordSet,
    config_path: str = "config.yaml",
    stem: str = "report",
) -> Path:
    """Render the PDF deck and write it to the output directory.

    Args:
        records: Non-empty RecordSet.
        config_path: Path to configuration YAML.
        stem: Input file stem, substituted into the output filename.

    Returns:
        Path to the generated .pdf file.
    """
    cfg = load_config(config_path)
    output_dir = Path(cfg["paths"]["output_dir"])
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / cfg["paths"]["pdf_filename"].format(stem=stem)

    output_path.write_bytes(render_pdf_bytes(records, cfg))
    logger.info("PDF deck saved to %s", output_path)
    return output_path
