"""
test_renderers.py — Tests for the deck, HTML, PDF and Excel outputs.

Tests cover:
    - Slide count and global row labels in the PowerPoint deck
    - One-table-per-row layout for long descriptions
    - HTML escaping and page labels
    - PDF page count and "n/total" labels, including overflowing rows
    - Plotly script embedding mode for the HTML chart
    - PDF and Excel files written to the configured output directory
"""

import io
import re
import sys
from pathlib import Path

import pytest
import yaml
from openpyxl import load_workbook
from pptx import Presentation
from pypdf import PdfReader

sys.path.insert(0, str(Path(__file__).parent.parent))

from statusdeck.config import load_config
from statusdeck.excel_export import SHEET_NAME, build_workbook, generate_excel
from statusdeck.html_report import generate_html, render_html
from statusdeck.pdf_deck import generate_pdf, render_pdf_bytes
from statusdeck.records import COLUMN_TITLES, Record
from statusdeck.slides import build_presentation, generate_pptx, render_pptx_bytes

CONFIG = str(Path(__file__).parent.parent / "config.yaml")
# "3/17" but not the "02/05" inside "02/05/2025"
PAGE_LABEL_RE = re.compile(r"(?<![\d/])\d+/\d+(?![\d/])")


@pytest.fixture
def cfg():
    return load_config(CONFIG)


@pytest.fixture
def records():
    return tuple(
        Record(f"C{i}", "Academic", f"Task {i}", "Live" if i % 2 else "UAT", "02/05/2025")
        for i in range(1, 18)
    )


@pytest.fixture
def tmp_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump({"paths": {"output_dir": str(tmp_path / "out")}}),
        encoding="utf-8",
    )
    return str(path)


def _pdf_page_labels(content: bytes) -> list[str]:
    """The single "n/total" label printed on each physical PDF page."""
    labels = []
    for page in PdfReader(io.BytesIO(content)).pages:
        found = PAGE_LABEL_RE.findall(page.extract_text())
        assert len(found) == 1, found
        labels.append(found[0])
    return labels


def _tables(slide):
    return [shape.table for shape in slide.shapes if shape.has_table]


class TestPowerPointDeck:
    """Tests for slides.py."""

    def test_slide_count(self, records, cfg):
        prs = build_presentation(records, cfg)
        assert len(prs.slides) == 3

    def test_header_and_global_row_labels(self, records, cfg):
        prs = build_presentation(records, cfg)
        table = _tables(prs.slides[1])[0]
        assert [table.cell(0, c).text for c in range(5)] == list(COLUMN_TITLES)
        assert table.cell(1, 0).text == "9. C9"
        assert table.cell(8, 0).text == "16. C16"

    def test_long_descriptions_get_one_table_per_row(self, cfg):
        recs = (Record("A", description="x" * 300), Record("B"), Record("C"))
        prs = build_presentation(recs, cfg)
        tables = _tables(prs.slides[0])
        assert len(tables) == 3
        assert [t.cell(1, 0).text for t in tables] == ["1. A", "2. B", "3. C"]

    def test_bytes_open_as_presentation(self, records, cfg):
        prs = Presentation(io.BytesIO(render_pptx_bytes(records, cfg)))
        assert len(prs.slides) == 3

    def test_empty_recordset_rejected(self, cfg):
        with pytest.raises(ValueError):
            build_presentation((), cfg)

    def test_generate_writes_file(self, records, tmp_config):
        path = generate_pptx(records, tmp_config, "weekly")
        assert path.name == "WorkDoneStatus_weekly.pptx"
        assert path.exists()


class TestHtmlReport:
    """Tests for html_report.py."""

    def test_page_labels_and_row_labels(self, records, cfg):
        html = render_html(records, cfg, include_chart=False)
        assert html.count('class="slide"') == 3
        for label in ("1/3", "2/3", "3/3"):
            assert f'<div class="page-number">{label}</div>' in html
        assert "<td>17. C17</td>" in html

    def test_cells_are_escaped(self, cfg):
        html = render_html((Record("<b>X</b>", description="a & b"),), cfg, include_chart=False)
        assert "&lt;b&gt;X&lt;/b&gt;" in html
        assert "a &amp; b" in html
        assert "<b>X</b>" not in html

    def test_chart_slide_included(self, records, cfg):
        html = render_html(records, cfg)
        assert html.count('class="slide"') == 4
        assert "plotly" in html.lower()

    def test_chart_script_from_cdn_by_default(self, records, cfg):
        assert 'src="https://cdn.plot.ly' in render_html(records, cfg)

    def test_chart_script_inline_when_configured(self, records, cfg):
        cfg["report"]["plotlyjs"] = "inline"
        html = render_html(records, cfg)
        assert 'src="https://cdn.plot.ly' not in html
        assert len(html) > 1_000_000

    def test_generate_writes_file(self, records, tmp_config):
        path = generate_html(records, tmp_config, "weekly")
        assert path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


class TestPdfDeck:
    """Tests for pdf_deck.py."""

    def test_pdf_bytes(self, records, cfg):
        assert render_pdf_bytes(records, cfg).startswith(b"%PDF")

    def test_one_page_per_slide_with_labels(self, records, cfg):
        labels = _pdf_page_labels(render_pdf_bytes(records, cfg))
        assert labels == ["1/3", "2/3", "3/3"]

    def test_overflowing_rows_relabel_physical_pages(self, cfg):
        # Eight wrapped 400-character descriptions cannot fit one 5.2 in frame
        recs = tuple(
            Record(f"C{i}", "Academic", ("word " * 80).strip(), "Live", "02/05/2025")
            for i in range(1, 9)
        )
        labels = _pdf_page_labels(render_pdf_bytes(recs, cfg))
        total = len(labels)
        assert total > 1
        assert labels == [f"{n}/{total}" for n in range(1, total + 1)]

    def test_empty_recordset_rejected(self, cfg):
        with pytest.raises(ValueError):
            render_pdf_bytes((), cfg)

    def test_generate_writes_file(self, records, tmp_config):
        path = generate_pdf(records, tmp_config, "weekly")
        assert path.suffix == ".pdf"
        assert path.stat().st_size > 0


class TestExcelExport:
    """Tests for excel_export.py."""

    def test_sheet_layout(self, records, cfg):
        ws = build_workbook(records, cfg)[SHEET_NAME]
        assert [c.value for c in ws[1]] == list(COLUMN_TITLES)
        assert ws["A2"].value == "1. C1"
        assert ws.max_row == len(records) + 1
        assert ws.freeze_panes == "A2"

    def test_generate_writes_file(self, records, tmp_config):
        path = generate_excel(records, tmp_config, "weekly")
        ws = load_workbook(path).active
        assert ws["E18"].value == "02/05/2025"
