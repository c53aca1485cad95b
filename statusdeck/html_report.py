"""
html_report.py — Standalone HTML Work Done report.

Produces a single HTML file that mirrors the slide deck: one
1024 x 768 "slide" per page of records, each with the title, brand block,
numbered table, footer and page label. A closing summary slide carries a
Plotly donut chart of records per deployment status.

All cell content is HTML-escaped. Prints one slide per page.

The tables need nothing external. The chart loads plotly.js from the CDN
by default, so it only draws with network access; set report.plotlyjs to
"inline" in config.yaml to embed the library and make the file fully
self-contained.
"""

import html
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any

import plotly.graph_objects as go

from statusdeck.config import load_config
from statusdeck.pagination import Page, paginate, row_label
from statusdeck.records import COLUMN_TITLES, RecordSet

logger = logging.getLogger(__name__)

TEMPLATE = "plotly_white"


def _hex(h: str) -> str:
    """Ensure hex colour has # prefix."""
    return f"#{h.lstrip('#')}"


def _chart_status_breakdown(records: RecordSet, brand: dict) -> go.Figure:
    """Donut chart: number of records per deployment status."""
    counts = Counter(r.deployment_status for r in records)
    labels = list(counts.keys())
    values = [counts[label] for label in labels]

    fig = go.Figure(go.Pie(
        labels=labels,
        values=values,
        hole=0.45,
        sort=False,
        textinfo="label+value",
        hovertemplate="Status: %{label}<br>Rows: %{value}<extra></extra>",
    ))
    fig.update_layout(
        title=dict(text="Rows by Deployment Status",
                   font=dict(size=18, color=_hex(brand["title"]))),
        template=TEMPLATE,
        height=520,
        margin=dict(l=40, r=40, t=80, b=40),
        legend=dict(orientation="h", y=-0.05),
    )
    return fig


def _plotlyjs_mode(report: dict):
    """Map report.plotlyjs ("cdn" or "inline") to Plotly's include_plotlyjs."""
    mode = str(report.get("plotlyjs", "cdn")).lower()
    if mode == "inline":
        return True
    if mode != "cdn":
        logger.warning("Unknown report.plotlyjs %r -- using cdn", mode)
    return "cdn"


def _slide_header(report: dict) -> str:
    return f"""
        <div class="header">
            <h1 class="title">{html.escape(report['title'])}</h1>
            <div class="logo">
                <div class="logo-title">{html.escape(report['organisation'])}</div>
                <div class="logo-subtitle">{html.escape(report['tagline'])}</div>
            </div>
        </div>"""


def _slide_footer(report: dict, label: str) -> str:
    return f"""
        <div class="footer">{html.escape(report['footer'])}</div>
        <div class="page-number">{label}</div>"""


def _render_page(page: Page, report: dict) -> str:
    head = "".join(f"<th>{html.escape(t)}</th>" for t in COLUMN_TITLES)
    body = ""
    for number, record in page.entries:
        cells = record.as_row()
        cells[0] = row_label(number, record)
        body += "<tr>" + "".join(f"<td>{html.escape(c)}</td>" for c in cells) + "</tr>\n"

    return f"""
    <div class="slide">{_slide_header(report)}
        <table>
            <thead><tr>{head}</tr></thead>
            <tbody>
{body}            </tbody>
        </table>{_slide_footer(report, page.label)}
    </div>"""


def _stylesheet(brand: dict) -> str:
    return f"""
        body{{font-family:Arial,sans-serif;margin:0;padding:0;background:{_hex(brand['background'])};}}
        .slide{{width:1024px;height:768px;position:relative;margin:0 auto;padding:40px;
                overflow:hidden;box-sizing:border-box;}}
        .header{{display:flex;justify-content:space-between;margin-bottom:30px;}}
        .title{{color:{_hex(brand['title'])};font-size:36px;font-weight:bold;text-align:left;}}
        .logo{{text-align:right;}}
        .logo-title{{color:{_hex(brand['logo'])};font-size:24px;font-weight:bold;}}
        .logo-subtitle{{color:{_hex(brand['muted'])};font-style:italic;font-size:16px;}}
        table{{width:100%;border-collapse:collapse;margin-bottom:30px;}}
        th,td{{border:1px solid {_hex(brand['border'])};padding:10px;text-align:left;}}
        th{{background-color:{_hex(brand['header_fill'])};font-weight:bold;}}
        .footer{{position:absolute;bottom:20px;left:0;width:100%;text-align:center;
                 color:{_hex(brand['muted'])};font-size:14px;}}
        .page-number{{position:absolute;bottom:20px;right:20px;color:{_hex(brand['muted'])};font-size:18px;}}
        @media print{{.slide{{page-break-after:always;}}}}"""


def render_html(records: RecordSet, cfg: dict[str, Any], include_chart: bool = True) -> str:
    """Render the full HTML document.

    Args:
        records: Non-empty RecordSet.
        cfg: Full configuration dict.
        include_chart: Append the deployment-status summary slide.

    Returns:
        HTML string.
    """
    if not records:
        raise ValueError("No data to generate HTML file")

    report = cfg["report"]
    brand = report["brand"]
    pages = paginate(records, cfg["pagination"]["rows_per_slide"])
    slides = "".join(_render_page(page, report) for page in pages)

    summary = ""
    if include_chart:
        chart = _chart_status_breakdown(records, brand).to_html(
            include_plotlyjs=_plotlyjs_mode(report), full_html=False,
        )
        summary = f"""
    <div class="slide">{_slide_header(report)}
        {chart}{_slide_footer(report, f"{len(records)} rows")}
    </div>"""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{html.escape(report['title'])}</title>
    <style>{_stylesheet(brand)}
    </style>
</head>
<body>{slides}{summary}
    <!-- Generated {datetime.today().strftime('%Y-%m-%d %H:%M')} -->
</body>
</html>"""


def generate_html(
    records: RecordSet,
    config_path: str = "config.yaml",
    stem: str = "report",
) -> Path:
    """Render the HTML report and write it to the output directory.

    Args:
        records: Non-empty RecordSet.
        config_path: Path to configuration YAML.
        stem: Input file stem, substituted into the output filename.

    Returns:
        Path to the generated .html file.
    """
    cfg = load_config(config_path)
    output_dir = Path(cfg["paths"]["output_dir"])
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / cfg["paths"]["html_filename"].format(stem=stem)

    output_path.write_text(render_html(records, cfg), encoding="utf-8")
    logger.info("HTML report saved to %s", output_path)
    return output_path
