"""
tokenizer.py — Line splitting and markup stripping.

Turns decoded document content into the ordered, blank-free line sequence
the strategy chain consumes. HTML from a word-processor conversion is
reduced to text (one line per block element) or walked as table grids.
"""

import logging

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_BLOCK_TAGS = ["p", "li", "tr", "h1", "h2", "h3", "h4", "h5", "h6", "div", "table"]


def split_lines(text: str) -> list[str]:
    """Split text into trimmed, non-blank lines.

    Args:
        text: Decoded document content.

    Returns:
        Lines in document order.
    """
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def html_to_text(html: str) -> str:
    """Strip markup, keeping one line per block-level element.

    Args:
        html: HTML produced by a word-processor conversion.

    Returns:
        Plain text with newline-separated blocks.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_after("\n")
    # Table cells stay on one line, separated by tabs, so a row survives as a
    # tab-delimited line.
    for cell in soup.find_all(["td", "th"]):
        cell.insert_after("\t")
    return soup.get_text()


def html_tables(html: str) -> list[list[list[str]]]:
    """Return the data-cell grid of every table in the HTML.

    Only <td> cells are collected; header rows made of <th> cells come back
    as empty rows, which the table walker skips.

    Args:
        html: HTML produced by a word-processor conversion.

    Returns:
        One grid per table: rows of cell text.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    tables = []
    for table in soup.find_all("table"):
        grid = []
        for tr in table.find_all("tr"):
            grid.append([td.get_text(" ", strip=True) for td in tr.find_all("td")])
        tables.append(grid)
    logger.debug("Found %d table(s) in HTML", len(tables))
    return tables
