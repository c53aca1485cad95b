"""
loaders.py — Format detection and byte decoding.

Produces a DocumentPayload tagged with one of three kinds:

    text         — decoded plain text
    word         — word-processor document: full text plus table grids
                   (.docx via python-docx, or HTML from a docx conversion)
    spreadsheet  — 2-D cell grid of the first sheet (.xlsx via openpyxl,
                   .xls via xlrd, both through pandas)

The whole byte stream is read before any parsing starts. Unsupported types
raise InputRejected before anything is read; unreadable or corrupt streams
raise UnreadableInput / DecodeFailure.
"""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from docx import Document
from docx.table import Table
from docx.text.paragraph import Paragraph

from statusdeck.errors import DecodeFailure, InputRejected, UnreadableInput
from statusdeck.tokenizer import html_tables, html_to_text

logger = logging.getLogger(__name__)

TEXT = "text"
WORD = "word"
SPREADSHEET = "spreadsheet"

EXTENSION_KINDS = {
    ".txt": TEXT,
    ".docx": WORD,
    ".htm": WORD,
    ".html": WORD,
    ".xlsx": SPREADSHEET,
    ".xls": SPREADSHEET,
}

MIME_KINDS = {
    "text/plain": TEXT,
    "text/html": WORD,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": WORD,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": SPREADSHEET,
    "application/vnd.ms-excel": SPREADSHEET,
}

SUPPORTED_EXTENSIONS = tuple(EXTENSION_KINDS)


def _base_mime(content_type: Optional[str]) -> str:
    """MIME type without parameters, lower-cased ('text/html; charset=x' -> 'text/html')."""
    return (content_type or "").split(";")[0].strip().lower()


@dataclass(frozen=True)
class DocumentPayload:
    """Decoded document content handed to the extraction pipeline."""
    kind: str
    source_name: str
    text: str = ""
    grid: list = field(default_factory=list)
    tables: list = field(default_factory=list)


def detect_format(filename: str, content_type: Optional[str] = None) -> str:
    """Return the payload kind for a file name and optional MIME type.

    The extension decides; the MIME type is consulted only when the
    extension is missing or unknown.

    Args:
        filename: Original file name.
        content_type: Optional MIME type reported by the uploader.

    Returns:
        One of TEXT, WORD, SPREADSHEET.

    Raises:
        InputRejected: If neither hint names a supported type.
    """
    suffix = Path(filename or "").suffix.lower()
    if suffix in EXTENSION_KINDS:
        return EXTENSION_KINDS[suffix]

    mime = _base_mime(content_type)
    if mime in MIME_KINDS:
        return MIME_KINDS[mime]

    raise InputRejected(
        f"Unsupported file type: {suffix or mime or 'unknown'}. "
        f"Please upload a .docx, .xlsx, .xls or .txt file."
    )


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def _decode_text(data: bytes) -> str:
    # Undecodable bytes are replaced rather than rejected, as a browser
    # FileReader would.
    return data.decode("utf-8-sig", errors="replace")


def _is_html(filename: str, content_type: Optional[str]) -> bool:
    return (Path(filename or "").suffix.lower() in (".htm", ".html")
            or _base_mime(content_type) == "text/html")


def _decode_html(data: bytes, source_name: str) -> DocumentPayload:
    html = _decode_text(data)
    return DocumentPayload(
        kind=WORD,
        source_name=source_name,
        text=html_to_text(html),
        tables=html_tables(html),
    )


def _iter_block_items(doc):
    """Yield paragraphs and tables of a docx body in document order."""
    for child in doc.element.body.iterchildren():
        if child.tag.endswith("}p"):
            yield Paragraph(child, doc)
        elif child.tag.endswith("}tbl"):
            yield Table(child, doc)


def _decode_docx(data: bytes, source_name: str) -> DocumentPayload:
    try:
        doc = Document(io.BytesIO(data))
    except Exception as exc:
        raise DecodeFailure(f"Could not open {source_name} as a Word document: {exc}") from exc

    lines: list[str] = []
    tables: list[list[list[str]]] = []
    for block in _iter_block_items(doc):
        if isinstance(block, Paragraph):
            lines.append(block.text)
            continue
        grid = [[cell.text.strip() for cell in row.cells] for row in block.rows]
        tables.append(grid)
        lines.extend("\t".join(row) for row in grid)

    logger.debug("DOCX %s: %d text lines, %d tables", source_name, len(lines), len(tables))
    return DocumentPayload(kind=WORD, source_name=source_name, text="\n".join(lines), tables=tables)


def _decode_spreadsheet(data: bytes, source_name: str) -> DocumentPayload:
    try:
        df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object)
    except Exception as exc:
        raise DecodeFailure(f"Could not read {source_name} as a spreadsheet: {exc}") from exc

    df = df.astype(object).where(df.notna(), "")
    grid: list[list[Any]] = df.values.tolist()
    logger.debug("Spreadsheet %s: %d rows x %d columns", source_name, len(grid), df.shape[1])
    return DocumentPayload(kind=SPREADSHEET, source_name=source_name, grid=grid)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def load_bytes(
    data: bytes,
    filename: str,
    content_type: Optional[str] = None,
) -> DocumentPayload:
    """Decode an uploaded byte stream into a DocumentPayload.

    Args:
        data: Full file content.
        filename: Original file name (used for type detection and messages).
        content_type: Optional MIME type.

    Returns:
        DocumentPayload for the extraction pipeline.

    Raises:
        InputRejected: Unsupported file type.
        DecodeFailure: Corrupt or unconvertible content.
    """
    kind = detect_format(filename, content_type)
    source_name = Path(filename or "upload").name
    logger.info("Decoding %s as %s (%d bytes)", source_name, kind, len(data))

    if kind == TEXT:
        return DocumentPayload(kind=TEXT, source_name=source_name, text=_decode_text(data))
    if kind == SPREADSHEET:
        return _decode_spreadsheet(data, source_name)
    if _is_html(filename, content_type):
        return _decode_html(data, source_name)
    return _decode_docx(data, source_name)


def load_document(path: str | Path, content_type: Optional[str] = None) -> DocumentPayload:
    """Read a file from disk and decode it.

    Args:
        path: File path.
        content_type: Optional MIME type override.

    Returns:
        DocumentPayload for the extraction pipeline.

    Raises:
        InputRejected: Unsupported file type (checked before reading).
        UnreadableInput: The file cannot be read.
        DecodeFailure: Corrupt or unconvertible content.
    """
    path = Path(path)
    detect_format(path.name, content_type)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise UnreadableInput(f"Error reading file {path}: {exc}") from exc
    return load_bytes(data, path.name, content_type)
