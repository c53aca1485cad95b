"""
extraction.py — Document-to-RecordSet pipeline.

One entry point per payload kind, each ending in the same fallback:

    spreadsheet  header column location -> row normalization
    text         line split -> delimiter-strategy chain
    word         table walk -> strategy chain on text -> loose bracket lines
                 -> section headings

    then (text/word only) known-pattern recognizer, then universal record.

The result is an immutable tuple and is never empty for a payload that
reached the pipeline. Structural problems never raise.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from statusdeck.columns import locate_columns
from statusdeck.config import DEFAULT_CONFIG, load_config
from statusdeck.fallback import KnownPatternRecognizer, universal_fallback
from statusdeck.loaders import (
    DocumentPayload, SPREADSHEET, TEXT, WORD, load_document,
)
from statusdeck.normalizer import is_empty_row, normalize_row, record_from_cells
from statusdeck.records import Record, RecordSet
from statusdeck.strategies import loose_bracket_records, records_from_lines, section_records
from statusdeck.tokenizer import split_lines

logger = logging.getLogger(__name__)

MIN_TABLE_CELLS = 3


# ---------------------------------------------------------------------------
# Per-format paths
# ---------------------------------------------------------------------------

def extract_spreadsheet(grid: Sequence[Sequence[Any]]) -> list[Record]:
    """Normalize every non-empty data row below the header row.

    Args:
        grid: Cell grid of the first sheet, header row first.

    Returns:
        Records in row order (possibly empty).
    """
    if not grid:
        return []
    column_map = locate_columns(list(grid[0]))
    records = [
        normalize_row(row, column_map)
        for row in grid[1:]
        if len(row) and not is_empty_row(row)
    ]
    logger.info("Spreadsheet: %d data row(s) of %d", len(records), max(len(grid) - 1, 0))
    return records


def extract_text(text: str) -> list[Record]:
    """Run the delimiter-strategy chain over every line of the text."""
    lines = split_lines(text)
    logger.info("Text: %d non-blank line(s)", len(lines))
    return records_from_lines(lines)


def extract_tables(tables: Sequence[Sequence[Sequence[str]]]) -> list[Record]:
    """Walk word-processor tables row by row, skipping each header row.

    Args:
        tables: Cell-text grids, one per table.

    Returns:
        Records from rows with at least three cells and some content.
    """
    records = []
    for number, table in enumerate(tables, start=1):
        if len(table) < 2:
            continue
        for row in table[1:]:
            if len(row) < MIN_TABLE_CELLS:
                continue
            record = record_from_cells(row)
            if record is not None:
                records.append(record)
        logger.debug("Table %d: %d row(s)", number, len(table))
    return records


def extract_word(payload: DocumentPayload, cfg: dict[str, Any]) -> list[Record]:
    """Extract from a word-processor payload, tables first."""
    records = extract_tables(payload.tables)
    if records:
        logger.info("Word: %d record(s) from %d table(s)", len(records), len(payload.tables))
        return records

    lines = split_lines(payload.text)
    records = records_from_lines(lines)
    if records:
        logger.info("Word: %d record(s) from delimited text", len(records))
        return records

    extraction_cfg = cfg.get("extraction", {})
    records = loose_bracket_records(lines, extraction_cfg.get("module_hints", ()))
    if records:
        logger.info("Word: %d record(s) from bracket-coded lines", len(records))
        return records

    records = section_records(payload.text, extraction_cfg.get("section_keywords", ()))
    if records:
        logger.info("Word: %d record(s) from section headings", len(records))
    return records


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def extract_records(
    payload: DocumentPayload,
    cfg: Optional[dict[str, Any]] = None,
    recognizer: Optional[KnownPatternRecognizer] = None,
) -> RecordSet:
    """Turn a decoded payload into a non-empty RecordSet.

    Args:
        payload: Decoded document.
        cfg: Configuration dict (defaults when omitted).
        recognizer: Known-pattern recognizer; built from cfg when omitted.

    Returns:
        Ordered tuple of Records, length >= 1.
    """
    cfg = cfg or DEFAULT_CONFIG
    if recognizer is None:
        recognizer = KnownPatternRecognizer.from_config(cfg)

    if payload.kind == SPREADSHEET:
        records = extract_spreadsheet(payload.grid)
    elif payload.kind == TEXT:
        records = extract_text(payload.text)
    elif payload.kind == WORD:
        records = extract_word(payload, cfg)
    else:
        raise ValueError(f"Unknown payload kind: {payload.kind!r}")

    if not records and payload.kind in (TEXT, WORD):
        records = recognizer.recognize(payload.text)
    if not records:
        records = [universal_fallback(payload.source_name)]

    logger.info("Extracted %d record(s) from %s", len(records), payload.source_name)
    return tuple(records)


def extract_file(
    path: str | Path,
    config_path: str = "config.yaml",
    content_type: Optional[str] = None,
) -> RecordSet:
    """Read, decode and extract a document from disk.

    Args:
        path: Input document.
        config_path: Path to configuration YAML.
        content_type: Optional MIME type override.

    Returns:
        Non-empty RecordSet.

    Raises:
        InputRejected: Unsupported file type.
        UnreadableInput: File cannot be read.
        DecodeFailure: Corrupt content.
    """
    cfg = load_config(config_path)
    payload = load_document(path, content_type)
    return extract_records(payload, cfg)
