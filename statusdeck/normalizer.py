"""
normalizer.py — Raw cells and columns to Record.

Three entry points, one per source shape:
    normalize_row       — spreadsheet row + ColumnMap (located, then positional, then sentinel)
    record_from_columns — strategy-chain columns (5+ direct, exactly 4 => no description)
    record_from_cells   — word-processor table row (positional cells 0-4)
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Optional, Sequence

from statusdeck.columns import ColumnMap, NOT_FOUND
from statusdeck.records import FIELD_NAMES, NO_DESCRIPTION, Record

logger = logging.getLogger(__name__)

MIN_COLUMNS = 4


def cell_text(value: Any) -> str:
    """Coerce a spreadsheet or table cell to trimmed text.

    Args:
        value: Raw cell value (str, number, datetime, None, NaN).

    Returns:
        Text form; empty string for missing values.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.strftime("%d/%m/%Y")
    return str(value).strip()


def is_empty_row(row: Sequence[Any]) -> bool:
    """True when every cell of the row is blank."""
    return all(cell_text(cell) == "" for cell in row)


def _cell(row: Sequence[Any], index: int) -> str:
    if index == NOT_FOUND or index < 0 or index >= len(row):
        return ""
    return cell_text(row[index])


def normalize_row(row: Sequence[Any], column_map: ColumnMap) -> Record:
    """Map a spreadsheet row onto a Record.

    A located column wins when its cell is non-empty; otherwise the cell at
    the field's own position is used; otherwise the sentinel default.

    Args:
        row: Data row cells.
        column_map: Header-derived index per field.

    Returns:
        Fully populated Record.
    """
    values = {}
    for position, (name, index) in enumerate(zip(FIELD_NAMES, column_map.indices())):
        values[name] = _cell(row, index) or _cell(row, position)
    return Record(**values)


def record_from_columns(columns: Sequence[str]) -> Optional[Record]:
    """Build a Record from strategy-chain columns.

    Args:
        columns: Columns produced by one delimiter strategy.

    Returns:
        Record, or None when fewer than four columns were found.
    """
    cols = [cell_text(c) for c in columns]
    if len(cols) >= 5:
        return Record(*cols[:5])
    if len(cols) == MIN_COLUMNS:
        # Four columns: the description is presumed absent, not blank.
        client, module, status, delivery = cols
        return Record(client, module, NO_DESCRIPTION, status, delivery)
    return None


def record_from_cells(cells: Sequence[Any]) -> Optional[Record]:
    """Build a Record from a word-processor table row.

    Args:
        cells: Cell texts of one table row (header row excluded by caller).

    Returns:
        Record, or None when client, module and description are all empty.
    """
    texts = [cell_text(c) for c in cells[:5]]
    texts += [""] * (5 - len(texts))
    if not any(texts[:3]):
        return None
    return Record(*texts)
