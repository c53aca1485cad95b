"""
columns.py — Spreadsheet column locator.

Fuzzy-matches the header row of a sheet against the five Record fields by
case-insensitive substring search. The first matching header, scanning left
to right, wins. Fields with no matching header get NOT_FOUND and are filled
positionally by the normalizer.
"""

import logging
from dataclasses import astuple, dataclass
from typing import Any, Sequence

logger = logging.getLogger(__name__)

NOT_FOUND = -1

FIELD_KEYWORDS: dict[str, tuple[str, ...]] = {
    "client": ("client",),
    "module": ("module",),
    "description": ("description", "task"),
    "deployment_status": ("status", "deployment"),
    "delivery_date": ("date", "delivery"),
}


@dataclass(frozen=True)
class ColumnMap:
    """Resolved header index per Record field (NOT_FOUND when absent)."""
    client: int = NOT_FOUND
    module: int = NOT_FOUND
    description: int = NOT_FOUND
    deployment_status: int = NOT_FOUND
    delivery_date: int = NOT_FOUND

    @property
    def is_empty(self) -> bool:
        return all(index == NOT_FOUND for index in astuple(self))

    def indices(self) -> tuple[int, ...]:
        return astuple(self)


def _find_header(headers: Sequence[Any], keywords: tuple[str, ...]) -> int:
    for index, header in enumerate(headers):
        if header is None:
            continue
        text = str(header).lower()
        if any(kw in text for kw in keywords):
            return index
    return NOT_FOUND


def locate_columns(headers: Sequence[Any]) -> ColumnMap:
    """Resolve the column index of each Record field from a header row.

    Args:
        headers: First row of the sheet, any cell type.

    Returns:
        ColumnMap with one index per field.
    """
    mapping = ColumnMap(**{
        name: _find_header(headers, keywords)
        for name, keywords in FIELD_KEYWORDS.items()
    })
    if mapping.is_empty and len(headers) >= 5:
        logger.info("No recognised headers -- using the first 5 columns positionally")
    logger.debug("Column indices: %s", mapping)
    return mapping
