"""
pagination.py — Split a RecordSet into slides.

Row numbers are global: row label = index in the full RecordSet + 1, no
matter how the records are partitioned into pages.
"""

import math
from dataclasses import dataclass

from statusdeck.records import Record, RecordSet


@dataclass(frozen=True)
class Page:
    """One slide's worth of records."""
    number: int                       # 1-based
    total: int
    entries: tuple[tuple[int, Record], ...]   # (global row number, record)

    @property
    def label(self) -> str:
        return f"{self.number}/{self.total}"

    def has_long_description(self, max_chars: int) -> bool:
        return any(len(r.description) > max_chars for _, r in self.entries)


def row_label(number: int, record: Record) -> str:
    """First-column text of a rendered row, e.g. '3. SNU'."""
    return f"{number}. {record.client}"


def paginate(records: RecordSet, rows_per_page: int = 8) -> list[Page]:
    """Partition records into pages of at most rows_per_page.

    Args:
        records: Ordered RecordSet.
        rows_per_page: Maximum rows per slide (must be positive).

    Returns:
        Pages in order; empty list for an empty RecordSet.
    """
    if rows_per_page < 1:
        raise ValueError("rows_per_page must be at least 1")
    total = math.ceil(len(records) / rows_per_page)
    pages = []
    for index in range(total):
        start = index * rows_per_page
        chunk = records[start:start + rows_per_page]
        entries = tuple((start + offset + 1, record) for offset, record in enumerate(chunk))
        pages.append(Page(number=index + 1, total=total, entries=entries))
    return pages
