"""
records.py — Canonical Work Done record.

Every extraction path, whatever the input format, ends in a `RecordSet`:
an ordered tuple of `Record` instances. Order is display order and drives
the global row numbering used by every renderer.

Absence is never represented by None or an empty string. A field that
cannot be determined carries one of the sentinel defaults below.
"""

from dataclasses import dataclass, fields
from typing import Any

# ---------------------------------------------------------------------------
# Sentinel defaults
# ---------------------------------------------------------------------------

UNKNOWN = "Unknown"
NOT_AVAILABLE = "N/A"
NO_DESCRIPTION = "-"

FIELD_NAMES = (
    "client",
    "module",
    "description",
    "deployment_status",
    "delivery_date",
)

DEFAULTS = {
    "client": UNKNOWN,
    "module": UNKNOWN,
    "description": NOT_AVAILABLE,
    "deployment_status": NOT_AVAILABLE,
    "delivery_date": NOT_AVAILABLE,
}

# Wire keys used by the slide service and the HTTP API (tableData rows).
WIRE_KEYS = {
    "client": "client",
    "module": "module",
    "description": "description",
    "deployment_status": "deploymentStatus",
    "delivery_date": "deliveryDate",
}

COLUMN_TITLES = (
    "Client",
    "Module",
    "Description",
    "Deployment Status",
    "Date of Delivery",
)


@dataclass(frozen=True)
class Record:
    """One normalized status entry."""
    client: str = UNKNOWN
    module: str = UNKNOWN
    description: str = NOT_AVAILABLE
    deployment_status: str = NOT_AVAILABLE
    delivery_date: str = NOT_AVAILABLE

    def __post_init__(self):
        # Frozen dataclass: substitute sentinels through object.__setattr__.
        for f in fields(self):
            value = getattr(self, f.name)
            text = "" if value is None else str(value).strip()
            object.__setattr__(self, f.name, text or DEFAULTS[f.name])

    def as_row(self) -> list[str]:
        """Return the five field values in column order."""
        return [getattr(self, name) for name in FIELD_NAMES]

    def to_dict(self) -> dict[str, str]:
        """Return the camelCase wire representation."""
        return {WIRE_KEYS[name]: getattr(self, name) for name in FIELD_NAMES}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Record":
        """Build a Record from a wire dict (camelCase or snake_case keys).

        Args:
            data: Mapping with any subset of the five fields.

        Returns:
            Record with missing or empty values replaced by sentinels.
        """
        kwargs = {}
        for name in FIELD_NAMES:
            value = data.get(WIRE_KEYS[name], data.get(name))
            kwargs[name] = value
        return cls(**kwargs)


RecordSet = tuple[Record, ...]


def records_to_dicts(records: RecordSet) -> list[dict[str, str]]:
    """Serialise a RecordSet to the list-of-dicts wire form."""
    return [r.to_dict() for r in records]


def records_from_dicts(rows: list[dict[str, Any]]) -> RecordSet:
    """Build a RecordSet from wire dicts, skipping anything that is not a dict."""
    return tuple(Record.from_dict(row) for row in rows if isinstance(row, dict))
