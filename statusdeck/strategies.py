"""
strategies.py — Delimiter-strategy chain for text lines.

Each strategy is a pure function `line -> columns`. The chain tries them in
priority order and keeps the first result with at least four columns:

    1. bracket_arrow_pipe  — "[PU]-HOSTEL->[10399] || Hostel || Issue ...   Live"
    2. tab_delimited       — "SNU<TAB>Academic<TAB>..."
    3. multi_space         — "SNU   Academic   Live   02/05/2025"
    4. numbered_entry      — "1. SNU   Academic ..."

Word-processor documents get two further, looser passes used only when the
chain finds nothing: a bracket-line scanner and a section-heading scanner.
Neither raises; a line that matches nothing contributes nothing.
"""

import logging
import re
from typing import Callable, Optional, Sequence

from statusdeck.normalizer import MIN_COLUMNS, record_from_columns
from statusdeck.records import NOT_AVAILABLE, Record, UNKNOWN

logger = logging.getLogger(__name__)

Strategy = Callable[[str], list[str]]

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

STATUS_TOKENS = ("Live", "UAT", "Testing", "Dev")
_STATUS_ALT = "|".join(STATUS_TOKENS)

_ARROW_CLIENT_RE = re.compile(r"(\[[^\]]+?\]-.+?)(?=->)")
_STATUS_AFTER_GAP_RE = re.compile(rf"^(.+?)\s{{2,}}({_STATUS_ALT})\s*$", re.IGNORECASE)
_STATUS_AT_END_RE = re.compile(rf"\b({_STATUS_ALT})\s*$", re.IGNORECASE)
_MULTI_SPACE_RE = re.compile(r"\s{2,}")
_NUMBERED_RE = re.compile(r"^\d+\.\s(.+?)(?=\s{2,}|$)")

_BRACKET_RE = re.compile(r"\[(.*?)\]")
_BRACKET_DASH_RE = re.compile(r"\[(.*?)\]-(.*?)(?=-|\||$)")
_LOOSE_STATUS_RE = re.compile(r"^(.*)\s{2,}(Live|LIVE|UAT|Dev|DEV)\s*$")
_DATE_RE = re.compile(r"(\d{2}/\d{2}/\d{4})")
_NEXT_HEADING_RE = re.compile(r"\n\s*[A-Z][a-zA-Z\s]*:[\s\n]*")

SECTION_WINDOW = 500


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def bracket_arrow_pipe(line: str) -> list[str]:
    """Split "[code]-sub->[id] || module || description   Status" lines.

    Args:
        line: Trimmed input line.

    Returns:
        [client, module, description, status, date] or [] when the line does
        not have this shape.
    """
    if "->[" not in line or "||" not in line:
        return []

    match = _ARROW_CLIENT_RE.search(line)
    client = match.group(1).strip() if match else line.split("->[")[0].strip()

    parts = [part.strip() for part in line.split("||")]
    if len(parts) < 3:
        return []

    module = parts[1]
    description = parts[2]
    status = ""
    last = parts[-1]

    gap_match = _STATUS_AFTER_GAP_RE.match(last)
    if gap_match:
        status = gap_match.group(2)
        if len(parts) == 3:
            description = gap_match.group(1).strip()
    else:
        end_match = _STATUS_AT_END_RE.search(last)
        if end_match:
            status = end_match.group(1)
            description = last[:end_match.start()].strip()

    return [client, module, description, status, ""]


def tab_delimited(line: str) -> list[str]:
    """Split on tab characters, dropping empty segments."""
    return [col.strip() for col in line.split("\t") if col.strip()]


def multi_space(line: str) -> list[str]:
    """Split on runs of two or more whitespace characters."""
    return [col.strip() for col in _MULTI_SPACE_RE.split(line) if col.strip()]


def numbered_entry(line: str) -> list[str]:
    """Split "1. Client   Module   ..." lines, dropping the number."""
    match = _NUMBERED_RE.match(line)
    if not match or not match.group(1).strip():
        return []
    remainder = line[match.end():]
    return [match.group(1).strip()] + multi_space(remainder)


# multi_space sees numbered lines first, so "1. SNU  Academic  ..." keeps
# "1. SNU" as its client; numbered_entry never finds columns multi_space missed.
STRATEGY_CHAIN: tuple[tuple[str, Strategy], ...] = (
    ("bracket_arrow_pipe", bracket_arrow_pipe),
    ("tab_delimited", tab_delimited),
    ("multi_space", multi_space),
    ("numbered_entry", numbered_entry),
)


def split_line(line: str) -> list[str]:
    """Run the strategy chain over one line.

    Args:
        line: Trimmed, non-blank line.

    Returns:
        Columns from the first strategy yielding at least four, else the
        (short) columns of the last strategy tried.
    """
    columns: list[str] = []
    for name, strategy in STRATEGY_CHAIN:
        columns = strategy(line)
        if len(columns) >= MIN_COLUMNS:
            logger.debug("Strategy %s -> %d columns", name, len(columns))
            return columns
    return columns


def record_from_line(line: str) -> Optional[Record]:
    """Return the Record encoded by a line, or None for non-data lines."""
    return record_from_columns(split_line(line))


def records_from_lines(lines: Sequence[str]) -> list[Record]:
    """Apply the strategy chain to every line, keeping data lines only."""
    records = []
    for line in lines:
        record = record_from_line(line)
        if record is not None:
            records.append(record)
    logger.debug("Strategy chain: %d of %d lines yielded records", len(records), len(lines))
    return records


# ---------------------------------------------------------------------------
# Loose passes (word-processor text only)
# ---------------------------------------------------------------------------

def _guess(line: str, hints: Sequence[str]) -> str:
    for hint in hints:
        if hint in line:
            return hint
    return ""


def _guess_status(line: str) -> str:
    if "Live" in line or "LIVE" in line:
        return "Live"
    if "UAT" in line:
        return "UAT"
    if "Dev" in line or "DEV" in line:
        return "Dev"
    return ""


def loose_bracket_line(line: str, module_hints: Sequence[str] = ()) -> Optional[Record]:
    """Best-effort parse of a line with a [code] marker or || separators.

    Args:
        line: Trimmed line of word-processor text.
        module_hints: Module names to look for when no || column gave one.

    Returns:
        Record when a client or module could be found, else None.
    """
    if not _BRACKET_RE.search(line) and "||" not in line:
        return None

    client = module = description = status = ""

    bracket = _BRACKET_RE.search(line)
    if bracket:
        extended = _BRACKET_DASH_RE.search(line)
        if extended:
            client = f"[{extended.group(1)}]-{extended.group(2).strip()}"
        else:
            client = bracket.group(0)

    if "||" in line:
        parts = [part.strip() for part in line.split("||")]
        if not client:
            client = parts[0]
        if len(parts) >= 2:
            module = parts[1]
        if len(parts) >= 3:
            description = parts[2]

        status_match = _LOOSE_STATUS_RE.match(parts[-1])
        if status_match:
            if len(parts) <= 3 or not description:
                description = status_match.group(1).strip()
            status = status_match.group(2)

    module = module or _guess(line, module_hints)
    status = status or _guess_status(line)
    date_match = _DATE_RE.search(line)
    delivery = date_match.group(1) if date_match else NOT_AVAILABLE

    if not client and not module:
        return None
    return Record(client, module, description, status, delivery)


def loose_bracket_records(lines: Sequence[str], module_hints: Sequence[str] = ()) -> list[Record]:
    """Apply loose_bracket_line to every line."""
    records = []
    for line in lines:
        record = loose_bracket_line(line, module_hints)
        if record is not None:
            records.append(record)
    return records


_SECTION_FIELDS = {
    "client": "client",
    "module": "module",
    "task": "description",
    "status": "deployment_status",
}


def _section_field(section: str) -> Optional[str]:
    lowered = section.lower()
    for keyword, field_name in _SECTION_FIELDS.items():
        if keyword in lowered:
            return field_name
    return None


def section_records(text: str, section_keywords: Sequence[str]) -> list[Record]:
    """Scan text after section headings ("Client:", "Tasks:", ...).

    Each qualifying line under a heading becomes a Record with only the
    heading's field set. Headings with no field mapping contribute nothing.

    Args:
        text: Full document text.
        section_keywords: Heading words to look for, in order.

    Returns:
        Records found, possibly empty.
    """
    records = []
    for section in section_keywords:
        field_name = _section_field(section)
        heading = re.search(rf"{re.escape(section)}[\s:]*", text, re.IGNORECASE)
        if not heading or field_name is None:
            continue
        start = heading.end()
        following = _NEXT_HEADING_RE.search(text[start:])
        end = start + following.start() if following else start + SECTION_WINDOW
        body = text[start:end].strip()
        logger.debug("Section %r: %d chars", section, len(body))

        for line in body.splitlines():
            line = line.strip()
            if not line:
                continue
            if _BRACKET_RE.search(line) or ":" in line or "-" in line:
                record = Record(**{field_name: line})
                if (record.client != UNKNOWN or record.module != UNKNOWN
                        or record.description != NOT_AVAILABLE):
                    records.append(record)
    return records
