"""
Record normalization.

Turns raw tabular rows from the usage logs and the cumulative snapshot
sheet into typed EventRecord and SnapshotRecord values. Malformed rows are
dropped, never raised on.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ai_usage_recon.core.parsing import (
    parse_currency,
    parse_int,
    parse_number,
    parse_snapshot_date,
    parse_timestamp,
)
from ai_usage_recon.storage.models import EventRecord, SnapshotRecord

logger = logging.getLogger(__name__)

__all__ = [
    "EventLayout",
    "SnapshotLayout",
    "USAGE_EVENTS_LAYOUT",
    "TOKEN_LOG_LAYOUT",
    "DETAIL_LOG_LAYOUT",
    "SUMMARY_SNAPSHOT_LAYOUT",
    "normalize_event_rows",
    "normalize_snapshot_rows",
    "is_marker_cell",
    "parse_currency",
]


@dataclass(frozen=True)
class EventLayout:
    """Header names of a per-event log.

    A field mapped to None is absent from that log and gets its default.
    """
    timestamp: str = "Date"
    kind: Optional[str] = "Kind"
    model: Optional[str] = "Model"
    max_mode: Optional[str] = "Max Mode"
    user: Optional[str] = None
    input_with_cache_write: Optional[str] = "Input (w/ Cache Write)"
    input_without_cache_write: Optional[str] = "Input (w/o Cache Write)"
    cache_read: Optional[str] = "Cache Read"
    output_tokens: Optional[str] = "Output Tokens"
    total_tokens: Optional[str] = "Total Tokens"
    cost: Optional[str] = "Cost"
    cost_default: str = "Included"
    allow_extra_columns: bool = False


# Current combined usage-events export
USAGE_EVENTS_LAYOUT = EventLayout()

# Legacy token-volume log
TOKEN_LOG_LAYOUT = EventLayout(
    user="User",
    output_tokens="Output",
    cost="Cost ($)",
    allow_extra_columns=True,
)

# Legacy kind/detail log: only a scalar token total
DETAIL_LOG_LAYOUT = EventLayout(
    user="User",
    input_with_cache_write=None,
    input_without_cache_write=None,
    cache_read=None,
    output_tokens=None,
    total_tokens="Tokens",
    cost="Cost ($)",
    allow_extra_columns=True,
)


@dataclass(frozen=True)
class SnapshotLayout:
    """Positional column layout of the cumulative snapshot sheet."""
    date: int = 0
    model: int = 1
    cache_read: int = 2
    cache_write: int = 3
    input: int = 4
    output: int = 5
    total: int = 6
    api_cost: int = 7
    cost_to_you: int = 8
    header_rows: int = 1
    markers: Tuple[str, ...] = ("Total",)


SUMMARY_SNAPSHOT_LAYOUT = SnapshotLayout()


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _field(row: Mapping[str, Any], header: Optional[str]) -> Any:
    if header is None:
        return None
    return row.get(header)


def normalize_event_rows(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    layout: EventLayout = USAGE_EVENTS_LAYOUT,
) -> List[EventRecord]:
    """Normalize per-event log rows into EventRecords.

    Args:
        headers: Column headers of the log
        rows: Data rows, positionally aligned with ``headers``
        layout: Which header carries which field

    Returns:
        Parsed records sorted by timestamp (oldest first)
    """
    names = [_cell_text(h) for h in headers]
    records: List[EventRecord] = []
    dropped = 0

    for raw in rows:
        width = len(raw)
        if width < len(names) or (width > len(names) and not layout.allow_extra_columns):
            dropped += 1
            continue
        row = {name: raw[idx] for idx, name in enumerate(names)}

        timestamp = parse_timestamp(_field(row, layout.timestamp))
        if timestamp is None:
            dropped += 1
            continue

        records.append(EventRecord(
            timestamp=timestamp,
            kind=_cell_text(_field(row, layout.kind)),
            model=_cell_text(_field(row, layout.model)),
            max_mode=_cell_text(_field(row, layout.max_mode)),
            user=_cell_text(_field(row, layout.user)),
            input_with_cache_write=parse_int(_field(row, layout.input_with_cache_write)),
            input_without_cache_write=parse_int(_field(row, layout.input_without_cache_write)),
            cache_read=parse_int(_field(row, layout.cache_read)),
            output_tokens=parse_int(_field(row, layout.output_tokens)),
            total_tokens=parse_int(_field(row, layout.total_tokens)),
            cost=_cell_text(_field(row, layout.cost)) or layout.cost_default,
        ))

    if dropped:
        logger.debug("Dropped %d malformed event rows", dropped)
    records.sort(key=lambda r: r.timestamp)
    return records


def is_marker_cell(value: Any, markers: Sequence[str]) -> bool:
    """True when a date cell holds a literal label such as "Total"."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    return any(marker in text for marker in markers)


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def normalize_snapshot_rows(
    rows: Sequence[Sequence[Any]],
    layout: SnapshotLayout = SUMMARY_SNAPSHOT_LAYOUT,
) -> List[SnapshotRecord]:
    """Normalize cumulative snapshot sheet rows into SnapshotRecords.

    The sheet groups rows by date: the first row of a group carries the
    date and following rows may leave it blank. Marker rows ("Total")
    are not data rows and never parse as dates.

    Args:
        rows: All sheet rows, header rows included
        layout: Column positions and marker labels

    Returns:
        Parsed records sorted by (date, model)
    """
    records: List[SnapshotRecord] = []
    current_date: Optional[date] = None
    dropped = 0

    for raw in rows[layout.header_rows:]:
        if not raw or len(raw) < 2:
            continue

        date_cell = _cell(raw, layout.date)
        model = _cell_text(_cell(raw, layout.model))

        if is_marker_cell(date_cell, layout.markers):
            continue

        if _cell_text(date_cell):
            parsed = parse_snapshot_date(date_cell)
            if parsed is None:
                dropped += 1
                continue
            current_date = parsed

        if current_date is None or not model:
            dropped += 1
            continue

        records.append(SnapshotRecord(
            date=current_date,
            model=model,
            cache_read=parse_number(_cell(raw, layout.cache_read)),
            cache_write=parse_number(_cell(raw, layout.cache_write)),
            input=parse_number(_cell(raw, layout.input)),
            output=parse_number(_cell(raw, layout.output)),
            total=parse_number(_cell(raw, layout.total)),
            api_cost=_cell_text(_cell(raw, layout.api_cost)) or "$0",
            cost_to_you=_cell_text(_cell(raw, layout.cost_to_you)) or "$0",
        ))

    if dropped:
        logger.debug("Dropped %d snapshot rows without a model or parseable date", dropped)
    records.sort(key=lambda r: (r.date, r.model))
    return records
