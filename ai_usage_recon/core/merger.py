"""
Source merging for the legacy per-event logs.

The token-volume log and the kind/detail log capture the same activity
through different paths. They are joined on the exact event timestamp.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Sequence

from ai_usage_recon.storage.models import EventRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeDefaults:
    """Field values used when neither source provides one."""
    model: str = "auto"
    kind: str = "Included in Pro"
    max_mode: str = "No"
    user: str = "You"
    cost: str = "Included"


def merge_event_sources(
    token_records: Sequence[EventRecord],
    detail_records: Sequence[EventRecord],
    defaults: MergeDefaults = MergeDefaults(),
) -> List[EventRecord]:
    """Reconcile the token-volume and detail logs into one event list.

    Rules:
    - Detail records overlay ``kind`` and ``max_mode`` onto the token
      record sharing their timestamp; every numeric field and the cost
      come from the token record.
    - Detail records with no token counterpart become synthesized records
      with zeroed token sub-fields and the detail total as ``total_tokens``.
    - Records sharing an exact timestamp collapse into one; the last one
      seen wins. Sub-second differences keep records distinct.

    Args:
        token_records: Records from the token-volume log
        detail_records: Records from the kind/detail log

    Returns:
        Reconciled records sorted by timestamp (oldest first)
    """
    details: Dict[datetime, EventRecord] = {}
    for detail in detail_records:
        details[detail.timestamp] = detail

    merged: Dict[datetime, EventRecord] = {}
    for token in token_records:
        detail = details.get(token.timestamp)
        if detail is None:
            merged[token.timestamp] = token
            continue
        merged[token.timestamp] = replace(
            token,
            kind=detail.kind or token.kind or defaults.kind,
            max_mode=detail.max_mode or token.max_mode or defaults.max_mode,
        )

    synthesized = 0
    for timestamp, detail in details.items():
        if timestamp in merged:
            continue
        merged[timestamp] = EventRecord(
            timestamp=timestamp,
            kind=detail.kind or defaults.kind,
            model=detail.model or defaults.model,
            max_mode=detail.max_mode or defaults.max_mode,
            user=detail.user or defaults.user,
            input_with_cache_write=0,
            input_without_cache_write=0,
            cache_read=0,
            output_tokens=0,
            total_tokens=detail.total_tokens,
            cost=detail.cost or defaults.cost,
        )
        synthesized += 1

    if synthesized:
        logger.debug("Synthesized %d events present only in the detail log", synthesized)
    return sorted(merged.values(), key=lambda r: r.timestamp)
