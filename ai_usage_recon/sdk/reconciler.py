"""
Usage reconciler facade.

Runs the full data flow: read exports, normalize, merge, then derive the
cumulative series, latest comparison, trailing-window aggregate and
daily totals. Every report is recomputed from the full input.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Hashable, List, Optional, Sequence

from ..config.loader import ReconConfig, default_config
from ..core.cumulative import CumulativeSeries, track_cumulative
from ..core.daily import DailyUsage, aggregate_daily
from ..core.delta import LatestComparison, latest_comparison
from ..core.merger import merge_event_sources
from ..core.normalizer import (
    DETAIL_LOG_LAYOUT,
    SUMMARY_SNAPSHOT_LAYOUT,
    TOKEN_LOG_LAYOUT,
    USAGE_EVENTS_LAYOUT,
    EventLayout,
    SnapshotLayout,
    normalize_event_rows,
    normalize_snapshot_rows,
)
from ..core.window import WindowAggregate, aggregate_trailing_window
from ..storage.models import EventRecord, SnapshotRecord
from ..storage.readers import read_event_log, read_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageReport:
    """Everything the presentation layer needs for one refresh."""
    events: List[EventRecord]
    snapshots: List[SnapshotRecord]
    cumulative: CumulativeSeries
    latest: Optional[LatestComparison]
    trailing_window: Optional[WindowAggregate]
    daily: Dict[Hashable, DailyUsage]


class UsageReconciler:
    """Entry point for reconciling usage exports.

    Holds configuration only; no state is carried between calls.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """Initialize the reconciler.

        Args:
            config: Reconciliation settings (defaults when omitted)
        """
        self.config = config or default_config()

    def load_events(self, path: str, layout: EventLayout = USAGE_EVENTS_LAYOUT) -> List[EventRecord]:
        """Read and normalize a per-event log."""
        headers, rows = read_event_log(path)
        return normalize_event_rows(headers, rows, layout)

    def load_legacy_events(self, tokens_path: str, details_path: str) -> List[EventRecord]:
        """Read the legacy token and detail logs and merge them."""
        tokens = self.load_events(tokens_path, TOKEN_LOG_LAYOUT)
        details = self.load_events(details_path, DETAIL_LOG_LAYOUT)
        return self.merge_legacy_events(tokens, details)

    def merge_legacy_events(
        self,
        tokens: Sequence[EventRecord],
        details: Sequence[EventRecord],
    ) -> List[EventRecord]:
        merged = merge_event_sources(tokens, details, self.config.merge)
        logger.debug(
            "Merged %d token and %d detail records into %d events",
            len(tokens), len(details), len(merged),
        )
        return merged

    def load_snapshots(
        self,
        path: str,
        layout: SnapshotLayout = SUMMARY_SNAPSHOT_LAYOUT,
    ) -> List[SnapshotRecord]:
        """Read and normalize the cumulative snapshot sheet."""
        layout = replace(layout, markers=self.config.snapshot_markers)
        return normalize_snapshot_rows(read_table(path), layout)

    def build_report(
        self,
        events: Sequence[EventRecord],
        snapshots: Sequence[SnapshotRecord],
    ) -> UsageReport:
        """Derive every engine output from already-normalized records."""
        ordered_events = sorted(events, key=lambda e: e.timestamp)
        ordered_snapshots = sorted(snapshots, key=lambda s: (s.date, s.model))
        return UsageReport(
            events=ordered_events,
            snapshots=ordered_snapshots,
            cumulative=track_cumulative(ordered_snapshots),
            latest=latest_comparison(
                ordered_snapshots,
                model=self.config.summary.default_model,
                mode=self.config.summary.reset_mode,
            ),
            trailing_window=aggregate_trailing_window(
                ordered_events,
                window=self.config.window.duration,
                outcomes=self.config.outcomes,
            ),
            daily=aggregate_daily(ordered_events),
        )
