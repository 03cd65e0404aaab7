"""
Trailing-window aggregation of usage events.

The window ends at the most recent ingested event, not at the current
time, so the "last day" moves with the data.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence, Tuple

from ai_usage_recon.storage.models import EVENT_METRICS, EventRecord

DEFAULT_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class OutcomeRules:
    """How event kinds map to successful and errored outcomes."""
    successful_kinds: Tuple[str, ...] = ("Included",)
    errored_marker: str = "Errored"

    def is_successful(self, kind: str) -> bool:
        return kind in self.successful_kinds

    def is_errored(self, kind: str) -> bool:
        return self.errored_marker.lower() in kind.lower()


@dataclass
class WindowAggregate:
    """Metric sums and outcome counts over a trailing window."""
    window_start: datetime
    window_end: datetime
    event_count: int = 0
    successful_count: int = 0
    errored_count: int = 0
    input_with_cache_write: int = 0
    input_without_cache_write: int = 0
    cache_read: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    max_total_tokens: int = 0
    cost: float = 0.0
    kind_counts: Dict[str, int] = field(default_factory=dict)

    def add(self, event: EventRecord, outcomes: OutcomeRules) -> None:
        """Fold one event into the aggregate."""
        self.event_count += 1
        for metric in EVENT_METRICS:
            setattr(self, metric, getattr(self, metric) + getattr(event, metric))
        self.max_total_tokens = max(self.max_total_tokens, event.total_tokens)
        self.cost += event.cost_amount

        kind = event.kind or "Unknown"
        self.kind_counts[kind] = self.kind_counts.get(kind, 0) + 1
        if outcomes.is_successful(event.kind):
            self.successful_count += 1
        elif outcomes.is_errored(event.kind):
            self.errored_count += 1


def aggregate_trailing_window(
    events: Sequence[EventRecord],
    window: timedelta = DEFAULT_WINDOW,
    outcomes: OutcomeRules = OutcomeRules(),
) -> Optional[WindowAggregate]:
    """Aggregate every event within ``window`` of the latest event.

    Both window bounds are inclusive. Events with a sentinel cost count
    toward ``event_count`` and add 0 to ``cost``.

    Args:
        events: Reconciled events in any order
        window: Lookback duration
        outcomes: Kind classification rules

    Returns:
        WindowAggregate, or None when there are no events

    Raises:
        ValueError: If window is not positive
    """
    if window <= timedelta(0):
        raise ValueError("window must be positive")
    if not events:
        return None

    latest = max(event.timestamp for event in events)
    window_start = latest - window
    aggregate = WindowAggregate(window_start=window_start, window_end=latest)

    for event in sorted(events, key=lambda e: e.timestamp):
        if window_start <= event.timestamp <= latest:
            aggregate.add(event, outcomes)

    return aggregate
