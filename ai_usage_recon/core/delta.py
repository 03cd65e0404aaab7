"""
Day-over-day deltas with billing-cycle reset suppression.

Compares a snapshot with the previous one for the same model. A drop
in a cumulative counter means a new cycle started, so it is reported as
no change rather than a negative delta.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence

from ai_usage_recon.core.cumulative import daily_history
from ai_usage_recon.storage.models import SNAPSHOT_METRICS, SnapshotRecord


class ResetMode(Enum):
    """How a detected reset suppresses deltas."""
    PER_METRIC = "per_metric"  # each metric checked on its own
    ANY_METRIC = "any_metric"  # one decreased metric zeroes them all


class DeltaDirection(Enum):
    """Display direction of a delta indicator."""
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"  # compared, no change
    ABSENT = "absent"    # nothing to compare against


@dataclass(frozen=True)
class SnapshotDelta:
    """Per-metric deltas; None means no previous record."""
    cache_read: Optional[float] = None
    cache_write: Optional[float] = None
    input: Optional[float] = None
    output: Optional[float] = None
    total: Optional[float] = None
    api_cost: Optional[float] = None
    cost_to_you: Optional[float] = None

    def get(self, metric: str) -> Optional[float]:
        if metric not in SNAPSHOT_METRICS:
            raise ValueError(f"Unknown snapshot metric: {metric}")
        return getattr(self, metric)

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {metric: getattr(self, metric) for metric in SNAPSHOT_METRICS}


@dataclass(frozen=True)
class LatestComparison:
    """Most recent snapshot of a model against the one before it."""
    latest: SnapshotRecord
    previous: Optional[SnapshotRecord]
    delta: SnapshotDelta


def _is_reset(current: float, previous: float) -> bool:
    return current < previous and previous > 0


def difference_with_reset(current: float, previous: Optional[float]) -> Optional[float]:
    """Delta between two cumulative values.

    Returns None without a previous value and 0 when the counter dropped
    from a positive value.
    """
    if previous is None:
        return None
    if _is_reset(current, previous):
        return 0
    return current - previous


def snapshot_delta(
    current: SnapshotRecord,
    previous: Optional[SnapshotRecord],
    mode: ResetMode = ResetMode.PER_METRIC,
) -> SnapshotDelta:
    """Compute per-metric deltas between two snapshot records.

    Currency metrics are parsed to numbers before comparing.

    Args:
        current: The newer record
        previous: The record before it for the same model, or None
        mode: Reset suppression strategy

    Returns:
        SnapshotDelta with every metric None when there is no previous record
    """
    if previous is None:
        return SnapshotDelta()

    pairs = {
        metric: (current.metric_value(metric), previous.metric_value(metric))
        for metric in SNAPSHOT_METRICS
    }

    if mode == ResetMode.ANY_METRIC:
        if any(_is_reset(cur, prev) for cur, prev in pairs.values()):
            return SnapshotDelta(**{metric: 0 for metric in SNAPSHOT_METRICS})
        return SnapshotDelta(**{metric: cur - prev for metric, (cur, prev) in pairs.items()})

    return SnapshotDelta(**{
        metric: difference_with_reset(cur, prev) for metric, (cur, prev) in pairs.items()
    })


def previous_snapshot(
    records: Sequence[SnapshotRecord],
    current: SnapshotRecord,
) -> Optional[SnapshotRecord]:
    """Find the record for the same model on the nearest earlier date.

    Rows sharing that date are combined into one record.
    """
    earlier = [r for r in daily_history(records, current.model) if r.date < current.date]
    return earlier[-1] if earlier else None


def latest_comparison(
    records: Sequence[SnapshotRecord],
    model: str = "auto",
    mode: ResetMode = ResetMode.PER_METRIC,
) -> Optional[LatestComparison]:
    """Compare the latest snapshot of ``model`` with the one before it.

    Model names match case-insensitively, and rows of the model sharing a
    date are combined before comparing, so the previous record is always
    from an earlier date.

    Returns:
        LatestComparison, or None if the model has no records
    """
    history = daily_history(records, model)
    if not history:
        return None
    latest = history[-1]
    previous = history[-2] if len(history) > 1 else None
    return LatestComparison(
        latest=latest,
        previous=previous,
        delta=snapshot_delta(latest, previous, mode),
    )


def delta_direction(value: Optional[float]) -> DeltaDirection:
    if value is None:
        return DeltaDirection.ABSENT
    if value > 0:
        return DeltaDirection.UP
    if value < 0:
        return DeltaDirection.DOWN
    return DeltaDirection.NEUTRAL


def format_difference(value: Optional[float], decimals: int = 0) -> str:
    """Format a delta for display: "-" when absent, "±0" when unchanged."""
    if value is None:
        return "-"
    if value == 0:
        return "±0"
    sign = "+" if value > 0 else "-"
    return f"{sign}{abs(value):,.{decimals}f}"
