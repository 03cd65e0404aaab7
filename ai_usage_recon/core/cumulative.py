"""
Reset-aware cumulative tracking.

Snapshot counters grow within a billing cycle and fall back when a new
cycle starts. For stacked charts every date is split into the portion
carried over from the previous date and the portion added on that date.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, List, Sequence, Tuple

from ai_usage_recon.storage.models import (
    CURRENCY_METRICS,
    SNAPSHOT_METRICS,
    SnapshotRecord,
    model_key,
)


@dataclass(frozen=True)
class CumulativePoint:
    """Carried/new decomposition of one cumulative value."""
    carried: float
    new: float
    cumulative: float
    reset: bool = False


@dataclass(frozen=True)
class CumulativeSeries:
    """Per-model, per-metric decompositions aligned to a shared date axis.

    ``series`` is keyed by ``model_key`` so spelling variants of a model
    share one series.
    """
    dates: List[date]
    series: Dict[str, Dict[str, List[CumulativePoint]]]

    @property
    def models(self) -> List[str]:
        return sorted(self.series)

    def has_model(self, model: str) -> bool:
        return model_key(model) in self.series

    def points(self, model: str, metric: str) -> List[CumulativePoint]:
        """Decomposition of one metric for one model.

        Raises:
            KeyError: If the model or metric was not tracked
        """
        return self.series[model_key(model)][metric]


def decompose_series(values: Sequence[float]) -> List[CumulativePoint]:
    """Split a date-ordered cumulative series into carried and new parts.

    A reset is detected where a value is below the previous one and the
    previous one was positive; the reset date carries nothing over.
    """
    points: List[CumulativePoint] = []
    previous_cycle_value = 0.0
    prior = 0.0

    for current in values:
        reset = current < prior and prior > 0
        if reset:
            previous_cycle_value = 0.0
        points.append(CumulativePoint(
            carried=previous_cycle_value,
            new=current - previous_cycle_value,
            cumulative=current,
            reset=reset,
        ))
        previous_cycle_value = current
        prior = current

    return points


def group_snapshot_values(
    snapshots: Sequence[SnapshotRecord],
    metric: str,
) -> Tuple[List[date], Dict[str, Dict[date, float]]]:
    """Group one metric by model and date.

    Models are keyed by ``model_key``. Duplicate (date, model) rows are
    summed.

    Returns:
        Sorted distinct dates and a ``{model: {date: value}}`` mapping
    """
    values: Dict[str, Dict[date, float]] = {}
    for record in snapshots:
        by_date = values.setdefault(model_key(record.model), {})
        by_date[record.date] = by_date.get(record.date, 0.0) + record.metric_value(metric)

    dates = sorted({record.date for record in snapshots})
    return dates, values


def combine_snapshots(records: Sequence[SnapshotRecord]) -> SnapshotRecord:
    """Collapse the rows of one (date, model) group into a single record.

    Metrics are summed the same way ``group_snapshot_values`` sums them.
    A lone row is returned unchanged.
    """
    if not records:
        raise ValueError("no snapshot rows to combine")
    first = records[0]
    if len(records) == 1:
        return first

    totals = {
        metric: sum(record.metric_value(metric) for record in records)
        for metric in SNAPSHOT_METRICS
    }
    for metric in CURRENCY_METRICS:
        totals[metric] = f"${totals[metric]:,.2f}"
    return replace(first, **totals)


def daily_history(snapshots: Sequence[SnapshotRecord], model: str) -> List[SnapshotRecord]:
    """One combined record per date for ``model``, oldest first."""
    wanted = model_key(model)
    by_date: Dict[date, List[SnapshotRecord]] = {}
    for record in snapshots:
        if model_key(record.model) == wanted:
            by_date.setdefault(record.date, []).append(record)
    return [combine_snapshots(by_date[day]) for day in sorted(by_date)]


def track_cumulative(
    snapshots: Sequence[SnapshotRecord],
    metrics: Sequence[str] = SNAPSHOT_METRICS,
) -> CumulativeSeries:
    """Build reset-aware decompositions for every model and metric.

    Each metric and each model is walked independently. A model missing
    on a date counts as 0 for that date, which can flag a reset on the
    date it reappears.

    Args:
        snapshots: Snapshot records in any order
        metrics: Metric names to track

    Returns:
        CumulativeSeries aligned to the sorted set of distinct dates
    """
    ordered = sorted(snapshots, key=lambda r: (r.date, r.model))
    dates = sorted({record.date for record in ordered})
    series: Dict[str, Dict[str, List[CumulativePoint]]] = {}

    for metric in metrics:
        _, values = group_snapshot_values(ordered, metric)
        for model, by_date in values.items():
            column = [by_date.get(day, 0.0) for day in dates]
            series.setdefault(model, {})[metric] = decompose_series(column)

    return CumulativeSeries(dates=dates, series=series)
