"""
Calendar-day aggregation of usage events.

Provides per-day totals for column charts and the cost summation over
an inclusive UTC date range used by cost reporting.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from ai_usage_recon.core.parsing import is_numeric_cost, parse_currency
from ai_usage_recon.storage.models import EVENT_METRICS, EventRecord


@dataclass
class DailyUsage:
    """Event totals for one calendar day (optionally one model)."""
    event_count: int = 0
    input_with_cache_write: int = 0
    input_without_cache_write: int = 0
    cache_read: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cost: float = 0.0
    kind_counts: Dict[str, int] = field(default_factory=dict)


def aggregate_daily(
    events: Sequence[EventRecord],
    by_model: bool = False,
) -> Dict[Hashable, DailyUsage]:
    """Sum events per UTC day, or per (day, model) when ``by_model`` is set.

    Returns:
        Mapping ordered by key (oldest day first)
    """
    buckets: Dict[Hashable, DailyUsage] = {}
    for event in events:
        key = (event.day, event.model) if by_model else event.day
        usage = buckets.setdefault(key, DailyUsage())
        usage.event_count += 1
        for metric in EVENT_METRICS:
            setattr(usage, metric, getattr(usage, metric) + getattr(event, metric))
        usage.cost += event.cost_amount
        kind = event.kind or "Unknown"
        usage.kind_counts[kind] = usage.kind_counts.get(kind, 0) + 1

    return {key: buckets[key] for key in sorted(buckets)}


@dataclass(frozen=True)
class CostSummary:
    """Cost per model over a date range."""
    start: Optional[date]
    end: Optional[date]
    per_model: List[Tuple[str, float]]
    total: float
    daily_cumulative: List[Tuple[date, float]] = field(default_factory=list)


def _day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def summarize_cost(
    events: Sequence[EventRecord],
    start: Optional[date] = None,
    end: Optional[date] = None,
    include_daily: bool = False,
    today: Optional[date] = None,
) -> CostSummary:
    """Sum event cost per model over an inclusive range of UTC days.

    Only costs written as numbers count; sentinels such as "Included"
    contribute nothing. With only ``start`` given the range ends today;
    with neither bound the whole history is summed.

    Args:
        events: Events to summarize
        start: First UTC day, inclusive
        end: Last UTC day, inclusive
        include_daily: Also build the running daily cumulative
        today: Override for "today" (UTC)

    Returns:
        CostSummary with models sorted by cost, highest first

    Raises:
        ValueError: If end is before start
    """
    if start is not None and end is None:
        end = today or datetime.now(timezone.utc).date()
    if start is not None and end is not None and end < start:
        raise ValueError("end date must not be before start date")

    lower = _day_bounds(start)[0] if start is not None else None
    upper = _day_bounds(end)[1] if end is not None else None

    per_model: Dict[str, float] = {}
    per_day: Dict[date, float] = {}
    for event in events:
        if lower is not None and event.timestamp < lower:
            continue
        if upper is not None and event.timestamp > upper:
            continue
        cost = parse_currency(event.cost) if is_numeric_cost(event.cost) else 0.0
        model = event.model or "Unknown"
        per_model[model] = per_model.get(model, 0.0) + cost
        if include_daily:
            per_day[event.day] = per_day.get(event.day, 0.0) + cost

    daily_cumulative: List[Tuple[date, float]] = []
    if include_daily:
        if start is not None and end is not None:
            days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
        else:
            days = sorted(per_day)
        running = 0.0
        for day in days:
            running += per_day.get(day, 0.0)
            daily_cumulative.append((day, running))

    ranked = sorted(per_model.items(), key=lambda item: item[1], reverse=True)
    return CostSummary(
        start=start,
        end=end,
        per_model=ranked,
        total=sum(per_model.values()),
        daily_cumulative=daily_cumulative,
    )
