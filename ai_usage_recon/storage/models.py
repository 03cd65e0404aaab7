"""
Data models for usage records.

Defines the two canonical record shapes produced by ingestion and
consumed read-only by the reconciliation engine.
"""

from dataclasses import dataclass
from datetime import date, datetime

from ai_usage_recon.core.parsing import parse_currency

EVENT_METRICS = (
    "input_with_cache_write",
    "input_without_cache_write",
    "cache_read",
    "output_tokens",
    "total_tokens",
)

SNAPSHOT_METRICS = (
    "cache_read",
    "cache_write",
    "input",
    "output",
    "total",
    "api_cost",
    "cost_to_you",
)

CURRENCY_METRICS = frozenset({"api_cost", "cost_to_you"})


def model_key(model: str) -> str:
    """Grouping key for a model name; spelling variants like "Auto" fold together."""
    return model.strip().lower()


@dataclass(frozen=True)
class EventRecord:
    """One metering event from the per-event usage logs.

    ``total_tokens`` is copied from the source as-is and is not required
    to equal the sum of the other token fields.
    """
    timestamp: datetime
    kind: str
    model: str
    input_with_cache_write: int = 0
    input_without_cache_write: int = 0
    cache_read: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cost: str = "Included"  # display string, may be a sentinel
    max_mode: str = ""
    user: str = ""

    @property
    def cost_amount(self) -> float:
        """Numeric cost, with "no incremental cost" sentinels worth 0."""
        return parse_currency(self.cost)

    @property
    def day(self) -> date:
        """UTC calendar day of the event."""
        return self.timestamp.date()


@dataclass(frozen=True)
class SnapshotRecord:
    """One (date, model) row of the cumulative usage spreadsheet.

    Metric values are cumulative within a billing cycle and drop back
    when a new cycle starts.
    """
    date: date
    model: str
    cache_read: float = 0.0
    cache_write: float = 0.0
    input: float = 0.0
    output: float = 0.0
    total: float = 0.0
    api_cost: str = "$0"
    cost_to_you: str = "$0"

    @property
    def api_cost_amount(self) -> float:
        return parse_currency(self.api_cost)

    @property
    def cost_to_you_amount(self) -> float:
        return parse_currency(self.cost_to_you)

    def metric_value(self, metric: str) -> float:
        """Numeric value of a snapshot metric, parsing currency columns."""
        if metric not in SNAPSHOT_METRICS:
            raise ValueError(f"Unknown snapshot metric: {metric}")
        value = getattr(self, metric)
        if metric in CURRENCY_METRICS:
            return parse_currency(value)
        return float(value)
