"""
Unit tests for merging the legacy token and detail logs.
"""

from datetime import datetime, timedelta, timezone

from ai_usage_recon.core.merger import MergeDefaults, merge_event_sources
from ai_usage_recon.storage.models import EventRecord

BASE = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def token_event(timestamp=BASE, total=500, kind="", max_mode="", model="gpt-5", cost="0.10"):
    return EventRecord(
        timestamp=timestamp,
        kind=kind,
        model=model,
        input_with_cache_write=100,
        input_without_cache_write=150,
        cache_read=200,
        output_tokens=50,
        total_tokens=total,
        cost=cost,
        max_mode=max_mode,
        user="You",
    )


def detail_event(timestamp=BASE, kind="Included", total=0, max_mode="No", model="", cost=""):
    return EventRecord(
        timestamp=timestamp,
        kind=kind,
        model=model,
        total_tokens=total,
        cost=cost,
        max_mode=max_mode,
    )


class TestMergeEventSources:
    """Test timestamp-keyed reconciliation."""

    def test_detail_kind_overlays_token_record(self):
        """Merged record keeps token numbers and takes the detail kind."""
        merged = merge_event_sources(
            [token_event(total=500)],
            [detail_event(kind="Errored (rate limit)", total=999)],
        )

        assert len(merged) == 1
        assert merged[0].total_tokens == 500
        assert merged[0].kind == "Errored (rate limit)"
        assert merged[0].cache_read == 200
        assert merged[0].cost == "0.10"

    def test_detail_max_mode_wins(self):
        merged = merge_event_sources(
            [token_event(max_mode="No")],
            [detail_event(max_mode="Yes")],
        )
        assert merged[0].max_mode == "Yes"

    def test_token_kind_used_when_detail_blank(self):
        merged = merge_event_sources(
            [token_event(kind="On-Demand")],
            [detail_event(kind="", max_mode="")],
        )
        assert merged[0].kind == "On-Demand"
        assert merged[0].max_mode == "No"

    def test_defaults_when_neither_has_kind(self):
        merged = merge_event_sources([token_event()], [detail_event(kind="", max_mode="")])
        assert merged[0].kind == "Included in Pro"

    def test_unmatched_token_kept_unchanged(self):
        token = token_event()
        merged = merge_event_sources([token], [])
        assert merged == [token]

    def test_detail_only_record_is_synthesized(self):
        """Verify a detail record without a token counterpart gets zeroed fields."""
        later = BASE + timedelta(minutes=5)
        merged = merge_event_sources([token_event()], [detail_event(timestamp=later, total=750)])

        assert len(merged) == 2
        synthesized = merged[1]
        assert synthesized.timestamp == later
        assert synthesized.total_tokens == 750
        assert synthesized.input_with_cache_write == 0
        assert synthesized.input_without_cache_write == 0
        assert synthesized.cache_read == 0
        assert synthesized.output_tokens == 0
        assert synthesized.model == "auto"
        assert synthesized.user == "You"
        assert synthesized.cost == "Included"

    def test_custom_defaults(self):
        defaults = MergeDefaults(model="default-model", kind="Included")
        merged = merge_event_sources([], [detail_event(kind="")], defaults)
        assert merged[0].model == "default-model"
        assert merged[0].kind == "Included"

    def test_sub_second_timestamps_stay_distinct(self):
        close = BASE + timedelta(milliseconds=1)
        merged = merge_event_sources([token_event(), token_event(timestamp=close)], [])
        assert len(merged) == 2

    def test_exact_duplicates_collapse_last_wins(self):
        merged = merge_event_sources([token_event(total=1), token_event(total=2)], [])
        assert len(merged) == 1
        assert merged[0].total_tokens == 2

    def test_merge_is_idempotent_on_detail_duplicates(self):
        """Merging a detail list with itself twice equals merging it once."""
        tokens = [token_event()]
        details = [
            detail_event(kind="Errored, No Charge"),
            detail_event(timestamp=BASE + timedelta(hours=1), total=10),
        ]
        once = merge_event_sources(tokens, details)
        twice = merge_event_sources(tokens, details + details)
        assert once == twice

    def test_output_sorted(self):
        later = BASE + timedelta(hours=2)
        earlier = BASE - timedelta(hours=2)
        merged = merge_event_sources(
            [token_event(timestamp=later)],
            [detail_event(timestamp=earlier)],
        )
        assert [r.timestamp for r in merged] == [earlier, later]
