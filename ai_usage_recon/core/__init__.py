"""
Core modules for AI Usage Recon.

This package contains the reconciliation engine: record normalization,
source merging, reset-aware cumulative tracking, day-over-day deltas
and trailing-window aggregation.
"""
